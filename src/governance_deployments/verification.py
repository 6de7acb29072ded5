"""Source verification submission for deployed components."""

import json
from typing import Any, Dict, Optional, Set

import requests
import structlog

from .constants import REQUEST_TIMEOUT
from .exceptions import VerificationFailure
from .executor import ArtifactCache
from .parsers import encode_constructor_args
from .types import ComponentSpec, DeploymentRecord, NetworkProfile, VerificationRequest

logger = structlog.get_logger()

ALREADY_VERIFIED_MARKERS = ("already verified",)


class EtherscanClient:
    """Client for an Etherscan-compatible verifysourcecode endpoint."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        chain_id: Optional[int] = None,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.chain_id = chain_id
        self._session = session or requests.Session()
        self._timeout = timeout

    def submit_source(self, request: VerificationRequest, artifact: Dict[str, Any]) -> bool:
        """
        Submit a deployed contract's source for verification.

        Args:
            request: Address, constructor arguments and contract name
            artifact: Parsed artifact including build_info

        Returns:
            True if the service accepted the submission, False if it declined

        Raises:
            VerificationFailure: If the contract is already verified, the
                service is unreachable, or the artifact lacks compiler input
        """
        build_info = artifact.get("build_info")
        if build_info is None:
            raise VerificationFailure(
                f"No build-info available for {request.contract_name}; cannot submit source"
            )

        payload = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": request.address,
            "sourceCode": json.dumps(build_info["input"]),
            "codeformat": "solidity-standard-json-input",
            "contractname": f"{artifact['source_name']}:{artifact['contract_name']}",
            "compilerversion": f"v{build_info['solc_long_version']}",
            # Field name spelling is the service's own
            "constructorArguements": encode_constructor_args(
                artifact["abi"], request.constructor_args
            ),
        }
        params = {"chainid": self.chain_id} if self.chain_id is not None else None

        try:
            response = self._session.post(
                self.api_url, data=payload, params=params, timeout=self._timeout
            )
        except requests.RequestException as e:
            raise VerificationFailure(f"Verification service unreachable: {e}") from e

        if response.status_code != 200:
            raise VerificationFailure(
                f"Verification request failed with status {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise VerificationFailure("Verification service returned invalid JSON") from e

        message = str(result.get("result", ""))
        if any(marker in message.lower() for marker in ALREADY_VERIFIED_MARKERS):
            raise VerificationFailure(f"{request.address} is already verified")

        return str(result.get("status")) == "1"


class VerificationSubmitter:
    """
    Optionally submits deployed components for public source verification.

    Verification is cosmetic: failures are logged and never abort a run.
    """

    def __init__(self, client: Optional[EtherscanClient], artifacts: ArtifactCache):
        self.client = client
        self.artifacts = artifacts
        self._submitted: Set[str] = set()

    def verify(
        self,
        record: DeploymentRecord,
        spec: ComponentSpec,
        profile: NetworkProfile,
    ) -> DeploymentRecord:
        """
        Submit the record's contract for verification when enabled.

        Args:
            record: Deployment record (mutated in place)
            spec: Component specification that produced the record
            profile: Target network profile

        Returns:
            The record, with verified set if the service accepted it
        """
        if not profile.verification_enabled or self.client is None:
            logger.debug("verification_skipped", component=spec.name, network=profile.network_id)
            return record

        if record.verified or record.address is None or record.address in self._submitted:
            return record

        request = VerificationRequest(
            address=record.address,
            constructor_args=spec.constructor_args,
            contract_name=spec.contract_name,
        )
        self._submitted.add(record.address)

        logger.info("verification_submitting", component=spec.name, address=record.address)
        try:
            accepted = self.client.submit_source(request, self.artifacts.get(spec.contract_name))
        except VerificationFailure as e:
            logger.warning("verification_failed", component=spec.name, error=str(e))
            return record

        if accepted:
            record.verified = True
            logger.info("verification_accepted", component=spec.name, address=record.address)
        else:
            logger.warning("verification_rejected", component=spec.name, address=record.address)
        return record
