"""Deployment executor: submits a component and waits for confirmation depth."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
from eth_utils import to_checksum_address

from .constants import DEFAULT_POLL_INTERVAL
from .exceptions import DeploymentError, RpcError
from .parsers import encode_constructor_args, load_artifact
from .rpc import JsonRpcClient
from .types import ComponentSpec, ComponentState, DeploymentRecord, NetworkProfile

logger = structlog.get_logger()


def receipt_succeeded(receipt: Dict[str, Any]) -> bool:
    """Receipts without a status field predate Byzantium and count as success."""
    status = receipt.get("status")
    if status is None:
        return True
    return int(status, 16) == 1


class ArtifactCache:
    """Loads compiled artifacts once per run."""

    def __init__(self, artifacts_dir: Union[Path, str]):
        self.artifacts_dir = Path(artifacts_dir)
        self._artifacts: Dict[str, Dict[str, Any]] = {}

    def get(self, contract_name: str) -> Dict[str, Any]:
        if contract_name not in self._artifacts:
            self._artifacts[contract_name] = load_artifact(self.artifacts_dir, contract_name)
        return self._artifacts[contract_name]


class DeploymentExecutor:
    """
    Submits deployment transactions and returns records once final.

    Not idempotent: every call to deploy() creates a new contract instance.
    """

    def __init__(
        self,
        client: JsonRpcClient,
        artifacts: ArtifactCache,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.client = client
        self.artifacts = artifacts
        self.poll_interval = poll_interval

    def deploy(self, spec: ComponentSpec, profile: NetworkProfile) -> DeploymentRecord:
        """
        Deploy a component and wait for the profile's confirmation depth.

        Args:
            spec: Resolved component specification
            profile: Target network profile

        Returns:
            DeploymentRecord with confirmations_observed equal to
            profile.required_confirmations and both step flags unset

        Raises:
            ConfigurationError: If the artifact is missing or the arguments
                do not fit the constructor
            DeploymentError: If the transaction is rejected, reverts or
                leaves no code at the new address
        """
        artifact = self.artifacts.get(spec.contract_name)
        data = artifact["bytecode"] + encode_constructor_args(
            artifact["abi"], spec.constructor_args
        )

        logger.info(
            "deploying_component",
            component=spec.name,
            network=profile.network_id,
            confirmations=profile.required_confirmations,
        )

        try:
            tx_hash = self.client.send_transaction(
                {"from": spec.deployer_identity, "data": data}
            )
        except RpcError as e:
            raise DeploymentError(spec.name, f"transaction rejected: {e}") from e

        logger.info("deployment_submitted", component=spec.name, tx_hash=tx_hash)

        try:
            receipt = self.client.await_confirmations(
                tx_hash,
                profile.required_confirmations,
                self.poll_interval,
                instant=profile.instant_finality,
            )
        except RpcError as e:
            raise DeploymentError(spec.name, f"confirmation wait failed: {e}") from e

        if not receipt_succeeded(receipt):
            raise DeploymentError(spec.name, f"transaction {tx_hash} reverted")

        address = receipt.get("contractAddress")
        if not address:
            raise DeploymentError(spec.name, f"receipt for {tx_hash} has no contract address")
        address = to_checksum_address(address)

        try:
            code = self.client.get_code(address)
        except RpcError as e:
            raise DeploymentError(spec.name, f"cannot read code at {address}: {e}") from e
        if not code or code == "0x":
            raise DeploymentError(spec.name, f"no contract code at {address}")

        block_number: Optional[int] = None
        if receipt.get("blockNumber") is not None:
            block_number = int(receipt["blockNumber"], 16)

        logger.info("component_deployed", component=spec.name, address=address)

        return DeploymentRecord(
            component_name=spec.name,
            address=address,
            confirmations_observed=profile.required_confirmations,
            verified=False,
            bootstrap_completed=False,
            transaction_hash=tx_hash,
            block_number=block_number,
            constructor_args=list(spec.constructor_args),
            contract_name=spec.contract_name,
            state=ComponentState.DEPLOYED,
        )
