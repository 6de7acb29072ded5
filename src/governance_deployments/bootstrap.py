"""Post-deploy bootstrap actions (e.g. initial self-delegation)."""

from typing import Any, Sequence

import structlog

from .constants import DEFAULT_POLL_INTERVAL
from .exceptions import BootstrapError, RpcError
from .executor import ArtifactCache, receipt_succeeded
from .parsers import encode_function_call
from .rpc import JsonRpcClient
from .types import ComponentSpec, DeploymentRecord

logger = structlog.get_logger()


class BootstrapRunner:
    """Invokes a named post-deploy call and confirms it before marking completion."""

    def __init__(
        self,
        client: JsonRpcClient,
        artifacts: ArtifactCache,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.client = client
        self.artifacts = artifacts
        self.poll_interval = poll_interval

    def run_bootstrap(
        self,
        record: DeploymentRecord,
        spec: ComponentSpec,
        action_name: str,
        args: Sequence[Any],
    ) -> DeploymentRecord:
        """
        Run a bootstrap action against a deployed component, at most once.

        The call is awaited and its receipt status checked; bootstrap_completed
        is only set after observed success.

        Args:
            record: Deployment record (mutated in place)
            spec: Component specification (supplies deployer and artifact)
            action_name: Function to call on the component (e.g. "delegate")
            args: Resolved call arguments

        Returns:
            The record with bootstrap_completed set

        Raises:
            ConfigurationError: If the function does not exist in the ABI
            BootstrapError: If the call is rejected or reverts
        """
        if record.bootstrap_completed:
            logger.info("bootstrap_already_completed", component=spec.name, action=action_name)
            return record

        if record.address is None:
            raise BootstrapError(spec.name, action_name, "component has no deployed address")

        artifact = self.artifacts.get(spec.contract_name)
        data = encode_function_call(artifact["abi"], action_name, args)

        logger.info(
            "bootstrap_running",
            component=spec.name,
            action=action_name,
            args=[str(a) for a in args],
        )

        try:
            tx_hash = self.client.send_transaction(
                {"from": spec.deployer_identity, "to": record.address, "data": data}
            )
            receipt = self.client.await_confirmations(tx_hash, 1, self.poll_interval)
        except RpcError as e:
            raise BootstrapError(spec.name, action_name, str(e)) from e

        if not receipt_succeeded(receipt):
            raise BootstrapError(spec.name, action_name, f"transaction {tx_hash} reverted")

        record.bootstrap_completed = True
        logger.info("bootstrap_completed", component=spec.name, action=action_name, tx_hash=tx_hash)
        return record
