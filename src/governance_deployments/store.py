"""Deployment output persistence for governance-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from .parsers import parse_hardhat_deployment
from .types import DeploymentRecord, RunResult

SUMMARY_FILENAME = "summary.json"

logger = structlog.get_logger()


def get_default_deployments_dir() -> Path:
    """
    Get default deployments directory.

    Returns:
        Path to ./deployments
    """
    return Path.cwd() / "deployments"


class DeploymentStore:
    """
    Writes run output in the hardhat-deploy layout.

    deployments/<network>/<Component>.json per record and
    deployments/<network>/summary.json for the ordered run result.
    """

    def __init__(self, root: Optional[Union[Path, str]] = None):
        if root is None:
            root = get_default_deployments_dir()
        self.root = Path(root).absolute()

    def network_dir(self, network: str) -> Path:
        return self.root / network

    def record_path(self, network: str, component_name: str) -> Path:
        return self.network_dir(network) / f"{component_name}.json"

    def summary_path(self, network: str) -> Path:
        return self.network_dir(network) / SUMMARY_FILENAME

    def save_record(
        self,
        network: str,
        record: DeploymentRecord,
        abi: Optional[List[Dict[str, Any]]] = None,
    ) -> Path:
        """
        Save a single record, overwriting the previous state of that component.

        Creates parent directories if they don't exist.
        """
        path = self.record_path(network, record.component_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        previous: Dict[str, Any] = {}
        if path.exists():
            try:
                with open(path) as f:
                    previous = json.load(f)
            except json.JSONDecodeError:
                logger.warning("unreadable_record_overwritten", path=str(path))
            if not isinstance(previous, dict):
                previous = {}

        # A new address means a new deployment of the same component
        num_deployments = previous.get("numDeployments", 0)
        if record.address and previous.get("address") != record.address:
            num_deployments += 1

        data: Dict[str, Any] = {
            "component": record.component_name,
            "contractName": record.contract_name or record.component_name,
            "address": record.address,
            "abi": abi if abi is not None else previous.get("abi", []),
            "transactionHash": record.transaction_hash,
            "receipt": {"blockNumber": record.block_number},
            "args": record.constructor_args,
            "numDeployments": num_deployments,
            "confirmations": record.confirmations_observed,
            "verified": record.verified,
            "bootstrapCompleted": record.bootstrap_completed,
            "state": record.state.value,
            "error": record.error,
        }

        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        return path

    def save_summary(self, result: RunResult) -> Path:
        """Save the ordered run result."""
        path = self.summary_path(result.network_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        return path

    def load(self, network: str) -> Dict[str, DeploymentRecord]:
        """
        Load previously saved records for a network.

        Returns:
            Dictionary mapping component name -> record
            Empty dict if nothing was saved for the network
        """
        network_dir = self.network_dir(network)
        if not network_dir.exists():
            return {}

        records: Dict[str, DeploymentRecord] = {}
        for path in sorted(network_dir.glob("*.json")):
            if path.name == SUMMARY_FILENAME:
                continue
            record = parse_hardhat_deployment(path)
            records[record.component_name] = record
        return records
