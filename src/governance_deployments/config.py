"""Run configuration for governance-deployments library."""

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .constants import (
    DEFAULT_LOCAL_RPC_URL,
    DEFAULT_POLL_INTERVAL,
    DEVELOPMENT_CHAINS,
    MIN_DELAY,
    NETWORK_CONFIG,
)
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class RunConfig:
    """Everything a run needs, passed explicitly into the orchestrator."""

    network: str
    rpc_url: str
    deployer: Optional[str] = None  # Defaults to the node's first account
    verification_api_key: Optional[str] = None
    artifacts_dir: str = "artifacts"
    deployments_dir: str = "deployments"
    profiles: Optional[Dict[str, Dict[str, Any]]] = None  # Overrides NETWORK_CONFIG
    poll_interval: float = DEFAULT_POLL_INTERVAL
    min_delay: int = MIN_DELAY

    def with_overrides(self, **overrides: Any) -> "RunConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, network: str, **overrides: Any) -> "RunConfig":
        """
        Build a RunConfig from environment variables.

        This is the only place the environment is consulted.

        Environment:
            <NETWORK>_RPC_URL or RPC_URL: JSON-RPC endpoint
                (development chains fall back to http://127.0.0.1:8545)
            DEPLOYER_ADDRESS: unlocked deployer account
            ETHERSCAN_API_KEY: explorer verification credential

        Args:
            network: Target network name
            **overrides: Explicit values taking precedence over the environment

        Returns:
            RunConfig instance

        Raises:
            ConfigurationError: If no RPC URL can be determined
        """
        profile_table = overrides.get("profiles") or NETWORK_CONFIG
        rpc_env = profile_table.get(network, {}).get(
            "default_rpc_env", f"{network.upper()}_RPC_URL"
        )

        rpc_url = overrides.pop("rpc_url", None)
        if rpc_url is None:
            rpc_url = os.environ.get(rpc_env) or os.environ.get("RPC_URL")
        if rpc_url is None and network in DEVELOPMENT_CHAINS:
            rpc_url = DEFAULT_LOCAL_RPC_URL
        if rpc_url is None:
            raise ConfigurationError(
                f"RPC URL required for network '{network}': set ${rpc_env} or $RPC_URL, "
                "or pass rpc_url"
            )

        config = cls(
            network=network,
            rpc_url=rpc_url,
            deployer=os.environ.get("DEPLOYER_ADDRESS"),
            verification_api_key=os.environ.get("ETHERSCAN_API_KEY"),
        )
        return config.with_overrides(**overrides)
