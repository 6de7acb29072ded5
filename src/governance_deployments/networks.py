"""Network profile resolution for governance-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import DEVELOPMENT_CHAINS, NETWORK_CONFIG
from .exceptions import ConfigurationError
from .types import NetworkProfile


def load_profiles(path: Union[Path, str]) -> Dict[str, Dict[str, Any]]:
    """
    Load a JSON profile table and merge it over the built-in NETWORK_CONFIG.

    Args:
        path: Path to a JSON file mapping network name -> profile entry

    Returns:
        Merged profile table

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Network profile file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Network profile file is not valid JSON: {path}") from e

    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        raise ConfigurationError(
            f"Network profile file must map network names to objects: {path}"
        )

    merged = {name: dict(entry) for name, entry in NETWORK_CONFIG.items()}
    for name, entry in data.items():
        merged.setdefault(name, {}).update(entry)
    return merged


def resolve(
    network_id: str,
    profiles: Optional[Dict[str, Dict[str, Any]]] = None,
    verification_credential: Optional[str] = None,
) -> NetworkProfile:
    """
    Resolve the operational parameters for a network.

    Pure lookup: no I/O and no defaulting for unknown networks. Verification
    is enabled only when the network offers it, it is not a development
    chain, and a credential is present.

    Args:
        network_id: Network name (e.g. "sepolia")
        profiles: Profile table (defaults to NETWORK_CONFIG)
        verification_credential: Explorer API key, if any

    Returns:
        NetworkProfile for the network

    Raises:
        ConfigurationError: If the network has no registered profile
    """
    table = NETWORK_CONFIG if profiles is None else profiles
    if network_id not in table:
        raise ConfigurationError(
            f"Network configuration for '{network_id}' is not defined "
            f"(known networks: {', '.join(sorted(table))})"
        )

    entry = table[network_id]
    development = network_id in DEVELOPMENT_CHAINS

    return NetworkProfile(
        network_id=network_id,
        required_confirmations=entry.get("block_confirmations", 1),
        verification_enabled=(
            bool(entry.get("verify", False))
            and not development
            and bool(verification_credential)
        ),
        chain_id=entry.get("chain_id"),
        explorer_api_url=entry.get("explorer_api_url"),
        instant_finality=bool(entry.get("instant_finality", development)),
    )
