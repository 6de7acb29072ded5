"""Artifact and deployment file parsers for governance-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import function_signature_to_4byte_selector

from .exceptions import ArtifactNotFoundError, ConfigurationError
from .types import ComponentState, DeploymentRecord


def find_artifact(artifacts_dir: Union[Path, str], contract_name: str) -> Path:
    """
    Locate the compiled artifact for a contract.

    Assumption: artifacts follow the hardhat layout
    artifacts/<sourceName>/<ContractName>.json, next to a .dbg.json file.

    Args:
        artifacts_dir: Root of the compiler artifacts
        contract_name: Contract name (e.g. "GovernanceToken")

    Returns:
        Path to the artifact JSON file

    Raises:
        ArtifactNotFoundError: If no artifact exists for the contract
    """
    root = Path(artifacts_dir)
    matches = sorted(
        p for p in root.rglob(f"{contract_name}.json")
        if "build-info" not in p.parts
    )
    if not matches:
        raise ArtifactNotFoundError(
            f"Artifact for contract '{contract_name}' not found under {root}. "
            "Compile the contracts first."
        )
    return matches[0]


def parse_build_info(file_path: Path) -> Dict[str, Any]:
    """
    Parse a hardhat build-info file.

    Args:
        file_path: Path to artifacts/build-info/<hash>.json

    Returns:
        Dictionary with solc_long_version and input (standard JSON input)
    """
    with open(file_path) as f:
        data = json.load(f)

    return {
        "solc_long_version": data["solcLongVersion"],
        "input": data["input"],
    }


def parse_hardhat_artifact(file_path: Path) -> Dict[str, Any]:
    """
    Parse a hardhat compiler artifact.

    Args:
        file_path: Path to <ContractName>.json artifact

    Returns:
        Dictionary with canonical field names:
        - Required: contract_name, source_name, abi, bytecode
        - Optional: build_info (parsed from the linked build-info file)

    Raises:
        ConfigurationError: If the artifact has no deployable bytecode
    """
    with open(file_path) as f:
        data = json.load(f)

    bytecode = data.get("bytecode", "")
    if not bytecode or bytecode == "0x":
        raise ConfigurationError(
            f"Artifact has no deployable bytecode (abstract contract or interface?): {file_path}"
        )

    result: Dict[str, Any] = {
        "contract_name": data["contractName"],
        "source_name": data.get("sourceName"),
        "abi": data["abi"],
        "bytecode": bytecode,
    }

    # The .dbg.json file points at the build-info holding compiler input
    dbg_path = file_path.with_name(f"{file_path.stem}.dbg.json")
    if dbg_path.exists():
        with open(dbg_path) as f:
            dbg = json.load(f)
        build_info_path = (dbg_path.parent / dbg["buildInfo"]).resolve()
        if build_info_path.exists():
            result["build_info"] = parse_build_info(build_info_path)

    return result


def load_artifact(artifacts_dir: Union[Path, str], contract_name: str) -> Dict[str, Any]:
    """Find and parse the artifact for a contract."""
    return parse_hardhat_artifact(find_artifact(artifacts_dir, contract_name))


def _abi_type(param: Dict[str, Any]) -> str:
    # Tuples are spelled out from their components, keeping any array suffix
    param_type = param["type"]
    if param_type.startswith("tuple"):
        inner = ",".join(_abi_type(c) for c in param.get("components", []))
        return f"({inner}){param_type[len('tuple'):]}"
    return param_type


def constructor_types(abi: List[Dict[str, Any]]) -> List[str]:
    """
    Get the constructor parameter types from an ABI.

    Args:
        abi: Contract ABI

    Returns:
        List of canonical ABI type strings (empty when there is no constructor)
    """
    for item in abi:
        if item.get("type") == "constructor":
            return [_abi_type(p) for p in item.get("inputs", [])]
    return []


def encode_constructor_args(abi: List[Dict[str, Any]], args: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments.

    Args:
        abi: Contract ABI
        args: Resolved constructor arguments

    Returns:
        Hex string without 0x prefix (empty for no arguments)

    Raises:
        ConfigurationError: If the argument count does not match the constructor
    """
    types = constructor_types(abi)
    if len(types) != len(args):
        raise ConfigurationError(
            f"Constructor expects {len(types)} arguments ({', '.join(types)}), got {len(args)}"
        )
    if not types:
        return ""
    try:
        return encode(types, list(args)).hex()
    except (EncodingError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Cannot ABI-encode constructor arguments {list(args)}: {e}") from e


def encode_function_call(abi: List[Dict[str, Any]], name: str, args: Sequence[Any]) -> str:
    """
    Build calldata for a function on the contract.

    Overloads are disambiguated by argument count.

    Args:
        abi: Contract ABI
        name: Function name (e.g. "delegate")
        args: Resolved arguments

    Returns:
        0x-prefixed calldata

    Raises:
        ConfigurationError: If no function with that name and arity exists
    """
    candidates = [
        item for item in abi
        if item.get("type") == "function"
        and item.get("name") == name
        and len(item.get("inputs", [])) == len(args)
    ]
    if not candidates:
        raise ConfigurationError(
            f"Function '{name}' with {len(args)} arguments not found in ABI"
        )

    types = [_abi_type(p) for p in candidates[0].get("inputs", [])]
    selector = function_signature_to_4byte_selector(f"{name}({','.join(types)})")
    try:
        encoded_args = encode(types, list(args)) if types else b""
    except (EncodingError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Cannot ABI-encode arguments for '{name}': {e}") from e
    return "0x" + (selector + encoded_args).hex()


def parse_hardhat_deployment(file_path: Path) -> DeploymentRecord:
    """
    Parse a deployment file previously written by DeploymentStore.

    The layout follows hardhat-deploy (address, abi, args, transactionHash,
    receipt.blockNumber) plus orchestration flags.

    Args:
        file_path: Path to deployments/<network>/<Component>.json

    Returns:
        DeploymentRecord reconstructed from the file

    Raises:
        ConfigurationError: If the file is not valid JSON or its fields have
            the wrong shape
    """
    try:
        with open(file_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Saved deployment is not valid JSON: {file_path}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Saved deployment must be a JSON object: {file_path}")

    try:
        block_number: Optional[int] = None
        if data.get("receipt") is not None:
            block_number = data["receipt"].get("blockNumber")
        elif "blockNumber" in data:
            block_number = data["blockNumber"]

        return DeploymentRecord(
            component_name=data.get("component", file_path.stem),
            address=data.get("address"),
            confirmations_observed=data.get("confirmations", 0),
            verified=data.get("verified", False),
            bootstrap_completed=data.get("bootstrapCompleted", False),
            transaction_hash=data.get("transactionHash"),
            block_number=block_number,
            constructor_args=list(data.get("args") or []),
            contract_name=data.get("contractName"),
            state=ComponentState(data.get("state", ComponentState.DEPLOYED.value)),
            error=data.get("error"),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed saved deployment {file_path}: {e}") from e
