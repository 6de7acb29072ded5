"""Shared pytest fixtures for governance-deployments tests."""

import itertools
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from governance_deployments.config import RunConfig
from governance_deployments.exceptions import RpcError

# Hardhat's first default account
DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

TOKEN_BYTECODE = "0x60806040aa01"
TIMELOCK_BYTECODE = "0x60806040bb01"
FACTORY_BYTECODE = "0x60806040cc01"

DELEGATE_SELECTOR = "0x5c19a95c"  # delegate(address)


class FakeChain:
    """In-memory stand-in for JsonRpcClient that records every interaction."""

    def __init__(
        self,
        accounts: Optional[List[str]] = None,
        start_block: int = 100,
        first_address: int = 1000,
    ):
        self._accounts = accounts if accounts is not None else [DEPLOYER_ADDRESS.lower()]
        self._addresses = itertools.count(first_address)
        self._hashes = itertools.count(1)
        self.block = start_block

        self.sent: List[Dict[str, Any]] = []
        self.waits: List[Tuple[str, int, bool]] = []
        self.receipts: Dict[str, Dict[str, Any]] = {}
        self.code: Dict[str, str] = {}

        # Failure injection
        self.reject_prefixes: Set[str] = set()  # send_transaction raises
        self.revert_prefixes: Set[str] = set()  # receipt status 0x0

    def accounts(self) -> List[str]:
        return self._accounts

    def block_number(self) -> int:
        return self.block

    def get_code(self, address: str) -> str:
        return self.code.get(address.lower(), "0x")

    def call(self, tx: Dict[str, Any]) -> str:
        return "0x"

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return self.receipts.get(tx_hash)

    def send_transaction(self, tx: Dict[str, Any]) -> str:
        data = tx.get("data", "")
        if any(data.startswith(p) for p in self.reject_prefixes):
            raise RpcError("sender doesn't have enough funds to send tx", code=-32000)

        self.sent.append(tx)
        tx_hash = f"0x{next(self._hashes):064x}"
        self.block += 1
        receipt: Dict[str, Any] = {
            "transactionHash": tx_hash,
            "blockNumber": hex(self.block),
            "status": "0x1",
            "contractAddress": None,
        }

        if any(data.startswith(p) for p in self.revert_prefixes):
            receipt["status"] = "0x0"
        elif "to" not in tx:
            address = f"0x{next(self._addresses):040d}"
            receipt["contractAddress"] = address
            self.code[address.lower()] = "0x6080"

        self.receipts[tx_hash] = receipt
        return tx_hash

    def await_confirmations(
        self,
        tx_hash: str,
        confirmations: int,
        poll_interval: float,
        instant: bool = False,
    ) -> Dict[str, Any]:
        self.waits.append((tx_hash, confirmations, instant))
        # Mine until the inclusion block is buried deep enough
        inclusion = int(self.receipts[tx_hash]["blockNumber"], 16)
        self.block = max(self.block, inclusion + confirmations - 1)
        return self.receipts[tx_hash]

    def deployments(self) -> List[Dict[str, Any]]:
        return [tx for tx in self.sent if "to" not in tx]

    def calls(self) -> List[Dict[str, Any]]:
        return [tx for tx in self.sent if "to" in tx]


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the path to the sample hardhat artifacts."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def fake_chain() -> FakeChain:
    """Fresh in-memory chain."""
    return FakeChain()


@pytest.fixture
def dev_config(artifacts_dir: Path, tmp_path: Path) -> RunConfig:
    """Config for a local development chain (1 confirmation, no verification)."""
    return RunConfig(
        network="hardhat",
        rpc_url="http://127.0.0.1:8545",
        deployer=DEPLOYER_ADDRESS,
        artifacts_dir=str(artifacts_dir),
        deployments_dir=str(tmp_path / "deployments"),
        poll_interval=0,
    )


@pytest.fixture
def sepolia_config(artifacts_dir: Path, tmp_path: Path) -> RunConfig:
    """Config for sepolia with an explorer credential (6 confirmations, verification on)."""
    return RunConfig(
        network="sepolia",
        rpc_url="http://sepolia-rpc.example.com",
        deployer=DEPLOYER_ADDRESS,
        verification_api_key="TESTKEY",
        artifacts_dir=str(artifacts_dir),
        deployments_dir=str(tmp_path / "deployments"),
        poll_interval=0,
    )


@pytest.fixture
def saved_deployments_dir(fixtures_dir: Path) -> Path:
    """Return the path to saved deployment records."""
    return fixtures_dir / "deployments"
