"""JSON-RPC client for the blockchain network boundary."""

import itertools
import time
from typing import Any, Callable, Dict, List, Optional

import requests
import structlog

from .constants import REQUEST_TIMEOUT
from .exceptions import RpcError

logger = structlog.get_logger()


class JsonRpcClient:
    """Minimal Ethereum JSON-RPC client over HTTP."""

    def __init__(
        self,
        rpc_url: str,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.rpc_url = rpc_url
        self._session = session or requests.Session()
        self._timeout = timeout
        self._sleep = sleep
        self._ids = itertools.count(1)

    def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Perform a single JSON-RPC call.

        Args:
            method: RPC method name (e.g. "eth_blockNumber")
            params: Positional parameters

        Returns:
            The "result" member of the response

        Raises:
            RpcError: On HTTP failure, transport error or RPC error object
        """
        try:
            response = self._session.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params or [],
                    "id": next(self._ids),
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise RpcError(f"Network error during RPC call {method}: {e}") from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise RpcError(f"RPC request {method} failed with status {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise RpcError(f"RPC response to {method} is not valid JSON") from e

        # Check for RPC errors
        if "error" in result:
            error = result["error"]
            if isinstance(error, dict):
                raise RpcError(
                    f"RPC error in {method}: {error.get('message', error)}",
                    code=error.get("code"),
                )
            raise RpcError(f"RPC error in {method}: {error}")

        return result.get("result")

    def accounts(self) -> List[str]:
        return self.request("eth_accounts")

    def block_number(self) -> int:
        return int(self.request("eth_blockNumber"), 16)

    def get_code(self, address: str) -> str:
        return self.request("eth_getCode", [address, "latest"])

    def send_transaction(self, tx: Dict[str, Any]) -> str:
        """Submit a transaction signed by the node's unlocked account; returns its hash."""
        return self.request("eth_sendTransaction", [tx])

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return self.request("eth_getTransactionReceipt", [tx_hash])

    def call(self, tx: Dict[str, Any]) -> str:
        """Execute a read-only call against the latest block."""
        return self.request("eth_call", [tx, "latest"])

    def await_confirmations(
        self,
        tx_hash: str,
        confirmations: int,
        poll_interval: float,
        instant: bool = False,
    ) -> Dict[str, Any]:
        """
        Wait until a transaction is included and buried under enough blocks.

        The inclusion block counts as the first confirmation. On instant
        finality networks a single confirmation returns as soon as the
        receipt exists. There is no timeout.

        Args:
            tx_hash: Transaction hash
            confirmations: Required confirmation depth (>= 1)
            poll_interval: Seconds to sleep between polls
            instant: Whether the network finalizes on inclusion

        Returns:
            Transaction receipt

        Raises:
            RpcError: If the RPC endpoint fails while waiting
        """
        # Some nodes return pending receipts without a block number
        receipt = self.get_transaction_receipt(tx_hash)
        while receipt is None or receipt.get("blockNumber") is None:
            self._sleep(poll_interval)
            receipt = self.get_transaction_receipt(tx_hash)

        if instant and confirmations <= 1:
            return receipt

        inclusion_block = int(receipt["blockNumber"], 16)
        while self.block_number() - inclusion_block + 1 < confirmations:
            logger.debug(
                "awaiting_confirmations",
                tx_hash=tx_hash,
                required=confirmations,
            )
            self._sleep(poll_interval)

        return receipt
