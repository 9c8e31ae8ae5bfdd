"""EVM JSON-RPC client for an EIP-1193 wallet bridge."""
import asyncio
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import NetworkConfig

logger = logging.getLogger(__name__)

# EIP-1193 provider error codes
USER_REJECTED = 4001
UNAUTHORIZED = 4100
DISCONNECTED = 4900
CHAIN_DISCONNECTED = 4901


class RpcError(RuntimeError):
    """JSON-RPC failure; ``code`` is None when the endpoint never answered."""

    def __init__(self, code: int | None, message: str, data: Any = None) -> None:
        super().__init__(f"RPC Error {code}: {message}" if code is not None else message)
        self.code = code
        self.message = message
        self.data = data


class EvmRpcClient:
    """JSON-RPC client for the wallet endpoint."""

    def __init__(self, config: NetworkConfig) -> None:
        self.endpoint = config.rpc_url
        self.timeout = config.rpc_timeout
        self._request_id = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make a single RPC call and return its ``result`` field."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        try:
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.post(
                    self.endpoint,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    result = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            logger.warning("Wallet endpoint %s failed on %s: %s", self.endpoint, method, e)
            raise RpcError(None, f"Wallet endpoint unreachable: {e}") from e

        if not isinstance(result, dict):
            raise RpcError(None, f"Malformed response to {method}: {result!r}")

        if "error" in result:
            error = result["error"] or {}
            if not isinstance(error, dict):
                raise RpcError(None, str(error))
            raise RpcError(error.get("code"), error.get("message", ""), error.get("data"))

        return result.get("result")

    async def request_accounts(self) -> list[str]:
        """Ask the wallet to expose accounts; the wallet prompts its owner."""
        return list(await self.rpc_call("eth_requestAccounts", []) or [])

    async def accounts(self) -> list[str]:
        """Accounts already exposed to this session, without prompting."""
        return list(await self.rpc_call("eth_accounts", []) or [])

    async def _quantity(self, method: str) -> int:
        value = await self.rpc_call(method, [])
        try:
            return int(value, 16)
        except (TypeError, ValueError) as e:
            raise RpcError(None, f"Malformed {method} result: {value!r}") from e

    async def chain_id(self) -> int:
        return await self._quantity("eth_chainId")

    async def block_number(self) -> int:
        return await self._quantity("eth_blockNumber")

    async def call(self, to: str, data: str) -> str:
        """Read-only contract call against the latest block."""
        return await self.rpc_call("eth_call", [{"to": to, "data": data}, "latest"])

    async def send_transaction(self, tx: dict[str, Any]) -> str:
        """Hand a transaction to the wallet for signing; returns its hash."""
        return await self.rpc_call("eth_sendTransaction", [tx])

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return await self.rpc_call("eth_getTransactionReceipt", [tx_hash])
