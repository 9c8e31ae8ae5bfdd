"""Contract gateway — binds the NFT contract to a chain handle."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import (
    decode_hex,
    encode_hex,
    function_abi_to_4byte_selector,
    to_checksum_address,
    to_wei,
)

from ..chains.evm.client import RpcError
from ..config import ContractConfig
from ..errors import TransientReadError
from ..wallet.handles import PendingTransaction, Provider, Signer

logger = logging.getLogger(__name__)

DEFAULT_ABI_PATH = Path(__file__).resolve().parent / "abi" / "LW3Punks.json"


@lru_cache(maxsize=8)
def load_abi(path: str | Path) -> tuple[dict[str, Any], ...]:
    """Load an ABI from a bare JSON list or a Hardhat artifact with an "abi" key."""
    with open(path, encoding="utf-8") as f:
        artifact = json.load(f)

    abi = artifact["abi"] if isinstance(artifact, dict) else artifact
    if not isinstance(abi, list):
        raise ValueError(f"No ABI found in {path}")
    return tuple(abi)


@dataclass(frozen=True)
class ContractProxy:
    """A contract address + interface bound to one chain handle."""

    address: str
    abi: tuple[dict[str, Any], ...]
    handle: Provider

    def _function(self, name: str) -> dict[str, Any]:
        for entry in self.abi:
            if entry.get("type") == "function" and entry.get("name") == name:
                return entry
        raise ValueError(f"Function {name} not found in ABI")

    def encode_call(self, name: str, args: Sequence[Any] = ()) -> str:
        """ABI-encode a call as 0x-prefixed calldata."""
        fn = self._function(name)
        selector = function_abi_to_4byte_selector(fn)
        input_types = [inp["type"] for inp in fn.get("inputs", [])]
        return encode_hex(selector + encode(input_types, list(args)))

    def decode_output(self, name: str, raw: str) -> tuple[Any, ...]:
        fn = self._function(name)
        output_types = [out["type"] for out in fn.get("outputs", [])]
        return decode(output_types, decode_hex(raw))


class ContractGateway:
    """Builds proxies for the configured contract and runs mint/supply calls."""

    def __init__(self, config: ContractConfig) -> None:
        self.address = to_checksum_address(config.address)
        self.abi = load_abi(config.abi_path or DEFAULT_ABI_PATH)
        self.mint_price_wei = to_wei(Decimal(config.mint_price), "ether")

    def bind(self, handle: Provider) -> ContractProxy:
        return ContractProxy(address=self.address, abi=self.abi, handle=handle)

    async def mint(self, proxy: ContractProxy) -> PendingTransaction:
        """Submit ``mint()`` paying the fixed price."""
        if not isinstance(proxy.handle, Signer):
            raise TypeError("mint() needs a proxy bound to a signer")

        data = proxy.encode_call("mint")
        logger.info("Submitting mint to %s with value %d wei", proxy.address, self.mint_price_wei)
        return await proxy.handle.send_transaction(proxy.address, data, self.mint_price_wei)

    async def read_supply(self, proxy: ContractProxy) -> str:
        """Number of tokens minted so far, as a decimal string."""
        data = proxy.encode_call("tokenIds")
        try:
            raw = await proxy.handle.call(proxy.address, data)
        except RpcError as e:
            raise TransientReadError(f"tokenIds() call failed: {e}") from e

        if not raw or raw == "0x":
            raise TransientReadError(f"Empty response from {proxy.address}; is the contract deployed?")

        try:
            (count,) = proxy.decode_output("tokenIds", raw)
        except (DecodingError, ValueError) as e:
            raise TransientReadError(f"Malformed tokenIds() response: {raw!r}") from e
        return str(count)
