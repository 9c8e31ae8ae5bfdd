"""EVM chain support."""
from .client import EvmRpcClient, RpcError

__all__ = ["EvmRpcClient", "RpcError"]
