"""Contract bindings."""
from .gateway import ContractGateway, ContractProxy, load_abi

__all__ = ["ContractGateway", "ContractProxy", "load_abi"]
