"""Service modules"""
from .mint_workflow import MintState, MintWorkflow
from .network_guard import NetworkGuard
from .session import MintSession
from .supply_poller import SupplyPoller

__all__ = ["MintSession", "MintState", "MintWorkflow", "NetworkGuard", "SupplyPoller"]
