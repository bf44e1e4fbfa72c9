"""
Data models for the SSDP agent.
"""

from .common import AgentState, BasePydanticModel, FrozenPydanticModel
from .entry import CacheEntry
from .health import ReceiveLoopHealth

__all__ = [
    "AgentState",
    "BasePydanticModel",
    "CacheEntry",
    "FrozenPydanticModel",
    "ReceiveLoopHealth",
]
