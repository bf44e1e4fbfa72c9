"""SSDP Agent - multicast discovery client for UPnP-style devices.

Sends M-SEARCH queries on 239.255.255.250:1900, listens for responses in a
background thread and keeps a cache of discovered devices keyed by USN.
"""

__version__ = "0.1.0"

from .agent import SSDPAgent
from .config import Config
from .exceptions import BindError, MulticastError, SSDPAgentError, StateError, TransportError
from .models import AgentState, CacheEntry, ReceiveLoopHealth

__all__ = [
    "AgentState",
    "BindError",
    "CacheEntry",
    "Config",
    "MulticastError",
    "ReceiveLoopHealth",
    "SSDPAgent",
    "SSDPAgentError",
    "StateError",
    "TransportError",
]
