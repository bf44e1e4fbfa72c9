"""
Custom exceptions for the SSDP agent.
"""
from typing import Optional


class SSDPAgentError(Exception):
    """Base class for all SSDP agent errors."""
    pass

class BindError(SSDPAgentError):
    """Raised when the discovery port cannot be bound."""
    def __init__(self, message: str, port: Optional[int] = None):
        super().__init__(message)
        self.port = port

class MulticastError(SSDPAgentError):
    """Raised when joining the multicast group or configuring the TTL fails."""
    def __init__(self, message: str, group: Optional[str] = None):
        super().__init__(message)
        self.group = group

class TransportError(SSDPAgentError):
    """Raised for send/receive failures on the discovery socket.

    `fatal` is True when the socket is no longer usable (closed or invalidated),
    in which case the receive loop stops instead of retrying.
    """
    def __init__(self, message: str, fatal: bool = False):
        super().__init__(message)
        self.fatal = fatal

class StateError(SSDPAgentError):
    """Raised when an operation is attempted in the wrong agent state,
    e.g. sending a query before `start()`."""
    pass
