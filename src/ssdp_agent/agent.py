"""Main SSDP discovery agent."""

import threading
import time
from collections.abc import Callable
from typing import Optional

import structlog

from .config import Config
from .discovery.cache import DeviceCache
from .discovery.query import QueryDispatcher
from .discovery.receive_loop import ReceiveLoop
from .discovery.socket_manager import SocketManager
from .exceptions import StateError
from .models.common import AgentState
from .models.entry import CacheEntry
from .models.health import ReceiveLoopHealth

logger = structlog.get_logger(__name__)


class SSDPAgent:
    """SSDP discovery agent.

    Owns the multicast socket and the device cache, runs the receive loop in
    the background and exposes M-SEARCH queries to callers. Responses are
    cached by USN for the lifetime of the agent.

    Typical use::

        with SSDPAgent() as agent:
            agent.query_search_all()
            devices = agent.wait_for(timeout=5)
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        """Initialize the agent in the created state with an empty cache.

        Args:
            config: Configuration object. If None, will be loaded from environment.
        """
        self.config = config or Config()
        self.logger = logger.bind(agent_name=self.config.agent_name)

        self.cache = DeviceCache()
        self.socket_manager: SocketManager | None = None
        self._receive_loop = ReceiveLoop(self.cache, self.config.discovery)
        self._dispatcher = QueryDispatcher(None, self.config.discovery)

        self._state = AgentState.CREATED
        self._state_lock = threading.Lock()
        self.logger.info("Agent initialized.")

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def health(self) -> ReceiveLoopHealth:
        return self._receive_loop.health

    def start(self) -> None:
        """Bind the socket and start the receive loop.

        Raises:
            StateError: If the agent was already started or stopped.
            BindError: If the discovery port is unavailable.
            MulticastError: If joining the group or setting the TTL fails.
        """
        with self._state_lock:
            if self._state != AgentState.CREATED:
                raise StateError(f"Agent cannot be started from state '{self._state.value}'.")

            socket_manager = SocketManager(self.config.discovery)
            socket_manager.bind()
            try:
                self._receive_loop.start(socket_manager)
            except Exception:
                socket_manager.close()
                raise

            self.socket_manager = socket_manager
            self._dispatcher.socket_manager = socket_manager
            self._state = AgentState.STARTED
        self.logger.info("Agent started.")

    def stop(self, timeout: float | None = None) -> None:
        """Stop the receive loop and close the socket. No-op unless started."""
        with self._state_lock:
            if self._state != AgentState.STARTED:
                return
            self._state = AgentState.STOPPED
        self.logger.info("Agent stopping.")
        # A receive already in progress returns at its timeout; the loop then sees the stop request.
        self._receive_loop.request_stop()
        if self.socket_manager is not None:
            self.socket_manager.close()
        self._receive_loop.stop(timeout)
        self.logger.info("Agent stopped.", health=self._receive_loop.health.model_dump())

    def _require_started(self) -> None:
        if self._state != AgentState.STARTED:
            raise StateError(f"Queries require a started agent (current state: '{self._state.value}').")

    def query_search(self, search_target: str) -> None:
        """Multicast an M-SEARCH for `search_target`.

        Raises:
            StateError: If the agent is not started; nothing is sent.
            TransportError: If the send fails.
        """
        self._require_started()
        self._dispatcher.query_search(search_target)

    def query_search_all(self) -> None:
        self._require_started()
        self._dispatcher.query_search_all()

    def process_datagram(self, data: bytes, source: tuple[str, int] | None = None) -> CacheEntry | None:
        """Run `data` through the receive path without touching the network."""
        return self._receive_loop.process_datagram(data, source)

    def get(self, usn: str) -> CacheEntry | None:
        return self.cache.get(usn)

    def devices(self) -> dict[str, CacheEntry]:
        """Snapshot of all discovered devices keyed by USN."""
        return self.cache.snapshot()

    def wait_for(
        self,
        predicate: Callable[[CacheEntry], bool] | None = None,
        timeout: float = 5.0,
        poll_interval: float = 0.1,
    ) -> list[CacheEntry]:
        """Poll the cache until an entry matches `predicate` or `timeout` elapses.

        With no predicate any entry matches. Returns all matching entries, or
        an empty list on timeout. Responses keep arriving after this returns.
        """
        match = predicate or (lambda entry: True)
        deadline = time.monotonic() + timeout
        while True:
            found = self.cache.find(match)
            if found:
                return found
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.logger.debug("wait_for timed out.", timeout=timeout, cached=len(self.cache))
                return []
            time.sleep(min(poll_interval, remaining))

    def __enter__(self) -> "SSDPAgent":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
