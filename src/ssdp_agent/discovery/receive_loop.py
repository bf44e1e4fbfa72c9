"""
Background receive loop: reads datagrams, keeps discovery responses in the
device cache.
"""
import socket
import threading

import structlog

from ..config import DiscoveryConfig
from ..exceptions import StateError, TransportError
from ..models.entry import CacheEntry
from ..models.health import ReceiveLoopHealth
from .cache import DeviceCache
from .parser import decode_datagram, is_discovery_response
from .socket_manager import SocketManager

logger = structlog.get_logger(__name__)


class ReceiveLoop:
    """
    Runs on one daemon thread for as long as the agent is started.

    The socket is polled with a receive timeout so that `stop()` is honoured
    within one timeout interval. The cache lock is only taken inside
    `DeviceCache.insert`, never across the blocking receive.
    """

    def __init__(self, cache: DeviceCache, discovery_config: DiscoveryConfig):
        self.socket_manager: SocketManager | None = None
        self.cache = cache
        self.discovery_config = discovery_config
        self.logger = logger.bind(component="ReceiveLoop")

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._stats_lock = threading.Lock()
        self._stats: dict = ReceiveLoopHealth().model_dump()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def health(self) -> ReceiveLoopHealth:
        with self._stats_lock:
            stats = dict(self._stats)
        stats["running"] = self.is_running
        return ReceiveLoopHealth(**stats)

    def _record(self, counter: str, **fields) -> None:
        with self._stats_lock:
            self._stats[counter] += 1
            self._stats.update(fields)

    def start(self, socket_manager: SocketManager) -> None:
        """Start receiving on the already bound `socket_manager`."""
        if self._thread is not None:
            raise StateError("Receive loop has already been started.")
        self.socket_manager = socket_manager
        self.socket_manager.settimeout(self.discovery_config.receive_timeout_seconds)
        self._thread = threading.Thread(target=self._run, name="ssdp-receive-loop", daemon=True)
        self._thread.start()
        self.logger.info("Receive loop started.")

    def request_stop(self) -> None:
        """Ask the loop to exit at its next poll without waiting for it."""
        self._stop_event.set()

    def stop(self, timeout: float | None = None) -> bool:
        """Signal the loop to exit and wait for the thread.

        Returns:
            True if the thread has exited (or was never started).
        """
        self.request_stop()
        if self._thread is None:
            return True
        self._thread.join(timeout if timeout is not None else self.discovery_config.stop_timeout_seconds)
        stopped = not self._thread.is_alive()
        if not stopped:
            self.logger.warning("Receive loop did not exit within timeout.", timeout=timeout)
        return stopped

    def _run(self) -> None:
        # One spare byte: a datagram that fills it is larger than the configured limit.
        limit = self.discovery_config.receive_buffer_size
        buffer = bytearray(limit + 1)
        stopped_reason = "stopped"
        try:
            while not self._stop_event.is_set():
                try:
                    nbytes, source = self.socket_manager.receive_into(buffer)
                except socket.timeout:
                    continue
                except TransportError as e:
                    if self._stop_event.is_set():
                        break
                    if e.fatal:
                        self.logger.error("Discovery socket is no longer usable, receive loop exiting.", error=str(e))
                        self._record("receive_errors", last_error=str(e))
                        stopped_reason = f"socket error: {e}"
                        break
                    self.logger.warning("Couldn't receive a datagram.", error=str(e))
                    self._record("receive_errors", last_error=str(e))
                    continue

                self._record("datagrams_received")
                if nbytes > limit:
                    self.logger.warning(
                        "Discarding over-length datagram.", limit=limit, source_host=source[0], source_port=source[1]
                    )
                    self._record("datagrams_oversized")
                    continue

                self.process_datagram(bytes(buffer[:nbytes]), source)
        except Exception as e:
            self.logger.exception("Receive loop crashed.", error=str(e))
            stopped_reason = f"unexpected error: {e}"
            with self._stats_lock:
                self._stats["last_error"] = str(e)
        finally:
            with self._stats_lock:
                self._stats["stopped_reason"] = stopped_reason
            self.logger.info("Receive loop ended.", reason=stopped_reason)

    def process_datagram(self, data: bytes, source: tuple[str, int] | None = None) -> CacheEntry | None:
        """Filter, parse and cache one datagram.

        Only datagrams starting with `HTTP/1.1 200 OK` are considered. Returns
        the cached entry, or None if the datagram was ignored or had no USN.
        """
        log = self.logger.bind(source_host=source[0], source_port=source[1]) if source else self.logger
        if not is_discovery_response(data):
            log.debug("Ignoring datagram that is not a discovery response.", size=len(data))
            self._record("datagrams_ignored")
            return None

        entry = CacheEntry(
            message=decode_datagram(data),
            source_host=source[0] if source else None,
            source_port=source[1] if source else None,
        )
        usn = entry.usn
        if usn is None:
            log.info("Discarding response without USN.", message=entry.message)
            self._record("responses_without_usn")
            return None

        self.cache.insert(usn, entry)
        self._record("responses_cached")
        log.debug("Response cached.", usn=usn, server=entry.get("SERVER"), location=entry.get("LOCATION"))
        return entry
