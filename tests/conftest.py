"""Shared test doubles. No test opens a real socket."""
import queue
import socket

import pytest

from ssdp_agent.config import Config, DiscoveryConfig
from ssdp_agent.exceptions import TransportError

HUE_RESPONSE = (
    "HTTP/1.1 200 OK\r\n"
    "CACHE-CONTROL: max-age=100\r\n"
    "EXT:\r\n"
    "LOCATION: http://192.168.1.139:80/description.xml\r\n"
    "SERVER: FreeRTOS/6.0.5, UPnP/1.0, IpBridge/0.1\r\n"
    "ST: uuid:2f402f80-da50-11e1-9b23-0017880a8911\r\n"
    "USN: uuid:2f402f80-da50-11e1-9b23-0017880a8911\r\n\r\n"
)
HUE_USN = "uuid:2f402f80-da50-11e1-9b23-0017880a8911"


class FakeSocketManager:
    """In-memory stand-in for SocketManager.

    Datagrams queued with `feed()` are handed to `receive_into`; an empty queue
    behaves like a receive timeout. Exceptions can be fed to simulate errors.
    """

    def __init__(self, discovery_config: DiscoveryConfig):
        self.discovery_config = discovery_config
        self.sent: list[tuple[bytes, tuple[str, int]]] = []
        self.timeout: float | None = None
        self.bound = False
        self.closed = False
        self._datagrams: queue.Queue = queue.Queue()

    @property
    def is_open(self) -> bool:
        return self.bound and not self.closed

    def bind(self) -> None:
        self.bound = True

    def settimeout(self, seconds):
        self.timeout = seconds

    def feed(self, item, source=("192.168.1.20", 1900)) -> None:
        if isinstance(item, BaseException):
            self._datagrams.put(item)
        else:
            self._datagrams.put((item, source))

    def send(self, data: bytes, destination: tuple[str, int]) -> int:
        self.sent.append((data, destination))
        return len(data)

    def receive_into(self, buffer: bytearray):
        if self.closed:
            raise TransportError("socket closed", fatal=True)
        try:
            item = self._datagrams.get(timeout=self.timeout or 0.05)
        except queue.Empty:
            raise socket.timeout()
        if isinstance(item, BaseException):
            raise item
        data, source = item
        nbytes = min(len(data), len(buffer))
        buffer[:nbytes] = data[:nbytes]
        return nbytes, source

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def app_config():
    return Config(discovery=DiscoveryConfig(receive_timeout_seconds=0.05, stop_timeout_seconds=2.0))


@pytest.fixture
def fake_sockets(monkeypatch):
    """Replace the agent's SocketManager; yields the list of created fakes."""
    created: list[FakeSocketManager] = []

    def factory(discovery_config):
        manager = FakeSocketManager(discovery_config)
        created.append(manager)
        return manager

    monkeypatch.setattr("ssdp_agent.agent.SocketManager", factory)
    return created


@pytest.fixture
def hue_response() -> str:
    return HUE_RESPONSE


@pytest.fixture
def hue_usn() -> str:
    return HUE_USN


@pytest.fixture
def fake_socket_manager(app_config):
    manager = FakeSocketManager(app_config.discovery)
    manager.bind()
    return manager
