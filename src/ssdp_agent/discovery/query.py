"""
Builds and sends M-SEARCH discovery requests.
"""
import structlog

from ..config import SSDP_MULTICAST_GROUP, SSDP_PORT, SSDP_SEARCH_ALL, DiscoveryConfig
from ..exceptions import StateError
from .socket_manager import SocketManager

logger = structlog.get_logger(__name__)


def build_search_request(
    search_target: str,
    group: str = SSDP_MULTICAST_GROUP,
    port: int = SSDP_PORT,
    mx: int = 3,
) -> bytes:
    """Encode an M-SEARCH request for `search_target`."""
    return (
        "M-SEARCH * HTTP/1.1\r\n"
        f"HOST: {group}:{port}\r\n"
        f"ST: {search_target}\r\n"
        'MAN: "ssdp:discover"\r\n'
        f"MX: {mx}\r\n"
    ).encode("utf-8")


class QueryDispatcher:
    """Sends discovery requests to the multicast group through a SocketManager."""

    def __init__(self, socket_manager: SocketManager | None, discovery_config: DiscoveryConfig):
        self.socket_manager = socket_manager
        self.discovery_config = discovery_config
        self.logger = logger.bind(component="QueryDispatcher")

    @property
    def destination(self) -> tuple[str, int]:
        return (self.discovery_config.multicast_group, self.discovery_config.port)

    def query_search(self, search_target: str) -> None:
        """Multicast an M-SEARCH for `search_target`.

        Raises:
            StateError: If there is no bound socket yet.
            TransportError: If the send fails.
        """
        if self.socket_manager is None or not self.socket_manager.is_open:
            raise StateError("Cannot send a query before the agent is started.")
        cfg = self.discovery_config
        request = build_search_request(search_target, cfg.multicast_group, cfg.port, cfg.mx_seconds)
        self.socket_manager.send(request, self.destination)
        self.logger.info("M-SEARCH sent.", search_target=search_target, mx=cfg.mx_seconds)

    def query_search_all(self) -> None:
        self.query_search(SSDP_SEARCH_ALL)
