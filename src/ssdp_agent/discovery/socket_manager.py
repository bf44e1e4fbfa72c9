"""
Owner of the bound multicast UDP socket.
"""
import errno
import socket
import struct

import structlog

from ..config import DiscoveryConfig
from ..exceptions import BindError, MulticastError, StateError, TransportError
from .network import get_interface_ipv4, get_network_interfaces

logger = structlog.get_logger(__name__)

# errno values meaning the socket itself is gone, not just this one operation
_FATAL_ERRNOS = {errno.EBADF, errno.ENOTSOCK, errno.ENOTCONN}


class SocketManager:
    """
    Binds the SSDP port on the wildcard address, joins the multicast group and
    exposes thin send/receive pass-throughs.
    """

    def __init__(self, discovery_config: DiscoveryConfig):
        self.discovery_config = discovery_config
        self._socket: socket.socket | None = None
        self._closed = False
        self.logger = logger.bind(group=discovery_config.multicast_group, port=discovery_config.port)

    @property
    def is_open(self) -> bool:
        return self._socket is not None and not self._closed

    def bind(self) -> None:
        """Open the socket, join the group and set the multicast TTL.

        Raises:
            StateError: If the socket was already bound.
            BindError: If the port cannot be bound.
            MulticastError: If joining the group or setting the TTL fails.
        """
        if self._socket is not None:
            raise StateError("Socket is already bound.")

        cfg = self.discovery_config
        interface_ip = self._resolve_interface_ip()
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if hasattr(socket, "SO_REUSEPORT"):
                try:
                    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
                except OSError as e:
                    # Some kernels expose the constant without supporting it
                    if e.errno != errno.ENOPROTOOPT:
                        raise
            sock.bind(("", cfg.port))
        except OSError as e:
            sock.close()
            self.logger.error("Failed to bind discovery port", error=str(e))
            raise BindError(f"Could not bind UDP port {cfg.port}: {e}", port=cfg.port) from e

        try:
            membership = struct.pack(
                "4s4s", socket.inet_aton(cfg.multicast_group), socket.inet_aton(interface_ip or "0.0.0.0")
            )
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
            if interface_ip:
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, socket.inet_aton(interface_ip))
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, cfg.multicast_ttl)
        except OSError as e:
            sock.close()
            self.logger.error("Failed to configure multicast", error=str(e), interface_ip=interface_ip)
            raise MulticastError(
                f"Could not join multicast group {cfg.multicast_group}: {e}", group=cfg.multicast_group
            ) from e

        self._socket = sock
        self.logger.info("Discovery socket bound", ttl=cfg.multicast_ttl, interface_ip=interface_ip)

    def _resolve_interface_ip(self) -> str | None:
        interface = self.discovery_config.network_interface
        if not interface:
            return None
        known = get_network_interfaces(skip_loopback=False)
        if interface not in known:
            raise MulticastError(
                f"Unknown network interface {interface!r}; available: {', '.join(known) or 'none'}",
                group=self.discovery_config.multicast_group,
            )
        interface_ip = get_interface_ipv4(interface)
        if interface_ip is None:
            raise MulticastError(
                f"Interface {interface!r} has no IPv4 address to join the group on",
                group=self.discovery_config.multicast_group,
            )
        return interface_ip

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise StateError("Socket is not bound; call bind() first.")
        return self._socket

    def settimeout(self, seconds: float | None) -> None:
        self._require_socket().settimeout(seconds)

    def send(self, data: bytes, destination: tuple[str, int]) -> int:
        sock = self._require_socket()
        try:
            return sock.sendto(data, destination)
        except OSError as e:
            raise TransportError(
                f"Failed to send datagram to {destination[0]}:{destination[1]}: {e}",
                fatal=self._is_fatal(e),
            ) from e

    def receive_into(self, buffer: bytearray) -> tuple[int, tuple[str, int]]:
        """Receive one datagram into `buffer`.

        Returns:
            (nbytes, (host, port)) of the sender.

        Raises:
            socket.timeout: If the receive timeout elapsed; not an error.
            TransportError: For any other failure. `fatal` is set when the
                socket is closed or otherwise unusable.
        """
        sock = self._require_socket()
        try:
            return sock.recvfrom_into(buffer)
        except socket.timeout:
            raise
        except OSError as e:
            raise TransportError(f"Failed to receive datagram: {e}", fatal=self._is_fatal(e)) from e

    def _is_fatal(self, error: OSError) -> bool:
        return self._closed or error.errno in _FATAL_ERRNOS

    def close(self) -> None:
        if self._socket is None or self._closed:
            return
        self._closed = True
        try:
            self._socket.close()
        finally:
            self.logger.info("Discovery socket closed")
