"""Network interface lookup used to pick the multicast interface."""

import netifaces
import structlog

logger = structlog.get_logger(__name__)


def get_network_interfaces(skip_loopback: bool = True) -> list[str]:
    """List interface names known to the OS.

    Args:
        skip_loopback: Whether to exclude loopback interfaces.

    Returns:
        list[str]: Interface names.
    """
    interfaces = netifaces.interfaces()
    if skip_loopback:
        # 'lo' on Unix, 'Loopback...' on Windows
        interfaces = [
            iface for iface in interfaces
            if not iface.lower().startswith(("lo", "loopback"))
        ]
    return interfaces


def get_interface_ipv4(interface: str) -> str | None:
    """First IPv4 address bound to `interface`, or None.

    Multicast membership (IP_ADD_MEMBERSHIP) and IP_MULTICAST_IF both take an
    IPv4 address rather than an interface name.
    """
    try:
        addr_info = netifaces.ifaddresses(interface)
    except (ValueError, KeyError, OSError) as e:
        logger.error("Failed to get addresses for interface", interface=interface, error=str(e))
        return None
    for addr in addr_info.get(netifaces.AF_INET, []):
        if 'addr' in addr:
            return addr['addr']
    return None
