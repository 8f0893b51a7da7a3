"""Network interface enumeration and local address selection."""

import ipaddress
import logging
import socket
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import psutil

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_ADDRESS = "127.0.0.1"

# Names some platforms report for the loopback adapter
LOOPBACK_ALIASES = ("(lo)", "lo")


@dataclass(frozen=True)
class InterfaceAddress:
    """A single unicast address bound to an interface."""
    family: int
    address: str

    @property
    def is_ipv4(self) -> bool:
        return self.family == socket.AF_INET

    @property
    def is_ipv6(self) -> bool:
        return self.family == socket.AF_INET6


@dataclass
class InterfaceInfo:
    """Information about a network interface."""
    name: str
    description: str
    is_up: bool
    is_loopback: bool
    addresses: List[InterfaceAddress] = field(default_factory=list)
    mac_address: Optional[str] = None

    @property
    def ipv4_address(self) -> Optional[str]:
        for addr in self.addresses:
            if addr.is_ipv4:
                return addr.address
        return None


def _is_loopback(name: str, flags: str, addresses: Iterable[InterfaceAddress]) -> bool:
    if "loopback" in flags.split(","):
        return True
    if name in LOOPBACK_ALIASES:
        return True
    for addr in addresses:
        if not (addr.is_ipv4 or addr.is_ipv6):
            continue
        try:
            if ipaddress.ip_address(addr.address.split("%", 1)[0]).is_loopback:
                return True
        except ValueError:
            continue
    return False


def select_local_address(interfaces: Iterable[InterfaceInfo]) -> Tuple[Optional[InterfaceInfo], str]:
    """
    Pick the first usable IPv4 address in enumeration order.

    Returns the owning interface and the address, or ``(None, "127.0.0.1")``
    when no interface qualifies.
    """
    for iface in interfaces:
        for addr in iface.addresses:
            if not iface.is_up:
                continue
            if iface.is_loopback:
                continue
            if iface.name in LOOPBACK_ALIASES or iface.description in LOOPBACK_ALIASES:
                continue
            if addr.is_ipv6:
                continue
            if not addr.is_ipv4:
                continue
            return iface, addr.address

    return None, DEFAULT_LOCAL_ADDRESS


class InterfaceManager:
    """Manages network interface enumeration and information."""

    def __init__(self):
        self._interfaces: Dict[str, InterfaceInfo] = {}
        self.refresh()

    def refresh(self) -> None:
        """Refresh the list of network interfaces."""
        self._interfaces.clear()

        stats = psutil.net_if_stats()
        addrs = psutil.net_if_addrs()

        # net_if_addrs keeps the operating system's enumeration order
        names = list(addrs.keys()) + [name for name in stats if name not in addrs]

        for name in names:
            addresses = []
            mac_addr = None

            for addr in addrs.get(name, []):
                if addr.family == psutil.AF_LINK:
                    mac_addr = addr.address
                addresses.append(InterfaceAddress(family=addr.family, address=addr.address))

            # Aliases such as eth0:1 share the stats of their parent
            stat = stats.get(name) or stats.get(name.split(":", 1)[0])
            flags = getattr(stat, "flags", "") if stat else ""

            self._interfaces[name] = InterfaceInfo(
                name=name,
                description=name,
                is_up=bool(stat and stat.isup),
                is_loopback=_is_loopback(name, flags, addresses),
                addresses=addresses,
                mac_address=mac_addr,
            )

    def get_all(self) -> List[InterfaceInfo]:
        """Get all network interfaces."""
        return list(self._interfaces.values())

    def get_by_name(self, name: str) -> Optional[InterfaceInfo]:
        """Get interface by name."""
        return self._interfaces.get(name)

    def select(self) -> Tuple[Optional[InterfaceInfo], str]:
        """Select the local interface and address the tools report."""
        return select_local_address(self._interfaces.values())


def resolve_local_address() -> str:
    """
    Return the IPv4 address of the first active non-loopback interface.

    Interfaces are re-read on every call. Falls back to ``127.0.0.1``
    rather than failing.
    """
    try:
        iface, address = InterfaceManager().select()
    except (OSError, psutil.Error) as e:
        logger.debug("Interface enumeration failed: %s", e)
        return DEFAULT_LOCAL_ADDRESS

    if iface is None:
        logger.debug("No qualifying interface, using %s", address)
    else:
        logger.debug("Local address %s from interface %s", address, iface.name)
    return address
