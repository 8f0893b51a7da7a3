"""Destination host resolution for the sender tools."""

import ipaddress
import logging
import socket
from typing import List

from ..errors import NameResolutionFailure
from .interface_manager import resolve_local_address

logger = logging.getLogger(__name__)

LOOPBACK_LITERALS = ("127.0.0.1", "::1")


def is_ipv4_literal(value: str) -> bool:
    """True if ``value`` has exactly three dots and parses as IPv4."""
    if value is None or value.count(".") != 3:
        return False
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def lookup_ipv4(host: str) -> List[str]:
    """Forward DNS lookup restricted to IPv4, in resolver order."""
    try:
        infos = socket.getaddrinfo(host, None, socket.AF_INET, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        raise NameResolutionFailure(host, str(e)) from e

    addresses = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        if sockaddr[0] not in addresses:
            addresses.append(sockaddr[0])
    return addresses


def resolve_target(host: str, remap_loopback: bool = False) -> str:
    """
    Turn a command line host argument into an IPv4 address string.

    ``localhost`` maps to the local interface address. With
    ``remap_loopback`` the loopback literals map there too, since the TCP
    listener binds to that address instead of loopback.
    """
    if remap_loopback and host in LOOPBACK_LITERALS:
        return resolve_local_address()

    if is_ipv4_literal(host):
        return host

    if host.lower() == "localhost":
        return resolve_local_address()

    addresses = lookup_ipv4(host)
    if not addresses:
        raise NameResolutionFailure(host)

    logger.debug("Resolved %s to %s", host, ", ".join(addresses))
    return addresses[0]
