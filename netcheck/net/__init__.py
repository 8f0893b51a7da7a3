"""Local interface and destination address resolution."""

from .interface_manager import (
    InterfaceManager,
    InterfaceInfo,
    InterfaceAddress,
    select_local_address,
    resolve_local_address,
)
from .resolver import is_ipv4_literal, lookup_ipv4, resolve_target

__all__ = [
    "InterfaceManager",
    "InterfaceInfo",
    "InterfaceAddress",
    "select_local_address",
    "resolve_local_address",
    "is_ipv4_literal",
    "lookup_ipv4",
    "resolve_target",
]
