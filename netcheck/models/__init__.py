"""Data models for netcheck."""

from .message import (
    SENTINEL,
    timestamp,
    decode_ascii,
    strip_sentinel_chars,
    display_line,
    build_handshake,
    build_udp_payload,
)
from .probe import ProbeStatus, ConnectAttempt, ProbeOutcome

__all__ = [
    "SENTINEL",
    "timestamp",
    "decode_ascii",
    "strip_sentinel_chars",
    "display_line",
    "build_handshake",
    "build_udp_payload",
    "ProbeStatus",
    "ConnectAttempt",
    "ProbeOutcome",
]
