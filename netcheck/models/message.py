"""Payload helpers shared by the TCP and UDP tools."""

from datetime import datetime
from typing import Optional

SENTINEL = "<EOF>"
DEFAULT_TIMESTAMP_FORMAT = "%m/%d/%Y %H:%M:%S"


def timestamp(fmt: str = DEFAULT_TIMESTAMP_FORMAT, now: Optional[datetime] = None) -> str:
    """Local wall-clock timestamp for console lines."""
    return (now or datetime.now()).strftime(fmt)


def decode_ascii(data: bytes) -> str:
    """Decode as ASCII, substituting '?' for bytes above 0x7F."""
    return data.decode("ascii", errors="replace").replace("\ufffd", "?")


def strip_sentinel_chars(text: str, sentinel: str = SENTINEL) -> str:
    """
    Drop every character that appears anywhere in ``sentinel``.

    This removes ``<``, ``E``, ``O``, ``F`` and ``>`` wherever they occur,
    not just a trailing marker.
    """
    return "".join(ch for ch in text if ch not in sentinel)


def display_line(data: bytes, ts: str, sentinel: str = SENTINEL) -> str:
    """Console line the TCP listener prints for a received payload."""
    return f"{ts} {strip_sentinel_chars(decode_ascii(data), sentinel)}"


def build_handshake(local_address: str, local_port: int, sentinel: str = SENTINEL) -> bytes:
    """Payload the TCP probe sends once connected."""
    text = f" (incoming) TCP connection established from {local_address}:{local_port}{sentinel}"
    return text.encode("ascii")


def build_udp_payload(local_address: str) -> bytes:
    """Payload the UDP sender puts in its single datagram."""
    return f"UDP sent from {local_address}".encode("ascii")
