"""One-shot UDP sender."""

import logging
import socket
from typing import Optional

from ..config import NetcheckConfig
from ..models.message import build_udp_payload, timestamp
from ..net.interface_manager import resolve_local_address
from ..net.resolver import resolve_target
from ..output import Level, emit

logger = logging.getLogger(__name__)


def send_datagram(target: str, port: int) -> int:
    """Send the descriptive datagram to ``target:port``; no reply is awaited."""
    payload = build_udp_payload(resolve_local_address())
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sent = sock.sendto(payload, (target, port))
    logger.debug("Sent %d bytes to %s:%d", sent, target, port)
    return sent


def run_udp_sender(host: str, port: int, config: Optional[NetcheckConfig] = None) -> str:
    """Resolve ``host``, send one datagram and report it. Returns the target address."""
    config = config or NetcheckConfig()
    target = resolve_target(host)
    send_datagram(target, port)
    emit(
        f"{timestamp(config.output.timestamp_format)} Message sent to {target} on port {port}",
        Level.NOTICE,
        config.output.color,
    )
    return target
