"""UDP listener and sender."""

from .listener import UdpListener, run_udp_listener
from .sender import send_datagram, run_udp_sender

__all__ = [
    "UdpListener",
    "run_udp_listener",
    "send_datagram",
    "run_udp_sender",
]
