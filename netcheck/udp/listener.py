"""UDP datagram listener."""

import logging
import socket
from typing import Optional, Tuple

from ..config import NetcheckConfig
from ..errors import PORT_IN_USE_ERRNOS, PortInUse
from ..models.message import decode_ascii, timestamp
from ..net.interface_manager import resolve_local_address
from ..output import Level, emit

logger = logging.getLogger(__name__)


class UdpListener:
    """Blocking single-threaded datagram receiver bound to all interfaces."""

    def __init__(self, port: int, config: Optional[NetcheckConfig] = None, host: str = "0.0.0.0"):
        self.config = config or NetcheckConfig()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.bind((host, port))
        except OSError as e:
            self._sock.close()
            if e.errno in PORT_IN_USE_ERRNOS:
                raise PortInUse("UDP", port, e.errno) from e
            raise
        self.port = self._sock.getsockname()[1]

    def receive(self) -> Tuple[bytes, Tuple[str, int]]:
        """Block for one datagram and print it."""
        data, sender = self._sock.recvfrom(self.config.udp.buffer_size)
        logger.debug("Datagram of %d bytes from %s:%d", len(data), sender[0], sender[1])
        emit(
            f"{timestamp(self.config.output.timestamp_format)} "
            f"Received UDP packet from {sender[0]}:{sender[1]} : {decode_ascii(data)}",
            Level.SUCCESS,
            self.config.output.color,
        )
        return data, sender

    def print_banner(self) -> None:
        emit(
            f"Host IP Address: {resolve_local_address()} :: Listening for UDP on port {self.port}"
            "                         ...(CTRL^C to exit)",
            Level.STATUS,
            self.config.output.color,
        )

    def serve_forever(self) -> None:
        while True:
            self.print_banner()
            self.receive()

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> "UdpListener":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def run_udp_listener(port: int, config: Optional[NetcheckConfig] = None) -> None:
    """Print every datagram received on ``port`` until the process is stopped."""
    with UdpListener(port, config) as listener:
        listener.serve_forever()
