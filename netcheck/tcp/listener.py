"""TCP echo listener."""

import logging
import socket
import socketserver
from typing import Optional

from ..config import NetcheckConfig
from ..errors import PORT_IN_USE_ERRNOS, PortInUse
from ..models.message import display_line, timestamp
from ..net.interface_manager import resolve_local_address
from ..output import Level, emit

logger = logging.getLogger(__name__)


class EchoHandler(socketserver.BaseRequestHandler):
    """
    Serve one accepted connection.

    A single receive, a console line with the sentinel characters removed,
    the unfiltered bytes echoed back, then both directions shut down.
    """

    def handle(self) -> None:
        server: "TcpEchoServer" = self.server  # type: ignore[assignment]
        conn: socket.socket = self.request
        peer = self.client_address

        logger.debug("Accepted connection from %s:%d", peer[0], peer[1])

        data = conn.recv(server.config.tcp.buffer_size)
        line = display_line(
            data,
            timestamp(server.config.output.timestamp_format),
            server.config.tcp.sentinel,
        )
        emit(line, Level.SUCCESS, server.config.output.color)

        conn.sendall(data)
        conn.shutdown(socket.SHUT_RDWR)
        conn.close()


class TcpEchoServer(socketserver.ThreadingTCPServer):
    """Thread-per-connection echo server; workers are neither joined nor tracked."""

    daemon_threads = True
    block_on_close = False

    def __init__(self, host: str, port: int, config: NetcheckConfig):
        self.config = config
        self.request_queue_size = config.tcp.backlog
        super().__init__((host, port), EchoHandler)

    @property
    def host(self) -> str:
        return self.server_address[0]

    @property
    def port(self) -> int:
        return self.server_address[1]


def open_tcp_listener(
    port: int,
    host: Optional[str] = None,
    config: Optional[NetcheckConfig] = None,
) -> TcpEchoServer:
    """
    Bind and listen on ``host:port``.

    ``host`` defaults to the resolved local interface address. Raises
    PortInUse when the port is taken or needs elevated rights.
    """
    config = config or NetcheckConfig()
    host = host or resolve_local_address()

    try:
        server = TcpEchoServer(host, port, config)
    except OSError as e:
        if e.errno in PORT_IN_USE_ERRNOS:
            raise PortInUse("TCP", port, e.errno) from e
        raise

    logger.debug("TCP listener bound to %s:%d (backlog %d)", server.host, server.port, config.tcp.backlog)
    return server


def run_tcp_listener(
    port: int,
    host: Optional[str] = None,
    config: Optional[NetcheckConfig] = None,
) -> None:
    """Run the echo listener in the foreground until the process is stopped."""
    config = config or NetcheckConfig()
    server = open_tcp_listener(port, host, config)

    with server:
        emit(
            f"Host IP Address: {server.host} :: Listening for TCP on port {server.port}"
            "                         ...(CTRL^C to exit)",
            Level.INFO,
            config.output.color,
        )
        server.serve_forever()
