"""TCP probe client with a bounded connect timeout."""

import errno
import logging
import os
import select
import socket
import time
from typing import Callable, Optional, Tuple

from ..config import NetcheckConfig
from ..models.message import build_handshake, timestamp
from ..models.probe import ConnectAttempt, ProbeOutcome, ProbeStatus
from ..net.interface_manager import resolve_local_address
from ..net.resolver import resolve_target
from ..output import Level, emit

logger = logging.getLogger(__name__)

# connect_ex results meaning "attempt is under way"
_IN_PROGRESS = (0, errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EALREADY)


def _wait_for_connect(sock: socket.socket, timeout: float) -> bool:
    """Block until the pending connect completes or ``timeout`` elapses."""
    _, writable, failed = select.select([], [sock], [sock], timeout)
    return bool(writable or failed)


def _connected_state(sock: socket.socket) -> Tuple[bool, Optional[str]]:
    """Whether the socket actually reached the connected state."""
    err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    if err:
        return False, os.strerror(err)
    try:
        sock.getpeername()
    except OSError:
        return False, None
    return True, None


def probe(
    target: str,
    port: int,
    timeout_ms: Optional[int] = None,
    config: Optional[NetcheckConfig] = None,
    report: Optional[Callable[[ProbeOutcome], None]] = None,
) -> ProbeOutcome:
    """
    Make one timed connection attempt to ``target:port``.

    On success the handshake is sent, ``report`` is called, and a single
    receive drains the listener's echo before the socket is shut down.
    On failure the socket is closed and ``report`` is called with a
    TIMED_OUT or REFUSED outcome. Nothing is retried.
    """
    config = config or NetcheckConfig()
    if timeout_ms is None:
        timeout_ms = config.tcp.connect_timeout_ms

    attempt = ConnectAttempt(target=target, port=port, timeout_ms=timeout_ms)
    ts = timestamp(config.output.timestamp_format)
    started = time.monotonic()

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setblocking(False)
        rc = sock.connect_ex((target, port))
        if rc in _IN_PROGRESS:
            attempt.completed = _wait_for_connect(sock, timeout_ms / 1000.0)
            connected, error = _connected_state(sock)
        else:
            attempt.completed = True
            connected, error = False, os.strerror(rc)

        if not connected:
            status = ProbeStatus.REFUSED if attempt.completed else ProbeStatus.TIMED_OUT
            logger.debug("Connect to %s:%d ended %s (%s)", target, port, status.value, error)
            sock.close()
            outcome = ProbeOutcome(
                status=status,
                target=target,
                port=port,
                timestamp=ts,
                elapsed=time.monotonic() - started,
                error=error,
            )
            if report:
                report(outcome)
            return outcome

        sock.setblocking(True)
        local_port = sock.getsockname()[1]
        message = build_handshake(resolve_local_address(), local_port, config.tcp.sentinel)
        sock.sendall(message)

        outcome = ProbeOutcome(
            status=ProbeStatus.CONNECTED,
            target=target,
            port=port,
            timestamp=ts,
            elapsed=time.monotonic() - started,
            local_port=local_port,
            bytes_sent=len(message),
        )
        if report:
            report(outcome)

        outcome.echo = sock.recv(config.tcp.buffer_size)
        logger.debug("Received %d byte echo from %s:%d", len(outcome.echo), target, port)
        sock.shutdown(socket.SHUT_RDWR)
        return outcome
    finally:
        sock.close()


def print_outcome(outcome: ProbeOutcome, color: bool = True) -> None:
    """Console report for a probe outcome."""
    logger.debug(
        "Probe %s:%d %s after %.3fs%s",
        outcome.target,
        outcome.port,
        outcome.status.value,
        outcome.elapsed,
        f" ({outcome.error})" if outcome.error else "",
    )
    if outcome.succeeded:
        emit(
            f"{outcome.timestamp} (outgoing) TCP connection established to "
            f"{outcome.target}:{outcome.port} [SUCCESS]",
            Level.SUCCESS,
            color,
        )
    else:
        emit(
            f"{outcome.timestamp} (outgoing) TCP connection to "
            f"{outcome.target} on port {outcome.port} [FAILED]",
            Level.FAILURE,
            color,
        )


def run_tcp_probe(
    host: str,
    port: int,
    timeout_ms: Optional[int] = None,
    config: Optional[NetcheckConfig] = None,
) -> ProbeOutcome:
    """Resolve ``host`` and probe it, reporting to the console."""
    config = config or NetcheckConfig()
    target = resolve_target(host, remap_loopback=True)

    def report(outcome: ProbeOutcome) -> None:
        print_outcome(outcome, config.output.color)

    return probe(target, port, timeout_ms, config, report=report)
