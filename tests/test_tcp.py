from __future__ import annotations

import errno
import logging
import socket
import struct
import time

import pytest

from netcheck.config import NetcheckConfig
from netcheck.errors import PortInUse
from netcheck.models.message import build_handshake
from netcheck.models.probe import ProbeOutcome, ProbeStatus
from netcheck.tcp import client
from netcheck.tcp.client import print_outcome, probe
from netcheck.tcp.listener import open_tcp_listener

LOOPBACK = "127.0.0.1"


def test_probe_round_trip(echo_server, capsys) -> None:
    outcome = probe(LOOPBACK, echo_server.port)

    assert outcome.status == ProbeStatus.CONNECTED
    assert outcome.succeeded
    assert outcome.local_port
    # the listener echoes the handshake verbatim, sentinel included
    assert outcome.echo == build_handshake(LOOPBACK, outcome.local_port)
    assert outcome.echo.endswith(b"<EOF>")
    assert outcome.bytes_sent == len(outcome.echo)

    out = capsys.readouterr().out
    assert f"(incoming) TCP connection established from {LOOPBACK}:{outcome.local_port}" in out
    assert "<EOF>" not in out


def test_listener_strips_sentinel_characters_from_display_only(echo_server, capsys) -> None:
    payload = b"HELLO <EOF> from OFFICE"
    with socket.create_connection((LOOPBACK, echo_server.port), timeout=2) as s:
        s.sendall(payload)
        echoed = s.recv(1024)

    assert echoed == payload
    out = capsys.readouterr().out
    assert "HLL  from IC" in out


def test_repeated_probes_each_get_their_own_echo(echo_server) -> None:
    outcomes = [probe(LOOPBACK, echo_server.port) for _ in range(5)]
    ports = {o.local_port for o in outcomes}

    assert all(o.succeeded for o in outcomes)
    assert len(ports) == 5
    for o in outcomes:
        assert o.echo == build_handshake(LOOPBACK, o.local_port)


def test_second_bind_reports_port_in_use(echo_server) -> None:
    with pytest.raises(PortInUse) as excinfo:
        open_tcp_listener(echo_server.port, host=LOOPBACK)

    assert excinfo.value.port == echo_server.port
    assert excinfo.value.code == errno.EADDRINUSE
    assert str(excinfo.value) == "Socket already in use by another TCP service."


def test_listener_defaults_to_resolved_local_address(local_address) -> None:
    server = open_tcp_listener(0)
    try:
        assert server.host == local_address
        assert server.request_queue_size == 10
    finally:
        server.server_close()


def test_probe_closed_port_fails_fast(local_address, closed_port) -> None:
    reports = []
    started = time.monotonic()
    outcome = probe(LOOPBACK, closed_port, report=reports.append)

    assert time.monotonic() - started < 0.7 + 0.5
    assert outcome.status == ProbeStatus.REFUSED
    assert not outcome.succeeded
    assert reports == [outcome]


class _PendingSocket(socket.socket):
    """A socket whose connect never leaves the in-progress state."""

    def connect_ex(self, address):
        return errno.EINPROGRESS


@pytest.fixture
def pending_connect(monkeypatch):
    """Make every connect hang until the wait gives up; returns the waits seen."""
    waits = []

    def fake_select(rlist, wlist, xlist, timeout):
        waits.append(timeout)
        time.sleep(timeout)
        return [], [], []

    monkeypatch.setattr(socket, "socket", _PendingSocket)
    monkeypatch.setattr(client.select, "select", fake_select)
    return waits


def test_probe_gives_up_after_timeout(local_address, pending_connect) -> None:
    reports = []
    started = time.monotonic()
    outcome = probe("192.0.2.1", 9, timeout_ms=300, report=reports.append)
    elapsed = time.monotonic() - started

    assert outcome.status == ProbeStatus.TIMED_OUT
    assert not outcome.succeeded
    assert pending_connect == [0.3]
    assert 0.3 <= elapsed < 0.3 + 1.0
    assert reports == [outcome]


def test_probe_uses_configured_timeout(local_address, pending_connect) -> None:
    config = NetcheckConfig()
    config.tcp.connect_timeout_ms = 150

    outcome = probe("192.0.2.1", 9, config=config)

    assert pending_connect == [0.15]
    assert outcome.status == ProbeStatus.TIMED_OUT


def test_probe_default_timeout_is_700ms(local_address, pending_connect, monkeypatch) -> None:
    monkeypatch.setattr(client.time, "sleep", lambda seconds: None)
    outcome = probe("192.0.2.1", 9)

    assert pending_connect == [0.7]
    assert outcome.status == ProbeStatus.TIMED_OUT


def test_silent_connection_does_not_block_other_clients(echo_server) -> None:
    with socket.create_connection((LOOPBACK, echo_server.port), timeout=2):
        started = time.monotonic()
        outcome = probe(LOOPBACK, echo_server.port)
        elapsed = time.monotonic() - started

    assert outcome.succeeded
    assert elapsed < 1.0


def test_listener_reads_a_single_buffer(echo_server, capsys) -> None:
    payload = b"x" * 3000
    echoed = b""
    with socket.create_connection((LOOPBACK, echo_server.port), timeout=2) as s:
        s.sendall(payload)
        try:
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                echoed += chunk
        except ConnectionResetError:
            # the listener closes with the rest of the payload unread
            pass

    assert len(echoed) == 1024
    assert echoed == payload[:1024]
    assert capsys.readouterr().out.count("x") == 1024


def test_reset_connection_does_not_stop_the_listener(echo_server) -> None:
    s = socket.create_connection((LOOPBACK, echo_server.port), timeout=2)
    s.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
    s.close()

    outcome = probe(LOOPBACK, echo_server.port)

    assert outcome.succeeded
    assert outcome.echo == build_handshake(LOOPBACK, outcome.local_port)


def test_print_outcome_logs_elapsed_and_error(caplog, capsys) -> None:
    caplog.set_level(logging.DEBUG, logger="netcheck.tcp.client")
    outcome = ProbeOutcome(
        status=ProbeStatus.REFUSED,
        target=LOOPBACK,
        port=9,
        timestamp="01/02/2024 03:04:05",
        elapsed=0.25,
        error="Connection refused",
    )

    print_outcome(outcome, color=False)

    assert "Probe 127.0.0.1:9 refused after 0.250s (Connection refused)" in caplog.text
    assert "01/02/2024 03:04:05 (outgoing) TCP connection to 127.0.0.1 on port 9 [FAILED]" in capsys.readouterr().out
