from __future__ import annotations

import errno
import socket

import pytest

from netcheck.errors import PortInUse
from netcheck.udp.listener import UdpListener
from netcheck.udp.sender import run_udp_sender, send_datagram

LOOPBACK = "127.0.0.1"


@pytest.fixture
def udp_listener():
    with UdpListener(0, host=LOOPBACK) as listener:
        listener._sock.settimeout(2)
        yield listener


def test_sent_datagram_is_printed_once(udp_listener, local_address, capsys) -> None:
    send_datagram(LOOPBACK, udp_listener.port)
    data, sender = udp_listener.receive()

    assert data == b"UDP sent from 127.0.0.1"
    assert sender[0] == LOOPBACK

    out = capsys.readouterr().out
    assert out.count("UDP sent from 127.0.0.1") == 1
    assert f"Received UDP packet from {LOOPBACK}:{sender[1]} : UDP sent from 127.0.0.1" in out


def test_sender_resolves_localhost_and_reports(udp_listener, local_address, capsys) -> None:
    target = run_udp_sender("localhost", udp_listener.port)
    data, _ = udp_listener.receive()

    assert target == LOOPBACK
    assert data == b"UDP sent from 127.0.0.1"
    assert f"Message sent to {LOOPBACK} on port {udp_listener.port}" in capsys.readouterr().out


def test_banner_shows_local_address(udp_listener, local_address, capsys) -> None:
    udp_listener.print_banner()
    out = capsys.readouterr().out
    assert f"Host IP Address: {LOOPBACK} :: Listening for UDP on port {udp_listener.port}" in out


def test_bind_conflict_reports_port_in_use() -> None:
    taken = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        taken.bind((LOOPBACK, 0))
        port = taken.getsockname()[1]
        with pytest.raises(PortInUse) as excinfo:
            UdpListener(port, host=LOOPBACK)
        assert str(excinfo.value) == "Socket already in use by another UDP service."
        assert excinfo.value.code == errno.EADDRINUSE
    finally:
        taken.close()
