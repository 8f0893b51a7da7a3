from __future__ import annotations

import socket
import threading

import pytest

from netcheck.tcp.listener import open_tcp_listener

LOOPBACK = "127.0.0.1"

_RESOLVER_USERS = (
    "netcheck.net.resolver",
    "netcheck.tcp.client",
    "netcheck.tcp.listener",
    "netcheck.udp.listener",
    "netcheck.udp.sender",
)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    # keep a stray netcheck.yaml in the checkout from leaking into tests
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def local_address(monkeypatch) -> str:
    """Pin the resolved local address to loopback for every tool."""
    for module in _RESOLVER_USERS:
        monkeypatch.setattr(f"{module}.resolve_local_address", lambda: LOOPBACK)
    return LOOPBACK


@pytest.fixture
def echo_server(local_address):
    server = open_tcp_listener(0, host=LOOPBACK)
    t = threading.Thread(target=server.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True)
    t.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        t.join(timeout=2)


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind((LOOPBACK, 0))
    port = s.getsockname()[1]
    s.close()
    return port
