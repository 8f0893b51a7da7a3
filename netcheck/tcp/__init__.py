"""TCP echo listener and probe client."""

from .listener import TcpEchoServer, open_tcp_listener, run_tcp_listener
from .client import probe, print_outcome, run_tcp_probe

__all__ = [
    "TcpEchoServer",
    "open_tcp_listener",
    "run_tcp_listener",
    "probe",
    "print_outcome",
    "run_tcp_probe",
]
