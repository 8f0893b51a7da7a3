"""Outcome of a TCP probe."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProbeStatus(Enum):
    """How a connect attempt ended."""
    CONNECTED = "connected"
    TIMED_OUT = "timed_out"
    REFUSED = "refused"


@dataclass
class ConnectAttempt:
    """A single outstanding non-blocking connect."""
    target: str
    port: int
    timeout_ms: int
    completed: bool = False


@dataclass
class ProbeOutcome:
    """Result of one probe invocation."""
    status: ProbeStatus
    target: str
    port: int
    timestamp: str
    elapsed: float = 0.0
    local_port: Optional[int] = None
    bytes_sent: int = 0
    echo: bytes = b""
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == ProbeStatus.CONNECTED
