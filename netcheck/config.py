"""Configuration management for netcheck."""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import os

import yaml

from .errors import ConfigError


@dataclass
class TcpConfig:
    """TCP listener and probe configuration."""
    buffer_size: int = 1024
    backlog: int = 10
    connect_timeout_ms: int = 700
    sentinel: str = "<EOF>"


@dataclass
class UdpConfig:
    """UDP listener configuration."""
    buffer_size: int = 65535


@dataclass
class OutputConfig:
    """Console output configuration."""
    timestamp_format: str = "%m/%d/%Y %H:%M:%S"
    color: bool = True


@dataclass
class NetcheckConfig:
    """Main configuration container."""
    tcp: TcpConfig = field(default_factory=TcpConfig)
    udp: UdpConfig = field(default_factory=UdpConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetcheckConfig":
        """Create config from dictionary."""
        config = cls()

        if "tcp" in data:
            tcp = data["tcp"] or {}
            config.tcp = TcpConfig(
                buffer_size=int(tcp.get("buffer_size", 1024)),
                backlog=int(tcp.get("backlog", 10)),
                connect_timeout_ms=int(tcp.get("connect_timeout_ms", 700)),
                sentinel=str(tcp.get("sentinel", "<EOF>")),
            )

        if "udp" in data:
            udp = data["udp"] or {}
            config.udp = UdpConfig(
                buffer_size=int(udp.get("buffer_size", 65535)),
            )

        if "output" in data:
            out = data["output"] or {}
            config.output = OutputConfig(
                timestamp_format=str(out.get("timestamp_format", "%m/%d/%Y %H:%M:%S")),
                color=bool(out.get("color", True)),
            )

        config._validate()
        return config

    def _validate(self) -> None:
        """Reject sizes and timeouts that cannot work."""
        for name, value in (
            ("tcp.buffer_size", self.tcp.buffer_size),
            ("tcp.backlog", self.tcp.backlog),
            ("tcp.connect_timeout_ms", self.tcp.connect_timeout_ms),
            ("udp.buffer_size", self.udp.buffer_size),
        ):
            if value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value}")

    @classmethod
    def from_yaml(cls, path: str) -> "NetcheckConfig":
        """Load config from YAML file."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot load {path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level")

        try:
            return cls.from_dict(data or {})
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"invalid value in {path}: {e}") from e

    @classmethod
    def load(cls, path: Optional[str] = None) -> "NetcheckConfig":
        """Load config from file or use defaults."""
        if path and not os.path.exists(path):
            raise ConfigError(f"config file not found: {path}")

        # Search paths
        search_paths = [
            path,
            "netcheck.yaml",
            "netcheck.yml",
            os.path.expanduser("~/.config/netcheck/config.yaml"),
            "/etc/netcheck/config.yaml",
        ]

        for config_path in search_paths:
            if config_path and os.path.exists(config_path):
                return cls.from_yaml(config_path)

        # Return defaults
        return cls()
