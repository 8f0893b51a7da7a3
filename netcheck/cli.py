"""Command-line entry points for the netcheck tools."""

import argparse
import logging
from typing import Callable, Dict, List, Optional

from rich.table import Table
from rich.text import Text
from rich import box

from . import __version__
from . import output
from .config import NetcheckConfig
from .errors import (
    ConfigError,
    InvalidFormat,
    MissingArgument,
    NameResolutionFailure,
    NetcheckError,
    PortInUse,
)
from .net.interface_manager import InterfaceManager
from .output import Level, configure_logging, emit
from .tcp.client import run_tcp_probe
from .tcp.listener import run_tcp_listener
from .udp.listener import run_udp_listener
from .udp.sender import run_udp_sender

logger = logging.getLogger(__name__)

USAGE = {
    "tcplisten": "tcplisten <port number>",
    "tcpsend": "tcpsend <Hostname or IP Address> <port>",
    "udplisten": "udplisten <port number>",
    "udpsend": "udpsend <Hostname or IP Address> <port>",
}

LISTENERS = ("tcplisten", "udplisten")


class ToolParser(argparse.ArgumentParser):
    """ArgumentParser that raises InvalidFormat instead of exiting with status 2."""

    def __init__(self, *args, tool: Optional[str] = None, **kwargs):
        self.tool = tool
        super().__init__(*args, **kwargs)

    def error(self, message: str):
        usage = USAGE.get(self.tool, self.format_usage().strip())
        raise InvalidFormat(usage, message, tool=self.tool)


def port_number(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {number}")
    return number


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", help="Path to configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")


def _add_listen_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("port", nargs="?", type=port_number, help="Port to listen on")
    _add_common(parser)


def _add_send_arguments(parser: argparse.ArgumentParser, timeout: bool = False) -> None:
    parser.add_argument("host", nargs="?", help="Destination host name or IPv4 address")
    parser.add_argument("port", nargs="?", type=port_number, help="Destination port")
    if timeout:
        parser.add_argument(
            "-t", "--timeout",
            type=positive_int,
            help="Connect timeout in milliseconds (default: 700)",
        )
    _add_common(parser)


def _build_tool_parser(tool: str) -> ToolParser:
    descriptions = {
        "tcplisten": "Echo every TCP connection received on a port.",
        "tcpsend": "Open a TCP connection to a listener and report the result.",
        "udplisten": "Print every UDP datagram received on a port.",
        "udpsend": "Send a single UDP datagram to a host.",
    }
    parser = ToolParser(prog=tool, description=descriptions[tool], tool=tool)
    if tool in LISTENERS:
        _add_listen_arguments(parser)
    else:
        _add_send_arguments(parser, timeout=(tool == "tcpsend"))
    return parser


def _require(tool: str, *values) -> None:
    for value in values:
        if value is None:
            raise MissingArgument(USAGE[tool])


def run_tcplisten(args, config: NetcheckConfig) -> None:
    _require("tcplisten", args.port)
    run_tcp_listener(args.port, config=config)


def run_tcpsend(args, config: NetcheckConfig) -> None:
    _require("tcpsend", args.host, args.port)
    run_tcp_probe(args.host, args.port, timeout_ms=args.timeout, config=config)


def run_udplisten(args, config: NetcheckConfig) -> None:
    _require("udplisten", args.port)
    run_udp_listener(args.port, config=config)


def run_udpsend(args, config: NetcheckConfig) -> None:
    _require("udpsend", args.host, args.port)
    run_udp_sender(args.host, args.port, config=config)


HANDLERS: Dict[str, Callable] = {
    "tcplisten": run_tcplisten,
    "tcpsend": run_tcpsend,
    "udplisten": run_udplisten,
    "udpsend": run_udpsend,
}


def error_message(tool: str, error: Exception) -> str:
    """Console text for an error caught at a tool's top level."""
    usage = USAGE[tool]

    if isinstance(error, MissingArgument):
        return f"Missing command line parameters:  {usage}"
    if isinstance(error, InvalidFormat):
        if tool in LISTENERS:
            return f"Please check your command line parameters:  {usage}"
        return f"Format error:  {usage}"
    if isinstance(error, PortInUse):
        return str(error)
    if isinstance(error, ConfigError):
        return f"Configuration error: {error}"
    if isinstance(error, NameResolutionFailure):
        return f"An error occurred:  {error}"
    if tool in LISTENERS:
        return f"Unknown error: {error}"
    return f"An error occurred:  {error}"


def run_tool(tool: str, args) -> int:
    """Run a parsed tool invocation, reporting every error on the console."""
    configure_logging(getattr(args, "verbose", False))
    color = not getattr(args, "no_color", False)

    try:
        config = NetcheckConfig.load(args.config)
        if not color:
            config.output.color = False
        color = config.output.color
        HANDLERS[tool](args, config)
    except NetcheckError as e:
        emit(error_message(tool, e), Level.WARNING, color)
    except KeyboardInterrupt:
        emit("Exiting.", Level.STATUS, color)
    except Exception as e:
        logger.debug("Unhandled error in %s", tool, exc_info=True)
        emit(error_message(tool, e), Level.WARNING, color)
    return 0


def run_single(tool: str, argv: Optional[List[str]] = None) -> int:
    parser = _build_tool_parser(tool)
    try:
        args = parser.parse_args(argv)
    except InvalidFormat as e:
        emit(error_message(tool, e), Level.WARNING)
        return 0
    return run_tool(tool, args)


def tcplisten_main(argv: Optional[List[str]] = None) -> int:
    return run_single("tcplisten", argv)


def tcpsend_main(argv: Optional[List[str]] = None) -> int:
    return run_single("tcpsend", argv)


def udplisten_main(argv: Optional[List[str]] = None) -> int:
    return run_single("udplisten", argv)


def udpsend_main(argv: Optional[List[str]] = None) -> int:
    return run_single("udpsend", argv)


def list_interfaces() -> None:
    """List network interfaces and mark the one the tools report."""
    mgr = InterfaceManager()
    selected, address = mgr.select()

    table = Table(title="Network Interfaces", box=box.ROUNDED)
    table.add_column("Interface", style="bold cyan")
    table.add_column("IPv4 Address")
    table.add_column("MAC Address")
    table.add_column("Status")
    table.add_column("Local", justify="center")

    for info in mgr.get_all():
        status = "UP" if info.is_up else "DOWN"
        if info.is_loopback:
            status += " (loopback)"
        status_style = "green" if info.is_up else "red"
        marker = "*" if selected is not None and info.name == selected.name else ""

        table.add_row(
            info.name,
            info.ipv4_address or "N/A",
            info.mac_address or "N/A",
            Text(status, style=status_style),
            marker,
        )

    output.console.print(table)
    output.console.print(f"Local address: [bold]{address}[/bold]")


def main(argv: Optional[List[str]] = None) -> int:
    """Umbrella entry point: ``netcheck <tool> ...``."""
    parser = ToolParser(
        prog="netcheck",
        description="TCP/UDP connectivity diagnostic tools.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", parser_class=ToolParser, help="Commands")

    subparsers.add_parser("interfaces", help="List network interfaces and the local address")
    _add_listen_arguments(subparsers.add_parser("tcplisten", help="Run the TCP echo listener", tool="tcplisten"))
    _add_send_arguments(subparsers.add_parser("tcpsend", help="Probe a TCP listener", tool="tcpsend"), timeout=True)
    _add_listen_arguments(subparsers.add_parser("udplisten", help="Run the UDP listener", tool="udplisten"))
    _add_send_arguments(subparsers.add_parser("udpsend", help="Send one UDP datagram", tool="udpsend"))

    try:
        args = parser.parse_args(argv)
    except InvalidFormat as e:
        emit(error_message(e.tool, e) if e.tool else f"{e} ({e.detail})", Level.WARNING)
        return 0

    if args.command == "interfaces":
        list_interfaces()
    elif args.command in HANDLERS:
        return run_tool(args.command, args)
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
