"""Console presentation and debug logging setup."""

import logging
from enum import Enum

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text


class Level(Enum):
    """Console line categories."""
    INFO = "info"
    STATUS = "status"
    SUCCESS = "success"
    NOTICE = "notice"
    WARNING = "warning"
    FAILURE = "failure"


LEVEL_STYLES = {
    Level.INFO: "",
    Level.STATUS: "cyan",
    Level.SUCCESS: "green",
    Level.NOTICE: "blue",
    Level.WARNING: "yellow",
    Level.FAILURE: "red",
}

console = Console(highlight=False, soft_wrap=True)


def render(message: str, level: Level = Level.INFO, color: bool = True) -> Text:
    """Build the styled text for a console line."""
    style = LEVEL_STYLES[level] if color else ""
    return Text(message, style=style)


def emit(message: str, level: Level = Level.INFO, color: bool = True) -> None:
    """Print a line preceded by a blank separator line."""
    console.print("", render(message, level, color), sep="\n")


def configure_logging(verbose: bool = False) -> None:
    """Route debug logging through Rich on stderr."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
