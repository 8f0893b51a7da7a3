"""Error types raised by the netcheck tools."""

import errno


class NetcheckError(Exception):
    """Base class for every error a tool reports on the console."""


class MissingArgument(NetcheckError):
    """A required command line argument was not supplied."""

    def __init__(self, usage: str):
        self.usage = usage
        super().__init__(f"Missing command line parameters:  {usage}")


class InvalidFormat(NetcheckError):
    """An argument was present but could not be parsed."""

    def __init__(self, usage: str, detail: str = "", tool: str = None):
        self.usage = usage
        self.detail = detail
        self.tool = tool
        super().__init__(f"Please check your command line parameters:  {usage}")


class PortInUse(NetcheckError):
    """Binding failed because the port is taken or needs elevated rights."""

    def __init__(self, protocol: str, port: int, code: int = 0):
        self.protocol = protocol
        self.port = port
        self.code = code
        super().__init__(f"Socket already in use by another {protocol} service.")


class NameResolutionFailure(NetcheckError):
    """A host name did not resolve to any IPv4 address."""

    def __init__(self, host: str, reason: str = ""):
        self.host = host
        message = f"No IPv4 address found for host {host!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ConfigError(NetcheckError):
    """The configuration file could not be read or parsed."""


# errno values from bind() that mean the port is taken or privileged
PORT_IN_USE_ERRNOS = (errno.EADDRINUSE, errno.EACCES, errno.EPERM)
