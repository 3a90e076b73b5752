"""
StubServer Errors

Exception hierarchy shared by the loader, the response pipeline and the CLI,
so every module raises and catches the same types.
"""

from typing import Optional


class StubServerError(Exception):
    """Base for all stub server errors."""


class ConfigError(StubServerError):
    """
    The stub-definition file cannot be read or does not have the expected shape.

    Raised while building the response table at startup. The CLI treats it
    as fatal.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class ResourceLoadError(StubServerError):
    """A header or body file named by a resolved route cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path!r}: {reason}")


class MalformedHeaderLine(StubServerError):  # noqa: N818
    """A line in a header-description file is not a sendable ``name: value`` header."""

    def __init__(self, line: str, line_number: int, reason: str = "missing ':' separator"):
        self.line = line
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed header line {line_number} ({reason}): {line!r}")


class StartupUsageError(StubServerError):
    """Mandatory command-line arguments are missing."""


class LogSinkError(StubServerError):
    """The log destination cannot be opened for append."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot open log file {path!r}: {reason}")
