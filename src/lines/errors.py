"""Errors raised while parsing arguments and filtering lines."""

from __future__ import annotations

from pathlib import Path


class LinesError(Exception):
    """Base class for all errors raised by the lines tool."""


class InvalidRangeError(LinesError, ValueError):
    """Raised when a line range string cannot be parsed."""


class UsageError(LinesError):
    """Raised when command line options cannot be used together."""


class FileAccessError(LinesError):
    """Raised when an input file cannot be opened or read.

    The underlying OSError is chained as ``__cause__``.
    """

    def __init__(self, path: Path | str, message: str):
        super().__init__(f"cannot read {str(path)!r}: {message}")
        self.path = Path(path)


class OutputWriteError(LinesError):
    """Raised when selected lines cannot be written to the output."""

    def __init__(self, message: str, *, broken_pipe: bool = False):
        super().__init__(message)
        self.broken_pipe = broken_pipe
