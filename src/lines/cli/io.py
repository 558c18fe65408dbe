"""Input/Output operations for the lines tool."""

from __future__ import annotations

import bz2
import gzip
import itertools
import logging
import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from lines.errors import FileAccessError, OutputWriteError

logger = logging.getLogger(__name__)

STDIN_NAME = "-"

ErrorHandler = Callable[[FileAccessError], None]


def open_compressed(path: Path, mode: str = "rb", **kwargs):
    """Open a file, automatically detecting compression.

    Supports uncompressed files, gzip .gz, and bz2 .bz2 files.
    Works like the built-in open() but handles compressed files transparently.

    Args:
        path: Path to file (compressed or uncompressed)
        mode: File mode (e.g., 'rt', 'rb')
        **kwargs: Additional arguments passed to the opener (e.g., encoding)

    Returns:
        File handle (text or binary mode depending on mode parameter)
    """
    if path.suffix == ".bz2":
        return bz2.open(path, mode, **kwargs)
    elif path.suffix == ".gz":
        return gzip.open(path, mode, **kwargs)
    else:
        return open(path, mode, **kwargs)


def _describe(err: OSError | EOFError) -> str:
    if isinstance(err, OSError) and err.strerror:
        return err.strerror
    return str(err) or type(err).__name__


def _read_stream(name: str, stream: BinaryIO) -> Iterator[bytes]:
    try:
        yield from stream
    except (OSError, EOFError) as e:
        # EOFError comes from truncated gzip/bz2 data
        raise FileAccessError(name, _describe(e)) from e


def _read_file(path: Path) -> Iterator[bytes]:
    logger.debug("Opening %s", path)
    try:
        fh = open_compressed(path, "rb")
    except OSError as e:
        raise FileAccessError(path, _describe(e)) from e

    with fh:
        yield from _read_stream(str(path), fh)
    logger.debug("Closed %s", path)


@dataclass(frozen=True)
class InputSource:
    """Standard input or an ordered list of files to read lines from.

    Files are opened only when iteration reaches them and closed once they
    are exhausted. The name "-" stands for standard input.
    """

    files: tuple[str, ...] = ()

    @classmethod
    def from_args(cls, files: Iterable[str]) -> InputSource:
        # Raw strings are kept: Path("./-") would normalise to "-"
        return cls(files=tuple(files))

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(Path(f) for f in self.files)

    def is_stdin(self) -> bool:
        return not self.files

    def names(self) -> list[str]:
        if self.is_stdin():
            return [STDIN_NAME]
        return list(self.files)

    def each(
        self, on_error: ErrorHandler | None = None
    ) -> Iterator[tuple[str, Iterator[bytes]]]:
        """Yield (name, lines) for every input in order.

        Args:
            on_error: Called with the FileAccessError of an input that cannot
                be read, after which the next input is processed. When None,
                the error propagates to whoever is iterating the lines.
        """
        for name in self.names():
            yield name, self._guarded(name, on_error)

    def lines(self, on_error: ErrorHandler | None = None) -> Iterator[bytes]:
        """Yield the lines of every input as one concatenated stream."""
        return itertools.chain.from_iterable(
            lines for _, lines in self.each(on_error)
        )

    def _guarded(self, name: str, on_error: ErrorHandler | None) -> Iterator[bytes]:
        if name == STDIN_NAME:
            reader = _read_stream("<stdin>", sys.stdin.buffer)
        else:
            reader = _read_file(Path(name))

        try:
            yield from reader
        except FileAccessError as err:
            if on_error is None:
                raise
            on_error(err)


def write_lines(lines: Iterable[bytes], out: BinaryIO) -> int:
    """Write lines to out exactly as given and return how many were written.

    Raises:
        OutputWriteError: If out cannot be written, with broken_pipe set when
            the reading end has gone away.
    """
    count = 0
    try:
        for line in lines:
            out.write(line)
            count += 1
        out.flush()
    except BrokenPipeError as e:
        raise OutputWriteError("output pipe closed", broken_pipe=True) from e
    except OSError as e:
        raise OutputWriteError(f"cannot write output: {_describe(e)}") from e
    return count
