"""Main CLI entry point for the lines tool."""

import argparse
import logging
import os
import sys
from collections.abc import Iterable, Iterator
from typing import BinaryIO

from lines import filters
from lines.cli import FilterConfig, Mode, parse_arguments, write_lines
from lines.errors import (
    FileAccessError,
    InvalidRangeError,
    OutputWriteError,
    UsageError,
)

logger = logging.getLogger(__name__)


def _setup_logging(log_level: str) -> None:
    """Configure logging based on level.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _resolve_log_level(args: argparse.Namespace) -> str:
    if args.log_level:
        return args.log_level
    if args.quiet:
        return "ERROR"
    if args.verbose:
        return "INFO"
    return "WARNING"


def _redirect_stdout_to_devnull() -> None:
    """Point stdout at os.devnull so flushing it at exit cannot fail again."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())
    os.close(devnull)


def _warn_and_continue(err: FileAccessError) -> None:
    logger.warning("%s", err)


def apply_selection(config: FilterConfig, lines: Iterable[bytes]) -> Iterator[bytes]:
    """Wrap lines in the selector chosen by config."""
    if config.mode is Mode.TOP:
        return filters.top(lines, config.count)
    if config.mode is Mode.BOTTOM:
        return filters.bottom(lines, config.count)
    if config.mode is Mode.SKIP:
        return filters.skip(lines, config.skip_top, config.skip_bottom)
    return filters.select_ranges(lines, config.ranges)


def run(config: FilterConfig, out: BinaryIO) -> int:
    """Filter every input of config into out.

    Args:
        config: Filtering configuration
        out: Binary stream receiving the selected lines

    Returns:
        Exit code (0 for success, 1 when an input could not be read)

    Raises:
        OutputWriteError: If out cannot be written
    """
    on_error = _warn_and_continue if config.force else None

    try:
        if config.per_file:
            for name, lines in config.source.each(on_error):
                count = write_lines(apply_selection(config, lines), out)
                logger.info("Printed %d line(s) from %s", count, name)
        else:
            count = write_lines(
                apply_selection(config, config.source.lines(on_error)), out
            )
            logger.info("Printed %d line(s)", count)
    except FileAccessError as e:
        logger.error("%s", e)
        return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the lines CLI.

    Returns:
        Exit code: 0 for success, 1 on an I/O error, 2 on invalid arguments.
    """
    args = parse_arguments(argv)
    _setup_logging(_resolve_log_level(args))

    try:
        config = FilterConfig.from_args(args)
    except (UsageError, InvalidRangeError) as e:
        logger.error("%s", e)
        print("Use `lines --help` for more information.", file=sys.stderr)
        return 2

    logger.info(
        "Processing: %s (mode: %s, lines: %s)",
        ", ".join(config.source.names()),
        config.mode.value,
        config.ranges,
    )

    try:
        return run(config, sys.stdout.buffer)
    except OutputWriteError as e:
        if e.broken_pipe:
            logger.debug("Output closed early; stopping")
            _redirect_stdout_to_devnull()
            return 0
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
