"""CLI configuration and argument parsing."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from lines import __version__
from lines.cli.io import InputSource
from lines.errors import UsageError
from lines.parser import LineRanges, combine_line_ranges

DESCRIPTION = "Print a range of lines from standard input or one or more files."

EPILOG = """\
Without file arguments, reads from standard input and writes to standard
output. With file arguments, reads each file in sequence. Files ending in .gz
or .bz2 are decompressed; '-' names standard input.

By default the files are treated as one stream and line numbers keep counting
from one file to the next. With --per-file, numbering restarts and the
selection is applied to each file independently.

examples:
  lines < sample.txt
  lines sample.txt --range 4-7
  lines sample.txt --range -3
  lines sample.txt --range 7-
  lines sample.txt --range 3 --range 10-12
  lines sample.txt --range 1-2,9
  lines sample.txt --range -3,9
  lines sample.txt --skip-top 3 --skip-bottom 2
  lines sample.txt --top 3
  lines sample.txt --bottom 3
"""


class Mode(Enum):
    """Which selection is applied to the input."""

    RANGES = "ranges"
    TOP = "top"
    BOTTOM = "bottom"
    SKIP = "skip"


@dataclass
class FilterConfig:
    """Configuration for one filtering run."""

    source: InputSource
    mode: Mode = Mode.RANGES
    ranges: LineRanges = field(default_factory=LineRanges.all)
    count: int = 0
    skip_top: int = 0
    skip_bottom: int = 0

    # Error policy
    per_file: bool = False
    force: bool = False
    quiet: bool = False
    verbose: bool = False
    log_level: str | None = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> FilterConfig:
        """Create config from parsed arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            FilterConfig instance

        Raises:
            UsageError: If options from different modes are combined
            InvalidRangeError: If a --range value cannot be parsed
        """
        if args.quiet:
            if args.force:
                raise UsageError("cannot use both --quiet and --force")
            if args.verbose:
                raise UsageError("cannot use both --quiet and --verbose")

        config = cls(
            source=InputSource.from_args(args.files),
            per_file=args.per_file,
            force=args.force,
            quiet=args.quiet,
            verbose=args.verbose,
            log_level=args.log_level,
        )

        if args.top:
            if args.bottom:
                raise UsageError("cannot print only the top, and only the bottom.")
            if args.range:
                raise UsageError("cannot print only the top, and only a range.")
            if args.skip_bottom:
                raise UsageError("cannot print only the top, and skip the bottom.")
            if args.skip_top:
                raise UsageError("cannot print only the top, and skip the top.")
            config.mode = Mode.TOP
            config.count = args.top
            return config

        if args.bottom:
            if args.range:
                raise UsageError("cannot print only the bottom, and only a range.")
            if args.skip_bottom:
                raise UsageError("cannot print only the bottom, and skip the bottom.")
            if args.skip_top:
                raise UsageError("cannot print only the bottom, and skip the top.")
            config.mode = Mode.BOTTOM
            config.count = args.bottom
            return config

        if args.range:
            if args.skip_bottom:
                raise UsageError("cannot print only a range, and skip the bottom.")
            if args.skip_top:
                raise UsageError("cannot print only a range, and skip the top.")
            config.ranges = combine_line_ranges(args.range)
            return config

        if args.skip_top or args.skip_bottom:
            config.mode = Mode.SKIP
            config.skip_top = args.skip_top
            config.skip_bottom = args.skip_bottom

        return config


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"count must be >= 1, got {number}")
    return number


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"count must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lines",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Files to read, in order (default: standard input).",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    # Selection options group
    select_group = parser.add_argument_group("selection options")
    select_group.add_argument(
        "-r",
        "--range",
        action="append",
        metavar="SPEC",
        help=(
            "Only print the selected lines (1-indexed, inclusive). Accepts "
            "'N', 'M-N', 'M-' (from M to end), '-N' (from 1 to N), or a "
            "comma-separated list such as '1-3,10'. May be repeated."
        ),
    )
    select_group.add_argument(
        "-t",
        "--top",
        type=_positive_int,
        metavar="N",
        help="Only print the initial N lines.",
    )
    select_group.add_argument(
        "-b",
        "--bottom",
        type=_positive_int,
        metavar="N",
        help="Only print the final N lines.",
    )
    select_group.add_argument(
        "--skip-top",
        type=_non_negative_int,
        default=0,
        metavar="N",
        help="Skip printing the initial N header lines.",
    )
    select_group.add_argument(
        "--skip-bottom",
        type=_non_negative_int,
        default=0,
        metavar="N",
        help="Skip printing the final N footer lines.",
    )
    select_group.add_argument(
        "--per-file",
        action="store_true",
        help="Restart line numbering and apply the selection to each file.",
    )

    # Error and logging options group
    error_group = parser.add_argument_group("error options")
    error_group.add_argument(
        "--force",
        action="store_true",
        help="Print error messages for unreadable files but continue processing.",
    )
    error_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print intermediate errors to stderr.",
    )
    error_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print verbose output to stderr.",
    )
    error_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level explicitly (overrides --quiet and --verbose).",
    )

    return parser


def _attach_range_values(argv: Sequence[str]) -> list[str]:
    """Join each separate --range/-r value onto its option.

    argparse only accepts a value starting with '-' when it looks like a
    negative number, so '--range -3,9' would otherwise be rejected.
    """
    result: list[str] = []
    args = iter(argv)
    for arg in args:
        if arg == "--":
            result.append(arg)
            result.extend(args)
            break
        if arg in ("-r", "--range"):
            value = next(args, None)
            if value is not None:
                arg = f"--range={value}"
        result.append(arg)
    return result


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and return command-line arguments.

    Args:
        argv: Arguments to parse; defaults to sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    if argv is None:
        argv = sys.argv[1:]
    return build_parser().parse_intermixed_args(_attach_range_values(argv))
