"""CLI support for the lines tool."""

from .config import FilterConfig, Mode, build_parser, parse_arguments
from .io import InputSource, open_compressed, write_lines

__all__ = [
    "FilterConfig",
    "Mode",
    "build_parser",
    "parse_arguments",
    "InputSource",
    "open_compressed",
    "write_lines",
]
