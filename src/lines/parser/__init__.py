from .line_ranges import (
    LineRange,
    LineRanges,
    combine_line_ranges,
    parse_line_range,
    parse_line_ranges,
)

__all__ = [
    "LineRange",
    "LineRanges",
    "combine_line_ranges",
    "parse_line_range",
    "parse_line_ranges",
]
