from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lines.errors import InvalidRangeError


class LineRange(BaseModel):
    """A 1-indexed inclusive line range selection.

    Either bound may be None to indicate from start or to end respectively.
    """

    model_config = ConfigDict(frozen=True)

    start: int | None
    end: int | None

    @model_validator(mode="after")
    def _check_bounds(self) -> LineRange:
        if self.start is not None and self.start < 1:
            raise ValueError(f"Line number must be >= 1, got {self.start}")
        if self.end is not None and self.end < 1:
            raise ValueError(f"Line number must be >= 1, got {self.end}")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(
                f"Start line ({self.start}) cannot be greater than end line "
                f"({self.end})"
            )
        return self

    @property
    def first(self) -> int:
        """The first line selected, treating an open start as line 1."""
        return self.start if self.start is not None else 1

    def contains(self, line_number: int) -> bool:
        if line_number < self.first:
            return False
        return self.end is None or line_number <= self.end

    def __str__(self) -> str:
        # Single line
        if self.start is not None and self.end is not None and self.start == self.end:
            return str(self.start)
        # Open start
        if self.start is None and self.end is not None:
            return f"-{self.end}"
        # Open end
        if self.start is not None and self.end is None:
            return f"{self.start}-"
        if self.start is not None and self.end is not None:
            return f"{self.start}-{self.end}"
        return "-"


class LineRanges(BaseModel):
    """Collection of LineRange selections.

    An empty collection selects every line. Ranges may overlap and need not be
    given in order; `merged` provides the sorted, coalesced view used when
    streaming.
    """

    model_config = ConfigDict(frozen=True)

    ranges: tuple[LineRange, ...] = Field(default_factory=tuple)

    def __str__(self) -> str:
        if not self.ranges:
            return "all"
        return ",".join(str(r) for r in self.ranges)

    @classmethod
    def all(cls) -> LineRanges:
        """Return a LineRanges instance representing all lines."""
        return cls()

    def is_all(self) -> bool:
        return not self.ranges

    def contains(self, line_number: int) -> bool:
        """Return True if line_number is selected by at least one range."""
        if not self.ranges:
            return True
        return any(r.contains(line_number) for r in self.ranges)

    def merged(self) -> tuple[LineRange, ...]:
        """Return the ranges sorted by start with overlapping and adjacent
        ranges joined.

        Every returned range has an explicit start. Only the last one can be
        open-ended.
        """
        result: list[LineRange] = []
        for rng in sorted(self.ranges, key=lambda r: r.first):
            if result:
                prev = result[-1]
                if prev.end is None:
                    break
                if rng.first <= prev.end + 1:
                    end = None if rng.end is None else max(prev.end, rng.end)
                    result[-1] = LineRange(start=prev.first, end=end)
                    continue
            result.append(LineRange(start=rng.first, end=rng.end))
        return tuple(result)

    @property
    def last_line(self) -> int | None:
        """The highest line number any range selects.

        None when there are no ranges or at least one range is open-ended,
        meaning the whole input must be read.
        """
        if not self.ranges or any(r.end is None for r in self.ranges):
            return None
        return max(r.end for r in self.ranges if r.end is not None)


def _parse_line_number(text: str, what: str) -> int:
    """Parse one bound of a range, rejecting signs, underscores and non-ASCII
    digits that int() would otherwise accept."""
    if not (text.isascii() and text.isdigit()):
        raise InvalidRangeError(f"Invalid {what}: '{text}'")
    value = int(text)
    if value < 1:
        raise InvalidRangeError(f"Line number must be >= 1, got {value}")
    return value


def parse_line_range(range_str: str) -> tuple[int | None, int | None]:
    """Parse a line range string into start and end line numbers.

    Supported formats:
    - "5": Single line (returns 5, 5)
    - "5-10": Lines 5 through 10 (returns 5, 10)
    - "10-": From line 10 to end of input (returns 10, None)
    - "-5": From the first line to line 5 (returns None, 5)

    Args:
        range_str: The line range string to parse.

    Returns:
        A tuple of (start_line, end_line), where None indicates an unbounded
        side.

    Raises:
        InvalidRangeError: If the format is invalid or contains invalid numbers.
    """
    range_str = range_str.strip()
    if not range_str:
        raise InvalidRangeError("Line range cannot be empty")

    if "-" not in range_str:
        line = _parse_line_number(range_str, "line number")
        return line, line

    start_str, end_str = (part.strip() for part in range_str.split("-", 1))

    if not start_str and not end_str:
        raise InvalidRangeError(
            "Invalid line range: '-'. At least one line number required."
        )

    # "-5": first line through line 5
    if not start_str:
        return None, _parse_line_number(end_str, "end line number")

    # "10-": line 10 through end of input
    if not end_str:
        return _parse_line_number(start_str, "start line number"), None

    start_line = _parse_line_number(start_str, "start line number")
    end_line = _parse_line_number(end_str, "end line number")
    if start_line > end_line:
        raise InvalidRangeError(
            f"Start line ({start_line}) cannot be greater than end line "
            f"({end_line})"
        )
    return start_line, end_line


def parse_line_ranges(ranges_str: str) -> LineRanges:
    """Parse a comma-separated set of line range segments into LineRanges."""
    if ranges_str.strip() == "all":
        return LineRanges.all()

    segments = [seg.strip() for seg in ranges_str.split(",") if seg.strip()]
    if not segments:
        raise InvalidRangeError(f"Invalid line range: {ranges_str!r}")

    ranges: list[LineRange] = []
    for seg in segments:
        start, end = parse_line_range(seg)
        ranges.append(LineRange(start=start, end=end))
    return LineRanges(ranges=tuple(ranges))


def combine_line_ranges(values: list[str]) -> LineRanges:
    """Parse every --range value and combine them, preserving order.

    An "all" value anywhere selects every line.
    """
    ranges: list[LineRange] = []
    for value in values:
        parsed = parse_line_ranges(value)
        if parsed.is_all():
            return LineRanges.all()
        ranges.extend(parsed.ranges)
    return LineRanges(ranges=tuple(ranges))
