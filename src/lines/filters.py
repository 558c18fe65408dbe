"""Streaming line selectors.

Every selector takes an iterable of ``bytes`` lines, each still carrying its
terminator, and yields the selected lines unchanged. Nothing is re-encoded, so
output is byte-identical to the input, including a final line with no newline.
"""

import logging
from collections import deque
from collections.abc import Iterable, Iterator

from lines.parser.line_ranges import LineRanges

logger = logging.getLogger(__name__)


def select_ranges(lines: Iterable[bytes], ranges: LineRanges) -> Iterator[bytes]:
    """Yield the lines whose 1-based number falls inside at least one range.

    Walks the merged ranges alongside the line counter, so each line costs a
    constant-time check. When every range is closed, stops right after the
    last selectable line without reading further input.
    """
    if ranges.is_all():
        yield from lines
        return

    merged = ranges.merged()
    last_line = ranges.last_line
    index = 0
    current = merged[0]

    for line_number, line in enumerate(lines, start=1):
        while current.end is not None and line_number > current.end:
            index += 1
            current = merged[index]

        if line_number >= current.first:
            yield line

        if line_number == last_line:
            logger.debug("Reached final selected line %d; stopping early", last_line)
            return


def top(lines: Iterable[bytes], count: int) -> Iterator[bytes]:
    """Yield the initial count lines, like ``head -n count``."""
    if count < 1:
        raise ValueError(f"cannot print the initial {count} lines.")

    for line_number, line in enumerate(lines, start=1):
        yield line
        if line_number == count:
            return


def bottom(lines: Iterable[bytes], count: int) -> Iterator[bytes]:
    """Yield the final count lines, like ``tail -n count``.

    Holds at most count lines in memory.
    """
    if count < 1:
        raise ValueError(f"cannot print the final {count} lines.")

    yield from deque(lines, maxlen=count)


def skip(lines: Iterable[bytes], initial: int = 0, final: int = 0) -> Iterator[bytes]:
    """Yield every line except the initial and final ones.

    Handy for removing a multiline header or footer. A line is only released
    once ``final`` newer lines have been seen, so at most ``final`` lines are
    held back at any time.
    """
    if initial < 0 or final < 0:
        raise ValueError("cannot skip a negative number of lines.")

    held: deque[bytes] = deque()
    for line_number, line in enumerate(lines, start=1):
        if line_number <= initial:
            continue
        held.append(line)
        if len(held) > final:
            yield held.popleft()
