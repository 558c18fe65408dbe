"""Print a range of lines from standard input or one or more files."""

__version__ = "0.1.0"
