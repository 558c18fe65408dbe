"""Tests for main.py using real temp files."""

import io
import logging
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from lines.cli import FilterConfig, InputSource, Mode
from lines.main import (
    _redirect_stdout_to_devnull,
    _resolve_log_level,
    apply_selection,
    main,
    run,
)
from lines.parser import parse_line_ranges


def write_numbered(path: Path, count: int, prefix: str = "line") -> Path:
    path.write_bytes(b"".join(f"{prefix} {n}\n".encode() for n in range(1, count + 1)))
    return path


def expected_lines(numbers, prefix: str = "line") -> bytes:
    return b"".join(f"{prefix} {n}\n".encode() for n in numbers)


@pytest.fixture
def ten_lines(tmp_path: Path) -> Path:
    return write_numbered(tmp_path / "ten.txt", 10)


class TestMain:
    """End to end behaviour of the lines command."""

    def test_range(self, ten_lines, capsysbinary):
        assert main(["--range", "4-7", str(ten_lines)]) == 0
        assert capsysbinary.readouterr().out == expected_lines(range(4, 8))

    def test_open_end(self, ten_lines, capsysbinary):
        assert main([str(ten_lines), "--range", "5-"]) == 0
        assert capsysbinary.readouterr().out == expected_lines(range(5, 11))

    def test_open_start(self, ten_lines, capsysbinary):
        assert main([str(ten_lines), "--range", "-3"]) == 0
        assert capsysbinary.readouterr().out == expected_lines(range(1, 4))

    def test_range_past_end_is_empty(self, tmp_path, capsysbinary):
        five = write_numbered(tmp_path / "five.txt", 5)
        assert main(["--range", "8-20", str(five)]) == 0
        assert capsysbinary.readouterr().out == b""

    def test_invalid_range(self, ten_lines, capsysbinary, caplog):
        with caplog.at_level(logging.ERROR):
            assert main(["--range", "abc", str(ten_lines)]) == 2
        captured = capsysbinary.readouterr()
        assert captured.out == b""
        assert b"--help" in captured.err
        assert "Invalid line number: 'abc'" in caplog.text

    def test_conflicting_options(self, ten_lines, capsysbinary, caplog):
        assert main(["--top", "2", "--bottom", "2", str(ten_lines)]) == 2
        assert capsysbinary.readouterr().out == b""
        assert "cannot print only the top" in caplog.text

    def test_no_options_passes_through(self, ten_lines, capsysbinary):
        assert main([str(ten_lines)]) == 0
        assert capsysbinary.readouterr().out == ten_lines.read_bytes()

    def test_reads_stdin(self, monkeypatch, capsysbinary):
        monkeypatch.setattr(
            sys, "stdin", io.TextIOWrapper(io.BytesIO(b"a\nb\nc\nd"))
        )
        assert main(["--range", "2,4"]) == 0
        # The final line had no newline and none is added
        assert capsysbinary.readouterr().out == b"b\nd"

    def test_top_bottom_skip(self, ten_lines, capsysbinary):
        assert main(["--top", "2", str(ten_lines)]) == 0
        assert capsysbinary.readouterr().out == expected_lines([1, 2])

        assert main(["--bottom", "2", str(ten_lines)]) == 0
        assert capsysbinary.readouterr().out == expected_lines([9, 10])

        assert main(["--skip-top", "3", "--skip-bottom", "2", str(ten_lines)]) == 0
        assert capsysbinary.readouterr().out == expected_lines(range(4, 9))

    def test_multiple_files_are_numbered_continuously(self, tmp_path, capsysbinary):
        first = write_numbered(tmp_path / "a.txt", 3, prefix="a")
        second = write_numbered(tmp_path / "b.txt", 3, prefix="b")

        assert main(["--range", "3-4", str(first), str(second)]) == 0
        assert capsysbinary.readouterr().out == b"a 3\nb 1\n"

    def test_per_file_restarts_numbering(self, tmp_path, capsysbinary):
        first = write_numbered(tmp_path / "a.txt", 3, prefix="a")
        second = write_numbered(tmp_path / "b.txt", 3, prefix="b")

        assert main(["--per-file", "--range", "2", str(first), str(second)]) == 0
        assert capsysbinary.readouterr().out == b"a 2\nb 2\n"

    def test_per_file_bottom(self, tmp_path, capsysbinary):
        first = write_numbered(tmp_path / "a.txt", 3, prefix="a")
        second = write_numbered(tmp_path / "b.txt", 3, prefix="b")

        assert main(["--per-file", "--bottom", "1", str(first), str(second)]) == 0
        assert capsysbinary.readouterr().out == b"a 3\nb 3\n"

    def test_missing_file_stops(self, tmp_path, ten_lines, capsysbinary, caplog):
        missing = tmp_path / "missing.txt"
        assert main([str(ten_lines), str(missing), str(ten_lines)]) == 1
        # Output written before the error is kept
        assert capsysbinary.readouterr().out == ten_lines.read_bytes()
        assert "missing.txt" in caplog.text

    def test_missing_file_with_force(self, tmp_path, ten_lines, capsysbinary, caplog):
        missing = tmp_path / "missing.txt"
        with caplog.at_level(logging.WARNING):
            assert main(["--force", str(missing), str(ten_lines)]) == 0
        assert capsysbinary.readouterr().out == ten_lines.read_bytes()
        assert any(
            r.levelno == logging.WARNING and "missing.txt" in r.getMessage()
            for r in caplog.records
        )

    def test_early_exit_skips_later_files(self, tmp_path, ten_lines, capsysbinary):
        """Files past the last selected line are never opened."""
        missing = tmp_path / "missing.txt"
        assert main(["--range", "1-2", str(ten_lines), str(missing)]) == 0
        assert capsysbinary.readouterr().out == expected_lines([1, 2])

    def test_file_named_dash_with_relative_path(
        self, tmp_path, monkeypatch, capsysbinary
    ):
        """'./-' names a file; only a bare '-' means standard input."""
        (tmp_path / "-").write_bytes(b"from file\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            sys, "stdin", io.TextIOWrapper(io.BytesIO(b"from stdin\n"))
        )

        assert main(["./-"]) == 0
        assert capsysbinary.readouterr().out == b"from file\n"

        assert main(["-"]) == 0
        assert capsysbinary.readouterr().out == b"from stdin\n"

    def test_open_start_range_list(self, ten_lines, capsysbinary):
        assert main(["--range", "-3,9", str(ten_lines)]) == 0
        assert capsysbinary.readouterr().out == expected_lines([1, 2, 3, 9])

    def test_per_file_force_skips_missing_middle_file(
        self, tmp_path, capsysbinary, caplog
    ):
        first = write_numbered(tmp_path / "a.txt", 3, prefix="a")
        missing = tmp_path / "missing.txt"
        last = write_numbered(tmp_path / "c.txt", 3, prefix="c")

        with caplog.at_level(logging.WARNING):
            assert (
                main(
                    [
                        "--per-file",
                        "--force",
                        "--range",
                        "2-",
                        str(first),
                        str(missing),
                        str(last),
                    ]
                )
                == 0
            )
        assert capsysbinary.readouterr().out == b"a 2\na 3\nc 2\nc 3\n"
        assert any(
            r.levelno == logging.WARNING and "missing.txt" in r.getMessage()
            for r in caplog.records
        )

    def test_redirect_stdout_closes_devnull(self, tmp_path, monkeypatch):
        with open(tmp_path / "out.txt", "wb") as target:
            monkeypatch.setattr(sys, "stdout", target)
            with patch("lines.main.os.close", wraps=os.close) as closed:
                _redirect_stdout_to_devnull()

            closed.assert_called_once()
            devnull = closed.call_args.args[0]
            assert devnull != target.fileno()
            with pytest.raises(OSError):
                os.fstat(devnull)

            # stdout's descriptor now points at os.devnull
            target.write(b"discarded\n")
        assert (tmp_path / "out.txt").read_bytes() == b""

    def test_broken_pipe_exits_cleanly(self, ten_lines, monkeypatch):
        class ClosedPipe(io.BytesIO):
            def write(self, data):
                raise BrokenPipeError(32, "Broken pipe")

        stdout = io.TextIOWrapper(ClosedPipe())
        monkeypatch.setattr(sys, "stdout", stdout)
        with patch("lines.main._redirect_stdout_to_devnull") as redirect:
            assert main([str(ten_lines)]) == 0
        redirect.assert_called_once()

    def test_write_error_fails(self, ten_lines, monkeypatch, caplog):
        class FullDisk(io.BytesIO):
            def write(self, data):
                raise OSError(28, "No space left on device")

        monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(FullDisk()))
        assert main([str(ten_lines)]) == 1
        assert "No space left on device" in caplog.text


class TestRun:
    def test_returns_one_on_unreadable_input(self, tmp_path):
        config = FilterConfig(source=InputSource.from_args([str(tmp_path / "nope")]))
        out = io.BytesIO()
        assert run(config, out) == 1
        assert out.getvalue() == b""

    def test_apply_selection_uses_mode(self):
        lines = [b"1\n", b"2\n", b"3\n"]
        source = InputSource()
        assert list(
            apply_selection(FilterConfig(source=source, mode=Mode.TOP, count=1), lines)
        ) == [b"1\n"]
        assert list(
            apply_selection(
                FilterConfig(source=source, ranges=parse_line_ranges("2-")), lines
            )
        ) == [b"2\n", b"3\n"]


class TestResolveLogLevel:
    def _args(self, **kwargs):
        defaults = {"log_level": None, "quiet": False, "verbose": False}
        defaults.update(kwargs)
        return type("Args", (), defaults)()

    def test_default(self):
        assert _resolve_log_level(self._args()) == "WARNING"

    def test_quiet_and_verbose(self):
        assert _resolve_log_level(self._args(quiet=True)) == "ERROR"
        assert _resolve_log_level(self._args(verbose=True)) == "INFO"

    def test_explicit_level_wins(self):
        assert _resolve_log_level(self._args(log_level="DEBUG", quiet=True)) == "DEBUG"
