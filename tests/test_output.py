"""Tests for the output system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- Global instance management
- Byte-count reporting of file writes
"""

from __future__ import annotations

from pathlib import Path

import pytest

from apicrate import output as output_module
from apicrate.fs import write_text
from apicrate.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def plain_output() -> OutputManager:
    """Install a colourless output manager."""
    output = OutputManager(no_color=True)
    set_output(output)
    return output


# ------------------------------------------------------------------ #
# Colour control
# ------------------------------------------------------------------ #


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_color_allowed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStreamDiscipline:
    """Data goes to stdout; diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, plain_output) -> None:
        output_module.print_data("/tmp/crate")
        captured = capfd.readouterr()
        assert captured.out == "/tmp/crate\n"
        assert captured.err == ""

    @pytest.mark.parametrize("func", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, plain_output, func: str) -> None:
        getattr(output_module, func)("message")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "message" in captured.err

    def test_error_prefix(self, capfd, plain_output) -> None:
        output_module.error("boom")
        assert capfd.readouterr().err == "Error: boom\n"

    def test_markup_not_interpreted(self, capfd, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        set_output(OutputManager())
        output_module.info("[bold]literal[/bold]")
        assert "[bold]literal[/bold]" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# Quiet and verbose
# ------------------------------------------------------------------ #


class TestQuietMode:
    def test_info_suppressed(self, capfd) -> None:
        set_output(OutputManager(no_color=True, quiet=True))
        output_module.info("hidden")
        output_module.success("hidden")
        output_module.suggest("hidden")
        assert capfd.readouterr().err == ""

    def test_errors_and_warnings_shown(self, capfd) -> None:
        set_output(OutputManager(no_color=True, quiet=True))
        output_module.warning("careful")
        output_module.error("broken")
        err = capfd.readouterr().err
        assert "Warning: careful" in err
        assert "Error: broken" in err


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capfd, plain_output) -> None:
        output_module.debug("details")
        assert capfd.readouterr().err == ""

    def test_debug_shown_when_verbose(self, capfd) -> None:
        set_output(OutputManager(no_color=True, verbose=True))
        output_module.debug("details")
        assert capfd.readouterr().err == "[debug] details\n"


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self) -> None:
        output = get_output()
        assert isinstance(output, OutputManager)
        assert get_output() is output

    def test_set_and_reset(self) -> None:
        custom = OutputManager(quiet=True)
        set_output(custom)
        assert get_output() is custom
        reset_output()
        assert get_output() is not custom


# ------------------------------------------------------------------ #
# File writes
# ------------------------------------------------------------------ #


class TestWriteText:
    def test_reports_byte_count(self, capfd, plain_output, tmp_path: Path) -> None:
        target = tmp_path / "README.md"
        size = write_text(target, "héllo\n", "README")

        assert size == 7
        assert target.read_text(encoding="utf-8") == "héllo\n"
        assert capfd.readouterr().err == f"README: Wrote 7 bytes to {target}\n"
