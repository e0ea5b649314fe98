"""Shared test fixtures for apicrate.

Provides reusable fixtures for isolating configuration and temp
directories, managing output state, building generation contexts, faking
``cargo`` subprocesses, and running CLI commands. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from apicrate.models import GenerationContext, GlobalConfig, InvocationParameters
from apicrate.output import OutputManager, reset_output, set_output
from apicrate.parameters import resolve_context


TIMESTAMP = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
"""Fixed generation instant used by every context built in tests."""


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches a Rich console bound to sys.stderr at creation
    time. When Typer's CliRunner redirects the stream during a test and the
    test finishes, the cached reference becomes stale ("I/O operation on
    closed file"). Resetting forces a fresh manager on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Temp and config isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the system temp directory used by test-generation mode."""
    root = tmp_path / "systmp"
    root.mkdir()
    monkeypatch.setattr("apicrate.parameters.get_temp_root_dir", lambda: root)
    return root


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all APICRATE_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("apicrate.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["APICRATE_AUTHORS", "APICRATE_CARGO"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager for tests that don't care about output."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Generation contexts
# ---------------------------------------------------------------------------


def _params(**overrides: Any) -> InvocationParameters:
    """Invocation parameters for the PetShoppe API with *overrides* applied."""
    values: dict[str, Any] = {
        "site_or_api_name": "PetShoppe",
        "api_url": "https://pet.example",
        "api_spec_url": "https://pet.example/openapi.yaml",
    }
    values.update(overrides)
    return InvocationParameters(**values)


@pytest.fixture
def make_params() -> Callable[..., InvocationParameters]:
    """Factory for PetShoppe :class:`InvocationParameters` with overrides."""
    return _params


@pytest.fixture
def crate_dir(tmp_path: Path) -> Path:
    """Default output directory for generated crates (not created)."""
    return tmp_path / "crate"


@pytest.fixture
def make_context(tmp_path: Path, crate_dir: Path) -> Callable[..., GenerationContext]:
    """Factory building a resolved :class:`GenerationContext`.

    Keyword arguments override :class:`InvocationParameters` fields; pass
    ``config=`` to supply a :class:`GlobalConfig`. The output directory
    defaults to the ``crate_dir`` fixture.
    """

    def _make(config: Optional[GlobalConfig] = None, **overrides: Any) -> GenerationContext:
        overrides.setdefault("output_dir", crate_dir)
        return resolve_context(
            _params(**overrides),
            timestamp=TIMESTAMP,
            cwd=tmp_path,
            config=config,
        )

    return _make


# ---------------------------------------------------------------------------
# Fake cargo
# ---------------------------------------------------------------------------


CARGO_TOML_TEMPLATE = """\
[package]
name = "{name}"
version = "0.1.0"
edition = "{edition}"

[dependencies]
"""


class FakeCargo:
    """Stand-in for ``subprocess.run`` that mimics ``cargo init`` and ``cargo make``.

    ``cargo init`` writes a minimal crate (``Cargo.toml``, ``src/lib.rs``,
    ``.gitignore``). ``cargo make generate-all`` replaces ``README.md`` the
    way the OpenAPI generator does. Every call is recorded in ``calls``.

    Attributes:
        edition: Edition written into the fake ``Cargo.toml``.
        init_returncode: Exit status of ``cargo init``.
        failing_task: ``cargo make`` task that exits non-zero.
    """

    GENERATED_README = "# PetShoppe_api_lib\n\nGenerated client.\n"

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.edition = "2021"
        self.init_returncode = 0
        self.failing_task: Optional[str] = None

    @property
    def make_tasks(self) -> list[str]:
        """Task names passed to ``cargo make``, in call order."""
        return [call[2] for call in self.calls if call[:2] == ["cargo", "make"]]

    def __call__(self, args: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
        args = list(args)
        self.calls.append(args)

        if args[1:3] == ["init", "--lib"]:
            if self.init_returncode != 0:
                return subprocess.CompletedProcess(
                    args, self.init_returncode, stdout="", stderr="error: destination exists"
                )
            crate = Path(args[-1])
            (crate / "src").mkdir(parents=True, exist_ok=True)
            (crate / "src" / "lib.rs").write_text("pub fn add() {}\n")
            (crate / ".gitignore").write_text("/target\n")
            (crate / "Cargo.toml").write_text(
                CARGO_TOML_TEMPLATE.format(name=crate.name, edition=self.edition)
            )
            return subprocess.CompletedProcess(
                args, 0, stdout="", stderr="    Creating library package\n"
            )

        if args[:2] == ["cargo", "make"]:
            task = args[2]
            if task == self.failing_task:
                return subprocess.CompletedProcess(
                    args, 101, stdout=f"[cargo-make] ERROR - Error while running task {task}\n"
                )
            if task == "generate-all":
                (Path(kwargs["cwd"]) / "README.md").write_text(self.GENERATED_README)
            return subprocess.CompletedProcess(
                args, 0, stdout=f"[cargo-make] INFO - Running Task: {task}\n"
            )

        raise AssertionError(f"unexpected subprocess call: {args}")


@pytest.fixture
def fake_cargo(monkeypatch: pytest.MonkeyPatch) -> FakeCargo:
    """Patch ``subprocess.run`` with a :class:`FakeCargo`."""
    fake = FakeCargo()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
