"""Exception hierarchy for apicrate.

All exceptions inherit from :class:`ApicrateError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apicrate.exit_codes`.
The Typer command catches ``ApicrateError`` and exits with the appropriate
code, while unexpected exceptions produce a crash log in :func:`apicrate.app.main`
and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ApicrateError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ParameterError             (exit 2)
    |   +-- MissingSpecSource
    |   +-- MissingPathSegments
    +-- ScaffoldError              (exit 3)
    |   +-- NonEmptyTargetDirectory
    |   +-- MissingCrateDirectory
    |   +-- ScaffoldInitFailed
    +-- ManifestError              (exit 4)
    |   +-- UnsupportedEditionBump
    +-- DocumentGenerationError    (exit 5)
    +-- ProcessError               (exit 6)
    |   +-- TaskRunFailed
    +-- ConfigError                (exit 1)

No error is retried and nothing is rolled back: a failure part way through
leaves a partially scaffolded directory for the caller to inspect or remove.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from apicrate.exit_codes import (
    EXIT_DOCUMENT_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MANIFEST_FAILURE,
    EXIT_PROCESS_FAILURE,
    EXIT_SCAFFOLD_FAILURE,
)


class ApicrateError(Exception):
    """Base exception for all apicrate errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apicrate.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApicrateError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(ApicrateError):
    """Raised for configuration problems (invalid JSON, unknown generator options)."""

    exit_code = EXIT_GENERIC_FAILURE


# --- Parameter errors ---


class ParameterError(ApicrateError):
    """Raised while resolving invocation parameters, before any filesystem mutation."""

    exit_code = EXIT_INVALID_USAGE


class MissingSpecSource(ParameterError):
    """Neither ``--spec-file`` nor ``--spec-url`` was given outside test-generation mode."""

    def __init__(self) -> None:
        super().__init__(
            "An OpenAPI spec source is required: pass --spec-url or --spec-file"
        )


class MissingPathSegments(ParameterError):
    """The spec URL is not hierarchical, so no file name can be taken from it."""

    def __init__(self, url: str) -> None:
        super().__init__(f"API spec URL has no path segments: {url}")
        self.url = url


# --- Scaffolding errors ---


class ScaffoldError(ApicrateError):
    """Raised when the output crate directory cannot be prepared."""

    exit_code = EXIT_SCAFFOLD_FAILURE


class NonEmptyTargetDirectory(ScaffoldError):
    """Refuse to scaffold into a directory that already has content."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Cannot scaffold in a directory that is not empty: {path}"
        )
        self.path = path


class MissingCrateDirectory(ScaffoldError):
    """The crate directory vanished between creation and ``cargo init``."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Could not find crate directory at {path}")
        self.path = path


class ScaffoldInitFailed(ScaffoldError):
    """``cargo init`` exited non-zero.

    Args:
        crate_dir: Directory the crate was being initialised in.
        stderr: Captured standard error of the failed command.
    """

    def __init__(self, crate_dir: Path, stderr: str) -> None:
        super().__init__(
            f"cargo init at `{crate_dir}` failed with `{stderr.strip()}`"
        )
        self.crate_dir = crate_dir
        self.stderr = stderr


# --- Manifest errors ---


class ManifestError(ApicrateError):
    """Raised when ``Cargo.toml`` cannot be read, parsed, patched, or written."""

    exit_code = EXIT_MANIFEST_FAILURE


class UnsupportedEditionBump(ManifestError):
    """The manifest's edition has no successor on the known edition ladder."""

    def __init__(self, edition: str) -> None:
        super().__init__(
            f"Updating from the Rust edition '{edition}' is currently unsupported"
        )
        self.edition = edition


# --- Document generation errors ---


class DocumentGenerationError(ApicrateError):
    """Raised when a generated document cannot be serialised or written."""

    exit_code = EXIT_DOCUMENT_FAILURE


# --- Process errors ---


class ProcessError(ApicrateError):
    """Raised when an external process cannot be started or fails."""

    exit_code = EXIT_PROCESS_FAILURE


class TaskRunFailed(ProcessError):
    """``cargo make`` exited non-zero while running a task.

    Args:
        task: Name of the task that was being run.
        returncode: Process exit status.
        output: Combined stdout/stderr captured from the run.
    """

    def __init__(self, task: str, returncode: int, output: Optional[str] = None) -> None:
        message = f"Task '{task}' failed with exit status {returncode}"
        if output:
            message = f"{message}:\n{output.rstrip()}"
        super().__init__(message)
        self.task = task
        self.returncode = returncode
        self.output = output or ""
