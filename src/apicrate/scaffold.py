"""Prepare the output directory for a new library crate.

:func:`scaffold_crate` runs four steps in order:

1. Prepare the directory. In test-generation mode it is wiped and recreated;
   otherwise it is created if absent and must be empty.
2. Run ``cargo init --lib`` in it.
3. Create the ``temp/`` directory for transient build artifacts.
4. Append ``/temp`` to ``.gitignore``.

Nothing is rolled back if a later step fails.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from apicrate.exceptions import (
    MissingCrateDirectory,
    NonEmptyTargetDirectory,
    ScaffoldError,
    ScaffoldInitFailed,
)
from apicrate.models import GenerationContext
from apicrate.output import debug, info, success

logger = logging.getLogger(__name__)

TEMP_DIR_NAME = "temp"
GITIGNORE_FILE_NAME = ".gitignore"


def create_testing_folder(path: Path) -> None:
    """Delete *path* recursively, if present, and recreate it empty."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    path.mkdir(parents=True, exist_ok=True)
    debug(f"Recreated testing directory {path}")


def create_crate_folder_and_check_empty(path: Path) -> None:
    """Create *path* if needed and make sure it has no entries.

    Raises:
        NonEmptyTargetDirectory: If the directory already contains anything.
    """
    path.mkdir(parents=True, exist_ok=True)
    if any(path.iterdir()):
        raise NonEmptyTargetDirectory(path)


def init_crate(path: Path, cargo: str = "cargo") -> None:
    """Run ``cargo init --lib`` in *path*.

    Args:
        path: Existing, empty crate directory.
        cargo: Package manager executable.

    Raises:
        MissingCrateDirectory: If *path* is not a directory.
        ScaffoldInitFailed: If ``cargo init`` exits non-zero. The error carries
            the captured stderr.
        ScaffoldError: If the executable cannot be started.
    """
    if not path.is_dir():
        raise MissingCrateDirectory(path)

    args = [cargo, "init", "--lib", "--color", "always", str(path)]
    logger.debug("Running %s", " ".join(args))
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise ScaffoldError(f"Package manager '{cargo}' not found on PATH") from exc

    if result.returncode != 0:
        raise ScaffoldInitFailed(path, result.stderr or "")

    info(f"Initialized crate at `{path}`")
    if result.stderr:
        # cargo reports progress on stderr even on success.
        debug(result.stderr.strip())


def setup_tree_in_crate(path: Path) -> Path:
    """Create the transient ``temp/`` directory and return it."""
    temp_dir = path / TEMP_DIR_NAME
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


def setup_git_in_crate(path: Path) -> None:
    """Append an ignore rule for ``temp/`` to the crate's ``.gitignore``."""
    gitignore = path / GITIGNORE_FILE_NAME
    with gitignore.open("a", encoding="utf-8") as f:
        f.write(f"\n/{TEMP_DIR_NAME}\n")


def scaffold_crate(context: GenerationContext) -> Path:
    """Do all crate scaffolding jobs for *context*.

    Returns:
        The crate directory.

    Raises:
        ScaffoldError: Any scaffolding failure, including wrapped ``OSError``.
    """
    crate_dir = context.output_dir
    try:
        if context.is_test_generation:
            create_testing_folder(crate_dir)
        else:
            create_crate_folder_and_check_empty(crate_dir)
        init_crate(crate_dir, context.config.cargo)
        setup_tree_in_crate(crate_dir)
        setup_git_in_crate(crate_dir)
    except OSError as exc:
        raise ScaffoldError(f"Failed to scaffold crate at {crate_dir}: {exc}") from exc

    success(f"Scaffolded {context.lib_name} at {crate_dir}")
    return crate_dir
