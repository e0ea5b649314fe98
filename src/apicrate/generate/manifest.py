"""Patch the generated crate's ``Cargo.toml`` in place.

:class:`ManifestPatcher` captures what it needs from the
:class:`~apicrate.models.GenerationContext` and then applies two kinds of
edits to an existing manifest:

* :meth:`ManifestPatcher.patch` -- append authors, a timestamped description
  line, keywords and categories, and add apicrate itself as a
  dev-dependency.
* :meth:`ManifestPatcher.bump_edition` -- move ``edition`` one rung up the
  2015 -> 2018 -> 2021 ladder, for use after ``cargo fix --edition``.

Appends are not de-duplicated: patching the same manifest twice lists every
author twice.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import toml
from pydantic import BaseModel, Field

from apicrate.exceptions import ManifestError, UnsupportedEditionBump
from apicrate.fs import write_text
from apicrate.models import Edition, GenerationContext, TestGeneration

MANIFEST_FILE_NAME = "Cargo.toml"

KEYWORDS = ["OpenAPI", "web"]
CATEGORIES = ["web-programming", "api-bindings", "authentication"]


def load_manifest(path: Path) -> dict[str, Any]:
    """Read and parse the manifest at *path*.

    Raises:
        ManifestError: If the file is missing or is not valid TOML.
    """
    if not path.is_file():
        raise ManifestError(f"Cargo manifest not found at {path}")
    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as exc:
        raise ManifestError(f"Failed to read Cargo manifest {path}: {exc}") from exc


def save_manifest(path: Path, manifest: dict[str, Any], message: str) -> None:
    """Serialise *manifest* back to *path*.

    Raises:
        ManifestError: If serialisation or the write fails.
    """
    try:
        text = toml.dumps(manifest)
        write_text(path, text, message)
    except (OSError, TypeError, ValueError) as exc:
        raise ManifestError(f"Failed to write Cargo manifest {path}: {exc}") from exc


def next_edition(value: str) -> str:
    """Return the edition that follows *value*.

    Raises:
        UnsupportedEditionBump: For the newest known edition or any edition
            not on the ladder.
    """
    try:
        edition = Edition(str(value))
    except ValueError:
        raise UnsupportedEditionBump(str(value)) from None
    following = edition.next()
    if following is None:
        raise UnsupportedEditionBump(edition.value)
    return following.value


def _list_field(table: dict[str, Any], key: str) -> list[Any]:
    value = table.setdefault(key, [])
    if not isinstance(value, list):
        raise ManifestError(f"package.{key} is inherited or malformed; cannot append to it")
    return value


class ManifestPatcher(BaseModel):
    """Edits applied to ``Cargo.toml`` once the crate has been generated."""

    generation_timestamp: str
    generation_authors: list[str] = Field(default_factory=list)
    tool_name: str
    tool_version: str
    api_name: str
    test_generation: Optional[TestGeneration] = None

    @classmethod
    def from_context(cls, context: GenerationContext) -> "ManifestPatcher":
        """Build a patcher for *context*.

        The author list is apicrate's own authors followed by the extra
        authors given on the command line.
        """
        return cls(
            generation_timestamp=context.timestamp_string,
            generation_authors=[*context.tool_authors, *context.extra_authors],
            tool_name=context.tool_name,
            tool_version=context.tool_version,
            api_name=context.api_name,
            test_generation=context.params.test_generation,
        )

    # ------------------------------------------------------------------ #
    # Document-level edits
    # ------------------------------------------------------------------ #

    def self_dependency(self) -> dict[str, str]:
        """The dev-dependency entry pointing back at apicrate."""
        dependency = {"version": self.tool_version}
        tg = self.test_generation
        if tg is not None:
            if tg.generator_crate_local_path is not None:
                dependency["path"] = str(tg.generator_crate_local_path)
            elif tg.generator_crate_repo_url is not None:
                dependency["git"] = tg.generator_crate_repo_url
        return dependency

    def apply(self, manifest: dict[str, Any]) -> dict[str, Any]:
        """Apply the post-generation edits to *manifest* in place and return it."""
        package = manifest.setdefault("package", {})

        _list_field(package, "authors").extend(self.generation_authors)

        description = package.get("description", "")
        if not isinstance(description, str):
            raise ManifestError("package.description is inherited or malformed")
        package["description"] = f"{description}\n Generated at {self.generation_timestamp}"

        _list_field(package, "keywords").extend([self.api_name, *KEYWORDS])
        _list_field(package, "categories").extend(CATEGORIES)

        dev_dependencies = manifest.setdefault("dev-dependencies", {})
        dev_dependencies[self.tool_name] = self.self_dependency()
        return manifest

    @staticmethod
    def apply_edition_bump(manifest: dict[str, Any]) -> list[str]:
        """Bump every edition field in *manifest* one rung.

        ``package.edition`` defaults to 2015 when absent, as in Cargo. A
        ``[lib]`` edition is bumped only when it is set explicitly.

        Returns:
            Human-readable descriptions of each change.

        Raises:
            UnsupportedEditionBump: If an edition has no successor.
        """
        changes: list[str] = []
        package = manifest.setdefault("package", {})
        current = package.get("edition", Edition.E2015.value)
        package["edition"] = next_edition(current)
        changes.append(f"manifest package from {current} to {package['edition']}")

        lib = manifest.get("lib")
        if isinstance(lib, dict) and "edition" in lib:
            current = lib["edition"]
            lib["edition"] = next_edition(current)
            changes.append(f"manifest lib target from {current} to {lib['edition']}")
        return changes

    # ------------------------------------------------------------------ #
    # File-level operations
    # ------------------------------------------------------------------ #

    def patch(self, crate_dir: Path) -> Path:
        """Patch ``Cargo.toml`` in *crate_dir* after code generation.

        Returns:
            Path of the rewritten manifest.

        Raises:
            ManifestError: If the manifest is missing, malformed or cannot be
                written.
        """
        path = crate_dir / MANIFEST_FILE_NAME
        manifest = load_manifest(path)
        self.apply(manifest)
        save_manifest(path, manifest, "Updated cargo manifest post generation")
        return path

    def bump_edition(self, crate_dir: Path) -> list[str]:
        """Advance the manifest edition in *crate_dir* by one rung.

        Raises:
            UnsupportedEditionBump: If the current edition is the newest known
                one or unknown.
            ManifestError: If the manifest cannot be read or written.
        """
        path = crate_dir / MANIFEST_FILE_NAME
        manifest = load_manifest(path)
        changes = self.apply_edition_bump(manifest)
        save_manifest(
            path,
            manifest,
            f"Updated cargo manifest edition post fix ({', '.join(changes)})",
        )
        return changes
