"""OpenAPI Generator options (``generator_config.yaml``).

The options document is always written fresh: defaults from
:class:`~apicrate.models.GeneratorOptions`, then any ``generator_options``
overrides from the user config, then the effective library name as
``packageName``. A pre-existing file is overwritten, never merged.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import yaml
from pydantic import ValidationError

from apicrate.exceptions import ConfigError, DocumentGenerationError
from apicrate.fs import write_text
from apicrate.models import GenerationContext, GeneratorOptions
from apicrate.output import info

GENERATOR_CONFIG_FILE_NAME = "generator_config.yaml"


def build_generator_options(context: GenerationContext) -> GeneratorOptions:
    """Assemble the generator options for *context*.

    Raises:
        ConfigError: If the user config names an unknown option or gives a
            value of the wrong type.
    """
    data = GeneratorOptions().model_dump(by_alias=True)
    data.update(context.config.generator_options)
    data["packageName"] = context.lib_name
    try:
        return GeneratorOptions.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid generator_options in config: {exc}") from exc


def render_generator_options(options: GeneratorOptions) -> str:
    """Serialise *options* to YAML using the generator's own key names."""
    return yaml.safe_dump(options.model_dump(by_alias=True), sort_keys=False)


def write_generator_options(context: GenerationContext) -> Path:
    """Write ``generator_config.yaml`` into the crate directory.

    Returns:
        Path of the written file.

    Raises:
        DocumentGenerationError: If serialisation or the write fails.
    """
    options = build_generator_options(context)
    path = context.output_dir / GENERATOR_CONFIG_FILE_NAME
    try:
        write_text(path, render_generator_options(options), "Generator options")
    except (OSError, yaml.YAMLError) as exc:
        raise DocumentGenerationError(f"Failed to write {path}: {exc}") from exc
    return path


def copy_spec_file(context: GenerationContext) -> Path | None:
    """Copy a local spec file into the crate directory.

    Does nothing when the spec comes from a URL; ``cargo make
    spec-download-default`` fetches it instead.

    Returns:
        The destination path, or ``None`` when there was nothing to copy.

    Raises:
        DocumentGenerationError: If the source cannot be read or copied.
    """
    source = context.params.spec_file
    if source is None:
        return None
    destination = context.output_dir / context.spec_file_basename
    try:
        shutil.copyfile(source, destination)
    except OSError as exc:
        raise DocumentGenerationError(
            f"Failed to copy spec file {source} to {destination}: {exc}"
        ) from exc
    info(f"Copied spec file to {destination}")
    return destination
