"""Resolve raw CLI input into a :class:`~apicrate.models.GenerationContext`.

Everything downstream works from the context produced here: the effective
library name, the spec file name, the absolute output directory and the
generation timestamp are all decided once, up front, and never recomputed.

Resolution fails before any filesystem mutation when the input is
insufficient. The only side effect is in test-generation mode, where the
bundled sample spec is copied into the temp directory when no local spec was
given.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from apicrate import __authors__, __version__
from apicrate.exceptions import MissingPathSegments, MissingSpecSource
from apicrate.models import GenerationContext, GlobalConfig, InvocationParameters
from apicrate.output import debug, info
from apicrate.samples import TESTING_SPEC_FILE_NAME, petstore_yaml

TOOL_NAME = "apicrate"

TESTING_DIR_SUFFIX = "_testing"


def parse_authors(value: Optional[str]) -> list[str]:
    """Split a ``;``-separated author string.

    No trimming is applied, so ``"Ann;Bo"`` gives ``["Ann", "Bo"]`` and
    ``"Ann; Bo"`` gives ``["Ann", " Bo"]``. An empty or missing string gives
    an empty list.
    """
    if not value:
        return []
    return value.split(";")


def default_lib_name(api_name: str) -> str:
    """Library name used when ``--lib-name`` is not given."""
    return f"{api_name}_api_lib"


def file_name_from_url(url: str) -> str:
    """Return the last path segment of *url*.

    Args:
        url: An absolute URL.

    Returns:
        The last segment, which is empty when the path ends with ``/``.

    Raises:
        MissingPathSegments: If the URL is not hierarchical (``mailto:``,
            ``urn:`` and the like) and so has no path segments at all.
    """
    parts = urlsplit(url)
    if not parts.netloc and not parts.path.startswith("/"):
        raise MissingPathSegments(url)
    path = parts.path or "/"
    return path.lstrip("/").split("/")[-1]


def get_temp_root_dir() -> Path:
    """The system temp directory."""
    return Path(tempfile.gettempdir())


def get_testing_output_dir() -> Path:
    """Output directory used by test-generation mode."""
    return get_temp_root_dir() / f"{TOOL_NAME}{TESTING_DIR_SUFFIX}"


def create_testing_spec_file(root: Path) -> Path:
    """Materialise the bundled sample spec under *root* and return its path."""
    path = root / TESTING_SPEC_FILE_NAME
    path.write_text(petstore_yaml(), encoding="utf-8")
    info(f"Wrote sample spec to {path}")
    return path


def resolve_spec_file_name(params: InvocationParameters, lib_name: str) -> str:
    """Decide the spec file name.

    A local spec file wins and is used in its string form. Otherwise the last
    segment of the spec URL is used, falling back to ``{lib_name}.yaml`` when
    that segment is empty.

    Raises:
        MissingSpecSource: If neither a local file nor a URL is present.
        MissingPathSegments: If the URL has no path segments.
    """
    if params.spec_file is not None:
        return str(params.spec_file)
    if params.api_spec_url is None:
        raise MissingSpecSource()
    name = file_name_from_url(params.api_spec_url)
    return name or f"{lib_name}.yaml"


def resolve_context(
    params: InvocationParameters,
    *,
    timestamp: datetime,
    cwd: Path,
    config: Optional[GlobalConfig] = None,
) -> GenerationContext:
    """Build the :class:`~apicrate.models.GenerationContext` for one invocation.

    Args:
        params: Validated CLI input.
        timestamp: Generation instant captured at startup.
        cwd: Working directory captured at startup; the default output
            directory.
        config: Effective user configuration. Defaults are used when omitted.

    Returns:
        The frozen generation context.

    Raises:
        MissingSpecSource: Outside test-generation mode with no spec source.
        MissingPathSegments: If the spec URL has no path segments.
    """
    config = config or GlobalConfig()

    if not params.is_test_generation and params.spec_file is None and params.api_spec_url is None:
        raise MissingSpecSource()

    lib_name = params.lib_name or default_lib_name(params.site_or_api_name)

    # Validate the URL before materialising anything.
    if params.spec_file is None and params.api_spec_url is not None:
        resolve_spec_file_name(params, lib_name)

    updates: dict[str, object] = {}
    if params.is_test_generation:
        if params.spec_file is None:
            updates["spec_file"] = create_testing_spec_file(get_temp_root_dir())
        if params.output_dir is None:
            updates["output_dir"] = get_testing_output_dir()
    if updates:
        params = params.model_copy(update=updates)

    spec_file_name = resolve_spec_file_name(params, lib_name)

    output_dir = params.output_dir if params.output_dir is not None else cwd
    if not output_dir.is_absolute():
        output_dir = cwd / output_dir

    if params.extra_authors is not None:
        extra_authors = parse_authors(params.extra_authors)
    else:
        extra_authors = list(config.authors)

    context = GenerationContext(
        params=params,
        lib_name=lib_name,
        spec_file_name=spec_file_name,
        output_dir=output_dir,
        generation_timestamp=timestamp,
        extra_authors=extra_authors,
        tool_name=TOOL_NAME,
        tool_version=__version__,
        tool_authors=parse_authors(__authors__),
        config=config,
    )
    debug(
        f"Resolved lib={context.lib_name} spec={context.spec_file_name} "
        f"output={context.output_dir}"
    )
    return context
