"""The generation run behind every apicrate command.

The root callback collects the shared options into ``ctx.obj``. The root
command itself and ``test-generation`` then call :func:`generate`, which
validates the options, resolves the context, runs the pipeline and prints
the crate path on stdout.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError

from apicrate.exceptions import ApicrateError, InvalidUsageError
from apicrate.models import InvocationParameters, TestGeneration
from apicrate.output import error, print_data, suggest
from apicrate.samples import TEST_API_NAME, TEST_API_URL


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "input"
        problems.append(f"{location}: {err['msg']}")
    return "Invalid arguments: " + "; ".join(problems)


def build_parameters(
    options: dict[str, Any],
    test_generation: Optional[TestGeneration] = None,
) -> InvocationParameters:
    """Validate the root options into :class:`~apicrate.models.InvocationParameters`.

    In test-generation mode a missing ``--name`` or ``--api-url`` falls back
    to the PetShoppe sample API.

    Raises:
        InvalidUsageError: If a required option is missing or a value does
            not validate (for example a malformed URL).
    """
    name = options.get("name")
    api_url = options.get("api_url")
    if test_generation is not None:
        name = name or TEST_API_NAME
        api_url = api_url or TEST_API_URL
    if not name:
        raise InvalidUsageError("Missing option '--name': the site or API name is required")
    if not api_url:
        raise InvalidUsageError("Missing option '--api-url': the API home page URL is required")

    try:
        return InvocationParameters(
            site_or_api_name=name,
            api_url=api_url,
            api_spec_url=options.get("spec_url"),
            spec_file=options.get("spec_file"),
            lib_name=options.get("lib_name"),
            extra_authors=options.get("authors"),
            output_dir=options.get("output"),
            autogenerate=options.get("autogenerate", False),
            bump_edition=options.get("bump_edition", False),
            test_generation=test_generation,
        )
    except ValidationError as exc:
        raise InvalidUsageError(_format_validation_error(exc)) from exc


def generate(ctx: typer.Context, test_generation: Optional[TestGeneration] = None) -> None:
    """Run one generation with the options stored on *ctx*.

    Args:
        ctx: Typer context whose ``obj`` was filled by the root callback,
            including the ``timestamp`` and ``cwd`` captured at startup.
        test_generation: Sub-command options when run as
            ``test-generation``.

    Raises:
        typer.Exit: With the error's exit code on any
            :class:`~apicrate.exceptions.ApicrateError`.
    """
    from apicrate.config import resolve_config
    from apicrate.parameters import resolve_context
    from apicrate.pipeline import run_pipeline

    obj: dict[str, Any] = ctx.obj or {}
    timestamp: datetime = obj["timestamp"]
    cwd: Path = obj["cwd"]

    try:
        params = build_parameters(obj, test_generation)
        config = resolve_config()
        context = resolve_context(params, timestamp=timestamp, cwd=cwd, config=config)
        crate_dir = run_pipeline(context)
    except InvalidUsageError as exc:
        error(str(exc))
        suggest("Run 'apicrate --help' for usage.")
        raise typer.Exit(code=exc.exit_code) from None
    except ApicrateError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_data(str(crate_dir))
