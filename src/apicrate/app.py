"""Typer application and CLI entry point for apicrate.

The root command scaffolds a Rust client crate for an OpenAPI described API::

    apicrate --name PetShoppe --api-url https://pet.example \\
        --spec-url https://pet.example/openapi.yaml --autogenerate

The ``test-generation`` sub-command runs the same pipeline against the
bundled sample spec. Root options apply to it too and must come before the
sub-command name.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`apicrate.pipeline`: The generation steps.
    :mod:`apicrate.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import typer

from apicrate import __version__
from apicrate.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="apicrate",
    help="Scaffold a Rust client crate from an OpenAPI spec.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apicrate {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Site or API name, e.g. PetShoppe."
    ),
    api_url: Optional[str] = typer.Option(
        None, "--api-url", help="Home page URL of the API."
    ),
    spec_url: Optional[str] = typer.Option(
        None, "--spec-url", help="URL of the OpenAPI spec."
    ),
    spec_file: Optional[Path] = typer.Option(
        None,
        "--spec-file",
        exists=True,
        dir_okay=False,
        help="Local OpenAPI spec file, copied into the crate.",
    ),
    lib_name: Optional[str] = typer.Option(
        None, "--lib-name", help="Library name (default: <name>_api_lib)."
    ),
    authors: Optional[str] = typer.Option(
        None, "--authors", help="Extra authors, separated by ';'."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Crate directory (default: current directory)."
    ),
    autogenerate: bool = typer.Option(
        False, "--autogenerate", help="Download the spec and generate code right away."
    ),
    bump_edition: bool = typer.Option(
        False, "--bump-edition", help="Move the crate to the next Rust edition."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Scaffold a Rust client crate from an OpenAPI spec.

    Initialises the global :class:`~apicrate.output.OutputManager` from CLI
    flags and stores the generation options, the start time and the working
    directory in ``ctx.obj``. Without a sub-command the crate is generated
    right away.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        name: Site or API name.
        api_url: API home page URL.
        spec_url: Remote OpenAPI spec URL.
        spec_file: Local OpenAPI spec file.
        lib_name: Library name override.
        authors: Extra authors separated by ``;``.
        output: Crate directory.
        autogenerate: Run code generation after scaffolding.
        bump_edition: Bump the crate to the next Rust edition.
        no_color: Disable all colour.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
    """
    from apicrate.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj.update(
        name=name,
        api_url=api_url,
        spec_url=spec_url,
        spec_file=spec_file,
        lib_name=lib_name,
        authors=authors,
        output=output,
        autogenerate=autogenerate,
        bump_edition=bump_edition,
        verbose=verbose,
        timestamp=datetime.now(timezone.utc),
        cwd=Path.cwd(),
    )

    if ctx.invoked_subcommand is None:
        from apicrate.commands.generate import generate

        generate(ctx)


# ------------------------------------------------------------------ #
# Sub-commands
# ------------------------------------------------------------------ #

from apicrate.commands.test_generation import test_generation_command  # noqa: E402

app.command(
    "test-generation",
    help="Generate the bundled PetShoppe sample crate in a temp directory.",
)(test_generation_command)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from apicrate.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``apicrate`` console script.

    Unhandled :class:`~apicrate.exceptions.ApicrateError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from apicrate.exceptions import ApicrateError
        from apicrate.output import error

        if isinstance(exc, ApicrateError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
