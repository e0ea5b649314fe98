"""Task graph generation (``Makefile.toml`` for ``cargo make``).

The graph is built from a fixed set of task factories, one per
:class:`~apicrate.models.TaskName`. Users cannot add tasks; the only
variation is that ``spec-download-default`` is included only when a remote
spec URL is known, and ``lib-code-fix`` also migrates code to the next
edition when ``--bump-edition`` was given.

Every task reads its parameters from the ``[env]`` table, so the file can be
edited by hand after generation. ``OUTPUT_DIR`` is a script value that
``cargo make`` evaluates when it runs, giving the directory the task runner
was started in rather than the one apicrate saw.

Dependency graph::

    crate-scaffold ----> output-dir-create, output-dir-clean
    generate-all ------> lib-code-generate, lib-code-fix
    lib-code-generate -> openapi-cli-check
    lib-code-generate-dry-run -> openapi-cli-check
    spec-validate -----> openapi-cli-check
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import toml
from pydantic import ValidationError

from apicrate.exceptions import DocumentGenerationError
from apicrate.fs import write_text
from apicrate.generate.options import GENERATOR_CONFIG_FILE_NAME
from apicrate.models import EnvScript, EnvValue, GenerationContext, Task, TaskGraph, TaskName
from apicrate.scaffold import TEMP_DIR_NAME

MAKEFILE_NAME = "Makefile.toml"

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

OPEN_API_GENERATOR_CLI_URL = (
    "https://raw.githubusercontent.com/OpenAPITools/openapi-generator/"
    "master/bin/utils/openapi-generator-cli.sh"
)
OPEN_API_GENERATOR_CLI_SUBDIR = "bin/openapitools"
OPEN_API_GENERATOR_CLI_SCRIPT = "openapi-generator-cli"

CODE_GENERATION_ARGS = [
    "generate",
    "--generator-name", "rust",
    "--output", "${OUTPUT_DIR}",
    "--input-spec", "${SPEC_FILE_PATH}",
    "--config", "${OPEN_API_GENERATOR_CONFIG_PATH}",
    "-Dcolor",
]


def _script(name: str) -> str:
    return (TEMPLATE_DIR / name).read_text(encoding="utf-8")


# ------------------------------------------------------------------ #
# Environment
# ------------------------------------------------------------------ #


def build_env(context: GenerationContext) -> dict[str, EnvValue]:
    """Compute the ``[env]`` table from *context*."""
    env: dict[str, EnvValue] = {
        "API_NAME": context.api_name,
        "API_URL": context.api_url,
        "LIB_NAME": context.lib_name,
        "OUTPUT_DIR": EnvScript(script=["pwd"]),
        "TEMP_DIR": TEMP_DIR_NAME,
        "OPEN_API_GENERATOR_CLI_URL": OPEN_API_GENERATOR_CLI_URL,
        "OPEN_API_GENERATOR_CLI_SUBDIR": OPEN_API_GENERATOR_CLI_SUBDIR,
        "OPEN_API_GENERATOR_CLI_SCRIPT": OPEN_API_GENERATOR_CLI_SCRIPT,
        "OPEN_API_GENERATOR_CLI_PATH": (
            "${OPEN_API_GENERATOR_CLI_SUBDIR}/${OPEN_API_GENERATOR_CLI_SCRIPT}"
        ),
        "OPEN_API_GENERATOR_CONFIG_FILE": GENERATOR_CONFIG_FILE_NAME,
        "OPEN_API_GENERATOR_CONFIG_PATH": "${OPEN_API_GENERATOR_CONFIG_FILE}",
        "SPEC_FILE_NAME": context.spec_file_name,
        "SPEC_FILE_PATH": context.spec_file_basename,
    }
    if context.spec_url is not None:
        env["SPEC_FILE_URL"] = context.spec_url
    return env


# ------------------------------------------------------------------ #
# Task factories
# ------------------------------------------------------------------ #


def make_crate_scaffold_task(context: GenerationContext) -> Task:
    return Task(
        description="Setup ${LIB_NAME} project.",
        category=context.tool_name,
        dependencies=[TaskName.OUTPUT_DIR_CREATE, TaskName.OUTPUT_DIR_CLEAN],
    )


def make_output_dir_create_task(context: GenerationContext) -> Task:
    return Task(
        description="Create ${LIB_NAME} output dir at ${OUTPUT_DIR}.",
        category=context.tool_name,
        command="mkdir",
        args=["-p", "${OUTPUT_DIR}", "${OUTPUT_DIR}/${TEMP_DIR}"],
    )


def make_output_dir_clean_task(context: GenerationContext) -> Task:
    return Task(
        description="Clean transient files of ${LIB_NAME} in ${OUTPUT_DIR}/${TEMP_DIR}.",
        category=context.tool_name,
        script='rm -rf "${OUTPUT_DIR}/${TEMP_DIR}"/*',
    )


def make_spec_download_task(context: GenerationContext) -> Task:
    return Task(
        description="Download an OpenAPI specification from the URL given as task argument.",
        category=context.tool_name,
        command="wget",
        args=["-O", "${SPEC_FILE_PATH}", "${@}"],
    )


def make_spec_download_default_task(context: GenerationContext) -> Task:
    return Task(
        description="Download the ${API_NAME} OpenAPI specification from ${SPEC_FILE_URL}.",
        category=context.tool_name,
        command="wget",
        args=["-O", "${SPEC_FILE_PATH}", "${SPEC_FILE_URL}"],
    )


def make_spec_validate_task(context: GenerationContext) -> Task:
    return Task(
        description="Validate the ${API_NAME} OpenAPI specification.",
        category=context.tool_name,
        command="${OPEN_API_GENERATOR_CLI_SCRIPT}",
        args=["validate", "--input-spec", "${SPEC_FILE_PATH}"],
        dependencies=[TaskName.OPENAPI_CLI_CHECK],
    )


def make_openapi_cli_install_task(context: GenerationContext) -> Task:
    return Task(
        description="Install the OpenAPI Generator CLI.",
        category=context.tool_name,
        script=_script("openapi_cli_install.sh"),
    )


def make_openapi_cli_check_task(context: GenerationContext) -> Task:
    return Task(
        description="Check that the OpenAPI Generator CLI is installed.",
        category=context.tool_name,
        script=_script("openapi_cli_check.sh"),
    )


def _code_generation_task(context: GenerationContext, dry_run: bool) -> Task:
    args = list(CODE_GENERATION_ARGS)
    if dry_run:
        args.append("--dry-run")
    return Task(
        description="Generate ${LIB_NAME} code" + (" (dry run)." if dry_run else "."),
        category=context.tool_name,
        command="${OPEN_API_GENERATOR_CLI_SCRIPT}",
        args=args,
        dependencies=[TaskName.OPENAPI_CLI_CHECK],
    )


def make_lib_code_generate_task(context: GenerationContext) -> Task:
    return _code_generation_task(context, dry_run=False)


def make_lib_code_generate_dry_run_task(context: GenerationContext) -> Task:
    return _code_generation_task(context, dry_run=True)


def make_lib_code_fix_task(context: GenerationContext) -> Task:
    args = ["fix", "--all-targets", "--all-features", "--allow-dirty", "--allow-no-vcs"]
    if context.params.bump_edition:
        args.append("--edition")
    return Task(
        description="Apply compiler suggestions to the generated ${LIB_NAME} code.",
        category=context.tool_name,
        command=context.config.cargo,
        args=args,
    )


def make_generate_all_task(context: GenerationContext) -> Task:
    return Task(
        description="Generate and fix the ${LIB_NAME} code.",
        category=context.tool_name,
        dependencies=[TaskName.LIB_CODE_GENERATE, TaskName.LIB_CODE_FIX],
    )


TASK_FACTORIES: dict[TaskName, Callable[[GenerationContext], Task]] = {
    TaskName.CRATE_SCAFFOLD: make_crate_scaffold_task,
    TaskName.OUTPUT_DIR_CREATE: make_output_dir_create_task,
    TaskName.OUTPUT_DIR_CLEAN: make_output_dir_clean_task,
    TaskName.SPEC_DOWNLOAD: make_spec_download_task,
    TaskName.SPEC_DOWNLOAD_DEFAULT: make_spec_download_default_task,
    TaskName.SPEC_VALIDATE: make_spec_validate_task,
    TaskName.OPENAPI_CLI_INSTALL: make_openapi_cli_install_task,
    TaskName.OPENAPI_CLI_CHECK: make_openapi_cli_check_task,
    TaskName.LIB_CODE_GENERATE: make_lib_code_generate_task,
    TaskName.LIB_CODE_GENERATE_DRY_RUN: make_lib_code_generate_dry_run_task,
    TaskName.LIB_CODE_FIX: make_lib_code_fix_task,
    TaskName.GENERATE_ALL: make_generate_all_task,
}
"""One factory per task name; every :class:`TaskName` member has an entry."""


# ------------------------------------------------------------------ #
# Graph assembly and serialisation
# ------------------------------------------------------------------ #


def included_tasks(context: GenerationContext) -> list[TaskName]:
    """Task names that belong in the graph for *context*."""
    names = list(TaskName)
    if context.spec_url is None:
        names.remove(TaskName.SPEC_DOWNLOAD_DEFAULT)
    return names


def build_task_graph(context: GenerationContext) -> TaskGraph:
    """Assemble the complete task graph for *context*.

    Raises:
        DocumentGenerationError: If the graph fails validation (a dependency
            naming a task that is not included).
    """
    try:
        return TaskGraph(
            env=build_env(context),
            tasks={name: TASK_FACTORIES[name](context) for name in included_tasks(context)},
        )
    except ValidationError as exc:
        raise DocumentGenerationError(f"Invalid task graph: {exc}") from exc


def render_task_graph(graph: TaskGraph, context: GenerationContext) -> str:
    """Serialise *graph* to TOML with a provenance header."""
    header = (
        f"# Generated by {context.tool_name} v{context.tool_version} "
        f"at {context.timestamp_string}\n"
        f"# Run `cargo make {TaskName.GENERATE_ALL.value}` to generate {context.lib_name}.\n\n"
    )
    return header + toml.dumps(graph.to_document())


def write_task_graph(context: GenerationContext) -> Path:
    """Build the task graph and write ``Makefile.toml`` into the crate directory.

    Returns:
        Path of the written file.

    Raises:
        DocumentGenerationError: If the graph is invalid, cannot be
            serialised, or cannot be written.
    """
    graph = build_task_graph(context)
    path = context.output_dir / MAKEFILE_NAME
    try:
        write_text(path, render_task_graph(graph, context), "Task graph")
    except (OSError, TypeError, ValueError) as exc:
        raise DocumentGenerationError(f"Failed to write {path}: {exc}") from exc
    return path
