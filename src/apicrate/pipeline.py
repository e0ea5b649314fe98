"""End-to-end crate generation.

:func:`run_pipeline` runs the two phases of one invocation:

1. **Scaffold and synthesise.** Create the crate with ``cargo init``, then
   write ``Makefile.toml``, ``generator_config.yaml`` (copying a local spec
   alongside it) and ``README.md``. When asked, run the generator through
   ``cargo make``.
2. **Finalise.** Patch ``Cargo.toml``, re-attach the README attribution if
   code generation replaced the README, and bump the edition when requested.

Every step stops the run on its first failure. Nothing already written is
removed.
"""

from __future__ import annotations

from pathlib import Path

from apicrate.generate import (
    ManifestPatcher,
    append_attribution,
    copy_spec_file,
    write_generator_options,
    write_readme,
    write_task_graph,
)
from apicrate.models import GenerationContext, TaskName
from apicrate.output import info, success
from apicrate.runner import run_task
from apicrate.scaffold import scaffold_crate


def generation_tasks(context: GenerationContext) -> list[TaskName]:
    """Tasks to run after synthesis, in order. Empty when nothing should run.

    Test-generation always generates from its local spec. Otherwise code is
    generated only with ``--autogenerate`` and a remote spec URL, which is
    downloaded first.
    """
    if context.is_test_generation:
        return [TaskName.GENERATE_ALL]
    if context.params.autogenerate and context.spec_url is not None:
        return [TaskName.SPEC_DOWNLOAD_DEFAULT, TaskName.GENERATE_ALL]
    return []


def finalize(context: GenerationContext, generated: bool) -> None:
    """Post-generation edits to the crate in ``context.output_dir``.

    Args:
        context: The generation context.
        generated: Whether code generation ran. The generator rewrites
            ``README.md``, so the attribution block is appended again.

    Raises:
        ManifestError: If ``Cargo.toml`` cannot be patched or its edition
            cannot be bumped.
        DocumentGenerationError: If the README cannot be updated.
    """
    crate_dir = context.output_dir
    patcher = ManifestPatcher.from_context(context)
    patcher.patch(crate_dir)
    if generated:
        append_attribution(context)
    if context.params.bump_edition:
        for change in patcher.bump_edition(crate_dir):
            info(f"Bumped {change}")


def run_pipeline(context: GenerationContext) -> Path:
    """Generate the crate described by *context*.

    Returns:
        The crate directory.

    Raises:
        ApicrateError: The first failure of any step.
    """
    crate_dir = scaffold_crate(context)
    write_task_graph(context)
    write_generator_options(context)
    copy_spec_file(context)
    write_readme(context)

    tasks = generation_tasks(context)
    for task in tasks:
        run_task(crate_dir, task, context.config.task_runner)

    finalize(context, generated=bool(tasks))
    success(f"Generated {context.lib_name} at {crate_dir}")
    return crate_dir
