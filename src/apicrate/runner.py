"""Run ``Makefile.toml`` tasks through the task runner (``cargo make``).

Tasks run synchronously in the crate directory with no timeout. Standard
output and standard error are merged so a failure can be reported with
everything the task printed, in order.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from apicrate.exceptions import ProcessError, TaskRunFailed
from apicrate.models import TaskName
from apicrate.output import debug, info, success

logger = logging.getLogger(__name__)

DEFAULT_TASK_RUNNER = ("cargo", "make")


def run_task(
    crate_dir: Path,
    task: TaskName,
    task_runner: Optional[Sequence[str]] = None,
) -> str:
    """Run *task* in *crate_dir* and return its combined output.

    Args:
        crate_dir: Directory holding ``Makefile.toml``.
        task: The task to run.
        task_runner: Command prefix; defaults to ``cargo make``.

    Returns:
        Combined stdout and stderr of the run.

    Raises:
        TaskRunFailed: If the runner exits non-zero.
        ProcessError: If the runner executable cannot be started.
    """
    runner = list(task_runner or DEFAULT_TASK_RUNNER)
    args = [*runner, task.value]
    info(f"Running `{' '.join(args)}` in {crate_dir}")
    logger.debug("Running %s in %s", args, crate_dir)
    try:
        result = subprocess.run(
            args,
            cwd=crate_dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except FileNotFoundError as exc:
        raise ProcessError(f"Task runner '{runner[0]}' not found on PATH") from exc

    output = result.stdout or ""
    if result.returncode != 0:
        logger.debug("Task %s exited with %d", task.value, result.returncode)
        raise TaskRunFailed(task.value, result.returncode, output)

    if output:
        debug(output.rstrip())
    success(f"Task {task.value} finished")
    return output
