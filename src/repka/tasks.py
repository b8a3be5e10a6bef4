"""Task nodes built from repka.yaml."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from repka.execution.policy import SpawnSpec, Stdio
from repka.execution.results import ProcessResult
from repka.scheduler.graph import TaskBody, TaskNode

if TYPE_CHECKING:
    from repka.config.schema import TaskConfig
    from repka.execution.runner import ProcessRunner
    from repka.workspace.workspace import Workspace


def task_spawn_spec(workspace: Workspace, task: TaskConfig) -> SpawnSpec:
    """Spawn parameters of a configured task."""
    env = dict(workspace.config.env)
    env.update(task.env)
    cwd = workspace.root / task.cwd if task.cwd else workspace.root
    stdio = Stdio(task.stdio)
    return SpawnSpec.from_command(
        task.run,
        cwd=Path(cwd),
        env=env,
        stdio=stdio,
        output=("stdout", "stderr") if stdio == Stdio.PIPE else (),
        exit_codes=task.policy,
    )


def _task_body(runner: ProcessRunner, spec: SpawnSpec) -> TaskBody:
    async def body() -> ProcessResult:
        if spec.stdio == Stdio.PIPE:
            return await runner.output_conditional(spec)
        return await runner.run(spec)

    return body


def build_task_nodes(workspace: Workspace, runner: ProcessRunner) -> list[TaskNode]:
    """One node per configured task, in declaration order.

    Each body spawns the task's command. Piped output is only shown when
    the command fails.
    """
    nodes = []
    for name, task in workspace.config.tasks.items():
        spec = task_spawn_spec(workspace, task)
        nodes.append(
            TaskNode(
                name=name,
                body=_task_body(runner, spec),
                depends_on=tuple(task.depends_on),
                description=task.description,
            )
        )
    return nodes
