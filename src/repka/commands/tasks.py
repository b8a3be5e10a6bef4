"""Tasks command implementation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from repka.commands.base import CommandContext, SyncCommand
from repka.errors import RepkaError
from repka.scheduler import order_tasks
from repka.tasks import build_task_nodes

if TYPE_CHECKING:
    from repka.workspace.workspace import Workspace


class TasksFormat(Enum):
    """Output format for tasks command."""

    TABLE = "table"
    JSON = "json"
    NAMES = "names"


@dataclass
class TaskInfo:
    """Information about a task for display."""

    name: str
    level: int
    command: str
    description: str | None
    depends_on: list[str]


@dataclass
class TasksResult:
    """Result of tasks command."""

    tasks: list[TaskInfo]


class TasksCommand(SyncCommand[TasksResult]):
    """List configured tasks in execution order."""

    def execute(self) -> TasksResult:
        """Execute the tasks command."""
        config = self.workspace.config
        nodes = build_task_nodes(self.workspace, self.runner)

        infos: list[TaskInfo] = []
        for level, tasks in enumerate(order_tasks(nodes), 1):
            for node in tasks:
                task = config.tasks[node.name]
                command = task.run if isinstance(task.run, str) else " ".join(task.run)
                infos.append(
                    TaskInfo(
                        name=node.name,
                        level=level,
                        command=command,
                        description=task.description,
                        depends_on=list(task.depends_on),
                    )
                )
        return TasksResult(tasks=infos)


def list_tasks(workspace: Workspace) -> TasksResult:
    """Convenience function to list tasks.

    Raises:
        CycleError: If task dependencies form a cycle.
    """
    context = CommandContext(workspace=workspace)
    return TasksCommand(context).execute()


def handle_tasks_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    format: TasksFormat = TasksFormat.TABLE,
) -> None:
    try:
        result = list_tasks(workspace)
    except RepkaError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    if format == TasksFormat.JSON:
        import json

        data = [
            {
                "name": t.name,
                "level": t.level,
                "run": t.command,
                "description": t.description,
                "depends_on": t.depends_on,
            }
            for t in result.tasks
        ]
        console.print(json.dumps(data, indent=2), markup=False, highlight=False, soft_wrap=True)
        return

    if format == TasksFormat.NAMES:
        for t in result.tasks:
            console.print(t.name, markup=False)
        return

    if not result.tasks:
        console.print("[yellow]No tasks configured[/yellow]")
        return

    table = Table(title="Tasks")
    table.add_column("Level", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Command")
    table.add_column("Depends on")
    table.add_column("Description")

    for t in result.tasks:
        table.add_row(
            str(t.level),
            escape(t.name),
            escape(t.command),
            escape(", ".join(t.depends_on)) if t.depends_on else "-",
            escape(t.description or ""),
        )

    console.print(table)
