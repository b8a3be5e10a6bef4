"""Run command implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from repka.commands.base import Command, CommandContext
from repka.errors import AggregateFailure, RepkaError, TaskNotFoundError
from repka.execution.results import ScheduleResult, TaskOutcome, TaskStatus
from repka.scheduler import FailurePolicy, TaskNode, TaskScheduler, order_tasks, select_tasks
from repka.tasks import build_task_nodes

if TYPE_CHECKING:
    from repka.workspace.workspace import Workspace


@dataclass
class RunOptions:
    """Options for run command."""

    task_names: list[str] = field(default_factory=list)
    policy: FailurePolicy | None = None


class RunCommand(Command[ScheduleResult]):
    """Run configured tasks and everything they depend on.

    Tasks are defined in repka.yaml and run level by level through the
    task scheduler.
    """

    def __init__(self, context: CommandContext, options: RunOptions) -> None:
        super().__init__(context)
        self.options = options

    def validate(self) -> list[str]:
        """Validate the command."""
        errors = super().validate()
        if not self.options.task_names:
            errors.append("No tasks to run")
        for name in self.options.task_names:
            if self.workspace.config.get_task(name) is None:
                errors.append(
                    f"Task '{name}' not found. "
                    f"Available: {', '.join(self.workspace.config.task_names) or 'none'}"
                )
        return errors

    @property
    def policy(self) -> FailurePolicy:
        if self.options.policy is not None:
            return self.options.policy
        return FailurePolicy(self.workspace.config.command_defaults.policy)

    def get_tasks(self) -> list[TaskNode]:
        """Requested tasks plus their dependencies."""
        nodes = build_task_nodes(self.workspace, self.runner)
        return select_tasks(nodes, self.options.task_names)

    async def execute(self) -> ScheduleResult:
        """Execute the tasks."""
        missing = next(
            (n for n in self.options.task_names if self.workspace.config.get_task(n) is None),
            None,
        )
        if missing is not None:
            raise TaskNotFoundError(missing, self.workspace.config.task_names)
        self.ensure_valid()

        tasks = self.get_tasks()

        if self.context.dry_run:
            levels = order_tasks(tasks)
            return ScheduleResult(
                levels=[[task.name for task in level] for level in levels],
                outcomes=[
                    TaskOutcome(task.name, TaskStatus.SKIPPED) for level in levels for task in level
                ],
            )

        scheduler = TaskScheduler(self.policy)
        return await scheduler.run(tasks)


async def run_workspace_tasks(
    workspace: Workspace,
    task_names: list[str],
    *,
    policy: FailurePolicy | None = None,
    dry_run: bool = False,
) -> ScheduleResult:
    """Convenience function to run tasks.

    Args:
        workspace: Workspace to run in.
        task_names: Tasks to run, dependencies are added automatically.
        policy: Failure policy, defaults to the configured one.
        dry_run: Only compute the execution levels.

    Returns:
        Outcomes of all tasks.
    """

    context = CommandContext(workspace=workspace, dry_run=dry_run)
    options = RunOptions(task_names=task_names, policy=policy)
    cmd = RunCommand(context, options)
    return await cmd.execute()


_STATUS_STYLE = {
    TaskStatus.SUCCESS: "[green]✓[/green]",
    TaskStatus.FAILURE: "[red]✗[/red]",
    TaskStatus.CANCELLED: "[yellow]-[/yellow]",
    TaskStatus.SKIPPED: "[dim]-[/dim]",
}


def print_schedule_result(result: ScheduleResult, console: Console) -> None:
    """Print task outcomes grouped by level."""
    table = Table(title="Tasks")
    table.add_column("Level")
    table.add_column("Task", style="bold")
    table.add_column("Status")
    table.add_column("Time", justify="right")

    level_of = {name: index for index, level in enumerate(result.levels, 1) for name in level}
    for outcome in result:
        table.add_row(
            str(level_of.get(outcome.name, "-")),
            escape(outcome.name),
            f"{_STATUS_STYLE[outcome.status]} {outcome.status.value}",
            f"{outcome.duration_ms}ms" if outcome.status == TaskStatus.SUCCESS else "-",
        )
    console.print(table)


async def handle_run_command(
    workspace: Workspace,
    task_names: list[str],
    *,
    console: Console,
    error_console: Console,
    policy: FailurePolicy | None = None,
    dry_run: bool = False,
) -> None:
    try:
        result = await run_workspace_tasks(workspace, task_names, policy=policy, dry_run=dry_run)
    except AggregateFailure as e:
        if e.result is not None:
            print_schedule_result(e.result, console)
        error_console.print(
            f"[red]Error:[/red] {len(e.errors)} task(s) failed, first: {escape(e.message)}"
        )
        raise typer.Exit(1) from e
    except RepkaError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e

    if dry_run:
        console.print("[yellow]Dry run - execution order:[/yellow]")
        for index, level in enumerate(result.levels, 1):
            console.print(f"  {index}. {escape(', '.join(level))}")
        return

    print_schedule_result(result, console)
    console.print(f"\n[green]All {len(result)} tasks passed[/green]")

    code = workspace.context.exit_status.code
    if code:
        raise typer.Exit(code)
