"""repka CLI application."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from repka.context import ToolContext
from repka.errors import RepkaError
from repka.scheduler import FailurePolicy
from repka.workspace import Workspace


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from repka import __version__

        print(f"repka {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="repka",
    help="Task runner for JavaScript monorepos",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _app_callback(
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", "-V", help="Show version and exit", callback=version_callback),
    ] = False,
    verbosity: Annotated[
        str | None,
        typer.Option(
            "--verbosity",
            "-v",
            help="Log level: debug, info, warn, error, fatal or off",
            envvar="REPKA_LOG_LEVEL",
        ),
    ] = None,
) -> None:
    """Task runner for JavaScript monorepos."""
    from repka.logger import configure_logging

    configure_logging(verbosity, console=error_console)


console = Console()
error_console = Console(stderr=True)


async def get_workspace(context: ToolContext | None = None) -> Workspace:
    """Discover the workspace around the start directory."""
    try:
        return await Workspace.discover(context)
    except RepkaError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e


@app.command()
def init(
    path: Annotated[
        Path | None,
        typer.Argument(help="Directory to initialize, defaults to the workspace root"),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Workspace name"),
    ] = None,
) -> None:
    """Write a starter repka.yaml."""
    from repka.cli.commands.init import init_workspace

    context = ToolContext()
    target = path or Path(asyncio.run(context.root()))

    try:
        config_path = init_workspace(target, name, context.settings.config_file)
    except RepkaError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    console.print(f"[green]Created {escape(str(config_path))}[/green]")
    console.print("Run [bold]repka tasks[/bold] to see the configured tasks.")


@app.command("run")
def run_cmd(
    tasks: Annotated[
        list[str] | None,
        typer.Argument(help="Tasks to run, their dependencies run first"),
    ] = None,
    policy: Annotated[
        FailurePolicy | None,
        typer.Option("--policy", "-p", help="What to do when a task fails"),
    ] = None,
    interactive: Annotated[
        bool,
        typer.Option("--interactive", "-i", help="Pick tasks interactively"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show execution order without running"),
    ] = False,
) -> None:
    """Run configured tasks."""
    from repka.commands import handle_run_command

    async def run() -> None:
        workspace = await get_workspace()
        task_names = list(tasks or [])

        selected_policy = policy
        if interactive or not task_names:
            from repka.interactive import select_policy, select_tasks

            try:
                task_names = select_tasks(workspace.config.tasks)
                if task_names and interactive and selected_policy is None:
                    default = workspace.config.command_defaults.policy
                    selected_policy = FailurePolicy(select_policy(default))
            except RuntimeError as e:
                error_console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from e
            if not task_names:
                console.print("[yellow]No tasks selected[/yellow]")
                return

        await handle_run_command(
            workspace,
            task_names,
            console=console,
            error_console=error_console,
            policy=selected_policy,
            dry_run=dry_run,
        )

    asyncio.run(run())


@app.command(
    "exec",
    context_settings={"allow_interspersed_args": False, "ignore_unknown_options": True},
)
def exec_cmd(
    command: Annotated[str, typer.Argument(help="Command to execute")],
    args: Annotated[
        list[str] | None,
        typer.Argument(help="Arguments passed to the command"),
    ] = None,
    cwd: Annotated[
        Path | None,
        typer.Option("--cwd", help="Working directory relative to the workspace root"),
    ] = None,
) -> None:
    """Execute a command in the workspace, exiting with its exit code."""
    from repka.commands import handle_exec_command

    async def run() -> None:
        workspace = await get_workspace()
        await handle_exec_command(
            workspace,
            command,
            list(args or []),
            console=console,
            error_console=error_console,
            cwd=cwd,
        )

    asyncio.run(run())


@app.command("tasks")
def tasks_cmd(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    names: Annotated[
        bool,
        typer.Option("--names", help="Only print task names"),
    ] = False,
) -> None:
    """List configured tasks in execution order."""
    from repka.commands import TasksFormat, handle_tasks_command

    workspace = asyncio.run(get_workspace())

    fmt = TasksFormat.TABLE
    if json_output:
        fmt = TasksFormat.JSON
    elif names:
        fmt = TasksFormat.NAMES

    handle_tasks_command(workspace, console=console, error_console=error_console, format=fmt)


@app.command()
def root() -> None:
    """Print the workspace root directory."""
    context = ToolContext()
    console.print(asyncio.run(context.root()), markup=False, highlight=False, soft_wrap=True)


@app.command()
def info() -> None:
    """Show the workspace root, package manager and packages."""
    from repka.commands import handle_info_command

    workspace = asyncio.run(get_workspace())
    handle_info_command(workspace, console=console, error_console=error_console)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
