"""Exec command implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from repka.commands.base import Command, CommandContext
from repka.errors import RepkaError
from repka.execution.policy import ExitCodePolicy, SpawnSpec, Stdio
from repka.execution.results import ProcessResult
from repka.workspace.walk import find_bin

if TYPE_CHECKING:
    from repka.workspace.workspace import Workspace


@dataclass
class ExecOptions:
    """Options for exec command."""

    command: str
    args: list[str] = field(default_factory=list)
    cwd: Path | None = None


class ExecCommand(Command[ProcessResult]):
    """Execute a single command in the workspace.

    Unlike 'run', exec takes a direct command rather than a task name
    from configuration. The child shares the terminal and its exit code
    becomes the exit code of repka.
    """

    def __init__(self, context: CommandContext, options: ExecOptions) -> None:
        super().__init__(context)
        self.options = options

    @property
    def cwd(self) -> Path:
        if self.options.cwd is None:
            return self.workspace.root
        return self.workspace.root / self.options.cwd

    async def resolve_executable(self) -> str:
        """Prefer an installed ``node_modules/.bin`` executable over PATH."""
        local = await find_bin(self.options.command, self.cwd)
        return str(local) if local else self.options.command

    async def get_spec(self) -> SpawnSpec:
        return SpawnSpec(
            command=await self.resolve_executable(),
            args=tuple(self.options.args),
            cwd=self.cwd,
            env=self.spawn_env(),
            stdio=Stdio.INHERIT,
            output=(),
            exit_codes=ExitCodePolicy.inherit(),
        )

    async def execute(self) -> ProcessResult:
        """Execute the command."""
        spec = await self.get_spec()
        if self.context.dry_run:
            return ProcessResult(pid=None, status=None)
        return await self.runner.run(spec)


async def exec_command(
    workspace: Workspace,
    command: str,
    args: list[str] | None = None,
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
) -> ProcessResult:
    """Convenience function to execute a command.

    Args:
        workspace: Workspace to run in.
        command: Executable to run.
        args: Its arguments.
        cwd: Working directory relative to the workspace root.
        env: Extra environment variables.

    Returns:
        Process result. The exit code is also recorded on the workspace's
        exit status.
    """

    context = CommandContext(workspace=workspace, env=env or {})
    options = ExecOptions(command=command, args=args or [], cwd=cwd)
    cmd = ExecCommand(context, options)
    return await cmd.execute()


async def handle_exec_command(
    workspace: Workspace,
    command: str,
    args: list[str] | None = None,
    *,
    console: Console,
    error_console: Console,
    cwd: Path | None = None,
) -> None:
    try:
        await exec_command(workspace, command, args, cwd=cwd)
    except RepkaError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    code = workspace.context.exit_status.code
    if code:
        error_console.print(f"[red]✗[/red] {escape(command)} exited with code {code}")
        raise typer.Exit(code)
