"""Info command implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from repka.commands.base import CommandContext, SyncCommand
from repka.errors import RepkaError

if TYPE_CHECKING:
    from repka.workspace.workspace import Workspace


@dataclass
class InfoResult:
    """Result of info command."""

    name: str
    root: Path
    package_manager: str
    type: str
    packages_globs: list[str] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)
    tasks: list[str] = field(default_factory=list)


class InfoCommand(SyncCommand[InfoResult]):
    """Describe the workspace: root, package manager and packages."""

    def execute(self) -> InfoResult:
        repository = self.workspace.repository
        return InfoResult(
            name=self.workspace.name,
            root=self.workspace.root,
            package_manager=self.workspace.package_manager,
            type=repository.type,
            packages_globs=list(repository.packages_globs),
            packages=[
                str(location.relative_to(self.workspace.root))
                for location in repository.package_locations
            ],
            tasks=self.workspace.config.task_names,
        )


def workspace_info(workspace: Workspace) -> InfoResult:
    """Convenience function to describe a workspace."""
    return InfoCommand(CommandContext(workspace=workspace)).execute()


def handle_info_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
) -> None:
    try:
        info = workspace_info(workspace)
    except RepkaError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    console.print(f"[bold]{escape(info.name)}[/bold]")
    console.print(f"  Root:            {escape(str(info.root))}")
    console.print(f"  Package manager: {info.package_manager}")
    console.print(f"  Layout:          {info.type}")
    console.print(f"  Tasks:           {escape(', '.join(info.tasks)) or '-'}")

    if info.packages:
        table = Table(title="Packages")
        table.add_column("Path", style="bold")
        for path in info.packages:
            table.add_row(escape(path))
        console.print(table)
