"""Base command infrastructure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from repka.errors import RepkaError

if TYPE_CHECKING:
    from repka.execution.runner import ProcessRunner
    from repka.workspace.workspace import Workspace

TResult = TypeVar("TResult")


@dataclass
class CommandContext:
    """Context passed to all commands.

    Attributes:
        workspace: The workspace instance.
        dry_run: If True, show what would happen without running anything.
        verbose: If True, show detailed output.
        env: Extra environment variables for spawned processes.
    """

    workspace: Workspace
    dry_run: bool = False
    verbose: bool = False
    env: dict[str, str] = field(default_factory=dict)


class _BaseCommand:
    """State and helpers shared by sync and async commands."""

    def __init__(self, context: CommandContext) -> None:
        """Initialize command.

        Args:
            context: Command context.
        """
        self.context = context
        self.workspace = context.workspace

    @property
    def runner(self) -> ProcessRunner:
        """Process runner bound to the workspace's tool context.

        Inherited exit codes land on ``workspace.context.exit_status``.
        """
        return self.workspace.context.runner()

    def spawn_env(self) -> dict[str, str]:
        """Environment overrides for spawned processes.

        Returns:
            ``env`` from repka.yaml with the command's own variables on top.
        """
        env = dict(self.workspace.config.env)
        env.update(self.context.env)
        return env

    def validate(self) -> list[str]:
        """Validate that the command can be executed.

        Returns:
            List of validation errors (empty if valid).
        """
        return []

    def ensure_valid(self) -> None:
        """Raise the first validation error.

        Raises:
            RepkaError: If ``validate`` reported a problem.
        """
        errors = self.validate()
        if errors:
            raise RepkaError(errors[0])


class Command(_BaseCommand, ABC, Generic[TResult]):
    """Base class for repka commands that spawn processes.

    Commands encapsulate the logic for a specific operation.
    They receive a context and return a result.
    """

    @abstractmethod
    async def execute(self) -> TResult:
        """Execute the command.

        Returns:
            Command-specific result.
        """
        ...


class SyncCommand(_BaseCommand, ABC, Generic[TResult]):
    """Base class for commands that only read the workspace."""

    @abstractmethod
    def execute(self) -> TResult:
        """Execute the command synchronously.

        Returns:
            Command-specific result.
        """
        ...
