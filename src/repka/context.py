"""Per-invocation tool state."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from repka.config.settings import Settings
from repka.workspace.root import WorkspaceRootResolver, guess_root

if TYPE_CHECKING:
    from repka.execution.runner import ProcessRunner


@dataclass
class ExitStatus:
    """Exit code the current program should finish with.

    Processes run with the ``inherit`` exit-code policy record their code
    here instead of raising; the CLI exits with it at the end.
    """

    code: int | None = None

    def inherit(self, code: int) -> None:
        """Record a child's exit code unless a failure was recorded already."""
        if self.code is None or self.code == 0:
            self.code = code

    def fail(self, code: int = 1) -> None:
        self.inherit(code)


@dataclass
class ToolContext:
    """State shared by everything one tool invocation does.

    Attributes:
        settings: Environment-derived settings.
        root_resolver: Memoizes the workspace root for this invocation.
        exit_status: Out-of-band exit code forwarded from child processes.
    """

    settings: Settings = field(default_factory=Settings.from_env)
    root_resolver: WorkspaceRootResolver = field(default_factory=WorkspaceRootResolver)
    exit_status: ExitStatus = field(default_factory=ExitStatus)

    @property
    def start_directory(self) -> str:
        return self.settings.init_cwd or os.getcwd()

    async def root(self) -> str:
        return await self.root_resolver.resolve(self.start_directory)

    def display_root(self) -> str:
        """Best known root, without touching the filesystem."""
        return self.root_resolver.peek() or guess_root(self.start_directory)

    def runner(self) -> ProcessRunner:
        from repka.execution.runner import ProcessRunner

        return ProcessRunner(self)
