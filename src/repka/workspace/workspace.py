"""Workspace discovery."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

from repka.workspace.packages import (
    PackageManager,
    RepositoryConfiguration,
    determine_package_manager,
    load_repository_configuration,
)

if TYPE_CHECKING:
    from repka.config.schema import RepkaConfig
    from repka.context import ToolContext


@dataclass
class Workspace:
    """A discovered workspace.

    Attributes:
        root: Workspace root directory.
        config: Parsed repka.yaml.
        context: Tool context the workspace was discovered with.
    """

    root: Path
    config: RepkaConfig
    context: ToolContext = field(repr=False)

    @classmethod
    async def discover(cls, context: ToolContext | None = None) -> Workspace:
        """Resolve the workspace root and load its configuration.

        Raises:
            ConfigurationError: If repka.yaml is invalid.
        """
        from repka.config.loader import load_config
        from repka.context import ToolContext

        context = context or ToolContext()
        root = Path(await context.root())
        config = load_config(root, context.settings.config_file)
        return cls(root=root, config=config, context=context)

    @cached_property
    def repository(self) -> RepositoryConfiguration:
        return load_repository_configuration(self.root)

    @property
    def package_locations(self) -> list[Path]:
        return self.repository.package_locations

    @cached_property
    def package_manager(self) -> PackageManager:
        return determine_package_manager(self.root)

    @property
    def name(self) -> str:
        return self.config.name or self.root.name
