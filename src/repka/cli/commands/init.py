"""Init command implementation."""

from __future__ import annotations

import json
from pathlib import Path

from repka.config.settings import DEFAULT_CONFIG_FILE
from repka.errors import ConfigurationError
from repka.templates import (
    INSTALL_TASK_TEMPLATE,
    REPKA_YAML_TEMPLATE,
    SCRIPT_TASK_TEMPLATE,
    STARTER_SCRIPTS,
)
from repka.workspace.packages import determine_package_manager, read_package_json


def get_script_tasks(path: Path, package_manager: str) -> list[str]:
    """Tasks for the starter scripts declared in the root package.json."""
    package_json = read_package_json(path)
    scripts = package_json.get("scripts") or {}
    return [
        SCRIPT_TASK_TEMPLATE.format(
            name=name, description=description, package_manager=package_manager
        )
        for name, description in STARTER_SCRIPTS.items()
        if name in scripts
    ]


def init_workspace(
    path: Path,
    name: str | None = None,
    filename: str = DEFAULT_CONFIG_FILE,
) -> Path:
    """Write a starter repka.yaml into ``path``.

    Args:
        path: Workspace root.
        name: Workspace name, defaults to the directory name.
        filename: Config file name.

    Returns:
        Path of the written file.

    Raises:
        ConfigurationError: If the file already exists.
    """
    path = path.resolve()

    if not path.exists():
        path.mkdir(parents=True)

    config_path = path / filename
    if config_path.exists():
        raise ConfigurationError("Workspace already initialized", path=config_path)

    if not name:
        name = path.name

    package_manager = determine_package_manager(path)
    tasks = [INSTALL_TASK_TEMPLATE.format(package_manager=package_manager)]
    tasks.extend(get_script_tasks(path, package_manager))

    # JSON strings are valid double-quoted YAML scalars
    content = REPKA_YAML_TEMPLATE.format(name=json.dumps(name), tasks="\n\n".join(tasks))
    config_path.write_text(content, encoding="utf-8")
    return config_path
