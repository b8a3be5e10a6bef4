"""Workspace package discovery."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

logger = logging.getLogger(__name__)

PackageManager = Literal["pnpm", "yarn", "npm"]

PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"

MANAGER_BY_LOCK_FILE: dict[str, PackageManager] = {
    "yarn.lock": "yarn",
    "pnpm-lock.yaml": "pnpm",
    "package-lock.json": "npm",
}

_PACKAGE_MANAGER_RE = re.compile(r"^(pnpm|yarn|npm)(@.+)?$")


@dataclass
class RepositoryConfiguration:
    """Layout of the repository at ``root``.

    Attributes:
        root: Workspace root directory.
        packages_globs: Globs listed in pnpm-workspace.yaml.
        package_locations: Package directories matched by the globs.
        type: ``multiple-packages`` when globs are declared.
    """

    root: Path
    packages_globs: list[str] = field(default_factory=list)
    package_locations: list[Path] = field(default_factory=list)
    type: Literal["single-package", "multiple-packages"] = "single-package"


def read_packages_globs(root: Path) -> list[str]:
    """Package globs of a pnpm workspace.

    Read errors are logged and yield no globs; only pnpm workspaces are
    supported.
    """
    path = root / PNPM_WORKSPACE_FILE
    if not path.is_file():
        return []
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Cannot read %s: %s", path, e)
        return []
    packages = data.get("packages") if isinstance(data, dict) else None
    if not isinstance(packages, list):
        return []
    return [str(glob) for glob in packages]


def load_repository_configuration(root: Path) -> RepositoryConfiguration:
    """Discover the packages of the workspace at ``root``."""
    globs = read_packages_globs(root)
    if not globs:
        return RepositoryConfiguration(root=root)

    locations: set[Path] = set()
    for glob in globs:
        if glob.startswith("!"):
            continue
        for manifest in root.glob(f"{glob.rstrip('/')}/package.json"):
            locations.add(manifest.parent)

    excluded = [glob[1:] for glob in globs if glob.startswith("!")]
    package_locations = sorted(
        location
        for location in locations
        if not any(location.relative_to(root).match(pattern) for pattern in excluded)
    )
    return RepositoryConfiguration(
        root=root,
        packages_globs=globs,
        package_locations=package_locations,
        type="multiple-packages",
    )


def read_package_json(directory: Path) -> dict[str, Any]:
    """Parsed package.json of ``directory``, or an empty dict."""
    path = directory / "package.json"
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def package_manager_from_package_json(package_json: dict[str, Any]) -> PackageManager | None:
    value = package_json.get("packageManager")
    if not isinstance(value, str):
        return None
    match = _PACKAGE_MANAGER_RE.match(value)
    return match.group(1) if match else None  # type: ignore[return-value]


def package_manager_from_fs(directory: Path) -> PackageManager | None:
    for lock_file, manager in MANAGER_BY_LOCK_FILE.items():
        if (directory / lock_file).exists():
            return manager
    return None


def determine_package_manager(
    directory: Path,
    *,
    package_json: dict[str, Any] | None = None,
    default: PackageManager = "pnpm",
) -> PackageManager:
    """Package manager used by the project in ``directory``.

    The ``packageManager`` field of package.json wins over lock files.
    """
    manifest = package_json if package_json is not None else read_package_json(directory)
    return (
        package_manager_from_package_json(manifest)
        or package_manager_from_fs(directory)
        or default
    )
