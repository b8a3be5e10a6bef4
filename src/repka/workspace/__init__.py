"""Workspace discovery and root detection."""

from repka.workspace.packages import (
    RepositoryConfiguration,
    determine_package_manager,
    load_repository_configuration,
    read_packages_globs,
)
from repka.workspace.root import MARKERS, OnceCell, WorkspaceRootResolver, guess_root
from repka.workspace.walk import find_bin, iter_ancestors, upward_directory_search
from repka.workspace.workspace import Workspace

__all__ = [
    "MARKERS",
    "OnceCell",
    "RepositoryConfiguration",
    "Workspace",
    "WorkspaceRootResolver",
    "determine_package_manager",
    "find_bin",
    "guess_root",
    "iter_ancestors",
    "load_repository_configuration",
    "read_packages_globs",
    "upward_directory_search",
]
