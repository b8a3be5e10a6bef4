"""Shared test fixtures for repka tests."""

from __future__ import annotations

import json
import sys
import tempfile
from collections.abc import Awaitable, Callable, Generator
from pathlib import Path

import pytest
from dotenv import load_dotenv

from repka.config.settings import Settings
from repka.context import ToolContext
from repka.workspace import Workspace

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")


def py(code: str) -> list[str]:
    """argv running ``code`` with the current interpreter."""
    return [sys.executable, "-c", code]


def yaml_argv(code: str) -> str:
    """``py(code)`` as an inline YAML list."""
    return json.dumps(py(code))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's INIT_CWD and repka settings out of the tests."""
    for name in ("INIT_CWD", "REPKA_LOG_LEVEL", "REPKA_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def sample_repka_yaml() -> str:
    """Sample repka.yaml content."""
    return f"""\
name: test-workspace

env:
  REPKA_TEST: "1"

tasks:
  install:
    description: Install dependencies
    run: {yaml_argv("print('installing')")}
  build:
    description: Build packages
    run: {yaml_argv("print('building')")}
    depends_on: [install]
  lint:
    run: {yaml_argv("print('linting')")}
    depends_on: [install]
  test:
    description: Run tests
    run: {yaml_argv("import os; print('testing', os.environ['REPKA_TEST'])")}
    depends_on: [build]

command_defaults:
  policy: pipeline
"""


def create_package(path: Path, name: str, version: str = "0.1.0") -> None:
    """Create a package.json package."""
    path.mkdir(parents=True, exist_ok=True)
    (path / "package.json").write_text(json.dumps({"name": name, "version": version}))


@pytest.fixture
def workspace_dir(temp_dir: Path, sample_repka_yaml: str) -> Path:
    """Create a sample pnpm monorepo."""
    (temp_dir / "repka.yaml").write_text(sample_repka_yaml)
    (temp_dir / "pnpm-lock.yaml").write_text("lockfileVersion: '9.0'\n")
    (temp_dir / "pnpm-workspace.yaml").write_text("packages:\n  - packages/*\n")
    (temp_dir / "package.json").write_text(
        json.dumps({"name": "test-workspace", "private": True, "packageManager": "pnpm@9.1.0"})
    )

    create_package(temp_dir / "packages" / "pkg-a", "pkg-a")
    create_package(temp_dir / "packages" / "pkg-b", "pkg-b", "2.0.0")
    (temp_dir / "packages" / "not-a-package").mkdir()

    return temp_dir


def tool_context(start: Path) -> ToolContext:
    """Tool context starting the root search at ``start``."""
    return ToolContext(settings=Settings(init_cwd=str(start)))


@pytest.fixture
async def workspace(workspace_dir: Path) -> Workspace:
    """Discovered sample workspace."""
    return await Workspace.discover(tool_context(workspace_dir))


@pytest.fixture
def discover() -> Callable[[Path], Awaitable[Workspace]]:
    """Discover the workspace around a directory."""

    async def _discover(start: Path) -> Workspace:
        return await Workspace.discover(tool_context(start))

    return _discover
