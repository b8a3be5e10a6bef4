"""Interactive terminal UI components."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

try:
    import questionary
    from questionary import Style
    _QUESTIONARY_AVAILABLE = True
except ImportError:
    questionary = None  # type: ignore
    Style = object  # type: ignore
    _QUESTIONARY_AVAILABLE = False

from repka.config.schema import TaskConfig

logger = logging.getLogger(__name__)


def _ensure_questionary_available() -> None:
    """Raise a RuntimeError with install instructions when questionary is missing."""
    if not _QUESTIONARY_AVAILABLE:
        raise RuntimeError(
            "Interactive UI requires the 'questionary' package. "
            "Install it with: pip install 'repka[interactive]' or 'pip install questionary'"
        )


def get_style() -> Style:
    """Style used for interactive prompts."""
    _ensure_questionary_available()

    return Style(
        [
            ("qmark", "fg:#2e7d32 bold"),
            ("question", "bold"),
            ("answer", "fg:#f57c00 bold"),
            ("pointer", "fg:#2e7d32 bold"),
            ("highlighted", "fg:#2e7d32 bold"),
            ("selected", "fg:#f57c00"),
            ("separator", "fg:#f57c00"),
            ("instruction", "fg:#888888"),
        ]
    )


def _safe_ask(fn: Callable[..., Any], *args: Any, default: Any = None, **kwargs: Any) -> Any:
    """Run a questionary prompt and return ``default`` when it is cancelled.

    Prompts fail outside a terminal; such failures count as cancellation.
    """
    _ensure_questionary_available()

    try:
        prompt_obj = fn(*args, **kwargs)
        res = prompt_obj.ask() if hasattr(prompt_obj, "ask") else prompt_obj
    except KeyboardInterrupt:
        return default
    except Exception as e:
        logger.debug("Prompt failed: %s", e)
        return default

    return res if res is not None else default


def select_tasks(tasks: dict[str, TaskConfig]) -> list[str]:
    """Interactively select tasks to run.

    Args:
        tasks: Configured tasks by name.

    Returns:
        Selected task names in declaration order (empty if cancelled).
    """
    _ensure_questionary_available()

    if not tasks:
        return []

    width = max(len(name) for name in tasks) + 2
    choices = [
        questionary.Choice(
            title=f"{name.ljust(width)} {task.description or ''}".rstrip(),
            value=name,
            checked=False,
        )
        for name, task in tasks.items()
    ]

    selected = _safe_ask(
        questionary.checkbox,
        "Which tasks would you like to run?",
        choices=choices,
        style=get_style(),
        instruction="(Space to select, Enter to confirm)",
        default=[],
    )
    chosen = set(selected or [])
    return [name for name in tasks if name in chosen]


def select_policy(default: str = "pipeline") -> str:
    """Ask how failures should be handled."""
    _ensure_questionary_available()

    choices = [
        questionary.Choice("Stop at the first failure", value="pipeline"),
        questionary.Choice("Run everything in the level, then report", value="settle-all"),
    ]
    return _safe_ask(
        questionary.select,
        "When a task fails:",
        choices=choices,
        style=get_style(),
        use_indicator=True,
        default=default,
    )
