"""repka exception hierarchy."""

from __future__ import annotations

import traceback
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from repka.execution.results import ProcessResult, ScheduleResult


class RepkaError(Exception):
    """Base exception for all repka errors.

    Attributes:
        message: Human readable description of the failure.
    """

    def __init__(self, message: str, **attrs: Any) -> None:
        super().__init__(message)
        self.message = message
        for key, value in attrs.items():
            setattr(self, key, value)


class ConfigurationError(RepkaError):
    """Invalid or unreadable repka.yaml."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message, path=path)


class TaskNotFoundError(RepkaError):
    """A requested task is not declared."""

    def __init__(self, name: str, available: Sequence[str]) -> None:
        listed = ", ".join(available) if available else "none"
        super().__init__(
            f"Task '{name}' not found. Available: {listed}",
            name=name,
            available=list(available),
        )


class ProcessError(RepkaError):
    """Base class for failures of a spawned external process.

    Attributes:
        command: Full command line of the process.
        result: Result of the process, if it produced one.
        call_site: Stack frames captured where the process was requested.
    """

    command: str
    result: ProcessResult | None
    call_site: traceback.StackSummary | None

    def __init__(self, message: str, *, command: str, **attrs: Any) -> None:
        attrs.setdefault("result", None)
        super().__init__(message, command=command, call_site=None, **attrs)


class SpawnError(ProcessError):
    """The process could not be started at all."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f'Failed to start command "{command}": {reason}', command=command)


class ExitCodeError(ProcessError):
    """The process exited with a code rejected by the exit-code policy."""

    code: int

    def __init__(self, command: str, code: int) -> None:
        super().__init__(
            f'Command "{command}" has failed with code {code}',
            command=command,
            code=code,
        )


class SignalError(ProcessError):
    """The process was terminated by a signal."""

    signal: str

    def __init__(self, command: str, signal: str) -> None:
        super().__init__(
            f'Failed to execute command "{command}" - {signal}',
            command=command,
            signal=signal,
        )


class TaskGraphError(RepkaError):
    """The declared task graph is invalid."""


class CycleError(TaskGraphError):
    """Task dependencies form a cycle and cannot be ordered."""

    def __init__(self, tasks: Sequence[str]) -> None:
        super().__init__(
            "Cannot determine the order of execution of tasks, "
            f"dependencies form a cycle: {', '.join(tasks)}",
            tasks=list(tasks),
        )


class MissingDependencyError(TaskGraphError):
    """A task depends on a task that was not declared."""

    def __init__(self, task: str, dependency: str) -> None:
        super().__init__(
            f"Task '{task}' depends on unknown task '{dependency}'",
            task=task,
            dependency=dependency,
        )


class AggregateFailure(RepkaError):
    """One or more sibling tasks failed during a settle-all run.

    The message mirrors the first failure; all failures of the level are
    kept in ``errors`` in task order.
    """

    errors: list[BaseException]
    first: BaseException
    result: ScheduleResult | None

    def __init__(
        self,
        errors: Sequence[BaseException],
        result: ScheduleResult | None = None,
    ) -> None:
        if not errors:
            raise ValueError("AggregateFailure requires at least one error")
        first = errors[0]
        message = getattr(first, "message", None) or str(first) or type(first).__name__
        super().__init__(message, errors=list(errors), first=first, result=result)
