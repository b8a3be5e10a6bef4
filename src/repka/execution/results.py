"""Process and task execution results."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a single spawned process.

    Attributes:
        pid: Process id, if the process started.
        status: Exit code, or None when terminated by a signal.
        signal: Name of the terminating signal, if any.
        stdout: Captured stdout text.
        stderr: Captured stderr text.
        output: Captured chunks of both streams in arrival order.
        error: Error attached by the exit-code policy, if any.
    """

    pid: int | None
    status: int | None
    signal: str | None = None
    stdout: str = ""
    stderr: str = ""
    output: tuple[str, ...] = ()
    error: BaseException | None = None

    @property
    def combined(self) -> str:
        """Both streams interleaved in the order the chunks arrived."""
        return "".join(self.output)

    @property
    def success(self) -> bool:
        return self.error is None and self.status == 0


class TaskStatus(Enum):
    """Status of a scheduled task."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


@dataclass
class TaskOutcome:
    """Result of one task of a scheduling run."""

    name: str
    status: TaskStatus
    duration_ms: int = 0
    value: Any = None
    error: BaseException | None = None

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status == TaskStatus.FAILURE


@dataclass
class ScheduleResult:
    """Outcomes of a scheduling run, in level order.

    Attributes:
        levels: Task names grouped by execution level.
        outcomes: One outcome per task.
    """

    levels: list[list[str]] = field(default_factory=list)
    outcomes: list[TaskOutcome] = field(default_factory=list)

    def __iter__(self) -> Iterator[TaskOutcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    def get(self, name: str) -> TaskOutcome | None:
        return next((o for o in self.outcomes if o.name == name), None)

    @property
    def all_success(self) -> bool:
        return all(o.success for o in self.outcomes)

    @property
    def failures(self) -> list[TaskOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def skipped_count(self) -> int:
        return sum(
            1 for o in self.outcomes if o.status in (TaskStatus.SKIPPED, TaskStatus.CANCELLED)
        )
