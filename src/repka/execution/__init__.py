"""External process execution."""

from repka.execution.policy import ExitCodePolicy, SpawnSpec, Stdio
from repka.execution.results import ProcessResult, ScheduleResult, TaskOutcome, TaskStatus
from repka.execution.runner import ProcessRunner

__all__ = [
    "ExitCodePolicy",
    "ProcessResult",
    "ProcessRunner",
    "ScheduleResult",
    "SpawnSpec",
    "Stdio",
    "TaskOutcome",
    "TaskStatus",
]
