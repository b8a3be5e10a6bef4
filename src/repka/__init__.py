"""repka - task runner for JavaScript monorepos.

Provides:
- Workspace root detection from lock files and VCS markers
- Process execution with exit-code policies and captured output
- Dependency-ordered task scheduling with pipeline or settle-all failure handling
"""

from repka.config import RepkaConfig, TaskConfig, load_config
from repka.context import ExitStatus, ToolContext
from repka.errors import (
    AggregateFailure,
    ConfigurationError,
    CycleError,
    ExitCodeError,
    MissingDependencyError,
    ProcessError,
    RepkaError,
    SignalError,
    SpawnError,
    TaskGraphError,
    TaskNotFoundError,
)
from repka.execution import (
    ExitCodePolicy,
    ProcessResult,
    ProcessRunner,
    ScheduleResult,
    SpawnSpec,
    Stdio,
    TaskOutcome,
    TaskStatus,
)
from repka.scheduler import FailurePolicy, TaskNode, TaskScheduler, order, run_tasks
from repka.workspace import Workspace, WorkspaceRootResolver

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "WorkspaceRootResolver",
    "ToolContext",
    "ExitStatus",
    "RepkaConfig",
    "TaskConfig",
    "load_config",
    # Execution
    "ExitCodePolicy",
    "ProcessResult",
    "ProcessRunner",
    "SpawnSpec",
    "Stdio",
    # Scheduling
    "FailurePolicy",
    "ScheduleResult",
    "TaskNode",
    "TaskOutcome",
    "TaskScheduler",
    "TaskStatus",
    "order",
    "run_tasks",
    # Errors
    "RepkaError",
    "ConfigurationError",
    "TaskNotFoundError",
    "ProcessError",
    "SpawnError",
    "ExitCodeError",
    "SignalError",
    "TaskGraphError",
    "CycleError",
    "MissingDependencyError",
    "AggregateFailure",
]
