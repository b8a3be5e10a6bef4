"""repka commands."""

from repka.commands.base import Command, CommandContext, SyncCommand
from repka.commands.exec import ExecCommand, ExecOptions, exec_command, handle_exec_command
from repka.commands.info import InfoCommand, InfoResult, handle_info_command, workspace_info
from repka.commands.run import (
    RunCommand,
    RunOptions,
    handle_run_command,
    print_schedule_result,
    run_workspace_tasks,
)
from repka.commands.tasks import (
    TaskInfo,
    TasksCommand,
    TasksFormat,
    TasksResult,
    handle_tasks_command,
    list_tasks,
)

__all__ = [
    # Base
    "Command",
    "CommandContext",
    "SyncCommand",
    # Run
    "RunCommand",
    "RunOptions",
    "run_workspace_tasks",
    "handle_run_command",
    "print_schedule_result",
    # Exec
    "ExecCommand",
    "ExecOptions",
    "exec_command",
    "handle_exec_command",
    # Tasks
    "TasksCommand",
    "TasksFormat",
    "TasksResult",
    "TaskInfo",
    "list_tasks",
    "handle_tasks_command",
    # Info
    "InfoCommand",
    "InfoResult",
    "workspace_info",
    "handle_info_command",
]
