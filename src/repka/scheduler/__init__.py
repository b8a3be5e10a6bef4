"""Dependency-graph task scheduling."""

from repka.scheduler.graph import TaskBody, TaskNode, order_tasks, select_tasks
from repka.scheduler.scheduler import FailurePolicy, TaskScheduler, order, run_tasks

__all__ = [
    "FailurePolicy",
    "TaskBody",
    "TaskNode",
    "TaskScheduler",
    "order",
    "order_tasks",
    "run_tasks",
    "select_tasks",
]
