"""Task dependency graph."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from repka.errors import CycleError, MissingDependencyError, TaskGraphError, TaskNotFoundError

TaskBody = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class TaskNode:
    """A named unit of work.

    Attributes:
        name: Unique name of the task.
        body: Coroutine function doing the work.
        depends_on: Names of tasks that have to finish first.
        description: Optional human readable description.
    """

    name: str
    body: TaskBody = field(compare=False)
    depends_on: tuple[str, ...] = ()
    description: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "depends_on", tuple(self.depends_on))


def _index_by_name(tasks: Sequence[TaskNode]) -> dict[str, TaskNode]:
    by_name: dict[str, TaskNode] = {}
    for task in tasks:
        if task.name in by_name:
            raise TaskGraphError(f"Task '{task.name}' is declared more than once")
        by_name[task.name] = task
    return by_name


def order_tasks(tasks: Sequence[TaskNode]) -> list[list[TaskNode]]:
    """Group tasks into levels that can run one after another.

    Every task of a level depends only on tasks of earlier levels. Within
    a level tasks keep their input order.

    Raises:
        TaskGraphError: Two tasks share a name.
        MissingDependencyError: A dependency is not among ``tasks``.
        CycleError: The dependencies form a cycle.
    """
    by_name = _index_by_name(tasks)
    for task in tasks:
        for dependency in task.depends_on:
            if dependency not in by_name:
                raise MissingDependencyError(task.name, dependency)

    remaining = list(tasks)
    placed: set[str] = set()
    levels: list[list[TaskNode]] = []

    while remaining:
        level = [task for task in remaining if placed.issuperset(task.depends_on)]
        if not level:
            raise CycleError([task.name for task in remaining])
        placed.update(task.name for task in level)
        remaining = [task for task in remaining if task.name not in placed]
        levels.append(level)

    return levels


def select_tasks(tasks: Sequence[TaskNode], names: Iterable[str]) -> list[TaskNode]:
    """Requested tasks together with everything they depend on.

    The result keeps the order of ``tasks``.

    Raises:
        TaskNotFoundError: A requested name is not declared.
        MissingDependencyError: A dependency is not declared.
    """
    by_name = _index_by_name(tasks)
    selected: set[str] = set()
    pending = list(names)

    while pending:
        name = pending.pop()
        if name in selected:
            continue
        task = by_name.get(name)
        if task is None:
            raise TaskNotFoundError(name, list(by_name))
        selected.add(name)
        for dependency in task.depends_on:
            if dependency not in by_name:
                raise MissingDependencyError(name, dependency)
            pending.append(dependency)

    return [task for task in tasks if task.name in selected]
