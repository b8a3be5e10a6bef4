"""Level-by-level execution of a task graph."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from enum import Enum

from repka.errors import AggregateFailure
from repka.execution.results import ScheduleResult, TaskOutcome, TaskStatus
from repka.scheduler.graph import TaskNode, order_tasks

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """What happens when a task fails.

    PIPELINE aborts as soon as a task fails, cancelling its running
    siblings. SETTLE_ALL lets the whole level finish before failing.
    """

    PIPELINE = "pipeline"
    SETTLE_ALL = "settle-all"


async def _run_task(task: TaskNode) -> TaskOutcome:
    start = time.monotonic()
    logger.debug("Starting task %s", task.name)
    try:
        value = await task.body()
    except Exception as exc:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.error('Failed to run task "%s": %s', task.name, exc)
        return TaskOutcome(task.name, TaskStatus.FAILURE, duration_ms, error=exc)
    duration_ms = int((time.monotonic() - start) * 1000)
    logger.debug("Finished task %s in %dms", task.name, duration_ms)
    return TaskOutcome(task.name, TaskStatus.SUCCESS, duration_ms, value=value)


class TaskScheduler:
    """Run tasks in dependency order.

    Levels run strictly one after another; all tasks of a level are
    started together.

    Attributes:
        policy: Default failure policy of :meth:`run`.
    """

    def __init__(self, policy: FailurePolicy | str = FailurePolicy.PIPELINE) -> None:
        self.policy = FailurePolicy(policy)

    def order(self, tasks: Sequence[TaskNode]) -> list[list[TaskNode]]:
        """Execution levels of ``tasks``, see :func:`order_tasks`."""
        return order_tasks(tasks)

    async def run(
        self,
        tasks: Sequence[TaskNode],
        policy: FailurePolicy | str | None = None,
    ) -> ScheduleResult:
        """Run every task once, level by level.

        The graph is validated before any task starts.

        Args:
            tasks: Tasks to run.
            policy: Overrides the scheduler's default failure policy.

        Returns:
            Outcomes of all tasks when every task succeeded.

        Raises:
            TaskGraphError: The graph cannot be ordered.
            AggregateFailure: SETTLE_ALL policy and a task of a level failed.
            Exception: PIPELINE policy, the first error raised by a task.
        """
        active = FailurePolicy(policy) if policy is not None else self.policy
        levels = order_tasks(tasks)
        result = ScheduleResult(levels=[[task.name for task in level] for level in levels])

        for index, level in enumerate(levels):
            logger.debug(
                "Running level %d/%d: %s",
                index + 1,
                len(levels),
                ", ".join(task.name for task in level),
            )
            if active is FailurePolicy.PIPELINE:
                outcomes = await self._run_pipeline_level(level)
            else:
                outcomes = await asyncio.gather(*(_run_task(task) for task in level))
            result.outcomes.extend(outcomes)

            failures = [outcome for outcome in outcomes if outcome.failed]
            if not failures:
                continue

            for later in levels[index + 1 :]:
                result.outcomes.extend(TaskOutcome(task.name, TaskStatus.SKIPPED) for task in later)

            first = failures[0].error
            assert first is not None
            if active is FailurePolicy.PIPELINE:
                raise first
            raise AggregateFailure([f.error for f in failures if f.error], result) from first

        return result

    async def _run_pipeline_level(self, level: list[TaskNode]) -> list[TaskOutcome]:
        """Run a level, cancelling the rest of it on the first failure."""
        running = {asyncio.ensure_future(_run_task(task)): task for task in level}
        outcomes: dict[str, TaskOutcome] = {}
        pending = set(running)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for future in sorted(done, key=lambda f: level.index(running[f])):
                    outcome = future.result()
                    outcomes[outcome.name] = outcome
                if any(outcomes[running[f].name].failed for f in done):
                    break
        finally:
            for future in pending:
                future.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        for future in pending:
            task = running[future]
            if not future.cancelled():
                # finished before the cancellation reached it
                outcomes[task.name] = future.result()
                continue
            logger.debug("Cancelled task %s", task.name)
            outcomes[task.name] = TaskOutcome(task.name, TaskStatus.CANCELLED)

        return [outcomes[task.name] for task in level]


async def run_tasks(
    tasks: Sequence[TaskNode],
    policy: FailurePolicy | str = FailurePolicy.PIPELINE,
) -> ScheduleResult:
    """Convenience function running ``tasks`` with a fresh scheduler."""
    return await TaskScheduler(policy).run(tasks)


def order(tasks: Sequence[TaskNode]) -> list[list[TaskNode]]:
    """Execution levels of ``tasks``."""
    return order_tasks(tasks)
