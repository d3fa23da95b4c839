"""Task graph executor for side-effecting build steps (no Pants dependencies).

Pants' rule graph is pure and memoized, so the debug pipeline, which
downloads files, runs BuildTools and blocks on a server process, runs on
this small executor instead. It supports two kinds of edges:

    depends_on      strict: requesting a task schedules its dependencies
    must_run_after  ordering only: applies when both tasks are scheduled

Tasks carry an optional ``only_if`` predicate evaluated right before the
task would run; a skipped task counts as finished for its successors.
Ready tasks run concurrently on a thread pool. The first failure stops
dispatch, in-flight tasks are allowed to finish, and TaskFailedError is
raised. Nothing is retried.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from pants_spigot._exceptions import TaskFailedError, TaskGraphError
from pants_spigot._process import terminate_all

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class TaskOutcome(str, Enum):
    EXECUTED = "executed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class Task:
    """A named unit of work plus its incoming edges."""

    name: str
    action: Callable[[], Any]
    description: str = ""
    only_if: Optional[Callable[[], bool]] = None
    depends_on: list[str] = field(default_factory=list)
    must_run_after: list[str] = field(default_factory=list)

    def depends(self, *names: str) -> "Task":
        for name in names:
            if name not in self.depends_on:
                self.depends_on.append(name)
        return self

    def runs_after(self, *names: str) -> "Task":
        for name in names:
            if name not in self.must_run_after:
                self.must_run_after.append(name)
        return self


@dataclass(frozen=True)
class TaskGraphResult:
    """Outcome of one execution. ``order`` is the completion order."""

    order: tuple[str, ...]
    outcomes: dict[str, TaskOutcome]

    @property
    def executed(self) -> tuple[str, ...]:
        return tuple(n for n in self.order if self.outcomes[n] is TaskOutcome.EXECUTED)

    @property
    def skipped(self) -> tuple[str, ...]:
        return tuple(n for n in self.order if self.outcomes[n] is TaskOutcome.SKIPPED)


class TaskGraph:
    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def register(
        self,
        name: str,
        action: Callable[[], Any],
        *,
        description: str = "",
        only_if: Optional[Callable[[], bool]] = None,
    ) -> Task:
        if name in self._tasks:
            raise TaskGraphError(f"Task {name!r} is already registered")
        task = Task(name=name, action=action, description=description, only_if=only_if)
        self._tasks[name] = task
        return task

    def __getitem__(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise TaskGraphError(f"Unknown task {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._tasks)

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def schedule(self, requested: Iterable[str]) -> tuple[str, ...]:
        """Return the tasks to run for ``requested`` in a valid order.

        Ties are broken by registration order so the plan is deterministic.

        Raises:
            TaskGraphError: On an unknown task name or a cycle.
        """
        scheduled = self._closure(requested)
        predecessors = self._predecessors(scheduled)

        ordered: list[str] = []
        remaining = [name for name in self._tasks if name in scheduled]
        done: set[str] = set()
        while remaining:
            ready = [name for name in remaining if predecessors[name] <= done]
            if not ready:
                raise TaskGraphError(
                    "Task graph has a cycle between: " + ", ".join(sorted(remaining))
                )
            for name in ready:
                remaining.remove(name)
                done.add(name)
                ordered.append(name)
        return tuple(ordered)

    def _closure(self, requested: Iterable[str]) -> set[str]:
        scheduled: set[str] = set()
        stack = list(requested)
        while stack:
            name = stack.pop()
            if name in scheduled:
                continue
            task = self[name]
            scheduled.add(name)
            stack.extend(task.depends_on)
        return scheduled

    def _predecessors(self, scheduled: set[str]) -> dict[str, set[str]]:
        predecessors: dict[str, set[str]] = {}
        for name in scheduled:
            task = self._tasks[name]
            for other in task.must_run_after:
                if other not in self._tasks:
                    raise TaskGraphError(f"Task {name!r} must run after unknown task {other!r}")
            preds = set(task.depends_on)
            preds.update(other for other in task.must_run_after if other in scheduled)
            preds.discard(name)
            predecessors[name] = preds
        return predecessors

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def execute(
        self,
        requested: Iterable[str],
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> TaskGraphResult:
        """Run ``requested`` and everything it depends on.

        Raises:
            TaskGraphError: If the request cannot be scheduled.
            TaskFailedError: If any task raised; its error is the cause.
        """
        plan = self.schedule(requested)
        predecessors = self._predecessors(set(plan))
        logger.debug("Task plan: %s", ", ".join(plan))

        pending = list(plan)
        outcomes: dict[str, TaskOutcome] = {}
        order: list[str] = []
        running: dict[Future, str] = {}
        failure: Optional[TaskFailedError] = None

        pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="spigot-task")
        try:
            while pending or running:
                if failure is None:
                    finished = {n for n, o in outcomes.items() if o is not TaskOutcome.FAILED}
                    for name in [n for n in pending if predecessors[n] <= finished]:
                        pending.remove(name)
                        running[pool.submit(self._run_task, self._tasks[name])] = name
                if not running:
                    break

                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    name = running.pop(future)
                    try:
                        outcomes[name] = future.result()
                    except Exception as exc:
                        outcomes[name] = TaskOutcome.FAILED
                        logger.error("Task %s failed: %s", name, exc)
                        if failure is None:
                            failure = TaskFailedError(name, self._tasks[name].description, exc)
                    order.append(name)
        except BaseException:
            terminate_all()
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown(wait=True)

        if failure is not None:
            raise failure from failure.cause
        return TaskGraphResult(order=tuple(order), outcomes=outcomes)

    @staticmethod
    def _run_task(task: Task) -> TaskOutcome:
        if task.only_if is not None and not task.only_if():
            logger.info("> Task %s SKIPPED", task.name)
            return TaskOutcome.SKIPPED
        logger.info("> Task %s", task.name)
        task.action()
        return TaskOutcome.EXECUTED
