# scoring_api/scheduler.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTask:
    name: str
    due_at: float
    action: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    done: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class TransitionScheduler:
    """
    Single-threaded queue of deferred transitions (e.g. "switch innings").

    Nothing runs on its own: the owner calls run_due() before each
    operation, so deferred work is serialized with direct calls. A delay of
    0 makes a task due immediately.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._tasks: List[ScheduledTask] = []

    def schedule(self, name: str, action: Callable[[], None], delay_seconds: float = 0.0) -> ScheduledTask:
        task = ScheduledTask(name=name, due_at=self._clock() + max(0.0, delay_seconds), action=action)
        self._tasks.append(task)
        logger.debug("Scheduled %s in %.2fs", name, delay_seconds)
        return task

    def pending(self) -> List[ScheduledTask]:
        return [t for t in self._tasks if not t.cancelled and not t.done]

    @property
    def has_pending(self) -> bool:
        return bool(self.pending())

    def run_due(self) -> int:
        """Runs due tasks in FIFO order. Returns how many ran."""
        now = self._clock()
        ran = 0
        for task in list(self._tasks):
            if task.cancelled or task.done or task.due_at > now:
                continue
            task.done = True
            task.action()
            ran += 1
        self._tasks = self.pending()
        return ran

    def cancel_all(self) -> int:
        live = self.pending()
        for task in live:
            task.cancel()
        self._tasks = []
        return len(live)
