"""引擎自有的延迟任务调度，不使用后台线程，由所属引擎在每次调用时驱动"""

import logging
from typing import Callable, List

from timing.clock import Clock

logger = logging.getLogger(__name__)


class DeferredTask:
    """一次性延迟任务，可取消，执行后不会再次执行"""

    def __init__(self, due_time: float, callback: Callable[[], None]):
        self.due_time = due_time
        self._callback = callback
        self._cancelled = False
        self._done = False

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        self._cancelled = True

    def run(self):
        if not self.pending:
            return
        self._done = True
        self._callback()


class DeferredScheduler:
    """按时间源到期执行延迟任务"""

    def __init__(self, clock: Clock):
        self._clock = clock
        self._tasks: List[DeferredTask] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> DeferredTask:
        task = DeferredTask(self._clock.now() + delay, callback)
        self._tasks.append(task)
        return task

    def run_due(self) -> int:
        """执行所有已到期的任务，返回执行数量"""
        now = self._clock.now()
        due = [t for t in self._tasks if t.pending and t.due_time <= now]
        self._tasks = [t for t in self._tasks if t.pending and t.due_time > now]
        for task in sorted(due, key=lambda t: t.due_time):
            task.run()
        return len(due)

    def cancel_all(self):
        """同步取消全部未执行任务"""
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            logger.debug("取消 %d 个延迟任务", len(self._tasks))
        self._tasks = []

    def __len__(self):
        return sum(1 for t in self._tasks if t.pending)
