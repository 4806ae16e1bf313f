"""告警协调模块：带冷却时间的告警许可判断"""

import logging
from enum import Enum
from typing import Optional

from models.data_models import FatigueLevel
from timing.clock import Clock
from timing.scheduler import DeferredScheduler, DeferredTask

logger = logging.getLogger(__name__)


class AlertState(Enum):
    IDLE = "idle"
    COOLDOWN_ACTIVE = "cooldown_active"


class AlertCoordinator:
    """
    告警冷却状态机 {IDLE, COOLDOWN_ACTIVE}。

    mark_alert_triggered() 记录告警时间并进入冷却，同时登记一个延迟任务在
    冷却结束后回到 IDLE。延迟任务带有代号，reset() 或再次告警后旧任务即使
    被执行也不会改动状态。
    """

    def __init__(self, cooldown_seconds: float, clock: Clock, scheduler: DeferredScheduler):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._scheduler = scheduler

        self.state = AlertState.IDLE
        self.last_alert_time: Optional[float] = None
        self.alert_count = 0
        self._cooldown_task: Optional[DeferredTask] = None
        self._generation = 0

    @property
    def cooldown_active(self) -> bool:
        return self.state is AlertState.COOLDOWN_ACTIVE

    def should_trigger_alert(self, level: FatigueLevel) -> bool:
        """当前等级允许告警，且从未告警或距上次告警已超过冷却时间时返回 True"""
        if not level.alert_eligible:
            return False
        if self.last_alert_time is not None:
            elapsed = self._clock.now() - self.last_alert_time
            if elapsed < self.cooldown_seconds:
                return False
        return True

    def mark_alert_triggered(self) -> None:
        self.last_alert_time = self._clock.now()
        self.alert_count += 1
        self.state = AlertState.COOLDOWN_ACTIVE

        self._cancel_pending()
        generation = self._generation
        self._cooldown_task = self._scheduler.call_later(
            self.cooldown_seconds, lambda: self._clear_cooldown(generation)
        )
        logger.debug("告警已触发，进入 %.0fs 冷却", self.cooldown_seconds)

    def reset(self):
        self._cancel_pending()
        self.state = AlertState.IDLE
        self.last_alert_time = None
        self.alert_count = 0

    def _cancel_pending(self):
        self._generation += 1
        if self._cooldown_task is not None:
            self._cooldown_task.cancel()
            self._cooldown_task = None

    def _clear_cooldown(self, generation: int):
        if generation != self._generation:
            return
        self.state = AlertState.IDLE
        self._cooldown_task = None
        logger.debug("告警冷却结束")
