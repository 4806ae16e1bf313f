"""点头检测模块，相对校准基线判断头部下垂，快速恢复时记为一次点头"""

import logging
from collections import deque
from typing import Deque, Optional, Tuple

from models.data_models import HeadNodEvent

logger = logging.getLogger(__name__)


class HeadNodDetector:
    """维护待定点头状态、持续下垂计时和 5 分钟窗口内的点头事件"""

    def __init__(
        self,
        pitch_threshold: float = 10.0,
        max_recovery: float = 0.5,
        min_recovery: float = 0.1,
        window_seconds: float = 300.0,
    ):
        self.pitch_threshold = pitch_threshold
        self.max_recovery = max_recovery
        self.min_recovery = min_recovery
        self.window_seconds = window_seconds

        self._events: Deque[HeadNodEvent] = deque()
        self._pending: Optional[Tuple[float, float]] = None  # (timestamp, pitch)
        self.dropped_since: Optional[float] = None
        self.total_count = 0

    def update(self, pitch: float, baseline_pitch: Optional[float], timestamp: float) -> Optional[HeadNodEvent]:
        """
        处理一帧俯仰角。

        Args:
            pitch: 当前俯仰角（度，负值为低头）
            baseline_pitch: 校准基线，缺失时不做检测

        Returns:
            本帧生成的 HeadNodEvent，否则返回 None
        """
        if baseline_pitch is None:
            return None

        # 正值表示相对基线低头
        delta = baseline_pitch - pitch

        if delta > self.pitch_threshold:
            if self._pending is None:
                self._pending = (timestamp, pitch)
            if self.dropped_since is None:
                self.dropped_since = timestamp
            return None

        event = None
        if self._pending is not None:
            start_time, start_pitch = self._pending
            recovery_time = timestamp - start_time
            if self.min_recovery < recovery_time < self.max_recovery:
                event = HeadNodEvent(
                    timestamp=timestamp,
                    pitch_drop=baseline_pitch - start_pitch,
                    recovery_time=recovery_time,
                )
                self._events.append(event)
                self.total_count += 1
            else:
                logger.debug("头部恢复耗时 %.2fs，不计为点头", recovery_time)
            self._pending = None

        self.dropped_since = None
        return event

    def prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._events and self._events[0].timestamp < cutoff:
            self._events.popleft()

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    @property
    def events(self) -> tuple:
        return tuple(self._events)

    def reset(self):
        self._events.clear()
        self._pending = None
        self.dropped_since = None
        self.total_count = 0
