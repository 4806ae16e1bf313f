"""哈欠检测模块，下颌张开度持续超过阈值足够长时间记为一次哈欠"""

from collections import deque
from typing import Deque, Optional

from models.data_models import DURATION_TOLERANCE, YawnEvent


class YawnDetector:
    """在张嘴→闭嘴的边沿上判断哈欠时长，维护 5 分钟窗口内的哈欠事件"""

    def __init__(
        self,
        jaw_threshold: float = 0.7,
        min_duration: float = 1.5,
        window_seconds: float = 300.0,
    ):
        self.jaw_threshold = jaw_threshold
        self.min_duration = min_duration
        self.window_seconds = window_seconds

        self._events: Deque[YawnEvent] = deque()
        self.yawning_since: Optional[float] = None
        self._was_yawning = False
        self.total_count = 0

    def update(self, jaw_open: float, timestamp: float) -> Optional[YawnEvent]:
        is_yawning = jaw_open > self.jaw_threshold
        event = None

        if is_yawning and not self._was_yawning:
            self.yawning_since = timestamp
        elif not is_yawning and self._was_yawning:
            if self.yawning_since is not None:
                duration = timestamp - self.yawning_since
                if duration >= self.min_duration - DURATION_TOLERANCE:
                    event = YawnEvent(timestamp=timestamp, duration=duration)
                    self._events.append(event)
                    self.total_count += 1
            self.yawning_since = None

        self._was_yawning = is_yawning
        return event

    def prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._events and self._events[0].timestamp < cutoff:
            self._events.popleft()

    @property
    def events(self) -> tuple:
        return tuple(self._events)

    def reset(self):
        self._events.clear()
        self.yawning_since = None
        self._was_yawning = False
        self.total_count = 0
