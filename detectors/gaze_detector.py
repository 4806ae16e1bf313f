"""视线偏离检测模块"""

import math
from collections import deque
from typing import Deque, Optional

from models.data_models import GazeSample


class GazeDetector:
    """按视线偏移幅值判断是否看向别处，维护 60 秒窗口和持续偏离计时"""

    def __init__(self, deviation_threshold: float = 1.5, window_seconds: float = 60.0):
        self.deviation_threshold = deviation_threshold
        self.window_seconds = window_seconds

        self._history: Deque[GazeSample] = deque()
        self._deviated_count = 0
        self.looking_away_since: Optional[float] = None

    @staticmethod
    def magnitude(gaze_x: float, gaze_y: float) -> float:
        return math.hypot(gaze_x, gaze_y)

    def update(self, gaze_x: float, gaze_y: float, timestamp: float) -> bool:
        is_deviated = self.magnitude(gaze_x, gaze_y) > self.deviation_threshold

        self._history.append(GazeSample(timestamp=timestamp, is_deviated=is_deviated))
        if is_deviated:
            self._deviated_count += 1
            if self.looking_away_since is None:
                self.looking_away_since = timestamp
        else:
            self.looking_away_since = None

        return is_deviated

    def prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._history and self._history[0].timestamp < cutoff:
            if self._history.popleft().is_deviated:
                self._deviated_count -= 1

    @property
    def deviation_percent(self) -> float:
        if not self._history:
            return 0.0
        return self._deviated_count / len(self._history) * 100.0

    @property
    def history(self) -> tuple:
        return tuple(self._history)

    def reset(self):
        self._history.clear()
        self._deviated_count = 0
        self.looking_away_since = None
