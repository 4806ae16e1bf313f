"""闭眼检测模块，维护 PERCLOS 滑动窗口、PERCLOS 历史采样和持续闭眼计时"""

from collections import deque
from typing import Deque, List, Optional

from models.data_models import EyeClosureSample


class EyeClosureDetector:
    """将双眼眨眼系数转换为闭眼状态，计算窗口内 PERCLOS"""

    def __init__(
        self,
        closed_threshold: float = 0.6,
        window_seconds: float = 60.0,
        sample_interval: float = 10.0,
    ):
        self.closed_threshold = closed_threshold
        self.window_seconds = window_seconds
        self.sample_interval = sample_interval

        self._history: Deque[EyeClosureSample] = deque()
        self._closed_count = 0
        self.closed_since: Optional[float] = None

        self._perclos_history: List[float] = []
        self._last_history_sample: Optional[float] = None

    def is_closed(self, left_eye: float, right_eye: float) -> bool:
        """双眼平均眨眼系数超过阈值即为闭眼（0 = 睁开，1 = 闭合）"""
        return (left_eye + right_eye) / 2.0 > self.closed_threshold

    def update(self, is_closed: bool, timestamp: float) -> None:
        self._history.append(EyeClosureSample(timestamp=timestamp, is_closed=is_closed))
        if is_closed:
            self._closed_count += 1
            if self.closed_since is None:
                self.closed_since = timestamp
        else:
            self.closed_since = None

    def prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._history and self._history[0].timestamp < cutoff:
            if self._history.popleft().is_closed:
                self._closed_count -= 1

    @property
    def perclos(self) -> float:
        """窗口内闭眼帧占比（0-100），窗口为空时为 0"""
        if not self._history:
            return 0.0
        return self._closed_count / len(self._history) * 100.0

    @property
    def sample_count(self) -> int:
        return len(self._history)

    @property
    def history(self) -> tuple:
        return tuple(self._history)

    @property
    def perclos_history(self) -> tuple:
        return tuple(self._perclos_history)

    def sample_history(self, now: float) -> Optional[float]:
        """
        每隔 sample_interval 秒把当前 PERCLOS 追加到历史序列。

        Returns:
            本次追加的值，未到采样时间或窗口为空时返回 None
        """
        if not self._history:
            return None
        if self._last_history_sample is not None and now - self._last_history_sample < self.sample_interval:
            return None
        self._last_history_sample = now
        value = self.perclos
        self._perclos_history.append(value)
        return value

    def reset(self):
        self._history.clear()
        self._closed_count = 0
        self.closed_since = None
        self._perclos_history = []
        self._last_history_sample = None
