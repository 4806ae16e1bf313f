"""时间源抽象与帧时钟"""

import time
from typing import Optional


class Clock:
    """时间源接口，返回以秒为单位的单调时间戳"""

    def now(self) -> float:
        raise NotImplementedError


class MonotonicClock(Clock):
    """基于 time.monotonic 的真实时间源"""

    def now(self) -> float:
        return time.monotonic()


class ManualClock(Clock):
    """手动推进的虚拟时间源，用于回放和测试"""

    def __init__(self, start: float = 0.0):
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        """向前推进指定秒数，返回推进后的时间"""
        self._now += seconds
        return self._now

    def set(self, timestamp: float) -> None:
        self._now = timestamp


class FrameClock:
    """为每帧打时间戳，并按 1 秒窗口估计有效采样率（仅用于诊断）"""

    def __init__(self, clock: Clock, initial_fps: float = 60.0):
        self._clock = clock
        self._initial_fps = initial_fps
        self.estimated_fps = initial_fps
        self._frame_count = 0
        self._window_start: Optional[float] = None

    def tick(self, timestamp: Optional[float] = None) -> float:
        """
        记录一帧。

        Args:
            timestamp: 采集端给出的时间戳；为 None 时读取时间源

        Returns:
            本帧时间戳
        """
        now = self._clock.now() if timestamp is None else timestamp

        if self._window_start is None:
            self._window_start = now
        else:
            self._frame_count += 1
            elapsed = now - self._window_start
            if elapsed >= 1.0:
                self.estimated_fps = self._frame_count / elapsed
                self._frame_count = 0
                self._window_start = now

        return now

    def reset(self):
        self.estimated_fps = self._initial_fps
        self._frame_count = 0
        self._window_start = None
