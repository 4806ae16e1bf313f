"""眨眼检测模块，在闭眼→睁眼的边沿上生成眨眼事件"""

import logging
from collections import deque
from typing import Deque, Optional

from models.data_models import DURATION_TOLERANCE, BlinkEvent

logger = logging.getLogger(__name__)


class BlinkDetector:
    """时长在 [min_duration, max_duration] 内的眨眼进入定长 FIFO，其余直接丢弃"""

    def __init__(
        self,
        min_duration: float = 0.05,
        max_duration: float = 2.0,
        history_count: int = 50,
    ):
        self.min_duration = min_duration
        self.max_duration = max_duration
        self._history: Deque[BlinkEvent] = deque(maxlen=history_count)
        self._blink_start: Optional[float] = None
        self._was_closed = False
        self.total_count = 0

    def update(self, is_closed: bool, timestamp: float) -> Optional[BlinkEvent]:
        """
        处理一帧闭眼状态。

        Returns:
            本帧被接受的 BlinkEvent，否则返回 None
        """
        event = None

        if is_closed and not self._was_closed:
            self._blink_start = timestamp
        elif not is_closed and self._was_closed:
            if self._blink_start is not None:
                blink = BlinkEvent(start_time=self._blink_start, end_time=timestamp)
                if (
                    self.min_duration - DURATION_TOLERANCE
                    <= blink.duration
                    <= self.max_duration + DURATION_TOLERANCE
                ):
                    self._history.append(blink)
                    self.total_count += 1
                    event = blink
                else:
                    logger.debug("丢弃时长异常的眨眼: %.3fs", blink.duration)
            self._blink_start = None

        self._was_closed = is_closed
        return event

    @property
    def history(self) -> tuple:
        return tuple(self._history)

    def reset(self):
        self._history.clear()
        self._blink_start = None
        self._was_closed = False
        self.total_count = 0
