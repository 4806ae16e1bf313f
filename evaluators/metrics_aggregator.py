"""窗口指标汇总模块，每帧从各检测器的历史重新计算统计量"""

import math

from detectors.blink_detector import BlinkDetector
from detectors.eye_closure_detector import EyeClosureDetector
from detectors.gaze_detector import GazeDetector
from detectors.head_nod_detector import HeadNodDetector
from detectors.yawn_detector import YawnDetector
from models.data_models import TrendMetrics

# 点头和哈欠频率的报告周期（分钟）
_RATE_PERIOD_MINUTES = 5.0


def rate_per_period(count: int, window_minutes: float) -> float:
    """把窗口内的事件数换算为每 5 分钟的频率"""
    return count / window_minutes * _RATE_PERIOD_MINUTES


class MetricsAggregator:
    """计算 PERCLOS、长眨眼频率（次/分钟）、平均眨眼时长、点头频率、哈欠频率和视线偏离比例"""

    def __init__(
        self,
        long_blink_threshold: float = 0.4,
        blink_rate_window_seconds: float = 60.0,
        head_nod_window_minutes: float = 5.0,
        yawn_window_minutes: float = 5.0,
    ):
        self.long_blink_threshold = long_blink_threshold
        self.blink_rate_window_seconds = blink_rate_window_seconds
        self.head_nod_window_minutes = head_nod_window_minutes
        self.yawn_window_minutes = yawn_window_minutes

    def aggregate(
        self,
        now: float,
        eye: EyeClosureDetector,
        blinks: BlinkDetector,
        nods: HeadNodDetector,
        yawns: YawnDetector,
        gaze: GazeDetector,
    ) -> TrendMetrics:
        cutoff = now - self.blink_rate_window_seconds
        recent = [b for b in blinks.history if b.end_time > cutoff]
        long_blinks = sum(1 for b in recent if b.duration > self.long_blink_threshold)
        mean_duration = math.fsum(b.duration for b in recent) / len(recent) if recent else 0.0

        yawn_count = len(yawns.events)

        return TrendMetrics(
            perclos=eye.perclos,
            long_blink_rate=long_blinks / (self.blink_rate_window_seconds / 60.0),
            mean_blink_duration=mean_duration,
            head_nod_rate=rate_per_period(len(nods.events), self.head_nod_window_minutes),
            yawn_rate=rate_per_period(yawn_count, self.yawn_window_minutes),
            yawn_count=yawn_count,
            gaze_deviation_percent=gaze.deviation_percent,
        )
