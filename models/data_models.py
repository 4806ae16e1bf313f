"""核心数据模型定义"""

import functools
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple


# 帧时间戳为绝对时间，相减会带来浮点误差，时长阈值按此容差比较
DURATION_TOLERANCE = 1e-9


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class Sample:
    """单帧输入信号，每次 update 消费一次，不做存储"""
    left_eye: float
    right_eye: float
    head_pitch: float
    jaw_open: float
    gaze_x: float
    gaze_y: float
    is_calibrated: bool
    timestamp: float

    def is_finite(self) -> bool:
        """所有数值信号均为有限值时返回 True"""
        return all(
            math.isfinite(v)
            for v in (
                self.left_eye, self.right_eye, self.head_pitch,
                self.jaw_open, self.gaze_x, self.gaze_y, self.timestamp,
            )
        )

    def clamped(self) -> "Sample":
        """
        将信号限制到约定范围。

        眨眼系数和下颌张开度为 [0, 1]，俯仰角为 [-90, 90] 度；
        视线偏移没有上界约定，保持原值。
        """
        return replace(
            self,
            left_eye=_clamp(self.left_eye, 0.0, 1.0),
            right_eye=_clamp(self.right_eye, 0.0, 1.0),
            head_pitch=_clamp(self.head_pitch, -90.0, 90.0),
            jaw_open=_clamp(self.jaw_open, 0.0, 1.0),
        )


@dataclass(frozen=True)
class EyeClosureSample:
    """PERCLOS 窗口中的单帧闭眼记录"""
    timestamp: float
    is_closed: bool


@dataclass(frozen=True)
class BlinkEvent:
    """一次有效眨眼"""
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class HeadNodEvent:
    """一次点头：头部下垂后在恢复窗口内抬起"""
    timestamp: float
    pitch_drop: float
    recovery_time: float


@dataclass(frozen=True)
class YawnEvent:
    """一次持续足够长的哈欠"""
    timestamp: float
    duration: float


@dataclass(frozen=True)
class GazeSample:
    """视线窗口中的单帧偏离记录"""
    timestamp: float
    is_deviated: bool


@functools.total_ordering
class FatigueLevel(Enum):
    """疲劳等级，按严重程度有序"""
    NORMAL = "Normal"
    MILD = "Mild Fatigue"
    MODERATE = "Moderate Fatigue"
    HIGH = "High Fatigue"
    CRITICAL = "Critical"

    @property
    def alert_priority(self) -> int:
        return _ALERT_PRIORITY[self]

    @property
    def alert_eligible(self) -> bool:
        """中度及以上等级才允许触发告警"""
        return self.alert_priority >= _ALERT_PRIORITY[FatigueLevel.MODERATE]

    def __lt__(self, other):
        if not isinstance(other, FatigueLevel):
            return NotImplemented
        return self.alert_priority < other.alert_priority


_ALERT_PRIORITY = {
    FatigueLevel.NORMAL: 0,
    FatigueLevel.MILD: 1,
    FatigueLevel.MODERATE: 2,
    FatigueLevel.HIGH: 3,
    FatigueLevel.CRITICAL: 4,
}


@dataclass(frozen=True)
class Baseline:
    """单次行程的校准基线"""
    eye_openness: float
    pitch: float
    sample_count: int


@dataclass(frozen=True)
class TrendMetrics:
    """窗口统计指标（趋势分输入）"""
    perclos: float = 0.0
    long_blink_rate: float = 0.0
    mean_blink_duration: float = 0.0
    head_nod_rate: float = 0.0
    yawn_rate: float = 0.0
    yawn_count: int = 0
    gaze_deviation_percent: float = 0.0


@dataclass(frozen=True)
class AcuteDanger:
    """各信号当前正在持续的危险分值"""
    eyes_closed: float = 0.0
    looking_away: float = 0.0
    head_dropped: float = 0.0
    yawning: float = 0.0

    @property
    def score(self) -> float:
        """取最严重的一项，不做累加"""
        return max(self.eyes_closed, self.looking_away, self.head_dropped, self.yawning)


@dataclass(frozen=True)
class ScoreBreakdown:
    """综合评分明细，各分项均为 0-100"""
    perclos_score: float
    long_blink_score: float
    blink_duration_score: float
    head_nod_score: float
    yawn_score: float
    gaze_score: float
    trend_score: float
    acute_score: float
    final_score: float


@dataclass(frozen=True)
class FatigueMetrics:
    """对外发布的只读指标快照"""
    perclos: float = 0.0
    long_blink_rate: float = 0.0
    mean_blink_duration: float = 0.0
    head_nod_rate: float = 0.0
    yawn_rate: float = 0.0
    yawn_count: int = 0
    gaze_deviation_percent: float = 0.0
    acute_score: float = 0.0
    trend_score: float = 0.0
    fatigue_score: float = 0.0
    fatigue_level: FatigueLevel = FatigueLevel.NORMAL
    last_alert_time: Optional[float] = None
    alert_cooldown_active: bool = False
    perclos_history: Tuple[float, ...] = field(default_factory=tuple)
    is_calibrated: bool = False
    calibration_progress: int = 0
    estimated_fps: float = 0.0
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class LevelChange:
    """疲劳等级变化通知"""
    previous: FatigueLevel
    current: FatigueLevel
    score: float
    timestamp: float

    @property
    def escalated(self) -> bool:
        return self.current.alert_priority > self.previous.alert_priority


@dataclass(frozen=True)
class TripSummary:
    """行程报告"""
    duration: float
    alert_count: int
    blink_count: int
    yawn_count: int
    head_nod_count: int
    peak_score: float
    peak_level: FatigueLevel
    perclos_history: Tuple[float, ...]
