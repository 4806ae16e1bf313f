"""疲劳融合引擎配置：阈值、窗口长度、权重和等级分界"""

import math
from dataclasses import asdict, dataclass, fields


@dataclass(frozen=True)
class FatigueConfig:
    """单次行程内不可变的引擎配置"""

    # 窗口长度
    perclos_window_seconds: float = 60.0
    blink_history_count: int = 50
    blink_rate_window_seconds: float = 60.0
    head_nod_window_minutes: float = 5.0
    yawn_window_minutes: float = 5.0
    gaze_window_seconds: float = 60.0
    perclos_sample_interval: float = 10.0

    # 阈值
    eye_closed_threshold: float = 0.6
    long_blink_threshold: float = 0.4
    min_blink_duration: float = 0.05
    max_blink_duration: float = 2.0
    yawn_jaw_threshold: float = 0.7
    yawn_min_duration: float = 1.5
    gaze_deviation_threshold: float = 1.5
    head_nod_pitch_threshold: float = 10.0
    head_nod_recovery_threshold: float = 0.5
    head_nod_min_recovery: float = 0.1

    # 校准
    calibration_sample_count: int = 120

    # 告警
    alert_cooldown_seconds: float = 30.0

    # 综合评分权重，总和为 1.0
    perclos_weight: float = 0.40
    long_blink_weight: float = 0.20
    head_nod_weight: float = 0.15
    yawn_weight: float = 0.10
    gaze_weight: float = 0.10
    mean_blink_duration_weight: float = 0.05

    # 等级分界
    mild_threshold: float = 30.0
    moderate_threshold: float = 55.0
    high_threshold: float = 70.0
    critical_threshold: float = 85.0

    def __post_init__(self):
        weights = self.weights
        if any(w < 0 for w in weights):
            raise ValueError(f"权重不能为负数: {weights}")
        if not math.isclose(sum(weights), 1.0, abs_tol=1e-6):
            raise ValueError(f"权重之和必须为 1.0，当前为 {sum(weights):.4f}")

        thresholds = self.level_thresholds
        if not all(a < b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError(f"等级阈值必须严格递增: {thresholds}")
        if thresholds[0] <= 0 or thresholds[-1] > 100:
            raise ValueError(f"等级阈值必须位于 (0, 100] 区间: {thresholds}")

        positive = (
            "perclos_window_seconds", "blink_history_count", "blink_rate_window_seconds",
            "head_nod_window_minutes", "yawn_window_minutes", "gaze_window_seconds",
            "perclos_sample_interval", "long_blink_threshold", "min_blink_duration",
            "yawn_min_duration", "gaze_deviation_threshold", "head_nod_pitch_threshold",
            "head_nod_recovery_threshold", "calibration_sample_count",
            "alert_cooldown_seconds",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise ValueError(f"配置项 {name} 必须为正数: {getattr(self, name)}")

        if self.min_blink_duration > self.max_blink_duration:
            raise ValueError("眨眼时长下限不能大于上限")
        if not 0 <= self.head_nod_min_recovery < self.head_nod_recovery_threshold:
            raise ValueError("点头恢复时间下限必须小于上限")

    @property
    def weights(self) -> tuple:
        return (
            self.perclos_weight,
            self.long_blink_weight,
            self.head_nod_weight,
            self.yawn_weight,
            self.gaze_weight,
            self.mean_blink_duration_weight,
        )

    @property
    def level_thresholds(self) -> tuple:
        return (
            self.mild_threshold,
            self.moderate_threshold,
            self.high_threshold,
            self.critical_threshold,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "FatigueConfig":
        """从字典构建配置，忽略未知字段和 None 值"""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)
