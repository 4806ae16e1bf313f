"""疲劳融合引擎：逐帧接收面部信号，输出疲劳指标快照、等级变化通知和告警许可"""

import logging
from dataclasses import replace
from typing import Callable, List, Optional

from calibration.baseline_calibrator import BaselineCalibrator
from detectors.blink_detector import BlinkDetector
from detectors.eye_closure_detector import EyeClosureDetector
from detectors.gaze_detector import GazeDetector
from detectors.head_nod_detector import HeadNodDetector
from detectors.yawn_detector import YawnDetector
from evaluators.acute_danger import AcuteDangerTracker
from evaluators.alert_coordinator import AlertCoordinator
from evaluators.composite_scorer import CompositeScorer
from evaluators.level_classifier import LevelClassifier
from evaluators.metrics_aggregator import MetricsAggregator
from models.data_models import (
    Baseline,
    FatigueLevel,
    FatigueMetrics,
    LevelChange,
    Sample,
    TripSummary,
)
from models.fatigue_config import FatigueConfig
from timing.clock import Clock, FrameClock, MonotonicClock
from timing.scheduler import DeferredScheduler

logger = logging.getLogger(__name__)

# 每处理多少帧输出一次调试摘要（60fps 下约 1 秒）
_SUMMARY_LOG_INTERVAL = 60

LevelListener = Callable[[LevelChange], None]


class FatigueEngine:
    """
    单次行程的疲劳融合引擎。

    数据每帧严格向下游流动：信号 → 检测器 → 指标汇总 → 综合评分 → 等级划分 → 告警协调。
    引擎内部没有并发，所有 update()/reset() 调用必须由同一执行上下文串行发起。
    """

    def __init__(self, config: Optional[FatigueConfig] = None, clock: Optional[Clock] = None):
        self.config = config or FatigueConfig()
        self._clock = clock or MonotonicClock()
        cfg = self.config

        self._frame_clock = FrameClock(self._clock)
        self._scheduler = DeferredScheduler(self._clock)
        self._calibrator = BaselineCalibrator(cfg.calibration_sample_count)

        self._eye = EyeClosureDetector(
            closed_threshold=cfg.eye_closed_threshold,
            window_seconds=cfg.perclos_window_seconds,
            sample_interval=cfg.perclos_sample_interval,
        )
        self._blinks = BlinkDetector(
            min_duration=cfg.min_blink_duration,
            max_duration=cfg.max_blink_duration,
            history_count=cfg.blink_history_count,
        )
        self._nods = HeadNodDetector(
            pitch_threshold=cfg.head_nod_pitch_threshold,
            max_recovery=cfg.head_nod_recovery_threshold,
            min_recovery=cfg.head_nod_min_recovery,
            window_seconds=cfg.head_nod_window_minutes * 60.0,
        )
        self._yawns = YawnDetector(
            jaw_threshold=cfg.yawn_jaw_threshold,
            min_duration=cfg.yawn_min_duration,
            window_seconds=cfg.yawn_window_minutes * 60.0,
        )
        self._gaze = GazeDetector(
            deviation_threshold=cfg.gaze_deviation_threshold,
            window_seconds=cfg.gaze_window_seconds,
        )

        self._acute = AcuteDangerTracker()
        self._aggregator = MetricsAggregator(
            long_blink_threshold=cfg.long_blink_threshold,
            blink_rate_window_seconds=cfg.blink_rate_window_seconds,
            head_nod_window_minutes=cfg.head_nod_window_minutes,
            yawn_window_minutes=cfg.yawn_window_minutes,
        )
        self._scorer = CompositeScorer(cfg)
        self._classifier = LevelClassifier(cfg)
        self._alerts = AlertCoordinator(cfg.alert_cooldown_seconds, self._clock, self._scheduler)

        self._listeners: List[LevelListener] = []
        self._init_trip_state()

    def _init_trip_state(self):
        self._metrics = FatigueMetrics()
        self._level = FatigueLevel.NORMAL
        self._processed_frames = 0
        self._skipped_frames = 0
        self._trip_start: Optional[float] = None
        self._last_timestamp: Optional[float] = None
        self._peak_score = 0.0
        self._peak_level = FatigueLevel.NORMAL

    # ---- 订阅 ----

    def add_level_listener(self, callback: LevelListener) -> None:
        self._listeners.append(callback)

    def remove_level_listener(self, callback: LevelListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ---- 状态查询 ----

    @property
    def metrics(self) -> FatigueMetrics:
        """最新的只读快照，冷却字段按当前时间刷新"""
        self._scheduler.run_due()
        return replace(
            self._metrics,
            last_alert_time=self._alerts.last_alert_time,
            alert_cooldown_active=self._alerts.cooldown_active,
        )

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def level(self) -> FatigueLevel:
        return self._level

    @property
    def baseline(self) -> Optional[Baseline]:
        return self._calibrator.baseline

    @property
    def is_calibrated(self) -> bool:
        return self._calibrator.is_calibrated

    @property
    def skipped_frames(self) -> int:
        return self._skipped_frames

    # ---- 主流程 ----

    def update(
        self,
        left_eye: float,
        right_eye: float,
        head_pitch: float,
        jaw_open: float,
        gaze_x: float,
        gaze_y: float,
        is_spatially_calibrated: bool,
        timestamp: Optional[float] = None,
    ) -> FatigueMetrics:
        """
        处理一帧面部信号。

        Args:
            left_eye: 左眼眨眼系数 [0, 1]，0 = 睁开，1 = 闭合
            right_eye: 右眼眨眼系数 [0, 1]
            head_pitch: 头部俯仰角（度，负值为低头）
            jaw_open: 下颌张开度 [0, 1]
            gaze_x: 视线水平偏移（归一化）
            gaze_y: 视线垂直偏移（归一化）
            is_spatially_calibrated: 外部空间校准是否已完成
            timestamp: 采集时刻；为 None 时读取引擎时间源

        Returns:
            FatigueMetrics 快照
        """
        now = self._clock.now() if timestamp is None else timestamp
        sample = Sample(
            left_eye=left_eye,
            right_eye=right_eye,
            head_pitch=head_pitch,
            jaw_open=jaw_open,
            gaze_x=gaze_x,
            gaze_y=gaze_y,
            is_calibrated=bool(is_spatially_calibrated),
            timestamp=now,
        )
        return self.update_sample(sample)

    def update_sample(self, sample: Sample) -> FatigueMetrics:
        """处理一个已打好时间戳的 Sample"""
        self._scheduler.run_due()

        if not sample.is_finite():
            self._skipped_frames += 1
            logger.debug("跳过含非有限值的帧: %s", sample)
            return self.metrics

        self._frame_clock.tick(sample.timestamp)
        sample = sample.clamped()
        if self._trip_start is None:
            self._trip_start = sample.timestamp
        self._last_timestamp = sample.timestamp

        if not self._calibrator.is_calibrated:
            self._calibrator.consume(
                sample.left_eye, sample.right_eye, sample.head_pitch, sample.is_calibrated
            )
            self._metrics = replace(
                self._metrics,
                is_calibrated=self._calibrator.is_calibrated,
                calibration_progress=self._calibrator.progress,
                estimated_fps=self._frame_clock.estimated_fps,
                timestamp=sample.timestamp,
            )
            return self.metrics

        self._process(sample)
        return self.metrics

    def _process(self, sample: Sample):
        now = sample.timestamp
        baseline = self._calibrator.baseline

        is_closed = self._eye.is_closed(sample.left_eye, sample.right_eye)
        self._eye.update(is_closed, now)
        self._blinks.update(is_closed, now)
        self._nods.update(sample.head_pitch, baseline.pitch, now)
        self._yawns.update(sample.jaw_open, now)
        self._gaze.update(sample.gaze_x, sample.gaze_y, now)

        self._eye.prune(now)
        self._nods.prune(now)
        self._yawns.prune(now)
        self._gaze.prune(now)

        trend = self._aggregator.aggregate(now, self._eye, self._blinks, self._nods, self._yawns, self._gaze)
        self._eye.sample_history(now)

        acute = self._acute.evaluate(
            now,
            eyes_closed_since=self._eye.closed_since,
            looking_away_since=self._gaze.looking_away_since,
            head_dropped_since=self._nods.dropped_since,
            yawning_since=self._yawns.yawning_since,
        )
        breakdown = self._scorer.score(trend, acute.score)
        level = self._classifier.classify(breakdown.final_score)

        self._metrics = FatigueMetrics(
            perclos=trend.perclos,
            long_blink_rate=trend.long_blink_rate,
            mean_blink_duration=trend.mean_blink_duration,
            head_nod_rate=trend.head_nod_rate,
            yawn_rate=trend.yawn_rate,
            yawn_count=trend.yawn_count,
            gaze_deviation_percent=trend.gaze_deviation_percent,
            acute_score=breakdown.acute_score,
            trend_score=breakdown.trend_score,
            fatigue_score=breakdown.final_score,
            fatigue_level=level,
            last_alert_time=self._alerts.last_alert_time,
            alert_cooldown_active=self._alerts.cooldown_active,
            perclos_history=self._eye.perclos_history,
            is_calibrated=True,
            calibration_progress=self._calibrator.progress,
            estimated_fps=self._frame_clock.estimated_fps,
            timestamp=now,
        )

        if breakdown.final_score > self._peak_score:
            self._peak_score = breakdown.final_score
        if level > self._peak_level:
            self._peak_level = level

        if level is not self._level:
            change = LevelChange(previous=self._level, current=level, score=breakdown.final_score, timestamp=now)
            self._level = level
            logger.info(
                "疲劳等级变化: %s -> %s (得分 %.0f)",
                change.previous.value, change.current.value, change.score,
            )
            self._notify(change)

        self._processed_frames += 1
        if self._processed_frames % _SUMMARY_LOG_INTERVAL == 0:
            logger.debug(
                "PERCLOS: %.1f%%, 得分: %.0f, 等级: %s, 闭眼窗口: %d 帧",
                trend.perclos, breakdown.final_score, level.value, self._eye.sample_count,
            )

    def _notify(self, change: LevelChange):
        for callback in list(self._listeners):
            try:
                callback(change)
            except Exception:
                logger.exception("等级变化回调执行失败")

    # ---- 告警 ----

    def poll(self) -> int:
        """无新帧时执行到期的延迟任务（冷却解除），返回执行数量"""
        return self._scheduler.run_due()

    def should_trigger_alert(self) -> bool:
        self._scheduler.run_due()
        return self._alerts.should_trigger_alert(self._level)

    def mark_alert_triggered(self) -> None:
        self._alerts.mark_alert_triggered()

    # ---- 生命周期 ----

    def reset(self) -> None:
        """清空所有历史、急性计时和校准状态，回到校准前；同步取消未执行的冷却任务"""
        self._scheduler.cancel_all()
        self._alerts.reset()
        self._calibrator.reset()
        self._eye.reset()
        self._blinks.reset()
        self._nods.reset()
        self._yawns.reset()
        self._gaze.reset()
        self._frame_clock.reset()
        self._init_trip_state()
        logger.info("疲劳引擎已重置")

    def trip_summary(self) -> TripSummary:
        duration = 0.0
        if self._trip_start is not None and self._last_timestamp is not None:
            duration = self._last_timestamp - self._trip_start
        return TripSummary(
            duration=duration,
            alert_count=self._alerts.alert_count,
            blink_count=self._blinks.total_count,
            yawn_count=self._yawns.total_count,
            head_nod_count=self._nods.total_count,
            peak_score=self._peak_score,
            peak_level=self._peak_level,
            perclos_history=self._eye.perclos_history,
        )
