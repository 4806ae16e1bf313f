"""引擎工作线程：由唯一的后台线程驱动 FatigueEngine，采集回调只做非阻塞投递"""

import logging
import queue
import threading
from typing import Callable, Optional

from engine.fatigue_engine import FatigueEngine
from models.data_models import FatigueMetrics, LevelChange

logger = logging.getLogger(__name__)

_STOP = object()
_RESET = object()


def publish_latest(target: queue.Queue, item) -> None:
    """非阻塞放入队列，队列已满时丢弃最旧的一项"""
    try:
        target.put_nowait(item)
    except queue.Full:
        try:
            target.get_nowait()
        except queue.Empty:
            pass
        try:
            target.put_nowait(item)
        except queue.Full:
            pass


def _drain(target: queue.Queue) -> None:
    while True:
        try:
            target.get_nowait()
        except queue.Empty:
            return


class EngineWorker:
    """
    引擎的唯一执行上下文。

    采集端调用 submit() 投递信号，从不等待引擎；工作线程串行执行 update()/reset()，
    把不可变的指标快照和等级变化放入 snapshots / level_changes 队列供其他线程读取。
    """

    def __init__(
        self,
        engine: FatigueEngine,
        max_pending_frames: int = 120,
        snapshot_queue_size: int = 8,
        alert_handler: Optional[Callable[[FatigueMetrics], None]] = None,
        poll_interval: float = 0.1,
    ):
        self._engine = engine
        self._inbox: queue.Queue = queue.Queue(maxsize=max_pending_frames)
        self.snapshots: queue.Queue = queue.Queue(maxsize=snapshot_queue_size)
        self.level_changes: queue.Queue = queue.Queue(maxsize=snapshot_queue_size)
        self._alert_handler = alert_handler
        self._poll_interval = poll_interval

        self._thread: Optional[threading.Thread] = None
        self._latest: Optional[FatigueMetrics] = None
        self._dropped = 0

        engine.add_level_listener(self._on_level_change)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def dropped_frames(self) -> int:
        return self._dropped

    @property
    def latest_metrics(self) -> Optional[FatigueMetrics]:
        """工作线程最近发布的快照（引用赋值，读取无需加锁）"""
        return self._latest

    def start(self):
        if self.is_running:
            return
        self._thread = threading.Thread(target=self._run, name="fatigue-engine", daemon=True)
        self._thread.start()
        logger.info("引擎工作线程已启动")

    def stop(self, timeout: Optional[float] = None):
        """处理完已投递的帧后停止线程"""
        if self._thread is None:
            return
        self._inbox.put(_STOP)
        self._thread.join(timeout)
        self._thread = None
        logger.info("引擎工作线程已停止")

    def submit(
        self,
        left_eye: float,
        right_eye: float,
        head_pitch: float,
        jaw_open: float,
        gaze_x: float,
        gaze_y: float,
        is_spatially_calibrated: bool,
        timestamp: Optional[float] = None,
    ) -> bool:
        """
        投递一帧信号，不阻塞调用方。

        Args:
            timestamp: 采集时刻；为 None 时在投递时读取引擎时间源

        Returns:
            收件队列已满时丢弃本帧并返回 False
        """
        frame = {
            "left_eye": left_eye,
            "right_eye": right_eye,
            "head_pitch": head_pitch,
            "jaw_open": jaw_open,
            "gaze_x": gaze_x,
            "gaze_y": gaze_y,
            "is_spatially_calibrated": is_spatially_calibrated,
            "timestamp": self._engine.clock.now() if timestamp is None else timestamp,
        }
        try:
            self._inbox.put_nowait(frame)
            return True
        except queue.Full:
            self._dropped += 1
            logger.debug("引擎处理积压，丢弃一帧 (累计 %d)", self._dropped)
            return False

    def reset(self):
        """
        在工作线程中串行执行 engine.reset()，不阻塞调用方。

        收件队列中尚未处理的帧属于旧行程，直接丢弃；已排队的停止请求保留。
        """
        discarded = 0
        stop_pending = False
        while True:
            try:
                item = self._inbox.get_nowait()
            except queue.Empty:
                break
            if item is _STOP:
                stop_pending = True
            elif item is not _RESET:
                discarded += 1
        if discarded:
            logger.debug("重置前丢弃 %d 帧未处理的旧行程数据", discarded)

        publish_latest(self._inbox, _RESET)
        if stop_pending:
            publish_latest(self._inbox, _STOP)

    def _run(self):
        while True:
            try:
                item = self._inbox.get(timeout=self._poll_interval)
            except queue.Empty:
                self._engine.poll()
                continue

            if item is _STOP:
                break
            if item is _RESET:
                self._engine.reset()
                _drain(self.snapshots)
                _drain(self.level_changes)
                self._latest = self._engine.metrics
                publish_latest(self.snapshots, self._latest)
                continue

            metrics = self._engine.update(**item)
            if self._alert_handler is not None and self._engine.should_trigger_alert():
                self._engine.mark_alert_triggered()
                metrics = self._engine.metrics
                try:
                    self._alert_handler(metrics)
                except Exception:
                    logger.exception("告警回调执行失败")

            self._latest = metrics
            publish_latest(self.snapshots, metrics)

    def _on_level_change(self, change: LevelChange):
        publish_latest(self.level_changes, change)
