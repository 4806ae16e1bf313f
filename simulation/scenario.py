"""合成信号场景，生成逐帧 Sample 序列用于回放和测试"""

from typing import List

import numpy as np

from models.data_models import Sample

SCENARIOS = ("alert", "drowsy", "microsleep", "distracted")

# 睁眼 / 闭眼时的眨眼系数
_EYE_OPEN = 0.1
_EYE_CLOSED = 0.95


def _event_starts(rng: np.random.Generator, first: float, end: float, mean_gap: float) -> List[float]:
    """在 [first, end) 内按平均间隔 ±25% 抖动生成事件起点"""
    starts = []
    t = first
    while t < end:
        starts.append(t)
        t += rng.uniform(0.75 * mean_gap, 1.25 * mean_gap)
    return starts


def _window(t: np.ndarray, start: float, duration: float) -> np.ndarray:
    return (t >= start) & (t < start + duration)


def generate_scenario(
    name: str,
    duration_seconds: float = 60.0,
    fps: int = 60,
    seed=None,
    calibration_lead_seconds: float = 0.5,
    start_time: float = 0.0,
    calibration_sample_count: int = 120,
) -> List[Sample]:
    """
    生成合成场景。

    Args:
        name: "alert" | "drowsy" | "microsleep" | "distracted"
        duration_seconds: 场景总时长
        fps: 帧率
        seed: 随机种子
        calibration_lead_seconds: 空间校准完成前的时长，此段 is_calibrated 为 False
        start_time: 第一帧时间戳
        calibration_sample_count: 基线采集帧数，疲劳事件在基线采集完成 1 秒后才出现

    Returns:
        按时间排序的 Sample 列表
    """
    if name not in SCENARIOS:
        raise ValueError(f"不支持的场景: {name}")

    rng = np.random.default_rng(seed)
    n = int(round(duration_seconds * fps))
    elapsed = np.arange(n) / fps

    eye = np.clip(rng.normal(_EYE_OPEN, 0.02, n), 0.0, 0.3)
    pitch = rng.normal(0.0, 1.0, n)
    jaw = np.clip(rng.normal(0.1, 0.03, n), 0.0, 0.4)
    gaze_x = rng.normal(0.0, 0.15, n)
    gaze_y = rng.normal(0.0, 0.15, n)

    settle = calibration_lead_seconds + calibration_sample_count / fps + 1.0

    if name == "drowsy":
        for start in _event_starts(rng, settle, duration_seconds, 2.5):
            eye[_window(elapsed, start, rng.uniform(0.45, 0.8))] = _EYE_CLOSED
        for start in _event_starts(rng, settle + 5.0, duration_seconds, 20.0):
            pitch[_window(elapsed, start, 0.3)] = -15.0
        for start in _event_starts(rng, settle + 10.0, duration_seconds, 40.0):
            jaw[_window(elapsed, start, 2.5)] = 0.85
    else:
        for start in _event_starts(rng, settle, duration_seconds, 4.0):
            eye[_window(elapsed, start, 0.15)] = _EYE_CLOSED

    if name == "microsleep":
        eye[_window(elapsed, settle + 5.0, 3.5)] = _EYE_CLOSED
    elif name == "distracted":
        gaze_x[_window(elapsed, settle + 5.0, 9.0)] = 2.0

    calibrated = elapsed >= calibration_lead_seconds
    timestamps = start_time + elapsed

    return [
        Sample(
            left_eye=float(eye[i]),
            right_eye=float(eye[i]),
            head_pitch=float(pitch[i]),
            jaw_open=float(jaw[i]),
            gaze_x=float(gaze_x[i]),
            gaze_y=float(gaze_y[i]),
            is_calibrated=bool(calibrated[i]),
            timestamp=float(timestamps[i]),
        )
        for i in range(n)
    ]
