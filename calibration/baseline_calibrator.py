"""基线校准模块，在空间校准完成后采集固定数量的样本，计算单次行程的眼睛与俯仰角基线"""

import logging
import math
from typing import List, Optional, Tuple

from models.data_models import Baseline

logger = logging.getLogger(__name__)

# 每采集多少个样本输出一次进度
_PROGRESS_LOG_INTERVAL = 30


def compute_mean(values: list) -> float:
    """
    计算算术平均值。

    使用 math.fsum 精确求和，相同输入得到与输入完全一致的均值。

    Args:
        values: 非空浮点数列表
    """
    return math.fsum(values) / len(values)


class BaselineCalibrator:
    """采集 (左眼, 右眼, 俯仰角) 样本并生成 Baseline；完成前下游不做任何疲劳计算"""

    def __init__(self, sample_count: int = 120):
        self.sample_count = sample_count
        self._samples: List[Tuple[float, float, float]] = []
        self._is_calibrating = False
        self._baseline: Optional[Baseline] = None

    @property
    def is_calibrated(self) -> bool:
        return self._baseline is not None

    @property
    def is_calibrating(self) -> bool:
        return self._is_calibrating

    @property
    def progress(self) -> int:
        """已采集的样本数"""
        if self._baseline is not None:
            return self._baseline.sample_count
        return len(self._samples)

    @property
    def baseline(self) -> Optional[Baseline]:
        return self._baseline

    def consume(
        self,
        left_eye: float,
        right_eye: float,
        pitch: float,
        spatially_calibrated: bool,
    ) -> Optional[Baseline]:
        """
        处理一帧校准输入。

        外部空间校准标志首次为真时开始采集，之后每帧采集一个样本，
        与标志后续取值无关。

        Returns:
            本帧完成校准时返回 Baseline，否则返回 None
        """
        if self._baseline is not None:
            return None

        if not self._is_calibrating:
            if not spatially_calibrated:
                return None
            self._start()

        self._samples.append((left_eye, right_eye, pitch))

        count = len(self._samples)
        if count % _PROGRESS_LOG_INTERVAL == 0:
            logger.debug("校准中... %d/%d 个样本", count, self.sample_count)

        if count >= self.sample_count:
            return self._finalize()
        return None

    def reset(self):
        self._samples = []
        self._is_calibrating = False
        self._baseline = None

    def _start(self):
        self._samples = []
        self._is_calibrating = True
        logger.info("空间校准已完成，开始采集疲劳基线")

    def _finalize(self) -> Baseline:
        eye_values = [(left + right) / 2.0 for left, right, _ in self._samples]
        pitch_values = [pitch for _, _, pitch in self._samples]

        self._baseline = Baseline(
            eye_openness=compute_mean(eye_values),
            pitch=compute_mean(pitch_values),
            sample_count=len(self._samples),
        )
        self._samples = []
        self._is_calibrating = False

        logger.info(
            "校准完成: 基线眼睛 %.2f, 基线俯仰角 %.1f°",
            self._baseline.eye_openness,
            self._baseline.pitch,
        )
        return self._baseline
