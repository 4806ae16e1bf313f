"""综合评分模块：趋势分由归一化窗口指标加权得到，最终分取急性危险分与趋势分中的较大者"""

from models.data_models import ScoreBreakdown, TrendMetrics
from models.fatigue_config import FatigueConfig

# 各指标的饱和上限，达到上限即记满分
PERCLOS_CAP = 50.0              # %
LONG_BLINK_RATE_CAP = 15.0      # 次/分钟
HEAD_NOD_RATE_CAP = 6.0         # 次/5 分钟
YAWN_RATE_CAP = 5.0             # 次/5 分钟
GAZE_DEVIATION_CAP = 40.0       # %
MEAN_BLINK_DURATION_CAP = 0.5   # 秒


def normalized_score(value: float, cap: float) -> float:
    """把指标按上限线性映射到 0-100"""
    return min(max(value / cap, 0.0), 1.0) * 100.0


class CompositeScorer:
    """按配置权重融合趋势分与急性危险分"""

    def __init__(self, config: FatigueConfig):
        self.config = config

    def trend_score(self, trend: TrendMetrics) -> float:
        return self.score(trend, 0.0).trend_score

    def score(self, trend: TrendMetrics, acute_score: float) -> ScoreBreakdown:
        """
        计算综合疲劳分。

        Args:
            trend: 窗口统计指标
            acute_score: 急性危险分（0-100）

        Returns:
            ScoreBreakdown，final_score 限制在 [0, 100]
        """
        cfg = self.config
        perclos_score = normalized_score(trend.perclos, PERCLOS_CAP)
        long_blink_score = normalized_score(trend.long_blink_rate, LONG_BLINK_RATE_CAP)
        blink_duration_score = normalized_score(trend.mean_blink_duration, MEAN_BLINK_DURATION_CAP)
        head_nod_score = normalized_score(trend.head_nod_rate, HEAD_NOD_RATE_CAP)
        yawn_score = normalized_score(trend.yawn_rate, YAWN_RATE_CAP)
        gaze_score = normalized_score(trend.gaze_deviation_percent, GAZE_DEVIATION_CAP)

        trend_score = (
            perclos_score * cfg.perclos_weight
            + long_blink_score * cfg.long_blink_weight
            + blink_duration_score * cfg.mean_blink_duration_weight
            + head_nod_score * cfg.head_nod_weight
            + yawn_score * cfg.yawn_weight
            + gaze_score * cfg.gaze_weight
        )

        final_score = min(max(acute_score, trend_score, 0.0), 100.0)

        return ScoreBreakdown(
            perclos_score=perclos_score,
            long_blink_score=long_blink_score,
            blink_duration_score=blink_duration_score,
            head_nod_score=head_nod_score,
            yawn_score=yawn_score,
            gaze_score=gaze_score,
            trend_score=trend_score,
            acute_score=acute_score,
            final_score=final_score,
        )
