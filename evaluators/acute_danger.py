"""急性危险评估模块：根据危险状态当前已持续的时间给出分级分值"""

from typing import Optional, Sequence, Tuple

from models.data_models import DURATION_TOLERANCE, AcuteDanger

# (最短持续秒数, 分值)，按持续时间从长到短排列
EYES_CLOSED_TIERS = ((3.0, 100.0), (2.0, 85.0), (1.0, 60.0))
LOOKING_AWAY_TIERS = ((8.0, 75.0), (5.0, 35.0))
HEAD_DROPPED_TIERS = ((3.0, 80.0), (2.0, 50.0))
YAWNING_TIERS = ((2.0, 40.0),)


def tier_score(since: Optional[float], now: float, tiers: Sequence[Tuple[float, float]]) -> float:
    """
    将持续时长映射为分级分值。

    Args:
        since: 危险状态开始时间，None 表示当前不处于该状态
        now: 当前时间
        tiers: 分级表

    Returns:
        命中的最高一级分值，未达到任何一级时为 0.0
    """
    if since is None:
        return 0.0
    elapsed = now - since
    for min_duration, score in tiers:
        if elapsed >= min_duration - DURATION_TOLERANCE:
            return score
    return 0.0


class AcuteDangerTracker:
    """汇总四路信号的急性危险，综合分取最严重的一项"""

    def evaluate(
        self,
        now: float,
        eyes_closed_since: Optional[float] = None,
        looking_away_since: Optional[float] = None,
        head_dropped_since: Optional[float] = None,
        yawning_since: Optional[float] = None,
    ) -> AcuteDanger:
        return AcuteDanger(
            eyes_closed=tier_score(eyes_closed_since, now, EYES_CLOSED_TIERS),
            looking_away=tier_score(looking_away_since, now, LOOKING_AWAY_TIERS),
            head_dropped=tier_score(head_dropped_since, now, HEAD_DROPPED_TIERS),
            yawning=tier_score(yawning_since, now, YAWNING_TIERS),
        )
