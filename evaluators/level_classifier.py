"""疲劳等级划分模块"""

from models.data_models import FatigueLevel
from models.fatigue_config import FatigueConfig


class LevelClassifier:
    """按配置的分界把综合分映射为疲劳等级，每档下界包含在内"""

    def __init__(self, config: FatigueConfig):
        self._bands = (
            (config.critical_threshold, FatigueLevel.CRITICAL),
            (config.high_threshold, FatigueLevel.HIGH),
            (config.moderate_threshold, FatigueLevel.MODERATE),
            (config.mild_threshold, FatigueLevel.MILD),
        )

    def classify(self, score: float) -> FatigueLevel:
        for threshold, level in self._bands:
            if score >= threshold:
                return level
        return FatigueLevel.NORMAL
