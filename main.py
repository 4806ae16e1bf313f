"""疲劳融合引擎回放入口：把录制的逐帧信号或合成场景送入引擎，输出等级变化、告警和行程报告"""

import argparse
import json
import logging
from typing import Iterable, List

from display.report import format_level_change, format_metrics_line, format_trip_report
from engine.fatigue_engine import FatigueEngine
from models.data_models import LevelChange, Sample, TripSummary
from models.fatigue_config import FatigueConfig
from simulation.recording import load_recording
from simulation.scenario import SCENARIOS, generate_scenario
from timing.clock import ManualClock

# 默认配置
_DEFAULTS = FatigueConfig().to_dict()


class ReplaySystem:
    """在虚拟时钟上回放信号，并模拟外部告警播放方的冷却调用方式。"""

    def __init__(self, config_path=None, status_interval: float = 10.0):
        config = self._load_config(config_path)
        self.clock = ManualClock()
        self.engine = FatigueEngine(FatigueConfig.from_dict(config), clock=self.clock)
        self.engine.add_level_listener(self._on_level_change)
        self.status_interval = status_interval
        self.level_changes: List[LevelChange] = []
        self.alert_times: List[float] = []

    @staticmethod
    def _load_config(config_path):
        """从 JSON 配置文件加载阈值参数，缺失字段使用默认值。"""
        config = dict(_DEFAULTS)

        if config_path is None:
            return config

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            print(f"警告: 配置文件不存在 {config_path}，使用默认阈值")
            return config
        except json.JSONDecodeError:
            print(f"警告: 配置文件格式错误 {config_path}，使用默认阈值")
            return config

        # 用配置文件中的值覆盖默认值
        for key in _DEFAULTS:
            if key in data and data[key] is not None:
                config[key] = data[key]

        try:
            FatigueConfig.from_dict(config)
        except (TypeError, ValueError) as e:
            print(f"警告: 配置文件取值无效 {config_path} ({e})，使用默认阈值")
            return dict(_DEFAULTS)

        return config

    def run(self, samples: Iterable[Sample]) -> TripSummary:
        """逐帧回放，返回行程报告。"""
        next_status = None
        for sample in samples:
            self.clock.set(sample.timestamp)
            metrics = self.engine.update_sample(sample)

            if self.engine.should_trigger_alert():
                self.engine.mark_alert_triggered()
                self.alert_times.append(sample.timestamp)
                print(f"[{sample.timestamp:8.2f}s] 🔔 告警: {metrics.fatigue_level.value}")

            if next_status is None:
                next_status = sample.timestamp + self.status_interval
            elif sample.timestamp >= next_status:
                print(f"[{sample.timestamp:8.2f}s] {format_metrics_line(metrics)}")
                next_status += self.status_interval

        return self.engine.trip_summary()

    def _on_level_change(self, change: LevelChange):
        self.level_changes.append(change)
        print(format_level_change(change))


def main():
    parser = argparse.ArgumentParser(description="疲劳融合引擎回放工具")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--input",
        type=str,
        default=None,
        help="JSON Lines 录制文件路径",
    )
    source.add_argument(
        "--scenario",
        choices=list(SCENARIOS),
        default="drowsy",
        help="合成场景: alert(清醒), drowsy(疲劳), microsleep(微睡眠), distracted(分心)",
    )
    parser.add_argument("--duration", type=float, default=120.0, help="合成场景时长（秒）")
    parser.add_argument("--fps", type=int, default=60, help="合成场景帧率")
    parser.add_argument("--seed", type=int, default=None, help="随机种子")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON 阈值配置文件路径",
    )
    parser.add_argument("--verbose", action="store_true", help="输出调试日志")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    system = ReplaySystem(config_path=args.config)

    if args.input is not None:
        samples = load_recording(args.input)
    else:
        samples = generate_scenario(
            args.scenario,
            duration_seconds=args.duration,
            fps=args.fps,
            seed=args.seed,
            calibration_sample_count=system.engine.config.calibration_sample_count,
        )

    summary = system.run(samples)
    print(format_trip_report(summary))


if __name__ == "__main__":
    main()
