"""合成场景单元测试：场景经引擎回放后应得到对应的疲劳等级"""

import pytest

from engine.fatigue_engine import FatigueEngine
from models.data_models import FatigueLevel
from simulation.scenario import SCENARIOS, generate_scenario
from timing.clock import ManualClock


def _replay(samples):
    clock = ManualClock()
    engine = FatigueEngine(clock=clock)
    for sample in samples:
        clock.set(sample.timestamp)
        engine.update_sample(sample)
    return engine


class TestGenerateScenario:
    def test_frame_count_and_timestamps(self):
        samples = generate_scenario("alert", duration_seconds=10, fps=30, seed=1, start_time=5.0)
        assert len(samples) == 300
        assert samples[0].timestamp == 5.0
        assert all(a.timestamp < b.timestamp for a, b in zip(samples, samples[1:]))

    def test_calibration_lead(self):
        samples = generate_scenario("alert", duration_seconds=5, fps=60, seed=1, calibration_lead_seconds=1.0)
        assert not any(s.is_calibrated for s in samples[:60])
        assert all(s.is_calibrated for s in samples[60:])

    def test_same_seed_is_deterministic(self):
        first = generate_scenario("drowsy", duration_seconds=20, seed=7)
        second = generate_scenario("drowsy", duration_seconds=20, seed=7)
        assert first == second

    def test_unknown_scenario(self):
        with pytest.raises(ValueError, match="不支持的场景"):
            generate_scenario("sleepwalking")

    @pytest.mark.parametrize("name", SCENARIOS)
    def test_signals_within_range(self, name):
        for sample in generate_scenario(name, duration_seconds=15, seed=3):
            assert 0.0 <= sample.left_eye <= 1.0
            assert 0.0 <= sample.jaw_open <= 1.0


class TestScenarioReplay:
    def test_alert_driver_stays_low(self):
        engine = _replay(generate_scenario("alert", duration_seconds=60, seed=11))
        summary = engine.trip_summary()
        assert engine.is_calibrated
        assert summary.peak_level < FatigueLevel.MODERATE
        assert summary.blink_count > 5

    def test_microsleep_is_critical(self):
        engine = _replay(generate_scenario("microsleep", duration_seconds=20, seed=11))
        assert engine.trip_summary().peak_level is FatigueLevel.CRITICAL

    def test_distracted_reaches_high(self):
        engine = _replay(generate_scenario("distracted", duration_seconds=25, seed=11))
        assert engine.trip_summary().peak_level is FatigueLevel.HIGH

    def test_drowsy_driver(self):
        engine = _replay(generate_scenario("drowsy", duration_seconds=60, seed=11))
        summary = engine.trip_summary()
        assert summary.peak_level >= FatigueLevel.MILD
        assert summary.blink_count > 10
        assert summary.head_nod_count >= 1
        assert summary.yawn_count >= 1
        assert len(summary.perclos_history) >= 5
