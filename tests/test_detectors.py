"""事件检测器单元测试"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from detectors.blink_detector import BlinkDetector
from detectors.eye_closure_detector import EyeClosureDetector
from detectors.gaze_detector import GazeDetector
from detectors.head_nod_detector import HeadNodDetector
from detectors.yawn_detector import YawnDetector


def _blink(detector, start, end):
    detector.update(True, start)
    return detector.update(False, end)


# --------------- EyeClosureDetector ---------------

class TestEyeClosureDetector:
    def test_threshold_is_exclusive(self):
        detector = EyeClosureDetector(closed_threshold=0.6)
        assert not detector.is_closed(0.6, 0.6)
        assert detector.is_closed(0.7, 0.6)
        assert not detector.is_closed(1.0, 0.1)

    def test_empty_window_perclos_zero(self):
        assert EyeClosureDetector().perclos == 0.0

    def test_perclos_percentage(self):
        detector = EyeClosureDetector()
        for i, closed in enumerate([True, False, False, True]):
            detector.update(closed, i * 0.1)
        assert detector.perclos == pytest.approx(50.0)

    def test_prune_drops_old_samples(self):
        detector = EyeClosureDetector(window_seconds=60.0)
        detector.update(True, 0.0)
        detector.update(False, 30.0)
        detector.update(False, 61.0)
        detector.prune(61.0)
        assert detector.sample_count == 2
        assert detector.perclos == 0.0

    def test_closed_since_tracks_run(self):
        detector = EyeClosureDetector()
        detector.update(True, 1.0)
        detector.update(True, 1.5)
        assert detector.closed_since == 1.0
        detector.update(False, 2.0)
        assert detector.closed_since is None

    def test_history_sampling_interval(self):
        detector = EyeClosureDetector(sample_interval=10.0)
        assert detector.sample_history(0.0) is None  # 窗口为空
        detector.update(True, 0.0)
        assert detector.sample_history(0.0) == 100.0
        detector.update(False, 5.0)
        assert detector.sample_history(5.0) is None
        detector.update(False, 10.0)
        assert detector.sample_history(10.0) == pytest.approx(100.0 / 3)
        assert len(detector.perclos_history) == 2

    def test_reset(self):
        detector = EyeClosureDetector()
        detector.update(True, 0.0)
        detector.sample_history(0.0)
        detector.reset()
        assert detector.sample_count == 0
        assert detector.closed_since is None
        assert detector.perclos_history == ()

    @given(st.lists(st.booleans(), min_size=1, max_size=300))
    def test_perclos_bounded(self, states):
        detector = EyeClosureDetector(window_seconds=2.0)
        for i, closed in enumerate(states):
            detector.update(closed, i / 60)
            detector.prune(i / 60)
            assert 0.0 <= detector.perclos <= 100.0


# --------------- BlinkDetector ---------------

class TestBlinkDetector:
    @pytest.mark.parametrize("end", [0.05, 0.3, 2.0])
    def test_accepted_durations(self, end):
        detector = BlinkDetector()
        event = _blink(detector, 0.0, end)
        assert event is not None
        assert detector.history == (event,)

    @pytest.mark.parametrize("end", [0.049, 2.001])
    def test_rejected_durations_never_stored(self, end):
        detector = BlinkDetector()
        assert _blink(detector, 0.0, end) is None
        assert detector.history == ()
        assert detector.total_count == 0

    def test_only_edges_create_events(self):
        detector = BlinkDetector()
        assert detector.update(False, 0.0) is None
        assert detector.update(True, 0.1) is None
        assert detector.update(True, 0.2) is None
        event = detector.update(False, 0.4)
        assert event.start_time == 0.1
        assert event.end_time == 0.4

    def test_fifo_capped(self):
        detector = BlinkDetector(history_count=50)
        for i in range(60):
            _blink(detector, float(i), i + 0.2)
        history = detector.history
        assert len(history) == 50
        assert history[0].start_time == 10.0
        assert detector.total_count == 60

    def test_reset(self):
        detector = BlinkDetector()
        _blink(detector, 0.0, 0.2)
        detector.update(True, 1.0)
        detector.reset()
        assert detector.history == ()
        # 重置后未完成的闭眼不会产生事件
        assert detector.update(False, 1.2) is None

    def test_minimum_duration_on_absolute_clock(self):
        detector = BlinkDetector()
        event = _blink(detector, 100.0, 100.05)
        assert event is not None
        assert detector.total_count == 1

    def test_maximum_duration_on_absolute_clock(self):
        detector = BlinkDetector()
        assert _blink(detector, 100.1, 102.1) is not None
        assert _blink(detector, 200.0, 202.001) is None


# --------------- HeadNodDetector ---------------

class TestHeadNodDetector:
    def test_quick_recovery_is_nod(self):
        detector = HeadNodDetector()
        assert detector.update(-15.0, 0.0, 10.0) is None
        assert detector.is_pending
        event = detector.update(0.0, 0.0, 10.3)
        assert event is not None
        assert event.pitch_drop == 15.0
        assert event.recovery_time == pytest.approx(0.3)
        assert detector.events == (event,)

    @pytest.mark.parametrize("recovery", [0.09, 0.51, 2.0])
    def test_recovery_out_of_range_discarded(self, recovery):
        detector = HeadNodDetector()
        detector.update(-15.0, 0.0, 10.0)
        assert detector.update(0.0, 0.0, 10.0 + recovery) is None
        assert detector.events == ()
        assert not detector.is_pending

    def test_pitch_drop_uses_first_dropped_frame(self):
        detector = HeadNodDetector()
        detector.update(-12.0, 0.0, 0.0)
        detector.update(-20.0, 0.0, 0.1)
        event = detector.update(0.0, 0.0, 0.3)
        assert event.pitch_drop == 12.0

    def test_threshold_is_exclusive(self):
        detector = HeadNodDetector(pitch_threshold=10.0)
        detector.update(-10.0, 0.0, 0.0)
        assert not detector.is_pending
        assert detector.dropped_since is None

    def test_relative_to_baseline(self):
        detector = HeadNodDetector()
        detector.update(-15.0, -10.0, 0.0)
        assert not detector.is_pending
        detector.update(-25.0, -10.0, 1.0)
        assert detector.is_pending

    def test_no_baseline_no_detection(self):
        detector = HeadNodDetector()
        assert detector.update(-40.0, None, 0.0) is None
        assert not detector.is_pending
        assert detector.dropped_since is None

    def test_dropped_since_cleared_on_recovery(self):
        detector = HeadNodDetector()
        detector.update(-15.0, 0.0, 1.0)
        detector.update(-15.0, 0.0, 3.0)
        assert detector.dropped_since == 1.0
        detector.update(0.0, 0.0, 4.0)
        assert detector.dropped_since is None

    def test_prune_window(self):
        detector = HeadNodDetector(window_seconds=300.0)
        detector.update(-15.0, 0.0, 0.0)
        detector.update(0.0, 0.0, 0.3)
        detector.prune(200.0)
        assert len(detector.events) == 1
        detector.prune(301.0)
        assert detector.events == ()
        assert detector.total_count == 1


# --------------- YawnDetector ---------------

class TestYawnDetector:
    def test_exact_min_duration_recorded(self):
        detector = YawnDetector()
        detector.update(0.9, 0.0)
        event = detector.update(0.1, 1.5)
        assert event is not None
        assert event.duration == 1.5

    def test_min_duration_on_absolute_clock(self):
        detector = YawnDetector()
        detector.update(0.9, 100.1)
        assert detector.update(0.1, 101.6) is not None
        detector.update(0.9, 1000.3)
        assert detector.update(0.1, 1001.8) is not None
        assert detector.total_count == 2

    def test_short_yawn_discarded(self):
        detector = YawnDetector()
        detector.update(0.9, 0.0)
        assert detector.update(0.1, 1.49) is None
        assert detector.events == ()

    def test_threshold_is_exclusive(self):
        detector = YawnDetector(jaw_threshold=0.7)
        detector.update(0.7, 0.0)
        assert detector.yawning_since is None

    def test_yawning_since(self):
        detector = YawnDetector()
        detector.update(0.9, 2.0)
        detector.update(0.95, 2.5)
        assert detector.yawning_since == 2.0
        detector.update(0.2, 3.0)
        assert detector.yawning_since is None

    def test_prune_window(self):
        detector = YawnDetector(window_seconds=300.0)
        detector.update(0.9, 0.0)
        detector.update(0.1, 2.0)
        detector.prune(303.0)
        assert detector.events == ()
        assert detector.total_count == 1


# --------------- GazeDetector ---------------

class TestGazeDetector:
    def test_magnitude(self):
        assert GazeDetector.magnitude(3.0, 4.0) == 5.0

    def test_deviation_percent(self):
        detector = GazeDetector(deviation_threshold=1.5)
        results = [
            detector.update(2.0, 0.0, 0.0),
            detector.update(1.0, 1.0, 0.1),
            detector.update(0.0, 0.0, 0.2),
            detector.update(0.5, -0.5, 0.3),
        ]
        assert results == [True, False, False, False]
        assert detector.deviation_percent == pytest.approx(25.0)

    def test_looking_away_since(self):
        detector = GazeDetector()
        detector.update(0.0, 2.0, 1.0)
        detector.update(0.0, 2.0, 4.0)
        assert detector.looking_away_since == 1.0
        detector.update(0.0, 0.0, 5.0)
        assert detector.looking_away_since is None

    def test_prune_window(self):
        detector = GazeDetector(window_seconds=60.0)
        detector.update(2.0, 0.0, 0.0)
        detector.update(0.0, 0.0, 61.0)
        detector.prune(61.0)
        assert detector.deviation_percent == 0.0
        assert len(detector.history) == 1
