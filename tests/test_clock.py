"""时间源与延迟任务调度单元测试"""

import pytest

from timing.clock import FrameClock, ManualClock, MonotonicClock
from timing.scheduler import DeferredScheduler


class TestManualClock:
    def test_advance_and_set(self):
        clock = ManualClock(start=5.0)
        assert clock.now() == 5.0
        assert clock.advance(2.5) == 7.5
        clock.set(100.0)
        assert clock.now() == 100.0

    def test_monotonic_clock_non_decreasing(self):
        clock = MonotonicClock()
        first = clock.now()
        assert clock.now() >= first


class TestFrameClock:
    def test_uses_clock_when_no_timestamp(self):
        clock = ManualClock(start=3.0)
        assert FrameClock(clock).tick() == 3.0

    def test_explicit_timestamp(self):
        frame_clock = FrameClock(ManualClock())
        assert frame_clock.tick(12.5) == 12.5

    def test_fps_estimate(self):
        frame_clock = FrameClock(ManualClock(), initial_fps=0.0)
        for k in range(61):
            frame_clock.tick(k / 30)
        # 第 30 帧时满 1 秒窗口
        assert frame_clock.estimated_fps == pytest.approx(30.0)

    def test_reset(self):
        frame_clock = FrameClock(ManualClock(), initial_fps=60.0)
        for k in range(40):
            frame_clock.tick(k / 20)
        frame_clock.reset()
        assert frame_clock.estimated_fps == 60.0


class TestDeferredScheduler:
    def test_runs_when_due(self):
        clock = ManualClock()
        scheduler = DeferredScheduler(clock)
        calls = []
        scheduler.call_later(5.0, lambda: calls.append("a"))

        clock.advance(4.0)
        assert scheduler.run_due() == 0
        clock.advance(1.0)
        assert scheduler.run_due() == 1
        assert calls == ["a"]
        # 已执行的任务不会再次执行
        clock.advance(10.0)
        assert scheduler.run_due() == 0
        assert calls == ["a"]

    def test_runs_in_due_order(self):
        clock = ManualClock()
        scheduler = DeferredScheduler(clock)
        calls = []
        scheduler.call_later(3.0, lambda: calls.append("late"))
        scheduler.call_later(1.0, lambda: calls.append("early"))
        clock.advance(5.0)
        scheduler.run_due()
        assert calls == ["early", "late"]

    def test_cancelled_task_never_runs(self):
        clock = ManualClock()
        scheduler = DeferredScheduler(clock)
        calls = []
        task = scheduler.call_later(1.0, lambda: calls.append("x"))
        task.cancel()
        assert task.cancelled
        assert len(scheduler) == 0
        clock.advance(2.0)
        scheduler.run_due()
        assert calls == []

    def test_cancel_all(self):
        clock = ManualClock()
        scheduler = DeferredScheduler(clock)
        calls = []
        first = scheduler.call_later(1.0, lambda: calls.append(1))
        second = scheduler.call_later(2.0, lambda: calls.append(2))
        scheduler.cancel_all()
        assert not first.pending and not second.pending
        clock.advance(5.0)
        assert scheduler.run_due() == 0
        assert calls == []
