"""
Tests for PlayClock and FrameQueue using a fake time source.
"""

import pytest

from nervechip.config import SimulationConfig
from nervechip.play_clock import ClockState, FrameQueue, PlayClock
from nervechip.simulation import SimulationCore


class FakeTime:
    """Manually advanced monotonic clock."""

    def __init__(self, start=100.0):
        self.value = start

    def __call__(self):
        return self.value

    def advance(self, seconds):
        self.value += seconds


def make_clock(on_frame=None):
    core = SimulationCore(SimulationConfig(seed=0))
    queue = FrameQueue()
    now = FakeTime()
    clock = PlayClock(core, queue, on_frame=on_frame, now=now)
    return clock, queue, now


class TestFrameQueue:
    """Tests for the pumped frame scheduler."""

    def test_run_pending_runs_and_clears(self):
        queue = FrameQueue()
        calls = []
        queue.request_frame(lambda: calls.append("a"))
        queue.request_frame(lambda: calls.append("b"))
        assert len(queue) == 2

        assert queue.run_pending() == 2
        assert calls == ["a", "b"]
        assert len(queue) == 0

    def test_cancel(self):
        queue = FrameQueue()
        calls = []
        handle = queue.request_frame(lambda: calls.append("a"))
        queue.cancel_frame(handle)
        assert queue.run_pending() == 0
        assert calls == []

    def test_requests_during_pump_wait_for_next_pump(self):
        queue = FrameQueue()
        calls = []

        def first():
            calls.append("first")
            queue.request_frame(lambda: calls.append("second"))

        queue.request_frame(first)
        queue.run_pending()
        assert calls == ["first"]
        queue.run_pending()
        assert calls == ["first", "second"]

    def test_cancel_unknown_handle_is_noop(self):
        FrameQueue().cancel_frame(12345)


class TestPlayClock:
    """Tests for start / stop / frame pacing."""

    def test_starts_stopped(self):
        clock, queue, _ = make_clock()
        assert clock.state == ClockState.STOPPED
        assert not clock.is_running
        assert len(queue) == 0

    def test_start_schedules_one_frame(self):
        clock, queue, _ = make_clock()
        clock.start()
        clock.start()
        assert clock.is_running
        assert clock.simulation.clock.running
        assert len(queue) == 1

    def test_tick_advances_by_elapsed_time(self):
        clock, queue, now = make_clock()
        clock.start()
        now.advance(0.5)
        queue.run_pending()

        assert clock.simulation.clock.time == pytest.approx(0.5)
        assert len(queue) == 1

    def test_speed_scales_dt(self):
        clock, queue, now = make_clock()
        assert clock.set_speed_multiplier(2.0) == 2.0
        clock.start()
        now.advance(0.25)
        queue.run_pending()
        assert clock.simulation.clock.time == pytest.approx(0.5)

    def test_stop_cancels_pending_frame(self):
        clock, queue, now = make_clock()
        clock.start()
        clock.stop()
        assert not clock.simulation.clock.running
        assert len(queue) == 0

        now.advance(1.0)
        assert queue.run_pending() == 0
        assert clock.simulation.clock.time == 0.0

    def test_paused_time_not_applied(self):
        clock, queue, now = make_clock()
        clock.start()
        now.advance(1.0)
        queue.run_pending()
        clock.stop()

        now.advance(30.0)
        clock.start()
        now.advance(0.5)
        queue.run_pending()

        assert clock.simulation.clock.time == pytest.approx(1.5)

    def test_toggle(self):
        clock, _, _ = make_clock()
        clock.toggle()
        assert clock.is_running
        clock.toggle()
        assert not clock.is_running

    def test_on_frame_called_per_tick(self):
        frames = []
        clock, queue, now = make_clock(on_frame=lambda: frames.append(1))
        clock.start()
        for _ in range(3):
            now.advance(1 / 60)
            queue.run_pending()
        assert len(frames) == 3

    def test_stop_from_render_callback(self):
        holder = {}
        clock, queue, now = make_clock(on_frame=lambda: holder["clock"].stop())
        holder["clock"] = clock
        clock.start()
        now.advance(0.1)
        queue.run_pending()

        assert not clock.is_running
        assert len(queue) == 0

    def test_restart_from_render_callback_keeps_single_frame(self):
        holder = {}

        def restart():
            holder["clock"].stop()
            holder["clock"].start()

        clock, queue, now = make_clock(on_frame=restart)
        holder["clock"] = clock
        clock.start()
        now.advance(0.1)
        queue.run_pending()

        assert clock.is_running
        assert len(queue) == 1
