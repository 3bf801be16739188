"""
Play clock - frame-paced driver of the simulation core.

While running, every scheduled frame computes the elapsed wall time since
the previous frame, scales it by the speed multiplier, advances the core by
that amount and asks for a render. The next frame is requested only after
the current one has finished, so at most one update is ever pending.

TIME GUARANTEES:
    1. start() recaptures the reference timestamp, so time spent paused is
       never fed to the core
    2. stop() cancels the pending frame; no update fires after stop()
    3. Speed changes apply from the next computed dt onwards
"""

import time
from enum import Enum, auto
from typing import Callable, Dict, Optional, Protocol

from .logger import Logger
from .simulation import SimulationCore


class FrameScheduler(Protocol):
    """Something that can run a callback on the next display frame."""

    def request_frame(self, callback: Callable[[], None]) -> int:
        ...

    def cancel_frame(self, handle: int) -> None:
        ...


class FrameQueue:
    """
    FrameScheduler pumped explicitly by a GUI main loop.

    The loop calls run_pending() once per rendered frame. Callbacks requested
    while a pump is in progress run on the following pump.
    """

    def __init__(self):
        self._pending: Dict[int, Callable[[], None]] = {}
        self._next_handle = 1

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def run_pending(self) -> int:
        """Run the callbacks queued before this call. Returns how many ran."""
        due = list(self._pending)
        ran = 0
        for handle in due:
            # A callback may cancel a later one in the same batch
            callback = self._pending.pop(handle, None)
            if callback is not None:
                callback()
                ran += 1
        return ran

    def __len__(self) -> int:
        return len(self._pending)


class ClockState(Enum):
    STOPPED = auto()
    RUNNING = auto()


class PlayClock:
    """
    Running/Stopped state machine feeding scaled wall time to the core.
    """

    def __init__(
        self,
        simulation: SimulationCore,
        scheduler: FrameScheduler,
        on_frame: Optional[Callable[[], None]] = None,
        now: Callable[[], float] = time.perf_counter
    ):
        """
        Args:
            simulation: Core advanced on every frame.
            scheduler: Source of display-frame callbacks.
            on_frame: Render request issued after each update.
            now: Monotonic time source in seconds.
        """
        self.simulation = simulation
        self.scheduler = scheduler
        self.on_frame = on_frame
        self._now = now

        self.state = ClockState.STOPPED
        self._last_timestamp = 0.0
        self._pending_handle: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self.state == ClockState.RUNNING

    @property
    def speed_multiplier(self) -> float:
        return self.simulation.clock.speed_multiplier

    def set_speed_multiplier(self, value: float) -> float:
        return self.simulation.set_speed_multiplier(value)

    def start(self) -> None:
        """Stopped -> Running. No-op if already running."""
        if self.is_running:
            return
        self.state = ClockState.RUNNING
        self.simulation.clock.running = True
        self._last_timestamp = self._now()
        self._schedule()
        Logger.log("Playback started", Logger.LogPriority.INFO)

    def stop(self) -> None:
        """Running -> Stopped, cancelling the pending frame. No-op if stopped."""
        if not self.is_running:
            return
        self.state = ClockState.STOPPED
        self.simulation.clock.running = False
        if self._pending_handle is not None:
            self.scheduler.cancel_frame(self._pending_handle)
            self._pending_handle = None
        Logger.log("Playback stopped", Logger.LogPriority.INFO)

    def toggle(self) -> None:
        if self.is_running:
            self.stop()
        else:
            self.start()

    def _schedule(self) -> None:
        self._pending_handle = self.scheduler.request_frame(self._tick)

    def _tick(self) -> None:
        self._pending_handle = None
        if not self.is_running:
            return

        current = self._now()
        dt = (current - self._last_timestamp) * self.simulation.clock.speed_multiplier
        self._last_timestamp = current

        self.simulation.update(dt)
        if self.on_frame is not None:
            self.on_frame()

        # The render callback may have stopped (or stopped and restarted) the clock
        if self.is_running and self._pending_handle is None:
            self._schedule()
