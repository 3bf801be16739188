"""
Stage controller - the discrete side of the tutorial.

Tracks the active stage index over 0..N-1, applies entry actions and
governs forward navigation, direct jumps and reset.

TRANSITIONS:
    advance():  i -> i+1 (entry action of i+1); from N-1, a full reset to 0
    reset():    any -> 0, stops the play clock, clears all accumulators
    jump_to(i): any -> i (entry action of i), other state left untouched
"""

from typing import Callable, List, Optional

from .logger import Logger
from .simulation import SimulationCore
from .stages import Stage


class StageController:
    """
    Drives the simulation core through the tutorial script.

    Entry actions are resolved to bound callables once, at construction;
    stage transitions only index into the resolved list.
    """

    def __init__(self, simulation: SimulationCore, play_clock=None):
        """
        Args:
            simulation: Core whose stage mirror and entry actions are driven.
            play_clock: Optional PlayClock stopped on reset().
        """
        self.simulation = simulation
        self.play_clock = play_clock
        self.stages = simulation.stages

        table = simulation.entry_action_table()
        self._entry_actions: List[Optional[Callable[[], None]]] = [
            table[stage.entry_action] if stage.entry_action is not None else None
            for stage in self.stages
        ]

        self.index = 0
        self.simulation.set_stage_index(0)

    @property
    def stage_count(self) -> int:
        return len(self.stages)

    @property
    def current_stage(self) -> Stage:
        return self.stages[self.index]

    @property
    def is_last_stage(self) -> bool:
        return self.index == self.stage_count - 1

    def _enter(self, index: int) -> None:
        self.index = index
        self.simulation.set_stage_index(index)
        action = self._entry_actions[index]
        if action is not None:
            action()
        Logger.log(f"Entered stage {index}: {self.stages[index].title}", Logger.LogPriority.INFO)

    def advance(self) -> None:
        """Move to the next stage; from the last stage, wrap around with a full reset."""
        if self.is_last_stage:
            Logger.log("Advanced past final stage; restarting tutorial", Logger.LogPriority.INFO)
            self.reset()
            return
        self._enter(self.index + 1)

    def reset(self) -> None:
        """Return to stage 0, stop playback and clear every accumulator."""
        if self.play_clock is not None:
            self.play_clock.stop()
        self.simulation.reset_state()
        self._enter(0)

    def jump_to(self, index: int) -> None:
        """
        Activate an arbitrary stage without clearing state.

        Args:
            index: Target stage index; callers guarantee 0 <= index < stage_count.
        """
        self._enter(index)
