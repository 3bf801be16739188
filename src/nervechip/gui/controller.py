"""
Tutorial controller - the single entry point the GUI talks to.

Owns the simulation core, the stage controller and the play clock, and
exposes the handful of operations bound to the on-screen controls.

GUI-CORE SEPARATION GUARANTEES:
    1. GUI never touches the core directly; every action goes through here
    2. Slider values are clamped into configured ranges before reaching the core
    3. State returned to the GUI is a frozen snapshot or a read-only copy
    4. Hover queries only read state
"""

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..config import SimulationConfig, default_config
from ..hit_testing import build_component_regions, describe_component, find_component_at
from ..logger import Logger
from ..play_clock import FrameQueue, FrameScheduler, PlayClock
from ..simulation import SimulationCore, SimulationSnapshot
from ..stage_controller import StageController
from ..stages import ComponentInfo, HighlightTarget


@dataclass(frozen=True)
class ControllerState:
    """Controller state for GUI display (read-only snapshot)."""
    playing: bool
    stage_index: int
    stage_count: int
    stage_title: str
    stage_description: str
    highlight: HighlightTarget
    time: float
    speed_multiplier: float
    flow_rate: float
    drug_front_position: float
    diffusion_level: float

    @property
    def step_label(self) -> str:
        return f"Step {self.stage_index + 1} / {self.stage_count}"


class TutorialController:
    """
    Controller for the interactive tutorial.

    Usage:
        controller = TutorialController(config, on_state_changed=redraw)
        controller.advance_stage()
        controller.start_playback()
        # GUI loop: controller.frame_queue.run_pending() once per frame
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        on_state_changed: Optional[Callable[[], None]] = None,
        scheduler: Optional[FrameScheduler] = None,
        now: Optional[Callable[[], float]] = None
    ):
        """
        Args:
            config: Tutorial configuration (defaults to default_config()).
            on_state_changed: Callback when state changes (for GUI redraw).
            scheduler: Frame scheduler (defaults to a new FrameQueue).
            now: Time source override for the play clock.
        """
        self.config = config or default_config()
        self._on_state_changed = on_state_changed

        self.simulation = SimulationCore(self.config)
        self.frame_queue = scheduler if scheduler is not None else FrameQueue()

        clock_kwargs = {"now": now} if now is not None else {}
        self.play_clock = PlayClock(
            self.simulation, self.frame_queue, on_frame=self._notify_changed, **clock_kwargs
        )
        self.stages = StageController(self.simulation, play_clock=self.play_clock)

        # Geometry is fixed, so the hover regions are built once
        self._regions = build_component_regions(
            self.config.layout, self.simulation.motor_neurons, self.simulation.schwann_cells
        )
        Logger.log("TutorialController initialized", Logger.LogPriority.INFO)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_state(self) -> ControllerState:
        stage = self.stages.current_stage
        sim = self.simulation
        return ControllerState(
            playing=self.play_clock.is_running,
            stage_index=self.stages.index,
            stage_count=self.stages.stage_count,
            stage_title=stage.title,
            stage_description=stage.description,
            highlight=stage.highlight,
            time=sim.clock.time,
            speed_multiplier=sim.clock.speed_multiplier,
            flow_rate=sim.flow_rate,
            drug_front_position=sim.drug_front_position,
            diffusion_level=sim.diffusion_level
        )

    def get_snapshot(self) -> SimulationSnapshot:
        return self.simulation.snapshot()

    def component_at(self, x: float, y: float) -> Optional[ComponentInfo]:
        """Info for the device component under canvas point (x, y), if any."""
        return describe_component(find_component_at(self._regions, x, y))

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def start_playback(self) -> None:
        self.play_clock.start()
        self._notify_changed()

    def stop_playback(self) -> None:
        self.play_clock.stop()
        self._notify_changed()

    def toggle_playback(self) -> None:
        if self.play_clock.is_running:
            self.stop_playback()
        else:
            self.start_playback()

    def set_speed_multiplier(self, value: float) -> float:
        """Set play speed (clamped to the configured range). Returns the applied value."""
        applied = self.play_clock.set_speed_multiplier(value)
        self._notify_changed()
        return applied

    def set_flow_rate(self, value: float) -> float:
        """Set flow rate (clamped to the configured range). Returns the applied value."""
        applied = self.simulation.set_flow_rate(value)
        self._notify_changed()
        return applied

    # ------------------------------------------------------------------
    # Stage navigation
    # ------------------------------------------------------------------

    def advance_stage(self) -> None:
        self.stages.advance()
        self._notify_changed()

    def reset_all(self) -> None:
        self.stages.reset()
        self._notify_changed()

    def jump_to_stage(self, index: int) -> int:
        """
        Jump to a stage, clamping out-of-range indices. Returns the stage entered.
        """
        clamped = int(np.clip(index, 0, self.stages.stage_count - 1))
        if clamped != index:
            Logger.log(f"Stage index {index} out of range; using {clamped}",
                       Logger.LogPriority.WARNING)
        self.stages.jump_to(clamped)
        self._notify_changed()
        return clamped

    def _notify_changed(self) -> None:
        """Notify GUI that state has changed."""
        if self._on_state_changed:
            self._on_state_changed()
