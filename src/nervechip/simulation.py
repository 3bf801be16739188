"""
Simulation core for the nerve-on-chip tutorial.

Owns every mutable physical quantity of the device:
    - clock time and play-speed multiplier
    - flow rate (global transport scale)
    - drug front position along the channels, in [0, 1]
    - diffusion level in the gel, in [0, 1]
    - per-cell drug exposure, in [0, 1]
    - flow, drug and diffusion particle populations

The model is heuristic: quantities approach their targets linearly at fixed
rates scaled by dt; no transport equation is solved.

INVARIANTS (hold after every update / entry action / reset):
    1. drug_front_position, diffusion_level and every drug_exposure lie in [0, 1]
    2. len(drug_particles) <= flow.max_drug_particles
    3. Exposure only decreases while the washout decay is active
    4. Cell geometry and the flow particle count never change after construction
"""

import numpy as np
from dataclasses import dataclass, fields
from typing import Callable, Dict, Optional, Sequence

from .config import SimulationConfig, default_config
from .entities import (
    AxonSet,
    CellKind,
    ChannelSide,
    DiffusionParticlePool,
    DrugParticlePool,
    FlowParticlePool,
    MotorNeuronSet,
    SchwannCellSet,
    build_axons,
    build_flow_particles,
    build_motor_neurons,
    build_schwann_cells,
    channel_y,
)
from .logger import Logger
from .stages import (
    TUTORIAL_STAGES,
    EntryAction,
    HighlightTarget,
    Stage,
    StageThresholds,
    validate_stages,
)


def _clamp01(value):
    """Clamp a scalar or array into [0, 1]."""
    if np.isscalar(value):
        return float(np.clip(value, 0.0, 1.0))
    return np.clip(value, 0.0, 1.0)


@dataclass
class SimulationClock:
    """
    Attributes:
        time: Accumulated simulated seconds (already speed-scaled).
        speed_multiplier: Real-time to simulated-time factor, > 0.
        running: Whether the play clock is currently driving updates.
    """
    time: float = 0.0
    speed_multiplier: float = 1.0
    running: bool = False


@dataclass(frozen=True)
class SimulationSnapshot:
    """
    Read-only view of the simulation for rendering.

    Populations are copies whose arrays are flagged read-only, so a renderer
    cannot write back into the core.
    """
    time: float
    speed_multiplier: float
    running: bool
    flow_rate: float
    drug_front_position: float
    diffusion_level: float
    stage_index: int
    highlight: HighlightTarget
    motor_neurons: MotorNeuronSet
    axons: AxonSet
    schwann_cells: SchwannCellSet
    flow_particles: FlowParticlePool
    drug_particles: DrugParticlePool
    diffusion_particles: DiffusionParticlePool


def _read_only_copy(population):
    duplicate = population.copy()
    for f in fields(duplicate):
        value = getattr(duplicate, f.name)
        if isinstance(value, np.ndarray):
            value.setflags(write=False)
    return duplicate


class SimulationCore:
    """
    Continuous-time state of the device, advanced by update(dt).

    The stage controller mirrors the active stage into the core via
    set_stage_index() and invokes the entry actions returned by
    entry_action_table(). The core never reads the GUI or the wall clock.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        stages: Sequence[Stage] = TUTORIAL_STAGES,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Initialize the core and lay out the device once.

        Args:
            config: Validated configuration (defaults to default_config()).
            stages: Tutorial script; gating thresholds are derived from it.
            rng: Random generator (defaults to one seeded from config.seed).

        Raises:
            ValueError: If the stages are not indexed 0..N-1 in order, or lack
                the flow, diffusion or washout action.
        """
        self.config = config or default_config()
        is_valid, error = validate_stages(stages)
        if not is_valid:
            raise ValueError(f"Invalid tutorial script: {error}")
        self.stages = tuple(stages)
        self.thresholds = StageThresholds.from_stages(self.stages)
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        layout = self.config.layout

        # Geometry is rolled once; resets never re-randomize it
        self.motor_neurons = build_motor_neurons(self.rng)
        self.axons = build_axons(self.motor_neurons, layout, self.rng)
        self.schwann_cells = build_schwann_cells(self.rng)
        self.flow_particles = build_flow_particles(layout, self.config.flow, self.rng)

        self.clock = SimulationClock(speed_multiplier=self.config.playback.speed_multiplier)
        self.flow_rate = self.config.flow.flow_rate

        self.drug_front_position = 0.0
        self.diffusion_level = 0.0
        self.drug_particles = DrugParticlePool()
        self.diffusion_particles = DiffusionParticlePool()

        self.stage_index = 0
        self.stage_entered_at = 0.0

        Logger.log(
            f"SimulationCore initialized: {len(self.motor_neurons)} neurons, "
            f"{len(self.schwann_cells)} Schwann cells, {len(self.flow_particles)} flow particles, "
            f"thresholds={self.thresholds}"
        )

    # ------------------------------------------------------------------
    # Stage mirroring and entry actions
    # ------------------------------------------------------------------

    def set_stage_index(self, index: int) -> None:
        """Mirror the active stage and start its timer at the current clock time."""
        self.stage_index = index
        self.stage_entered_at = self.clock.time

    @property
    def active_stage(self) -> Stage:
        return self.stages[self.stage_index]

    def entry_action_table(self) -> Dict[EntryAction, Callable[[], None]]:
        """Bound entry action for every EntryAction tag."""
        return {
            EntryAction.RESET_DRUG_FRONT: self.reset_drug_front,
            EntryAction.CONTINUE_PERFUSION: self.continue_perfusion,
            EntryAction.SEED_DIFFUSION_PARTICLES: self.seed_diffusion_particles,
            EntryAction.RAISE_MINIMUM_DIFFUSION: self.raise_minimum_diffusion,
            EntryAction.WASHOUT: self.begin_washout,
        }

    def reset_drug_front(self) -> None:
        self.drug_front_position = 0.0

    def continue_perfusion(self) -> None:
        """Stage marker; perfusion simply carries on in update()."""

    def seed_diffusion_particles(self) -> None:
        """
        Release two batches of diffusion particles into the gel.

        Top batch starts at the upper gel boundary and moves down, bottom
        batch starts at the bottom channel and moves up. A no-op if any
        diffusion particle already exists.
        """
        if len(self.diffusion_particles) > 0:
            return

        layout = self.config.layout
        diffusion = self.config.diffusion
        self.diffusion_particles.extend(
            self._diffusion_batch(layout.hydrogel_y, diffusion.top_target_range, 1.0)
        )
        self.diffusion_particles.extend(
            self._diffusion_batch(layout.bottom_channel_y, diffusion.bottom_target_range, -1.0)
        )
        Logger.log(f"Seeded {len(self.diffusion_particles)} diffusion particles")

    def _diffusion_batch(self, start_y: float, target_range, direction: float) -> DiffusionParticlePool:
        diffusion = self.config.diffusion
        n = diffusion.particles_per_batch
        x_lo, x_hi = self.config.layout.diffusion_spawn_x
        t_lo, t_hi = target_range
        s_lo, s_hi = diffusion.particle_speed_range
        return DiffusionParticlePool(
            x=x_lo + self.rng.random(n) * (x_hi - x_lo),
            y=np.full(n, start_y),
            target_y=t_lo + self.rng.random(n) * (t_hi - t_lo),
            speed=s_lo + self.rng.random(n) * (s_hi - s_lo),
            direction=np.full(n, direction),
            alpha=np.ones(n)
        )

    def raise_minimum_diffusion(self) -> None:
        """Bump the diffusion level to at least the configured floor."""
        self.diffusion_level = _clamp01(max(self.diffusion_level, self.config.diffusion.minimum_level))

    def begin_washout(self) -> None:
        """Stage marker; the decay is gated by stage and elapsed time in update()."""

    # ------------------------------------------------------------------
    # Continuous update
    # ------------------------------------------------------------------

    def update(self, dt: float) -> None:
        """
        Advance the simulation by dt simulated seconds.

        Args:
            dt: Elapsed time, already scaled by the speed multiplier. Negative
                values are treated as 0.
        """
        dt = max(0.0, float(dt))
        level_at_start = self.diffusion_level

        self.clock.time += dt

        self._advance_flow_particles(dt)

        if self.stage_index >= self.thresholds.flow:
            self.drug_front_position = _clamp01(
                self.drug_front_position + dt * self.config.flow.front_advance_rate * self.flow_rate
            )
            self._spawn_drug_particles()

        self._advance_drug_particles(dt)

        washing_out = self.is_washout_active()

        if self.stage_index >= self.thresholds.diffusion:
            self._advance_diffusion_particles(dt)
            # Accrual pauses while washout clears the gel
            if not washing_out:
                self.diffusion_level = _clamp01(
                    self.diffusion_level + dt * self.config.diffusion.level_rate
                )
                self._accrue_exposure(dt, level_at_start)

        if washing_out:
            self._apply_washout(dt)

    def is_washout_active(self) -> bool:
        """True once the washout stage has been active for longer than the delay."""
        return (
            self.stage_index == self.thresholds.washout
            and self.clock.time - self.stage_entered_at > self.config.washout.delay_s
        )

    def _advance_flow_particles(self, dt: float) -> None:
        layout = self.config.layout
        pool = self.flow_particles
        pool.x += pool.speed * self.flow_rate * self.config.flow.base_flow_constant * dt
        pool.x[pool.x > layout.flow_wrap_right_x] = layout.flow_wrap_left_x

    def _spawn_drug_particles(self) -> None:
        flow = self.config.flow
        layout = self.config.layout
        if self.rng.random() >= flow.drug_spawn_probability:
            return
        # Top and bottom spawn as a pair; a pair that would pass the cap is skipped
        if len(self.drug_particles) + 2 > flow.max_drug_particles:
            return
        s_lo, s_hi = flow.drug_speed_range
        for side in (ChannelSide.TOP, ChannelSide.BOTTOM):
            self.drug_particles.append(
                layout.drug_inlet_x,
                channel_y(layout, side) + 12.0 + self.rng.random() * 20.0,
                s_lo + self.rng.random() * (s_hi - s_lo)
            )

    def _advance_drug_particles(self, dt: float) -> None:
        pool = self.drug_particles
        # Move, then compact: removal never happens while positions are written
        pool.x += pool.speed * self.flow_rate * self.config.flow.transport_constant * dt
        pool.keep(pool.x < self.config.layout.drug_exit_x)

    def _advance_diffusion_particles(self, dt: float) -> None:
        pool = self.diffusion_particles
        if len(pool) == 0:
            return
        diffusion = self.config.diffusion

        moving = pool.still_moving()
        step = pool.direction * pool.speed * diffusion.vertical_speed_constant * dt
        new_y = pool.y + step
        # Stop at the target depth rather than overshooting it
        new_y = np.where(pool.direction > 0, np.minimum(new_y, pool.target_y),
                         np.maximum(new_y, pool.target_y))
        pool.y = np.where(moving, new_y, pool.y)

        pool.x += (self.rng.random(len(pool)) - 0.5) * diffusion.jitter * dt

    def _accrue_exposure(self, dt: float, level: float) -> None:
        diffusion = self.config.diffusion
        rate = dt * diffusion.exposure_rate * level
        self.motor_neurons.drug_exposure = _clamp01(
            self.motor_neurons.drug_exposure + rate * diffusion.neuron_exposure_ratio
        )
        self.axons.drug_exposure = _clamp01(
            self.axons.drug_exposure + rate * diffusion.axon_exposure_ratio
        )
        self.schwann_cells.drug_exposure = _clamp01(
            self.schwann_cells.drug_exposure + rate * diffusion.schwann_exposure_ratio
        )

    def _apply_washout(self, dt: float) -> None:
        washout = self.config.washout
        self.diffusion_level = _clamp01(self.diffusion_level - dt * washout.level_decay_rate)
        decay = dt * washout.exposure_decay_rate
        self.motor_neurons.drug_exposure = _clamp01(self.motor_neurons.drug_exposure - decay)
        self.schwann_cells.drug_exposure = _clamp01(self.schwann_cells.drug_exposure - decay)
        # Axon exposure is left as is during washout

    # ------------------------------------------------------------------
    # Controls and reset
    # ------------------------------------------------------------------

    def set_flow_rate(self, value: float) -> float:
        """Set the flow rate, clamped into the configured range. Returns the applied value."""
        lo, hi = self.config.flow.flow_rate_range
        self.flow_rate = float(np.clip(value, lo, hi))
        return self.flow_rate

    def set_speed_multiplier(self, value: float) -> float:
        """Set the play speed, clamped into the configured range. Returns the applied value."""
        lo, hi = self.config.playback.speed_range
        self.clock.speed_multiplier = float(np.clip(value, lo, hi))
        return self.clock.speed_multiplier

    def reset_state(self) -> None:
        """
        Return every accumulator to its initial value.

        Clears time, drug front, diffusion level, drug and diffusion particles
        and all exposures. Geometry, flow particles, flow rate and speed
        multiplier are kept.
        """
        self.clock.time = 0.0
        self.drug_front_position = 0.0
        self.diffusion_level = 0.0
        self.drug_particles.clear()
        self.diffusion_particles.clear()
        self.motor_neurons.drug_exposure[:] = 0.0
        self.axons.drug_exposure[:] = 0.0
        self.schwann_cells.drug_exposure[:] = 0.0
        self.stage_entered_at = 0.0
        Logger.log("Simulation state reset")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            time=self.clock.time,
            speed_multiplier=self.clock.speed_multiplier,
            running=self.clock.running,
            flow_rate=self.flow_rate,
            drug_front_position=self.drug_front_position,
            diffusion_level=self.diffusion_level,
            stage_index=self.stage_index,
            highlight=self.active_stage.highlight,
            motor_neurons=_read_only_copy(self.motor_neurons),
            axons=_read_only_copy(self.axons),
            schwann_cells=_read_only_copy(self.schwann_cells),
            flow_particles=_read_only_copy(self.flow_particles),
            drug_particles=_read_only_copy(self.drug_particles),
            diffusion_particles=_read_only_copy(self.diffusion_particles),
        )

    def mean_exposure(self) -> Dict[CellKind, float]:
        """Mean drug exposure per cell kind."""
        return {
            CellKind.MOTOR_NEURON: float(np.mean(self.motor_neurons.drug_exposure)),
            CellKind.AXON: float(np.mean(self.axons.drug_exposure)),
            CellKind.SCHWANN_CELL: float(np.mean(self.schwann_cells.drug_exposure)),
        }
