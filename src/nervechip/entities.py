"""
Spatial entities of the nerve-on-chip device.

Cells (motor neurons, axons, Schwann cells) and particles (flow, drug,
diffusion) are stored as populations: one numpy array per field, one
element per entity. Per-frame updates operate on whole arrays.

Units:
    - Positions and sizes: canvas pixels
    - Angles: radians
    - drug_exposure: dimensionless, [0, 1]
"""

import numpy as np
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

from .config import LayoutConfig, FlowConfig


def _f64(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _uniform(rng: np.random.Generator, bounds, n: int) -> np.ndarray:
    lo, hi = bounds
    return lo + rng.random(n) * (hi - lo)


class ChannelSide(IntEnum):
    """Which medium channel a particle travels in."""
    TOP = 0
    BOTTOM = 1


class CellKind(IntEnum):
    MOTOR_NEURON = 0
    AXON = 1
    SCHWANN_CELL = 2


# =============================================================================
# Cells
# =============================================================================

@dataclass
class MotorNeuronSet:
    """
    Motor neuron somata along the top of the hydrogel.

    Attributes:
        x, y: Soma centres.
        radius: Soma radii.
        phase: Pulse phase offsets (radians).
        drug_exposure: Per-neuron exposure in [0, 1].
    """
    x: np.ndarray
    y: np.ndarray
    radius: np.ndarray
    phase: np.ndarray
    drug_exposure: np.ndarray = None

    kind = CellKind.MOTOR_NEURON

    def __post_init__(self):
        self.x = _f64(self.x)
        self.y = _f64(self.y)
        self.radius = _f64(self.radius)
        self.phase = _f64(self.phase)
        if self.drug_exposure is None:
            self.drug_exposure = np.zeros_like(self.x)
        self.drug_exposure = _f64(self.drug_exposure)

    def __len__(self) -> int:
        return len(self.x)

    def copy(self) -> "MotorNeuronSet":
        return MotorNeuronSet(
            x=self.x.copy(),
            y=self.y.copy(),
            radius=self.radius.copy(),
            phase=self.phase.copy(),
            drug_exposure=self.drug_exposure.copy()
        )


@dataclass
class AxonSet:
    """Axons running from each soma down through the gel."""
    start_x: np.ndarray
    start_y: np.ndarray
    end_x: np.ndarray
    end_y: np.ndarray
    drug_exposure: np.ndarray = None

    kind = CellKind.AXON

    def __post_init__(self):
        self.start_x = _f64(self.start_x)
        self.start_y = _f64(self.start_y)
        self.end_x = _f64(self.end_x)
        self.end_y = _f64(self.end_y)
        if self.drug_exposure is None:
            self.drug_exposure = np.zeros_like(self.start_x)
        self.drug_exposure = _f64(self.drug_exposure)

    def __len__(self) -> int:
        return len(self.start_x)

    def copy(self) -> "AxonSet":
        return AxonSet(
            start_x=self.start_x.copy(),
            start_y=self.start_y.copy(),
            end_x=self.end_x.copy(),
            end_y=self.end_y.copy(),
            drug_exposure=self.drug_exposure.copy()
        )


@dataclass
class SchwannCellSet:
    """Elongated Schwann cells lying in the gel (ellipses)."""
    x: np.ndarray
    y: np.ndarray
    width: np.ndarray
    height: np.ndarray
    rotation: np.ndarray
    drug_exposure: np.ndarray = None

    kind = CellKind.SCHWANN_CELL

    def __post_init__(self):
        self.x = _f64(self.x)
        self.y = _f64(self.y)
        self.width = _f64(self.width)
        self.height = _f64(self.height)
        self.rotation = _f64(self.rotation)
        if self.drug_exposure is None:
            self.drug_exposure = np.zeros_like(self.x)
        self.drug_exposure = _f64(self.drug_exposure)

    def __len__(self) -> int:
        return len(self.x)

    def copy(self) -> "SchwannCellSet":
        return SchwannCellSet(
            x=self.x.copy(),
            y=self.y.copy(),
            width=self.width.copy(),
            height=self.height.copy(),
            rotation=self.rotation.copy(),
            drug_exposure=self.drug_exposure.copy()
        )


# =============================================================================
# Particles
# =============================================================================

@dataclass
class FlowParticlePool:
    """Fixed-size pool of medium particles; recycled, never removed."""
    x: np.ndarray
    y: np.ndarray
    speed: np.ndarray
    channel: np.ndarray
    size: float = 2.5

    def __post_init__(self):
        self.x = _f64(self.x)
        self.y = _f64(self.y)
        self.speed = _f64(self.speed)
        self.channel = np.asarray(self.channel, dtype=np.int8)

    def __len__(self) -> int:
        return len(self.x)

    def copy(self) -> "FlowParticlePool":
        return FlowParticlePool(
            x=self.x.copy(),
            y=self.y.copy(),
            speed=self.speed.copy(),
            channel=self.channel.copy(),
            size=self.size
        )


@dataclass
class DrugParticlePool:
    """Live drug particles travelling from the inlet towards the outlet."""
    x: np.ndarray = field(default_factory=lambda: np.zeros(0))
    y: np.ndarray = field(default_factory=lambda: np.zeros(0))
    speed: np.ndarray = field(default_factory=lambda: np.zeros(0))
    size: float = 3.5

    def __post_init__(self):
        self.x = _f64(self.x)
        self.y = _f64(self.y)
        self.speed = _f64(self.speed)

    def __len__(self) -> int:
        return len(self.x)

    def append(self, x: float, y: float, speed: float) -> None:
        self.x = np.append(self.x, x)
        self.y = np.append(self.y, y)
        self.speed = np.append(self.speed, speed)

    def keep(self, mask: np.ndarray) -> None:
        """Compact the pool to the entries where mask is True."""
        self.x = self.x[mask]
        self.y = self.y[mask]
        self.speed = self.speed[mask]

    def clear(self) -> None:
        self.keep(np.zeros(len(self), dtype=bool))

    def copy(self) -> "DrugParticlePool":
        return DrugParticlePool(
            x=self.x.copy(),
            y=self.y.copy(),
            speed=self.speed.copy(),
            size=self.size
        )


@dataclass
class DiffusionParticlePool:
    """
    Drug molecules entering the gel from the channel walls.

    direction is +1 for particles moving down from the top channel and -1
    for particles moving up from the bottom channel.
    """
    x: np.ndarray = field(default_factory=lambda: np.zeros(0))
    y: np.ndarray = field(default_factory=lambda: np.zeros(0))
    target_y: np.ndarray = field(default_factory=lambda: np.zeros(0))
    speed: np.ndarray = field(default_factory=lambda: np.zeros(0))
    direction: np.ndarray = field(default_factory=lambda: np.zeros(0))
    alpha: np.ndarray = field(default_factory=lambda: np.zeros(0))
    size: float = 3.0

    def __post_init__(self):
        self.x = _f64(self.x)
        self.y = _f64(self.y)
        self.target_y = _f64(self.target_y)
        self.speed = _f64(self.speed)
        self.direction = _f64(self.direction)
        self.alpha = _f64(self.alpha)

    def __len__(self) -> int:
        return len(self.x)

    def extend(self, other: "DiffusionParticlePool") -> None:
        for name in ("x", "y", "target_y", "speed", "direction", "alpha"):
            setattr(self, name, np.concatenate([getattr(self, name), getattr(other, name)]))

    def clear(self) -> None:
        for name in ("x", "y", "target_y", "speed", "direction", "alpha"):
            setattr(self, name, np.zeros(0))

    def still_moving(self) -> np.ndarray:
        """Mask of particles that have not yet reached their target depth."""
        return ((self.direction > 0) & (self.y < self.target_y)) | \
               ((self.direction < 0) & (self.y > self.target_y))

    def copy(self) -> "DiffusionParticlePool":
        return DiffusionParticlePool(
            x=self.x.copy(),
            y=self.y.copy(),
            target_y=self.target_y.copy(),
            speed=self.speed.copy(),
            direction=self.direction.copy(),
            alpha=self.alpha.copy(),
            size=self.size
        )


# =============================================================================
# Factories (initial placement)
# =============================================================================

NEURON_COUNT = 10
NEURON_FIRST_X = 195.0
NEURON_SPACING_X = 43.0
NEURON_Y = 140.0
NEURON_Y_SPREAD = 15.0
NEURON_RADIUS = 10.0
AXON_DRIFT_X = 20.0

# Two staggered rows in the lower half of the gel
SCHWANN_POSITIONS: List[Tuple[float, float]] = [
    (220, 280), (310, 285), (400, 275), (490, 280), (580, 285),
    (250, 330), (350, 325), (450, 335), (550, 328),
]
SCHWANN_WIDTH_RANGE = (50.0, 65.0)
SCHWANN_HEIGHT_RANGE = (18.0, 24.0)
SCHWANN_ROTATION_SPREAD = 0.4


def build_motor_neurons(rng: np.random.Generator, count: int = NEURON_COUNT) -> MotorNeuronSet:
    x = NEURON_FIRST_X + NEURON_SPACING_X * np.arange(count)
    y = NEURON_Y + (rng.random(count) - 0.5) * NEURON_Y_SPREAD
    return MotorNeuronSet(
        x=x,
        y=y,
        radius=np.full(count, NEURON_RADIUS),
        phase=rng.random(count) * 2.0 * np.pi
    )


def build_axons(neurons: MotorNeuronSet, layout: LayoutConfig,
                rng: np.random.Generator) -> AxonSet:
    """One axon per neuron, from the soma's lower edge to the gel floor."""
    n = len(neurons)
    return AxonSet(
        start_x=neurons.x.copy(),
        start_y=neurons.y + neurons.radius,
        end_x=neurons.x + (rng.random(n) - 0.5) * AXON_DRIFT_X,
        end_y=np.full(n, layout.axon_end_y)
    )


def build_schwann_cells(rng: np.random.Generator) -> SchwannCellSet:
    positions = np.array(SCHWANN_POSITIONS, dtype=np.float64)
    n = len(positions)
    return SchwannCellSet(
        x=positions[:, 0],
        y=positions[:, 1],
        width=_uniform(rng, SCHWANN_WIDTH_RANGE, n),
        height=_uniform(rng, SCHWANN_HEIGHT_RANGE, n),
        rotation=(rng.random(n) - 0.5) * SCHWANN_ROTATION_SPREAD
    )


def channel_y(layout: LayoutConfig, side: ChannelSide) -> float:
    """Top edge of the given medium channel."""
    return layout.top_channel_y if side == ChannelSide.TOP else layout.bottom_channel_y


def build_flow_particles(layout: LayoutConfig, flow: FlowConfig,
                         rng: np.random.Generator) -> FlowParticlePool:
    """Scatter the medium particles along both channels (interleaved top/bottom)."""
    n = flow.flow_particles_per_channel
    channel = np.tile([ChannelSide.TOP, ChannelSide.BOTTOM], n)
    base_y = np.where(channel == ChannelSide.TOP, layout.top_channel_y, layout.bottom_channel_y)
    return FlowParticlePool(
        x=layout.channel_start_x + rng.random(2 * n) * layout.channel_width,
        y=base_y + 10.0 + rng.random(2 * n) * 25.0,
        speed=_uniform(rng, flow.flow_speed_range, 2 * n),
        channel=channel
    )
