"""
Headless tutorial trace.

Walks the tutorial from the first stage to the last without a GUI, advancing
the simulation in fixed frames and recording the accumulators each frame.
Records convert to a pandas DataFrame and plot with matplotlib.
"""

import matplotlib
matplotlib.use("Agg")  # must be set before importing pyplot
import matplotlib.pyplot as plt

import numpy as np
import pandas as pd
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import List, Optional

from .config import SimulationConfig, default_config
from .entities import CellKind
from .logger import Logger
from .simulation import SimulationCore
from .stage_controller import StageController


TRACE_COLUMNS = [
    "time",
    "stage_index",
    "stage_title",
    "drug_front_position",
    "diffusion_level",
    "neuron_exposure",
    "axon_exposure",
    "schwann_exposure",
    "drug_particles",
    "diffusion_particles",
]


@dataclass(frozen=True)
class TraceRecord:
    """Accumulators after one frame."""
    time: float
    stage_index: int
    stage_title: str
    drug_front_position: float
    diffusion_level: float
    neuron_exposure: float
    axon_exposure: float
    schwann_exposure: float
    drug_particles: int
    diffusion_particles: int


@dataclass
class TraceResult:
    """
    Complete trace results.

    Attributes:
        records: One record per simulated frame.
        config: Configuration used.
        dwell_s: Simulated seconds spent in each stage.
        dt: Frame length in seconds.
    """
    records: List[TraceRecord]
    config: SimulationConfig
    dwell_s: float
    dt: float

    @property
    def final(self) -> Optional[TraceRecord]:
        return self.records[-1] if self.records else None

    @property
    def peak_diffusion_level(self) -> float:
        return max((r.diffusion_level for r in self.records), default=0.0)

    @property
    def peak_neuron_exposure(self) -> float:
        return max((r.neuron_exposure for r in self.records), default=0.0)


class TutorialTraceRunner:
    """
    Scripted run through every stage.

    Usage:
        result = TutorialTraceRunner(config, dwell_s=8.0).run()
        df = records_to_dataframe(result.records)
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 dwell_s: float = 8.0, dt: float = 1.0 / 60.0):
        """
        Args:
            config: Tutorial configuration (defaults to default_config()).
            dwell_s: Simulated seconds spent in each stage.
            dt: Frame length in seconds.

        Raises:
            ValueError: If dwell_s is negative or dt is not positive.
        """
        if dwell_s < 0:
            raise ValueError("dwell_s must be non-negative")
        if dt <= 0:
            raise ValueError("dt must be positive")

        self.config = config or default_config()
        self.dwell_s = dwell_s
        self.dt = dt

        self.simulation = SimulationCore(self.config)
        self.stages = StageController(self.simulation)
        self.records: List[TraceRecord] = []

    def run(self) -> TraceResult:
        """Run every stage for dwell_s and return the collected records."""
        # Tolerance keeps e.g. 2.0 / 0.1 at 20 frames despite float rounding
        frames_per_stage = int(np.ceil(self.dwell_s / self.dt - 1e-9))

        for i in range(self.stages.stage_count):
            if i > 0:
                self.stages.advance()
            for _ in range(frames_per_stage):
                self.simulation.update(self.dt)
                self._record()

        Logger.log(
            f"Trace complete: {len(self.records)} frames over {self.stages.stage_count} stages",
            Logger.LogPriority.INFO
        )
        return TraceResult(records=self.records, config=self.config,
                           dwell_s=self.dwell_s, dt=self.dt)

    def _record(self) -> None:
        sim = self.simulation
        exposure = sim.mean_exposure()
        self.records.append(TraceRecord(
            time=sim.clock.time,
            stage_index=sim.stage_index,
            stage_title=sim.active_stage.title,
            drug_front_position=sim.drug_front_position,
            diffusion_level=sim.diffusion_level,
            neuron_exposure=exposure[CellKind.MOTOR_NEURON],
            axon_exposure=exposure[CellKind.AXON],
            schwann_exposure=exposure[CellKind.SCHWANN_CELL],
            drug_particles=len(sim.drug_particles),
            diffusion_particles=len(sim.diffusion_particles),
        ))


def records_to_dataframe(records: List[TraceRecord]) -> pd.DataFrame:
    """Trace records as a DataFrame with TRACE_COLUMNS in order."""
    return pd.DataFrame([asdict(r) for r in records], columns=TRACE_COLUMNS)


def _apply_deterministic_matplotlib_style() -> None:
    plt.rcParams.update(
        {
            "figure.dpi": 120,
            "savefig.dpi": 120,
            "font.size": 10,
            "axes.grid": True,
            "grid.alpha": 0.3,
            "lines.linewidth": 1.8,
            "legend.frameon": True,
            "legend.framealpha": 0.9,
        }
    )


def plot_trace(df: pd.DataFrame, path: Path) -> Path:
    """
    Plot front, diffusion level and mean exposures against time.

    Stage boundaries are drawn as dotted vertical lines.

    Returns:
        The path written.
    """
    _apply_deterministic_matplotlib_style()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(7.0, 4.0))
    ax.plot(df["time"], df["drug_front_position"], label="Drug front")
    ax.plot(df["time"], df["diffusion_level"], label="Gel diffusion")
    ax.plot(df["time"], df["neuron_exposure"], label="Neurons")
    ax.plot(df["time"], df["axon_exposure"], label="Axons")
    ax.plot(df["time"], df["schwann_exposure"], label="Schwann cells")

    boundaries = df["time"][df["stage_index"].diff().fillna(0) != 0]
    for t in boundaries:
        ax.axvline(t, color="gray", linestyle=":", linewidth=1.0)

    ax.set_ylim(-0.05, 1.05)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Level (0-1)")
    ax.set_title("Drug transport through the tutorial")
    ax.legend(loc="upper left")

    fig.tight_layout()
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    return path
