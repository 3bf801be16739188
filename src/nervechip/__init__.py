"""
Nerve-on-Chip - interactive drug exposure tutorial.

Animates a microfluidic chip holding living nerve tissue: drug solution is
perfused through two medium channels, diffuses into the hydrogel between
them, accumulates in motor neurons, axons and Schwann cells, and is washed
out again. The tutorial walks through this in eight stages.

Units:
    - Length: canvas pixels
    - Time: simulated seconds (wall time x speed multiplier)
    - Levels and exposures: dimensionless, in [0, 1]
"""

__version__ = "0.1.0"

from .config import (
    SimulationConfig,
    LayoutConfig,
    FlowConfig,
    DiffusionConfig,
    WashoutConfig,
    PlaybackConfig,
    default_config,
    load_config
)
from .stages import TUTORIAL_STAGES, Stage, EntryAction, HighlightTarget, StageThresholds
from .simulation import SimulationCore, SimulationSnapshot
from .stage_controller import StageController
from .play_clock import PlayClock, FrameQueue
from .trace import TutorialTraceRunner, TraceRecord, records_to_dataframe
