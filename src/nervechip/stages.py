"""
Tutorial script: the ordered stages of the drug-perfusion walkthrough.

Each stage carries display text, the part of the device to highlight and an
optional entry action. Entry actions are enum tags; the stage controller
binds them to simulation methods once at construction.

Also holds the static lookup tables shown next to the device (component
info for hover, legend entries).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple


class HighlightTarget(str, Enum):
    """Device region outlined while a stage is active."""
    NONE = "none"
    ALL = "all"
    INLET = "inlet"
    FLOW = "flow"
    CHANNELS = "channels"
    DIFFUSION = "diffusion"
    CELLS = "cells"


class EntryAction(Enum):
    """State change applied when a stage becomes active."""
    RESET_DRUG_FRONT = "reset_drug_front"
    CONTINUE_PERFUSION = "continue_perfusion"
    SEED_DIFFUSION_PARTICLES = "seed_diffusion_particles"
    RAISE_MINIMUM_DIFFUSION = "raise_minimum_diffusion"
    WASHOUT = "washout"


@dataclass(frozen=True)
class Stage:
    index: int
    title: str
    description: str
    highlight: HighlightTarget = HighlightTarget.NONE
    entry_action: Optional[EntryAction] = None


def _stage(index, title, lines, highlight, entry_action=None) -> Stage:
    return Stage(index, title, "\n".join(lines), highlight, entry_action)


TUTORIAL_STAGES: Tuple[Stage, ...] = (
    _stage(0, "Device Overview", [
        "This microfluidic device models a peripheral nerve for drug testing. It contains:",
        "- Two Medium Channels (blue): top and bottom, for nutrient flow",
        "- ECM Hydrogel Region (pink): central matrix housing the cells",
        "- Motor Neurons (green): along the top, extending axons downward",
        "- Schwann Cells (yellow-green): elongated cells in the hydrogel",
        "- Medium Reservoirs: spherical ports for fluid in and out",
    ], HighlightTarget.ALL),
    _stage(1, "Precondition: Living Tissue Ready", [
        "The chip is assembled, sterilized, and living tissue is engineered inside.",
        "- Motor neuron cell bodies positioned along the top channel",
        "- Axons extending downward through the hydrogel",
        "- Schwann cells wrapping around axons (myelination)",
        "- Fresh culture medium flowing through both channels",
        "The system is ready for drug testing.",
    ], HighlightTarget.CELLS),
    _stage(2, "Step 1: Drug Solution Preparation", [
        "A syringe with drug solution is attached to the inlet reservoirs.",
        "- Drug dissolved in culture medium",
        "- Precise concentration prepared",
        "- Connected to the Medium Reservoirs (left side)",
        "The drug solution is ready for injection.",
    ], HighlightTarget.INLET),
    _stage(3, "Step 2: Flow Initiation", [
        "The syringe pump activates at a very slow flow rate.",
        "- Flow rate: 0.5 uL/min (adjustable)",
        "- Laminar flow: no turbulent mixing",
        "- Drug pushes old medium in a plug-like manner",
        "- Clear interface maintained between solutions",
        "Watch the drug solution enter the channels.",
    ], HighlightTarget.FLOW, EntryAction.RESET_DRUG_FRONT),
    _stage(4, "Step 3: Channel Perfusion", [
        "Drug solution flows along both Medium Channels.",
        "- Flows parallel to the ECM Hydrogel region",
        "- Flow maintained for hours to days",
        "- Creates a uniform exposure zone",
        "Drug advancing through the channels.",
    ], HighlightTarget.CHANNELS, EntryAction.CONTINUE_PERFUSION),
    _stage(5, "Step 4: Drug Diffusion", [
        "Drug molecules begin diffusing into the hydrogel:",
        "- Movement down the concentration gradient",
        "- Crosses from the channels into the ECM Hydrogel",
        "- Diffusion from both top and bottom channels",
        "- PDMS posts don't block diffusion",
        "Watch molecules spread into the gel.",
    ], HighlightTarget.DIFFUSION, EntryAction.SEED_DIFFUSION_PARTICLES),
    _stage(6, "Step 5: Drug Reaches Cells", [
        "Drugs diffuse through the ECM to reach the neural tissue:",
        "- ECM acts like extracellular space in the body",
        "- Reaches motor neuron cell bodies",
        "- Contacts axons and Schwann cells",
        "- Cells respond to drug exposure",
        "Drug interacting with neurons.",
    ], HighlightTarget.CELLS, EntryAction.RAISE_MINIMUM_DIFFUSION),
    _stage(7, "Step 6: Observation & Washout", [
        "Measurements are taken, then the drug is washed out:",
        "- Live-cell imaging or electrical recording",
        "- Observations at specific time points",
        "- After exposure: switch to fresh medium",
        "- Flush drug from the system",
        "The experiment is complete and data is collected.",
    ], HighlightTarget.ALL, EntryAction.WASHOUT),
)


@dataclass(frozen=True)
class StageThresholds:
    """
    Stage indices that gate the continuous update.

    flow: drug front advances and drug particles spawn from here on.
    diffusion: diffusion level and cell exposure accrue from here on.
    washout: terminal stage in which accumulated drug is cleared.
    """
    flow: int
    diffusion: int
    washout: int

    @classmethod
    def from_stages(cls, stages: Sequence[Stage]) -> "StageThresholds":
        """Locate the stages carrying the flow, diffusion and washout actions."""
        def index_of(action: EntryAction) -> int:
            for stage in stages:
                if stage.entry_action == action:
                    return stage.index
            raise ValueError(f"Tutorial script has no stage with action {action.value}")

        return cls(
            flow=index_of(EntryAction.RESET_DRUG_FRONT),
            diffusion=index_of(EntryAction.SEED_DIFFUSION_PARTICLES),
            washout=index_of(EntryAction.WASHOUT),
        )


def validate_stages(stages: Sequence[Stage]) -> tuple[bool, Optional[str]]:
    """Check that a script is non-empty and indexed 0..N-1 in order."""
    if not stages:
        return False, "tutorial script must contain at least one stage"
    for position, stage in enumerate(stages):
        if stage.index != position:
            return False, f"stage '{stage.title}' has index {stage.index}, expected {position}"
    return True, None


# =============================================================================
# Static display tables
# =============================================================================

@dataclass(frozen=True)
class ComponentInfo:
    title: str
    description: str


COMPONENT_INFO: Dict[str, ComponentInfo] = {
    "medium_channel": ComponentInfo(
        "Medium Channel",
        "Microfluidic channels (top & bottom) carrying culture medium and drug solutions. "
        "Laminar flow ensures predictable, plug-like drug delivery without turbulent mixing."
    ),
    "hydrogel": ComponentInfo(
        "ECM Hydrogel",
        "Central region filled with extracellular matrix (Collagen or Matrigel). Mimics the "
        "extracellular space in the body and provides scaffolding for neural tissue."
    ),
    "neuron": ComponentInfo(
        "Motor Neurons",
        "Living motor neurons positioned along the top channel. Their cell bodies extend long "
        "axons downward through the hydrogel toward the bottom channel."
    ),
    "schwann_cell": ComponentInfo(
        "Schwann Cells",
        "Elongated supporting cells that wrap around axons to create myelin sheaths. "
        "Essential for modeling myelinated peripheral nerves."
    ),
    "reservoir": ComponentInfo(
        "Medium Reservoir",
        "Spherical ports where syringes connect to introduce or collect fluids. Left "
        "reservoirs are inlets, right reservoirs are outlets."
    ),
    "hydrogel_port": ComponentInfo(
        "Hydrogel Injection Port",
        "Central port used to load the cell-hydrogel mixture into the central chamber "
        "during initial chip assembly."
    ),
}


LEGEND_ITEMS: Tuple[Tuple[str, str], ...] = (
    ("#4a90d9", "Medium Channel (flowing)"),
    ("#FFB6C1", "ECM Hydrogel"),
    ("#90EE90", "Motor Neurons"),
    ("#9ACD32", "Schwann Cells"),
    ("#ff4444", "Drug Solution"),
)
