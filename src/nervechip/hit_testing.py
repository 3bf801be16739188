"""
Hover hit-testing over the device drawing.

Regions are axis-aligned rectangles in canvas pixels. Cells are listed before
the fixed structures (channels, gel, reservoirs, port) that contain them, and
the first region containing the pointer wins.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .config import LayoutConfig
from .entities import MotorNeuronSet, SchwannCellSet
from .stages import COMPONENT_INFO, ComponentInfo

RESERVOIR_SIZE = 45.0
NEURON_HIT_HALF_WIDTH = 12.0

# Reservoir bounding boxes (left, top) and the hydrogel port (left, top, w, h)
RESERVOIR_CORNERS = ((105.0, 70.0), (105.0, 365.0), (650.0, 70.0), (650.0, 365.0))
HYDROGEL_PORT_BOX = (100.0, 225.0, 35.0, 35.0)


@dataclass(frozen=True)
class ComponentRegion:
    kind: str
    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


def build_component_regions(
    layout: LayoutConfig,
    neurons: MotorNeuronSet,
    schwann_cells: SchwannCellSet
) -> List[ComponentRegion]:
    """Regions for every hoverable part of the device, in priority order."""
    regions = []
    for x, y in zip(neurons.x, neurons.y):
        regions.append(ComponentRegion(
            "neuron",
            float(x) - NEURON_HIT_HALF_WIDTH, float(y) - NEURON_HIT_HALF_WIDTH,
            2 * NEURON_HIT_HALF_WIDTH, 2 * NEURON_HIT_HALF_WIDTH
        ))
    for x, y, w, h in zip(schwann_cells.x, schwann_cells.y,
                          schwann_cells.width, schwann_cells.height):
        regions.append(ComponentRegion(
            "schwann_cell", float(x - w / 2), float(y - h / 2), float(w), float(h)
        ))

    width = layout.channel_width
    regions += [
        ComponentRegion("medium_channel", layout.channel_start_x, layout.top_channel_y,
                        width, layout.channel_height),
        ComponentRegion("medium_channel", layout.channel_start_x, layout.bottom_channel_y,
                        width, layout.channel_height),
        ComponentRegion("hydrogel", layout.channel_start_x, layout.hydrogel_y,
                        width, layout.hydrogel_height),
    ]
    for x, y in RESERVOIR_CORNERS:
        regions.append(ComponentRegion("reservoir", x, y, RESERVOIR_SIZE, RESERVOIR_SIZE))
    regions.append(ComponentRegion("hydrogel_port", *HYDROGEL_PORT_BOX))
    return regions


def find_component_at(regions: Sequence[ComponentRegion], x: float, y: float) -> Optional[str]:
    """Kind of the first region containing (x, y), or None."""
    for region in regions:
        if region.contains(x, y):
            return region.kind
    return None


def describe_component(kind: Optional[str]) -> Optional[ComponentInfo]:
    if kind is None:
        return None
    return COMPONENT_INFO.get(kind)
