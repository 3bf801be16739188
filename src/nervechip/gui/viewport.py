"""
Chip viewport for 2D visualization.

Renders a SimulationSnapshot onto a DearPyGui drawlist:
    - Chip body, channel connectors, reservoirs and hydrogel port
    - Medium channels with the drug-front overlay
    - Hydrogel with the diffusion overlay
    - Axons, Schwann cells and pulsing motor neurons
    - Flow, drug and diffusion particles
    - Labels and the active stage's highlight

Drawing coordinates are the canvas pixels used by the simulation, so no
transform is needed. The viewport only reads the snapshot.
"""

import dearpygui.dearpygui as dpg
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..config import LayoutConfig
from ..entities import ChannelSide
from ..simulation import SimulationSnapshot
from ..stages import HighlightTarget
from . import palette

RESERVOIRS = ((127.0, 102.0, True), (127.0, 397.0, True), (673.0, 102.0, False), (673.0, 397.0, False))
RESERVOIR_RADIUS = 20.0
HYDROGEL_PORT_CENTER = (117.0, 242.0)
HYDROGEL_PORT_RADIUS = 11.0


@dataclass
class ViewportConfig:
    """Configuration for chip viewport."""
    width: int = 800
    height: int = 500
    highlight_thickness: float = 3.0
    highlight_margin: float = 3.0


class ChipViewport:
    """
    Drawlist renderer for the device.

    Reports pointer moves (in canvas coordinates) through on_hover and
    pointer exit through on_leave.
    """

    def __init__(self, layout: LayoutConfig, config: Optional[ViewportConfig] = None):
        self.layout = layout
        self.config = config or ViewportConfig(width=layout.canvas_width, height=layout.canvas_height)

        self._drawlist_tag: Optional[int] = None
        self._window_tag: Optional[int] = None

        self._on_hover: Optional[Callable[[float, float], None]] = None
        self._on_leave: Optional[Callable[[], None]] = None
        self._was_hovered = False

        # Flow start recolours the inlet reservoirs
        self.flow_stage_index = 3

    def create(self, pos: Optional[Tuple[int, int]] = None) -> int:
        """
        Create viewport window and drawlist.

        Args:
            pos: Window position (x, y).

        Returns:
            Window tag.
        """
        window_kwargs = {
            "label": "Nerve-on-Chip Device",
            "width": self.config.width + 20,
            "height": self.config.height + 40,
            "no_scrollbar": True,
            "no_scroll_with_mouse": True,
            "tag": "chip_window"
        }
        if pos is not None:
            window_kwargs["pos"] = pos

        with dpg.window(**window_kwargs) as self._window_tag:
            self._drawlist_tag = dpg.add_drawlist(
                width=self.config.width,
                height=self.config.height,
                tag="chip_drawlist"
            )

        with dpg.handler_registry():
            dpg.add_mouse_move_handler(callback=self._on_mouse_move)

        return self._window_tag

    def set_callbacks(
        self,
        on_hover: Optional[Callable[[float, float], None]] = None,
        on_leave: Optional[Callable[[], None]] = None
    ) -> None:
        self._on_hover = on_hover
        self._on_leave = on_leave

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self, snapshot: SimulationSnapshot) -> None:
        """Redraw the whole device from a snapshot."""
        if self._drawlist_tag is None:
            return

        dpg.delete_item(self._drawlist_tag, children_only=True)
        parent = self._drawlist_tag

        dpg.draw_rectangle((0, 0), (self.config.width, self.config.height),
                           color=palette.BACKGROUND, fill=palette.BACKGROUND, parent=parent)

        self._draw_chip_base(parent)
        self._draw_medium_channels(snapshot, parent)
        self._draw_hydrogel(snapshot, parent)
        self._draw_axons(snapshot, parent)
        self._draw_schwann_cells(snapshot, parent)
        self._draw_motor_neurons(snapshot, parent)
        self._draw_particles(snapshot, parent)
        self._draw_reservoirs(snapshot, parent)
        self._draw_labels(parent)
        self._draw_highlight(snapshot, parent)

    def _draw_chip_base(self, parent) -> None:
        L = self.layout
        dpg.draw_rectangle((L.chip_x - 5, L.chip_y - 5),
                           (L.chip_x + L.chip_width + 25, L.chip_y + L.chip_height + 15),
                           color=palette.CHIP_OUTLINE, fill=palette.CHIP_FILL,
                           rounding=12, thickness=2, parent=parent)
        for y in (L.top_channel_y, L.bottom_channel_y):
            for x in (145.0, L.channel_end_x):
                dpg.draw_rectangle((x, y + 15), (x + 35, y + 30), color=palette.CONNECTOR,
                                   fill=palette.CONNECTOR, parent=parent)
        dpg.draw_rectangle((130, 238), (180, 246), color=palette.CONNECTOR,
                           fill=palette.CONNECTOR, parent=parent)

    def _draw_medium_channels(self, snapshot: SimulationSnapshot, parent) -> None:
        L = self.layout
        for y in (L.top_channel_y, L.bottom_channel_y):
            dpg.draw_rectangle((L.channel_start_x, y), (L.channel_end_x, y + L.channel_height),
                               color=palette.CHANNEL, fill=palette.CHANNEL, rounding=3,
                               parent=parent)
            if snapshot.drug_front_position > 0:
                front_x = L.channel_start_x + L.channel_width * snapshot.drug_front_position
                dpg.draw_rectangle(
                    (L.channel_start_x, y), (front_x, y + L.channel_height),
                    multicolor=True,
                    color_upper_left=palette.DRUG_FRONT_START,
                    color_bottom_left=palette.DRUG_FRONT_START,
                    color_upper_right=palette.DRUG_FRONT_END,
                    color_bottom_right=palette.DRUG_FRONT_END,
                    parent=parent
                )

    def _draw_hydrogel(self, snapshot: SimulationSnapshot, parent) -> None:
        L = self.layout
        dpg.draw_rectangle((L.channel_start_x, L.hydrogel_y), (L.channel_end_x, L.hydrogel_bottom_y),
                           color=palette.HYDROGEL, fill=palette.HYDROGEL, parent=parent)
        if snapshot.diffusion_level <= 0:
            return

        tint = palette.diffusion_overlay_color(snapshot.diffusion_level)
        clear = tint[:3] + (0,)
        mid_y = L.hydrogel_y + L.hydrogel_height * 0.5
        # Fades from each channel wall towards the gel centre line
        dpg.draw_rectangle((L.channel_start_x, L.hydrogel_y), (L.channel_end_x, mid_y),
                           multicolor=True,
                           color_upper_left=tint, color_upper_right=tint,
                           color_bottom_left=clear, color_bottom_right=clear,
                           parent=parent)
        dpg.draw_rectangle((L.channel_start_x, mid_y), (L.channel_end_x, L.hydrogel_bottom_y),
                           multicolor=True,
                           color_upper_left=clear, color_upper_right=clear,
                           color_bottom_left=tint, color_bottom_right=tint,
                           parent=parent)

    def _draw_axons(self, snapshot: SimulationSnapshot, parent) -> None:
        axons = snapshot.axons
        wave = palette.axon_wave_offset(snapshot.time)
        for i in range(len(axons)):
            start = (axons.start_x[i], axons.start_y[i])
            end = (axons.end_x[i], axons.end_y[i])
            control = (axons.start_x[i] + wave, (axons.start_y[i] + axons.end_y[i]) / 2)
            dpg.draw_bezier_quadratic(start, control, end,
                                      color=palette.axon_color(axons.drug_exposure[i]),
                                      thickness=1.5, parent=parent)

    def _draw_schwann_cells(self, snapshot: SimulationSnapshot, parent) -> None:
        cells = snapshot.schwann_cells
        for i in range(len(cells)):
            color = palette.schwann_color(cells.drug_exposure[i])
            body = palette.ellipse_points(cells.x[i], cells.y[i], cells.width[i] / 2,
                                          cells.height[i] / 2, cells.rotation[i])
            dpg.draw_polygon(body, color=color, fill=color, parent=parent)
            nucleus = palette.ellipse_points(cells.x[i], cells.y[i], 6.0, 4.0, cells.rotation[i])
            dpg.draw_polygon(nucleus, color=palette.NUCLEUS_SCHWANN,
                             fill=palette.NUCLEUS_SCHWANN, parent=parent)

    def _draw_motor_neurons(self, snapshot: SimulationSnapshot, parent) -> None:
        neurons = snapshot.motor_neurons
        for i in range(len(neurons)):
            center = (neurons.x[i], neurons.y[i])
            exposure = neurons.drug_exposure[i]
            r = palette.neuron_pulse_radius(neurons.radius[i], neurons.phase[i], snapshot.time)
            body = palette.neuron_color(exposure)
            nucleus = palette.neuron_nucleus_color(exposure)
            dpg.draw_circle(center, r, color=body, fill=body, parent=parent)
            dpg.draw_circle(center, r * 0.45, color=nucleus, fill=nucleus, parent=parent)

    def _draw_particles(self, snapshot: SimulationSnapshot, parent) -> None:
        flow = snapshot.flow_particles
        for x, y in zip(flow.x, flow.y):
            dpg.draw_circle((x, y), flow.size, color=palette.FLOW_PARTICLE,
                            fill=palette.FLOW_PARTICLE, parent=parent)

        drug = snapshot.drug_particles
        for x, y in zip(drug.x, drug.y):
            dpg.draw_circle((x, y), drug.size, color=palette.DRUG_PARTICLE,
                            fill=palette.DRUG_PARTICLE, parent=parent)

        diffusion = snapshot.diffusion_particles
        for x, y, alpha in zip(diffusion.x, diffusion.y, diffusion.alpha):
            color = palette.diffusion_particle_color(alpha)
            dpg.draw_circle((x, y), diffusion.size, color=color, fill=color, parent=parent)

    def _draw_reservoirs(self, snapshot: SimulationSnapshot, parent) -> None:
        flowing = snapshot.stage_index >= self.flow_stage_index
        for x, y, inlet in RESERVOIRS:
            color = palette.RESERVOIR_INLET_ACTIVE if inlet and flowing else palette.RESERVOIR_IDLE
            dpg.draw_circle((x, y), RESERVOIR_RADIUS, color=color, fill=color, parent=parent)
            dpg.draw_circle((x - 6, y - 6), 5, color=(255, 255, 255, 64),
                            fill=(255, 255, 255, 64), parent=parent)
        dpg.draw_circle(HYDROGEL_PORT_CENTER, HYDROGEL_PORT_RADIUS, color=palette.HYDROGEL_PORT,
                        fill=palette.HYDROGEL_PORT, parent=parent)

    def _draw_labels(self, parent) -> None:
        L = self.layout
        mid_x = (L.channel_start_x + L.channel_end_x) / 2
        labels = [
            ((mid_x - 45, L.top_channel_y - 16), "Medium Channel", palette.LABEL, 12),
            ((mid_x - 45, L.bottom_channel_y + L.channel_height + 4), "Medium Channel", palette.LABEL, 12),
            ((mid_x - 40, L.hydrogel_y + L.hydrogel_height * 0.5 - 6), "ECM Hydrogel", palette.LABEL, 12),
            ((mid_x - 35, 158), "Motor neurons", palette.LABEL_DIM, 10),
            ((275, 298), "Schwann cells", palette.LABEL_DIM, 10),
            ((115, 60), "Inlet", palette.LABEL_DIM, 9),
            ((658, 60), "Outlet", palette.LABEL_DIM, 9),
        ]
        for pos, text, color, size in labels:
            dpg.draw_text(pos, text, color=color, size=size, parent=parent)

    def _draw_highlight(self, snapshot: SimulationSnapshot, parent) -> None:
        target = snapshot.highlight
        if target in (HighlightTarget.NONE, HighlightTarget.ALL):
            return

        L = self.layout
        m = self.config.highlight_margin
        color = palette.highlight_color(snapshot.time)
        thickness = self.config.highlight_thickness

        if target == HighlightTarget.INLET:
            for x, y, inlet in RESERVOIRS:
                if inlet:
                    dpg.draw_circle((x, y), 26, color=color, thickness=thickness, parent=parent)
        elif target in (HighlightTarget.CHANNELS, HighlightTarget.FLOW):
            for side in (ChannelSide.TOP, ChannelSide.BOTTOM):
                y = L.top_channel_y if side == ChannelSide.TOP else L.bottom_channel_y
                dpg.draw_rectangle((L.channel_start_x - m, y - m),
                                   (L.channel_end_x + m, y + L.channel_height + m),
                                   color=color, thickness=thickness, parent=parent)
        elif target == HighlightTarget.DIFFUSION:
            dpg.draw_rectangle((L.channel_start_x - m, L.hydrogel_y - m),
                               (L.channel_end_x + m, L.hydrogel_bottom_y + m),
                               color=color, thickness=thickness, parent=parent)
        elif target == HighlightTarget.CELLS:
            neurons = snapshot.motor_neurons
            for x, y in zip(neurons.x, neurons.y):
                dpg.draw_circle((x, y), 16, color=color, thickness=thickness, parent=parent)

    # ------------------------------------------------------------------
    # Pointer handling
    # ------------------------------------------------------------------

    def _on_mouse_move(self, sender, app_data) -> None:
        if self._drawlist_tag is None:
            return

        if dpg.is_item_hovered(self._drawlist_tag):
            self._was_hovered = True
            x, y = dpg.get_drawing_mouse_pos()
            if self._on_hover:
                self._on_hover(x, y)
        elif self._was_hovered:
            self._was_hovered = False
            if self._on_leave:
                self._on_leave()
