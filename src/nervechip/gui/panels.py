"""
UI panels for the tutorial GUI.

Provides:
    - StepPanel: Current stage title, step counter, description and step jumps
    - ControlPanel: Play/Pause, Next, Reset, speed and flow sliders
    - InfoPanel: Description of the component under the pointer
    - LegendPanel: Colour legend
"""

import dearpygui.dearpygui as dpg
from typing import Callable, Optional, Sequence

from ..config import SimulationConfig
from ..stages import LEGEND_ITEMS, ComponentInfo, Stage
from .controller import ControllerState
from .palette import hex_to_rgba

TITLE_COLOR = (200, 200, 255)
DIM_COLOR = (150, 150, 150)


class StepPanel:
    """
    Shows the active stage and offers direct jumps to any stage.
    """

    def __init__(self, stages: Sequence[Stage], on_jump: Optional[Callable[[int], None]] = None):
        self.stages = list(stages)
        self.on_jump = on_jump
        self._window_tag: Optional[int] = None
        self._title_text: Optional[int] = None
        self._step_text: Optional[int] = None
        self._description_text: Optional[int] = None
        self._jump_buttons: list[int] = []

    def create(self, pos: tuple = (820, 10), width: int = 340) -> int:
        with dpg.window(
            label="Tutorial",
            pos=pos,
            width=width,
            height=230,
            no_resize=True,
            no_move=False,
            tag="step_window"
        ) as self._window_tag:
            self._step_text = dpg.add_text("Step 1 / 1", color=DIM_COLOR)
            self._title_text = dpg.add_text("", color=TITLE_COLOR)
            dpg.add_separator()
            self._description_text = dpg.add_text("", wrap=width - 20)
            dpg.add_separator()

            with dpg.group(horizontal=True):
                for stage in self.stages:
                    button = dpg.add_button(
                        label=str(stage.index + 1),
                        width=30,
                        callback=self._on_jump_click,
                        user_data=stage.index
                    )
                    self._jump_buttons.append(button)

        return self._window_tag

    def _on_jump_click(self, sender, app_data, user_data) -> None:
        if self.on_jump:
            self.on_jump(user_data)

    def update(self, state: ControllerState) -> None:
        if self._window_tag is None:
            return

        dpg.set_value(self._step_text, state.step_label)
        dpg.set_value(self._title_text, state.stage_title)
        dpg.set_value(self._description_text, state.stage_description)
        for i, button in enumerate(self._jump_buttons):
            label = f"[{i + 1}]" if i == state.stage_index else str(i + 1)
            dpg.configure_item(button, label=label)


class ControlPanel:
    """
    Control panel for playback and flow.

    Contains:
        - Play/Pause button
        - Next stage button
        - Reset button
        - Speed multiplier slider
        - Flow rate slider
    """

    def __init__(
        self,
        config: SimulationConfig,
        on_play: Optional[Callable[[], None]] = None,
        on_next: Optional[Callable[[], None]] = None,
        on_reset: Optional[Callable[[], None]] = None,
        on_speed: Optional[Callable[[float], None]] = None,
        on_flow_rate: Optional[Callable[[float], None]] = None
    ):
        self.config = config
        self.on_play = on_play
        self.on_next = on_next
        self.on_reset = on_reset
        self.on_speed = on_speed
        self.on_flow_rate = on_flow_rate

        self._window_tag: Optional[int] = None
        self._play_button: Optional[int] = None
        self._next_button: Optional[int] = None
        self._speed_slider: Optional[int] = None
        self._flow_slider: Optional[int] = None
        self._readout_text: Optional[int] = None

    def create(self, pos: tuple = (820, 250), width: int = 340) -> int:
        speed_lo, speed_hi = self.config.playback.speed_range
        flow_lo, flow_hi = self.config.flow.flow_rate_range

        with dpg.window(
            label="Controls",
            pos=pos,
            width=width,
            height=210,
            no_resize=True,
            no_move=False,
            tag="control_window"
        ) as self._window_tag:
            with dpg.group(horizontal=True):
                self._play_button = dpg.add_button(
                    label="Play",
                    width=90,
                    callback=self._on_play_click
                )
                self._next_button = dpg.add_button(
                    label="Next",
                    width=90,
                    callback=self._on_next_click
                )
                dpg.add_button(
                    label="Reset",
                    width=90,
                    callback=self._on_reset_click
                )

            dpg.add_separator()

            dpg.add_text("Speed:")
            self._speed_slider = dpg.add_slider_float(
                default_value=self.config.playback.speed_multiplier,
                min_value=speed_lo,
                max_value=speed_hi,
                width=width - 20,
                format="%.2fx",
                callback=self._on_speed_change
            )

            dpg.add_text("Flow rate:")
            self._flow_slider = dpg.add_slider_float(
                default_value=self.config.flow.flow_rate,
                min_value=flow_lo,
                max_value=flow_hi,
                width=width - 20,
                format="%.2f",
                callback=self._on_flow_change
            )

            dpg.add_separator()
            self._readout_text = dpg.add_text("", color=DIM_COLOR)

        return self._window_tag

    def _on_play_click(self, sender, app_data) -> None:
        if self.on_play:
            self.on_play()

    def _on_next_click(self, sender, app_data) -> None:
        if self.on_next:
            self.on_next()

    def _on_reset_click(self, sender, app_data) -> None:
        if self.on_reset:
            self.on_reset()

    def _on_speed_change(self, sender, app_data) -> None:
        if self.on_speed:
            self.on_speed(app_data)

    def _on_flow_change(self, sender, app_data) -> None:
        if self.on_flow_rate:
            self.on_flow_rate(app_data)

    def update(self, state: ControllerState) -> None:
        if self._window_tag is None:
            return

        dpg.configure_item(self._play_button, label="Pause" if state.playing else "Play")
        is_last = state.stage_index == state.stage_count - 1
        dpg.configure_item(self._next_button, label="Restart" if is_last else "Next")
        dpg.set_value(self._speed_slider, state.speed_multiplier)
        dpg.set_value(self._flow_slider, state.flow_rate)
        dpg.set_value(
            self._readout_text,
            f"t = {state.time:.1f} s   front = {state.drug_front_position:.2f}   "
            f"gel = {state.diffusion_level:.2f}"
        )


class InfoPanel:
    """Shows the title and description of the hovered component."""

    PLACEHOLDER = "Hover over the chip to learn about its parts."

    def __init__(self):
        self._window_tag: Optional[int] = None
        self._title_text: Optional[int] = None
        self._body_text: Optional[int] = None

    def create(self, pos: tuple = (820, 470), width: int = 340) -> int:
        with dpg.window(
            label="Component",
            pos=pos,
            width=width,
            height=130,
            no_resize=True,
            no_move=False,
            tag="info_window"
        ) as self._window_tag:
            with dpg.group(horizontal=True):
                self._title_text = dpg.add_text("", color=TITLE_COLOR)
                dpg.add_button(label="x", width=20, callback=self._on_close_click)
            self._body_text = dpg.add_text(self.PLACEHOLDER, wrap=width - 20)

        return self._window_tag

    def _on_close_click(self, sender, app_data) -> None:
        self.clear()

    def show(self, info: Optional[ComponentInfo]) -> None:
        if self._window_tag is None:
            return
        if info is None:
            self.clear()
            return
        dpg.set_value(self._title_text, info.title)
        dpg.set_value(self._body_text, info.description)

    def clear(self) -> None:
        if self._window_tag is None:
            return
        dpg.set_value(self._title_text, "")
        dpg.set_value(self._body_text, self.PLACEHOLDER)


class LegendPanel:
    """Static colour legend."""

    def __init__(self):
        self._window_tag: Optional[int] = None

    def create(self, pos: tuple = (820, 610), width: int = 340) -> int:
        with dpg.window(
            label="Legend",
            pos=pos,
            width=width,
            height=30 + 22 * len(LEGEND_ITEMS),
            no_resize=True,
            no_move=False,
            tag="legend_window"
        ) as self._window_tag:
            for color, label in LEGEND_ITEMS:
                with dpg.group(horizontal=True):
                    with dpg.drawlist(width=14, height=14):
                        rgba = hex_to_rgba(color)
                        dpg.draw_rectangle((0, 0), (14, 14), color=rgba, fill=rgba)
                    dpg.add_text(label)

        return self._window_tag
