"""
Main application for the nerve-on-chip tutorial GUI.

Provides a DearPyGui application that shows the animated device next to
the tutorial text, playback controls, hover info and a legend.
"""

import dearpygui.dearpygui as dpg
from typing import Optional
from pathlib import Path

from ..config import SimulationConfig, default_config, load_config
from ..logger import Logger
from .controller import TutorialController
from .viewport import ChipViewport
from .panels import StepPanel, ControlPanel, InfoPanel, LegendPanel


class NerveChipApp:
    """
    Main application for the tutorial GUI.

    Usage:
        app = NerveChipApp(config)
        app.run()
    """

    def __init__(self, config: SimulationConfig, title: str = "Nerve-on-Chip Drug Exposure"):
        """
        Initialize application.

        Args:
            config: Tutorial configuration.
            title: Window title.
        """
        self.config = config
        self.title = title

        # Create controller (owns the simulation and the play clock)
        self.controller = TutorialController(config, on_state_changed=self._on_state_changed)

        self.viewport = ChipViewport(config.layout)
        self.viewport.flow_stage_index = self.controller.simulation.thresholds.flow
        self.step_panel = StepPanel(self.controller.stages.stages, on_jump=self._on_jump)
        self.control_panel = ControlPanel(
            config,
            on_play=self._on_play,
            on_next=self._on_next,
            on_reset=self._on_reset,
            on_speed=self._on_speed,
            on_flow_rate=self._on_flow_rate
        )
        self.info_panel = InfoPanel()
        self.legend_panel = LegendPanel()

        self._is_running = False

    def run(self) -> None:
        """Run the application (blocking)."""
        dpg.create_context()
        dpg.create_viewport(title=self.title, width=1190, height=600)

        self._create_ui()

        dpg.setup_dearpygui()
        dpg.show_viewport()

        self._update_display()

        # Main loop; frame callbacks queued by the play clock run once per frame
        self._is_running = True
        while dpg.is_dearpygui_running() and self._is_running:
            self.controller.frame_queue.run_pending()
            dpg.render_dearpygui_frame()

        self.controller.stop_playback()
        dpg.destroy_context()
        Logger.flush_logs()

    def stop(self) -> None:
        """Stop the application."""
        self._is_running = False

    def _create_ui(self) -> None:
        """Create all UI elements."""
        self.viewport.create(pos=(0, 0))
        self.viewport.set_callbacks(on_hover=self._on_hover, on_leave=self.info_panel.clear)

        self.step_panel.create(pos=(830, 0), width=340)
        self.control_panel.create(pos=(830, 235), width=340)
        self.info_panel.create(pos=(830, 450), width=340)
        self.legend_panel.create(pos=(10, 550), width=810)

    def _update_display(self) -> None:
        """Update all display elements."""
        state = self.controller.get_state()
        self.viewport.draw(self.controller.get_snapshot())
        self.step_panel.update(state)
        self.control_panel.update(state)

    def _on_state_changed(self) -> None:
        """Called by controller when state changes."""
        self._update_display()

    def _on_play(self) -> None:
        self.controller.toggle_playback()

    def _on_next(self) -> None:
        self.controller.advance_stage()

    def _on_reset(self) -> None:
        self.controller.reset_all()

    def _on_jump(self, index: int) -> None:
        self.controller.jump_to_stage(index)

    def _on_speed(self, value: float) -> None:
        self.controller.set_speed_multiplier(value)

    def _on_flow_rate(self, value: float) -> None:
        self.controller.set_flow_rate(value)

    def _on_hover(self, x: float, y: float) -> None:
        self.info_panel.show(self.controller.component_at(x, y))


def run_gui(config_path: Optional[str] = None) -> None:
    """
    Launch GUI from config file or defaults.

    Args:
        config_path: Path to YAML config file (optional).
    """
    config = load_config(Path(config_path)) if config_path else default_config()
    app = NerveChipApp(config)
    app.run()
