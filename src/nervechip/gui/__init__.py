"""
Nerve-on-Chip GUI - DearPyGui-based visualization.

Provides:
    - Animated chip drawing with drug front, gel diffusion and cell exposure
    - Tutorial text, step navigation and playback controls
    - Hover descriptions of device components
    - Event-safe architecture (GUI-independent simulation)

The DearPyGui modules (app, viewport, panels) are imported on demand so the
controller can be used headless.
"""

from .controller import TutorialController, ControllerState

__all__ = ["TutorialController", "ControllerState"]
