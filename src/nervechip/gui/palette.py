"""
Colours and small geometric helpers for drawing the device.

Pure functions (no DearPyGui import) so the exposure-to-colour mapping can be
tested headless. Colours are RGBA tuples of ints in 0..255.
"""

import math
from typing import List, Tuple

import numpy as np

RGBA = Tuple[int, int, int, int]

BACKGROUND = (26, 26, 46, 255)
CHIP_FILL = (40, 44, 62, 153)
CHIP_OUTLINE = (68, 68, 102, 255)
CONNECTOR = (58, 58, 90, 255)
CHANNEL = (74, 144, 217, 255)
HYDROGEL = (255, 182, 193, 255)
FLOW_PARTICLE = (65, 125, 175, 140)
DRUG_PARTICLE = (255, 50, 50, 204)
LABEL = (160, 160, 160, 255)
LABEL_DIM = (136, 136, 136, 255)
NUCLEUS_SCHWANN = (85, 107, 47, 255)
RESERVOIR_INLET_ACTIVE = (204, 68, 68, 255)
RESERVOIR_IDLE = (139, 90, 60, 255)
HYDROGEL_PORT = (85, 136, 170, 255)

# Drug overlay colours at the inlet end and at the front
DRUG_FRONT_START = (255, 50, 50, 230)
DRUG_FRONT_END = (255, 100, 100, 102)

NEURON_EXPOSED_THRESHOLD = 0.3
SCHWANN_EXPOSED_THRESHOLD = 0.3
AXON_EXPOSED_THRESHOLD = 0.2


def hex_to_rgba(value: str, alpha: int = 255) -> RGBA:
    """'#4a90d9' -> (74, 144, 217, alpha)."""
    value = value.lstrip("#")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), alpha)


def _rgba(r: float, g: float, b: float, a: float) -> RGBA:
    return tuple(int(round(min(255.0, max(0.0, c)))) for c in (r, g, b, a))


def neuron_color(exposure: float) -> RGBA:
    """Light green soma turning red as exposure rises."""
    if exposure > NEURON_EXPOSED_THRESHOLD:
        return _rgba(144 + exposure * 100, 238 - exposure * 120, 144 - exposure * 100, 255)
    return hex_to_rgba("#90EE90")


def neuron_nucleus_color(exposure: float) -> RGBA:
    if exposure > NEURON_EXPOSED_THRESHOLD:
        return hex_to_rgba("#993333")
    return hex_to_rgba("#228B22")


def axon_color(exposure: float) -> RGBA:
    if exposure > AXON_EXPOSED_THRESHOLD:
        return _rgba(100 + exposure * 155, 180 - exposure * 80, 100 - exposure * 50, 0.5 * 255)
    return _rgba(120, 180, 120, 0.4 * 255)


def schwann_color(exposure: float) -> RGBA:
    if exposure > SCHWANN_EXPOSED_THRESHOLD:
        return _rgba(160 + exposure * 80, 200 - exposure * 60, 50 + exposure * 60, 0.9 * 255)
    return hex_to_rgba("#9ACD32")


def diffusion_overlay_color(level: float) -> RGBA:
    """Gel tint at the channel walls for the given diffusion level."""
    return _rgba(255, 90, 90, level * 0.45 * 255)


def diffusion_particle_color(alpha: float) -> RGBA:
    return _rgba(255, 70, 70, alpha * 0.65 * 255)


def highlight_color(time_s: float) -> RGBA:
    """Pulsing outline colour for the stage highlight."""
    pulse = math.sin(time_s * 4.0) * 0.3 + 0.7
    return _rgba(255, 100, 100, pulse * 255)


def neuron_pulse_radius(radius: float, phase: float, time_s: float) -> float:
    return radius * (math.sin(time_s * 2.5 + phase) * 0.06 + 1.0)


def axon_wave_offset(time_s: float) -> float:
    return math.sin(time_s * 1.5) * 4.0


def ellipse_points(cx: float, cy: float, rx: float, ry: float,
                   rotation: float, segments: int = 24) -> List[Tuple[float, float]]:
    """Closed polygon approximating an ellipse rotated about its centre."""
    theta = np.linspace(0.0, 2.0 * np.pi, segments + 1)
    px = rx * np.cos(theta)
    py = ry * np.sin(theta)
    cos_r, sin_r = math.cos(rotation), math.sin(rotation)
    xs = cx + px * cos_r - py * sin_r
    ys = cy + px * sin_r + py * cos_r
    return list(zip(xs.tolist(), ys.tolist()))
