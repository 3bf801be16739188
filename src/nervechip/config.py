"""
Configuration loading and validation for the lab-on-chip tutorial.

Loads YAML config and validates every rate, range and geometry value.
All lengths are canvas pixels; all times are (speed-scaled) seconds.
"""

import yaml
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from .logger import Logger


def _check_range(name: str, bounds: list[float], lower: float = 0.0) -> Optional[str]:
    """Return an error message if bounds is not an ordered [lo, hi] pair >= lower."""
    if len(bounds) != 2:
        return f"{name} must have 2 components"
    lo, hi = bounds
    if lo < lower:
        return f"{name} lower bound must be >= {lower}"
    if hi < lo:
        return f"{name} must be ordered [min, max]"
    return None


@dataclass
class LayoutConfig:
    """Chip geometry in canvas pixels."""
    canvas_width: int = 800
    canvas_height: int = 500
    chip_x: float = 100.0
    chip_y: float = 60.0
    chip_width: float = 600.0
    chip_height: float = 380.0
    top_channel_y: float = 80.0
    channel_height: float = 45.0
    hydrogel_y: float = 125.0
    hydrogel_height: float = 250.0
    bottom_channel_y: float = 375.0
    channel_start_x: float = 180.0
    channel_end_x: float = 620.0
    flow_wrap_left_x: float = 190.0
    flow_wrap_right_x: float = 610.0
    drug_inlet_x: float = 185.0
    drug_exit_x: float = 615.0
    axon_end_y: float = 365.0
    diffusion_spawn_x: list[float] = field(default_factory=lambda: [200.0, 600.0])

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            return False, "canvas size must be positive"
        if self.channel_height <= 0:
            return False, "channel_height must be positive"
        if self.hydrogel_height <= 0:
            return False, "hydrogel_height must be positive"
        if self.channel_end_x <= self.channel_start_x:
            return False, "channel_end_x must be greater than channel_start_x"
        if self.flow_wrap_right_x <= self.flow_wrap_left_x:
            return False, "flow_wrap_right_x must be greater than flow_wrap_left_x"
        if self.drug_exit_x <= self.drug_inlet_x:
            return False, "drug_exit_x must be greater than drug_inlet_x"
        if not (self.top_channel_y < self.hydrogel_y < self.bottom_channel_y):
            return False, "top channel, hydrogel and bottom channel must be stacked top to bottom"
        error = _check_range("diffusion_spawn_x", self.diffusion_spawn_x)
        if error:
            return False, error
        return True, None

    @property
    def channel_width(self) -> float:
        return self.channel_end_x - self.channel_start_x

    @property
    def hydrogel_bottom_y(self) -> float:
        return self.hydrogel_y + self.hydrogel_height


@dataclass
class FlowConfig:
    """Channel perfusion and drug transport parameters."""
    flow_rate: float = 0.5
    flow_rate_range: list[float] = field(default_factory=lambda: [0.1, 2.0])
    base_flow_constant: float = 60.0
    transport_constant: float = 70.0
    front_advance_rate: float = 0.07
    drug_spawn_probability: float = 0.35
    max_drug_particles: int = 50
    drug_speed_range: list[float] = field(default_factory=lambda: [0.5, 0.8])
    flow_speed_range: list[float] = field(default_factory=lambda: [0.4, 0.7])
    flow_particles_per_channel: int = 12

    def validate(self) -> tuple[bool, Optional[str]]:
        error = _check_range("flow_rate_range", self.flow_rate_range)
        if error:
            return False, error
        if self.flow_rate_range[0] <= 0:
            return False, "flow_rate_range must be strictly positive"
        if not (self.flow_rate_range[0] <= self.flow_rate <= self.flow_rate_range[1]):
            return False, "flow_rate must lie within flow_rate_range"
        if self.base_flow_constant <= 0:
            return False, "base_flow_constant must be positive"
        if self.transport_constant <= 0:
            return False, "transport_constant must be positive"
        if self.front_advance_rate < 0:
            return False, "front_advance_rate must be non-negative"
        if not (0.0 <= self.drug_spawn_probability <= 1.0):
            return False, "drug_spawn_probability must be in [0, 1]"
        if self.max_drug_particles < 0:
            return False, "max_drug_particles must be non-negative"
        for name in ("drug_speed_range", "flow_speed_range"):
            error = _check_range(name, getattr(self, name))
            if error:
                return False, error
        if self.flow_particles_per_channel < 0:
            return False, "flow_particles_per_channel must be non-negative"
        return True, None


@dataclass
class DiffusionConfig:
    """Gel diffusion and cell exposure parameters."""
    level_rate: float = 0.035
    exposure_rate: float = 0.07
    neuron_exposure_ratio: float = 1.0
    axon_exposure_ratio: float = 0.7
    schwann_exposure_ratio: float = 0.5
    minimum_level: float = 0.5
    particles_per_batch: int = 25
    particle_speed_range: list[float] = field(default_factory=lambda: [0.12, 0.27])
    vertical_speed_constant: float = 45.0
    jitter: float = 20.0
    top_target_range: list[float] = field(default_factory=lambda: [180.0, 330.0])
    bottom_target_range: list[float] = field(default_factory=lambda: [280.0, 360.0])

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.level_rate < 0:
            return False, "level_rate must be non-negative"
        if self.exposure_rate < 0:
            return False, "exposure_rate must be non-negative"
        for name in ("neuron_exposure_ratio", "axon_exposure_ratio", "schwann_exposure_ratio"):
            if not (0.0 <= getattr(self, name) <= 1.0):
                return False, f"{name} must be in [0, 1]"
        if not (0.0 <= self.minimum_level <= 1.0):
            return False, "minimum_level must be in [0, 1]"
        if self.particles_per_batch < 0:
            return False, "particles_per_batch must be non-negative"
        if self.vertical_speed_constant < 0:
            return False, "vertical_speed_constant must be non-negative"
        if self.jitter < 0:
            return False, "jitter must be non-negative"
        for name in ("particle_speed_range", "top_target_range", "bottom_target_range"):
            error = _check_range(name, getattr(self, name))
            if error:
                return False, error
        return True, None


@dataclass
class WashoutConfig:
    """Washout decay parameters."""
    delay_s: float = 5.0
    level_decay_rate: float = 0.06
    exposure_decay_rate: float = 0.03

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.delay_s < 0:
            return False, "delay_s must be non-negative"
        if self.level_decay_rate < 0:
            return False, "level_decay_rate must be non-negative"
        if self.exposure_decay_rate < 0:
            return False, "exposure_decay_rate must be non-negative"
        return True, None


@dataclass
class PlaybackConfig:
    """Play clock parameters."""
    speed_multiplier: float = 1.0
    speed_range: list[float] = field(default_factory=lambda: [0.25, 4.0])

    def validate(self) -> tuple[bool, Optional[str]]:
        error = _check_range("speed_range", self.speed_range)
        if error:
            return False, error
        if self.speed_range[0] <= 0:
            return False, "speed_range must be strictly positive"
        if not (self.speed_range[0] <= self.speed_multiplier <= self.speed_range[1]):
            return False, "speed_multiplier must lie within speed_range"
        return True, None


@dataclass
class SimulationConfig:
    """Complete tutorial configuration."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    flow: FlowConfig = field(default_factory=FlowConfig)
    diffusion: DiffusionConfig = field(default_factory=DiffusionConfig)
    washout: WashoutConfig = field(default_factory=WashoutConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    seed: Optional[int] = None

    def validate(self) -> tuple[bool, Optional[str]]:
        for section_name in ["layout", "flow", "diffusion", "washout", "playback"]:
            section = getattr(self, section_name)
            is_valid, error = section.validate()
            if not is_valid:
                return False, f"{section_name}: {error}"
        return True, None


def default_config() -> SimulationConfig:
    """Validated configuration reproducing the reference device."""
    config = SimulationConfig()
    is_valid, error = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {error}")
    return config


def _section(raw: dict, name: str, cls):
    """Build a config section from a raw mapping, ignoring unknown keys."""
    section_raw = raw.get(name) or {}
    known = {k: v for k, v in section_raw.items() if k in cls.__dataclass_fields__}
    ignored = sorted(set(section_raw) - set(known))
    if ignored:
        Logger.log(f"Ignoring unknown keys in '{name}': {ignored}", Logger.LogPriority.WARNING)
    return cls(**known)


def load_config(path: Path) -> SimulationConfig:
    """
    Load and validate configuration from YAML file.

    Missing sections and keys fall back to the defaults.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated SimulationConfig.

    Raises:
        ValueError: If config is invalid.
        FileNotFoundError: If file doesn't exist.
    """
    with open(path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError("Invalid configuration: top level must be a mapping")

    try:
        config = SimulationConfig(
            layout=_section(raw, "layout", LayoutConfig),
            flow=_section(raw, "flow", FlowConfig),
            diffusion=_section(raw, "diffusion", DiffusionConfig),
            washout=_section(raw, "washout", WashoutConfig),
            playback=_section(raw, "playback", PlaybackConfig),
            seed=raw.get("seed"),
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    is_valid, error = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {error}")

    Logger.log(f"Loaded configuration from {path}", Logger.LogPriority.INFO)
    return config
