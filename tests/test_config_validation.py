"""
Tests for configuration validation and YAML loading.
"""

import pytest

from nervechip.config import (
    LayoutConfig, FlowConfig, DiffusionConfig, WashoutConfig,
    PlaybackConfig, SimulationConfig, default_config, load_config
)


class TestLayoutConfigValidation:
    """Tests for chip geometry validation."""

    def test_valid_default(self):
        is_valid, err = LayoutConfig().validate()
        assert is_valid
        assert err is None

    def test_channel_span_must_be_positive(self):
        cfg = LayoutConfig(channel_start_x=620.0, channel_end_x=180.0)
        is_valid, err = cfg.validate()
        assert not is_valid
        assert "channel_end_x" in err

    def test_regions_must_stack(self):
        cfg = LayoutConfig(hydrogel_y=50.0)
        is_valid, err = cfg.validate()
        assert not is_valid

    def test_derived_properties(self):
        cfg = LayoutConfig()
        assert cfg.channel_width == 440.0
        assert cfg.hydrogel_bottom_y == 375.0


class TestFlowConfigValidation:
    """Tests for flow config validation."""

    def test_valid_default(self):
        is_valid, err = FlowConfig().validate()
        assert is_valid

    def test_flow_rate_outside_range_rejected(self):
        cfg = FlowConfig(flow_rate=3.0)
        is_valid, err = cfg.validate()
        assert not is_valid
        assert "flow_rate" in err

    def test_zero_flow_range_rejected(self):
        cfg = FlowConfig(flow_rate_range=[0.0, 2.0])
        is_valid, err = cfg.validate()
        assert not is_valid

    def test_unordered_range_rejected(self):
        cfg = FlowConfig(drug_speed_range=[0.8, 0.5])
        is_valid, err = cfg.validate()
        assert not is_valid
        assert "drug_speed_range" in err

    def test_spawn_probability_bounds(self):
        cfg = FlowConfig(drug_spawn_probability=1.5)
        is_valid, err = cfg.validate()
        assert not is_valid
        assert "drug_spawn_probability" in err

    def test_negative_cap_rejected(self):
        cfg = FlowConfig(max_drug_particles=-1)
        is_valid, err = cfg.validate()
        assert not is_valid


class TestDiffusionConfigValidation:
    """Tests for diffusion config validation."""

    def test_valid_default(self):
        is_valid, err = DiffusionConfig().validate()
        assert is_valid

    def test_ratio_above_one_rejected(self):
        cfg = DiffusionConfig(axon_exposure_ratio=1.2)
        is_valid, err = cfg.validate()
        assert not is_valid
        assert "axon_exposure_ratio" in err

    def test_range_with_wrong_length_rejected(self):
        cfg = DiffusionConfig(top_target_range=[180.0])
        is_valid, err = cfg.validate()
        assert not is_valid
        assert "top_target_range" in err


class TestWashoutAndPlaybackValidation:
    """Tests for washout and playback sections."""

    def test_negative_delay_rejected(self):
        is_valid, err = WashoutConfig(delay_s=-1.0).validate()
        assert not is_valid
        assert "delay_s" in err

    def test_speed_outside_range_rejected(self):
        is_valid, err = PlaybackConfig(speed_multiplier=10.0).validate()
        assert not is_valid
        assert "speed_multiplier" in err


class TestSimulationConfigValidation:
    """Tests for the aggregate config."""

    def test_default_config_valid(self):
        config = default_config()
        is_valid, err = config.validate()
        assert is_valid
        assert config.seed is None

    def test_error_prefixed_with_section(self):
        config = SimulationConfig(flow=FlowConfig(flow_rate=5.0))
        is_valid, err = config.validate()
        assert not is_valid
        assert err.startswith("flow:")


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("seed: 7\nflow:\n  flow_rate: 1.0\nwashout:\n  delay_s: 2.0\n")
        config = load_config(path)
        assert config.seed == 7
        assert config.flow.flow_rate == 1.0
        assert config.flow.front_advance_rate == pytest.approx(0.07)
        assert config.washout.delay_s == 2.0
        assert config.diffusion.level_rate == pytest.approx(0.035)

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.flow.flow_rate == 0.5

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "extra.yaml"
        path.write_text("flow:\n  colour: red\n  flow_rate: 0.8\nunknown_section:\n  a: 1\n")
        config = load_config(path)
        assert config.flow.flow_rate == 0.8

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("flow:\n  flow_rate: 9.0\n")
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_non_mapping_top_level_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_non_mapping_section_raises(self, tmp_path):
        path = tmp_path / "scalar.yaml"
        path.write_text("flow: 5\n")
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_shipped_example_loads(self):
        from pathlib import Path
        example = Path(__file__).parent.parent / "examples" / "default.yaml"
        config = load_config(example)
        assert config.seed == 42
