"""
Tests for hover hit-testing over the device drawing.
"""

import numpy as np

from nervechip.config import LayoutConfig
from nervechip.entities import build_motor_neurons, build_schwann_cells
from nervechip.hit_testing import (
    ComponentRegion,
    build_component_regions,
    describe_component,
    find_component_at,
)


def make_regions(seed=0):
    rng = np.random.default_rng(seed)
    neurons = build_motor_neurons(rng)
    cells = build_schwann_cells(rng)
    return build_component_regions(LayoutConfig(), neurons, cells), neurons, cells


class TestComponentRegion:
    """Tests for rectangle containment."""

    def test_contains_edges(self):
        region = ComponentRegion("x", 10.0, 20.0, 5.0, 5.0)
        assert region.contains(10.0, 20.0)
        assert region.contains(15.0, 25.0)
        assert not region.contains(15.1, 25.0)


class TestFindComponent:
    """Tests for pointer lookup."""

    def test_neuron_wins_over_hydrogel(self):
        regions, neurons, _ = make_regions()
        assert find_component_at(regions, neurons.x[0], neurons.y[0]) == "neuron"

    def test_schwann_cell_wins_over_hydrogel(self):
        regions, _, cells = make_regions()
        assert find_component_at(regions, cells.x[4], cells.y[4]) == "schwann_cell"

    def test_channels_and_gel(self):
        regions, _, _ = make_regions()
        assert find_component_at(regions, 400.0, 100.0) == "medium_channel"
        assert find_component_at(regions, 400.0, 400.0) == "medium_channel"
        assert find_component_at(regions, 400.0, 220.0) == "hydrogel"

    def test_fixed_ports(self):
        regions, _, _ = make_regions()
        assert find_component_at(regions, 127.0, 102.0) == "reservoir"
        assert find_component_at(regions, 673.0, 397.0) == "reservoir"
        assert find_component_at(regions, 117.0, 242.0) == "hydrogel_port"

    def test_empty_space(self):
        regions, _, _ = make_regions()
        assert find_component_at(regions, 5.0, 5.0) is None


class TestDescribeComponent:
    """Tests for info lookup."""

    def test_known_kind(self):
        info = describe_component("neuron")
        assert info.title == "Motor Neurons"
        assert "axons" in info.description

    def test_none(self):
        assert describe_component(None) is None
