"""
Tests for entity populations and factories.

Tests:
    - Initial placement of neurons, axons and Schwann cells
    - Flow particle scatter
    - Particle pool bookkeeping
    - Copy independence
"""

import numpy as np
import pytest

from nervechip.config import LayoutConfig, FlowConfig
from nervechip.entities import (
    ChannelSide,
    DiffusionParticlePool,
    DrugParticlePool,
    build_axons,
    build_flow_particles,
    build_motor_neurons,
    build_schwann_cells,
    channel_y,
)


def make_rng(seed=0):
    return np.random.default_rng(seed)


class TestCellFactories:
    """Tests for cell placement."""

    def test_motor_neuron_row(self):
        """Ten neurons spaced 43 px apart with a small vertical spread."""
        neurons = build_motor_neurons(make_rng())
        assert len(neurons) == 10
        np.testing.assert_allclose(neurons.x, 195.0 + 43.0 * np.arange(10))
        assert np.all(np.abs(neurons.y - 140.0) <= 7.5)
        np.testing.assert_allclose(neurons.radius, 10.0)
        np.testing.assert_array_equal(neurons.drug_exposure, 0.0)

    def test_axons_start_at_soma_and_reach_gel_floor(self):
        layout = LayoutConfig()
        rng = make_rng(1)
        neurons = build_motor_neurons(rng)
        axons = build_axons(neurons, layout, rng)
        assert len(axons) == len(neurons)
        np.testing.assert_allclose(axons.start_x, neurons.x)
        np.testing.assert_allclose(axons.start_y, neurons.y + neurons.radius)
        np.testing.assert_allclose(axons.end_y, 365.0)
        assert np.all(np.abs(axons.end_x - neurons.x) <= 10.0)

    def test_schwann_cells(self):
        cells = build_schwann_cells(make_rng(2))
        assert len(cells) == 9
        assert np.all((cells.width >= 50.0) & (cells.width <= 65.0))
        assert np.all((cells.height >= 18.0) & (cells.height <= 24.0))
        assert np.all(np.abs(cells.rotation) <= 0.2)

    def test_cells_lie_in_hydrogel(self):
        layout = LayoutConfig()
        cells = build_schwann_cells(make_rng(3))
        assert np.all(cells.y > layout.hydrogel_y)
        assert np.all(cells.y < layout.hydrogel_bottom_y)


class TestFlowParticles:
    """Tests for the medium particle scatter."""

    def test_count_and_channels(self):
        pool = build_flow_particles(LayoutConfig(), FlowConfig(), make_rng())
        assert len(pool) == 24
        assert np.sum(pool.channel == ChannelSide.TOP) == 12
        assert np.sum(pool.channel == ChannelSide.BOTTOM) == 12

    def test_positions_inside_channels(self):
        layout = LayoutConfig()
        pool = build_flow_particles(layout, FlowConfig(), make_rng(4))
        assert np.all(pool.x >= layout.channel_start_x)
        assert np.all(pool.x <= layout.channel_end_x)
        for side in (ChannelSide.TOP, ChannelSide.BOTTOM):
            ys = pool.y[pool.channel == side]
            top = channel_y(layout, side)
            assert np.all((ys >= top + 10.0) & (ys <= top + 35.0))

    def test_speeds_in_range(self):
        pool = build_flow_particles(LayoutConfig(), FlowConfig(), make_rng(5))
        assert np.all((pool.speed >= 0.4) & (pool.speed <= 0.7))


class TestParticlePools:
    """Tests for drug and diffusion pool bookkeeping."""

    def test_drug_pool_append_and_keep(self):
        pool = DrugParticlePool()
        assert len(pool) == 0
        pool.append(185.0, 100.0, 0.6)
        pool.append(620.0, 110.0, 0.7)
        assert len(pool) == 2

        pool.keep(pool.x < 615.0)
        assert len(pool) == 1
        assert pool.x[0] == 185.0
        assert pool.speed[0] == pytest.approx(0.6)

    def test_drug_pool_clear(self):
        pool = DrugParticlePool()
        pool.append(185.0, 100.0, 0.6)
        pool.clear()
        assert len(pool) == 0

    def test_diffusion_pool_still_moving(self):
        pool = DiffusionParticlePool(
            x=[200.0, 300.0, 400.0],
            y=[125.0, 200.0, 375.0],
            target_y=[180.0, 200.0, 300.0],
            speed=[0.2, 0.2, 0.2],
            direction=[1.0, 1.0, -1.0],
            alpha=[1.0, 1.0, 1.0]
        )
        np.testing.assert_array_equal(pool.still_moving(), [True, False, True])

    def test_diffusion_pool_extend(self):
        a = DiffusionParticlePool(x=[1.0], y=[2.0], target_y=[3.0], speed=[0.1],
                                  direction=[1.0], alpha=[1.0])
        b = a.copy()
        a.extend(b)
        assert len(a) == 2
        assert len(b) == 1

    def test_copy_is_independent(self):
        neurons = build_motor_neurons(make_rng())
        duplicate = neurons.copy()
        duplicate.drug_exposure[:] = 0.5
        np.testing.assert_array_equal(neurons.drug_exposure, 0.0)
