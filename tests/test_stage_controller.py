"""
Tests for StageController - stage transitions and entry actions.
"""

import numpy as np
import pytest

from nervechip.config import SimulationConfig
from nervechip.logger import Logger, MemoryLogStrategy
from nervechip.play_clock import FrameQueue, PlayClock
from nervechip.simulation import SimulationCore
from nervechip.stage_controller import StageController


def make_controller(seed=0, with_clock=False):
    core = SimulationCore(SimulationConfig(seed=seed))
    clock = PlayClock(core, FrameQueue(), now=lambda: 0.0) if with_clock else None
    return StageController(core, play_clock=clock)


class TestNavigation:
    """Tests for advance / jump_to."""

    def test_starts_at_first_stage(self):
        stages = make_controller()
        assert stages.index == 0
        assert stages.stage_count == 8
        assert stages.current_stage.title == "Device Overview"
        assert stages.simulation.stage_index == 0

    def test_advance_walks_every_stage(self):
        stages = make_controller()
        for expected in range(1, 8):
            stages.advance()
            assert stages.index == expected
            assert stages.simulation.stage_index == expected
        assert stages.is_last_stage

    def test_advance_from_last_stage_resets(self):
        stages = make_controller()
        stages.jump_to(7)
        stages.simulation.update(3.0)
        stages.advance()

        assert stages.index == 0
        core = stages.simulation
        assert core.clock.time == 0.0
        assert core.diffusion_level == 0.0
        assert len(core.diffusion_particles) == 0

    def test_jump_keeps_accumulators(self):
        stages = make_controller()
        stages.simulation.motor_neurons.drug_exposure[:] = 0.4
        stages.jump_to(2)
        assert stages.index == 2
        np.testing.assert_allclose(stages.simulation.motor_neurons.drug_exposure, 0.4)


class TestEntryActions:
    """Tests for stage entry actions."""

    def test_flow_entry_resets_front(self):
        stages = make_controller()
        stages.simulation.drug_front_position = 0.6
        stages.jump_to(3)
        assert stages.simulation.drug_front_position == 0.0

    def test_perfusion_entry_keeps_front(self):
        stages = make_controller()
        stages.jump_to(3)
        stages.simulation.update(2.0)
        front = stages.simulation.drug_front_position
        stages.advance()
        assert stages.simulation.drug_front_position == front

    def test_diffusion_entry_seeds_once(self):
        stages = make_controller()
        stages.jump_to(5)
        assert len(stages.simulation.diffusion_particles) == 50
        stages.jump_to(5)
        assert len(stages.simulation.diffusion_particles) == 50

    def test_cells_entry_raises_diffusion_floor(self):
        stages = make_controller()
        stages.jump_to(6)
        assert stages.simulation.diffusion_level == pytest.approx(0.5)

    def test_entry_logged(self):
        memory = MemoryLogStrategy()
        Logger.set_log_storage_strategy(memory)
        stages = make_controller()
        stages.advance()
        assert any("Entered stage 1" in m for m in memory.messages("INFO"))


class TestReset:
    """Tests for reset()."""

    def test_reset_is_idempotent(self):
        stages = make_controller()
        stages.jump_to(6)
        stages.simulation.update(4.0)

        stages.reset()
        first = stages.simulation.snapshot()
        stages.reset()
        second = stages.simulation.snapshot()

        assert stages.index == 0
        assert first.time == second.time == 0.0
        assert first.diffusion_level == second.diffusion_level == 0.0
        assert first.drug_front_position == second.drug_front_position == 0.0
        np.testing.assert_array_equal(first.motor_neurons.drug_exposure,
                                      second.motor_neurons.drug_exposure)

    def test_reset_stops_play_clock(self):
        stages = make_controller(with_clock=True)
        stages.play_clock.start()
        assert stages.play_clock.is_running

        stages.reset()

        assert not stages.play_clock.is_running
        assert len(stages.play_clock.scheduler) == 0
