"""
Tests for the headless tutorial trace and its CLI.
"""

import pandas as pd
import pytest

from nervechip.cli import main
from nervechip.config import SimulationConfig
from nervechip.trace import (
    TRACE_COLUMNS,
    TutorialTraceRunner,
    plot_trace,
    records_to_dataframe,
)


def make_result(dwell_s=2.0, dt=0.1):
    return TutorialTraceRunner(SimulationConfig(seed=3), dwell_s=dwell_s, dt=dt).run()


class TestTraceRunner:
    """Tests for the scripted run."""

    def test_frames_per_stage(self):
        result = make_result(dwell_s=2.0, dt=0.1)
        assert len(result.records) == 8 * 20
        assert [r.stage_index for r in result.records[::20]] == list(range(8))

    def test_time_is_monotone(self):
        result = make_result()
        times = [r.time for r in result.records]
        assert times == sorted(times)
        assert times[-1] == pytest.approx(16.0)

    def test_no_drug_before_flow_stage(self):
        result = make_result()
        early = [r for r in result.records if r.stage_index < 3]
        assert all(r.drug_front_position == 0.0 for r in early)
        assert all(r.neuron_exposure == 0.0 for r in early)

    def test_drug_reaches_cells(self):
        result = make_result(dwell_s=4.0)
        assert result.peak_diffusion_level >= 0.5
        assert result.peak_neuron_exposure > 0.0
        seeded = [r for r in result.records if r.stage_index == 5]
        assert seeded[0].diffusion_particles == 50

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            TutorialTraceRunner(dwell_s=-1.0)
        with pytest.raises(ValueError):
            TutorialTraceRunner(dt=0.0)


class TestExport:
    """Tests for DataFrame conversion and plotting."""

    def test_dataframe_columns(self):
        df = records_to_dataframe(make_result().records)
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == TRACE_COLUMNS
        assert len(df) == 160

    def test_plot_written(self, tmp_path):
        df = records_to_dataframe(make_result().records)
        out = plot_trace(df, tmp_path / "figs" / "trace.png")
        assert out.exists()
        assert out.stat().st_size > 0


class TestCli:
    """Tests for the nervechip-trace entry point."""

    def test_writes_csv(self, tmp_path, capsys):
        csv_path = tmp_path / "trace.csv"
        with pytest.raises(SystemExit) as exc:
            main(["--dwell", "1", "--dt", "0.1", "--csv", str(csv_path)])
        assert exc.value.code == 0
        df = pd.read_csv(csv_path)
        assert list(df.columns) == TRACE_COLUMNS
        assert "TRACE COMPLETE" in capsys.readouterr().out

    def test_missing_config_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--config", str(tmp_path / "nope.yaml")])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_invalid_dwell_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--dwell", "-5", "--quiet"])
        assert exc.value.code == 1

    def test_verbose_echoes_info(self, capsys):
        with pytest.raises(SystemExit):
            main(["--dwell", "0.2", "--dt", "0.1", "--verbose"])
        assert "[INFO] Entered stage 1" in capsys.readouterr().out
