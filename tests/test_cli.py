"""Tests for the command-line interface and batch runs."""

import json

import pytest
from click.testing import CliRunner

from spindlesim.config.schema import MachineParameters, save_machine_parameters
from spindlesim.generator.batch_generator import BatchGenerator
from spindlesim.generator.cli import main


class TestCli:
    def test_run_writes_files(self, tmp_path):
        result = CliRunner().invoke(
            main, ["run", "--preset", "normal", "--ticks", "300", "--output-dir", str(tmp_path)],
        )
        assert result.exit_code == 0, result.output
        run_dir = tmp_path / "run_normal"
        for name in ("telemetry", "health", "cycle_reports"):
            assert (run_dir / f"{name}.parquet").exists()

    def test_run_with_params_file(self, tmp_path):
        params_file = tmp_path / "soft.json"
        save_machine_parameters(params_file, MachineParameters(stiffness=4000.0))
        result = CliRunner().invoke(
            main, ["run", "--params", str(params_file), "--ticks", "100",
                   "--feed-hold-at", "40", "--feed-hold-ticks", "20",
                   "--output-dir", str(tmp_path / "out")],
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "run_soft" / "telemetry.parquet").exists()

    def test_unknown_preset(self, tmp_path):
        result = CliRunner().invoke(main, ["run", "--preset", "bogus", "--output-dir", str(tmp_path)])
        assert result.exit_code != 0

    def test_validate(self, tmp_path):
        runner = CliRunner()
        runner.invoke(main, ["run", "--ticks", "200", "--output-dir", str(tmp_path)])
        result = runner.invoke(main, ["validate", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "0 failed" in result.output


class TestBatchGenerator:
    def test_sequential_batch(self, tmp_path):
        gen = BatchGenerator(["normal", "LOOSE"], tmp_path, n_ticks=150, seed=7, n_workers=1)
        summaries = gen.generate_all()
        assert [s["preset"] for s in summaries] == ["NORMAL", "LOOSE"]
        assert [s["seed"] for s in summaries] == [7000, 7001]
        assert (tmp_path / "run_normal" / "telemetry.parquet").exists()
        assert (tmp_path / "run_loose" / "telemetry.parquet").exists()

        manifest = json.loads((tmp_path / "batch_manifest.json").read_text())
        assert manifest["n_ticks"] == 150
        assert len(manifest["runs"]) == 2

    def test_skip_existing(self, tmp_path):
        BatchGenerator(["NORMAL"], tmp_path, n_ticks=50, n_workers=1).generate_all()
        again = BatchGenerator(["NORMAL"], tmp_path, n_ticks=50, n_workers=1, skip_existing=True)
        assert again.generate_all()[0]["skipped"] is True

    def test_unknown_preset(self, tmp_path):
        with pytest.raises(ValueError):
            BatchGenerator(["NORMAL", "WOBBLY"], tmp_path, n_ticks=10)

    def test_batch_command(self, tmp_path):
        result = CliRunner().invoke(
            main, ["batch", "--presets", "IMBALANCE,CHATTER", "--ticks", "100",
                   "--output-dir", str(tmp_path)],
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "run_chatter" / "health.parquet").exists()
