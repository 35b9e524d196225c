"""
Tests for the command line entry point and path/batching utilities.
"""

import json
import os

import pytest
import yaml

import main
from utils.batching import get_batch_slice
from utils.paths import create_timestamped_run_dir, update_config_paths_with_run_dir


class TestGetBatchSlice:
    """Tests for splitting events across batch jobs."""

    def test_even_split(self):
        items = list(range(6))

        assert [get_batch_slice(items, i, 3) for i in (1, 2, 3)] == [[0, 1], [2, 3], [4, 5]]

    def test_last_batch_takes_remainder(self):
        assert get_batch_slice(list(range(7)), 3, 3) == [4, 5, 6]

    def test_empty_items(self):
        assert get_batch_slice([], 1, 2) == []

    @pytest.mark.parametrize("index", [0, 4])
    def test_index_out_of_range(self, index):
        """Test that batch indices are 1-based and bounded."""
        with pytest.raises(ValueError, match="batch_index must be 1..3"):
            get_batch_slice([1, 2, 3], index, 3)


class TestPaths:
    """Tests for run directory handling."""

    def test_timestamped_run_dir(self, tmp_path):
        run_dir = create_timestamped_run_dir(str(tmp_path), "taus")

        assert os.path.isdir(run_dir)
        assert os.path.basename(run_dir).startswith("taus_")

    def test_relative_output_dir_moves_into_run_dir(self, tmp_path):
        """Test that relative output dirs are placed under the run directory."""
        updated = update_config_paths_with_run_dir({"output_config": {"output_dir": "./products"}}, str(tmp_path))

        assert updated["output_config"]["output_dir"] == os.path.join(str(tmp_path), "products")
        assert (tmp_path / "logs").is_dir()

    def test_absolute_output_dir_kept(self, tmp_path):
        absolute = str(tmp_path / "elsewhere")

        updated = update_config_paths_with_run_dir({"output_config": {"output_dir": absolute}}, str(tmp_path))

        assert updated["output_config"]["output_dir"] == absolute


class TestCli:
    """Tests for argument parsing and overrides."""

    def test_defaults(self):
        args = main.parse_args([])

        assert args.config == "config.yaml"
        assert args.seed is None
        assert not args.dry_run

    def test_batch_index_requires_total(self):
        with pytest.raises(SystemExit):
            main.parse_args(["--batch-job-index", "1"])

    def test_cli_overrides_yaml(self):
        """Test that seed and batch flags replace the YAML values."""
        args = main.parse_args(["--seed", "9", "--batch-job-index", "2", "--total-batch-jobs", "4"])
        config_dict = {"producer_config": {"seed": 1, "pt_threshold": 2.0}}

        updated = main.apply_cli_overrides(config_dict, args)

        assert updated["producer_config"] == {"seed": 9, "pt_threshold": 2.0}
        assert updated["run_metadata"] == {"batch_job_index": 2, "total_batch_jobs": 4}
        assert config_dict["producer_config"]["seed"] == 1

    def test_dry_run(self, tmp_path):
        """Test that a dry run validates the config and exits cleanly."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            "input_config": {"input_paths": [str(tmp_path / "events.json")]},
        }))

        exit_code = main.main(["--config", str(config_path), "--dry-run", "--run-dir", str(tmp_path / "run")])

        assert exit_code == 0
        assert (tmp_path / "run" / "products").is_dir()

    def test_invalid_config_returns_error(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"input_config": {"input_paths": []}}))

        assert main.main(["--config", str(config_path), "--run-dir", str(tmp_path / "run")]) == 1

    def test_batch_run_writes_stats(self, tmp_path):
        """Test a full batch run through the entry point."""
        events_path = tmp_path / "events.json"
        events_path.write_text(json.dumps({
            "event_id": 0,
            "tag_infos": [{"jet": {"pt": 10.0, "eta": 0.0, "phi": 0.0}, "tracks": [], "hits": []}],
            "vertices": [],
        }) + "\n")
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            "run_metadata": {"show_progress_bar": False},
            "input_config": {"input_paths": [str(events_path)]},
            "output_config": {"output_dir": "products"},
        }))
        run_dir = tmp_path / "run"

        exit_code = main.main([
            "--config", str(config_path), "--run-dir", str(run_dir),
            "--batch-job-index", "1", "--total-batch-jobs", "1", "--seed", "3",
        ])

        assert exit_code == 0
        assert (run_dir / "products" / "calo_taus_batch1.root").exists()
        assert (run_dir / "logs" / "batch_1_stats.json").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
