"""
Tests for convergence experiment infrastructure.
"""

import json
import math

import pytest

from option_engine.errors import ValidationError
from option_engine.experiments import (
    ConvergenceConfig,
    load_results,
    run_convergence_study,
    save_results,
    summarize,
)


def make_config(**overrides):
    kwargs = {
        "name": "test",
        "S0": 100.0,
        "K": 100.0,
        "r": 0.05,
        "T": 1.0,
        "sigma": 0.2,
        "n_paths_list": [1000],
        "seeds": [42],
        "n_workers": 2,
    }
    kwargs.update(overrides)
    return ConvergenceConfig(**kwargs)


class TestConvergenceConfig:
    """Test experiment configuration."""

    def test_config_creation(self):
        config = make_config()
        assert config.name == "test"
        assert config.option_type == "call"
        assert config.antithetic is True

    def test_contract(self):
        params = make_config(option_type="put").contract()
        assert params.option_type == "put"
        assert params.sigma == 0.2

    def test_invalid_contract(self):
        with pytest.raises(ValidationError):
            run_convergence_study(make_config(sigma=0.0))


class TestConvergenceRunner:
    """Test experiment runner."""

    def test_deterministic_output(self):
        """Test that same seed produces identical results."""
        results1 = run_convergence_study(make_config(n_paths_list=[10000]))
        results2 = run_convergence_study(make_config(n_paths_list=[10000]))

        assert len(results1) == len(results2) == 1
        assert results1[0].mc_price == results2[0].mc_price
        assert results1[0].stderr == results2[0].stderr

    def test_grid_shape(self):
        """Test that grid produces expected number of results."""
        results = run_convergence_study(make_config(n_paths_list=[1000, 5000, 10000], seeds=[42, 123, 456]))

        assert len(results) == 9
        assert {r.n_paths for r in results} == {1000, 5000, 10000}
        assert {r.seed for r in results} == {42, 123, 456}

    def test_error_fields(self):
        (result,) = run_convergence_study(make_config(n_paths_list=[20000]))
        assert result.bs_price == pytest.approx(10.4506, abs=1e-4)
        assert result.absolute_error == pytest.approx(abs(result.mc_price - result.bs_price))
        assert result.relative_error_pct == pytest.approx(100 * result.absolute_error / result.bs_price)
        assert result.runtime_seconds >= 0

    def test_metadata_fields(self):
        (result,) = run_convergence_study(make_config())
        meta = result.metadata
        assert meta.timestamp
        assert meta.python_version.count(".") == 2
        assert meta.numpy_version


class TestSummarize:
    """Aggregation per path count."""

    def test_rows_sorted_by_n_paths(self):
        results = run_convergence_study(make_config(n_paths_list=[8000, 2000], seeds=[1, 2, 3]))
        summary = summarize(results)
        assert [row.n_paths for row in summary] == [2000, 8000]
        assert all(row.n_runs == 3 for row in summary)
        assert 0.0 <= summary[0].coverage <= 1.0

    def test_stderr_shrinks(self):
        results = run_convergence_study(make_config(n_paths_list=[2000, 32000], seeds=[1, 2, 3, 4]))
        small, large = summarize(results)
        assert large.mean_stderr / small.mean_stderr == pytest.approx(0.25, abs=0.05)

    def test_mean_abs_error(self):
        results = run_convergence_study(make_config(seeds=[1, 2]))
        (row,) = summarize(results)
        assert row.mean_abs_error == pytest.approx(sum(r.absolute_error for r in results) / 2)


class TestExperimentIO:
    """Test experiment I/O."""

    def test_save_and_load_results(self, tmp_path):
        """Test saving and loading results."""
        results = run_convergence_study(make_config(name="io_test"))

        out_dir = tmp_path / "test_results"
        save_results(results, out_dir, "test_experiment")

        assert (out_dir / "results.json").exists()
        assert (out_dir / "summary.txt").exists()

        loaded = load_results(out_dir)
        assert loaded["experiment_name"] == "test_experiment"
        assert loaded["n_results"] == 1
        result_dict = loaded["results"][0]
        assert "mc_price" in result_dict
        assert "stderr" in result_dict
        assert "metadata" in result_dict
        assert loaded["summary"][0]["n_paths"] == 1000

    def test_json_serialization(self, tmp_path):
        """Test that results serialize to valid JSON."""
        results = run_convergence_study(make_config(n_paths_list=[1000, 5000], seeds=[42, 123]))
        out_dir = tmp_path / "json_test"
        save_results(results, out_dir, "json_test")

        with open(out_dir / "results.json") as f:
            data = json.load(f)

        assert isinstance(data["results"], list)
        assert len(data["results"]) == 4
        assert len(data["summary"]) == 2

    def test_undefined_relative_error_serialised_as_null(self, tmp_path):
        """A worthless option has no relative error."""
        results = run_convergence_study(make_config(S0=1.0, K=1000.0, T=0.1, sigma=0.1))
        assert math.isnan(results[0].relative_error_pct)
        save_results(results, tmp_path, "zero_price")
        assert load_results(tmp_path)["results"][0]["relative_error_pct"] is None

    def test_summary_table_format(self, tmp_path):
        """Test that summary table is properly formatted."""
        results = run_convergence_study(make_config(name="table_test"))
        save_results(results, tmp_path / "table_test", "table_test")

        content = (tmp_path / "table_test" / "summary.txt").read_text()
        assert "Experiment: table_test" in content
        assert "Mean Stderr" in content
        assert "Coverage" in content
        assert "BS reference" in content
