"""Tests for the seed-sweep batch engine and its Parquet outputs."""

from __future__ import annotations

import json
from pathlib import Path

import pyarrow.parquet as pq

from nd_automata.config.types import ExperimentConfig, SweepConfig
from nd_automata.io.schemas import CLASSIFICATION_SUMMARY_SCHEMA, METRICS_HISTORY_SCHEMA
from nd_automata.simulation.engine import deterministic_run_id, run_seed_sweep


def _sweep(tmp_path: Path, steps: int = 8, n_seeds: int = 3) -> SweepConfig:
    return SweepConfig(
        experiment=ExperimentConfig(dimensions=(8, 8), steps=steps, initial_density=0.3),
        n_seeds=n_seeds,
        base_seed=5,
        out_dir=tmp_path,
    )


def test_run_ids_are_deterministic() -> None:
    config = ExperimentConfig(dimensions=(4, 5, 6), seed=9)
    assert deterministic_run_id(config) == "seed9_4x5x6"


def test_sweep_writes_run_payloads(tmp_path: Path) -> None:
    results = run_seed_sweep(_sweep(tmp_path))
    assert [r.config.seed for r in results] == [5, 6, 7]
    for seed in (5, 6, 7):
        payload = json.loads((tmp_path / "runs" / f"seed{seed}_8x8.json").read_text())
        assert payload["run_id"] == f"seed{seed}_8x8"
        assert payload["config"]["seed"] == seed
        assert payload["rule"] == "B3/S23"
        assert "classification" in payload
        assert payload["schema_version"] == 1


def test_sweep_writes_metrics_history(tmp_path: Path) -> None:
    run_seed_sweep(_sweep(tmp_path))
    table = pq.read_table(tmp_path / "logs" / "metrics_history.parquet")
    assert table.schema.equals(METRICS_HISTORY_SCHEMA)
    assert table.num_rows == 3 * 8
    rows = [r for r in table.to_pylist() if r["run_id"] == "seed6_8x8"]
    assert [r["step"] for r in rows] == list(range(1, 9))


def test_sweep_writes_classification_summary(tmp_path: Path) -> None:
    results = run_seed_sweep(_sweep(tmp_path))
    table = pq.read_table(tmp_path / "logs" / "classification_summary.parquet")
    assert table.schema.equals(CLASSIFICATION_SUMMARY_SCHEMA)
    rows = table.to_pylist()
    assert [r["run_id"] for r in rows] == ["seed5_8x8", "seed6_8x8", "seed7_8x8"]
    for row, result in zip(rows, results):
        assert row["outcome"] == result.classification.outcome.value
        assert row["final_population"] == result.final_population


def test_sweep_is_reproducible(tmp_path: Path) -> None:
    first = run_seed_sweep(_sweep(tmp_path / "a"))
    second = run_seed_sweep(_sweep(tmp_path / "b"))
    assert [r.classification for r in first] == [r.classification for r in second]
    assert [r.metrics_history for r in first] == [r.metrics_history for r in second]


def test_zero_step_sweep_leaves_empty_metrics_file(tmp_path: Path) -> None:
    results = run_seed_sweep(_sweep(tmp_path, steps=0, n_seeds=2))
    assert all(r.classification.outcome.value == "extinct" for r in results)
    table = pq.read_table(tmp_path / "logs" / "metrics_history.parquet")
    assert table.num_rows == 0
