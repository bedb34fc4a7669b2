"""Tests for snapshot capture, persistence and resume."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nd_automata.config.types import ExperimentConfig
from nd_automata.domain.grid import create_grid, initialize_random
from nd_automata.domain.neighborhood import generate_neighborhood
from nd_automata.domain.random import SeededRandom
from nd_automata.domain.rules import conway_rule, create_rule
from nd_automata.simulation.snapshot import (
    create_snapshot,
    evolve_with_snapshots,
    load_snapshot,
    restore_grid,
    resume_from_snapshot,
    rle_decode,
    rle_encode,
    save_snapshot,
    snapshot_from_dict,
    validate_snapshot,
)
from nd_automata.simulation.step import EnhancedMetrics
from nd_automata.simulation.stepper import evolve_enhanced

CONFIG = ExperimentConfig(dimensions=(10, 10), steps=12, initial_density=0.4, seed=3)


def _seeded():
    grid = create_grid(CONFIG.dimensions)
    initialize_random(grid, CONFIG.initial_density, SeededRandom(CONFIG.seed))
    return grid


class TestRunLengthEncoding:
    def test_simple_runs(self) -> None:
        assert rle_encode([0, 0, 1, 1, 1, 0]) == [0, 2, 1, 3, 0, 1]

    def test_runs_capped_at_255(self) -> None:
        assert rle_encode([0] * 300) == [0, 255, 0, 45]

    def test_empty(self) -> None:
        assert rle_encode([]) == []
        assert rle_decode([]) == b""

    def test_decode_inverts_encode(self) -> None:
        grid = _seeded()
        assert rle_decode(rle_encode(grid.to_bytes())) == grid.to_bytes()

    def test_decode_rejects_odd_length(self) -> None:
        with pytest.raises(ValueError, match="even"):
            rle_decode([1, 2, 3])

    def test_decode_rejects_zero_run(self) -> None:
        with pytest.raises(ValueError, match="run length"):
            rle_decode([1, 0])


class TestSnapshotPersistence:
    def _snapshot(self):
        grid = _seeded()
        result = evolve_enhanced(grid, conway_rule(), generate_neighborhood((10, 10)), steps=5)
        return create_snapshot(result.final_grid, 5, result.metrics_history, CONFIG)

    def test_create_copies_state(self) -> None:
        snapshot = self._snapshot()
        assert snapshot.id.startswith("snap_")
        assert snapshot.steps_taken == 5
        assert snapshot.dimensions == (10, 10)
        assert len(snapshot.grid_data) == 100
        assert len(snapshot.metrics_history) == 5

    @pytest.mark.parametrize("compress", [False, True])
    def test_save_load_round_trip(self, tmp_path: Path, compress: bool) -> None:
        snapshot = self._snapshot()
        path = save_snapshot(snapshot, tmp_path / "snaps" / "s.json", compress=compress)
        loaded = load_snapshot(path)
        assert loaded == snapshot
        assert restore_grid(loaded).to_bytes() == snapshot.grid_data
        assert all(isinstance(m, EnhancedMetrics) for m in loaded.metrics_history)

    def test_compressed_payload_drops_raw_data(self) -> None:
        payload = self._snapshot().to_dict(compress=True)
        assert payload["compressed"] is True
        assert payload["grid_data"] == []
        assert sum(payload["rle_data"][1::2]) == 100

    def test_load_rejects_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_snapshot(path)


class TestSnapshotValidation:
    def _payload(self) -> dict[str, object]:
        grid = _seeded()
        return create_snapshot(grid, 0, [], CONFIG).to_dict()

    def test_valid_payload_passes(self) -> None:
        validate_snapshot(self._payload())

    @pytest.mark.parametrize(
        ("key", "value", "message"),
        [
            ("id", 5, "id"),
            ("timestamp", None, "timestamp"),
            ("steps_taken", -1, "steps_taken"),
            ("dimensions", [10, 0], "dimensions"),
            ("grid_data", [0, 1], "cells"),
            ("grid_data", [2**9] * 100, "grid_data"),
            ("metrics_history", {}, "metrics_history"),
            ("config", "x", "config"),
        ],
    )
    def test_rejects_malformed_field(self, key: str, value: object, message: str) -> None:
        payload = self._payload()
        payload[key] = value
        with pytest.raises(ValueError, match=message):
            validate_snapshot(payload)

    def test_rejects_config_without_required_keys(self) -> None:
        payload = self._payload()
        payload["config"] = {"dimensions": [10, 10]}
        with pytest.raises(ValueError, match="config.steps"):
            validate_snapshot(payload)

    @pytest.mark.parametrize(
        ("key", "value", "message"),
        [
            ("dimensions", 5, "config.dimensions"),
            ("steps", None, "config.steps"),
            ("initial_density", [1], "config.initial_density"),
            ("seed", "7", "config.seed"),
        ],
    )
    def test_rejects_mistyped_config_field(self, key: str, value: object, message: str) -> None:
        payload = self._payload()
        payload["config"][key] = value  # type: ignore[index]
        with pytest.raises(ValueError, match=message):
            validate_snapshot(payload)

    @pytest.mark.parametrize(
        ("key", "value", "message"),
        [
            ("neighborhood", 3, "snapshot.config is malformed"),
            ("birth", "3", "snapshot.config is malformed"),
            ("survival", [{"relative": None}], "snapshot.config is malformed"),
            ("steps", -2, "snapshot.config is malformed"),
        ],
    )
    def test_from_dict_wraps_config_errors(self, key: str, value: object, message: str) -> None:
        payload = self._payload()
        payload["config"][key] = value  # type: ignore[index]
        with pytest.raises(ValueError, match=message):
            snapshot_from_dict(payload)

    @pytest.mark.parametrize(
        ("key", "value", "message"),
        [
            ("population", "x", r"metrics_history\[0\]\.population"),
            ("step", 1.5, r"metrics_history\[0\]\.step"),
            ("density", None, r"metrics_history\[0\]\.density"),
            ("entropy", "high", r"metrics_history\[0\]\.entropy"),
            ("state_hash", 2**32, r"metrics_history\[0\]\.state_hash"),
            ("state_hash", -1, r"metrics_history\[0\]\.state_hash"),
        ],
    )
    def test_rejects_mistyped_metrics_entry(self, key: str, value: object, message: str) -> None:
        history = evolve_enhanced(
            _seeded(), conway_rule(), generate_neighborhood(CONFIG.dimensions), steps=2
        ).metrics_history
        payload = create_snapshot(_seeded(), 2, history, CONFIG).to_dict()
        payload["metrics_history"][0][key] = value
        with pytest.raises(ValueError, match=message):
            validate_snapshot(payload)

    def test_load_rejects_mistyped_metrics(self, tmp_path: Path) -> None:
        history = evolve_enhanced(
            _seeded(), conway_rule(), generate_neighborhood(CONFIG.dimensions), steps=2
        ).metrics_history
        payload = create_snapshot(_seeded(), 2, history, CONFIG).to_dict()
        payload["metrics_history"][1]["population"] = "x"
        path = tmp_path / "s.json"
        path.write_text(json.dumps(payload))
        with pytest.raises(ValueError, match="population"):
            load_snapshot(path)

    def test_rejects_non_object(self) -> None:
        with pytest.raises(ValueError, match="JSON object"):
            validate_snapshot([1, 2, 3])

    def test_from_dict_accepts_plain_metrics(self) -> None:
        payload = json.loads(json.dumps(self._payload()))
        payload["metrics_history"] = [
            {"population": 1, "density": 0.01, "births": 0, "deaths": 0, "delta": 0, "step": 1}
        ]
        snapshot = snapshot_from_dict(payload)
        assert not isinstance(snapshot.metrics_history[0], EnhancedMetrics)


class TestResume:
    def test_resume_matches_uninterrupted_run(self) -> None:
        neighborhood = generate_neighborhood(CONFIG.dimensions)
        full = evolve_enhanced(_seeded(), conway_rule(), neighborhood, steps=12)
        first = evolve_enhanced(_seeded(), conway_rule(), neighborhood, steps=5)
        snapshot = create_snapshot(first.final_grid, 5, first.metrics_history, CONFIG)
        resumed = resume_from_snapshot(snapshot, additional_steps=7, rule=conway_rule())
        assert resumed.final_grid == full.final_grid
        assert resumed.metrics_history == full.metrics_history
        assert [m.step for m in resumed.metrics_history] == list(range(1, 13))

    def test_resume_rebuilds_rule_from_config(self) -> None:
        neighborhood = generate_neighborhood(CONFIG.dimensions)
        full = evolve_enhanced(_seeded(), conway_rule(), neighborhood, steps=12)
        first = evolve_enhanced(_seeded(), conway_rule(), neighborhood, steps=5)
        snapshot = create_snapshot(first.final_grid, 5, first.metrics_history, CONFIG)
        resumed = resume_from_snapshot(snapshot, additional_steps=7)
        assert resumed.final_grid == full.final_grid

    def test_resume_rejects_rule_for_other_neighborhood(self) -> None:
        snapshot = create_snapshot(_seeded(), 0, [], CONFIG)
        with pytest.raises(ValueError, match="max_neighbors"):
            resume_from_snapshot(snapshot, additional_steps=3, rule=create_rule([8], [4], 26))

    def test_evolve_with_snapshots(self) -> None:
        seen: list[int] = []
        result, snapshots = evolve_with_snapshots(
            _seeded(),
            conway_rule(),
            CONFIG,
            snapshot_interval=4,
            on_snapshot=lambda s: seen.append(s.steps_taken),
        )
        assert [s.steps_taken for s in snapshots] == [4, 8, 12]
        assert seen == [4, 8, 12]
        assert snapshots[-1].grid_data == result.final_grid.to_bytes()
        assert len(snapshots[0].metrics_history) == 4

    def test_evolve_with_snapshots_rejects_zero_interval(self) -> None:
        with pytest.raises(ValueError, match="snapshot_interval"):
            evolve_with_snapshots(_seeded(), conway_rule(), CONFIG, snapshot_interval=0)
