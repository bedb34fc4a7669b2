"""Tests for config/types.py: construction, validation and JSON round trip."""

from __future__ import annotations

from pathlib import Path

import pytest

from nd_automata.config.types import ExperimentConfig, NeighborhoodConfig, SweepConfig
from nd_automata.domain.neighborhood import NeighborhoodType
from nd_automata.domain.rules import RelativeThreshold


class TestNeighborhoodConfig:
    def test_defaults(self) -> None:
        cfg = NeighborhoodConfig()
        assert cfg.type is NeighborhoodType.MOORE
        assert cfg.range == 1

    def test_accepts_hyphenated_string(self) -> None:
        cfg = NeighborhoodConfig(type="von-neumann")  # type: ignore[arg-type]
        assert cfg.type is NeighborhoodType.VON_NEUMANN

    def test_rejects_zero_range(self) -> None:
        with pytest.raises(ValueError, match="range"):
            NeighborhoodConfig(range=0)

    def test_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="neighborhood type"):
            NeighborhoodConfig(type="hexagonal")  # type: ignore[arg-type]


class TestExperimentConfig:
    def test_defaults_are_conway(self) -> None:
        cfg = ExperimentConfig()
        assert cfg.dimensions == (20, 20)
        assert cfg.birth == (3,)
        assert cfg.survival == (2, 3)
        assert cfg.seed == 42
        assert cfg.metrics_interval == 1

    def test_dimensions_coerced_to_tuple(self) -> None:
        cfg = ExperimentConfig(dimensions=[4, 5, 6])  # type: ignore[arg-type]
        assert cfg.dimensions == (4, 5, 6)
        assert cfg.size == 120
        assert cfg.dims_label == "4x5x6"

    @pytest.mark.parametrize(
        ("kwargs", "field"),
        [
            ({"dimensions": ()}, "dimensions"),
            ({"dimensions": (10, 0)}, "dimensions"),
            ({"steps": -1}, "steps"),
            ({"initial_density": 1.5}, "initial_density"),
            ({"initial_density": -0.1}, "initial_density"),
            ({"metrics_interval": 0}, "metrics_interval"),
        ],
    )
    def test_invalid_values_name_the_field(self, kwargs: dict[str, object], field: str) -> None:
        with pytest.raises(ValueError, match=field):
            ExperimentConfig(**kwargs)  # type: ignore[arg-type]

    def test_is_frozen(self) -> None:
        cfg = ExperimentConfig()
        with pytest.raises((AttributeError, TypeError)):
            cfg.steps = 5  # type: ignore[misc]

    def test_with_seed_changes_only_seed(self) -> None:
        cfg = ExperimentConfig(dimensions=(8, 8), steps=7)
        other = cfg.with_seed(99)
        assert other.seed == 99
        assert other.dimensions == cfg.dimensions
        assert other.steps == cfg.steps

    def test_dict_round_trip_with_relative_thresholds(self) -> None:
        cfg = ExperimentConfig(
            dimensions=(5, 5, 5),
            neighborhood=NeighborhoodConfig(type=NeighborhoodType.VON_NEUMANN, range=2),
            birth=(RelativeThreshold(0.3),),
            survival=(RelativeThreshold(0.15), RelativeThreshold(0.3)),
            steps=12,
            initial_density=0.25,
            seed=7,
            metrics_interval=3,
        )
        payload = cfg.to_dict()
        assert payload["birth"] == [{"relative": 0.3}]
        assert payload["neighborhood"] == {"type": "von_neumann", "range": 2}
        assert ExperimentConfig.from_dict(payload) == cfg

    def test_from_dict_fills_defaults(self) -> None:
        cfg = ExperimentConfig.from_dict({"dimensions": [6, 6], "neighborhood": "moore"})
        assert cfg.dimensions == (6, 6)
        assert cfg.steps == ExperimentConfig().steps

    def test_from_dict_rejects_string_thresholds(self) -> None:
        with pytest.raises(ValueError, match="birth"):
            ExperimentConfig.from_dict({"birth": "3"})


class TestSweepConfig:
    def test_seeds_are_consecutive(self) -> None:
        cfg = SweepConfig(n_seeds=3, base_seed=10, out_dir="out")  # type: ignore[arg-type]
        assert list(cfg.seeds()) == [10, 11, 12]
        assert cfg.out_dir == Path("out")

    def test_rejects_zero_seeds(self) -> None:
        with pytest.raises(ValueError, match="n_seeds"):
            SweepConfig(n_seeds=0)

    def test_workload_cap(self) -> None:
        huge = ExperimentConfig(dimensions=(1000, 1000), steps=10_000)
        with pytest.raises(ValueError, match="safety threshold"):
            SweepConfig(experiment=huge, n_seeds=1)
