"""Configuration dataclasses for single experiments and seed sweeps.

All frozen dataclasses that parameterise an automaton run live here. Each
validates itself on construction and raises ``ValueError`` naming the
offending field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from nd_automata.config.constants import (
    DEFAULT_DENSITY,
    DEFAULT_DIMENSIONS,
    DEFAULT_METRICS_INTERVAL,
    DEFAULT_RANGE,
    DEFAULT_SEED,
    DEFAULT_STEPS,
    MAX_SWEEP_WORK_UNITS,
)
from nd_automata.domain.grid import validate_dimensions
from nd_automata.domain.neighborhood import NeighborhoodType
from nd_automata.domain.rules import RelativeThreshold, ThresholdValue

__all__ = [
    "MAX_SWEEP_WORK_UNITS",
    "ExperimentConfig",
    "NeighborhoodConfig",
    "SweepConfig",
]


# ---------------------------------------------------------------------------
# Threshold (de)serialisation
# ---------------------------------------------------------------------------


def _threshold_to_json(value: ThresholdValue) -> int | dict[str, float]:
    if isinstance(value, RelativeThreshold):
        return {"relative": value.fraction}
    if isinstance(value, Mapping):
        return {"relative": float(value["relative"])}
    return int(value)


def _threshold_from_json(value: object, key: str) -> ThresholdValue:
    if isinstance(value, RelativeThreshold):
        return value
    if isinstance(value, Mapping):
        if "relative" not in value:
            raise ValueError(f"{key} entries must be integers or {{'relative': fraction}}")
        return RelativeThreshold(float(value["relative"]))
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} entries must be integers or {{'relative': fraction}}")
    return value


def _thresholds_from_json(raw: object, key: str) -> tuple[ThresholdValue, ...]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ValueError(f"{key} must be a list")
    return tuple(_threshold_from_json(value, key) for value in raw)


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NeighborhoodConfig:
    """Neighbourhood topology and radius."""

    type: NeighborhoodType = NeighborhoodType.MOORE
    range: int = DEFAULT_RANGE

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", NeighborhoodType.parse(self.type))
        if isinstance(self.range, bool) or not isinstance(self.range, int):
            raise ValueError("neighborhood.range must be an integer")
        if self.range < 1:
            raise ValueError("neighborhood.range must be >= 1")


@dataclass(frozen=True)
class ExperimentConfig:
    """Everything needed to reproduce one automaton run."""

    dimensions: tuple[int, ...] = DEFAULT_DIMENSIONS
    neighborhood: NeighborhoodConfig = field(default_factory=NeighborhoodConfig)
    birth: tuple[ThresholdValue, ...] = (3,)
    survival: tuple[ThresholdValue, ...] = (2, 3)
    steps: int = DEFAULT_STEPS
    initial_density: float = DEFAULT_DENSITY
    seed: int = DEFAULT_SEED
    metrics_interval: int = DEFAULT_METRICS_INTERVAL

    def __post_init__(self) -> None:
        try:
            dims = validate_dimensions(self.dimensions)
        except ValueError as exc:
            raise ValueError(f"dimensions: {exc}") from exc
        object.__setattr__(self, "dimensions", dims)
        object.__setattr__(self, "birth", tuple(self.birth))
        object.__setattr__(self, "survival", tuple(self.survival))
        if self.steps < 0:
            raise ValueError("steps must be >= 0")
        if not 0.0 <= self.initial_density <= 1.0:
            raise ValueError("initial_density must be in [0.0, 1.0]")
        if self.metrics_interval < 1:
            raise ValueError("metrics_interval must be >= 1")

    @property
    def size(self) -> int:
        """Total number of cells."""
        total = 1
        for dim in self.dimensions:
            total *= dim
        return total

    @property
    def dims_label(self) -> str:
        """Dimensions formatted as ``20x20x20``."""
        return "x".join(str(d) for d in self.dimensions)

    def with_seed(self, seed: int) -> ExperimentConfig:
        """Copy of this config with a different seed."""
        return ExperimentConfig(
            dimensions=self.dimensions,
            neighborhood=self.neighborhood,
            birth=self.birth,
            survival=self.survival,
            steps=self.steps,
            initial_density=self.initial_density,
            seed=seed,
            metrics_interval=self.metrics_interval,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible representation."""
        return {
            "dimensions": list(self.dimensions),
            "neighborhood": {
                "type": self.neighborhood.type.value,
                "range": self.neighborhood.range,
            },
            "birth": [_threshold_to_json(v) for v in self.birth],
            "survival": [_threshold_to_json(v) for v in self.survival],
            "steps": self.steps,
            "initial_density": self.initial_density,
            "seed": self.seed,
            "metrics_interval": self.metrics_interval,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ExperimentConfig:
        """Inverse of :meth:`to_dict`; missing keys fall back to defaults."""
        raw_neighborhood = payload.get("neighborhood", {})
        if isinstance(raw_neighborhood, str):
            neighborhood = NeighborhoodConfig(type=NeighborhoodType.parse(raw_neighborhood))
        elif isinstance(raw_neighborhood, Mapping):
            neighborhood = NeighborhoodConfig(
                type=NeighborhoodType.parse(raw_neighborhood.get("type", "moore")),
                range=raw_neighborhood.get("range", DEFAULT_RANGE),
            )
        else:
            raise ValueError("neighborhood must be a string or an object")
        return cls(
            dimensions=tuple(payload.get("dimensions", DEFAULT_DIMENSIONS)),
            neighborhood=neighborhood,
            birth=_thresholds_from_json(payload.get("birth", [3]), "birth"),
            survival=_thresholds_from_json(payload.get("survival", [2, 3]), "survival"),
            steps=int(payload.get("steps", DEFAULT_STEPS)),
            initial_density=float(payload.get("initial_density", DEFAULT_DENSITY)),
            seed=int(payload.get("seed", DEFAULT_SEED)),
            metrics_interval=int(payload.get("metrics_interval", DEFAULT_METRICS_INTERVAL)),
        )


@dataclass(frozen=True)
class SweepConfig:
    """One experiment repeated over ``n_seeds`` consecutive seeds."""

    experiment: ExperimentConfig = field(default_factory=ExperimentConfig)
    n_seeds: int = 1
    base_seed: int = DEFAULT_SEED
    out_dir: Path = Path("data")

    def __post_init__(self) -> None:
        if self.n_seeds < 1:
            raise ValueError("n_seeds must be >= 1")
        object.__setattr__(self, "out_dir", Path(self.out_dir))
        total_work_units = self.n_seeds * self.experiment.steps * self.experiment.size
        if total_work_units > MAX_SWEEP_WORK_UNITS:
            raise ValueError(
                "sweep workload exceeds safety threshold; reduce n_seeds/steps/dimensions"
            )

    def seeds(self) -> range:
        return range(self.base_seed, self.base_seed + self.n_seeds)

