"""Per-step metric records and the statistics computed from a grid buffer."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any

from nd_automata.config.constants import FNV_OFFSET_BASIS, FNV_PRIME, UINT32_MASK
from nd_automata.domain.grid import Grid


@dataclass(frozen=True)
class Metrics:
    """Population statistics sampled after one generation."""

    population: int
    density: float
    births: int
    deaths: int
    delta: int
    step: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EnhancedMetrics(Metrics):
    """Metrics plus alive-fraction entropy and a 32-bit state fingerprint."""

    entropy: float
    state_hash: int


def spatial_entropy(population: int, size: int) -> float:
    """Binary Shannon entropy of the global alive fraction, in bits.

    Depends only on ``population / size``; the spatial arrangement is not
    consulted. Returns 0.0 for empty and full grids.
    """
    if size < 1 or population <= 0 or population >= size:
        return 0.0
    p = population / size
    q = 1.0 - p
    return -p * math.log2(p) - q * math.log2(q)


def state_fingerprint(grid: Grid) -> int:
    """32-bit FNV-1a hash over the flat buffer, in index order.

    Distinct grids can collide; treat equality as candidate equality only.
    """
    acc = FNV_OFFSET_BASIS
    for value in grid.data.tobytes():
        acc ^= value
        acc = (acc * FNV_PRIME) & UINT32_MASK
    return acc


def mean_and_pvariance(values: list[float]) -> tuple[float, float]:
    """Return mean and population variance for non-empty values."""
    if not values:
        return 0.0, 0.0
    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    return mean, variance


def compute_metrics(grid: Grid, previous_population: int, step: int) -> Metrics:
    """Metrics for ``grid`` relative to the population before the step."""
    population = grid.count_population()
    delta = population - previous_population
    return Metrics(
        population=population,
        density=population / grid.size,
        births=max(0, delta),
        deaths=max(0, -delta),
        delta=delta,
        step=step,
    )


def compute_enhanced_metrics(grid: Grid, previous_population: int, step: int) -> EnhancedMetrics:
    """:func:`compute_metrics` plus entropy and fingerprint."""
    base = compute_metrics(grid, previous_population, step)
    return EnhancedMetrics(
        **asdict(base),
        entropy=spatial_entropy(base.population, grid.size),
        state_hash=state_fingerprint(grid),
    )
