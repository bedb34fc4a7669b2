"""Temporal metrics: fingerprint cycles and population/entropy trends."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from nd_automata.config.constants import (
    CYCLE_WINDOW_FRACTION,
    CYCLE_WINDOW_MIN,
    ENTROPY_DEADBAND,
    ENTROPY_DECREASING_RATIO,
    ENTROPY_INCREASING_RATIO,
    ENTROPY_STDDEV_THRESHOLD,
    POPULATION_COV_THRESHOLD,
    POPULATION_TREND_STRENGTH,
    TREND_WINDOW_START,
)
from nd_automata.simulation.step import mean_and_pvariance


class PopulationTrend(Enum):
    GROWING = "growing"
    SHRINKING = "shrinking"
    STABLE = "stable"
    OSCILLATING = "oscillating"


class EntropyTrend(Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    FLUCTUATING = "fluctuating"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of a fingerprint cycle search."""

    detected: bool
    period: int | None = None
    first_occurrence: int | None = None


NO_CYCLE = CycleResult(detected=False)


def trailing_window(values: Sequence[float], start_fraction: float = TREND_WINDOW_START) -> list[float]:
    """Tail of a series starting at index ``floor(len * start_fraction)``."""
    start = math.floor(len(values) * start_fraction)
    return list(values[start:])


def cycle_window_size(history_length: int) -> int:
    """Samples searched for cycles: half the history, but at least 10."""
    return max(CYCLE_WINDOW_MIN, math.floor(history_length * CYCLE_WINDOW_FRACTION))


def verify_cycle(hashes: Sequence[int], start: int, period: int) -> bool:
    """Check that ``hashes[start:start+period]`` repeats immediately after itself.

    When two full periods do not fit in the history the candidate is accepted
    unverified.
    """
    if start + 2 * period > len(hashes):
        return True
    return all(hashes[start + i] == hashes[start + period + i] for i in range(period))


def detect_cycle(hashes: Sequence[int], window: int | None = None) -> CycleResult:
    """Find the first verified repeat among the last ``window`` fingerprints.

    Scans left to right remembering where each fingerprint first appeared; a
    repeat at ``i`` of a value first seen at ``j`` proposes period ``i - j``.
    """
    search = len(hashes) if window is None else window
    start = max(0, len(hashes) - search)
    seen: dict[int, int] = {}
    for i in range(start, len(hashes)):
        value = hashes[i]
        if value in seen:
            first = seen[value]
            period = i - first
            if period > 0 and verify_cycle(hashes, first, period):
                return CycleResult(detected=True, period=period, first_occurrence=first)
        else:
            seen[value] = i
    return NO_CYCLE


def population_trend(populations: Sequence[float]) -> PopulationTrend:
    """Classify the final 30% of a population series."""
    if len(populations) < 2:
        return PopulationTrend.STABLE
    window = trailing_window(populations)
    if len(window) < 2:
        return PopulationTrend.STABLE

    mean, variance = mean_and_pvariance(window)
    cov = math.sqrt(variance) / mean if mean > 0 else 0.0

    increasing = sum(1 for prev, curr in zip(window, window[1:]) if curr > prev)
    decreasing = sum(1 for prev, curr in zip(window, window[1:]) if curr < prev)
    changes = increasing + decreasing
    strength = abs(increasing - decreasing) / changes if changes else 0.0

    if cov > POPULATION_COV_THRESHOLD:
        return PopulationTrend.OSCILLATING
    if strength > POPULATION_TREND_STRENGTH:
        return PopulationTrend.GROWING if increasing > decreasing else PopulationTrend.SHRINKING
    return PopulationTrend.STABLE


def entropy_trend(entropies: Sequence[float]) -> EntropyTrend:
    """Classify the final 30% of an entropy series."""
    if len(entropies) < 2:
        return EntropyTrend.STABLE
    window = trailing_window(entropies)
    if len(window) < 2:
        return EntropyTrend.STABLE

    _, variance = mean_and_pvariance(window)
    if math.sqrt(variance) > ENTROPY_STDDEV_THRESHOLD:
        return EntropyTrend.FLUCTUATING

    increasing = 0
    decreasing = 0
    for prev, curr in zip(window, window[1:]):
        if curr > prev + ENTROPY_DEADBAND:
            increasing += 1
        elif curr < prev - ENTROPY_DEADBAND:
            decreasing += 1
    changes = increasing + decreasing
    if changes == 0:
        return EntropyTrend.STABLE
    ratio = increasing / changes
    if ratio > ENTROPY_INCREASING_RATIO:
        return EntropyTrend.INCREASING
    if ratio < ENTROPY_DECREASING_RATIO:
        return EntropyTrend.DECREASING
    return EntropyTrend.STABLE
