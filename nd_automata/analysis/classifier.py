"""Multi-signal outcome classification of a metrics history.

The decision procedure is an ordered list of checks; the first one that
matches decides the result, so the order below is part of the behaviour:

1. extinct            final population is 0 (or no history at all)
2. homogeneous        final entropy is 0 with live cells       -> class1
3. fingerprint cycle  period 1 -> class2_stable, else class2_periodic
4. chaotic            entropy variance > 0.02 and fluctuating  -> class3
5. explosive          growing population, late/early mean > 1.5
6. edge of chaos      stable entropy in (0.3, 0.8), >= 50 samples -> class4
7. default            stable / class2_stable
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from nd_automata.config.constants import (
    CHAOS_ENTROPY_VARIANCE,
    CONFIDENCE_CHAOTIC,
    CONFIDENCE_DEFAULT,
    CONFIDENCE_EDGE_OF_CHAOS,
    CONFIDENCE_EXPLOSIVE,
    CONFIDENCE_EXTINCT,
    CONFIDENCE_FIXED_POINT,
    CONFIDENCE_HOMOGENEOUS,
    CONFIDENCE_PERIODIC,
    EARLY_WINDOW_END,
    EDGE_OF_CHAOS_ENTROPY_HIGH,
    EDGE_OF_CHAOS_ENTROPY_LOW,
    EDGE_OF_CHAOS_MIN_HISTORY,
    EXPLOSIVE_GROWTH_RATIO,
    LATE_WINDOW_START,
)
from nd_automata.metrics.temporal import (
    NO_CYCLE,
    EntropyTrend,
    PopulationTrend,
    cycle_window_size,
    detect_cycle,
    entropy_trend,
    population_trend,
)
from nd_automata.simulation.step import EnhancedMetrics, Metrics, mean_and_pvariance


class Outcome(Enum):
    """Coarse behaviour of a run."""

    EXTINCT = "extinct"
    EXPLOSIVE = "explosive"
    STABLE = "stable"
    OSCILLATING = "oscillating"


class WolframClass(Enum):
    """Wolfram-style qualitative class (plus extinction)."""

    CLASS1 = "class1"
    CLASS2_STABLE = "class2_stable"
    CLASS2_PERIODIC = "class2_periodic"
    CLASS3 = "class3"
    CLASS4 = "class4"
    EXTINCT = "extinct"


@dataclass(frozen=True)
class ClassificationDetails:
    cycle_detected: bool
    cycle_period: int | None
    entropy_trend: EntropyTrend
    population_trend: PopulationTrend


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome, Wolfram class, confidence in [0, 1] and the reasoning that led there."""

    outcome: Outcome
    wolfram_class: WolframClass
    confidence: float
    details: ClassificationDetails
    trace: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "wolfram_class": self.wolfram_class.value,
            "confidence": self.confidence,
            "details": {
                "cycle_detected": self.details.cycle_detected,
                "cycle_period": self.details.cycle_period,
                "entropy_trend": self.details.entropy_trend.value,
                "population_trend": self.details.population_trend.value,
            },
            "trace": list(self.trace),
        }


_EMPTY_DETAILS = ClassificationDetails(
    cycle_detected=False,
    cycle_period=None,
    entropy_trend=EntropyTrend.STABLE,
    population_trend=PopulationTrend.STABLE,
)


def _growth_ratio(populations: Sequence[int]) -> float | None:
    """Late/early mean population ratio, or None when the early mean is zero."""
    n = len(populations)
    early = populations[: max(1, math.floor(n * EARLY_WINDOW_END))]
    late = populations[math.floor(n * LATE_WINDOW_START) :]
    early_mean = sum(early) / len(early)
    late_mean = sum(late) / len(late)
    if early_mean <= 0:
        return None
    return late_mean / early_mean


def classify(history: Sequence[EnhancedMetrics]) -> ClassificationResult:
    """Classify a run from its full enhanced metrics history."""
    if not history:
        return ClassificationResult(
            outcome=Outcome.EXTINCT,
            wolfram_class=WolframClass.EXTINCT,
            confidence=CONFIDENCE_EXTINCT,
            details=_EMPTY_DETAILS,
            trace=("Metrics history is empty", "Classification: extinct"),
        )

    final = history[-1]
    populations = [m.population for m in history]
    entropies = [m.entropy for m in history]
    hashes = [m.state_hash for m in history]

    pop_trend = population_trend(populations)
    ent_trend = entropy_trend(entropies)
    window = cycle_window_size(len(history))
    cycle = detect_cycle(hashes, window)
    details = ClassificationDetails(
        cycle_detected=cycle.detected,
        cycle_period=cycle.period,
        entropy_trend=ent_trend,
        population_trend=pop_trend,
    )
    trends = (
        f"Population trend: {pop_trend.value}",
        f"Entropy trend: {ent_trend.value}",
    )

    def result(
        outcome: Outcome, wolfram_class: WolframClass, confidence: float, *reasons: str
    ) -> ClassificationResult:
        label = f"Classification: {outcome.value} ({wolfram_class.value})"
        return ClassificationResult(
            outcome=outcome,
            wolfram_class=wolfram_class,
            confidence=confidence,
            details=details,
            trace=(*reasons, label),
        )

    if final.population == 0:
        return result(
            Outcome.EXTINCT,
            WolframClass.EXTINCT,
            CONFIDENCE_EXTINCT,
            f"Final population is 0 at step {final.step}",
        )

    if final.entropy == 0:
        return result(
            Outcome.STABLE,
            WolframClass.CLASS1,
            CONFIDENCE_HOMOGENEOUS,
            "Final entropy is 0 with live cells: every cell is in the same state",
        )

    if cycle.detected and cycle.period is not None:
        found = f"Fingerprint cycle of period {cycle.period} in the last {window} samples"
        if cycle.period == 1:
            return result(
                Outcome.STABLE,
                WolframClass.CLASS2_STABLE,
                CONFIDENCE_FIXED_POINT,
                found,
                "Period 1 is a fixed point",
            )
        return result(
            Outcome.OSCILLATING,
            WolframClass.CLASS2_PERIODIC,
            CONFIDENCE_PERIODIC,
            found,
            "Period > 1 is a periodic oscillation",
        )

    entropy_mean, entropy_variance = mean_and_pvariance(entropies)
    no_cycle = f"No fingerprint cycle in the last {window} samples"

    if entropy_variance > CHAOS_ENTROPY_VARIANCE and ent_trend is EntropyTrend.FLUCTUATING:
        # Chaos reads as oscillation at the population level.
        return result(
            Outcome.OSCILLATING,
            WolframClass.CLASS3,
            CONFIDENCE_CHAOTIC,
            no_cycle,
            f"Entropy variance {entropy_variance:.4f} > {CHAOS_ENTROPY_VARIANCE} and fluctuating",
        )

    if pop_trend is PopulationTrend.GROWING:
        ratio = _growth_ratio(populations)
        if ratio is not None and ratio > EXPLOSIVE_GROWTH_RATIO:
            return result(
                Outcome.EXPLOSIVE,
                WolframClass.CLASS3,
                CONFIDENCE_EXPLOSIVE,
                no_cycle,
                trends[0],
                f"Late/early mean population ratio {ratio:.2f} > {EXPLOSIVE_GROWTH_RATIO}",
            )

    if (
        ent_trend is EntropyTrend.STABLE
        and EDGE_OF_CHAOS_ENTROPY_LOW < entropy_mean < EDGE_OF_CHAOS_ENTROPY_HIGH
        and not cycle.detected
        and len(history) >= EDGE_OF_CHAOS_MIN_HISTORY
    ):
        return result(
            Outcome.STABLE,
            WolframClass.CLASS4,
            CONFIDENCE_EDGE_OF_CHAOS,
            no_cycle,
            f"Stable entropy with mean {entropy_mean:.3f} over {len(history)} samples",
            "Edge-of-chaos signature (low confidence)",
        )

    return result(
        Outcome.STABLE,
        WolframClass.CLASS2_STABLE,
        CONFIDENCE_DEFAULT,
        no_cycle,
        *trends,
    )


def classify_basic(history: Sequence[Metrics]) -> Outcome:
    """Population-only outcome for histories without entropy or fingerprints."""
    if not history:
        return Outcome.EXTINCT
    if history[-1].population == 0:
        return Outcome.EXTINCT

    window = history[math.floor(len(history) * 0.7) :]
    if len(window) >= 3:
        seen: dict[int, int] = {}
        for i, metrics in enumerate(window):
            if metrics.population in seen:
                period = i - seen[metrics.population]
                if 0 < period < len(window) / 2:
                    return Outcome.OSCILLATING
            seen[metrics.population] = i

    if len(history) >= 10:
        early = history[: math.floor(len(history) * 0.5)]
        late = history[math.floor(len(history) * 0.8) :]
        early_mean = sum(m.population for m in early) / len(early)
        late_mean = sum(m.population for m in late) / len(late)
        if late_mean > early_mean * 1.2:
            return Outcome.EXPLOSIVE

    return Outcome.STABLE


__all__ = [
    "NO_CYCLE",
    "ClassificationDetails",
    "ClassificationResult",
    "Outcome",
    "WolframClass",
    "classify",
    "classify_basic",
]
