"""Simulation layer: per-step metrics, the double-buffered stepper and snapshots.

The batch engine lives in ``nd_automata.simulation.engine``; it depends on
the experiments layer and is not re-exported here.
"""

from nd_automata.simulation.step import (
    EnhancedMetrics,
    Metrics,
    compute_enhanced_metrics,
    compute_metrics,
    mean_and_pvariance,
    spatial_entropy,
    state_fingerprint,
)
from nd_automata.simulation.stepper import EvolutionResult, Stepper, evolve, evolve_enhanced

__all__ = [
    "EnhancedMetrics",
    "EvolutionResult",
    "Metrics",
    "Stepper",
    "compute_enhanced_metrics",
    "compute_metrics",
    "evolve",
    "evolve_enhanced",
    "mean_and_pvariance",
    "spatial_entropy",
    "state_fingerprint",
]
