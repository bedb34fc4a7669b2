"""Experiments layer: single-run orchestration and the CLI."""

from nd_automata.experiments.experiment import ExperimentResult, run_experiment

__all__ = [
    "ExperimentResult",
    "run_experiment",
]
