"""Single-run experiment orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from nd_automata.analysis.classifier import ClassificationResult, classify
from nd_automata.config.types import ExperimentConfig
from nd_automata.domain.grid import Grid, initialize_random
from nd_automata.domain.neighborhood import generate_neighborhood, max_neighbor_count
from nd_automata.domain.random import SeededRandom
from nd_automata.domain.rules import Rule, rule_from_thresholds
from nd_automata.simulation.step import EnhancedMetrics
from nd_automata.simulation.stepper import evolve_enhanced


@dataclass(frozen=True)
class ExperimentResult:
    """Classification plus the artifacts of one run."""

    config: ExperimentConfig
    rule: Rule
    classification: ClassificationResult
    initial_population: int
    final_population: int
    final_grid: Grid
    metrics_history: list[EnhancedMetrics] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        """JSON-ready digest without the grid or per-step history."""
        return {
            "config": self.config.to_dict(),
            "rule": self.rule.notation(),
            "max_neighbors": self.rule.max_neighbors,
            "initial_population": self.initial_population,
            "final_population": self.final_population,
            "samples": len(self.metrics_history),
            "classification": self.classification.to_dict(),
        }


def build_rule(config: ExperimentConfig) -> Rule:
    """Resolve the config's thresholds against its neighbourhood size."""
    max_neighbors = max_neighbor_count(
        config.dimensions, config.neighborhood.type, config.neighborhood.range
    )
    return rule_from_thresholds(list(config.birth), list(config.survival), max_neighbors)


def seed_grid(config: ExperimentConfig) -> Grid:
    """Fresh grid filled from ``SeededRandom(config.seed)`` at the initial density."""
    grid = Grid.create(config.dimensions)
    initialize_random(grid, config.initial_density, SeededRandom(config.seed))
    return grid


def run_experiment(config: ExperimentConfig) -> ExperimentResult:
    """Seed a grid, evolve it with enhanced metrics and classify the history."""
    grid = seed_grid(config)
    neighborhood = generate_neighborhood(
        config.dimensions, config.neighborhood.type, config.neighborhood.range
    )
    rule = build_rule(config)
    evolution = evolve_enhanced(
        grid,
        rule,
        neighborhood,
        steps=config.steps,
        metrics_interval=config.metrics_interval,
    )
    history = [m for m in evolution.metrics_history if isinstance(m, EnhancedMetrics)]
    return ExperimentResult(
        config=config,
        rule=rule,
        classification=classify(history),
        initial_population=grid.count_population(),
        final_population=evolution.final_grid.count_population(),
        final_grid=evolution.final_grid,
        metrics_history=history,
    )
