"""Domain layer: grid, neighbourhoods, rules, seeded random and slicing."""

from nd_automata.domain.grid import Grid, create_grid, hamming_distance, initialize_random
from nd_automata.domain.neighborhood import (
    NeighborhoodType,
    generate_neighborhood,
    max_neighbor_count,
)
from nd_automata.domain.random import SeededRandom, create_random
from nd_automata.domain.rules import (
    RelativeThreshold,
    Rule,
    conway_rule,
    create_rule,
    rule_from_thresholds,
    should_be_alive,
)
from nd_automata.domain.slicer import extract_slice, extract_slices

__all__ = [
    "Grid",
    "NeighborhoodType",
    "RelativeThreshold",
    "Rule",
    "SeededRandom",
    "conway_rule",
    "create_grid",
    "create_random",
    "create_rule",
    "extract_slice",
    "extract_slices",
    "generate_neighborhood",
    "hamming_distance",
    "initialize_random",
    "max_neighbor_count",
    "rule_from_thresholds",
    "should_be_alive",
]
