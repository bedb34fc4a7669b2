"""Totalistic birth/survival rules.

A rule is a pair of neighbour-count sets. Dead cells with a count in
``birth`` come alive; live cells with a count in ``survival`` stay alive;
everything else is dead in the next generation. Thresholds may be declared
as absolute counts or as fractions of the maximum neighbour count, but a
single threshold list must use one form only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, Union

import numpy as np

from nd_automata.config.constants import ALIVE


@dataclass(frozen=True)
class RelativeThreshold:
    """Neighbour threshold expressed as a fraction of the maximum count."""

    fraction: float

    def __post_init__(self) -> None:
        if isinstance(self.fraction, bool) or not isinstance(self.fraction, (int, float)):
            raise ValueError(f"relative threshold must be a number, got {self.fraction!r}")
        if not 0.0 <= self.fraction <= 1.0:
            raise ValueError(f"relative threshold must be in [0.0, 1.0], got {self.fraction}")

    def resolve(self, max_neighbors: int) -> int:
        # Round half up: 0.5 resolves to the next count.
        return math.floor(self.fraction * max_neighbors + 0.5)


ThresholdValue = Union[int, RelativeThreshold, Mapping[str, float]]
ThresholdSpec = Sequence[ThresholdValue]


def _is_relative(value: object) -> bool:
    return isinstance(value, RelativeThreshold) or (
        isinstance(value, Mapping) and "relative" in value
    )


def _as_relative(value: ThresholdValue) -> RelativeThreshold:
    if isinstance(value, RelativeThreshold):
        return value
    return RelativeThreshold(value["relative"])  # type: ignore[index]


def normalize_thresholds(spec: ThresholdSpec, max_neighbors: int, label: str) -> frozenset[int]:
    """Resolve a uniform threshold list to absolute neighbour counts.

    Raises ``ValueError`` when the list mixes absolute and relative entries or
    when any resolved count falls outside ``[0, max_neighbors]``.
    """
    values = list(spec)
    if not values:
        return frozenset()

    relative_flags = [_is_relative(value) for value in values]
    if any(relative_flags) and not all(relative_flags):
        raise ValueError(f"{label} thresholds mix absolute and relative values")

    counts: list[int] = []
    if all(relative_flags):
        counts = [_as_relative(value).resolve(max_neighbors) for value in values]
    else:
        for value in values:
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{label} thresholds must be integers, got {value!r}")
            counts.append(int(value))

    for count in counts:
        if not 0 <= count <= max_neighbors:
            raise ValueError(
                f"{label} threshold {count} outside [0, {max_neighbors}]"
            )
    return frozenset(counts)


@dataclass(frozen=True)
class Rule:
    """Immutable birth/survival sets normalised against ``max_neighbors``."""

    birth: frozenset[int]
    survival: frozenset[int]
    max_neighbors: int

    def __post_init__(self) -> None:
        if self.max_neighbors < 0:
            raise ValueError("max_neighbors must be >= 0")
        for label, values in (("birth", self.birth), ("survival", self.survival)):
            out_of_range = sorted(v for v in values if not 0 <= v <= self.max_neighbors)
            if out_of_range:
                raise ValueError(
                    f"{label} thresholds {out_of_range} outside [0, {self.max_neighbors}]"
                )

    def should_be_alive(self, current_state: int, neighbor_count: int) -> bool:
        if current_state == ALIVE:
            return neighbor_count in self.survival
        return neighbor_count in self.birth

    def lookup_tables(self, max_count: int) -> tuple[np.ndarray, np.ndarray]:
        """Boolean (birth, survival) tables indexed by neighbour count 0..max_count."""
        birth = np.zeros(max_count + 1, dtype=bool)
        survival = np.zeros(max_count + 1, dtype=bool)
        for table, counts in ((birth, self.birth), (survival, self.survival)):
            for count in counts:
                if count <= max_count:
                    table[count] = True
        return birth, survival

    def notation(self) -> str:
        """Compact ``B3/S23``-style label (comma separated above 9)."""
        sep = "," if self.max_neighbors > 9 else ""
        birth = sep.join(str(c) for c in sorted(self.birth))
        survival = sep.join(str(c) for c in sorted(self.survival))
        return f"B{birth}/S{survival}"


def create_rule(birth: Iterable[int], survival: Iterable[int], max_neighbors: int) -> Rule:
    """Build a rule from absolute neighbour counts."""
    return Rule(
        birth=frozenset(int(c) for c in birth),
        survival=frozenset(int(c) for c in survival),
        max_neighbors=max_neighbors,
    )


def rule_from_thresholds(
    birth: ThresholdSpec, survival: ThresholdSpec, max_neighbors: int
) -> Rule:
    """Build a rule from absolute or relative threshold lists."""
    return Rule(
        birth=normalize_thresholds(birth, max_neighbors, "birth"),
        survival=normalize_thresholds(survival, max_neighbors, "survival"),
        max_neighbors=max_neighbors,
    )


def should_be_alive(rule: Rule, current_state: int, neighbor_count: int) -> bool:
    """Functional form of :meth:`Rule.should_be_alive`."""
    return rule.should_be_alive(current_state, neighbor_count)


def conway_rule() -> Rule:
    """Conway's Game of Life (B3/S23) on the 2-D Moore neighbourhood."""
    return create_rule([3], [2, 3], 8)
