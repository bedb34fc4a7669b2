"""Neighbourhood topology generators.

Offsets are computed once per (dimensions, topology, range) and reused for
every cell and every step. Enumeration order is stable: axis 0 varies
slowest, each axis runs from ``-range`` to ``+range``.
"""

from __future__ import annotations

import itertools
from enum import Enum
from typing import Iterator, Sequence

from nd_automata.domain.grid import validate_dimensions

Offset = tuple[int, ...]


class NeighborhoodType(Enum):
    """Distance metric that decides which offsets are neighbours."""

    MOORE = "moore"
    VON_NEUMANN = "von_neumann"

    @classmethod
    def parse(cls, raw: NeighborhoodType | str) -> NeighborhoodType:
        """Accept enum members or their string values (``von-neumann`` too)."""
        if isinstance(raw, cls):
            return raw
        normalized = str(raw).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"neighborhood type must be one of {valid}, got {raw!r}") from exc


def _validate_range(neighborhood_range: int) -> int:
    if isinstance(neighborhood_range, bool) or int(neighborhood_range) != neighborhood_range:
        raise ValueError(f"neighborhood range must be an integer, got {neighborhood_range!r}")
    if neighborhood_range < 1:
        raise ValueError(f"neighborhood range must be >= 1, got {neighborhood_range}")
    return int(neighborhood_range)


def is_neighbor_offset(
    offset: Sequence[int], neighborhood_type: NeighborhoodType, neighborhood_range: int
) -> bool:
    """True for non-zero offsets within range under the topology's norm."""
    if not any(offset):
        return False
    if neighborhood_type is NeighborhoodType.MOORE:
        return max(abs(v) for v in offset) <= neighborhood_range
    return sum(abs(v) for v in offset) <= neighborhood_range


def _candidate_offsets(ndim: int, neighborhood_range: int) -> Iterator[Offset]:
    span = range(-neighborhood_range, neighborhood_range + 1)
    return itertools.product(span, repeat=ndim)


def generate_neighborhood(
    dimensions: Sequence[int],
    neighborhood_type: NeighborhoodType | str = NeighborhoodType.MOORE,
    neighborhood_range: int = 1,
) -> tuple[Offset, ...]:
    """Return every offset in ``[-range, range]^N`` accepted by the topology.

    The zero vector is never included. Identical inputs always produce the
    same offsets in the same order.
    """
    dims = validate_dimensions(dimensions)
    kind = NeighborhoodType.parse(neighborhood_type)
    radius = _validate_range(neighborhood_range)
    return tuple(
        offset
        for offset in _candidate_offsets(len(dims), radius)
        if is_neighbor_offset(offset, kind, radius)
    )


def max_neighbor_count(
    dimensions: Sequence[int],
    neighborhood_type: NeighborhoodType | str = NeighborhoodType.MOORE,
    neighborhood_range: int = 1,
) -> int:
    """Largest possible neighbour count for any cell.

    Moore: ``(2r + 1)^N - 1``. Von Neumann with ``r == 1``: ``2N``. Other
    von Neumann ranges are counted by enumeration.
    """
    dims = validate_dimensions(dimensions)
    kind = NeighborhoodType.parse(neighborhood_type)
    radius = _validate_range(neighborhood_range)
    ndim = len(dims)
    if kind is NeighborhoodType.MOORE:
        return (2 * radius + 1) ** ndim - 1
    if radius == 1:
        return 2 * ndim
    return sum(
        1 for offset in _candidate_offsets(ndim, radius) if is_neighbor_offset(offset, kind, radius)
    )
