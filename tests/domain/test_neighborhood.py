"""Tests for neighbourhood offset generation."""

from __future__ import annotations

import pytest

from nd_automata.domain.neighborhood import (
    NeighborhoodType,
    generate_neighborhood,
    max_neighbor_count,
)


@pytest.mark.parametrize(
    ("dims", "kind", "radius", "expected"),
    [
        ((10,), NeighborhoodType.MOORE, 1, 2),
        ((10, 10), NeighborhoodType.MOORE, 1, 8),
        ((5, 5, 5), NeighborhoodType.MOORE, 1, 26),
        ((4, 4, 4, 4), NeighborhoodType.MOORE, 1, 80),
        ((10, 10), NeighborhoodType.MOORE, 2, 24),
        ((10, 10), NeighborhoodType.VON_NEUMANN, 1, 4),
        ((5, 5, 5), NeighborhoodType.VON_NEUMANN, 1, 6),
        ((10, 10), NeighborhoodType.VON_NEUMANN, 2, 12),
        ((5, 5, 5), NeighborhoodType.VON_NEUMANN, 2, 24),
    ],
)
def test_sizes_match_max_neighbor_count(
    dims: tuple[int, ...], kind: NeighborhoodType, radius: int, expected: int
) -> None:
    offsets = generate_neighborhood(dims, kind, radius)
    assert len(offsets) == expected
    assert max_neighbor_count(dims, kind, radius) == expected


def test_excludes_origin_and_duplicates() -> None:
    offsets = generate_neighborhood((5, 5, 5), NeighborhoodType.MOORE, 2)
    assert (0, 0, 0) not in offsets
    assert len(set(offsets)) == len(offsets)


def test_offsets_within_range() -> None:
    for offset in generate_neighborhood((9, 9), NeighborhoodType.VON_NEUMANN, 3):
        assert sum(abs(v) for v in offset) <= 3
    for offset in generate_neighborhood((9, 9), NeighborhoodType.MOORE, 3):
        assert max(abs(v) for v in offset) <= 3


def test_order_is_stable() -> None:
    offsets = generate_neighborhood((10, 10))
    assert offsets[0] == (-1, -1)
    assert offsets[-1] == (1, 1)
    assert offsets == generate_neighborhood((10, 10))


def test_accepts_string_type() -> None:
    assert generate_neighborhood((4, 4), "von-neumann") == generate_neighborhood(
        (4, 4), NeighborhoodType.VON_NEUMANN
    )


def test_rejects_non_positive_range() -> None:
    with pytest.raises(ValueError, match="range"):
        generate_neighborhood((4, 4), NeighborhoodType.MOORE, 0)


def test_rejects_unknown_type() -> None:
    with pytest.raises(ValueError, match="neighborhood type"):
        max_neighbor_count((4, 4), "hex")
