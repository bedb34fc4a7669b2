"""Tests for per-step metric computation."""

from __future__ import annotations

import math

import pytest

from nd_automata.domain.grid import create_grid
from nd_automata.simulation.step import (
    EnhancedMetrics,
    Metrics,
    compute_enhanced_metrics,
    compute_metrics,
    mean_and_pvariance,
    spatial_entropy,
    state_fingerprint,
)


class TestSpatialEntropy:
    def test_zero_for_empty_and_full(self) -> None:
        assert spatial_entropy(0, 100) == 0.0
        assert spatial_entropy(100, 100) == 0.0

    def test_one_bit_at_half(self) -> None:
        assert spatial_entropy(50, 100) == pytest.approx(1.0)

    def test_symmetric(self) -> None:
        assert spatial_entropy(10, 100) == pytest.approx(spatial_entropy(90, 100))

    def test_quarter(self) -> None:
        expected = -(0.25 * math.log2(0.25) + 0.75 * math.log2(0.75))
        assert spatial_entropy(25, 100) == pytest.approx(expected)


class TestStateFingerprint:
    def test_known_fnv1a_vector(self) -> None:
        # FNV-1a 32-bit of the single byte 0x61 ("a").
        grid = create_grid((1,))
        grid.set((0,), 0x61)
        assert state_fingerprint(grid) == 0xE40C292C

    def test_equal_grids_equal_hashes(self) -> None:
        a = create_grid((6, 6))
        b = create_grid((6, 6))
        a.set((2, 3), 1)
        b.set((2, 3), 1)
        assert state_fingerprint(a) == state_fingerprint(b)

    def test_single_flip_changes_hash(self) -> None:
        a = create_grid((6, 6))
        b = a.clone()
        b.set((5, 5), 1)
        assert state_fingerprint(a) != state_fingerprint(b)

    def test_fits_in_32_bits(self) -> None:
        grid = create_grid((10, 10))
        grid.set((0, 0), 1)
        assert 0 <= state_fingerprint(grid) < 2**32


class TestComputeMetrics:
    def test_growth(self) -> None:
        grid = create_grid((4, 4))
        for x in range(4):
            grid.set((x, 0), 1)
        metrics = compute_metrics(grid, previous_population=1, step=3)
        assert metrics == Metrics(
            population=4, density=0.25, births=3, deaths=0, delta=3, step=3
        )

    def test_decline(self) -> None:
        grid = create_grid((4, 4))
        grid.set((0, 0), 1)
        metrics = compute_metrics(grid, previous_population=5, step=1)
        assert (metrics.births, metrics.deaths, metrics.delta) == (0, 4, -4)

    def test_conservation(self) -> None:
        grid = create_grid((3, 3))
        grid.set((1, 1), 1)
        for previous in range(10):
            m = compute_metrics(grid, previous, 1)
            assert m.births - m.deaths == m.delta == m.population - previous

    def test_enhanced_extends_plain(self) -> None:
        grid = create_grid((2, 2))
        grid.set((0, 0), 1)
        grid.set((1, 1), 1)
        enhanced = compute_enhanced_metrics(grid, previous_population=2, step=4)
        assert isinstance(enhanced, EnhancedMetrics)
        assert enhanced.entropy == pytest.approx(1.0)
        assert enhanced.state_hash == state_fingerprint(grid)
        assert enhanced.to_dict()["step"] == 4


def test_mean_and_pvariance() -> None:
    assert mean_and_pvariance([]) == (0.0, 0.0)
    mean, variance = mean_and_pvariance([1.0, 2.0, 3.0, 4.0])
    assert mean == pytest.approx(2.5)
    assert variance == pytest.approx(1.25)
