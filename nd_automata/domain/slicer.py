"""2-D cross-sections of N-dimensional grids."""

from __future__ import annotations

from typing import Mapping

import numpy as np

from nd_automata.domain.grid import Grid


def _check_axes(grid: Grid, axis1: int, axis2: int) -> None:
    for name, axis in (("axis1", axis1), ("axis2", axis2)):
        if not 0 <= axis < grid.ndim:
            raise ValueError(f"{name} must be in [0, {grid.ndim}), got {axis}")
    if axis1 == axis2:
        raise ValueError("axis1 and axis2 must differ")


def extract_slice(
    grid: Grid,
    axis1: int,
    axis2: int,
    fixed_coords: Mapping[int, int] | None = None,
) -> np.ndarray:
    """Return the ``(dims[axis1], dims[axis2])`` plane with other axes fixed.

    Axes missing from ``fixed_coords`` are held at 0; fixed values wrap.
    """
    _check_axes(grid, axis1, axis2)
    fixed = dict(fixed_coords or {})
    index: list[int | slice] = []
    for axis, dim in enumerate(grid.dimensions):
        if axis in (axis1, axis2):
            index.append(slice(None))
        else:
            index.append(fixed.get(axis, 0) % dim)
    plane = grid.view()[tuple(index)]
    if axis1 > axis2:
        plane = plane.T
    return plane.copy()


def extract_slices(
    grid: Grid,
    axis1: int,
    axis2: int,
    slice_axis: int,
    fixed_coords: Mapping[int, int] | None = None,
) -> list[np.ndarray]:
    """Every plane over (axis1, axis2) as ``slice_axis`` runs through its range."""
    if slice_axis in (axis1, axis2) or not 0 <= slice_axis < grid.ndim:
        raise ValueError(f"slice_axis must be a third axis in [0, {grid.ndim})")
    base = dict(fixed_coords or {})
    return [
        extract_slice(grid, axis1, axis2, {**base, slice_axis: i})
        for i in range(grid.dimensions[slice_axis])
    ]
