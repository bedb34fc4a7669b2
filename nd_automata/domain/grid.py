"""N-dimensional toroidal grid backed by a flat uint8 buffer.

Coordinates map to flat offsets through precomputed row-major strides, and
every coordinate is wrapped modulo its axis before indexing, so there is no
boundary special-casing anywhere in the engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np

from nd_automata.config.constants import ALIVE, DEAD, MAX_CELL_VALUE

if TYPE_CHECKING:
    from nd_automata.domain.random import SeededRandom

Coordinate = tuple[int, ...]


def validate_dimensions(dimensions: Sequence[int]) -> tuple[int, ...]:
    """Return dimensions as a tuple of ints, raising on empty or non-positive axes."""
    dims = tuple(dimensions)
    if not dims:
        raise ValueError("dimensions must contain at least one axis")
    for axis, dim in enumerate(dims):
        if isinstance(dim, bool) or int(dim) != dim:
            raise ValueError(f"dimensions[{axis}] must be an integer, got {dim!r}")
        if dim < 1:
            raise ValueError(f"dimensions[{axis}] must be >= 1, got {dim}")
    return tuple(int(dim) for dim in dims)


def compute_strides(dimensions: Sequence[int]) -> tuple[int, ...]:
    """Row-major strides: stride[i] is the product of all dimensions after i."""
    strides = [0] * len(dimensions)
    stride = 1
    for axis in range(len(dimensions) - 1, -1, -1):
        strides[axis] = stride
        stride *= dimensions[axis]
    return tuple(strides)


class Grid:
    """Mutable N-dimensional cell state with toroidal topology."""

    __slots__ = ("dimensions", "strides", "size", "data")

    def __init__(self, dimensions: Sequence[int]) -> None:
        self.dimensions: tuple[int, ...] = validate_dimensions(dimensions)
        self.strides: tuple[int, ...] = compute_strides(self.dimensions)
        self.size: int = int(np.prod(self.dimensions, dtype=np.int64))
        self.data: np.ndarray = np.zeros(self.size, dtype=np.uint8)

    @classmethod
    def create(cls, dimensions: Sequence[int]) -> Grid:
        """Return a new all-dead grid."""
        return cls(dimensions)

    @classmethod
    def from_data(cls, dimensions: Sequence[int], data: Sequence[int] | bytes) -> Grid:
        """Rebuild a grid from a flat cell sequence, e.g. a snapshot payload."""
        grid = cls(dimensions)
        values = np.asarray(bytearray(data) if isinstance(data, bytes) else data)
        if values.shape != (grid.size,):
            raise ValueError(
                f"data length {values.size} does not match grid size {grid.size}"
            )
        if values.size and (values.min() < 0 or values.max() > MAX_CELL_VALUE):
            raise ValueError(f"data values must be in [0, {MAX_CELL_VALUE}]")
        grid.data[:] = values.astype(np.uint8)
        return grid

    @property
    def ndim(self) -> int:
        return len(self.dimensions)

    def _check_length(self, coord: Sequence[int]) -> None:
        if len(coord) != len(self.dimensions):
            raise ValueError(
                f"coordinate has {len(coord)} components, grid has {len(self.dimensions)} axes"
            )

    def index(self, coord: Sequence[int]) -> int:
        """Flat offset of an in-range coordinate (stride dot-product)."""
        self._check_length(coord)
        return sum(c * s for c, s in zip(coord, self.strides, strict=True))

    def wrap(self, coord: Sequence[int]) -> Coordinate:
        """Return a new coordinate with every component reduced into [0, dim).

        Negative components wrap to the far edge of their axis.
        """
        self._check_length(coord)
        return tuple(c % d for c, d in zip(coord, self.dimensions, strict=True))

    def coordinate(self, index: int) -> Coordinate:
        """Inverse of :meth:`index`: decompose a flat offset via the strides."""
        if not 0 <= index < self.size:
            raise ValueError(f"index must be in [0, {self.size}), got {index}")
        coord = []
        for stride in self.strides:
            component, index = divmod(index, stride)
            coord.append(component)
        return tuple(coord)

    def get(self, coord: Sequence[int]) -> int:
        """Cell value at a coordinate; out-of-range components wrap."""
        return int(self.data[self.index(self.wrap(coord))])

    def set(self, coord: Sequence[int], value: int) -> None:
        """Write a cell value at a coordinate; out-of-range components wrap."""
        if isinstance(value, bool):
            value = int(value)
        if not 0 <= value <= MAX_CELL_VALUE:
            raise ValueError(f"cell value must be in [0, {MAX_CELL_VALUE}], got {value}")
        self.data[self.index(self.wrap(coord))] = value

    def view(self) -> np.ndarray:
        """Shaped (non-copying) view of the flat buffer."""
        return self.data.reshape(self.dimensions)

    def clone(self) -> Grid:
        """Independent deep copy."""
        copy = Grid(self.dimensions)
        copy.data[:] = self.data
        return copy

    def count_population(self) -> int:
        """Number of non-dead cells."""
        return int(np.count_nonzero(self.data))

    def to_bytes(self) -> bytes:
        """Byte-for-byte copy of the flat buffer."""
        return self.data.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.dimensions == other.dimensions and bool(np.array_equal(self.data, other.data))

    def __repr__(self) -> str:
        dims = "x".join(str(d) for d in self.dimensions)
        return f"Grid({dims}, population={self.count_population()})"


def create_grid(dimensions: Sequence[int]) -> Grid:
    """Functional alias for :meth:`Grid.create`."""
    return Grid.create(dimensions)


def initialize_random(grid: Grid, density: float, rng: SeededRandom) -> None:
    """Fill the grid in flat-index order: cell is alive iff ``rng.next() < density``."""
    if not 0.0 <= density <= 1.0:
        raise ValueError(f"density must be in [0.0, 1.0], got {density}")
    for i in range(grid.size):
        grid.data[i] = ALIVE if rng.next() < density else DEAD


def hamming_distance(a: Grid, b: Grid) -> int:
    """Count of cells whose values differ between two equally shaped grids."""
    if a.dimensions != b.dimensions:
        raise ValueError(
            f"grid dimensions differ: {a.dimensions} vs {b.dimensions}"
        )
    return int(np.count_nonzero(a.data != b.data))
