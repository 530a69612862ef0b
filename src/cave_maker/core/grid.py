"""Fixed-size grid of wall/passage cells."""

from __future__ import annotations

from enum import Enum
import operator
from typing import Iterable, Iterator, NamedTuple, Tuple, Union

import numpy as np

from .errors import InvalidConfiguration, OutOfBounds


class CellState(Enum):
    """State of a single cell. The value mirrors the wall mask (``True`` = wall)."""

    WALL = True
    PASSAGE = False

    @property
    def is_wall(self) -> bool:
        return self.value

    @property
    def symbol(self) -> str:
        return "#" if self.value else "."


class Coordinate(NamedTuple):
    x: int
    y: int


CoordinateLike = Union[Coordinate, Tuple[int, int]]

ROW_SYMBOLS = {"#": True, ".": False}


def _dimension(name: str, value: int) -> int:
    if isinstance(value, bool):
        raise InvalidConfiguration(f"Grid {name} must be an integer, got {value!r}")
    try:
        size = operator.index(value)
    except TypeError as exc:
        raise InvalidConfiguration(f"Grid {name} must be an integer, got {value!r}") from exc
    if size <= 0:
        raise InvalidConfiguration(f"Grid {name} must be positive, got {size}")
    return size


class CaveGrid:
    """Owns the wall mask of a ``width x height`` cave.

    The mask is stored row-major with shape ``(height, width)`` so that
    ``mask[y, x]`` is the cell at ``Coordinate(x, y)``. Every other component
    reads and writes cells through this class.
    """

    __slots__ = ("_width", "_height", "_cells")

    def __init__(self, width: int, height: int) -> None:
        self._width = _dimension("width", width)
        self._height = _dimension("height", height)
        self._cells = np.ones((self._height, self._width), dtype=bool)

    @classmethod
    def from_mask(cls, mask: np.ndarray) -> "CaveGrid":
        array = np.asarray(mask, dtype=bool)
        if array.ndim != 2:
            raise InvalidConfiguration(f"Wall mask must be 2D, got {array.ndim} dimensions")
        height, width = array.shape
        grid = cls(width, height)
        grid.assign(array)
        return grid

    @classmethod
    def from_rows(cls, rows: Iterable[str]) -> "CaveGrid":
        """Build a grid from text rows, ``#`` for walls and ``.`` for passages."""
        lines = [row.strip() for row in rows]
        lines = [row for row in lines if row]
        if not lines:
            raise InvalidConfiguration("At least one row is required")
        width = len(lines[0])
        if any(len(row) != width for row in lines):
            raise InvalidConfiguration("All rows must have the same length")
        try:
            mask = np.array([[ROW_SYMBOLS[ch] for ch in row] for row in lines], dtype=bool)
        except KeyError as exc:
            raise InvalidConfiguration(f"Unknown cell symbol {exc.args[0]!r}") from exc
        return cls.from_mask(mask)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> Tuple[int, int]:
        return self._height, self._width

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise OutOfBounds(x, y, self._width, self._height)

    def get(self, x: int, y: int) -> CellState:
        self._check(x, y)
        return CellState(bool(self._cells[y, x]))

    def set(self, x: int, y: int, state: CellState) -> None:
        self._check(x, y)
        self._cells[y, x] = CellState(state).value

    def is_wall(self, x: int, y: int) -> bool:
        self._check(x, y)
        return bool(self._cells[y, x])

    def is_border(self, x: int, y: int) -> bool:
        self._check(x, y)
        return x == 0 or y == 0 or x == self._width - 1 or y == self._height - 1

    def __getitem__(self, coord: CoordinateLike) -> CellState:
        x, y = coord
        return self.get(x, y)

    def __setitem__(self, coord: CoordinateLike, state: CellState) -> None:
        x, y = coord
        self.set(x, y, state)

    def fill(self, state: CellState) -> None:
        self._cells.fill(CellState(state).value)

    def fill_walls(self) -> None:
        self.fill(CellState.WALL)

    def snapshot(self) -> np.ndarray:
        """Return a read-only copy of the wall mask."""
        copy = self._cells.copy()
        copy.setflags(write=False)
        return copy

    def assign(self, mask: np.ndarray) -> None:
        """Overwrite every cell from a wall mask of the grid's shape."""
        array = np.asarray(mask, dtype=bool)
        if array.shape != self.shape:
            raise InvalidConfiguration(f"Wall mask shape {array.shape} does not match grid shape {self.shape}")
        self._cells[...] = array

    def passage_count(self) -> int:
        return int(self._cells.size - np.count_nonzero(self._cells))

    def coordinates(self) -> Iterator[Coordinate]:
        """Yield every coordinate, ``x`` outer and ``y`` inner."""
        for x in range(self._width):
            for y in range(self._height):
                yield Coordinate(x, y)

    def to_rows(self) -> list[str]:
        return ["".join("#" if cell else "." for cell in row) for row in self._cells]

    def copy(self) -> "CaveGrid":
        return CaveGrid.from_mask(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CaveGrid):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._cells, other._cells))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CaveGrid(width={self._width}, height={self._height}, passages={self.passage_count()})"


__all__ = ["CaveGrid", "CellState", "Coordinate", "CoordinateLike"]
