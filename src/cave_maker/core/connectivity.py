"""Cavern discovery and culling via 4-connected flood fill."""

from __future__ import annotations

from collections import deque
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .errors import InvalidConfiguration, OutOfBounds
from .grid import CaveGrid, Coordinate, CoordinateLike

# up, left, right, down
ORTHOGONAL_OFFSETS: Tuple[Tuple[int, int], ...] = ((0, -1), (-1, 0), (1, 0), (0, 1))


class Cavern:
    """Immutable, non-empty set of passage coordinates kept in discovery order."""

    __slots__ = ("_cells", "_members")

    def __init__(self, cells: Iterable[CoordinateLike]) -> None:
        self._cells = tuple(Coordinate(*cell) for cell in cells)
        if not self._cells:
            raise InvalidConfiguration("A cavern must contain at least one cell")
        self._members = frozenset(self._cells)

    @property
    def cells(self) -> Tuple[Coordinate, ...]:
        return self._cells

    @property
    def size(self) -> int:
        return len(self._members)

    @property
    def origin(self) -> Coordinate:
        """First coordinate reached by the flood fill."""
        return self._cells[0]

    def bounds(self) -> Tuple[int, int, int, int]:
        """Return ``(min_x, min_y, max_x, max_y)``."""
        xs = [cell.x for cell in self._cells]
        ys = [cell.y for cell in self._cells]
        return min(xs), min(ys), max(xs), max(ys)

    def to_mask(self, shape: Tuple[int, int]) -> np.ndarray:
        """Boolean mask of shape ``(height, width)`` that is ``True`` inside the cavern."""
        mask = np.zeros(shape, dtype=bool)
        xs = [cell.x for cell in self._cells]
        ys = [cell.y for cell in self._cells]
        mask[ys, xs] = True
        return mask

    def to_dict(self) -> Dict[str, Any]:
        return {"size": self.size, "origin": list(self.origin), "bounds": list(self.bounds())}

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._cells)

    def __contains__(self, coord: object) -> bool:
        return coord in self._members

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cavern):
            return NotImplemented
        return self._members == other._members

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"Cavern(size={self.size}, origin={tuple(self.origin)})"


def _flood(mask: np.ndarray, visited: np.ndarray, start: Coordinate) -> List[Coordinate]:
    """Flood passages from ``start``; ``visited`` marks cells already queued or flooded."""
    height, width = mask.shape
    frontier = deque([start])
    visited[start.y, start.x] = True
    flooded: List[Coordinate] = []
    while frontier:
        current = frontier.popleft()
        for dx, dy in ORTHOGONAL_OFFSETS:
            nx, ny = current.x + dx, current.y + dy
            if 0 <= nx < width and 0 <= ny < height and not visited[ny, nx] and not mask[ny, nx]:
                visited[ny, nx] = True
                frontier.append(Coordinate(nx, ny))
        flooded.append(current)
    return flooded


class ConnectivityAnalyzer:
    """Derives caverns from the current grid; nothing is cached between calls."""

    def __init__(self, grid: CaveGrid) -> None:
        self._grid = grid

    def find_cavern_at(self, x: int, y: int) -> Optional[Cavern]:
        grid = self._grid
        if not grid.in_bounds(x, y):
            raise OutOfBounds(x, y, grid.width, grid.height)
        mask = grid.snapshot()
        if mask[y, x]:
            return None
        visited = np.zeros(mask.shape, dtype=bool)
        flooded = _flood(mask, visited, Coordinate(x, y))
        if not flooded:
            return None
        return Cavern(flooded)

    def find_caverns(self) -> List[Cavern]:
        mask = self._grid.snapshot()
        visited = np.zeros(mask.shape, dtype=bool)
        caverns: List[Cavern] = []
        # transposed so that argwhere walks x outer, y inner
        for x, y in np.argwhere(~mask.T).tolist():
            if visited[y, x]:
                continue
            caverns.append(Cavern(_flood(mask, visited, Coordinate(x, y))))
        return caverns

    def largest_cavern(self) -> Optional[Cavern]:
        """Largest cavern by cell count; ties go to the first one in scan order."""
        caverns = self.find_caverns()
        if not caverns:
            return None
        return max(caverns, key=len)

    def total_passage_area(self) -> int:
        return sum(len(cavern) for cavern in self.find_caverns())

    def is_area_at_least(self, desired: int) -> bool:
        return self.total_passage_area() >= desired

    def cull_to_largest_cavern(self) -> Optional[Cavern]:
        """Fill every cavern but the largest with walls and return the survivor."""
        largest = self.largest_cavern()
        if largest is None:
            return None
        self._grid.assign(~largest.to_mask(self._grid.shape))
        return largest


__all__ = ["Cavern", "ConnectivityAnalyzer", "ORTHOGONAL_OFFSETS"]
