"""Cellular automaton rule application."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import numpy as np

from .errors import InvalidConfiguration, OutOfBounds
from .grid import CaveGrid

# (dx, dy) offsets of the Moore neighborhood; the first four are orthogonal.
NEIGHBOR_OFFSETS = np.array(
    [
        (-1, 0),
        (1, 0),
        (0, -1),
        (0, 1),
        (-1, -1),
        (1, -1),
        (-1, 1),
        (1, 1),
    ],
    dtype=np.int8,
)


@dataclass(frozen=True)
class RuleSet:
    """Transition thresholds on the number of wall neighbors.

    A wall with fewer than ``open_below`` wall neighbors opens into a passage;
    a passage with at least ``close_at`` wall neighbors fills in.
    """

    open_below: int = 4
    close_at: int = 5

    def __post_init__(self) -> None:
        for name in ("open_below", "close_at"):
            value = getattr(self, name)
            if not 0 <= value <= 9:
                raise InvalidConfiguration(f"Rule threshold '{name}' must lie in [0, 9], got {value}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object] | None) -> "RuleSet":
        if not mapping:
            return cls()
        return cls(
            open_below=int(mapping.get("open_below", cls.open_below)),  # type: ignore[arg-type]
            close_at=int(mapping.get("close_at", cls.close_at)),  # type: ignore[arg-type]
        )

    def to_dict(self) -> dict[str, int]:
        return {"open_below": self.open_below, "close_at": self.close_at}


def count_wall_neighbors(mask: np.ndarray) -> np.ndarray:
    """Count wall cells in the Moore neighborhood of every cell.

    Cells beyond the grid edge count as walls, so a corner cell always sees
    at least five walls.
    """
    height, width = mask.shape
    padded = np.pad(mask.astype(np.uint8), 1, mode="constant", constant_values=1)
    counts = np.zeros((height, width), dtype=np.uint8)
    for dx, dy in NEIGHBOR_OFFSETS.tolist():
        counts += padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]
    return counts


def border_mask(height: int, width: int) -> np.ndarray:
    border = np.zeros((height, width), dtype=bool)
    border[0, :] = True
    border[-1, :] = True
    border[:, 0] = True
    border[:, -1] = True
    return border


def next_generation(mask: np.ndarray, rules: RuleSet = RuleSet()) -> np.ndarray:
    """Return the wall mask one generation after ``mask``. ``mask`` is not modified."""
    counts = count_wall_neighbors(mask)
    opened = mask & (counts < rules.open_below)
    closed = ~mask & (counts >= rules.close_at)
    result = (mask & ~opened) | closed
    result |= border_mask(*mask.shape)
    return result


class RuleEngine:
    """Advances a ``CaveGrid`` one synchronous generation at a time."""

    def __init__(self, grid: CaveGrid, rules: RuleSet | None = None) -> None:
        self._grid = grid
        self._rules = rules or RuleSet()

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def wall_neighbor_counts(self) -> np.ndarray:
        return count_wall_neighbors(self._grid.snapshot())

    def wall_neighbor_count(self, x: int, y: int) -> int:
        grid = self._grid
        if not grid.in_bounds(x, y):
            raise OutOfBounds(x, y, grid.width, grid.height)
        total = 0
        for dx, dy in NEIGHBOR_OFFSETS.tolist():
            nx, ny = x + dx, y + dy
            if not grid.in_bounds(nx, ny) or grid.is_wall(nx, ny):
                total += 1
        return total

    def step(self) -> None:
        # the snapshot is taken before any write, so every count sees the old generation
        before = self._grid.snapshot()
        self._grid.assign(next_generation(before, self._rules))

    def run(self, generations: int) -> None:
        if generations < 0:
            raise InvalidConfiguration(f"generations must be non-negative, got {generations}")
        for _ in range(generations):
            self.step()


__all__ = [
    "NEIGHBOR_OFFSETS",
    "RuleEngine",
    "RuleSet",
    "border_mask",
    "count_wall_neighbors",
    "next_generation",
]
