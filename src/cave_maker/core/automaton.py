"""Cellular automaton for cave-like level generation.

Typical use::

    automaton = CellularAutomaton(100, 100)
    automaton.seed(0.45, np.random.default_rng(7))
    automaton.run(5)
    automaton.cull_to_largest_cavern()

``seed`` fills the grid with noise, each ``step`` applies one generation of
the rules and ``cull_to_largest_cavern`` keeps only the biggest open region.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np

from .connectivity import Cavern, ConnectivityAnalyzer
from .grid import CaveGrid, CellState
from .noise import RandomSource, seed_noise
from .rules import RuleEngine, RuleSet


class CellularAutomaton:
    """Facade over the grid, noise seeder, rule engine and cavern analysis."""

    def __init__(self, width: int, height: int, rules: RuleSet | None = None) -> None:
        self._grid = CaveGrid(width, height)
        self._rules = RuleEngine(self._grid, rules)
        self._analyzer = ConnectivityAnalyzer(self._grid)

    @classmethod
    def from_grid(cls, grid: CaveGrid, rules: RuleSet | None = None) -> "CellularAutomaton":
        automaton = cls(grid.width, grid.height, rules)
        automaton._grid.assign(grid.snapshot())
        return automaton

    @classmethod
    def from_rows(cls, rows: Iterable[str], rules: RuleSet | None = None) -> "CellularAutomaton":
        return cls.from_grid(CaveGrid.from_rows(rows), rules)

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def grid(self) -> CaveGrid:
        return self._grid

    @property
    def rules(self) -> RuleSet:
        return self._rules.rules

    def cells(self) -> np.ndarray:
        """Read-only wall mask of shape ``(height, width)``."""
        return self._grid.snapshot()

    def to_rows(self) -> List[str]:
        return self._grid.to_rows()

    def fill_walls(self) -> None:
        self._grid.fill_walls()

    def seed(self, wall_probability: float, rng: RandomSource = None) -> None:
        seed_noise(self._grid, wall_probability, rng)

    def step(self) -> None:
        self._rules.step()

    def run(self, generations: int) -> None:
        self._rules.run(generations)

    def cell_state(self, x: int, y: int) -> CellState:
        return self._grid.get(x, y)

    def set_cell(self, x: int, y: int, state: CellState) -> None:
        self._grid.set(x, y, state)

    def is_border(self, x: int, y: int) -> bool:
        return self._grid.is_border(x, y)

    def wall_neighbor_count(self, x: int, y: int) -> int:
        return self._rules.wall_neighbor_count(x, y)

    def find_caverns(self) -> List[Cavern]:
        return self._analyzer.find_caverns()

    def find_cavern_at(self, x: int, y: int) -> Optional[Cavern]:
        return self._analyzer.find_cavern_at(x, y)

    def largest_cavern(self) -> Optional[Cavern]:
        return self._analyzer.largest_cavern()

    def total_passage_area(self) -> int:
        return self._analyzer.total_passage_area()

    def is_area_at_least(self, desired: int) -> bool:
        return self._analyzer.is_area_at_least(desired)

    def cull_to_largest_cavern(self) -> Optional[Cavern]:
        return self._analyzer.cull_to_largest_cavern()

    def __repr__(self) -> str:
        return f"CellularAutomaton(width={self.width}, height={self.height}, rules={self.rules})"


__all__ = ["CellularAutomaton"]
