"""Cave-like level generation with a cellular automaton."""

from .core import CaveGrid, Cavern, CellState, CellularAutomaton, Coordinate, InvalidConfiguration, OutOfBounds
from .generate import generate_cave, render_png

__all__ = [
    "CaveGrid",
    "Cavern",
    "CellState",
    "CellularAutomaton",
    "Coordinate",
    "InvalidConfiguration",
    "OutOfBounds",
    "generate_cave",
    "render_png",
]
__version__ = "0.1.0"
