"""Cave grid engine: grid store, noise seeding, automaton rules and caverns."""

from .automaton import CellularAutomaton
from .connectivity import Cavern, ConnectivityAnalyzer
from .errors import CaveError, InvalidConfiguration, OutOfBounds
from .grid import CaveGrid, CellState, Coordinate
from .noise import as_generator, noise_mask, seed_noise
from .rules import RuleEngine, RuleSet, count_wall_neighbors, next_generation

__all__ = [
    "CellularAutomaton",
    "Cavern",
    "ConnectivityAnalyzer",
    "CaveError",
    "InvalidConfiguration",
    "OutOfBounds",
    "CaveGrid",
    "CellState",
    "Coordinate",
    "as_generator",
    "noise_mask",
    "seed_noise",
    "RuleEngine",
    "RuleSet",
    "count_wall_neighbors",
    "next_generation",
]
