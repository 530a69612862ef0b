from __future__ import annotations

import numpy as np
import pytest

from cave_maker.core import Cavern, CellState, CellularAutomaton, Coordinate, InvalidConfiguration, OutOfBounds


def _two_caverns() -> CellularAutomaton:
    return CellularAutomaton.from_rows(
        [
            "#########",
            "#...#####",
            "#########",
            "####.....",
            "#########",
        ]
    )


def test_isolated_single_cell_cavern():
    automaton = CellularAutomaton(5, 5)
    automaton.set_cell(2, 2, CellState.PASSAGE)
    caverns = automaton.find_caverns()
    assert len(caverns) == 1
    assert len(caverns[0]) == 1
    assert Coordinate(2, 2) in caverns[0]
    assert automaton.total_passage_area() == 1
    assert automaton.is_area_at_least(1)
    assert not automaton.is_area_at_least(2)


def test_all_wall_grid_has_no_caverns():
    automaton = CellularAutomaton(6, 4)
    assert automaton.find_caverns() == []
    assert automaton.largest_cavern() is None
    assert automaton.total_passage_area() == 0
    assert automaton.is_area_at_least(0)


def test_find_cavern_at():
    automaton = _two_caverns()
    cavern = automaton.find_cavern_at(2, 1)
    assert cavern is not None
    assert set(cavern) == {Coordinate(1, 1), Coordinate(2, 1), Coordinate(3, 1)}
    assert cavern.origin == Coordinate(2, 1)
    assert automaton.find_cavern_at(0, 0) is None
    with pytest.raises(OutOfBounds):
        automaton.find_cavern_at(9, 0)


def test_diagonal_cells_are_separate_caverns():
    automaton = CellularAutomaton.from_rows(
        [
            "#####",
            "#.###",
            "##.##",
            "#####",
        ]
    )
    caverns = automaton.find_caverns()
    assert len(caverns) == 2
    assert all(len(cavern) == 1 for cavern in caverns)


def test_caverns_partition_passage_cells():
    automaton = CellularAutomaton(48, 36)
    automaton.seed(0.45, np.random.default_rng(2024))
    automaton.run(4)
    caverns = automaton.find_caverns()
    seen: set[Coordinate] = set()
    for cavern in caverns:
        members = set(cavern)
        assert members, "caverns are never empty"
        assert not members & seen
        seen |= members
    cells = automaton.cells()
    passages = {Coordinate(x, y) for y, x in np.argwhere(~cells).tolist()}
    assert seen == passages
    assert automaton.total_passage_area() == len(passages)


def test_scan_order_is_x_outer_y_inner():
    automaton = CellularAutomaton.from_rows(
        [
            "#####",
            "#.#.#",
            "#####",
            "#.###",
            "#####",
        ]
    )
    origins = [cavern.origin for cavern in automaton.find_caverns()]
    assert origins == [Coordinate(1, 1), Coordinate(1, 3), Coordinate(3, 1)]


def test_two_cavern_cull_keeps_larger_region():
    automaton = _two_caverns()
    sizes = sorted(len(cavern) for cavern in automaton.find_caverns())
    assert sizes == [3, 5]
    retained = automaton.cull_to_largest_cavern()
    assert retained is not None and len(retained) == 5
    assert automaton.total_passage_area() == 5
    caverns = automaton.find_caverns()
    assert len(caverns) == 1
    for x in (1, 2, 3):
        assert automaton.cell_state(x, 1) is CellState.WALL
    assert all(automaton.cell_state(x, 3) is CellState.PASSAGE for x in range(4, 9))


def test_cull_without_caverns_is_a_no_op():
    automaton = CellularAutomaton(7, 7)
    before = automaton.cells()
    assert automaton.cull_to_largest_cavern() is None
    np.testing.assert_array_equal(automaton.cells(), before)


@pytest.mark.parametrize("seed", [3, 8, 21])
def test_cull_matches_largest_cavern(seed):
    automaton = CellularAutomaton(40, 30)
    automaton.seed(0.45, np.random.default_rng(seed))
    automaton.run(5)
    largest = automaton.largest_cavern()
    assert largest is not None
    automaton.cull_to_largest_cavern()
    assert automaton.total_passage_area() == len(largest)
    caverns = automaton.find_caverns()
    assert caverns == [largest]


def test_largest_tie_goes_to_first_in_scan_order():
    automaton = CellularAutomaton.from_rows(
        [
            "#######",
            "#..#..#",
            "#######",
        ]
    )
    largest = automaton.largest_cavern()
    assert largest is not None
    assert set(largest) == {Coordinate(1, 1), Coordinate(2, 1)}


def test_cavern_value_semantics():
    first = Cavern([(1, 1), (2, 1)])
    second = Cavern([Coordinate(2, 1), Coordinate(1, 1)])
    assert first == second
    assert hash(first) == hash(second)
    assert (1, 1) in first
    assert first.bounds() == (1, 1, 2, 1)
    assert first.to_dict() == {"size": 2, "origin": [1, 1], "bounds": [1, 1, 2, 1]}
    mask = first.to_mask((3, 4))
    assert mask.sum() == 2 and mask[1, 1] and mask[1, 2]
    with pytest.raises(InvalidConfiguration):
        Cavern([])
