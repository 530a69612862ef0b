from __future__ import annotations

import numpy as np
import pytest

from cave_maker.core import (
    CellState,
    CellularAutomaton,
    InvalidConfiguration,
    OutOfBounds,
    RuleSet,
    count_wall_neighbors,
    next_generation,
)


def _seeded(width: int, height: int, seed: int, p: float = 0.45) -> CellularAutomaton:
    automaton = CellularAutomaton(width, height)
    automaton.seed(p, np.random.default_rng(seed))
    return automaton


def _border_cells(mask: np.ndarray) -> np.ndarray:
    return np.concatenate((mask[0, :], mask[-1, :], mask[:, 0], mask[:, -1]))


def test_center_passage_on_3x3_fills_in():
    automaton = CellularAutomaton.from_rows(["###", "#.#", "###"])
    assert automaton.wall_neighbor_count(1, 1) == 8
    automaton.step()
    assert automaton.cell_state(1, 1) is CellState.WALL
    assert automaton.total_passage_area() == 0


def test_off_grid_neighbors_count_as_walls():
    automaton = CellularAutomaton.from_rows(["...", "...", "..."])
    assert automaton.wall_neighbor_count(0, 0) == 5
    assert automaton.wall_neighbor_count(1, 0) == 3
    assert automaton.wall_neighbor_count(1, 1) == 0
    counts = count_wall_neighbors(automaton.cells())
    expected = np.array([[5, 3, 5], [3, 0, 3], [5, 3, 5]])
    np.testing.assert_array_equal(counts, expected)


def test_single_cell_grid_has_eight_wall_neighbors():
    automaton = CellularAutomaton(1, 1)
    automaton.set_cell(0, 0, CellState.PASSAGE)
    assert automaton.wall_neighbor_count(0, 0) == 8
    automaton.step()
    assert automaton.cell_state(0, 0) is CellState.WALL


def test_neighbor_count_out_of_bounds():
    automaton = CellularAutomaton(4, 4)
    with pytest.raises(OutOfBounds):
        automaton.wall_neighbor_count(4, 0)


def test_transition_rules_in_interior():
    # the middle of a short wall segment has two wall neighbors and opens up
    opening = CellularAutomaton.from_rows(
        [
            "#######",
            "#.....#",
            "#.###.#",
            "#.....#",
            "#.....#",
            "#.....#",
            "#######",
        ]
    )
    assert opening.wall_neighbor_count(3, 2) == 2
    opening.step()
    assert opening.cell_state(3, 2) is CellState.PASSAGE

    # a passage with five wall neighbors closes
    closing = CellularAutomaton.from_rows(
        [
            "#####",
            "#####",
            "##..#",
            "##..#",
            "#####",
        ]
    )
    assert closing.wall_neighbor_count(2, 2) == 5
    closing.step()
    assert closing.cell_state(2, 2) is CellState.WALL


def test_wall_with_exactly_four_wall_neighbors_stays():
    automaton = CellularAutomaton.from_rows(
        [
            "#####",
            "#.#.#",
            "#.#.#",
            "#...#",
            "#####",
        ]
    )
    assert automaton.wall_neighbor_count(2, 1) == 4
    automaton.step()
    assert automaton.cell_state(2, 1) is CellState.WALL


def test_passage_with_four_wall_neighbors_stays_open():
    automaton = CellularAutomaton.from_rows(
        [
            "######",
            "#....#",
            "#.##.#",
            "#....#",
            "######",
        ]
    )
    assert automaton.wall_neighbor_count(1, 1) == 6
    assert automaton.wall_neighbor_count(2, 1) == 5
    assert automaton.wall_neighbor_count(1, 2) == 4
    automaton.step()
    assert automaton.cell_state(1, 2) is CellState.PASSAGE


def test_step_uses_snapshot_of_previous_generation():
    automaton = CellularAutomaton.from_rows(
        [
            "#####",
            "#...#",
            "#.#.#",
            "#...#",
            "#####",
        ]
    )
    automaton.step()
    # (1, 2) sees four walls before the step; an in-place sweep would already
    # have closed (1, 1) and counted five
    assert automaton.to_rows() == [
        "#####",
        "##.##",
        "#...#",
        "##.##",
        "#####",
    ]


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
@pytest.mark.parametrize("shape", [(1, 1), (2, 7), (10, 10), (23, 17)])
def test_border_is_wall_after_every_step(seed, shape):
    width, height = shape
    automaton = _seeded(width, height, seed, p=0.2)
    for _ in range(3):
        automaton.step()
        assert _border_cells(automaton.cells()).all()
        for x in range(width):
            for y in (0, height - 1):
                assert automaton.is_border(x, y)


def test_step_is_deterministic():
    first = _seeded(40, 30, seed=11)
    second = CellularAutomaton.from_grid(first.grid)
    np.testing.assert_array_equal(first.cells(), second.cells())
    for _ in range(4):
        first.step()
        second.step()
    np.testing.assert_array_equal(first.cells(), second.cells())


def test_next_generation_does_not_mutate_input():
    mask = np.zeros((5, 5), dtype=bool)
    original = mask.copy()
    result = next_generation(mask)
    np.testing.assert_array_equal(mask, original)
    assert result[0].all()


def test_run_advances_generations_and_rejects_negative():
    manual = _seeded(20, 20, seed=5)
    batched = CellularAutomaton.from_grid(manual.grid)
    for _ in range(3):
        manual.step()
    batched.run(3)
    np.testing.assert_array_equal(manual.cells(), batched.cells())
    with pytest.raises(InvalidConfiguration):
        batched.run(-1)


def test_custom_rule_thresholds():
    rules = RuleSet(open_below=0, close_at=9)
    automaton = CellularAutomaton.from_rows(["#####", "#.#.#", "#####"], rules=rules)
    before = automaton.cells()
    automaton.step()
    np.testing.assert_array_equal(automaton.cells(), before)
    with pytest.raises(InvalidConfiguration):
        RuleSet(open_below=12)


def test_rule_set_from_mapping_defaults():
    assert RuleSet.from_mapping({}) == RuleSet()
    assert RuleSet.from_mapping({"close_at": 6}) == RuleSet(open_below=4, close_at=6)
