import pytest

from aisearch import (
    NOT_FOUND,
    Backtracking,
    Location,
    MapInt1D,
    MapInt2D,
    NextCandidateSudoku1D,
    NextCandidateSudoku2D,
    NextLocationSudoku1D,
    NextLocationSudoku2D,
    solve_map,
)

UNSOLVABLE_AT_FIRST_CELL = [
    [1, 2, 0, 0],
    [0, 0, 0, 0],
    [0, 0, 3, 0],
    [0, 0, 4, 0],
]

# Cell (3, 0) can never be filled, which only shows up after rows 0-2 are assigned.
UNSOLVABLE_DEEP = [
    [1, 0, 0, 0],
    [4, 0, 0, 0],
    [0, 0, 0, 0],
    [0, 0, 2, 3],
]


def small_map(rows):
    return MapInt2D.from_rows(rows, box_width=2, box_height=2)


def test_next_location_scans_in_order(easy_map):
    assert NextLocationSudoku2D(easy_map)().get_index() == 2
    assert NextLocationSudoku1D(MapInt1D([3, 0, 0]))().get_index() == 1
    assert NextLocationSudoku1D(MapInt1D([3, 1, 2]))().not_found()


def test_next_candidate_2d_walks_legal_values_then_clears(easy_map):
    candidate = NextCandidateSudoku2D(easy_map)
    loc = Location(easy_map, 2)

    assert candidate(loc) == 1
    assert easy_map.get(2) == 1
    assert candidate(loc) == 2
    assert candidate(loc) == 4
    assert candidate(loc) == 0
    assert easy_map.get(2) == 0


def test_next_candidate_1d_uses_global_uniqueness():
    m = MapInt1D([0, 1, 3])
    candidate = NextCandidateSudoku1D(m)
    loc = Location(m, 0)

    assert candidate(loc) == 2
    assert candidate(loc) == 4
    assert m.cells == [4, 1, 3]


def test_one_dimensional_map_yields_permutation():
    m = MapInt1D([0, 0, 0])
    status, _ = Backtracking(m).run()

    assert status == 1
    assert m.cells == [1, 2, 3]


def test_one_dimensional_map_keeps_givens():
    m = MapInt1D([0, 5, 0])
    status, _ = solve_map(m)

    assert status == 1
    assert m.cells == [1, 5, 2]


def test_one_dimensional_unsolvable_restores_map():
    m = MapInt1D([0, 0, 0], max_value=2)
    status, payload = Backtracking(m).run()

    assert status == -1
    assert m.cells == [0, 0, 0]
    assert payload["backtracks_count"] > 0


def test_solves_classic_puzzle(easy_map, easy_solution):
    status, payload = Backtracking(easy_map, record_steps=False).run()

    assert status == 1
    assert easy_map.is_solved()
    assert easy_map == easy_solution
    assert payload["max_stack_depth"] == len(easy_solution.cells) - 30
    assert payload["steps_history"] == []


def test_single_steps_reach_the_same_solution(easy_map, easy_solution):
    solver = Backtracking(easy_map, record_steps=False)
    steps = 0
    while solver.solve():
        steps += 1

    assert solver.status == 1
    assert easy_map == easy_solution
    assert not solver.solve()


def test_complete_map_needs_no_steps(easy_solution):
    status, payload = Backtracking(easy_solution).run()

    assert status == 1
    assert payload["steps_count"] == 0


@pytest.mark.parametrize("rows", [UNSOLVABLE_AT_FIRST_CELL, UNSOLVABLE_DEEP])
def test_unsolvable_map_terminates_and_restores_givens(rows):
    m = small_map(rows)
    original = list(m.cells)

    status, payload = Backtracking(m).run()

    assert status == -1
    assert m.cells == original
    assert payload["backtracks_count"] >= 1


def test_deep_failure_needs_real_backtracking():
    status, payload = Backtracking(small_map(UNSOLVABLE_DEEP)).run()

    assert status == -1
    assert payload["max_stack_depth"] > 1
    assert payload["assignments_count"] > 1


def test_small_grid_solves():
    m = small_map([
        [1, 0, 0, 0],
        [0, 0, 1, 0],
        [0, 1, 0, 0],
        [0, 0, 0, 1],
    ])
    status, _ = Backtracking(m).run()

    assert status == 1
    assert m.is_solved()


def test_max_steps_stops_early(easy_map):
    status, payload = Backtracking(easy_map, max_steps=5).run()

    assert status == 0
    assert payload["steps_count"] == 5


def test_step_history_records_assignments_and_backtracks():
    m = MapInt1D([0, 0, 0], max_value=2)
    _, payload = Backtracking(m).run()
    history = payload["steps_history"]

    assert history[0]["action"] == "assign"
    assert history[0]["index"] == 0
    assert history[0]["value"] == 1
    assert history[0]["cells_snapshot"] == (1, 0, 0)
    assert any(step["action"] == "backtrack" for step in history)
    assert [s["step_number"] for s in history] == list(range(len(history)))


def test_explicit_strategies_are_accepted():
    m = MapInt1D([0, 0])
    solver = Backtracking(m, NextLocationSudoku1D, NextCandidateSudoku1D)
    status, _ = solver.run()

    assert status == 1
    assert m.cells == [1, 2]


def test_unknown_map_type_requires_strategies():
    with pytest.raises(ValueError):
        Backtracking([0, 0, 0])
    with pytest.raises(ValueError):
        Backtracking(MapInt1D([0]), max_steps=0)


class ColoringMap:
    """Graph coloring state exposing only get/set/clear, unlike the Sudoku maps."""

    def __init__(self, edges, nodes, colors):
        self.colors = [0] * nodes
        self.neighbors = {n: set() for n in range(nodes)}
        for a, b in edges:
            self.neighbors[a].add(b)
            self.neighbors[b].add(a)
        self.max_color = colors

    def get(self, i):
        return self.colors[i]

    def set(self, i, value):
        self.colors[i] = value

    def clear(self, i):
        self.colors[i] = 0


class FirstUncolored:
    def __init__(self, graph):
        self.graph = graph

    def __call__(self):
        for i, c in enumerate(self.graph.colors):
            if c == 0:
                return Location(self.graph, i)
        return NOT_FOUND


class NextFreeColor:
    def __init__(self, graph):
        self.graph = graph

    def __call__(self, location):
        i = location.get_index()
        taken = {self.graph.get(n) for n in self.graph.neighbors[i]}
        for color in range(location.get_value() + 1, self.graph.max_color + 1):
            if color not in taken:
                location.set_value(color)
                return color
        location.clear_value()
        return 0


def test_custom_map_and_strategies_with_default_settings():
    graph = ColoringMap([(0, 1), (1, 2), (2, 3)], nodes=4, colors=2)

    status, payload = Backtracking(graph, FirstUncolored, NextFreeColor).run()

    assert status == 1
    assert graph.colors == [1, 2, 1, 2]
    history = payload["steps_history"]
    assert [s["action"] for s in history] == ["assign"] * 4
    assert all(s["cells_snapshot"] is None for s in history)


def test_custom_map_without_solution_is_restored():
    triangle = ColoringMap([(0, 1), (1, 2), (0, 2)], nodes=3, colors=2)

    status, payload = Backtracking(triangle, FirstUncolored, NextFreeColor).run()

    assert status == -1
    assert triangle.colors == [0, 0, 0]
    assert payload["backtracks_count"] > 0
