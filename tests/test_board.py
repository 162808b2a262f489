import pytest

from aisearch import NOT_FOUND, Grid, Location, MapInt1D, MapInt2D
from aisearch.utils import get_sudoku_units, get_win_lines


def test_location_sentinel_and_accessors():
    m = MapInt1D([0, 4, 0])
    loc = Location(m, 1)

    assert NOT_FOUND.not_found()
    assert not loc.not_found()
    assert loc.get_value() == 4

    loc.set_value(7)
    assert m.cells == [0, 7, 0]
    loc.clear_value()
    assert m.cells == [0, 0, 0]

    with pytest.raises(ValueError):
        NOT_FOUND.get_value()


def test_map_rejects_out_of_domain_values():
    with pytest.raises(ValueError):
        MapInt1D([0, 10, 0])
    with pytest.raises(ValueError):
        MapInt2D([0] * 80)
    with pytest.raises(ValueError):
        MapInt2D([0] * 36, width=6, height=6, box_width=4, box_height=3)

    m = MapInt1D([0, 0], max_value=3)
    with pytest.raises(ValueError):
        m.set(0, 4)
    with pytest.raises(IndexError):
        m.get(2)


def test_map2d_rows_and_validity(easy_map, easy_solution):
    assert easy_map.width == 9 and easy_map.height == 9
    assert easy_map.rows()[0] == [5, 3, 0, 0, 7, 0, 0, 0, 0]
    assert easy_map.row_col(10) == (1, 1)
    assert easy_map.is_valid()
    assert not easy_map.is_complete()
    assert easy_solution.is_solved()

    broken = easy_solution.copy()
    broken.set(1, 5)  # duplicates the 5 at index 0
    assert broken.is_complete()
    assert not broken.is_valid()
    assert easy_solution.cells[1] == 3


def test_map2d_units_of_cell(easy_map):
    row, col, box = easy_map.units_of(40)
    assert row == tuple(range(36, 45))
    assert col == tuple(range(4, 81, 9))
    assert box == (30, 31, 32, 39, 40, 41, 48, 49, 50)


def test_map2d_format_board(easy_map):
    lines = easy_map.format_board().splitlines()
    assert lines[0] == "5 3 . | . 7 . | . . ."
    assert lines[3] == "------+-------+------"
    assert len(lines) == 11


def test_small_map_defaults_max_value_to_width():
    m = MapInt2D([0] * 16, width=4, height=4, box_width=2, box_height=2)
    assert m.max_value == 4
    assert m.empty_indices() == list(range(16))


def test_grid_is_immutable_under_moves():
    g = Grid()
    g2 = g.set(4, Grid.x)

    assert g.empty_indices() == list(range(9))
    assert g2.get(4) == "x"
    assert 4 not in g2.empty_indices()
    assert g2.clear(4) == g


def test_grid_winning_lines():
    assert Grid.from_string("xxx......").winning("x")
    assert Grid.from_string("o..o..o..").winning("o")
    assert Grid.from_string("x...x...x").winning("x")
    assert Grid.from_string("..o.o.o..").winning("o")
    assert not Grid.from_string("xx.oo....").winning("x")
    assert Grid.from_string("xoxxoooxx").is_full()
    assert Grid.from_string("xoxxoooxx").winner() is None


def test_grid_str_matches_bracketed_layout():
    g = Grid.from_string("xo.|.x.|..o")
    assert str(g) == "[x,o, ,\n  ,x, ,\n  , ,o]"


def test_grid_rejects_bad_squares():
    with pytest.raises(ValueError):
        Grid(["x"] * 8)
    with pytest.raises(ValueError):
        Grid.from_string("xq.......")
    with pytest.raises(ValueError):
        Grid().set(0, "z")


def test_grid_format_board_plain():
    text = Grid.from_string("x...o....").format_board(color=False)
    assert text.splitlines()[0] == " x | 1 | 2 "
    assert text.splitlines()[2] == " 3 | o | 5 "


def test_geometry_caches_are_reused():
    assert get_win_lines(3) is get_win_lines(3)
    assert len(get_win_lines(3)) == 8
    assert get_sudoku_units(9, 9, 3, 3) is get_sudoku_units(9, 9, 3, 3)
    with pytest.raises(ValueError):
        get_win_lines(0)


def test_grid_set_rejects_bad_index_and_occupied_square():
    g = Grid.from_string("x........")

    with pytest.raises(IndexError):
        g.set(-1, Grid.o)
    with pytest.raises(IndexError):
        g.set(9, Grid.o)
    with pytest.raises(ValueError):
        g.set(0, Grid.o)
    assert g.clear(0) == Grid()


def test_int_map_base_is_abstract():
    from aisearch.board import _IntMap

    with pytest.raises(TypeError):
        _IntMap([0, 0], max_value=2)
    assert MapInt1D([1, 0]).snapshot() == (1, 0)
