import pytest

from aisearch import (
    AdversarialSearch,
    Grid,
    Move,
    MoveIndexError,
    alpha_beta_pruning,
    enumerate_reachable_states,
    minimax,
    tree_metrics,
)
from aisearch.adversarial import ALPHA_INIT, BETA_INIT

X, O = Grid.x, Grid.o


def assert_same_shape(pruned: Move, full: Move) -> None:
    """Every expanded alpha-beta node has one child per legal move, like minimax."""
    assert len(pruned.next) == len(full.next)
    for p_child, f_child in zip(pruned.next, full.next):
        assert p_child.spot_index == f_child.spot_index
        if not p_child.pruned:
            assert_same_shape(p_child, f_child)


@pytest.fixture(scope="module")
def empty_board_trees():
    grid = Grid()
    return minimax(grid, X, X, O), alpha_beta_pruning(grid, X, X, O)


# -----------------------------------------------------------------------------
# Terminal states
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "board, score",
    [
        ("xxxoo....", 10),
        ("ooo.xx.x.", -10),
        ("xoxxoooxx", 0),
    ],
)
def test_terminal_states_have_no_children(board, score):
    root = minimax(Grid.from_string(board), X, X, O)

    assert root.score == score
    assert root.next == []
    assert root.best_move == -1
    assert root.best() is None
    assert root.is_terminal()


# -----------------------------------------------------------------------------
# Game-theoretic values
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "board, player, score, best_spot",
    [
        # x completes the top row
        ("xx.oo....", X, 10, 2),
        # o to move wins either at once or through a double threat
        ("xx.oo...x", O, -10, None),
        # o must block at 2 and the game is then drawn
        ("xx..o....", O, 0, 2),
        # corner opening met by an adjacent edge loses for o
        ("xo.......", X, 10, None),
        # corner opening met by the center is a draw
        ("x...o....", X, 0, None),
        # last free square completes the bottom row
        ("oxoxooxx.", X, 10, 8),
    ],
)
def test_minimax_matches_known_values(board, player, score, best_spot):
    root = minimax(Grid.from_string(board), player, X, O)

    assert root.score == score
    if best_spot is not None:
        assert root.best().spot_index == best_spot


def test_empty_board_is_a_draw(empty_board_trees):
    full, pruned = empty_board_trees

    assert full.score == 0
    assert pruned.score == 0
    assert len(full.next) == 9
    assert full.best_move == 0
    assert full.best().spot_index in (0, 2, 4, 6, 8)


def test_first_best_child_wins_ties(empty_board_trees):
    # Every opening keeps the draw, so the first enumerated spot is chosen.
    root, _ = empty_board_trees
    scores = [child.score for child in root.next]

    assert scores.index(max(scores)) == root.best_move


def test_children_carry_their_spot_index():
    root = minimax(Grid.from_string("xoxoxo..."), X, X, O)

    assert [child.spot_index for child in root.next] == [6, 7, 8]
    assert root.spot_index == -1
    for child in root.next:
        assert child.grid.get(child.spot_index) == X


def test_principal_variation_follows_best_moves():
    root = minimax(Grid.from_string("xx.oo...."), X, X, O)
    assert root.principal_variation() == [2]

    root = minimax(Grid.from_string("xx..o...."), O, X, O)
    pv = root.principal_variation()
    assert pv[0] == 2
    assert len(pv) == 6


# -----------------------------------------------------------------------------
# Alpha-beta pruning
# -----------------------------------------------------------------------------


def test_alpha_beta_matches_minimax_on_reachable_states():
    states = [
        (state, player)
        for state, player in enumerate_reachable_states()
        if len(state.empty_indices()) <= 5
    ]
    assert states

    for state, player in states:
        full = minimax(state, player, X, O)
        pruned = alpha_beta_pruning(state, player, X, O)
        assert pruned.score == full.score, state
        assert pruned.best().score == full.score, state


def test_alpha_beta_tree_keeps_one_child_per_legal_move(empty_board_trees):
    full, pruned = empty_board_trees
    assert_same_shape(pruned, full)


def test_pruned_branches_are_placeholder_leaves(empty_board_trees):
    full, pruned = empty_board_trees
    pruned_stats = tree_metrics(pruned)
    full_stats = tree_metrics(full)

    assert pruned_stats["pruned"] > 0
    assert pruned_stats["nodes"] < full_stats["nodes"]
    assert full_stats["pruned"] == 0

    stack = [pruned]
    while stack:
        node = stack.pop()
        if node.pruned:
            assert node.next == []
            assert node.spot_index >= 0
        stack.extend(node.next)


def test_pruned_placeholder_scores_use_the_bound():
    # With beta already at 0, x winning at spot 2 cuts off every later sibling.
    root = alpha_beta_pruning(Grid.from_string("xx.oo...."), X, X, O, ALPHA_INIT, 0)

    assert root.score == 10
    assert root.best_move == 0
    assert not root.next[0].pruned
    assert all(child.pruned for child in root.next[1:])
    assert all(child.score == 10 for child in root.next[1:])


def test_alpha_beta_expands_fewer_nodes():
    full = AdversarialSearch(X, O, algorithm="minimax")
    pruning = AdversarialSearch(X, O, algorithm="alpha_beta")
    grid = Grid.from_string("x........")

    assert full.search(grid, O).score == pruning.search(grid, O).score
    assert pruning.expanded_nodes_count < full.expanded_nodes_count
    assert pruning.get_metrics()["pruned_branches_count"] > 0
    assert full.get_metrics()["pruned_branches_count"] == 0

    pruning.reset_metrics()
    assert pruning.get_metrics() == {
        "expanded_nodes_count": 0,
        "terminal_nodes_count": 0,
        "pruned_branches_count": 0,
    }


def test_root_bounds_are_extreme_integers():
    assert ALPHA_INIT < -10 ** 9
    assert BETA_INIT > 10 ** 9


# -----------------------------------------------------------------------------
# Errors and inspection helpers
# -----------------------------------------------------------------------------


def test_bad_child_index_raises():
    root = minimax(Grid.from_string("xoxoxo..."), X, X, O)

    assert root.at(0) is root.next[0]
    with pytest.raises(MoveIndexError):
        root.at(3)
    with pytest.raises(IndexError):
        root.at(-1)


def test_state_with_two_winners_is_rejected():
    with pytest.raises(ValueError):
        minimax(Grid.from_string("xxxooo..."), X, X, O)


def test_invalid_configuration_is_rejected():
    with pytest.raises(ValueError):
        AdversarialSearch(X, X)
    with pytest.raises(ValueError):
        AdversarialSearch(X, O, algorithm="negamax")
    with pytest.raises(ValueError):
        minimax(Grid(), "z", X, O)


def test_search_defaults_to_maximizer():
    engine = AdversarialSearch(O, X, algorithm="alpha_beta")
    root = engine.search(Grid.from_string("oo.xx...."))

    assert root.score == 10
    assert root.best().spot_index == 2


def test_move_str_lists_grid_score_children_and_best():
    root = minimax(Grid.from_string("xx.oo...."), X, X, O)
    lines = str(root).splitlines()

    assert lines[0] == "[x,x, ,"
    assert lines[3:] == ["10", "5", "0"]
    assert len(root) == 5
    assert list(root) == root.next
    assert root.count_nodes() == tree_metrics(root)["nodes"]
