"""
AI Search Algorithms

Two generic search engines over small in-memory boards:
- Backtracking: Depth-first constraint solving with pluggable location/candidate strategies
- Adversarial search: Minimax game-tree search, optionally with alpha-beta pruning
"""

from .board import NOT_FOUND, CellMap, Grid, Location, MapInt1D, MapInt2D, play_cli
from .backtracking import (
    Backtracking,
    NextCandidateSudoku1D,
    NextCandidateSudoku2D,
    NextLocationSudoku1D,
    NextLocationSudoku2D,
    solve_map,
)
from .adversarial import (
    AdversarialSearch,
    Move,
    MoveIndexError,
    alpha_beta_pruning,
    minimax,
    tree_metrics,
)
from .serialization import (
    Node,
    deserialize,
    format_move_tree,
    serialize,
    serialize_move,
)
from .analysis import (
    compare_search_algorithms,
    enumerate_reachable_states,
    generate_sudoku,
    run_adversarial_analysis,
    run_backtracking_difficulty_analysis,
    run_backtracking_many_tests,
    run_backtracking_single_test,
)

__version__ = "1.0.0"

__all__ = [
    # Boards
    "CellMap",
    "Location",
    "NOT_FOUND",
    "MapInt1D",
    "MapInt2D",
    "Grid",
    # Backtracking
    "Backtracking",
    "NextLocationSudoku1D",
    "NextLocationSudoku2D",
    "NextCandidateSudoku1D",
    "NextCandidateSudoku2D",
    "solve_map",
    # Adversarial search
    "AdversarialSearch",
    "Move",
    "MoveIndexError",
    "minimax",
    "alpha_beta_pruning",
    "tree_metrics",
    # Tree encoding
    "Node",
    "serialize",
    "deserialize",
    "serialize_move",
    "format_move_tree",
    # CLI
    "play_cli",
    # Analysis functions
    "generate_sudoku",
    "run_backtracking_single_test",
    "run_backtracking_many_tests",
    "run_backtracking_difficulty_analysis",
    "compare_search_algorithms",
    "enumerate_reachable_states",
    "run_adversarial_analysis",
]
