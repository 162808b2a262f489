"""Analysis and benchmarking tools for the search engines."""

import random
from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional, Sequence, Set, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .adversarial import AdversarialSearch
from .backtracking import Backtracking
from .board import Grid, MapInt2D

# Module-level cache: (box_width, box_height) -> solved row-major cells
_BASE_GRID_CACHE: Dict[Tuple[int, int], Tuple[int, ...]] = {}


# -----------------------------------------------------------------------------
# Sudoku generation and backtracking benchmarks
# -----------------------------------------------------------------------------


def generate_sudoku(
    clues: int,
    rng: random.Random,
    *,
    box_width: int = 3,
    box_height: int = 3,
) -> Tuple[MapInt2D, MapInt2D]:
    """
    Generate a random Sudoku puzzle together with one of its solutions.

    A solved grid is produced by backtracking from an empty map, then shuffled
    with validity-preserving transformations (digit relabelling, row swaps
    inside bands, column swaps inside stacks, band and stack swaps and, for
    square boxes, a transpose). Finally all but `clues` cells are blanked.
    The puzzle is not guaranteed to have a unique solution.

    Args:
        clues: Number of given cells left in the puzzle.
        rng: Caller-owned random generator; the same seed gives the same puzzle.
        box_width: Width of one box.
        box_height: Height of one box.

    Returns:
        Tuple of (puzzle, solution).

    Raises:
        ValueError: If clues is outside [0, cells].
    """
    size = box_width * box_height
    cells_count = size * size
    if clues < 0 or clues > cells_count:
        raise ValueError(f"clues must lie in [0, {cells_count}].")

    key = (box_width, box_height)
    base_cells = _BASE_GRID_CACHE.get(key)
    if base_cells is None:
        empty = MapInt2D(
            [0] * cells_count,
            width=size,
            height=size,
            box_width=box_width,
            box_height=box_height,
        )
        status, _ = Backtracking(empty, record_steps=False).run()
        if status != 1:
            raise RuntimeError("Could not build a solved base grid.")
        base_cells = tuple(empty.cells)
        _BASE_GRID_CACHE[key] = base_cells

    base = MapInt2D(
        base_cells,
        width=size,
        height=size,
        box_width=box_width,
        box_height=box_height,
    )

    digits = list(range(1, size + 1))
    rng.shuffle(digits)
    rows = [[digits[v - 1] for v in row] for row in base.rows()]

    # Rows may move within their band; bands may move as a whole.
    bands = list(range(size // box_height))
    rng.shuffle(bands)
    row_order: List[int] = []
    for band in bands:
        inner = list(range(box_height))
        rng.shuffle(inner)
        row_order.extend(band * box_height + r for r in inner)
    rows = [rows[r] for r in row_order]

    stacks = list(range(size // box_width))
    rng.shuffle(stacks)
    col_order: List[int] = []
    for stack in stacks:
        inner = list(range(box_width))
        rng.shuffle(inner)
        col_order.extend(stack * box_width + c for c in inner)
    rows = [[row[c] for c in col_order] for row in rows]

    if box_width == box_height and rng.random() < 0.5:
        rows = [list(col) for col in zip(*rows)]

    solution = MapInt2D.from_rows(rows, box_width=box_width, box_height=box_height)

    puzzle = solution.copy()
    for i in rng.sample(range(cells_count), cells_count - clues):
        puzzle.clear(i)

    return puzzle, solution


def run_backtracking_single_test(
    clues: int,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    show_boards: bool = False,
    max_steps: float = float("inf"),
) -> Dict[str, object]:
    """
    Generate one puzzle and solve it end-to-end with the backtracking engine.

    Args:
        clues: Number of given cells in the generated puzzle.
        seed: Seed for a fresh generator; ignored when rng is given.
        rng: Generator to draw the puzzle from.
        show_boards: If True, print the puzzle and the solver's final map.
        max_steps: Step budget passed to the solver.

    Returns:
        The solver's payload (without step history) augmented with "status",
        "clues" and "valid" (the final map satisfies every constraint).
    """
    rng = rng if rng is not None else random.Random(seed)
    puzzle, _ = generate_sudoku(clues, rng)
    original = puzzle.copy()

    solver = Backtracking(puzzle, record_steps=False, max_steps=max_steps)
    status, payload = solver.run()

    if show_boards:
        print(f"Puzzle with {clues} clues:")
        print(original.format_board())
        print()
        print("Solver map:")
        print(puzzle.format_board())
        print()
        print(f"Finished with status {status}.")

    if not isinstance(payload, dict):  # type: ignore[redundant-expr]
        raise TypeError(f"Expected solver payload to be dict, got {type(payload)}")

    out: Dict[str, object] = {k: v for k, v in payload.items() if k != "steps_history"}
    out["status"] = status
    out["clues"] = clues
    out["valid"] = puzzle.is_solved()
    return out


def run_backtracking_many_tests(
    clues: int,
    runs: int,
    *,
    seed: int = 0,
    max_steps: float = float("inf"),
) -> Dict[str, float]:
    """
    Solve many generated puzzles and return averaged solver metrics plus solve rate.

    Args:
        clues: Number of given cells per puzzle.
        runs: Number of independent puzzles.
        seed: Seed of the generator shared by all runs.
        max_steps: Step budget passed to every solver.

    Returns:
        Averages of the numeric payload metrics (prefixed with "avg_"), plus:
        - solve_rate
        - unsolvable_rate
        - budget_exhausted_rate
        - backtracks_per_assignment
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    required_keys = {
        "steps_count",
        "assignments_count",
        "backtracks_count",
        "max_stack_depth",
    }

    rng = random.Random(seed)
    sums: Dict[str, float] = defaultdict(float)
    outcomes = {1: 0, -1: 0, 0: 0}

    for _ in range(runs):
        result = run_backtracking_single_test(clues, rng=rng, max_steps=max_steps)
        status = result["status"]
        if status not in outcomes:
            raise RuntimeError(f"Unexpected solver status: {status}")
        outcomes[status] += 1  # type: ignore[index]

        missing = required_keys - set(result.keys())
        if missing:
            raise KeyError(f"Missing payload keys: {sorted(missing)}")

        for k in required_keys:
            sums[f"avg_{k}"] += float(result[k])  # type: ignore[arg-type]

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["solve_rate"] = outcomes[1] / runs
    out["unsolvable_rate"] = outcomes[-1] / runs
    out["budget_exhausted_rate"] = outcomes[0] / runs
    out["backtracks_per_assignment"] = (
        sums["avg_backtracks_count"] / sums["avg_assignments_count"]
        if sums["avg_assignments_count"] > 0
        else 0.0
    )
    return out


def run_backtracking_difficulty_analysis(
    runs: int,
    *,
    clue_levels: Sequence[int] = (45, 35, 28),
    seed: int = 0,
    max_steps: float = float("inf"),
    show_plots: bool = True,
) -> Dict[int, Dict[str, float]]:
    """
    Benchmark the backtracking engine across clue counts and plot summaries.

    Returns:
        Mapping from clue count to the statistics of run_backtracking_many_tests().
    """
    results: Dict[int, Dict[str, float]] = {}
    for clues in clue_levels:
        results[clues] = run_backtracking_many_tests(
            clues, runs, seed=seed, max_steps=max_steps
        )

    if not show_plots:
        return results

    labels = [f"{c} clues" for c in clue_levels]
    x = np.arange(len(labels))
    bar_w = 0.4

    # 1) Work done per puzzle
    assignments = np.array([results[c]["avg_assignments_count"] for c in clue_levels])
    backtracks = np.array([results[c]["avg_backtracks_count"] for c in clue_levels])

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, assignments, width=bar_w, label="assignments")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, backtracks, width=bar_w, label="backtracks")  # type: ignore[misc]
    plt.xticks(x, labels)  # type: ignore[misc]
    plt.yscale("log")  # type: ignore[misc]
    plt.ylabel("Average count (log scale)")  # type: ignore[misc]
    plt.title("Backtracking work per puzzle")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Solve rate
    solve_rates = [results[c]["solve_rate"] for c in clue_levels]

    plt.figure()  # type: ignore[misc]
    plt.bar(x, solve_rates)  # type: ignore[misc]
    plt.xticks(x, labels)  # type: ignore[misc]
    plt.ylabel("Solve rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Solve rate by clue count")  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return results


# -----------------------------------------------------------------------------
# Adversarial search benchmarks
# -----------------------------------------------------------------------------


def compare_search_algorithms(
    grid: Grid,
    player: str,
    maximizer: str = Grid.x,
    minimizer: str = Grid.o,
) -> Dict[str, object]:
    """
    Search one position with both algorithms and compare the work done.

    Returns:
        Dict with root scores, best spots, evaluated node counts (expanded plus
        terminal nodes) of each algorithm, pruned branch count and whether the
        two root scores agree.
    """
    full = AdversarialSearch(maximizer, minimizer, algorithm="minimax")
    pruning = AdversarialSearch(maximizer, minimizer, algorithm="alpha_beta")

    full_root = full.search(grid, player)
    pruned_root = pruning.search(grid, player)

    full_nodes = full.expanded_nodes_count + full.terminal_nodes_count
    pruned_nodes = pruning.expanded_nodes_count + pruning.terminal_nodes_count

    full_best = full_root.best()
    pruned_best = pruned_root.best()

    return {
        "minimax_score": full_root.score,
        "alpha_beta_score": pruned_root.score,
        "scores_agree": full_root.score == pruned_root.score,
        "minimax_best_spot": full_best.spot_index if full_best else -1,
        "alpha_beta_best_spot": pruned_best.spot_index if pruned_best else -1,
        "minimax_nodes": full_nodes,
        "alpha_beta_nodes": pruned_nodes,
        "pruned_branches_count": pruning.pruned_branches_count,
        "nodes_saved_frac": 1.0 - pruned_nodes / full_nodes if full_nodes else 0.0,
    }


def enumerate_reachable_states(
    grid: Optional[Grid] = None,
    first: str = Grid.x,
    second: str = Grid.o,
) -> List[Tuple[Grid, str]]:
    """
    List every non-terminal position reachable by alternating play from grid.

    Returns:
        (state, player_to_move) pairs in breadth-first order, starting position included.
    """
    start = grid if grid is not None else Grid()
    filled = len(start) - len(start.empty_indices())
    to_move = first if filled % 2 == 0 else second

    states: List[Tuple[Grid, str]] = []
    seen: Set[Grid] = {start}
    frontier: Deque[Tuple[Grid, str]] = deque([(start, to_move)])

    while frontier:
        state, player = frontier.popleft()
        if state.winning(first) or state.winning(second) or not state.empty_indices():
            continue
        states.append((state, player))

        opponent = second if player == first else first
        for spot in state.empty_indices():
            nxt = state.set(spot, player)
            if nxt in seen:
                continue
            seen.add(nxt)
            frontier.append((nxt, opponent))

    return states


def run_adversarial_analysis(
    *,
    min_filled: int = 0,
    max_states: Optional[int] = None,
    maximizer: str = Grid.x,
    minimizer: str = Grid.o,
    show_plots: bool = True,
) -> Dict[int, Dict[str, float]]:
    """
    Compare minimax and alpha-beta over reachable tic-tac-toe positions.

    Args:
        min_filled: Skip positions with fewer filled squares (the empty board
            alone expands over half a million nodes with plain minimax).
        max_states: Optional cap on the number of positions analysed.
        maximizer: Maximizing player.
        minimizer: Minimizing player.
        show_plots: If True, plot average node counts per filled-square count.

    Returns:
        Mapping from filled-square count to:
        - states
        - avg_minimax_nodes
        - avg_alpha_beta_nodes
        - avg_nodes_saved_frac
        - scores_agree_rate
    """
    sums: Dict[int, Dict[str, float]] = defaultdict(lambda: defaultdict(float))

    analysed = 0
    for state, player in enumerate_reachable_states(first=maximizer, second=minimizer):
        filled = len(state) - len(state.empty_indices())
        if filled < min_filled:
            continue
        if max_states is not None and analysed >= max_states:
            break
        analysed += 1

        cmp = compare_search_algorithms(state, player, maximizer, minimizer)
        bucket = sums[filled]
        bucket["states"] += 1
        bucket["minimax_nodes"] += float(cmp["minimax_nodes"])  # type: ignore[arg-type]
        bucket["alpha_beta_nodes"] += float(cmp["alpha_beta_nodes"])  # type: ignore[arg-type]
        bucket["nodes_saved_frac"] += float(cmp["nodes_saved_frac"])  # type: ignore[arg-type]
        bucket["scores_agree"] += 1.0 if cmp["scores_agree"] else 0.0

    results: Dict[int, Dict[str, float]] = {}
    for filled in sorted(sums):
        bucket = sums[filled]
        n = bucket["states"]
        results[filled] = {
            "states": n,
            "avg_minimax_nodes": bucket["minimax_nodes"] / n,
            "avg_alpha_beta_nodes": bucket["alpha_beta_nodes"] / n,
            "avg_nodes_saved_frac": bucket["nodes_saved_frac"] / n,
            "scores_agree_rate": bucket["scores_agree"] / n,
        }

    if not show_plots or not results:
        return results

    levels = list(results.keys())
    x = np.arange(len(levels))
    bar_w = 0.4

    full_nodes = np.array([results[f]["avg_minimax_nodes"] for f in levels])
    pruned_nodes = np.array([results[f]["avg_alpha_beta_nodes"] for f in levels])

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, full_nodes, width=bar_w, label="minimax")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, pruned_nodes, width=bar_w, label="alpha-beta")  # type: ignore[misc]
    plt.xticks(x, [str(f) for f in levels])  # type: ignore[misc]
    plt.yscale("log")  # type: ignore[misc]
    plt.xlabel("Filled squares")  # type: ignore[misc]
    plt.ylabel("Average evaluated nodes (log scale)")  # type: ignore[misc]
    plt.title("Search effort by game stage")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return results
