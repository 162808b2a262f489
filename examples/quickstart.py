"""
Quickstart example for the AI search algorithms.

This script demonstrates basic usage of both search engines.
"""

from aisearch import (
    AdversarialSearch,
    Backtracking,
    Grid,
    MapInt2D,
    compare_search_algorithms,
    format_move_tree,
    run_backtracking_many_tests,
    serialize_move,
)


def main():
    print("=" * 60)
    print("AI Search Algorithms - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a classic Sudoku
    print("\n1. Solving a classic 9x9 Sudoku (30 clues)...")
    print("-" * 60)

    sudoku = MapInt2D.from_rows([
        [5, 3, 0, 0, 7, 0, 0, 0, 0],
        [6, 0, 0, 1, 9, 5, 0, 0, 0],
        [0, 9, 8, 0, 0, 0, 0, 6, 0],
        [8, 0, 0, 0, 6, 0, 0, 0, 3],
        [4, 0, 0, 8, 0, 3, 0, 0, 1],
        [7, 0, 0, 0, 2, 0, 0, 0, 6],
        [0, 6, 0, 0, 0, 0, 2, 8, 0],
        [0, 0, 0, 4, 1, 9, 0, 0, 5],
        [0, 0, 0, 0, 8, 0, 0, 7, 9],
    ])

    solver = Backtracking(sudoku, record_steps=False)
    status, payload = solver.run()

    result = "SOLVED" if status == 1 else "NO SOLUTION"
    print(f"Result: {result}")
    print(f"Steps: {payload['steps_count']}")
    print(f"Assignments: {payload['assignments_count']}")
    print(f"Backtracks: {payload['backtracks_count']}")
    print()
    print(sudoku.format_board())

    # Example 2: Generated puzzles
    print("\n2. Solving 20 generated puzzles per clue level...")
    print("-" * 60)

    for clues in (45, 35, 28):
        stats = run_backtracking_many_tests(clues, 20, seed=0)
        print(
            f"{clues} clues: solve rate {stats['solve_rate']*100:5.1f}%, "
            f"avg assignments {stats['avg_assignments_count']:9.1f}, "
            f"avg backtracks {stats['avg_backtracks_count']:9.1f}"
        )

    # Example 3: Best move in a tic-tac-toe position
    print("\n3. Searching a tic-tac-toe position (o to move)...")
    print("-" * 60)

    grid = Grid.from_string("xx..o....")
    print(grid.format_board(color=False))

    engine = AdversarialSearch(maximizer=Grid.o, minimizer=Grid.x, algorithm="alpha_beta")
    root = engine.search(grid, Grid.o)
    print(f"\no to move: expected outcome {root.score:+d}, best spot {root.best().spot_index}")
    print(f"Principal variation: {root.principal_variation()}")
    print()
    print(format_move_tree(root, max_depth=1))

    # Example 4: Minimax vs alpha-beta
    print("\n4. Comparing minimax with alpha-beta pruning...")
    print("-" * 60)

    cmp = compare_search_algorithms(Grid.from_string("x........"), Grid.o)
    print(f"Scores agree: {cmp['scores_agree']}")
    print(f"Minimax nodes: {cmp['minimax_nodes']}")
    print(f"Alpha-beta nodes: {cmp['alpha_beta_nodes']}")
    print(f"Nodes saved: {cmp['nodes_saved_frac']*100:.1f}%")

    # Example 5: Tree encoding
    print("\n5. Encoding an endgame tree as text...")
    print("-" * 60)
    endgame = AdversarialSearch(algorithm="minimax").search(
        Grid.from_string("xoxoxo..."), Grid.x
    )
    print(serialize_move(endgame))

    print("\n" + "=" * 60)
    print("Done! Try `streamlit run app/demo.py` for the interactive demo.")
    print("=" * 60)


if __name__ == "__main__":
    main()
