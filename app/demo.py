"""
AI Search Algorithms - Interactive Demo

Run with: streamlit run app/demo.py
"""

import random
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Any, Dict, List, Optional, Sequence, Tuple

from aisearch import (
    AdversarialSearch,
    Backtracking,
    Grid,
    MapInt2D,
    format_move_tree,
    generate_sudoku,
    tree_metrics,
)

PRESET_PUZZLES: Dict[str, List[List[int]]] = {
    "Classic (30 clues)": [
        [5, 3, 0, 0, 7, 0, 0, 0, 0],
        [6, 0, 0, 1, 9, 5, 0, 0, 0],
        [0, 9, 8, 0, 0, 0, 0, 6, 0],
        [8, 0, 0, 0, 6, 0, 0, 0, 3],
        [4, 0, 0, 8, 0, 3, 0, 0, 1],
        [7, 0, 0, 0, 2, 0, 0, 0, 6],
        [0, 6, 0, 0, 0, 0, 2, 8, 0],
        [0, 0, 0, 4, 1, 9, 0, 0, 5],
        [0, 0, 0, 0, 8, 0, 0, 7, 9],
    ],
    "Unsolvable 4x4": [
        [1, 0, 0, 0],
        [4, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 2, 3],
    ],
}


def build_map(rows: List[List[int]]) -> MapInt2D:
    size = len(rows)
    box = 3 if size == 9 else 2
    return MapInt2D.from_rows(rows, box_width=box, box_height=box)


def render_sudoku_html(
    cells: Sequence[int],
    givens: Sequence[int],
    width: int,
    box_width: int,
    box_height: int,
    highlight_index: Optional[int] = None,
) -> str:
    """Render a Sudoku map (or a replay snapshot of one) as an HTML table."""
    cell_size = 34 if width <= 4 else 30
    height = len(cells) // width

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for r in range(height):
        html += "<tr>"
        for c in range(width):
            i = r * width + c
            value = cells[i]

            if givens[i]:
                bg = "#e8e8e8"
                text_color = "#000000"
            elif value:
                bg = "#ffffff"
                text_color = "#0000ff"
            else:
                bg = "#ffffff"
                text_color = "#666666"

            if highlight_index is not None and i == highlight_index:
                bg = "#ffe08a"

            # Thick borders on box edges
            top = "3px" if r % box_height == 0 else "1px"
            left = "3px" if c % box_width == 0 else "1px"
            bottom = "3px" if r == height - 1 else "1px"
            right = "3px" if c == width - 1 else "1px"
            display = str(value) if value else "&nbsp;"

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border-top: {top} solid #333; border-left: {left} solid #333;
                border-bottom: {bottom} solid #333; border-right: {right} solid #333;
                color: {text_color};
                font-weight: bold;
                font-size: 16px;
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def render_grid_html(grid: Grid, highlight_spot: Optional[int] = None) -> str:
    """Render a tic-tac-toe grid as an HTML table."""
    colors = {Grid.x: "#d62728", Grid.o: "#1f77b4"}

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'
    for r in range(grid.size):
        html += "<tr>"
        for c in range(grid.size):
            i = r * grid.size + c
            mark = grid.get(i)
            if mark == Grid._:
                display = f'<span style="color: #bbbbbb; font-size: 14px;">{i}</span>'
            else:
                display = mark.upper()
            border = "3px solid #ff0000" if i == highlight_spot else "1px solid #999"
            html += f'''<td style="
                width: 64px; height: 64px;
                text-align: center;
                border: {border};
                color: {colors.get(mark, "#000000")};
                font-weight: bold;
                font-size: 34px;
            ">{display}</td>'''
        html += "</tr>"
    html += "</table></div>"
    return html


# -----------------------------------------------------------------------------
# Sudoku tab
# -----------------------------------------------------------------------------


def sudoku_tab() -> None:
    st.subheader("Backtracking Sudoku Solver")

    source = st.selectbox(
        "Puzzle",
        list(PRESET_PUZZLES.keys()) + ["Generated"],
        key="sudoku_source",
    )

    if source == "Generated":
        clues = st.slider("Clues", 17, 80, 35, key="sudoku_clues")
        seed = st.number_input("Seed", min_value=0, value=0, step=1, key="sudoku_seed")
        settings: Tuple[Any, ...] = (source, clues, int(seed))
    else:
        settings = (source,)

    max_steps_choice = st.selectbox(
        "Step budget",
        [1000, 10000, 100000, "Unlimited"],
        index=3,
        key="sudoku_budget",
    )
    max_steps: float = (
        float("inf") if max_steps_choice == "Unlimited" else float(max_steps_choice)
    )

    # Initialize session state
    if st.session_state.get("sudoku_settings") != settings:
        if source == "Generated":
            puzzle, _ = generate_sudoku(clues, random.Random(int(seed)))
        else:
            puzzle = build_map(PRESET_PUZZLES[source])
        st.session_state.sudoku_settings = settings
        st.session_state.sudoku_puzzle = puzzle
        st.session_state.sudoku_result = None
        st.session_state.sudoku_step = 0

    puzzle: MapInt2D = st.session_state.sudoku_puzzle
    givens = list(puzzle.cells)

    if st.button("Solve", type="primary", key="sudoku_solve"):
        work = puzzle.copy()
        solver = Backtracking(work, max_steps=max_steps)
        status, payload = solver.run()
        st.session_state.sudoku_result = (status, payload, list(work.cells))
        st.session_state.sudoku_step = max(len(payload["steps_history"]) - 1, 0)
        st.rerun()

    col1, col2 = st.columns([2, 1])
    result = st.session_state.sudoku_result

    with col1:
        if result is None:
            html = render_sudoku_html(
                givens, givens, puzzle.width, puzzle.box_width, puzzle.box_height
            )
            st.markdown(html, unsafe_allow_html=True)
        else:
            status, payload, final_cells = result
            history = payload["steps_history"]

            replay = st.checkbox("Step-by-Step Replay Mode", key="sudoku_replay")
            if replay and history:
                total_steps = len(history)
                step_display = st.slider(
                    "Step", 1, total_steps, st.session_state.sudoku_step + 1
                )
                st.session_state.sudoku_step = step_display - 1
                step = history[st.session_state.sudoku_step]
                r, c = puzzle.row_col(step["index"])
                if step["action"] == "assign":
                    st.info(
                        f"**Step {step_display}/{total_steps}**: place {step['value']} "
                        f"at ({r}, {c}), depth {step['depth']}"
                    )
                else:
                    st.warning(
                        f"**Step {step_display}/{total_steps}**: backtrack from ({r}, {c}), "
                        f"depth {step['depth']}"
                    )
                cells = step["cells_snapshot"]
                highlight: Optional[int] = step["index"]
            else:
                cells = final_cells
                highlight = None

            html = render_sudoku_html(
                cells,
                givens,
                puzzle.width,
                puzzle.box_width,
                puzzle.box_height,
                highlight_index=highlight,
            )
            st.markdown(html, unsafe_allow_html=True)

            if status == 1:
                st.success("Solved! Every constraint unit is satisfied.")
            elif status == -1:
                st.error("No solution exists; the givens were restored.")
            else:
                st.warning("Step budget exhausted before a solution was found.")

    with col2:
        st.markdown("**Solver Statistics**")
        if result is None:
            st.info("Run the solver to see statistics.")
        else:
            status, payload, _ = result
            labels = {1: "Solved", -1: "Unsolvable", 0: "Budget hit"}
            metrics: List[Tuple[str, Any]] = [
                ("Result", labels[status]),
                ("Steps", payload["steps_count"]),
                ("Assignments", payload["assignments_count"]),
                ("Backtracks", payload["backtracks_count"]),
                ("Max Stack Depth", payload["max_stack_depth"]),
            ]
            for label, value in metrics:
                st.metric(label, value)


# -----------------------------------------------------------------------------
# Tic-tac-toe tab
# -----------------------------------------------------------------------------


def reset_game() -> None:
    st.session_state.ttt_grid = Grid()
    st.session_state.ttt_last_root = None
    st.session_state.ttt_last_spot = None
    st.session_state.ttt_stats = None


def engine_move(engine: AdversarialSearch, engine_mark: str) -> None:
    grid: Grid = st.session_state.ttt_grid
    engine.reset_metrics()
    root = engine.search(grid, engine_mark)
    best = root.best()
    if best is None:
        return
    st.session_state.ttt_grid = grid.set(best.spot_index, engine_mark)
    st.session_state.ttt_last_root = root
    st.session_state.ttt_last_spot = best.spot_index
    st.session_state.ttt_stats = {**engine.get_metrics(), **tree_metrics(root)}


def tictactoe_tab() -> None:
    st.subheader("Minimax Tic-Tac-Toe")

    cfg1, cfg2 = st.columns(2)
    with cfg1:
        human = st.radio(
            "You play",
            [Grid.x, Grid.o],
            format_func=lambda m: f"{m.upper()} ({'first' if m == Grid.x else 'second'})",
            key="ttt_human",
        )
    with cfg2:
        algorithm = st.selectbox(
            "Engine algorithm",
            ["alpha_beta", "minimax"],
            format_func=lambda a: "Alpha-beta pruning" if a == "alpha_beta" else "Plain minimax",
            key="ttt_algorithm",
        )

    engine_mark = Grid.o if human == Grid.x else Grid.x
    engine = AdversarialSearch(maximizer=engine_mark, minimizer=human, algorithm=algorithm)

    if st.session_state.get("ttt_settings") != (human, algorithm):
        st.session_state.ttt_settings = (human, algorithm)
        reset_game()

    grid: Grid = st.session_state.ttt_grid
    filled = len(grid) - len(grid.empty_indices())
    to_move = Grid.x if filled % 2 == 0 else Grid.o

    if to_move == engine_mark and not grid.is_over():
        engine_move(engine, engine_mark)
        st.rerun()

    col1, col2 = st.columns([2, 1])

    with col1:
        st.markdown(
            render_grid_html(grid, st.session_state.ttt_last_spot), unsafe_allow_html=True
        )

        if grid.is_over():
            winner = grid.winner()
            if winner == human:
                st.success("You won!")
            elif winner == engine_mark:
                st.error("The engine won.")
            else:
                st.info("Draw.")
        else:
            spot = st.selectbox("Your move", grid.empty_indices(), key="ttt_spot")
            if st.button("Play", type="primary"):
                st.session_state.ttt_grid = grid.set(spot, human)
                st.session_state.ttt_last_spot = spot
                st.rerun()

        if st.button("New Game"):
            reset_game()
            st.rerun()

    with col2:
        st.markdown("**Last Engine Search**")
        root = st.session_state.ttt_last_root
        stats = st.session_state.ttt_stats
        if root is None or stats is None:
            st.info("The engine has not moved yet.")
        else:
            st.metric("Expected Outcome", f"{root.score:+d}")
            st.metric("Tree Nodes", stats["nodes"])
            st.metric("Expanded Nodes", stats["expanded_nodes_count"])
            st.metric("Pruned Branches", stats["pruned_branches_count"])
            st.text(f"Principal variation: {root.principal_variation()}")

    if st.session_state.ttt_last_root is not None:
        with st.expander("Game tree (top two plies)"):
            st.code(format_move_tree(st.session_state.ttt_last_root, max_depth=2))


def main():
    st.set_page_config(
        page_title="AI Search Algorithms",
        page_icon="🧩",
        layout="wide",
    )

    st.title("AI Search Algorithms")
    st.markdown("""
    Depth-first backtracking for constraint puzzles and minimax game-tree search
    with optional alpha-beta pruning.
    """)

    tab1, tab2 = st.tabs(["Sudoku", "Tic-Tac-Toe"])
    with tab1:
        sudoku_tab()
    with tab2:
        tictactoe_tab()


if __name__ == "__main__":
    main()
