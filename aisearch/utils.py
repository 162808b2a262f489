"""Utility functions for the search engines."""

from typing import Dict, List, Tuple

# Module-level cache: (width, height, box_width, box_height) -> {index: (row, col, box), ...}
_SUDOKU_UNITS_CACHE: Dict[
    Tuple[int, int, int, int],
    Dict[int, Tuple[Tuple[int, ...], Tuple[int, ...], Tuple[int, ...]]]
] = {}

# Module-level cache: size -> (line, line, ...)
_WIN_LINES_CACHE: Dict[int, Tuple[Tuple[int, ...], ...]] = {}


def get_sudoku_units(
    width: int, height: int, box_width: int, box_height: int
) -> Dict[int, Tuple[Tuple[int, ...], Tuple[int, ...], Tuple[int, ...]]]:
    """
    Precompute and cache the constraint units of every cell in a row-major grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.
        box_width: Width of one sub-block. Must divide width.
        box_height: Height of one sub-block. Must divide height.

    Returns:
        Mapping from each linear index to a (row, column, box) triple, where
        each element is the tuple of linear indices sharing that unit with the
        cell (the cell itself included).

    Raises:
        ValueError: If a dimension is non-positive or the boxes do not tile the grid.
    """
    if width <= 0 or height <= 0 or box_width <= 0 or box_height <= 0:
        raise ValueError("Grid and box dimensions must be positive.")
    if width % box_width or height % box_height:
        raise ValueError("Box dimensions must evenly divide the grid dimensions.")

    key = (width, height, box_width, box_height)
    cached = _SUDOKU_UNITS_CACHE.get(key)
    if cached is not None:
        return cached

    rows: List[Tuple[int, ...]] = [
        tuple(r * width + c for c in range(width)) for r in range(height)
    ]
    cols: List[Tuple[int, ...]] = [
        tuple(r * width + c for r in range(height)) for c in range(width)
    ]

    units: Dict[int, Tuple[Tuple[int, ...], Tuple[int, ...], Tuple[int, ...]]] = {}
    for r in range(height):
        for c in range(width):
            br, bc = (r // box_height) * box_height, (c // box_width) * box_width
            box = tuple(
                (br + dr) * width + (bc + dc)
                for dr in range(box_height)
                for dc in range(box_width)
            )
            units[r * width + c] = (rows[r], cols[c], box)

    _SUDOKU_UNITS_CACHE[key] = units
    return units


def get_win_lines(size: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Precompute and cache the winning lines of a square tic-tac-toe style board.

    Lines are ordered rows first, then columns, then the main diagonal and the
    anti-diagonal.

    Raises:
        ValueError: If size is non-positive.
    """
    if size <= 0:
        raise ValueError("size must be positive.")

    cached = _WIN_LINES_CACHE.get(size)
    if cached is not None:
        return cached

    lines: List[Tuple[int, ...]] = []
    for row in range(size):
        lines.append(tuple(row * size + col for col in range(size)))
    for col in range(size):
        lines.append(tuple(row * size + col for row in range(size)))
    lines.append(tuple(i * size + i for i in range(size)))
    lines.append(tuple(i * size + (size - 1 - i) for i in range(size)))

    result = tuple(lines)
    _WIN_LINES_CACHE[size] = result
    return result
