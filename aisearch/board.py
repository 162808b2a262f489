"""Board and map abstractions shared by the search engines, plus a terminal game."""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from .utils import get_sudoku_units, get_win_lines


class CellMap(Protocol):
    """Anything a Location can address: integer cells read, written and cleared by index."""

    def get(self, i: int) -> int:
        ...

    def set(self, i: int, value: int) -> None:
        ...

    def clear(self, i: int) -> None:
        ...


class Location:
    """
    One addressable cell of an integer map: a reference to the map plus a linear index.

    A location whose map is None is the not-found sentinel; strategies return it
    when no unassigned cell remains.
    """

    __slots__ = ("map", "index")

    def __init__(self, map_: Optional[CellMap] = None, index: int = 0) -> None:
        self.map = map_
        self.index = index

    def not_found(self) -> bool:
        """Return True for the sentinel location."""
        return self.map is None

    def get_index(self) -> int:
        return self.index

    def get_value(self) -> int:
        if self.map is None:
            raise ValueError("Cannot read the value of a not-found location.")
        return self.map.get(self.index)

    def set_value(self, value: int) -> None:
        if self.map is None:
            raise ValueError("Cannot assign a value to a not-found location.")
        self.map.set(self.index, value)

    def clear_value(self) -> None:
        if self.map is None:
            raise ValueError("Cannot clear a not-found location.")
        self.map.clear(self.index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.map is other.map and self.index == other.index

    def __hash__(self) -> int:
        return hash((id(self.map), self.index))

    def __repr__(self) -> str:
        if self.map is None:
            return "Location(NOT_FOUND)"
        return f"Location(index={self.index})"


NOT_FOUND = Location(None, 0)


class _IntMap(ABC):
    """Fixed-capacity flat array of integer cells; 0 marks an empty cell."""

    def __init__(self, cells: Sequence[int], max_value: int) -> None:
        if max_value <= 0:
            raise ValueError("max_value must be positive.")

        values: List[int] = [int(v) for v in cells]
        for v in values:
            if v < 0 or v > max_value:
                raise ValueError(
                    f"Cell values must lie in [0, {max_value}], got {v}."
                )

        self.cells: List[int] = values
        self.size: int = len(values)
        self.max_value: int = max_value

    def __len__(self) -> int:
        return self.size

    def _check_index(self, i: int) -> None:
        if i < 0 or i >= self.size:
            raise IndexError(f"Cell index {i} is outside the map.")

    def get(self, i: int) -> int:
        self._check_index(i)
        return self.cells[i]

    def set(self, i: int, value: int) -> None:
        self._check_index(i)
        if value < 0 or value > self.max_value:
            raise ValueError(f"Cell values must lie in [0, {self.max_value}].")
        self.cells[i] = value

    def clear(self, i: int) -> None:
        self._check_index(i)
        self.cells[i] = 0

    def empty_indices(self) -> List[int]:
        return [i for i, v in enumerate(self.cells) if v == 0]

    def snapshot(self) -> Tuple[int, ...]:
        return tuple(self.cells)

    def is_complete(self) -> bool:
        """Return True when no cell is empty."""
        return all(v != 0 for v in self.cells)

    @abstractmethod
    def constraint_units(self) -> Iterable[Sequence[int]]:
        """Index groups whose non-zero values must be pairwise distinct."""

    def is_valid(self) -> bool:
        """Return True when no constraint unit holds the same non-zero value twice."""
        for unit in self.constraint_units():
            seen = set()
            for i in unit:
                v = self.cells[i]
                if v == 0:
                    continue
                if v in seen:
                    return False
                seen.add(v)
        return True

    def is_solved(self) -> bool:
        return self.is_complete() and self.is_valid()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _IntMap):
            return NotImplemented
        return type(self) is type(other) and self.cells == other.cells


class MapInt1D(_IntMap):
    """One-dimensional Sudoku map: every non-zero value must be unique in the whole array."""

    def __init__(self, cells: Sequence[int], max_value: int = 9) -> None:
        """
        Args:
            cells: Initial cell values, 0 for empty.
            max_value: Largest legal value; candidates are drawn from 1..max_value.

        Raises:
            ValueError: If a cell value lies outside [0, max_value].
        """
        super().__init__(cells, max_value)

    def constraint_units(self) -> Iterable[Sequence[int]]:
        return (range(self.size),)

    def copy(self) -> "MapInt1D":
        return MapInt1D(self.cells, self.max_value)

    def format_board(self) -> str:
        return "[" + " ".join(str(v) if v else "." for v in self.cells) + "]"

    def __repr__(self) -> str:
        return f"MapInt1D({self.cells!r}, max_value={self.max_value})"


class MapInt2D(_IntMap):
    """Row-major two-dimensional Sudoku map partitioned into fixed-size boxes."""

    def __init__(
        self,
        cells: Sequence[int],
        width: int = 9,
        height: int = 9,
        box_width: int = 3,
        box_height: int = 3,
        max_value: Optional[int] = None,
    ) -> None:
        """
        Args:
            cells: Row-major cell values, 0 for empty. Length must be width * height.
            width: Number of columns.
            height: Number of rows.
            box_width: Width of one box; must divide width.
            box_height: Height of one box; must divide height.
            max_value: Largest legal value; defaults to width.

        Raises:
            ValueError: If the cell count, dimensions or values are invalid.
        """
        if len(cells) != width * height:
            raise ValueError(
                f"Expected {width * height} cells for a {width}x{height} map, "
                f"got {len(cells)}."
            )
        super().__init__(cells, width if max_value is None else max_value)

        self.width: int = width
        self.height: int = height
        self.box_width: int = box_width
        self.box_height: int = box_height

        # index -> (row, column, box) index tuples
        self._units = get_sudoku_units(width, height, box_width, box_height)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], **kwargs: int) -> "MapInt2D":
        """Build a map from nested rows; the width and height are taken from the rows."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        if any(len(r) != width for r in rows):
            raise ValueError("All rows must have the same length.")
        cells = [v for r in rows for v in r]
        return cls(cells, width=width, height=height, **kwargs)

    def rows(self) -> List[List[int]]:
        w = self.width
        return [self.cells[r * w:(r + 1) * w] for r in range(self.height)]

    def row_col(self, i: int) -> Tuple[int, int]:
        self._check_index(i)
        return i // self.width, i % self.width

    def units_of(self, i: int) -> Tuple[Tuple[int, ...], Tuple[int, ...], Tuple[int, ...]]:
        """Return the row, column and box index tuples containing cell i."""
        self._check_index(i)
        return self._units[i]

    def constraint_units(self) -> Iterable[Sequence[int]]:
        w, h = self.width, self.height
        for r in range(h):
            yield range(r * w, (r + 1) * w)
        for c in range(w):
            yield range(c, w * h, w)
        seen_boxes = set()
        for _, _, box in self._units.values():
            if box[0] not in seen_boxes:
                seen_boxes.add(box[0])
                yield box

    def copy(self) -> "MapInt2D":
        return MapInt2D(
            self.cells,
            width=self.width,
            height=self.height,
            box_width=self.box_width,
            box_height=self.box_height,
            max_value=self.max_value,
        )

    def format_board(self) -> str:
        """
        Render the map as a multi-line string with box separators.

        Empty cells are shown as '.'.
        """
        pad = len(str(self.max_value))
        out: List[str] = []
        for r in range(self.height):
            cells: List[str] = []
            for c in range(self.width):
                if c and c % self.box_width == 0:
                    cells.append("|")
                v = self.cells[r * self.width + c]
                cells.append((str(v) if v else ".").rjust(pad))
            line = " ".join(cells)
            if r and r % self.box_height == 0:
                out.append("".join("+" if ch == "|" else "-" for ch in line))
            out.append(line)
        return "\n".join(out)

    def __repr__(self) -> str:
        return f"MapInt2D(width={self.width}, height={self.height}, cells={self.cells!r})"


class Grid:
    """
    Immutable square tic-tac-toe board.

    Moves never mutate a grid: set() and clear() return a new grid, so game-tree
    branches can share their parent state safely.
    """

    x = "x"
    o = "o"
    _ = " "

    __slots__ = ("size", "squares", "_lines")

    def __init__(self, squares: Optional[Iterable[str]] = None, size: int = 3) -> None:
        """
        Args:
            squares: Optional row-major squares, each 'x', 'o' or ' '. Defaults to an empty board.
            size: Board side length.

        Raises:
            ValueError: If the square count or a square value is invalid.
        """
        if size <= 0:
            raise ValueError("size must be positive.")

        if squares is None:
            values: Tuple[str, ...] = (self._,) * (size * size)
        else:
            values = tuple(squares)
            if len(values) != size * size:
                raise ValueError(f"Expected {size * size} squares, got {len(values)}.")
            for v in values:
                if v not in (self.x, self.o, self._):
                    raise ValueError(f"Invalid square value {v!r}.")

        self.size: int = size
        self.squares: Tuple[str, ...] = values
        self._lines = get_win_lines(size)

    @classmethod
    def from_string(cls, text: str, size: int = 3) -> "Grid":
        """
        Build a grid from a compact string such as "xo.x.o...".

        '.', '_' and ' ' are read as empty squares; '|', '/' and newlines are ignored.
        """
        squares: List[str] = []
        for ch in text:
            if ch in "|/\n":
                continue
            squares.append(cls._ if ch in "._ " else ch.lower())
        return cls(squares, size=size)

    def __len__(self) -> int:
        return len(self.squares)

    def get(self, i: int) -> str:
        return self.squares[i]

    def set(self, i: int, c: str) -> "Grid":
        """
        Return a copy of the grid with square i holding c.

        Raises:
            IndexError: If i is not a square of the board.
            ValueError: If c is not a valid square value, or a mark is placed on an occupied square.
        """
        if i < 0 or i >= len(self.squares):
            raise IndexError(f"Square index {i} is outside the board.")
        if c not in (self.x, self.o, self._):
            raise ValueError(f"Invalid square value {c!r}.")
        if c != self._ and self.squares[i] != self._:
            raise ValueError(f"Square {i} is already taken.")
        squares = list(self.squares)
        squares[i] = c
        return self._copy_with(tuple(squares))

    def _copy_with(self, squares: Tuple[str, ...]) -> "Grid":
        # Squares come from an already validated grid
        g = Grid.__new__(Grid)
        g.size = self.size
        g.squares = squares
        g._lines = self._lines
        return g

    def clear(self, i: int) -> "Grid":
        """Return a copy of the grid with square i empty."""
        return self.set(i, self._)

    def empty_indices(self) -> List[int]:
        return [i for i, s in enumerate(self.squares) if s == self._]

    def winning(self, player: str) -> bool:
        """Return True if player holds a complete row, column or diagonal."""
        squares = self.squares
        for line in self._lines:
            if all(squares[i] == player for i in line):
                return True
        return False

    def winner(self) -> Optional[str]:
        for player in (self.x, self.o):
            if self.winning(player):
                return player
        return None

    def is_full(self) -> bool:
        return self._ not in self.squares

    def is_over(self) -> bool:
        return self.is_full() or self.winner() is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.size == other.size and self.squares == other.squares

    def __hash__(self) -> int:
        return hash((self.size, self.squares))

    def __str__(self) -> str:
        n = self.size
        out: List[str] = []
        for row in range(n):
            out.append("[" if row == 0 else " ")
            for col in range(n):
                out.append(self.squares[row * n + col])
                if not (row == n - 1 and col == n - 1):
                    out.append(",")
            out.append("\n" if row < n - 1 else "]")
        return "".join(out)

    def __repr__(self) -> str:
        return f"Grid({''.join(s if s != self._ else '.' for s in self.squares)!r})"

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_INDEX = "\033[96m"
    _ANSI_X = "\033[91m"
    _ANSI_O = "\033[94m"

    def format_board(self, color: bool = True, show_indices: bool = True) -> str:
        """
        Render the grid as a multi-line string for terminal display.

        Args:
            color: If True, wrap marks and indices in ANSI colors.
            show_indices: If True, label empty squares with their board index.
        """
        n = self.size
        width = len(str(n * n - 1))

        def cell_str(i: int) -> str:
            v = self.squares[i]
            if v == self._:
                if not show_indices:
                    return " " * width
                text = str(i).rjust(width)
                return f"{self._ANSI_INDEX}{text}{self._ANSI_RESET}" if color else text
            text = v.rjust(width)
            if not color:
                return text
            ansi = self._ANSI_X if v == self.x else self._ANSI_O
            return f"{ansi}{text}{self._ANSI_RESET}"

        sep = "+".join(["-" * (width + 2)] * n)
        out: List[str] = []
        for row in range(n):
            if row:
                out.append(sep)
            out.append("|".join(f" {cell_str(row * n + col)} " for col in range(n)))
        return "\n".join(out)

    def print_board(self) -> None:
        print(self.format_board())


def play_cli(
    grid: Optional[Grid] = None,
    human: str = Grid.x,
    algorithm: str = "alpha_beta",
) -> Optional[str]:
    """
    Run a simple terminal UI for playing tic-tac-toe against the search engine.

    'x' always moves first.

    Args:
        grid: Starting position; defaults to an empty 3x3 board.
        human: The mark played by the human ('x' or 'o').
        algorithm: Engine algorithm ("minimax" or "alpha_beta").

    Returns:
        The winning mark, or None for a draw or when the human quits.
    """
    from .adversarial import AdversarialSearch

    if human not in (Grid.x, Grid.o):
        raise ValueError('human must be "x" or "o".')

    engine_mark = Grid.o if human == Grid.x else Grid.x
    engine = AdversarialSearch(
        maximizer=engine_mark, minimizer=human, algorithm=algorithm
    )
    grid = grid if grid is not None else Grid()

    print("Tic-tac-toe CLI (enter a square index). Type 'q' to quit.\n")
    print(grid.format_board())

    to_move = Grid.x if len(grid.empty_indices()) % 2 == len(grid) % 2 else Grid.o

    while not grid.is_over():
        if to_move == human:
            s = input("\nYour move: ").strip()
            if s.lower() in {"q", "quit", "exit"}:
                print("Quit.")
                return None
            try:
                spot = int(s)
            except ValueError:
                print("Invalid input. Enter the index of an empty square.")
                continue
            if spot not in grid.empty_indices():
                print("That square is not available.")
                continue
        else:
            root = engine.search(grid, engine_mark)
            spot = root.at(root.best_move).spot_index
            print(f"\nEngine plays {spot} (expected outcome {root.score:+d}).")

        grid = grid.set(spot, to_move)
        print()
        print(grid.format_board())
        to_move = human if to_move == engine_mark else engine_mark

    winner = grid.winner()
    if winner == human:
        print("\nYou won!")
    elif winner == engine_mark:
        print("\nThe engine won.")
    else:
        print("\nDraw.")
    return winner
