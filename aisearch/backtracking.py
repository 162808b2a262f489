"""Generic backtracking constraint solver and its Sudoku strategies."""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from .board import NOT_FOUND, CellMap, Location, MapInt1D, MapInt2D

logger = logging.getLogger(__name__)


class NextLocation(Protocol):
    """Strategy returning the next unassigned location, or NOT_FOUND."""

    def __call__(self) -> Location:
        ...


class NextCandidate(Protocol):
    """
    Strategy proposing the next untried value for a location.

    Writes the proposed value into the map and returns it; on exhaustion the
    cell is cleared and 0 is returned.
    """

    def __call__(self, location: Location) -> int:
        ...


# -----------------------------------------------------------------------------
# Sudoku strategies
# -----------------------------------------------------------------------------


class NextLocationSudoku1D:
    """Return the first empty cell of a one-dimensional Sudoku map."""

    def __init__(self, sudoku_map: MapInt1D) -> None:
        self.map = sudoku_map

    def __call__(self) -> Location:
        for i, v in enumerate(self.map.cells):
            if v == 0:
                return Location(self.map, i)
        return NOT_FOUND


class NextLocationSudoku2D:
    """Return the first empty cell of a two-dimensional Sudoku map in row-major order."""

    def __init__(self, sudoku_map: MapInt2D) -> None:
        self.map = sudoku_map

    def __call__(self) -> Location:
        m = self.map
        for row in range(m.height):
            for col in range(m.width):
                index = row * m.width + col
                if m.cells[index] == 0:
                    return Location(m, index)
        return NOT_FOUND


class NextCandidateSudoku1D:
    """Propose the next value absent from the whole one-dimensional map."""

    def __init__(self, sudoku_map: MapInt1D) -> None:
        self.map = sudoku_map

    def __call__(self, location: Location) -> int:
        cells = self.map.cells
        index = location.get_index()

        for val in range(cells[index] + 1, self.map.max_value + 1):
            if val not in cells:
                cells[index] = val
                return val

        cells[index] = 0
        return 0


class NextCandidateSudoku2D:
    """Propose the next value absent from the cell's row, column and box."""

    def __init__(self, sudoku_map: MapInt2D) -> None:
        self.map = sudoku_map

    def __call__(self, location: Location) -> int:
        cells = self.map.cells
        index = location.get_index()
        row, col, box = self.map.units_of(index)

        for val in range(cells[index] + 1, self.map.max_value + 1):
            if any(cells[i] == val for i in row):
                continue
            if any(cells[i] == val for i in col):
                continue
            if any(cells[i] == val for i in box):
                continue
            cells[index] = val
            return val

        cells[index] = 0
        return 0


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------


class Backtracking:
    """
    Depth-first constraint solver driven by two pluggable strategies.

    The explicit stack holds the path from the first assigned cell to the
    current exploration frontier. Cells not on the stack are either original
    givens or empty: a frame is always cleared before it is popped.
    """

    def __init__(
        self,
        sudoku_map: CellMap,
        next_location: Optional[Callable[[Any], NextLocation]] = None,
        next_candidate: Optional[Callable[[Any], NextCandidate]] = None,
        *,
        record_steps: bool = True,
        max_steps: Union[int, float] = float("inf"),
    ) -> None:
        """
        Initialize a solver bound to a specific map.

        Args:
            sudoku_map: The mutable map to solve in place. Any object with
                get/set/clear works when both strategy factories are given.
            next_location: Factory building the next-location strategy from the map.
                Defaults to the Sudoku strategy matching the map type.
            next_candidate: Factory building the next-candidate strategy from the map.
                Defaults to the Sudoku strategy matching the map type.
            record_steps: If True, record step history for replay functionality.
                Set to False for benchmarks to improve performance.
            max_steps: Upper bound on the number of steps run() performs before
                giving up with status 0.

        Raises:
            ValueError: If no default strategies exist for the map type or
                max_steps is not positive.
        """
        if next_location is None or next_candidate is None:
            if isinstance(sudoku_map, MapInt2D):
                default_location, default_candidate = (
                    NextLocationSudoku2D,
                    NextCandidateSudoku2D,
                )
            elif isinstance(sudoku_map, MapInt1D):
                default_location, default_candidate = (
                    NextLocationSudoku1D,
                    NextCandidateSudoku1D,
                )
            else:
                raise ValueError(
                    f"No default strategies for map type {type(sudoku_map).__name__}."
                )
            next_location = next_location or default_location
            next_candidate = next_candidate or default_candidate

        if max_steps <= 0:
            raise ValueError("max_steps must be positive.")

        self.map = sudoku_map
        self.next_location: NextLocation = next_location(sudoku_map)
        self.next_candidate: NextCandidate = next_candidate(sudoku_map)
        self.record_steps = record_steps
        self.max_steps: Union[int, float] = max_steps

        self.stack: List[Location] = []

        # 0 -> still searching, 1 -> solved, -1 -> search space exhausted
        self.status: int = 0

        # Metrics / counters (for analysis)
        self.steps_count: int = 0
        self.assignments_count: int = 0
        self.backtracks_count: int = 0
        self.max_stack_depth: int = 0

        # Each step is a dict with: action, index, value, depth, cells_snapshot
        # (None when the map has no snapshot() method)
        self.steps_history: List[Dict[str, Any]] = []

    def _record_step(self, action: str, location: Location, value: int) -> None:
        """Record a step for replay functionality."""
        if not self.record_steps:
            return
        snapshot = getattr(self.map, "snapshot", None)
        self.steps_history.append({
            "action": action,  # "assign" or "backtrack"
            "index": location.get_index(),
            "value": value,
            "depth": len(self.stack),
            "step_number": len(self.steps_history),
            "cells_snapshot": snapshot() if snapshot is not None else None,
        })

    def _push(self, location: Location) -> None:
        self.stack.append(location)
        self.max_stack_depth = max(self.max_stack_depth, len(self.stack))

    def solve(self) -> bool:
        """
        Perform a single step of the search.

        Returns:
            True if a step was performed and more work remains, False once the
            map is solved or the search space is exhausted.
        """
        if self.status != 0:
            return False

        if not self.stack:
            location = self.next_location()
            if location.not_found():
                self.status = 1
                return False
            self._push(location)

        self.steps_count += 1
        current = self.stack[-1]
        value = self.next_candidate(current)

        if value == 0:
            # Undo the current assignment and force the predecessor to advance.
            current.clear_value()
            self.stack.pop()
            self.backtracks_count += 1
            self._record_step("backtrack", current, 0)
            if not self.stack:
                self.status = -1
                return False
            return True

        self.assignments_count += 1
        self._record_step("assign", current, value)

        following = self.next_location()
        if following.not_found():
            self.status = 1
            return False

        self._push(following)
        return True

    def run(self) -> Tuple[int, Dict[str, Any]]:
        """
        Run the search until it finishes or the step budget runs out.

        Returns:
            Tuple of (status, payload) where status is 1 (solved), -1 (no valid
            completion exists) or 0 (max_steps reached), and payload is the
            solver's metrics dictionary.
        """
        while self.steps_count < self.max_steps:
            if not self.solve():
                break

        logger.debug(
            "backtracking finished: status=%d steps=%d backtracks=%d max_depth=%d",
            self.status,
            self.steps_count,
            self.backtracks_count,
            self.max_stack_depth,
        )
        return self.status, self.get_payload()

    def get_payload(self) -> Dict[str, Any]:
        return {
            "steps_count": self.steps_count,
            "assignments_count": self.assignments_count,
            "backtracks_count": self.backtracks_count,
            "max_stack_depth": self.max_stack_depth,
            "steps_history": self.steps_history,
        }


def solve_map(sudoku_map: Any, **kwargs: Any) -> Tuple[int, Dict[str, Any]]:
    """Solve a Sudoku map in place with the default strategies for its type."""
    return Backtracking(sudoku_map, **kwargs).run()
