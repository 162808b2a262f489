"""Two-player zero-sum game-tree search: minimax with optional alpha-beta pruning."""

import logging
import sys
from typing import Any, Dict, Generic, Iterator, List, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

WIN_SCORE = 10
LOSS_SCORE = -10
DRAW_SCORE = 0

# Root bounds for alpha-beta pruning
ALPHA_INIT = -sys.maxsize - 1
BETA_INIT = sys.maxsize


class GameState(Protocol):
    """Capabilities a game state needs for adversarial search."""

    def winning(self, player: str) -> bool:
        ...

    def empty_indices(self) -> List[int]:
        ...

    def set(self, index: int, player: str) -> "GameState":
        ...


T = TypeVar("T", bound=GameState)


class MoveIndexError(IndexError):
    """Raised when a child move is requested with an index outside the node's children."""


class Move(Generic[T]):
    """
    A node of the game tree.

    Holds the state reached by a move, the move's score, every possible next
    move, the index of the first next move with the best score and the board
    index the move was played on. A node owns its children list.
    """

    __slots__ = ("grid", "score", "next", "best_move", "spot_index", "pruned")

    def __init__(
        self,
        grid: T,
        score: int = 0,
        next_moves: Optional[List["Move[T]"]] = None,
        best_move: int = -1,
        spot_index: int = -1,
        pruned: bool = False,
    ) -> None:
        self.grid = grid
        self.score = score
        self.next: List["Move[T]"] = next_moves if next_moves is not None else []
        self.best_move = best_move
        self.spot_index = spot_index
        self.pruned = pruned

    def at(self, i: int) -> "Move[T]":
        """
        Return the i-th next move.

        Raises:
            MoveIndexError: If i does not address an existing child.
        """
        if 0 <= i < len(self.next):
            return self.next[i]
        raise MoveIndexError(
            f"Move index {i} out of range for a node with {len(self.next)} children."
        )

    def get_score(self) -> int:
        return self.score

    def set_spot_index(self, i: int) -> None:
        self.spot_index = i

    def best(self) -> Optional["Move[T]"]:
        """Return the best next move, or None for a terminal node."""
        if not self.next:
            return None
        return self.next[self.best_move]

    def is_terminal(self) -> bool:
        return not self.next

    def count_nodes(self) -> int:
        """Count the nodes of the subtree rooted here, this node included."""
        count = 0
        stack: List["Move[T]"] = [self]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node.next)
        return count

    def principal_variation(self) -> List[int]:
        """Return the spot indices of the line of play following best moves."""
        spots: List[int] = []
        node = self.best()
        while node is not None:
            spots.append(node.spot_index)
            node = node.best()
        return spots

    def __len__(self) -> int:
        return len(self.next)

    def __iter__(self) -> Iterator["Move[T]"]:
        return iter(self.next)

    def __str__(self) -> str:
        return f"{self.grid}\n{self.score}\n{len(self.next)}\n{self.best_move}\n"

    def __repr__(self) -> str:
        return (
            f"Move(score={self.score}, spot_index={self.spot_index}, "
            f"children={len(self.next)}, best_move={self.best_move}"
            f"{', pruned=True' if self.pruned else ''})"
        )


class AdversarialSearch:
    """
    Minimax game-tree search for a fixed pair of player identities.

    The search always materializes one child per legal move so the returned
    tree can be inspected or visualized; with alpha-beta pruning, branches cut
    off by the bounds are placeholder leaves rather than expanded subtrees.
    """

    def __init__(
        self,
        maximizer: str = "x",
        minimizer: str = "o",
        algorithm: str = "minimax",
    ) -> None:
        """
        Args:
            maximizer: Player whose wins score +10.
            minimizer: Player whose wins score -10.
            algorithm: Search algorithm used by search().
                "minimax" (default): Expand the whole game tree.
                "alpha_beta": Skip branches that cannot change the decision.

        Raises:
            ValueError: If the players coincide or the algorithm is unknown.
        """
        if algorithm not in ("minimax", "alpha_beta"):
            raise ValueError('algorithm must be "minimax" or "alpha_beta".')
        if maximizer == minimizer:
            raise ValueError("maximizer and minimizer must be different players.")

        self.maximizer = maximizer
        self.minimizer = minimizer
        self.algorithm = algorithm

        # Metrics / counters (for analysis)
        self.expanded_nodes_count: int = 0
        self.terminal_nodes_count: int = 0
        self.pruned_branches_count: int = 0

    def reset_metrics(self) -> None:
        self.expanded_nodes_count = 0
        self.terminal_nodes_count = 0
        self.pruned_branches_count = 0

    def get_metrics(self) -> Dict[str, int]:
        return {
            "expanded_nodes_count": self.expanded_nodes_count,
            "terminal_nodes_count": self.terminal_nodes_count,
            "pruned_branches_count": self.pruned_branches_count,
        }

    def _check_player(self, player: str) -> None:
        if player not in (self.maximizer, self.minimizer):
            raise ValueError(
                f"player must be {self.maximizer!r} or {self.minimizer!r}, got {player!r}."
            )

    def _opponent(self, player: str) -> str:
        return self.minimizer if player == self.maximizer else self.maximizer

    def _terminal(self, grid: T) -> Optional[Move[T]]:
        """Return a scored leaf for a finished game, or None if play continues."""
        max_won = grid.winning(self.maximizer)
        min_won = grid.winning(self.minimizer)
        if max_won and min_won:
            raise ValueError("Both players hold a winning line; the state is unreachable.")

        if max_won:
            score = WIN_SCORE
        elif min_won:
            score = LOSS_SCORE
        elif not grid.empty_indices():
            score = DRAW_SCORE
        else:
            return None

        self.terminal_nodes_count += 1
        return Move(grid, score)

    # -------------------------------------------------------------------------
    # Search algorithms
    # -------------------------------------------------------------------------

    def search(self, grid: T, player: Optional[str] = None) -> Move[T]:
        """
        Search from grid with the configured algorithm.

        Args:
            grid: Current game state.
            player: Player to move; defaults to the maximizer.

        Returns:
            Root of the game tree from this position.
        """
        player = self.maximizer if player is None else player
        if self.algorithm == "alpha_beta":
            return self.alpha_beta_pruning(grid, player)
        return self.minimax(grid, player)

    def minimax(self, grid: T, player: str) -> Move[T]:
        """
        Compute the full game tree and the best next move for the current state.

        The node score is the maximum of the children's scores on the
        maximizer's ply and the minimum on the minimizer's ply; the first child
        reaching that score is the best move.
        """
        self._check_player(player)
        root = self._minimax(grid, player)
        logger.debug(
            "minimax finished: score=%d expanded=%d terminal=%d",
            root.score,
            self.expanded_nodes_count,
            self.terminal_nodes_count,
        )
        return root

    def _minimax(self, grid: T, player: str) -> Move[T]:
        leaf = self._terminal(grid)
        if leaf is not None:
            return leaf

        self.expanded_nodes_count += 1
        maximizing = player == self.maximizer
        opponent = self._opponent(player)

        best_score: Optional[int] = None
        best_move_idx = 0
        next_moves: List[Move[T]] = []

        for idx, spot in enumerate(grid.empty_indices()):
            child = self._minimax(grid.set(spot, player), opponent)
            child.set_spot_index(spot)
            next_moves.append(child)

            if (
                best_score is None
                or (maximizing and child.score > best_score)
                or (not maximizing and child.score < best_score)
            ):
                best_score = child.score
                best_move_idx = idx

        assert best_score is not None
        return Move(grid, best_score, next_moves, best_move_idx)

    def alpha_beta_pruning(
        self,
        grid: T,
        player: str,
        alpha: int = ALPHA_INIT,
        beta: int = BETA_INIT,
    ) -> Move[T]:
        """
        Compute the game tree with alpha-beta pruning.

        Alpha is the score the maximizer can already guarantee, beta the score
        the minimizer can already guarantee. Once alpha >= beta the remaining
        siblings are not searched: each is attached as a pruned leaf scored
        with alpha (maximizer's ply) or beta (minimizer's ply), so every
        expanded node still has one child per legal move.

        The root score always equals the minimax root score.
        """
        self._check_player(player)
        root = self._alpha_beta(grid, player, alpha, beta)
        logger.debug(
            "alpha-beta finished: score=%d expanded=%d terminal=%d pruned=%d",
            root.score,
            self.expanded_nodes_count,
            self.terminal_nodes_count,
            self.pruned_branches_count,
        )
        return root

    def _alpha_beta(self, grid: T, player: str, alpha: int, beta: int) -> Move[T]:
        leaf = self._terminal(grid)
        if leaf is not None:
            return leaf

        self.expanded_nodes_count += 1
        maximizing = player == self.maximizer
        opponent = self._opponent(player)

        best_score = ALPHA_INIT if maximizing else BETA_INIT
        best_move_idx = 0
        next_moves: List[Move[T]] = []
        pruned = False

        for idx, spot in enumerate(grid.empty_indices()):
            new_grid = grid.set(spot, player)

            if pruned:
                self.pruned_branches_count += 1
                child: Move[T] = Move(
                    new_grid, alpha if maximizing else beta, pruned=True
                )
            else:
                child = self._alpha_beta(new_grid, opponent, alpha, beta)
                if maximizing:
                    if child.score > best_score:
                        best_score = child.score
                        best_move_idx = idx
                    alpha = max(alpha, best_score)
                else:
                    if child.score < best_score:
                        best_score = child.score
                        best_move_idx = idx
                    beta = min(beta, best_score)
                pruned = alpha >= beta

            child.set_spot_index(spot)
            next_moves.append(child)

        return Move(grid, best_score, next_moves, best_move_idx)


def minimax(grid: T, player: str, maximizer: str, minimizer: str) -> Move[T]:
    """
    Computes the best next move using the minimax algorithm for the current game state.

    For the initial call, set the player parameter as maximizer.
    """
    return AdversarialSearch(maximizer, minimizer).minimax(grid, player)


def alpha_beta_pruning(
    grid: T,
    player: str,
    maximizer: str,
    minimizer: str,
    alpha: int = ALPHA_INIT,
    beta: int = BETA_INIT,
) -> Move[T]:
    """Computes the best next move using minimax with alpha-beta pruning."""
    engine = AdversarialSearch(maximizer, minimizer, algorithm="alpha_beta")
    return engine.alpha_beta_pruning(grid, player, alpha, beta)


def tree_metrics(root: Move[Any]) -> Dict[str, int]:
    """Count nodes, leaves, pruned placeholders and depth of a game tree."""
    nodes = leaves = pruned = depth = 0
    stack = [(root, 0)]
    while stack:
        node, d = stack.pop()
        nodes += 1
        depth = max(depth, d)
        if node.pruned:
            pruned += 1
        if not node.next:
            leaves += 1
        stack.extend((child, d + 1) for child in node.next)
    return {"nodes": nodes, "leaves": leaves, "pruned": pruned, "depth": depth}
