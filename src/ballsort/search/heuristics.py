"""Heuristics for ball-sort A* search.

Each heuristic maps a board to a lower bound estimate of the number of moves
left. All of them are admissible. ``zero``, ``consecutive`` and ``clutter``
change by at most one per move, so they are consistent as well.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Type
import numpy as np

from ballsort.core.board import Board, EMPTY
from ballsort.search.astar import AStarSearcher, SearchConfig
from ballsort.core.state import Score

logger = logging.getLogger(__name__)

RELAXED_EXTRA_TUBES = 3


class BaseHeuristic(ABC):
    """Abstract base class for heuristics."""

    name = 'base'

    def __init__(self):
        self.computation_count = 0
        self.total_computation_time = 0.0

    @abstractmethod
    def compute(self, board: Board) -> Score:
        """Compute heuristic value.

        Args:
            board: Board to estimate

        Returns:
            Estimated number of moves to a solved board
        """
        pass

    def __call__(self, board: Board) -> Score:
        """Compute heuristic with timing and statistics."""
        start_time = time.perf_counter()
        value = self.compute(board)
        self.computation_count += 1
        self.total_computation_time += time.perf_counter() - start_time
        return value

    def get_stats(self) -> Dict[str, Any]:
        """Get computation statistics."""
        avg_time = (self.total_computation_time / self.computation_count
                    if self.computation_count > 0 else 0.0)

        return {
            'name': self.name,
            'computation_count': self.computation_count,
            'total_time': self.total_computation_time,
            'average_time': avg_time,
            'average_time_us': avg_time * 1000000
        }


class ZeroHeuristic(BaseHeuristic):
    """Knows nothing; turns A* into uniform-cost search."""

    name = 'zero'

    def compute(self, board: Board) -> Score:
        return 0


class ConsecutiveHeuristic(BaseHeuristic):
    """Counts adjacent balls of different colors within a tube.

    Every such pair forces the upper ball (and everything above it) to move,
    and each pair names a different upper ball, so the count is a lower bound.
    Empty slots are ignored.
    """

    name = 'consecutive'

    def compute(self, board: Board) -> Score:
        lower = board.grid[:, :-1]
        upper = board.grid[:, 1:]
        return int(np.count_nonzero((upper != EMPTY) & (upper != lower)))


class ClutterHeuristic(BaseHeuristic):
    """Counts balls not connected to the bottom of their tube by a single-color run."""

    name = 'clutter'

    def compute(self, board: Board) -> Score:
        grid = board.grid
        # Position of the first ball differing from the bottom ball, per tube
        mismatch = (grid != grid[:, :1]) & (grid != EMPTY)
        cost = 0
        for tube, row in zip(grid, mismatch):
            hits = np.flatnonzero(row)
            if hits.size:
                cost += int(np.count_nonzero(tube[hits[0]:]))
        return cost


class RelaxedTubesHeuristic(BaseHeuristic):
    """Solves a relaxed board with extra empty tubes and uses its solution length.

    Extra tubes can only shorten the optimal solution, so the result never
    exceeds the true remaining cost.
    """

    name = 'relaxed'

    def __init__(self, extra_tubes: int = RELAXED_EXTRA_TUBES):
        super().__init__()
        self.extra_tubes = extra_tubes
        self.inner = ConsecutiveHeuristic()
        # Nested searches log at DEBUG
        self.searcher = AStarSearcher(SearchConfig(log_level=logging.DEBUG))

    def compute(self, board: Board) -> Score:
        outcome = self.searcher.search(board.with_empty_tubes(self.extra_tubes), self.inner)
        if outcome is None:
            return 0
        path, _ = outcome
        return len(path)


HEURISTICS: Dict[str, Type[BaseHeuristic]] = {
    ZeroHeuristic.name: ZeroHeuristic,
    ConsecutiveHeuristic.name: ConsecutiveHeuristic,
    ClutterHeuristic.name: ClutterHeuristic,
    RelaxedTubesHeuristic.name: RelaxedTubesHeuristic,
}


def create_heuristic(name: str = 'clutter') -> BaseHeuristic:
    """Factory function to create a heuristic by name.

    Raises:
        ValueError: If ``name`` is not a known heuristic
    """
    try:
        heuristic_cls = HEURISTICS[name]
    except KeyError:
        raise ValueError(f"Unknown heuristic '{name}', expected one of {sorted(HEURISTICS)}")
    logger.debug(f"Using heuristic '{name}'")
    return heuristic_cls()
