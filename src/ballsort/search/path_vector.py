"""A* search storing the full edge path in every frontier entry.

Simpler to reason about than back-pointer reconstruction but uses
O(path length) memory per frontier entry. The state of a popped node is
re-derived by replaying its path from the start, so the domain should
override ``apply``; the default one expands the state once per replayed
edge. ``edges_replayed`` counts those calls.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Set, Tuple

from ballsort.search.astar import BaseSearcher, Heuristic, SearchConfig, SolveOutcome
from ballsort.core.state import Score, replay

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathNode:
    """Frontier entry carrying every edge from the start."""
    cost: Score
    estimated_cost: Score
    path: Tuple[Any, ...] = ()


class PathVectorSearcher(BaseSearcher):
    """A* search whose nodes carry complete edge paths."""

    def __init__(self, config: Optional[SearchConfig] = None):
        super().__init__(config or SearchConfig(strategy='path_vector'))
        self.visited: Set[Any] = set()
        self.edges_replayed = 0

    def search(self, start: Any, heuristic: Heuristic) -> SolveOutcome:
        """Search for a minimum-cost edge path from ``start`` to a goal state."""
        start_time = time.perf_counter()
        self._start(start_time)
        self.visited.clear()
        self.edges_replayed = 0

        logger.log(self.config.log_level, "Starting A* search (path-vector)")
        self.frontier.push(PathNode(cost=0, estimated_cost=heuristic(start)))
        self.nodes_generated = 1

        while self.frontier:
            if self._budget_exhausted(len(self.visited)):
                return None

            node = self.frontier.pop()
            state = replay(start, node.path)
            self.edges_replayed += len(node.path)
            if state in self.visited:
                self.stale_skipped += 1
                continue
            self._check_monotonic(node.estimated_cost)
            self.visited.add(state)
            self._log_progress(len(self.visited))

            if state.is_goal():
                path = list(node.path)
                return path, self._create_statistics(path, node.cost, len(self.visited), start_time)

            for next_state, edge_cost, edge in state.expand():
                cost = node.cost + edge_cost
                self.frontier.push(PathNode(
                    cost=cost,
                    estimated_cost=cost + heuristic(next_state),
                    path=node.path + (edge,),
                ))
                self.nodes_generated += 1

        self._exhausted(len(self.visited))
        return None

    def get_search_stats(self) -> Dict[str, Any]:
        stats = super().get_search_stats()
        stats['edges_replayed'] = self.edges_replayed
        return stats
