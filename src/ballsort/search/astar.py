"""A* search engine.

This module implements best-first search over any state satisfying the
:class:`~ballsort.core.state.SearchState` contract. Paths are rebuilt from
a table of back-pointers recorded the first time each state is popped, so a
frontier entry only carries its predecessor and the edge that produced it.
"""

import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ballsort.core.state import ContractViolation, Score

logger = logging.getLogger(__name__)

Heuristic = Callable[[Any], Score]
SolveOutcome = Optional[Tuple[List[Any], 'SolveStatistics']]

STRATEGIES = ('backpointer', 'path_vector')


@dataclass(frozen=True)
class SearchNode:
    """One partially expanded path, stored as a back-pointer."""
    state: Any
    cost: Score  # g(n) - exact cost from start
    estimated_cost: Score  # f(n) = g(n) + h(n)
    predecessor: Any = None
    edge: Any = None

    @property
    def heuristic(self) -> Score:
        """Heuristic part h(n) of the estimate."""
        return self.estimated_cost - self.cost


class Frontier:
    """Priority work queue popping the lowest estimated total cost first.

    Ties on the estimate are broken by insertion order, so equal-f nodes are
    popped first-in first-out and results are reproducible across runs.
    Stale entries for already visited states are left in place and filtered
    by the caller at pop time.
    """

    def __init__(self):
        self._heap: List[Tuple[Score, int, Any]] = []
        self._sequence = itertools.count()

    def push(self, node: Any) -> None:
        heapq.heappush(self._heap, (node.estimated_cost, next(self._sequence), node))

    def pop(self) -> Any:
        """Remove and return the node with minimum estimated cost."""
        return heapq.heappop(self._heap)[2]

    def peek_estimate(self) -> Optional[Score]:
        return self._heap[0][0] if self._heap else None

    def clear(self) -> None:
        self._heap.clear()
        self._sequence = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)


@dataclass(frozen=True)
class BackPointer:
    """Predecessor state and the edge leading from it."""
    predecessor: Any
    edge: Any


class VisitedRegistry:
    """Closed set that doubles as the back-pointer table.

    Entries are write-once: the first time a state is registered fixes its
    predecessor permanently. The start state is recorded with no back-pointer.
    """

    def __init__(self):
        self._records: Dict[Any, Optional[BackPointer]] = {}

    def register(self, state: Any, predecessor: Any = None, edge: Any = None,
                 is_start: bool = False) -> bool:
        """Record the first arrival at ``state``.

        Returns:
            True if the state was newly registered, False if it was already
            present (the existing record is left untouched).
        """
        if state in self._records:
            return False
        self._records[state] = None if is_start else BackPointer(predecessor, edge)
        return True

    def reconstruct(self, goal: Any) -> List[Any]:
        """Walk back-pointers from ``goal`` to the start and return the forward edge path.

        Raises:
            ContractViolation: If the chain does not reach the start record,
                which only happens when state hashing/equality is inconsistent.
        """
        edges = []
        state = goal
        for _ in range(len(self._records) + 1):
            if state not in self._records:
                raise ContractViolation(
                    f"Back-pointer chain broken: state {state!r} was never registered"
                )
            record = self._records[state]
            if record is None:
                edges.reverse()
                return edges
            edges.append(record.edge)
            state = record.predecessor
        raise ContractViolation("Back-pointer chain does not terminate at the start state")

    def clear(self) -> None:
        self._records.clear()

    def __contains__(self, state: Any) -> bool:
        return state in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)


@dataclass(frozen=True)
class SolveStatistics:
    """How much work a successful search performed."""
    path_length: int
    states_expanded: int
    frontier_size: int
    path_cost: Score = 0
    nodes_generated: int = 0
    stale_skipped: int = 0
    monotonic_violations: int = 0
    computation_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary."""
        return {
            'path_length': self.path_length,
            'states_expanded': self.states_expanded,
            'frontier_size': self.frontier_size,
            'path_cost': self.path_cost,
            'nodes_generated': self.nodes_generated,
            'stale_skipped': self.stale_skipped,
            'monotonic_violations': self.monotonic_violations,
            'computation_time': self.computation_time,
        }

    def __str__(self) -> str:
        return (f"Solved for {self.path_length} long path by visiting "
                f"{self.states_expanded} nodes. work queue len: {self.frontier_size}")


@dataclass
class SearchConfig:
    """Configuration for A* search."""
    strategy: str = 'backpointer'
    max_nodes_expanded: Optional[int] = None  # None means unbounded
    max_computation_time: Optional[float] = None  # seconds, None means unbounded
    check_monotonic: bool = False  # Debug check that popped f-values never decrease
    log_interval: int = 10000  # Expansions between DEBUG progress messages
    log_level: int = logging.INFO  # Level of start, finish and abort messages


class BaseSearcher(ABC):
    """Bookkeeping shared by the search strategies: budgets, counters and diagnostics."""

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()
        self.frontier = Frontier()
        self._reset_counters()

    def _reset_counters(self) -> None:
        self.nodes_generated = 0
        self.stale_skipped = 0
        self.monotonic_violations = 0
        self.termination_reason = 'not_started'
        self._last_popped_estimate: Optional[Score] = None
        self._deadline: Optional[float] = None

    def _start(self, start_time: float) -> None:
        self._reset_counters()
        self.frontier.clear()
        if self.config.max_computation_time is not None:
            self._deadline = start_time + self.config.max_computation_time
        self.termination_reason = 'running'

    def _budget_exhausted(self, states_expanded: int) -> bool:
        """Check the optional node and time budgets, recording why the search stopped."""
        limit = self.config.max_nodes_expanded
        if limit is not None and states_expanded >= limit:
            self.termination_reason = 'max_nodes_reached'
        elif self._deadline is not None and time.perf_counter() > self._deadline:
            self.termination_reason = 'timeout'
        else:
            return False
        logger.log(self.config.log_level, f"Search aborted ({self.termination_reason}) after "
                   f"{states_expanded} states, frontier size {len(self.frontier)}")
        return True

    def _check_monotonic(self, estimated_cost: Score) -> None:
        """Report popped estimates that decrease, a sign of an inconsistent heuristic."""
        if not self.config.check_monotonic:
            return
        last = self._last_popped_estimate
        if last is not None and estimated_cost < last:
            self.monotonic_violations += 1
            if self.monotonic_violations == 1:
                logger.warning(f"Popped estimate decreased from {last} to {estimated_cost}; "
                               f"the heuristic is not consistent and may not be admissible")
        self._last_popped_estimate = estimated_cost

    def _log_progress(self, states_expanded: int) -> None:
        interval = self.config.log_interval
        if interval > 0 and states_expanded % interval == 0:
            logger.debug(f"Visited {states_expanded} states, frontier size {len(self.frontier)}, "
                         f"best estimate {self.frontier.peek_estimate()}")

    def _create_statistics(self, path: List[Any], path_cost: Score, states_expanded: int,
                           start_time: float) -> SolveStatistics:
        self.termination_reason = 'goal_reached'
        stats = SolveStatistics(
            path_length=len(path),
            states_expanded=states_expanded,
            frontier_size=len(self.frontier),
            path_cost=path_cost,
            nodes_generated=self.nodes_generated,
            stale_skipped=self.stale_skipped,
            monotonic_violations=self.monotonic_violations,
            computation_time=time.perf_counter() - start_time,
        )
        logger.log(self.config.log_level, f"{stats} (cost {path_cost}, {stats.computation_time:.3f}s)")
        return stats

    def _exhausted(self, states_expanded: int) -> None:
        self.termination_reason = 'search_exhausted'
        logger.log(self.config.log_level,
                   f"Search exhausted after visiting {states_expanded} states without reaching a goal")

    @abstractmethod
    def search(self, start: Any, heuristic: Heuristic) -> SolveOutcome:
        """Search from ``start`` towards a goal, returning ``(path, statistics)`` or None."""
        pass

    def get_search_stats(self) -> Dict[str, Any]:
        """Get counters of the most recent search."""
        return {
            'strategy': self.config.strategy,
            'termination_reason': self.termination_reason,
            'nodes_generated': self.nodes_generated,
            'stale_skipped': self.stale_skipped,
            'monotonic_violations': self.monotonic_violations,
            'frontier_size': len(self.frontier),
        }


class AStarSearcher(BaseSearcher):
    """A* search reconstructing the solution from back-pointers."""

    def __init__(self, config: Optional[SearchConfig] = None):
        """Initialize A* searcher.

        Args:
            config: Search configuration parameters
        """
        super().__init__(config)
        self.visited = VisitedRegistry()

    def search(self, start: Any, heuristic: Heuristic) -> SolveOutcome:
        """Search for a minimum-cost edge path from ``start`` to a goal state.

        Args:
            start: Initial state
            heuristic: Estimate of the remaining cost from a state

        Returns:
            ``(path, statistics)`` or None if no goal is reachable (or a
            configured budget ran out first)
        """
        start_time = time.perf_counter()
        self._start(start_time)
        self.visited.clear()

        logger.log(self.config.log_level, "Starting A* search (back-pointer reconstruction)")
        self.frontier.push(SearchNode(state=start, cost=0, estimated_cost=heuristic(start)))
        self.nodes_generated = 1

        while self.frontier:
            if self._budget_exhausted(len(self.visited)):
                return None

            node = self.frontier.pop()
            if node.state in self.visited:
                self.stale_skipped += 1
                continue
            self._check_monotonic(node.estimated_cost)

            # First arrival fixes the back-pointer; the start is always popped first
            self.visited.register(node.state, node.predecessor, node.edge,
                                  is_start=not self.visited)
            self._log_progress(len(self.visited))

            if node.state.is_goal():
                path = self.visited.reconstruct(node.state)
                return path, self._create_statistics(path, node.cost, len(self.visited), start_time)

            for next_state, edge_cost, edge in node.state.expand():
                cost = node.cost + edge_cost
                self.frontier.push(SearchNode(
                    state=next_state,
                    cost=cost,
                    estimated_cost=cost + heuristic(next_state),
                    predecessor=node.state,
                    edge=edge,
                ))
                self.nodes_generated += 1

        self._exhausted(len(self.visited))
        return None


def create_astar_searcher(strategy: str = 'backpointer',
                          max_nodes_expanded: Optional[int] = None,
                          max_computation_time: Optional[float] = None,
                          check_monotonic: bool = False,
                          log_interval: int = 10000) -> BaseSearcher:
    """Factory function to create a searcher with custom configuration.

    Args:
        strategy: ``'backpointer'`` or ``'path_vector'``
        max_nodes_expanded: Abort after visiting this many states
        max_computation_time: Abort after this many seconds
        check_monotonic: Warn when popped f-values decrease
        log_interval: Visited states between DEBUG progress messages

    Returns:
        Configured searcher instance
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown search strategy '{strategy}', expected one of {STRATEGIES}")

    config = SearchConfig(
        strategy=strategy,
        max_nodes_expanded=max_nodes_expanded,
        max_computation_time=max_computation_time,
        check_monotonic=check_monotonic,
        log_interval=log_interval,
    )
    if strategy == 'path_vector':
        from ballsort.search.path_vector import PathVectorSearcher
        return PathVectorSearcher(config)
    return AStarSearcher(config)


def solve(start: Any, heuristic: Heuristic) -> SolveOutcome:
    """Find a minimum-cost path from ``start`` to any goal state.

    Returns:
        ``(edge_path, SolveStatistics)`` or None if the reachable state space
        contains no goal.
    """
    return AStarSearcher().search(start, heuristic)
