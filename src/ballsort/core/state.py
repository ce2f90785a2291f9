"""State contract for the A* engine.

The engine never looks inside a state. It only needs the capabilities
declared here: enumerate successors, recognise a goal, and optionally
re-derive a successor from a previously yielded edge.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Tuple

# Integer cost unit used for edge costs, heuristic values and f/g scores.
Score = int


class ContractViolation(RuntimeError):
    """Raised when a domain state implementation returns inconsistent results.

    This signals a programming error in the domain layer (for example an edge
    that cannot be replayed against the state it was generated from). The
    engine never recovers from it.
    """
    pass


class SearchState(ABC):
    """Abstract capability set required of any state searched by the engine.

    Subclasses must define equality and hashing consistent with domain
    identity: two states describing the same configuration must compare equal
    and hash identically, otherwise deduplication degrades into duplicate work.
    Expansion must return new states and never mutate ``self``.
    """

    @abstractmethod
    def expand(self) -> Iterable[Tuple['SearchState', Score, Any]]:
        """Enumerate all legal transitions.

        Returns:
            Iterable of ``(next_state, edge_cost, edge)`` triples, where
            ``edge_cost`` is the exact non-negative cost of that transition.
        """
        pass

    @abstractmethod
    def is_goal(self) -> bool:
        """Return True if this state satisfies the goal predicate."""
        pass

    def apply(self, edge: Any) -> Optional['SearchState']:
        """Re-derive the successor reached through ``edge``.

        The default implementation scans :meth:`expand` for an equal edge,
        so every replayed edge costs one extra expansion. The path-vector
        searcher replays each popped path; domains searched that way should
        override this with a direct implementation.

        Returns:
            The successor state, or None if ``edge`` does not apply here.
        """
        for next_state, _, candidate in self.expand():
            if candidate == edge:
                return next_state
        return None


def replay(start: Any, path: Iterable[Any]) -> Any:
    """Apply ``path`` edge by edge from ``start`` and return the final state.

    Raises:
        ContractViolation: If an edge cannot be applied to the state it
            was generated from.
    """
    state = start
    for step, edge in enumerate(path):
        next_state = state.apply(edge)
        if next_state is None:
            raise ContractViolation(
                f"Edge {edge!r} at step {step} could not be replayed"
            )
        state = next_state
    return state
