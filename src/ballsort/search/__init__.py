"""Search algorithms for the ball-sort solver.

This module implements a domain-independent A* engine and the heuristics
that guide it through ball-sort positions.
"""

from .astar import (
    AStarSearcher, Frontier, SearchConfig, SearchNode, SolveStatistics,
    VisitedRegistry, create_astar_searcher, solve
)
from .path_vector import PathVectorSearcher
from .heuristics import BaseHeuristic, HEURISTICS, create_heuristic

__all__ = [
    'AStarSearcher',
    'PathVectorSearcher',
    'Frontier',
    'SearchConfig',
    'SearchNode',
    'SolveStatistics',
    'VisitedRegistry',
    'create_astar_searcher',
    'solve',
    'BaseHeuristic',
    'HEURISTICS',
    'create_heuristic'
]
