"""CLI command implementations."""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from ballsort.config import load_config
from ballsort.core.board import Board, Move
from ballsort.core.state import ContractViolation
from ballsort.integration.io import load_board
from ballsort.search.astar import SolveOutcome, create_astar_searcher
from ballsort.search.heuristics import create_heuristic

from .utils import create_result_summary, format_move, save_results

logger = logging.getLogger(__name__)


class BallSortSolver:
    """Wires configuration, heuristic and searcher together for one puzzle."""

    def __init__(self, config_overrides: Optional[List[str]] = None):
        """Initialize the solver.

        Args:
            config_overrides: List of configuration overrides
        """
        self.config = load_config(overrides=config_overrides or [])

        search_cfg = self.config.search
        astar_cfg = search_cfg.astar
        self.compress = bool(search_cfg.compress)
        self.show_steps = bool(self.config.output.show_steps)
        self.heuristic = create_heuristic(search_cfg.heuristic)
        self.searcher = create_astar_searcher(
            strategy=astar_cfg.strategy,
            max_nodes_expanded=astar_cfg.max_nodes_expanded,
            max_computation_time=astar_cfg.max_computation_time,
            check_monotonic=bool(astar_cfg.check_monotonic),
            log_interval=int(astar_cfg.log_interval),
        )

        logger.info(f"Solver initialized with heuristic={search_cfg.heuristic}, "
                    f"strategy={astar_cfg.strategy}, compress={self.compress}")

    def settings(self) -> Dict[str, Any]:
        """Effective search settings, for reports."""
        config = self.searcher.config
        return {
            'heuristic': self.heuristic.name,
            'strategy': config.strategy,
            'compress': self.compress,
            'max_nodes_expanded': config.max_nodes_expanded,
            'max_computation_time': config.max_computation_time,
            'check_monotonic': config.check_monotonic,
        }

    def solve(self, board: Board) -> SolveOutcome:
        """Search for an optimal move sequence for ``board``."""
        start = board.compress() if self.compress else board
        outcome = self.searcher.search(start, self.heuristic)
        logger.debug(f"Heuristic stats: {self.heuristic.get_stats()}")
        return outcome

    @staticmethod
    def replay(board: Board, path: List[Move]) -> List[Board]:
        """Apply ``path`` to ``board`` and return every intermediate board.

        Raises:
            ContractViolation: If a move cannot be replayed or the final board
                is not solved.
        """
        boards = [board]
        for move in path:
            next_board = boards[-1].apply(move)
            if next_board is None:
                raise ContractViolation(f"Couldn't replay {format_move(move)} from path")
            boards.append(next_board)
        if not boards[-1].is_goal():
            raise ContractViolation("Solution did not solve game")
        return boards


def build_overrides(args: argparse.Namespace) -> List[str]:
    """Translate command line flags into configuration overrides."""
    overrides = list(args.config)
    if args.heuristic:
        overrides.append(f"search.heuristic={args.heuristic}")
    if args.strategy:
        overrides.append(f"search.astar.strategy={args.strategy}")
    if args.max_nodes is not None:
        overrides.append(f"search.astar.max_nodes_expanded={args.max_nodes}")
    if args.timeout is not None:
        overrides.append(f"search.astar.max_computation_time={args.timeout}")
    if args.check_monotonic:
        overrides.append("search.astar.check_monotonic=true")
    if args.no_compress:
        overrides.append("search.compress=false")
    if args.brief:
        overrides.append("output.show_steps=false")
    return overrides


def solve_command(args: argparse.Namespace) -> int:
    """Solve one puzzle and print the board, statistics and moves.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    solver = BallSortSolver(build_overrides(args))

    try:
        board = load_board(args.input)
    except (OSError, ValueError) as e:
        logger.error(f"Couldn't load puzzle from {args.input}: {e}")
        return 1

    print(board, end='')

    outcome = solver.solve(board)
    if outcome is None:
        print(f"Couldn't solve ball game ({solver.searcher.termination_reason})", file=sys.stderr)
        if args.output:
            save_results(create_result_summary(None, None, solver.settings()), args.output)
        return 1

    path, stats = outcome
    print(stats)
    for move in path:
        print(format_move(move))
    print()

    # Replaying both checks the path and produces the per-step boards
    boards = solver.replay(board, path)
    if solver.show_steps:
        for move, step_board in zip(path, boards[1:]):
            print(f"## {format_move(move)}:\n{step_board}")

    if args.output:
        save_results(create_result_summary(path, stats.to_dict(), solver.settings()), args.output)
        logger.info(f"Results saved to {args.output}")

    return 0
