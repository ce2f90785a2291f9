"""Main CLI entry point for the ball-sort solver."""

import sys
import argparse
import logging
from typing import List, Optional

from ballsort.core.state import ContractViolation
from ballsort.search.astar import STRATEGIES
from ballsort.search.heuristics import HEURISTICS
from . import commands
from .utils import setup_logging

# Root log level for 0, 1 and 2+ -v flags
VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog='ballsort',
        description='Ball-sort puzzle solver - optimal move sequences by A* search',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ballsort puzzle.txt                           # Solve a puzzle file
  ballsort - < puzzle.txt                       # Read the puzzle from stdin
  ballsort puzzle.txt --heuristic zero --brief  # Uniform-cost search, moves only
  ballsort puzzle.txt -c search.astar.check_monotonic=true
        """
    )

    parser.add_argument(
        'input',
        nargs='?',
        help="Puzzle file, or '-' to read standard input"
    )

    parser.add_argument(
        '--config', '-c',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Configuration override (repeatable, e.g. search.heuristic=zero)'
    )

    parser.add_argument(
        '--heuristic',
        choices=sorted(HEURISTICS),
        help='Heuristic guiding the search (default from config: clutter)'
    )

    parser.add_argument(
        '--strategy',
        choices=STRATEGIES,
        help='Path storage strategy (default from config: backpointer)'
    )

    parser.add_argument(
        '--max-nodes',
        type=int,
        help='Give up after visiting this many states'
    )

    parser.add_argument(
        '--timeout', '-t',
        type=float,
        help='Give up after this many seconds'
    )

    parser.add_argument(
        '--check-monotonic',
        action='store_true',
        help='Warn when the heuristic lets popped f-values decrease'
    )

    parser.add_argument(
        '--no-compress',
        action='store_true',
        help='Search on the board as parsed instead of renumbering colors'
    )

    parser.add_argument(
        '--brief',
        action='store_true',
        help='Print the move list only, without replaying each step'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Output file for results (JSON format)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='Increase verbosity (use -v or -vv)'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress all log output except errors'
    )

    return parser


def main_cli(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.quiet:
        setup_logging(logging.ERROR)
    else:
        setup_logging(VERBOSITY_LEVELS[min(parsed_args.verbose, len(VERBOSITY_LEVELS) - 1)])
    logger = logging.getLogger(__name__)

    if not parsed_args.input:
        print(f"{parser.prog}: expected one argument: input filename (or '-' for stdin)",
              file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    try:
        return commands.solve_command(parsed_args)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard exit code for SIGINT
    except ContractViolation:
        raise
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1


def main() -> None:
    """Entry point for console script."""
    sys.exit(main_cli())


if __name__ == '__main__':
    main()
