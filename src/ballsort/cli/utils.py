"""Output helpers shared by the CLI commands."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ballsort.core.board import Move

VERBOSE_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
BRIEF_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(level: int = logging.WARNING, format_string: Optional[str] = None) -> None:
    """Configure root logging for a CLI run.

    Args:
        level: Root logger level
        format_string: Record format; timestamps and logger names are added
            automatically at DEBUG level
    """
    if format_string is None:
        format_string = VERBOSE_FORMAT if level <= logging.DEBUG else BRIEF_FORMAT
    logging.basicConfig(level=level, format=format_string, datefmt="%H:%M:%S")


def format_move(move: Move) -> str:
    return f"Move {{ from: {move.source}, to: {move.target} }}"


def create_result_summary(path: Optional[List[Move]], stats: Optional[Dict[str, Any]],
                          settings: Dict[str, Any]) -> Dict[str, Any]:
    """Build the JSON report of one solve.

    Args:
        path: Solution moves, or None if no solution was found
        stats: Solve statistics as a dictionary
        settings: Effective search settings

    Returns:
        Report with ``success``, ``moves`` (``[source, target]`` pairs),
        ``statistics`` and ``settings`` keys
    """
    moves = None if path is None else [[move.source, move.target] for move in path]
    return {
        'success': path is not None,
        'moves': moves,
        'statistics': stats,
        'settings': settings,
    }


def _to_builtin(value: Any) -> Any:
    # numpy scalars and arrays
    if hasattr(value, 'tolist'):
        return value.tolist()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def save_results(results: Dict[str, Any], output_path: Union[str, Path]) -> None:
    """Write ``results`` as indented JSON, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2, sort_keys=True, default=_to_builtin)
        f.write("\n")
