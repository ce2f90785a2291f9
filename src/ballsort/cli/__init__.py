"""Command-line interface for the ball-sort solver."""

from .main import main_cli, main
from .commands import BallSortSolver, solve_command
from .utils import setup_logging, save_results

__all__ = [
    'main_cli',
    'main',
    'BallSortSolver',
    'solve_command',
    'setup_logging',
    'save_results'
]
