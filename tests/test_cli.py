"""Tests for CLI interface."""

import io
import json
from unittest.mock import patch

import numpy as np
import pytest

from ballsort.cli.main import main_cli, create_parser
from ballsort.cli.utils import create_result_summary, format_move, save_results
from ballsort.cli.commands import BallSortSolver, build_overrides
from ballsort.core.board import Board, Move
from ballsort.core.state import ContractViolation
from ballsort.search.astar import SolveStatistics

SIMPLE_PUZZLE = """\
// two colors, one spare tube
2
1
RRRG
GGGR
"""


@pytest.fixture
def puzzle_file(tmp_path):
    path = tmp_path / "puzzle.txt"
    path.write_text(SIMPLE_PUZZLE)
    return path


def simple_board() -> Board:
    return Board.from_tubes([[], [ord(c) for c in 'RRRG'], [ord(c) for c in 'GGGR']])


class TestCLIParser:
    """Test CLI argument parsing."""

    def test_create_parser(self):
        """Test parser creation."""
        parser = create_parser()
        assert parser.prog == 'ballsort'

    def test_defaults(self):
        args = create_parser().parse_args(['puzzle.txt'])

        assert args.input == 'puzzle.txt'
        assert args.config == []
        assert args.heuristic is None
        assert args.strategy is None
        assert args.max_nodes is None
        assert args.timeout is None
        assert not args.check_monotonic
        assert not args.no_compress
        assert not args.brief
        assert args.verbose == 0

    def test_input_optional_at_parse_time(self):
        args = create_parser().parse_args([])
        assert args.input is None

    def test_overrides_from_flags(self):
        args = create_parser().parse_args([
            '-', '--heuristic', 'zero', '--strategy', 'path_vector', '--max-nodes', '50',
            '--timeout', '1.5', '--check-monotonic', '--no-compress', '--brief',
            '-c', 'search.astar.log_interval=7',
        ])

        assert build_overrides(args) == [
            'search.astar.log_interval=7',
            'search.heuristic=zero',
            'search.astar.strategy=path_vector',
            'search.astar.max_nodes_expanded=50',
            'search.astar.max_computation_time=1.5',
            'search.astar.check_monotonic=true',
            'search.compress=false',
            'output.show_steps=false',
        ]

    def test_unknown_heuristic_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['-', '--heuristic', 'manhattan'])


class TestCLIUtils:
    """Test CLI utility functions."""

    def test_format_move(self):
        assert format_move(Move(3, 11)) == "Move { from: 3, to: 11 }"

    def test_save_numpy_values(self, tmp_path):
        output_file = tmp_path / "results.json"
        save_results({'heights': np.array([0, 4]), 'count': np.int64(2)}, output_file)

        with open(output_file) as f:
            assert json.load(f) == {'heights': [0, 4], 'count': 2}

    def test_create_result_summary(self):
        stats = SolveStatistics(path_length=2, states_expanded=5, frontier_size=1)
        summary = create_result_summary([Move(1, 0), Move(2, 1)], stats.to_dict(), {'heuristic': 'zero'})

        assert summary['success'] is True
        assert summary['moves'] == [[1, 0], [2, 1]]
        assert summary['statistics']['states_expanded'] == 5
        assert summary['settings'] == {'heuristic': 'zero'}

    def test_create_result_summary_empty(self):
        summary = create_result_summary(None, None, {})

        assert summary['success'] is False
        assert summary['moves'] is None
        assert summary['statistics'] is None

    def test_save_results(self, tmp_path):
        output_file = tmp_path / "nested" / "results.json"
        save_results({'count': 3, 'values': [1, 2]}, output_file)

        with open(output_file) as f:
            assert json.load(f) == {'count': 3, 'values': [1, 2]}


class TestBallSortSolver:
    """Test the solver wiring."""

    def test_defaults_from_config(self):
        solver = BallSortSolver()
        settings = solver.settings()

        assert settings['heuristic'] == 'clutter'
        assert settings['strategy'] == 'backpointer'
        assert settings['compress'] is True
        assert solver.show_steps is True

    def test_overrides(self):
        solver = BallSortSolver(['search.heuristic=zero', 'search.astar.max_nodes_expanded=10'])

        assert solver.heuristic.name == 'zero'
        assert solver.searcher.config.max_nodes_expanded == 10

    def test_solve_and_replay(self):
        solver = BallSortSolver()
        board = simple_board()
        path, stats = solver.solve(board)
        boards = solver.replay(board, path)

        assert len(path) == 3
        assert len(boards) == 4
        assert boards[0] == board
        assert boards[-1].is_goal()

    def test_replay_illegal_move(self):
        with pytest.raises(ContractViolation):
            BallSortSolver.replay(simple_board(), [Move(0, 1)])

    def test_replay_unsolved_result(self):
        with pytest.raises(ContractViolation, match='did not solve'):
            BallSortSolver.replay(simple_board(), [Move(1, 0)])


class TestMainCLI:
    """Test main CLI function."""

    def test_missing_input(self, capsys):
        """Test CLI with no puzzle argument."""
        exit_code = main_cli([])
        captured = capsys.readouterr()

        assert exit_code == 1
        assert 'expected one argument' in captured.err
        assert 'usage:' in captured.err

    def test_main_cli_help(self):
        """Test CLI help."""
        with pytest.raises(SystemExit) as exc_info:
            main_cli(['--help'])
        assert exc_info.value.code == 0

    def test_solve_file(self, puzzle_file, capsys):
        exit_code = main_cli([str(puzzle_file)])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert out.startswith("[ 0]     \n[ 1] RRRG\n[ 2] GGGR\n")
        assert "Solved for 3 long path by visiting" in out
        assert sum(line.startswith("Move { from:") for line in out.splitlines()) == 3
        assert out.count("## Move {") == 3

    def test_solve_brief(self, puzzle_file, capsys):
        exit_code = main_cli([str(puzzle_file), '--brief', '--heuristic', 'zero'])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "Solved for 3 long path" in out
        assert "##" not in out

    def test_solve_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr('sys.stdin', io.StringIO(SIMPLE_PUZZLE))
        exit_code = main_cli(['-', '--strategy', 'path_vector'])

        assert exit_code == 0
        assert "Solved for 3 long path" in capsys.readouterr().out

    def test_solve_uncompressed(self, puzzle_file, capsys):
        exit_code = main_cli([str(puzzle_file), '--no-compress'])
        assert exit_code == 0

    def test_results_saved(self, puzzle_file, tmp_path):
        output_file = tmp_path / "result.json"
        exit_code = main_cli([str(puzzle_file), '--output', str(output_file)])

        assert exit_code == 0
        with open(output_file) as f:
            results = json.load(f)
        assert results['success'] is True
        assert len(results['moves']) == 3
        assert results['statistics']['path_length'] == 3
        assert results['settings']['heuristic'] == 'clutter'

    def test_missing_file(self, tmp_path):
        assert main_cli([str(tmp_path / "missing.txt")]) == 1

    def test_malformed_puzzle(self, tmp_path):
        bad_file = tmp_path / "bad.txt"
        bad_file.write_text("2\n1\nRRRG\n")
        assert main_cli([str(bad_file)]) == 1

    def test_invalid_board(self, tmp_path):
        bad_file = tmp_path / "bad.txt"
        bad_file.write_text("3\n0\nRRRR\nGGGG\nBBBB\n")
        assert main_cli([str(bad_file)]) == 1

    def test_budget_exhausted(self, puzzle_file, tmp_path, capsys):
        output_file = tmp_path / "result.json"
        exit_code = main_cli([str(puzzle_file), '--max-nodes', '1', '-o', str(output_file)])

        assert exit_code == 1
        assert "Couldn't solve ball game (max_nodes_reached)" in capsys.readouterr().err
        with open(output_file) as f:
            assert json.load(f)['success'] is False

    def test_invalid_config_override(self, puzzle_file):
        assert main_cli([str(puzzle_file), '-c', 'search.heuristic=manhattan']) == 1

    @patch('ballsort.cli.commands.solve_command')
    def test_keyboard_interrupt(self, mock_solve):
        mock_solve.side_effect = KeyboardInterrupt
        assert main_cli(['puzzle.txt']) == 130

    @patch('ballsort.cli.commands.solve_command')
    def test_contract_violation_propagates(self, mock_solve):
        mock_solve.side_effect = ContractViolation("broken domain")
        with pytest.raises(ContractViolation):
            main_cli(['puzzle.txt'])

    @patch('ballsort.cli.commands.solve_command')
    def test_unexpected_error(self, mock_solve):
        mock_solve.side_effect = RuntimeError("boom")
        assert main_cli(['puzzle.txt']) == 1


if __name__ == "__main__":
    pytest.main([__file__])
