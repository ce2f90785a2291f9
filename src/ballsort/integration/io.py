"""Text input parsing for ball-sort puzzles.

Format::

    // comments and blank lines are ignored
    2          number of full tubes
    1          number of empty tubes
    RRRG       one line per full tube, bottom ball first
    GGGR
"""

import logging
import sys
from pathlib import Path
from typing import IO, List, Optional, Union

from ballsort.core.board import Board, TUBE_CAPACITY

logger = logging.getLogger(__name__)

STDIN_MARKER = '-'
COMMENT_PREFIX = '//'


class BoardFormatError(ValueError):
    """Raised when puzzle text cannot be parsed."""
    pass


def _parse_count(line: str, what: str) -> int:
    try:
        count = int(line)
    except ValueError:
        raise BoardFormatError(f"Couldn't parse {what} count from line {line!r}")
    if count < 0:
        raise BoardFormatError(f"{what.capitalize()} count must not be negative, got {count}")
    return count


def _parse_tube(line: str) -> List[int]:
    if not line.isascii():
        raise BoardFormatError(f"Unexpected non-ASCII character in ball color line: {line!r}")
    if len(line) != TUBE_CAPACITY:
        raise BoardFormatError(
            f"Expected exactly {TUBE_CAPACITY} ASCII characters for ball colors, got line: {line!r}"
        )
    balls = []
    for char in line:
        # Printable, non-space ASCII only
        if not ('!' <= char <= '~'):
            raise BoardFormatError(f"Unprintable character used as ball color: {ord(char):#04x}")
        balls.append(ord(char))
    return balls


def parse_board(text: str, validate: bool = True) -> Board:
    """Parse puzzle text into a board.

    Args:
        text: Puzzle description
        validate: Whether to check the parsed board against the game rules

    Returns:
        Parsed board; empty tubes come first, then full tubes in input order

    Raises:
        BoardFormatError: If the text is malformed
        BoardValidationError: If the board breaks a game rule
    """
    full_count: Optional[int] = None
    empty_count: Optional[int] = None
    full_tubes: List[List[int]] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        if full_count is None:
            full_count = _parse_count(line, 'full tube')
        elif empty_count is None:
            empty_count = _parse_count(line, 'empty tube')
        elif len(full_tubes) < full_count:
            full_tubes.append(_parse_tube(line))
        else:
            raise BoardFormatError(f"Unexpected line at end of input: {line!r}")

    if full_count is None or empty_count is None:
        raise BoardFormatError("End of input reached before end of header")
    if len(full_tubes) < full_count:
        raise BoardFormatError(
            f"End of input reached, but {full_count - len(full_tubes)} more tubes of ball colors are expected"
        )

    board = Board.from_tubes([[]] * empty_count + full_tubes)
    if validate:
        board.validate()
    logger.debug(f"Parsed board with {full_count} full and {empty_count} empty tubes")
    return board


def read_board(stream: IO[str], validate: bool = True) -> Board:
    """Parse a board from an open text stream."""
    return parse_board(stream.read(), validate=validate)


def load_board(source: Union[str, Path], validate: bool = True) -> Board:
    """Load a board from a file path, or from standard input when ``source`` is ``-``.

    Raises:
        FileNotFoundError: If the file doesn't exist
        BoardFormatError: If the text is malformed
        BoardValidationError: If the board breaks a game rule
    """
    if str(source) == STDIN_MARKER:
        return read_board(sys.stdin, validate=validate)

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Puzzle file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return read_board(f, validate=validate)
