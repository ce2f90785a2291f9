"""Ball-sort board model, move generation and rule validation."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple
import numpy as np

from ballsort.core.state import Score, SearchState

TUBE_CAPACITY = 4
MIN_TUBES = 3
MAX_TUBES = 13
BALLS_PER_COLOR = 4
MIN_EMPTY_SLOTS = 4
MAX_EMPTY_SLOTS = 12
EMPTY = 0  # Slot value meaning "no ball"


class ValidationReason(Enum):
    """Rules a board can break."""
    NOT_ENOUGH_TUBES = "fewer than 3 tubes"
    TOO_MANY_TUBES = "more than 13 tubes"
    FLOATING_BALLS = "a ball rests above an empty slot"
    NOT_ENOUGH_BALLS_OF_COLOR = "a color has fewer than 4 balls"
    TOO_MANY_BALLS_OF_COLOR = "a color has more than 4 balls"
    NOT_ENOUGH_EMPTIES = "fewer than 4 empty slots"
    TOO_MANY_EMPTIES = "more than 12 empty slots"


class BoardValidationError(ValueError):
    """Raised when a board breaks one of the game rules."""

    def __init__(self, reason: ValidationReason, detail: str = ""):
        self.reason = reason
        message = f"Invalid board: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


@dataclass(frozen=True)
class Move:
    """Take the top ball of tube ``source`` and drop it onto tube ``target``."""
    source: int
    target: int


@dataclass(eq=False)
class Board(SearchState):
    """A ball-sort position.

    ``grid`` has one row per tube and ``TUBE_CAPACITY`` columns; column 0 is
    the bottom of the tube. ``EMPTY`` marks a free slot, any other value is
    a color code. The array is made read-only so boards can be shared between
    search nodes and used as dictionary keys.
    """
    grid: np.ndarray

    def __post_init__(self):
        grid = np.array(self.grid, dtype=np.uint8)
        if grid.ndim != 2 or grid.shape[1] != TUBE_CAPACITY:
            raise ValueError(f"Board grid must have shape (tubes, {TUBE_CAPACITY}), got {grid.shape}")
        grid.setflags(write=False)
        self.grid = grid
        self._hash = hash((grid.shape, grid.tobytes()))

    @classmethod
    def from_tubes(cls, tubes) -> 'Board':
        """Build a board from per-tube sequences of color codes, bottom first."""
        grid = np.zeros((len(tubes), TUBE_CAPACITY), dtype=np.uint8)
        for index, tube in enumerate(tubes):
            balls = list(tube)
            grid[index, :len(balls)] = balls
        return cls(grid)

    @property
    def num_tubes(self) -> int:
        return self.grid.shape[0]

    def tube_heights(self) -> np.ndarray:
        """Number of balls in each tube."""
        return np.count_nonzero(self.grid, axis=1)

    def try_move(self, move: Move) -> Optional['Board']:
        """Return the board after ``move``, or None if the move is illegal."""
        source, target = move.source, move.target
        if not (0 <= source < self.num_tubes and 0 <= target < self.num_tubes):
            return None
        if source == target:
            return None
        if self.grid[target, -1] != EMPTY or self.grid[source, 0] == EMPTY:
            return None

        target_slot = int(np.count_nonzero(self.grid[target]))
        source_slot = int(np.count_nonzero(self.grid[source])) - 1

        grid = self.grid.copy()
        grid[target, target_slot] = grid[source, source_slot]
        grid[source, source_slot] = EMPTY
        return Board(grid)

    def apply(self, edge: Move) -> Optional['Board']:
        return self.try_move(edge)

    def expand(self) -> Iterator[Tuple['Board', Score, Move]]:
        """Yield every legal move, source tube first then target tube, each costing 1."""
        for source in range(self.num_tubes):
            if self.grid[source, 0] == EMPTY:
                continue
            for target in range(self.num_tubes):
                move = Move(source, target)
                next_board = self.try_move(move)
                if next_board is not None:
                    yield next_board, 1, move

    def is_goal(self) -> bool:
        """True when every tube is empty or filled with a single color.

        Only valid boards are guaranteed to be solved when this holds; moves
        from a valid board always produce valid boards.
        """
        return bool(np.all(self.grid == self.grid[:, :1]))

    def validate(self) -> None:
        """Check the board against the game rules.

        Raises:
            BoardValidationError: If any rule is broken
        """
        if self.num_tubes < MIN_TUBES:
            raise BoardValidationError(ValidationReason.NOT_ENOUGH_TUBES, f"{self.num_tubes} tubes")
        if self.num_tubes > MAX_TUBES:
            raise BoardValidationError(ValidationReason.TOO_MANY_TUBES, f"{self.num_tubes} tubes")

        occupied = self.grid != EMPTY
        # A ball above an empty slot means an occupied slot follows a free one
        if np.any(~occupied[:, :-1] & occupied[:, 1:]):
            raise BoardValidationError(ValidationReason.FLOATING_BALLS)

        colors, counts = np.unique(self.grid[occupied], return_counts=True)
        for color, count in zip(colors, counts):
            if count < BALLS_PER_COLOR:
                raise BoardValidationError(ValidationReason.NOT_ENOUGH_BALLS_OF_COLOR,
                                           f"{format_ball(color)!r} x{count}")
            if count > BALLS_PER_COLOR:
                raise BoardValidationError(ValidationReason.TOO_MANY_BALLS_OF_COLOR,
                                           f"{format_ball(color)!r} x{count}")

        empties = int(np.count_nonzero(~occupied))
        if empties < MIN_EMPTY_SLOTS:
            raise BoardValidationError(ValidationReason.NOT_ENOUGH_EMPTIES, f"{empties} empty slots")
        if empties > MAX_EMPTY_SLOTS:
            raise BoardValidationError(ValidationReason.TOO_MANY_EMPTIES, f"{empties} empty slots")

    def compress(self) -> 'Board':
        """Renumber colors to 1..n in first-seen order.

        The compressed board is no longer printable as the original
        characters, but moves found on it replay unchanged on the original.
        """
        mapping: Dict[int, int] = {}
        for value in self.grid.ravel():
            if value != EMPTY and value not in mapping:
                mapping[int(value)] = len(mapping) + 1
        lookup = np.zeros(256, dtype=np.uint8)
        for old, new in mapping.items():
            lookup[old] = new
        return Board(lookup[self.grid])

    def with_empty_tubes(self, count: int) -> 'Board':
        """Return a copy of this board with ``count`` extra empty tubes appended."""
        extra = np.zeros((count, TUBE_CAPACITY), dtype=np.uint8)
        return Board(np.vstack([self.grid, extra]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return np.array_equal(self.grid, other.grid)

    def __hash__(self) -> int:
        return self._hash

    def __str__(self) -> str:
        lines = []
        for index, tube in enumerate(self.grid):
            lines.append(f"[{index:>2}] {''.join(format_ball(value) for value in tube)}")
        return "\n".join(lines) + "\n"


def format_ball(value: int) -> str:
    """Render one slot: a space when empty, a hex digit for compressed colors."""
    value = int(value)
    if value == EMPTY:
        return " "
    if value < 0x10:
        return format(value, 'x')
    return chr(value)
