"""Board model for N×N tic-tac-toe: moves, terminal detection and encodings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple
import math

Mark = str  # "X" or "O"

MARK_A: Mark = "X"
MARK_B: Mark = "O"
MARKS: Tuple[Mark, Mark] = (MARK_A, MARK_B)
EMPTY = "_"
SYMBOLS = frozenset((MARK_A, MARK_B, EMPTY))

DEFAULT_SIZE = 3

_LINE_VALUE = {MARK_A: 1, MARK_B: -1, EMPTY: 0}


class GameError(ValueError):
    """Base class for rule violations raised by the board and session."""


class InvalidMove(GameError):
    """Unknown mark, coordinates out of bounds, or an occupied target cell."""


class MalformedEncoding(GameError):
    """A board encoding that cannot describe a legal grid."""


class GameOver(GameError):
    """A move or search was requested on a finished game."""


class Outcome(Enum):
    WIN_A = "win_a"
    WIN_B = "win_b"
    TIE = "tie"
    ONGOING = "ongoing"

    @property
    def terminal(self) -> bool:
        return self is not Outcome.ONGOING


@dataclass(frozen=True)
class Board:
    """Immutable N×N grid stored row-major as a tuple of symbols."""

    size: int
    cells: Tuple[str, ...]

    def __post_init__(self) -> None:
        if self.size < 1:
            raise MalformedEncoding(f"Board size must be positive, got {self.size}")
        if len(self.cells) != self.size * self.size:
            raise MalformedEncoding(
                f"Expected {self.size * self.size} cells for a {self.size}x{self.size} "
                f"board, got {len(self.cells)}"
            )
        bad = set(self.cells) - SYMBOLS
        if bad:
            raise MalformedEncoding(f"Board contains unknown symbols {sorted(bad)}")

    @classmethod
    def empty(cls, size: int = DEFAULT_SIZE) -> "Board":
        return cls(size=size, cells=(EMPTY,) * (size * size))

    def cell_at(self, row: int, col: int) -> str:
        self._check_bounds(row, col)
        return self.cells[row * self.size + col]

    def empty_cells(self) -> List[int]:
        """Row-major indices of the empty cells."""
        return [i for i, c in enumerate(self.cells) if c == EMPTY]

    def filled_count(self) -> int:
        return sum(1 for c in self.cells if c != EMPTY)

    def is_full(self) -> bool:
        return all(c != EMPTY for c in self.cells)

    def rows(self) -> Iterator[Tuple[str, ...]]:
        for r in range(self.size):
            yield self.cells[r * self.size : (r + 1) * self.size]

    def apply_move(self, row: int, col: int, mark: Mark) -> "Board":
        """Return a new board with ``mark`` placed at (row, col)."""
        if mark not in MARKS:
            raise InvalidMove(
                f"Unknown mark {mark!r}; expected one of {', '.join(MARKS)}"
            )
        self._check_bounds(row, col)
        idx = row * self.size + col
        if self.cells[idx] != EMPTY:
            raise InvalidMove(
                f"Selected square ({row + 1}, {col + 1}) is currently occupied "
                f"by an {self.cells[idx]}"
            )
        cells = list(self.cells)
        cells[idx] = mark
        return Board(size=self.size, cells=tuple(cells))

    def encode(self) -> str:
        return "".join(self.cells)

    def __str__(self) -> str:
        return "\n".join("".join(row) for row in self.rows())

    # ---- helpers ----

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise InvalidMove(
                f"Selected square ({row + 1}, {col + 1}) is out of bounds; "
                f"rows and columns run from 1 to {self.size}"
            )


def apply_move(board: Board, row: int, col: int, mark: Mark) -> Board:
    return board.apply_move(row, col, mark)


def _lines(board: Board) -> Iterator[int]:
    """Signed line sums in scan order: rows, columns, main then anti-diagonal."""
    n = board.size
    values = [_LINE_VALUE[c] for c in board.cells]
    for r in range(n):
        yield sum(values[r * n : (r + 1) * n])
    for c in range(n):
        yield sum(values[c::n])
    yield sum(values[i * n + i] for i in range(n))
    yield sum(values[i * n + (n - 1 - i)] for i in range(n))


def classify(board: Board) -> Outcome:
    """Classify a board; the first complete line in scan order decides."""
    n = board.size
    for total in _lines(board):
        if total == n:
            return Outcome.WIN_A
        if total == -n:
            return Outcome.WIN_B
    if board.is_full():
        return Outcome.TIE
    return Outcome.ONGOING


def serialize(board: Board) -> str:
    return board.encode()


def deserialize(encoding: str, size: Optional[int] = None) -> Board:
    """Parse an encoding such as ``"XO__X____"`` back into a :class:`Board`.

    When ``size`` is omitted it is inferred from the encoding length, which
    must then be a perfect square.
    """

    if size is None:
        size = math.isqrt(len(encoding))
    if size < 1 or len(encoding) != size * size:
        raise MalformedEncoding(
            f"Encoding {encoding!r} has length {len(encoding)}, "
            f"expected a square number of cells"
            + (f" ({size * size})" if size >= 1 else "")
        )
    bad = set(encoding) - SYMBOLS
    if bad:
        raise MalformedEncoding(
            f"Encoding {encoding!r} contains unknown symbols {sorted(bad)}"
        )
    return Board(size=size, cells=tuple(encoding))


def changed_cell(before: str, after: str, size: int) -> Tuple[int, int]:
    """Return (row, col) of the single cell that differs between two encodings."""
    if len(before) != len(after):
        raise MalformedEncoding("Encodings differ in length")
    diffs = [i for i, (a, b) in enumerate(zip(before, after)) if a != b]
    if len(diffs) != 1 or before[diffs[0]] != EMPTY:
        raise MalformedEncoding(
            f"{after!r} is not a single move away from {before!r}"
        )
    return divmod(diffs[0], size)
