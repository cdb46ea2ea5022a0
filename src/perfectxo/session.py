"""Turn controller tying the board model to the minimax engine."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple
import logging

from .ai import MinimaxEngine, MoveCache
from .game import (
    DEFAULT_SIZE,
    Board,
    GameError,
    GameOver,
    MalformedEncoding,
    Mark,
    Outcome,
    changed_cell,
    classify,
    deserialize,
)

LOGGER = logging.getLogger(__name__)

HUMAN = 1
ENGINE = 2


class NotYourTurn(GameError):
    """A player move was submitted while the engine is to move."""


class Winner(Enum):
    NONE = "none"
    DRAW = "draw"
    PLAYER1 = "player1"
    PLAYER2 = "player2"


# Player 1 always holds X and player 2 always holds O.
_OUTCOME_WINNER = {
    Outcome.WIN_A: Winner.PLAYER1,
    Outcome.WIN_B: Winner.PLAYER2,
    Outcome.TIE: Winner.DRAW,
}


class Session:
    """One game between a human (player 1, ``X``) and the engine (player 2, ``O``).

    An odd ``starting_offset`` lets ``O`` open, which makes the engine the
    starting player. The session is the only writer of its board; the engine
    only reads encodings and fills the session's cache.
    """

    def __init__(
        self,
        starting_offset: int = 0,
        size: int = DEFAULT_SIZE,
        cache: Optional[MoveCache] = None,
    ) -> None:
        self.offset = starting_offset % 2
        self.size = size
        self.engine = MinimaxEngine(
            size=size,
            offset=self.offset,
            cache=cache if cache is not None else MoveCache(),
        )
        self.board = Board.empty(size)
        self.turn = 0
        self.winner = Winner.NONE
        self.starting_player = self.player_for_turn(0)

    @classmethod
    def from_encoding(
        cls,
        encoding: str,
        starting_offset: int = 0,
        cache: Optional[MoveCache] = None,
    ) -> "Session":
        """Load a position mid-game; the turn is the number of filled cells.

        The mark counts must match alternating play from the starting offset.
        """
        board = deserialize(encoding)
        session = cls(starting_offset=starting_offset, size=board.size, cache=cache)
        turn = board.filled_count()
        opener = session.engine.mark_for_turn(0)
        follower = session.engine.mark_for_turn(1)
        opened = encoding.count(opener)
        followed = encoding.count(follower)
        if opened - followed != turn % 2:
            raise MalformedEncoding(
                f"Encoding {encoding!r} has {opened} {opener} and {followed} {follower}, "
                f"which cannot arise when {opener} moves first"
            )
        session.board = board
        session.turn = turn
        session._record(classify(board))
        return session

    # ---- queries ----

    @property
    def encoding(self) -> str:
        return self.board.encode()

    @property
    def cache(self) -> MoveCache:
        return self.engine.cache

    @property
    def current_mark(self) -> Mark:
        return self.engine.mark_for_turn(self.turn)

    @property
    def current_player(self) -> int:
        return self.player_for_turn(self.turn)

    @property
    def is_over(self) -> bool:
        return self.winner is not Winner.NONE

    def player_for_turn(self, turn: int) -> int:
        return (turn + self.offset) % 2 + 1

    def cell_at(self, row: int, col: int) -> str:
        return self.board.cell_at(row, col)

    def possible_moves(self) -> List[Tuple[int, int]]:
        if self.is_over:
            return []
        return [divmod(i, self.size) for i in self.board.empty_cells()]

    # ---- moves ----

    def apply_player_move(self, row: int, col: int) -> None:
        if self.is_over:
            raise GameOver("Game already finished")
        if self.current_player != HUMAN:
            raise NotYourTurn("It is the engine's turn")
        # apply_move raises InvalidMove before anything is mutated
        self.board = self.board.apply_move(row, col, self.current_mark)
        LOGGER.debug("Player placed %s at (%d, %d)", self.current_mark, row, col)
        self._finish_turn()

    def apply_engine_move(self) -> Tuple[int, int]:
        """Let the engine play the current turn; returns the (row, col) it chose."""
        if self.is_over:
            raise GameOver("Game already finished")
        before = self.encoding
        after = self.engine.find_best_move(before, self.turn)
        row, col = changed_cell(before, after, self.size)
        self.board = deserialize(after, self.size)
        LOGGER.debug("Engine placed %s at (%d, %d)", self.current_mark, row, col)
        self._finish_turn()
        return row, col

    def reset(self) -> None:
        """Clear the board; the engine opens at once if it is the starting player."""
        self.board = Board.empty(self.size)
        self.turn = 0
        self.winner = Winner.NONE
        if self.starting_player == ENGINE:
            self.apply_engine_move()

    # ---- helpers ----

    def _finish_turn(self) -> None:
        self._record(classify(self.board))
        self.turn += 1

    def _record(self, outcome: Outcome) -> None:
        if not outcome.terminal:
            return
        self.winner = _OUTCOME_WINNER[outcome]
        LOGGER.info(
            "Game over after %d moves: %s", self.board.filled_count(), self.winner.value
        )


def new_session(starting_offset: int = 0, size: int = DEFAULT_SIZE) -> Session:
    return Session(starting_offset=starting_offset, size=size)
