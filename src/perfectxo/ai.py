"""Exhaustive minimax search with a reply cache for N×N tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import threading

from .game import (
    DEFAULT_SIZE,
    EMPTY,
    MARK_A,
    MARKS,
    Board,
    GameOver,
    Mark,
    Outcome,
    classify,
    deserialize,
)

LOGGER = logging.getLogger(__name__)

MAX_SCORE = 1000
TIE_SCORE = 0
# Marks a child whose outcome is not decided yet; never a final answer.
UNRESOLVED_SCORE = MAX_SCORE * 2

# Scores are absolute: wins for this mark are positive, so it maximizes.
PERSPECTIVE_MARK: Mark = MARK_A


@dataclass(frozen=True)
class CacheEntry:
    move: str
    score: int


class MoveCache:
    """Write-once mapping from a board encoding to its best reply and score.

    Stores are check-then-insert under a lock so several sessions may share
    one cache; the first writer for a key wins.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, encoding: str) -> Optional[CacheEntry]:
        return self._entries.get(encoding)

    def store(self, encoding: str, move: str, score: int) -> CacheEntry:
        with self._lock:
            existing = self._entries.get(encoding)
            if existing is not None:
                return existing
            entry = CacheEntry(move=move, score=score)
            self._entries[encoding] = entry
            return entry

    def __contains__(self, encoding: object) -> bool:
        return encoding in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class MinimaxEngine:
    """Full-depth minimax player.

    ``offset`` maps a turn index to the mark placed on it, exactly as the
    owning session does. Results for positions where ``O`` is to move are
    memoized in ``cache``; the session injects its own instance.

    Public surface:
      - find_best_move(encoding, turn) -> child encoding
      - evaluate(encoding, turn) -> (child encoding, propagated score)
    """

    size: int = DEFAULT_SIZE
    offset: int = 0
    cache: MoveCache = field(default_factory=MoveCache, repr=False)
    # Number of positions whose children have been enumerated.
    expansions: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.offset %= 2

    @property
    def max_moves(self) -> int:
        return self.size * self.size

    @property
    def max_depth(self) -> int:
        return self.max_moves

    @property
    def depth_multiplier(self) -> int:
        return MAX_SCORE // (self.max_moves + 1)

    def mark_for_turn(self, turn: int) -> Mark:
        return MARKS[(turn + self.offset) % 2]

    def maximizes(self, turn: int) -> bool:
        return self.mark_for_turn(turn) == PERSPECTIVE_MARK

    # ---- public API ----

    def find_best_move(self, encoding: str, turn: int) -> str:
        move, _ = self.evaluate(encoding, turn)
        return move

    def evaluate(self, encoding: str, turn: int) -> Tuple[str, int]:
        outcome = classify(deserialize(encoding, self.size))
        if outcome.terminal:
            raise GameOver(f"Cannot search a finished board ({outcome.value})")

        before = self.expansions
        move, score = self._search(encoding, turn, 1)
        LOGGER.debug(
            "Minimax selected %s with score %d (%d expansions, %d cached replies)",
            move,
            score,
            self.expansions - before,
            len(self.cache),
        )
        return move, score

    def possible_moves(self, encoding: str, turn: int) -> List[str]:
        """One child encoding per empty cell, in row-major order."""
        mark = self.mark_for_turn(turn)
        return [
            encoding[:i] + mark + encoding[i + 1 :]
            for i, c in enumerate(encoding)
            if c == EMPTY
        ]

    def terminal_score(self, encoding: str, depth: int) -> int:
        """Score a board reached ``depth`` plies below the query root.

        Wins lose ``depth_multiplier`` per ply so quicker wins rank above
        slower ones and slower losses above quicker ones.
        """

        outcome = classify(Board(size=self.size, cells=tuple(encoding)))
        if outcome is Outcome.ONGOING:
            return UNRESOLVED_SCORE
        if outcome is Outcome.TIE:
            return TIE_SCORE
        magnitude = MAX_SCORE - self.depth_multiplier * depth
        return magnitude if outcome is Outcome.WIN_A else -magnitude

    # ---- core search ----

    def _search(self, encoding: str, turn: int, depth: int) -> Tuple[str, int]:
        hit = self.cache.get(encoding)
        if hit is not None:
            return hit.move, hit.score

        children = self.possible_moves(encoding, turn)
        self.expansions += 1
        scores = [self.terminal_score(child, depth) for child in children]

        # Only children decided at this node count towards the bonus.
        wins_and_ties = losses_and_ties = 0
        for i, score in enumerate(scores):
            if score == UNRESOLVED_SCORE:
                if depth < self.max_depth:
                    scores[i] = self._search(children[i], turn + 1, depth + 1)[1]
            elif score == TIE_SCORE:
                wins_and_ties += 1
                losses_and_ties += 1
            elif score > 0:
                wins_and_ties += 1
            else:
                losses_and_ties += 1

        if self.maximizes(turn):
            best = _argmax(scores)
            return children[best], scores[best] + wins_and_ties

        best = _argmin(scores)
        entry = self.cache.store(
            encoding, children[best], scores[best] - losses_and_ties
        )
        return entry.move, entry.score


def _argmax(values: List[int]) -> int:
    best = 0
    for i in range(1, len(values)):
        if values[i] > values[best]:
            best = i
    return best


def _argmin(values: List[int]) -> int:
    best = 0
    for i in range(1, len(values)):
        if values[i] < values[best]:
            best = i
    return best
