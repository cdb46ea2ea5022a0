"""PerfectXO package exposing the board model, minimax engine, sessions and web API."""

from .ai import MinimaxEngine, MoveCache
from .game import Board, InvalidMove, MalformedEncoding, Outcome, classify
from .session import Session, Winner, new_session
from .ui import app

__all__ = [
    "Board",
    "InvalidMove",
    "MalformedEncoding",
    "MinimaxEngine",
    "MoveCache",
    "Outcome",
    "Session",
    "Winner",
    "app",
    "classify",
    "new_session",
]
