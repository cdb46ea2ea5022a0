"""FastAPI JSON front end that drives PerfectXO sessions over HTTP."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .game import EMPTY, Board, GameError, changed_cell
from .session import ENGINE, HUMAN, Session

LOGGER = logging.getLogger(__name__)


@dataclass
class ActiveGame:
    """Container for a live session and the moves played in it."""

    session: Session
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


GAMES: Dict[str, ActiveGame] = {}
app = FastAPI(
    title="PerfectXO",
    description="Tic-tac-toe against an exhaustive minimax engine",
)


ALLOWED_SIZES: Tuple[int, ...] = (2, 3)
PLAYER_NAMES = {HUMAN: "player", ENGINE: "engine"}


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    starting_offset: int = Field(
        default=0,
        alias="startingOffset",
        ge=0,
        description="Odd values let O (the engine) open the game",
    )
    size: int = Field(default=3, description="Board side length")

    @field_validator("size")
    @classmethod
    def ensure_supported_size(cls, value: int) -> int:
        if value not in ALLOWED_SIZES:
            raise ValueError(
                f"Unsupported board size {value}. "
                f"Choose one of {', '.join(map(str, ALLOWED_SIZES))}."
            )
        return value


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    row: int = Field(ge=0)
    col: int = Field(ge=0)


def _create_game(starting_offset: int, size: int) -> Tuple[str, ActiveGame]:
    """Create a new game and register it for later access."""

    game = ActiveGame(session=Session(starting_offset=starting_offset, size=size))
    game_id = uuid.uuid4().hex
    GAMES[game_id] = game
    with game.lock:
        _reset(game)
    LOGGER.info(
        "Created game %s (size=%d, starting player=%s)",
        game_id,
        size,
        PLAYER_NAMES[game.session.starting_player],
    )
    return game_id, game


def _get_game(game_id: str) -> ActiveGame:
    try:
        return GAMES[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _log_move(game: ActiveGame, player: int, mark: str, row: int, col: int) -> None:
    game.move_log.append(
        {"player": PLAYER_NAMES[player], "mark": mark, "row": row, "col": col}
    )


def _reset(game: ActiveGame) -> None:
    session = game.session
    game.move_log.clear()
    session.reset()
    if session.turn == 1:
        # The engine opened during reset.
        opening = Board.empty(session.size).encode()
        row, col = changed_cell(opening, session.encoding, session.size)
        _log_move(game, ENGINE, session.engine.mark_for_turn(0), row, col)


def _play_engine(game: ActiveGame) -> None:
    session = game.session
    mark = session.current_mark
    row, col = session.apply_engine_move()
    _log_move(game, ENGINE, mark, row, col)


def _apply_player_move(game: ActiveGame, row: int, col: int) -> None:
    with game.lock:
        session = game.session
        mark = session.current_mark
        try:
            session.apply_player_move(row, col)
        except GameError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        _log_move(game, HUMAN, mark, row, col)

        if not session.is_over and session.current_player == ENGINE:
            _play_engine(game)


def _serialize_game(game_id: str, game: ActiveGame) -> Dict[str, object]:
    with game.lock:
        session = game.session
        board = [
            [c if c != EMPTY else "" for c in row] for row in session.board.rows()
        ]
        state: Dict[str, object] = {
            "id": game_id,
            "size": session.size,
            "board": board,
            "encoding": session.encoding,
            "turn": session.turn,
            "currentMark": session.current_mark,
            "currentPlayer": PLAYER_NAMES[session.current_player],
            "startingPlayer": PLAYER_NAMES[session.starting_player],
            "winner": session.winner.value,
            "possibleMoves": [
                {"row": row, "col": col} for row, col in session.possible_moves()
            ],
            "moveLog": list(game.move_log),
        }
        last_move: Optional[Dict[str, int | str]] = (
            game.move_log[-1] if game.move_log else None
        )
        if last_move:
            state["lastMove"] = last_move
        return state


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, game = _create_game(request.starting_offset, request.size)
    return _serialize_game(game_id, game)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    game = _get_game(game_id)
    return _serialize_game(game_id, game)


@app.post("/api/game/{game_id}/move")
def make_move(game_id: str, request: MoveRequest) -> Dict[str, object]:
    game = _get_game(game_id)
    _apply_player_move(game, request.row, request.col)
    return _serialize_game(game_id, game)


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str) -> Dict[str, object]:
    game = _get_game(game_id)
    with game.lock:
        _reset(game)
    return _serialize_game(game_id, game)
