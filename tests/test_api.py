"""Tests for the FastAPI PerfectXO interface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from perfectxo.ui import app


client = TestClient(app)


def test_create_game_and_first_move():
    response = client.post("/api/game", json={})
    assert response.status_code == 200
    payload = response.json()
    assert payload["currentPlayer"] == "player"
    assert payload["startingPlayer"] == "player"
    assert payload["currentMark"] == "X"
    assert payload["winner"] == "none"
    assert payload["moveLog"] == []
    assert payload["board"] == [["", "", ""]] * 3
    assert len(payload["possibleMoves"]) == 9

    game_id = payload["id"]
    move_response = client.post(
        f"/api/game/{game_id}/move", json={"row": 1, "col": 1}
    )
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["board"][1][1] == "X"
    assert [entry["player"] for entry in state["moveLog"]] == ["player", "engine"]
    assert state["moveLog"][1]["mark"] == "O"
    assert state["lastMove"] == state["moveLog"][1]
    assert state["turn"] == 2
    assert state["currentPlayer"] == "player"
    assert state["encoding"].count("O") == 1

    follow_up = client.get(f"/api/game/{game_id}")
    assert follow_up.status_code == 200
    assert follow_up.json()["encoding"] == state["encoding"]


def test_invalid_move_rejected():
    response = client.post("/api/game", json={"size": 3})
    assert response.status_code == 200
    game_id = response.json()["id"]

    first_move = client.post(f"/api/game/{game_id}/move", json={"row": 0, "col": 0})
    assert first_move.status_code == 200

    # Attempting to play the same cell should fail.
    duplicate_move = client.post(
        f"/api/game/{game_id}/move", json={"row": 0, "col": 0}
    )
    assert duplicate_move.status_code == 400
    assert duplicate_move.json()["detail"]

    outside = client.post(f"/api/game/{game_id}/move", json={"row": 3, "col": 0})
    assert outside.status_code == 400

    negative = client.post(f"/api/game/{game_id}/move", json={"row": -1, "col": 0})
    assert negative.status_code == 422

    unchanged = client.get(f"/api/game/{game_id}").json()
    assert unchanged["turn"] == 2


def test_rejects_unsupported_size():
    response = client.post("/api/game", json={"size": 5})
    assert response.status_code == 422


def test_engine_opens_when_offset_is_odd():
    response = client.post("/api/game", json={"startingOffset": 1})
    assert response.status_code == 200
    payload = response.json()
    assert payload["startingPlayer"] == "engine"
    assert payload["turn"] == 1
    assert len(payload["moveLog"]) == 1
    assert payload["moveLog"][0]["player"] == "engine"
    assert payload["moveLog"][0]["mark"] == "O"

    reset = client.post(f"/api/game/{payload['id']}/reset")
    assert reset.status_code == 200
    again = reset.json()
    assert again["turn"] == 1
    assert again["encoding"] == payload["encoding"]
    assert len(again["moveLog"]) == 1


def test_small_board_game_finishes():
    response = client.post("/api/game", json={"size": 2})
    assert response.status_code == 200
    game_id = response.json()["id"]

    state = client.post(f"/api/game/{game_id}/move", json={"row": 0, "col": 0}).json()
    move = state["possibleMoves"][0]
    state = client.post(f"/api/game/{game_id}/move", json=move).json()
    assert state["winner"] == "player1"
    assert state["possibleMoves"] == []

    late = client.post(f"/api/game/{game_id}/move", json={"row": 1, "col": 1})
    assert late.status_code == 400


def test_missing_game_returns_404():
    missing = client.get("/api/game/INVALID")
    assert missing.status_code == 404
    assert client.post("/api/game/INVALID/reset").status_code == 404
