from __future__ import annotations

from fastapi.testclient import TestClient

from chessrules.protocol.http.app import create_app


def _game(client: TestClient) -> str:
    return client.post("/api/games").json()["game_id"]


def test_legal_move_updates_state() -> None:
    client = TestClient(create_app())
    game_id = _game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r.status_code == 200
    state = r.json()
    assert state["fen"] == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    assert state["last_move"] == "e2e4"
    assert state["side_to_move"] == "b"


def test_illegal_move_is_rejected() -> None:
    client = TestClient(create_app())
    game_id = _game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e5"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "illegal_move"
    # state unchanged
    assert client.get(f"/api/games/{game_id}/state").json()["move_history"] == []


def test_malformed_move_is_bad_request() -> None:
    client = TestClient(create_app())
    game_id = _game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_no_moves_after_checkmate() -> None:
    client = TestClient(create_app())
    game_id = _game(client)
    for mv in ("f2f3", "e7e5", "g2g4", "d8h4"):
        assert client.post(f"/api/games/{game_id}/move", json={"move": mv}).status_code == 200
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["status"] == "checkmate"
    assert state["checkmate"] is True
    assert state["game_over"] is True
    assert state["draw"] is False
    assert state["legal_moves"] == []

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e1f2"})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"
