from __future__ import annotations

from fastapi.testclient import TestClient

from chessrules.protocol.http.app import create_app


START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def _client() -> TestClient:
    return TestClient(create_app())


def _new_game(client: TestClient) -> str:
    r = client.post("/api/games")
    assert r.status_code == 200
    return r.json()["game_id"]


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert isinstance(body["game_id"], str) and body["game_id"]
    assert body["fen"] == START_FEN

    r2 = client.get(f"/api/games/{body['game_id']}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == body["game_id"]
    assert state["side_to_move"] == "w"
    assert state["status"] == "ongoing"
    assert len(state["legal_moves"]) == 20
    assert state["checkers"] == []
    assert state["game_over"] is False
    assert state["move_history"] == []


def test_games_are_independent() -> None:
    client = _client()
    a, b = _new_game(client), _new_game(client)
    assert a != b
    client.post(f"/api/games/{a}/move", json={"move": "e2e4"})
    assert client.get(f"/api/games/{b}/state").json()["fen"] == START_FEN


def test_set_position_validation_and_success() -> None:
    client = _client()
    game_id = _new_game(client)

    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"

    r_bad2 = client.post(f"/api/games/{game_id}/position", json={"fen": "8/8/8 w - -"})
    assert r_bad2.status_code == 400

    fen = "4k3/8/8/8/8/8/8/4R1K1 b - - 0 1"
    r_ok = client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    assert r_ok.status_code == 200
    state = r_ok.json()
    assert state["fen"] == fen
    assert state["status"] == "check"
    assert state["in_check"] is True
    assert state["checkers"] == ["e1"]


def test_moves_for_square() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.get(f"/api/games/{game_id}/moves", params={"square": "g1"})
    assert r.status_code == 200
    moves = r.json()["moves"]
    assert sorted(m["uci"] for m in moves) == ["g1f3", "g1h3"]
    assert moves[0]["from_sq"] == "g1"
    assert moves[0]["special"] == "none"

    r_all = client.get(f"/api/games/{game_id}/moves")
    assert len(r_all.json()["moves"]) == 20

    r_bad = client.get(f"/api/games/{game_id}/moves", params={"square": "z9"})
    assert r_bad.status_code == 400


def test_delete_game() -> None:
    client = _client()
    game_id = _new_game(client)
    assert client.delete(f"/api/games/{game_id}").status_code == 200
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
