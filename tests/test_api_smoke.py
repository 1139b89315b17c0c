import pytest


@pytest.fixture
def client(tmp_path, monkeypatch):
    pytest.importorskip("fastapi")
    pytest.importorskip("starlette")

    # app reads the db path on every request
    monkeypatch.setenv("TRAPCAT_DB_PATH", str(tmp_path / "games.db"))
    monkeypatch.setenv("TRAPCAT_BOARD_SIZE", "5")

    from fastapi.testclient import TestClient
    from app import app

    return TestClient(app)


def test_api_start_block_and_state(client):
    r = client.post("/api/game/start")
    assert r.status_code == 200
    data = r.json()
    game_id = data["gameId"]
    assert data["boardSize"] == 5
    assert data["catPosition"] == {"q": 0, "r": 0}
    assert data["status"] == "IN_PROGRESS"

    r = client.post("/api/game/block", json={"gameId": game_id, "q": 1, "r": 0})
    assert r.status_code == 200
    out = r.json()
    assert out["moveCount"] == 1
    assert {"q": 1, "r": 0} in out["blockedCells"]
    assert out["catPosition"] != {"q": 0, "r": 0}
    assert out["implementation"] == "bfs"

    # blocking the same cell again is a no-op, not an error
    r = client.post("/api/game/block", json={"gameId": game_id, "q": 1, "r": 0})
    assert r.status_code == 200
    assert r.json()["moveCount"] == 1

    r = client.get(f"/api/game/state/{game_id}")
    assert r.status_code == 200
    assert r.json()["basicState"]["moveCount"] == 1


def test_api_errors(client):
    assert client.post("/api/game/start?boardSize=2").status_code == 400
    assert client.get("/api/game/state/missing").status_code == 404
    assert client.post("/api/game/block", json={"gameId": "missing", "q": 0, "r": 1}).status_code == 404
    assert client.post("/api/game/block", json={"gameId": "x", "q": "a", "r": 1}).status_code == 422


def test_api_suggestion_undo_and_leaderboard(client):
    game_id = client.post("/api/game/start?boardSize=3&difficulty=dificil").json()["gameId"]

    r = client.get(f"/api/game/suggestion/{game_id}")
    assert r.status_code == 200
    assert "suggestion" in r.json()

    client.post("/api/game/block", json={"gameId": game_id, "q": 0, "r": 1})
    r = client.post(f"/api/game/undo/{game_id}")
    assert r.status_code == 200
    assert r.json()["moveCount"] == 0
    assert r.json()["implementation"] == "astar"

    r = client.get(f"/api/game/statistics/{game_id}")
    assert r.status_code == 200
    assert r.json()["moveCount"] == 0

    r = client.get("/api/game/leaderboard?limit=5")
    assert r.status_code == 200
    assert [e["gameId"] for e in r.json()["leaderboard"]] == [game_id]

    assert client.get("/api/game/implementation-info").json()["defaultBoardSize"] == 5


def test_html_index_creates_game(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "Trap the Cat" in r.text
    assert "<form" in r.text


def test_api_pause(client):
    game_id = client.post("/api/game/start").json()["gameId"]

    r = client.post(f"/api/game/pause/{game_id}")
    assert r.status_code == 200
    assert r.json()["paused"] is True

    r = client.post("/api/game/block", json={"gameId": game_id, "q": 1, "r": 0})
    assert r.json()["moveCount"] == 0

    assert client.post(f"/api/game/pause/{game_id}").json()["paused"] is False
    assert client.post("/api/game/pause/missing").status_code == 404
