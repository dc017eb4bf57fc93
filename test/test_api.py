"""
REST endpoints and the WebSocket transport, driven through FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from quizconquest.api.main import create_app

from support import QUESTIONS, RIGHT


@pytest.fixture
def client():
    app = create_app(questions=[QUESTIONS[0]], settle_delay=0, seed=1, trust_client_timing=True)
    return TestClient(app)


def receive_until(ws, event, limit=50):
    """Read messages until one of the given event type arrives; return its data."""
    for _ in range(limit):
        message = ws.receive_json()
        if message["event"] == event:
            return message["data"]
    raise AssertionError(f"{event} not received")


def join(ws, name):
    ws.send_json({"type": "join-game", "data": {"name": name}})
    while receive_until(ws, "game-log") != f"{name} joined the game":
        pass


def test_root_reports_question_count(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Quiz Conquest API"
    assert data["questions"] == 1


def test_game_snapshot_before_anyone_joins(client):
    data = client.get("/game").json()
    assert data["status"] == "awaiting_players"
    assert data["players"] == []
    assert data["territories"] == {}

    summary = client.get("/game/summary").json()
    assert summary["totalTerritories"] == 0
    assert summary["currentTurn"] is None


def test_targets_for_unknown_player_is_404(client):
    assert client.get("/players/nobody/targets").status_code == 404


def test_websocket_greets_and_rejects_bad_frames(client):
    with client.websocket_connect("/ws") as ws:
        player_id = receive_until(ws, "connected")["playerId"]
        assert receive_until(ws, "player-list-update") == []

        ws.send_text("not json")
        assert receive_until(ws, "error-message") == "Invalid message"

        join(ws, "Alice")
        ws.send_json({"type": "start-game"})
        assert receive_until(ws, "error-message") == "Need at least 2 players to start"

        players = client.get("/game").json()["players"]
        assert [(p["id"], p["name"]) for p in players] == [(player_id, "Alice")]


def _border_target(territories, attacker_id, defender_id):
    mine = [t for t in territories.values() if t["owner"] == attacker_id]
    for t in territories.values():
        if t["owner"] != defender_id:
            continue
        if any(max(abs(t["x"] - m["x"]), abs(t["y"] - m["y"])) == 1 for m in mine):
            return t["id"]
    raise AssertionError("no border territory")


def test_full_duel_over_websockets(client):
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        alice = receive_until(a, "connected")["playerId"]
        bob = receive_until(b, "connected")["playerId"]
        join(a, "Alice")
        join(b, "Bob")

        a.send_json({"type": "start-game"})
        started = receive_until(a, "game-started")
        receive_until(b, "game-started")
        assert started["currentTurn"] == alice

        target = _border_target(started["territories"], alice, bob)
        targets = client.get(f"/players/{alice}/targets").json()["targets"]
        assert target in targets

        a.send_json({"type": "attack-territory", "data": {"territoryId": target}})
        assert receive_until(a, "question-challenge")["role"] == "attacker"
        challenge = receive_until(b, "question-challenge")
        assert challenge["role"] == "defender"
        assert "correctAnswer" not in challenge["question"]

        a.send_json({"type": "duel-answer", "data": {"territoryId": target, "answer": RIGHT, "responseTime": 300}})
        assert "Waiting for Bob" in receive_until(a, "info-message")
        b.send_json({"type": "duel-answer", "data": {"territoryId": target, "answer": RIGHT, "responseTime": 400}})

        receive_until(b, "duel-complete")
        result = receive_until(b, "duel-result")
        assert result["winner"] == "attacker"
        assert result["attackerId"] == alice
        assert receive_until(a, "duel-result")["territoryId"] == target
        assert receive_until(a, "turn-update") == bob

        snapshot = client.get("/game").json()
        assert snapshot["territories"][target]["owner"] == alice
        assert snapshot["currentTurn"] == bob
        assert snapshot["activeDuels"] == {}
