"""Unit tests for the HTTP surface using Flask's test client."""

from __future__ import annotations

import random

import pytest

from conftest import build_state
from five_seconds.models import GamePhase
from five_seconds.persistence import build_saved_game_preview
from five_seconds.server import create_app
from five_seconds.session import GameSession
from five_seconds.settings import GameSettings


class FakeClock:
    def __init__(self, on_elapsed):
        self.on_elapsed = on_elapsed
        self.remaining = 0

    def start(self, duration):
        return 1

    def cancel(self):
        return False


class FakePersistence:
    def __init__(self, state=None):
        self.state = state
        self.saved_settings = []

    def save_settings(self, settings):
        self.saved_settings.append(settings)
        return True

    def load_game(self):
        return self.state

    def saved_game_preview(self):
        return build_saved_game_preview(self.state) if self.state is not None else None

    def clear_saved_game(self):
        had = self.state is not None
        self.state = None
        return had


@pytest.fixture
def session(catalog):
    return GameSession(
        catalog,
        settings=GameSettings(special_cells_enabled=False),
        rng=random.Random(5),
        clock_factory=FakeClock,
    )


@pytest.fixture
def store():
    return FakePersistence()


@pytest.fixture
def client(session, store):
    app = create_app(session, store)
    app.config["TESTING"] = True
    return app.test_client()


def start(client, **extra):
    body = {"players": [{"name": "Ana"}, {"name": "Ben", "isChild": True}], **extra}
    return client.post("/api/game", json=body)


def test_healthz(client):
    assert client.get("/healthz").get_json() == {"ok": True}


def test_state_before_start(client):
    assert client.get("/api/state").status_code == 404


def test_start_game(client):
    resp = start(client, boardLength=10, difficultyLevel="easy")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["phase"] == "waiting"
    assert body["boardLength"] == 10
    assert body["difficultyLevel"] == "easy"
    assert [p["name"] for p in body["players"]] == ["Ana", "Ben"]
    assert body["players"][0]["color"] != body["players"][1]["color"]
    assert body["players"][1]["isChild"] is True


@pytest.mark.parametrize(
    "body",
    [
        {"players": "Ana"},
        {"players": [{"name": "Ana"}]},
        {"players": [{"name": "Ana"}, {"name": "Ana"}]},
        {"players": [{"name": "Ana"}, {"name": "Ben"}], "boardLength": 2},
        {"players": [{"name": "Ana"}, {"name": "Ben"}], "boardLength": "long"},
        {"players": [{"name": "Ana"}, {"name": "Ben"}], "difficultyLevel": "insane"},
    ],
)
def test_start_game_rejects_bad_setup(client, body):
    resp = client.post("/api/game", json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_turn_and_actions(client):
    start(client)
    assert client.post("/api/turn/begin").get_json()["phase"] == "countdown"

    for action in ("COUNTDOWN_END", "TIMER_END"):
        client.post("/api/actions", json={"type": action})
    body = client.post("/api/actions", json={"type": "ANSWER_CORRECT"}).get_json()
    assert body["players"][0]["position"] == 1
    assert body["currentPlayerIndex"] == 1
    assert body["playerStats"]["Ana"]["correct"] == 1


def test_malformed_action(client):
    start(client)
    assert client.post("/api/actions", json={"type": "NOPE"}).status_code == 400


def test_action_before_start(client):
    assert client.post("/api/actions", json={"type": "START_TIMER"}).status_code == 409
    assert client.post("/api/turn/begin").status_code == 409
    assert client.post("/api/game/restart").status_code == 409


def test_stop(client, session):
    start(client)
    client.post("/api/turn/begin")
    assert client.post("/api/game/stop").get_json() == {"ok": True}
    assert session.state.phase == GamePhase.WAITING


def test_questions_preview(client):
    body = client.get("/api/questions/preview?level=expert").get_json()
    assert body["label"] == "Expert"
    assert body["count"] == 4
    assert [q["difficulty"] for q in body["questions"]] == [9, 9, 10, 10]
    assert client.get("/api/questions/preview?level=nope").status_code == 400


def test_settings_update(client, session, store):
    assert client.get("/api/settings").get_json()["adultTimerSeconds"] == 5

    resp = client.put("/api/settings", json={"adultTimerSeconds": 8})
    assert resp.status_code == 200
    assert resp.get_json()["adultTimerSeconds"] == 8
    assert session.settings.adult_timer_seconds == 8
    assert session.settings.special_cells_enabled is False
    assert store.saved_settings[-1] == session.settings

    assert client.put("/api/settings", json={"adultTimerSeconds": 0}).status_code == 400
    assert session.settings.adult_timer_seconds == 8


def test_saved_game_routes(session, store):
    store.state = build_state(phase=GamePhase.TIMER)
    client = create_app(session, store).test_client()

    preview = client.get("/api/saved-game/preview").get_json()
    assert preview["boardLength"] == 10

    body = client.post("/api/saved-game/resume").get_json()
    assert body["phase"] == "waiting"
    assert session.state.board_length == 10

    assert client.delete("/api/saved-game").get_json() == {"ok": True}
    assert client.get("/api/saved-game/preview").status_code == 404
    assert client.post("/api/saved-game/resume").status_code == 404


def test_no_persistence_configured(session):
    client = create_app(session).test_client()
    assert client.get("/api/saved-game/preview").status_code == 404
    assert client.delete("/api/saved-game").get_json() == {"ok": False}
