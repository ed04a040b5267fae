"""Unit tests for the PostgreSQL persistence adapter, run against a fake connection."""

from __future__ import annotations

import psycopg2
import pytest

import five_seconds.persistence as persistence
from conftest import build_state
from five_seconds.models import GamePhase, Player
from five_seconds.persistence import (
    GamePersistence,
    build_saved_game_preview,
    deserialize_game,
    serialize_game,
)
from five_seconds.settings import GameSettings


class FakeCursor:
    def __init__(self, db):
        self.db = db
        self._result = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=()):
        statement = " ".join(sql.split())
        self.db.statements.append(statement)
        if self.db.fail:
            raise psycopg2.OperationalError("database went away")
        if statement.startswith("INSERT INTO settings"):
            self.db.settings[params[0]] = params[1]
        elif statement.startswith("SELECT key, value FROM settings"):
            self._result = sorted(self.db.settings.items())
        elif statement.startswith("INSERT INTO saved_games"):
            self.db.games[params[0]] = params[1]
        elif statement.startswith("SELECT payload FROM saved_games"):
            payload = self.db.games.get(params[0])
            self._result = [(payload,)] if payload is not None else []
        elif statement.startswith("DELETE FROM saved_games"):
            self.db.games.pop(params[0], None)

    def fetchall(self):
        return list(self._result)

    def fetchone(self):
        return self._result[0] if self._result else None


class FakeConnection:
    def __init__(self):
        self.closed = 0
        self.autocommit = False
        self.settings = {}
        self.games = {}
        self.statements = []
        self.fail = False

    def cursor(self):
        return FakeCursor(self)


@pytest.fixture
def db(monkeypatch):
    conn = FakeConnection()
    monkeypatch.setenv("FIVE_SECONDS_DB_ENABLED", "1")
    monkeypatch.setattr(persistence.psycopg2, "connect", lambda **kwargs: conn)
    return conn


def test_disabled_store_is_neutral(monkeypatch):
    monkeypatch.delenv("FIVE_SECONDS_DB_ENABLED", raising=False)
    store = GamePersistence()
    assert store.enabled is False
    assert store.load_settings() == {}
    assert store.save_settings(GameSettings()) is False
    assert store.save_game(build_state()) is False
    assert store.load_game() is None
    assert store.has_saved_game() is False
    assert store.saved_game_preview() is None


def test_connection_failure_is_neutral(monkeypatch):
    monkeypatch.setenv("FIVE_SECONDS_DB_ENABLED", "true")

    def refuse(**kwargs):
        raise psycopg2.OperationalError("connection refused")

    monkeypatch.setattr(persistence.psycopg2, "connect", refuse)
    store = GamePersistence()
    assert store.enabled is True
    assert store.load_settings() == {}
    assert store.load_game() is None


def test_tables_created_once(db):
    store = GamePersistence()
    store.load_settings()
    store.load_settings()
    creates = [s for s in db.statements if s.startswith("CREATE TABLE")]
    assert len(creates) == 2
    assert db.autocommit is True


def test_settings_round_trip(db):
    store = GamePersistence()
    assert store.save_settings(GameSettings(adult_timer_seconds=7)) is True
    stored = store.load_settings()
    assert stored["adultTimerSeconds"] == "7"
    assert GameSettings.from_dict(stored).adult_timer_seconds == 7


def test_saved_game_lifecycle(db):
    store = GamePersistence()
    players = (Player(name="Ana", position=4, emoji="🐱"), Player(name="Ben", position=2))
    state = build_state(players=players, phase=GamePhase.JUDGING)

    assert store.save_game(state) is True
    assert store.has_saved_game() is True
    assert store.load_game() == state

    preview = store.saved_game_preview()
    assert preview.max_position == 4
    assert preview.board_length == 10
    assert preview.players[0] == {"name": "Ana", "emoji": "🐱"}

    assert store.clear_saved_game() is True
    assert store.has_saved_game() is False


def test_finished_game_is_not_saved(db):
    store = GamePersistence()
    state = build_state()
    finished = state.evolve(winner=state.players[0])
    assert store.save_game(finished) is False
    assert db.games == {}


def test_query_errors_are_neutral(db):
    store = GamePersistence()
    store.load_settings()
    db.fail = True
    assert store.save_game(build_state()) is False
    assert store.load_game() is None
    assert store.clear_saved_game() is False


def test_unreadable_payload(db):
    store = GamePersistence()
    db.games["default"] = "{not json"
    assert store.load_game() is None


def test_serialize_round_trip():
    state = build_state(skip_next_turn=(1,), double_question=True)
    assert deserialize_game(serialize_game(state)) == state


def test_preview_of_fresh_game():
    preview = build_saved_game_preview(build_state())
    assert preview.max_position == 0
    assert preview.model_dump(by_alias=True)["boardLength"] == 10
