"""PostgreSQL persistence helpers for settings and the saved game."""

from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Dict, List, Optional, Tuple

import psycopg2
from pydantic import BaseModel, Field, ValidationError

from .coerce import as_bool
from .models.state import GameState
from .settings import GameSettings

DEFAULT_SLOT = "default"


class SavedGamePreview(BaseModel):
    """What the start screen shows about a game that can be resumed."""

    players: List[Dict[str, Optional[str]]]
    max_position: int = Field(alias="maxPosition")
    board_length: int = Field(alias="boardLength")

    model_config = {"populate_by_name": True, "frozen": True}


def build_saved_game_preview(state: GameState) -> SavedGamePreview:
    return SavedGamePreview(
        players=[{"name": p.name, "emoji": p.emoji} for p in state.players],
        max_position=max((p.position for p in state.players), default=0),
        board_length=state.board_length,
    )


def serialize_game(state: GameState) -> str:
    return json.dumps(state.model_dump(mode="json", by_alias=True), ensure_ascii=False)


def deserialize_game(payload: Any) -> Optional[GameState]:
    """Rebuild a state from its stored JSON; None when it is unusable."""
    try:
        data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
        return GameState.model_validate(data)
    except (TypeError, ValueError, ValidationError):
        return None


class GamePersistence:
    """Thin DB adapter for the settings store and saved-game slots."""

    def __init__(self, logger: Optional[Any] = None) -> None:
        self._logger = logger or logging.getLogger("five_seconds.persistence")
        self._lock = threading.Lock()
        self._conn = None
        self._tables_ready = False
        self._db_enabled = as_bool(os.environ.get("FIVE_SECONDS_DB_ENABLED"), False)
        self._db_cfg = {
            "dbname": os.environ.get("POSTGRES_DB", "five_seconds"),
            "user": os.environ.get("POSTGRES_USER", "five_seconds"),
            "password": os.environ.get("POSTGRES_PASSWORD", ""),
            "host": os.environ.get("POSTGRES_HOST", "localhost"),
            "port": int(os.environ.get("POSTGRES_PORT", "5432")),
            "connect_timeout": int(os.environ.get("POSTGRES_CONNECT_TIMEOUT_SEC", "3")),
        }

    @property
    def enabled(self) -> bool:
        return self._db_enabled

    def _get_conn(self):
        if not self.enabled:
            return None
        with self._lock:
            try:
                if self._conn is not None and getattr(self._conn, "closed", 1) == 0:
                    return self._conn
            except Exception:
                self._conn = None
            try:
                self._conn = psycopg2.connect(**self._db_cfg)
                self._conn.autocommit = True
                self._logger.info(
                    "[DB] Connected to "
                    f"{self._db_cfg['host']}:{self._db_cfg['port']}/{self._db_cfg['dbname']}"
                )
                return self._conn
            except psycopg2.Error as exc:
                self._logger.warning(f"[DB] Connection failed: {exc}")
                self._conn = None
                return None

    def _ensure_tables(self, conn: Any) -> bool:
        if self._tables_ready:
            return True
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS settings (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP NOT NULL DEFAULT NOW()
                    )
                    """
                )
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS saved_games (
                        slot TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        updated_at TIMESTAMP NOT NULL DEFAULT NOW()
                    )
                    """
                )
            self._tables_ready = True
            return True
        except psycopg2.Error as exc:
            self._logger.warning(f"[DB] Failed to ensure tables: {exc}")
            return False

    def _ready_conn(self):
        conn = self._get_conn()
        if conn is None or not self._ensure_tables(conn):
            return None
        return conn

    def load_settings(self) -> Dict[str, str]:
        """Return the stored key-value settings (camelCase keys)."""
        conn = self._ready_conn()
        if conn is None:
            return {}
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT key, value FROM settings ORDER BY key ASC")
                rows = cur.fetchall() or []
            return {str(row[0]): str(row[1]) for row in rows if row and len(row) >= 2}
        except psycopg2.Error as exc:
            self._logger.warning(f"[DB] Failed to load settings: {exc}")
            return {}

    def save_settings(self, settings: GameSettings) -> bool:
        conn = self._ready_conn()
        if conn is None:
            return False
        rows: List[Tuple[str, str]] = sorted(settings.to_store().items())
        try:
            with conn.cursor() as cur:
                for key, value in rows:
                    cur.execute(
                        """
                        INSERT INTO settings (key, value, updated_at)
                        VALUES (%s, %s, NOW())
                        ON CONFLICT (key) DO UPDATE
                        SET value = EXCLUDED.value,
                            updated_at = NOW()
                        """,
                        (key, value),
                    )
            return True
        except psycopg2.Error as exc:
            self._logger.warning(f"[DB] Failed to save settings: {exc}")
            return False

    def save_game(self, state: GameState, slot: str = DEFAULT_SLOT) -> bool:
        """Store an in-progress game. Finished games are not saved."""
        if state.is_over:
            return False
        conn = self._ready_conn()
        if conn is None:
            return False
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO saved_games (slot, payload, updated_at)
                    VALUES (%s, %s, NOW())
                    ON CONFLICT (slot) DO UPDATE
                    SET payload = EXCLUDED.payload,
                        updated_at = NOW()
                    """,
                    (str(slot), serialize_game(state)),
                )
            return True
        except psycopg2.Error as exc:
            self._logger.warning(f"[DB] Failed to save game: {exc}")
            return False

    def load_game(self, slot: str = DEFAULT_SLOT) -> Optional[GameState]:
        conn = self._ready_conn()
        if conn is None:
            return None
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT payload FROM saved_games WHERE slot=%s", (str(slot),))
                row = cur.fetchone()
        except psycopg2.Error as exc:
            self._logger.warning(f"[DB] Failed to load game: {exc}")
            return None
        if not row:
            return None
        state = deserialize_game(row[0])
        if state is None:
            self._logger.warning(f"[DB] Saved game in slot {slot!r} is unreadable")
        return state

    def clear_saved_game(self, slot: str = DEFAULT_SLOT) -> bool:
        conn = self._ready_conn()
        if conn is None:
            return False
        try:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM saved_games WHERE slot=%s", (str(slot),))
            return True
        except psycopg2.Error as exc:
            self._logger.warning(f"[DB] Failed to clear saved game: {exc}")
            return False

    def has_saved_game(self, slot: str = DEFAULT_SLOT) -> bool:
        return self.load_game(slot) is not None

    def saved_game_preview(self, slot: str = DEFAULT_SLOT) -> Optional[SavedGamePreview]:
        state = self.load_game(slot)
        if state is None:
            return None
        return build_saved_game_preview(state)
