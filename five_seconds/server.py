#!/usr/bin/env python3
"""HTTP surface for a presentation layer.

Exposes the live game state and accepts the same actions the state machine
understands, so a browser UI can drive a ``GameSession`` over JSON.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from flask import Flask, jsonify, request

from .actions import action_from_dict
from .board import MIN_BOARD_LENGTH
from .content.loaders import load_catalog
from .errors import FiveSecondsError
from .models.difficulty import DIFFICULTY_RANGES, is_difficulty_level
from .persistence import GamePersistence
from .roster import build_players
from .session import GameSession, SessionError
from .settings import load_settings

_logger = logging.getLogger("five_seconds.server")


def _error(message: str, status: int = 400, **details: Any):
    body: dict[str, Any] = {"error": message}
    if details:
        body["details"] = details
    return jsonify(body), status


def create_app(session: GameSession, persistence: Optional[GamePersistence] = None) -> Flask:
    app = Flask(__name__)

    @app.get("/healthz")
    def healthz():
        return jsonify({"ok": True})

    @app.get("/api/state")
    def api_state():
        if session.state is None:
            return _error("no game in progress", 404)
        return jsonify(session.snapshot())

    @app.post("/api/game")
    def api_start_game():
        data = request.get_json(silent=True) or {}
        entries = data.get("players")
        if not isinstance(entries, list):
            return _error("players must be a list")

        board_length = data.get("boardLength")
        if board_length is not None:
            try:
                board_length = int(board_length)
            except (TypeError, ValueError):
                return _error("boardLength must be an integer")
            if board_length < MIN_BOARD_LENGTH:
                return _error(f"boardLength must be at least {MIN_BOARD_LENGTH}")

        level = data.get("difficultyLevel")
        if level is not None and not is_difficulty_level(level):
            return _error(f"unknown difficulty level: {level}")

        try:
            players = build_players([e for e in entries if isinstance(e, dict)])
        except FiveSecondsError as exc:
            return _error(exc.message, **exc.details)

        session.start(players, board_length=board_length, difficulty_level=level)
        return jsonify(session.snapshot()), 201

    @app.post("/api/game/restart")
    def api_restart_game():
        try:
            session.restart()
        except SessionError as exc:
            return _error(str(exc), 409)
        return jsonify(session.snapshot())

    @app.post("/api/turn/begin")
    def api_begin_turn():
        try:
            session.begin_turn()
        except SessionError as exc:
            return _error(str(exc), 409)
        return jsonify(session.snapshot())

    @app.post("/api/actions")
    def api_dispatch():
        action = action_from_dict(request.get_json(silent=True) or {})
        if action is None:
            return _error("malformed action")
        try:
            session.dispatch(action)
        except SessionError as exc:
            return _error(str(exc), 409)
        return jsonify(session.snapshot())

    @app.post("/api/game/stop")
    def api_stop():
        session.stop()
        return jsonify({"ok": True})

    @app.get("/api/questions/preview")
    def api_questions_preview():
        level = request.args.get("level") or session.settings.difficulty_level
        if not is_difficulty_level(level):
            return _error(f"unknown difficulty level: {level}")
        questions = session.pool.preview(level)
        return jsonify(
            {
                "level": level,
                "label": DIFFICULTY_RANGES[level].label,
                "count": len(questions),
                "questions": [q.model_dump(mode="json", by_alias=True) for q in questions],
            }
        )

    @app.get("/api/settings")
    def api_get_settings():
        return jsonify(session.settings.model_dump(mode="json", by_alias=True))

    @app.put("/api/settings")
    def api_put_settings():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error("settings must be an object")
        try:
            settings = session.settings.merged(data)
        except FiveSecondsError as exc:
            return _error(exc.message)
        session.configure(settings)
        if persistence is not None:
            persistence.save_settings(settings)
        return jsonify(settings.model_dump(mode="json", by_alias=True))

    @app.get("/api/saved-game/preview")
    def api_saved_game_preview():
        preview = persistence.saved_game_preview() if persistence is not None else None
        if preview is None:
            return _error("no saved game", 404)
        return jsonify(preview.model_dump(mode="json", by_alias=True))

    @app.post("/api/saved-game/resume")
    def api_resume_saved_game():
        state = persistence.load_game() if persistence is not None else None
        if state is None:
            return _error("no saved game", 404)
        session.resume(state)
        return jsonify(session.snapshot())

    @app.delete("/api/saved-game")
    def api_clear_saved_game():
        cleared = persistence.clear_saved_game() if persistence is not None else False
        return jsonify({"ok": cleared})

    return app


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("FIVE_SECONDS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("FIVE_SECONDS_HOST", "0.0.0.0")
    port = int(os.environ.get("FIVE_SECONDS_PORT", "8097"))

    persistence = GamePersistence()
    settings = load_settings(stored=persistence.load_settings())
    session = GameSession(
        load_catalog(),
        settings=settings,
        on_game_end=lambda summary: persistence.clear_saved_game(),
    )

    def _autosave(state) -> None:
        if not state.is_over:
            persistence.save_game(state)

    if persistence.enabled:
        session.subscribe(_autosave)

    app = create_app(session, persistence)
    try:
        app.run(host=host, port=port, debug=False, use_reloader=False)
    finally:
        session.stop()


if __name__ == "__main__":
    main()
