"""Game settings.

Settings are an explicit value handed to the state machine, never read from
ambient storage inside a transition. They come from a YAML file, environment
overrides and, when a database is configured, the persisted key-value store.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .board import DEFAULT_BOARD_LENGTH, MIN_BOARD_LENGTH
from .coerce import as_bool
from .errors import ConfigurationError
from .models.difficulty import DifficultyLevel

_logger = logging.getLogger("five_seconds.settings")

SETTINGS_PATH_ENV = "FIVE_SECONDS_SETTINGS"
ENV_PREFIX = "FIVE_SECONDS_"

MIN_TIMER_SECONDS = 1
MAX_TIMER_SECONDS = 60


class GameSettings(BaseModel):
    """Values the state machine reads at phase transitions."""

    adult_timer_seconds: int = Field(default=5, alias="adultTimerSeconds")
    child_timer_seconds: int = Field(default=10, alias="childTimerSeconds")
    special_cells_enabled: bool = Field(default=True, alias="specialCellsEnabled")
    difficulty_level: DifficultyLevel = Field(default="medium", alias="difficultyLevel")
    show_question_immediately: bool = Field(default=False, alias="showQuestionImmediately")
    countdown_seconds: int = Field(default=3, alias="countdownSeconds")
    board_length: int = Field(default=DEFAULT_BOARD_LENGTH, alias="boardLength")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("adult_timer_seconds", "child_timer_seconds")
    @classmethod
    def validate_timer(cls, v: int) -> int:
        if v < MIN_TIMER_SECONDS or v > MAX_TIMER_SECONDS:
            raise ValueError(
                f"timer must be between {MIN_TIMER_SECONDS} and {MAX_TIMER_SECONDS} seconds"
            )
        return v

    @field_validator("countdown_seconds")
    @classmethod
    def validate_countdown(cls, v: int) -> int:
        if v < 0 or v > MAX_TIMER_SECONDS:
            raise ValueError(f"countdown must be between 0 and {MAX_TIMER_SECONDS} seconds")
        return v

    @field_validator("board_length")
    @classmethod
    def validate_board_length(cls, v: int) -> int:
        if v < MIN_BOARD_LENGTH:
            raise ValueError(f"board length must be at least {MIN_BOARD_LENGTH}")
        return v

    def base_timer_seconds(self, is_child: bool) -> int:
        return self.child_timer_seconds if is_child else self.adult_timer_seconds

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GameSettings:
        """Create from dict with flexible field names.

        Raises:
            ConfigurationError: If a value fails validation
        """
        defaults = cls()
        values: Dict[str, Any] = {}
        try:
            for name, field in cls.model_fields.items():
                raw = data.get(field.alias or name, data.get(name))
                if raw is None:
                    continue
                if isinstance(getattr(defaults, name), bool):
                    raw = as_bool(raw)
                elif isinstance(getattr(defaults, name), int):
                    raw = int(raw)
                else:
                    raw = str(raw).strip().lower()
                values[name] = raw
            return cls(**values)
        except (ValueError, ValidationError) as exc:
            raise ConfigurationError(f"invalid settings: {exc}", {"values": values}) from exc

    def merged(self, changes: Mapping[str, Any]) -> GameSettings:
        """Return these settings with ``changes`` (either key style) applied."""
        return type(self).from_dict({**self.model_dump(), **_canonical_keys(changes)})

    def to_store(self) -> Dict[str, str]:
        """Flatten to the string key-value shape kept by the settings store."""
        return {
            (field.alias or name): str(getattr(self, name)).lower()
            if isinstance(getattr(self, name), bool)
            else str(getattr(self, name))
            for name, field in type(self).model_fields.items()
        }


def _load_yaml_file(filepath: str) -> Optional[Dict[str, Any]]:
    """Load a YAML mapping safely."""
    if not os.path.isfile(filepath):
        return None
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as exc:
        _logger.warning(f"[SETTINGS] Failed to read {filepath}: {exc}")
        return None
    return data if isinstance(data, dict) else None


def _canonical_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map camelCase aliases onto field names; unknown keys are dropped."""
    by_alias = {(field.alias or name): name for name, field in GameSettings.model_fields.items()}
    out: Dict[str, Any] = {}
    for key, value in data.items():
        name = by_alias.get(key, key)
        if name in GameSettings.model_fields:
            out[name] = value
    return out


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for name in GameSettings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in environ:
            overrides[name] = environ[key]
    return overrides


def load_settings(
    path: Optional[str] = None,
    stored: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GameSettings:
    """Resolve settings: YAML file, then stored values, then environment.

    Args:
        path: YAML file; defaults to ``$FIVE_SECONDS_SETTINGS`` when set
        stored: Values from the settings store (e.g. ``GamePersistence.load_settings``)
        environ: Environment mapping, ``os.environ`` by default
    """
    env = os.environ if environ is None else environ
    merged: Dict[str, Any] = {}

    settings_path = path or env.get(SETTINGS_PATH_ENV)
    if settings_path:
        file_data = _load_yaml_file(settings_path)
        if file_data is None:
            _logger.warning(f"[SETTINGS] No settings found at {settings_path}; using defaults")
        else:
            merged.update(_canonical_keys(file_data))

    if stored:
        merged.update(_canonical_keys(stored))
    merged.update(_env_overrides(env))
    return GameSettings.from_dict(merged)
