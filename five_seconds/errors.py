"""Exception classes for the game core."""

from __future__ import annotations

from typing import Any, Optional


class FiveSecondsError(Exception):
    """Base exception for the game core."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details})"


class ConfigurationError(FiveSecondsError):
    """Settings or bundled assets are unusable."""


class EmptyCatalogError(ConfigurationError):
    """The question catalog has no entries at all."""


class RosterValidationError(FiveSecondsError):
    """A player list handed in by setup or a roster edit is invalid."""
