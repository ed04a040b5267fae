"""Shared fixtures: a small deterministic catalog and helpers to build states."""

from __future__ import annotations

import random
from typing import Dict, Optional, Sequence

import pytest

from five_seconds.models import Cell, GameState, Player, PlayerStats, Question, SpecialEffect
from five_seconds.questions.pool import QuestionPool
from five_seconds.settings import GameSettings


def build_catalog() -> tuple:
    """Twenty questions: difficulty cycles 1..10, even ids are for kids."""
    return tuple(
        Question(id=i, text=f"Question {i}", for_kids=(i % 2 == 0), difficulty=((i - 1) % 10) + 1)
        for i in range(1, 21)
    )


def build_board(length: int = 10, specials: Optional[Dict[int, SpecialEffect]] = None) -> tuple:
    cells = [Cell.normal() for _ in range(length)]
    for idx, effect in (specials or {}).items():
        cells[idx] = Cell.special(effect)
    return tuple(cells)


def build_state(
    length: int = 10,
    specials: Optional[Dict[int, SpecialEffect]] = None,
    players: Optional[Sequence[Player]] = None,
    **changes,
) -> GameState:
    roster = tuple(players or (Player(name="A"), Player(name="B")))
    state = GameState(
        players=roster,
        board=build_board(length, specials),
        current_question=build_catalog()[0],
        player_stats={p.name: PlayerStats() for p in roster},
    )
    return state.evolve(**changes) if changes else state


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def settings():
    return GameSettings()


@pytest.fixture
def pool(catalog):
    return QuestionPool(catalog, random.Random(7))
