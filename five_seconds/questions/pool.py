"""Question pools.

The catalog is split by difficulty band and audience. Each audience (general
and child) draws from its own queue, a shuffled copy of its filtered pool.
A queue is only refilled, with a fresh permutation, once it is empty, so no
question repeats until the whole pool has been served.
"""

from __future__ import annotations

import logging
import random
from typing import NamedTuple, Optional, Sequence, Tuple

from ..errors import EmptyCatalogError
from ..models.difficulty import DifficultyLevel, get_difficulty_range
from ..models.question import Question

_logger = logging.getLogger("five_seconds.pool")

Queue = Tuple[Question, ...]


def filter_by_difficulty(catalog: Sequence[Question], level: DifficultyLevel) -> Queue:
    """Questions whose difficulty lies inside the level's inclusive band."""
    band = get_difficulty_range(level)
    return tuple(q for q in catalog if band.contains(q.difficulty))


def filter_for_kids(questions: Sequence[Question]) -> Queue:
    """Questions flagged as suitable for children."""
    return tuple(q for q in questions if q.for_kids)


def audience_pool(
    catalog: Sequence[Question],
    level: DifficultyLevel,
    for_child: bool,
) -> Queue:
    """Filtered pool for one audience, with the fallback chain applied.

    child band -> general band -> whole catalog.

    Raises:
        EmptyCatalogError: If the catalog itself is empty
    """
    if not catalog:
        raise EmptyCatalogError("question catalog is empty")

    band = filter_by_difficulty(catalog, level)
    if for_child:
        kids = filter_for_kids(band)
        if kids:
            return kids
    if band:
        return band
    return tuple(catalog)


def shuffled(pool: Sequence[Question], rng: random.Random) -> Queue:
    """A fresh random permutation of ``pool``."""
    items = list(pool)
    rng.shuffle(items)
    return tuple(items)


def draw_question(queue: Queue, pool: Sequence[Question], rng: random.Random) -> Tuple[Question, Queue]:
    """Pop the head of ``queue``, refilling it from ``pool`` first when empty."""
    if not queue:
        queue = shuffled(pool, rng)
    return queue[0], queue[1:]


def preview_questions(catalog: Sequence[Question], level: DifficultyLevel) -> Queue:
    """The band's questions ordered for display."""
    return tuple(sorted(filter_by_difficulty(catalog, level), key=lambda q: (q.difficulty, q.id)))


class Draw(NamedTuple):
    """Result of drawing for one audience."""

    question: Optional[Question]
    questions_queue: Queue
    kids_questions_queue: Queue


class QuestionPool:
    """Catalog plus random source shared by every draw of a game."""

    def __init__(
        self,
        catalog: Sequence[Question],
        rng: Optional[random.Random] = None,
    ) -> None:
        self._catalog: Queue = tuple(catalog)
        self._rng = rng or random.Random()
        self._empty_reported = False
        if not self._catalog:
            self._report_empty()

    @property
    def catalog(self) -> Queue:
        return self._catalog

    @property
    def rng(self) -> random.Random:
        return self._rng

    def _report_empty(self) -> None:
        if not self._empty_reported:
            self._empty_reported = True
            _logger.warning("[POOL] Question catalog is empty; no questions can be drawn")

    def pool_for(self, level: DifficultyLevel, for_child: bool) -> Queue:
        """Filtered pool for an audience; empty only when the catalog is empty."""
        try:
            return audience_pool(self._catalog, level, for_child)
        except EmptyCatalogError:
            self._report_empty()
            return ()

    def seed(self, level: DifficultyLevel) -> Tuple[Queue, Queue]:
        """Fresh (general, child) queues for a difficulty band."""
        return (
            shuffled(self.pool_for(level, for_child=False), self._rng),
            shuffled(self.pool_for(level, for_child=True), self._rng),
        )

    def draw(
        self,
        questions_queue: Queue,
        kids_questions_queue: Queue,
        level: DifficultyLevel,
        for_child: bool,
    ) -> Draw:
        """Draw the next question for one audience, leaving the other queue untouched."""
        pool = self.pool_for(level, for_child)
        if not pool:
            return Draw(None, questions_queue, kids_questions_queue)

        if for_child:
            question, rest = draw_question(kids_questions_queue, pool, self._rng)
            if not kids_questions_queue:
                _logger.debug(f"[POOL] Refilled child queue for {level} ({len(pool)} questions)")
            return Draw(question, questions_queue, rest)

        question, rest = draw_question(questions_queue, pool, self._rng)
        if not questions_queue:
            _logger.debug(f"[POOL] Refilled general queue for {level} ({len(pool)} questions)")
        return Draw(question, rest, kids_questions_queue)

    def preview(self, level: DifficultyLevel) -> Queue:
        return preview_questions(self._catalog, level)
