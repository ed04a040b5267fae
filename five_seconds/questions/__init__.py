"""Question catalog filtering and non-repeating draws."""

from .pool import (
    Draw,
    QuestionPool,
    audience_pool,
    draw_question,
    filter_by_difficulty,
    filter_for_kids,
    preview_questions,
    shuffled,
)

__all__ = [
    "Draw",
    "QuestionPool",
    "audience_pool",
    "draw_question",
    "filter_by_difficulty",
    "filter_for_kids",
    "preview_questions",
    "shuffled",
]
