"""Board generation.

Builds the ordered track for one game. Every fifth cell (indices 4, 9, 14,
...) becomes a special tile when special cells are enabled; the start and
finish cells never carry an effect.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple

from .models.board import Board, Cell, SPECIAL_EFFECTS

BOARD_LENGTHS: Tuple[int, ...] = (10, 15, 20)
DEFAULT_BOARD_LENGTH = 15
MIN_BOARD_LENGTH = 3
SPECIAL_CELL_INTERVAL = 5


def is_special_index(index: int, length: int) -> bool:
    """Whether ``index`` is a special-tile slot on a board of ``length`` cells."""
    return 0 < index < length - 1 and (index + 1) % SPECIAL_CELL_INTERVAL == 0


def generate_board(
    length: int,
    special_cells_enabled: bool = True,
    rng: Optional[random.Random] = None,
) -> Board:
    """Generate a board.

    Args:
        length: Number of cells; the last index is the finish line
        special_cells_enabled: Place effect tiles on every fifth cell
        rng: Random source; pass a seeded ``random.Random`` for repeatable boards

    Returns:
        Tuple of cells

    Raises:
        ValueError: If ``length`` is shorter than ``MIN_BOARD_LENGTH``
    """
    if length < MIN_BOARD_LENGTH:
        raise ValueError(f"board length must be at least {MIN_BOARD_LENGTH}, got {length}")

    rand = rng or random.Random()
    cells = []
    for i in range(length):
        if special_cells_enabled and is_special_index(i, length):
            cells.append(Cell.special(rand.choice(SPECIAL_EFFECTS)))
        else:
            cells.append(Cell.normal())
    return tuple(cells)


def special_indices(board: Board) -> Tuple[int, ...]:
    """Indices of the special cells on a board."""
    return tuple(i for i, cell in enumerate(board) if cell.is_special)
