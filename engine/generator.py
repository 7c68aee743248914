"""Initial board generation."""

import math
import random
from shared.constants import (
    PALETTE, STONE_COLOR, STONE_RATIO, FILL_RATIO, MIN_GROUP_SIZE, BlockKind,
)
from shared.models import Block
from engine.board import Board
from engine.moves import is_deadlock


def plan_quota(total_cells: int, color_count: int) -> dict:
    """Compute the stone count, fill target and per-color quota for a board.

    Every quota is a multiple of MIN_GROUP_SIZE so each color can in
    principle be cleared completely.
    """
    stone_count = math.floor(total_cells * STONE_RATIO)
    available = total_cells - stone_count
    target_fill = math.floor(available * FILL_RATIO)
    max_colors = target_fill // MIN_GROUP_SIZE
    active_colors = max(1, min(color_count, max_colors))
    count_per_color = target_fill // active_colors
    count_per_color -= count_per_color % MIN_GROUP_SIZE
    if count_per_color == 0:
        count_per_color = MIN_GROUP_SIZE
    return {
        "stone_count": stone_count,
        "available": available,
        "target_fill": target_fill,
        "max_colors": max_colors,
        "active_colors": active_colors,
        "count_per_color": count_per_color,
    }


def choose_direction(board, q: int, r: int, rng: random.Random) -> int:
    """Pick a random direction, preferring ones that do not close a deadlock.

    Falls back to the first random pick when every direction deadlocks.
    """
    start = rng.randrange(3)
    for step in range(3):
        direction = (start + step) % 3
        if not is_deadlock(board, q, r, direction):
            return direction
    return start


def generate_board(size: int, color_count: int, rng: random.Random = None,
                   height: int = None) -> Board:
    """Produce a fresh board of size x size (or size x height) cells."""
    rng = rng or random.Random()
    board = Board(size, height)
    cells = sorted(board.all_hexes)
    rng.shuffle(cells)

    color_count = max(1, min(color_count, len(PALETTE)))
    quota = plan_quota(len(cells), color_count)
    stone_count = quota["stone_count"]
    for q, r in cells[:stone_count]:
        board.place(q, r, Block(color=STONE_COLOR, kind=BlockKind.STONE))

    colors = list(PALETTE[:color_count])
    if len(colors) > quota["active_colors"]:
        colors = rng.sample(colors, quota["active_colors"])

    pool = [c for c in colors for _ in range(quota["count_per_color"])]
    rng.shuffle(pool)

    open_cells = cells[stone_count:]
    for (q, r), color in zip(open_cells, pool):
        direction = choose_direction(board, q, r, rng)
        board.place(q, r, Block(color=color, direction=direction))
    return board
