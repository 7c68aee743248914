"""Match resolution: normal matches, special wipes, wildcards, bombs, tools.

Every resolver mutates the board in place and returns a Resolution. Blocks
caught by a resolution are marked dying (see Board.mark_dying) and must later
be purged; the only block deleted outright is a detonating bomb.
"""

from typing import Optional
from shared.constants import (
    BlockKind, MIN_GROUP_SIZE, PROMOTE_GROUP_SIZE, DESTROY_NEAREST_LIMIT,
    BOMB_COLOR, WILDCARD_COLOR,
)
from shared.hex_utils import hex_neighbors
from shared.models import Block, Resolution
from engine.connectivity import find_connected_group, find_nearest_same_color

# Neighbor kinds that do not lend their color to a wildcard
_COLORLESS_KINDS = (BlockKind.STONE, BlockKind.BOMB, BlockKind.WILDCARD)


def _color_cells(board, color: str) -> set[tuple[int, int]]:
    """Every non-stone block of exactly this color, dying ones included."""
    return {
        coord for coord, block in board.blocks()
        if block.color == color and not block.is_stone
    }


def _has_special(board, group) -> bool:
    for q, r in group:
        block = board.get(q, r)
        if block is not None and block.kind == BlockKind.SPECIAL:
            return True
    return False


def resolve_at(board, q: int, r: int, color: str) -> Resolution:
    """Resolve the match triggered by a block arriving at (q, r)."""
    result = Resolution()
    group = find_connected_group(board, q, r, color)
    if len(group) < MIN_GROUP_SIZE:
        return result

    if _has_special(board, group):
        result.destroyed = _color_cells(board, color)
        result.score = len(result.destroyed)
    elif len(group) >= PROMOTE_GROUP_SIZE:
        result.destroyed = group - {(q, r)}
        board.get(q, r).kind = BlockKind.SPECIAL
        result.promoted = (q, r)
        # The promoted survivor is scored too.
        result.score = len(group)
    else:
        result.destroyed = group
        result.score = len(group)
    board.mark_dying(result.destroyed)
    return result


def resolve_wildcard(board, q: int, r: int) -> Resolution:
    """Resolve a wildcard at (q, r) against every color it touches."""
    result = Resolution()
    block = board.get(q, r)
    if block is None or block.kind != BlockKind.WILDCARD:
        return result

    neighbor_colors = []
    for nq, nr in hex_neighbors(q, r):
        nb = board.get(nq, nr)
        if nb is None or nb.kind in _COLORLESS_KINDS:
            continue
        if nb.color not in neighbor_colors:
            neighbor_colors.append(nb.color)

    doomed: set[tuple[int, int]] = set()
    for color in neighbor_colors:
        group = find_connected_group(board, q, r, color)
        if len(group) < MIN_GROUP_SIZE:
            continue
        if _has_special(board, group):
            doomed |= _color_cells(board, color)
        else:
            doomed |= group

    board.mark_dying(doomed)
    result.destroyed = doomed
    result.score = len(doomed)
    return result


def resolve_bomb(board, q: int, r: int) -> Resolution:
    """Detonate at (q, r): clear the bomb cell and doom every occupied neighbor.

    Reads the board as it is now; neighbors that vanished since the bomb was
    placed are simply skipped. Only a bomb is deleted from the cell itself.
    """
    result = Resolution()
    block = board.get(q, r)
    if block is not None and block.kind == BlockKind.BOMB:
        board.remove(q, r)
        result.removed.append((q, r))
    targets = [(nq, nr) for nq, nr in hex_neighbors(q, r) if board.get(nq, nr) is not None]
    board.mark_dying(targets)
    result.destroyed = set(targets)
    result.score = len(result.removed) + len(result.destroyed)
    return result


def resolve_destroy(board, q: int, r: int) -> Resolution:
    """Destroy the targeted block and the nearest two blocks of its color."""
    result = Resolution()
    block = board.get(q, r)
    if block is None or block.is_stone or block.dying:
        return result
    board.mark_dying([(q, r)])
    nearest = find_nearest_same_color(board, q, r, block.color, DESTROY_NEAREST_LIMIT)
    board.mark_dying(nearest)
    result.destroyed = {(q, r), *nearest}
    result.score = 1 + len(nearest)
    return result


def validate_placement(board, q: int, r: int) -> Optional[str]:
    """Bombs and wildcards need an empty in-bounds cell."""
    if not board.in_bounds(q, r):
        return "Target is off the board"
    if board.get(q, r) is not None:
        return "Target is occupied"
    return None


def place_wildcard(board, q: int, r: int) -> Optional[str]:
    error = validate_placement(board, q, r)
    if error:
        return error
    board.place(q, r, Block(color=WILDCARD_COLOR, kind=BlockKind.WILDCARD))
    return None


def place_bomb(board, q: int, r: int) -> Optional[str]:
    error = validate_placement(board, q, r)
    if error:
        return error
    board.place(q, r, Block(color=BOMB_COLOR, kind=BlockKind.BOMB))
    return None
