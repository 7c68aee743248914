"""Move legality, rotation and the three-block deadlock check."""

from typing import Optional
from shared.constants import BlockKind
from shared.hex_utils import direction_target, direction_of_delta

# Kinds that can never be moved by the player
IMMOVABLE_KINDS = (BlockKind.STONE, BlockKind.WILDCARD)

# For each candidate direction: the two cells whose blocks would box a block
# in, and the direction each of them must face for the pattern to close.
DEADLOCK_PATTERNS = {
    0: (((1, 0), 1), ((0, 1), 2)),
    1: (((-1, 0), 0), ((-1, 1), 2)),
    2: (((0, -1), 0), ((1, -1), 1)),
}


def validate_move(board, src: tuple[int, int], dst: tuple[int, int]) -> Optional[str]:
    """Return an error message if moving src -> dst is illegal, else None."""
    block = board.get(*src)
    if block is None:
        return "No block to move"
    if block.kind in IMMOVABLE_KINDS:
        return f"A {block.kind.value} block cannot move"
    if block.dying:
        return "Block is being destroyed"
    direction = direction_of_delta(dst[0] - src[0], dst[1] - src[1])
    if direction != block.direction:
        return "Block cannot move that way"
    if not board.in_bounds(*dst):
        return "Target is off the board"
    if board.get(*dst) is not None:
        return "Target is occupied"
    return None


def attempt_move(board, src: tuple[int, int], dst: tuple[int, int]) -> Optional[str]:
    """Slide the block at src one step to dst. Board is untouched on error."""
    error = validate_move(board, src, dst)
    if error:
        return error
    board.relocate(src, dst)
    return None


def move_target(board, q: int, r: int) -> Optional[tuple[int, int]]:
    """The single cell the block at (q, r) may move to right now, or None."""
    block = board.get(q, r)
    if block is None:
        return None
    dst = direction_target(q, r, block.direction)
    if validate_move(board, (q, r), dst):
        return None
    return dst


def legal_moves(board) -> list[tuple[tuple[int, int], tuple[int, int]]]:
    moves = []
    for (q, r), _block in board.blocks():
        dst = move_target(board, q, r)
        if dst is not None:
            moves.append(((q, r), dst))
    return sorted(moves)


def has_legal_move(board) -> bool:
    return any(move_target(board, q, r) is not None for (q, r), _ in board.blocks())


def is_game_over(board) -> bool:
    """No empty cell remains and no block can move."""
    return not board.empty_cells() and not has_legal_move(board)


def rotate(board, q: int, r: int) -> Optional[str]:
    """Turn a block to its next slide direction."""
    block = board.get(q, r)
    if block is None:
        return "No block to rotate"
    if block.is_stone:
        return "Stones cannot be rotated"
    if block.dying:
        return "Block is being destroyed"
    block.direction = (block.direction + 1) % 3
    return None


def is_deadlock(board, q: int, r: int, direction: int) -> bool:
    """True if a block at (q, r) facing `direction` closes a three-block cycle.

    Only non-stone neighbors count. Advisory: used by the generator to bias
    direction choice, never to reject a move.
    """
    for (dq, dr), needed in DEADLOCK_PATTERNS[direction]:
        block = board.get(q + dq, r + dr)
        if block is None or block.is_stone or block.direction != needed:
            return False
    return True
