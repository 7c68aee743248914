"""Hex math utilities using axial coordinates (q, r).

Pointy-top hexagons laid out on a rectangular footprint. Used by the engine
and by any caller that needs to address cells.
"""

# Axial direction vectors for the 6 neighbors of a hex. Every search walks
# neighbors in this order.
AXIAL_DIRECTIONS = [
    (1, 0), (1, -1), (0, -1),
    (-1, 0), (-1, 1), (0, 1),
]

# The three slide directions a block can carry: 0 -> east, 1 -> south-west,
# 2 -> north-west.
DIRECTION_DELTAS = [
    (1, 0), (-1, 1), (0, -1),
]

# Cell keys pack (q, r) into one int. Offsetting keeps negative q valid.
_KEY_OFFSET = 1 << 15
_KEY_STRIDE = 1 << 16


def hex_neighbors(q: int, r: int) -> list[tuple[int, int]]:
    """Return all 6 neighbors of hex (q, r)."""
    return [(q + dq, r + dr) for dq, dr in AXIAL_DIRECTIONS]


def hex_distance(q1: int, r1: int, q2: int, r2: int) -> int:
    """Manhattan distance between two hexes in axial coords."""
    s1 = -q1 - r1
    s2 = -q2 - r2
    return max(abs(q1 - q2), abs(r1 - r2), abs(s1 - s2))


def direction_target(q: int, r: int, direction: int) -> tuple[int, int]:
    """Return the only cell a block at (q, r) facing `direction` may move to."""
    dq, dr = DIRECTION_DELTAS[direction]
    return (q + dq, r + dr)


def direction_of_delta(dq: int, dr: int):
    """Return the slide direction matching an axial delta, or None."""
    try:
        return DIRECTION_DELTAS.index((dq, dr))
    except ValueError:
        return None


def offset_to_axial(col: int, row: int) -> tuple[int, int]:
    """Convert rectangle (col, row) offset coords to axial (q, r).

    Odd rows are shifted half a hex to the left, so row 1 starts at q = -1.
    """
    return (col - (row + 1) // 2, row)


def axial_to_offset(q: int, r: int) -> tuple[int, int]:
    """Inverse of offset_to_axial."""
    return (q + (r + 1) // 2, r)


def rectangle_footprint(width: int, height: int) -> set[tuple[int, int]]:
    """Generate all axial coords of a width x height rectangular hex footprint."""
    hexes = set()
    for row in range(height):
        for col in range(width):
            hexes.add(offset_to_axial(col, row))
    return hexes


def in_bounds(q: int, r: int, width: int, height: int) -> bool:
    """True iff (q, r) is a cell of the width x height rectangular footprint."""
    col, row = axial_to_offset(q, r)
    return 0 <= row < height and 0 <= col < width


def cell_key(q: int, r: int) -> int:
    """Encode (q, r) as a single integer key."""
    return (q + _KEY_OFFSET) * _KEY_STRIDE + (r + _KEY_OFFSET)


def key_to_coord(key: int) -> tuple[int, int]:
    """Decode a key produced by cell_key back to (q, r)."""
    q, r = divmod(key, _KEY_STRIDE)
    return (q - _KEY_OFFSET, r - _KEY_OFFSET)

