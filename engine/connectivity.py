"""Breadth-first searches over the six-neighbor hex adjacency."""

from collections import deque
from shared.hex_utils import hex_neighbors


def find_connected_group(board, q: int, r: int, color: str) -> set[tuple[int, int]]:
    """Return the cells connected to (q, r) through blocks matching `color`.

    Wildcards match every color, stones none. Blocks already marked for
    removal still connect and count. The seed is always included, whatever
    it holds, so a freshly placed or moved block can anchor its own group.
    """
    group = {(q, r)}
    queue = deque([(q, r)])
    while queue:
        cq, cr = queue.popleft()
        for nq, nr in hex_neighbors(cq, cr):
            if (nq, nr) in group:
                continue
            block = board.get(nq, nr)
            if block is None or not block.matches_color(color):
                continue
            group.add((nq, nr))
            queue.append((nq, nr))
    return group


def find_nearest_same_color(board, q: int, r: int, color: str, limit: int) -> list[tuple[int, int]]:
    """Return up to `limit` cells holding `color`, closest to (q, r) first.

    Expansion walks through every in-bounds cell regardless of what it holds;
    only exact color matches that are neither stones nor dying are collected.
    Wildcards do not count. The seed itself is never returned.
    """
    found = []
    if limit <= 0:
        return found
    visited = {(q, r)}
    queue = deque([(q, r)])
    while queue and len(found) < limit:
        cq, cr = queue.popleft()
        for nq, nr in hex_neighbors(cq, cr):
            if (nq, nr) in visited or not board.in_bounds(nq, nr):
                continue
            visited.add((nq, nr))
            block = board.get(nq, nr)
            if (block is not None and block.color == color
                    and not block.dying and not block.is_stone):
                found.append((nq, nr))
                if len(found) >= limit:
                    break
            queue.append((nq, nr))
    return found
