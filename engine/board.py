"""Board state: which block occupies which cell of the hex footprint."""

from typing import Iterator, Optional
from shared.hex_utils import (
    rectangle_footprint, in_bounds, cell_key, key_to_coord,
)
from shared.constants import DEFAULT_MAP_SIZE, BlockKind, BlockState
from shared.models import Block


class Board:
    """Maps cells of a rectangular hex footprint to blocks.

    Blocks are stored by packed integer key (see cell_key). At most one block
    occupies a cell. Destroyed blocks go through two phases: mark_dying()
    flags them while they keep their cell, purge_dying() removes them.
    """

    def __init__(self, width: int = DEFAULT_MAP_SIZE, height: Optional[int] = None):
        self.width = width
        self.height = height if height is not None else width
        self.all_hexes: set[tuple[int, int]] = rectangle_footprint(self.width, self.height)
        self.cells: dict[int, Block] = {}

    def in_bounds(self, q: int, r: int) -> bool:
        return in_bounds(q, r, self.width, self.height)

    def get(self, q: int, r: int) -> Optional[Block]:
        # Packed keys only stay unique on the footprint
        if not self.in_bounds(q, r):
            return None
        return self.cells.get(cell_key(q, r))

    def is_empty(self, q: int, r: int) -> bool:
        """True for an in-bounds cell holding no block."""
        return self.in_bounds(q, r) and cell_key(q, r) not in self.cells

    def place(self, q: int, r: int, block: Block) -> bool:
        """Put block on an empty in-bounds cell. Returns False if not allowed."""
        if not self.is_empty(q, r):
            return False
        self.cells[cell_key(q, r)] = block
        return True

    def replace(self, q: int, r: int, block: Optional[Block]):
        """Overwrite (or clear, with None) an in-bounds cell unconditionally."""
        if not self.in_bounds(q, r):
            return
        key = cell_key(q, r)
        if block is None:
            self.cells.pop(key, None)
        else:
            self.cells[key] = block

    def remove(self, q: int, r: int) -> Optional[Block]:
        if not self.in_bounds(q, r):
            return None
        block = self.cells.pop(cell_key(q, r), None)
        if block is not None:
            block.state = BlockState.REMOVED
        return block

    def relocate(self, src: tuple[int, int], dst: tuple[int, int]) -> Block:
        block = self.cells.pop(cell_key(*src))
        self.cells[cell_key(*dst)] = block
        return block

    def blocks(self) -> Iterator[tuple[tuple[int, int], Block]]:
        """Yield ((q, r), block) for every occupied cell."""
        for key, block in list(self.cells.items()):
            yield key_to_coord(key), block

    def empty_cells(self) -> list[tuple[int, int]]:
        return sorted(h for h in self.all_hexes if cell_key(*h) not in self.cells)

    def count_kind(self, kind: BlockKind) -> int:
        return sum(1 for b in self.cells.values() if b.kind == kind)

    def mark_dying(self, coords) -> list[tuple[int, int]]:
        """Mark the blocks at coords for removal. Returns the newly marked cells."""
        marked = []
        for q, r in coords:
            block = self.get(q, r)
            if block is not None and block.state == BlockState.ACTIVE:
                block.state = BlockState.MARKED
                marked.append((q, r))
        return marked

    def dying_cells(self) -> list[tuple[int, int]]:
        return sorted(coord for coord, b in self.blocks() if b.dying)

    def purge_dying(self) -> list[tuple[int, int]]:
        """Remove every block still marked for removal. Returns the cleared cells."""
        purged = self.dying_cells()
        for q, r in purged:
            self.remove(q, r)
        return purged

    def get_blocks_dict(self) -> dict[str, Block]:
        """Serializable block map: 'q,r' -> block."""
        return {f"{q},{r}": block for (q, r), block in self.blocks()}

    @staticmethod
    def from_blocks(width: int, height: int, blocks: dict) -> "Board":
        """Build a board from a {(q, r): Block} mapping; out-of-bounds entries are dropped."""
        board = Board(width, height)
        for (q, r), block in blocks.items():
            board.place(q, r, block)
        return board
