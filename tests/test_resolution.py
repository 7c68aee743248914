"""Tests for match, wildcard, bomb and destroy resolution."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from shared.constants import (
    PALETTE, BlockKind, STONE_COLOR, WILDCARD_COLOR, BOMB_COLOR,
)
from shared.hex_utils import hex_neighbors
from shared.models import Block
from engine.board import Board
from engine.resolution import (
    resolve_at, resolve_wildcard, resolve_bomb, resolve_destroy,
    place_bomb, place_wildcard,
)

RED = PALETTE[0]
BLUE = PALETTE[1]
GREEN = PALETTE[2]


def make_board(cells: dict, size: int = 10) -> Board:
    return Board.from_blocks(size, size, cells)


def wildcard():
    return Block(WILDCARD_COLOR, BlockKind.WILDCARD)


def count_color(board, color):
    return sum(1 for _, b in board.blocks() if b.color == color)


class TestResolveAt:
    def test_group_of_two_does_nothing(self):
        board = make_board({(3, 3): Block(RED), (4, 3): Block(RED)})
        res = resolve_at(board, 4, 3, RED)
        assert not res
        assert res.score == 0
        assert board.dying_cells() == []

    def test_group_of_three_destroyed(self):
        board = make_board({(3, 3): Block(RED), (4, 3): Block(RED), (5, 3): Block(RED)})
        res = resolve_at(board, 5, 3, RED)
        assert res.destroyed == {(3, 3), (4, 3), (5, 3)}
        assert res.score == 3
        assert res.promoted is None
        # Still on the board until purged
        assert board.dying_cells() == [(3, 3), (4, 3), (5, 3)]

    def test_fourth_block_promotes_trigger(self):
        board = make_board({
            (2, 3): Block(RED), (3, 3): Block(RED), (4, 3): Block(RED),
            (5, 3): Block(RED),
        })
        res = resolve_at(board, 5, 3, RED)
        assert res.destroyed == {(2, 3), (3, 3), (4, 3)}
        assert res.promoted == (5, 3)
        assert board.get(5, 3).kind == BlockKind.SPECIAL
        assert board.get(5, 3).dying is False
        # The surviving promoted block is part of the score
        assert res.score == 4
        board.purge_dying()
        assert count_color(board, RED) == 1

    def test_special_in_group_wipes_color(self):
        board = make_board({
            (3, 3): Block(RED, BlockKind.SPECIAL), (4, 3): Block(RED), (5, 3): Block(RED),
            (0, 0): Block(RED), (8, 0): Block(RED),
            (1, 6): Block(BLUE),
        })
        res = resolve_at(board, 5, 3, RED)
        assert len(res.destroyed) == 5
        assert res.score == 5
        assert res.promoted is None
        assert board.get(1, 6).dying is False

    def test_wipe_spares_stones(self):
        board = make_board({
            (3, 3): Block(RED, BlockKind.SPECIAL), (4, 3): Block(RED), (5, 3): Block(RED),
            (0, 0): Block(RED, BlockKind.STONE),
        })
        res = resolve_at(board, 5, 3, RED)
        assert (0, 0) not in res.destroyed
        assert res.score == 3

    def test_wildcard_in_group_counts(self):
        board = make_board({(3, 3): Block(RED), (4, 3): wildcard(), (5, 3): Block(RED)})
        res = resolve_at(board, 5, 3, RED)
        assert res.destroyed == {(3, 3), (4, 3), (5, 3)}


    def test_dying_blocks_complete_a_match(self):
        board = make_board({(3, 3): Block(RED), (4, 3): Block(RED), (5, 3): Block(RED)})
        board.mark_dying([(3, 3), (4, 3), (5, 3)])
        board.place(6, 3, Block(RED))
        res = resolve_at(board, 6, 3, RED)
        assert res.promoted == (6, 3)
        assert res.score == 4
        assert board.get(6, 3).kind == BlockKind.SPECIAL
        assert board.get(6, 3).dying is False

    def test_wipe_counts_dying_blocks(self):
        board = make_board({
            (3, 3): Block(RED, BlockKind.SPECIAL), (4, 3): Block(RED), (5, 3): Block(RED),
            (0, 0): Block(RED),
        })
        board.mark_dying([(0, 0)])
        res = resolve_at(board, 5, 3, RED)
        assert res.destroyed == {(3, 3), (4, 3), (5, 3), (0, 0)}
        assert res.score == 4


class TestResolveWildcard:
    def test_matches_every_neighbor_color(self):
        board = make_board({
            (3, 3): wildcard(),
            (4, 3): Block(RED), (5, 3): Block(RED),
            (2, 3): Block(BLUE), (1, 3): Block(BLUE),
        })
        res = resolve_wildcard(board, 3, 3)
        assert res.destroyed == {(3, 3), (4, 3), (5, 3), (2, 3), (1, 3)}
        # The wildcard sits in both groups but is counted once
        assert res.score == 5

    def test_no_match_leaves_wildcard(self):
        board = make_board({(3, 3): wildcard(), (4, 3): Block(RED), (2, 3): Block(BLUE)})
        res = resolve_wildcard(board, 3, 3)
        assert not res
        assert board.get(3, 3).kind == BlockKind.WILDCARD
        assert board.get(3, 3).dying is False

    def test_special_group_wipes_but_spares_wildcard(self):
        board = make_board({
            (3, 3): wildcard(),
            (4, 3): Block(RED, BlockKind.SPECIAL), (5, 3): Block(RED),
            (0, 0): Block(RED),
        })
        res = resolve_wildcard(board, 3, 3)
        assert res.destroyed == {(4, 3), (5, 3), (0, 0)}
        assert res.score == 3
        assert board.get(3, 3).dying is False

    def test_ignores_stone_and_bomb_neighbors(self):
        board = make_board({
            (3, 3): wildcard(),
            (4, 3): Block(STONE_COLOR, BlockKind.STONE),
            (2, 3): Block(BOMB_COLOR, BlockKind.BOMB),
            (3, 2): Block(RED),
        })
        assert not resolve_wildcard(board, 3, 3)

    def test_cell_without_wildcard_is_noop(self):
        board = make_board({(3, 3): Block(RED), (4, 3): Block(RED), (5, 3): Block(RED)})
        assert not resolve_wildcard(board, 3, 3)
        assert not resolve_wildcard(board, 6, 6)


class TestResolveBomb:
    def test_full_ring_destroys_seven(self):
        cells = {n: Block(PALETTE[i]) for i, n in enumerate(hex_neighbors(3, 3))}
        cells[(3, 3)] = Block(BOMB_COLOR, BlockKind.BOMB)
        board = make_board(cells)
        res = resolve_bomb(board, 3, 3)
        assert res.score == 7
        assert res.removed == [(3, 3)]
        assert res.destroyed == set(hex_neighbors(3, 3))
        # The bomb cell is gone at once; neighbors wait for the purge
        assert board.get(3, 3) is None
        for q, r in hex_neighbors(3, 3):
            assert board.get(q, r).dying is True

    def test_uses_board_at_resolution_time(self):
        cells = {n: Block(PALETTE[i]) for i, n in enumerate(hex_neighbors(3, 3))}
        cells[(3, 3)] = Block(BOMB_COLOR, BlockKind.BOMB)
        board = make_board(cells)
        board.remove(4, 3)
        res = resolve_bomb(board, 3, 3)
        assert res.score == 6
        assert (4, 3) not in res.destroyed

    def test_bomb_hits_stones(self):
        board = make_board({
            (3, 3): Block(BOMB_COLOR, BlockKind.BOMB),
            (4, 3): Block(STONE_COLOR, BlockKind.STONE),
        })
        res = resolve_bomb(board, 3, 3)
        assert res.destroyed == {(4, 3)}
        assert res.score == 2

    def test_only_a_bomb_is_removed_outright(self):
        # The bomb cell was cleared and refilled before the detonation
        board = make_board({(3, 3): wildcard(), (4, 3): Block(RED)})
        res = resolve_bomb(board, 3, 3)
        assert res.removed == []
        assert res.destroyed == {(4, 3)}
        assert res.score == 1
        assert board.get(3, 3).kind == BlockKind.WILDCARD
        assert board.get(3, 3).dying is False

    def test_bomb_at_edge(self):
        board = make_board({(0, 0): Block(BOMB_COLOR, BlockKind.BOMB), (1, 0): Block(RED)})
        res = resolve_bomb(board, 0, 0)
        assert res.score == 2


class TestResolveDestroy:
    def test_target_and_two_nearest(self):
        board = make_board({
            (3, 3): Block(RED), (4, 3): Block(RED), (1, 3): Block(RED),
            (8, 0): Block(RED), (2, 3): Block(BLUE),
        })
        res = resolve_destroy(board, 3, 3)
        assert res.destroyed == {(3, 3), (4, 3), (1, 3)}
        assert res.score == 3
        assert board.get(8, 0).dying is False

    def test_only_one_other(self):
        board = make_board({(3, 3): Block(GREEN), (0, 6): Block(GREEN)})
        res = resolve_destroy(board, 3, 3)
        assert res.score == 2

    def test_alone(self):
        board = make_board({(3, 3): Block(GREEN)})
        res = resolve_destroy(board, 3, 3)
        assert res.destroyed == {(3, 3)}
        assert res.score == 1

    def test_stone_and_empty_are_noops(self):
        board = make_board({(3, 3): Block(STONE_COLOR, BlockKind.STONE)})
        assert not resolve_destroy(board, 3, 3)
        assert not resolve_destroy(board, 4, 4)
        assert board.dying_cells() == []


class TestPlacement:
    def test_place_bomb_on_empty(self):
        board = make_board({})
        assert place_bomb(board, 3, 3) is None
        assert board.get(3, 3).kind == BlockKind.BOMB

    def test_place_wildcard_on_empty(self):
        board = make_board({})
        assert place_wildcard(board, 3, 3) is None
        assert board.get(3, 3).kind == BlockKind.WILDCARD
        assert board.get(3, 3).color == WILDCARD_COLOR

    def test_placement_needs_empty_cell(self):
        board = make_board({(3, 3): Block(RED)})
        assert place_bomb(board, 3, 3) == "Target is occupied"
        assert place_wildcard(board, 3, 3) == "Target is occupied"
        assert board.get(3, 3).color == RED

    def test_placement_off_board(self):
        board = make_board({})
        assert place_bomb(board, -5, 0) is not None
        assert place_wildcard(board, 0, 10) is not None
