"""One game session: board, score, item inventory, timers and intents."""

import random
from typing import Optional
from shared.constants import (
    ItemType, TaskKind, BlockKind, DIFFICULTY_COLOR_COUNTS, PLACEMENT_ITEMS,
    ACTIVATION_DELAY_MS, CHALLENGE_TIME_LIMIT_S, STARTING_ITEM_COUNT, PALETTE,
    STONE_COLOR, BOMB_COLOR, WILDCARD_COLOR,
)
from shared.hex_utils import direction_target
from shared.models import Block, GameSettings, GameSnapshot, ItemStock, Resolution
from engine import moves, resolution
from engine.generator import generate_board
from engine.scheduler import Scheduler, PURGE
from shared.protocol import coord_to_dict


class GameState:
    """Authoritative state of a single game. Drives every player intent.

    Intent methods return (error, events): error is None when the intent was
    accepted, otherwise a short message, and events then holds one
    "rejected" event for the caller to animate. Rejected intents never
    change the board, the score or the inventory.
    """

    def __init__(self, settings: Optional[GameSettings] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.settings = settings or GameSettings()
        self.board = None
        self.score: int = 0
        self.items: dict[ItemType, ItemStock] = {}
        self.scheduler = Scheduler()
        self.game_over: bool = False
        # Events produced by deferred tasks, drained by advance()
        self._task_events: list[dict] = []
        self.reset(self.settings)

    # -- lifecycle -------------------------------------------------------

    def reset(self, settings: Optional[GameSettings] = None, board=None) -> list[dict]:
        """Start a new game. A prepared board may be supplied instead of generating one."""
        if settings is not None:
            self.settings = settings
        color_count = DIFFICULTY_COLOR_COUNTS[self.settings.difficulty]
        self.board = board or generate_board(self.settings.map_size, color_count, self.rng)
        self.score = 0
        self.game_over = False
        self.scheduler = Scheduler()
        self._task_events = []
        self.items = {}
        for item in ItemType:
            count = STARTING_ITEM_COUNT
            if item in PLACEMENT_ITEMS and not self.settings.special_blocks:
                count = 0
            self.items[item] = ItemStock(item, count, self.settings.unlimited_items and count > 0)
        if self.settings.challenge_mode:
            self.scheduler.schedule(CHALLENGE_TIME_LIMIT_S * 1000, TaskKind.TIMEOUT)
        return [{"type": "new_game", "settings": self.settings.to_dict()}]

    def time_left(self) -> Optional[int]:
        """Seconds remaining in challenge mode, None otherwise."""
        if not self.settings.challenge_mode:
            return None
        remaining_ms = CHALLENGE_TIME_LIMIT_S * 1000 - self.scheduler.now
        return max(0, -(-remaining_ms // 1000))

    def get_snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            width=self.board.width,
            height=self.board.height,
            blocks=self.board.get_blocks_dict(),
            score=self.score,
            items=[self.items[i] for i in ItemType],
            settings=self.settings,
            time_left=self.time_left(),
            game_over=self.game_over,
        )

    # -- queries ---------------------------------------------------------

    def move_target(self, q: int, r: int) -> Optional[tuple[int, int]]:
        return moves.move_target(self.board, q, r)

    def valid_targets(self, item: ItemType) -> list[tuple[int, int]]:
        """Cells the given item may currently be used on."""
        if item in PLACEMENT_ITEMS:
            return self.board.empty_cells()
        return sorted(
            coord for coord, block in self.board.blocks()
            if not block.is_stone and not block.dying
        )

    # -- intents ---------------------------------------------------------

    def _reject(self, q: int, r: int, reason: str) -> tuple[str, list[dict]]:
        return reason, [{"type": "rejected", "q": q, "r": r, "reason": reason}]

    def move(self, src: tuple[int, int], dst: tuple[int, int]) -> tuple[Optional[str], list[dict]]:
        """Slide a block one step and resolve whatever match it completes."""
        if self.game_over:
            return self._reject(*src, "Game over")
        error = moves.attempt_move(self.board, src, dst)
        if error:
            return self._reject(*src, error)
        events = [{"type": "moved", "from": coord_to_dict(src), "to": coord_to_dict(dst)}]
        block = self.board.get(*dst)
        res = resolution.resolve_at(self.board, dst[0], dst[1], block.color)
        self._apply_resolution(res, "match", events)
        self._check_game_over(events)
        return None, events

    def tap(self, q: int, r: int) -> tuple[Optional[str], list[dict]]:
        """Move a block along its own direction."""
        block = self.board.get(q, r)
        if block is None:
            return self._reject(q, r, "No block to move")
        return self.move((q, r), direction_target(q, r, block.direction))

    def use_item(self, item: ItemType, q: int, r: int) -> tuple[Optional[str], list[dict]]:
        if self.game_over:
            return self._reject(q, r, "Game over")
        stock = self.items.get(item)
        if stock is None or not stock.available():
            return self._reject(q, r, f"No {item.value} left")

        handler = {
            ItemType.ROTATE: self._use_rotate,
            ItemType.DESTROY: self._use_destroy,
            ItemType.BOMB: self._use_bomb,
            ItemType.WILDCARD: self._use_wildcard,
        }[item]
        error, events = handler(q, r)
        if error:
            return self._reject(q, r, error)
        stock.consume()
        events.append({
            "type": "item_used",
            "item": item.value,
            "remaining": stock.count,
            "unlimited": stock.unlimited,
        })
        self._check_game_over(events)
        return None, events

    def _use_rotate(self, q: int, r: int):
        error = moves.rotate(self.board, q, r)
        if error:
            return error, []
        return None, [{"type": "rotated", "q": q, "r": r,
                       "direction": self.board.get(q, r).direction}]

    def _use_destroy(self, q: int, r: int):
        block = self.board.get(q, r)
        if block is None:
            return "No block to destroy", []
        if block.is_stone:
            return "Stones cannot be destroyed", []
        if block.dying:
            return "Block is being destroyed", []
        events = []
        self._apply_resolution(resolution.resolve_destroy(self.board, q, r), "destroy", events)
        return None, events

    def _use_bomb(self, q: int, r: int):
        error = resolution.place_bomb(self.board, q, r)
        if error:
            return error, []
        self.scheduler.schedule(ACTIVATION_DELAY_MS, TaskKind.BOMB, q, r)
        return None, [{"type": "placed", "kind": BlockKind.BOMB.value, "q": q, "r": r}]

    def _use_wildcard(self, q: int, r: int):
        error = resolution.place_wildcard(self.board, q, r)
        if error:
            return error, []
        self.scheduler.schedule(ACTIVATION_DELAY_MS, TaskKind.WILDCARD, q, r)
        return None, [{"type": "placed", "kind": BlockKind.WILDCARD.value, "q": q, "r": r}]

    def customize(self, q: int, r: int, color: Optional[str] = None,
                  kind: Optional[BlockKind] = None) -> tuple[Optional[str], list[dict]]:
        """Edit a cell directly: place a block of the given color/kind, or clear it."""
        if self.game_over:
            return self._reject(q, r, "Game over")
        if not self.board.in_bounds(q, r):
            return self._reject(q, r, "Target is off the board")
        if color is None and kind is None:
            self.board.replace(q, r, None)
            return None, [{"type": "cleared", "q": q, "r": r}]
        kind = kind or BlockKind.NORMAL
        if kind == BlockKind.STONE:
            color = STONE_COLOR
        elif kind == BlockKind.BOMB:
            color = BOMB_COLOR
        elif kind == BlockKind.WILDCARD:
            color = WILDCARD_COLOR
        elif color not in PALETTE:
            return self._reject(q, r, "Unknown color")
        block = Block(color=color, kind=kind, direction=self.rng.randrange(3))
        self.board.replace(q, r, block)
        return None, [{"type": "customized", "q": q, "r": r, "block": block.to_dict()}]

    # -- time ------------------------------------------------------------

    def advance(self, elapsed_ms: int) -> list[dict]:
        """Let time pass, running deferred activations, purges and the challenge clock."""
        self._task_events = []
        self.scheduler.advance(elapsed_ms, self._run_task)
        events, self._task_events = self._task_events, []
        return events

    def _run_task(self, task):
        events = self._task_events
        if task == PURGE:
            purged = self.board.purge_dying()
            if purged:
                events.append({"type": "purged", "cells": [coord_to_dict(c) for c in purged]})
            self._check_game_over(events)
            return
        if task.kind == TaskKind.TIMEOUT:
            if not self.game_over:
                self.game_over = True
                events.append({"type": "game_over", "reason": "timeout", "score": self.score})
            return
        if task.kind == TaskKind.BOMB:
            res = resolution.resolve_bomb(self.board, task.q, task.r)
            self._apply_resolution(res, "bomb", events)
        elif task.kind == TaskKind.WILDCARD:
            res = resolution.resolve_wildcard(self.board, task.q, task.r)
            self._apply_resolution(res, "wildcard", events)
        self._check_game_over(events)

    # -- helpers ---------------------------------------------------------

    def _apply_resolution(self, res: Resolution, cause: str, events: list):
        if not res:
            return
        self.score += res.score
        event = {"type": "resolved", "cause": cause, "total_score": self.score}
        event.update(res.to_dict())
        events.append(event)
        if res.destroyed:
            self.scheduler.request_purge()

    def _check_game_over(self, events: list):
        if self.game_over or self.settings.challenge_mode:
            return
        # Wait until pending destruction and activations have settled
        if self.board.dying_cells() or self.scheduler.pending():
            return
        if moves.is_game_over(self.board):
            self.game_over = True
            events.append({"type": "game_over", "reason": "no_moves", "score": self.score})
