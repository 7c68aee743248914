"""Serializable data classes for board entities and game state.

Used by both the engine and its callers for network communication.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Optional
from shared.constants import (
    BlockKind, BlockState, Difficulty, ItemType, DEFAULT_MAP_SIZE, MAP_SIZES,
    STARTING_ITEM_COUNT,
)


def new_block_id() -> str:
    return str(uuid.uuid4())[:8]


@dataclass
class Block:
    """The unit occupying one cell."""
    color: str
    kind: BlockKind = BlockKind.NORMAL
    direction: int = 0
    state: BlockState = BlockState.ACTIVE
    block_id: str = field(default_factory=new_block_id)

    @property
    def dying(self) -> bool:
        return self.state == BlockState.MARKED

    @property
    def is_stone(self) -> bool:
        return self.kind == BlockKind.STONE

    def matches_color(self, color: str) -> bool:
        """Connectivity test: same color or a wildcard, never a stone."""
        if self.kind == BlockKind.STONE:
            return False
        return self.color == color or self.kind == BlockKind.WILDCARD

    def to_dict(self) -> dict:
        return {
            "id": self.block_id,
            "color": self.color,
            "kind": self.kind.value,
            "direction": self.direction,
            "dying": self.dying,
        }

    @staticmethod
    def from_dict(d: dict) -> Block:
        return Block(
            color=d["color"],
            kind=BlockKind(d.get("kind", BlockKind.NORMAL.value)),
            direction=d.get("direction", 0),
            state=BlockState.MARKED if d.get("dying") else BlockState.ACTIVE,
            block_id=d.get("id") or new_block_id(),
        )


@dataclass
class Resolution:
    """Outcome of one resolution: what was destroyed and what it scored."""
    destroyed: set[tuple[int, int]] = field(default_factory=set)
    removed: list[tuple[int, int]] = field(default_factory=list)  # deleted outright, never dying
    promoted: Optional[tuple[int, int]] = None
    score: int = 0

    def __bool__(self):
        return bool(self.destroyed or self.removed or self.promoted)

    def to_dict(self) -> dict:
        return {
            "destroyed": [{"q": q, "r": r} for q, r in sorted(self.destroyed)],
            "removed": [{"q": q, "r": r} for q, r in self.removed],
            "promoted": ({"q": self.promoted[0], "r": self.promoted[1]}
                         if self.promoted else None),
            "score": self.score,
        }


@dataclass
class ItemStock:
    item: ItemType
    count: int = STARTING_ITEM_COUNT
    unlimited: bool = False

    def available(self) -> bool:
        return self.unlimited or self.count > 0

    def consume(self):
        if not self.unlimited:
            self.count = max(0, self.count - 1)

    def to_dict(self) -> dict:
        return {"item": self.item.value, "count": self.count, "unlimited": self.unlimited}

    @staticmethod
    def from_dict(d: dict) -> ItemStock:
        return ItemStock(
            item=ItemType(d["item"]),
            count=d.get("count", 0),
            unlimited=d.get("unlimited", False),
        )


@dataclass
class GameSettings:
    map_size: int = DEFAULT_MAP_SIZE
    difficulty: Difficulty = Difficulty.MEDIUM
    special_blocks: bool = True   # stocks the bomb and wildcard items
    unlimited_items: bool = False
    challenge_mode: bool = False

    def to_dict(self) -> dict:
        return {
            "map_size": self.map_size,
            "difficulty": self.difficulty.value,
            "special_blocks": self.special_blocks,
            "unlimited_items": self.unlimited_items,
            "challenge_mode": self.challenge_mode,
        }

    @staticmethod
    def from_dict(d: Optional[dict]) -> GameSettings:
        """Build settings from client input, falling back to defaults on bad values."""
        d = d or {}
        try:
            map_size = int(d.get("map_size", DEFAULT_MAP_SIZE))
        except (TypeError, ValueError):
            map_size = DEFAULT_MAP_SIZE
        if map_size not in MAP_SIZES:
            map_size = DEFAULT_MAP_SIZE
        try:
            difficulty = Difficulty(d.get("difficulty", Difficulty.MEDIUM.value))
        except ValueError:
            difficulty = Difficulty.MEDIUM
        return GameSettings(
            map_size=map_size,
            difficulty=difficulty,
            special_blocks=bool(d.get("special_blocks", True)),
            unlimited_items=bool(d.get("unlimited_items", False)),
            challenge_mode=bool(d.get("challenge_mode", False)),
        )


@dataclass
class GameSnapshot:
    """Full game state sent to clients."""
    width: int
    height: int
    blocks: dict[str, Block]  # "q,r" -> block
    score: int
    items: list[ItemStock]
    settings: GameSettings
    time_left: Optional[int] = None  # seconds, challenge mode only
    game_over: bool = False

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "blocks": {k: b.to_dict() for k, b in self.blocks.items()},
            "score": self.score,
            "items": [i.to_dict() for i in self.items],
            "settings": self.settings.to_dict(),
            "time_left": self.time_left,
            "game_over": self.game_over,
        }

    @staticmethod
    def from_dict(d: dict) -> GameSnapshot:
        return GameSnapshot(
            width=d["width"],
            height=d["height"],
            blocks={k: Block.from_dict(v) for k, v in d["blocks"].items()},
            score=d["score"],
            items=[ItemStock.from_dict(i) for i in d["items"]],
            settings=GameSettings.from_dict(d.get("settings")),
            time_left=d.get("time_left"),
            game_over=d.get("game_over", False),
        )
