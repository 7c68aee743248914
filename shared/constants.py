"""Game constants shared between the engine and its callers."""

from enum import Enum

# Map
DEFAULT_MAP_SIZE = 10
MAP_SIZES = (5, 7, 9, 10, 11, 13, 15)

# Playable palette. The first N entries are active for a difficulty tier.
PALETTE = [
    "#ef5350",  # red
    "#42a5f5",  # blue
    "#66bb6a",  # green
    "#ffa726",  # orange
    "#ab47bc",  # purple
    "#26c6da",  # cyan
    "#d4e157",  # lime
    "#8d6e63",  # brown
    "#78909c",  # slate
    "#f06292",  # pink
]

# Sentinel colors, never part of PALETTE
STONE_COLOR = "#37474f"
BOMB_COLOR = "#000000"
WILDCARD_COLOR = "rainbow"

# Generation
STONE_RATIO = 0.10
FILL_RATIO = 0.70

# Matching
MIN_GROUP_SIZE = 3
PROMOTE_GROUP_SIZE = 4
DESTROY_NEAREST_LIMIT = 2

# Timing (milliseconds unless noted)
PURGE_DELAY_MS = 300
ACTIVATION_DELAY_MS = 500
CHALLENGE_TIME_LIMIT_S = 180

# Items
STARTING_ITEM_COUNT = 3

# Server
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8765
TICK_INTERVAL_S = 0.05


class BlockKind(str, Enum):
    NORMAL = "normal"
    SPECIAL = "special"
    STONE = "stone"
    BOMB = "bomb"
    WILDCARD = "wildcard"


class BlockState(str, Enum):
    ACTIVE = "active"
    MARKED = "marked"      # dying: still occupies its cell until purged
    REMOVED = "removed"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


DIFFICULTY_COLOR_COUNTS = {
    Difficulty.EASY: 4,
    Difficulty.MEDIUM: 6,
    Difficulty.HARD: 10,
}


class ItemType(str, Enum):
    ROTATE = "rotate"
    DESTROY = "destroy"
    BOMB = "bomb"
    WILDCARD = "wildcard"


# Items that place a new block rather than acting on an existing one
PLACEMENT_ITEMS = (ItemType.BOMB, ItemType.WILDCARD)


class TaskKind(str, Enum):
    BOMB = "bomb"
    WILDCARD = "wildcard"
    TIMEOUT = "timeout"


class MessageType(str, Enum):
    # Client -> Server
    NEW_GAME = "new_game"
    MOVE = "move"
    TAP = "tap"
    USE_ITEM = "use_item"
    CUSTOMIZE = "customize"
    # Server -> Client
    GAME_STATE = "game_state"
    ACTION_RESULT = "action_result"
    GAME_OVER = "game_over"
    ERROR = "error"
