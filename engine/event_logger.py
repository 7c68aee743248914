"""Event logging: turns engine events into human-readable log strings."""

from shared.constants import PALETTE

COLOR_NAMES = dict(zip(PALETTE, [
    "red", "blue", "green", "orange", "purple",
    "cyan", "lime", "brown", "slate", "pink",
]))


def color_name(color: str) -> str:
    return COLOR_NAMES.get(color, color)


def _at(event: dict) -> str:
    return f"({event['q']},{event['r']})"


def describe_event(event: dict) -> str:
    """Return a one-line description of an engine event dict."""
    etype = event.get("type", "")

    if etype == "new_game":
        s = event.get("settings", {})
        mode = "challenge" if s.get("challenge_mode") else "classic"
        return f"New {mode} game: {s.get('map_size')}x{s.get('map_size')}, {s.get('difficulty')}"

    elif etype == "moved":
        src, dst = event["from"], event["to"]
        return f"Moved ({src['q']},{src['r']}) -> ({dst['q']},{dst['r']})"

    elif etype == "resolved":
        n = len(event.get("destroyed", [])) + len(event.get("removed", []))
        text = f"{event['cause'].capitalize()} destroyed {n} (+{event['score']}, total {event['total_score']})"
        if event.get("promoted"):
            p = event["promoted"]
            text += f", special block at ({p['q']},{p['r']})"
        return text

    elif etype == "rotated":
        return f"Rotated {_at(event)} to direction {event['direction']}"

    elif etype == "placed":
        return f"Placed {event['kind']} at {_at(event)}"

    elif etype == "item_used":
        left = "unlimited" if event.get("unlimited") else event.get("remaining", 0)
        return f"Used {event['item']} ({left} left)"

    elif etype == "customized":
        block = event.get("block", {})
        return f"Set {_at(event)} to {block.get('kind')} {color_name(block.get('color', ''))}"

    elif etype == "cleared":
        return f"Cleared {_at(event)}"

    elif etype == "purged":
        return f"Purged {len(event.get('cells', []))} blocks"

    elif etype == "rejected":
        return f"Rejected at {_at(event)}: {event.get('reason', '')}"

    elif etype == "game_over":
        return f"Game over ({event.get('reason')}), score {event.get('score', 0)}"

    return etype
