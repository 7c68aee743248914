"""Network protocol message framing and payload helpers."""

import json
from typing import Optional
from shared.constants import MessageType


def create_message(msg_type: MessageType, payload: dict = None) -> str:
    """Create a JSON message string."""
    return json.dumps({
        "type": msg_type.value,
        "payload": payload or {},
    })


def parse_message(data: str) -> tuple[MessageType, dict]:
    """Parse a JSON message string into (type, payload).

    Raises ValueError (json.JSONDecodeError is one) for anything that is not a
    well-formed message of a known type.
    """
    msg = json.loads(data)
    if not isinstance(msg, dict):
        raise ValueError("Message must be a JSON object")
    payload = msg.get("payload") or {}
    if not isinstance(payload, dict):
        raise ValueError("Payload must be a JSON object")
    return MessageType(msg.get("type")), payload


def coord_from_payload(payload: dict, key: Optional[str] = None) -> Optional[tuple[int, int]]:
    """Read a {"q": .., "r": ..} coordinate from payload (or payload[key]).

    Returns None when the coordinate is missing or not integral.
    """
    src = payload.get(key) if key else payload
    if not isinstance(src, dict):
        return None
    q, r = src.get("q"), src.get("r")
    if isinstance(q, bool) or isinstance(r, bool):
        return None
    if not isinstance(q, int) or not isinstance(r, int):
        return None
    return (q, r)


def coord_to_dict(coord: tuple[int, int]) -> dict:
    return {"q": coord[0], "r": coord[1]}
