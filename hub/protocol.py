# hub/protocol.py
"""Wire format shared by the hub and its clients.

Every frame is a JSON object {"action": ..., "payload": ...}. Inbound frames
are decoded once into one of the request types below; outbound frames are
built with the helper functions at the bottom.
"""
import json
from dataclasses import dataclass
from typing import Optional, Union


class InvalidMessage(ValueError):
    """An inbound frame could not be decoded into a known request."""


@dataclass(frozen=True)
class JoinRequest:
    room: str
    name: str
    avatar: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class MoveRequest:
    x: float
    y: float


@dataclass(frozen=True)
class ChatRequest:
    message: str
    room: Optional[str] = None
    name: Optional[str] = None


Request = Union[JoinRequest, MoveRequest, ChatRequest]


def encode(msg: dict) -> str:
    """Convert a Python dict to a JSON string."""
    return json.dumps(msg)


def decode(text: str) -> dict:
    """Convert a JSON string back to a Python dict."""
    return json.loads(text)


def envelope(action: str, payload) -> dict:
    return {"action": action, "payload": payload}


def _optional_str(payload: dict, key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidMessage(f"'{key}' must be a string")
    return value


def _required_str(payload: dict, key: str) -> str:
    value = _optional_str(payload, key)
    if not value:
        raise InvalidMessage(f"'{key}' is required")
    return value


def _number(payload: dict, key: str) -> float:
    value = payload.get(key)
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidMessage(f"'{key}' must be a number")
    return value


def _parse_join(payload: dict) -> JoinRequest:
    return JoinRequest(
        room=_required_str(payload, "room"),
        name=_required_str(payload, "name"),
        avatar=_optional_str(payload, "avatar"),
        color=_optional_str(payload, "color"),
    )


def _parse_move(payload: dict) -> MoveRequest:
    return MoveRequest(x=_number(payload, "x"), y=_number(payload, "y"))


def _parse_chat(payload: dict) -> ChatRequest:
    message = payload.get("message")
    if not isinstance(message, str):
        raise InvalidMessage("'message' must be a string")
    return ChatRequest(
        message=message,
        room=_optional_str(payload, "room"),
        name=_optional_str(payload, "name"),
    )


PARSERS = {
    "join": _parse_join,
    "move": _parse_move,
    "chat": _parse_chat,
}


def parse_request(text) -> Optional[Request]:
    """Decode one inbound frame.

    Returns None for actions the hub does not handle. Raises InvalidMessage
    when the frame is not a well-formed envelope or the payload does not fit
    its action.
    """
    try:
        data = decode(text)
    except (TypeError, ValueError):
        raise InvalidMessage("Invalid JSON")

    if not isinstance(data, dict):
        raise InvalidMessage("Envelope must be an object")
    action = data.get("action")
    if not isinstance(action, str):
        raise InvalidMessage("'action' must be a string")

    parser = PARSERS.get(action)
    if parser is None:
        return None

    payload = data.get("payload")
    if not isinstance(payload, dict):
        raise InvalidMessage(f"'{action}' payload must be an object")
    return parser(payload)


def update_players(players: list) -> dict:
    return envelope("updatePlayers", players)


def move(position: dict) -> dict:
    return envelope("move", position)


def chat(message_payload: dict) -> dict:
    return envelope("chat", message_payload)


def remove_cursor(name: Optional[str]) -> dict:
    return envelope("removeCursor", {"name": name})


def error(message: str, kind: str = "InvalidMessage") -> dict:
    """Reply to a rejected frame; kind names the failure for clients."""
    return envelope("error", {"type": kind, "message": message})
