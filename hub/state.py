# hub/state.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class PlayerState:
    """Presence record of one connection inside its room."""

    name: str
    avatar: Optional[str] = None
    color: Optional[str] = None
    x: float = 0
    y: float = 0

    def summary(self):
        """Entry used in updatePlayers payloads."""
        entry = {"name": self.name}
        if self.avatar is not None:
            entry["avatar"] = self.avatar
        if self.color is not None:
            entry["color"] = self.color
        return entry

    def position(self):
        entry = {"name": self.name, "x": self.x, "y": self.y}
        if self.avatar is not None:
            entry["avatar"] = self.avatar
        if self.color is not None:
            entry["color"] = self.color
        return entry


@dataclass(frozen=True)
class ChatMessage:
    date: str
    name: str
    message: str
    color: Optional[str] = None

    @classmethod
    def now(cls, name: str, message: str, color: Optional[str] = None) -> "ChatMessage":
        # Locale-dependent date and time, like a browser's toLocaleString()
        return cls(datetime.now().strftime("%x, %X"), name, message, color)

    def to_payload(self):
        payload = {"date": self.date, "name": self.name, "message": self.message}
        if self.color is not None:
            payload["color"] = self.color
        return payload


@dataclass
class Session:
    """Identity of one connection, owned by the registry.

    room stays None until the first successful join.
    """

    room: Optional[str] = None
    name: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def joined(self):
        return self.room is not None
