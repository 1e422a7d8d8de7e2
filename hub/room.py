# hub/room.py
import time
from collections import deque
from typing import Dict, Optional

from .state import ChatMessage, PlayerState


class Room:
    """Members of one room plus its chat history"""

    def __init__(self, room_id: str, history_limit: int = 0):
        self.room_id = room_id
        self.members: Dict[object, PlayerState] = {}  # websocket -> player state
        # maxlen=None keeps the whole history for the room's lifetime
        self.history = deque(maxlen=history_limit or None)
        self.created_at = time.time()

    def is_empty(self):
        """Check if room has no members"""
        return len(self.members) == 0

    def add_member(self, websocket, player: PlayerState):
        """Insert or overwrite the member's state.

        Overwriting keeps the member's original place in the player list.
        """
        self.members[websocket] = player

    def remove_member(self, websocket) -> Optional[PlayerState]:
        return self.members.pop(websocket, None)

    def get_member(self, websocket) -> Optional[PlayerState]:
        return self.members.get(websocket)

    def player_list(self):
        """Snapshot of every member, in join order."""
        return [player.summary() for player in self.members.values()]

    def add_message(self, message: ChatMessage):
        self.history.append(message)

    def connections(self):
        return list(self.members)
