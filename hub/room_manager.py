# hub/room_manager.py
from typing import Dict, Optional

from .room import Room
from .state import Session


class RoomRegistry:
    """Owns every room and the session of every connected client.

    A room is present only while it has at least one member: rooms are
    created on the first join and removed as soon as the last member leaves.
    """

    def __init__(self, history_limit: int = 0):
        self.rooms: Dict[str, Room] = {}
        self.sessions: Dict[object, Session] = {}  # websocket -> session
        self.history_limit = history_limit

    def session_for(self, websocket) -> Session:
        """Return the session for a connection, creating an empty one."""
        session = self.sessions.get(websocket)
        if session is None:
            session = Session()
            self.sessions[websocket] = session
        return session

    def drop_session(self, websocket) -> Optional[Session]:
        return self.sessions.pop(websocket, None)

    def get_room(self, room_id: Optional[str]) -> Optional[Room]:
        if room_id is None:
            return None
        return self.rooms.get(room_id)

    def get_or_create_room(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            room = Room(room_id, history_limit=self.history_limit)
            self.rooms[room_id] = room
            print(f"[Room] Created room: {room_id}")
        return room

    def discard_if_empty(self, room_id: str) -> bool:
        """Remove the room if it has no members left."""
        room = self.rooms.get(room_id)
        if room is None or not room.is_empty():
            return False
        del self.rooms[room_id]
        print(f"[Room] Removed empty room: {room_id}")
        return True

    def avatar_in_use(self, url: str) -> bool:
        return any(session.avatar == url for session in self.sessions.values())

    def get_room_for_player(self, websocket) -> Optional[Room]:
        """Get the room that a connection has joined"""
        session = self.sessions.get(websocket)
        if session is None:
            return None
        return self.get_room(session.room)

    def get_room_stats(self) -> Dict:
        """Get statistics about all rooms"""
        room_details = []
        for room_id, room in self.rooms.items():
            room_details.append({
                "room_id": room_id,
                "players": len(room.members),
                "messages": len(room.history),
                "created_at": room.created_at,
            })

        return {
            "total_rooms": len(self.rooms),
            "total_players": sum(len(room.members) for room in self.rooms.values()),
            "rooms": room_details,
        }
