# hub/dispatcher.py
from typing import Optional

from . import protocol
from .avatars import AvatarStore
from .broadcaster import Broadcaster, all_except
from .protocol import ChatRequest, InvalidMessage, JoinRequest, MoveRequest
from .room_manager import RoomRegistry
from .state import ChatMessage, PlayerState

SYSTEM_NAME = "System"


class Dispatcher:
    """Routes decoded client requests to the room handlers.

    Handlers are plain synchronous methods: each inbound event is applied to
    the registry and fanned out before the event loop runs anything else, so
    no locking is needed.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        broadcaster: Broadcaster,
        avatars: Optional[AvatarStore] = None,
        announce_joins: bool = False,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.avatars = avatars
        self.announce_joins = announce_joins
        self._handlers = {
            JoinRequest: self.handle_join,
            MoveRequest: self.handle_move,
            ChatRequest: self.handle_chat,
        }

    def handle_message(self, websocket, message):
        """Decode one inbound frame and apply it"""
        try:
            request = protocol.parse_request(message)
            if request is None:
                return
            self._handlers[type(request)](websocket, request)
        except InvalidMessage as e:
            print(f"[SVR] Rejected message from {id(websocket)}: {e}")
            self.broadcaster.to_one(websocket, protocol.error(str(e), type(e).__name__))

    def handle_join(self, websocket, request: JoinRequest):
        session = self.registry.session_for(websocket)
        if session.joined and session.room != request.room:
            raise InvalidMessage(f"Already joined room '{session.room}'")

        room = self.registry.get_or_create_room(request.room)
        room.add_member(websocket, PlayerState(
            name=request.name,
            avatar=request.avatar,
            color=request.color,
        ))

        previous_avatar = session.avatar
        session.room = request.room
        session.name = request.name
        session.avatar = request.avatar
        if previous_avatar and previous_avatar != request.avatar:
            self._release_avatar(previous_avatar)
        print(f"[Room] {request.name} joined {room.room_id} ({len(room.members)} members)")

        self.broadcaster.to_room(room, protocol.update_players(room.player_list()))

        if self.announce_joins:
            notice = ChatMessage.now(SYSTEM_NAME, f"{request.name} joined the room")
            self.broadcaster.to_room(room, protocol.chat(notice.to_payload()), all_except(websocket))

        self.broadcaster.sequence_to_one(
            websocket, [protocol.chat(m.to_payload()) for m in room.history]
        )

    def handle_move(self, websocket, request: MoveRequest):
        room = self.registry.get_room_for_player(websocket)
        if room is None:
            return
        player = room.get_member(websocket)
        if player is None:
            return

        player.x = request.x
        player.y = request.y
        self.broadcaster.to_room(room, protocol.move(player.position()), all_except(websocket))

    def handle_chat(self, websocket, request: ChatRequest):
        # The joined identity is authoritative; payload room/name are ignored
        session = self.registry.sessions.get(websocket)
        if session is None:
            return
        room = self.registry.get_room(session.room)
        if room is None:
            return

        player = room.get_member(websocket)
        color = player.color if player is not None else None
        chat_message = ChatMessage.now(session.name, request.message, color)
        room.add_message(chat_message)
        self.broadcaster.to_room(room, protocol.chat(chat_message.to_payload()))

    def handle_disconnect(self, websocket):
        """Drop a closed connection from its room. Safe to call for any connection."""
        session = self.registry.drop_session(websocket)
        if session is None or not session.joined:
            return
        room = self.registry.get_room(session.room)
        if room is None:
            return

        room.remove_member(websocket)
        if session.avatar:
            self._release_avatar(session.avatar)
        print(f"[Room] {session.name} left {room.room_id} ({len(room.members)} members)")

        self.broadcaster.to_room(room, protocol.update_players(room.player_list()))
        self.broadcaster.to_room(room, protocol.remove_cursor(session.name))

        self.registry.discard_if_empty(room.room_id)

    def _release_avatar(self, url: str):
        """Delete an avatar once no connected session refers to it."""
        if self.avatars is None:
            return
        if self.registry.avatar_in_use(url):
            print(f"[Avatar] Still in use, keeping {url}")
            return
        try:
            self.avatars.delete(url)
        except Exception as e:
            print(f"[Avatar] Unexpected error deleting {url}: {e}")
