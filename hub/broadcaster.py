# hub/broadcaster.py
from typing import Callable, Iterable

from websockets.asyncio.server import broadcast

from . import protocol
from .room import Room


def everyone(websocket) -> bool:
    return True


def all_except(sender) -> Callable[[object], bool]:
    """Select every member but the sender"""
    return lambda websocket: websocket is not sender


class Broadcaster:
    """Fan-out of one envelope to a selected subset of a room.

    The envelope is serialized once. Delivery is left to websockets.broadcast,
    which writes without waiting, skips connections that are not open and
    logs per-recipient failures instead of raising them.
    """

    def __init__(self, fanout: Callable[[Iterable, str], None] = broadcast):
        self._fanout = fanout

    def to_room(self, room: Room, message: dict, select: Callable[[object], bool] = everyone):
        recipients = [ws for ws in room.connections() if select(ws)]
        if not recipients:
            return
        self._fanout(recipients, protocol.encode(message))

    def to_one(self, websocket, message: dict):
        self._fanout([websocket], protocol.encode(message))

    def sequence_to_one(self, websocket, messages: Iterable[dict]):
        """Send several envelopes to one connection, in order."""
        for message in messages:
            self.to_one(websocket, message)
