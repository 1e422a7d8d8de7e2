# hub/conftest.py - shared helpers for the hub tests
import itertools
import json

import pytest

from hub.broadcaster import Broadcaster
from hub.dispatcher import Dispatcher
from hub.room_manager import RoomRegistry

_ids = itertools.count(1)


class MockWebSocket:
    """Stands in for a server connection; records what it was sent."""

    def __init__(self, id_val=None):
        self._id = next(_ids) if id_val is None else id_val
        self.received = []

    def __hash__(self):
        return self._id

    def __eq__(self, other):
        return isinstance(other, MockWebSocket) and self._id == other._id

    def __repr__(self):
        return f"MockWebSocket({self._id})"

    def actions(self):
        return [m["action"] for m in self.received]

    def last(self, action):
        matches = [m["payload"] for m in self.received if m["action"] == action]
        return matches[-1] if matches else None

    def all(self, action):
        return [m["payload"] for m in self.received if m["action"] == action]


class RecordingFanout:
    """Replaces websockets.broadcast: delivers decoded frames to mocks."""

    def __init__(self):
        self.frames = []

    def __call__(self, connections, message):
        self.frames.append(message)
        data = json.loads(message)
        for ws in connections:
            ws.received.append(data)


class HubHarness:
    def __init__(self, **dispatcher_options):
        history_limit = dispatcher_options.pop("history_limit", 0)
        self.registry = RoomRegistry(history_limit=history_limit)
        self.fanout = RecordingFanout()
        self.dispatcher = Dispatcher(self.registry, Broadcaster(self.fanout), **dispatcher_options)

    def connect(self):
        return MockWebSocket()

    def send(self, ws, action, payload):
        self.dispatcher.handle_message(ws, json.dumps({"action": action, "payload": payload}))

    def join(self, ws, room, name, **extra):
        self.send(ws, "join", dict(room=room, name=name, **extra))

    def close(self, ws):
        self.dispatcher.handle_disconnect(ws)


@pytest.fixture
def hub():
    return HubHarness()
