# hub/main.py - Room-based presence and chat hub
import argparse
import asyncio
import functools
import os
from dataclasses import dataclass
from pathlib import Path

import websockets
from websockets.asyncio.server import serve

from .avatars import AvatarStore
from .broadcaster import Broadcaster
from .dispatcher import Dispatcher
from .room_manager import RoomRegistry
from .static import StaticFiles


@dataclass
class HubConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: str = "./public"
    history_limit: int = 0
    announce_joins: bool = False
    status_interval: float = 30.0

    @property
    def upload_dir(self) -> Path:
        return Path(self.static_dir) / "uploads"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def build_dispatcher(config: HubConfig) -> Dispatcher:
    registry = RoomRegistry(history_limit=config.history_limit)
    return Dispatcher(
        registry,
        Broadcaster(),
        avatars=AvatarStore(config.upload_dir),
        announce_joins=config.announce_joins,
    )


async def handle_client(websocket, dispatcher: Dispatcher):
    """Handle one client connection until it closes."""
    print(f"[SVR] Client connected: {websocket.remote_address}")
    try:
        async for message in websocket:
            try:
                dispatcher.handle_message(websocket, message)
            except Exception as e:
                print(f"[SVR] Error handling message: {e}")
    except websockets.ConnectionClosedOK:
        print("[SVR] Client disconnected normally")
    except websockets.ConnectionClosedError as e:
        print(f"[SVR] Client disconnected with error: {e}")
    finally:
        # Always release the room, however the channel ended
        dispatcher.handle_disconnect(websocket)
        print("[SVR] Client connection cleaned up")


def serve_hub(config: HubConfig, dispatcher: Dispatcher):
    """WebSocket server answering static files on the same port."""
    return serve(
        functools.partial(handle_client, dispatcher=dispatcher),
        config.host,
        config.port,
        process_request=StaticFiles(config.static_dir),
    )


async def status_reporter(registry: RoomRegistry, interval: float):
    """Periodically report server status"""
    try:
        while True:
            await asyncio.sleep(interval)
            stats = registry.get_room_stats()
            if stats["total_players"] > 0:
                print("=== SERVER STATUS ===")
                print(f"Active Rooms: {stats['total_rooms']}")
                print(f"Total Players: {stats['total_players']}")
                for room in stats["rooms"]:
                    print(f"  Room {room['room_id']}: {room['players']} players, {room['messages']} messages")
                print("====================")
    except asyncio.CancelledError:
        pass


async def main(config: HubConfig):
    """Main server function"""
    dispatcher = build_dispatcher(config)
    status_task = None
    if config.status_interval > 0:
        status_task = asyncio.create_task(status_reporter(dispatcher.registry, config.status_interval))

    try:
        async with serve_hub(config, dispatcher):
            print(f"Server is listening on port {config.port}")
            print(f"Serving static files from {Path(config.static_dir).resolve()}")
            await asyncio.Event().wait()
    finally:
        if status_task:
            status_task.cancel()
        print("Server stopped")


def parse_args(argv=None) -> HubConfig:
    parser = argparse.ArgumentParser(description="Presence and chat hub")
    parser.add_argument("--host", default=os.getenv("PRESENCE_HOST", "0.0.0.0"), help="Interface to bind to")
    parser.add_argument("--port", type=int, default=int(os.getenv("PRESENCE_PORT", "3000")), help="Port for WebSocket and static files")
    parser.add_argument("--static-dir", default=os.getenv("PRESENCE_STATIC_DIR", "./public"), help="Directory served over plain HTTP")
    parser.add_argument("--history-limit", type=int, default=int(os.getenv("PRESENCE_HISTORY_LIMIT", "0")), help="Chat messages kept per room (0 = unlimited)")
    parser.add_argument("--announce-joins", action="store_true", default=_env_flag("PRESENCE_ANNOUNCE_JOINS"), help="Send a system chat line when someone joins")
    parser.add_argument("--status-interval", type=float, default=float(os.getenv("PRESENCE_STATUS_INTERVAL", "30")), help="Seconds between status reports (0 disables)")
    args = parser.parse_args(argv)
    if args.history_limit < 0:
        parser.error("--history-limit must be zero or positive")
    return HubConfig(
        host=args.host,
        port=args.port,
        static_dir=args.static_dir,
        history_limit=args.history_limit,
        announce_joins=args.announce_joins,
        status_interval=args.status_interval,
    )


def cli():
    try:
        asyncio.run(main(parse_args()))
    except KeyboardInterrupt:
        print("\nServer stopped")


if __name__ == "__main__":
    cli()
