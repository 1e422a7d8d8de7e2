# hub/static.py
import asyncio
import email.utils
import mimetypes
from http import HTTPStatus
from pathlib import Path
from urllib.parse import unquote, urlparse

from websockets.datastructures import Headers
from websockets.http11 import Request, Response


def _response(status: HTTPStatus, body: bytes, content_type: str) -> Response:
    headers = Headers([
        ("Date", email.utils.formatdate(usegmt=True)),
        ("Connection", "close"),
        ("Content-Length", str(len(body))),
        ("Content-Type", content_type),
    ])
    return Response(status.value, status.phrase, headers, body)


def not_found() -> Response:
    return _response(HTTPStatus.NOT_FOUND, b"Not Found\n", "text/plain; charset=utf-8")


class StaticFiles:
    """Answers plain HTTP GETs on the WebSocket port from a directory.

    Used as the server's process_request hook: returning None lets a
    WebSocket upgrade through to the connection handler.
    """

    def __init__(self, root, index: str = "index.html"):
        self.root = Path(root).resolve()
        self.index = index

    def resolve(self, request_path: str):
        path = unquote(urlparse(request_path).path)
        relative = path.lstrip("/") or self.index
        try:
            target = (self.root / relative).resolve()
            if target != self.root and self.root not in target.parents:
                return None
            if target.is_dir():
                target = target / self.index
            if not target.is_file():
                return None
        except (ValueError, OSError):
            # NUL bytes and other names the filesystem refuses
            return None
        return target

    def load(self, request_path: str):
        """Return (path, contents) for a servable file, or None."""
        target = self.resolve(request_path)
        if target is None:
            return None
        try:
            return target, target.read_bytes()
        except OSError as e:
            print(f"[Static] Failed to read {target}: {e}")
            return None

    async def __call__(self, connection, request: Request):
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None

        # Filesystem access stays off the event loop
        found = await asyncio.to_thread(self.load, request.path)
        if found is None:
            print(f"[Static] 404 {request.path}")
            return not_found()

        target, body = found
        content_type, _ = mimetypes.guess_type(target.name)
        return _response(HTTPStatus.OK, body, content_type or "application/octet-stream")
