# hub/avatars.py
import os
import uuid
from pathlib import Path
from typing import Optional

UPLOAD_PREFIX = "/uploads/"


class AvatarStore:
    """Uploaded avatar images, stored under <static root>/uploads.

    An avatar is referenced by the URL it is served from, /uploads/<file>.
    """

    def __init__(self, upload_dir):
        self.upload_dir = Path(upload_dir).resolve()

    def save(self, filename: str, data: bytes) -> str:
        """Store an uploaded file and return its reference URL."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(filename).suffix.lower()
        stored_name = f"{uuid.uuid4().hex}{suffix}"
        (self.upload_dir / stored_name).write_bytes(data)
        return UPLOAD_PREFIX + stored_name

    def path_for(self, url: str) -> Optional[Path]:
        """Map a reference URL back to a file inside the upload directory."""
        if not url.startswith(UPLOAD_PREFIX):
            return None
        path = (self.upload_dir / url[len(UPLOAD_PREFIX):]).resolve()
        if path.parent != self.upload_dir:
            return None
        return path

    def delete(self, url: str) -> bool:
        """Best-effort removal of an uploaded avatar. Never raises."""
        path = self.path_for(url)
        if path is None:
            print(f"[Avatar] Not an uploaded avatar, skipping delete: {url}")
            return False
        try:
            os.remove(path)
        except FileNotFoundError:
            print(f"[Avatar] Avatar already gone: {url}")
            return False
        except OSError as e:
            print(f"[Avatar] Failed to delete {url}: {e}")
            return False
        print(f"[Avatar] Deleted {url}")
        return True
