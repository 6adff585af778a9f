"""Object storage for uploaded files.

Files are written under ``settings.upload_dir`` and served by the app at
``/uploads``; the returned public URL is what gets stored on profiles.
"""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Protocol

from jobboard.config import settings


logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"

_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(RuntimeError):
    pass


class ObjectStorage(Protocol):
    def upload(self, content: bytes, filename: str, content_type: str | None, folder: str) -> str: ...

    def delete(self, url: str) -> None: ...


def _safe_filename(filename: str | None) -> str:
    name = Path(filename or "file").name
    cleaned = _UNSAFE_NAME_RE.sub("-", name).strip("-.")
    return cleaned or "file"


class LocalObjectStorage:
    def __init__(self, root: str | Path, public_base_url: str) -> None:
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    def upload(self, content: bytes, filename: str, content_type: str | None, folder: str) -> str:
        key = f"{folder.strip('/')}/{uuid.uuid4()}-{_safe_filename(filename)}"
        path = self.root / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise StorageError(f"Could not store {key}: {exc}") from exc
        logger.info("storage.upload key=%s bytes=%s content_type=%s", key, len(content), content_type)
        return f"{self.public_base_url}{PUBLIC_PREFIX}{key}"

    def _key_from_url(self, url: str) -> str:
        _, sep, key = (url or "").partition(PUBLIC_PREFIX)
        if not sep or not key:
            raise StorageError(f"Not a stored file URL: {url}")
        return key

    def delete(self, url: str) -> None:
        key = self._key_from_url(url)
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Refusing to delete outside storage root: {url}")
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise StorageError(f"Stored file not found: {key}") from exc
        except OSError as exc:
            raise StorageError(f"Could not delete {key}: {exc}") from exc
        logger.info("storage.delete key=%s", key)


def delete_quietly(storage: ObjectStorage, url: str | None) -> bool:
    """Best-effort delete; failures are logged and reported as False."""
    if not url:
        return False
    try:
        storage.delete(url)
        return True
    except StorageError as exc:
        logger.warning("storage.delete failed url=%s error=%s", url, exc)
        return False


_storage: ObjectStorage | None = None


def get_storage() -> ObjectStorage:
    global _storage
    if _storage is None:
        _storage = LocalObjectStorage(settings.upload_dir, settings.public_base_url)
    return _storage
