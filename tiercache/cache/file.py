"""Filesystem cache backend implementation.

This module provides a disk-backed cache: one pickle file per key under a
root directory. It is larger and slower than the memory backend and
survives process restarts, which makes it a typical middle tier.
"""

import hashlib
import logging
import os
import pickle
import tempfile
import time
from asyncio import to_thread
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..exceptions import BackendError
from .base import CacheBackend, CacheStats

logger = logging.getLogger(__name__)

_SUFFIX = ".cache"


class FileCache(CacheBackend):
    """Disk-backed cache storing each entry as a pickle file.

    Files are named by the SHA-256 of the key and fanned out into
    two-character subdirectories. Writes go to a temporary file first and
    are moved into place with ``os.replace``, so readers never see a
    partially written entry. Blocking I/O runs in a worker thread via
    ``asyncio.to_thread``.

    Args:
        root_dir: Directory holding the cache files (uses TIERCACHE_FILE_ROOT env if not provided)
        ttl: Default TTL in seconds, ``None`` for no expiration
        create_root: Create ``root_dir`` if it does not exist

    Example:
        >>> cache = FileCache(root_dir="/var/cache/app")
        >>> await cache.set("user:1", {"name": "Ada"})
    """

    backend_name = "file"

    def __init__(
        self,
        root_dir: Optional[str] = None,
        ttl: Optional[int] = None,
        create_root: bool = True,
    ):
        self.root_dir = Path(
            root_dir or os.getenv("TIERCACHE_FILE_ROOT", ".tiercache")
        ).resolve()
        self.default_ttl = ttl
        self._create_root = create_root
        self._stats = CacheStats()

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.root_dir / digest[:2] / f"{digest}{_SUFFIX}"

    def _read_entry(self, path: Path) -> Optional[Tuple[Any, Optional[float]]]:
        try:
            with open(path, "rb") as fh:
                return pickle.load(fh)
        except FileNotFoundError:
            return None

    def _read(self, key: str) -> Tuple[bool, Any]:
        path = self._path_for(key)
        entry = self._read_entry(path)
        if entry is None:
            return False, None

        value, expires_at = entry
        if expires_at is not None and time.time() >= expires_at:
            path.unlink(missing_ok=True)
            return False, None
        return True, value

    def _write(self, key: str, value: Any, expires_at: Optional[float]) -> None:
        path = self._path_for(key)
        if self._create_root:
            path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                pickle.dump((value, expires_at), fh, protocol=pickle.HIGHEST_PROTOCOL)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    def _clear(self) -> None:
        if not self.root_dir.exists():
            return
        for path in self.root_dir.glob(f"*/*{_SUFFIX}"):
            path.unlink(missing_ok=True)

    async def get(self, key: str) -> Optional[Any]:
        try:
            found, value = await to_thread(self._read, key)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning(f"File cache read failed for key {key!r}: {e}")
            raise BackendError(
                f"File cache get error: {e}", operation="get", key=key
            ) from e

        if found:
            self._stats.record_hit()
            return value
        self._stats.record_miss()
        return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> Any:
        ttl_seconds = ttl if ttl is not None else self.default_ttl
        expires_at = time.time() + ttl_seconds if ttl_seconds else None
        try:
            await to_thread(self._write, key, value, expires_at)
        except (OSError, pickle.PicklingError) as e:
            logger.warning(f"File cache write failed for key {key!r}: {e}")
            raise BackendError(
                f"File cache set error: {e}", operation="set", key=key
            ) from e

        self._stats.record_set()
        return value

    async def delete(self, key: str) -> None:
        try:
            deleted = await to_thread(self._delete, key)
        except OSError as e:
            raise BackendError(
                f"File cache delete error: {e}", operation="delete", key=key
            ) from e
        if deleted:
            self._stats.record_delete()

    async def clear(self) -> None:
        try:
            await to_thread(self._clear)
        except OSError as e:
            raise BackendError(f"File cache clear error: {e}", operation="clear") from e
        self._stats.reset()

    async def exists(self, key: str) -> bool:
        try:
            found, _ = await to_thread(self._read, key)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            raise BackendError(
                f"File cache exists error: {e}", operation="exists", key=key
            ) from e
        return found

    def get_stats(self) -> Dict[str, Any]:
        stats = self._stats.to_dict()
        stats["backend"] = self.backend_name
        stats["root_dir"] = str(self.root_dir)
        return stats
