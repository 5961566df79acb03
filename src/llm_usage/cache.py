"""File-based TTL cache for expensive secondary provider lookups.

One JSON file per key under the cache directory::

    {"data": ..., "cached_at": "<iso>", "expires_at": "<iso>"}

The cache is best-effort: a missing, corrupt or expired entry is a miss,
never an error. Entries are overwritten wholesale, never updated in place.
"""

from __future__ import annotations

import contextlib
import hashlib
import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from llm_usage.fileutil import atomic_write_text, ensure_private_dir
from llm_usage.logging import get_logger

log = get_logger("llm_usage.cache")

# Hex digits of the SHA-256 digest kept in a key (8 bytes)
KEY_DIGEST_LENGTH = 16


class CacheError(Exception):
    """Cache storage could not be read or written."""


def hash_key(prefix: str, secret: str) -> str:
    """Build a cache key from a purpose prefix and secret material.

    The secret never appears in the key or on disk, only a truncated
    SHA-256 digest of it.
    """
    digest = hashlib.sha256(secret.encode("utf-8")).hexdigest()
    return f"{prefix}_{digest[:KEY_DIGEST_LENGTH]}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CacheManager:
    """Key/value store with per-entry expiry, backed by a directory."""

    def __init__(self, cache_dir: Path | str, clock: Callable[[], datetime] = _utcnow):
        """Initialize the cache manager.

        Args:
            cache_dir: Directory holding the cache entry files.
            clock: Source of the current (timezone-aware) time.
        """
        self._cache_dir = Path(cache_dir)
        self._clock = clock

    @property
    def cache_dir(self) -> Path:
        """Directory holding the cache entry files."""
        return self._cache_dir

    def _key_path(self, key: str) -> Path:
        return self._cache_dir / f"{key}.json"

    def get(self, key: str) -> tuple[bool, Any]:
        """Look up a cached value.

        Returns:
            ``(True, value)`` on a hit, ``(False, None)`` when the entry is
            missing, unparseable or expired. Expired entries are removed.

        Raises:
            CacheError: The entry exists but could not be read.
        """
        path = self._key_path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return False, None
        except OSError as e:
            raise CacheError(f"Failed to read cache file {path}: {e}") from e

        try:
            entry = json.loads(raw)
            expires_at = datetime.fromisoformat(entry["expires_at"])
            data = entry["data"]
        except (ValueError, KeyError, TypeError):
            log.debug("cache_entry_corrupt", key=key)
            return False, None

        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)

        if self._clock() > expires_at:
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
            log.debug("cache_entry_expired", key=key)
            return False, None

        return True, data

    def set(self, key: str, value: Any, ttl: timedelta | float) -> None:
        """Store a JSON-serializable value for ``ttl`` (seconds or timedelta).

        Raises:
            CacheError: The entry could not be serialized or written.
        """
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)

        now = self._clock()
        entry = {
            "data": value,
            "cached_at": now.isoformat(),
            "expires_at": (now + ttl).isoformat(),
        }
        try:
            payload = json.dumps(entry, indent=2)
        except (TypeError, ValueError) as e:
            raise CacheError(f"Failed to serialize cache entry {key}: {e}") from e

        try:
            ensure_private_dir(self._cache_dir)
            atomic_write_text(self._key_path(key), payload)
        except OSError as e:
            raise CacheError(f"Failed to write cache file for {key}: {e}") from e

    def clear(self) -> int:
        """Remove every cache entry.

        Returns:
            Number of entries removed. A missing directory is not an error.
        """
        if not self._cache_dir.is_dir():
            return 0

        removed = 0
        for path in self._cache_dir.glob("*.json"):
            if not path.is_file():
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise CacheError(f"Failed to remove cache file {path.name}: {e}") from e
            removed += 1

        log.info("cache_cleared", removed=removed)
        return removed
