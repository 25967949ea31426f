"""On-disk TTL cache for lookup responses."""

from __future__ import annotations

import copy
import hashlib
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 3600


def _ipv4_octets(cache_key: str) -> Optional[list[str]]:
    parts = cache_key.strip().split(".")
    if len(parts) != 4 or not all(part.isdigit() and int(part) <= 255 for part in parts):
        return None
    return parts


@dataclass(slots=True)
class LookupCache:
    """Manage on-disk JSON caches of lookup responses, one directory per namespace.

    IPv4 keys are sharded by octet (``<ns>/8/8/8/8.json``); every other key is stored
    under its SHA-256 digest (``<ns>/ab/<digest>.json``). Keys are used as written, so
    ``08.8.8.8`` and ``8.8.8.8`` are separate entries. Entries older than
    ``ttl_seconds`` are treated as misses and removed on read. A TTL of 0 disables expiry.
    """

    base_dir: Path
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    stats: Dict[str, int] = field(default_factory=lambda: {"hits": 0, "misses": 0, "stores": 0})

    def __post_init__(self) -> None:
        """Ensure cache directory exists."""
        self.base_dir = Path(self.base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def get_path(self, namespace: str, cache_key: str) -> Path:
        """Return the filesystem path for a namespace/key pair."""
        octets = _ipv4_octets(cache_key)
        if octets is not None:
            return self.base_dir / namespace / octets[0] / octets[1] / octets[2] / f"{octets[3]}.json"
        digest = hashlib.sha256(cache_key.strip().encode("utf-8")).hexdigest()
        return self.base_dir / namespace / digest[:2] / f"{digest}.json"

    def get(self, namespace: str, cache_key: str) -> Optional[Dict[str, Any]]:
        """Return cached JSON data as deep copy to prevent mutation.

        Args:
            namespace: Cache namespace (e.g. "lookup")
            cache_key: The cache key, usually an IP address

        Returns:
            Deep copy of the cached data, or None if not found, expired or unreadable
        """
        cache_path = self.get_path(namespace, cache_key)
        if not cache_path.exists():
            self.stats["misses"] += 1
            return None
        if not self._is_valid(cache_path):
            self.stats["misses"] += 1
            try:
                cache_path.unlink()
            except OSError as e:
                logger.debug(f"Could not remove expired cache entry {cache_path}: {e}")
            return None
        try:
            data = json.loads(cache_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.debug(f"Unreadable cache entry {cache_path}: {e}")
            self.stats["misses"] += 1
            return None
        self.stats["hits"] += 1
        return copy.deepcopy(data)

    def store(self, namespace: str, cache_key: str, data: Dict[str, Any]) -> None:
        """Persist JSON data; failures are logged and otherwise ignored."""
        cache_path = self.get_path(namespace, cache_key)
        try:
            payload = json.dumps(data, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping cache store for {cache_key}: {e}")
            return
        try:
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(payload, encoding="utf-8")
            self.stats["stores"] += 1
        except OSError as e:
            logger.debug(f"Cache write failed for {cache_path}: {e}")

    def delete(self, namespace: str, cache_key: str) -> bool:
        """Remove one entry; returns True if a file was deleted."""
        cache_path = self.get_path(namespace, cache_key)
        try:
            cache_path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.debug(f"Cache delete failed for {cache_path}: {e}")
            return False

    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of the counters plus the hit rate as a percentage."""
        total = self.stats["hits"] + self.stats["misses"]
        hit_rate = round(self.stats["hits"] / total * 100, 2) if total else 0.0
        return {**self.stats, "total_requests": total, "hit_rate": hit_rate}

    def cleanup_expired(self, *, now: Callable[[], float] | None = None) -> Dict[str, int]:
        """Remove cache entries older than the TTL.

        Args:
            now: Optional callable returning the current epoch timestamp, for deterministic tests

        Returns:
            ``scanned``, ``deleted`` and ``errors`` counters
        """
        stats = {"scanned": 0, "deleted": 0, "errors": 0}
        if self.ttl_seconds <= 0:
            return stats

        timestamp = now() if now is not None else time.time()
        cutoff = timestamp - self.ttl_seconds

        for cache_file in self.base_dir.rglob("*.json"):
            if not cache_file.is_file():
                continue
            stats["scanned"] += 1
            try:
                if cache_file.stat().st_mtime < cutoff:
                    cache_file.unlink()
                    stats["deleted"] += 1
            except FileNotFoundError:
                continue
            except OSError:
                stats["errors"] += 1

        return stats

    def _is_valid(self, cache_path: Path) -> bool:
        if self.ttl_seconds <= 0:
            return True
        try:
            mtime = cache_path.stat().st_mtime
        except OSError:
            return False
        return time.time() - mtime < self.ttl_seconds


__all__ = ["DEFAULT_TTL_SECONDS", "LookupCache"]
