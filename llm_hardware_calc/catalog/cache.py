"""Local cache for the raw GPU catalog.

The raw download is cached rather than the normalized devices so that
heuristic improvements apply to cached data on the next load.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

# Default storage location
DEFAULT_CACHE_DIR = Path.home() / ".llm-hardware-calc"
CACHE_FILENAME = "gpu_catalog.json"

DEFAULT_CACHE_TTL = 24 * 60 * 60  # 24 hours

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    """A cached raw catalog."""

    raw: Dict[str, Any]
    stored_at: float
    is_stale: bool = False


class CatalogCache(Protocol):
    """Storage for the last successfully downloaded raw catalog."""

    def get(self, allow_stale: bool = False) -> Optional[CacheEntry]:
        ...

    def set(self, raw: Dict[str, Any]) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryCatalogCache:
    """In-process cache, used by tests and when no cache directory is wanted."""

    def __init__(self, ttl: float = DEFAULT_CACHE_TTL, clock: Clock = time.time):
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    def get(self, allow_stale: bool = False) -> Optional[CacheEntry]:
        if self._entry is None:
            return None
        stale = self._clock() - self._entry.stored_at > self.ttl
        if stale and not allow_stale:
            return None
        return CacheEntry(raw=self._entry.raw, stored_at=self._entry.stored_at, is_stale=stale)

    def set(self, raw: Dict[str, Any]) -> None:
        self._entry = CacheEntry(raw=raw, stored_at=self._clock())

    def clear(self) -> None:
        self._entry = None


class FileCatalogCache:
    """JSON file cache under the user's home directory.

    File layout: {"timestamp": <epoch seconds>, "data": <raw catalog>}
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Clock = time.time,
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR
        self.cache_file = self.cache_dir / CACHE_FILENAME
        self.ttl = ttl
        self._clock = clock

    def _read(self) -> Optional[CacheEntry]:
        if not self.cache_file.exists():
            return None
        try:
            with open(self.cache_file) as f:
                payload = json.load(f)
            stored_at = float(payload["timestamp"])
            raw = payload["data"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable catalog cache {self.cache_file}: {e}")
            return None

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring catalog cache {self.cache_file}: data is not an object")
            return None
        return CacheEntry(raw=raw, stored_at=stored_at)

    def get(self, allow_stale: bool = False) -> Optional[CacheEntry]:
        entry = self._read()
        if entry is None:
            return None

        age = self._clock() - entry.stored_at
        stale = age > self.ttl
        if stale and not allow_stale:
            logger.debug(f"Catalog cache expired ({age / 3600:.1f}h old)")
            return None
        return CacheEntry(raw=entry.raw, stored_at=entry.stored_at, is_stale=stale)

    def set(self, raw: Dict[str, Any]) -> None:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(self.cache_file, "w") as f:
                json.dump({"timestamp": self._clock(), "data": raw}, f)
        except OSError as e:
            logger.error(f"Failed to write catalog cache: {e}")
            return
        logger.debug(f"Cached catalog to {self.cache_file}")

    def clear(self) -> None:
        if self.cache_file.exists():
            self.cache_file.unlink()
            logger.info(f"Removed catalog cache {self.cache_file}")
