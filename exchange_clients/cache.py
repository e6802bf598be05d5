"""
TTL cache for slow-changing chain queries, persisted as JSON files.

Each file holds ``{"lastUpdated": <epoch ms>, "data": ...}`` so it can be shared
with other tools reading the same cache directory.
"""

import json
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from helpers.unified_logger import get_core_logger


class JsonFileCache:
    """Return fresh cached data, refetch when stale, fall back to stale data on errors."""

    def __init__(self, cache_dir: Union[str, Path], logger=None):
        self.cache_dir = Path(cache_dir)
        self.logger = logger or get_core_logger("cache")

    def _path(self, name: str) -> Path:
        return self.cache_dir / name

    def read(self, name: str) -> Optional[dict]:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            with open(path, "r") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning(f"Unreadable cache file {path}: {e}")
            return None
        return payload if isinstance(payload, dict) else None

    def write(self, name: str, data: Any) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        payload = {"lastUpdated": int(time.time() * 1000), "data": data}
        with open(self._path(name), "w") as f:
            json.dump(payload, f, indent=2, default=str)

    async def get_or_fetch(
        self,
        name: str,
        ttl_seconds: float,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Optional[Any]:
        """
        Return cached data for ``name`` when younger than ``ttl_seconds``.

        Otherwise await ``fetch()``, store and return its result. When the fetch
        fails the expired cached data is returned if there is any, else None.
        """
        cached = self.read(name)
        now_ms = int(time.time() * 1000)
        if cached and cached.get("lastUpdated") and now_ms - cached["lastUpdated"] < ttl_seconds * 1000:
            return cached.get("data")

        try:
            fresh = await fetch()
        except Exception as e:
            if cached is not None and "data" in cached:
                self.logger.warning(f"Returning expired cache for {name} after fetch error: {e}")
                return cached["data"]
            self.logger.error(f"Fetching {name} failed with no cached fallback: {e}")
            return None

        try:
            self.write(name, fresh)
        except OSError as e:
            self.logger.warning(f"Could not write cache file {name}: {e}")
        return fresh
