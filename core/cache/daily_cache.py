"""Daily Cache - one value per calendar day, older days pruned on write."""
import json
import logging
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# The entry must outlive its day by a little so late readers still hit it
ENTRY_TTL_SECONDS = 2 * 24 * 60 * 60


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    parsed = urlparse(url)
    if parsed.password:
        return parsed._replace(
            netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
        ).geturl()
    return url


class DailyCache(ABC):
    """Single-key, date-keyed cache. A write for a new day replaces the old entry."""

    @abstractmethod
    def get(self, day: date) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def set(self, day: date, value: Dict[str, Any]) -> bool:
        pass


class InMemoryDailyCache(DailyCache):
    def __init__(self):
        self._entry: Optional[Tuple[date, Dict[str, Any]]] = None
        self._lock = threading.Lock()

    def get(self, day: date) -> Optional[Dict[str, Any]]:
        with self._lock:
            if self._entry and self._entry[0] == day:
                return self._entry[1]
        return None

    def set(self, day: date, value: Dict[str, Any]) -> bool:
        with self._lock:
            self._entry = (day, value)
        return True


class RedisDailyCache(DailyCache):
    """
    Redis-backed daily cache shared by all workers.

    Stores one key holding {"date", "data"}; reads for another date miss.
    Redis errors are logged and treated as misses.
    """

    def __init__(self, redis_url: str, key: str = "daily-cache", redis_client: Optional[Redis] = None):
        self.key = key
        self._redis = redis_client or Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        logger.info(f"Daily cache using Redis at {_sanitize_url(redis_url)}")

    def get(self, day: date) -> Optional[Dict[str, Any]]:
        try:
            raw = self._redis.get(self.key)
        except RedisError as e:
            logger.warning(f"Error reading from daily cache: {e}")
            return None

        if not raw:
            return None

        entry = json.loads(raw)
        if entry.get("date") != day.isoformat():
            logger.debug(f"Daily cache entry is for {entry.get('date')}, not {day}")
            return None
        return entry.get("data")

    def set(self, day: date, value: Dict[str, Any]) -> bool:
        entry = {
            "date": day.isoformat(),
            "data": value,
            "cached_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._redis.setex(self.key, ENTRY_TTL_SECONDS, json.dumps(entry))
            return True
        except RedisError as e:
            logger.warning(f"Error writing to daily cache: {e}")
            return False
