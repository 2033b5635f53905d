"""
Cache abstraction for key-value storage.

Used server-side for roster/dashboard caching and client-side as the backend
of the offline named cache stores. A ttl of 0 means "never expires".
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Any, List
import json
import sqlite3
import threading
import time


class Cache(ABC):
    """Abstract cache interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get value by key. Returns None if not found or expired."""
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl: int = 3600) -> None:
        """Set value with TTL in seconds (0 = no expiry)."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key."""
        pass

    @abstractmethod
    def keys(self, prefix: str = '') -> List[str]:
        """List live keys starting with prefix."""
        pass

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        return self.get(key) is not None

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key under prefix. Returns the number removed."""
        removed = 0
        for key in self.keys(prefix):
            self.delete(key)
            removed += 1
        return removed

    def get_json(self, key: str) -> Optional[Any]:
        """Get and deserialize JSON value."""
        value = self.get(key)
        if value is None:
            return None
        return json.loads(value)

    def set_json(self, key: str, value: Any, ttl: int = 3600) -> None:
        """Serialize and set JSON value."""
        self.set(key, json.dumps(value, ensure_ascii=False), ttl=ttl)


class RedisCache(Cache):
    """Redis cache implementation."""

    def __init__(self, redis_url: str):
        import redis
        self._client = redis.from_url(redis_url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def set(self, key: str, value: str, ttl: int = 3600) -> None:
        if ttl > 0:
            self._client.setex(key, ttl, value)
        else:
            self._client.set(key, value)

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def keys(self, prefix: str = '') -> List[str]:
        return sorted(self._client.scan_iter(match=f'{prefix}*'))

    def exists(self, key: str) -> bool:
        return bool(self._client.exists(key))


class SQLiteCache(Cache):
    """
    File-backed cache for devices without a Redis server.

    The offline client keeps its static and API response stores here so they
    survive restarts. Expired rows are dropped lazily on read.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
        with self._lock, self._conn:
            self._conn.execute(
                'CREATE TABLE IF NOT EXISTS cache_entries ('
                ' key TEXT PRIMARY KEY,'
                ' value TEXT NOT NULL,'
                ' expires_at REAL NOT NULL DEFAULT 0)'
            )

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            row = self._conn.execute(
                'SELECT value, expires_at FROM cache_entries WHERE key = ?', (key,)
            ).fetchone()
            if row is None:
                return None
            value, expires_at = row
            if expires_at and time.time() >= expires_at:
                with self._conn:
                    self._conn.execute('DELETE FROM cache_entries WHERE key = ?', (key,))
                return None
            return value

    def set(self, key: str, value: str, ttl: int = 3600) -> None:
        expires_at = time.time() + ttl if ttl > 0 else 0
        with self._lock, self._conn:
            self._conn.execute(
                'INSERT OR REPLACE INTO cache_entries (key, value, expires_at) VALUES (?, ?, ?)',
                (key, value, expires_at),
            )

    def delete(self, key: str) -> None:
        with self._lock, self._conn:
            self._conn.execute('DELETE FROM cache_entries WHERE key = ?', (key,))

    def keys(self, prefix: str = '') -> List[str]:
        now = time.time()
        with self._lock:
            rows = self._conn.execute(
                'SELECT key FROM cache_entries'
                ' WHERE substr(key, 1, ?) = ? AND (expires_at = 0 OR expires_at > ?)'
                ' ORDER BY key',
                (len(prefix), prefix, now),
            ).fetchall()
        return [row[0] for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()


class FakeCache(Cache):
    """
    In-memory cache for testing.
    Expiry is evaluated against an internal fake clock (see advance_clock).
    """

    def __init__(self):
        self._store: dict[str, tuple[str, int]] = {}  # key -> (value, expiry_unix)
        self._clock_unix: int = 1705320000
        self.fail_writes = False

    def get(self, key: str) -> Optional[str]:
        if key not in self._store:
            return None

        value, expiry = self._store[key]
        if expiry > 0 and self._clock_unix >= expiry:
            del self._store[key]
            return None

        return value

    def set(self, key: str, value: str, ttl: int = 3600) -> None:
        if self.fail_writes:
            raise OSError('cache storage unavailable')
        expiry = self._clock_unix + ttl if ttl > 0 else 0
        self._store[key] = (value, expiry)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self, prefix: str = '') -> List[str]:
        return sorted(k for k in list(self._store) if k.startswith(prefix) and self.get(k) is not None)

    def clear(self) -> None:
        """Clear all keys (for test cleanup)."""
        self._store.clear()

    def set_clock(self, unix_ts: int) -> None:
        """Set fake clock for expiry testing."""
        self._clock_unix = unix_ts

    def advance_clock(self, seconds: int) -> None:
        """Advance fake clock."""
        self._clock_unix += seconds
