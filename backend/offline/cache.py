"""
Response Cache: named cache stores over the shared Cache backend.

Entries live under `offline:<store>:<request key>` in any
infrastructure.cache.Cache implementation (SQLiteCache on devices,
FakeCache in tests). The static store is versioned by name, so its entries
never expire on their own; API entries are purged by age.
"""
import asyncio
import base64
import hashlib
import logging
from dataclasses import dataclass
from email.utils import formatdate
from typing import Any, Dict, List, Optional, Tuple

import httpx

from infrastructure.cache import Cache
from infrastructure.clock import Clock

logger = logging.getLogger(__name__)

ENTRY_PREFIX = 'offline'
STORE_MARKER_PREFIX = 'offline-store:'

# Response headers that describe the transfer, not the content.
_HOP_HEADERS = frozenset(('content-length', 'content-encoding', 'transfer-encoding', 'connection'))


def request_cache_key(method: str, path: str, body: bytes = b'') -> str:
    """
    Cache key for a logical read.

    A pure function of (method, path + query, body); the body is hashed so
    two reads that differ only in body never share an entry.
    """
    digest = hashlib.sha256(body or b'').hexdigest()
    return f'{method.upper()} {path} {digest}'


def key_for_request(request: httpx.Request) -> str:
    return request_cache_key(request.method, request.url.raw_path.decode('ascii'), request.content)


@dataclass(frozen=True)
class CachedResponse:
    key: str
    status: int
    headers: Tuple[Tuple[str, str], ...]
    body: bytes
    stored_at: float

    @property
    def capture_date(self) -> str:
        """HTTP date of the original capture."""
        for name, value in self.headers:
            if name.lower() == 'date':
                return value
        return formatdate(self.stored_at, usegmt=True)

    def to_response(self, extra_headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        headers = [(name, value) for name, value in self.headers]
        for name, value in (extra_headers or {}).items():
            headers = [(n, v) for n, v in headers if n.lower() != name.lower()]
            headers.append((name, value))
        return httpx.Response(self.status, headers=headers, content=self.body)

    def to_json(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'status': self.status,
            'headers': [list(pair) for pair in self.headers],
            'body': base64.b64encode(self.body).decode('ascii'),
            'stored_at': self.stored_at,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'CachedResponse':
        return cls(
            key=data['key'],
            status=int(data['status']),
            headers=tuple((name, value) for name, value in data['headers']),
            body=base64.b64decode(data['body']),
            stored_at=float(data['stored_at']),
        )

    @classmethod
    def capture(cls, key: str, response: httpx.Response, now: float) -> 'CachedResponse':
        """Snapshot an already-read response."""
        headers = tuple(
            (name, value) for name, value in response.headers.items()
            if name.lower() not in _HOP_HEADERS
        )
        return cls(key=key, status=response.status_code, headers=headers, body=response.content, stored_at=now)


class NamedCache:
    """One named store (e.g. 'static-v1.2' or 'api-v1.2')."""

    def __init__(self, name: str, backend: Cache, clock: Clock):
        self.name = name
        self._backend = backend
        self._clock = clock
        self._prefix = f'{ENTRY_PREFIX}:{name}:'

    async def match(self, key: str) -> Optional[CachedResponse]:
        data = await asyncio.to_thread(self._backend.get_json, self._prefix + key)
        if data is None:
            return None
        return CachedResponse.from_json(data)

    async def put(self, key: str, response: httpx.Response) -> CachedResponse:
        """Store a read response. The response body must already be loaded."""
        entry = CachedResponse.capture(key, response, self._clock.now_ts())
        await asyncio.to_thread(self._backend.set_json, self._prefix + key, entry.to_json(), 0)
        await asyncio.to_thread(self._backend.set, STORE_MARKER_PREFIX + self.name, '1', 0)
        return entry

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._backend.delete, self._prefix + key)

    async def keys(self) -> List[str]:
        full_keys = await asyncio.to_thread(self._backend.keys, self._prefix)
        return [k[len(self._prefix):] for k in full_keys]

    async def entries(self) -> List[CachedResponse]:
        result = []
        for key in await self.keys():
            entry = await self.match(key)
            if entry is not None:
                result.append(entry)
        return result


class CacheStorage:
    """Registry of named stores sharing one backend."""

    def __init__(self, backend: Cache, clock: Clock):
        self._backend = backend
        self._clock = clock

    async def open(self, name: str) -> NamedCache:
        """A handle on the named store. The store is listed once it holds an entry."""
        return NamedCache(name, self._backend, self._clock)

    async def names(self) -> List[str]:
        markers = await asyncio.to_thread(self._backend.keys, STORE_MARKER_PREFIX)
        return [m[len(STORE_MARKER_PREFIX):] for m in markers]

    async def delete(self, name: str) -> bool:
        marker = STORE_MARKER_PREFIX + name
        existed = await asyncio.to_thread(self._backend.exists, marker)
        await asyncio.to_thread(self._backend.delete_prefix, f'{ENTRY_PREFIX}:{name}:')
        await asyncio.to_thread(self._backend.delete, marker)
        return existed

    async def match(self, key: str) -> Optional[CachedResponse]:
        """Look the key up across every store."""
        for name in await self.names():
            entry = await NamedCache(name, self._backend, self._clock).match(key)
            if entry is not None:
                return entry
        return None

    async def clear_all(self) -> int:
        names = await self.names()
        for name in names:
            await self.delete(name)
        logger.info("Cleared all offline caches", extra={'stores': len(names)})
        return len(names)


async def purge_expired(cache: NamedCache, max_age: float, now: float) -> int:
    """Delete entries captured more than max_age seconds ago."""
    removed = 0
    for entry in await cache.entries():
        if now - entry.stored_at > max_age:
            await cache.delete(entry.key)
            removed += 1
    if removed:
        logger.info(f"Purged {removed} expired entries from {cache.name}")
    return removed


class MemoryReadCache:
    """
    Short-lived in-process cache of decoded API results.

    Sits in front of the network for repeated reads within a few tens of
    seconds; cleared after every successful clock action.
    """

    def __init__(self, clock: Clock, default_ttl: float = 30.0):
        self._clock = clock
        self._default_ttl = default_ttl
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        item = self._entries.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._clock.now_ts() > expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        self._entries[key] = (value, self._clock.now_ts() + ttl)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
