"""
Request Router: the interception layer in front of the network.

OfflineTransport wraps the real httpx transport. Every request is classified
once (see classify) and resolved by the strategy for its class:

    STATIC      cache-first on the versioned static store
    API         network-first, API store fallback, then the synthesizer
    DOCUMENT    network-first, any store fallback, then the offline page
    PASSTHROUGH straight to the network

Mutating requests are always PASSTHROUGH, so they are never served from or
written to a cache.
"""
import asyncio
import enum
import logging
from typing import Iterable, Optional, Set

import httpx

from infrastructure.clock import Clock
from offline.cache import CacheStorage, CachedResponse, NamedCache, key_for_request
from offline.settings import OfflineSettings
from offline.synthesizer import OfflineSynthesizer

logger = logging.getLogger(__name__)

STATIC_SUFFIXES = (
    '.css', '.js', '.png', '.jpg', '.jpeg', '.gif', '.svg', '.ico',
    '.woff', '.woff2', '.html', 'manifest.json',
)
READ_METHODS = frozenset(('GET', 'HEAD'))

CACHE_SERVED_BY = 'OfflineCache'
OFFLINE_PAGE_PLACEHOLDER = 'No internet connection'


class RequestClass(str, enum.Enum):
    PASSTHROUGH = 'passthrough'
    STATIC = 'static'
    API = 'api'
    DOCUMENT = 'document'


def _same_origin(url: httpx.URL, origin: httpx.URL) -> bool:
    return (url.scheme, url.host, url.port) == (origin.scheme, origin.host, origin.port)


def _accepts_html(request: httpx.Request) -> bool:
    return 'text/html' in request.headers.get('accept', '')


def classify(request: httpx.Request, origin: httpx.URL, api_prefix: str = '/api/') -> RequestClass:
    """Resource class of a request. Pure: depends only on its arguments."""
    if not _same_origin(request.url, origin):
        return RequestClass.PASSTHROUGH
    if request.method.upper() not in READ_METHODS:
        return RequestClass.PASSTHROUGH

    path = request.url.path
    if path == '/' or path.endswith(STATIC_SUFFIXES):
        return RequestClass.STATIC
    if path.startswith(api_prefix):
        return RequestClass.API
    if _accepts_html(request):
        return RequestClass.DOCUMENT
    return RequestClass.PASSTHROUGH


class _NetworkFailure(Exception):
    """The server answered, but not with a success status."""


class OfflineTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that applies the offline caching strategies.

    Mount it on an AsyncClient whose base_url is the application origin:

        transport = OfflineTransport(httpx.AsyncHTTPTransport(), storage, synthesizer, settings, clock)
        client = httpx.AsyncClient(base_url=settings.base_url, transport=transport)
    """

    def __init__(
        self,
        network: httpx.AsyncBaseTransport,
        storage: CacheStorage,
        synthesizer: OfflineSynthesizer,
        settings: OfflineSettings,
        clock: Clock,
    ):
        self._network = network
        self._storage = storage
        self._synthesizer = synthesizer
        self._settings = settings
        self._clock = clock
        self._origin = httpx.URL(settings.base_url)
        self._pending_writes: Set[asyncio.Task] = set()

    @property
    def settings(self) -> OfflineSettings:
        return self._settings

    def classify(self, request: httpx.Request) -> RequestClass:
        return classify(request, self._origin, self._settings.api_prefix)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        request_class = self.classify(request)
        try:
            if request_class == RequestClass.STATIC:
                return await self._cache_first(request)
            if request_class == RequestClass.API:
                return await self._network_first_with_fallback(request)
            if request_class == RequestClass.DOCUMENT:
                return await self._network_first(request)
            return await self._network.handle_async_request(request)
        except httpx.TransportError:
            # Page navigations only; passthrough traffic (mutations, other
            # origins) sees the transport error unchanged.
            if request_class != RequestClass.PASSTHROUGH and _accepts_html(request):
                logger.warning("Serving offline page", extra={'url': str(request.url)})
                return await self._offline_page(request)
            raise

    # Strategies

    async def _cache_first(self, request: httpx.Request) -> httpx.Response:
        key = key_for_request(request)
        store = await self._storage.open(self._settings.static_cache_name)
        cached = await self._lookup(store, key)
        if cached is not None:
            logger.debug("Static cache hit", extra={'url': str(request.url)})
            return cached.to_response()

        response = await self._fetch(request)
        if response.is_success:
            self._schedule_put(store, key, response)
        return response

    async def _network_first(self, request: httpx.Request) -> httpx.Response:
        key = key_for_request(request)
        store = await self._storage.open(self._settings.static_cache_name)
        try:
            response = await self._fetch(request)
        except httpx.TransportError:
            cached = await self._lookup(self._storage, key)
            if cached is not None:
                return cached.to_response()
            raise
        if response.is_success:
            self._schedule_put(store, key, response)
        return response

    async def _network_first_with_fallback(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        key = key_for_request(request)
        try:
            response = await self._fetch(request)
            if not response.is_success:
                raise _NetworkFailure(f'HTTP {response.status_code}')
        except (httpx.TransportError, _NetworkFailure) as e:
            logger.info("API network failed, trying cache", extra={'path': path, 'reason': str(e)})
            store = await self._storage.open(self._settings.api_cache_name)
            cached = await self._lookup(store, key)
            if cached is not None:
                return self._mark_cache_served(cached, request)
            return self._synthesizer.synthesize(path, request)

        if self._settings.is_cacheable_api(path):
            store = await self._storage.open(self._settings.api_cache_name)
            self._schedule_put(store, key, response)
        return response

    # Helpers

    async def _fetch(self, request: httpx.Request) -> httpx.Response:
        """Network round trip with the body fully read, so it can be cloned."""
        response = await self._network.handle_async_request(request)
        try:
            await response.aread()
        finally:
            await response.aclose()
        return response

    def _mark_cache_served(self, cached: CachedResponse, request: httpx.Request) -> httpx.Response:
        logger.info("Serving cached API response", extra={'path': request.url.path})
        response = cached.to_response({
            'X-Served-By': CACHE_SERVED_BY,
            'X-Cache-Date': cached.capture_date,
        })
        response.request = request
        return response

    async def _offline_page(self, request: httpx.Request) -> httpx.Response:
        key = self.page_key(self._settings.offline_page)
        store = await self._storage.open(self._settings.static_cache_name)
        cached = await self._lookup(store, key)
        if cached is not None:
            return cached.to_response()
        return httpx.Response(200, text=OFFLINE_PAGE_PLACEHOLDER, request=request)

    async def _lookup(self, store, key: str) -> Optional[CachedResponse]:
        """Cache read that treats a storage failure as a miss."""
        try:
            return await store.match(key)
        except Exception as e:
            logger.warning(f"Cache read failed: {e}", extra={'key': key})
            return None

    def page_key(self, path: str) -> str:
        return key_for_request(httpx.Request('GET', self._origin.join(path)))

    def _schedule_put(self, store: NamedCache, key: str, response: httpx.Response) -> None:
        task = asyncio.create_task(self._put(store, key, response))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _put(self, store: NamedCache, key: str, response: httpx.Response) -> None:
        try:
            await store.put(key, response)
        except Exception as e:
            logger.warning(f"Cache write failed for {store.name}: {e}", extra={'key': key})

    async def flush(self) -> None:
        """Wait for every scheduled cache write to finish."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    # Lifecycle

    async def install(self, resources: Optional[Iterable[str]] = None) -> int:
        """
        Pre-cache static resources into the current static store.

        Returns the number of resources cached; resources that fail to load
        are logged and skipped.
        """
        store = await self._storage.open(self._settings.static_cache_name)
        cached = 0
        for path in (self._settings.static_resources if resources is None else resources):
            request = httpx.Request('GET', self._origin.join(path))
            try:
                response = await self._fetch(request)
            except httpx.TransportError as e:
                logger.warning(f"Could not pre-cache {path}: {e}")
                continue
            if not response.is_success:
                logger.warning(f"Could not pre-cache {path}: HTTP {response.status_code}")
                continue
            await store.put(key_for_request(request), response)
            cached += 1
        logger.info("Static resources installed", extra={'store': store.name, 'cached': cached})
        return cached

    async def activate(self) -> int:
        """Delete stores left over from previous cache versions."""
        current = self._settings.current_cache_names
        removed = 0
        for name in await self._storage.names():
            if name not in current:
                await self._storage.delete(name)
                logger.info(f"Deleted old cache {name}")
                removed += 1
        return removed

    async def clear_caches(self) -> int:
        return await self._storage.clear_all()

    async def aclose(self) -> None:
        await self.flush()
        await self._network.aclose()
