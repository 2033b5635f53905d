"""
OfflineRuntime: wires the offline components for one client process.

    runtime = OfflineRuntime.from_settings(OfflineSettings.from_env())
    await runtime.transport.install()
    result = await runtime.client.clock_in('EMP001')
    ...
    await runtime.aclose()
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from infrastructure.cache import Cache, SQLiteCache
from infrastructure.clock import Clock, SystemClock
from offline.cache import CacheStorage, MemoryReadCache
from offline.client import MobileApiClient
from offline.queue import ActionQueue, SQLiteActionQueue
from offline.router import OfflineTransport
from offline.settings import OfflineSettings
from offline.sync import ConnectivityMonitor, Notifier, SyncEngine, SyncScheduler
from offline.synthesizer import OfflineSynthesizer

logger = logging.getLogger(__name__)


@dataclass
class OfflineRuntime:
    settings: OfflineSettings
    clock: Clock
    cache_backend: Cache
    storage: CacheStorage
    queue: ActionQueue
    transport: OfflineTransport
    http: httpx.AsyncClient
    monitor: ConnectivityMonitor
    engine: SyncEngine
    scheduler: SyncScheduler
    client: MobileApiClient

    @classmethod
    def from_settings(
        cls,
        settings: OfflineSettings,
        network: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
        cache_backend: Optional[Cache] = None,
        queue: Optional[ActionQueue] = None,
        notifier: Optional[Notifier] = None,
        online: bool = True,
    ) -> 'OfflineRuntime':
        """
        Build a runtime. Anything not passed in gets its production default:
        SQLite files under settings.data_dir and a real HTTP transport.
        """
        clock = clock or SystemClock()
        cache_backend = cache_backend or SQLiteCache(settings.cache_path)
        queue = queue or SQLiteActionQueue(settings.queue_path)
        network = network or httpx.AsyncHTTPTransport()

        storage = CacheStorage(cache_backend, clock)
        synthesizer = OfflineSynthesizer(clock, settings.default_liff_id, settings.time_zone)
        transport = OfflineTransport(network, storage, synthesizer, settings, clock)
        http = httpx.AsyncClient(
            base_url=settings.base_url,
            transport=transport,
            timeout=settings.request_timeout,
        )
        monitor = ConnectivityMonitor(online=online)
        engine = SyncEngine(queue, http, notifier)
        scheduler = SyncScheduler(engine, monitor, storage, settings, clock)
        client = MobileApiClient(http, queue, monitor, MemoryReadCache(clock, settings.memory_cache_ttl), clock)

        logger.info("Offline runtime ready", extra={'base_url': settings.base_url, 'data_dir': str(settings.data_dir)})
        return cls(
            settings=settings,
            clock=clock,
            cache_backend=cache_backend,
            storage=storage,
            queue=queue,
            transport=transport,
            http=http,
            monitor=monitor,
            engine=engine,
            scheduler=scheduler,
            client=client,
        )

    async def status(self) -> Dict[str, Any]:
        """Queue depth per kind, age of the oldest action and cache store names."""
        actions = await self.queue.list_all()
        now = self.clock.now_ts()
        pending: Dict[str, int] = {}
        for action in actions:
            pending[action.kind.value] = pending.get(action.kind.value, 0) + 1
        return {
            'online': self.monitor.online,
            'pending': pending,
            'pending_total': len(actions),
            'oldest_age_seconds': actions[0].age(now) if actions else None,
            'caches': await self.storage.names(),
        }

    async def aclose(self) -> None:
        await self.transport.flush()
        await self.http.aclose()
        await self.queue.close()
        close = getattr(self.cache_backend, 'close', None)
        if close is not None:
            close()
