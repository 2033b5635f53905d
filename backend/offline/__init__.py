"""
Offline-first client runtime for the time-clock mobile API.

An httpx transport that serves reads from local caches when the network is
gone, plus a durable queue that holds clock actions until they can be sent.
"""
from offline.actions import ActionKind, ClockPayload, QueuedAction
from offline.cache import CacheStorage, CachedResponse, MemoryReadCache, NamedCache, request_cache_key
from offline.client import ClockResult, MobileApiClient
from offline.errors import OfflineError, QueueError, QueueWriteError
from offline.queue import ActionQueue, FakeActionQueue, SQLiteActionQueue
from offline.router import OfflineTransport, RequestClass, classify
from offline.runtime import OfflineRuntime
from offline.settings import OfflineSettings
from offline.sync import ConnectivityMonitor, DrainReport, FakeNotifier, LoggingNotifier, SyncEngine, SyncScheduler
from offline.synthesizer import OfflineSynthesizer

__all__ = [
    'ActionKind',
    'ClockPayload',
    'QueuedAction',
    'CacheStorage',
    'CachedResponse',
    'MemoryReadCache',
    'NamedCache',
    'request_cache_key',
    'ClockResult',
    'MobileApiClient',
    'OfflineError',
    'QueueError',
    'QueueWriteError',
    'ActionQueue',
    'FakeActionQueue',
    'SQLiteActionQueue',
    'OfflineTransport',
    'RequestClass',
    'classify',
    'OfflineRuntime',
    'OfflineSettings',
    'ConnectivityMonitor',
    'DrainReport',
    'FakeNotifier',
    'LoggingNotifier',
    'SyncEngine',
    'SyncScheduler',
    'OfflineSynthesizer',
]
