"""
Sync Engine: replays queued clock actions once the device is back online.

Drain triggers:
- ConnectivityMonitor went-online transition
- SyncScheduler.background_wake(), the host's periodic wake-up hook
- SyncScheduler.run_periodic(), a fallback timer that probes the health endpoint

At most one drain runs at a time; a trigger that arrives mid-drain is dropped.
"""
import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

import httpx

from infrastructure.clock import Clock
from offline.actions import ActionKind, QueuedAction
from offline.cache import CacheStorage, purge_expired
from offline.errors import OfflineError
from offline.queue import ActionQueue
from offline.settings import OfflineSettings

logger = logging.getLogger(__name__)

SYNCED_TITLES = {
    ActionKind.CLOCK_IN: 'Clock-in recorded',
    ActionKind.CLOCK_OUT: 'Clock-out recorded',
}
SYNCED_BODY = 'Saved data was sent now that you are online'

# Replay outcomes
SYNCED = 'synced'
FAILED = 'failed'
STUCK = 'stuck'


class Notifier(ABC):
    """User-facing, best-effort notification channel."""

    @abstractmethod
    async def notify(self, title: str, body: str) -> None:
        pass


class LoggingNotifier(Notifier):
    """Writes notifications to the log (headless kiosks, CLI)."""

    async def notify(self, title: str, body: str) -> None:
        logger.info(f"{title}: {body}")


class FakeNotifier(Notifier):
    """Records notifications for assertions. Set fail to make every call raise."""

    def __init__(self):
        self.sent: List[tuple] = []
        self.fail = False

    async def notify(self, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError('notification channel unavailable')
        self.sent.append((title, body))


@dataclass
class DrainReport:
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    skipped: bool = False
    error: Optional[str] = None
    synced_ids: List[str] = field(default_factory=list)
    # Accepted by the server but still queued because the delete failed.
    stuck: int = 0
    stuck_ids: List[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return self.synced > 0 and self.failed > 0


class SyncEngine:
    """Drains the ActionQueue against the network in FIFO order."""

    def __init__(self, queue: ActionQueue, http: httpx.AsyncClient, notifier: Notifier = None):
        self._queue = queue
        self.http = http
        self._notifier = notifier or LoggingNotifier()
        self._draining = False

    @property
    def is_draining(self) -> bool:
        return self._draining

    async def drain(self) -> DrainReport:
        if self._draining:
            logger.info("Drain already in progress, trigger dropped")
            return DrainReport(skipped=True)

        self._draining = True
        report = DrainReport()
        try:
            try:
                actions = await self._queue.list_all()
            except OfflineError as e:
                logger.error(f"Could not read pending actions: {e}")
                report.error = str(e)
                return report

            for action in actions:
                report.attempted += 1
                outcome = await self._replay(action)
                if outcome == SYNCED:
                    report.synced += 1
                    report.synced_ids.append(action.id)
                elif outcome == STUCK:
                    report.stuck += 1
                    report.stuck_ids.append(action.id)
                else:
                    report.failed += 1
        finally:
            self._draining = False

        if report.attempted:
            logger.info(
                "Drain finished",
                extra={
                    'attempted': report.attempted, 'synced': report.synced,
                    'failed': report.failed, 'stuck': report.stuck,
                }
            )
        return report

    async def _replay(self, action: QueuedAction) -> str:
        try:
            response = await self.http.post(action.kind.path, json=action.payload.to_body())
        except httpx.HTTPError as e:
            logger.warning(f"Replay of {action.kind.value} {action.id} failed: {e}")
            return FAILED

        if not response.is_success:
            logger.warning(f"Replay of {action.kind.value} {action.id} rejected: HTTP {response.status_code}")
            return FAILED

        try:
            await self._queue.delete(action.id)
        except OfflineError as e:
            # The server has the action; it will be replayed again next drain.
            logger.error(f"Replayed {action.id} but could not remove it from the queue: {e}")
            return STUCK

        logger.info("Synced offline action", extra={'action_id': action.id, 'kind': action.kind.value})
        await self._notify(action)
        return SYNCED

    async def _notify(self, action: QueuedAction) -> None:
        try:
            await self._notifier.notify(SYNCED_TITLES[action.kind], SYNCED_BODY)
        except Exception as e:
            logger.warning(f"Notification for {action.id} failed: {e}")


def _is_live_health(response: httpx.Response) -> bool:
    if not response.is_success or response.headers.get('X-Served-By'):
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get('success') is True


Listener = Callable[[], object]


class ConnectivityMonitor:
    """
    Holds the "currently online" state and fires transition listeners.

    Listeners may be plain callables or coroutine functions; coroutines are
    scheduled as tasks on the running loop. settle() waits for them.
    """

    def __init__(self, online: bool = True):
        self._online = online
        self._on_online: List[Listener] = []
        self._on_offline: List[Listener] = []
        self._tasks: Set[asyncio.Task] = set()

    @property
    def online(self) -> bool:
        return self._online

    def on_online(self, listener: Listener) -> None:
        self._on_online.append(listener)

    def on_offline(self, listener: Listener) -> None:
        self._on_offline.append(listener)

    def set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        logger.info("Connectivity changed", extra={'online': online})
        for listener in (self._on_online if online else self._on_offline):
            self._fire(listener)

    def _fire(self, listener: Listener) -> None:
        try:
            result = listener()
        except Exception as e:
            logger.error(f"Connectivity listener failed: {e}")
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Connectivity listener failed: {task.exception()}")

    async def settle(self) -> None:
        """Wait until every scheduled listener task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def probe(self, http: httpx.AsyncClient, url: str) -> bool:
        """
        Set the state from a health check against the server.

        Only a live answer counts: responses the offline layer served from a
        cache or synthesized (marked with X-Served-By) mean the server was
        not reached, and the body must report success.
        """
        try:
            response = await http.get(url)
            online = _is_live_health(response)
        except httpx.HTTPError as e:
            logger.debug(f"Health probe failed: {e}")
            online = False
        self.set_online(online)
        return online


class SyncScheduler:
    """Connects drain triggers to the SyncEngine."""

    def __init__(
        self,
        engine: SyncEngine,
        monitor: ConnectivityMonitor,
        storage: CacheStorage,
        settings: OfflineSettings,
        clock: Clock,
    ):
        self._engine = engine
        self._monitor = monitor
        self._storage = storage
        self._settings = settings
        self._clock = clock
        monitor.on_online(self.went_online)

    async def went_online(self) -> DrainReport:
        logger.info("Back online, draining pending actions")
        return await self._engine.drain()

    async def purge_api_cache(self) -> int:
        store = await self._storage.open(self._settings.api_cache_name)
        return await purge_expired(store, self._settings.api_cache_max_age, self._clock.now_ts())

    async def background_wake(self) -> DrainReport:
        """Host-granted wake-up: drain, then drop API cache entries past retention."""
        report = await self._engine.drain()
        try:
            await self.purge_api_cache()
        except Exception as e:
            logger.warning(f"API cache purge failed: {e}")
        return report

    async def run_periodic(self, interval: float = None, stop: asyncio.Event = None) -> None:
        """Probe connectivity every interval seconds and drain while online."""
        interval = self._settings.sync_interval if interval is None else interval
        stop = stop or asyncio.Event()
        logger.info(f"Periodic sync started (every {interval}s)")
        while not stop.is_set():
            if await self._monitor.probe(self._engine.http, self._settings.health_path):
                await self._engine.drain()
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Periodic sync stopped")
