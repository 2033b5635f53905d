"""
Mobile API client.

The enqueue point for clock actions: a clock-in or clock-out that fails at
the transport level while the device reports no connectivity is written to
the ActionQueue and reported to the caller as a soft success.
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from infrastructure.clock import Clock
from offline.actions import ActionKind, ClockPayload, QueuedAction
from offline.cache import MemoryReadCache, request_cache_key
from offline.errors import QueueWriteError
from offline.queue import ActionQueue
from offline.sync import ConnectivityMonitor

logger = logging.getLogger(__name__)

MOBILE_PREFIX = '/api/mobile'
QUEUED_MESSAGE = 'Saved offline, will send when online'
INVALID_RESPONSE_MESSAGE = 'Unexpected response from server'
CLIENT_HEADERS = {'X-Mobile-Client': 'true'}


@dataclass
class ClockResult:
    success: bool
    message: str = ''
    offline: bool = False
    data: Dict[str, Any] = field(default_factory=dict)
    action_id: Optional[str] = None


class MobileApiClient:
    """Client for /api/mobile/* used by kiosks and the mobile shell."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        queue: ActionQueue,
        monitor: ConnectivityMonitor,
        memory_cache: MemoryReadCache,
        clock: Clock,
    ):
        self._http = http
        self._queue = queue
        self._monitor = monitor
        self._memory_cache = memory_cache
        self._clock = clock
        self._in_flight: Dict[str, asyncio.Future] = {}

    async def call(
        self,
        endpoint: str,
        method: str = 'GET',
        body: Optional[Dict[str, Any]] = None,
        cache_ttl: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Call a mobile endpoint and return its decoded JSON body.

        Successful GET results are kept in the memory cache for cache_ttl
        seconds, and identical requests already in flight share one network
        round trip. Raises httpx.HTTPError on transport failure or a
        non-success status, and ValueError when a success body is not JSON
        (captive portals, misconfigured proxies).
        """
        method = method.upper()
        content = json.dumps(body, sort_keys=True).encode('utf-8') if body is not None else b''
        key = request_cache_key(method, endpoint, content)

        if method == 'GET':
            cached = self._memory_cache.get(key)
            if cached is not None:
                logger.debug("Memory cache hit", extra={'endpoint': endpoint})
                return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight request", extra={'endpoint': endpoint})
            return await asyncio.shield(pending)

        future = asyncio.ensure_future(self._request(method, endpoint, body))
        self._in_flight[key] = future
        try:
            result = await future
        finally:
            self._in_flight.pop(key, None)

        if method == 'GET' and result.get('success'):
            self._memory_cache.set(key, result, cache_ttl)
        return result

    async def _request(self, method: str, endpoint: str, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        response = await self._http.request(
            method,
            MOBILE_PREFIX + endpoint,
            json=body,
            headers=CLIENT_HEADERS,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    # Clock actions

    async def clock_in(
        self,
        employee: str,
        note: str = '',
        latitude: float = None,
        longitude: float = None,
        line_name: str = None,
        line_picture: str = None,
    ) -> ClockResult:
        payload = ClockPayload(
            employee=employee,
            client_time=self._clock.now().isoformat(),
            userinfo=note,
            lat=latitude,
            lon=longitude,
            line_name=line_name,
            line_picture=line_picture,
        )
        return await self._clock_action(ActionKind.CLOCK_IN, payload)

    async def clock_out(
        self,
        employee: str,
        latitude: float = None,
        longitude: float = None,
        line_name: str = None,
        line_picture: str = None,
    ) -> ClockResult:
        payload = ClockPayload(
            employee=employee,
            client_time=self._clock.now().isoformat(),
            lat=latitude,
            lon=longitude,
            line_name=line_name,
            line_picture=line_picture,
        )
        return await self._clock_action(ActionKind.CLOCK_OUT, payload)

    async def _clock_action(self, kind: ActionKind, payload: ClockPayload) -> ClockResult:
        try:
            data = await self.call(f'/{kind.value}', method='POST', body=payload.to_body())
        except httpx.TransportError as e:
            if not self._monitor.online:
                return await self._enqueue(kind, payload)
            logger.warning(f"{kind.value} failed while online: {e}")
            return ClockResult(success=False, message=f'Connection failed: {e}')
        except httpx.HTTPStatusError as e:
            logger.warning(f"{kind.value} rejected: HTTP {e.response.status_code}")
            return ClockResult(success=False, message=_error_message(e.response))
        except ValueError as e:
            logger.warning(f"{kind.value} got an unreadable response: {e}")
            return ClockResult(success=False, message=INVALID_RESPONSE_MESSAGE)

        if not data.get('success'):
            return ClockResult(success=False, message=data.get('message') or data.get('msg') or '', data=data)

        self._memory_cache.clear()
        return ClockResult(success=True, message=data.get('message', ''), data=data)

    async def _enqueue(self, kind: ActionKind, payload: ClockPayload) -> ClockResult:
        action = QueuedAction.create(kind, payload, self._clock.now_ts())
        try:
            await self._queue.add(action)
        except QueueWriteError as e:
            logger.error(f"Could not save {kind.value} offline, action lost: {e}")
            return ClockResult(success=False, message='Could not save offline')
        return ClockResult(success=True, offline=True, message=QUEUED_MESSAGE, action_id=action.id)

    # Reads

    async def employees(self) -> List[Dict[str, Any]]:
        data = await self.call('/employees', cache_ttl=300)
        return data.get('employees', [])

    async def status(self, name: str) -> Dict[str, Any]:
        return await self.call(f'/status/{quote(name, safe="")}', cache_ttl=10)

    async def history(self, name: str, limit: int = 7) -> List[Dict[str, Any]]:
        data = await self.call(f'/history/{quote(name, safe="")}?limit={limit}', cache_ttl=60)
        return data.get('history', []) if data.get('success') else []

    async def dashboard(self) -> Dict[str, Any]:
        return await self.call('/dashboard')

    async def config(self) -> Dict[str, Any]:
        return await self.call('/config', cache_ttl=300)

    async def public_settings(self) -> Dict[str, Any]:
        """Kiosk-visible settings through the batch endpoint; {} when unreachable."""
        try:
            data = await self.call('/batch', method='POST', body={'operations': [{'type': 'get_settings'}]})
        except (httpx.HTTPError, ValueError) as e:
            logger.info(f"Settings unavailable: {e}")
            return {}
        results = data.get('results') or []
        if data.get('success') and results and results[0].get('success'):
            return results[0].get('data') or {}
        return {}

    def clear_cache(self) -> None:
        self._memory_cache.clear()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f'HTTP {response.status_code}'
    return body.get('message') or body.get('error') or f'HTTP {response.status_code}'
