"""
Base Command class for CQRS write operations.

Every command that touches time logs or the roster drops the cached reads
it made stale, publishes a domain event and, for clock actions, sends a
best-effort notification. Only the database write itself can fail a command.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import TypeVar, Generic, Optional, Dict, Any
import logging

from django.conf import settings

from infrastructure.event_bus import EventBus
from infrastructure.clock import Clock
from infrastructure.cache import Cache
from services.notifications import ClockNotifier
from services.queries.get_dashboard_stats import DASHBOARD_CACHE_PREFIX, dashboard_cache_key
from services.queries.get_employees import EMPLOYEES_CACHE_KEY
from utils.datetime import parse_client_time, to_local

T = TypeVar('T')


class BaseCommand(ABC, Generic[T]):
    """Base class for all Commands (write operations)."""

    def __init__(
        self,
        event_bus: EventBus,
        clock: Clock,
        cache: Optional[Cache] = None,
        logger: Optional[logging.Logger] = None,
        notifier: Optional[ClockNotifier] = None
    ):
        self._event_bus = event_bus
        self._clock = clock
        self._cache = cache
        self._notifier = notifier
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, **kwargs) -> T:
        pass

    @property
    def tz_name(self) -> str:
        return settings.TIME_ZONE

    def effective_time(self, client_time: Optional[str]) -> datetime:
        """
        When the action happened: the client's timestamp if it sent a
        usable one (replays from an offline queue do), server time otherwise.
        """
        return parse_client_time(client_time, fallback=self._clock.now())

    def business_day(self, moment: datetime) -> date:
        """Local calendar day a timestamp belongs to."""
        return to_local(moment, self.tz_name).date()

    def publish_event(self, event_type: str, payload: Dict[str, Any]) -> None:
        """
        Publish a domain event. Failures are logged; the command still
        succeeds because the time log is already saved.
        """
        payload['timestamp'] = self._clock.now_unix()
        try:
            self._event_bus.publish(event_type, payload)
        except Exception as e:
            self._logger.error(
                f"Failed to publish event {event_type}: {e}",
                extra={'event_type': event_type, 'payload': payload}
            )

    def notify_clock(self, kind: str, **details) -> None:
        if not self._notifier:
            return
        try:
            self._notifier.notify_clock(kind, **details)
        except Exception as e:
            self._logger.error(f"Failed to send {kind} notification: {e}", extra={'kind': kind})

    def forget_dashboard(self, day: date) -> None:
        """Drop the cached attendance counts of one business day."""
        self._invalidate(dashboard_cache_key(day))

    def forget_all_dashboards(self) -> None:
        """Drop the cached counts of every business day (bulk deletes)."""
        if not self._cache:
            return
        try:
            self._cache.delete_prefix(DASHBOARD_CACHE_PREFIX)
        except Exception as e:
            self._logger.warning(f"Failed to invalidate dashboards: {e}", extra={'prefix': DASHBOARD_CACHE_PREFIX})

    def forget_roster(self) -> None:
        """Drop the cached kiosk roster and today's head count."""
        self._invalidate(EMPLOYEES_CACHE_KEY)
        self.forget_dashboard(self._clock.local_date(self.tz_name))

    def _invalidate(self, key: str) -> None:
        if not self._cache:
            return
        try:
            self._cache.delete(key)
        except Exception as e:
            # Stale for at most the entry's TTL.
            self._logger.warning(f"Failed to invalidate {key}: {e}", extra={'key': key})

    def log_info(self, message: str, **extra) -> None:
        self._logger.info(message, extra=extra)

    def log_warning(self, message: str, **extra) -> None:
        self._logger.warning(message, extra=extra)

    def log_error(self, message: str, **extra) -> None:
        self._logger.error(message, extra=extra)
