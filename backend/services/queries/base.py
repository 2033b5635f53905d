"""
Base Query class for CQRS read operations.

Queries never write to the database. Results that every kiosk polls (the
roster, today's dashboard) go through the cache; a cache outage only costs
a database round trip.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import TypeVar, Generic, Optional, Any, Callable
import logging

from django.conf import settings

from infrastructure.cache import Cache
from infrastructure.clock import Clock

T = TypeVar('T')


class BaseQuery(ABC, Generic[T]):
    """Base class for all Queries (read operations)."""

    def __init__(
        self,
        cache: Optional[Cache] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
        **kwargs  # event_bus etc. are injected into every service
    ):
        self._cache = cache
        self._clock = clock
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, **kwargs) -> T:
        pass

    @property
    def tz_name(self) -> str:
        """Timezone that defines the business day."""
        return settings.TIME_ZONE

    def today(self) -> date:
        """Current business day."""
        return self._clock.local_date(self.tz_name)

    def cached(self, key: str, load: Callable[[], Any], ttl: int) -> Any:
        """
        Return the cached JSON value for key, computing and storing it with
        load() on a miss.
        """
        if self._cache is None:
            return load()

        try:
            value = self._cache.get_json(key)
        except Exception as e:
            self.log_warning(f"Cache read failed for {key}: {e}", key=key)
            return load()
        if value is not None:
            return value

        value = load()
        try:
            self._cache.set_json(key, value, ttl=ttl)
        except Exception as e:
            self.log_warning(f"Cache write failed for {key}: {e}", key=key)
        return value

    def log_info(self, message: str, **extra) -> None:
        self._logger.info(message, extra=extra)

    def log_warning(self, message: str, **extra) -> None:
        self._logger.warning(message, extra=extra)
