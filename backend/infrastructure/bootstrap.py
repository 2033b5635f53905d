"""
Dependency Injection container and application bootstrap.

Infrastructure (Clock, Cache, EventBus, ClockNotifier) is held as
singletons; commands and queries are built per call with those injected:

    result = get_container().get(ClockInCommand).execute(employee='EMP001')

USE_FAKES=true swaps every backing service for its in-memory fake.
"""
from typing import TypeVar, Type, Dict, Any, Optional, Callable
import os
import logging

from django.conf import settings

from infrastructure.clock import Clock, SystemClock, FakeClock
from infrastructure.cache import Cache, RedisCache, FakeCache
from infrastructure.event_bus import EventBus, RabbitMQEventBus, FakeEventBus
from services.notifications import ClockNotifier, TelegramNotifier, FakeClockNotifier

T = TypeVar('T')

logger = logging.getLogger(__name__)


def _fake_infrastructure() -> Dict[Type, Any]:
    return {
        Clock: FakeClock(),
        Cache: FakeCache(),
        EventBus: FakeEventBus(),
        ClockNotifier: FakeClockNotifier(),
    }


def _real_infrastructure() -> Dict[Type, Any]:
    # Connections are opened lazily, so building these never blocks startup.
    return {
        Clock: SystemClock(),
        Cache: RedisCache(settings.REDIS_URL),
        EventBus: RabbitMQEventBus(
            settings.RABBITMQ_URL,
            exchange=getattr(settings, 'EVENT_EXCHANGE', 'timeclock_events'),
        ),
        ClockNotifier: TelegramNotifier(api_url=settings.TELEGRAM_API_URL),
    }


class Container:
    """Holds infrastructure singletons and builds commands and queries."""

    _instance: Optional['Container'] = None

    def __init__(self, use_fakes: bool = False):
        self._use_fakes = use_fakes
        self._singletons: Dict[Type, Any] = _fake_infrastructure() if use_fakes else _real_infrastructure()
        self._factories: Dict[Type, Callable[['Container'], Any]] = {}

    @property
    def uses_fakes(self) -> bool:
        return self._use_fakes

    def get(self, cls: Type[T]) -> T:
        if cls in self._singletons:
            return self._singletons[cls]

        if cls in self._factories:
            return self._factories[cls](self)

        return self._create_service(cls)

    def _create_service(self, cls: Type[T]) -> T:
        from services.commands.base import BaseCommand

        deps = {
            'clock': self._singletons[Clock],
            'cache': self._singletons[Cache],
            'event_bus': self._singletons[EventBus],
            'logger': logging.getLogger(cls.__name__),
        }
        # Only commands write time logs, so only they notify.
        if issubclass(cls, BaseCommand):
            deps['notifier'] = self._singletons[ClockNotifier]
        return cls(**deps)

    def register_singleton(self, cls: Type[T], instance: T) -> None:
        self._singletons[cls] = instance

    def register_factory(self, cls: Type[T], factory: Callable[['Container'], T]) -> None:
        self._factories[cls] = factory

    @classmethod
    def instance(cls) -> 'Container':
        """Get or create the global container instance."""
        if cls._instance is None:
            use_fakes = os.environ.get('USE_FAKES', '').lower() in ('true', '1', 'yes')
            cls._instance = cls(use_fakes=use_fakes)
            logger.info(f"Container initialized (use_fakes={use_fakes})")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @classmethod
    def set_instance(cls, container: 'Container') -> None:
        cls._instance = container


def get_container() -> Container:
    """Get the global container instance."""
    return Container.instance()


def create_test_container() -> Container:
    """Create a container with fake implementations for testing."""
    return Container(use_fakes=True)
