"""
Pytest configuration and fixtures for time clock tests.
"""
import os
import pytest
from django.test import Client

# Use fakes for testing
os.environ.setdefault('USE_FAKES', 'true')


@pytest.fixture(autouse=True)
def reset_container():
    """Reset DI container before each test."""
    from infrastructure.bootstrap import Container
    Container.reset()
    yield
    Container.reset()


@pytest.fixture
def container():
    """Fresh container with fake infrastructure, installed as the global one."""
    from infrastructure.bootstrap import Container, create_test_container
    test_container = create_test_container()
    Container.set_instance(test_container)
    return test_container


@pytest.fixture
def clock(container):
    """FakeClock, pinned to 2024-01-15 10:00 in Asia/Bangkok."""
    from infrastructure.clock import Clock
    return container.get(Clock)


@pytest.fixture
def event_bus(container):
    from infrastructure.event_bus import EventBus
    return container.get(EventBus)


@pytest.fixture
def cache(container):
    from infrastructure.cache import Cache
    return container.get(Cache)


@pytest.fixture
def notifier(container):
    from services.notifications import ClockNotifier
    return container.get(ClockNotifier)


@pytest.fixture
def api_client():
    """Django test client for API requests."""
    return Client()


@pytest.fixture
def employee(db):
    """Create an active employee."""
    from apps.employees.models import Employee
    return Employee.objects.create(
        emp_code='EMP001',
        full_name='Somchai Jaidee',
        position='Clerk',
        department='Operations',
    )


@pytest.fixture
def inactive_employee(db):
    from apps.employees.models import Employee
    return Employee.objects.create(
        emp_code='EMP099',
        full_name='Former Staff',
        status=Employee.Status.INACTIVE,
    )


@pytest.fixture
def admin_token(db):
    """JWT as issued by POST /api/admin/login."""
    from services.commands.admin_login import issue_admin_token
    return issue_admin_token('admin', ttl_seconds=3600)


@pytest.fixture
def admin_headers(admin_token):
    """Authorization headers for admin requests."""
    return {'HTTP_AUTHORIZATION': f'Bearer {admin_token}'}


# Offline client fixtures

ORIGIN = 'http://timeclock.test'


class FakeNetwork:
    """
    Scriptable server behind httpx.MockTransport.

    routes maps path -> (status, json body); unknown paths answer 404.
    Set online = False to make every request fail with ConnectError.
    """

    def __init__(self):
        self.online = True
        self.routes = {}
        self.calls = []
        self.gate = None

    def route(self, path, body=None, status=200, content=None, headers=None):
        self.routes[path] = (status, body, content, headers or {})

    def paths(self):
        return [path for _, path, _ in self.calls]

    async def handler(self, request):
        import httpx

        body = request.content
        self.calls.append((request.method, request.url.path, body))
        if self.gate is not None:
            await self.gate.wait()
        if not self.online:
            raise httpx.ConnectError('network unreachable', request=request)

        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={'success': False})
        status, json_body, content, headers = route
        if callable(json_body):
            json_body = json_body(request)
        if content is not None:
            return httpx.Response(status, content=content, headers=headers)
        return httpx.Response(status, json=json_body, headers=headers)

    def transport(self):
        import httpx
        return httpx.MockTransport(self.handler)


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def offline_settings(tmp_path):
    from offline.settings import OfflineSettings
    return OfflineSettings(base_url=ORIGIN, data_dir=tmp_path, default_liff_id='liff-123')


@pytest.fixture
def make_runtime(network, offline_settings):
    """
    Build an OfflineRuntime on fakes. Call it inside the running event loop:

        runtime = make_runtime(online=False)
    """
    from infrastructure.cache import FakeCache
    from infrastructure.clock import FakeClock
    from offline.queue import FakeActionQueue
    from offline.runtime import OfflineRuntime
    from offline.sync import FakeNotifier

    def build(online=True, queue=None, cache_backend=None, notifier=None):
        return OfflineRuntime.from_settings(
            offline_settings,
            network=network.transport(),
            clock=FakeClock(),
            cache_backend=cache_backend or FakeCache(),
            queue=queue or FakeActionQueue(),
            notifier=notifier or FakeNotifier(),
            online=online,
        )

    return build
