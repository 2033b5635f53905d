"""
Tests for MobileApiClient: clock actions, offline enqueue and read caching.
"""
import asyncio
import json

from offline.client import INVALID_RESPONSE_MESSAGE, QUEUED_MESSAGE
from offline.queue import FakeActionQueue


class TestClockActions:

    def test_online_clock_in(self, network, make_runtime):
        network.route('/api/mobile/clockin', {'success': True, 'message': 'Clock-in recorded'})

        async def scenario():
            runtime = make_runtime()
            result = await runtime.client.clock_in('EMP001', note='hello')
            await runtime.aclose()
            return result

        result = asyncio.run(scenario())

        assert result.success is True
        assert result.offline is False
        assert result.message == 'Clock-in recorded'
        method, path, body = network.calls[0]
        assert (method, path) == ('POST', '/api/mobile/clockin')
        assert json.loads(body) == {
            'employee': 'EMP001',
            'userinfo': 'hello',
            'client_time': '2024-01-15T03:00:00+00:00',
        }

    def test_offline_clock_in_is_queued(self, network, make_runtime):
        network.online = False
        queue = FakeActionQueue()

        async def scenario():
            runtime = make_runtime(online=False, queue=queue)
            result = await runtime.client.clock_out('EMP001')
            pending = await queue.list_all()
            await runtime.aclose()
            return result, pending

        result, pending = asyncio.run(scenario())

        assert result.success is True
        assert result.offline is True
        assert result.message == QUEUED_MESSAGE
        assert [a.id for a in pending] == [result.action_id]
        assert pending[0].kind.value == 'clockout'
        assert pending[0].payload.employee == 'EMP001'

    def test_queued_action_replayed_when_back_online(self, network, make_runtime):
        network.online = False
        network.route('/api/mobile/clockin', {'success': True})
        queue = FakeActionQueue()

        async def scenario():
            runtime = make_runtime(online=False, queue=queue)
            await runtime.client.clock_in('EMP001')
            network.online = True
            runtime.monitor.set_online(True)
            await runtime.monitor.settle()
            await runtime.aclose()

        asyncio.run(scenario())

        offline_attempt, replay = network.calls
        assert replay[1] == '/api/mobile/clockin'
        assert json.loads(replay[2]) == json.loads(offline_attempt[2])
        assert asyncio.run(queue.count()) == 0

    def test_transport_failure_while_online_is_not_queued(self, network, make_runtime):
        network.online = False
        queue = FakeActionQueue()

        async def scenario():
            runtime = make_runtime(online=True, queue=queue)
            result = await runtime.client.clock_in('EMP001')
            await runtime.aclose()
            return result

        result = asyncio.run(scenario())

        assert result.success is False
        assert result.message.startswith('Connection failed')
        assert asyncio.run(queue.count()) == 0

    def test_queue_write_failure(self, network, make_runtime):
        network.online = False
        queue = FakeActionQueue()
        queue.fail_writes = True

        async def scenario():
            runtime = make_runtime(online=False, queue=queue)
            result = await runtime.client.clock_in('EMP001')
            await runtime.aclose()
            return result

        result = asyncio.run(scenario())
        assert result.success is False
        assert result.message == 'Could not save offline'

    def test_business_rejection(self, network, make_runtime):
        network.route('/api/mobile/clockin', {
            'success': False,
            'message': 'Already clocked in today',
            'code': 'ALREADY_CLOCKED_IN',
        })

        async def scenario():
            runtime = make_runtime()
            result = await runtime.client.clock_in('EMP001')
            await runtime.aclose()
            return result

        result = asyncio.run(scenario())

        assert result.success is False
        assert result.message == 'Already clocked in today'
        assert result.data['code'] == 'ALREADY_CLOCKED_IN'

    def test_http_error_message(self, network, make_runtime):
        network.route('/api/mobile/clockout', {'success': False, 'error': 'Invalid request'}, status=400)

        async def scenario():
            runtime = make_runtime()
            result = await runtime.client.clock_out('EMP001')
            await runtime.aclose()
            return result

        assert asyncio.run(scenario()).message == 'Invalid request'

    def test_html_success_page_is_reported_not_raised(self, network, make_runtime):
        network.route(
            '/api/mobile/clockin',
            content=b'<html><body>Sign in to the guest Wi-Fi</body></html>',
            headers={'Content-Type': 'text/html'},
        )
        queue = FakeActionQueue()

        async def scenario():
            runtime = make_runtime(queue=queue)
            result = await runtime.client.clock_in('EMP001')
            await runtime.aclose()
            return result

        result = asyncio.run(scenario())

        assert result.success is False
        assert result.message == INVALID_RESPONSE_MESSAGE
        assert asyncio.run(queue.count()) == 0

    def test_non_object_json_is_reported(self, network, make_runtime):
        network.route('/api/mobile/clockout', ['unexpected'])

        async def scenario():
            runtime = make_runtime()
            result = await runtime.client.clock_out('EMP001')
            await runtime.aclose()
            return result

        result = asyncio.run(scenario())
        assert result.success is False
        assert result.message == INVALID_RESPONSE_MESSAGE


class TestReads:

    def test_repeated_reads_hit_memory_cache(self, network, make_runtime):
        network.route('/api/mobile/employees', {'success': True, 'employees': [{'name': 'A'}]})

        async def scenario():
            runtime = make_runtime()
            first = await runtime.client.employees()
            second = await runtime.client.employees()
            await runtime.aclose()
            return first, second

        first, second = asyncio.run(scenario())

        assert first == second == [{'name': 'A'}]
        assert network.paths() == ['/api/mobile/employees']

    def test_successful_clock_action_clears_memory_cache(self, network, make_runtime):
        network.route('/api/mobile/employees', {'success': True, 'employees': []})
        network.route('/api/mobile/clockin', {'success': True})

        async def scenario():
            runtime = make_runtime()
            await runtime.client.employees()
            await runtime.client.clock_in('EMP001')
            await runtime.client.employees()
            await runtime.aclose()

        asyncio.run(scenario())
        assert network.paths().count('/api/mobile/employees') == 2

    def test_memory_cache_expires(self, network, make_runtime):
        network.route('/api/mobile/dashboard', {'success': True, 'today': {}})

        async def scenario():
            runtime = make_runtime()
            await runtime.client.dashboard()
            runtime.clock.advance_minutes(1)
            await runtime.client.dashboard()
            await runtime.aclose()

        asyncio.run(scenario())
        assert network.paths() == ['/api/mobile/dashboard', '/api/mobile/dashboard']

    def test_identical_in_flight_reads_share_one_request(self, network, make_runtime):
        network.route('/api/mobile/config', {'success': True, 'config': {'liff_id': 'x'}})

        async def scenario():
            network.gate = asyncio.Event()
            runtime = make_runtime()
            first = asyncio.ensure_future(runtime.client.config())
            second = asyncio.ensure_future(runtime.client.config())
            while not network.calls:
                await asyncio.sleep(0)
            network.gate.set()
            results = await asyncio.gather(first, second)
            await runtime.aclose()
            return results

        first, second = asyncio.run(scenario())

        assert first == second
        assert len(network.calls) == 1

    def test_failed_read_not_kept_in_memory(self, network, make_runtime):
        network.route('/api/mobile/history/EMP001', {'success': False, 'message': 'Employee not found'})

        async def scenario():
            runtime = make_runtime()
            first = await runtime.client.history('EMP001')
            await runtime.client.history('EMP001')
            await runtime.aclose()
            return first

        assert asyncio.run(scenario()) == []
        assert len(network.calls) == 2

    def test_offline_roster_read_is_empty(self, network, make_runtime):
        network.online = False

        async def scenario():
            runtime = make_runtime(online=False)
            employees = await runtime.client.employees()
            await runtime.aclose()
            return employees

        assert asyncio.run(scenario()) == []

    def test_names_are_url_quoted(self, network, make_runtime):
        network.route('/api/mobile/status/Somchai Jaidee', {'success': True, 'status': 'clocked_in'})

        async def scenario():
            runtime = make_runtime()
            status = await runtime.client.status('Somchai Jaidee')
            await runtime.aclose()
            return status

        assert asyncio.run(scenario())['status'] == 'clocked_in'

    def test_public_settings_through_batch(self, network, make_runtime):
        network.route('/api/mobile/batch', {
            'success': True,
            'results': [{'success': True, 'data': {'organization_name': 'Head Office'}}],
        })

        async def scenario():
            runtime = make_runtime()
            result = await runtime.client.public_settings()
            await runtime.aclose()
            return result

        assert asyncio.run(scenario()) == {'organization_name': 'Head Office'}
        method, path, body = network.calls[0]
        assert (method, path) == ('POST', '/api/mobile/batch')
        assert json.loads(body) == {'operations': [{'type': 'get_settings'}]}

    def test_public_settings_empty_when_offline(self, network, make_runtime):
        network.online = False

        async def scenario():
            runtime = make_runtime(online=False)
            result = await runtime.client.public_settings()
            await runtime.aclose()
            return result

        assert asyncio.run(scenario()) == {}
