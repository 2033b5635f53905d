"""
Tests for the persistent action queue and the sync engine.
"""
import asyncio
import json

import pytest

from offline.actions import ActionKind, ClockPayload, QueuedAction
from offline.errors import QueueError
from offline.queue import FakeActionQueue, SQLiteActionQueue
from offline.sync import ConnectivityMonitor, FakeNotifier

NOW = 1705287600.0


def _action(kind, employee, offset=0.0):
    payload = ClockPayload(employee=employee, client_time='2024-01-15T03:00:00+00:00')
    return QueuedAction.create(kind, payload, NOW + offset)


async def _fill(queue, *actions):
    for action in actions:
        await queue.add(action)


class TestSQLiteActionQueue:

    def test_survives_reopen_in_fifo_order(self, tmp_path):
        path = tmp_path / 'queue.sqlite3'
        first = _action(ActionKind.CLOCK_IN, 'A')
        second = _action(ActionKind.CLOCK_OUT, 'B', 1)
        third = _action(ActionKind.CLOCK_IN, 'C', 2)

        async def write():
            queue = SQLiteActionQueue(path)
            await _fill(queue, first, second, third)
            await queue.close()

        async def read():
            queue = SQLiteActionQueue(path)
            everything = await queue.list_all()
            clock_ins = await queue.list_all(ActionKind.CLOCK_IN)
            await queue.close()
            return everything, clock_ins

        asyncio.run(write())
        everything, clock_ins = asyncio.run(read())

        assert [a.id for a in everything] == [first.id, second.id, third.id]
        assert [a.id for a in clock_ins] == [first.id, third.id]
        assert everything[1].payload == second.payload
        assert everything[1].kind == ActionKind.CLOCK_OUT

    def test_delete_and_count(self, tmp_path):
        first = _action(ActionKind.CLOCK_IN, 'A')
        second = _action(ActionKind.CLOCK_IN, 'B', 1)

        async def scenario():
            queue = SQLiteActionQueue(tmp_path / 'queue.sqlite3')
            await _fill(queue, first, second)
            await queue.delete(first.id)
            await queue.delete('no-such-id')
            result = await queue.count(), (await queue.oldest()).id
            await queue.close()
            return result

        assert asyncio.run(scenario()) == (1, second.id)

    def test_stored_payload_is_the_request_body(self, tmp_path):
        import sqlite3

        path = tmp_path / 'queue.sqlite3'
        action = QueuedAction.create(
            ActionKind.CLOCK_IN,
            ClockPayload(employee='A', client_time='2024-01-15T03:00:00+00:00', userinfo='note', lat=13.7),
            NOW,
        )

        async def scenario():
            queue = SQLiteActionQueue(path)
            await queue.add(action)
            await queue.close()

        asyncio.run(scenario())
        with sqlite3.connect(str(path)) as conn:
            kind, payload = conn.execute('SELECT kind, payload FROM pending_actions').fetchone()

        assert kind == 'clockin'
        assert json.loads(payload) == {
            'employee': 'A',
            'client_time': '2024-01-15T03:00:00+00:00',
            'userinfo': 'note',
            'lat': 13.7,
        }


class TestQueuedAction:

    def test_replay_path_follows_kind(self):
        assert ActionKind.CLOCK_IN.path == '/api/mobile/clockin'
        assert ActionKind.CLOCK_OUT.path == '/api/mobile/clockout'

    def test_ids_are_unique(self):
        payload = ClockPayload(employee='A', client_time='t')
        ids = {QueuedAction.create(ActionKind.CLOCK_IN, payload, NOW).id for _ in range(50)}
        assert len(ids) == 50

    def test_age(self):
        assert _action(ActionKind.CLOCK_IN, 'A').age(NOW + 90) == 90


class TestSyncEngine:

    def test_drain_replays_in_fifo_order_and_empties_queue(self, network, make_runtime):
        network.route('/api/mobile/clockin', {'success': True})
        network.route('/api/mobile/clockout', {'success': True})
        queue = FakeActionQueue()
        notifier = FakeNotifier()
        actions = [
            _action(ActionKind.CLOCK_IN, 'A'),
            _action(ActionKind.CLOCK_OUT, 'A', 1),
            _action(ActionKind.CLOCK_IN, 'B', 2),
        ]

        async def scenario():
            await _fill(queue, *actions)
            runtime = make_runtime(queue=queue, notifier=notifier)
            report = await runtime.engine.drain()
            await runtime.aclose()
            return report

        report = asyncio.run(scenario())

        assert report.synced == 3
        assert report.failed == 0
        assert report.synced_ids == [a.id for a in actions]
        assert network.paths() == ['/api/mobile/clockin', '/api/mobile/clockout', '/api/mobile/clockin']
        assert json.loads(network.calls[0][2]) == actions[0].payload.to_body()
        assert asyncio.run(queue.count()) == 0
        assert [title for title, _ in notifier.sent] == ['Clock-in recorded', 'Clock-out recorded', 'Clock-in recorded']

    def test_partial_failure_keeps_failed_actions(self, network, make_runtime):
        def clockin(request):
            return {'success': True}

        network.route('/api/mobile/clockin', clockin)
        network.route('/api/mobile/clockout', {'error': 'down'}, status=503)
        queue = FakeActionQueue()
        ok = _action(ActionKind.CLOCK_IN, 'A')
        failing = _action(ActionKind.CLOCK_OUT, 'B', 1)

        async def scenario():
            await _fill(queue, ok, failing)
            runtime = make_runtime(queue=queue)
            report = await runtime.engine.drain()
            remaining = await queue.list_all()
            await runtime.aclose()
            return report, remaining

        report, remaining = asyncio.run(scenario())

        assert report.partial is True
        assert report.synced_ids == [ok.id]
        assert [a.id for a in remaining] == [failing.id]

    def test_offline_drain_keeps_everything(self, network, make_runtime):
        network.online = False
        queue = FakeActionQueue()

        async def scenario():
            await _fill(queue, _action(ActionKind.CLOCK_IN, 'A'))
            runtime = make_runtime(queue=queue)
            report = await runtime.engine.drain()
            await runtime.aclose()
            return report

        report = asyncio.run(scenario())
        assert (report.attempted, report.synced, report.failed) == (1, 0, 1)
        assert asyncio.run(queue.count()) == 1

    def test_concurrent_drain_is_skipped(self, network, make_runtime):
        network.route('/api/mobile/clockin', {'success': True})
        queue = FakeActionQueue()

        async def scenario():
            network.gate = asyncio.Event()
            await _fill(queue, _action(ActionKind.CLOCK_IN, 'A'))
            runtime = make_runtime(queue=queue)

            first = asyncio.ensure_future(runtime.engine.drain())
            while not network.calls:
                await asyncio.sleep(0)
            assert runtime.engine.is_draining
            second = await runtime.engine.drain()
            network.gate.set()
            first_report = await first
            await runtime.aclose()
            return first_report, second

        first_report, second = asyncio.run(scenario())

        assert second.skipped is True
        assert first_report.synced == 1
        assert len(network.calls) == 1

    def test_notification_failure_does_not_stop_drain(self, network, make_runtime):
        network.route('/api/mobile/clockin', {'success': True})
        queue = FakeActionQueue()
        notifier = FakeNotifier()
        notifier.fail = True

        async def scenario():
            await _fill(queue, _action(ActionKind.CLOCK_IN, 'A'), _action(ActionKind.CLOCK_IN, 'B', 1))
            runtime = make_runtime(queue=queue, notifier=notifier)
            report = await runtime.engine.drain()
            await runtime.aclose()
            return report

        assert asyncio.run(scenario()).synced == 2

    def test_unreadable_queue_reported(self, network, make_runtime):
        class BrokenQueue(FakeActionQueue):
            async def list_all(self, kind=None):
                raise QueueError('disk error')

        async def scenario():
            runtime = make_runtime(queue=BrokenQueue())
            report = await runtime.engine.drain()
            await runtime.aclose()
            return report

        report = asyncio.run(scenario())
        assert report.error == 'disk error'
        assert report.attempted == 0
        assert report.skipped is False

    def test_undeletable_action_reported_as_stuck(self, network, make_runtime):
        network.route('/api/mobile/clockin', {'success': True})
        notifier = FakeNotifier()

        class ReadOnlyQueue(FakeActionQueue):
            async def delete(self, action_id):
                raise QueueError('database is locked')

        queue = ReadOnlyQueue()
        action = _action(ActionKind.CLOCK_IN, 'A')

        async def scenario():
            await _fill(queue, action)
            runtime = make_runtime(queue=queue, notifier=notifier)
            report = await runtime.engine.drain()
            await runtime.aclose()
            return report

        report = asyncio.run(scenario())

        assert (report.synced, report.failed, report.stuck) == (0, 0, 1)
        assert report.stuck_ids == [action.id]
        assert report.synced_ids == []
        assert notifier.sent == []
        assert asyncio.run(queue.count()) == 1


class TestConnectivity:

    def test_going_online_drains_queue(self, network, make_runtime):
        network.route('/api/mobile/clockin', {'success': True})
        queue = FakeActionQueue()

        async def scenario():
            await _fill(queue, _action(ActionKind.CLOCK_IN, 'A'))
            runtime = make_runtime(online=False, queue=queue)
            runtime.monitor.set_online(True)
            await runtime.monitor.settle()
            await runtime.aclose()

        asyncio.run(scenario())
        assert network.paths() == ['/api/mobile/clockin']
        assert asyncio.run(queue.count()) == 0

    def test_listeners_fire_only_on_transitions(self):
        monitor = ConnectivityMonitor(online=True)
        events = []
        monitor.on_online(lambda: events.append('online'))
        monitor.on_offline(lambda: events.append('offline'))

        monitor.set_online(True)
        monitor.set_online(False)
        monitor.set_online(False)
        monitor.set_online(True)

        assert events == ['offline', 'online']

    def test_failing_listener_does_not_block_others(self):
        monitor = ConnectivityMonitor(online=False)
        events = []

        def broken():
            raise RuntimeError('boom')

        monitor.on_online(broken)
        monitor.on_online(lambda: events.append('online'))
        monitor.set_online(True)

        assert events == ['online']

    def test_probe_sets_state_from_health_check(self, network, make_runtime):
        network.route('/api/mobile/health', {'success': True, 'status': 'ok'})

        async def scenario():
            runtime = make_runtime(online=False)
            up = await runtime.monitor.probe(runtime.http, '/api/mobile/health')
            network.online = False
            down = await runtime.monitor.probe(runtime.http, '/api/mobile/health')
            await runtime.aclose()
            return up, down

        assert asyncio.run(scenario()) == (True, False)

    def test_probe_requires_successful_health_body(self, network, make_runtime):
        network.route('/api/mobile/health', {'success': False, 'status': 'maintenance'})

        async def scenario():
            runtime = make_runtime(online=True)
            online = await runtime.monitor.probe(runtime.http, '/api/mobile/health')
            await runtime.aclose()
            return online, runtime.monitor.online

        assert asyncio.run(scenario()) == (False, False)


class TestScheduler:

    def test_background_wake_drains_and_purges(self, network, make_runtime):
        network.route('/api/mobile/clockin', {'success': True})
        network.route('/api/mobile/employees', {'success': True, 'employees': []})
        queue = FakeActionQueue()

        async def scenario():
            await _fill(queue, _action(ActionKind.CLOCK_IN, 'A'))
            runtime = make_runtime(queue=queue)
            await runtime.http.get('/api/mobile/employees')
            await runtime.transport.flush()
            runtime.clock.advance_hours(2)
            report = await runtime.scheduler.background_wake()
            store = await runtime.storage.open(runtime.settings.api_cache_name)
            keys = await store.keys()
            await runtime.aclose()
            return report, keys

        report, keys = asyncio.run(scenario())
        assert report.synced == 1
        assert keys == []

    def test_run_periodic_stops_on_event(self, network, make_runtime):
        network.route('/api/mobile/health', {'success': True})
        network.route('/api/mobile/clockin', {'success': True})
        queue = FakeActionQueue()

        async def scenario():
            await _fill(queue, _action(ActionKind.CLOCK_IN, 'A'))
            runtime = make_runtime(online=False, queue=queue)
            stop = asyncio.Event()
            task = asyncio.ensure_future(runtime.scheduler.run_periodic(interval=0.01, stop=stop))
            while await queue.count():
                await asyncio.sleep(0.01)
            stop.set()
            await asyncio.wait_for(task, timeout=1)
            await runtime.monitor.settle()
            await runtime.aclose()

        asyncio.run(scenario())
        assert '/api/mobile/clockin' in network.paths()

    def test_periodic_check_while_offline_keeps_clock_actions_queued(self, network, make_runtime):
        network.online = False
        queue = FakeActionQueue()

        async def scenario():
            runtime = make_runtime(online=False, queue=queue)
            stop = asyncio.Event()
            task = asyncio.ensure_future(runtime.scheduler.run_periodic(interval=60, stop=stop))
            while '/api/mobile/health' not in network.paths():
                await asyncio.sleep(0)
            stop.set()
            await asyncio.wait_for(task, timeout=1)
            online = runtime.monitor.online
            result = await runtime.client.clock_in('EMP001')
            await runtime.aclose()
            return online, result

        online, result = asyncio.run(scenario())

        assert online is False
        assert result.success is True
        assert result.offline is True
        assert asyncio.run(queue.count()) == 1

    def test_status_reports_pending_work(self, network, make_runtime):
        queue = FakeActionQueue()

        async def scenario():
            runtime = make_runtime(online=False, queue=queue)
            await queue.add(QueuedAction.create(
                ActionKind.CLOCK_IN, ClockPayload(employee='A', client_time='t'), runtime.clock.now_ts() - 120
            ))
            await queue.add(QueuedAction.create(
                ActionKind.CLOCK_OUT, ClockPayload(employee='A', client_time='t'), runtime.clock.now_ts()
            ))
            status = await runtime.status()
            await runtime.aclose()
            return status

        status = asyncio.run(scenario())
        assert status['online'] is False
        assert status['pending'] == {'clockin': 1, 'clockout': 1}
        assert status['pending_total'] == 2
        assert status['oldest_age_seconds'] == pytest.approx(120)
