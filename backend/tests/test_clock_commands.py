"""
Tests for clock-in / clock-out commands and the admin commands.
"""
from datetime import date, datetime, timezone

import jwt
import pytest
from django.conf import settings

from services.commands import (
    AdminLoginCommand,
    ClockInCommand,
    ClockOutCommand,
    CreateEmployeeCommand,
    CreateTimeLogCommand,
    DeleteEmployeeCommand,
    DeleteTimeLogCommand,
    UpdateEmployeeCommand,
    UpdateSettingsCommand,
    UpdateTimeLogCommand,
)
from services.queries.get_dashboard_stats import dashboard_cache_key
from services.queries.get_employees import EMPLOYEES_CACHE_KEY


@pytest.mark.django_db
class TestClockIn:

    def test_clock_in_creates_time_log(self, container, employee, event_bus, notifier):
        from apps.timelogs.models import TimeLog

        result = container.get(ClockInCommand).execute(
            employee='Somchai Jaidee', userinfo='on site', lat=13.75, lon=100.5
        )

        assert result.success is True
        assert result.time == '10:00:00'
        log = TimeLog.objects.get(id=result.time_log_id)
        assert log.employee_id == employee.id
        assert log.note == 'on site'
        assert log.is_open
        event_bus.assert_event_published('timelog.clock_in')
        assert notifier.calls[0]['kind'] == 'clock_in'
        assert notifier.calls[0]['employee_name'] == 'Somchai Jaidee'

    def test_employee_resolved_by_code(self, container, employee):
        result = container.get(ClockInCommand).execute(employee='EMP001')
        assert result.success is True
        assert result.employee_name == 'Somchai Jaidee'

    def test_second_clock_in_same_day_rejected(self, container, employee, clock):
        command = container.get(ClockInCommand)
        assert command.execute(employee='EMP001').success is True

        clock.advance_hours(5)
        result = container.get(ClockInCommand).execute(employee='EMP001')

        assert result.success is False
        assert result.error_code == 'ALREADY_CLOCKED_IN'

    def test_local_midnight_starts_a_new_day(self, container, employee, clock):
        # 16:30 UTC is 23:30 in Bangkok; one hour later it is the next local day.
        clock.set(datetime(2024, 1, 15, 16, 30, tzinfo=timezone.utc))
        assert container.get(ClockInCommand).execute(employee='EMP001').success is True

        clock.advance_hours(1)
        assert container.get(ClockInCommand).execute(employee='EMP001').success is True

    def test_replayed_clock_in_lands_on_original_day(self, container, employee):
        from apps.timelogs.models import TimeLog

        yesterday = container.get(ClockInCommand).execute(
            employee='EMP001', client_time='2024-01-14T01:30:00Z'
        )
        today = container.get(ClockInCommand).execute(employee='EMP001')

        assert yesterday.success is True
        assert today.success is True
        assert TimeLog.for_day(employee.id, date(2024, 1, 14), settings.TIME_ZONE).count() == 1
        assert TimeLog.for_day(employee.id, date(2024, 1, 15), settings.TIME_ZONE).count() == 1

    def test_invalid_client_time_falls_back_to_server_time(self, container, employee, clock):
        result = container.get(ClockInCommand).execute(employee='EMP001', client_time='not-a-date')
        assert result.success is True
        assert result.timestamp == clock.now()

    def test_unknown_employee(self, container, employee):
        result = container.get(ClockInCommand).execute(employee='Nobody')
        assert result.success is False
        assert result.error_code == 'EMPLOYEE_NOT_FOUND'

    def test_blank_employee(self, container, db):
        result = container.get(ClockInCommand).execute(employee='   ')
        assert result.error_code == 'EMPLOYEE_REQUIRED'

    def test_inactive_employee_cannot_clock_in(self, container, inactive_employee):
        result = container.get(ClockInCommand).execute(employee='EMP099')
        assert result.error_code == 'EMPLOYEE_NOT_FOUND'

    def test_notification_failure_does_not_fail_clock_in(self, container, employee, notifier):
        notifier.fail = True
        result = container.get(ClockInCommand).execute(employee='EMP001')
        assert result.success is True

    def test_dashboard_cache_invalidated(self, container, employee, cache):
        key = dashboard_cache_key(date(2024, 1, 15))
        cache.set_json(key, {'checked_in': 0})

        container.get(ClockInCommand).execute(employee='EMP001')

        assert cache.get(key) is None


@pytest.mark.django_db
class TestClockOut:

    def test_clock_out_closes_todays_log(self, container, employee, clock, event_bus):
        from apps.timelogs.models import TimeLog

        container.get(ClockInCommand).execute(employee='EMP001')
        clock.advance_hours(8)
        result = container.get(ClockOutCommand).execute(employee='EMP001', lat=13.7, lon=100.4)

        assert result.success is True
        assert result.time == '18:00:00'
        log = TimeLog.objects.get(id=result.time_log_id)
        assert log.clock_out == clock.now()
        assert log.latitude_out == 13.7
        assert log.duration_text() == '8 hours 0 minutes'
        event_bus.assert_event_published('timelog.clock_out')

    def test_clock_out_without_clock_in(self, container, employee):
        result = container.get(ClockOutCommand).execute(employee='EMP001')
        assert result.error_code == 'NOT_CLOCKED_IN'

    def test_double_clock_out(self, container, employee, clock):
        container.get(ClockInCommand).execute(employee='EMP001')
        clock.advance_hours(1)
        container.get(ClockOutCommand).execute(employee='EMP001')

        result = container.get(ClockOutCommand).execute(employee='EMP001')
        assert result.error_code == 'ALREADY_CLOCKED_OUT'


@pytest.mark.django_db
class TestEmployeeCommands:

    def test_create_employee(self, container, event_bus):
        from apps.employees.models import Employee

        result = container.get(CreateEmployeeCommand).execute(emp_code='EMP002', full_name='Malee Srisuk')

        assert result.success is True
        assert Employee.objects.get(id=result.employee_id).emp_code == 'EMP002'
        event_bus.assert_event_published('employee.created')

    def test_duplicate_code_rejected(self, container, employee):
        result = container.get(CreateEmployeeCommand).execute(emp_code='EMP001', full_name='Someone Else')
        assert result.error_code == 'EMPLOYEE_CODE_EXISTS'

    def test_update_employee(self, container, employee):
        result = container.get(UpdateEmployeeCommand).execute(
            employee_id=employee.id, emp_code='EMP001', full_name='Somchai J.', status='inactive'
        )
        employee.refresh_from_db()
        assert result.success is True
        assert employee.full_name == 'Somchai J.'
        assert employee.is_active is False

    def test_update_to_taken_code_rejected(self, container, employee, inactive_employee):
        result = container.get(UpdateEmployeeCommand).execute(
            employee_id=employee.id, emp_code='EMP099', full_name='Somchai Jaidee'
        )
        assert result.error_code == 'EMPLOYEE_CODE_EXISTS'

    def test_delete_employee_drops_roster_cache(self, container, employee, cache):
        from apps.employees.models import Employee

        cache.set_json(EMPLOYEES_CACHE_KEY, [{'name': 'Somchai Jaidee'}])
        result = container.get(DeleteEmployeeCommand).execute(employee_id=employee.id)

        assert result.success is True
        assert not Employee.objects.filter(id=employee.id).exists()
        assert cache.get(EMPLOYEES_CACHE_KEY) is None

    def test_delete_missing_employee(self, container, db):
        result = container.get(DeleteEmployeeCommand).execute(employee_id=12345)
        assert result.error_code == 'NOT_FOUND'


@pytest.mark.django_db
class TestTimeLogCommands:

    def test_admin_time_is_local_wall_clock(self, container, employee, notifier):
        from apps.timelogs.models import TimeLog

        result = container.get(CreateTimeLogCommand).execute(
            employee_id=employee.id,
            clock_in='2024-01-10T08:30',
            clock_out='2024-01-10T17:00',
        )

        log = TimeLog.objects.get(id=result.time_log_id)
        assert log.clock_in == datetime(2024, 1, 10, 1, 30, tzinfo=timezone.utc)
        assert log.status == TimeLog.Status.MANUAL
        assert [c['kind'] for c in notifier.calls] == ['clock_in', 'clock_out']
        assert all(c['recorded_by_admin'] for c in notifier.calls)

    def test_skip_notification(self, container, employee, notifier):
        container.get(CreateTimeLogCommand).execute(
            employee_id=employee.id, clock_in='2024-01-10T08:30', skip_notification=True
        )
        assert notifier.calls == []

    def test_invalid_clock_in_rejected(self, container, employee):
        result = container.get(CreateTimeLogCommand).execute(employee_id=employee.id, clock_in='yesterday')
        assert result.error_code == 'VALIDATION_ERROR'

    def test_update_marks_log_edited(self, container, employee):
        from apps.timelogs.models import TimeLog

        created = container.get(CreateTimeLogCommand).execute(
            employee_id=employee.id, clock_in='2024-01-10T08:30', skip_notification=True
        )
        result = container.get(UpdateTimeLogCommand).execute(
            log_id=created.time_log_id, clock_in='2024-01-10T09:00', clock_out='2024-01-10T18:00', note='fixed'
        )

        log = TimeLog.objects.get(id=result.time_log_id)
        assert log.status == TimeLog.Status.EDITED
        assert log.note == 'fixed'
        assert log.duration_text() == '9 hours 0 minutes'

    def test_delete_time_log(self, container, employee):
        from apps.timelogs.models import TimeLog

        created = container.get(CreateTimeLogCommand).execute(
            employee_id=employee.id, clock_in='2024-01-10T08:30', skip_notification=True
        )
        assert container.get(DeleteTimeLogCommand).execute(log_id=created.time_log_id).success is True
        assert not TimeLog.objects.exists()


@pytest.mark.django_db
class TestSettingsAndLogin:

    def test_blank_admin_password_is_kept(self, container):
        from apps.preferences.models import Setting

        result = container.get(UpdateSettingsCommand).execute(settings=[
            {'name': 'organization_name', 'value': 'Branch 2'},
            {'name': 'admin_password', 'value': ''},
            {'name': 'no_such_setting', 'value': 'x'},
        ])

        assert result.updated == 1
        assert Setting.get_value('organization_name') == 'Branch 2'
        assert Setting.get_value('admin_password') == 'admin123'

    def test_login_issues_admin_token(self, container):
        result = container.get(AdminLoginCommand).execute(username='admin', password='admin123')

        assert result.success is True
        payload = jwt.decode(result.token, settings.SECRET_KEY, algorithms=['HS256'])
        assert payload['role'] == 'admin'
        assert payload['sub'] == 'admin'

    def test_login_wrong_password(self, container):
        result = container.get(AdminLoginCommand).execute(username='admin', password='nope')
        assert result.error_code == 'INVALID_CREDENTIALS'


class _BrokenCache:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ConnectionError('redis unavailable')
        return fail


class _BrokenEventBus:
    def publish(self, event_type, payload):
        raise ConnectionError('rabbitmq unavailable')


@pytest.mark.django_db
class TestDegradedInfrastructure:

    def test_clock_in_survives_cache_and_event_bus_outage(self, container, employee):
        from infrastructure.cache import Cache
        from infrastructure.event_bus import EventBus

        container.register_singleton(Cache, _BrokenCache())
        container.register_singleton(EventBus, _BrokenEventBus())

        result = container.get(ClockInCommand).execute(employee='EMP001')

        assert result.success is True

    def test_roster_read_falls_back_to_database(self, container, employee):
        from infrastructure.cache import Cache
        from services.queries import GetEmployeesQuery

        container.register_singleton(Cache, _BrokenCache())

        assert container.get(GetEmployeesQuery).execute().count == 1

    def test_employee_change_drops_todays_head_count(self, container, employee, cache):
        key = dashboard_cache_key(date(2024, 1, 15))
        cache.set_json(key, {'total_employees': 1})

        container.get(UpdateEmployeeCommand).execute(
            employee_id=employee.id, emp_code='EMP001', full_name='Somchai Jaidee', status='inactive'
        )

        assert cache.get(key) is None

    def test_moving_a_log_to_another_day_drops_both_days(self, container, employee, cache):
        result = container.get(CreateTimeLogCommand).execute(
            employee_id=employee.id, clock_in='2024-01-10T08:00', skip_notification=True
        )
        old_key = dashboard_cache_key(date(2024, 1, 10))
        new_key = dashboard_cache_key(date(2024, 1, 11))
        cache.set_json(old_key, {'checked_in': 1})
        cache.set_json(new_key, {'checked_in': 0})

        container.get(UpdateTimeLogCommand).execute(log_id=result.time_log_id, clock_in='2024-01-11T08:00')

        assert cache.get(old_key) is None
        assert cache.get(new_key) is None

    def test_cleanup_drops_every_cached_dashboard(self, container, employee, cache, event_bus):
        from services.commands import CleanupTimeLogsCommand

        container.get(CreateTimeLogCommand).execute(
            employee_id=employee.id, clock_in='2022-11-02T08:00', skip_notification=True
        )
        keys = [dashboard_cache_key(date(2022, 11, 2)), dashboard_cache_key(date(2024, 1, 15))]
        for key in keys:
            cache.set_json(key, {'checked_in': 1})

        result = container.get(CleanupTimeLogsCommand).execute(cleanup_type='older_than_1_year')

        assert result.deleted_count == 1
        assert [cache.get(key) for key in keys] == [None, None]
        assert event_bus.assert_event_published('timelog.cleaned_up')['payload']['cutoff'] == '2023-01-15'


class TestMonthsBefore:

    def test_same_day_of_month(self):
        from utils.datetime import months_before
        assert months_before(date(2024, 1, 15), 6) == date(2023, 7, 15)
        assert months_before(date(2024, 1, 15), 12) == date(2023, 1, 15)

    def test_clamps_to_month_end(self):
        from utils.datetime import months_before
        assert months_before(date(2024, 8, 31), 6) == date(2024, 2, 29)
        assert months_before(date(2023, 3, 31), 1) == date(2023, 2, 28)
