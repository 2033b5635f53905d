"""
Tests for the mobile and compatibility endpoints.
"""
import pytest


@pytest.mark.django_db
class TestEmployeesEndpoint:
    """Tests for GET /api/mobile/employees"""

    def test_lists_active_roster(self, api_client, container, employee, inactive_employee):
        response = api_client.get('/api/mobile/employees')

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['employees'] == [
            {'name': 'Somchai Jaidee', 'code': 'EMP001', 'id': 'Somchai Jaidee'}
        ]
        assert data['count'] == 1

    def test_roster_is_cached(self, api_client, container, employee):
        from apps.employees.models import Employee

        api_client.get('/api/mobile/employees')
        Employee.objects.create(emp_code='EMP002', full_name='Malee Srisuk')

        data = api_client.get('/api/mobile/employees').json()
        assert data['count'] == 1

    def test_no_auth_header_needed_even_if_bogus(self, api_client, container, employee):
        response = api_client.get('/api/mobile/employees', HTTP_AUTHORIZATION='Bearer garbage')
        assert response.status_code == 200


@pytest.mark.django_db
class TestClockEndpoints:
    """Tests for POST /api/mobile/clockin and /api/mobile/clockout"""

    def test_clock_in(self, api_client, container, employee):
        response = api_client.post(
            '/api/mobile/clockin',
            data={'employee': 'Somchai Jaidee', 'userinfo': 'hello', 'lat': 13.75, 'lon': 100.5},
            content_type='application/json'
        )

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['data']['employee_name'] == 'Somchai Jaidee'
        assert data['data']['time'] == '10:00:00'

    def test_duplicate_clock_in_is_http_200_with_success_false(self, api_client, container, employee):
        body = {'employee': 'EMP001', 'client_time': '2024-01-15T02:00:00Z'}
        api_client.post('/api/mobile/clockin', data=body, content_type='application/json')

        response = api_client.post('/api/mobile/clockin', data=body, content_type='application/json')

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is False
        assert data['code'] == 'ALREADY_CLOCKED_IN'
        assert data['message']

    def test_invalid_coordinates_rejected(self, api_client, container, employee):
        response = api_client.post(
            '/api/mobile/clockin',
            data={'employee': 'EMP001', 'lat': 500},
            content_type='application/json'
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'VALIDATION_ERROR'

    def test_clock_out_after_clock_in(self, api_client, container, employee, clock):
        api_client.post('/api/mobile/clockin', data={'employee': 'EMP001'}, content_type='application/json')
        clock.advance_hours(8)

        response = api_client.post('/api/mobile/clockout', data={'employee': 'EMP001'}, content_type='application/json')

        data = response.json()
        assert data['success'] is True
        assert data['data']['time'] == '18:00:00'

    def test_clock_out_without_clock_in(self, api_client, container, employee):
        response = api_client.post('/api/mobile/clockout', data={'employee': 'EMP001'}, content_type='application/json')
        assert response.json()['code'] == 'NOT_CLOCKED_IN'


@pytest.mark.django_db
class TestStatusAndHistory:

    def test_status_progression(self, api_client, container, employee, clock):
        assert api_client.get('/api/mobile/status/EMP001').json()['status'] == 'not_clocked_in'

        api_client.post('/api/mobile/clockin', data={'employee': 'EMP001'}, content_type='application/json')
        data = api_client.get('/api/mobile/status/Somchai%20Jaidee').json()
        assert data['status'] == 'clocked_in'
        assert data['clock_in_time'] == '10:00:00'

        clock.advance_hours(1)
        api_client.post('/api/mobile/clockout', data={'employee': 'EMP001'}, content_type='application/json')
        data = api_client.get('/api/mobile/status/EMP001').json()
        assert data['status'] == 'completed'
        assert data['clock_out_time'] == '11:00:00'

    def test_status_unknown_employee(self, api_client, container, db):
        data = api_client.get('/api/mobile/status/Nobody').json()
        assert data['success'] is False
        assert data['status'] == 'employee_not_found'

    def test_history(self, api_client, container, employee, clock):
        api_client.post('/api/mobile/clockin', data={'employee': 'EMP001'}, content_type='application/json')

        data = api_client.get('/api/mobile/history/EMP001?limit=3').json()

        assert data['success'] is True
        assert len(data['history']) == 1
        assert data['history'][0]['date'] == '2024-01-15'
        assert data['history'][0]['clock_out'] is None

    def test_history_bad_limit(self, api_client, container, employee):
        response = api_client.get('/api/mobile/history/EMP001?limit=abc')
        assert response.status_code == 400


@pytest.mark.django_db
class TestReadEndpoints:

    def test_dashboard(self, api_client, container, employee):
        api_client.post('/api/mobile/clockin', data={'employee': 'EMP001'}, content_type='application/json')

        today = api_client.get('/api/mobile/dashboard').json()['today']

        assert today == {
            'date': '2024-01-15',
            'total_employees': 1,
            'checked_in': 1,
            'not_checked_out': 1,
            'checked_out': 0,
        }

    def test_config(self, api_client, container, db):
        config = api_client.get('/api/mobile/config').json()['config']

        assert config['liff_id'] == 'test-liff-id'
        assert config['time_offset'] == 420
        assert config['features']['offline_mode'] is True

    def test_health(self, api_client, container):
        data = api_client.get('/api/mobile/health').json()
        assert data['status'] == 'ok'

    def test_compat_reads(self, api_client, container, db):
        assert api_client.get('/api/getLiffId').json() == {'success': True, 'liffId': 'test-liff-id'}
        assert api_client.get('/api/getTimeOffset').json() == {'success': True, 'timeOffset': 420}

    def test_deep_health_check(self, api_client, container, employee):
        data = api_client.get('/health/').json()

        assert data['status'] == 'healthy'
        assert data['business_date'] == '2024-01-15'
        assert data['active_employees'] == 1
        assert data['checks'] == {'database': 'ok', 'cache': 'ok'}

    def test_batch_reads(self, api_client, container, db):
        response = api_client.post(
            '/api/mobile/batch',
            data={'operations': [{'type': 'get_settings'}, {'type': 'get_liff_id'}, {'type': 'drop_tables'}]},
            content_type='application/json'
        )

        assert response.status_code == 200
        settings_result, liff_result, unknown = response.json()['results']
        assert settings_result['success'] is True
        assert settings_result['data']['organization_name'] == 'Head Office'
        assert 'admin_password' not in settings_result['data']
        assert 'telegram_bot_token' not in settings_result['data']
        assert liff_result == {'success': True, 'data': {'liff_id': 'test-liff-id'}}
        assert unknown == {'success': False, 'data': None, 'message': 'Unknown operation type'}

    def test_batch_requires_operation_list(self, api_client, container, db):
        response = api_client.post(
            '/api/mobile/batch',
            data={'operations': 'get_settings'},
            content_type='application/json'
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'VALIDATION_ERROR'

    def test_metrics(self, api_client, container, employee):
        api_client.post('/api/mobile/clockin', data={'employee': 'EMP001'}, content_type='application/json')
        api_client.get('/api/mobile/employees')

        data = api_client.get('/metrics').json()

        assert data['database'] == {
            'employees': 1,
            'active_employees': 1,
            'time_logs': 1,
            'open_sessions': 1,
            'clock_ins_today': 1,
        }
        assert data['cache']['roster_cached'] is True
        assert data['cache']['roster_size'] == 1
        assert data['fake_infrastructure'] is True
        assert data['uptime'] >= 0
