"""
Unit tests for deputy_client module.
"""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest
import requests
from config import Settings
from deputy_client import DeputyAPIError, DeputyClient, extract_error_message


SETTINGS = Settings(
    google_api_key='test-key',
    deputy_base_url='https://example.au.deputy.com',
    deputy_access_token='secret-token',
    deputy_timeout=5.0,
    deputy_company_id=4,
    deputy_location_id=6
)


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=''):
        self.status_code = status_code
        self.data = data
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self.data is None:
            raise ValueError("No JSON body")
        return self.data


class FakeSession:
    """Stands in for requests.Session and records each request."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append({'method': method, 'url': url, 'headers': headers, 'json': json, 'timeout': timeout})
        if self.error:
            raise self.error
        return self.responses.pop(0)


class TestExtractErrorMessage:
    def test_message(self):
        assert extract_error_message({'message': 'Bad roster'}, 400) == 'Bad roster'

    def test_nested_error_message(self):
        assert extract_error_message({'error': {'code': 1, 'message': 'Overlap'}}, 409) == 'Overlap'

    def test_error_string(self):
        assert extract_error_message({'error': 'Forbidden'}, 403) == 'Forbidden'

    def test_fallback_to_status(self):
        assert extract_error_message('<html>oops</html>', 502) == 'Error 502'
        assert extract_error_message(None, None) == 'Error 400'


class TestDeputyClient:
    def test_auth_headers(self):
        session = FakeSession([FakeResponse(200, [])])
        DeputyClient(SETTINGS, session).get_employees()
        headers = session.calls[0]['headers']
        assert headers['Authorization'] == 'Bearer secret-token'
        assert headers['Content-Type'] == 'application/json'
        assert headers['Accept'] == 'application/json'

    def test_no_shared_session_by_default(self, monkeypatch):
        session = FakeSession([FakeResponse(200, []), FakeResponse(200, [])])
        monkeypatch.setattr(requests, 'request', session.request)

        client = DeputyClient(SETTINGS)
        client.get_employees()
        client.get_locations()

        assert client.session is None
        assert len(session.calls) == 2
        assert session.calls[1]['headers']['Authorization'] == 'Bearer secret-token'

    def test_get_employees(self):
        roster = [{'Id': 1, 'DisplayName': 'Jane Doe'}]
        session = FakeSession([FakeResponse(200, roster)])

        assert DeputyClient(SETTINGS, session).get_employees() == roster
        assert session.calls[0]['method'] == 'GET'
        assert session.calls[0]['url'] == 'https://example.au.deputy.com/api/v1/resource/Employee'
        assert session.calls[0]['timeout'] == 5.0

    def test_get_locations(self):
        session = FakeSession([FakeResponse(200, [{'Id': 1, 'CompanyName': 'Main St'}])])
        DeputyClient(SETTINGS, session).get_locations()
        assert session.calls[0]['url'].endswith('/api/v1/resource/Company')

    def test_add_shift_forwards_payload(self):
        session = FakeSession([FakeResponse(200, {'Id': 55})])
        payload = {'intStartTimestamp': 1, 'intEndTimestamp': 2, 'intRosterEmployee': 7}

        assert DeputyClient(SETTINGS, session).add_shift(payload) == {'Id': 55}
        assert session.calls[0]['method'] == 'POST'
        assert session.calls[0]['url'].endswith('/api/v1/supervise/roster')
        assert session.calls[0]['json'] == payload

    def test_create_employee_defaults(self):
        session = FakeSession([FakeResponse(200, {'Id': 12})])
        DeputyClient(SETTINGS, session).create_employee('Zed')

        assert session.calls[0]['url'].endswith('/api/v1/supervise/employee')
        assert session.calls[0]['json'] == {
            'strFirstName': 'Zed',
            'strLastName': 'Doe',
            'intCompanyId': 4,
            'MainLocation': 6
        }

    def test_http_error_raises(self):
        session = FakeSession([FakeResponse(401, {'error': 'Unauthorized'})])

        with pytest.raises(DeputyAPIError) as exc_info:
            DeputyClient(SETTINGS, session).get_employees()
        assert exc_info.value.status_code == 401
        assert exc_info.value.details == {'error': 'Unauthorized'}

    def test_transport_error_raises(self):
        session = FakeSession(error=requests.ConnectionError('connection refused'))

        with pytest.raises(DeputyAPIError) as exc_info:
            DeputyClient(SETTINGS, session).get_locations()
        assert exc_info.value.status_code is None
        assert exc_info.value.details is None
        assert 'connection refused' in exc_info.value.message

    def test_create_shift_success(self):
        session = FakeSession([FakeResponse(200, {'Id': 501, 'Employee': 7})])
        result = DeputyClient(SETTINGS, session).create_shift({'intRosterEmployee': 7})

        assert result == {'success': True, 'shiftId': 501, 'data': {'Id': 501, 'Employee': 7}}

    def test_create_shift_failure_is_reported(self):
        details = {'error': {'message': 'Employee is not available'}}
        session = FakeSession([FakeResponse(400, details)])
        payload = {'intRosterEmployee': 7}

        result = DeputyClient(SETTINGS, session).create_shift(payload)

        assert result['success'] is False
        assert result['error'] == "Deputy API Error:\n\nEmployee is not available \n\n"
        assert result['details'] == details
        assert result['shiftPayload'] == payload

    def test_create_shift_transport_failure(self):
        session = FakeSession(error=requests.Timeout('timed out'))
        result = DeputyClient(SETTINGS, session).create_shift({'intRosterEmployee': 7})

        assert result['success'] is False
        assert result['error'] == "Deputy API Error:\n\nError 400 \n\n"
        assert result['details'] is None
