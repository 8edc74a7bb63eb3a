"""
Deputy workforce API client.

Thin wrapper over requests: one call per method, bearer-token auth, no retries.
"""
from typing import Any, Dict, List, Optional

import requests

from config import Settings
from performance import PerformanceTimer, create_logger

log = create_logger("DEPUTY")

EMPLOYEE_RESOURCE = '/api/v1/resource/Employee'
COMPANY_RESOURCE = '/api/v1/resource/Company'
ROSTER_ENDPOINT = '/api/v1/supervise/roster'
EMPLOYEE_ENDPOINT = '/api/v1/supervise/employee'


class DeputyAPIError(Exception):
    """Deputy was unreachable or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def extract_error_message(details: Any, status_code: Optional[int] = None) -> str:
    """
    Pull a readable message out of a Deputy error payload.

    Tries details.message, details.error.message, then details.error, and
    falls back to the status code.
    """
    if isinstance(details, dict):
        if details.get('message'):
            return str(details['message'])
        error = details.get('error')
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
        if error:
            return str(error)
    return f"Error {status_code or 400}"


class DeputyClient:
    """Calls the Deputy REST API for employees, locations and rosters."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.base_url = settings.deputy_base_url
        # None means requests.request, which opens and closes a session per call
        self.session = session
        self.headers = {
            'Authorization': f'Bearer {settings.deputy_access_token}',
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        }

    def _request(self, method: str, path: str, payload: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        send = self.session.request if self.session is not None else requests.request
        try:
            response = send(
                method,
                url,
                headers=self.headers,
                json=payload,
                timeout=self.settings.deputy_timeout
            )
        except requests.RequestException as e:
            log(f"{method} {path} failed: {e}", "ERROR")
            raise DeputyAPIError(str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = response.text or None

        if not response.ok:
            message = f"Request failed with status code {response.status_code}"
            log(f"{method} {path} -> {response.status_code}: {data}", "ERROR")
            raise DeputyAPIError(message, response.status_code, data)

        return data

    def get_employees(self) -> List[Dict[str, Any]]:
        with PerformanceTimer("Deputy employee fetch", log):
            return self._request('GET', EMPLOYEE_RESOURCE)

    def get_locations(self) -> List[Dict[str, Any]]:
        return self._request('GET', COMPANY_RESOURCE)

    def add_shift(self, payload: Dict[str, Any]) -> Any:
        """Forward a roster payload to Deputy unchanged."""
        return self._request('POST', ROSTER_ENDPOINT, payload)

    def create_employee(self, first_name: Optional[str], last_name: Optional[str] = None) -> Any:
        payload = {
            'strFirstName': first_name,
            'strLastName': last_name or 'Doe',
            'intCompanyId': self.settings.deputy_company_id,
            'MainLocation': self.settings.deputy_location_id
        }
        log(f"Creating employee {payload['strFirstName']} {payload['strLastName']}")
        return self._request('POST', EMPLOYEE_ENDPOINT, payload)

    def create_shift(self, shift_payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create one shift, reporting failure in the result instead of raising.

        Returns:
            {'success': True, 'shiftId', 'data'} or
            {'success': False, 'error', 'details', 'shiftPayload'}
        """
        try:
            with PerformanceTimer(f"Deputy shift create (employee {shift_payload.get('intRosterEmployee')})", log):
                data = self._request('POST', ROSTER_ENDPOINT, shift_payload)
        except DeputyAPIError as e:
            error_message = extract_error_message(e.details, e.status_code)
            return {
                'success': False,
                'error': f"Deputy API Error:\n\n{error_message} \n\n",
                'details': e.details,
                'shiftPayload': shift_payload
            }

        return {
            'success': True,
            'shiftId': data.get('Id') if isinstance(data, dict) else None,
            'data': data
        }
