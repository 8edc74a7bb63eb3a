"""
Image-to-shift pipeline: validate extracted shifts, resolve employees and
submit the batch to Deputy.

Resolution is all-or-nothing: if any shift in the batch cannot be matched to
a Deputy employee, no shifts are created. Once every shift resolves, each is
submitted on its own and a failed submission does not stop the others.
"""
import time
from typing import Any, Dict, List, Optional, Tuple

from deputy_client import DeputyAPIError
from employee_matcher import EmployeeMatcher, EmployeeNotFoundError, extract_employee_reference
from parsing import ShiftParseError, parse_shift_json
from performance import create_logger
from timestamps import convert_to_unix_timestamp, parse_int_field, validate_or_default

log = create_logger("PIPELINE")

DEFAULT_SHIFT_SECONDS = 8 * 3600
DEFAULT_MEALBREAK_MINUTES = 30
DEFAULT_OPUNIT_ID = 1
DEFAULT_COMMENT = 'Shift extracted from image'
MISSING_EMPLOYEES_ERROR = 'Some employees need to be created in Deputy first'
PARSE_WARNING = 'Failed to parse AI response'


def build_validated_shift(candidate: Dict[str, Any], now: Optional[int] = None) -> Tuple[Dict[str, Any], List[str]]:
    """
    Turn one extracted shift candidate into a Deputy roster payload.

    Unreadable times fall back to now / now + 8 hours and missing numeric
    fields to their defaults rather than failing the shift.

    Args:
        candidate: Parsed shift object from the model output
        now: Current Unix time (defaults to time.time())

    Returns:
        Tuple of (roster payload, names of fields that were defaulted)
    """
    if not isinstance(candidate, dict):
        candidate = {}
    if now is None:
        now = int(time.time())

    date = candidate.get('date') or ''
    start_time = candidate.get('startTime') or ''
    end_time = candidate.get('endTime') or ''

    fields = {
        'intStartTimestamp': validate_or_default(convert_to_unix_timestamp(date, start_time), now),
        'intEndTimestamp': validate_or_default(convert_to_unix_timestamp(date, end_time), now + DEFAULT_SHIFT_SECONDS),
        'intMealbreakMinute': validate_or_default(parse_int_field(candidate.get('intMealbreakMinute')), DEFAULT_MEALBREAK_MINUTES),
        'intOpunitId': validate_or_default(parse_int_field(candidate.get('intOpunitId')), DEFAULT_OPUNIT_ID),
    }
    defaulted = [name for name, (_, was_defaulted) in fields.items() if was_defaulted]

    payload = {
        'intStartTimestamp': fields['intStartTimestamp'][0],
        'intEndTimestamp': fields['intEndTimestamp'][0],
        'intRosterEmployee': candidate.get('intRosterEmployee'),
        'blnPublish': True,
        'intMealbreakMinute': fields['intMealbreakMinute'][0],
        'intOpunitId': fields['intOpunitId'][0],
        'blnForceOverwrite': 0,
        'blnOpen': 0,
        'strComment': f"{date} {start_time} to {end_time} - {candidate.get('strComment') or DEFAULT_COMMENT}",
        'intConfirmStatus': 1
    }

    if defaulted:
        log(f"Defaulted {', '.join(defaulted)} for shift '{date} {start_time}-{end_time}'", "WARN")

    return payload, defaulted


def resolve_shift(payload: Dict[str, Any], deputy, defaulted_fields: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Match a validated shift's employee against a freshly fetched Deputy roster.

    Returns:
        {'originalPayload', 'processedPayload', 'debug'}

    Raises:
        EmployeeNotFoundError: No name in the shift, or no roster match
        DeputyAPIError: The roster could not be fetched
    """
    employees = deputy.get_employees()
    if not isinstance(employees, list):
        raise DeputyAPIError('Unexpected employee list from Deputy', details=employees)

    reference = extract_employee_reference(payload)
    if reference is None:
        raise EmployeeNotFoundError('No employee name found in the schedule')

    employee, match_type = EmployeeMatcher(employees).match(reference)
    if employee is None:
        raise EmployeeNotFoundError(
            f'Employee "{reference}" not found in Deputy. Please create this employee in Deputy first.',
            reference=str(reference)
        )

    employee_id = employee.get('Id')
    display_name = employee.get('DisplayName', '')
    log(f"Matched '{reference}' to {display_name} (ID: {employee_id}) via {match_type}")

    processed_payload = dict(payload)
    processed_payload['intRosterEmployee'] = employee_id
    processed_payload['strComment'] = f"Shift for {display_name} (ID: {employee_id}) - {payload['strComment']}"

    return {
        'originalPayload': payload,
        'processedPayload': processed_payload,
        'debug': {
            'extractedName': reference,
            'employeesChecked': len(employees),
            'wasEmployeeFound': True,
            'matchedEmployeeId': employee_id,
            'matchType': match_type,
            'defaultedFields': list(defaulted_fields or [])
        }
    }


def process_shifts(candidates: List[Any], deputy, now: Optional[int] = None) -> Tuple[Dict[str, Any], int]:
    """
    Resolve every candidate, then submit the batch if all of them resolved.

    Args:
        candidates: Parsed shift candidates
        deputy: DeputyClient (or anything with get_employees/create_shift)
        now: Current Unix time used for timestamp defaults

    Returns:
        Tuple of (response body, HTTP status)
    """
    unprocessed_shifts = []
    processed_results = []

    for shift in candidates:
        validated_shift, defaulted = build_validated_shift(shift, now)
        try:
            processed_result = resolve_shift(validated_shift, deputy, defaulted)
        except (EmployeeNotFoundError, DeputyAPIError) as e:
            log(f"Could not resolve shift: {e}", "WARN")
            unprocessed_shifts.append({
                'shift': shift,
                'error': str(e)
            })
            continue

        processed_results.append({
            'processedResult': processed_result,
            'validatedShift': validated_shift
        })

    if unprocessed_shifts:
        log(f"{len(unprocessed_shifts)} of {len(candidates)} shifts unresolved - nothing submitted", "WARN")
        return {
            'error': MISSING_EMPLOYEES_ERROR,
            'unprocessedShifts': unprocessed_shifts,
            'processedShifts': processed_results
        }, 400

    created_shifts = []
    for result in processed_results:
        deputy_result = deputy.create_shift(result['processedResult']['processedPayload'])
        if not deputy_result['success']:
            log(f"Shift create failed: {deputy_result['error'].strip()}", "ERROR")
        created_shifts.append({
            'processedPayload': result['processedResult']['processedPayload'],
            'deputyResult': deputy_result
        })

    successful = sum(1 for shift in created_shifts if shift['deputyResult']['success'])
    log(f"Submitted {len(created_shifts)} shifts ({successful} created, {len(created_shifts) - successful} failed)")

    return {
        'response': {
            'totalShifts': len(created_shifts),
            'successCount': successful,
            'failureCount': len(created_shifts) - successful,
            'shifts': created_shifts
        }
    }, 200


def analyze_image(image_data: bytes, mime_type: str, extractor, deputy, now: Optional[int] = None) -> Tuple[Dict[str, Any], int]:
    """
    Full pipeline for one uploaded schedule image.

    A response that cannot be repaired into JSON is reported as a warning with
    HTTP 200 rather than as an error.

    Returns:
        Tuple of (response body, HTTP status)
    """
    text = extractor.extract(image_data, mime_type)

    try:
        candidates = parse_shift_json(text)
    except ShiftParseError as e:
        log(f"{PARSE_WARNING}: {e}", "WARN")
        return {
            'response': {
                'totalShifts': 0,
                'successfulShifts': [],
                'failedShifts': [{
                    'error': str(e),
                    'payload': None
                }]
            },
            'debug': {
                'error': str(e),
                'originalText': text,
                'repairedText': e.repaired_text
            },
            'warning': PARSE_WARNING
        }, 200

    log(f"Parsed {len(candidates)} shift candidates")
    return process_shifts(candidates, deputy, now)
