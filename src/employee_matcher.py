"""
Match employee names read from a schedule image against the Deputy roster.
"""
import re
from typing import Any, Dict, List, Optional, Tuple

_FOR_NAME = re.compile(r'for\s+([^,.]+)', re.IGNORECASE)


class EmployeeNotFoundError(ValueError):
    """Raised when an extracted employee reference has no roster match."""

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


def extract_employee_reference(payload: Dict[str, Any]) -> Optional[Any]:
    """
    Pick the employee reference out of a shift payload.

    Uses intRosterEmployee when it is a name, otherwise "for <name>" in the
    comment, and only then a numeric intRosterEmployee id.
    """
    employee = payload.get('intRosterEmployee')
    if isinstance(employee, str) and employee.strip():
        return employee.strip()

    comment = payload.get('strComment')
    match = _FOR_NAME.search(comment if isinstance(comment, str) else '')
    if match:
        name = match.group(1).strip()
        if name:
            return name

    if isinstance(employee, int) and not isinstance(employee, bool):
        return employee
    return None


def _normalize(value: str) -> str:
    return value.lower().strip()


def _contains_either_way(a: str, b: str) -> bool:
    return a in b or b in a


class EmployeeMatcher:
    """Resolves free-text employee references against one roster snapshot."""

    def __init__(self, employees: List[Dict[str, Any]]):
        # Non-object roster entries are ignored
        self.employees = [emp for emp in employees if isinstance(emp, dict)]
        self.named = [
            (emp, _normalize(emp['DisplayName']))
            for emp in self.employees
            if isinstance(emp.get('DisplayName'), str) and emp['DisplayName'].strip()
        ]

    def match_id(self, reference: Any) -> Optional[Dict[str, Any]]:
        if isinstance(reference, str):
            if not reference.strip().isdecimal():
                return None
            reference = int(reference)
        for emp in self.employees:
            if emp.get('Id') == reference:
                return emp
        return None

    def match(self, reference: Any) -> Tuple[Optional[Dict[str, Any]], str]:
        """
        Find the best roster match for a reference.

        Tiers, first hit wins, earliest roster entry wins within a tier:
        1. id - the reference is a numeric employee Id
        2. exact - normalized names are equal
        3. substring - either normalized name contains the other
        4. first_name - the display name's first word, same containment test

        Numeric references only ever match by Id.

        Returns: (employee or None, match_type)
        """
        if isinstance(reference, bool):
            return None, 'unknown'
        if isinstance(reference, int) or (isinstance(reference, str) and reference.strip().isdecimal()):
            employee = self.match_id(reference)
            if employee:
                return employee, 'id'
            return None, 'unknown'

        if not isinstance(reference, str):
            return None, 'unknown'

        name = _normalize(reference)
        if not name:
            return None, 'unknown'

        for emp, display in self.named:
            if display == name:
                return emp, 'exact'

        for emp, display in self.named:
            if _contains_either_way(name, display):
                return emp, 'substring'

        for emp, display in self.named:
            first_name = display.split()[0]
            if _contains_either_way(name, first_name):
                return emp, 'first_name'

        return None, 'unknown'


def find_best_matching_employee(name_from_image: Any, employees: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the matching roster entry for a name, or None."""
    if not name_from_image or not isinstance(name_from_image, str):
        return None
    employee, _ = EmployeeMatcher(employees).match(name_from_image)
    return employee
