"""
Repair and parse the shift JSON returned by the vision model.

Gemini is asked for a JSON array but regularly returns something close to
it instead: objects wrapped in prose or markdown fences, raw newlines inside
string values, trailing commas, or several objects with no enclosing array.
Each repair rule below is a pure text transformation; REPAIR_STEPS applies
them in a fixed order, every rule running whether or not it is needed.
"""
import json
import re
from typing import Any, Callable, Dict, List


class ShiftParseError(ValueError):
    """Raised when the repaired model output is still not valid JSON."""

    def __init__(self, message: str, repaired_text: str):
        super().__init__(message)
        self.repaired_text = repaired_text


_OBJECT_SPAN = re.compile(r'\{[\s\S]*\}')


def extract_object_span(text: str) -> str:
    """Keep everything from the first '{' to the last '}'."""
    match = _OBJECT_SPAN.search(text)
    if match:
        return match.group(0)
    return text


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences and stray backticks at the boundaries."""
    text = re.sub(r'^\s*```(?:json)?\s*', '', text, flags=re.IGNORECASE)
    text = re.sub(r'\s*```\s*$', '', text)
    text = re.sub(r'^\s*`', '', text)
    text = re.sub(r'`\s*$', '', text)
    return text


def collapse_newlines(text: str) -> str:
    """
    Replace newline sequences with a single space.

    Handles both real line breaks and the escaped two-character forms the
    model sometimes writes inside string values.
    """
    text = re.sub(r'(?:\\r)?\\n|\\r', ' ', text)
    return re.sub(r'\r?\n|\r', ' ', text)


def remove_trailing_commas(text: str) -> str:
    """Drop commas directly before a closing brace/bracket and collapse doubled commas."""
    text = re.sub(r',\s*([}\]])', r'\1', text)
    text = re.sub(r',\s*,', ',', text)
    return text.strip()


def wrap_single_object(text: str) -> str:
    if text.startswith('{'):
        return f'[{text}]'
    return text


def join_adjacent_objects(text: str) -> str:
    """Insert the missing comma between back-to-back objects."""
    return re.sub(r'}\s*{', '},{', text)


def ensure_array(text: str) -> str:
    if not text.startswith('['):
        return f'[{text}]'
    return text


REPAIR_STEPS: List[Callable[[str], str]] = [
    extract_object_span,
    strip_code_fences,
    collapse_newlines,
    remove_trailing_commas,
    wrap_single_object,
    join_adjacent_objects,
    ensure_array,
]


def repair_json_text(text: str) -> str:
    """
    Run the full repair pipeline over raw model output.

    Args:
        text: Raw response text from the model

    Returns:
        Text that should parse as a JSON array of shift objects
    """
    text = text.strip()
    for step in REPAIR_STEPS:
        text = step(text)
    return text


def parse_shift_json(text: str) -> List[Dict[str, Any]]:
    """
    Parse shift candidates from raw model output.

    Args:
        text: Raw response text from the model

    Returns:
        List of parsed shift candidates (a single parsed value is wrapped in a list)

    Raises:
        ShiftParseError: If the repaired text is not valid JSON
    """
    repaired = repair_json_text(text)

    try:
        data = json.loads(repaired)
    except json.JSONDecodeError as e:
        raise ShiftParseError(str(e), repaired) from e

    if not isinstance(data, list):
        data = [data]

    return data
