"""
Gemini prompt template for schedule image extraction.
"""

SHIFT_FIELDS_TEMPLATE = """{
  "date": "DD-MMM-YY",
  "startTime": "HH:MM AM/PM",
  "endTime": "HH:MM AM/PM",
  "intRosterEmployee": (employee name as string),
  "blnPublish": true,
  "intMealbreakMinute": 30,
  "intOpunitId": 1,
  "blnForceOverwrite": 0,
  "blnOpen": 0,
  "strComment": (include the actual date and times found),
  "intConfirmStatus": 1
}"""


def get_shift_prompt() -> str:
    """
    Get the instruction sent to Gemini alongside the schedule image.

    Dates and times are requested as raw text; conversion to Deputy
    timestamps happens after extraction.
    """
    return f"""Analyze this image of a shift schedule and extract ALL shifts shown.
Return the shifts as a JSON array of objects, each containing:
{SHIFT_FIELDS_TEMPLATE}

Important:
- Extract ALL shifts shown in the image
- Include employee names exactly as shown
- Keep dates in DD-MMM-YY format (e.g., "1-Dec-24")
- Keep times in HH:MM AM/PM format (e.g., "9:00 AM")
- Include the original date and time in strComment
- Separate each shift with a comma
- DO NOT convert to timestamps - provide raw dates and times"""
