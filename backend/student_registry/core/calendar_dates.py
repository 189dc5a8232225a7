"""Calendar Dates — locale-independent date parsing and age computation.

Invariants:
    - parse_calendar_date accepts only fixed, year-first or month-name formats
    - Purely numeric day/month orders (05/04/2001) are rejected as ambiguous
    - Returns None on failure instead of raising (callers classify, not abort)
"""

from datetime import date, datetime


# %b and %B follow LC_TIME; the service never calls locale.setlocale.
_EXPLICIT_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d-%b-%Y",
)


def parse_calendar_date(value: str) -> date | None:
    """Parse an unambiguous calendar date; a time-of-day part is dropped."""
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _EXPLICIT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_calendar_date(value: date) -> str:
    """4-digit year, 2-digit month, 2-digit day."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def compute_age(date_of_birth: date, today: date) -> int:
    """Whole years between date_of_birth and today."""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age
