"""CSV Export Formatter — renders student records as UTF-8 CSV bytes.

Invariants:
    - Fixed header row first, then one row per record in the given order (no re-sorting)
    - A field containing comma, double quote, CR or LF is quoted, inner quotes doubled
    - Absent last name renders as an empty field (never the text "None" or "null")
    - date_of_birth always renders YYYY-MM-DD
    - Output is readable by reconcile_import (header line is recognized and skipped)
"""

from datetime import datetime, timezone
from typing import Iterable

from student_registry.core.calendar_dates import format_calendar_date
from student_registry.core.domain_types import StudentRecord


EXPORT_HEADER: tuple[str, ...] = ("NIM", "FirstName", "LastName", "DateOfBirth")
ROW_TERMINATOR = "\r\n"
_NEEDS_QUOTING = frozenset(',"\r\n')


def escape_csv_field(value: str | None) -> str:
    if not value:
        return ""
    if any(ch in _NEEDS_QUOTING for ch in value):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_export_row(record: StudentRecord) -> str:
    cells = (
        escape_csv_field(record.enrollment_number),
        escape_csv_field(record.first_name),
        escape_csv_field(record.last_name),
        format_calendar_date(record.date_of_birth),
    )
    return ",".join(cells)


def format_export(records: Iterable[StudentRecord]) -> bytes:
    """Header plus one CRLF-terminated row per record, encoded as UTF-8."""
    lines = [",".join(EXPORT_HEADER)]
    lines.extend(format_export_row(r) for r in records)
    return "".join(line + ROW_TERMINATOR for line in lines).encode("utf-8")


def export_file_name(now: datetime | None = None) -> str:
    """Suggested download name, e.g. students-20250101093000.csv (UTC)."""
    now = now or datetime.now(timezone.utc)
    return f"students-{now.astimezone(timezone.utc):%Y%m%d%H%M%S}.csv"
