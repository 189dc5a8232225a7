"""CSV Export — tests for escaping, row layout and import round-trip."""

import io
from datetime import date, datetime, timezone

from student_registry.core.csv_export import (
    EXPORT_HEADER,
    escape_csv_field,
    export_file_name,
    format_export,
)
from student_registry.core.domain_types import StudentId, StudentRecord
from student_registry.core.reconcile_import import reconcile_import, split_csv_line


def _record(number, first, last, dob, internal_id="id-1"):
    return StudentRecord(StudentId(internal_id), number, first, last, dob)


# ─── escape_csv_field ────────────────────────────────────────────

def test_plain_field_is_unchanged():
    assert escape_csv_field("Jane") == "Jane"


def test_field_with_comma_is_quoted():
    assert escape_csv_field("Smith, Jr.") == '"Smith, Jr."'


def test_field_with_quote_is_quoted_and_doubled():
    assert escape_csv_field('The "Rock"') == '"The ""Rock"""'


def test_field_with_line_breaks_is_quoted():
    assert escape_csv_field("a\nb") == '"a\nb"'
    assert escape_csv_field("a\rb") == '"a\rb"'


def test_missing_field_is_empty():
    assert escape_csv_field(None) == ""
    assert escape_csv_field("") == ""


def test_literal_null_text_is_not_confused_with_missing():
    assert escape_csv_field("null") == "null"


def test_escape_round_trips_through_csv_split():
    value = 'Smith, "Jr."'
    assert split_csv_line(escape_csv_field(value)) == [value]


# ─── format_export ───────────────────────────────────────────────

def test_empty_export_is_header_only():
    assert format_export([]) == b"NIM,FirstName,LastName,DateOfBirth\r\n"
    assert EXPORT_HEADER[0] == "NIM"


def test_rows_follow_input_order_without_sorting():
    records = [
        _record("Z9", "Zed", "Last", date(2000, 1, 1), "a"),
        _record("A1", "Amy", "First", date(2001, 2, 3), "b"),
    ]
    lines = format_export(records).decode("utf-8").split("\r\n")
    assert lines[1].startswith("Z9,")
    assert lines[2].startswith("A1,")
    assert lines[3] == ""


def test_absent_last_name_renders_empty_field():
    body = format_export([_record("A1", "Jane", None, date(2001, 5, 4))])
    assert body.decode("utf-8").split("\r\n")[1] == "A1,Jane,,2001-05-04"


def test_date_is_zero_padded_year_month_day():
    body = format_export([_record("A1", "Jane", "Doe", date(987, 3, 9))])
    assert body.decode("utf-8").split("\r\n")[1].endswith(",0987-03-09")


def test_export_is_utf8():
    body = format_export([_record("A1", "Zoë", "Ñúñez", date(2001, 5, 4))])
    assert "Zoë,Ñúñez" in body.decode("utf-8")


def test_export_then_import_round_trips_records():
    records = [
        _record("C14230001", "Jane", 'Smith, "Jr."', date(2001, 5, 4), "a"),
        _record("C14230002", 'Mary "M"', None, date(1999, 12, 31), "b"),
        _record("C14230003", "Ann, Lee", "O'Neil", date(2000, 2, 29), "c"),
    ]
    outcome = reconcile_import(io.BytesIO(format_export(records)), [])

    def _fields(r):
        return (r.enrollment_number, r.first_name, r.last_name, r.date_of_birth)

    assert outcome.invalid_count == 0
    assert outcome.duplicate_count == 0
    assert {_fields(r) for r in outcome.accepted} == {_fields(r) for r in records}


def test_reimport_into_same_store_is_all_duplicates():
    records = [_record("C14230001", "Jane", "Doe", date(2001, 5, 4))]
    outcome = reconcile_import(io.BytesIO(format_export(records)), ["C14230001"])
    assert outcome.accepted_count == 0
    assert outcome.duplicate_lines == [2]


# ─── export_file_name ────────────────────────────────────────────

def test_export_file_name_uses_utc_timestamp():
    now = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert export_file_name(now) == "students-20250102030405.csv"


def test_export_file_name_defaults_to_now():
    name = export_file_name()
    assert name.startswith("students-")
    assert name.endswith(".csv")
    assert len(name) == len("students-20250102030405.csv")
