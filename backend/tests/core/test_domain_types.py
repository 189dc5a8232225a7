"""Domain Types — verifies identity helpers, record shape and enum values."""

import dataclasses
from datetime import date

import pytest

from student_registry.core.domain_types import (
    EnrollmentMetadata,
    LineIssueKind,
    StudentId,
    StudentRecord,
    enrollment_key,
    new_student_id,
)


def test_new_student_id_is_unique_uuid_string():
    a, b = new_student_id(), new_student_id()
    assert a != b
    assert len(a) == 36


def test_enrollment_key_is_case_insensitive():
    assert enrollment_key("c14230001") == enrollment_key("C14230001")
    assert enrollment_key("C14230001") != enrollment_key("C14230002")


def test_student_record_is_immutable():
    record = StudentRecord(StudentId("x"), "A1", "Jane", None, date(2001, 5, 4))
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.first_name = "John"


def test_full_name_without_last_name():
    record = StudentRecord(StudentId("x"), "A1", "Jane", None, date(2001, 5, 4))
    assert record.full_name == "Jane"


def test_full_name_with_last_name():
    record = StudentRecord(StudentId("x"), "A1", "Jane", "Doe", date(2001, 5, 4))
    assert record.full_name == "Jane Doe"


def test_empty_metadata_defaults():
    assert EnrollmentMetadata() == EnrollmentMetadata(None, None, None, None)


def test_line_issue_kinds():
    assert {k.value for k in LineIssueKind} == {"structural", "validation", "duplicate"}


def test_enrollment_key_matches_lower_not_casefold():
    assert enrollment_key("STRASSE1") == "strasse1"
    assert enrollment_key("straße1") != enrollment_key("STRASSE1")
