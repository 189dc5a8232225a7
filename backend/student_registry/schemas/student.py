"""Student Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - first_name: stripped, non-empty, at most 200 chars
    - last_name: stripped; blank becomes None
    - Cohort codes: short alphanumeric tokens, casing preserved verbatim
    - Responses are built from core StudentRecord / ImportOutcome, never from ORM rows

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
    - StudentSummary carries decoded cohort codes for list views
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from student_registry.core.calendar_dates import compute_age
from student_registry.core.domain_types import NAME_MAX_LENGTH, StudentRecord
from student_registry.core.enrollment_number import decode_enrollment_number
from student_registry.core.reconcile_import import ImportOutcome

_CODE_PATTERN = r"^[A-Za-z0-9]+$"


class _StudentFields(BaseModel):
    first_name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    last_name: str | None = Field(None, max_length=NAME_MAX_LENGTH)
    date_of_birth: date

    @field_validator("first_name")
    @classmethod
    def strip_first_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("first_name cannot be empty or whitespace")
        return v

    @field_validator("last_name")
    @classmethod
    def blank_last_name_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class StudentCreate(_StudentFields):
    """Student creation — names, birth date and the cohort codes for numbering."""
    faculty_code: str = Field(min_length=1, max_length=8, pattern=_CODE_PATTERN)
    level_code: str = Field(min_length=1, max_length=8, pattern=_CODE_PATTERN)
    program_code: str = Field(min_length=1, max_length=8, pattern=_CODE_PATTERN)
    cohort_year: str = Field(min_length=1, max_length=8, pattern=_CODE_PATTERN)


class StudentUpdate(_StudentFields):
    """Student update — enrollment number is immutable and not accepted here."""


class StudentResponse(BaseModel):
    """Full student record."""
    id: str
    enrollment_number: str
    first_name: str
    last_name: str | None
    date_of_birth: date

    @classmethod
    def from_record(cls, record: StudentRecord) -> "StudentResponse":
        return cls(
            id=record.internal_id,
            enrollment_number=record.enrollment_number,
            first_name=record.first_name,
            last_name=record.last_name,
            date_of_birth=record.date_of_birth,
        )


class StudentSummary(BaseModel):
    """List row — display name, age and decoded cohort codes."""
    id: str
    enrollment_number: str
    full_name: str
    age: int
    faculty_code: str | None = None
    level_code: str | None = None
    program_code: str | None = None
    cohort_year: str | None = None

    @classmethod
    def from_record(cls, record: StudentRecord, today: date) -> "StudentSummary":
        meta = decode_enrollment_number(record.enrollment_number)
        return cls(
            id=record.internal_id,
            enrollment_number=record.enrollment_number,
            full_name=record.full_name,
            age=compute_age(record.date_of_birth, today),
            faculty_code=meta.faculty_code,
            level_code=meta.level_code,
            program_code=meta.program_code,
            cohort_year=meta.cohort_year,
        )


class ImportIssueResponse(BaseModel):
    line_number: int
    kind: str
    reason: str


class ImportResultResponse(BaseModel):
    """Import summary — counts plus 1-based line numbers for audit."""
    imported: int
    duplicates: int
    invalid: int
    duplicate_lines: list[int]
    invalid_lines: list[int]
    issues: list[ImportIssueResponse] = []

    @classmethod
    def from_outcome(cls, outcome: ImportOutcome) -> "ImportResultResponse":
        return cls(
            imported=outcome.accepted_count,
            duplicates=outcome.duplicate_count,
            invalid=outcome.invalid_count,
            duplicate_lines=outcome.duplicate_lines,
            invalid_lines=outcome.invalid_lines,
            issues=[
                ImportIssueResponse(
                    line_number=i.line_number, kind=i.kind.value, reason=i.reason,
                )
                for i in outcome.issues
            ],
        )
