"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - StudentId wraps the opaque internal key — never shown as the enrollment number
    - StudentRecord is immutable; updates produce a new record via dataclasses.replace
    - last_name is None when blank, never the empty string
    - enrollment_key() is the single definition of case-insensitive equality,
      matching the store index on lower(enrollment_number)

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, full type-checker support
    - Frozen dataclass for StudentRecord: core stays independent of the ORM model
"""

import uuid
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

StudentId = NewType("StudentId", str)


def new_student_id() -> StudentId:
    """Fresh opaque internal identifier (UUID4 string)."""
    return StudentId(str(uuid.uuid4()))


def enrollment_key(enrollment_number: str) -> str:
    """Normalize an enrollment number for case-insensitive comparison."""
    return enrollment_number.lower()


# Column widths of the students table; longer values are rejected before any write.
ENROLLMENT_NUMBER_MAX_LENGTH: int = 64
NAME_MAX_LENGTH: int = 200


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class StudentRecord:
    """A student's persisted identity."""
    internal_id: StudentId
    enrollment_number: str
    first_name: str
    last_name: str | None
    date_of_birth: date

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class EnrollmentMetadata:
    """Cohort codes decoded from an enrollment number (display only)."""
    faculty_code: str | None = None
    level_code: str | None = None
    program_code: str | None = None
    cohort_year: str | None = None


# ─── Enums ───────────────────────────────────────────────────────

class LineIssueKind(str, Enum):
    """Why an import line was not accepted."""
    STRUCTURAL = "structural"
    VALIDATION = "validation"
    DUPLICATE = "duplicate"
