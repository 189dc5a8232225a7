"""Enrollment Number Allocator — derives the next structured number for a cohort.

Invariants:
    - prefix = faculty_code + level_code + program_code + cohort_year, verbatim (no case changes)
    - Sequence is derived from the greatest existing number for the prefix — no counter table
    - A "last" number shorter than MIN_PARSEABLE_LENGTH, or with a non-numeric tail, restarts at 1
    - SEQUENCE_WIDTH is a minimum width: 10000 renders as "10000", never truncated
    - Pure: the caller supplies the last number and persists the result

Design Decisions:
    - Zero-padded suffix keeps ordinal string order equal to numeric order within 4 digits,
      which is what the store's "greatest with prefix" query relies on
    - The length check assumes 5-character prefixes; shorter numbers restart at 1
"""

import re

from student_registry.core.domain_types import EnrollmentMetadata


SEQUENCE_WIDTH: int = 4
MIN_PARSEABLE_LENGTH: int = 9

_CONVENTIONAL_LAYOUT = re.compile(r"^([A-Za-z])(\d)(\d)(\d{2})")


def build_prefix(
    faculty_code: str, level_code: str, program_code: str, cohort_year: str,
) -> str:
    """Cohort prefix: plain concatenation, caller casing preserved."""
    return f"{faculty_code}{level_code}{program_code}{cohort_year}"


def next_sequence(last_number: str | None) -> int:
    """Sequence following last_number, or 1 when it is absent or unusable."""
    if not last_number or len(last_number) < MIN_PARSEABLE_LENGTH:
        return 1
    tail = last_number[-SEQUENCE_WIDTH:]
    if not tail.isascii() or not tail.isdigit():
        return 1
    return int(tail) + 1


def format_enrollment_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence:0{SEQUENCE_WIDTH}d}"


def allocate_enrollment_number(
    faculty_code: str,
    level_code: str,
    program_code: str,
    cohort_year: str,
    last_number: str | None,
) -> str:
    """Next enrollment number for the cohort, given the greatest existing one.

    No uniqueness re-check happens here; the caller must persist the result
    immediately and treat a store conflict as a retryable race.
    """
    prefix = build_prefix(faculty_code, level_code, program_code, cohort_year)
    return format_enrollment_number(prefix, next_sequence(last_number))


def decode_enrollment_number(enrollment_number: str | None) -> EnrollmentMetadata:
    """Best-effort split of a conventional number into its cohort codes.

    Recognizes letter + level digit + program digit + 2-digit year. Anything
    else decodes to empty metadata; this is display data, not validation.
    """
    if not enrollment_number:
        return EnrollmentMetadata()
    match = _CONVENTIONAL_LAYOUT.match(enrollment_number)
    if not match:
        return EnrollmentMetadata()
    faculty, level, program, year = match.groups()
    return EnrollmentMetadata(
        faculty_code=faculty.upper(),
        level_code=level,
        program_code=program,
        cohort_year=year,
    )
