"""Enrollment Number Allocator — tests for pure prefix/sequence derivation.

Tests cover:
    - Empty cohort starts at 0001
    - Greatest existing number is incremented
    - Short (< 9 chars) or non-numeric "last" values restart at 0001
    - Sequences past 9999 widen instead of truncating
    - Prefix casing is preserved verbatim
    - Sequential allocation with persistence forms a contiguous run
    - decode_enrollment_number splits conventional numbers only
"""

from student_registry.core.enrollment_number import (
    MIN_PARSEABLE_LENGTH,
    SEQUENCE_WIDTH,
    allocate_enrollment_number,
    build_prefix,
    decode_enrollment_number,
    format_enrollment_number,
    next_sequence,
)


def _greatest_with_prefix(store: list[str], prefix: str) -> str | None:
    matches = [n for n in store if n.startswith(prefix)]
    return max(matches) if matches else None


# ─── build_prefix / format ───────────────────────────────────────

def test_build_prefix_is_plain_concatenation():
    assert build_prefix("C", "1", "4", "23") == "C1423"


def test_build_prefix_preserves_caller_casing():
    assert build_prefix("c", "1", "4", "23") == "c1423"


def test_format_pads_to_four_digits():
    assert format_enrollment_number("C1423", 7) == "C14230007"
    assert SEQUENCE_WIDTH == 4


def test_format_widens_past_four_digits():
    assert format_enrollment_number("C1423", 10000) == "C142310000"


# ─── next_sequence ───────────────────────────────────────────────

def test_next_sequence_without_last_number_is_one():
    assert next_sequence(None) == 1
    assert next_sequence("") == 1


def test_next_sequence_increments_numeric_tail():
    assert next_sequence("C14230007") == 8


def test_next_sequence_ignores_values_shorter_than_minimum():
    assert MIN_PARSEABLE_LENGTH == 9
    assert next_sequence("C1423") == 1
    assert next_sequence("C142300") == 1
    assert next_sequence("C1420007") == 1  # 8 chars, numeric tail ignored


def test_next_sequence_falls_back_on_non_numeric_tail():
    assert next_sequence("C1423ABCD") == 1
    assert next_sequence("C142300X7") == 1


def test_next_sequence_reads_only_last_four_characters():
    assert next_sequence("C142310000") == 1  # tail "0000"


# ─── allocate_enrollment_number ──────────────────────────────────

def test_allocate_on_empty_store():
    assert allocate_enrollment_number("C", "1", "4", "23", None) == "C14230001"


def test_allocate_after_existing_number():
    assert allocate_enrollment_number("C", "1", "4", "23", "C14230007") == "C14230008"


def test_allocate_ignores_malformed_legacy_value():
    assert allocate_enrollment_number("C", "1", "4", "23", "C1423") == "C14230001"


def test_allocate_overflows_to_five_digits():
    assert allocate_enrollment_number("C", "1", "4", "23", "C14239999") == "C142310000"


def test_sequential_allocation_forms_contiguous_run():
    store: list[str] = ["B1125", "C14220003", "D1123"]
    allocated = []
    for _ in range(12):
        last = _greatest_with_prefix(store, "C1423")
        number = allocate_enrollment_number("C", "1", "4", "23", last)
        store.append(number)
        allocated.append(number)
    assert allocated == [f"C1423{i:04d}" for i in range(1, 13)]


def test_cohorts_number_independently():
    store = ["C14230005"]
    other = allocate_enrollment_number(
        "C", "1", "4", "24", _greatest_with_prefix(store, "C1424"),
    )
    assert other == "C14240001"


# ─── decode_enrollment_number ────────────────────────────────────

def test_decode_conventional_number():
    meta = decode_enrollment_number("C14230007")
    assert meta.faculty_code == "C"
    assert meta.level_code == "1"
    assert meta.program_code == "4"
    assert meta.cohort_year == "23"


def test_decode_uppercases_faculty():
    meta = decode_enrollment_number("c1423007")
    assert meta.faculty_code == "C"
    assert meta.cohort_year == "23"


def test_decode_unconventional_number_is_empty():
    meta = decode_enrollment_number("STUDENT-42")
    assert meta.faculty_code is None
    assert meta.cohort_year is None


def test_decode_empty_is_empty():
    assert decode_enrollment_number("").faculty_code is None
    assert decode_enrollment_number(None).level_code is None
