"""CSV Reconciliation Pipeline — classifies every line of an import as accepted, duplicate or invalid.

Invariants:
    - Single pass, line-oriented; line numbers start at 1 and count blank lines too
    - Blank lines and a line-1 header are skipped silently (no outcome)
    - accepted, duplicate_lines and invalid_lines are disjoint
    - The seen-set holds store numbers AND numbers accepted earlier in the same run,
      compared via enrollment_key (case-insensitive)
    - One bad line never aborts the batch; only an unreadable stream does (ImportFileError)
    - The stream is closed on every exit path
    - No IO besides reading the given stream; persistence belongs to the shell

Design Decisions:
    - ImportOutcome is a result accumulator, not raise-and-catch control flow
    - Quoting state resets per line: csv.reader is fed one physical line at a time
    - Accepted enrollment numbers are taken verbatim (no allocator grammar check)
"""

import csv
import io
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable

from student_registry.core.calendar_dates import parse_calendar_date
from student_registry.core.domain_types import (
    ENROLLMENT_NUMBER_MAX_LENGTH, NAME_MAX_LENGTH, LineIssueKind, StudentId,
    StudentRecord, enrollment_key, new_student_id,
)
from student_registry.core.errors import ErrorContext, ImportFileError

HEADER_TOKENS: tuple[str, ...] = ("NIM", "NomorIndukMahasiswa")
MIN_FIELDS: int = 4


@dataclass(frozen=True)
class LineIssue:
    """Why one input line was not accepted."""
    line_number: int
    kind: LineIssueKind
    reason: str


@dataclass
class ImportOutcome:
    """Per-run classification of import lines. Not persisted."""
    accepted: list[StudentRecord] = field(default_factory=list)
    duplicate_lines: list[int] = field(default_factory=list)
    invalid_lines: list[int] = field(default_factory=list)
    issues: list[LineIssue] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicate_lines)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid_lines)

    def accept(self, record: StudentRecord) -> None:
        self.accepted.append(record)

    def mark_invalid(self, line_number: int, kind: LineIssueKind, reason: str) -> None:
        self.invalid_lines.append(line_number)
        self.issues.append(LineIssue(line_number, kind, reason))

    def mark_duplicate(self, line_number: int, enrollment_number: str) -> None:
        self.duplicate_lines.append(line_number)
        self.issues.append(LineIssue(
            line_number, LineIssueKind.DUPLICATE,
            f"enrollment number '{enrollment_number}' already exists",
        ))


def is_header_line(line: str) -> bool:
    folded = line.casefold()
    return any(token.casefold() in folded for token in HEADER_TOKENS)


def split_csv_line(line: str) -> list[str] | None:
    """Split one physical line with RFC-4180 quoting. None if the reader rejects it.

    Spaces after a delimiter are skipped, so `, "Doe, Jr."` is one quoted field.
    """
    try:
        return next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error:
        return None


def parse_record_fields(
    fields: list[str], id_factory: Callable[[], StudentId],
) -> StudentRecord | str:
    """Build a record from split fields, or return the validation failure reason."""
    enrollment_number = fields[0].strip()
    first_name = fields[1].strip()
    last_name = fields[2].strip()
    date_of_birth = parse_calendar_date(fields[3])

    if not enrollment_number:
        return "enrollment number is empty"
    if not first_name:
        return "first name is empty"
    if date_of_birth is None:
        return f"date of birth '{fields[3].strip()}' is not a recognized calendar date"
    if len(enrollment_number) > ENROLLMENT_NUMBER_MAX_LENGTH:
        return f"enrollment number is longer than {ENROLLMENT_NUMBER_MAX_LENGTH} characters"
    if len(first_name) > NAME_MAX_LENGTH or len(last_name) > NAME_MAX_LENGTH:
        return f"name is longer than {NAME_MAX_LENGTH} characters"

    return StudentRecord(
        internal_id=id_factory(),
        enrollment_number=enrollment_number,
        first_name=first_name,
        last_name=last_name or None,
        date_of_birth=date_of_birth,
    )


def reconcile_lines(
    lines: Iterable[str],
    existing_numbers: Iterable[str],
    id_factory: Callable[[], StudentId] = new_student_id,
) -> ImportOutcome:
    """Classify decoded text lines (line terminators optional)."""
    seen = {enrollment_key(n) for n in existing_numbers}
    outcome = ImportOutcome()

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue
        if line_number == 1 and is_header_line(line):
            continue

        fields = split_csv_line(line)
        if fields is None:
            outcome.mark_invalid(
                line_number, LineIssueKind.STRUCTURAL, "line is not valid CSV",
            )
            continue
        if len(fields) < MIN_FIELDS:
            outcome.mark_invalid(
                line_number, LineIssueKind.STRUCTURAL,
                f"expected at least {MIN_FIELDS} fields, got {len(fields)}",
            )
            continue

        parsed = parse_record_fields(fields, id_factory)
        if isinstance(parsed, str):
            outcome.mark_invalid(line_number, LineIssueKind.VALIDATION, parsed)
            continue

        key = enrollment_key(parsed.enrollment_number)
        if key in seen:
            outcome.mark_duplicate(line_number, parsed.enrollment_number)
            continue

        outcome.accept(parsed)
        seen.add(key)

    return outcome


def reconcile_import(
    stream: BinaryIO,
    existing_numbers: Iterable[str],
    id_factory: Callable[[], StudentId] = new_student_id,
) -> ImportOutcome:
    """Reconcile a UTF-8 CSV byte stream against existing enrollment numbers.

    The stream is always closed before returning or raising. A decoding or
    read failure aborts the whole run with ImportFileError; nothing partial
    is returned in that case.
    """
    try:
        with io.TextIOWrapper(stream, encoding="utf-8-sig", newline=None) as text:
            outcome = reconcile_lines(text, existing_numbers, id_factory)
    except UnicodeDecodeError as e:
        raise ImportFileError(
            "Import file is not valid UTF-8 text",
            ErrorContext(debug_info={"position": e.start, "reason": e.reason}),
        )
    except OSError as e:
        raise ImportFileError(
            "Import file could not be read", ErrorContext(debug_info={"reason": str(e)}),
        )
    finally:
        if not stream.closed:
            stream.close()

    return outcome
