"""Student ORM — persists a student's identity and enrollment number.

Invariants:
    - id is the opaque internal key (UUID4 string), never shown as the enrollment number
    - enrollment_number is unique case-insensitively (unique index on lower(enrollment_number))
    - last_name is NULL when blank
    - enrollment_number is written once at insert and never updated
    - created_at is strictly increasing within a process, so store order is insertion order
      even for rows written by one batch

Design Decisions:
    - String id over native UUID: identical behavior on SQLite and PostgreSQL
    - Functional unique index: the store enforces uniqueness even when two
      allocations race past the service-level lock
"""

import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import Date, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from student_registry.core.domain_types import (
    ENROLLMENT_NUMBER_MAX_LENGTH, NAME_MAX_LENGTH, StudentId, StudentRecord,
)
from student_registry.db.base import Base

_last_created_at: datetime | None = None


def next_created_at(now: datetime | None = None) -> datetime:
    """UTC timestamp strictly greater than the previous one handed out."""
    global _last_created_at
    now = now or datetime.now(timezone.utc)
    if _last_created_at is not None and now <= _last_created_at:
        now = _last_created_at + timedelta(microseconds=1)
    _last_created_at = now
    return now


class Student(Base):
    """Student row — maps 1:1 to core StudentRecord."""
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    enrollment_number: Mapped[str] = mapped_column(
        String(ENROLLMENT_NUMBER_MAX_LENGTH), nullable=False,
    )
    first_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(NAME_MAX_LENGTH), nullable=True)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: next_created_at(),
    )

    @classmethod
    def from_record(cls, record: StudentRecord) -> "Student":
        return cls(
            id=record.internal_id,
            enrollment_number=record.enrollment_number,
            first_name=record.first_name,
            last_name=record.last_name,
            date_of_birth=record.date_of_birth,
        )

    def to_record(self) -> StudentRecord:
        return StudentRecord(
            internal_id=StudentId(self.id),
            enrollment_number=self.enrollment_number,
            first_name=self.first_name,
            last_name=self.last_name,
            date_of_birth=self.date_of_birth,
        )


Index(
    "uq_students_enrollment_number_lower",
    func.lower(Student.enrollment_number),
    unique=True,
)
