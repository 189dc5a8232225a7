"""SQL Student Repository — SQLAlchemy implementation of the StudentRepository protocol.

Invariants:
    - Every public method maps ORM rows to core StudentRecord (ORM objects never leak out)
    - Prefix match is exact and case-sensitive; "greatest" is ordinal (binary collation)
    - Writes commit immediately; an IntegrityError rolls back and raises DuplicateEnrollmentError
    - insert_many commits once: either every record is visible or none is
    - enrollment_number is never written by update()

Design Decisions:
    - substr(...) = prefix instead of LIKE: SQLite LIKE is case-insensitive and treats % and _ specially
    - PostgreSQL ordering forced to the "C" collation so descending order is code-point order
"""

import logging
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from student_registry.core.domain_types import StudentId, StudentRecord
from student_registry.core.errors import (
    DuplicateEnrollmentError, ErrorContext, ResourceNotFoundError,
)
from student_registry.models.student import Student

logger = logging.getLogger(__name__)


class SqlStudentRepository:
    """Student persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self) -> list[StudentRecord]:
        result = await self.db.execute(
            select(Student).order_by(Student.created_at, Student.id),
        )
        return [s.to_record() for s in result.scalars().all()]

    async def find_all_enrollment_numbers(self) -> list[str]:
        result = await self.db.execute(select(Student.enrollment_number))
        return list(result.scalars().all())

    async def find_by_id(self, student_id: StudentId) -> StudentRecord | None:
        student = await self.db.get(Student, student_id)
        return student.to_record() if student else None

    async def find_greatest_enrollment_number_with_prefix(
        self, prefix: str,
    ) -> str | None:
        """Greatest number starting with prefix, ordinal descending, or None."""
        ordered = Student.enrollment_number
        if self.db.get_bind().dialect.name == "postgresql":
            ordered = ordered.collate("C")
        result = await self.db.execute(
            select(Student.enrollment_number)
            .where(func.substr(Student.enrollment_number, 1, len(prefix)) == prefix)
            .order_by(ordered.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert(self, record: StudentRecord) -> None:
        self.db.add(Student.from_record(record))
        await self._commit_or_conflict(
            f"Enrollment number '{record.enrollment_number}' is already taken",
            record.enrollment_number,
        )

    async def insert_many(self, records: Sequence[StudentRecord]) -> None:
        """Persist all records in one transaction."""
        if not records:
            return
        self.db.add_all([Student.from_record(r) for r in records])
        await self._commit_or_conflict(
            "Import batch conflicts with an existing enrollment number; nothing was saved",
            None,
        )

    async def update(self, record: StudentRecord) -> None:
        student = await self.db.get(Student, record.internal_id)
        if not student:
            raise ResourceNotFoundError("Student", record.internal_id)
        student.first_name = record.first_name
        student.last_name = record.last_name
        student.date_of_birth = record.date_of_birth
        await self.db.commit()

    async def delete(self, student_id: StudentId) -> bool:
        student = await self.db.get(Student, student_id)
        if not student:
            return False
        await self.db.delete(student)
        await self.db.commit()
        return True

    async def _commit_or_conflict(
        self, message: str, enrollment_number: str | None,
    ) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Uniqueness conflict on commit: {e.orig}",
                extra={"enrollment_number": enrollment_number},
            )
            raise DuplicateEnrollmentError(
                message, ErrorContext(enrollment_number=enrollment_number),
            )
