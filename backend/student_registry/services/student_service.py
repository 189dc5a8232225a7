"""Student Service — orchestrates IO around the pure allocator, reconciler and export formatter.

Invariants:
    - Allocate-then-insert for one prefix runs under that prefix's asyncio.Lock
    - A store conflict on insert re-allocates and retries, at most allocation_max_attempts times,
      then surfaces as DuplicateEnrollmentError (409)
    - Import loads existing numbers once, reconciles, then writes accepted records in ONE insert_many,
      and only when at least one record was accepted
    - An absent, empty or oversized import stream fails before any line is read
    - The import stream is closed on every exit path
    - enrollment_number is never changed by update_student

Design Decisions:
    - _prefix_locks as module-level WeakValueDictionary: serializes allocation within one process
      and forgets a prefix once no creation holds or awaits its lock;
      across processes the unique index on lower(enrollment_number) is the guard
    - Service receives the repository by Protocol type so tests can pass a fake
"""

import asyncio
import dataclasses
import logging
import os
import weakref
from datetime import datetime
from typing import BinaryIO

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_registry.config import Settings, get_settings
from student_registry.core.csv_export import export_file_name, format_export
from student_registry.core.domain_types import StudentId, StudentRecord, new_student_id
from student_registry.core.enrollment_number import (
    allocate_enrollment_number, build_prefix,
)
from student_registry.core.errors import (
    DuplicateEnrollmentError, ErrorContext, ImportFileError, ResourceNotFoundError,
)
from student_registry.core.reconcile_import import ImportOutcome, reconcile_import
from student_registry.core.repository_protocols import StudentRepository
from student_registry.infrastructure.database import get_db
from student_registry.schemas.student import StudentCreate, StudentUpdate
from student_registry.services.student_repository import SqlStudentRepository

logger = logging.getLogger(__name__)

_prefix_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
    weakref.WeakValueDictionary()
)


def _prefix_lock(prefix: str) -> asyncio.Lock:
    """Lock shared by every in-flight creation for prefix; dropped once none holds it."""
    lock = _prefix_locks.get(prefix)
    if lock is None:
        lock = asyncio.Lock()
        _prefix_locks[prefix] = lock
    return lock


class StudentService:
    """Use cases for student records."""

    def __init__(self, repository: StudentRepository, settings: Settings | None = None):
        self.repository = repository
        self.settings = settings or get_settings()

    async def list_students(self) -> list[StudentRecord]:
        return await self.repository.find_all()

    async def get_student(self, student_id: StudentId) -> StudentRecord:
        record = await self.repository.find_by_id(student_id)
        if record is None:
            raise ResourceNotFoundError(
                "Student", student_id, ErrorContext(student_id=student_id),
            )
        return record

    async def create_student(self, data: StudentCreate) -> StudentRecord:
        """Allocate the next enrollment number for the cohort and persist the record."""
        prefix = build_prefix(
            data.faculty_code, data.level_code, data.program_code, data.cohort_year,
        )
        max_attempts = max(1, self.settings.allocation_max_attempts)

        lock = _prefix_lock(prefix)
        async with lock:
            attempt = 0
            while True:
                attempt += 1
                last_number = (
                    await self.repository.find_greatest_enrollment_number_with_prefix(prefix)
                )
                enrollment_number = allocate_enrollment_number(
                    data.faculty_code, data.level_code, data.program_code,
                    data.cohort_year, last_number,
                )
                record = StudentRecord(
                    internal_id=new_student_id(),
                    enrollment_number=enrollment_number,
                    first_name=data.first_name,
                    last_name=data.last_name,
                    date_of_birth=data.date_of_birth,
                )
                try:
                    await self.repository.insert(record)
                except DuplicateEnrollmentError:
                    logger.warning(
                        f"Enrollment number collision for prefix {prefix}",
                        extra={"enrollment_number": enrollment_number, "attempt": attempt},
                    )
                    if attempt >= max_attempts:
                        raise
                    continue
                logger.info(
                    "Student created",
                    extra={
                        "student_id": record.internal_id,
                        "enrollment_number": enrollment_number,
                    },
                )
                return record

    async def update_student(
        self, student_id: StudentId, data: StudentUpdate,
    ) -> StudentRecord:
        existing = await self.get_student(student_id)
        updated = dataclasses.replace(
            existing,
            first_name=data.first_name,
            last_name=data.last_name,
            date_of_birth=data.date_of_birth,
        )
        await self.repository.update(updated)
        logger.info("Student updated", extra={"student_id": student_id})
        return updated

    async def delete_student(self, student_id: StudentId) -> None:
        deleted = await self.repository.delete(student_id)
        if not deleted:
            raise ResourceNotFoundError(
                "Student", student_id, ErrorContext(student_id=student_id),
            )
        logger.info("Student deleted", extra={"student_id": student_id})

    async def import_students(self, stream: BinaryIO | None) -> ImportOutcome:
        """Reconcile an uploaded CSV and persist the accepted records in one batch."""
        if stream is None:
            raise ImportFileError("A CSV file is required.")
        try:
            self._check_import_size(stream)
            existing_numbers = await self.repository.find_all_enrollment_numbers()
        except Exception:
            stream.close()
            raise

        outcome = reconcile_import(stream, existing_numbers)
        if outcome.accepted_count > 0:
            await self.repository.insert_many(outcome.accepted)

        logger.info(
            "Import completed",
            extra={
                "accepted": outcome.accepted_count,
                "duplicates": outcome.duplicate_count,
                "invalid": outcome.invalid_count,
            },
        )
        return outcome

    async def export_students(self, now: datetime | None = None) -> tuple[bytes, str]:
        """CSV bytes of every record in store order, plus a suggested file name."""
        records = await self.repository.find_all()
        return format_export(records), export_file_name(now)

    def _check_import_size(self, stream: BinaryIO) -> None:
        try:
            size = stream.seek(0, os.SEEK_END)
            stream.seek(0)
        except (OSError, ValueError) as e:
            logger.warning(f"Import stream is not seekable: {e}")
            raise ImportFileError("Import file could not be read")
        if size == 0:
            raise ImportFileError("A CSV file is required.")
        if size > self.settings.import_max_bytes:
            raise ImportFileError(
                f"Import file exceeds {self.settings.import_max_bytes} bytes",
            )


def get_student_service(db: AsyncSession = Depends(get_db)) -> StudentService:
    """FastAPI dependency — one service (and repository) per request session."""
    return StudentService(SqlStudentRepository(db), get_settings())
