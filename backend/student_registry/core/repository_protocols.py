"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - insert/insert_many/update raise DuplicateEnrollmentError on a uniqueness conflict;
      insert_many is all-or-nothing

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do IO, but the core functions that consume
      their results (allocate_enrollment_number, reconcile_import) are never async
"""

from typing import Protocol, Sequence

from student_registry.core.domain_types import StudentId, StudentRecord


class StudentRepository(Protocol):
    """Contract for student persistence — implemented by shell."""
    async def find_all(self) -> list[StudentRecord]: ...
    async def find_all_enrollment_numbers(self) -> list[str]: ...
    async def find_by_id(self, student_id: StudentId) -> StudentRecord | None: ...
    async def find_greatest_enrollment_number_with_prefix(
        self, prefix: str,
    ) -> str | None: ...
    async def insert(self, record: StudentRecord) -> None: ...
    async def insert_many(self, records: Sequence[StudentRecord]) -> None: ...
    async def update(self, record: StudentRecord) -> None: ...
    async def delete(self, student_id: StudentId) -> bool: ...
