"""Student Routes — CRUD, CSV import and CSV export for student records.

Invariants:
    - Routes never contain business logic (delegate to StudentService)
    - RegistryErrors propagate to the global handlers (uniform error envelope)
    - /export and /import are registered before /{student_id}
"""

from datetime import date

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from student_registry.core.domain_types import StudentId
from student_registry.schemas.student import (
    ImportResultResponse,
    StudentCreate,
    StudentResponse,
    StudentSummary,
    StudentUpdate,
)
from student_registry.services.student_service import (
    StudentService, get_student_service,
)

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get("", response_model=list[StudentSummary])
async def list_students(service: StudentService = Depends(get_student_service)):
    """List all students with display name, age and decoded cohort codes."""
    records = await service.list_students()
    today = date.today()
    return [StudentSummary.from_record(r, today) for r in records]


@router.get("/export")
async def export_students(service: StudentService = Depends(get_student_service)):
    """Download every record as CSV."""
    content, file_name = await service.export_students()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.post("/import", response_model=ImportResultResponse)
async def import_students(
    file: UploadFile | None = File(None),
    service: StudentService = Depends(get_student_service),
):
    """Import a CSV of enrollment number, first name, last name, date of birth."""
    outcome = await service.import_students(file.file if file else None)
    return ImportResultResponse.from_outcome(outcome)


@router.post(
    "", response_model=StudentResponse, status_code=status.HTTP_201_CREATED,
)
async def create_student(
    body: StudentCreate, service: StudentService = Depends(get_student_service),
):
    """Create a student; the enrollment number is allocated from the cohort codes."""
    record = await service.create_student(body)
    return StudentResponse.from_record(record)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str, service: StudentService = Depends(get_student_service),
):
    record = await service.get_student(StudentId(student_id))
    return StudentResponse.from_record(record)


@router.put("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_student(
    student_id: str,
    body: StudentUpdate,
    service: StudentService = Depends(get_student_service),
):
    await service.update_student(StudentId(student_id), body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: str, service: StudentService = Depends(get_student_service),
):
    await service.delete_student(StudentId(student_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
