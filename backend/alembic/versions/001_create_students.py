"""Create students table with case-insensitive unique enrollment number.

Revision ID: 001_create_students
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_create_students"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("enrollment_number", sa.String(64), nullable=False),
        sa.Column("first_name", sa.String(200), nullable=False),
        sa.Column("last_name", sa.String(200), nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "uq_students_enrollment_number_lower",
        "students",
        [sa.text("lower(enrollment_number)")],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("uq_students_enrollment_number_lower", table_name="students")
    op.drop_table("students")
