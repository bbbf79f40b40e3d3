"""Create the worksheet_assignments table.

Revision ID: 20261018_assignments
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

# revision identifiers, used by Alembic.
revision = "20261018_assignments"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "worksheet_assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("client_id", sa.Text(), nullable=False),
        sa.Column("worksheet_id", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="assigned"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("clinician_config", JSONB(), nullable=True),
        sa.Column("response", JSONB(), nullable=True),
        sa.Column("assigned_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("last_updated_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('assigned', 'in_progress', 'completed')",
            name="ck_assignment_status",
        ),
        sa.CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
    )
    op.create_index(
        "ix_worksheet_assignments_client_id", "worksheet_assignments", ["client_id"]
    )
    op.create_index(
        "ix_worksheet_assignments_status", "worksheet_assignments", ["status"]
    )
    op.create_index(
        "ix_client_assigned_at", "worksheet_assignments", ["client_id", "assigned_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_client_assigned_at", table_name="worksheet_assignments")
    op.drop_index("ix_worksheet_assignments_status", table_name="worksheet_assignments")
    op.drop_index("ix_worksheet_assignments_client_id", table_name="worksheet_assignments")
    op.drop_table("worksheet_assignments")
