"""Async SQLAlchemy repository for worksheet assignments.

All public methods accept an ``AsyncSession`` and call ``flush()`` but never
``commit()``; the caller owns the transaction.

Business rules (template existence, backward-transition guard, clinician
value filtering) live in the SDK layer.  The repository only keeps the
record-level bookkeeping: timestamps and the implicit
``assigned -> in_progress`` move on the first response.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stepladder_db.interfaces import AssignmentRepository
from stepladder_db.models.assignment import WorksheetAssignmentRow
from stepladder_db.models.enums import AssignmentStatus


class SqlAssignmentRepository(AssignmentRepository):
    """Read/write operations on the ``worksheet_assignments`` table."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_assignment(
        self,
        db: AsyncSession,
        *,
        client_id: str,
        worksheet_id: str,
        due_date: date | None = None,
        note: str | None = None,
        clinician_config: dict[str, Any] | None = None,
    ) -> WorksheetAssignmentRow:
        now = datetime.now(timezone.utc)
        row = WorksheetAssignmentRow(
            id=str(uuid.uuid4()),
            client_id=client_id,
            worksheet_id=worksheet_id,
            status=AssignmentStatus.ASSIGNED,
            due_date=due_date,
            note=note,
            clinician_config=clinician_config,
            assigned_at=now,
            last_updated_at=now,
        )
        db.add(row)
        await db.flush()
        return row

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(
        self, db: AsyncSession, assignment_id: str
    ) -> WorksheetAssignmentRow | None:
        return await db.get(WorksheetAssignmentRow, assignment_id)

    async def list_by_client(
        self, db: AsyncSession, client_id: str
    ) -> list[WorksheetAssignmentRow]:
        stmt = (
            select(WorksheetAssignmentRow)
            .where(WorksheetAssignmentRow.client_id == client_id)
            .order_by(WorksheetAssignmentRow.assigned_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_status(
        self,
        db: AsyncSession,
        row: WorksheetAssignmentRow,
        status: AssignmentStatus,
    ) -> WorksheetAssignmentRow:
        row.apply_status(status, datetime.now(timezone.utc))
        await db.flush()
        return row

    async def save_response(
        self,
        db: AsyncSession,
        row: WorksheetAssignmentRow,
        response: dict[str, Any],
    ) -> WorksheetAssignmentRow:
        # Fresh dict so SQLAlchemy sees the JSON column as changed
        row.apply_response(dict(response), datetime.now(timezone.utc))
        await db.flush()
        return row

    async def save_clinician_config(
        self,
        db: AsyncSession,
        row: WorksheetAssignmentRow,
        clinician_config: dict[str, Any] | None,
    ) -> WorksheetAssignmentRow:
        row.clinician_config = dict(clinician_config) if clinician_config else None
        row.last_updated_at = datetime.now(timezone.utc)
        await db.flush()
        return row
