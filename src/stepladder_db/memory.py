"""Dict-backed AssignmentRepository.

Rows are real :class:`WorksheetAssignmentRow` instances that never touch a
database session, so the SDK sees exactly the same attributes as with the
SQL repository.  Not safe for use across processes.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any

from stepladder_db.interfaces import AssignmentRepository
from stepladder_db.models.assignment import WorksheetAssignmentRow
from stepladder_db.models.enums import AssignmentStatus


class InMemoryAssignmentRepository(AssignmentRepository):
    """Keeps assignments in a dict keyed by assignment id."""

    def __init__(self) -> None:
        self._rows: dict[str, WorksheetAssignmentRow] = {}

    def __len__(self) -> int:
        return len(self._rows)

    async def create_assignment(
        self,
        db: Any,
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
            completed_at=None,
            response=None,
        )
        self._rows[row.id] = row
        return row

    async def get_by_id(
        self, db: Any, assignment_id: str
    ) -> WorksheetAssignmentRow | None:
        return self._rows.get(assignment_id)

    async def list_by_client(
        self, db: Any, client_id: str
    ) -> list[WorksheetAssignmentRow]:
        rows = [r for r in self._rows.values() if r.client_id == client_id]
        # Stable sort: equal timestamps keep insertion order reversed
        return sorted(reversed(rows), key=lambda r: r.assigned_at, reverse=True)

    async def update_status(
        self,
        db: Any,
        row: WorksheetAssignmentRow,
        status: AssignmentStatus,
    ) -> WorksheetAssignmentRow:
        row.apply_status(status, datetime.now(timezone.utc))
        return row

    async def save_response(
        self,
        db: Any,
        row: WorksheetAssignmentRow,
        response: dict[str, Any],
    ) -> WorksheetAssignmentRow:
        row.apply_response(dict(response), datetime.now(timezone.utc))
        return row

    async def save_clinician_config(
        self,
        db: Any,
        row: WorksheetAssignmentRow,
        clinician_config: dict[str, Any] | None,
    ) -> WorksheetAssignmentRow:
        row.clinician_config = dict(clinician_config) if clinician_config else None
        row.last_updated_at = datetime.now(timezone.utc)
        return row
