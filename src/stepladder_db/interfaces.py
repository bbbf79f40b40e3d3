"""Abstract repository contract for worksheet assignments.

Two implementations ship with the package:

  - :class:`stepladder_db.repository.SqlAssignmentRepository` — async
    SQLAlchemy, used in production.
  - :class:`stepladder_db.memory.InMemoryAssignmentRepository` — dict-backed,
    used by tests and local demos.

Every method receives the caller's ``db`` handle so the caller controls
transaction boundaries.  The in-memory implementation ignores it.

Update methods take the loaded row rather than an id; resolving an id to a
row (and reporting "not found") is the caller's job.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from stepladder_db.models.assignment import WorksheetAssignmentRow
from stepladder_db.models.enums import AssignmentStatus


class AssignmentRepository(ABC):
    """Persistence operations over worksheet assignments."""

    @abstractmethod
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
        """Insert a new ``assigned`` row stamped with the current time."""

    @abstractmethod
    async def get_by_id(
        self, db: Any, assignment_id: str
    ) -> WorksheetAssignmentRow | None:
        """Fetch one assignment, or ``None`` if the id is unknown."""

    @abstractmethod
    async def list_by_client(
        self, db: Any, client_id: str
    ) -> list[WorksheetAssignmentRow]:
        """All assignments of a client, most recently assigned first."""

    @abstractmethod
    async def update_status(
        self,
        db: Any,
        row: WorksheetAssignmentRow,
        status: AssignmentStatus,
    ) -> WorksheetAssignmentRow:
        """Set the status and bump ``last_updated_at``.

        ``completed_at`` is written only on the first move to ``completed``.
        """

    @abstractmethod
    async def save_response(
        self,
        db: Any,
        row: WorksheetAssignmentRow,
        response: dict[str, Any],
    ) -> WorksheetAssignmentRow:
        """Replace the stored response wholesale.

        An ``assigned`` row moves to ``in_progress``; other statuses are kept.
        """

    @abstractmethod
    async def save_clinician_config(
        self,
        db: Any,
        row: WorksheetAssignmentRow,
        clinician_config: dict[str, Any] | None,
    ) -> WorksheetAssignmentRow:
        """Replace (or clear) the clinician pre-fill."""
