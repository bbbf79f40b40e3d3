"""WorksheetAssignmentRow ORM model — one row per (template, client) binding.

The row is stored flat: the clinician pre-fill and the latest client
response live in JSON columns shaped like the public models, so a single
fetch is enough to render the worksheet for either party.
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import JSON, CheckConstraint, Date, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from stepladder_db.models.base import Base
from stepladder_db.models.enums import AssignmentStatus

# JSONB on PostgreSQL, plain JSON elsewhere
_JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorksheetAssignmentRow(Base):
    """Persisted worksheet assignment.

    There is no version column: concurrent writers to the same row race and
    the last write wins.
    """

    __tablename__ = "worksheet_assignments"

    # --- Identity ---
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    # External client ID (the practice-management client record)
    client_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # Catalog template id, e.g. "cbt-thought-record"
    worksheet_id: Mapped[str] = mapped_column(Text, nullable=False)

    # --- Lifecycle ---
    status: Mapped[AssignmentStatus] = mapped_column(
        # Store the lowercase value, not the Python name
        String(20),
        nullable=False,
        default=AssignmentStatus.ASSIGNED,
        index=True,
    )

    # --- Therapist-supplied metadata ---
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Shape: {"values": {field_id: value}, "configured_at": "ISO8601"}
    clinician_config: Mapped[dict | None] = mapped_column(_JSONType, nullable=True)
    # Shape: {"values": {field_id: value}, "submitted_at": "ISO8601"}
    # Single latest response; earlier submissions are overwritten.
    response: Mapped[dict | None] = mapped_column(_JSONType, nullable=True)

    # --- Timestamps ---
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    last_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    # Written once, on the first transition to completed
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('assigned', 'in_progress', 'completed')",
            name="ck_assignment_status",
        ),
        CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
        # Client overview lists assignments newest first
        Index("ix_client_assigned_at", "client_id", "assigned_at"),
    )

    # ------------------------------------------------------------------
    # In-place mutations shared by every repository implementation
    # ------------------------------------------------------------------

    def apply_status(self, status: AssignmentStatus, now: datetime) -> None:
        """Set the status; stamp ``completed_at`` only the first time."""
        self.status = status
        self.last_updated_at = now
        if status == AssignmentStatus.COMPLETED and self.completed_at is None:
            self.completed_at = now

    def apply_response(self, response: dict, now: datetime) -> None:
        """Overwrite the response; the first save marks work as started."""
        self.response = response
        self.last_updated_at = now
        if self.status == AssignmentStatus.ASSIGNED:
            self.status = AssignmentStatus.IN_PROGRESS

    def __repr__(self) -> str:
        return (
            f"<WorksheetAssignmentRow(id={self.id!r}, client={self.client_id!r}, "
            f"worksheet={self.worksheet_id!r}, status={self.status!r})>"
        )
