"""Assignment models — the contract between the SDK and its callers.

These models are intentionally decoupled from the ORM row in
``stepladder_db`` so API consumers never see database internals.  JSON keys
are camelCase to match the persisted/public shape
(``clientId``, ``clinicianConfig``, ``submittedAt`` ...).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stepladder_db.models.enums import AssignmentStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiModel(BaseModel):
    """Mutable public model with camelCase JSON aliases."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ClinicianConfig(ApiModel):
    """Values a therapist pre-filled, keyed by field id."""

    values: dict[str, Any] = Field(default_factory=dict)
    configured_at: datetime = Field(default_factory=_utcnow)


class WorksheetResponse(ApiModel):
    """The client's latest answers, keyed by field id."""

    values: dict[str, Any] = Field(default_factory=dict)
    submitted_at: datetime = Field(default_factory=_utcnow)


class WorksheetAssignment(ApiModel):
    """Public view of one assignment."""

    id: str
    client_id: str
    worksheet_id: str
    status: AssignmentStatus
    assigned_at: datetime
    last_updated_at: datetime
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    note: Optional[str] = None
    clinician_config: Optional[ClinicianConfig] = None
    response: Optional[WorksheetResponse] = None

    def effective_values(self) -> dict[str, Any]:
        """Defaults shown to the client: clinician pre-fill, then own answers.

        On a key collision the client's response wins.
        """
        return {
            **(self.clinician_config.values if self.clinician_config else {}),
            **(self.response.values if self.response else {}),
        }
