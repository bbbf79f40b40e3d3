"""Therapist-side assignment endpoints — assign, list, update and pre-configure.

Authentication and client ownership are enforced upstream (API gateway);
these endpoints trust the ``client_id`` in the path.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from stepladder_db.models.enums import AssignmentStatus
from stepladder_worksheets.manager import AssignmentManager
from stepladder_worksheets.models.assignment import (
    ApiModel,
    WorksheetAssignment,
    WorksheetResponse,
)

from stepladder_server.dependencies import get_db, get_manager

router = APIRouter(tags=["assignments"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateAssignmentRequest(ApiModel):
    """Body for POST /clients/{client_id}/assignments."""
    worksheet_id: str
    due_date: date | None = None
    note: str | None = None
    clinician_config_values: dict[str, Any] | None = None


class StatusUpdateRequest(ApiModel):
    """Body for PATCH /assignments/{id}/status."""
    status: AssignmentStatus


class ValuesRequest(ApiModel):
    """Body carrying a field-id → value map."""
    values: dict[str, Any] = Field(default_factory=dict)


class ResponseRequest(ValuesRequest):
    """Body for PUT /assignments/{id}/response; ``submittedAt`` defaults to now."""
    submitted_at: datetime | None = None


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/clients/{client_id}/assignments", status_code=201)
async def create_assignment(
    client_id: str,
    body: CreateAssignmentRequest,
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> WorksheetAssignment:
    """Assign a catalog worksheet to a client.

    Returns 201 on success.  Raises 400 if the worksheet id is not in the
    catalog.
    """
    return await manager.create_assignment(
        db,
        client_id=client_id,
        worksheet_id=body.worksheet_id,
        due_date=body.due_date,
        note=body.note,
        clinician_config_values=body.clinician_config_values,
    )


@router.get("/clients/{client_id}/assignments")
async def list_client_assignments(
    client_id: str,
    status: AssignmentStatus | None = Query(None),
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> list[WorksheetAssignment]:
    """List a client's assignments, most recently assigned first."""
    return await manager.list_by_client(db, client_id, status=status)


@router.get("/assignments/{assignment_id}")
async def get_assignment(
    assignment_id: str,
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> WorksheetAssignment:
    """Get one assignment.  Raises 404 if it does not exist."""
    assignment = await manager.get_assignment(db, assignment_id)
    if assignment is None:
        raise ValueError(f"Assignment not found: {assignment_id}")
    return assignment


@router.patch("/assignments/{assignment_id}/status")
async def update_assignment_status(
    assignment_id: str,
    body: StatusUpdateRequest,
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> WorksheetAssignment:
    """Move an assignment forward (therapist override).

    Raises 404 if it does not exist, 409 for a backward move.
    """
    assignment = await manager.update_status(db, assignment_id, body.status)
    if assignment is None:
        raise ValueError(f"Assignment not found: {assignment_id}")
    return assignment


@router.put("/assignments/{assignment_id}/response")
async def save_assignment_response(
    assignment_id: str,
    body: ResponseRequest,
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> WorksheetAssignment:
    """Overwrite the stored response; the first save starts the assignment."""
    response = WorksheetResponse(values=body.values)
    if body.submitted_at is not None:
        response.submitted_at = body.submitted_at
    assignment = await manager.save_response(db, assignment_id, response)
    if assignment is None:
        raise ValueError(f"Assignment not found: {assignment_id}")
    return assignment


@router.put("/assignments/{assignment_id}/config")
async def configure_assignment(
    assignment_id: str,
    body: ValuesRequest,
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> WorksheetAssignment:
    """Replace the clinician pre-fill.  An empty map clears it."""
    assignment = await manager.configure(db, assignment_id, body.values)
    if assignment is None:
        raise ValueError(f"Assignment not found: {assignment_id}")
    return assignment
