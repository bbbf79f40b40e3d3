"""Client portal endpoints — fill in and submit an assigned worksheet.

The form is pre-filled with the clinician's configuration overlaid by the
client's saved answers.  Once an assignment is completed the form is
read-only and further submits are rejected with 409.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import Field

from stepladder_worksheets.manager import AssignmentManager
from stepladder_worksheets.models.assignment import ApiModel, WorksheetAssignment
from stepladder_worksheets.models.form import FormView

from stepladder_server.dependencies import get_db, get_manager

router = APIRouter(prefix="/portal", tags=["portal"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class SubmitRequest(ApiModel):
    """Body for POST /portal/assignments/{id}/submit."""
    values: dict[str, Any] = Field(default_factory=dict)
    # False saves a draft without the required-field check
    complete: bool = True


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/assignments/{assignment_id}/form")
async def get_assignment_form(
    assignment_id: str,
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> FormView:
    """Render the assignment's worksheet with its current values.

    Raises 404 if the assignment or its worksheet does not exist.
    """
    built = await manager.build_form(db, assignment_id)
    if built is None:
        raise ValueError(f"Assignment not found: {assignment_id}")
    _, _, form = built
    if form is None:
        raise ValueError(f"Worksheet not found for assignment {assignment_id}")
    return form.render()


@router.post(
    "/assignments/{assignment_id}/submit",
    responses={422: {"description": "Field errors; nothing was saved"}},
)
async def submit_assignment(
    assignment_id: str,
    body: SubmitRequest,
    db=Depends(get_db),
    manager: AssignmentManager = Depends(get_manager),
) -> WorksheetAssignment:
    """Submit the client's answers.

    With ``complete`` (the default) required fields are enforced and the
    assignment is marked completed.  Returns 422 with a field → message map
    when validation fails.
    """
    outcome = await manager.submit_response(
        db, assignment_id, body.values, complete=body.complete,
    )
    if outcome is None:
        raise ValueError(f"Assignment not found: {assignment_id}")
    result, assignment = outcome
    if not result.ok:
        return JSONResponse(status_code=422, content={"errors": result.errors})
    return assignment
