"""AssignmentManager — binds catalog templates to clients and tracks progress.

Stateless orchestrator: every call loads the assignment from the repository,
applies the lifecycle rules, persists and returns a public
:class:`WorksheetAssignment`.  No state is kept between calls.

The manager accepts the caller's DB session (``AsyncSession`` for the SQL
repository, anything for the in-memory one) so the caller controls
transaction boundaries.  Repository methods ``flush()``; the caller commits.

Absent assignments are reported as ``None``, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

from stepladder_db.interfaces import AssignmentRepository
from stepladder_db.models.assignment import WorksheetAssignmentRow
from stepladder_db.models.enums import AssignmentStatus
from stepladder_db.repository import SqlAssignmentRepository

from stepladder_worksheets.errors import ReadOnlyFormError, TemplateNotFoundError
from stepladder_worksheets.forms import WorksheetForm, normalize_values
from stepladder_worksheets.lifecycle import (
    check_transition,
    coerce_status,
    status_after_response,
)
from stepladder_worksheets.models.assignment import (
    ClinicianConfig,
    WorksheetAssignment,
    WorksheetResponse,
)
from stepladder_worksheets.models.form import SubmitResult
from stepladder_worksheets.models.template import WorksheetTemplate
from stepladder_worksheets.registry import TemplateStore

logger = logging.getLogger(__name__)


class AssignmentManager:
    """Creates, updates and renders worksheet assignments.

    Args:
        store: a loaded :class:`TemplateStore`
        repo: persistence backend; defaults to the SQL repository
    """

    def __init__(
        self,
        store: TemplateStore,
        repo: AssignmentRepository | None = None,
    ) -> None:
        self._store = store
        self._repo = repo if repo is not None else SqlAssignmentRepository()

    @property
    def store(self) -> TemplateStore:
        return self._store

    # ==================================================================
    # Create / read
    # ==================================================================

    async def create_assignment(
        self,
        db: Any,
        *,
        client_id: str,
        worksheet_id: str,
        due_date: date | None = None,
        note: str | None = None,
        clinician_config_values: Mapping[str, Any] | None = None,
    ) -> WorksheetAssignment:
        """Assign a catalog worksheet to a client.

        The assignment starts as ``assigned``.  Clinician values are kept
        only for fields the template marks as clinician-configurable.

        Raises:
            TemplateNotFoundError: ``worksheet_id`` is not in the catalog.
        """
        template = self._store.get_by_id(worksheet_id)
        if template is None:
            raise TemplateNotFoundError(worksheet_id)

        config = self._build_config(template, clinician_config_values)
        row = await self._repo.create_assignment(
            db,
            client_id=client_id,
            worksheet_id=worksheet_id,
            due_date=due_date,
            note=note,
            clinician_config=config,
        )
        logger.info(
            "Assigned %s to client %s (assignment %s)", worksheet_id, client_id, row.id
        )
        return self._to_assignment(row)

    async def get_assignment(
        self, db: Any, assignment_id: str
    ) -> WorksheetAssignment | None:
        """Fetch one assignment.  Returns None if not found."""
        row = await self._repo.get_by_id(db, assignment_id)
        if row is None:
            return None
        return self._to_assignment(row)

    async def list_by_client(
        self,
        db: Any,
        client_id: str,
        *,
        status: AssignmentStatus | str | None = None,
    ) -> list[WorksheetAssignment]:
        """A client's assignments, most recently assigned first."""
        rows = await self._repo.list_by_client(db, client_id)
        if status is not None:
            wanted = coerce_status(status)
            rows = [r for r in rows if coerce_status(r.status) == wanted]
        return [self._to_assignment(r) for r in rows]

    # ==================================================================
    # Update
    # ==================================================================

    async def update_status(
        self,
        db: Any,
        assignment_id: str,
        status: AssignmentStatus | str,
    ) -> WorksheetAssignment | None:
        """Move an assignment forward.

        Completing twice keeps the first ``completed_at``.

        Raises:
            StatusTransitionError: the move would go backwards.
        """
        row = await self._repo.get_by_id(db, assignment_id)
        if row is None:
            return None
        new_status = check_transition(row.status, status)
        row = await self._repo.update_status(db, row, new_status)
        if new_status == AssignmentStatus.COMPLETED:
            logger.info("Assignment %s completed", assignment_id)
        return self._to_assignment(row)

    async def save_response(
        self,
        db: Any,
        assignment_id: str,
        response: WorksheetResponse | Mapping[str, Any],
    ) -> WorksheetAssignment | None:
        """Overwrite the stored response.

        ``response`` is a :class:`WorksheetResponse`, a ``{values,
        submittedAt}`` mapping, or a bare value map (stamped with the current
        time).  Keys are stored as given.
        """
        row = await self._repo.get_by_id(db, assignment_id)
        if row is None:
            return None
        if not isinstance(response, WorksheetResponse):
            if _is_response_shaped(response):
                response = WorksheetResponse.model_validate(dict(response))
            else:
                response = WorksheetResponse(values=dict(response))

        before = coerce_status(row.status)
        row = await self._repo.save_response(
            db, row, response.model_dump(mode="json", by_alias=True)
        )
        if status_after_response(before) != before:
            logger.debug("Assignment %s started", assignment_id)
        return self._to_assignment(row)

    async def configure(
        self,
        db: Any,
        assignment_id: str,
        values: Mapping[str, Any] | None,
    ) -> WorksheetAssignment | None:
        """Replace the clinician pre-fill of an existing assignment."""
        row = await self._repo.get_by_id(db, assignment_id)
        if row is None:
            return None
        template = self._store.get_by_id(row.worksheet_id)
        if template is None:
            raise TemplateNotFoundError(row.worksheet_id)
        row = await self._repo.save_clinician_config(
            db, row, self._build_config(template, values)
        )
        return self._to_assignment(row)

    # ==================================================================
    # Client portal
    # ==================================================================

    async def build_form(
        self,
        db: Any,
        assignment_id: str,
        *,
        read_only: bool | None = None,
    ) -> tuple[WorksheetAssignment, Optional[WorksheetTemplate], Optional[WorksheetForm]] | None:
        """Prepare the worksheet form for an assignment.

        Defaults are the clinician pre-fill overlaid by the client's saved
        answers.  ``read_only`` defaults to True once the assignment is
        completed.  When the template has left the catalog the template and
        form are ``None``.  Returns None if the assignment is not found.
        """
        row = await self._repo.get_by_id(db, assignment_id)
        if row is None:
            return None
        assignment = self._to_assignment(row)
        template = self._store.get_by_id(assignment.worksheet_id)
        if template is None:
            logger.warning(
                "Assignment %s references missing worksheet %s",
                assignment_id,
                assignment.worksheet_id,
            )
            return assignment, None, None

        defaults = assignment.effective_values()
        stale = sorted(set(defaults) - set(template.field_ids))
        if stale:
            logger.warning(
                "Assignment %s has values for unknown fields %s; ignoring",
                assignment_id,
                stale,
            )
        if read_only is None:
            read_only = assignment.status == AssignmentStatus.COMPLETED
        return assignment, template, WorksheetForm(template, defaults, read_only=read_only)

    async def submit_response(
        self,
        db: Any,
        assignment_id: str,
        values: Mapping[str, Any],
        *,
        complete: bool = True,
    ) -> tuple[SubmitResult, WorksheetAssignment] | None:
        """Client submit: validate, save the response and optionally complete.

        ``values`` are overlaid on the form's defaults.  With
        ``complete=True`` required fields are enforced and nothing is
        persisted when validation fails; ``complete=False`` saves a draft
        without the required check.  Returns None if not found.

        Raises:
            ReadOnlyFormError: the assignment is already completed.
            TemplateNotFoundError: the worksheet left the catalog.
        """
        built = await self.build_form(db, assignment_id)
        if built is None:
            return None
        assignment, template, form = built
        if form is None:
            raise TemplateNotFoundError(assignment.worksheet_id)
        if form.read_only:
            raise ReadOnlyFormError(
                f"Assignment {assignment_id} is completed and cannot be resubmitted"
            )

        for field_id, raw in values.items():
            if template.get_field(field_id) is None:
                logger.warning(
                    "Ignoring value for unknown field %r on assignment %s",
                    field_id,
                    assignment_id,
                )
                continue
            form.set_value(field_id, raw)

        if complete:
            result = form.submit()
            if not result.ok:
                return result, assignment
        else:
            result = SubmitResult(ok=True, values=dict(form.values))

        saved = await self.save_response(db, assignment_id, result.values)
        if complete:
            saved = await self.update_status(
                db, assignment_id, AssignmentStatus.COMPLETED
            )
        return result, saved

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _build_config(
        self,
        template: WorksheetTemplate,
        values: Mapping[str, Any] | None,
    ) -> dict[str, Any] | None:
        """Keep configurable-field values and wrap them for storage."""
        if not values:
            return None
        configurable = template.configurable_fields()
        allowed = {f.id for f in configurable}
        dropped = sorted(k for k in values if k not in allowed)
        if dropped:
            logger.warning(
                "Dropping clinician values for non-configurable fields %s of %s",
                dropped,
                template.id,
            )
        kept = normalize_values(template, values, fields=configurable)
        if not kept:
            return None
        return ClinicianConfig(values=kept).model_dump(mode="json", by_alias=True)

    @staticmethod
    def _to_assignment(row: WorksheetAssignmentRow) -> WorksheetAssignment:
        """Convert an ORM row to a public WorksheetAssignment."""
        return WorksheetAssignment(
            id=row.id,
            client_id=row.client_id,
            worksheet_id=row.worksheet_id,
            status=coerce_status(row.status),
            assigned_at=row.assigned_at,
            last_updated_at=row.last_updated_at,
            due_date=row.due_date,
            completed_at=row.completed_at,
            note=row.note,
            clinician_config=(
                ClinicianConfig.model_validate(row.clinician_config)
                if row.clinician_config
                else None
            ),
            response=(
                WorksheetResponse.model_validate(row.response)
                if row.response
                else None
            ),
        )


_RESPONSE_KEYS = frozenset({"values", "submittedAt", "submitted_at"})


def _is_response_shaped(response: Mapping[str, Any]) -> bool:
    """True for a ``{values, submittedAt}`` mapping rather than a value map."""
    return (
        isinstance(response.get("values"), Mapping)
        and set(response) <= _RESPONSE_KEYS
    )
