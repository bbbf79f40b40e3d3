"""Assignment status rules.

Statuses only ever move forward::

    assigned -> in_progress -> completed

``completed`` is terminal.  Re-applying the current status is allowed and
is how repeated "mark complete" calls stay idempotent.
"""

from __future__ import annotations

from stepladder_db.models.enums import AssignmentStatus

from stepladder_worksheets.errors import StatusTransitionError

STATUS_ORDER: tuple[AssignmentStatus, ...] = (
    AssignmentStatus.ASSIGNED,
    AssignmentStatus.IN_PROGRESS,
    AssignmentStatus.COMPLETED,
)


def coerce_status(value: AssignmentStatus | str) -> AssignmentStatus:
    """Return ``value`` as an :class:`AssignmentStatus`.

    Raises ``ValueError`` for strings outside the status set.
    """
    if isinstance(value, AssignmentStatus):
        return value
    try:
        return AssignmentStatus(value)
    except ValueError:
        raise ValueError(f"Unknown assignment status: {value!r}") from None


def status_rank(status: AssignmentStatus | str) -> int:
    return STATUS_ORDER.index(coerce_status(status))


def check_transition(
    current: AssignmentStatus | str, requested: AssignmentStatus | str
) -> AssignmentStatus:
    """Validate a status move and return the requested status.

    Raises:
        StatusTransitionError: ``requested`` is earlier than ``current``.
    """
    current = coerce_status(current)
    requested = coerce_status(requested)
    if status_rank(requested) < status_rank(current):
        raise StatusTransitionError(current.value, requested.value)
    return requested


def status_after_response(current: AssignmentStatus | str) -> AssignmentStatus:
    """Status after a response is saved: the first save starts the work."""
    current = coerce_status(current)
    if current == AssignmentStatus.ASSIGNED:
        return AssignmentStatus.IN_PROGRESS
    return current
