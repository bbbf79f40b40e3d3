"""Database-level enumerations for worksheet assignments."""

import enum


class AssignmentStatus(str, enum.Enum):
    """Lifecycle states for a worksheet assignment.

    Transitions:
        assigned -> in_progress  (first response saved)
        assigned -> completed    (therapist override or direct submit)
        in_progress -> completed (client submission)
    ``completed`` is terminal.
    """

    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
