"""ORM models for stepladder_db."""

from stepladder_db.models.assignment import WorksheetAssignmentRow
from stepladder_db.models.base import Base
from stepladder_db.models.enums import AssignmentStatus

__all__ = ["Base", "AssignmentStatus", "WorksheetAssignmentRow"]
