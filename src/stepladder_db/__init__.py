"""stepladder_db — persistence layer for worksheet assignments.

Provides the ORM model, the async engine factory, the repository contract
and its SQL and in-memory implementations.
"""

from stepladder_db.engine import get_engine, get_session_factory
from stepladder_db.interfaces import AssignmentRepository
from stepladder_db.memory import InMemoryAssignmentRepository
from stepladder_db.models.assignment import WorksheetAssignmentRow
from stepladder_db.models.enums import AssignmentStatus
from stepladder_db.repository import SqlAssignmentRepository

__all__ = [
    "AssignmentRepository",
    "AssignmentStatus",
    "InMemoryAssignmentRepository",
    "SqlAssignmentRepository",
    "WorksheetAssignmentRow",
    "get_engine",
    "get_session_factory",
]
