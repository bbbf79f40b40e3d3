"""Assignment status rules: forward-only transitions."""

import pytest

from stepladder_db.models.enums import AssignmentStatus
from stepladder_worksheets.errors import StatusTransitionError
from stepladder_worksheets.lifecycle import (
    STATUS_ORDER,
    check_transition,
    coerce_status,
    status_after_response,
)

ASSIGNED = AssignmentStatus.ASSIGNED
IN_PROGRESS = AssignmentStatus.IN_PROGRESS
COMPLETED = AssignmentStatus.COMPLETED


def test_status_order():
    assert STATUS_ORDER == (ASSIGNED, IN_PROGRESS, COMPLETED)


@pytest.mark.parametrize("current,requested", [
    (ASSIGNED, ASSIGNED),
    (ASSIGNED, IN_PROGRESS),
    (ASSIGNED, COMPLETED),
    (IN_PROGRESS, IN_PROGRESS),
    (IN_PROGRESS, COMPLETED),
    (COMPLETED, COMPLETED),
])
def test_forward_and_same_state_allowed(current, requested):
    assert check_transition(current, requested) == requested


@pytest.mark.parametrize("current,requested", [
    (IN_PROGRESS, ASSIGNED),
    (COMPLETED, ASSIGNED),
    (COMPLETED, IN_PROGRESS),
])
def test_backward_rejected(current, requested):
    with pytest.raises(StatusTransitionError) as exc_info:
        check_transition(current, requested)
    assert exc_info.value.current == current.value
    assert exc_info.value.requested == requested.value


def test_strings_accepted():
    assert check_transition("assigned", "completed") is COMPLETED


def test_unknown_status():
    with pytest.raises(ValueError, match="Unknown assignment status"):
        coerce_status("archived")


def test_status_after_response():
    assert status_after_response(ASSIGNED) == IN_PROGRESS
    assert status_after_response(IN_PROGRESS) == IN_PROGRESS
    assert status_after_response(COMPLETED) == COMPLETED
