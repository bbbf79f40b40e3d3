"""Exception types raised by the worksheet SDK.

Expected "absent" conditions (unknown template or assignment id) are not
exceptions: lookups return ``None``.  Required-field failures are reported
as a field-keyed map on :class:`~stepladder_worksheets.forms.SubmitResult`.
The classes below cover programmer-error conditions only.
"""


class WorksheetError(ValueError):
    """Base class for worksheet SDK errors."""


class TemplateNotFoundError(WorksheetError):
    """An assignment referenced a worksheet id absent from the catalog."""

    def __init__(self, worksheet_id: str) -> None:
        super().__init__(f"Worksheet template not found: {worksheet_id}")
        self.worksheet_id = worksheet_id


class StatusTransitionError(WorksheetError):
    """A status update tried to move an assignment backwards."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Invalid status transition: {current} -> {requested}"
        )
        self.current = current
        self.requested = requested


class ReadOnlyFormError(WorksheetError):
    """Submit was called on a form rendered in read-only mode."""
