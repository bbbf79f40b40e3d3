"""stepladder_worksheets — worksheet schema and assignment SDK.

Public API:
    TemplateStore       — loads the YAML catalog into typed templates with lookup helpers
    filter_templates    — modality / domain / free-text filter over templates
    WorksheetForm       — renders, edits and validates one worksheet
    AssignmentManager   — creates assignments and tracks their lifecycle
    WorksheetTemplate   — one catalog entry
    WorksheetAssignment — public view of an assignment

Errors:
    WorksheetError, TemplateNotFoundError, StatusTransitionError, ReadOnlyFormError
"""

from stepladder_worksheets.errors import (
    ReadOnlyFormError,
    StatusTransitionError,
    TemplateNotFoundError,
    WorksheetError,
)
from stepladder_worksheets.forms import (
    WorksheetForm,
    clinician_config_form,
    effective_values,
    normalize_values,
    render_form,
    validate_values,
)
from stepladder_worksheets.guards import (
    is_valid_field,
    is_valid_field_type,
    is_valid_template,
    template_problems,
)
from stepladder_worksheets.manager import AssignmentManager
from stepladder_worksheets.models.assignment import (
    ClinicianConfig,
    WorksheetAssignment,
    WorksheetResponse,
)
from stepladder_worksheets.models.form import FormView, SubmitResult
from stepladder_worksheets.models.template import WorksheetTemplate
from stepladder_worksheets.registry import TemplateStore, filter_templates

__all__ = [
    # Catalog
    "TemplateStore",
    "WorksheetTemplate",
    "filter_templates",
    # Guards
    "is_valid_field",
    "is_valid_field_type",
    "is_valid_template",
    "template_problems",
    # Forms
    "FormView",
    "SubmitResult",
    "WorksheetForm",
    "clinician_config_form",
    "effective_values",
    "normalize_values",
    "render_form",
    "validate_values",
    # Assignments
    "AssignmentManager",
    "ClinicianConfig",
    "WorksheetAssignment",
    "WorksheetResponse",
    # Errors
    "ReadOnlyFormError",
    "StatusTransitionError",
    "TemplateNotFoundError",
    "WorksheetError",
]
