"""Public model re-exports for stepladder_worksheets.

Consumers should import from ``stepladder_worksheets.models`` rather than
reaching into sub-modules directly.
"""

# --- Fields ---
from stepladder_worksheets.models.field import (
    FIELD_TYPES,
    BaseField,
    CheckboxField,
    CheckboxGroupField,
    DateField,
    FieldOption,
    LikertField,
    MultiSelectField,
    NumberField,
    OptionField,
    RatingField,
    SelectField,
    TextareaField,
    TextField,
    TimeField,
    WorksheetField,
    field_mapper,
)

# --- Templates ---
from stepladder_worksheets.models.template import WorksheetTemplate

# --- Assignments ---
from stepladder_worksheets.models.assignment import (
    ClinicianConfig,
    WorksheetAssignment,
    WorksheetResponse,
)

# --- Rendering ---
from stepladder_worksheets.models.form import (
    FormView,
    RenderedField,
    RenderedOption,
    SubmitResult,
)

__all__ = [
    # Fields
    "FIELD_TYPES",
    "BaseField",
    "CheckboxField",
    "CheckboxGroupField",
    "DateField",
    "FieldOption",
    "LikertField",
    "MultiSelectField",
    "NumberField",
    "OptionField",
    "RatingField",
    "SelectField",
    "TextareaField",
    "TextField",
    "TimeField",
    "WorksheetField",
    "field_mapper",
    # Templates
    "WorksheetTemplate",
    # Assignments
    "ClinicianConfig",
    "WorksheetAssignment",
    "WorksheetResponse",
    # Rendering
    "FormView",
    "RenderedField",
    "RenderedOption",
    "SubmitResult",
]
