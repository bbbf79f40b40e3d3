"""Render and submit models produced by the form engine.

A ``FormView`` is everything a UI needs to draw a worksheet: one
``RenderedField`` per template field with its control kind, current value,
options and error.  Styling is left entirely to the client.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

# UI control used for each field type.
ControlKind = Literal[
    "text_input",
    "textarea",
    "number_input",
    "bucket_scale",
    "checkbox",
    "checkbox_group",
    "dropdown",
    "multi_dropdown",
    "date_input",
    "time_input",
    "radio_group",
]


class RenderedOption(BaseModel):
    """One choice of an option-bearing control."""

    value: str
    label: str
    selected: bool = False


class RenderedField(BaseModel):
    """One control, ready to draw."""

    id: str
    type: str
    control: ControlKind
    label: str
    description: Optional[str] = None
    placeholder: Optional[str] = None
    required: bool = False
    # Coerced current value (None when unset)
    value: Any = None
    error: Optional[str] = None
    disabled: bool = False
    # For option-bearing controls and the rating scale
    options: Optional[list[RenderedOption]] = None
    # {"min", "max", "step"} for numeric controls
    constraints: Optional[dict[str, Any]] = None


class FormView(BaseModel):
    """A whole worksheet as rendered for one viewer."""

    template_id: str
    title: str
    description: Optional[str] = None
    read_only: bool = False
    # False in read-only mode: there is no submit action to show
    submittable: bool = True
    fields: list[RenderedField] = Field(default_factory=list)


class SubmitResult(BaseModel):
    """Outcome of a submit attempt.

    ``ok`` is True only when ``errors`` is empty; ``values`` is then the
    collected value map.  A failed submit carries no values.
    """

    ok: bool
    values: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
