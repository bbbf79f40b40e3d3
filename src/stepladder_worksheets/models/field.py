"""Field type models for worksheet templates.

Each field type maps to one input control and one coercion rule in the form
engine (:mod:`stepladder_worksheets.forms`):

  Free entry:
    - text: single-line string
    - textarea: multi-line string
    - number: numeric input with optional min/max
    - date: ISO date string ``YYYY-MM-DD``
    - time: 24h time string ``HH:MM``

  Discrete choice:
    - rating_0_10: 11 buckets from 0 to 10
    - checkbox: single boolean
    - checkbox_group: several option values
    - select: one option value (dropdown)
    - multi_select: several option values (list box)
    - likert: one option value (radio group)

The discriminated ``WorksheetField`` union uses ``type`` as its
discriminator.  ``field_mapper`` maps type strings to their model classes.
JSON keys are camelCase (``clinicianConfigurable``); Python attributes are
snake_case.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from stepladder_worksheets.constants import RATING_MAX, RATING_MIN


class SchemaModel(BaseModel):
    """Immutable catalog model with camelCase JSON aliases."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


# --- Shared option model ---

class FieldOption(SchemaModel):
    """One selectable choice: ``value`` is stored, ``label`` is shown."""

    value: str
    label: str


# --- Base field ---

class BaseField(SchemaModel):
    """Attributes shared by all field types."""

    id: str
    label: str
    description: Optional[str] = None
    placeholder: Optional[str] = None
    required: bool = False
    # If true, a clinician may pre-fill this field before the client sees it
    clinician_configurable: bool = False


class OptionField(BaseField):
    """Base for field types that choose from a fixed option list."""

    options: Tuple[FieldOption, ...]

    @model_validator(mode="after")
    def _chk_options(self):
        if not self.options:
            raise ValueError(f"field '{self.id}' requires at least one option")
        values = [o.value for o in self.options]
        if len(values) != len(set(values)):
            raise ValueError(f"field '{self.id}' has duplicate option values")
        return self

    @property
    def option_values(self) -> list[str]:
        return [o.value for o in self.options]


# --- Free-entry types ---

class TextField(BaseField):
    type: Literal["text"] = "text"


class TextareaField(BaseField):
    type: Literal["textarea"] = "textarea"


class NumberField(BaseField):
    """Numeric input; bounds are checked on submit, not while editing."""

    type: Literal["number"] = "number"
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None

    @model_validator(mode="after")
    def _chk_bounds(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"field '{self.id}': min must be <= max")
        return self


class DateField(BaseField):
    type: Literal["date"] = "date"


class TimeField(BaseField):
    type: Literal["time"] = "time"


# --- Discrete-choice types ---

class RatingField(BaseField):
    """0-10 scale rendered as 11 buckets.  Bounds may narrow, never widen, the scale."""

    type: Literal["rating_0_10"] = "rating_0_10"
    min: int = RATING_MIN
    max: int = RATING_MAX

    @model_validator(mode="after")
    def _chk_bounds(self):
        if not RATING_MIN <= self.min <= self.max <= RATING_MAX:
            raise ValueError(
                f"field '{self.id}': rating bounds must satisfy "
                f"{RATING_MIN} <= min <= max <= {RATING_MAX}"
            )
        return self


class CheckboxField(BaseField):
    type: Literal["checkbox"] = "checkbox"


class CheckboxGroupField(OptionField):
    type: Literal["checkbox_group"] = "checkbox_group"


class SelectField(OptionField):
    type: Literal["select"] = "select"


class MultiSelectField(OptionField):
    type: Literal["multi_select"] = "multi_select"


class LikertField(OptionField):
    """Single choice on an ordered scale (e.g. strongly disagree -> strongly agree)."""

    type: Literal["likert"] = "likert"


# --- Discriminated union of all field types ---

WorksheetField = Annotated[
    Union[
        TextField,
        TextareaField,
        NumberField,
        RatingField,
        CheckboxField,
        CheckboxGroupField,
        SelectField,
        MultiSelectField,
        DateField,
        TimeField,
        LikertField,
    ],
    Field(discriminator="type"),
]

# Maps the ``type`` string to its model class for dict -> model parsing.
field_mapper: dict[str, type[BaseField]] = {
    "text": TextField,
    "textarea": TextareaField,
    "number": NumberField,
    "rating_0_10": RatingField,
    "checkbox": CheckboxField,
    "checkbox_group": CheckboxGroupField,
    "select": SelectField,
    "multi_select": MultiSelectField,
    "date": DateField,
    "time": TimeField,
    "likert": LikertField,
}

# The closed set of field types, in declaration order.
FIELD_TYPES: tuple[str, ...] = tuple(field_mapper)
