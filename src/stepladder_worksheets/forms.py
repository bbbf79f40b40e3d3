"""Generic form engine — renders, edits and validates any worksheet template.

Each field type has three pure functions, selected through the
``_HANDLERS`` dispatch table keyed by ``field.type``:

  - coerce:   raw edit input -> stored value (or ``_UNSET``)
  - render:   stored value -> ``RenderedField``
  - validate: stored value -> error message or ``None`` (submit time only)

Edits never produce errors: input a field cannot hold (a non-numeric number,
an unknown option, a malformed date) simply leaves the field unset.  Errors
are only computed by an explicit submit and are reported as a field-keyed
map, never raised.

The engine does not persist anything; the caller decides what to do with
the values of a successful submit.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, time
from typing import Any, NamedTuple, Optional

from stepladder_worksheets.constants import (
    DATE_FORMAT,
    OPTION_FIELD_TYPES,
    TIME_FORMAT,
)
from stepladder_worksheets.errors import ReadOnlyFormError
from stepladder_worksheets.models.field import (
    BaseField,
    NumberField,
    OptionField,
    RatingField,
)
from stepladder_worksheets.models.form import (
    FormView,
    RenderedField,
    RenderedOption,
    SubmitResult,
)
from stepladder_worksheets.models.template import WorksheetTemplate

logger = logging.getLogger(__name__)

# Returned by coercers when the input leaves the field without a value.
_UNSET = object()

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d)?$")

_TRUTHY = frozenset({"true", "on", "1", "yes"})
_FALSY = frozenset({"false", "off", "0", "no", ""})


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------

def _coerce_text(field: BaseField, raw: Any) -> Any:
    if raw is None:
        return _UNSET
    return raw if isinstance(raw, str) else str(raw)


def _coerce_number(field: BaseField, raw: Any) -> Any:
    # bool is a subclass of int, so reject it explicitly
    if raw is None or isinstance(raw, bool):
        return _UNSET
    if isinstance(raw, (int, float)):
        return raw if math.isfinite(raw) else _UNSET
    if not isinstance(raw, str) or not raw.strip():
        return _UNSET
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return _UNSET
    return value if math.isfinite(value) else _UNSET


def _coerce_rating(field: RatingField, raw: Any) -> Any:
    value = _coerce_number(field, raw)
    if value is _UNSET:
        return _UNSET
    if isinstance(value, float):
        if not value.is_integer():
            return _UNSET
        value = int(value)
    return value if field.min <= value <= field.max else _UNSET


def _coerce_checkbox(field: BaseField, raw: Any) -> Any:
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUTHY:
            return True
        if text in _FALSY:
            return False
    return _UNSET


def _coerce_option_list(field: OptionField, raw: Any) -> Any:
    if raw is None:
        return _UNSET
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return _UNSET
    chosen = {v if isinstance(v, str) else str(v) for v in raw}
    # Option order keeps the stored list deterministic
    return [v for v in field.option_values if v in chosen]


def _coerce_choice(field: OptionField, raw: Any) -> Any:
    if raw is None or isinstance(raw, bool):
        return _UNSET
    value = raw if isinstance(raw, str) else str(raw)
    return value if value in field.option_values else _UNSET


def _coerce_date(field: BaseField, raw: Any) -> Any:
    if isinstance(raw, datetime):
        raw = raw.date()
    if isinstance(raw, date):
        return raw.isoformat()
    if not isinstance(raw, str):
        return _UNSET
    text = raw.strip()
    if not _DATE_RE.match(text):
        return _UNSET
    try:
        datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        return _UNSET
    return text


def _coerce_time(field: BaseField, raw: Any) -> Any:
    if isinstance(raw, time):
        return raw.strftime(TIME_FORMAT)
    if not isinstance(raw, str):
        return _UNSET
    text = raw.strip()
    if not _TIME_RE.match(text):
        return _UNSET
    # Browsers may send seconds; the stored format is HH:MM
    return text[:5]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _base(
    field: BaseField,
    control: str,
    value: Any,
    error: Optional[str],
    read_only: bool,
    **extra: Any,
) -> RenderedField:
    return RenderedField(
        id=field.id,
        type=field.type,
        control=control,
        label=field.label,
        description=field.description,
        placeholder=field.placeholder,
        required=field.required,
        value=value,
        error=error,
        disabled=read_only,
        **extra,
    )


def _render_text(field, value, error, read_only):
    return _base(field, "text_input", value, error, read_only)


def _render_textarea(field, value, error, read_only):
    return _base(field, "textarea", value, error, read_only)


def _render_number(field: NumberField, value, error, read_only):
    constraints = {"min": field.min, "max": field.max, "step": field.step}
    return _base(field, "number_input", value, error, read_only, constraints=constraints)


def _render_rating(field: RatingField, value, error, read_only):
    buckets = [
        RenderedOption(value=str(i), label=str(i), selected=value == i)
        for i in range(field.min, field.max + 1)
    ]
    constraints = {"min": field.min, "max": field.max, "step": 1}
    return _base(
        field, "bucket_scale", value, error, read_only,
        options=buckets, constraints=constraints,
    )


def _render_checkbox(field, value, error, read_only):
    # An unset checkbox is drawn unchecked
    return _base(field, "checkbox", bool(value), error, read_only)


def _option_list(field: OptionField, selected: Iterable[str]) -> list[RenderedOption]:
    chosen = set(selected)
    return [
        RenderedOption(value=o.value, label=o.label, selected=o.value in chosen)
        for o in field.options
    ]


def _render_checkbox_group(field: OptionField, value, error, read_only):
    selected = value if isinstance(value, list) else []
    return _base(
        field, "checkbox_group", selected, error, read_only,
        options=_option_list(field, selected),
    )


def _render_select(field: OptionField, value, error, read_only):
    return _base(
        field, "dropdown", value, error, read_only,
        options=_option_list(field, [value] if value is not None else []),
    )


def _render_multi_select(field: OptionField, value, error, read_only):
    selected = value if isinstance(value, list) else []
    return _base(
        field, "multi_dropdown", selected, error, read_only,
        options=_option_list(field, selected),
    )


def _render_date(field, value, error, read_only):
    return _base(field, "date_input", value, error, read_only)


def _render_time(field, value, error, read_only):
    return _base(field, "time_input", value, error, read_only)


def _render_likert(field: OptionField, value, error, read_only):
    return _base(
        field, "radio_group", value, error, read_only,
        options=_option_list(field, [value] if value is not None else []),
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _required_message(field: BaseField) -> str:
    return f"{field.label} is required"


def _validate_scalar(field: BaseField, value: Any) -> Optional[str]:
    if field.required and (value is None or value == ""):
        return _required_message(field)
    return None


def _validate_number(field: NumberField, value: Any) -> Optional[str]:
    if value is None:
        return _required_message(field) if field.required else None
    low = field.min if field.min is not None else -math.inf
    high = field.max if field.max is not None else math.inf
    if not low <= value <= high:
        return _range_message(field)
    return None


def _validate_rating(field: RatingField, value: Any) -> Optional[str]:
    if value is None or value == "":
        return _required_message(field) if field.required else None
    if not field.min <= value <= field.max:
        return _range_message(field)
    return None


def _validate_checkbox(field: BaseField, value: Any) -> Optional[str]:
    # An explicit False is an answer; only a missing value fails
    if field.required and (value is None or value == ""):
        return _required_message(field)
    return None


def _range_message(field: BaseField) -> str:
    return f"{field.label} must be between {_fmt(field.min)} and {_fmt(field.max)}"


def _validate_option_list(field: OptionField, value: Any) -> Optional[str]:
    if field.required and not value:
        return _required_message(field)
    return None


def _fmt(bound: Optional[float]) -> str:
    if bound is None:
        return "any"
    return str(int(bound)) if float(bound).is_integer() else str(bound)


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

class _Handler(NamedTuple):
    coerce: Callable[[Any, Any], Any]
    render: Callable[[Any, Any, Optional[str], bool], RenderedField]
    validate: Callable[[Any, Any], Optional[str]]


_HANDLERS: dict[str, _Handler] = {
    "text": _Handler(_coerce_text, _render_text, _validate_scalar),
    "textarea": _Handler(_coerce_text, _render_textarea, _validate_scalar),
    "number": _Handler(_coerce_number, _render_number, _validate_number),
    "rating_0_10": _Handler(_coerce_rating, _render_rating, _validate_rating),
    "checkbox": _Handler(_coerce_checkbox, _render_checkbox, _validate_checkbox),
    "checkbox_group": _Handler(_coerce_option_list, _render_checkbox_group, _validate_option_list),
    "select": _Handler(_coerce_choice, _render_select, _validate_scalar),
    "multi_select": _Handler(_coerce_option_list, _render_multi_select, _validate_option_list),
    "date": _Handler(_coerce_date, _render_date, _validate_scalar),
    "time": _Handler(_coerce_time, _render_time, _validate_scalar),
    "likert": _Handler(_coerce_choice, _render_likert, _validate_scalar),
}

_OPTION_LIST_TYPES = frozenset({"checkbox_group", "multi_select"})


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def coerce_value(field: BaseField, raw: Any) -> tuple[bool, Any]:
    """Coerce one raw input for ``field``.

    Returns ``(True, value)`` when the input yields a value and
    ``(False, None)`` when the field should be left unset.
    """
    value = _HANDLERS[field.type].coerce(field, raw)
    if value is _UNSET:
        return False, None
    return True, value


def normalize_values(
    template: WorksheetTemplate,
    raw: Optional[Mapping[str, Any]],
    *,
    fields: Optional[Iterable[BaseField]] = None,
) -> dict[str, Any]:
    """Coerce a raw value map against ``template``.

    Keys that are not fields of the template (or of ``fields`` when given)
    are dropped, as are values the field cannot hold.
    """
    allowed = {f.id: f for f in (fields if fields is not None else template.fields)}
    out: dict[str, Any] = {}
    for key, raw_value in (raw or {}).items():
        field = allowed.get(key)
        if field is None:
            logger.debug("Dropping value for unknown field %r in %s", key, template.id)
            continue
        ok, value = coerce_value(field, raw_value)
        if ok:
            out[key] = value
    return out


def validate_values(
    template: WorksheetTemplate, values: Mapping[str, Any]
) -> dict[str, str]:
    """Run submit-time validation; return ``{field_id: message}`` for failures.

    ``values`` may be raw input: each value is coerced first, and input the
    field cannot hold is reported instead of raising.
    """
    errors: dict[str, str] = {}
    for field in template.fields:
        raw = values.get(field.id)
        value = None
        if raw is not None:
            ok, value = coerce_value(field, raw)
            if not ok and not _is_blank(raw):
                errors[field.id] = _invalid_message(field)
                continue
        message = _HANDLERS[field.type].validate(field, value)
        if message is not None:
            errors[field.id] = message
    return errors


def _is_blank(raw: Any) -> bool:
    if isinstance(raw, str):
        return not raw.strip()
    return isinstance(raw, (list, tuple, set, frozenset)) and not raw


def _invalid_message(field: BaseField) -> str:
    if field.type == "rating_0_10":
        return _range_message(field)
    return f"{field.label} has an invalid value"


def render_field(
    field: BaseField,
    value: Any,
    *,
    error: Optional[str] = None,
    read_only: bool = False,
) -> Optional[RenderedField]:
    """Render one field; option-bearing fields without options render nothing."""
    if field.type in OPTION_FIELD_TYPES and not getattr(field, "options", None):
        return None
    return _HANDLERS[field.type].render(field, value, error, read_only)


def render_form(
    template: WorksheetTemplate,
    values: Mapping[str, Any],
    *,
    errors: Optional[Mapping[str, str]] = None,
    read_only: bool = False,
) -> FormView:
    """Render a whole template for the given value map."""
    errors = errors or {}
    rendered = []
    for field in template.fields:
        item = render_field(
            field,
            values.get(field.id),
            error=errors.get(field.id),
            read_only=read_only,
        )
        if item is not None:
            rendered.append(item)
    return FormView(
        template_id=template.id,
        title=template.title,
        description=template.description,
        read_only=read_only,
        submittable=not read_only,
        fields=rendered,
    )


def effective_values(
    clinician_values: Optional[Mapping[str, Any]],
    response_values: Optional[Mapping[str, Any]],
) -> dict[str, Any]:
    """Clinician pre-fill overlaid by the client's own answers (client wins)."""
    return {**(clinician_values or {}), **(response_values or {})}


# ---------------------------------------------------------------------------
# Stateful form
# ---------------------------------------------------------------------------

class WorksheetForm:
    """One worksheet being viewed or filled in.

    Args:
        template: the worksheet to render
        default_values: initial values (clinician pre-fill and/or a saved
            response); normalised against the template
        read_only: display only; edits are ignored and there is no submit
    """

    def __init__(
        self,
        template: WorksheetTemplate,
        default_values: Optional[Mapping[str, Any]] = None,
        read_only: bool = False,
    ) -> None:
        self.template = template
        self.read_only = read_only
        self.values: dict[str, Any] = normalize_values(template, default_values)
        self.errors: dict[str, str] = {}

    def _field(self, field_id: str) -> BaseField:
        field = self.template.get_field(field_id)
        if field is None:
            raise KeyError(f"Unknown field '{field_id}' in template {self.template.id}")
        return field

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_value(self, field_id: str, raw: Any) -> bool:
        """Record an edit.  Returns False (and changes nothing) when read-only."""
        field = self._field(field_id)
        if self.read_only:
            return False
        ok, value = coerce_value(field, raw)
        if ok:
            self.values[field_id] = value
        else:
            self.values.pop(field_id, None)
        # Editing a field clears its error
        self.errors.pop(field_id, None)
        return True

    def toggle_option(self, field_id: str, option_value: str, checked: bool) -> bool:
        """Check or uncheck one option of a checkbox group or multi-select."""
        field = self._field(field_id)
        if field.type not in _OPTION_LIST_TYPES:
            raise ValueError(f"Field '{field_id}' is not a multi-choice field")
        current = list(self.values.get(field_id) or [])
        if checked and option_value not in current:
            current.append(option_value)
        elif not checked:
            current = [v for v in current if v != option_value]
        return self.set_value(field_id, current)

    # ------------------------------------------------------------------
    # Validation / submit
    # ------------------------------------------------------------------

    def validate(self) -> dict[str, str]:
        """Recompute and return the error map."""
        self.errors = validate_values(self.template, self.values)
        return dict(self.errors)

    def submit(self) -> SubmitResult:
        """Validate and, when clean, hand back the collected values.

        Raises:
            ReadOnlyFormError: read-only forms have no submit action.
        """
        if self.read_only:
            raise ReadOnlyFormError(
                f"Form for {self.template.id} is read-only and cannot be submitted"
            )
        errors = self.validate()
        if errors:
            return SubmitResult(ok=False, errors=errors)
        return SubmitResult(ok=True, values=dict(self.values))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> FormView:
        return render_form(
            self.template, self.values, errors=self.errors, read_only=self.read_only
        )


def clinician_config_form(
    template: WorksheetTemplate,
    values: Optional[Mapping[str, Any]] = None,
) -> WorksheetForm:
    """A form restricted to the template's clinician-configurable fields."""
    config_template = template.model_copy(
        update={"fields": tuple(template.configurable_fields())}
    )
    return WorksheetForm(config_template, values)
