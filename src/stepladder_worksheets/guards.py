"""Structural checks for raw (not yet parsed) catalog data.

The ``is_valid_*`` guards are shallow and never raise: they answer "does
this dict look like a field/template?" and are meant for validating static
catalog data at build or test time.  :func:`template_problems` goes further
and runs the full model validation, returning readable messages instead of
raising.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from stepladder_worksheets.models.field import FIELD_TYPES
from stepladder_worksheets.models.template import WorksheetTemplate


def is_valid_field_type(value: Any) -> bool:
    """True if ``value`` is one of the closed set of field type strings."""
    return isinstance(value, str) and value in FIELD_TYPES


def is_valid_field(obj: Any) -> bool:
    """True if ``obj`` has a string id, a string label and a known type."""
    return (
        isinstance(obj, Mapping)
        and isinstance(obj.get("id"), str)
        and isinstance(obj.get("label"), str)
        and is_valid_field_type(obj.get("type"))
    )


def _list_attr(obj: Mapping, camel: str, snake: str) -> Any:
    return obj[camel] if camel in obj else obj.get(snake)


def is_valid_template(obj: Any) -> bool:
    """True if ``obj`` has the template's required keys and well-formed fields.

    Accepts both the camelCase JSON shape (``problemDomains``) and the
    snake_case catalog shape (``problem_domains``).
    """
    if not isinstance(obj, Mapping):
        return False
    if not all(isinstance(obj.get(k), str) for k in ("id", "title", "modality")):
        return False
    modules = obj.get("modules")
    domains = _list_attr(obj, "problemDomains", "problem_domains")
    fields = obj.get("fields")
    return (
        isinstance(modules, list)
        and isinstance(domains, list)
        and isinstance(fields, list)
        and all(is_valid_field(f) for f in fields)
    )


def template_problems(obj: Any) -> list[str]:
    """Return every problem found in a raw template, or ``[]`` if it is valid.

    Runs the structural guard first, then full model validation (option
    lists, bounds, duplicate field ids, modality).
    """
    if not is_valid_template(obj):
        ident = obj.get("id") if isinstance(obj, Mapping) else None
        problems = [f"template {ident!r} is structurally invalid"]
        if isinstance(obj, Mapping) and isinstance(obj.get("fields"), list):
            for i, f in enumerate(obj["fields"]):
                if not is_valid_field(f):
                    problems.append(f"field #{i} is missing id/label or has an unknown type")
        return problems
    try:
        WorksheetTemplate.model_validate(obj)
    except ValidationError as exc:
        return [
            f"{obj['id']}: {'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            if err["loc"]
            else f"{obj['id']}: {err['msg']}"
            for err in exc.errors()
        ]
    return []
