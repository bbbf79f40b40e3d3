"""WorksheetTemplate — an immutable catalog entry.

Templates are parsed from the YAML catalog once at startup and are never
mutated afterwards.
"""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import model_validator

from stepladder_worksheets.constants import MODALITIES
from stepladder_worksheets.models.field import BaseField, SchemaModel, WorksheetField


class WorksheetTemplate(SchemaModel):
    """A worksheet definition: metadata plus an ordered field list."""

    id: str
    title: str
    modality: str
    modules: Tuple[str, ...] = ()
    problem_domains: Tuple[str, ...] = ()
    evidence_tag: Optional[str] = None
    description: Optional[str] = None
    fields: Tuple[WorksheetField, ...]

    @model_validator(mode="after")
    def _chk(self):
        if self.modality not in MODALITIES:
            raise ValueError(
                f"template '{self.id}': unknown modality '{self.modality}'"
            )
        seen: set[str] = set()
        for f in self.fields:
            if f.id in seen:
                raise ValueError(
                    f"template '{self.id}': duplicate field id '{f.id}'"
                )
            seen.add(f.id)
        return self

    @property
    def field_ids(self) -> list[str]:
        """Field ids in template order."""
        return [f.id for f in self.fields]

    def get_field(self, field_id: str) -> BaseField | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def configurable_fields(self) -> list[BaseField]:
        """Fields a clinician may pre-fill before the client sees the form."""
        return [f for f in self.fields if f.clinician_configurable]
