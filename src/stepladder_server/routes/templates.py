"""Template library endpoints — browse, filter and preview catalog worksheets.

These are read-only endpoints over the catalog loaded at startup.
"""

from fastapi import APIRouter, Depends, Query

from stepladder_worksheets.forms import render_form
from stepladder_worksheets.models.form import FormView
from stepladder_worksheets.models.template import WorksheetTemplate
from stepladder_worksheets.registry import TemplateStore

from stepladder_server.dependencies import get_store

router = APIRouter(prefix="/worksheets", tags=["worksheets"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
def list_worksheets(
    store: TemplateStore = Depends(get_store),
    modality: str | None = Query(None, description='Exact modality; "All" disables the filter'),
    domain: list[str] | None = Query(None, description="Repeatable; matches ANY selected domain"),
    q: str = Query("", description="Case-insensitive free-text search"),
) -> list[WorksheetTemplate]:
    """Return catalog templates matching all of the given filters."""
    return store.filter(modality, domain or (), q)


@router.get("/domains")
def list_domains(
    store: TemplateStore = Depends(get_store),
) -> list[str]:
    """Return every problem domain in the catalog, sorted."""
    return store.list_domains()


@router.get("/modalities/{modality}")
def list_by_modality(
    modality: str,
    store: TemplateStore = Depends(get_store),
) -> list[WorksheetTemplate]:
    """Return the templates of one modality; unknown modality → empty list."""
    return store.get_by_modality(modality)


@router.get("/{worksheet_id}")
def get_worksheet(
    worksheet_id: str,
    store: TemplateStore = Depends(get_store),
) -> WorksheetTemplate:
    """Return one template.  Raises 404 if it is not in the catalog."""
    template = store.get_by_id(worksheet_id)
    if template is None:
        raise ValueError(f"Worksheet not found: {worksheet_id}")
    return template


@router.get("/{worksheet_id}/preview")
def preview_worksheet(
    worksheet_id: str,
    store: TemplateStore = Depends(get_store),
) -> FormView:
    """Render an empty, read-only form for the template."""
    template = store.get_by_id(worksheet_id)
    if template is None:
        raise ValueError(f"Worksheet not found: {worksheet_id}")
    return render_form(template, {}, read_only=True)
