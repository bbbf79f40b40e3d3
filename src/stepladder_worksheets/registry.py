"""TemplateStore — loads the worksheet catalog YAML into typed templates.

This is the single source of truth for template data at runtime.  The store
is loaded once at startup and is read-only afterwards.

Usage::

    store = TemplateStore()          # defaults to the packaged catalog
    store.load()                     # parse all YAML files

    t = store.get_by_id("cbt-thought-record")
    erp = store.get_by_modality("ERP")
    hits = filter_templates(store.templates, "All", ["Depression"], "thought")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

import yaml

from stepladder_worksheets.constants import ALL_MODALITIES, CATALOG_DIR
from stepladder_worksheets.guards import is_valid_template
from stepladder_worksheets.models.template import WorksheetTemplate

logger = logging.getLogger(__name__)

# Catalog files loaded first, in this order; any other *.yaml follows by name.
_CATALOG_ORDER = ("cbt.yaml", "erp.yaml", "dbt.yaml", "cbtj.yaml", "sud.yaml")


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def catalog_files(catalog_dir: Path) -> list[Path]:
    """Return the catalog YAML files of ``catalog_dir`` in load order."""
    if not catalog_dir.is_dir():
        raise FileNotFoundError(f"Missing catalog directory: {catalog_dir}")
    known = [catalog_dir / name for name in _CATALOG_ORDER if (catalog_dir / name).exists()]
    extra = sorted(
        p for p in catalog_dir.glob("*.yaml") if p.name not in _CATALOG_ORDER
    )
    return known + extra


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def _matches_search(template: WorksheetTemplate, needle: str) -> bool:
    return (
        needle in template.title.lower()
        or (template.description is not None and needle in template.description.lower())
        or any(needle in m.lower() for m in template.modules)
        or any(needle in d.lower() for d in template.problem_domains)
    )


def filter_templates(
    templates: Sequence[WorksheetTemplate],
    modality: Optional[str] = None,
    domains: Iterable[str] = (),
    search_term: str = "",
) -> list[WorksheetTemplate]:
    """Filter templates by modality, problem domains and free text.

    - modality: exact match; ``None``, ``""`` and ``"All"`` disable it.
    - domains: keep a template if ANY of its domains is selected.
    - search_term: case-insensitive substring over title, description,
      modules and domains; blank disables it.

    The three dimensions combine with AND.  Input order is preserved.
    """
    filtered = list(templates)

    if modality and modality != ALL_MODALITIES:
        filtered = [t for t in filtered if t.modality == modality]

    selected = set(domains)
    if selected:
        filtered = [
            t for t in filtered if any(d in selected for d in t.problem_domains)
        ]

    # Blank terms disable the search; others match as typed, spaces included
    needle = search_term.lower() if search_term and search_term.strip() else ""
    if needle:
        filtered = [t for t in filtered if _matches_search(t, needle)]

    return filtered


# ---------------------------------------------------------------------------
# TemplateStore
# ---------------------------------------------------------------------------

class TemplateStore:
    """Loads every catalog YAML file and provides lookup and filtering.

    Attributes populated after :meth:`load`:

        templates    — tuple[WorksheetTemplate, ...] in catalog order
        by_id        — read-only mapping id -> WorksheetTemplate
        by_modality  — read-only mapping modality -> tuple of templates
    """

    def __init__(self, catalog_dir: str | Path | None = None) -> None:
        self._base = Path(catalog_dir) if catalog_dir is not None else CATALOG_DIR

        # Populated by load()
        self.templates: tuple[WorksheetTemplate, ...] = ()
        self.by_id: Mapping[str, WorksheetTemplate] = MappingProxyType({})
        self.by_modality: Mapping[str, tuple[WorksheetTemplate, ...]] = MappingProxyType({})

    @property
    def catalog_dir(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse all catalog files into typed templates.

        Call this once at startup.  Raises ``FileNotFoundError`` if the
        catalog directory is missing and ``ValueError`` for malformed
        templates or duplicate template ids.
        """
        templates: list[WorksheetTemplate] = []
        by_id: dict[str, WorksheetTemplate] = {}
        by_modality: dict[str, list[WorksheetTemplate]] = {}
        for path in catalog_files(self._base):
            raw_list = load_yaml(path) or []
            if not isinstance(raw_list, list):
                raise ValueError(f"{path.name}: expected a list of templates")
            for raw in raw_list:
                template = self._parse(raw, path)
                if template.id in by_id:
                    raise ValueError(f"Duplicate worksheet template id: {template.id}")
                templates.append(template)
                by_id[template.id] = template
                by_modality.setdefault(template.modality, []).append(template)

        self.templates = tuple(templates)
        self.by_id = MappingProxyType(by_id)
        self.by_modality = MappingProxyType(
            {m: tuple(ts) for m, ts in by_modality.items()}
        )
        logger.info(
            "TemplateStore loaded: %d templates, %d modalities, %d domains",
            len(self.templates),
            len(self.by_modality),
            len(self.list_domains()),
        )

    @staticmethod
    def _parse(raw: Any, path: Path) -> WorksheetTemplate:
        if not is_valid_template(raw):
            ident = raw.get("id") if isinstance(raw, dict) else None
            raise ValueError(f"{path.name}: malformed template {ident!r}")
        # pydantic.ValidationError subclasses ValueError
        return WorksheetTemplate.model_validate(raw)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get_by_id(self, template_id: str) -> WorksheetTemplate | None:
        """Return the template with this id, or ``None``."""
        return self.by_id.get(template_id)

    def get_by_modality(self, modality: str) -> list[WorksheetTemplate]:
        """Templates of one modality in catalog order; unknown → ``[]``."""
        return list(self.by_modality.get(modality, []))

    def list_domains(self) -> list[str]:
        """Sorted, de-duplicated problem domains across the whole catalog."""
        return sorted({d for t in self.templates for d in t.problem_domains})

    def filter(
        self,
        modality: Optional[str] = None,
        domains: Iterable[str] = (),
        search_term: str = "",
    ) -> list[WorksheetTemplate]:
        """:func:`filter_templates` over the whole catalog."""
        return filter_templates(self.templates, modality, domains, search_term)
