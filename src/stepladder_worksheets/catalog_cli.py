"""Catalog checker CLI — ``stepladder-catalog``.

Validates every worksheet YAML file in a catalog directory through the
structural guards and the full template models, then prints a summary.
Intended for CI and for authors editing the catalog.

Examples::

    # Check the packaged catalog
    stepladder-catalog

    # Check a deployment's own catalog and list each template
    stepladder-catalog --catalog-dir ./my-catalog --list
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from stepladder_worksheets.constants import CATALOG_DIR
from stepladder_worksheets.guards import template_problems
from stepladder_worksheets.registry import TemplateStore, catalog_files, load_yaml

logger = logging.getLogger(__name__)


def check_catalog(catalog_dir: Path) -> list[str]:
    """Return every problem found in ``catalog_dir``, or ``[]`` if clean.

    Unlike :meth:`TemplateStore.load` this does not stop at the first bad
    template.
    """
    problems: list[str] = []
    seen: dict[str, str] = {}
    try:
        paths = catalog_files(catalog_dir)
    except FileNotFoundError as exc:
        return [str(exc)]
    if not paths:
        return [f"No catalog files in {catalog_dir}"]

    for path in paths:
        try:
            raw_list = load_yaml(path) or []
        except yaml.YAMLError as exc:
            problems.append(f"{path.name}: invalid YAML: {exc}")
            continue
        if not isinstance(raw_list, list):
            problems.append(f"{path.name}: expected a list of templates")
            continue
        for raw in raw_list:
            problems.extend(f"{path.name}: {p}" for p in template_problems(raw))
            ident = raw.get("id") if isinstance(raw, dict) else None
            if not isinstance(ident, str):
                continue
            if ident in seen:
                problems.append(
                    f"{path.name}: duplicate template id {ident!r} (first in {seen[ident]})"
                )
            else:
                seen[ident] = path.name
    return problems


def cli() -> None:
    """Console-script entry point: ``stepladder-catalog``."""
    parser = argparse.ArgumentParser(
        prog="stepladder-catalog",
        description="Validate the worksheet template catalog.",
    )
    parser.add_argument(
        "--catalog-dir",
        type=Path,
        default=CATALOG_DIR,
        help="Catalog directory (default: $WORKSHEET_CATALOG_DIR or the packaged catalog)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        default=False,
        help="Print every template id after a successful check",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    problems = check_catalog(args.catalog_dir)
    if problems:
        for p in problems:
            print(p, file=sys.stderr)
        print(f"{len(problems)} problem(s) found", file=sys.stderr)
        sys.exit(1)

    store = TemplateStore(args.catalog_dir)
    store.load()
    print(f"Catalog OK: {len(store.templates)} templates in {store.catalog_dir}")
    for modality, templates in store.by_modality.items():
        print(f"  {modality}: {len(templates)}")
    print(f"  domains: {', '.join(store.list_domains())}")
    if args.list:
        for t in store.templates:
            print(f"{t.id}\t{t.modality}\t{t.title}")
    sys.exit(0)
