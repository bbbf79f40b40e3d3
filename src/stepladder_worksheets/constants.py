"""Worksheet constants shared across the SDK.

The catalog directory can be overridden with ``WORKSHEET_CATALOG_DIR`` so
deployments can ship their own template set without code changes.
"""

import os
from pathlib import Path

# Therapy approaches a template can belong to, in catalog order.
MODALITIES: tuple[str, ...] = ("CBT", "ERP", "DBT", "CBT-J", "SUD")

# Sentinel accepted by the modality filter meaning "do not filter".
ALL_MODALITIES = "All"

# Built-in catalog shipped inside the package.
DEFAULT_CATALOG_DIR = Path(__file__).resolve().parent / "catalog"
CATALOG_DIR = Path(os.getenv("WORKSHEET_CATALOG_DIR") or DEFAULT_CATALOG_DIR)

# rating_0_10 is always rendered as 11 discrete buckets.
RATING_MIN = 0
RATING_MAX = 10

# Lexical formats for date/time fields (no timezone handling).
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# Field types whose definition must carry a non-empty option list.
OPTION_FIELD_TYPES: frozenset[str] = frozenset(
    {"select", "multi_select", "checkbox_group", "likert"}
)
