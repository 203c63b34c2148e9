"""Static compliance catalogs: clauses, templates and tick marks."""

from .clauses import DEFAULT_CLAUSE_CATALOG, ISO27001_CLAUSES, ClauseCatalog
from .iso27001_2022 import ISO27001_2022_TEMPLATE, ISO27001_2022_TEMPLATE_ID
from .registry import TemplateCatalog, default_catalog
from .tick_marks import (
    TICK_MARKS,
    get_tick_mark_by_code,
    get_tick_mark_categories,
    get_tick_marks_by_category,
    get_tick_marks_by_codes,
)

__all__ = [
    "ClauseCatalog",
    "DEFAULT_CLAUSE_CATALOG",
    "ISO27001_CLAUSES",
    "ISO27001_2022_TEMPLATE",
    "ISO27001_2022_TEMPLATE_ID",
    "TemplateCatalog",
    "default_catalog",
    "TICK_MARKS",
    "get_tick_mark_by_code",
    "get_tick_mark_categories",
    "get_tick_marks_by_category",
    "get_tick_marks_by_codes",
]
