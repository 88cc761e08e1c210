"""Court entity resolution with incremental search and duplicate handling."""

from __future__ import annotations

from .deduplicate import COMPARED_FIELDS, EMPTY_DISPLAY, FieldChange, diff_against_draft
from .resolver import (
    PRESELECT_FAILED_PREFIX,
    REQUIRED_FIELDS_MESSAGE,
    EntityResolver,
    ResolutionObserver,
)
from .search import DEFAULT_PAGE_SIZE, CourtSearch, SearchPage
from .state import DuplicateConflict, EntityResolutionState, SaveOutcome

__all__ = [
    "COMPARED_FIELDS",
    "DEFAULT_PAGE_SIZE",
    "EMPTY_DISPLAY",
    "PRESELECT_FAILED_PREFIX",
    "REQUIRED_FIELDS_MESSAGE",
    "CourtSearch",
    "DuplicateConflict",
    "EntityResolutionState",
    "EntityResolver",
    "FieldChange",
    "ResolutionObserver",
    "SaveOutcome",
    "SearchPage",
    "diff_against_draft",
]
