"""Domain port definitions for adapters."""

from __future__ import annotations

from .backend import (
    AuditTrailSink,
    CaseRecordSource,
    CatalogSaveResult,
    CatalogSearchResult,
    CourtCatalog,
    CoverageResult,
    CoverageService,
    DocumentSource,
    EnumerationSource,
    FinalRecordRequest,
    RecordCreator,
    ReviewBackend,
    SourceProcessor,
    StateSource,
)
from .events import NullSessionEvents, SessionEvents

__all__ = [
    "AuditTrailSink",
    "CaseRecordSource",
    "CatalogSaveResult",
    "CatalogSearchResult",
    "CourtCatalog",
    "CoverageResult",
    "CoverageService",
    "DocumentSource",
    "EnumerationSource",
    "FinalRecordRequest",
    "NullSessionEvents",
    "RecordCreator",
    "ReviewBackend",
    "SessionEvents",
    "SourceProcessor",
    "StateSource",
]
