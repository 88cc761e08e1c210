"""Domain model for ticket review sessions."""

from __future__ import annotations

from .court import Court, ResolutionHints, StateDirectory
from .documents import (
    CaseRecord,
    DocumentFeed,
    DocumentWarning,
    EnumerationOption,
    ProcessingResult,
    RawExtraction,
    SourceDocument,
    UnprocessedSource,
)
from .enums import (
    DeclaredType,
    EditorMode,
    ReconciliationStatus,
    SaveStatus,
    WorkflowState,
    declared_type_for,
)
from .review import AuditEntry, ReviewField

__all__ = [
    "AuditEntry",
    "CaseRecord",
    "Court",
    "DeclaredType",
    "DocumentFeed",
    "DocumentWarning",
    "EditorMode",
    "EnumerationOption",
    "ProcessingResult",
    "RawExtraction",
    "ReconciliationStatus",
    "ResolutionHints",
    "ReviewField",
    "SaveStatus",
    "SourceDocument",
    "StateDirectory",
    "UnprocessedSource",
    "WorkflowState",
    "declared_type_for",
]
