"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class DeclaredType(StrEnum):
    DATE = "date"
    ENUMERATED = "enumerated"
    NUMERIC = "numeric"
    TEXT = "text"
    BOOLEAN = "boolean"


_BACKEND_TYPE_MAP: dict[str, DeclaredType] = {
    "DATE": DeclaredType.DATE,
    "DATETIME": DeclaredType.DATE,
    "PICKLIST": DeclaredType.ENUMERATED,
    "NUMBER": DeclaredType.NUMERIC,
    "INTEGER": DeclaredType.NUMERIC,
    "DOUBLE": DeclaredType.NUMERIC,
    "CURRENCY": DeclaredType.NUMERIC,
    "PERCENT": DeclaredType.NUMERIC,
    "BOOLEAN": DeclaredType.BOOLEAN,
}


def declared_type_for(backend_type: str | None) -> DeclaredType:
    """Map a backend field-describe type (``DATE``, ``PICKLIST`` ...) onto a declared type."""

    if not backend_type:
        return DeclaredType.TEXT
    return _BACKEND_TYPE_MAP.get(backend_type.strip().upper(), DeclaredType.TEXT)


class WorkflowState(StrEnum):
    LOADING = "loading"
    PRIOR_RECORD_EXISTS = "prior_record_exists"
    NO_INPUT_AVAILABLE = "no_input_available"
    AWAITING_MANUAL_TRIGGER = "awaiting_manual_trigger"
    PROCESSING = "processing"
    PROCESSING_SUMMARY = "processing_summary"
    REVIEWING = "reviewing"
    ERROR = "error"
    FORM_EDITING = "form_editing"


class EditorMode(StrEnum):
    EDIT = "edit"
    CREATE = "create"


class SaveStatus(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


class ReconciliationStatus(StrEnum):
    """Distinguishes "nothing extracted" from "extraction not attempted"."""

    RECONCILED = "reconciled"
    NO_DATA = "no_data"
    NOT_ATTEMPTED = "not_attempted"
