"""Source documents and the raw extractions they carry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RawExtraction:
    """One extracted value for one field, scoped to a single source document."""

    value: object
    confidence_score: float
    rationale: str | None = None


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """Scanned document as delivered by the document feed.

    ``extraction_payload`` is kept exactly as received (JSON text or an already
    decoded mapping); parsing happens during reconciliation so a malformed payload
    only affects its own document.
    """

    id: str
    display_name: str = "Untitled Document"
    extraction_payload: str | Mapping[str, object] | None = None
    url: str | None = None

    @property
    def is_pdf(self) -> bool:
        return self.display_name.lower().endswith(".pdf")


@dataclass(frozen=True, slots=True)
class DocumentWarning:
    """Non-fatal, per-document reconciliation problem."""

    document_id: str
    document_name: str
    message: str


@dataclass(frozen=True, slots=True)
class EnumerationOption:
    label: str
    value: str


@dataclass(frozen=True, slots=True)
class DocumentFeed:
    """Payload of the document feed: documents plus field metadata."""

    documents: tuple[SourceDocument, ...] = ()
    field_labels: Mapping[str, str] | None = None
    field_types: Mapping[str, str] | None = None

    @property
    def has_documents(self) -> bool:
        return bool(self.documents)


@dataclass(frozen=True, slots=True)
class CaseRecord:
    """Primary record the review session is opened for."""

    id: str
    driver_ref: str | None = None
    linked_record_ref: str | None = None
    instructions: str | None = None
    description: str | None = None
    agent_ref: str | None = None

    @property
    def combined_comments(self) -> str:
        parts = [part for part in (self.instructions, self.description) if part]
        return "\n".join(parts)


@dataclass(frozen=True, slots=True)
class UnprocessedSource:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class ProcessingResult:
    source_id: str
    name: str
    success: bool
    source_type: str | None = None
    message: str | None = None
