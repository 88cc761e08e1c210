"""Ports for the backend collaborators a review session talks to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from courtdesk.domain.model import (
        AuditEntry,
        CaseRecord,
        Court,
        DocumentFeed,
        EnumerationOption,
        ProcessingResult,
        ResolutionHints,
        UnprocessedSource,
    )


@dataclass(frozen=True, slots=True)
class CatalogSearchResult:
    """One page of catalog courts plus an optional best match for the supplied hints."""

    courts: tuple[Court, ...] = ()
    preselected: Court | None = None


@dataclass(frozen=True, slots=True)
class CatalogSaveResult:
    """Outcome of creating or updating a catalog court."""

    is_success: bool
    is_duplicate: bool = False
    record: Court | None = None
    duplicate_record: Court | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class CoverageResult:
    opportunity_ref: str | None = None
    coverage_status: str | None = None
    type_classification: str | None = None


@dataclass(frozen=True, slots=True)
class FinalRecordRequest:
    """Field values submitted when the ticket record is created."""

    values: Mapping[str, object] = field(default_factory=dict[str, object])


@runtime_checkable
class CaseRecordSource(Protocol):
    async def fetch_case_record(self, case_id: str) -> CaseRecord: ...


@runtime_checkable
class DocumentSource(Protocol):
    async def fetch_documents(self, case_id: str) -> DocumentFeed: ...


@runtime_checkable
class EnumerationSource(Protocol):
    async def fetch_enumeration_options(self, field_name: str) -> Sequence[EnumerationOption]: ...


@runtime_checkable
class StateSource(Protocol):
    async def fetch_states(self) -> Sequence[EnumerationOption]: ...


@runtime_checkable
class CourtCatalog(Protocol):
    """Search and maintenance of the court catalog."""

    async def search_courts(
        self,
        term: str,
        offset: int = 0,
        hints: ResolutionHints | None = None,
    ) -> CatalogSearchResult:
        """Return one page of courts; ``hints`` requests a best-effort pre-selection."""
        ...

    async def create_court(self, draft: Court) -> CatalogSaveResult: ...

    async def update_court(self, court_id: str, draft: Court) -> CatalogSaveResult: ...


@runtime_checkable
class CoverageService(Protocol):
    async def compute_coverage(
        self, driver_ref: str | None, date_of_ticket: object
    ) -> CoverageResult: ...


@runtime_checkable
class SourceProcessor(Protocol):
    """Manual processing of scanned source files that have not been extracted yet."""

    async def fetch_unprocessed_sources(self, case_id: str) -> Sequence[UnprocessedSource]: ...

    async def process_sources_now(self, case_id: str) -> Sequence[ProcessingResult]: ...


@runtime_checkable
class AuditTrailSink(Protocol):
    async def persist_audit_trail(
        self,
        case_id: str,
        record_id: str,
        source_id: str | None,
        entries: Sequence[AuditEntry],
    ) -> None: ...


@runtime_checkable
class RecordCreator(Protocol):
    async def create_final_record(self, request: FinalRecordRequest) -> str:
        """Create the ticket record and return its identifier."""
        ...


@runtime_checkable
class ReviewBackend(
    CaseRecordSource,
    DocumentSource,
    EnumerationSource,
    StateSource,
    CourtCatalog,
    CoverageService,
    SourceProcessor,
    AuditTrailSink,
    RecordCreator,
    Protocol,
):
    """Everything a review session needs from the backend."""
