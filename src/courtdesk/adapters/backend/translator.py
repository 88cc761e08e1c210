"""Translate backend payloads into domain objects and back."""

from __future__ import annotations

from typing import TYPE_CHECKING

from courtdesk.domain.model import (
    CaseRecord,
    Court,
    DocumentFeed,
    EnumerationOption,
    ProcessingResult,
    SourceDocument,
    UnprocessedSource,
)
from courtdesk.domain.ports import CatalogSaveResult, CatalogSearchResult, CoverageResult

from .schema import (
    CourtPayload,
    ExtractionLogPayload,
    ExtractionLogRequest,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from courtdesk.domain.model import AuditEntry

    from .schema import (
        CasePayload,
        CourtSaveResponse,
        CourtSearchResponse,
        CoverageResponse,
        FilesResponse,
        OptionPayload,
        ProcessingResultPayload,
        UnprocessedFilePayload,
    )


def to_case_record(payload: CasePayload) -> CaseRecord:
    return CaseRecord(
        id=payload.id,
        driver_ref=payload.driver,
        linked_record_ref=payload.ticket,
        instructions=payload.special_instructions,
        description=payload.description,
        agent_ref=payload.agent,
    )


def to_document_feed(payload: FilesResponse) -> DocumentFeed:
    documents = tuple(
        SourceDocument(
            id=file.id,
            display_name=file.name or "Untitled Document",
            extraction_payload=file.ocr_response,
            url=file.url,
        )
        for file in payload.files
    )
    field_types = {
        name: describe.field_type
        for name, describe in payload.field_describes.items()
        if describe.field_type
    }
    return DocumentFeed(
        documents=documents,
        field_labels=dict(payload.field_labels),
        field_types=field_types,
    )


def to_options(payloads: Iterable[OptionPayload]) -> tuple[EnumerationOption, ...]:
    return tuple(EnumerationOption(label=option.label, value=option.value) for option in payloads)


def to_court(payload: CourtPayload) -> Court:
    return Court(
        id=payload.id,
        name=payload.name,
        phone=payload.phone,
        county=payload.county,
        street=payload.street,
        city=payload.city,
        state_code=payload.state_code,
        postal_code=payload.postal_code,
    )


def court_to_payload(court: Court) -> dict[str, object]:
    """Court fields keyed by backend field name; the id is never sent in the body."""

    payload = CourtPayload(
        name=court.name,
        phone=court.phone,
        county=court.county,
        street=court.street,
        city=court.city,
        state_code=court.state_code,
        postal_code=court.postal_code,
    )
    return payload.model_dump(by_alias=True, exclude={"id"})


def to_search_result(payload: CourtSearchResponse) -> CatalogSearchResult:
    return CatalogSearchResult(
        courts=tuple(to_court(court) for court in payload.courts),
        preselected=to_court(payload.preselected_court) if payload.preselected_court else None,
    )


def to_save_result(payload: CourtSaveResponse) -> CatalogSaveResult:
    return CatalogSaveResult(
        is_success=payload.is_success,
        is_duplicate=payload.is_duplicate,
        record=to_court(payload.record) if payload.record else None,
        duplicate_record=to_court(payload.duplicate_record) if payload.duplicate_record else None,
        message=payload.message,
    )


def to_coverage(payload: CoverageResponse) -> CoverageResult:
    return CoverageResult(
        opportunity_ref=payload.opp_id,
        coverage_status=payload.driver_coverage,
        type_classification=payload.type_ticket,
    )


def to_unprocessed_sources(
    payloads: Iterable[UnprocessedFilePayload],
) -> tuple[UnprocessedSource, ...]:
    return tuple(UnprocessedSource(id=file.id, name=file.name) for file in payloads)


def to_processing_results(
    payloads: Iterable[ProcessingResultPayload],
) -> tuple[ProcessingResult, ...]:
    return tuple(
        ProcessingResult(
            source_id=result.file_id,
            name=result.file_name,
            success=result.success,
            source_type=result.file_type,
            message=result.message,
        )
        for result in payloads
    )


def to_extraction_log_request(
    case_id: str,
    record_id: str,
    source_id: str | None,
    entries: Sequence[AuditEntry],
) -> dict[str, object]:
    request = ExtractionLogRequest(
        case_id=case_id,
        ticket_id=record_id,
        file_id=source_id,
        logs=[
            ExtractionLogPayload(
                field_name=entry.field_name,
                extracted_value=entry.extracted_value,
                is_accurate=entry.is_accurate,
                reviewer_notes=entry.reviewer_note,
                expected_value=entry.expected_value,
                ai_reason=entry.rationale,
            )
            for entry in entries
        ],
    )
    return request.model_dump(by_alias=True, mode="json")
