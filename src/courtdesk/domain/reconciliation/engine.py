"""Confidence-scored merge of per-document extractions into review fields."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from courtdesk.domain.model import (
    DeclaredType,
    DocumentWarning,
    ReconciliationStatus,
    ResolutionHints,
    ReviewField,
)
from courtdesk.domain.model.ticket import COURT_PHONE_NUMBER, TICKET_COUNTY, TICKET_COURT

from .normalize import coerce_winner, label_for
from .payload import ExtractionPayloadError, parse_extraction_payload

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from courtdesk.domain.model import EnumerationOption, RawExtraction, SourceDocument

log = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No valid OCR data found in the specified fields across all files."


@dataclass(frozen=True, slots=True)
class Winner:
    document_id: str
    extraction: RawExtraction


@dataclass(frozen=True, slots=True)
class HintFields:
    """Which reviewed fields seed court resolution."""

    name: str = TICKET_COURT
    phone: str = COURT_PHONE_NUMBER
    county: str = TICKET_COUNTY


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    status: ReconciliationStatus
    fields: tuple[ReviewField, ...] = ()
    warnings: tuple[DocumentWarning, ...] = ()
    hints: ResolutionHints = field(default_factory=ResolutionHints)
    winners: dict[str, Winner] = field(default_factory=dict[str, Winner])

    @property
    def has_fields(self) -> bool:
        return bool(self.fields)

    @property
    def message(self) -> str | None:
        if self.status is ReconciliationStatus.NO_DATA:
            return NO_DATA_MESSAGE
        return None


def select_winners(
    documents: Iterable[SourceDocument],
    allowlist: Iterable[str],
) -> tuple[dict[str, Winner], list[DocumentWarning]]:
    """Single pass over (document, field) keeping the strictly best confidence per field."""

    allowed = frozenset(allowlist)
    best: dict[str, Winner] = {}
    warnings: list[DocumentWarning] = []

    for document in documents:
        try:
            extractions = parse_extraction_payload(document, allowed_fields=allowed)
        except ExtractionPayloadError as exc:
            log.warning("Skipping document %s: %s", document.id, exc.reason)
            warnings.append(
                DocumentWarning(
                    document_id=document.id,
                    document_name=document.display_name,
                    message=f"Invalid OCR data in file {document.display_name}.",
                )
            )
            continue

        for field_name, extraction in extractions.items():
            holder = best.get(field_name)
            if holder is None or extraction.confidence_score > holder.extraction.confidence_score:
                best[field_name] = Winner(document_id=document.id, extraction=extraction)

    return best, warnings


def reconcile(
    documents: Sequence[SourceDocument],
    allowlist: Sequence[str],
    type_info: Mapping[str, DeclaredType],
    enumeration_options: Mapping[str, Sequence[EnumerationOption] | None],
    labels: Mapping[str, str] | None = None,
    *,
    hint_fields: HintFields | None = None,
) -> ReconciliationResult:
    """Build the reviewable field set from ``documents``.

    Fields appear in ``allowlist`` order. A field listed in
    ``enumeration_options`` is treated as enumerated even when ``type_info``
    does not say so.
    """

    if not documents or not allowlist:
        return ReconciliationResult(status=ReconciliationStatus.NOT_ATTEMPTED)

    winners, warnings = select_winners(documents, allowlist)
    if not winners:
        log.info("No usable extractions across %d documents", len(documents))
        return ReconciliationResult(
            status=ReconciliationStatus.NO_DATA,
            warnings=tuple(warnings),
        )

    fields: list[ReviewField] = []
    for field_name in allowlist:
        winner = winners.get(field_name)
        if winner is None:
            continue
        declared_type = _declared_type(field_name, type_info, enumeration_options)
        options = enumeration_options.get(field_name)
        current, extracted = coerce_winner(winner.extraction.value, declared_type, options)
        fields.append(
            ReviewField(
                field_id=f"{field_name}-{len(fields)}",
                field_name=field_name,
                label=label_for(field_name, labels),
                extracted_value=extracted,
                current_value=current,
                declared_type=declared_type,
                is_accurate=True,
                rationale=winner.extraction.rationale or "",
                options=tuple(options or ()),
            )
        )

    return ReconciliationResult(
        status=ReconciliationStatus.RECONCILED,
        fields=tuple(fields),
        warnings=tuple(warnings),
        hints=_hints(winners, hint_fields or HintFields()),
        winners=winners,
    )


def _declared_type(
    field_name: str,
    type_info: Mapping[str, DeclaredType],
    enumeration_options: Mapping[str, Sequence[EnumerationOption] | None],
) -> DeclaredType:
    if field_name in enumeration_options:
        return DeclaredType.ENUMERATED
    return type_info.get(field_name, DeclaredType.TEXT)


def _hints(winners: Mapping[str, Winner], hint_fields: HintFields) -> ResolutionHints:
    def _text(field_name: str) -> str | None:
        winner = winners.get(field_name)
        if winner is None:
            return None
        return str(winner.extraction.value)

    return ResolutionHints(
        name=_text(hint_fields.name),
        phone=_text(hint_fields.phone),
        county=_text(hint_fields.county),
    )
