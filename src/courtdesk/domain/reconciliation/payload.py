"""Parsing of per-document extraction payloads.

Payloads map a field name to ``{"value": ..., "confidence_score": <number>,
"ai_reason": "..."}``. A payload that is not a JSON object fails the whole
document; individual entries without a value or without a finite numeric
confidence are skipped without a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from courtdesk.domain.model import RawExtraction

if TYPE_CHECKING:
    from collections.abc import Collection

    from courtdesk.domain.model import SourceDocument

log = logging.getLogger(__name__)

_PAYLOAD_ADAPTER: TypeAdapter[dict[str, Any]] = TypeAdapter(dict[str, Any])


class ExtractionPayloadError(ValueError):
    """Raised when a document's extraction payload cannot be parsed."""

    def __init__(self, document: SourceDocument, reason: str) -> None:
        super().__init__(f"Invalid extraction data in document {document.display_name}: {reason}")
        self.document_id = document.id
        self.document_name = document.display_name
        self.reason = reason


class ExtractionEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    value: Any = None
    confidence_score: Annotated[float, Strict(), Field(allow_inf_nan=False)] | None = None
    rationale: Any = Field(
        default=None,
        validation_alias=AliasChoices("ai_reason", "rationale"),
    )

    @field_validator("rationale", mode="after")
    @classmethod
    def _rationale_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value)

    def to_extraction(self) -> RawExtraction | None:
        if self.value is None or self.confidence_score is None:
            return None
        return RawExtraction(
            value=self.value,
            confidence_score=self.confidence_score,
            rationale=self.rationale,
        )


def parse_extraction_payload(
    document: SourceDocument,
    *,
    allowed_fields: Collection[str] | None = None,
) -> dict[str, RawExtraction]:
    """Return the well-formed extractions of ``document`` keyed by field name.

    Raises :class:`ExtractionPayloadError` when the payload itself is malformed.
    """

    payload = document.extraction_payload
    if payload is None or (isinstance(payload, str) and not payload.strip()):
        return {}

    try:
        if isinstance(payload, str):
            entries = _PAYLOAD_ADAPTER.validate_json(payload)
        elif isinstance(payload, Mapping):
            entries = _PAYLOAD_ADAPTER.validate_python(dict(payload))
        else:
            raise ExtractionPayloadError(document, f"unsupported payload type {type(payload)}")
    except ValidationError as exc:
        raise ExtractionPayloadError(document, _first_error(exc)) from exc

    extractions: dict[str, RawExtraction] = {}
    for field_name, raw_entry in entries.items():
        if allowed_fields is not None and field_name not in allowed_fields:
            continue
        extraction = _parse_entry(raw_entry)
        if extraction is None:
            log.debug("Skipping unusable extraction %s in document %s", field_name, document.id)
            continue
        extractions[field_name] = extraction
    return extractions


def _parse_entry(raw_entry: object) -> RawExtraction | None:
    if not isinstance(raw_entry, Mapping):
        return None
    try:
        entry = ExtractionEntry.model_validate(raw_entry)
    except ValidationError:
        return None
    return entry.to_extraction()


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    return str(errors[0].get("msg", exc))
