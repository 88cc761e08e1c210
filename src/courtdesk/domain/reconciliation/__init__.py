"""Field reconciliation: merge extractions from many documents into one reviewable record."""

from __future__ import annotations

from .engine import (
    NO_DATA_MESSAGE,
    HintFields,
    ReconciliationResult,
    Winner,
    reconcile,
    select_winners,
)
from .fields import FieldEdit, ReviewFieldSet
from .normalize import coerce_winner, humanize_field_name, label_for, match_option, normalize_date
from .payload import ExtractionEntry, ExtractionPayloadError, parse_extraction_payload

__all__ = [
    "NO_DATA_MESSAGE",
    "ExtractionEntry",
    "ExtractionPayloadError",
    "FieldEdit",
    "HintFields",
    "ReconciliationResult",
    "ReviewFieldSet",
    "Winner",
    "coerce_winner",
    "humanize_field_name",
    "label_for",
    "match_option",
    "normalize_date",
    "parse_extraction_payload",
    "reconcile",
    "select_winners",
]
