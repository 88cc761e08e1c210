"""Type-aware coercion of winning extraction values."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import TYPE_CHECKING

from courtdesk.domain.model import DeclaredType

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from courtdesk.domain.model import EnumerationOption

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_MONTH_FIRST_DATE = re.compile(r"(\d{1,2})[/-](\d{1,2})[/-](\d{4})")
_WRITTEN_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y")
_SEPARATORS = re.compile(r"_+")


def normalize_date(value: object) -> object:
    """Return ``YYYY-MM-DD`` for recognisable dates, otherwise ``value`` unchanged.

    Timestamps keep the calendar date they were written with.
    """

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return value

    text = value.strip()
    if not text:
        return value

    parsed = _parse_iso(text) or _parse_month_first(text) or _parse_written(text)
    if parsed is None:
        return value
    return parsed.isoformat()


def _parse_iso(text: str) -> date | None:
    match = _ISO_DATE.match(text)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    return _safe_date(year, month, day)


def _parse_month_first(text: str) -> date | None:
    match = _MONTH_FIRST_DATE.search(text)
    if match is None:
        return None
    month, day, year = (int(part) for part in match.groups())
    return _safe_date(year, month, day)


def _parse_written(text: str) -> date | None:
    for fmt in _WRITTEN_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def match_option(raw: object, options: Sequence[EnumerationOption]) -> EnumerationOption | None:
    """Case-insensitive, trimmed exact match of ``raw`` against option labels."""

    if raw is None:
        return None
    wanted = str(raw).strip().lower()
    if not wanted:
        return None
    for option in options:
        if option.label.strip().lower() == wanted:
            return option
    return None


def humanize_field_name(field_name: str) -> str:
    """``Date_of_Ticket__c`` -> ``Date Of Ticket C``."""

    words = _SEPARATORS.sub(" ", field_name).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def label_for(field_name: str, labels: Mapping[str, str] | None) -> str:
    """Look up a display label; the label table is keyed by lower-cased field name."""

    if labels:
        label = labels.get(field_name.lower()) or labels.get(field_name)
        if label:
            return label
    return humanize_field_name(field_name)


def coerce_winner(
    raw: object,
    declared_type: DeclaredType,
    options: Sequence[EnumerationOption] | None,
) -> tuple[object, object]:
    """Return ``(current_value, extracted_value)`` for a winning raw value.

    ``options`` is ``None`` when the option list could not be loaded; enumerated
    fields then keep the raw value instead of clearing it.
    """

    if declared_type is DeclaredType.DATE:
        normalized = normalize_date(raw)
        return normalized, normalized
    if declared_type is DeclaredType.ENUMERATED:
        if not options:
            return raw, raw
        option = match_option(raw, options)
        return (option.value if option is not None else None), raw
    return raw, raw
