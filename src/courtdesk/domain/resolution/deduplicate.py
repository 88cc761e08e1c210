"""Field-by-field diff between a duplicate catalog court and the user's draft."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from courtdesk.domain.model import Court

EMPTY_DISPLAY: Final = "(empty)"

# court attribute -> display label
COMPARED_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("name", "Name"),
    ("phone", "Phone"),
    ("county", "County"),
    ("street", "Street"),
    ("city", "City"),
    ("state_code", "State"),
    ("postal_code", "ZIP Code"),
)


@dataclass(frozen=True, slots=True)
class FieldChange:
    field: str
    label: str
    old_value: str
    new_value: str


def _trimmed(value: str | None) -> str:
    return (value or "").strip()


def diff_against_draft(existing: Court, draft: Court) -> tuple[FieldChange, ...]:
    """Compared fields whose trimmed values differ; empty values display as ``(empty)``."""

    changes: list[FieldChange] = []
    for attribute, label in COMPARED_FIELDS:
        old = _trimmed(getattr(existing, attribute))
        new = _trimmed(getattr(draft, attribute))
        if old == new:
            continue
        changes.append(
            FieldChange(
                field=attribute,
                label=label,
                old_value=old or EMPTY_DISPLAY,
                new_value=new or EMPTY_DISPLAY,
            )
        )
    return tuple(changes)
