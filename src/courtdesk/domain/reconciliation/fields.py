"""Owned, ordered collection of review fields and its editing contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from courtdesk.domain.model import AuditEntry
from courtdesk.domain.model.ticket import COURT_FIELD_LINKS, TICKET_STATE

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from courtdesk.domain.model import Court, ReviewField, StateDirectory


@dataclass(frozen=True, slots=True)
class FieldEdit:
    fields: tuple[ReviewField, ...]
    invalidates_selection: bool = False


class ReviewFieldSet:
    """Reviewable fields in reconciliation order.

    Edits replace the affected :class:`ReviewField` and return the new tuple.
    Unknown field ids are ignored.
    """

    def __init__(
        self,
        fields: Iterable[ReviewField] = (),
        *,
        court_links: Mapping[str, str] = COURT_FIELD_LINKS,
        state_field: str = TICKET_STATE,
    ) -> None:
        self._fields: list[ReviewField] = list(fields)
        self._court_links = dict(court_links)
        self._state_field = state_field

    @property
    def fields(self) -> tuple[ReviewField, ...]:
        return tuple(self._fields)

    @property
    def linked_field_names(self) -> frozenset[str]:
        return frozenset(self._court_links.values())

    def __iter__(self) -> Iterator[ReviewField]:
        return iter(tuple(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __bool__(self) -> bool:
        return bool(self._fields)

    def reset(self, fields: Iterable[ReviewField]) -> None:
        self._fields = list(fields)

    def get(self, field_name: str) -> ReviewField | None:
        return next((f for f in self._fields if f.field_name == field_name), None)

    def by_id(self, field_id: str) -> ReviewField | None:
        return next((f for f in self._fields if f.field_id == field_id), None)

    def value_of(self, field_name: str, default: object = None) -> object:
        review_field = self.get(field_name)
        if review_field is None:
            return default
        return review_field.current_value

    def linked_fields(self) -> tuple[ReviewField, ...]:
        linked = self.linked_field_names
        return tuple(f for f in self._fields if f.field_name in linked)

    def other_fields(self) -> tuple[ReviewField, ...]:
        linked = self.linked_field_names
        return tuple(f for f in self._fields if f.field_name not in linked)

    def set_field_value(self, field_id: str, value: object) -> FieldEdit:
        """Update one field; editing a court-linked field invalidates the court selection."""

        index = self._index_of(field_id)
        if index is None:
            return FieldEdit(fields=self.fields)
        edited = self._fields[index].with_value(value)
        self._fields[index] = edited
        return FieldEdit(
            fields=self.fields,
            invalidates_selection=edited.field_name in self.linked_field_names,
        )

    def set_reviewer_note(self, field_id: str, note: str) -> tuple[ReviewField, ...]:
        index = self._index_of(field_id)
        if index is not None:
            self._fields[index] = self._fields[index].with_note(note)
        return self.fields

    def apply_court(self, court: Court | None, states: StateDirectory) -> tuple[ReviewField, ...]:
        """Write the court's resolvable attributes into the linked fields.

        ``None`` clears every linked field. The state code is expanded to its
        display name when the state directory knows it.
        """

        for attribute, field_name in self._court_links.items():
            value: str | None = None if court is None else getattr(court, attribute)
            if field_name == self._state_field and value:
                value = states.to_name(value)
            for index, review_field in enumerate(self._fields):
                if review_field.field_name == field_name:
                    self._fields[index] = review_field.with_value(value)
        return self.fields

    def current_values(self) -> dict[str, object]:
        return {f.field_name: f.current_value for f in self._fields}

    def audit_entries(self) -> tuple[AuditEntry, ...]:
        return tuple(AuditEntry.from_field(f) for f in self._fields)

    def _index_of(self, field_id: str) -> int | None:
        for index, review_field in enumerate(self._fields):
            if review_field.field_id == field_id:
                return index
        return None
