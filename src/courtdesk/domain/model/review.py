"""Reviewable field model."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .documents import EnumerationOption
from .enums import DeclaredType


def _as_text(value: object) -> str:
    return "" if value is None else str(value)


def _folded(value: object) -> str:
    return _as_text(value).strip().casefold()


@dataclass(frozen=True, slots=True, kw_only=True)
class ReviewField:
    """Reconciled, user-editable field.

    ``extracted_value`` is the audit baseline and never changes after
    reconciliation; edits go through :meth:`with_value`, which recomputes
    ``is_accurate``.
    """

    field_id: str
    field_name: str
    label: str
    extracted_value: object
    current_value: object
    declared_type: DeclaredType = DeclaredType.TEXT
    is_accurate: bool = True
    reviewer_note: str = ""
    rationale: str = ""
    options: tuple[EnumerationOption, ...] = field(default_factory=tuple)

    @property
    def is_enumerated(self) -> bool:
        return self.declared_type is DeclaredType.ENUMERATED

    def accuracy_for(self, value: object) -> bool:
        """Whether ``value`` agrees with the extracted value.

        Enumerated fields compare the chosen option's display label (or the raw
        value itself) case- and whitespace-insensitively; other types compare
        their text form exactly.
        """

        if self.is_enumerated:
            expected = _folded(self.extracted_value)
            if _folded(value) == expected:
                return True
            option = next((opt for opt in self.options if opt.value == value), None)
            return option is not None and _folded(option.label) == expected
        return _as_text(value) == _as_text(self.extracted_value)

    def with_value(self, value: object) -> ReviewField:
        return replace(self, current_value=value, is_accurate=self.accuracy_for(value))

    def with_note(self, note: str) -> ReviewField:
        return replace(self, reviewer_note=note)


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """Per-field review outcome handed to the audit trail sink."""

    field_name: str
    extracted_value: object
    is_accurate: bool
    reviewer_note: str
    expected_value: object
    rationale: str

    @classmethod
    def from_field(cls, review_field: ReviewField) -> AuditEntry:
        return cls(
            field_name=review_field.field_name,
            extracted_value=review_field.extracted_value,
            is_accurate=review_field.is_accurate,
            reviewer_note=review_field.reviewer_note,
            expected_value=review_field.current_value,
            rationale=review_field.rationale,
        )
