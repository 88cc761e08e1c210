"""Court catalog entities and US state normalization."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .documents import EnumerationOption


@dataclass(frozen=True, slots=True, kw_only=True)
class Court:
    """Catalog court or a client-side draft of one.

    ``id`` is only present for catalog-persisted courts.
    """

    id: str | None = None
    name: str | None = None
    phone: str | None = None
    county: str | None = None
    street: str | None = None
    city: str | None = None
    state_code: str | None = None
    postal_code: str | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @property
    def is_incomplete(self) -> bool:
        """Address lacks street, postal code or city."""

        return not (self.street and self.postal_code and self.city)

    def with_changes(self, **changes: str | None) -> Court:
        return replace(self, **changes)

    def as_draft(self) -> Court:
        """Shallow copy without catalog identity."""

        return replace(self, id=None)


@dataclass(frozen=True, slots=True)
class ResolutionHints:
    """Extracted court hints handed from reconciliation to entity resolution."""

    name: str | None = None
    phone: str | None = None
    county: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.phone or self.county)


@dataclass(frozen=True, slots=True)
class StateDirectory:
    """Two-way lookup between state codes and display names.

    Built from the state option feed; an empty directory (feed failed) leaves
    values untouched instead of normalizing them.
    """

    name_by_code: dict[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def from_options(cls, options: Iterable[EnumerationOption]) -> StateDirectory:
        return cls(name_by_code={option.value.upper(): option.label for option in options})

    @property
    def is_available(self) -> bool:
        return bool(self.name_by_code)

    def to_code(self, text: str | None) -> str | None:
        """Return the state code for a code or a display name, else ``None``."""

        if not text or not self.name_by_code:
            return None
        trimmed = text.strip()
        upper = trimmed.upper()
        if upper in self.name_by_code:
            return upper
        lowered = trimmed.lower()
        for code, name in self.name_by_code.items():
            if name.lower() == lowered:
                return code
        return None

    def to_name(self, code: str | None) -> str | None:
        if not code:
            return code
        return self.name_by_code.get(code.upper(), code)
