"""Entity resolution state, including the nested duplicate-conflict variant."""

from __future__ import annotations

from dataclasses import dataclass, field

from courtdesk.domain.model import Court, EditorMode, SaveStatus

from .deduplicate import FieldChange


@dataclass(frozen=True, slots=True)
class DuplicateConflict:
    """A save collided with an existing catalog court."""

    candidate: Court
    changes: tuple[FieldChange, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityResolutionState:
    """Snapshot of the court selection and editor.

    ``version`` increases every time the selected court object is replaced,
    even by one with identical values.
    """

    preselected: Court | None = None
    selected_id: str | None = None
    editor_open: bool = False
    editor_mode: EditorMode = EditorMode.CREATE
    draft: Court = field(default_factory=Court)
    conflict: DuplicateConflict | None = None
    version: int = 0
    message: str | None = None
    is_loading: bool = False
    is_saving: bool = False

    @property
    def duplicate_candidate(self) -> Court | None:
        return self.conflict.candidate if self.conflict is not None else None

    @property
    def in_conflict(self) -> bool:
        return self.conflict is not None

    @property
    def has_selection(self) -> bool:
        return self.selected_id is not None or self.preselected is not None


@dataclass(frozen=True, slots=True)
class SaveOutcome:
    """Result of saving the draft court.

    ``applied`` is false when the editor closed while the call was in flight
    and the result was discarded.
    """

    status: SaveStatus
    record: Court | None = None
    duplicate: Court | None = None
    message: str | None = None
    applied: bool = True
