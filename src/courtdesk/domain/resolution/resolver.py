"""Court resolution: pre-selection from hints, manual selection and the draft editor."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from courtdesk.domain.errors import friendly_error_message
from courtdesk.domain.model import Court, EditorMode, SaveStatus, StateDirectory
from courtdesk.domain.model.ticket import (
    COURT_PHONE_NUMBER,
    TICKET_CITY,
    TICKET_COUNTY,
    TICKET_COURT,
    TICKET_STATE,
)

from .deduplicate import diff_against_draft
from .search import DEFAULT_PAGE_SIZE, CourtSearch, SearchPage
from .state import DuplicateConflict, EntityResolutionState, SaveOutcome

if TYPE_CHECKING:
    from collections.abc import Callable

    from courtdesk.domain.model import ResolutionHints
    from courtdesk.domain.ports import CatalogSaveResult, CourtCatalog
    from courtdesk.domain.reconciliation import ReviewFieldSet

    from .deduplicate import FieldChange

log = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Court Name, Phone, and State are required."
PRESELECT_FAILED_PREFIX = "Could not pre-select court. "

type ResolutionObserver = Callable[[EntityResolutionState], None]


class EntityResolver:
    """Owns :class:`EntityResolutionState` and keeps the court-linked review fields in sync."""

    def __init__(
        self,
        catalog: CourtCatalog,
        fields: ReviewFieldSet,
        states: StateDirectory | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        search_debounce_seconds: float = 0.3,
    ) -> None:
        self._catalog = catalog
        self._fields = fields
        self._states = states or StateDirectory()
        self._page_size = page_size
        self._state = EntityResolutionState()
        self._observers: list[ResolutionObserver] = []
        # bumped on every selection change; in-flight pre-selection checks it
        self._selection_epoch = 0
        # bumped whenever the editor opens or closes; in-flight saves check it
        self._editor_epoch = 0
        self.search_box = CourtSearch(
            catalog, page_size=page_size, debounce_seconds=search_debounce_seconds
        )

    @property
    def state(self) -> EntityResolutionState:
        return self._state

    @property
    def fields(self) -> ReviewFieldSet:
        return self._fields

    @property
    def states(self) -> StateDirectory:
        return self._states

    @states.setter
    def states(self, directory: StateDirectory) -> None:
        self._states = directory

    def subscribe(self, observer: ResolutionObserver) -> Callable[[], None]:
        """Register ``observer`` for state changes; returns an unsubscribe callable."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    # ------------------------------------------------------------------
    # selection

    async def resolve_from_hints(self, hints: ResolutionHints) -> Court | None:
        """Best-effort pre-selection from extracted name/phone/county hints."""

        if hints.is_empty:
            return None
        epoch = self._selection_epoch
        self._update(is_loading=True, message=None)
        try:
            result = await self._catalog.search_courts("", 0, hints)
        except Exception as exc:  # noqa: BLE001
            message = PRESELECT_FAILED_PREFIX + friendly_error_message(exc)
            log.warning(message)
            self._update(is_loading=False, message=message)
            return None

        if epoch != self._selection_epoch:
            log.debug("Discarding pre-selection; selection changed while resolving")
            self._update(is_loading=False)
            return None
        if result.preselected is None:
            self._update(is_loading=False)
            return None
        self._select(result.preselected, is_loading=False)
        return result.preselected

    async def search(self, term: str, offset: int = 0) -> SearchPage:
        """One page of catalog results; an empty term returns the default first page."""

        try:
            result = await self._catalog.search_courts(term, offset)
        except Exception as exc:  # noqa: BLE001
            message = f"Error searching courts: {friendly_error_message(exc)}"
            log.warning(message)
            self._update(message=message)
            return SearchPage()
        return SearchPage.from_courts(result.courts, self._page_size)

    def select_existing(self, court: Court) -> None:
        self._select(court)

    def clear_selection(self) -> None:
        """Drop the selection and blank every linked review field."""

        self._fields.apply_court(None, self._states)
        self.invalidate_selection()

    def invalidate_selection(self) -> None:
        """Drop the selection but leave the linked review fields as they are.

        Used when the reviewer edits a linked field by hand. A pre-selection still
        in flight is discarded even when nothing was selected yet.
        """

        self._selection_epoch += 1
        if not self._state.has_selection:
            return
        self._update(
            preselected=None,
            selected_id=None,
            version=self._state.version + 1,
        )

    def is_court_incomplete(self) -> bool:
        court = self._state.preselected
        return court is not None and court.is_incomplete

    def web_search_query(self) -> str:
        """Phone and name of the court being edited or selected, for an external web lookup."""

        court = self._state.draft if self._state.editor_open else self._state.preselected
        if court is not None:
            phone, name = court.phone, court.name
        else:
            phone = _text(self._fields.value_of(COURT_PHONE_NUMBER))
            name = _text(self._fields.value_of(TICKET_COURT))
        return " ".join(part.strip() for part in (phone, name) if part and part.strip())

    # ------------------------------------------------------------------
    # editor

    def open_create_draft(self, initial_name: str | None = None) -> None:
        """Open the editor for a new court seeded from the linked review fields.

        Any current selection is dropped; the linked fields keep their values.
        """

        state_text = _text(self._fields.value_of(TICKET_STATE))
        draft = Court(
            name=initial_name or _text(self._fields.value_of(TICKET_COURT)),
            phone=_text(self._fields.value_of(COURT_PHONE_NUMBER)),
            county=_text(self._fields.value_of(TICKET_COUNTY)),
            city=_text(self._fields.value_of(TICKET_CITY)),
            state_code=self._states.to_code(state_text),
        )
        self.invalidate_selection()
        self._open_editor(EditorMode.CREATE, draft)

    def open_edit_draft(self) -> None:
        court = self._state.preselected
        if court is None:
            return
        self._selection_epoch += 1
        self._open_editor(EditorMode.EDIT, court.as_draft())

    def update_draft(self, **changes: str | None) -> Court:
        draft = self._state.draft.with_changes(**changes)
        self._update(draft=draft)
        return draft

    def cancel_edit(self) -> None:
        self._editor_epoch += 1
        self._update(
            editor_open=False,
            conflict=None,
            draft=Court(),
            is_saving=False,
            message=None,
        )

    async def save(self) -> SaveOutcome:
        """Validate and save the draft; a duplicate enters the conflict sub-state."""

        draft = self._state.draft
        if not (draft.name and draft.phone and draft.state_code):
            self._update(message=REQUIRED_FIELDS_MESSAGE)
            return SaveOutcome(status=SaveStatus.REJECTED, message=REQUIRED_FIELDS_MESSAGE)

        mode = self._state.editor_mode
        target_id = self._state.selected_id if mode is EditorMode.EDIT else None
        epoch = self._editor_epoch
        self._update(is_saving=True, message=None)
        try:
            if target_id is not None:
                result = await self._catalog.update_court(target_id, draft)
            else:
                result = await self._catalog.create_court(draft)
        except Exception as exc:  # noqa: BLE001
            return self._save_failed(epoch, exc)

        success = SaveStatus.UPDATED if target_id is not None else SaveStatus.CREATED
        return self._apply_save_result(epoch, result, draft, success)

    def diff_against_draft(self) -> tuple[FieldChange, ...]:
        conflict = self._state.conflict
        if conflict is None:
            return ()
        return diff_against_draft(conflict.candidate, self._state.draft)

    def use_existing(self) -> None:
        """Select the duplicate as-is, discarding the draft."""

        conflict = self._state.conflict
        if conflict is None:
            return
        self._select(conflict.candidate)

    async def update_and_use(self) -> SaveOutcome:
        """Apply the draft's edits onto the duplicate's identity, then select it."""

        conflict = self._state.conflict
        if conflict is None or conflict.candidate.id is None:
            return SaveOutcome(status=SaveStatus.REJECTED, message="No duplicate court to update.")

        draft = self._state.draft
        epoch = self._editor_epoch
        self._update(is_saving=True, message=None)
        try:
            result = await self._catalog.update_court(conflict.candidate.id, draft)
        except Exception as exc:  # noqa: BLE001
            return self._save_failed(epoch, exc)
        return self._apply_save_result(epoch, result, draft, SaveStatus.UPDATED)

    def go_back(self) -> None:
        """Leave the conflict view and return to the editor with the draft intact."""

        self._update(conflict=None)

    # ------------------------------------------------------------------
    # internals

    def _open_editor(self, mode: EditorMode, draft: Court) -> None:
        self._editor_epoch += 1
        self._update(
            editor_open=True,
            editor_mode=mode,
            draft=draft,
            conflict=None,
            is_saving=False,
            message=None,
        )

    def _select(self, court: Court, **extra: object) -> None:
        self._selection_epoch += 1
        self._editor_epoch += 1
        self._fields.apply_court(court, self._states)
        self._update(
            preselected=court,
            selected_id=court.id,
            editor_open=False,
            conflict=None,
            draft=Court(),
            is_saving=False,
            version=self._state.version + 1,
            **extra,
        )

    def _save_failed(self, epoch: int, exc: Exception) -> SaveOutcome:
        message = f"Error saving court: {friendly_error_message(exc)}"
        if epoch != self._editor_epoch:
            log.debug("Discarding failed save; editor closed meanwhile")
            return SaveOutcome(status=SaveStatus.REJECTED, message=message, applied=False)
        log.warning(message)
        self._update(is_saving=False, message=message)
        return SaveOutcome(status=SaveStatus.REJECTED, message=message)

    def _apply_save_result(
        self,
        epoch: int,
        result: CatalogSaveResult,
        draft: Court,
        success_status: SaveStatus,
    ) -> SaveOutcome:
        if result.is_duplicate and result.duplicate_record is not None:
            status = SaveStatus.DUPLICATE
        elif result.is_success and result.record is not None:
            status = success_status
        else:
            status = SaveStatus.REJECTED

        message = None
        if status is SaveStatus.REJECTED:
            message = result.message or "Error saving court."

        outcome = SaveOutcome(
            status=status,
            record=result.record,
            duplicate=result.duplicate_record,
            message=message,
        )
        if epoch != self._editor_epoch:
            log.debug("Discarding save result (%s); editor closed meanwhile", status)
            return replace(outcome, applied=False)

        if status is SaveStatus.DUPLICATE and result.duplicate_record is not None:
            conflict = DuplicateConflict(
                candidate=result.duplicate_record,
                changes=diff_against_draft(result.duplicate_record, draft),
            )
            self._update(is_saving=False, conflict=conflict)
        elif status is SaveStatus.REJECTED:
            log.warning("Court save rejected: %s", message)
            self._update(is_saving=False, message=message)
        elif result.record is not None:
            self._select(result.record)
        return outcome

    def _update(self, **changes: object) -> None:
        self._state = replace(self._state, **changes)  # type: ignore[arg-type]
        for observer in tuple(self._observers):
            observer(self._state)


def _text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
