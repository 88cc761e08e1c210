from __future__ import annotations

import asyncio

from courtdesk.domain.model import (
    Court,
    EditorMode,
    EnumerationOption,
    ResolutionHints,
    ReviewField,
    SaveStatus,
    StateDirectory,
)
from courtdesk.domain.model.ticket import (
    COURT_PHONE_NUMBER,
    TICKET_CITY,
    TICKET_COUNTY,
    TICKET_COURT,
    TICKET_STATE,
)
from courtdesk.domain.ports import CatalogSaveResult, CatalogSearchResult
from courtdesk.domain.reconciliation import ReviewFieldSet
from courtdesk.domain.resolution import (
    PRESELECT_FAILED_PREFIX,
    REQUIRED_FIELDS_MESSAGE,
    EntityResolutionState,
    EntityResolver,
)

STATES = StateDirectory.from_options([EnumerationOption(label="Texas", value="TX")])

METRO = Court(
    id="court-1",
    name="Metro County Court",
    phone="555-0100",
    county="Travis",
    street="1 Main St",
    city="Austin",
    state_code="TX",
    postal_code="78701",
)


class FakeCatalog:
    def __init__(self) -> None:
        self.preselected: Court | None = None
        self.search_error: Exception | None = None
        self.search_gate: asyncio.Event | None = None
        self.save_result: CatalogSaveResult | None = None
        self.save_error: Exception | None = None
        self.save_gate: asyncio.Event | None = None
        self.search_calls: list[tuple[str, int, ResolutionHints | None]] = []
        self.created: list[Court] = []
        self.updated: list[tuple[str, Court]] = []

    async def search_courts(
        self, term: str, offset: int = 0, hints: ResolutionHints | None = None
    ) -> CatalogSearchResult:
        self.search_calls.append((term, offset, hints))
        if self.search_gate is not None:
            await self.search_gate.wait()
        if self.search_error is not None:
            raise self.search_error
        return CatalogSearchResult(courts=(METRO,), preselected=self.preselected)

    async def create_court(self, draft: Court) -> CatalogSaveResult:
        self.created.append(draft)
        return await self._result(draft)

    async def update_court(self, court_id: str, draft: Court) -> CatalogSaveResult:
        self.updated.append((court_id, draft))
        return await self._result(draft.with_changes(id=court_id))

    async def _result(self, saved: Court) -> CatalogSaveResult:
        if self.save_gate is not None:
            await self.save_gate.wait()
        if self.save_error is not None:
            raise self.save_error
        if self.save_result is not None:
            return self.save_result
        record = saved if saved.id else saved.with_changes(id="court-new")
        return CatalogSaveResult(is_success=True, record=record)


def _linked_fields() -> ReviewFieldSet:
    values = {
        TICKET_COURT: "Metro Court",
        COURT_PHONE_NUMBER: "555-0100",
        TICKET_COUNTY: "Travis",
        TICKET_CITY: "Austin",
        TICKET_STATE: "Texas",
    }
    return ReviewFieldSet(
        ReviewField(
            field_id=f"{name}-{index}",
            field_name=name,
            label=name,
            extracted_value=value,
            current_value=value,
        )
        for index, (name, value) in enumerate(values.items())
    )


def _resolver(catalog: FakeCatalog | None = None) -> tuple[EntityResolver, FakeCatalog]:
    catalog = catalog or FakeCatalog()
    resolver = EntityResolver(catalog, _linked_fields(), STATES, search_debounce_seconds=0)
    return resolver, catalog


def test_preselection_selects_and_writes_back() -> None:
    resolver, catalog = _resolver()
    catalog.preselected = METRO
    hints = ResolutionHints(name="Metro Court", phone="555-0100")

    court = asyncio.run(resolver.resolve_from_hints(hints))

    assert court == METRO
    assert catalog.search_calls == [("", 0, hints)]
    state = resolver.state
    assert state.preselected == METRO
    assert state.selected_id == "court-1"
    assert state.version == 1
    assert state.is_loading is False
    assert resolver.fields.value_of(TICKET_COURT) == "Metro County Court"
    assert resolver.fields.value_of(TICKET_STATE) == "Texas"


def test_empty_hints_skip_the_catalog() -> None:
    resolver, catalog = _resolver()

    assert asyncio.run(resolver.resolve_from_hints(ResolutionHints())) is None
    assert catalog.search_calls == []


def test_preselection_failure_is_reported_not_raised() -> None:
    resolver, catalog = _resolver()
    catalog.search_error = RuntimeError("timeout")

    court = asyncio.run(resolver.resolve_from_hints(ResolutionHints(name="Metro")))

    assert court is None
    assert resolver.state.message == PRESELECT_FAILED_PREFIX + "timeout"
    assert resolver.state.has_selection is False


def test_preselection_without_match_leaves_fields_alone() -> None:
    resolver, _ = _resolver()

    court = asyncio.run(resolver.resolve_from_hints(ResolutionHints(name="Nowhere")))

    assert court is None
    assert resolver.fields.value_of(TICKET_COURT) == "Metro Court"
    assert resolver.state.version == 0


def test_manual_selection_discards_in_flight_preselection() -> None:
    resolver, catalog = _resolver()
    catalog.preselected = METRO
    manual = Court(id="court-9", name="Other Court", state_code="TX")

    async def run() -> Court | None:
        catalog.search_gate = asyncio.Event()
        task = asyncio.create_task(resolver.resolve_from_hints(ResolutionHints(name="Metro")))
        await asyncio.sleep(0)
        resolver.select_existing(manual)
        catalog.search_gate.set()
        return await task

    assert asyncio.run(run()) is None
    assert resolver.state.selected_id == "court-9"
    assert resolver.fields.value_of(TICKET_COURT) == "Other Court"


def test_create_draft_survives_in_flight_preselection() -> None:
    resolver, catalog = _resolver()
    catalog.preselected = METRO

    async def run() -> Court | None:
        catalog.search_gate = asyncio.Event()
        task = asyncio.create_task(resolver.resolve_from_hints(ResolutionHints(name="Metro")))
        await asyncio.sleep(0)
        resolver.open_create_draft("Brand New Court")
        catalog.search_gate.set()
        return await task

    assert asyncio.run(run()) is None
    state = resolver.state
    assert state.editor_open is True
    assert state.editor_mode is EditorMode.CREATE
    assert state.draft.name == "Brand New Court"
    assert state.has_selection is False
    assert resolver.fields.value_of(TICKET_COURT) == "Metro Court"


def test_linked_field_edit_survives_in_flight_preselection() -> None:
    resolver, catalog = _resolver()
    catalog.preselected = METRO

    async def run() -> Court | None:
        catalog.search_gate = asyncio.Event()
        task = asyncio.create_task(resolver.resolve_from_hints(ResolutionHints(name="Metro")))
        await asyncio.sleep(0)
        edit = resolver.fields.set_field_value(f"{TICKET_COURT}-0", "Justice Court 2")
        assert edit.invalidates_selection is True
        resolver.invalidate_selection()
        catalog.search_gate.set()
        return await task

    assert asyncio.run(run()) is None
    assert resolver.state.has_selection is False
    assert resolver.state.is_loading is False
    assert resolver.fields.value_of(TICKET_COURT) == "Justice Court 2"
    assert resolver.fields.value_of(COURT_PHONE_NUMBER) == "555-0100"


def test_incomplete_court_detection() -> None:
    resolver, _ = _resolver()
    assert resolver.is_court_incomplete() is False

    resolver.select_existing(Court(id="court-2", name="Metro", city="Austin"))

    assert resolver.is_court_incomplete() is True
    resolver.open_edit_draft()
    assert resolver.is_court_incomplete() is True


def test_reselecting_identical_court_bumps_version() -> None:
    resolver, _ = _resolver()
    versions: list[int] = []
    resolver.subscribe(lambda state: versions.append(state.version))

    resolver.select_existing(METRO)
    resolver.select_existing(METRO)

    assert resolver.state.version == 2
    assert versions == [1, 2]


def test_unsubscribe_stops_notifications() -> None:
    resolver, _ = _resolver()
    seen: list[EntityResolutionState] = []
    unsubscribe = resolver.subscribe(seen.append)

    unsubscribe()
    resolver.select_existing(METRO)

    assert seen == []


def test_clear_selection_blanks_linked_fields() -> None:
    resolver, _ = _resolver()
    resolver.select_existing(METRO)

    resolver.clear_selection()

    assert resolver.state.has_selection is False
    assert resolver.state.version == 2
    for review_field in resolver.fields.linked_fields():
        assert review_field.current_value is None


def test_invalidate_selection_keeps_field_values() -> None:
    resolver, _ = _resolver()
    resolver.select_existing(METRO)

    resolver.invalidate_selection()

    assert resolver.state.has_selection is False
    assert resolver.fields.value_of(TICKET_COURT) == "Metro County Court"


def test_create_draft_is_seeded_from_linked_fields() -> None:
    resolver, _ = _resolver()

    resolver.open_create_draft()

    state = resolver.state
    assert state.editor_open is True
    assert state.editor_mode is EditorMode.CREATE
    assert state.draft == Court(
        name="Metro Court",
        phone="555-0100",
        county="Travis",
        city="Austin",
        state_code="TX",
    )


def test_create_draft_uses_typed_search_term() -> None:
    resolver, _ = _resolver()
    resolver.select_existing(METRO)

    resolver.open_create_draft("Brand New Court")

    assert resolver.state.draft.name == "Brand New Court"
    assert resolver.state.has_selection is False
    assert resolver.fields.value_of(TICKET_COURT) == "Metro County Court"


def test_save_requires_name_phone_and_state() -> None:
    resolver, catalog = _resolver()
    resolver.open_create_draft()
    resolver.update_draft(phone=None)

    outcome = asyncio.run(resolver.save())

    assert outcome.status is SaveStatus.REJECTED
    assert outcome.message == REQUIRED_FIELDS_MESSAGE
    assert resolver.state.message == REQUIRED_FIELDS_MESSAGE
    assert catalog.created == []


def test_save_created_court_becomes_the_selection() -> None:
    resolver, catalog = _resolver()
    resolver.open_create_draft()
    resolver.update_draft(street="2 Court Sq", postal_code="78702")

    outcome = asyncio.run(resolver.save())

    assert outcome.status is SaveStatus.CREATED
    assert catalog.created[0].street == "2 Court Sq"
    state = resolver.state
    assert state.selected_id == "court-new"
    assert state.editor_open is False
    assert resolver.fields.value_of(TICKET_COURT) == "Metro Court"


def test_save_in_edit_mode_updates_the_selected_court() -> None:
    resolver, catalog = _resolver()
    resolver.select_existing(METRO)
    resolver.open_edit_draft()
    resolver.update_draft(phone="555-0111")

    outcome = asyncio.run(resolver.save())

    assert outcome.status is SaveStatus.UPDATED
    assert catalog.updated[0][0] == "court-1"
    assert resolver.state.preselected is not None
    assert resolver.state.preselected.phone == "555-0111"
    assert resolver.fields.value_of(COURT_PHONE_NUMBER) == "555-0111"


def test_duplicate_enters_conflict_with_diff() -> None:
    resolver, catalog = _resolver()
    catalog.save_result = CatalogSaveResult(
        is_success=False, is_duplicate=True, duplicate_record=METRO
    )
    resolver.open_create_draft()

    outcome = asyncio.run(resolver.save())

    assert outcome.status is SaveStatus.DUPLICATE
    state = resolver.state
    assert state.in_conflict
    assert state.duplicate_candidate == METRO
    assert state.editor_open is True
    labels = [change.label for change in resolver.diff_against_draft()]
    assert labels == ["Name", "Street", "ZIP Code"]
    assert state.conflict is not None
    assert state.conflict.changes == resolver.diff_against_draft()


def test_use_existing_with_empty_diff_selects_candidate() -> None:
    resolver, catalog = _resolver()
    catalog.save_result = CatalogSaveResult(
        is_success=False, is_duplicate=True, duplicate_record=METRO
    )
    resolver.open_create_draft()
    resolver.update_draft(
        name=METRO.name, street=METRO.street, postal_code=METRO.postal_code
    )
    asyncio.run(resolver.save())
    assert resolver.state.conflict is not None
    assert resolver.state.conflict.has_changes is False

    resolver.use_existing()

    state = resolver.state
    assert state.selected_id == "court-1"
    assert state.in_conflict is False
    assert state.editor_open is False


def test_update_and_use_saves_onto_the_duplicate() -> None:
    resolver, catalog = _resolver()
    catalog.save_result = CatalogSaveResult(
        is_success=False, is_duplicate=True, duplicate_record=METRO
    )
    resolver.open_create_draft()
    resolver.update_draft(name="Metro County Ct")
    asyncio.run(resolver.save())

    catalog.save_result = None
    outcome = asyncio.run(resolver.update_and_use())

    assert outcome.status is SaveStatus.UPDATED
    assert catalog.updated[0][0] == "court-1"
    assert resolver.state.selected_id == "court-1"
    assert resolver.fields.value_of(TICKET_COURT) == "Metro County Ct"


def test_go_back_keeps_the_draft() -> None:
    resolver, catalog = _resolver()
    catalog.save_result = CatalogSaveResult(
        is_success=False, is_duplicate=True, duplicate_record=METRO
    )
    resolver.open_create_draft()
    asyncio.run(resolver.save())
    draft = resolver.state.draft

    resolver.go_back()

    assert resolver.state.in_conflict is False
    assert resolver.state.editor_open is True
    assert resolver.state.draft == draft


def test_rejected_save_keeps_editor_open() -> None:
    resolver, catalog = _resolver()
    catalog.save_result = CatalogSaveResult(is_success=False, message="Phone is invalid")
    resolver.open_create_draft()

    outcome = asyncio.run(resolver.save())

    assert outcome.status is SaveStatus.REJECTED
    assert resolver.state.message == "Phone is invalid"
    assert resolver.state.editor_open is True


def test_save_exception_is_reported() -> None:
    resolver, catalog = _resolver()
    catalog.save_error = RuntimeError("backend down")
    resolver.open_create_draft()

    outcome = asyncio.run(resolver.save())

    assert outcome.status is SaveStatus.REJECTED
    assert resolver.state.message == "Error saving court: backend down"
    assert resolver.state.is_saving is False


def test_result_arriving_after_cancel_is_discarded() -> None:
    resolver, catalog = _resolver()
    resolver.open_create_draft()

    async def run() -> None:
        catalog.save_gate = asyncio.Event()
        task = asyncio.create_task(resolver.save())
        await asyncio.sleep(0)
        resolver.cancel_edit()
        catalog.save_gate.set()
        outcome = await task
        assert outcome.applied is False
        assert outcome.status is SaveStatus.CREATED

    asyncio.run(run())

    assert resolver.state.has_selection is False
    assert resolver.state.editor_open is False
    assert resolver.state.is_saving is False


def test_web_search_query_uses_phone_and_name() -> None:
    resolver, _ = _resolver()
    assert resolver.web_search_query() == "555-0100 Metro Court"

    resolver.select_existing(METRO)

    assert resolver.web_search_query() == "555-0100 Metro County Court"


def test_web_search_query_prefers_the_open_draft() -> None:
    resolver, _ = _resolver()
    resolver.select_existing(METRO)

    resolver.open_edit_draft()
    resolver.update_draft(name="Metro Municipal Court", phone="555-0199")

    assert resolver.web_search_query() == "555-0199 Metro Municipal Court"

    resolver.cancel_edit()

    assert resolver.web_search_query() == "555-0100 Metro County Court"
