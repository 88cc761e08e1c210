"""Review session: the workflow state machine over feeds, reconciliation and court resolution.

A session is created in ``LOADING``. Every backend subscription (case record,
documents, one option list per enumerated field, state list) reports into a
:class:`ReadinessBarrier`; once all have settled the session decides where the
workflow goes. Feeds may re-report at any time. A decision is only applied
while the workflow is still ``LOADING`` or ``NO_INPUT_AVAILABLE``; later
re-fires just refresh the stored case record and state directory.

Everything runs on one asyncio loop. Follow-up work started from the
synchronous barrier callback is tracked as tasks; :meth:`ReviewSession.drain`
awaits them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

from courtdesk.config.review import ReviewConfig
from courtdesk.domain.errors import friendly_error_message
from courtdesk.domain.model import (
    CaseRecord,
    DeclaredType,
    DocumentFeed,
    EnumerationOption,
    ProcessingResult,
    StateDirectory,
    UnprocessedSource,
    WorkflowState,
    declared_type_for,
)
from courtdesk.domain.model.ticket import DATE_OF_TICKET, ENUMERATED_FIELDS, REVIEWED_FIELDS
from courtdesk.domain.ports import FinalRecordRequest, NullSessionEvents
from courtdesk.domain.readiness import Failed, ReadinessBarrier, Succeeded
from courtdesk.domain.reconciliation import ReconciliationResult, ReviewFieldSet, reconcile
from courtdesk.domain.resolution import EntityResolver

from .errors import CommitFailure, describe_commit_failure
from .form import FormValidationError, TicketFormDraft, form_date
from .transitions import DECIDING_STATES, ensure_state, ensure_transition

if TYPE_CHECKING:
    from collections.abc import Coroutine, Mapping

    from courtdesk.domain.model import ReviewField
    from courtdesk.domain.ports import ReviewBackend, SessionEvents
    from courtdesk.domain.readiness import FeedOutcome, SettledOutcomes
    from courtdesk.domain.reconciliation import FieldEdit

log = logging.getLogger(__name__)

RECORD_FEED: Final = "record"
DOCUMENTS_FEED: Final = "documents"
STATES_FEED: Final = "states"
OPTIONS_FEED_PREFIX: Final = "options:"

MISSING_COURT_MESSAGE: Final = "Please select a Ticket Court before proceeding."


def options_feed(field_name: str) -> str:
    return f"{OPTIONS_FEED_PREFIX}{field_name}"


class ReviewSession:
    """One review of one case, from loading its feeds to creating the ticket record."""

    def __init__(
        self,
        case_id: str,
        backend: ReviewBackend,
        events: SessionEvents | None = None,
        config: ReviewConfig | None = None,
        *,
        allowlist: Sequence[str] = REVIEWED_FIELDS,
        enumerated_fields: Sequence[str] = ENUMERATED_FIELDS,
    ) -> None:
        self.case_id = case_id
        self._backend = backend
        self._events = events or NullSessionEvents()
        self._config = config or ReviewConfig()
        self._allowlist = tuple(allowlist)
        self._enumerated_fields = tuple(enumerated_fields)

        self._state = WorkflowState.LOADING
        self._force_create = False
        self._closed = False
        self._started = False
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._timers: set[asyncio.Task[None]] = set()
        self._form_error_token = 0

        self._case_record: CaseRecord | None = None
        self._states = StateDirectory()
        self._reconciliation: ReconciliationResult | None = None
        self._documents: tuple[str, ...] = ()
        self._unprocessed: tuple[UnprocessedSource, ...] = ()
        self._processing_results: tuple[ProcessingResult, ...] = ()
        self._form: TicketFormDraft | None = None
        self._form_error: CommitFailure | None = None
        self._created_record_id: str | None = None
        self._wants_follow_on_entity = False
        self._error_message: str | None = None
        self._feed_messages: dict[str, str] = {}
        self._notices: list[str] = []
        self._commit_notice: str | None = None

        self.fields = ReviewFieldSet()
        self.resolver = EntityResolver(
            backend,
            self.fields,
            page_size=self._config.page_size,
            search_debounce_seconds=self._config.search_debounce_seconds,
        )

        self._barrier = ReadinessBarrier(self.feed_keys)
        self._barrier.on_all_settled(self._on_settled)

    # ------------------------------------------------------------------
    # read-only views

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def feed_keys(self) -> tuple[str, ...]:
        return (
            RECORD_FEED,
            DOCUMENTS_FEED,
            *(options_feed(name) for name in self._enumerated_fields),
            STATES_FEED,
        )

    @property
    def barrier(self) -> ReadinessBarrier:
        return self._barrier

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def force_create(self) -> bool:
        return self._force_create

    @property
    def case_record(self) -> CaseRecord | None:
        return self._case_record

    @property
    def states(self) -> StateDirectory:
        return self._states

    @property
    def reconciliation(self) -> ReconciliationResult | None:
        return self._reconciliation

    @property
    def primary_source_id(self) -> str | None:
        return self._documents[0] if self._documents else None

    @property
    def unprocessed_sources(self) -> tuple[UnprocessedSource, ...]:
        return self._unprocessed

    @property
    def processing_results(self) -> tuple[ProcessingResult, ...]:
        return self._processing_results

    @property
    def has_successful_processing(self) -> bool:
        target = self._config.target_source_type
        return any(r.success and r.source_type == target for r in self._processing_results)

    @property
    def form(self) -> TicketFormDraft | None:
        return self._form

    @property
    def form_error(self) -> CommitFailure | None:
        return self._form_error

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def feed_messages(self) -> dict[str, str]:
        """Non-fatal feed failures keyed by feed."""

        return dict(self._feed_messages)

    @property
    def notices(self) -> tuple[str, ...]:
        """Reconciliation warnings, followed by the latest blocked-commit message."""

        if self._commit_notice is None:
            return tuple(self._notices)
        return (*self._notices, self._commit_notice)

    @property
    def wants_follow_on_entity(self) -> bool:
        return self._wants_follow_on_entity

    # ------------------------------------------------------------------
    # feeds

    async def start(self) -> None:
        """Subscribe to every feed once, concurrently."""

        self._ensure_open("start")
        if self._started:
            return
        self._started = True
        log.info("Starting review session for case %s", self.case_id)
        await asyncio.gather(*(self._load_feed(key) for key in self.feed_keys))

    def report(self, key: str, outcome: FeedOutcome) -> None:
        """Record a (re-)delivered feed outcome."""

        if isinstance(outcome, Failed):
            log.warning("Feed %s failed: %s", key, friendly_error_message(outcome.error))
        self._barrier.report(key, outcome)

    async def refresh_documents(self) -> None:
        self._barrier.reset(DOCUMENTS_FEED)
        await self._load_feed(DOCUMENTS_FEED)

    async def _load_feed(self, key: str) -> None:
        try:
            payload = await self._fetch_feed(key)
        except Exception as exc:  # noqa: BLE001
            self.report(key, Failed(exc))
            return
        self.report(key, Succeeded(payload))

    async def _fetch_feed(self, key: str) -> object:
        if key == RECORD_FEED:
            return await self._backend.fetch_case_record(self.case_id)
        if key == DOCUMENTS_FEED:
            return await self._backend.fetch_documents(self.case_id)
        if key == STATES_FEED:
            return tuple(await self._backend.fetch_states())
        if key.startswith(OPTIONS_FEED_PREFIX):
            field_name = key.removeprefix(OPTIONS_FEED_PREFIX)
            return tuple(await self._backend.fetch_enumeration_options(field_name))
        raise KeyError(key)

    # ------------------------------------------------------------------
    # decision

    def _on_settled(self, outcomes: SettledOutcomes) -> None:
        self._absorb_reference_data(outcomes)
        if self._closed:
            return
        if self._state not in DECIDING_STATES:
            log.debug("Feeds re-settled in %s; keeping current state", self._state)
            return
        self._decide(outcomes)

    def _absorb_reference_data(self, outcomes: SettledOutcomes) -> None:
        self._feed_messages = {
            key: friendly_error_message(error)
            for key, error in outcomes.failures.items()
            if key != DOCUMENTS_FEED
        }

        record = outcomes.payload(RECORD_FEED)
        self._case_record = record if isinstance(record, CaseRecord) else None

        states = outcomes.payload(STATES_FEED)
        if isinstance(states, Sequence):
            self._states = StateDirectory.from_options(
                option for option in states if isinstance(option, EnumerationOption)
            )
        else:
            self._states = StateDirectory()
        self.resolver.states = self._states

    def _decide(self, outcomes: SettledOutcomes) -> None:
        self._generation += 1
        record = self._case_record
        if record is not None and record.linked_record_ref and not self._force_create:
            self._transition(WorkflowState.PRIOR_RECORD_EXISTS)
            return

        documents_error = outcomes.error(DOCUMENTS_FEED)
        if documents_error is not None:
            self._error_message = friendly_error_message(documents_error)
            self._transition(WorkflowState.ERROR)
            return

        feed = outcomes.payload(DOCUMENTS_FEED)
        if isinstance(feed, DocumentFeed) and feed.has_documents:
            self._begin_review(feed, outcomes)
            self._transition(WorkflowState.REVIEWING)
            self._spawn(self._preselect_court(self._generation))
            return

        if self._config.enable_manual_processing:
            self._spawn(self._check_unprocessed(self._generation))
            return
        self._transition(WorkflowState.NO_INPUT_AVAILABLE)

    def _begin_review(self, feed: DocumentFeed, outcomes: SettledOutcomes) -> None:
        field_types = feed.field_types or {}
        type_info: dict[str, DeclaredType] = {
            name: declared_type_for(field_types.get(name) or field_types.get(name.lower()))
            for name in self._allowlist
        }
        enumeration_options: dict[str, Sequence[EnumerationOption] | None] = {}
        for name in self._enumerated_fields:
            options = outcomes.payload(options_feed(name))
            enumeration_options[name] = tuple(options) if isinstance(options, Sequence) else None

        result = reconcile(
            feed.documents,
            self._allowlist,
            type_info,
            enumeration_options,
            labels=feed.field_labels,
        )
        self._reconciliation = result
        self._documents = tuple(document.id for document in feed.documents)
        self.fields.reset(result.fields)
        self.resolver.invalidate_selection()
        self._notices = []
        self._commit_notice = None
        for warning in result.warnings:
            self._notices.append(warning.message)
        if result.message:
            self._notices.append(result.message)
        log.info(
            "Reconciled %d fields from %d documents (%s)",
            len(result.fields),
            len(feed.documents),
            result.status,
        )

    async def _preselect_court(self, generation: int) -> None:
        result = self._reconciliation
        if result is None or generation != self._generation:
            return
        await self.resolver.resolve_from_hints(result.hints)

    async def _check_unprocessed(self, generation: int) -> None:
        try:
            sources = tuple(await self._backend.fetch_unprocessed_sources(self.case_id))
        except Exception as exc:  # noqa: BLE001
            if self._is_stale(generation):
                return
            self._error_message = friendly_error_message(exc)
            log.warning("Could not list unprocessed sources: %s", self._error_message)
            self._transition(WorkflowState.ERROR)
            return

        if self._is_stale(generation):
            log.debug("Discarding unprocessed-source listing from an older decision")
            return
        self._unprocessed = sources
        if sources:
            self._transition(WorkflowState.AWAITING_MANUAL_TRIGGER)
        else:
            self._transition(WorkflowState.NO_INPUT_AVAILABLE)

    def _is_stale(self, generation: int) -> bool:
        return (
            self._closed
            or generation != self._generation
            or self._state not in DECIDING_STATES
        )

    # ------------------------------------------------------------------
    # user operations

    def proceed_despite_prior_record(self) -> None:
        """Bypass the existing-ticket shortcut and decide again."""

        self._ensure_open("proceed_despite_prior_record")
        ensure_state(self._state, WorkflowState.PRIOR_RECORD_EXISTS, "proceed_despite_prior_record")
        self._force_create = True
        self._transition(WorkflowState.LOADING)
        snapshot = self._barrier.snapshot()
        if snapshot is not None:
            self._decide(snapshot)

    async def process_now(self) -> None:
        self._ensure_open("process_now")
        ensure_state(self._state, WorkflowState.AWAITING_MANUAL_TRIGGER, "process_now")
        self._transition(WorkflowState.PROCESSING)
        try:
            results = tuple(await self._backend.process_sources_now(self.case_id))
        except Exception as exc:  # noqa: BLE001
            self._error_message = friendly_error_message(exc)
            log.warning("Processing failed: %s", self._error_message)
            self._transition(WorkflowState.ERROR)
            return
        if self._closed:
            return
        self._processing_results = results
        self._transition(WorkflowState.PROCESSING_SUMMARY)

    async def continue_from_summary(self) -> bool:
        """Reload documents after processing; requires a successful target-type item."""

        self._ensure_open("continue_from_summary")
        ensure_state(self._state, WorkflowState.PROCESSING_SUMMARY, "continue_from_summary")
        if not self.has_successful_processing:
            return False
        self._transition(WorkflowState.LOADING)
        await self.refresh_documents()
        return True

    def set_field_value(self, field_id: str, value: object) -> FieldEdit:
        edit = self.fields.set_field_value(field_id, value)
        if edit.invalidates_selection:
            self.resolver.invalidate_selection()
        return edit

    def set_reviewer_note(self, field_id: str, note: str) -> tuple[ReviewField, ...]:
        return self.fields.set_reviewer_note(field_id, note)

    async def commit_review(self) -> bool:
        """Move to form editing once a court is selected and coverage is known."""

        self._ensure_open("commit_review")
        ensure_state(self._state, WorkflowState.REVIEWING, "commit_review")
        self._commit_notice = None
        court = self.resolver.state.preselected
        if court is None or self.resolver.state.selected_id is None:
            self._commit_notice = MISSING_COURT_MESSAGE
            return False

        values = self.fields.current_values()
        driver_ref = self._case_record.driver_ref if self._case_record else None
        try:
            coverage = await self._backend.compute_coverage(
                driver_ref, form_date(values.get(DATE_OF_TICKET))
            )
        except Exception as exc:  # noqa: BLE001
            message = "An error occurred while processing: " + friendly_error_message(exc)
            log.warning(message)
            self._commit_notice = message
            return False

        if self._closed or self._state is not WorkflowState.REVIEWING:
            log.debug("Discarding coverage result; session moved on")
            return False

        self._form = TicketFormDraft.build(
            values=values,
            court=court,
            case_record=self._case_record,
            coverage=coverage,
        )
        self._form_error = None
        self._transition(WorkflowState.FORM_EDITING)
        return True

    def back_to_review(self) -> None:
        self._ensure_open("back_to_review")
        ensure_state(self._state, WorkflowState.FORM_EDITING, "back_to_review")
        self._form_error = None
        self._transition(WorkflowState.REVIEWING)

    async def submit_form(self, overrides: Mapping[str, object] | None = None) -> str | None:
        """Create the ticket record and persist the review audit trail.

        Returns the new record id, or ``None`` when submission failed; the
        failure is left in :attr:`form_error` and the workflow stays in form
        editing.
        """

        self._ensure_open("submit_form")
        ensure_state(self._state, WorkflowState.FORM_EDITING, "submit_form")
        form = self._form
        if form is None:
            raise RuntimeError("Form editing without a form draft")

        try:
            values = form.submission(overrides)
        except FormValidationError as exc:
            self._set_form_error(CommitFailure(message=str(exc)))
            return None

        record_id = self._created_record_id
        if record_id is None:
            try:
                request = FinalRecordRequest(values=values)
                record_id = await self._backend.create_final_record(request)
            except Exception as exc:  # noqa: BLE001
                failure = describe_commit_failure(friendly_error_message(exc))
                if not failure.is_duplicate:
                    failure = CommitFailure(message=f"Error creating ticket: {failure.message}")
                self._set_form_error(failure)
                return None
            self._created_record_id = record_id
            log.info("Created ticket %s for case %s", record_id, self.case_id)

        entries = self.fields.audit_entries()
        if entries:
            try:
                await self._backend.persist_audit_trail(
                    self.case_id, record_id, self.primary_source_id, entries
                )
            except Exception as exc:  # noqa: BLE001
                self._set_form_error(
                    CommitFailure(
                        message="Failed to save extraction logs: " + friendly_error_message(exc)
                    )
                )
                return None

        self._events.record_saved(record_id, self._wants_follow_on_entity)
        self.close()
        return record_id

    def set_follow_on_entity(self, wanted: bool) -> None:
        self._wants_follow_on_entity = wanted

    def request_new_entity(self, initial_term: str) -> None:
        self._events.request_new_entity(initial_term)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for timer in tuple(self._timers):
            timer.cancel()
        log.info("Review session for case %s closed in %s", self.case_id, self._state)
        self._events.closed()

    async def drain(self) -> None:
        """Wait for background work started by feed decisions."""

        while self._tasks:
            await asyncio.gather(*tuple(self._tasks))

    # ------------------------------------------------------------------
    # internals

    def _transition(self, target: WorkflowState) -> None:
        ensure_transition(self._state, target, f"transition to {target}")
        if target is not self._state:
            log.info("Case %s: %s -> %s", self.case_id, self._state, target)
        self._state = target

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise RuntimeError(f"{operation} called on a closed review session")

    def _spawn(self, coroutine: Coroutine[object, object, None]) -> None:
        task = asyncio.create_task(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _set_form_error(self, failure: CommitFailure) -> None:
        log.warning("Ticket submission failed: %s", failure.message)
        self._form_error = failure
        self._form_error_token += 1
        if self._config.error_clear_seconds > 0:
            timer = asyncio.create_task(self._clear_form_error_later(self._form_error_token))
            self._timers.add(timer)
            timer.add_done_callback(self._timers.discard)

    async def _clear_form_error_later(self, token: int) -> None:
        await asyncio.sleep(self._config.error_clear_seconds)
        if token == self._form_error_token:
            self._form_error = None
