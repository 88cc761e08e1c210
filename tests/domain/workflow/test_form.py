from __future__ import annotations

import pytest

from courtdesk.domain.model import CaseRecord, Court
from courtdesk.domain.model.ticket import (
    AGENT,
    CITATION_NUMBER,
    COURT,
    COURT_DATE,
    DATE_OF_TICKET,
    DRIVER,
    DRIVER_COVERAGE_OPPORTUNITY,
    DRIVER_COVERAGE_STATUS,
    SPECIAL_INSTRUCTIONS,
    TICKET_CLOSED_STATUS,
    TICKET_COURT,
    TICKET_OUTCOME,
    TICKET_STATUS,
    TICKET_TYPE,
)
from courtdesk.domain.ports import CoverageResult
from courtdesk.domain.workflow import (
    OUTCOME_REQUIRED_MESSAGE,
    FormValidationError,
    TicketFormDraft,
    form_date,
)

CASE = CaseRecord(
    id="case-1",
    driver_ref="driver-7",
    instructions="Call before court",
    description="Client disputes speed",
    agent_ref="agent-3",
)
COVERAGE = CoverageResult(
    opportunity_ref="opp-1", coverage_status="Covered", type_classification="Moving"
)
COURT_RECORD = Court(id="court-1", name="Metro County Court")


def _draft(**values: object) -> TicketFormDraft:
    base: dict[str, object] = {
        DATE_OF_TICKET: "03/05/2024",
        COURT_DATE: "not scheduled",
        CITATION_NUMBER: "A123",
    }
    base.update(values)
    return TicketFormDraft.build(
        values=base, court=COURT_RECORD, case_record=CASE, coverage=COVERAGE
    )


def test_form_date_only_keeps_calendar_dates() -> None:
    assert form_date("2024-03-05T08:00:00Z") == "2024-03-05"
    assert form_date("sometime") is None
    assert form_date(None) is None


def test_build_collects_review_case_and_coverage_values() -> None:
    draft = _draft()

    values = draft.initial_values()

    assert values[DRIVER] == "driver-7"
    assert values[DRIVER_COVERAGE_OPPORTUNITY] == "opp-1"
    assert values[DRIVER_COVERAGE_STATUS] == "Covered"
    assert values[TICKET_TYPE] == "Moving"
    assert values[DATE_OF_TICKET] == "2024-03-05"
    assert values[COURT_DATE] is None
    assert values[COURT] == "court-1"
    assert values[TICKET_COURT] == "Metro County Court"
    assert values[CITATION_NUMBER] == "A123"
    assert values[SPECIAL_INSTRUCTIONS] == "Call before court\nClient disputes speed"
    assert values[AGENT] == "agent-3"


def test_build_without_case_record() -> None:
    draft = TicketFormDraft.build(
        values={}, court=COURT_RECORD, case_record=None, coverage=CoverageResult()
    )

    assert draft.driver_ref is None
    assert draft.comments == ""


def test_open_ticket_outcome_is_forced_to_pending() -> None:
    draft = _draft()

    values = draft.submission({TICKET_STATUS: "Open", TICKET_OUTCOME: "Dismissed"})

    assert values[TICKET_OUTCOME] == "Pending"
    assert draft.shows_outcome is False


def test_closed_ticket_requires_outcome() -> None:
    draft = _draft(**{TICKET_STATUS: TICKET_CLOSED_STATUS})
    assert draft.shows_outcome is True

    with pytest.raises(FormValidationError, match="Ticket Outcome is required"):
        draft.submission()

    assert str(FormValidationError(OUTCOME_REQUIRED_MESSAGE)) == OUTCOME_REQUIRED_MESSAGE
    values = draft.submission({TICKET_OUTCOME: "Dismissed"})
    assert values[TICKET_OUTCOME] == "Dismissed"


def test_coverage_outputs_cannot_be_overridden() -> None:
    draft = _draft()

    values = draft.submission(
        {
            DRIVER_COVERAGE_STATUS: "Not Covered",
            TICKET_TYPE: "Parking",
            AGENT: "someone-else",
            CITATION_NUMBER: "B456",
        }
    )

    assert values[DRIVER_COVERAGE_STATUS] == "Covered"
    assert values[TICKET_TYPE] == "Moving"
    assert values[AGENT] == "agent-3"
    assert values[CITATION_NUMBER] == "B456"
