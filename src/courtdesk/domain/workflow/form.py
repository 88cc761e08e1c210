"""Initial values of the ticket record form and the submission rules applied to it."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from courtdesk.domain.model.ticket import (
    ACCIDENT,
    AGENT,
    CITATION_NUMBER,
    COURT,
    COURT_DATE,
    COURT_PHONE_NUMBER,
    DATE_OF_TICKET,
    DRIVER,
    DRIVER_COVERAGE_OPPORTUNITY,
    DRIVER_COVERAGE_STATUS,
    DRIVERS_LICENSE_TYPE,
    PENDING_OUTCOME,
    SPECIAL_INSTRUCTIONS,
    TICKET_CITY,
    TICKET_CLOSED_STATUS,
    TICKET_COUNTY,
    TICKET_COURT,
    TICKET_OUTCOME,
    TICKET_STATE,
    TICKET_STATUS,
    TICKET_TYPE,
    VIOLATION_CATEGORY,
    VIOLATION_DESCRIPTION,
)
from courtdesk.domain.reconciliation import normalize_date

if TYPE_CHECKING:
    from collections.abc import Mapping

    from courtdesk.domain.model import CaseRecord, Court
    from courtdesk.domain.ports import CoverageResult

OUTCOME_REQUIRED_MESSAGE = 'Ticket Outcome is required when Status is "Ticket Closed".'

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class FormValidationError(ValueError):
    """Submitted form values break a submission rule."""


def form_date(value: object) -> str | None:
    """``YYYY-MM-DD`` for the form's date inputs; unparseable values are dropped."""

    normalized = normalize_date(value)
    if isinstance(normalized, str) and _ISO_DAY.match(normalized):
        return normalized
    return None


@dataclass(frozen=True, slots=True, kw_only=True)
class TicketFormDraft:
    """Initial values for the ticket record form, built when review is committed."""

    driver_ref: str | None = None
    opportunity_ref: str | None = None
    coverage_status: str | None = None
    ticket_type: str | None = None
    date_of_ticket: str | None = None
    court_date: str | None = None
    court_id: str | None = None
    court_name: str | None = None
    citation_number: object = None
    city: object = None
    county: object = None
    state: object = None
    phone: object = None
    violation_description: object = None
    violation_category: object = None
    accident: object = None
    license_type: object = None
    status: object = None
    outcome: object = None
    comments: str = ""
    agent_ref: str | None = None

    @classmethod
    def build(
        cls,
        *,
        values: Mapping[str, object],
        court: Court,
        case_record: CaseRecord | None,
        coverage: CoverageResult,
    ) -> TicketFormDraft:
        return cls(
            driver_ref=case_record.driver_ref if case_record else None,
            opportunity_ref=coverage.opportunity_ref,
            coverage_status=coverage.coverage_status,
            ticket_type=coverage.type_classification,
            date_of_ticket=form_date(values.get(DATE_OF_TICKET)),
            court_date=form_date(values.get(COURT_DATE)),
            court_id=court.id,
            court_name=court.name,
            citation_number=values.get(CITATION_NUMBER),
            city=values.get(TICKET_CITY),
            county=values.get(TICKET_COUNTY),
            state=values.get(TICKET_STATE),
            phone=values.get(COURT_PHONE_NUMBER),
            violation_description=values.get(VIOLATION_DESCRIPTION),
            violation_category=values.get(VIOLATION_CATEGORY),
            accident=values.get(ACCIDENT),
            license_type=values.get(DRIVERS_LICENSE_TYPE),
            status=values.get(TICKET_STATUS),
            outcome=values.get(TICKET_OUTCOME),
            comments=case_record.combined_comments if case_record else "",
            agent_ref=case_record.agent_ref if case_record else None,
        )

    @property
    def shows_outcome(self) -> bool:
        return self.status == TICKET_CLOSED_STATUS

    def initial_values(self) -> dict[str, object]:
        """Form values keyed by ticket record field name."""

        return {
            DRIVER: self.driver_ref,
            DRIVER_COVERAGE_OPPORTUNITY: self.opportunity_ref,
            DRIVER_COVERAGE_STATUS: self.coverage_status,
            TICKET_TYPE: self.ticket_type,
            DATE_OF_TICKET: self.date_of_ticket,
            COURT_DATE: self.court_date,
            COURT: self.court_id,
            TICKET_COURT: self.court_name,
            CITATION_NUMBER: self.citation_number,
            TICKET_CITY: self.city,
            TICKET_COUNTY: self.county,
            TICKET_STATE: self.state,
            COURT_PHONE_NUMBER: self.phone,
            VIOLATION_DESCRIPTION: self.violation_description,
            VIOLATION_CATEGORY: self.violation_category,
            ACCIDENT: self.accident,
            DRIVERS_LICENSE_TYPE: self.license_type,
            TICKET_STATUS: self.status,
            TICKET_OUTCOME: self.outcome,
            SPECIAL_INSTRUCTIONS: self.comments,
            AGENT: self.agent_ref,
        }

    def submission(self, overrides: Mapping[str, object] | None = None) -> dict[str, object]:
        """Final record values: user overrides on top of the initial values.

        A closed ticket needs an outcome; any other status forces the outcome to
        pending. Coverage outputs and the agent always come from the draft.
        """

        values = self.initial_values()
        values.update(overrides or {})

        if values.get(TICKET_STATUS) == TICKET_CLOSED_STATUS:
            if not values.get(TICKET_OUTCOME):
                raise FormValidationError(OUTCOME_REQUIRED_MESSAGE)
        else:
            values[TICKET_OUTCOME] = PENDING_OUTCOME

        values[DRIVER_COVERAGE_OPPORTUNITY] = self.opportunity_ref
        values[DRIVER_COVERAGE_STATUS] = self.coverage_status
        values[TICKET_TYPE] = self.ticket_type
        values[AGENT] = self.agent_ref
        return values
