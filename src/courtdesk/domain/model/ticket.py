"""Ticket field catalogue: which extracted fields are reviewed and how they link to courts."""

from __future__ import annotations

from typing import Final

ACCIDENT: Final = "Accident__c"
DRIVERS_LICENSE_TYPE: Final = "Drivers_License_Type__c"
CITATION_NUMBER: Final = "Citation_Number__c"
TICKET_STATE: Final = "Ticket_State__c"
TICKET_COUNTY: Final = "Ticket_County__c"
TICKET_CITY: Final = "Ticket_City__c"
COURT_PHONE_NUMBER: Final = "Court_Phone_Number__c"
TICKET_COURT: Final = "Ticket_Court__c"
COURT_DATE: Final = "Court_Date__c"
VIOLATION_CATEGORY: Final = "Violation_Category__c"
VIOLATION_DESCRIPTION: Final = "Violation_Description__c"
DATE_OF_TICKET: Final = "Date_of_Ticket__c"
TICKET_STATUS: Final = "Attorney_Status__c"
TICKET_OUTCOME: Final = "Ticket_Outcome__c"

REVIEWED_FIELDS: Final[tuple[str, ...]] = (
    ACCIDENT,
    DRIVERS_LICENSE_TYPE,
    CITATION_NUMBER,
    TICKET_STATE,
    TICKET_COUNTY,
    TICKET_CITY,
    COURT_PHONE_NUMBER,
    TICKET_COURT,
    COURT_DATE,
    VIOLATION_CATEGORY,
    VIOLATION_DESCRIPTION,
    DATE_OF_TICKET,
)

ENUMERATED_FIELDS: Final[tuple[str, ...]] = (VIOLATION_CATEGORY, ACCIDENT, DRIVERS_LICENSE_TYPE)

# court attribute -> reviewed field it is written back into
COURT_FIELD_LINKS: Final[dict[str, str]] = {
    "name": TICKET_COURT,
    "county": TICKET_COUNTY,
    "phone": COURT_PHONE_NUMBER,
    "city": TICKET_CITY,
    "state_code": TICKET_STATE,
}

COURT_LINKED_FIELDS: Final[frozenset[str]] = frozenset(COURT_FIELD_LINKS.values())

TICKET_CLOSED_STATUS: Final = "Ticket Closed"
PENDING_OUTCOME: Final = "Pending"

# ticket record fields set on the form rather than reviewed
DRIVER: Final = "Driver__c"
COURT: Final = "Court__c"
TICKET_TYPE: Final = "TicketType__c"
DRIVER_COVERAGE_OPPORTUNITY: Final = "Driver_Coverage_Opportunity__c"
DRIVER_COVERAGE_STATUS: Final = "Driver_Coverage_Status__c"
SPECIAL_INSTRUCTIONS: Final = "Special_Instructions__c"
AGENT: Final = "Agent__c"
