"""Review workflow orchestration."""

from __future__ import annotations

from .errors import (
    DUPLICATE_CITATION_MESSAGE,
    DUPLICATE_WITHOUT_ID_MESSAGE,
    CommitFailure,
    InvalidTransitionError,
    describe_commit_failure,
)
from .form import OUTCOME_REQUIRED_MESSAGE, FormValidationError, TicketFormDraft, form_date
from .session import (
    DOCUMENTS_FEED,
    MISSING_COURT_MESSAGE,
    RECORD_FEED,
    STATES_FEED,
    ReviewSession,
    options_feed,
)
from .transitions import DECIDING_STATES, TRANSITIONS, can_transition

__all__ = [
    "DECIDING_STATES",
    "DOCUMENTS_FEED",
    "DUPLICATE_CITATION_MESSAGE",
    "DUPLICATE_WITHOUT_ID_MESSAGE",
    "MISSING_COURT_MESSAGE",
    "OUTCOME_REQUIRED_MESSAGE",
    "RECORD_FEED",
    "STATES_FEED",
    "TRANSITIONS",
    "CommitFailure",
    "FormValidationError",
    "InvalidTransitionError",
    "ReviewSession",
    "TicketFormDraft",
    "can_transition",
    "describe_commit_failure",
    "form_date",
    "options_feed",
]
