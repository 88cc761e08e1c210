"""Workflow errors and commit-failure interpretation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from courtdesk.domain.model import WorkflowState

DUPLICATE_MARKER: Final = "duplicate value found"
DUPLICATE_CITATION_MESSAGE: Final = "The Citation Number is Duplicate."
DUPLICATE_WITHOUT_ID_MESSAGE: Final = "Duplicate value error but record ID not found."

_RECORD_ID = re.compile(r"record with id: (\w+)")


class InvalidTransitionError(ValueError):
    """Raised when a workflow operation is invoked from a state that does not allow it."""

    def __init__(self, operation: str, state: WorkflowState) -> None:
        super().__init__(f"{operation} is not allowed while {state}")
        self.operation = operation
        self.state = state


@dataclass(frozen=True, slots=True)
class CommitFailure:
    """Inline message for a rejected record creation.

    ``conflicting_record_id`` names the existing record that holds the same
    unique value, when the backend reported one.
    """

    message: str
    conflicting_record_id: str | None = None
    is_duplicate: bool = False


def describe_commit_failure(text: str | None) -> CommitFailure:
    if not text:
        return CommitFailure(message="Unknown error")
    if DUPLICATE_MARKER not in text:
        return CommitFailure(message=text)
    match = _RECORD_ID.search(text)
    if match is None:
        return CommitFailure(message=DUPLICATE_WITHOUT_ID_MESSAGE, is_duplicate=True)
    return CommitFailure(
        message=DUPLICATE_CITATION_MESSAGE,
        conflicting_record_id=match.group(1),
        is_duplicate=True,
    )
