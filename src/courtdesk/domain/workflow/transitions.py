"""Legal workflow transitions."""

from __future__ import annotations

from typing import Final

from courtdesk.domain.model import WorkflowState

from .errors import InvalidTransitionError

_SETTLED_TARGETS: Final = frozenset(
    {
        WorkflowState.PRIOR_RECORD_EXISTS,
        WorkflowState.ERROR,
        WorkflowState.REVIEWING,
        WorkflowState.AWAITING_MANUAL_TRIGGER,
        WorkflowState.NO_INPUT_AVAILABLE,
    }
)

TRANSITIONS: Final[dict[WorkflowState, frozenset[WorkflowState]]] = {
    WorkflowState.LOADING: _SETTLED_TARGETS,
    WorkflowState.NO_INPUT_AVAILABLE: _SETTLED_TARGETS,
    WorkflowState.PRIOR_RECORD_EXISTS: frozenset({WorkflowState.LOADING}),
    WorkflowState.AWAITING_MANUAL_TRIGGER: frozenset(
        {WorkflowState.PROCESSING, WorkflowState.ERROR}
    ),
    WorkflowState.PROCESSING: frozenset(
        {WorkflowState.PROCESSING_SUMMARY, WorkflowState.ERROR}
    ),
    WorkflowState.PROCESSING_SUMMARY: frozenset({WorkflowState.LOADING}),
    WorkflowState.REVIEWING: frozenset({WorkflowState.FORM_EDITING}),
    WorkflowState.FORM_EDITING: frozenset({WorkflowState.REVIEWING}),
    WorkflowState.ERROR: frozenset(),
}

# states in which a settled barrier may (re)decide the workflow
DECIDING_STATES: Final = frozenset({WorkflowState.LOADING, WorkflowState.NO_INPUT_AVAILABLE})


def can_transition(current: WorkflowState, target: WorkflowState) -> bool:
    return target == current or target in TRANSITIONS[current]


def ensure_transition(current: WorkflowState, target: WorkflowState, operation: str) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(operation, current)


def ensure_state(
    current: WorkflowState,
    allowed: frozenset[WorkflowState] | WorkflowState,
    operation: str,
) -> None:
    allowed_states = allowed if isinstance(allowed, frozenset) else frozenset({allowed})
    if current not in allowed_states:
        raise InvalidTransitionError(operation, current)
