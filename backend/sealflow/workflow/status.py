"""Application status state machine.

Both application kinds share the same transition shape: a PENDING application
is approved or rejected exactly once. Usage applications have one more step,
APPROVED → COMPLETED, once the seal has actually been used.

State Flow:
    Usage:    PENDING → APPROVED → COMPLETED
              PENDING → REJECTED
    Creation: PENDING → APPROVED
              PENDING → REJECTED

Terminal States: REJECTED, COMPLETED (usage); REJECTED, APPROVED (creation)
"""

from enum import Enum
from typing import Dict, List, Optional


class ApplicationStatus(str, Enum):
    """Status of a seal application.

    Creation applications never reach COMPLETED.
    """
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    ApplicationStatus.PENDING: "待审批",
    ApplicationStatus.APPROVED: "已批准",
    ApplicationStatus.REJECTED: "已拒绝",
    ApplicationStatus.COMPLETED: "已完成",
}

# Decisions an approver can record on a PENDING application
DECISION_STATUSES = (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)

TransitionTable = Dict[ApplicationStatus, List[ApplicationStatus]]

USAGE_TRANSITIONS: TransitionTable = {
    ApplicationStatus.PENDING: [
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    ],
    ApplicationStatus.APPROVED: [ApplicationStatus.COMPLETED],
    ApplicationStatus.REJECTED: [],  # Terminal state
    ApplicationStatus.COMPLETED: [],  # Terminal state
}

CREATION_TRANSITIONS: TransitionTable = {
    ApplicationStatus.PENDING: [
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    ],
    ApplicationStatus.APPROVED: [],  # Terminal state, the seal has been minted
    ApplicationStatus.REJECTED: [],  # Terminal state
}


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""
    pass


def validate_transition(
    transitions: TransitionTable,
    current_status: ApplicationStatus,
    new_status: ApplicationStatus
) -> None:
    """Validate that a state transition is allowed.

    Args:
        transitions: Transition table of the application kind
        current_status: Current application status
        new_status: Target status to transition to

    Raises:
        StateTransitionError: If transition is not allowed
    """
    allowed = transitions.get(current_status, [])
    if new_status not in allowed:
        raise StateTransitionError(
            f"Invalid transition: {current_status.value} -> {new_status.value}. "
            f"Allowed transitions from {current_status.value}: "
            f"{[s.value for s in allowed]}"
        )


def can_transition(
    transitions: TransitionTable,
    current_status: ApplicationStatus,
    new_status: ApplicationStatus
) -> bool:
    """Check if a state transition is allowed without raising exception."""
    return new_status in transitions.get(current_status, [])


def get_allowed_transitions(
    transitions: TransitionTable,
    status: ApplicationStatus
) -> List[ApplicationStatus]:
    """Get list of allowed transitions from a given status."""
    return list(transitions.get(status, []))


def is_terminal(transitions: TransitionTable, status: ApplicationStatus) -> bool:
    return not transitions.get(status)


def parse_status(value: Optional[str]) -> Optional[ApplicationStatus]:
    """Parse a status string, returning None for empty input.

    Raises:
        ValueError: If the value is not a known status
    """
    if value is None or value == "":
        return None
    return ApplicationStatus(value)
