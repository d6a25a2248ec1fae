"""
Status state machines for applications, eligibility pre-screens and document verification.

Terminal states are enforced here, at the transition boundary, so no caller can reopen a
decided record. Repeating the transition that produced a terminal state is a no-op success
(safe to retry); any other move out of a terminal state raises InvalidTransitionError.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Literal, get_args

from services.errors import InvalidTransitionError, ValidationError

ApplicationStatus = Literal["Submitted", "Documents Pending", "Under Review", "Approved", "Rejected"]
EligibilityStatus = Literal["pending", "approved", "rejected"]
DocumentStatus = Literal["Pending", "Verified", "Rejected"]

APPLICATION_STATUSES: tuple[str, ...] = get_args(ApplicationStatus)
ELIGIBILITY_STATUSES: tuple[str, ...] = get_args(EligibilityStatus)
DOCUMENT_STATUSES: tuple[str, ...] = get_args(DocumentStatus)

# Applications still awaiting a decision
OPEN_APPLICATION_STATUSES = ("Submitted", "Documents Pending", "Under Review")


class StateMachine:
    def __init__(self, name: str, transitions: Mapping[str, frozenset[str]], terminal: frozenset[str]):
        self.name = name
        self.transitions = dict(transitions)
        self.terminal = terminal
        self.states = frozenset(self.transitions) | terminal

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal

    def can_transition(self, current: str, target: str) -> bool:
        if current == target:
            return True
        return target in self.transitions.get(current, frozenset())

    def transition(self, current: str, target: str) -> bool:
        """
        Validate current -> target. Returns True when the state changes, False for a
        same-state no-op. Raises InvalidTransitionError otherwise.
        """
        if target not in self.states:
            raise ValidationError(f"Unknown {self.name} status '{target}'", {"status": target})
        if current == target:
            return False
        if not self.can_transition(current, target):
            raise InvalidTransitionError(self.name, current, target)
        return True


APPLICATION_LIFECYCLE = StateMachine(
    "application",
    {
        "Submitted": frozenset({"Documents Pending", "Under Review", "Approved", "Rejected"}),
        "Documents Pending": frozenset({"Under Review", "Approved", "Rejected"}),
        "Under Review": frozenset({"Documents Pending", "Approved", "Rejected"}),
    },
    terminal=frozenset({"Approved", "Rejected"}),
)

ELIGIBILITY_LIFECYCLE = StateMachine(
    "eligibility",
    {"pending": frozenset({"approved", "rejected"})},
    terminal=frozenset({"approved", "rejected"}),
)

DOCUMENT_LIFECYCLE = StateMachine(
    "document",
    {"Pending": frozenset({"Verified", "Rejected"})},
    terminal=frozenset({"Verified", "Rejected"}),
)


def require_reason(reason: str | None) -> str:
    """Rejections need a non-blank reason; checked before any state is touched."""
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError("A rejection reason is required", {"rejectionReason": "Required"})
    return cleaned
