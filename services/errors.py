"""
Domain error taxonomy shared by the services, the HTTP layer and the client package.
Every error carries enough detail (field names, states, reasons) for a caller to act on it.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from services.staging import FlushResult


class LendingError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message}


class ValidationError(LendingError):
    """Bad input shape: missing options, name collision, out-of-range value, blank reason."""

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message, "errors": self.errors}


class IncompleteSubmissionError(LendingError):
    """One or more required fields are empty; nothing was saved."""

    def __init__(self, missing: list[str], labels: Optional[dict[str, str]] = None):
        self.missing = list(missing)
        self.labels = dict(labels or {})
        shown = ", ".join(self.labels.get(m, m) for m in self.missing)
        super().__init__(f"Missing required field(s): {shown}")

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message, "missing": self.missing}


class InvalidTransitionError(LendingError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, machine: str, current: str, target: str):
        self.machine = machine
        self.current = current
        self.target = target
        super().__init__(f"Invalid {machine} status transition: {current} -> {target}")

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message, "current": self.current, "target": self.target}


class NotFoundError(LendingError):
    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class StagingFlushError(LendingError):
    """Some pending drafts could not be persisted; they are still in the buffer."""

    def __init__(self, result: "FlushResult"):
        self.result = result
        failed = result.failure_count
        total = failed + len(result.persisted)
        names = ", ".join(f.draft.name for f in result.failed)
        super().__init__(f"{failed} of {total} form field(s) failed to save: {names}")

    @property
    def failure_count(self) -> int:
        return self.result.failure_count
