"""
Staging buffer for form fields authored before their owning loan product exists.

Drafts live only in the authoring session's memory. Once the product is created, `flush`
persists every draft, in original order, under the new product id. Drafts that fail stay
in the buffer (and only those), so a retry never re-enters fields that already saved.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from schemas.form_field import FormFieldUpdate, PendingFieldDraft
from services.errors import StagingFlushError, ValidationError
from services.field_registry import check_name_available, normalize_definition, sort_fields

logger = logging.getLogger(__name__)

T = TypeVar("T")

Persist = Callable[[str, PendingFieldDraft], Awaitable[T]]


@dataclass
class FailedDraft:
    draft: PendingFieldDraft
    error: Exception

    @property
    def reason(self) -> str:
        return str(self.error) or type(self.error).__name__


@dataclass
class FlushResult(Generic[T]):
    owner_id: str
    persisted: list[T] = field(default_factory=list)
    failed: list[FailedDraft] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


class PendingFieldBuffer:
    """Ordered, session-local collection of PendingFieldDraft keyed by temp id."""

    def __init__(self) -> None:
        self._drafts: list[PendingFieldDraft] = []
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._drafts)

    @property
    def drafts(self) -> list[PendingFieldDraft]:
        """Snapshot in insertion order."""
        return list(self._drafts)

    def ordered(self) -> list[PendingFieldDraft]:
        """Snapshot in render order (section, order, insertion)."""
        return sort_fields(self._drafts)

    def get(self, temp_id: str) -> PendingFieldDraft:
        for d in self._drafts:
            if d.temp_id == temp_id:
                return d
        raise KeyError(temp_id)

    def add(self, draft: BaseModel | dict[str, Any]) -> PendingFieldDraft:
        data = draft.model_dump(by_alias=False) if isinstance(draft, BaseModel) else dict(draft)
        data.pop("scope_id", None)
        data = normalize_definition(data)
        check_name_available(self._drafts, data["section"], data["name"])
        if data.get("order") is None:
            data["order"] = sum(1 for d in self._drafts if d.section == data["section"])
        data["temp_id"] = data.get("temp_id") or f"temp-{uuid.uuid4().hex[:12]}"
        if any(d.temp_id == data["temp_id"] for d in self._drafts):
            raise ValidationError("Duplicate draft id", {"tempId": data["temp_id"]})
        pending = PendingFieldDraft.model_validate(data)
        self._drafts.append(pending)
        return pending

    def update(self, temp_id: str, patch: FormFieldUpdate | dict[str, Any]) -> PendingFieldDraft:
        current = self.get(temp_id)
        changes = patch.model_dump(exclude_unset=True) if isinstance(patch, BaseModel) else dict(patch)
        changes.pop("temp_id", None)
        changes.pop("tempId", None)
        merged = current.model_dump(by_alias=False)
        merged.update({k: v for k, v in changes.items() if v is not None or k == "placeholder"})
        data = normalize_definition(merged)
        check_name_available(self._drafts, data["section"], data["name"], exclude=temp_id, id_attr="temp_id")
        updated = PendingFieldDraft.model_validate(data)
        self._drafts = [updated if d.temp_id == temp_id else d for d in self._drafts]
        return updated

    def remove(self, temp_id: str) -> PendingFieldDraft:
        draft = self.get(temp_id)
        self._drafts = [d for d in self._drafts if d.temp_id != temp_id]
        return draft

    def clear(self) -> None:
        self._drafts = []

    @asynccontextmanager
    async def _owner_lock(self, owner_id: str) -> AsyncIterator[None]:
        """Per-owner lock, dropped once no flush holds or awaits it."""
        lock = self._locks.get(owner_id)
        if lock is None:
            lock = self._locks[owner_id] = asyncio.Lock()
        self._lock_users[owner_id] = self._lock_users.get(owner_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[owner_id] -= 1
            if not self._lock_users[owner_id]:
                del self._lock_users[owner_id]
                del self._locks[owner_id]

    async def flush(self, owner_id: str, persist: Persist[T]) -> FlushResult[T]:
        """
        Persist every draft under `owner_id` via `persist(owner_id, draft)`, in insertion order.
        Full success empties the buffer and returns the result. Any failure raises
        StagingFlushError; the buffer then holds exactly the failed drafts.
        Flushes for the same owner run one at a time.
        """
        async with self._owner_lock(owner_id):
            result: FlushResult[T] = FlushResult(owner_id=owner_id)
            pending = list(self._drafts)
            if not pending:
                return result

            for draft in pending:
                try:
                    saved = await persist(owner_id, draft)
                except Exception as e:
                    logger.warning("staged field failed owner=%s name=%s error=%s", owner_id, draft.name, e)
                    result.failed.append(FailedDraft(draft=draft, error=e))
                    continue
                result.persisted.append(saved)

            failed_ids = {f.draft.temp_id for f in result.failed}
            flushed_ids = {d.temp_id for d in pending}
            # Drafts added while the flush awaited stay untouched
            self._drafts = [
                d for d in self._drafts if d.temp_id in failed_ids or d.temp_id not in flushed_ids
            ]
            logger.info(
                "staging flush owner=%s persisted=%d failed=%d",
                owner_id,
                len(result.persisted),
                result.failure_count,
            )
            if result.failed:
                raise StagingFlushError(result)
            return result


def draft_to_field_payload(owner_id: str, draft: PendingFieldDraft) -> dict[str, Any]:
    """camelCase create payload for POST /api/form-fields (temp id dropped)."""
    return {
        "scopeId": owner_id,
        "section": draft.section,
        "label": draft.label,
        "name": draft.name,
        "type": draft.type,
        "required": draft.required,
        "placeholder": draft.placeholder,
        "options": list(draft.options),
        "order": draft.order,
        "width": draft.width,
    }

