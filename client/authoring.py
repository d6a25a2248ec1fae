"""
Admin authoring session for a new loan product: fields are drafted before the product
exists, then flushed under the product id once it is created.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from client.api_client import LendingApiClient
from schemas.form_field import PendingFieldDraft
from services.staging import FlushResult, PendingFieldBuffer, draft_to_field_payload

logger = logging.getLogger(__name__)


class ProductAuthoringSession:
    def __init__(self, api: LendingApiClient, buffer: Optional[PendingFieldBuffer] = None):
        self.api = api
        self.buffer = buffer or PendingFieldBuffer()
        self.product: Optional[dict[str, Any]] = None

    def add_field(self, draft: dict[str, Any]) -> PendingFieldDraft:
        return self.buffer.add(draft)

    def update_field(self, temp_id: str, patch: dict[str, Any]) -> PendingFieldDraft:
        return self.buffer.update(temp_id, patch)

    def remove_field(self, temp_id: str) -> PendingFieldDraft:
        return self.buffer.remove(temp_id)

    async def _persist(self, owner_id: str, draft: PendingFieldDraft) -> dict[str, Any]:
        return await self.api.create_form_field(draft_to_field_payload(owner_id, draft))

    async def create_product(self, payload: dict[str, Any]) -> FlushResult:
        """
        POST the product, then flush staged fields under its id.
        If the product POST fails the buffer is untouched. A partial flush raises
        StagingFlushError with the product kept on the session for `retry_flush`.
        Once the product exists, a repeat call only re-flushes the remaining drafts.
        """
        if self.product is not None:
            logger.info("product already created id=%s; retrying staged fields", self.product["id"])
            return await self.retry_flush()
        self.product = await self.api.create_loan(payload)
        logger.info("product created id=%s staged_fields=%d", self.product["id"], len(self.buffer))
        return await self.buffer.flush(self.product["id"], self._persist)

    async def retry_flush(self) -> FlushResult:
        """Re-flush whatever the last flush left behind (only the failed drafts)."""
        if self.product is None:
            raise RuntimeError("No product has been created in this session")
        return await self.buffer.flush(self.product["id"], self._persist)
