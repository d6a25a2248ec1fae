"""
Per-document verification for an application's attachments.
Document status is independent of the application status; neither drives the other.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import ApplicationDocument
from schemas.application import DocumentAttachmentIn
from services.applications import get_application
from services.errors import InvalidTransitionError, NotFoundError, ValidationError
from services.lifecycle import APPLICATION_LIFECYCLE, DOCUMENT_LIFECYCLE

logger = logging.getLogger(__name__)


async def list_documents(session: AsyncSession, application_id: str) -> list[ApplicationDocument]:
    app = await get_application(session, application_id)
    result = await session.execute(
        select(ApplicationDocument)
        .where(ApplicationDocument.application_id == app.id)
        .order_by(ApplicationDocument.position, ApplicationDocument.created_at)
    )
    return list(result.scalars().all())


async def get_document(session: AsyncSession, application_id: str, document_id: str) -> ApplicationDocument:
    app = await get_application(session, application_id)
    result = await session.execute(
        select(ApplicationDocument).where(
            ApplicationDocument.id == document_id,
            ApplicationDocument.application_id == app.id,
        )
    )
    doc = result.scalar_one_or_none()
    if doc is None:
        raise NotFoundError("Document", document_id)
    return doc


async def attach_document(
    session: AsyncSession, application_id: str, body: DocumentAttachmentIn
) -> ApplicationDocument:
    app = await get_application(session, application_id)
    if APPLICATION_LIFECYCLE.is_terminal(app.status):
        raise ValidationError(
            f"Cannot attach documents to a {app.status.lower()} application",
            {"status": app.status},
        )
    last = (
        await session.execute(
            select(func.max(ApplicationDocument.position)).where(ApplicationDocument.application_id == app.id)
        )
    ).scalar_one_or_none()
    now = datetime.now(timezone.utc)
    doc = ApplicationDocument(
        id=f"doc-{uuid.uuid4().hex[:12]}",
        application_id=app.id,
        position=0 if last is None else last + 1,
        type=body.type,
        name=body.name,
        url=body.url,
        status="Pending",
        created_at=now,
        updated_at=now,
    )
    session.add(doc)
    await session.flush()
    logger.info("document attached id=%s application=%s type=%s", doc.id, app.id, doc.type)
    return doc


def _apply(doc: ApplicationDocument, target: str) -> bool:
    try:
        changed = DOCUMENT_LIFECYCLE.transition(doc.status, target)
    except InvalidTransitionError:
        logger.warning("document transition refused id=%s %s -> %s", doc.id, doc.status, target)
        raise
    if changed:
        logger.info("document transition id=%s %s -> %s", doc.id, doc.status, target)
        doc.status = target
        doc.updated_at = datetime.now(timezone.utc)
    return changed


async def verify_document(session: AsyncSession, application_id: str, document_id: str) -> ApplicationDocument:
    doc = await get_document(session, application_id, document_id)
    if _apply(doc, "Verified"):
        doc.remarks = None
        await session.flush()
    return doc


async def reject_document(
    session: AsyncSession, application_id: str, document_id: str, remarks: Optional[str] = None
) -> ApplicationDocument:
    doc = await get_document(session, application_id, document_id)
    if _apply(doc, "Rejected"):
        doc.remarks = (remarks or "").strip() or None
        await session.flush()
    return doc
