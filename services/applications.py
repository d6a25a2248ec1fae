"""Review-side operations on submitted applications, driven by APPLICATION_LIFECYCLE."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import LoanApplication
from services.errors import InvalidTransitionError, NotFoundError, ValidationError
from services.lifecycle import APPLICATION_LIFECYCLE, APPLICATION_STATUSES, require_reason

logger = logging.getLogger(__name__)


async def get_application(session: AsyncSession, application_id: str) -> LoanApplication:
    result = await session.execute(
        select(LoanApplication).where(
            (LoanApplication.id == application_id) | (LoanApplication.application_number == application_id)
        )
    )
    app = result.scalar_one_or_none()
    if app is None:
        raise NotFoundError("Application", application_id)
    return app


async def list_applications(
    session: AsyncSession,
    *,
    status: Optional[str] = None,
    user_id: Optional[str] = None,
    loan_id: Optional[str] = None,
) -> list[LoanApplication]:
    stmt = select(LoanApplication)
    if status is not None:
        if status not in APPLICATION_STATUSES:
            raise ValidationError(f"Unknown application status '{status}'", {"status": status})
        stmt = stmt.where(LoanApplication.status == status)
    if user_id is not None:
        stmt = stmt.where(LoanApplication.user_id == user_id)
    if loan_id is not None:
        stmt = stmt.where(LoanApplication.loan_id == loan_id)
    result = await session.execute(stmt.order_by(LoanApplication.created_at.desc()))
    return list(result.scalars().all())


def _apply(app: LoanApplication, target: str) -> bool:
    try:
        changed = APPLICATION_LIFECYCLE.transition(app.status, target)
    except InvalidTransitionError:
        logger.warning("application transition refused id=%s %s -> %s", app.id, app.status, target)
        raise
    if changed:
        previous = app.status
        now = datetime.now(timezone.utc)
        app.status = target
        app.updated_at = now
        if APPLICATION_LIFECYCLE.is_terminal(target):
            app.reviewed_at = now
        logger.info("application transition id=%s %s -> %s", app.id, previous, target)
    return changed


async def approve_application(session: AsyncSession, application_id: str) -> LoanApplication:
    app = await get_application(session, application_id)
    if _apply(app, "Approved"):
        app.rejection_reason = None
        await session.flush()
    return app


async def reject_application(session: AsyncSession, application_id: str, reason: Optional[str]) -> LoanApplication:
    """A blank reason is refused before the record is touched. Re-rejecting keeps the first reason."""
    cleaned = require_reason(reason)
    app = await get_application(session, application_id)
    if _apply(app, "Rejected"):
        app.rejection_reason = cleaned
        await session.flush()
    return app


async def move_application(session: AsyncSession, application_id: str, status: str) -> LoanApplication:
    """Non-terminal review moves (Documents Pending / Under Review)."""
    if APPLICATION_LIFECYCLE.is_terminal(status):
        raise ValidationError(
            f"Use the approve or reject action to set '{status}'",
            {"status": "Terminal statuses have dedicated actions"},
        )
    app = await get_application(session, application_id)
    if _apply(app, status):
        await session.flush()
    return app
