"""
Eligibility pre-screen submissions. Independent of LoanApplication: approving or rejecting a
pre-screen never touches an application.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import EligibilitySubmission
from schemas.eligibility import EligibilityCreate
from services.errors import InvalidTransitionError, NotFoundError, ValidationError
from services.lifecycle import ELIGIBILITY_LIFECYCLE, ELIGIBILITY_STATUSES, require_reason

logger = logging.getLogger(__name__)


async def create_submission(session: AsyncSession, body: EligibilityCreate) -> EligibilitySubmission:
    now = datetime.now(timezone.utc)
    sub = EligibilitySubmission(
        id=f"elg-{uuid.uuid4().hex[:12]}",
        name=body.name.strip(),
        email=body.email.strip(),
        personal_email=body.personal_email,
        loan_id=body.loan_id,
        employment_type=body.employment_type,
        net_monthly_income=body.net_monthly_income,
        pancard=body.pancard.upper() if body.pancard else None,
        dob=body.dob,
        gender=body.gender,
        company_name=body.company_name,
        next_salary_date=body.next_salary_date,
        pin_code=body.pin_code,
        state=body.state,
        city=body.city,
        status="pending",
        created_at=now,
        updated_at=now,
    )
    session.add(sub)
    await session.flush()
    logger.info("eligibility submitted id=%s employment=%s", sub.id, sub.employment_type)
    return sub


async def list_submissions(session: AsyncSession, status: Optional[str] = None) -> list[EligibilitySubmission]:
    stmt = select(EligibilitySubmission)
    if status is not None:
        if status not in ELIGIBILITY_STATUSES:
            raise ValidationError(f"Unknown eligibility status '{status}'", {"status": status})
        stmt = stmt.where(EligibilitySubmission.status == status)
    result = await session.execute(stmt.order_by(EligibilitySubmission.created_at.desc()))
    return list(result.scalars().all())


async def get_submission(session: AsyncSession, submission_id: str) -> EligibilitySubmission:
    result = await session.execute(select(EligibilitySubmission).where(EligibilitySubmission.id == submission_id))
    sub = result.scalar_one_or_none()
    if sub is None:
        raise NotFoundError("Eligibility submission", submission_id)
    return sub


def _apply(sub: EligibilitySubmission, target: str) -> bool:
    try:
        changed = ELIGIBILITY_LIFECYCLE.transition(sub.status, target)
    except InvalidTransitionError:
        logger.warning("eligibility transition refused id=%s %s -> %s", sub.id, sub.status, target)
        raise
    if changed:
        logger.info("eligibility transition id=%s %s -> %s", sub.id, sub.status, target)
        sub.status = target
        sub.updated_at = datetime.now(timezone.utc)
    return changed


async def approve_submission(session: AsyncSession, submission_id: str) -> EligibilitySubmission:
    sub = await get_submission(session, submission_id)
    if _apply(sub, "approved"):
        await session.flush()
    return sub


async def reject_submission(
    session: AsyncSession, submission_id: str, reason: Optional[str]
) -> EligibilitySubmission:
    cleaned = require_reason(reason)
    sub = await get_submission(session, submission_id)
    if _apply(sub, "rejected"):
        sub.rejection_reason = cleaned
        await session.flush()
    return sub
