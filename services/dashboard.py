from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Category, EligibilitySubmission, LoanApplication, LoanProduct
from services.lifecycle import OPEN_APPLICATION_STATUSES


async def dashboard_stats(session: AsyncSession) -> dict[str, int]:
    """Counters for the admin dashboard header."""
    by_status = dict(
        (
            await session.execute(
                select(LoanApplication.status, func.count(LoanApplication.id)).group_by(LoanApplication.status)
            )
        ).all()
    )

    async def _count(stmt) -> int:
        return (await session.execute(stmt)).scalar_one()

    return {
        "total_applications": sum(by_status.values()),
        "pending_applications": sum(by_status.get(s, 0) for s in OPEN_APPLICATION_STATUSES),
        "approved_applications": by_status.get("Approved", 0),
        "rejected_applications": by_status.get("Rejected", 0),
        "total_loans": await _count(select(func.count(LoanProduct.id))),
        "total_categories": await _count(select(func.count(Category.id))),
        "pending_eligibility": await _count(
            select(func.count(EligibilitySubmission.id)).where(EligibilitySubmission.status == "pending")
        ),
    }
