"""
Loan catalog: categories and the loan products under them.
Slugs are derived with the same slug function used for form field names.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Category, LoanApplication, LoanProduct
from schemas.catalog import CategoryCreate, CategoryUpdate, LoanProductCreate, LoanProductUpdate
from services.errors import NotFoundError, ValidationError
from utils.case import slugify

logger = logging.getLogger(__name__)


def _slug_for(name: str, explicit: Optional[str]) -> str:
    slug = slugify(explicit or name)
    if not slug:
        raise ValidationError("Invalid slug", {"slug": "Name must contain at least one letter or digit"})
    return slug


async def list_categories(session: AsyncSession, *, active_only: bool = False) -> list[Category]:
    stmt = select(Category)
    if active_only:
        stmt = stmt.where(Category.is_active.is_(True))
    result = await session.execute(stmt.order_by(Category.order, Category.name))
    return list(result.scalars().all())


async def get_category(session: AsyncSession, category_id: str) -> Category:
    result = await session.execute(
        select(Category).where(or_(Category.id == category_id, Category.slug == category_id))
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category", category_id)
    return category


async def _ensure_category_unique(
    session: AsyncSession, name: str, slug: str, exclude: Optional[str] = None
) -> None:
    stmt = select(Category).where(or_(Category.name == name, Category.slug == slug))
    if exclude is not None:
        stmt = stmt.where(Category.id != exclude)
    found = (await session.execute(stmt)).scalars().first()
    if found is not None:
        if found.name == name:
            raise ValidationError("Category name already in use", {"name": "Already in use"})
        raise ValidationError("Category slug already in use", {"slug": "Already in use"})


async def create_category(session: AsyncSession, body: CategoryCreate) -> Category:
    name = body.name.strip()
    slug = _slug_for(name, body.slug)
    await _ensure_category_unique(session, name, slug)
    now = datetime.now(timezone.utc)
    category = Category(
        id=f"cat-{uuid.uuid4().hex[:12]}",
        name=name,
        slug=slug,
        description=body.description,
        image=body.image,
        is_active=body.is_active,
        order=body.order,
        created_at=now,
        updated_at=now,
    )
    session.add(category)
    await session.flush()
    logger.info("category created id=%s slug=%s", category.id, category.slug)
    return category


async def update_category(session: AsyncSession, category_id: str, body: CategoryUpdate) -> Category:
    category = await get_category(session, category_id)
    changes = body.model_dump(exclude_unset=True)
    name = (changes.get("name") or category.name).strip()
    slug = _slug_for(name, changes.get("slug")) if ("slug" in changes or "name" in changes) else category.slug
    if name != category.name or slug != category.slug:
        await _ensure_category_unique(session, name, slug, exclude=category.id)
    category.name = name
    category.slug = slug
    for attr in ("description", "image", "is_active", "order"):
        if attr in changes and (changes[attr] is not None or attr in ("description", "image")):
            setattr(category, attr, changes[attr])
    category.updated_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info("category updated id=%s fields=%s", category.id, sorted(changes))
    return category


async def delete_category(session: AsyncSession, category_id: str) -> None:
    category = await get_category(session, category_id)
    count = (
        await session.execute(select(func.count(LoanProduct.id)).where(LoanProduct.category_id == category.id))
    ).scalar_one()
    if count:
        logger.warning("category delete refused id=%s loans=%d", category.id, count)
        raise ValidationError(
            f"Category has {count} loan product(s); move or delete them first",
            {"categoryId": "Category is not empty"},
        )
    await session.delete(category)
    await session.flush()
    logger.info("category deleted id=%s", category.id)


async def list_loans(
    session: AsyncSession, *, category_id: Optional[str] = None, active_only: bool = False
) -> list[LoanProduct]:
    stmt = select(LoanProduct)
    if category_id is not None:
        stmt = stmt.where(LoanProduct.category_id == category_id)
    if active_only:
        stmt = stmt.where(LoanProduct.is_active.is_(True))
    result = await session.execute(stmt.order_by(LoanProduct.order, LoanProduct.name))
    return list(result.scalars().all())


async def get_loan(session: AsyncSession, loan_id: str) -> LoanProduct:
    result = await session.execute(
        select(LoanProduct).where(or_(LoanProduct.id == loan_id, LoanProduct.slug == loan_id))
    )
    loan = result.scalar_one_or_none()
    if loan is None:
        raise NotFoundError("Loan", loan_id)
    return loan


async def _ensure_loan_slug_free(session: AsyncSession, slug: str, exclude: Optional[str] = None) -> None:
    stmt = select(LoanProduct.id).where(LoanProduct.slug == slug)
    if exclude is not None:
        stmt = stmt.where(LoanProduct.id != exclude)
    if (await session.execute(stmt)).first() is not None:
        raise ValidationError("Loan slug already in use", {"slug": "Already in use"})


def _check_ranges(min_loan_amount: float, max_loan_amount: float, min_tenure: int, max_tenure: int) -> None:
    """Checked on the merged values; a patch may move only one bound."""
    errors: dict[str, str] = {}
    if max_loan_amount < min_loan_amount:
        errors["maxLoanAmount"] = "Must be greater than or equal to min loan amount"
    if max_tenure < min_tenure:
        errors["maxTenure"] = "Must be greater than or equal to min tenure"
    if errors:
        raise ValidationError("Invalid loan product", errors)


async def create_loan(session: AsyncSession, body: LoanProductCreate) -> LoanProduct:
    category = await get_category(session, body.category_id)
    name = body.name.strip()
    slug = _slug_for(name, body.slug)
    await _ensure_loan_slug_free(session, slug)
    now = datetime.now(timezone.utc)
    loan = LoanProduct(
        id=f"loan-{uuid.uuid4().hex[:12]}",
        category_id=category.id,
        name=name,
        slug=slug,
        description=body.description,
        interest_rate=body.interest_rate.model_dump(),
        min_loan_amount=body.min_loan_amount,
        max_loan_amount=body.max_loan_amount,
        min_tenure=body.min_tenure,
        max_tenure=body.max_tenure,
        image=body.image,
        is_active=body.is_active,
        order=body.order,
        created_at=now,
        updated_at=now,
    )
    session.add(loan)
    await session.flush()
    logger.info("loan created id=%s slug=%s category=%s", loan.id, loan.slug, category.id)
    return loan


async def update_loan(session: AsyncSession, loan_id: str, body: LoanProductUpdate) -> LoanProduct:
    loan = await get_loan(session, loan_id)
    changes = body.model_dump(exclude_unset=True)

    bounds = {
        attr: changes[attr] if changes.get(attr) is not None else getattr(loan, attr)
        for attr in ("min_loan_amount", "max_loan_amount", "min_tenure", "max_tenure")
    }
    _check_ranges(**bounds)

    category_id = loan.category_id
    if changes.get("category_id"):
        category_id = (await get_category(session, changes["category_id"])).id
    name, slug = loan.name, loan.slug
    if changes.get("name") or "slug" in changes:
        name = (changes.get("name") or loan.name).strip()
        slug = _slug_for(name, changes.get("slug"))
        if slug != loan.slug:
            await _ensure_loan_slug_free(session, slug, exclude=loan.id)

    loan.category_id, loan.name, loan.slug = category_id, name, slug
    for attr, value in bounds.items():
        setattr(loan, attr, value)
    if body.interest_rate is not None:
        loan.interest_rate = body.interest_rate.model_dump()
    for attr in ("is_active", "order"):
        if changes.get(attr) is not None:
            setattr(loan, attr, changes[attr])
    for attr in ("description", "image"):
        if attr in changes:
            setattr(loan, attr, changes[attr])

    loan.updated_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info("loan updated id=%s fields=%s", loan.id, sorted(changes))
    return loan


async def delete_loan(session: AsyncSession, loan_id: str) -> None:
    loan = await get_loan(session, loan_id)
    count = (
        await session.execute(select(func.count(LoanApplication.id)).where(LoanApplication.loan_id == loan.id))
    ).scalar_one()
    if count:
        logger.warning("loan delete refused id=%s applications=%d", loan.id, count)
        raise ValidationError(
            f"Loan has {count} application(s); deactivate it instead",
            {"loanId": "Loan has applications"},
        )
    await session.delete(loan)
    await session.flush()
    logger.info("loan deleted id=%s", loan.id)


def interest_rate_of(loan: LoanProduct) -> dict[str, Any]:
    rate = loan.interest_rate or {}
    return {"min": rate.get("min", 0), "max": rate.get("max", 0), "default": rate.get("default", 0)}
