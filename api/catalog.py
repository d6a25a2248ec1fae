from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import Category, LoanProduct
from schemas.catalog import CategoryCreate, CategoryUpdate, LoanProductCreate, LoanProductUpdate
from services import catalog

categories_router = APIRouter(prefix="/api/categories", tags=["categories"])
loans_router = APIRouter(prefix="/api/loans", tags=["loans"])


def _category_to_response(c: Category) -> dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "image": c.image,
        "isActive": c.is_active,
        "order": c.order,
        "createdAt": c.created_at.isoformat() if c.created_at else None,
        "updatedAt": c.updated_at.isoformat() if c.updated_at else None,
    }


def _loan_to_response(l: LoanProduct) -> dict[str, Any]:
    return {
        "id": l.id,
        "categoryId": l.category_id,
        "name": l.name,
        "slug": l.slug,
        "description": l.description,
        "interestRate": catalog.interest_rate_of(l),
        "minLoanAmount": l.min_loan_amount,
        "maxLoanAmount": l.max_loan_amount,
        "minTenure": l.min_tenure,
        "maxTenure": l.max_tenure,
        "image": l.image,
        "isActive": l.is_active,
        "order": l.order,
        "createdAt": l.created_at.isoformat() if l.created_at else None,
        "updatedAt": l.updated_at.isoformat() if l.updated_at else None,
    }


@categories_router.get("", response_model=list[dict])
async def list_categories(active: bool = Query(False), db: AsyncSession = Depends(get_db)):
    return [_category_to_response(c) for c in await catalog.list_categories(db, active_only=active)]


@categories_router.get("/{category_id}", response_model=dict)
async def get_category(category_id: str, db: AsyncSession = Depends(get_db)):
    return _category_to_response(await catalog.get_category(db, category_id))


@categories_router.get("/{category_id}/loans", response_model=list[dict])
async def list_category_loans(category_id: str, active: bool = Query(False), db: AsyncSession = Depends(get_db)):
    category = await catalog.get_category(db, category_id)
    loans = await catalog.list_loans(db, category_id=category.id, active_only=active)
    return [_loan_to_response(l) for l in loans]


@categories_router.post("", response_model=dict, status_code=201)
async def create_category(body: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return _category_to_response(await catalog.create_category(db, body))


@categories_router.put("/{category_id}", response_model=dict)
async def update_category(category_id: str, body: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    return _category_to_response(await catalog.update_category(db, category_id, body))


@categories_router.delete("/{category_id}", status_code=204)
async def delete_category(category_id: str, db: AsyncSession = Depends(get_db)):
    await catalog.delete_category(db, category_id)


@loans_router.get("", response_model=list[dict])
async def list_loans(active: bool = Query(False), db: AsyncSession = Depends(get_db)):
    return [_loan_to_response(l) for l in await catalog.list_loans(db, active_only=active)]


@loans_router.get("/{loan_id}", response_model=dict)
async def get_loan(loan_id: str, db: AsyncSession = Depends(get_db)):
    return _loan_to_response(await catalog.get_loan(db, loan_id))


@loans_router.post("", response_model=dict, status_code=201)
async def create_loan(body: LoanProductCreate, db: AsyncSession = Depends(get_db)):
    return _loan_to_response(await catalog.create_loan(db, body))


@loans_router.put("/{loan_id}", response_model=dict)
async def update_loan(loan_id: str, body: LoanProductUpdate, db: AsyncSession = Depends(get_db)):
    return _loan_to_response(await catalog.update_loan(db, loan_id, body))


@loans_router.delete("/{loan_id}", status_code=204)
async def delete_loan(loan_id: str, db: AsyncSession = Depends(get_db)):
    await catalog.delete_loan(db, loan_id)
