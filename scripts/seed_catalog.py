"""
Seed loan categories, loan products and their form fields.
Run: python -m scripts.seed_catalog (from the project root).
"""
import asyncio
import os
import sys

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from database import AsyncSessionLocal, init_db
from models import Category
from schemas.catalog import CategoryCreate, LoanProductCreate
from schemas.form_field import FormFieldCreate
from services.catalog import create_category, create_loan
from services.field_registry import create_field

CATALOG_DATA = [
    {
        "name": "Personal Loan",
        "description": "Unsecured loans for salaried and self-employed borrowers",
        "order": 1,
        "loans": [
            {
                "name": "Instant Personal Loan",
                "interest_rate": {"min": 10.5, "max": 24.0, "default": 14.0},
                "min_loan_amount": 10_000,
                "max_loan_amount": 500_000,
                "min_tenure": 6,
                "max_tenure": 60,
            },
        ],
        "fields": [
            {"section": "employment", "label": "Company Name", "type": "Text", "required": True},
            {
                "section": "employment",
                "label": "Salary Mode",
                "type": "Select",
                "required": True,
                "options": ["Bank Transfer", "Cheque", "Cash"],
                "width": "half",
            },
            {"section": "loanDetails", "label": "Existing EMIs", "type": "Number", "width": "half"},
            {"section": "documents", "label": "Salary Slips", "type": "File", "required": True},
        ],
    },
    {
        "name": "Business Loan",
        "description": "Working capital and expansion loans",
        "order": 2,
        "loans": [
            {
                "name": "MSME Working Capital",
                "interest_rate": {"min": 12.0, "max": 20.0, "default": 15.5},
                "min_loan_amount": 100_000,
                "max_loan_amount": 5_000_000,
                "min_tenure": 12,
                "max_tenure": 84,
            },
        ],
        "fields": [
            {"section": "employment", "label": "Business Name", "type": "Text", "required": True},
            {"section": "employment", "label": "GST Number", "type": "Text", "width": "half"},
            {
                "section": "employment",
                "label": "Business Vintage",
                "type": "Radio",
                "required": True,
                "options": ["< 1 year", "1-3 years", "> 3 years"],
            },
            {"section": "documents", "label": "Bank Statements", "type": "File", "required": True},
        ],
    },
]


async def seed():
    await init_db()
    async with AsyncSessionLocal() as session:
        for data in CATALOG_DATA:
            existing = await session.execute(select(Category).where(Category.name == data["name"]))
            if existing.scalar_one_or_none():
                print(f"Category {data['name']} already exists, skipping")
                continue
            category = await create_category(
                session,
                CategoryCreate(name=data["name"], description=data["description"], order=data["order"]),
            )
            for loan in data["loans"]:
                await create_loan(session, LoanProductCreate(category_id=category.id, **loan))
            for field in data["fields"]:
                await create_field(session, FormFieldCreate(scope_id=category.id, **field))
            print(f"Seeded category: {data['name']}")
        await session.commit()
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
