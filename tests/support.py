"""Shared fixtures for the service and API tests."""
import asyncio
import os
import shutil
import tempfile
import unittest
from typing import Any, Optional

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import models  # noqa: F401  (registers tables)
from database import Base, engine_kwargs_for, get_db
from schemas.catalog import CategoryCreate, LoanProductCreate
from schemas.form_field import FormFieldCreate
from services.catalog import create_category, create_loan
from services.field_registry import create_field

MEMORY_URL = "sqlite+aiosqlite://"


def application_payload(loan_id: str, dynamic: Optional[dict[str, Any]] = None, **overrides: Any) -> dict[str, Any]:
    """A valid camelCase submission body; override any top-level block."""
    address = {"street": "12 MG Road", "city": "Bengaluru", "state": "Karnataka", "pincode": "560001"}
    payload = {
        "loanId": loan_id,
        "personalInfo": {
            "fullName": "Asha Rao",
            "email": "asha@example.com",
            "phone": "9876543210",
            "dateOfBirth": "1990-04-12",
            "gender": "Female",
            "pan": "ABCDE1234F",
            "aadhar": "123412341234",
        },
        "address": {"current": dict(address), "permanent": dict(address)},
        "employmentInfo": {"employmentType": "Salaried", "monthlyIncome": 85000},
        "loanDetails": {"amount": 100000, "tenure": 12, "purpose": "Home renovation"},
        "documents": [],
        "dynamicFields": dynamic or {},
    }
    payload.update(overrides)
    return payload


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh in-memory database per test; `self.session` is an open AsyncSession."""

    async def asyncSetUp(self):
        self.engine = create_async_engine(MEMORY_URL, **engine_kwargs_for(MEMORY_URL))
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
        self.session = self.session_factory()

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()

    async def count(self, model) -> int:
        return (await self.session.execute(select(func.count()).select_from(model))).scalar_one()

    async def make_category(self, name: str = "Personal Loan", **kwargs: Any):
        return await create_category(self.session, CategoryCreate(name=name, **kwargs))

    async def make_loan(self, category=None, **overrides: Any):
        category = category or await self.make_category()
        data = {
            "category_id": category.id,
            "name": "Instant Personal Loan",
            "interest_rate": {"min": 10.0, "max": 18.0, "default": 12.0},
            "min_loan_amount": 10000,
            "max_loan_amount": 500000,
            "min_tenure": 6,
            "max_tenure": 60,
        }
        data.update(overrides)
        return await create_loan(self.session, LoanProductCreate(**data))

    async def make_field(self, scope_id: str, label: str, **kwargs: Any):
        return await create_field(self.session, FormFieldCreate(scope_id=scope_id, label=label, **kwargs))


class ApiTestCase(unittest.TestCase):
    """
    TestClient against a per-test SQLite file. The client is not entered as a context manager,
    so the app lifespan (which targets the configured database) never runs.
    """

    def setUp(self):
        from main import app

        self.app = app
        self.tmpdir = tempfile.mkdtemp(prefix="lending-api-")
        url = f"sqlite+aiosqlite:///{os.path.join(self.tmpdir, 'test.db')}"
        self.engine = create_async_engine(url, poolclass=NullPool)
        asyncio.run(self._create_tables())
        factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

        async def override_get_db():
            async with factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        self.app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(self.app)

    async def _create_tables(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def tearDown(self):
        self.app.dependency_overrides.clear()
        asyncio.run(self.engine.dispose())
        shutil.rmtree(self.tmpdir, ignore_errors=True)
