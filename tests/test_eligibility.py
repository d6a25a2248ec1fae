import unittest
from datetime import date

import pydantic

from models import LoanApplication
from schemas.eligibility import EligibilityCreate
from services import eligibility
from services.errors import InvalidTransitionError, NotFoundError, ValidationError
from tests.support import DatabaseTestCase


def _body(**overrides):
    data = {
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "employmentType": "SALARIED",
        "netMonthlyIncome": 60000,
        "pancard": "abcde1234f",
        "companyName": "Acme Pvt Ltd",
        "nextSalaryDate": "2026-11-01",
        "pinCode": "560001",
    }
    data.update(overrides)
    return EligibilityCreate.model_validate(data)


class TestEligibilitySchema(unittest.TestCase):
    def test_salaried_requires_company_and_salary_date(self):
        with self.assertRaises(pydantic.ValidationError):
            _body(companyName="")
        with self.assertRaises(pydantic.ValidationError):
            _body(nextSalaryDate=None)

    def test_self_employed_does_not_need_company(self):
        body = _body(employmentType="SELF_EMPLOYED", companyName=None, nextSalaryDate=None)
        self.assertIsNone(body.company_name)

    def test_pin_code_is_six_digits(self):
        with self.assertRaises(pydantic.ValidationError):
            _body(pinCode="5600")

    def test_negative_income_is_rejected(self):
        with self.assertRaises(pydantic.ValidationError):
            _body(netMonthlyIncome=-1)


class TestEligibilityLifecycle(DatabaseTestCase):
    async def test_submission_starts_pending(self):
        sub = await eligibility.create_submission(self.session, _body())
        self.assertEqual(sub.status, "pending")
        self.assertEqual(sub.pancard, "ABCDE1234F")
        self.assertEqual(sub.next_salary_date, date(2026, 11, 1))

    async def test_approve_then_reject_is_refused(self):
        sub = await eligibility.create_submission(self.session, _body())
        await eligibility.approve_submission(self.session, sub.id)
        with self.assertRaises(InvalidTransitionError):
            await eligibility.reject_submission(self.session, sub.id, "changed mind")
        self.assertEqual((await eligibility.get_submission(self.session, sub.id)).status, "approved")

    async def test_reject_needs_reason(self):
        sub = await eligibility.create_submission(self.session, _body())
        with self.assertRaises(ValidationError):
            await eligibility.reject_submission(self.session, sub.id, " ")
        rejected = await eligibility.reject_submission(self.session, sub.id, "PIN not serviceable")
        self.assertEqual((rejected.status, rejected.rejection_reason), ("rejected", "PIN not serviceable"))

    async def test_decisions_never_create_applications(self):
        sub = await eligibility.create_submission(self.session, _body())
        await eligibility.approve_submission(self.session, sub.id)
        self.assertEqual(await self.count(LoanApplication), 0)

    async def test_list_by_status_and_missing_lookup(self):
        await eligibility.create_submission(self.session, _body())
        self.assertEqual(len(await eligibility.list_submissions(self.session, "pending")), 1)
        self.assertEqual(await eligibility.list_submissions(self.session, "approved"), [])
        with self.assertRaises(NotFoundError):
            await eligibility.get_submission(self.session, "elg-missing")


if __name__ == "__main__":
    unittest.main()
