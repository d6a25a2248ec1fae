import re
import unittest

from models import ApplicationDocument, LoanApplication
from schemas.application import ApplicationCreate
from services.assembler import assemble_application, compute_emi
from services.errors import IncompleteSubmissionError, NotFoundError, ValidationError
from tests.support import DatabaseTestCase, application_payload


class TestComputeEmi(unittest.TestCase):
    def test_reducing_balance(self):
        self.assertEqual(compute_emi(100000, 12, 12), 8884.88)

    def test_zero_rate_is_straight_division(self):
        self.assertEqual(compute_emi(1200, 0, 12), 100.0)


class TestAssembleApplication(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.loan = await self.make_loan()
        await self.make_field(self.loan.category_id, "PAN", required=True)
        await self.make_field(self.loan.category_id, "Salary Mode", type="Select", options=["Bank Transfer", "Cash"])
        await self.make_field(self.loan.category_id, "Salary Slips", section="documents", type="File")

    def _draft(self, dynamic=None, **overrides):
        return ApplicationCreate.model_validate(application_payload(self.loan.id, dynamic, **overrides))

    async def test_missing_required_field_is_named_and_nothing_saved(self):
        with self.assertRaises(IncompleteSubmissionError) as ctx:
            await assemble_application(self.session, self._draft({"salary-mode": "Cash"}))
        self.assertEqual(ctx.exception.missing, ["pan"])
        self.assertIn("PAN", str(ctx.exception))
        self.assertEqual(await self.count(LoanApplication), 0)

    async def test_submission_is_stored_with_tagged_schema_keys_only(self):
        draft = self._draft(
            {
                "pan": "ABCDE1234F",
                "salary-mode": "Cash",
                "salary-slips": [{"name": "may.pdf", "url": "/uploads/may.pdf"}],
                "not-in-schema": "dropped",
            },
            documents=[{"type": "PAN Card", "name": "pan.jpg", "url": "/uploads/pan.jpg"}],
        )
        app = await assemble_application(self.session, draft, user_id="user-1")

        self.assertEqual(app.status, "Submitted")
        self.assertEqual(app.user_id, "user-1")
        self.assertRegex(app.application_number, re.compile(r"^APP-\d{8}-[0-9A-F]{6}$"))
        self.assertEqual(
            app.dynamic_fields,
            {
                "pan": {"kind": "scalar", "value": "ABCDE1234F"},
                "salary-mode": {"kind": "scalar", "value": "Cash"},
                "salary-slips": {"kind": "files", "value": [{"name": "may.pdf", "url": "/uploads/may.pdf"}]},
            },
        )
        self.assertEqual(app.loan_details["interest_rate"], 12.0)
        self.assertEqual(app.loan_details["emi"], 8884.88)
        self.assertEqual(app.personal_info["full_name"], "Asha Rao")
        self.assertEqual(await self.count(ApplicationDocument), 1)
        self.assertEqual([(d.type, d.status) for d in app.documents], [("PAN Card", "Pending")])

    async def test_option_outside_list_is_invalid(self):
        with self.assertRaises(ValidationError) as ctx:
            await assemble_application(self.session, self._draft({"pan": "X", "salary-mode": "Crypto"}))
        self.assertIn("salary-mode", ctx.exception.errors)

    async def test_amount_outside_product_range_is_rejected(self):
        draft = self._draft({"pan": "X"}, loanDetails={"amount": 5_000_000, "tenure": 12})
        with self.assertRaises(ValidationError) as ctx:
            await assemble_application(self.session, draft)
        self.assertIn("amount", ctx.exception.errors)

    async def test_tenure_outside_product_range_is_rejected(self):
        draft = self._draft({"pan": "X"}, loanDetails={"amount": 50_000, "tenure": 120})
        with self.assertRaises(ValidationError) as ctx:
            await assemble_application(self.session, draft)
        self.assertIn("tenure", ctx.exception.errors)

    async def test_inactive_product_is_rejected(self):
        self.loan.is_active = False
        await self.session.flush()
        with self.assertRaises(ValidationError):
            await assemble_application(self.session, self._draft({"pan": "X"}))

    async def test_unknown_loan_is_not_found(self):
        draft = ApplicationCreate.model_validate(application_payload("loan-missing"))
        with self.assertRaises(NotFoundError):
            await assemble_application(self.session, draft)

    async def test_application_numbers_are_unique(self):
        first = await assemble_application(self.session, self._draft({"pan": "X"}))
        second = await assemble_application(self.session, self._draft({"pan": "Y"}))
        self.assertNotEqual(first.application_number, second.application_number)


if __name__ == "__main__":
    unittest.main()
