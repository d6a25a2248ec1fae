from schemas.application import ApplicationCreate
from schemas.catalog import CategoryUpdate, LoanProductUpdate
from services import catalog
from services.assembler import assemble_application
from services.errors import NotFoundError, ValidationError
from tests.support import DatabaseTestCase, application_payload


class TestCatalog(DatabaseTestCase):
    async def test_category_slug_is_derived_and_unique(self):
        category = await self.make_category("Two-Wheeler  Loans!")
        self.assertEqual(category.slug, "two-wheeler-loans")
        with self.assertRaises(ValidationError):
            await self.make_category("Two-Wheeler  Loans!")

    async def test_category_lookup_by_slug(self):
        category = await self.make_category("Home Loan")
        self.assertEqual((await catalog.get_category(self.session, "home-loan")).id, category.id)
        with self.assertRaises(NotFoundError):
            await catalog.get_category(self.session, "car-loan")

    async def test_rename_category_updates_slug(self):
        category = await self.make_category("Home Loan")
        updated = await catalog.update_category(self.session, category.id, CategoryUpdate(name="Housing Loan"))
        self.assertEqual((updated.name, updated.slug), ("Housing Loan", "housing-loan"))

    async def test_category_with_loans_cannot_be_deleted(self):
        loan = await self.make_loan()
        with self.assertRaises(ValidationError):
            await catalog.delete_category(self.session, loan.category_id)
        await catalog.delete_loan(self.session, loan.id)
        await catalog.delete_category(self.session, loan.category_id)
        self.assertEqual(await catalog.list_categories(self.session), [])

    async def test_loan_update_rechecks_merged_ranges(self):
        loan = await self.make_loan()
        with self.assertRaises(ValidationError):
            await catalog.update_loan(self.session, loan.id, LoanProductUpdate(min_tenure=120))
        updated = await catalog.update_loan(self.session, loan.id, LoanProductUpdate(max_tenure=84, is_active=False))
        self.assertEqual((updated.max_tenure, updated.is_active), (84, False))

    async def test_loan_with_applications_cannot_be_deleted(self):
        loan = await self.make_loan()
        await assemble_application(self.session, ApplicationCreate.model_validate(application_payload(loan.id)))
        with self.assertRaises(ValidationError):
            await catalog.delete_loan(self.session, loan.id)

    async def test_list_loans_filters(self):
        personal = await self.make_category("Personal Loan")
        gold = await self.make_category("Gold Loan")
        await self.make_loan(personal)
        await self.make_loan(gold, name="Gold Overdraft", is_active=False)
        self.assertEqual(len(await catalog.list_loans(self.session)), 2)
        self.assertEqual(len(await catalog.list_loans(self.session, active_only=True)), 1)
        gold_loans = await catalog.list_loans(self.session, category_id=gold.id)
        self.assertEqual([l.slug for l in gold_loans], ["gold-overdraft"])
