import json
import unittest

import httpx

from client.api_client import ApiError, LendingApiClient
from client.authoring import ProductAuthoringSession
from services.errors import StagingFlushError

PRODUCT = {
    "categoryId": "cat-1",
    "name": "Gold Loan",
    "interestRate": {"min": 9, "max": 14, "default": 11},
    "minLoanAmount": 10000,
    "maxLoanAmount": 200000,
    "minTenure": 3,
    "maxTenure": 24,
}


class FakeServer:
    def __init__(self):
        self.fail_product = False
        self.product_posts = 0
        self.reject_fields: set[str] = set()
        self.field_posts: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        if request.url.path == "/api/loans":
            self.product_posts += 1
            if self.fail_product:
                return httpx.Response(400, json={"detail": "Loan slug already in use", "errors": {"slug": "Already in use"}})
            return httpx.Response(201, json={"id": "loan-new", **body})
        if request.url.path == "/api/form-fields":
            self.field_posts.append(body)
            if body["name"] in self.reject_fields:
                return httpx.Response(400, json={"detail": "Invalid form field definition"})
            return httpx.Response(201, json={"id": f"fld-{len(self.field_posts)}", **body})
        return httpx.Response(404, json={"detail": "Not Found"})


class TestProductAuthoringSession(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = FakeServer()
        self.api = LendingApiClient("http://testserver", transport=httpx.MockTransport(self.server))
        self.session = ProductAuthoringSession(self.api)
        for label in ("Gold Weight", "Purity", "Valuation Slip"):
            self.session.add_field({"label": label})

    async def asyncTearDown(self):
        await self.api.aclose()

    async def test_failed_product_create_leaves_buffer_untouched(self):
        self.server.fail_product = True
        with self.assertRaises(ApiError) as ctx:
            await self.session.create_product(PRODUCT)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(len(self.session.buffer), 3)
        self.assertEqual(self.server.field_posts, [])

    async def test_fields_are_posted_in_order_under_new_product(self):
        result = await self.session.create_product(PRODUCT)
        self.assertTrue(result.ok)
        self.assertEqual([p["name"] for p in self.server.field_posts], ["gold-weight", "purity", "valuation-slip"])
        self.assertEqual({p["scopeId"] for p in self.server.field_posts}, {"loan-new"})
        self.assertEqual(len(self.session.buffer), 0)

    async def test_partial_failure_then_retry_sends_only_failed(self):
        self.server.reject_fields = {"purity"}
        with self.assertRaises(StagingFlushError) as ctx:
            await self.session.create_product(PRODUCT)
        self.assertEqual(ctx.exception.failure_count, 1)
        self.assertEqual([d.name for d in self.session.buffer.drafts], ["purity"])

        self.server.reject_fields = set()
        result = await self.session.retry_flush()
        self.assertEqual([p["name"] for p in result.persisted], ["purity"])
        self.assertEqual([p["name"] for p in self.server.field_posts], ["gold-weight", "purity", "valuation-slip", "purity"])

    async def test_second_create_after_partial_failure_reuses_product(self):
        self.server.reject_fields = {"purity"}
        with self.assertRaises(StagingFlushError):
            await self.session.create_product(PRODUCT)

        self.server.reject_fields = set()
        result = await self.session.create_product(PRODUCT)
        self.assertEqual(self.server.product_posts, 1)
        self.assertEqual(result.owner_id, "loan-new")
        self.assertEqual([p["name"] for p in result.persisted], ["purity"])
        self.assertEqual(len(self.session.buffer), 0)

    async def test_retry_without_product_is_an_error(self):
        with self.assertRaises(RuntimeError):
            await self.session.retry_flush()


if __name__ == "__main__":
    unittest.main()
