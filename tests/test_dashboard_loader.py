import asyncio
import unittest

import httpx

from client.api_client import ApiError, LendingApiClient
from client.dashboard import DashboardLoader


class RecordingBackend:
    """MockTransport handler that counts calls per path and can hold responses open."""

    def __init__(self, delay: float = 0.05, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.calls: list[str] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request.url.path)
        await asyncio.sleep(self.delay)
        if self.fail:
            return httpx.Response(500, json={"detail": "Internal Server Error"})
        if request.url.path == "/api/admin/dashboard":
            return httpx.Response(200, json={"totalApplications": 3, "pendingApplications": 1})
        return httpx.Response(200, json=[{"id": "app-1", "status": "Submitted"}])


class TestDashboardLoader(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.backend = RecordingBackend()
        self.api = LendingApiClient("http://testserver", transport=httpx.MockTransport(self.backend))
        self.loader = DashboardLoader(self.api)

    async def asyncTearDown(self):
        await self.api.aclose()

    async def test_two_immediate_refreshes_make_one_pair_of_calls(self):
        first, second = await asyncio.gather(self.loader.refresh(), self.loader.refresh())

        self.assertEqual(sorted(self.backend.calls), ["/api/admin/dashboard", "/api/applications"])
        self.assertIsNotNone(first)
        self.assertIsNone(second)
        self.assertEqual(first.stats["totalApplications"], 3)
        self.assertEqual(first.applications[0]["id"], "app-1")

    async def test_refresh_after_completion_fetches_again(self):
        await self.loader.refresh()
        await self.loader.refresh()
        self.assertEqual(len(self.backend.calls), 4)
        self.assertFalse(self.loader.in_flight)

    async def test_flag_cleared_after_failure(self):
        self.backend.fail = True
        with self.assertRaises(ApiError) as ctx:
            await self.loader.refresh()
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertFalse(self.loader.in_flight)

        self.backend.fail = False
        snapshot = await self.loader.refresh()
        self.assertEqual(snapshot.stats["pendingApplications"], 1)

    async def test_failed_stats_waits_for_slow_applications_before_clearing_flag(self):
        state = {"outstanding": 0, "applications_done": 0}

        async def handler(request: httpx.Request) -> httpx.Response:
            state["outstanding"] += 1
            try:
                if request.url.path == "/api/admin/dashboard":
                    return httpx.Response(500, json={"detail": "Internal Server Error"})
                await asyncio.sleep(0.1)
                state["applications_done"] += 1
                return httpx.Response(200, json=[])
            finally:
                state["outstanding"] -= 1

        async with LendingApiClient("http://testserver", transport=httpx.MockTransport(handler)) as api:
            loader = DashboardLoader(api)
            with self.assertRaises(ApiError) as ctx:
                await loader.refresh()
            self.assertEqual(ctx.exception.status_code, 500)
            self.assertEqual(state["outstanding"], 0)
            self.assertEqual(state["applications_done"], 1)
            self.assertFalse(loader.in_flight)

            with self.assertRaises(ApiError):
                await loader.refresh()

    async def test_filters_are_sent_as_query_params(self):
        seen = []

        async def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            if request.url.path == "/api/admin/dashboard":
                return httpx.Response(200, json={})
            return httpx.Response(200, json=[])

        async with LendingApiClient("http://testserver", transport=httpx.MockTransport(handler)) as api:
            await DashboardLoader(api).refresh(status="Submitted", userId=None)
        self.assertIn({"status": "Submitted"}, seen)


if __name__ == "__main__":
    unittest.main()
