"""Async HTTP client for the lending forms API, used by admin-side tooling."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response. `detail` is the decoded error body when it is JSON."""

    def __init__(self, status_code: int, detail: Any, body: Optional[dict[str, Any]] = None):
        self.status_code = status_code
        self.detail = detail
        self.body = body or {}
        super().__init__(f"HTTP {status_code}: {detail}")


class LendingApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "LendingApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()
        try:
            body = response.json()
        except ValueError:
            body = {"detail": response.text}
        detail = body.get("detail", body) if isinstance(body, dict) else body
        logger.warning("api error method=%s path=%s status=%s detail=%s", method, path, response.status_code, detail)
        raise ApiError(response.status_code, detail, body if isinstance(body, dict) else None)

    # Catalog

    async def create_loan(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", "/api/loans", json=payload)

    async def create_category(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", "/api/categories", json=payload)

    # Form fields

    async def list_form_fields(self, scope_id: str) -> list[dict[str, Any]]:
        return await self.request("GET", f"/api/form-fields/{scope_id}")

    async def create_form_field(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", "/api/form-fields", json=payload)

    # Review

    async def dashboard_stats(self) -> dict[str, Any]:
        return await self.request("GET", "/api/admin/dashboard")

    async def list_applications(self, **params: Any) -> list[dict[str, Any]]:
        query = {k: v for k, v in params.items() if v is not None}
        return await self.request("GET", "/api/applications", params=query)

    async def approve_application(self, application_id: str) -> dict[str, Any]:
        return await self.request("PUT", f"/api/applications/{application_id}/approve")

    async def reject_application(self, application_id: str, reason: str) -> dict[str, Any]:
        return await self.request(
            "PUT", f"/api/applications/{application_id}/reject", json={"rejectionReason": reason}
        )
