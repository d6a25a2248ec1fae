from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from client.api_client import LendingApiClient

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    stats: dict[str, Any]
    applications: list[dict[str, Any]] = field(default_factory=list)


class DashboardLoader:
    """
    Loads dashboard stats and the application list together.
    At most one refresh is in flight; a trigger that arrives meanwhile is dropped and
    returns None without touching the network.
    """

    def __init__(self, api: LendingApiClient):
        self.api = api
        self.snapshot: Optional[DashboardSnapshot] = None
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def refresh(self, **filters: Any) -> Optional[DashboardSnapshot]:
        # Check-and-set before the first await so concurrent callers see it
        if self._in_flight:
            logger.debug("dashboard refresh skipped; already in flight")
            return None
        self._in_flight = True
        try:
            # Both requests settle before the flag clears, even when one fails
            stats, applications = await asyncio.gather(
                self.api.dashboard_stats(),
                self.api.list_applications(**filters),
                return_exceptions=True,
            )
            for outcome in (stats, applications):
                if isinstance(outcome, BaseException):
                    raise outcome
            self.snapshot = DashboardSnapshot(stats=stats, applications=applications)
            return self.snapshot
        finally:
            self._in_flight = False
