from client.api_client import ApiError, LendingApiClient
from client.authoring import ProductAuthoringSession
from client.dashboard import DashboardLoader, DashboardSnapshot

__all__ = [
    "ApiError",
    "DashboardLoader",
    "DashboardSnapshot",
    "LendingApiClient",
    "ProductAuthoringSession",
]
