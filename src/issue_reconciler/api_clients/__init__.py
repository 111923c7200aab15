"""API Client Abstractions for issue server operations.

All HTTP functionality is contained within dedicated API client classes.
"""

from .base_client import (
    ServerAPIClient,
    APIClientError,
    AuthenticationError,
    NetworkError,
)
from .issues_client import IssuesAPIClient

__all__ = [
    "ServerAPIClient",
    "APIClientError",
    "AuthenticationError",
    "NetworkError",
    "IssuesAPIClient",
]
