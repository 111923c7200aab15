"""Base issue server API client.

Provides the shared HTTP session, token authentication and error mapping
for all issue server API operations. Requests are never retried here;
failures are mapped onto the APIClientError hierarchy and propagated.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class APIClientError(Exception):
    """Base exception for API client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIClientError):
    """Exception raised when authentication fails."""

    pass


class NetworkError(APIClientError):
    """Exception raised when network operations fail."""

    pass


class ServerAPIClient:
    """Base API client with token authentication and common HTTP functionality."""

    def __init__(
        self,
        server_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """Initialize base API client.

        Args:
            server_url: Base URL of the issue server
            token: User access token, sent as a bearer token
            timeout: Read timeout in seconds
        """
        self.server_url = server_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session: Optional[httpx.AsyncClient] = None

        # Request rate limiting
        self._request_semaphore = asyncio.Semaphore(10)

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create HTTP session."""
        if self._session is None or self._session.is_closed:
            timeouts = httpx.Timeout(
                connect=10.0,
                read=self.timeout,
                write=10.0,
                pool=5.0,
            )
            limits = httpx.Limits(
                max_connections=10,
                max_keepalive_connections=5,
                keepalive_expiry=30.0,
            )
            self._session = httpx.AsyncClient(
                timeout=timeouts,
                limits=limits,
                headers={"Accept": "application/json"},
                follow_redirects=True,
                verify=True,
            )
        return self._session

    async def _authenticated_request(
        self, method: str, endpoint: str, **kwargs
    ) -> httpx.Response:
        """Make an authenticated HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for httpx request

        Returns:
            HTTP response object (status codes below 400 only)

        Raises:
            AuthenticationError: If the server rejects the token (401/403)
            NetworkError: If the connection fails or times out
            APIClientError: If the server returns any other error status
        """
        async with self._request_semaphore:
            url = f"{self.server_url}{endpoint}"
            headers = kwargs.pop("headers", {})
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"

            try:
                response = await self.session.request(
                    method, url, headers=headers, **kwargs
                )
            except (httpx.NetworkError, httpx.TimeoutException) as e:
                raise NetworkError(f"Network error calling {endpoint}: {e}")

            if response.status_code in (401, 403):
                raise AuthenticationError(
                    f"Authentication failed: {self._error_detail(response)}",
                    response.status_code,
                )
            if response.status_code >= 400:
                raise APIClientError(
                    f"Request to {endpoint} failed: {self._error_detail(response)}",
                    response.status_code,
                )

            return response

    async def get(self, endpoint: str, **kwargs) -> httpx.Response:
        """Make authenticated GET request."""
        return await self._authenticated_request("GET", endpoint, **kwargs)

    async def get_json(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Make authenticated GET request and decode the JSON body."""
        response = await self.get(endpoint, params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise APIClientError(
                f"Invalid JSON response from {endpoint}: {e}", response.status_code
            )
        if not isinstance(data, dict):
            raise APIClientError(
                f"Unexpected response from {endpoint}", response.status_code
            )
        return data

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Extract the server's error message, falling back to the HTTP status."""
        try:
            errors = response.json().get("errors") or []
        except (ValueError, AttributeError):
            errors = []
        messages = [e.get("msg") for e in errors if isinstance(e, dict) and e.get("msg")]
        if messages:
            return "; ".join(messages)
        return f"HTTP {response.status_code}"

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
