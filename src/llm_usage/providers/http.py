"""Async HTTP client base shared by the vendor clients.

Wraps ``httpx.AsyncClient`` with vendor auth headers, a fixed timeout and
schema validation of the JSON response. No retries are attempted.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from llm_usage import __version__
from llm_usage.logging import get_logger

log = get_logger("llm_usage.providers.http")

DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"llm-usage/{__version__}"
MAX_ERROR_BODY = 500

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProviderAPIError(Exception):
    """A vendor API request failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProviderResponseError(ProviderAPIError):
    """The response body could not be decoded into the expected schema."""


class ProviderClient:
    """Base class for a vendor API client.

    Subclasses supply the base URL and auth headers.
    """

    base_url: str = ""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, base_url: str | None = None):
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds.
            base_url: Override of the vendor API base URL (for tests).
        """
        self._base_url = (base_url or self.base_url).rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        """Vendor auth headers."""
        return {}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            }
            headers.update(self._headers())
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        schema: type[ModelT],
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ModelT:
        """Make a request and validate the JSON response.

        Args:
            method: HTTP method.
            path: API path (without base URL).
            schema: Pydantic model the response body must match.
            params: Query parameters.
            json: JSON body for POST.

        Returns:
            The validated response model.

        Raises:
            ProviderAPIError: Transport failure or non-200 status.
            ProviderResponseError: The body is not JSON or does not match ``schema``.
        """
        client = await self._get_client()

        try:
            response = await client.request(method=method, url=path, params=params, json=json)
        except httpx.RequestError as e:
            log.debug("provider_request_failed", path=path, error=str(e))
            raise ProviderAPIError(f"request failed: {e}") from e

        if response.status_code != 200:
            body = response.text[:MAX_ERROR_BODY]
            raise ProviderAPIError(
                f"API error (status {response.status_code}): {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            return schema.model_validate_json(response.content)
        except ValidationError as e:
            raise ProviderResponseError(
                f"failed to decode response: {e}",
                status_code=response.status_code,
                body=response.text[:MAX_ERROR_BODY],
            ) from e
