"""
Base class for translation backends.

A backend turns one piece of text into its translation with a single HTTP
request. Retries, timeouts and fallbacks live in ``TranslationClient``; a
backend only reports failures by raising ``BackendError`` subclasses.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import httpx

from epub_scribe.config import REQUEST_TIMEOUT
from epub_scribe.core.backends.exceptions import (
    BackendHTTPError,
    BackendResponseError,
    BackendTimeoutError,
    BackendError,
)


class TranslationBackend(ABC):
    """Abstract base class for translation backends"""

    name = "base"

    def __init__(self, timeout: float = REQUEST_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the backend.

        Args:
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used to inject a mock transport)
        """
        self.timeout = timeout
        self._transport = transport
        self._client = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create a persistent HTTP client with connection pooling"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request_json(self, method: str, url: str, **kwargs) -> Any:
        """
        Send a request and decode its JSON body.

        Args:
            method: HTTP method
            url: Target URL
            **kwargs: Passed through to ``httpx.AsyncClient.request``

        Returns:
            Decoded JSON payload

        Raises:
            BackendTimeoutError: The request timed out
            BackendHTTPError: The backend answered with a non-2xx status
            BackendResponseError: The body is not valid JSON
            BackendError: Any other transport failure
        """
        client = await self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(f"{self.name} request timed out: {e}", self.name) from e
        except httpx.HTTPStatusError as e:
            raise BackendHTTPError(
                f"{self.name} returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                backend=self.name,
                response_text=e.response.text[:200],
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(f"{self.name} request failed: {e}", self.name) from e

        try:
            return response.json()
        except ValueError as e:
            raise BackendResponseError(f"{self.name} returned invalid JSON: {e}", self.name) from e

    @abstractmethod
    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        """
        Translate text.

        Args:
            text: Text (possibly markup) to translate
            source_language: Source language code, or 'auto'
            target_language: Target language code

        Returns:
            Translated text; an empty string means "no translation"
        """
        pass

    def describe(self) -> Dict[str, Any]:
        """Short description used in logs"""
        return {"backend": self.name}
