"""
Direct translation service backend.

Talks to a translation service exposing ``POST {text, from, to}`` and
answering ``{translatedText}``.
"""

from typing import Any, Dict, Optional
import httpx

from epub_scribe.config import BACKEND_ENDPOINT, REQUEST_TIMEOUT
from epub_scribe.core.backends.base import TranslationBackend
from epub_scribe.core.backends.exceptions import BackendResponseError


class DirectBackend(TranslationBackend):
    """Backend for a ``{text, from, to}`` translation endpoint"""

    name = "direct"

    def __init__(self, endpoint: str = BACKEND_ENDPOINT, timeout: float = REQUEST_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport)
        self.endpoint = endpoint

    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        payload = {"text": text, "from": source_language, "to": target_language}
        result = await self._request_json("POST", self.endpoint, json=payload)

        if not isinstance(result, dict):
            raise BackendResponseError(f"Unexpected response format: {str(result)[:200]}", self.name)

        translated = result.get("translatedText")
        if translated is None:
            return ""
        if not isinstance(translated, str):
            raise BackendResponseError("translatedText is not a string", self.name)
        return translated

    def describe(self) -> Dict[str, Any]:
        return {"backend": self.name, "endpoint": self.endpoint}
