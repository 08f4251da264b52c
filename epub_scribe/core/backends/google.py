"""
Google Translate backend using the public ``gtx`` client endpoint.

The endpoint answers with nested arrays; ``data[0]`` holds one
``[translated, original, ...]`` item per sentence.
"""

from typing import Optional
import httpx

from epub_scribe.config import GOOGLE_TRANSLATE_ENDPOINT, GOOGLE_USER_AGENT, REQUEST_TIMEOUT
from epub_scribe.core.backends.base import TranslationBackend
from epub_scribe.core.backends.exceptions import BackendResponseError


class GoogleBackend(TranslationBackend):
    """Backend for the unauthenticated Google Translate endpoint"""

    name = "google"

    def __init__(self, endpoint: str = GOOGLE_TRANSLATE_ENDPOINT, timeout: float = REQUEST_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport)
        self.endpoint = endpoint

    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        params = {
            "client": "gtx",
            "sl": source_language,
            "tl": target_language,
            "dt": "t",
            "q": text,
        }
        data = await self._request_json("GET", self.endpoint, params=params,
                                       headers={"User-Agent": GOOGLE_USER_AGENT})

        if not isinstance(data, list) or not data:
            raise BackendResponseError("Unexpected response format", self.name)
        sentences = data[0]
        if not sentences:
            return ""
        if not isinstance(sentences, list):
            raise BackendResponseError("Unexpected sentence list", self.name)

        parts = []
        for item in sentences:
            if isinstance(item, list) and item and isinstance(item[0], str):
                parts.append(item[0])
        return "".join(parts)
