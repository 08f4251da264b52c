"""
OpenRouter backend.

Sends each chunk as a chat completion with a fixed literary-translator
system prompt. The model is asked to keep markup and placeholder tokens
untouched.
"""

from typing import Any, Dict, Optional
import httpx

from epub_scribe.config import (
    OPENROUTER_API_ENDPOINT,
    OPENROUTER_MODEL,
    REQUEST_TIMEOUT,
    SUPPORTED_LANGUAGES,
)
from epub_scribe.core.backends.base import TranslationBackend
from epub_scribe.core.backends.exceptions import (
    BackendConfigurationError,
    BackendResponseError,
)


SYSTEM_PROMPT = (
    "You are a professional literary translator. Translate the following text "
    "from {source} to {target}. Preserve all HTML tags, attributes and "
    "placeholder tokens such as [[IMG_0]] exactly as they are. Keep the "
    "original style and tone. Return only the translated text."
)


class OpenRouterBackend(TranslationBackend):
    """Backend for the OpenRouter chat completions API"""

    name = "openrouter"

    API_URL = OPENROUTER_API_ENDPOINT
    TEMPERATURE = 0.3
    MAX_TOKENS = 4000

    def __init__(self, api_key: str, model: str = OPENROUTER_MODEL,
                 timeout: float = REQUEST_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the OpenRouter backend.

        Args:
            api_key: OpenRouter API key
            model: Model identifier
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport

        Raises:
            BackendConfigurationError: If no API key is given
        """
        if not api_key:
            raise BackendConfigurationError(
                "OpenRouter backend requires an API key. Set OPENROUTER_API_KEY "
                "environment variable or pass --openrouter_api_key.",
                self.name,
            )
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.model = model

    def build_system_prompt(self, source_language: str, target_language: str) -> str:
        source = SUPPORTED_LANGUAGES.get(source_language, source_language)
        if source_language == "auto":
            source = "the detected source language"
        target = SUPPORTED_LANGUAGES.get(target_language, target_language)
        return SYSTEM_PROMPT.format(source=source, target=target)

    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/epub-scribe/epub-scribe",
            "X-Title": "EPUB Scribe Translate",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.build_system_prompt(source_language, target_language)},
                {"role": "user", "content": text},
            ],
            "temperature": self.TEMPERATURE,
            "max_tokens": self.MAX_TOKENS,
            "stream": False,
        }
        result = await self._request_json("POST", self.API_URL, headers=headers, json=payload)

        if not isinstance(result, dict) or not result.get("choices"):
            raise BackendResponseError(f"Unexpected response format: {str(result)[:200]}", self.name)

        content = result["choices"][0].get("message", {}).get("content")
        return content or text

    def describe(self) -> Dict[str, Any]:
        return {"backend": self.name, "model": self.model}
