"""
Translation backends

Pluggable backends behind a single ``TranslationClient``.

Backends:
    - direct: ``{text, from, to}`` translation service
    - google: public Google Translate endpoint
    - openrouter: OpenRouter chat completions
"""

from typing import Optional

from epub_scribe.config import (
    BACKEND_ENDPOINT,
    GOOGLE_TRANSLATE_ENDPOINT,
    OPENROUTER_API_KEY,
    OPENROUTER_MODEL,
    REQUEST_TIMEOUT,
)
from .base import TranslationBackend
from .client import TranslationCache, TranslationClient, TranslationOutcome, backoff_delay
from .direct import DirectBackend
from .exceptions import (
    BackendConfigurationError,
    BackendError,
    BackendHTTPError,
    BackendResponseError,
    BackendTimeoutError,
)
from .google import GoogleBackend
from .openrouter import OpenRouterBackend


BACKENDS = ("direct", "google", "openrouter")


def create_backend(backend_type: str = "direct", **kwargs) -> TranslationBackend:
    """Factory function to create translation backends"""
    timeout = kwargs.get("timeout") or REQUEST_TIMEOUT
    transport = kwargs.get("transport")
    name = (backend_type or "").lower()

    if name == "direct":
        return DirectBackend(
            endpoint=kwargs.get("endpoint") or BACKEND_ENDPOINT,
            timeout=timeout,
            transport=transport,
        )
    elif name == "google":
        return GoogleBackend(
            endpoint=kwargs.get("endpoint") or GOOGLE_TRANSLATE_ENDPOINT,
            timeout=timeout,
            transport=transport,
        )
    elif name == "openrouter":
        return OpenRouterBackend(
            api_key=kwargs.get("api_key") or OPENROUTER_API_KEY,
            model=kwargs.get("model") or OPENROUTER_MODEL,
            timeout=timeout,
            transport=transport,
        )
    else:
        raise BackendConfigurationError(f"Unknown backend type: {backend_type}", backend_type)


__all__ = [
    'BACKENDS',
    'create_backend',
    'TranslationBackend',
    'TranslationClient',
    'TranslationCache',
    'TranslationOutcome',
    'backoff_delay',
    'DirectBackend',
    'GoogleBackend',
    'OpenRouterBackend',
    'BackendError',
    'BackendTimeoutError',
    'BackendHTTPError',
    'BackendResponseError',
    'BackendConfigurationError',
]
