"""
Translation client: retry, timeout and fallback policy around a backend.

The client never raises for backend failures. When every attempt fails the
original text is returned and the outcome is flagged unsuccessful, so a
flaky backend degrades the book to "partially untranslated" instead of
aborting the run.
"""

import asyncio
import random
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Tuple

from epub_scribe.config import (
    MAX_RETRIES,
    REQUEST_TIMEOUT,
    RETRY_BACKOFF_BASE,
    TRANSLATION_CACHE_SIZE,
)
from epub_scribe.core.backends.base import TranslationBackend
from epub_scribe.core.backends.exceptions import BackendConfigurationError, BackendError
from epub_scribe.utils.unified_logger import LogType, debug, warning


@dataclass
class TranslationOutcome:
    """Result of translating one chunk.

    Attributes:
        index: Position of the chunk inside its entry
        text: Translated text, or the original when ``success`` is False
        success: Whether the backend produced a translation
        attempts: Number of backend calls made (0 on a cache hit)
        error: Last error message when ``success`` is False
    """
    index: int
    text: str
    success: bool = True
    attempts: int = 1
    error: Optional[str] = None


class TranslationCache:
    """Bounded FIFO cache keyed by ``text:source:target``"""

    def __init__(self, max_size: int = TRANSLATION_CACHE_SIZE):
        self.max_size = max_size
        self._entries: "OrderedDict[str, str]" = OrderedDict()

    @staticmethod
    def make_key(text: str, source_language: str, target_language: str) -> str:
        return f"{text}:{source_language}:{target_language}"

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        if self.max_size <= 0:
            return
        if key not in self._entries and len(self._entries) >= self.max_size:
            # Oldest insertion goes first
            self._entries.popitem(last=False)
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


def backoff_delay(retry_number: int, base: float = RETRY_BACKOFF_BASE) -> float:
    """
    Delay before retry number ``retry_number`` (0-based).

    ``base * 2**n * (1 + jitter)`` with jitter in [0, 1), so with the default
    base the first retry waits 0.5-1s and the second 1-2s.
    """
    return base * (2 ** retry_number) * (1 + random.random())


class TranslationClient:
    """Wraps a backend with per-attempt timeouts, retries and a cache"""

    def __init__(self, backend: TranslationBackend,
                 timeout: float = REQUEST_TIMEOUT,
                 max_retries: int = MAX_RETRIES,
                 backoff_base: float = RETRY_BACKOFF_BASE,
                 cache_size: int = TRANSLATION_CACHE_SIZE):
        """
        Initialize the client.

        Args:
            backend: Backend performing the actual requests
            timeout: Seconds allowed for each attempt
            max_retries: Retries after the first attempt
            backoff_base: Base of the exponential backoff (0 disables waiting)
            cache_size: Max cached translations (0 disables the cache)
        """
        self.backend = backend
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.cache = TranslationCache(cache_size) if cache_size > 0 else None
        self.backend_calls = 0

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        """Translate text, returning the original when translation fails."""
        outcome = await self.translate_chunk(0, text, source_language, target_language)
        return outcome.text

    async def translate_chunk(self, index: int, text: str,
                              source_language: str, target_language: str) -> TranslationOutcome:
        """
        Translate one chunk under the retry policy.

        Args:
            index: Chunk position, carried into the outcome
            text: Chunk text
            source_language: Source language code
            target_language: Target language code

        Returns:
            TranslationOutcome (never raises for backend failures)
        """
        if not text.strip():
            return TranslationOutcome(index=index, text=text, success=True, attempts=0)

        key = None
        if self.cache is not None:
            key = TranslationCache.make_key(text, source_language, target_language)
            cached = self.cache.get(key)
            if cached is not None:
                return TranslationOutcome(index=index, text=cached, success=True, attempts=0)

        translated, attempts, error = await self._translate_with_retry(
            text, source_language, target_language
        )

        if translated is None:
            warning(f"⚠️ Translation failed after {attempts} attempt(s), keeping original ({error})",
                    LogType.BACKEND_REQUEST, {'chunk': index, 'backend': self.backend.name})
            return TranslationOutcome(index=index, text=text, success=False,
                                      attempts=attempts, error=error)

        if not translated.strip():
            # Backend answered but had nothing to say
            translated = text
        elif key is not None:
            self.cache.put(key, translated)

        return TranslationOutcome(index=index, text=translated, success=True, attempts=attempts)

    async def _translate_with_retry(self, text: str, source_language: str,
                                    target_language: str) -> Tuple[Optional[str], int, Optional[str]]:
        """Returns (translation or None, attempts made, last error)."""
        last_error = None
        total_attempts = self.max_retries + 1

        for attempt in range(total_attempts):
            self.backend_calls += 1
            try:
                result = await asyncio.wait_for(
                    self.backend.translate_text(text, source_language, target_language),
                    timeout=self.timeout,
                )
                return result or "", attempt + 1, None
            except asyncio.TimeoutError:
                last_error = f"timed out after {self.timeout}s"
            except BackendConfigurationError as e:
                # Retrying cannot fix a misconfigured backend
                return None, attempt + 1, str(e)
            except BackendError as e:
                last_error = str(e)

            if attempt < total_attempts - 1:
                delay = backoff_delay(attempt, self.backoff_base)
                debug(f"🔄 Attempt {attempt + 1}/{total_attempts} failed: {last_error}. Retrying in {delay:.2f}s",
                      LogType.BACKEND_REQUEST, {'backend': self.backend.name})
                if delay > 0:
                    await asyncio.sleep(delay)

        return None, total_attempts, last_error

    async def close(self):
        """Close the underlying backend"""
        await self.backend.close()
