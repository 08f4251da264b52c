"""Unit tests for the retrying translation client."""

import asyncio

import httpx
import pytest

from conftest import FakeBackend
from epub_scribe.core.backends import DirectBackend
from epub_scribe.core.backends.client import (
    TranslationCache,
    TranslationClient,
    backoff_delay,
)
from epub_scribe.core.backends.exceptions import BackendConfigurationError


def counting_transport(responses):
    """MockTransport replaying ``responses`` (status, payload) in order, repeating the last."""
    calls = []

    def handler(request):
        status, payload = responses[min(len(calls), len(responses) - 1)]
        calls.append(request)
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler), calls


class SlowBackend(FakeBackend):
    """Backend that sleeps before answering."""

    def __init__(self, delay):
        super().__init__(lambda text: "translated")
        self.delay = delay

    async def translate_text(self, text, source_language, target_language):
        self.calls.append(text)
        await asyncio.sleep(self.delay)
        return "translated"


class MisconfiguredBackend(FakeBackend):
    async def translate_text(self, text, source_language, target_language):
        self.calls.append(text)
        raise BackendConfigurationError("no key", "fake")


class TestTranslationClient:
    """Test retry, timeout and fallback behaviour."""

    @pytest.mark.asyncio
    async def test_success(self):
        transport, calls = counting_transport([(200, {"translatedText": "<p>Hola</p>"})])
        client = TranslationClient(DirectBackend("http://t.test", transport=transport), backoff_base=0)

        outcome = await client.translate_chunk(4, "<p>Hello</p>", "en", "es")
        await client.close()

        assert outcome.index == 4
        assert outcome.text == "<p>Hola</p>"
        assert outcome.success
        assert outcome.attempts == 1
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_empty_result_returns_original(self):
        transport, _ = counting_transport([(200, {"translatedText": ""})])
        client = TranslationClient(DirectBackend("http://t.test", transport=transport), backoff_base=0)

        outcome = await client.translate_chunk(0, "<p>Hello</p>", "en", "es")

        assert outcome.text == "<p>Hello</p>"
        assert outcome.success

    @pytest.mark.asyncio
    async def test_http_500_three_times_falls_back(self):
        """Two retries after the first failure, then the original text."""
        transport, calls = counting_transport([(500, {"error": "down"})])
        client = TranslationClient(DirectBackend("http://t.test", transport=transport),
                                   max_retries=2, backoff_base=0)

        outcome = await client.translate_chunk(0, "<p>Hello</p>", "en", "es")

        assert len(calls) == 3
        assert outcome.text == "<p>Hello</p>"
        assert not outcome.success
        assert outcome.attempts == 3
        assert "500" in outcome.error

    @pytest.mark.asyncio
    async def test_recovers_after_failure(self):
        transport, calls = counting_transport([
            (503, {}),
            (200, {"translatedText": "Hola"}),
        ])
        client = TranslationClient(DirectBackend("http://t.test", transport=transport), backoff_base=0)

        outcome = await client.translate_chunk(0, "Hello", "en", "es")

        assert outcome.text == "Hola"
        assert outcome.success
        assert outcome.attempts == 2
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_timeout_is_retried_then_falls_back(self):
        backend = SlowBackend(delay=1.0)
        client = TranslationClient(backend, timeout=0.05, max_retries=1, backoff_base=0)

        outcome = await client.translate_chunk(0, "Hello there", "en", "es")

        assert len(backend.calls) == 2
        assert outcome.text == "Hello there"
        assert not outcome.success
        assert "timed out" in outcome.error

    @pytest.mark.asyncio
    async def test_configuration_error_not_retried(self):
        backend = MisconfiguredBackend()
        client = TranslationClient(backend, max_retries=2, backoff_base=0)

        outcome = await client.translate_chunk(0, "Hello", "en", "es")

        assert len(backend.calls) == 1
        assert not outcome.success
        assert outcome.text == "Hello"

    @pytest.mark.asyncio
    async def test_translate_returns_text(self, spanish_backend):
        client = TranslationClient(spanish_backend, backoff_base=0)
        assert await client.translate("Hello reader", "en", "es") == "Hola lector"

    @pytest.mark.asyncio
    async def test_whitespace_not_sent(self, echo_backend):
        client = TranslationClient(echo_backend, backoff_base=0)

        outcome = await client.translate_chunk(0, "  \n ", "en", "es")

        assert outcome.text == "  \n "
        assert echo_backend.calls == []

    @pytest.mark.asyncio
    async def test_cache_hits_backend_once(self, spanish_backend):
        client = TranslationClient(spanish_backend, backoff_base=0, cache_size=10)

        first = await client.translate_chunk(0, "Hello", "en", "es")
        second = await client.translate_chunk(1, "Hello", "en", "es")
        other_target = await client.translate_chunk(2, "Hello", "en", "fr")

        assert first.text == second.text == "Hola"
        assert second.attempts == 0
        assert other_target.attempts == 1
        assert len(spanish_backend.calls) == 2

    @pytest.mark.asyncio
    async def test_failures_not_cached(self):
        transport, calls = counting_transport([(500, {})])
        client = TranslationClient(DirectBackend("http://t.test", transport=transport),
                                   max_retries=0, backoff_base=0)

        await client.translate_chunk(0, "Hello", "en", "es")
        await client.translate_chunk(0, "Hello", "en", "es")

        assert len(calls) == 2


class TestBackoff:
    """Test retry delays."""

    def test_ranges(self):
        for _ in range(200):
            first = backoff_delay(0, 0.5)
            second = backoff_delay(1, 0.5)
            assert 0.5 <= first < 1.0
            assert 1.0 <= second < 2.0
            assert first < second

    def test_zero_base(self):
        assert backoff_delay(3, 0) == 0


class TestTranslationCache:
    """Test the FIFO cache."""

    def test_oldest_evicted(self):
        cache = TranslationCache(max_size=2)
        cache.put("a", "1")
        cache.put("b", "2")
        cache.put("c", "3")

        assert cache.get("a") is None
        assert cache.get("b") == "2"
        assert cache.get("c") == "3"
        assert len(cache) == 2

    def test_key_format(self):
        assert TranslationCache.make_key("Hello", "auto", "es") == "Hello:auto:es"
