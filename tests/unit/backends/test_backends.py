"""Unit tests for the HTTP translation backends."""

import json

import httpx
import pytest

from epub_scribe.core.backends import (
    BackendConfigurationError,
    BackendHTTPError,
    BackendResponseError,
    BackendTimeoutError,
    DirectBackend,
    GoogleBackend,
    OpenRouterBackend,
    create_backend,
)


def json_transport(payload, status_code=200, seen=None):
    """MockTransport answering every request with the same JSON payload."""
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


class TestDirectBackend:
    """Test the {text, from, to} backend."""

    @pytest.mark.asyncio
    async def test_request_and_response(self):
        seen = []
        backend = DirectBackend("http://translator.test/api/translate",
                                transport=json_transport({"translatedText": "Hola"}, seen=seen))

        result = await backend.translate_text("Hello", "en", "es")
        await backend.close()

        assert result == "Hola"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "http://translator.test/api/translate"
        assert json.loads(seen[0].content) == {"text": "Hello", "from": "en", "to": "es"}

    @pytest.mark.asyncio
    async def test_missing_field_is_empty(self):
        backend = DirectBackend("http://translator.test", transport=json_transport({}))
        assert await backend.translate_text("Hello", "en", "es") == ""
        await backend.close()

    @pytest.mark.asyncio
    async def test_http_error(self):
        backend = DirectBackend("http://translator.test",
                                transport=json_transport({"error": "boom"}, status_code=500))

        with pytest.raises(BackendHTTPError) as exc_info:
            await backend.translate_text("Hello", "en", "es")
        await backend.close()

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="not json"))
        backend = DirectBackend("http://translator.test", transport=transport)

        with pytest.raises(BackendResponseError):
            await backend.translate_text("Hello", "en", "es")
        await backend.close()

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        backend = DirectBackend("http://translator.test", transport=httpx.MockTransport(handler))

        with pytest.raises(BackendTimeoutError):
            await backend.translate_text("Hello", "en", "es")
        await backend.close()


class TestGoogleBackend:
    """Test the gtx endpoint backend."""

    @pytest.mark.asyncio
    async def test_sentences_joined(self):
        seen = []
        payload = [[["Hola. ", "Hello. ", None], ["¿Cómo estás?", "How are you?", None]], None, "en"]
        backend = GoogleBackend(transport=json_transport(payload, seen=seen))

        result = await backend.translate_text("Hello. How are you?", "auto", "es")
        await backend.close()

        assert result == "Hola. ¿Cómo estás?"
        params = seen[0].url.params
        assert params["client"] == "gtx"
        assert params["sl"] == "auto"
        assert params["tl"] == "es"
        assert params["dt"] == "t"
        assert params["q"] == "Hello. How are you?"
        assert seen[0].headers["User-Agent"].startswith("Mozilla/5.0")

    @pytest.mark.asyncio
    async def test_empty_sentences(self):
        backend = GoogleBackend(transport=json_transport([None, None, "en"]))
        assert await backend.translate_text("Hello", "en", "es") == ""
        await backend.close()

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        backend = GoogleBackend(transport=json_transport({"data": []}))
        with pytest.raises(BackendResponseError):
            await backend.translate_text("Hello", "en", "es")
        await backend.close()


class TestOpenRouterBackend:
    """Test the chat completion backend."""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = []
        payload = {"choices": [{"message": {"content": "<p>Hola</p>"}}]}
        backend = OpenRouterBackend("sk-test", model="test/model",
                                    transport=json_transport(payload, seen=seen))

        result = await backend.translate_text("<p>Hello</p>", "en", "es")
        await backend.close()

        assert result == "<p>Hola</p>"
        request = seen[0]
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["X-Title"] == "EPUB Scribe Translate"
        body = json.loads(request.content)
        assert body["model"] == "test/model"
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 4000
        assert body["messages"][0]["role"] == "system"
        assert "English" in body["messages"][0]["content"]
        assert "Spanish" in body["messages"][0]["content"]
        assert body["messages"][1] == {"role": "user", "content": "<p>Hello</p>"}

    @pytest.mark.asyncio
    async def test_empty_content_returns_input(self):
        payload = {"choices": [{"message": {"content": ""}}]}
        backend = OpenRouterBackend("sk-test", transport=json_transport(payload))
        assert await backend.translate_text("<p>Hello</p>", "en", "es") == "<p>Hello</p>"
        await backend.close()

    @pytest.mark.asyncio
    async def test_no_choices(self):
        backend = OpenRouterBackend("sk-test", transport=json_transport({"choices": []}))
        with pytest.raises(BackendResponseError):
            await backend.translate_text("Hello", "en", "es")
        await backend.close()

    def test_requires_api_key(self):
        with pytest.raises(BackendConfigurationError):
            OpenRouterBackend("")

    def test_auto_source_prompt(self):
        backend = OpenRouterBackend("sk-test")
        assert "detected source language" in backend.build_system_prompt("auto", "fr")


class TestCreateBackend:
    """Test the backend factory."""

    def test_direct(self):
        backend = create_backend("direct", endpoint="http://x.test/api")
        assert isinstance(backend, DirectBackend)
        assert backend.endpoint == "http://x.test/api"

    def test_google_default_endpoint(self):
        backend = create_backend("GOOGLE", endpoint=None)
        assert isinstance(backend, GoogleBackend)
        assert backend.endpoint.startswith("https://translate.googleapis.com/")

    def test_openrouter(self):
        backend = create_backend("openrouter", api_key="sk-test", model="a/b")
        assert isinstance(backend, OpenRouterBackend)
        assert backend.model == "a/b"

    def test_unknown(self):
        with pytest.raises(BackendConfigurationError):
            create_backend("carrier-pigeon")
