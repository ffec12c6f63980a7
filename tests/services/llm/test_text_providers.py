"""
Tests for storyforge.services.llm

Ollama is exercised through an httpx mock transport; Gemini through a stub
client object so no network is touched.
"""

import json
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from storyforge.core import FatalProviderError, TransientProviderError
from storyforge.models.entities import TextProviderType
from storyforge.services.llm import (
    GenerationConfig,
    GeminiTextGenerator,
    OllamaTextGenerator,
    clear_provider_cache,
    get_text_generator,
)
from storyforge.services.llm.gemini_provider import map_gemini_error


def _ollama(handler):
    return OllamaTextGenerator(base_url="http://ollama.test/", model="gemma3", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
class TestOllamaTextGenerator:

    async def test_posts_generate_request(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": '{"title": "T"}'})

        text = await _ollama(handler).generate("Write a title", GenerationConfig(json_output=True, max_tokens=64))

        assert text == '{"title": "T"}'
        assert seen["url"] == "http://ollama.test/api/generate"
        assert seen["body"]["model"] == "gemma3"
        assert seen["body"]["stream"] is False
        assert seen["body"]["format"] == "json"
        assert seen["body"]["options"]["num_predict"] == 64

    async def test_server_error_is_transient(self):
        generator = _ollama(lambda request: httpx.Response(503, text="loading model"))
        with pytest.raises(TransientProviderError):
            await generator.generate("hi")

    async def test_client_error_is_fatal(self):
        generator = _ollama(lambda request: httpx.Response(404, text="model not found"))
        with pytest.raises(FatalProviderError, match="model not found"):
            await generator.generate("hi")

    async def test_connection_failure_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransientProviderError):
            await _ollama(handler).generate("hi")

    async def test_empty_reply_is_transient(self):
        generator = _ollama(lambda request: httpx.Response(200, json={"response": "  "}))
        with pytest.raises(TransientProviderError):
            await generator.generate("hi")


class TestGeminiErrorMapping:

    def test_server_error_transient(self):
        exc = genai_errors.ServerError(503, {"error": {"message": "overloaded", "status": "UNAVAILABLE"}})
        assert isinstance(map_gemini_error(exc), TransientProviderError)

    def test_client_error_fatal(self):
        exc = genai_errors.ClientError(403, {"error": {"message": "bad key", "status": "PERMISSION_DENIED"}})
        assert isinstance(map_gemini_error(exc), FatalProviderError)

    def test_network_error_transient(self):
        assert isinstance(map_gemini_error(httpx.ConnectError("down")), TransientProviderError)

    def test_unknown_error_returned_unchanged(self):
        exc = KeyError("x")
        assert map_gemini_error(exc) is exc


@pytest.mark.asyncio
class TestGeminiTextGenerator:

    def _with_reply(self, reply):
        calls = []

        def generate_content(**kwargs):
            calls.append(kwargs)
            if isinstance(reply, Exception):
                raise reply
            return SimpleNamespace(text=reply)

        generator = GeminiTextGenerator(
            api_key="test-key",
            model="gemini-test",
            client_factory=lambda key: SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)),
        )
        return generator, calls

    def _with_keys(self, replies):
        """One stub client per key; ``replies`` maps key -> text or exception."""
        used = []

        def client_for(key):
            def generate_content(**kwargs):
                used.append(key)
                reply = replies[key]
                if isinstance(reply, Exception):
                    raise reply
                return SimpleNamespace(text=reply)
            return SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))

        generator = GeminiTextGenerator(model="gemini-test", api_keys=list(replies), client_factory=client_for)
        return generator, used

    async def test_returns_text_and_requests_json(self):
        generator, calls = self._with_reply('{"title": "T"}')

        assert await generator.generate("p", GenerationConfig(json_output=True)) == '{"title": "T"}'
        assert calls[0]["model"] == "gemini-test"
        assert calls[0]["config"].response_mime_type == "application/json"

    async def test_empty_text_is_transient(self):
        generator, _ = self._with_reply("")
        with pytest.raises(TransientProviderError):
            await generator.generate("p")

    async def test_api_errors_mapped(self):
        generator, _ = self._with_reply(genai_errors.ServerError(500, {"error": {"message": "boom"}}))
        with pytest.raises(TransientProviderError):
            await generator.generate("p")

    async def test_unconfigured_is_fatal(self):
        generator = GeminiTextGenerator(api_keys=[])
        assert not generator.is_available()
        with pytest.raises(FatalProviderError):
            await generator.generate("p")

    async def test_keys_used_in_turn(self):
        generator, used = self._with_keys({"key-a": "one", "key-b": "two"})

        assert [await generator.generate("p") for _ in range(3)] == ["one", "two", "one"]
        assert used == ["key-a", "key-b", "key-a"]

    async def test_quota_error_moves_to_next_key(self):
        quota = genai_errors.ClientError(429, {"error": {"message": "quota", "status": "RESOURCE_EXHAUSTED"}})
        generator, used = self._with_keys({"key-a": quota, "key-b": "from b"})

        assert await generator.generate("p") == "from b"
        assert used == ["key-a", "key-b"]

    async def test_every_key_rejected_is_fatal(self):
        quota = genai_errors.ClientError(429, {"error": {"message": "quota", "status": "RESOURCE_EXHAUSTED"}})
        generator, used = self._with_keys({"key-a": quota, "key-b": quota})

        with pytest.raises(FatalProviderError):
            await generator.generate("p")
        assert used == ["key-a", "key-b"]

    async def test_bad_request_is_not_retried_on_other_keys(self):
        bad = genai_errors.ClientError(400, {"error": {"message": "bad prompt", "status": "INVALID_ARGUMENT"}})
        generator, used = self._with_keys({"key-a": bad, "key-b": "unused"})

        with pytest.raises(FatalProviderError):
            await generator.generate("p")
        assert used == ["key-a"]


def test_factory_caches_per_provider():
    clear_provider_cache()
    first = get_text_generator(TextProviderType.OLLAMA)
    assert get_text_generator(TextProviderType.OLLAMA) is first
    assert isinstance(first, OllamaTextGenerator)
