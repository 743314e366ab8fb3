"""Tests for the Groq provider adapter (HTTP mocked with httpx.MockTransport)."""

import json

import httpx
import pytest

from learnpath.providers.base import (
    CompletionRequest,
    HealthStatus,
    ProviderDownError,
    RateLimitError,
)
from learnpath.providers.groq import GroqAdapter

BASE_URL = "https://groq.test/openai/v1"


def make_adapter(handler, api_key: str | None = "test-key") -> GroqAdapter:
    return GroqAdapter(
        api_key=api_key,
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
    )


def completion_body(content: str) -> dict:
    return {
        "model": "llama-test",
        "choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 5},
    }


class TestGroqComplete:
    async def test_sends_payload_and_parses_response(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=completion_body("hello"))

        adapter = make_adapter(handler)
        response = await adapter.complete(
            CompletionRequest(
                messages=[{"role": "user", "content": "hi"}],
                model="llama-test",
                temperature=0.2,
                max_tokens=500,
                json_mode=True,
            )
        )
        await adapter.close()

        assert response.content == "hello"
        assert response.provider == "groq"
        assert response.finish_reason == "stop"
        assert response.usage == {"prompt_tokens": 12, "completion_tokens": 5}

        request = seen[0]
        assert str(request.url) == f"{BASE_URL}/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-key"
        payload = json.loads(request.content)
        assert payload["temperature"] == 0.2
        assert payload["max_tokens"] == 500
        assert payload["response_format"] == {"type": "json_object"}

    async def test_omits_unset_options(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=completion_body("ok"))

        adapter = make_adapter(handler)
        await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

        assert "max_tokens" not in seen[0]
        assert "response_format" not in seen[0]

    async def test_null_content_becomes_empty_string(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = completion_body("")
            body["choices"][0]["message"]["content"] = None
            return httpx.Response(200, json=body)

        adapter = make_adapter(handler)
        response = await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

        assert response.content == ""

    async def test_rate_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"retry-after": "7"})

        adapter = make_adapter(handler)
        with pytest.raises(RateLimitError) as exc_info:
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

        assert exc_info.value.retry_after == 7

    async def test_invalid_key(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"message": "bad key"}})

        adapter = make_adapter(handler)
        with pytest.raises(ProviderDownError, match="Invalid Groq API key"):
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

    async def test_server_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        adapter = make_adapter(handler)
        with pytest.raises(ProviderDownError, match="503"):
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        adapter = make_adapter(handler)
        with pytest.raises(ProviderDownError, match="Cannot connect"):
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

    async def test_read_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadError("connection reset", request=request)

        adapter = make_adapter(handler)
        with pytest.raises(ProviderDownError, match="ReadError"):
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

    async def test_non_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>Bad Gateway</html>")

        adapter = make_adapter(handler)
        with pytest.raises(ProviderDownError, match="Invalid response"):
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

    async def test_non_object_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=["not", "a", "completion"])

        adapter = make_adapter(handler)
        with pytest.raises(ProviderDownError, match="Invalid response"):
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()

    async def test_missing_api_key(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request should be sent")

        adapter = make_adapter(handler, api_key=None)
        with pytest.raises(ProviderDownError, match="GROQ_API_KEY"):
            await adapter.complete(CompletionRequest(messages=[], model="m"))
        await adapter.close()


class TestGroqHealth:
    async def test_healthy(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/models")
            return httpx.Response(200, json={"data": [{"id": "llama-a"}, {"id": "llama-b"}]})

        adapter = make_adapter(handler)
        health = await adapter.health_check()
        await adapter.close()

        assert health.status == HealthStatus.HEALTHY
        assert health.models_available == ["llama-a", "llama-b"]

    async def test_unauthorized(self) -> None:
        adapter = make_adapter(lambda request: httpx.Response(401))
        health = await adapter.health_check()
        await adapter.close()

        assert health.status == HealthStatus.UNHEALTHY

    async def test_no_key_is_unhealthy(self) -> None:
        adapter = make_adapter(lambda request: httpx.Response(200), api_key=None)
        health = await adapter.health_check()
        await adapter.close()

        assert health.status == HealthStatus.UNHEALTHY
        assert health.error == "API key not configured"
