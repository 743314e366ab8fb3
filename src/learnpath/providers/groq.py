"""Groq provider adapter (OpenAI-compatible chat completions)."""

import logging
import time
from datetime import datetime
from typing import Any

import httpx

from learnpath.providers.base import (
    CompletionRequest,
    CompletionResponse,
    HealthStatus,
    ProviderAdapter,
    ProviderDownError,
    ProviderHealth,
    RateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"


class GroqAdapter(ProviderAdapter):
    """
    Adapter for the Groq API.

    Groq serves open models (Llama and friends) behind an
    OpenAI-compatible endpoint. Requires an API key.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def name(self) -> str:
        return "groq"

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with auth."""
        if not self.api_key:
            raise ProviderDownError(self.name, "Missing GROQ_API_KEY environment variable")

        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Send completion request to Groq."""
        start_time = time.monotonic()

        payload: dict[str, Any] = {
            "model": request.model,
            "messages": request.messages,
            "temperature": request.temperature,
        }

        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        if request.json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.post(
                f"{self.base_url}/chat/completions",
                headers=self._get_headers(),
                json=payload,
            )

            if response.status_code == 429:
                retry_after = response.headers.get("retry-after")
                raise RateLimitError(
                    self.name,
                    retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                )

            response.raise_for_status()
            try:
                data = response.json()
            except ValueError:
                logger.warning("Groq returned a non-JSON body: %s", response.text[:200])
                raise ProviderDownError(self.name, "Invalid response from Groq API")
            if not isinstance(data, dict):
                raise ProviderDownError(self.name, "Invalid response from Groq API")

            latency_ms = int((time.monotonic() - start_time) * 1000)

            choice = (data.get("choices") or [{}])[0]
            usage = data.get("usage") or {}

            return CompletionResponse(
                content=(choice.get("message") or {}).get("content") or "",
                model=data.get("model", request.model),
                provider=self.name,
                latency_ms=latency_ms,
                usage={
                    "prompt_tokens": usage.get("prompt_tokens", 0),
                    "completion_tokens": usage.get("completion_tokens", 0),
                },
                finish_reason=choice.get("finish_reason"),
            )

        except httpx.ConnectError:
            raise ProviderDownError(self.name, "Cannot connect to Groq API")
        except httpx.TimeoutException:
            raise ProviderDownError(self.name, "Groq API request timed out")
        except httpx.RequestError as e:
            raise ProviderDownError(self.name, f"Groq API request failed: {e.__class__.__name__}")
        except httpx.HTTPStatusError as e:
            logger.warning("Groq returned %s: %s", e.response.status_code, e.response.text[:200])
            if e.response.status_code == 401:
                raise ProviderDownError(self.name, "Invalid Groq API key")
            raise ProviderDownError(self.name, f"Groq error: {e.response.status_code}")

    async def health_check(self) -> ProviderHealth:
        """Check if Groq API is accessible."""
        if not self.api_key:
            return ProviderHealth(
                status=HealthStatus.UNHEALTHY,
                last_check=datetime.utcnow(),
                error="API key not configured",
            )

        start_time = time.monotonic()

        try:
            response = await self._client.get(
                f"{self.base_url}/models",
                headers=self._get_headers(),
            )
            latency_ms = int((time.monotonic() - start_time) * 1000)

            if response.status_code == 200:
                data = response.json()
                models = [m["id"] for m in data.get("data", [])]
                return ProviderHealth(
                    status=HealthStatus.HEALTHY,
                    latency_ms=latency_ms,
                    last_check=datetime.utcnow(),
                    models_available=models,
                )
            elif response.status_code == 401:
                return ProviderHealth(
                    status=HealthStatus.UNHEALTHY,
                    latency_ms=latency_ms,
                    last_check=datetime.utcnow(),
                    error="Invalid API key",
                )

            return ProviderHealth(
                status=HealthStatus.DEGRADED,
                latency_ms=latency_ms,
                last_check=datetime.utcnow(),
                error=f"Unexpected status: {response.status_code}",
            )

        except httpx.ConnectError:
            return ProviderHealth(
                status=HealthStatus.UNHEALTHY,
                last_check=datetime.utcnow(),
                error="Cannot connect to Groq API",
            )
        except Exception as e:
            return ProviderHealth(
                status=HealthStatus.UNHEALTHY,
                last_check=datetime.utcnow(),
                error=str(e),
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
