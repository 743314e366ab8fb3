"""Base provider adapter interface and types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class HealthStatus(str, Enum):
    """Provider health status."""

    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    UNHEALTHY = "UNHEALTHY"
    UNKNOWN = "UNKNOWN"


@dataclass
class ProviderHealth:
    """Current health status of a provider."""

    status: HealthStatus
    latency_ms: int | None = None
    last_check: datetime | None = None
    error: str | None = None
    models_available: list[str] | None = None


@dataclass
class CompletionRequest:
    """Request for model completion."""

    messages: list[dict[str, str]]
    model: str
    temperature: float = 0.7
    max_tokens: int | None = None  # provider default when unset
    json_mode: bool = False  # Request JSON output


@dataclass
class CompletionResponse:
    """Response from model completion."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] | None = None  # tokens used
    latency_ms: int = 0
    finish_reason: str | None = None


class ProviderAdapter(ABC):
    """
    Abstract base class for provider adapters.

    The tutor engine only talks to this interface, so tests can swap in
    a fake provider.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'groq')."""
        ...

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """
        Send completion request to provider.

        Args:
            request: The completion request

        Returns:
            CompletionResponse with model output

        Raises:
            ProviderError on failure
        """
        ...

    @abstractmethod
    async def health_check(self) -> ProviderHealth:
        """
        Check provider health and availability.

        Returns:
            ProviderHealth with current status
        """
        ...

    async def close(self) -> None:
        """Close provider connections. Override in subclasses if needed."""
        pass


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider: str, recoverable: bool = True):
        super().__init__(message)
        self.provider = provider
        self.recoverable = recoverable


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    def __init__(self, provider: str, retry_after: int | None = None):
        super().__init__(f"Rate limit exceeded for {provider}", provider, recoverable=True)
        self.retry_after = retry_after


class ProviderDownError(ProviderError):
    """Provider is unavailable."""

    def __init__(self, provider: str, message: str = "Provider unavailable"):
        super().__init__(message, provider, recoverable=True)
