"""Provider adapters for the upstream completion service."""

from learnpath.providers.base import (
    CompletionRequest,
    CompletionResponse,
    ProviderAdapter,
    ProviderDownError,
    ProviderError,
    ProviderHealth,
    RateLimitError,
)
from learnpath.providers.groq import GroqAdapter

__all__ = [
    "CompletionRequest",
    "CompletionResponse",
    "GroqAdapter",
    "ProviderAdapter",
    "ProviderDownError",
    "ProviderError",
    "ProviderHealth",
    "RateLimitError",
]
