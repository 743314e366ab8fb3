"""Response Normalizer - Extract and repair JSON from model output."""

from learnpath.core.normalizer.normalizer import (
    DEFAULT_FALLBACK,
    NormalizerResult,
    ResponseNormalizer,
    normalize,
)

__all__ = ["DEFAULT_FALLBACK", "NormalizerResult", "ResponseNormalizer", "normalize"]
