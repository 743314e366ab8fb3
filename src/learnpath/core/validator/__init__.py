"""Validator - Shape enforcement for normalized model output."""

from learnpath.core.validator.validator import (
    ValidationError,
    ValidationResult,
    Validator,
)

__all__ = ["ValidationError", "ValidationResult", "Validator"]
