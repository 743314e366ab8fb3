"""learnpath engine - prompt → provider → normalizer → validator."""

from learnpath.engine.tutor import (
    EmptyResponseError,
    InvalidModelOutputError,
    Tutor,
    TutorError,
)

__all__ = ["EmptyResponseError", "InvalidModelOutputError", "Tutor", "TutorError"]
