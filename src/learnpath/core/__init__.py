"""learnpath Core - Output normalization and contracts."""

from learnpath.core.models import (
    FALLBACK_ASSESSMENT,
    ChatMessage,
    ChatRole,
    KnowledgeAssessment,
    Milestone,
    Question,
    Roadmap,
    Task,
    Video,
)

__all__ = [
    "FALLBACK_ASSESSMENT",
    "ChatMessage",
    "ChatRole",
    "KnowledgeAssessment",
    "Milestone",
    "Question",
    "Roadmap",
    "Task",
    "Video",
]
