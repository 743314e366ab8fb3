"""Core domain models for learnpath.

These models define the shapes the front end consumes:
- Roadmaps of milestones and topics
- Quiz questions and knowledge assessments
- Learning resources (tasks) for knowledge gaps

Field names on the wire are camelCase, matching what the browser sends.
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Enums
# =============================================================================


class ChatRole(str, Enum):
    """Roles accepted in a chat conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# =============================================================================
# Conversation Models
# =============================================================================


class ChatMessage(BaseModel):
    """One turn of the information-gathering chat."""

    role: ChatRole
    content: str


# =============================================================================
# Roadmap Models
# =============================================================================


class Milestone(BaseModel):
    """A named step in a roadmap with the topics it covers."""

    name: str
    topics: list[str] = Field(default_factory=list)


class Roadmap(BaseModel):
    """Personalized learning path."""

    milestones: list[Milestone] = Field(default_factory=list)


# =============================================================================
# Assessment Models
# =============================================================================


class Question(BaseModel):
    """A quiz question generated for a topic."""

    id: str
    question: str
    type: str = "open"


# Integer scores stay integers on the wire
Score = Annotated[int, Field(ge=0, le=100)] | Annotated[float, Field(ge=0, le=100)]


class KnowledgeAssessment(BaseModel):
    """Grading of a single free-text answer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    understanding_score: Score
    identified_gaps: list[str] = Field(default_factory=list)
    feedback: str
    next_steps: str
    ready_to_progress: bool


FALLBACK_ASSESSMENT = KnowledgeAssessment(
    understanding_score=0,
    identified_gaps=["Unable to process your answer"],
    feedback="I couldn't analyze your answer properly. Could you try explaining in a different way?",
    next_steps="Please review the main concepts and try again with a clearer response",
    ready_to_progress=False,
)


# =============================================================================
# Resource Models
# =============================================================================


class Video(BaseModel):
    """Video reference attached to a resource."""

    id: str
    title: str
    url: str


class Task(BaseModel):
    """Learning resource for one knowledge gap."""

    topic: str
    videos: list[Video] = Field(default_factory=list)
    explanation: str
    completed: bool = False
