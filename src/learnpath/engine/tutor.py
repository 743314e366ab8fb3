"""
learnpath Tutor - One operation per API route.

Each operation follows the same pipeline:
Prompt → Provider → Normalizer → Validator → domain model

The tutor decides, per operation, whether a normalizer fallback is an
error (roadmap, questions, gaps) or a soft failure with a canned answer
(knowledge assessment).
"""

import logging
from uuid import uuid4

from learnpath.config import get_settings
from learnpath.core.models import (
    FALLBACK_ASSESSMENT,
    ChatMessage,
    KnowledgeAssessment,
    Question,
    Roadmap,
    Task,
    Video,
)
from learnpath.core.normalizer import NormalizerResult, ResponseNormalizer
from learnpath.core.validator import ValidationResult, Validator
from learnpath.engine import prompts
from learnpath.providers.base import CompletionRequest, ProviderAdapter

logger = logging.getLogger(__name__)


class TutorError(Exception):
    """Base exception for tutor operations."""


class EmptyResponseError(TutorError):
    """The completion service returned no content."""


class InvalidModelOutputError(TutorError):
    """Model output could not be turned into the promised shape."""

    def __init__(self, message: str, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


class Tutor:
    """
    Learning engine behind the HTTP routes.

    Stateless apart from its collaborators; one instance serves all
    concurrent requests.
    """

    def __init__(
        self,
        provider: ProviderAdapter,
        model: str | None = None,
        normalizer: ResponseNormalizer | None = None,
        validator: Validator | None = None,
    ):
        self.provider = provider
        self.model = model or get_settings().model_name
        self.normalizer = normalizer or ResponseNormalizer()
        self.validator = validator or Validator()

    async def chat(self, conversation: list[ChatMessage]) -> str:
        """Continue the information-gathering chat and return the reply."""
        messages = [{"role": "system", "content": prompts.CHAT_SYSTEM_PROMPT}]
        messages.extend(
            {"role": message.role.value, "content": message.content}
            for message in conversation
        )

        reply = await self._complete(messages, temperature=0.7)
        if not reply:
            raise EmptyResponseError("Empty reply from LLM")
        return reply

    async def generate_roadmap(self, conversation: list[str]) -> Roadmap:
        """Build a personalized roadmap from the user's chat messages."""
        messages = [{"role": "system", "content": prompts.ROADMAP_SYSTEM_PROMPT}]
        messages.extend({"role": "user", "content": text} for text in conversation)

        content = await self._complete(messages, temperature=0.7, max_tokens=1200)
        result = self._normalize(content, "Invalid JSON from LLM")

        validation = self.validator.validate_roadmap(result.data)
        self._check(validation, "Invalid roadmap from LLM", result.text)
        return validation.value

    async def generate_test(self, topic: str, concepts: list[str]) -> list[Question]:
        """Generate 2-3 open questions covering the given concepts."""
        messages = [
            {"role": "system", "content": prompts.TEST_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": prompts.TEST_USER_PROMPT.format(
                    topic=topic, concepts=", ".join(concepts)
                ),
            },
        ]

        content = await self._complete(messages, temperature=0.7)
        if not content:
            raise EmptyResponseError("Invalid response from LLM")
        result = self._normalize(content, "Failed to parse questions JSON")

        validation = self.validator.validate_questions(result.data)
        self._check(validation, "Failed to parse questions JSON", result.text)
        return validation.value

    async def analyze_gaps(
        self,
        topic: str,
        questions: list[Question],
        answers: dict[str, str],
    ) -> list[str]:
        """List knowledge gaps revealed by a set of answers."""
        qa = "\n\n".join(
            f"Question: {q.question}\nAnswer: {answers.get(q.id) or prompts.MISSING_ANSWER}"
            for q in questions
        )
        messages = [
            {"role": "system", "content": prompts.ANALYZE_SYSTEM_PROMPT},
            {"role": "user", "content": prompts.ANALYZE_USER_PROMPT.format(qa=qa)},
        ]

        logger.debug("Analyzing gaps for topic %r over %d questions", topic, len(questions))
        content = await self._complete(messages, temperature=0.0)
        if not content:
            raise EmptyResponseError("Invalid LLM response for gap analysis")
        result = self._normalize(content, "Failed to parse gaps JSON")

        validation = self.validator.validate_gaps(result.data)
        self._check(validation, "Failed to parse gaps JSON", result.text)
        return validation.value

    async def measure_understanding(
        self,
        question: str,
        answer: str,
        context: str | None = None,
    ) -> KnowledgeAssessment:
        """
        Grade a free-text answer.

        Never fails on bad model output: an unusable response yields the
        fixed fallback assessment asking the learner to try again.
        """
        messages = [
            {"role": "system", "content": prompts.MEASURE_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": prompts.MEASURE_USER_PROMPT.format(
                    question=question, context=context or "", answer=answer
                ),
            },
        ]

        content = await self._complete(
            messages, temperature=0.2, max_tokens=500, json_mode=True
        )
        result = self.normalizer.normalize(content)
        if result.fallback_used:
            logger.warning("Measure: unparseable model output, using fallback assessment")
            logger.debug("Raw LLM response: %r", content)
            return FALLBACK_ASSESSMENT.model_copy(deep=True)

        validation = self.validator.validate_assessment(result.data)
        if not validation.valid:
            logger.warning(
                "Measure: JSON response missing required fields: %s",
                [f"{e.field}: {e.message}" for e in validation.errors],
            )
            logger.debug("Cleaned output: %r", result.text)
            return FALLBACK_ASSESSMENT.model_copy(deep=True)

        return validation.value

    async def generate_resources(self, gaps: list[str]) -> list[Task]:
        """Write a markdown learning resource for each gap, in order."""
        resources: list[Task] = []
        for gap in gaps:
            messages = [
                {"role": "system", "content": prompts.RESOURCE_SYSTEM_PROMPT},
                {"role": "user", "content": prompts.RESOURCE_USER_PROMPT.format(gap=gap)},
            ]
            content = await self._complete(messages, temperature=0.7)
            if not content:
                raise EmptyResponseError("Empty response from LLM")

            resources.append(
                Task(
                    topic=gap,
                    videos=[
                        Video(
                            id=f"vid-{uuid4().hex[:12]}",
                            title=prompts.PLACEHOLDER_VIDEO_TITLE.format(gap=gap),
                            url="#",
                        )
                    ],
                    explanation=content,
                    completed=False,
                )
            )
        return resources

    @staticmethod
    def check_mastery(tasks: list[Task]) -> bool:
        """A topic is mastered once every resource task is completed."""
        return all(task.completed for task in tasks)

    async def _complete(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        response = await self.provider.complete(
            CompletionRequest(
                messages=messages,
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                json_mode=json_mode,
            )
        )
        logger.debug(
            "%s/%s answered in %dms (finish_reason=%s)",
            response.provider,
            response.model,
            response.latency_ms,
            response.finish_reason,
        )
        return response.content

    def _normalize(self, content: str, message: str) -> NormalizerResult:
        """Normalize output, treating a fallback placeholder as an error."""
        result = self.normalizer.normalize(content)
        if result.fallback_used:
            raise InvalidModelOutputError(message, raw=result.cleaned)
        return result

    def _check(self, validation: ValidationResult, message: str, raw: str) -> None:
        for warning in validation.warnings:
            logger.warning(warning)
        if not validation.valid:
            details = "; ".join(f"{e.field}: {e.message}" for e in validation.errors)
            raise InvalidModelOutputError(f"{message}: {details}", raw=raw)
