"""Tests for the Tutor engine against a scripted provider."""

import pytest

from learnpath.core.models import (
    FALLBACK_ASSESSMENT,
    ChatMessage,
    ChatRole,
    Question,
    Task,
)
from learnpath.engine import EmptyResponseError, InvalidModelOutputError, Tutor
from learnpath.providers.base import ProviderDownError
from tests.fakes import FakeProvider


@pytest.fixture
def tutor(provider: FakeProvider) -> Tutor:
    return Tutor(provider, model="test-model")


class TestChat:
    async def test_returns_reply(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue("What would you like to learn?")

        reply = await tutor.chat([ChatMessage(role=ChatRole.USER, content="Hi")])

        assert reply == "What would you like to learn?"
        request = provider.requests[0]
        assert request.model == "test-model"
        assert request.messages[0]["role"] == "system"
        assert request.messages[1] == {"role": "user", "content": "Hi"}

    async def test_empty_reply_is_an_error(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue("")

        with pytest.raises(EmptyResponseError):
            await tutor.chat([ChatMessage(role=ChatRole.USER, content="Hi")])

    async def test_provider_errors_propagate(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue(ProviderDownError("fake", "Cannot connect"))

        with pytest.raises(ProviderDownError):
            await tutor.chat([])


class TestRoadmap:
    async def test_parses_fenced_roadmap(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue(
            '```json\n{"milestones": [{"name": "Foundations", "topics": ["Syntax", "Types"]}]}\n```'
        )

        roadmap = await tutor.generate_roadmap(["I want to learn Rust", "I know Python"])

        assert roadmap.milestones[0].name == "Foundations"
        assert roadmap.milestones[0].topics == ["Syntax", "Types"]
        request = provider.requests[0]
        assert request.max_tokens == 1200
        assert [m["role"] for m in request.messages] == ["system", "user", "user"]

    async def test_unparseable_roadmap_raises(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue("I cannot build a roadmap right now.")

        with pytest.raises(InvalidModelOutputError) as exc_info:
            await tutor.generate_roadmap(["hello"])

        assert exc_info.value.raw == "I cannot build a roadmap right now."

    async def test_wrong_shape_raises(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue('{"steps": ["a", "b"]}')

        with pytest.raises(InvalidModelOutputError):
            await tutor.generate_roadmap(["hello"])


class TestQuestionsAndGaps:
    async def test_generate_test(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue(
            'Here are your questions: [{"id": "1", "question": "What is ownership?", "type": "open"}, '
            '{"question": "Explain borrowing."}]'
        )

        questions = await tutor.generate_test("Rust", ["ownership", "borrowing"])

        assert [q.id for q in questions] == ["1", "q2"]
        assert "Concepts: ownership, borrowing" in provider.requests[0].messages[1]["content"]

    async def test_generate_test_object_gives_empty_list(
        self, tutor: Tutor, provider: FakeProvider
    ) -> None:
        provider.queue('{"question": "Just one?"}')

        assert await tutor.generate_test("Rust", ["x"]) == []

    async def test_generate_test_empty_content(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue("")

        with pytest.raises(EmptyResponseError):
            await tutor.generate_test("Rust", ["x"])

    async def test_analyze_gaps(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue('`["lifetimes", "borrow checker"]`')
        questions = [
            Question(id="q1", question="What is a lifetime?"),
            Question(id="q2", question="What does the borrow checker do?"),
        ]

        gaps = await tutor.analyze_gaps("Rust", questions, {"q1": "No idea"})

        assert gaps == ["lifetimes", "borrow checker"]
        request = provider.requests[0]
        assert request.temperature == 0.0
        prompt = request.messages[1]["content"]
        assert "Answer: No idea" in prompt
        assert "Answer: No answer provided" in prompt

    async def test_analyze_gaps_gibberish_raises(
        self, tutor: Tutor, provider: FakeProvider
    ) -> None:
        provider.queue("gibberish")

        with pytest.raises(InvalidModelOutputError):
            await tutor.analyze_gaps("Rust", [], {})


class TestMeasure:
    async def test_valid_assessment(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue(
            "{'understandingScore': 85, 'identifiedGaps': [], 'feedback': \"Great!\", "
            "'nextSteps': \"Move on\", 'readyToProgress': True}"
        )

        assessment = await tutor.measure_understanding("What is 2+2?", "4")

        assert assessment.understanding_score == 85
        assert isinstance(assessment.understanding_score, int)
        assert assessment.ready_to_progress is True
        request = provider.requests[0]
        assert request.json_mode
        assert request.max_tokens == 500
        assert "Context: \n" in request.messages[1]["content"]

    async def test_unparseable_uses_fallback(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue('broken "feedback": "almost"')

        assessment = await tutor.measure_understanding("Q", "A", "ctx")

        assert assessment == FALLBACK_ASSESSMENT

    async def test_missing_fields_use_fallback(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue('{"understandingScore": 50, "feedback": "ok"}')

        assessment = await tutor.measure_understanding("Q", "A")

        assert assessment == FALLBACK_ASSESSMENT
        assert assessment is not FALLBACK_ASSESSMENT


class TestResources:
    async def test_one_resource_per_gap(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue("# Loops\nExplained.", "# Recursion\nExplained.")

        tasks = await tutor.generate_resources(["loops", "recursion"])

        assert [t.topic for t in tasks] == ["loops", "recursion"]
        assert tasks[1].explanation == "# Recursion\nExplained."
        assert not any(t.completed for t in tasks)
        assert tasks[0].videos[0].url == "#"
        assert tasks[0].videos[0].id != tasks[1].videos[0].id
        assert '"loops"' in provider.requests[0].messages[1]["content"]

    async def test_no_gaps_no_calls(self, tutor: Tutor, provider: FakeProvider) -> None:
        assert await tutor.generate_resources([]) == []
        assert provider.requests == []

    async def test_empty_content_raises(self, tutor: Tutor, provider: FakeProvider) -> None:
        provider.queue("")

        with pytest.raises(EmptyResponseError):
            await tutor.generate_resources(["loops"])


class TestMastery:
    def test_all_completed(self) -> None:
        tasks = [Task(topic="a", explanation="x", completed=True)]
        assert Tutor.check_mastery(tasks)

    def test_some_incomplete(self) -> None:
        tasks = [
            Task(topic="a", explanation="x", completed=True),
            Task(topic="b", explanation="y"),
        ]
        assert not Tutor.check_mastery(tasks)
