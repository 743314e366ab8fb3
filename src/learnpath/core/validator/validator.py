"""
Validator - Shape enforcement for normalized model output.

The normalizer guarantees parseable JSON; the validator checks that the
parsed value is what the endpoint promised:
1. Knowledge assessments - all five fields with the right types
2. Roadmaps - milestones with names and topic lists
3. Questions - objects carrying question text
4. Gaps - a list of short strings

This is the second line of defense after the normalizer.
"""

from dataclasses import dataclass, field
from typing import Any

from learnpath.core.models import KnowledgeAssessment, Milestone, Question, Roadmap


@dataclass
class ValidationError:
    """A single validation error."""

    field: str
    message: str
    code: str  # e.g., "MISSING_FIELD", "INVALID_TYPE", "OUT_OF_RANGE"


@dataclass
class ValidationResult:
    """Result of validation."""

    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    value: Any = None


class Validator:
    """Validate parsed model output against learnpath contracts."""

    # (field, expected python types, label used in messages)
    ASSESSMENT_FIELDS: tuple[tuple[str, tuple[type, ...], str], ...] = (
        ("understandingScore", (int, float), "number"),
        ("identifiedGaps", (list,), "array"),
        ("feedback", (str,), "string"),
        ("nextSteps", (str,), "string"),
        ("readyToProgress", (bool,), "boolean"),
    )

    def validate_assessment(self, data: Any) -> ValidationResult:
        """
        Validate a knowledge assessment object.

        Args:
            data: Parsed JSON from the measure prompt

        Returns:
            ValidationResult with a KnowledgeAssessment if valid
        """
        if not isinstance(data, dict):
            return self._not_an_object("assessment", data)

        errors: list[ValidationError] = []
        for name, types, label in self.ASSESSMENT_FIELDS:
            if name not in data:
                errors.append(
                    ValidationError(
                        field=name,
                        message=f"Missing required field: {name}",
                        code="MISSING_FIELD",
                    )
                )
                continue
            value = data[name]
            # bool is an int subclass; a score of True is not a number here
            if not isinstance(value, types) or (label == "number" and isinstance(value, bool)):
                errors.append(
                    ValidationError(
                        field=name,
                        message=f"{name} must be a {label}, got: {type(value).__name__}",
                        code="INVALID_TYPE",
                    )
                )

        if errors:
            return ValidationResult(valid=False, errors=errors)

        score = data["understandingScore"]
        if not 0 <= score <= 100:
            return ValidationResult(
                valid=False,
                errors=[
                    ValidationError(
                        field="understandingScore",
                        message=f"understandingScore must be between 0 and 100, got: {score}",
                        code="OUT_OF_RANGE",
                    )
                ],
            )

        warnings: list[str] = []
        gaps = self._string_list(data["identifiedGaps"], "identifiedGaps", warnings)

        assessment = KnowledgeAssessment(
            understanding_score=score,
            identified_gaps=gaps,
            feedback=data["feedback"],
            next_steps=data["nextSteps"],
            ready_to_progress=data["readyToProgress"],
        )
        return ValidationResult(valid=True, warnings=warnings, value=assessment)

    def validate_roadmap(self, data: Any) -> ValidationResult:
        """Validate a roadmap object with a milestones array."""
        if not isinstance(data, dict):
            return self._not_an_object("roadmap", data)

        milestones = data.get("milestones")
        if not isinstance(milestones, list):
            return ValidationResult(
                valid=False,
                errors=[
                    ValidationError(
                        field="milestones",
                        message="milestones must be an array",
                        code="MISSING_FIELD" if milestones is None else "INVALID_TYPE",
                    )
                ],
            )

        errors: list[ValidationError] = []
        warnings: list[str] = []
        parsed: list[Milestone] = []
        for i, milestone in enumerate(milestones):
            if not isinstance(milestone, dict):
                errors.append(
                    ValidationError(
                        field=f"milestones[{i}]",
                        message=f"Milestone must be an object, got: {type(milestone).__name__}",
                        code="INVALID_TYPE",
                    )
                )
                continue

            name = milestone.get("name")
            if not isinstance(name, str) or not name.strip():
                errors.append(
                    ValidationError(
                        field=f"milestones[{i}].name",
                        message="Milestone name must be a non-empty string",
                        code="INVALID_TYPE",
                    )
                )
                continue

            topics = milestone.get("topics", [])
            if not isinstance(topics, list):
                errors.append(
                    ValidationError(
                        field=f"milestones[{i}].topics",
                        message="topics must be an array",
                        code="INVALID_TYPE",
                    )
                )
                continue

            parsed.append(
                Milestone(
                    name=name,
                    topics=self._string_list(topics, f"milestones[{i}].topics", warnings),
                )
            )

        if errors:
            return ValidationResult(valid=False, errors=errors, warnings=warnings)

        return ValidationResult(valid=True, warnings=warnings, value=Roadmap(milestones=parsed))

    def validate_questions(self, data: Any) -> ValidationResult:
        """
        Validate a question list.

        A non-array payload yields an empty list. Entries without question
        text are dropped; missing ids are filled in as q1, q2, ...
        """
        if not isinstance(data, list):
            return ValidationResult(
                valid=True,
                warnings=[f"Expected an array of questions, got: {type(data).__name__}"],
                value=[],
            )

        warnings: list[str] = []
        questions: list[Question] = []
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                warnings.append(f"Dropped questions[{i}]: not an object")
                continue
            text = item.get("question")
            if not isinstance(text, str) or not text.strip():
                warnings.append(f"Dropped questions[{i}]: missing question text")
                continue
            question_id = item.get("id")
            question_type = item.get("type")
            questions.append(
                Question(
                    id=str(question_id) if question_id not in (None, "") else f"q{i + 1}",
                    question=text,
                    type=question_type if isinstance(question_type, str) and question_type else "open",
                )
            )

        return ValidationResult(valid=True, warnings=warnings, value=questions)

    def validate_gaps(self, data: Any) -> ValidationResult:
        """Validate a list of knowledge gap labels."""
        if not isinstance(data, list):
            return ValidationResult(
                valid=True,
                warnings=[f"Expected an array of gaps, got: {type(data).__name__}"],
                value=[],
            )

        warnings: list[str] = []
        return ValidationResult(
            valid=True,
            warnings=warnings,
            value=self._string_list(data, "gaps", warnings),
        )

    def _string_list(self, items: list[Any], field_name: str, warnings: list[str]) -> list[str]:
        """Coerce list entries to strings, noting any that were not."""
        result: list[str] = []
        for i, item in enumerate(items):
            if isinstance(item, str):
                result.append(item)
            else:
                warnings.append(f"{field_name}[{i}] coerced from {type(item).__name__} to string")
                result.append(str(item))
        return result

    def _not_an_object(self, what: str, data: Any) -> ValidationResult:
        return ValidationResult(
            valid=False,
            errors=[
                ValidationError(
                    field=what,
                    message=f"Expected a JSON object, got: {type(data).__name__}",
                    code="INVALID_TYPE",
                )
            ],
        )
