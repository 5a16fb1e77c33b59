"""
Interview Swarm - Agent Result Schemas.

Pydantic models that agent JSON replies are validated against before
anything reaches the session store. Unknown keys are ignored; agents may
use camelCase or snake_case field names.
"""

import math
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from interview_swarm.core.domain.models import (
    AnswerEvaluation,
    CodeReview,
    Difficulty,
    NewQuestion,
    QuestionType,
)


def _round_score(value: Any) -> Any:
    if isinstance(value, float) and math.isfinite(value):
        return math.floor(value + 0.5)
    return value


def _lower(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


Score = Annotated[int, BeforeValidator(_round_score), Field(ge=0, le=100)]
Level = Annotated[Difficulty, BeforeValidator(_lower)]
Kind = Annotated[QuestionType, BeforeValidator(_lower)]


class AgentResult(BaseModel):
    """Base for every structured agent reply."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Per-step Results
# =============================================================================

class InterviewerQuestion(AgentResult):
    """A question generated by the interviewer agent."""

    type: Kind = QuestionType.VIDEO
    text: str = Field(..., min_length=1)
    title: str | None = None
    difficulty: Level | None = None
    starter_code: str | None = None
    language: str | None = None

    def to_new_question(
        self,
        requested_type: QuestionType,
        requested_difficulty: Difficulty,
    ) -> NewQuestion:
        """Pin the question to the slot it was requested for."""
        question = NewQuestion(
            type=requested_type,
            text=self.text.strip(),
            title=self.title,
            difficulty=self.difficulty or requested_difficulty,
        )
        if requested_type == QuestionType.CODE:
            question.starter_code = self.starter_code or "// Write your solution here\n"
            question.language = self.language or "javascript"
        return question


class EvaluatorResult(AgentResult):
    """Evaluation of a spoken answer by the evaluator agent."""

    score: Score
    next_difficulty: Level
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    brief: str = ""

    def to_domain(self) -> AnswerEvaluation:
        return AnswerEvaluation(
            score=self.score,
            next_difficulty=self.next_difficulty,
            strengths=list(self.strengths),
            weaknesses=list(self.weaknesses),
            brief=self.brief,
        )


class CodeReviewResult(AgentResult):
    """Review of a coding solution by the code reviewer agent."""

    score: Score
    correctness: bool
    time_complexity: str = "N/A"
    space_complexity: str = "N/A"
    strengths: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)
    brief: str = ""

    def to_domain(self) -> CodeReview:
        return CodeReview(
            score=self.score,
            correctness=self.correctness,
            time_complexity=self.time_complexity,
            space_complexity=self.space_complexity,
            strengths=list(self.strengths),
            issues=list(self.issues),
            brief=self.brief,
        )


class FeedbackItem(AgentResult):
    type: Literal["strength", "improvement"]
    text: str


class QuestionResult(AgentResult):
    question: str
    score: Score = 0
    max_score: int = 100
    feedback: str = ""


class AnalysisReport(AgentResult):
    """Final interview report produced by the analyst agent."""

    model_config = ConfigDict(extra="allow")

    overall_score: Score
    recommendation: str = ""
    summary: str = ""
    total_time: str | None = None
    skill_scores: dict[str, Score] = Field(default_factory=dict)
    question_results: list[QuestionResult] = Field(default_factory=list)
    feedback: list[FeedbackItem] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# =============================================================================
# Whole-session Updates
# =============================================================================

class ExternalQuestion(AgentResult):
    """A question entry inside an agent-returned session. Its id is ignored."""

    type: Kind = QuestionType.VIDEO
    text: str = Field(..., min_length=1)
    title: str | None = None
    difficulty: Level | None = None
    starter_code: str | None = None
    language: str | None = None
    evaluation: EvaluatorResult | None = None
    code_review: CodeReviewResult | None = None


class ExternalSessionUpdate(AgentResult):
    """Session-shaped payload returned by an agent in delegation mode."""

    questions: list[ExternalQuestion]
    analysis: dict[str, Any] | None = None
