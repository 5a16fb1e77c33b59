"""
Interview Swarm - Domain Models.

Defines the core data structures used throughout the application.
Uses dataclasses for the session state; the wire format is camelCase JSON.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class Difficulty(str, Enum):
    """Question difficulty, ordered easy < medium < hard."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    """Spoken questions are transcribed; code questions take a solution."""
    VIDEO = "video"
    CODE = "code"


class InterviewPhase(str, Enum):
    """States in the interview state machine."""
    AWAITING_FIRST_QUESTION = "awaiting-first-question"
    ASKING_VIDEO = "asking-video"
    ASKING_CODE = "asking-code"
    AWAITING_CODE_REVIEW = "awaiting-code-review"
    CODE_REVIEWED = "code-reviewed"
    COMPLETED = "completed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Scoring Models
# -----------------------------------------------------------------------------

@dataclass
class AnswerEvaluation:
    """Evaluation of a spoken answer."""

    score: int
    next_difficulty: Difficulty
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    brief: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "nextDifficulty": self.next_difficulty.value,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "brief": self.brief,
        }


@dataclass
class CodeReview:
    """Review of a submitted coding solution."""

    score: int
    correctness: bool
    time_complexity: str = "N/A"
    space_complexity: str = "N/A"
    strengths: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    brief: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "correctness": self.correctness,
            "timeComplexity": self.time_complexity,
            "spaceComplexity": self.space_complexity,
            "strengths": list(self.strengths),
            "issues": list(self.issues),
            "brief": self.brief,
        }


# -----------------------------------------------------------------------------
# Question Models
# -----------------------------------------------------------------------------

@dataclass
class NewQuestion:
    """Question content before the store assigns it a position."""

    type: QuestionType
    text: str
    difficulty: Difficulty
    title: str | None = None
    starter_code: str | None = None
    language: str | None = None


@dataclass
class QuestionRecord:
    """One question asked in a session, filled in as the candidate answers."""

    id: int
    type: QuestionType
    text: str
    difficulty: Difficulty
    title: str | None = None
    starter_code: str | None = None
    language: str | None = None
    answer: str | None = None
    skipped: bool = False
    evaluation: AnswerEvaluation | None = None
    code_review: CodeReview | None = None

    @classmethod
    def from_new(cls, question_id: int, question: NewQuestion) -> "QuestionRecord":
        is_code = question.type == QuestionType.CODE
        return cls(
            id=question_id,
            type=question.type,
            text=question.text,
            difficulty=question.difficulty,
            title=question.title,
            starter_code=question.starter_code if is_code else None,
            language=question.language if is_code else None,
        )

    @property
    def is_answered(self) -> bool:
        """True once an answer (possibly empty) or a skip was recorded."""
        return self.answer is not None or self.skipped

    @property
    def label(self) -> str:
        return self.title or self.text[:80]

    def to_public_dict(self) -> dict[str, Any]:
        """Question content as shown to the candidate."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "text": self.text,
            "title": self.title,
            "difficulty": self.difficulty.value,
        }
        if self.starter_code is not None:
            data["starterCode"] = self.starter_code
        if self.language is not None:
            data["language"] = self.language
        return data

    def to_dict(self) -> dict[str, Any]:
        data = self.to_public_dict()
        if self.is_answered:
            data["answer"] = self.answer if self.answer is not None else ""
            data["skipped"] = self.skipped
        if self.evaluation:
            data["evaluation"] = self.evaluation.to_dict()
        if self.code_review:
            data["codeReview"] = self.code_review.to_dict()
        return data


# -----------------------------------------------------------------------------
# Interview Session Model
# -----------------------------------------------------------------------------

@dataclass
class InterviewSession:
    """Complete interview session state."""

    session_id: str
    role: str
    company: str
    current_difficulty: Difficulty = Difficulty.MEDIUM
    current_question_index: int = 0
    total_video_questions: int = 3
    questions: list[QuestionRecord] = field(default_factory=list)

    # Timing
    started_at: datetime = field(default_factory=utc_now)
    completed_at: datetime | None = None

    analysis: dict[str, Any] | None = None

    @property
    def total_questions(self) -> int:
        """Spoken questions plus the single trailing coding question."""
        return self.total_video_questions + 1

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def answered_video_count(self) -> int:
        return sum(
            1 for q in self.questions
            if q.type == QuestionType.VIDEO and q.is_answered
        )

    @property
    def code_question(self) -> QuestionRecord | None:
        return next((q for q in self.questions if q.type == QuestionType.CODE), None)

    @property
    def latest_question(self) -> QuestionRecord | None:
        return self.questions[-1] if self.questions else None

    @property
    def phase(self) -> InterviewPhase:
        """Position in the state machine, derived from the recorded data."""
        if self.is_completed:
            return InterviewPhase.COMPLETED
        if not self.questions:
            return InterviewPhase.AWAITING_FIRST_QUESTION

        code_q = self.code_question
        if code_q is None:
            return InterviewPhase.ASKING_VIDEO
        if code_q.code_review is not None:
            return InterviewPhase.CODE_REVIEWED
        if code_q.answer is not None:
            return InterviewPhase.AWAITING_CODE_REVIEW
        return InterviewPhase.ASKING_CODE

    @property
    def elapsed_seconds(self) -> float:
        end = self.completed_at or utc_now()
        return max((end - self.started_at).total_seconds(), 0.0)

    def get_question(self, question_id: int) -> QuestionRecord | None:
        return next((q for q in self.questions if q.id == question_id), None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.session_id,
            "role": self.role,
            "company": self.company,
            "currentDifficulty": self.current_difficulty.value,
            "currentQuestionIndex": self.current_question_index,
            "totalVideoQuestions": self.total_video_questions,
            "questions": [q.to_dict() for q in self.questions],
            "startedAt": self.started_at.isoformat(),
            "phase": self.phase.value,
        }
        if self.completed_at:
            data["completedAt"] = self.completed_at.isoformat()
        if self.analysis is not None:
            data["analysis"] = self.analysis
        return data


def format_elapsed(seconds: float) -> str:
    """Format a duration as M:SS."""
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"
