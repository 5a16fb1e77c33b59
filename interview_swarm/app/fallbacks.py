"""
Interview Swarm - Fallback Values.

Hand-authored substitutes for every agent-backed step. When an agent call
fails or its reply is unusable, the orchestrator takes the matching value
from here so the interview always moves forward.
"""

import math
from typing import Any

from interview_swarm.core.domain.models import (
    AnswerEvaluation,
    CodeReview,
    Difficulty,
    InterviewSession,
    NewQuestion,
    QuestionType,
)


PLACEHOLDER_CODE = "// Write your solution here"
MIN_CODE_CHARS = 10


# -----------------------------------------------------------------------------
# Questions
# -----------------------------------------------------------------------------

FIRST_QUESTION = NewQuestion(
    type=QuestionType.VIDEO,
    title="React State Management",
    text=(
        "Can you explain the difference between useState and useReducer in React? "
        "When would you choose one over the other?"
    ),
    difficulty=Difficulty.MEDIUM,
)

# (title, text) per difficulty, asked in order, skipping titles already used
VIDEO_QUESTION_BANK: dict[Difficulty, list[tuple[str, str]]] = {
    Difficulty.EASY: [
        ("React Keys", "What are React keys and why are they important?"),
        ("Props vs State", "What is the difference between props and state in a React component?"),
    ],
    Difficulty.MEDIUM: [
        ("React Keys", "What are React keys and why are they important?"),
        (
            "useEffect Cleanup",
            "When does a useEffect cleanup function run, and what kinds of bugs does it prevent?",
        ),
    ],
    Difficulty.HARD: [
        (
            "Reconciliation",
            "Walk me through how React's reconciliation decides which DOM nodes to update "
            "when a list re-renders.",
        ),
        (
            "Concurrent Rendering",
            "How do transitions in concurrent React change what the user sees while a "
            "slow state update is rendering?",
        ),
    ],
}

CODE_QUESTION = NewQuestion(
    type=QuestionType.CODE,
    title="Custom useDebounce Hook",
    text=(
        "Create a custom React hook called useDebounce(value, delay) that returns the "
        "value only after it has stopped changing for `delay` milliseconds. Clean up "
        "pending timers when the value changes or the component unmounts."
    ),
    difficulty=Difficulty.MEDIUM,
    starter_code=f"{PLACEHOLDER_CODE}\n",
    language="javascript",
)


def first_question() -> NewQuestion:
    return NewQuestion(**vars(FIRST_QUESTION))


def next_video_question(session: InterviewSession) -> NewQuestion:
    """Pick the first bank question at the current difficulty not yet asked."""
    difficulty = session.current_difficulty
    asked = {q.title for q in session.questions}
    bank = VIDEO_QUESTION_BANK[difficulty]

    title, text = next(
        ((t, body) for t, body in bank if t not in asked),
        bank[0],
    )
    return NewQuestion(
        type=QuestionType.VIDEO,
        title=title,
        text=text,
        difficulty=difficulty,
    )


def code_question(session: InterviewSession) -> NewQuestion:
    question = NewQuestion(**vars(CODE_QUESTION))
    question.difficulty = session.current_difficulty
    return question


# -----------------------------------------------------------------------------
# Scoring
# -----------------------------------------------------------------------------

def skipped_evaluation(current: Difficulty) -> AnswerEvaluation:
    return AnswerEvaluation(
        score=0,
        next_difficulty=current,
        strengths=[],
        weaknesses=["Question skipped"],
        brief="Question skipped by candidate.",
    )


def unavailable_evaluation(current: Difficulty) -> AnswerEvaluation:
    return AnswerEvaluation(
        score=0,
        next_difficulty=current,
        strengths=[],
        weaknesses=["AI evaluation unavailable"],
        brief="Evaluation could not be completed.",
    )


def is_empty_submission(code: str | None) -> bool:
    """True for missing code, the bare placeholder, or under MIN_CODE_CHARS."""
    trimmed = (code or "").strip()
    return len(trimmed) < MIN_CODE_CHARS or trimmed == PLACEHOLDER_CODE


def empty_code_review() -> CodeReview:
    return CodeReview(
        score=0,
        correctness=False,
        issues=["No code was submitted"],
        brief="Candidate did not submit any code.",
    )


def unavailable_code_review() -> CodeReview:
    return CodeReview(
        score=0,
        correctness=False,
        issues=["AI code review unavailable"],
        brief="Code review could not be completed.",
    )


# -----------------------------------------------------------------------------
# Final Analysis
# -----------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def recommendation_for(score: int) -> str:
    if score >= 80:
        return "Strong Hire"
    if score >= 65:
        return "Hire"
    if score >= 50:
        return "Maybe"
    return "No Hire"


def local_analysis(session: InterviewSession, total_time: str) -> dict[str, Any]:
    """
    Build the final report from recorded scores alone.

    The overall score averages the mean spoken-answer score with the code
    score; the recommendation follows the spoken-answer average.
    """
    scores = [q.evaluation.score for q in session.questions if q.evaluation]
    video_average = round_half_up(sum(scores) / len(scores)) if scores else 0

    review = next((q.code_review for q in session.questions if q.code_review), None)
    code_score = review.score if review else 0

    strengths = [
        {"type": "strength", "text": s}
        for q in session.questions if q.evaluation
        for s in q.evaluation.strengths
    ]
    improvements = [
        {"type": "improvement", "text": w}
        for q in session.questions if q.evaluation
        for w in q.evaluation.weaknesses
    ]

    return {
        "overallScore": round_half_up((video_average + code_score) / 2),
        "recommendation": recommendation_for(video_average),
        "summary": (
            f"Candidate completed the {session.role} interview. "
            f"Average question score: {video_average}/100. "
            f"Code challenge score: {code_score}/100."
        ),
        "totalTime": total_time,
        "skillScores": {
            "reactFundamentals": video_average,
            "problemSolving": code_score,
            "technicalDepth": video_average,
            "codeQuality": code_score,
            "conceptualClarity": video_average,
        },
        "questionResults": [
            {
                "question": q.label,
                "score": (q.evaluation.score if q.evaluation
                          else q.code_review.score if q.code_review else 0),
                "maxScore": 100,
                "feedback": (q.evaluation.brief if q.evaluation
                             else q.code_review.brief if q.code_review else "Completed"),
            }
            for q in session.questions
        ],
        "feedback": strengths + improvements,
    }
