"""
Interview Swarm - Interview Context Builder.

Renders a session's question/answer history as plain text for agent
prompts. Output depends only on the session passed in.
"""

from interview_swarm.core.domain.models import InterviewSession, QuestionRecord


NO_HISTORY = "No previous questions yet."


def _history_entry(position: int, question: QuestionRecord) -> str:
    entry = f"Q{position} [{question.difficulty.value}]: {question.text}\n"
    if question.skipped:
        entry += "Status: SKIPPED (Candidate passed)\n"
    elif question.answer:
        entry += f"Answer: {question.answer}\n"
    if question.evaluation:
        entry += f"Score: {question.evaluation.score}/100 | {question.evaluation.brief}\n"
    return entry


def build_interview_context(session: InterviewSession) -> str:
    """
    Summarize every question asked so far.

    The first line lists question titles the interviewer must not repeat;
    the history section has one block per question with its difficulty,
    the answer or skip status, and the evaluation score when present.
    """
    previous_titles = ", ".join(
        f'"{q.title or q.text[:50]}..."' for q in session.questions
    )

    context = f"PREVIOUSLY ASKED QUESTIONS (DO NOT REPEAT): {previous_titles}\n\n"
    context += "INTERVIEW HISTORY:\n"

    if not session.questions:
        return context + NO_HISTORY

    return context + "\n".join(
        _history_entry(i, q) for i, q in enumerate(session.questions, start=1)
    )
