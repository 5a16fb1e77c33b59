"""
Interview Swarm - Session Store.

In-memory, process-lifetime store for interview sessions.
The store owns every InterviewSession; callers get deep-copied snapshots
and change state only through the record_* methods.

Usage:
    store = SessionStore()

    session = store.create("Backend Engineer", "Acme")
    async with store.lock(session.session_id):
        store.append_question(session.session_id, new_question)
        store.record_answer(session.session_id, 1, "transcript", skipped=False)
"""

import asyncio
import copy
import logging
import threading
import uuid
from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from interview_swarm.core.domain.models import (
    AnswerEvaluation,
    CodeReview,
    InterviewSession,
    NewQuestion,
    QuestionRecord,
    QuestionType,
    utc_now,
)
from interview_swarm.core.domain.results import ExternalSessionUpdate
from interview_swarm.core.exceptions import (
    InvalidSessionUpdateError,
    QuestionNotFoundError,
    SessionNotFoundError,
)

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Keyed in-memory session storage.

    Each session has its own asyncio.Lock; the orchestrator holds it for a
    whole read-modify-write cycle. The index itself is guarded by a
    threading.Lock so inserts and evictions stay consistent.
    """

    def __init__(self, total_video_questions: int = 3):
        self._total_video_questions = total_video_questions
        self._sessions: dict[str, InterviewSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._index_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _require(self, session_id: str) -> InterviewSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _require_question(self, session_id: str, question_id: int) -> QuestionRecord:
        question = self._require(session_id).get_question(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)
        return question

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create(self, role: str, company: str) -> InterviewSession:
        """Allocate a fresh session at medium difficulty."""
        session = InterviewSession(
            session_id=str(uuid.uuid4()),
            role=role,
            company=company,
            total_video_questions=self._total_video_questions,
        )

        with self._index_lock:
            self._sessions[session.session_id] = session
            self._locks[session.session_id] = asyncio.Lock()

        logger.info(f"📝 Session created: {session.session_id} ({role} @ {company})")
        return copy.deepcopy(session)

    def get(self, session_id: str) -> InterviewSession | None:
        """Snapshot of a session, or None if the id is unknown."""
        session = self._sessions.get(session_id)
        return copy.deepcopy(session) if session else None

    def lock(self, session_id: str) -> asyncio.Lock:
        """Per-session mutual exclusion lock."""
        lock = self._locks.get(session_id)
        if lock is None:
            raise SessionNotFoundError(session_id)
        return lock

    def complete(self, session_id: str, analysis: dict[str, Any]) -> None:
        session = self._require(session_id)
        if session.is_completed:
            logger.warning(f"Session {session_id} completed again, overwriting analysis")
        session.completed_at = utc_now()
        session.analysis = analysis

    def evict_stale(self, max_age_hours: int) -> int:
        """
        Drop sessions started more than max_age_hours ago.

        Returns:
            Number of sessions removed
        """
        cutoff = utc_now() - timedelta(hours=max_age_hours)

        with self._index_lock:
            stale = [
                sid for sid, session in self._sessions.items()
                if session.started_at < cutoff and not self._locks[sid].locked()
            ]
            for sid in stale:
                del self._sessions[sid]
                del self._locks[sid]

        for sid in stale:
            logger.info(f"Evicted stale session: {sid}")
        return len(stale)

    # -------------------------------------------------------------------------
    # Question Progression
    # -------------------------------------------------------------------------

    def append_question(self, session_id: str, question: NewQuestion) -> QuestionRecord:
        """Append a question under the next dense 1-based id."""
        session = self._require(session_id)

        record = QuestionRecord.from_new(len(session.questions) + 1, question)
        session.questions.append(record)
        session.current_question_index = len(session.questions)

        return copy.deepcopy(record)

    def record_answer(
        self,
        session_id: str,
        question_id: int,
        answer: str,
        skipped: bool = False,
    ) -> None:
        question = self._require_question(session_id, question_id)
        question.answer = answer
        question.skipped = skipped

    def record_evaluation(
        self,
        session_id: str,
        question_id: int,
        evaluation: AnswerEvaluation,
    ) -> None:
        """Store an evaluation and move the session to its next difficulty."""
        session = self._require(session_id)
        question = self._require_question(session_id, question_id)

        question.evaluation = copy.deepcopy(evaluation)
        session.current_difficulty = evaluation.next_difficulty

    def record_code_review(
        self,
        session_id: str,
        question_id: int,
        review: CodeReview,
    ) -> None:
        question = self._require_question(session_id, question_id)
        question.code_review = copy.deepcopy(review)

    # -------------------------------------------------------------------------
    # External Updates
    # -------------------------------------------------------------------------

    def merge_external_update(
        self,
        session_id: str,
        payload: Any,
        scored_question_id: int | None = None,
    ) -> InterviewSession:
        """
        Reconcile an agent-returned session object into the store.

        Identity and lifecycle fields stay as stored. Questions are matched by
        position and renumbered 1..N whatever ids the payload carries:
        existing records keep their content and entries past the end are
        appended. Scoring is taken only for scored_question_id and replaces
        its earlier result: the evaluation of a video question or the code
        review of a code question, cleared when the payload carries none. Difficulty is not taken from the
        payload.

        Raises:
            InvalidSessionUpdateError: payload is not a valid session shape
        """
        session = self._require(session_id)

        try:
            update = ExternalSessionUpdate.model_validate(payload)
        except ValidationError as e:
            raise InvalidSessionUpdateError(
                "Agent session update rejected",
                details=f"{e.error_count()} validation errors",
            ) from e

        merged = list(session.questions)
        for position, incoming in enumerate(update.questions, start=1):
            if position <= len(merged):
                existing = merged[position - 1]
                if existing.id != scored_question_id:
                    continue
                if existing.type == QuestionType.VIDEO:
                    existing.evaluation = (
                        incoming.evaluation.to_domain() if incoming.evaluation else None
                    )
                else:
                    existing.code_review = (
                        incoming.code_review.to_domain() if incoming.code_review else None
                    )
                continue

            question = NewQuestion(
                type=incoming.type,
                text=incoming.text,
                title=incoming.title,
                difficulty=incoming.difficulty or session.current_difficulty,
                starter_code=incoming.starter_code,
                language=incoming.language,
            )
            merged.append(QuestionRecord.from_new(position, question))

        session.questions = merged
        session.current_question_index = len(merged)

        logger.debug(
            f"Merged external update into {session_id}: "
            f"{len(update.questions)} incoming, {len(merged)} stored"
        )
        return copy.deepcopy(session)
