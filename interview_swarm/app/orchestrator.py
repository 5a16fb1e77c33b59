"""
Interview Swarm - Interview Orchestrator.

Manages the interview state machine and coordinates the four agents:
- Interviewer: generates spoken and coding questions
- Evaluator: scores spoken answers and picks the next difficulty
- Code Reviewer: reviews the coding solution
- Analyst: writes the final report

State Flow:
AWAITING_FIRST_QUESTION -> ASKING_VIDEO (xN) -> ASKING_CODE
    -> AWAITING_CODE_REVIEW -> CODE_REVIEWED -> COMPLETED

Every agent-backed step has a hand-authored fallback, so a failing agent
never stalls the candidate.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from interview_swarm.app import fallbacks
from interview_swarm.core.config import Settings, get_settings
from interview_swarm.core.context import build_interview_context
from interview_swarm.core.domain.models import (
    AnswerEvaluation,
    CodeReview,
    InterviewSession,
    NewQuestion,
    QuestionRecord,
    QuestionType,
    format_elapsed,
)
from interview_swarm.core.domain.results import (
    AnalysisReport,
    CodeReviewResult,
    EvaluatorResult,
    InterviewerQuestion,
)
from interview_swarm.core.exceptions import (
    AgentError,
    ConfigurationError,
    InvalidSessionUpdateError,
    QuestionNotFoundError,
    QuestionTypeMismatchError,
    SessionNotFoundError,
)
from interview_swarm.core import prompts
from interview_swarm.infra.agents.gateway import AgentGateway, create_gateway
from interview_swarm.infra.persistence.session_store import SessionStore


logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Step Results
# -----------------------------------------------------------------------------

@dataclass
class StartResult:
    session_id: str
    question: QuestionRecord
    total_questions: int
    current_question: int


@dataclass
class AnswerResult:
    evaluation: AnswerEvaluation
    next_question: QuestionRecord | None
    is_last_video_question: bool
    current_question: int
    total_questions: int


class InterviewOrchestrator:
    """
    Main orchestrator for the interview flow.

    Every public operation runs under the session's lock, so concurrent
    requests for one session are applied one after another.

    Usage:
        orchestrator = InterviewOrchestrator()

        started = await orchestrator.start("Backend Engineer", "Acme")
        result = await orchestrator.submit_answer(started.session_id, 1, "transcript")
        review = await orchestrator.submit_code(started.session_id, 4, code, "python")
        analysis = await orchestrator.complete(started.session_id)
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        gateway: AgentGateway | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Session store (created if not provided)
            gateway: Agent gateway for the configured backend
            settings: Application settings
        """
        self._settings = settings or get_settings()
        self._store = store or SessionStore(
            total_video_questions=self._settings.TOTAL_VIDEO_QUESTIONS,
        )
        self._gateway = gateway or create_gateway(self._settings)
        self._agents = self._settings.agent_ids()
        self._delegate = self._settings.ORCHESTRATION_MODE == "session_delegation"

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def active_sessions(self) -> int:
        return len(self._store)

    # -------------------------------------------------------------------------
    # Session Lookup
    # -------------------------------------------------------------------------

    def get_session(self, session_id: str) -> InterviewSession:
        """Snapshot of a session for the debug/resume accessor."""
        session = self._store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _require_question(
        self,
        session: InterviewSession,
        question_id: int,
        question_type: QuestionType | None = None,
    ) -> QuestionRecord:
        question = session.get_question(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)
        if question_type is not None and question.type != question_type:
            raise QuestionTypeMismatchError(question_id, question_type.value)
        return question

    # -------------------------------------------------------------------------
    # Interview Flow
    # -------------------------------------------------------------------------

    async def start(self, role: str | None = None, company: str | None = None) -> StartResult:
        """
        Create a session and issue its first spoken question.

        Always returns a usable question; the fixed fallback stands in when
        the interviewer agent fails.
        """
        role = role or self._settings.DEFAULT_ROLE
        company = company or self._settings.DEFAULT_COMPANY
        logger.info(f"🎬 Starting interview: {role} @ {company}")

        session = self._store.create(role, company)
        session_id = session.session_id

        async with self._store.lock(session_id):
            question = await self._issue_question(session, QuestionType.VIDEO)
            session = self.get_session(session_id)

        return StartResult(
            session_id=session_id,
            question=question,
            total_questions=session.total_questions,
            current_question=len(session.questions),
        )

    async def submit_answer(
        self,
        session_id: str,
        question_id: int,
        transcript: str | None,
        skipped: bool = False,
    ) -> AnswerResult:
        """
        Record an answer, evaluate it and issue the next question.

        A skipped question gets a zero score locally and keeps the current
        difficulty. Once every spoken question has been answered the coding
        question is issued instead of another spoken one.

        Raises:
            SessionNotFoundError, QuestionNotFoundError, QuestionTypeMismatchError
        """
        async with self._store.lock(session_id):
            session = self.get_session(session_id)
            self._require_question(session, question_id, QuestionType.VIDEO)
            logger.info(f"📨 Answer for Q{question_id} (session {session_id}, skipped={skipped})")

            self._store.record_answer(
                session_id,
                question_id,
                "" if skipped else (transcript or ""),
                skipped,
            )
            session = self.get_session(session_id)
            question = self._require_question(session, question_id)

            if skipped:
                logger.info(f"⏭ Question Q{question_id} skipped")
                evaluation = fallbacks.skipped_evaluation(session.current_difficulty)
            else:
                evaluation = await self._evaluate(session, question)

            self._store.record_evaluation(session_id, question_id, evaluation)
            session = self.get_session(session_id)

            is_last_video = session.answered_video_count >= session.total_video_questions
            latest = session.latest_question

            if latest is not None and not latest.is_answered:
                # A question is still outstanding; hand it back instead of adding one
                next_question: QuestionRecord | None = latest
            elif is_last_video:
                next_question = None
                if session.code_question is None:
                    next_question = await self._issue_question(session, QuestionType.CODE)
            else:
                next_question = await self._issue_question(session, QuestionType.VIDEO)

            session = self.get_session(session_id)

        return AnswerResult(
            evaluation=session.get_question(question_id).evaluation,
            next_question=next_question,
            is_last_video_question=is_last_video,
            current_question=len(session.questions),
            total_questions=session.total_questions,
        )

    async def submit_code(
        self,
        session_id: str,
        question_id: int,
        code: str | None,
        language: str | None = None,
    ) -> CodeReview:
        """
        Record a coding solution and review it.

        Empty or placeholder submissions get a zero-score review without
        calling the code reviewer.

        Raises:
            SessionNotFoundError, QuestionNotFoundError, QuestionTypeMismatchError
        """
        async with self._store.lock(session_id):
            session = self.get_session(session_id)
            self._require_question(session, question_id, QuestionType.CODE)
            logger.info(f"💻 Reviewing code submission for session {session_id}")

            self._store.record_answer(session_id, question_id, code or "")
            session = self.get_session(session_id)
            question = self._require_question(session, question_id)

            if fallbacks.is_empty_submission(code):
                logger.warning("  ⚠ Empty code submitted")
                review = fallbacks.empty_code_review()
            else:
                review = await self._review_code(session, question, language)

            self._store.record_code_review(session_id, question_id, review)

        return review

    async def complete(self, session_id: str) -> dict[str, Any]:
        """
        Produce the final analysis and mark the session completed.

        totalTime is measured here and always wins over any value the
        analyst supplies.

        Raises:
            SessionNotFoundError
        """
        async with self._store.lock(session_id):
            session = self.get_session(session_id)
            logger.info(f"📊 Generating final analysis for session {session_id}")

            total_time = format_elapsed(session.elapsed_seconds)
            analysis = await self._analyze(session, total_time)

            if analysis is None:
                logger.warning("  ⚠ Analyst failed, using local analysis")
                analysis = fallbacks.local_analysis(session, total_time)
            analysis["totalTime"] = total_time

            self._store.complete(session_id, analysis)

        logger.info(f"🏁 Interview complete: {session_id} ({total_time})")
        return analysis

    # -------------------------------------------------------------------------
    # Agent Calls
    # -------------------------------------------------------------------------

    async def _call_agent(
        self,
        role: str,
        context: dict[str, Any],
        instruction: str,
        schema: type | None = None,
    ) -> Any:
        """Run one agent step; returns None when the agent cannot be used."""
        try:
            return await self._gateway.send_with_context(
                self._agents[role], context, instruction, schema,
            )
        except (AgentError, ConfigurationError) as e:
            logger.warning(f"  ⚠ {role} agent failed: {e}")
            return None

    def _merge(
        self,
        session_id: str,
        payload: Any,
        scored_question_id: int | None = None,
    ) -> InterviewSession | None:
        try:
            return self._store.merge_external_update(session_id, payload, scored_question_id)
        except InvalidSessionUpdateError as e:
            logger.warning(f"  ⚠ Agent session update rejected: {e}")
            return None

    async def _issue_question(
        self,
        session: InterviewSession,
        question_type: QuestionType,
    ) -> QuestionRecord:
        """Ask the interviewer for a question, falling back to the bank."""
        first = not session.questions
        logger.info(f"  → Generating {question_type.value} question (first={first})...")

        if self._delegate:
            record = await self._delegate_question(session, question_type, first)
        else:
            record = await self._request_question(session, question_type, first)

        if record is None:
            logger.warning("  ⚠ Interviewer failed, using fallback question")
            if first:
                fallback = fallbacks.first_question()
            elif question_type == QuestionType.CODE:
                fallback = fallbacks.code_question(session)
            else:
                fallback = fallbacks.next_video_question(session)
            record = self._store.append_question(session.session_id, fallback)

        logger.info(f"📝 Question {record.id}: {record.text[:50]}...")
        return record

    async def _request_question(
        self,
        session: InterviewSession,
        question_type: QuestionType,
        first: bool,
    ) -> QuestionRecord | None:
        difficulty = session.current_difficulty
        if first:
            template = prompts.FIRST_QUESTION_INSTRUCTION
        elif question_type == QuestionType.CODE:
            template = prompts.CODE_QUESTION_INSTRUCTION
        else:
            template = prompts.NEXT_QUESTION_INSTRUCTION

        context = {
            "role": session.role,
            "company": session.company,
            "currentDifficulty": difficulty.value,
            "questionType": question_type.value,
            "interviewHistory": build_interview_context(session),
        }
        instruction = template.format(
            role=session.role,
            company=session.company,
            difficulty=difficulty.value,
        )

        result = await self._call_agent("interviewer", context, instruction, InterviewerQuestion)
        if result is None:
            return None

        question: NewQuestion = result.to_new_question(question_type, difficulty)
        return self._store.append_question(session.session_id, question)

    async def _delegate_question(
        self,
        session: InterviewSession,
        question_type: QuestionType,
        first: bool,
    ) -> QuestionRecord | None:
        if first:
            template = prompts.DELEGATE_FIRST_QUESTION
        elif question_type == QuestionType.CODE:
            template = prompts.DELEGATE_CODE_QUESTION
        else:
            template = prompts.DELEGATE_NEXT_QUESTION
        instruction = template.format(difficulty=session.current_difficulty.value)

        payload = await self._call_agent("interviewer", session.to_dict(), instruction)

        # Accept exactly one new question, and only of the requested type
        known = len(session.questions)
        questions = payload.get("questions") if isinstance(payload, dict) else None
        if not isinstance(questions, list) or len(questions) <= known:
            return None
        incoming = questions[known]
        if not isinstance(incoming, dict):
            return None
        if str(incoming.get("type", "video")).lower() != question_type.value:
            logger.warning(f"  ⚠ Interviewer returned a non-{question_type.value} question")
            return None

        merged = self._merge(session.session_id, {**payload, "questions": questions[:known + 1]})
        if merged is None or len(merged.questions) <= known:
            return None
        return merged.questions[known]

    async def _evaluate(
        self,
        session: InterviewSession,
        question: QuestionRecord,
    ) -> AnswerEvaluation:
        logger.info(f"📝 Evaluating answer for Q{question.id}...")
        evaluation: AnswerEvaluation | None = None

        if self._delegate:
            instruction = prompts.DELEGATE_EVALUATION.format(question_id=question.id)
            payload = await self._call_agent("evaluator", session.to_dict(), instruction)
            if payload is not None:
                known = len(session.questions)
                if isinstance(payload, dict) and isinstance(payload.get("questions"), list):
                    payload = {**payload, "questions": payload["questions"][:known]}
                merged = self._merge(session.session_id, payload, question.id)
                if merged is not None:
                    evaluation = merged.get_question(question.id).evaluation
        else:
            context = {
                "role": session.role,
                "question": {
                    "title": question.title,
                    "text": question.text,
                    "difficulty": question.difficulty.value,
                },
                "answer": question.answer,
            }
            instruction = prompts.EVALUATE_ANSWER_INSTRUCTION.format(
                difficulty=question.difficulty.value,
            )
            result = await self._call_agent("evaluator", context, instruction, EvaluatorResult)
            if result is not None:
                evaluation = result.to_domain()

        if evaluation is None:
            logger.warning("  ⚠ Evaluator failed, using fallback")
            return fallbacks.unavailable_evaluation(session.current_difficulty)

        logger.info(
            f"  ✓ Q{question.id} scored {evaluation.score}/100, "
            f"next difficulty {evaluation.next_difficulty.value}"
        )
        return evaluation

    async def _review_code(
        self,
        session: InterviewSession,
        question: QuestionRecord,
        language: str | None,
    ) -> CodeReview:
        review: CodeReview | None = None

        if self._delegate:
            instruction = prompts.DELEGATE_CODE_REVIEW.format(question_id=question.id)
            payload = await self._call_agent("code_reviewer", session.to_dict(), instruction)
            if payload is not None:
                known = len(session.questions)
                if isinstance(payload, dict) and isinstance(payload.get("questions"), list):
                    payload = {**payload, "questions": payload["questions"][:known]}
                merged = self._merge(session.session_id, payload, question.id)
                if merged is not None:
                    review = merged.get_question(question.id).code_review
        else:
            context = {
                "role": session.role,
                "problem": {
                    "title": question.title,
                    "text": question.text,
                    "starterCode": question.starter_code,
                },
                "code": question.answer,
                "language": language or question.language or "javascript",
            }
            result = await self._call_agent(
                "code_reviewer", context, prompts.REVIEW_CODE_INSTRUCTION, CodeReviewResult,
            )
            if result is not None:
                review = result.to_domain()

        if review is None:
            logger.warning("  ⚠ Code Reviewer failed, using fallback")
            return fallbacks.unavailable_code_review()

        logger.info(f"  ✓ Code review recorded: {review.score}/100")
        return review

    async def _analyze(self, session: InterviewSession, total_time: str) -> dict[str, Any] | None:
        if self._delegate:
            instruction = prompts.DELEGATE_ANALYSIS.format(total_time=total_time)
            payload = await self._call_agent("analyst", session.to_dict(), instruction)
            raw = payload.get("analysis") if isinstance(payload, dict) else None
        else:
            context = {
                "role": session.role,
                "company": session.company,
                "totalTime": total_time,
                "questions": [q.to_dict() for q in session.questions],
            }
            instruction = prompts.ANALYSIS_INSTRUCTION.format(total_time=total_time)
            raw = await self._call_agent("analyst", context, instruction)

        if raw is None:
            return None

        try:
            return AnalysisReport.model_validate(raw).to_dict()
        except ValidationError as e:
            logger.warning(f"  ⚠ Analyst report rejected: {e}")
            return None

    async def aclose(self) -> None:
        await self._gateway.aclose()


# -----------------------------------------------------------------------------
# Factory Function
# -----------------------------------------------------------------------------

def create_orchestrator(settings: Settings | None = None) -> InterviewOrchestrator:
    """Create a fully initialized orchestrator."""
    settings = settings or get_settings()
    return InterviewOrchestrator(
        store=SessionStore(total_video_questions=settings.TOTAL_VIDEO_QUESTIONS),
        gateway=create_gateway(settings),
        settings=settings,
    )
