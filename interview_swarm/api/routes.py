"""
Interview Swarm - API Routes.

FastAPI router with all interview endpoints.
Agent-backed endpoints are rate limited per client IP.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from interview_swarm.api.schemas import (
    CompleteInterviewRequest,
    ErrorResponse,
    StartInterviewRequest,
    SubmitAnswerRequest,
    SubmitCodeRequest,
)
from interview_swarm.app.orchestrator import InterviewOrchestrator
from interview_swarm.core.config import get_settings
from interview_swarm.core.exceptions import (
    MissingFieldError,
    QuestionNotFoundError,
    QuestionTypeMismatchError,
    SessionNotFoundError,
)


logger = logging.getLogger(__name__)

_settings = get_settings()

router = APIRouter(
    prefix="/api/interview",
    tags=["interview"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
health_router = APIRouter(prefix="/api", tags=["health"])

# Every interview call fans out to at least one agent
limiter = Limiter(key_func=get_remote_address, enabled=_settings.RATE_LIMIT_ENABLED)
INTERVIEW_LIMIT = _settings.INTERVIEW_RATE_LIMIT


def get_orchestrator(request: Request) -> InterviewOrchestrator:
    """Orchestrator owned by the running app."""
    return request.app.state.orchestrator


def _require(**fields: Any) -> None:
    """Raise MissingFieldError naming every empty field."""
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise MissingFieldError(*missing)


# =============================================================================
# Interview Flow
# =============================================================================

@router.post("/start")
@limiter.limit(INTERVIEW_LIMIT)
async def start_interview(
    request: Request,
    payload: StartInterviewRequest | None = None,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict:
    """Create a session and return its first question."""
    payload = payload or StartInterviewRequest()
    try:
        started = await orchestrator.start(payload.role, payload.company)

        logger.info(
            f"Started session {started.session_id}. "
            f"Active sessions: {orchestrator.active_sessions}"
        )

        return {
            "sessionId": started.session_id,
            "question": started.question.to_public_dict(),
            "totalQuestions": started.total_questions,
            "currentQuestion": started.current_question,
        }
    except Exception as e:
        logger.error(f"❌ Start error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/answer")
@limiter.limit(INTERVIEW_LIMIT)
async def submit_answer(
    request: Request,
    payload: SubmitAnswerRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict:
    """Evaluate an answer and return the next question (or the coding question)."""
    try:
        _require(sessionId=payload.session_id, questionId=payload.question_id)

        result = await orchestrator.submit_answer(
            payload.session_id,
            payload.question_id,
            payload.transcript,
            skipped=bool(payload.skipped),
        )

        return {
            "evaluation": result.evaluation.to_dict(),
            "nextQuestion": (
                result.next_question.to_public_dict() if result.next_question else None
            ),
            "isLastVideoQuestion": result.is_last_video_question,
            "currentQuestion": result.current_question,
            "totalQuestions": result.total_questions,
        }
    except (MissingFieldError, QuestionTypeMismatchError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except (SessionNotFoundError, QuestionNotFoundError) as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"❌ Answer error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/submit-code")
@limiter.limit(INTERVIEW_LIMIT)
async def submit_code(
    request: Request,
    payload: SubmitCodeRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict:
    """Send the coding solution to the code reviewer."""
    try:
        _require(sessionId=payload.session_id, questionId=payload.question_id)
        if payload.code is None:
            raise MissingFieldError("code")

        review = await orchestrator.submit_code(
            payload.session_id,
            payload.question_id,
            payload.code,
            payload.language,
        )

        return {"review": review.to_dict()}
    except (MissingFieldError, QuestionTypeMismatchError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except (SessionNotFoundError, QuestionNotFoundError) as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"❌ Code review error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/complete")
@limiter.limit(INTERVIEW_LIMIT)
async def complete_interview(
    request: Request,
    payload: CompleteInterviewRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict:
    """Produce the final analysis for a session."""
    try:
        _require(sessionId=payload.session_id)

        analysis = await orchestrator.complete(payload.session_id)

        return {"analysis": analysis}
    except MissingFieldError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"❌ Analysis error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/session/{session_id}")
async def get_session(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict:
    """Current session state, for debugging or resuming."""
    try:
        return {"session": orchestrator.get_session(session_id).to_dict()}
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


# =============================================================================
# Health Check
# =============================================================================

@health_router.get("/health")
async def health_check(
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> Dict:
    """API health check."""
    return {
        "status": "ok",
        "service": "Interview Swarm",
        "activeSessions": orchestrator.active_sessions,
    }
