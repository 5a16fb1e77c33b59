"""
Interview Swarm - API Request Schemas.

Pydantic models for API validation. Fields use the front-end's camelCase
names; required ids are checked in the routes so a missing field yields a
400 with a readable message.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Request Schemas
# =============================================================================

class StartInterviewRequest(CamelModel):
    """Request to start a new interview session."""
    role: Optional[str] = None
    company: Optional[str] = None


class SubmitAnswerRequest(CamelModel):
    """Transcribed (or skipped) answer to a spoken question."""
    session_id: Optional[str] = None
    question_id: Optional[int] = None
    transcript: Optional[str] = None
    skipped: Optional[bool] = False


class SubmitCodeRequest(CamelModel):
    """Solution to the coding question."""
    session_id: Optional[str] = None
    question_id: Optional[int] = None
    code: Optional[str] = None
    language: Optional[str] = None


class CompleteInterviewRequest(CamelModel):
    """Request for the final analysis."""
    session_id: Optional[str] = None


# =============================================================================
# Response Schemas
# =============================================================================

class ErrorResponse(BaseModel):
    """Error response."""
    error: str
