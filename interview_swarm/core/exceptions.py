"""
Interview Swarm - Custom Exceptions.

Defines a hierarchy of domain-specific exceptions for clean error handling.
Agent and configuration errors are absorbed by the orchestrator's fallbacks;
session and request errors reach the HTTP caller.
"""


class InterviewAIError(Exception):
    """Base exception for all Interview Swarm errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


# -----------------------------------------------------------------------------
# Configuration Errors
# -----------------------------------------------------------------------------

class ConfigurationError(InterviewAIError):
    """Raised when configuration is invalid or missing."""
    pass


class MissingAgentConfigError(ConfigurationError):
    """Raised when a setting required to reach an agent is empty."""

    def __init__(self, key_name: str):
        self.key_name = key_name
        super().__init__(
            message=f"Missing required agent setting: {key_name}",
            details="Please set this in your .env file or environment variables",
        )


# -----------------------------------------------------------------------------
# Agent Errors
# -----------------------------------------------------------------------------

class AgentError(InterviewAIError):
    """Base exception for external agent failures."""
    pass


class TransportError(AgentError):
    """Raised when an agent call fails at the transport level."""

    def __init__(self, agent_id: str, status_code: int | None = None, body: str = ""):
        self.agent_id = agent_id
        self.status_code = status_code
        self.body = body
        status = f"status {status_code}" if status_code is not None else "no response"
        super().__init__(
            message=f"Agent {agent_id[:8]} call failed ({status})",
            details=body[:300] or None,
        )


class AgentTimeoutError(TransportError):
    """Raised when an agent does not answer within the configured deadline."""

    def __init__(self, agent_id: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(agent_id, body=f"no reply within {timeout_seconds:g}s")


class AgentJSONError(AgentError):
    """Raised when an agent reply cannot be recovered as JSON."""

    def __init__(self, reason: str, preview: str):
        self.preview = preview
        super().__init__(
            message=f"Agent returned invalid JSON: {reason}",
            details=preview,
        )


class AgentResponseError(AgentError):
    """Raised when parsed agent JSON does not have the expected shape."""
    pass


# -----------------------------------------------------------------------------
# Interview Session Errors
# -----------------------------------------------------------------------------

class SessionError(InterviewAIError):
    """Base exception for interview session errors."""
    pass


class SessionNotFoundError(SessionError):
    """Raised when a session ID is not found."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            message="Session not found",
            details=session_id,
        )


class QuestionNotFoundError(SessionError):
    """Raised when a question ID is not part of the session."""

    def __init__(self, question_id: int):
        self.question_id = question_id
        super().__init__(
            message="Question not found",
            details=str(question_id),
        )


class QuestionTypeMismatchError(SessionError):
    """Raised when an answer or code submission targets the wrong kind of question."""

    def __init__(self, question_id: int, expected: str):
        self.question_id = question_id
        self.expected = expected
        super().__init__(
            message=f"Question {question_id} is not a {expected} question",
        )


class InvalidSessionUpdateError(SessionError):
    """Raised when an agent-supplied session payload cannot be merged."""
    pass


# -----------------------------------------------------------------------------
# Request Errors
# -----------------------------------------------------------------------------

class MissingFieldError(InterviewAIError):
    """Raised when a request omits required fields."""

    def __init__(self, *fields: str):
        self.fields = fields
        verb = "is" if len(fields) == 1 else "are"
        super().__init__(message=f"{' and '.join(fields)} {verb} required")
