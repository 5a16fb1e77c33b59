"""
Interview Swarm - Agent Gateway.

Single choke point for every call to an external agent. Agents take a
natural-language instruction plus a JSON context and are expected to reply
with JSON; this module sends the prompt, enforces the deadline and recovers
the JSON from whatever text comes back. It never retries.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from interview_swarm.core.config import Settings, get_settings
from interview_swarm.core.exceptions import (
    AgentJSONError,
    AgentResponseError,
    AgentTimeoutError,
)

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?\s*```$")

PREVIEW_CHARS = 300


class AgentTransport(Protocol):
    """Delivers one prompt to one agent and returns its raw text reply."""

    async def send(self, agent_id: str, prompt: str) -> str: ...

    async def aclose(self) -> None: ...


# -----------------------------------------------------------------------------
# JSON Recovery
# -----------------------------------------------------------------------------

def _first_balanced_object(text: str) -> str | None:
    """Return the first {...} substring whose braces balance, or None."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        start = text.find("{", start + 1)
    return None


def parse_agent_json(raw: str) -> Any:
    """
    Recover a JSON value from free-form agent text.

    Trims the text, strips a ``` or ```json fence, falls back to the first
    balanced {...} block when the text does not start with { or [, then
    parses strictly.

    Raises:
        AgentJSONError: with a preview of the cleaned text
    """
    cleaned = raw.strip()

    if cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", cleaned, count=1), count=1)

    if not cleaned.startswith(("{", "[")):
        candidate = _first_balanced_object(cleaned)
        if candidate is not None:
            cleaned = candidate

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        preview = cleaned[:PREVIEW_CHARS]
        logger.error(f"Failed to parse agent JSON: {preview}")
        raise AgentJSONError(e.msg, preview) from e


def build_context_prompt(context: dict[str, Any], instruction: str) -> str:
    """Compose the prompt carrying a serialized context and an instruction."""
    return (
        "SYSTEM CONTEXT:\n"
        f"{json.dumps(context, indent=2, default=str)}\n\n"
        "INSTRUCTION:\n"
        f"{instruction.strip()}\n\n"
        "Respond with ONLY a JSON object representing the result/update.\n"
    )


# -----------------------------------------------------------------------------
# Gateway
# -----------------------------------------------------------------------------

class AgentGateway:
    """
    Fault-isolating front for the external agents.

    Usage:
        gateway = AgentGateway(A2ATransport())

        text = await gateway.send(agent_id, "Hello")
        result = await gateway.send_with_context(
            agent_id, {"question": "..."}, "Evaluate the answer", EvaluatorResult
        )
    """

    def __init__(self, transport: AgentTransport, timeout_seconds: float = 45.0):
        self._transport = transport
        self._timeout = timeout_seconds

    async def send(self, agent_id: str, prompt: str) -> str:
        """
        Send one prompt and wait for the raw reply.

        Raises:
            TransportError: transport failure or deadline exceeded
        """
        logger.info(f"  → Sending to agent {agent_id[:8]}...")
        try:
            reply = await asyncio.wait_for(
                self._transport.send(agent_id, prompt),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise AgentTimeoutError(agent_id, self._timeout) from e

        logger.info(f"  ✓ Agent {agent_id[:8]} responded ({len(reply)} chars)")
        return reply

    async def send_with_context(
        self,
        agent_id: str,
        context: dict[str, Any],
        instruction: str,
        schema: type[ResultT] | None = None,
    ) -> ResultT | Any:
        """
        Send a context object plus instruction and parse the JSON reply.

        Args:
            agent_id: Target agent
            context: JSON-serializable context for the agent
            instruction: What the agent should produce
            schema: Optional pydantic model the reply must validate against

        Returns:
            The validated model when a schema is given, else the parsed JSON
        """
        raw = await self.send(agent_id, build_context_prompt(context, instruction))
        data = parse_agent_json(raw)

        if schema is None:
            return data

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise AgentResponseError(
                f"Agent reply does not match {schema.__name__}",
                details=f"{e.error_count()} validation errors",
            ) from e

    async def aclose(self) -> None:
        await self._transport.aclose()


def create_gateway(settings: Settings | None = None) -> AgentGateway:
    """Build a gateway for the configured agent backend."""
    settings = settings or get_settings()

    if settings.AGENT_BACKEND == "gemini":
        from interview_swarm.infra.llm.gemini import GeminiAgentTransport
        transport: AgentTransport = GeminiAgentTransport(settings=settings)
    else:
        from interview_swarm.infra.agents.a2a import A2ATransport
        transport = A2ATransport(settings=settings)

    return AgentGateway(transport, timeout_seconds=settings.AGENT_TIMEOUT_SECONDS)
