"""
Interview Swarm - Gemini Agent Transport.

Runs the four interview agents on Google Gemini instead of an agent
platform: each agent id names a persona that becomes the model's system
instruction.
"""

from __future__ import annotations

import logging

import google.generativeai as genai

from interview_swarm.core.config import Settings, get_settings
from interview_swarm.core.exceptions import MissingAgentConfigError, TransportError
from interview_swarm.core.prompts import AGENT_PERSONAS

logger = logging.getLogger(__name__)


class GeminiAgentTransport:
    """
    Gemini-powered agents.

    Each persona gets its own GenerativeModel, built on first use:
    - interviewer: question generation
    - evaluator: answer scoring and difficulty step
    - code_reviewer: solution review
    - analyst: final report
    """

    def __init__(self, settings: Settings | None = None, api_key: str | None = None):
        self._settings = settings or get_settings()
        self._api_key = api_key or self._settings.GEMINI_API_KEY
        self._models: dict[str, genai.GenerativeModel] = {}
        self._configured = False

    def _configure(self) -> None:
        """Configure the Gemini API client (lazy initialization)."""
        if self._configured:
            return

        if not self._api_key:
            raise MissingAgentConfigError("GEMINI_API_KEY")

        genai.configure(api_key=self._api_key)
        self._configured = True
        logger.info("✅ Gemini API configured")

    def _model_for(self, agent_id: str) -> genai.GenerativeModel:
        if agent_id not in self._models:
            persona = AGENT_PERSONAS.get(agent_id)
            if persona is None:
                logger.warning(f"No persona for agent '{agent_id}', using bare model")
            self._models[agent_id] = genai.GenerativeModel(
                self._settings.GEMINI_MODEL,
                system_instruction=persona,
            )
        return self._models[agent_id]

    async def send(self, agent_id: str, prompt: str) -> str:
        """Generate a reply from the persona named by agent_id."""
        self._configure()
        model = self._model_for(agent_id)

        try:
            response = await model.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    temperature=0.4,
                    max_output_tokens=2048,
                    response_mime_type="application/json",
                ),
                request_options={"timeout": self._settings.AGENT_TIMEOUT_SECONDS},
            )
            text = response.text
        except genai.types.BlockedPromptException as e:
            logger.warning(f"Prompt blocked: {e}")
            raise TransportError(agent_id, body="Content was blocked by safety filters") from e
        except Exception as e:
            error_str = str(e).lower()
            status = 429 if "429" in error_str or "rate" in error_str else None
            logger.error(f"Gemini error: {e}")
            raise TransportError(agent_id, status, str(e)) from e

        if not text:
            raise TransportError(agent_id, body="Empty response from Gemini")

        return text.strip()

    async def aclose(self) -> None:
        self._models.clear()
