"""
Interview Swarm - A2A Agent Transport.

Talks to agents hosted on an Agent-to-Agent (A2A) platform using JSON-RPC 2.0
over HTTP: POST {base_url}/v1/a2a/{agent_id} with method "message/send".
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from interview_swarm.core.config import Settings, get_settings
from interview_swarm.core.exceptions import MissingAgentConfigError, TransportError

logger = logging.getLogger(__name__)


def _text_parts(parts: Any) -> list[str]:
    if not isinstance(parts, list):
        return []
    return [
        p["text"] for p in parts
        if isinstance(p, dict) and p.get("kind") == "text" and isinstance(p.get("text"), str)
    ]


def extract_a2a_text(agent_id: str, data: dict[str, Any]) -> str:
    """
    Pull the reply text out of a JSON-RPC response.

    Looks at result.message.parts, then result.parts, then result.text or
    result.content. An unknown shape is returned re-serialized so the JSON
    recovery step still gets a chance at it.

    Raises:
        TransportError: the response carries a JSON-RPC error
    """
    error = data.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else None
        raise TransportError(agent_id, body=f"A2A error: {message or json.dumps(error)}")

    result = data.get("result")
    if isinstance(result, dict):
        message = result.get("message")
        if isinstance(message, dict):
            texts = _text_parts(message.get("parts"))
            if texts:
                return "\n".join(texts)

        texts = _text_parts(result.get("parts"))
        if texts:
            return "\n".join(texts)

        if isinstance(result.get("text"), str):
            return result["text"]
        if isinstance(result.get("content"), str):
            return result["content"]

    logger.warning(f"  ⚠ Unknown A2A response format: {json.dumps(data)[:300]}")
    return json.dumps(data)


class A2ATransport:
    """
    HTTP transport for A2A-hosted agents.

    The httpx client is created lazily and reused across calls; base URL
    and API key are checked on first use so the app can boot unconfigured.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings or get_settings()
        self._client = client

    def _endpoint(self, agent_id: str) -> tuple[str, str]:
        base_url = self._settings.ARCHESTRA_BASE_URL.rstrip("/")
        api_key = self._settings.ARCHESTRA_API_KEY

        if not base_url:
            raise MissingAgentConfigError("ARCHESTRA_BASE_URL")
        if not api_key:
            raise MissingAgentConfigError("ARCHESTRA_API_KEY")
        if not agent_id:
            raise MissingAgentConfigError("agent id")

        return f"{base_url}/v1/a2a/{agent_id}", api_key

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.AGENT_TIMEOUT_SECONDS)
        return self._client

    async def send(self, agent_id: str, prompt: str) -> str:
        """Send one message/send request and return the agent's text."""
        url, api_key = self._endpoint(agent_id)

        body = {
            "jsonrpc": "2.0",
            "id": int(time.time() * 1000),
            "method": "message/send",
            "params": {
                "message": {
                    "parts": [{"kind": "text", "text": prompt}],
                },
            },
        }

        try:
            response = await self._get_client().post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(agent_id, body=f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error(f"  ✗ A2A API error ({response.status_code}): {response.text[:300]}")
            raise TransportError(agent_id, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(agent_id, response.status_code, response.text) from e

        if not isinstance(data, dict):
            raise TransportError(agent_id, response.status_code, response.text)

        return extract_a2a_text(agent_id, data)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
