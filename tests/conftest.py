"""
Pytest configuration and fixtures for Interview Swarm tests.
"""

import asyncio
import json
import os
import sys
from pathlib import Path

import pytest


# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Must be set before the routes module builds its limiter
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from interview_swarm.app.orchestrator import InterviewOrchestrator  # noqa: E402
from interview_swarm.core.config import Settings  # noqa: E402
from interview_swarm.core.exceptions import TransportError  # noqa: E402
from interview_swarm.infra.agents.gateway import AgentGateway  # noqa: E402
from interview_swarm.infra.persistence.session_store import SessionStore  # noqa: E402


INTERVIEWER = "interviewer-agent"
EVALUATOR = "evaluator-agent"
CODE_REVIEWER = "reviewer-agent"
ANALYST = "analyst-agent"


class ScriptedTransport:
    """
    Agent transport that replays canned replies per agent id.

    A reply may be a str (sent as-is), a dict/list (JSON-encoded) or an
    exception (raised). When an agent's script runs out, `default` is used;
    a default of None means the agent is down.
    """

    def __init__(self, replies=None, default=None, delay: float = 0.0):
        self.replies = {agent: list(script) for agent, script in (replies or {}).items()}
        self.default = default
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def send(self, agent_id: str, prompt: str) -> str:
        self.calls.append((agent_id, prompt))
        if self.delay:
            await asyncio.sleep(self.delay)

        script = self.replies.get(agent_id)
        reply = script.pop(0) if script else self.default

        if reply is None:
            raise TransportError(agent_id, 503, "scripted outage")
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return reply
        return json.dumps(reply)

    async def aclose(self) -> None:
        pass

    def prompts_to(self, agent_id: str) -> list[str]:
        return [prompt for agent, prompt in self.calls if agent == agent_id]


def make_settings(**overrides) -> Settings:
    values = {
        "INTERVIEWER_AGENT_ID": INTERVIEWER,
        "EVALUATOR_AGENT_ID": EVALUATOR,
        "CODE_REVIEWER_AGENT_ID": CODE_REVIEWER,
        "ANALYST_AGENT_ID": ANALYST,
        "ARCHESTRA_BASE_URL": "https://agents.test",
        "ARCHESTRA_API_KEY": "test-key",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def make_orchestrator():
    """Build an orchestrator wired to a ScriptedTransport."""

    def _make(replies=None, default=None, delay: float = 0.0, **setting_overrides):
        settings = make_settings(**setting_overrides)
        transport = ScriptedTransport(replies, default=default, delay=delay)
        orchestrator = InterviewOrchestrator(
            store=SessionStore(total_video_questions=settings.TOTAL_VIDEO_QUESTIONS),
            gateway=AgentGateway(transport, timeout_seconds=settings.AGENT_TIMEOUT_SECONDS),
            settings=settings,
        )
        return orchestrator, transport

    return _make


# -----------------------------------------------------------------------------
# Canned agent replies
# -----------------------------------------------------------------------------

def video_question(title: str, difficulty: str = "medium") -> dict:
    return {
        "type": "video",
        "title": title,
        "text": f"Tell me about {title}.",
        "difficulty": difficulty,
    }


def code_question(title: str = "Debounce") -> dict:
    return {
        "type": "code",
        "title": title,
        "text": "Implement debounce(fn, ms).",
        "difficulty": "medium",
        "starterCode": "// Write your solution here\n",
        "language": "javascript",
    }


def evaluation(score: int, next_difficulty: str) -> dict:
    return {
        "score": score,
        "maxScore": 100,
        "nextDifficulty": next_difficulty,
        "strengths": [f"strength {score}"],
        "weaknesses": [f"weakness {score}"],
        "brief": f"Scored {score}.",
    }


@pytest.fixture
def agent_replies():
    """Replies for a full, healthy interview with three spoken questions."""
    return {
        INTERVIEWER: [
            video_question("Closures"),
            "```json\n" + json.dumps(video_question("Event Loop", "hard")) + "\n```",
            video_question("Memoization", "hard"),
            code_question(),
        ],
        EVALUATOR: [
            evaluation(85, "hard"),
            "Here is my evaluation: " + json.dumps(evaluation(72, "hard")),
            evaluation(60, "medium"),
        ],
        CODE_REVIEWER: [
            {
                "score": 90,
                "correctness": True,
                "timeComplexity": "O(1)",
                "spaceComplexity": "O(1)",
                "strengths": ["Clean timers"],
                "issues": [],
                "brief": "Solid.",
            },
        ],
        ANALYST: [
            {
                "overallScore": 81,
                "recommendation": "Strong Hire",
                "summary": "Good run.",
                "skillScores": {"problemSolving": 90},
                "feedback": [{"type": "strength", "text": "Clear"}],
            },
        ],
    }


SOLUTION = """function debounce(fn, ms) {
  let timer;
  return (...args) => {
    clearTimeout(timer);
    timer = setTimeout(() => fn(...args), ms);
  };
}"""


@pytest.fixture
def solution_code():
    return SOLUTION
