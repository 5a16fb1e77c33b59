"""
Unit tests for the InterviewOrchestrator.

Agents are replaced by a ScriptedTransport so each scenario controls
exactly what every agent replies, or whether it fails.
"""

import asyncio
import re

import pytest

from interview_swarm.core.domain.models import Difficulty, InterviewPhase, QuestionType
from interview_swarm.core.exceptions import (
    QuestionNotFoundError,
    QuestionTypeMismatchError,
    SessionNotFoundError,
)

from conftest import (
    ANALYST,
    CODE_REVIEWER,
    EVALUATOR,
    INTERVIEWER,
    evaluation,
)


async def _answer_all_video(orchestrator, session_id, first_id=1, count=3):
    """Answer `count` spoken questions in order; returns the last result."""
    result = None
    question_id = first_id
    for n in range(count):
        result = await orchestrator.submit_answer(session_id, question_id, f"answer {n + 1}")
        if result.next_question is not None:
            question_id = result.next_question.id
    return result


class TestHealthyInterview:
    """A complete run where every agent answers correctly."""

    async def test_start_returns_first_question(self, make_orchestrator, agent_replies):
        orchestrator, transport = make_orchestrator(agent_replies)

        started = await orchestrator.start("Frontend Engineer", "Acme")

        assert started.question.id == 1
        assert started.question.title == "Closures"
        assert started.question.type == QuestionType.VIDEO
        assert started.total_questions == 4
        assert started.current_question == 1
        assert len(transport.prompts_to(INTERVIEWER)) == 1

    async def test_start_uses_default_role_and_company(self, make_orchestrator, agent_replies):
        orchestrator, _ = make_orchestrator(agent_replies)

        started = await orchestrator.start()

        session = orchestrator.get_session(started.session_id)
        assert session.role == "Senior Frontend Engineer"
        assert session.company == "Nebula Systems"

    async def test_full_interview(self, make_orchestrator, agent_replies, solution_code):
        orchestrator, transport = make_orchestrator(agent_replies)
        started = await orchestrator.start("Frontend Engineer", "Acme")
        sid = started.session_id

        first = await orchestrator.submit_answer(sid, 1, "Closures capture scope.")
        assert first.evaluation.score == 85
        assert first.next_question.id == 2
        assert first.next_question.title == "Event Loop"
        assert first.is_last_video_question is False
        assert first.current_question == 2

        second = await orchestrator.submit_answer(sid, 2, "Microtasks run first.")
        assert second.evaluation.score == 72
        assert second.next_question.id == 3

        third = await orchestrator.submit_answer(sid, 3, "Cache results.")
        assert third.is_last_video_question is True
        assert third.next_question.id == 4
        assert third.next_question.type == QuestionType.CODE
        assert third.next_question.starter_code == "// Write your solution here\n"
        assert third.total_questions == 4

        review = await orchestrator.submit_code(sid, 4, solution_code, "javascript")
        assert review.score == 90
        assert review.correctness is True

        session = orchestrator.get_session(sid)
        assert session.phase == InterviewPhase.CODE_REVIEWED

        analysis = await orchestrator.complete(sid)
        assert analysis["overallScore"] == 81
        assert analysis["recommendation"] == "Strong Hire"
        assert re.match(r"^\d+:\d{2}$", analysis["totalTime"])

        session = orchestrator.get_session(sid)
        assert session.is_completed
        assert session.phase == InterviewPhase.COMPLETED
        assert [q.id for q in session.questions] == [1, 2, 3, 4]
        assert len(transport.prompts_to(ANALYST)) == 1

    async def test_difficulty_follows_evaluation(self, make_orchestrator, agent_replies):
        """The next question is requested at the difficulty the evaluator chose."""
        orchestrator, transport = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        await orchestrator.submit_answer(started.session_id, 1, "answer")

        session = orchestrator.get_session(started.session_id)
        assert session.current_difficulty == Difficulty.HARD
        prompts = transport.prompts_to(INTERVIEWER)
        assert '"currentDifficulty": "medium"' in prompts[0]
        assert '"currentDifficulty": "hard"' in prompts[1]

    async def test_next_question_prompt_carries_history(self, make_orchestrator, agent_replies):
        orchestrator, transport = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        await orchestrator.submit_answer(started.session_id, 1, "Scope capture")

        prompt = transport.prompts_to(INTERVIEWER)[1]
        assert "Q1 [medium]: Tell me about Closures." in prompt
        assert "Score: 85/100" in prompt

    async def test_analyst_total_time_is_overridden(self, make_orchestrator, agent_replies):
        agent_replies[ANALYST] = [{"overallScore": 50, "totalTime": "99:99"}]
        orchestrator, _ = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        analysis = await orchestrator.complete(started.session_id)

        assert analysis["totalTime"] != "99:99"
        assert re.match(r"^\d+:\d{2}$", analysis["totalTime"])

    async def test_analyst_extra_fields_are_kept(self, make_orchestrator, agent_replies):
        agent_replies[ANALYST] = [{"overallScore": 50, "hiringNotes": "Pair with a mentor"}]
        orchestrator, _ = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        analysis = await orchestrator.complete(started.session_id)

        assert analysis["hiringNotes"] == "Pair with a mentor"


class TestSkipAndEmptySubmissions:
    """Skipped answers and empty code never reach the agents."""

    async def test_skip_keeps_difficulty_and_skips_evaluator(self, make_orchestrator, agent_replies):
        orchestrator, transport = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        result = await orchestrator.submit_answer(started.session_id, 1, "ignored", skipped=True)

        assert result.evaluation.score == 0
        assert result.evaluation.weaknesses == ["Question skipped"]
        assert result.evaluation.next_difficulty == Difficulty.MEDIUM
        assert transport.prompts_to(EVALUATOR) == []

        session = orchestrator.get_session(started.session_id)
        assert session.current_difficulty == Difficulty.MEDIUM
        assert session.get_question(1).skipped is True
        assert session.get_question(1).answer == ""

    @pytest.mark.parametrize("code", ["", "   ", "// Write your solution here", "x = 1"])
    async def test_empty_code_scores_zero(self, make_orchestrator, agent_replies, code):
        orchestrator, transport = make_orchestrator(agent_replies)
        started = await orchestrator.start()
        await _answer_all_video(orchestrator, started.session_id)

        review = await orchestrator.submit_code(started.session_id, 4, code)

        assert review.score == 0
        assert review.correctness is False
        assert review.issues == ["No code was submitted"]
        assert transport.prompts_to(CODE_REVIEWER) == []


class TestAgentFailures:
    """Every agent down: the interview still completes on fallbacks."""

    async def test_full_interview_on_fallbacks(self, make_orchestrator, solution_code):
        orchestrator, _ = make_orchestrator()
        started = await orchestrator.start()
        sid = started.session_id

        assert started.question.title == "React State Management"

        first = await orchestrator.submit_answer(sid, 1, "answer")
        assert first.evaluation.score == 0
        assert first.evaluation.weaknesses == ["AI evaluation unavailable"]
        assert first.next_question.title == "React Keys"

        second = await orchestrator.submit_answer(sid, 2, "answer")
        assert second.next_question.title == "useEffect Cleanup"

        third = await orchestrator.submit_answer(sid, 3, "answer")
        assert third.is_last_video_question is True
        assert third.next_question.title == "Custom useDebounce Hook"

        review = await orchestrator.submit_code(sid, 4, solution_code)
        assert review.score == 0
        assert review.issues == ["AI code review unavailable"]

        analysis = await orchestrator.complete(sid)
        assert analysis["overallScore"] == 0
        assert analysis["recommendation"] == "No Hire"
        assert len(analysis["questionResults"]) == 4

    async def test_prose_without_json_falls_back(self, make_orchestrator, agent_replies):
        agent_replies[EVALUATOR] = ["I think the candidate did fine overall."]
        orchestrator, _ = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        result = await orchestrator.submit_answer(started.session_id, 1, "answer")

        assert result.evaluation.weaknesses == ["AI evaluation unavailable"]

    async def test_out_of_range_score_falls_back(self, make_orchestrator, agent_replies):
        agent_replies[EVALUATOR] = [evaluation(140, "hard")]
        orchestrator, _ = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        result = await orchestrator.submit_answer(started.session_id, 1, "answer")

        assert result.evaluation.score == 0
        session = orchestrator.get_session(started.session_id)
        assert session.current_difficulty == Difficulty.MEDIUM

    async def test_slow_agent_times_out_to_fallback(self, make_orchestrator, agent_replies):
        orchestrator, _ = make_orchestrator(
            agent_replies, delay=0.2, AGENT_TIMEOUT_SECONDS=0.01,
        )

        started = await orchestrator.start()

        assert started.question.title == "React State Management"

    async def test_missing_agent_id_uses_fallback(self, make_orchestrator, agent_replies):
        orchestrator, transport = make_orchestrator(agent_replies, EVALUATOR_AGENT_ID="")
        started = await orchestrator.start()

        result = await orchestrator.submit_answer(started.session_id, 1, "answer")

        # ScriptedTransport has nothing scripted for "", so the call fails
        assert result.evaluation.weaknesses == ["AI evaluation unavailable"]
        assert transport.prompts_to(EVALUATOR) == []

    async def test_analyst_garbage_uses_local_analysis(self, make_orchestrator, agent_replies):
        agent_replies[ANALYST] = [{"summary": "no score here"}]
        orchestrator, _ = make_orchestrator(agent_replies)
        started = await orchestrator.start()
        await orchestrator.submit_answer(started.session_id, 1, "answer")

        analysis = await orchestrator.complete(started.session_id)

        assert analysis["recommendation"] == "Strong Hire"
        assert analysis["skillScores"]["reactFundamentals"] == 85


class TestSessionErrors:
    """Unknown sessions and questions."""

    async def test_unknown_session(self, make_orchestrator):
        orchestrator, _ = make_orchestrator()

        with pytest.raises(SessionNotFoundError):
            await orchestrator.submit_answer("missing", 1, "answer")
        with pytest.raises(SessionNotFoundError):
            await orchestrator.complete("missing")

    async def test_unknown_question(self, make_orchestrator, agent_replies):
        orchestrator, _ = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        with pytest.raises(QuestionNotFoundError):
            await orchestrator.submit_answer(started.session_id, 7, "answer")
        with pytest.raises(QuestionNotFoundError):
            await orchestrator.submit_code(started.session_id, 7, "code")

    async def test_answer_to_code_question_is_rejected(
        self, make_orchestrator, agent_replies,
    ):
        """A spoken answer posted to the coding question is neither stored nor evaluated."""
        agent_replies[EVALUATOR].append(evaluation(90, "easy"))
        orchestrator, transport = make_orchestrator(agent_replies)
        started = await orchestrator.start()
        await _answer_all_video(orchestrator, started.session_id)
        before = orchestrator.get_session(started.session_id)

        with pytest.raises(QuestionTypeMismatchError):
            await orchestrator.submit_answer(started.session_id, 4, "spoken answer")

        session = orchestrator.get_session(started.session_id)
        code_q = session.get_question(4)
        assert code_q.answer is None
        assert code_q.evaluation is None
        assert session.current_difficulty == before.current_difficulty
        assert session.phase == InterviewPhase.ASKING_CODE
        assert len(transport.prompts_to(EVALUATOR)) == 3

    async def test_code_for_video_question_is_rejected(
        self, make_orchestrator, agent_replies, solution_code,
    ):
        """Code posted to a spoken question never produces a code review."""
        orchestrator, transport = make_orchestrator(agent_replies)
        started = await orchestrator.start()

        with pytest.raises(QuestionTypeMismatchError):
            await orchestrator.submit_code(started.session_id, 1, solution_code)

        question = orchestrator.get_session(started.session_id).get_question(1)
        assert question.code_review is None
        assert question.answer is None
        assert transport.prompts_to(CODE_REVIEWER) == []


class TestConcurrency:
    """Requests for one session are serialized."""

    async def test_duplicate_answers_do_not_duplicate_questions(
        self, make_orchestrator, agent_replies,
    ):
        orchestrator, _ = make_orchestrator(agent_replies, delay=0.02)
        started = await orchestrator.start()

        results = await asyncio.gather(
            orchestrator.submit_answer(started.session_id, 1, "first try"),
            orchestrator.submit_answer(started.session_id, 1, "second try"),
        )

        session = orchestrator.get_session(started.session_id)
        assert [q.id for q in session.questions] == [1, 2]
        assert {r.next_question.id for r in results} == {2}

    async def test_sessions_are_independent(self, make_orchestrator):
        orchestrator, _ = make_orchestrator()

        first, second = await asyncio.gather(orchestrator.start(), orchestrator.start())

        assert first.session_id != second.session_id
        assert orchestrator.active_sessions == 2


class TestSessionDelegation:
    """Whole-session delegation: agents return an updated session object."""

    @staticmethod
    def _question(text, qid=99, **extra):
        return {"id": qid, "type": "video", "text": text, **extra}

    async def test_questions_are_renumbered(self, make_orchestrator):
        replies = {
            INTERVIEWER: [{"id": "other", "questions": [self._question("First?", title="One")]}],
        }
        orchestrator, transport = make_orchestrator(
            replies, ORCHESTRATION_MODE="session_delegation",
        )

        started = await orchestrator.start()

        assert started.question.id == 1
        assert started.question.text == "First?"
        session = orchestrator.get_session(started.session_id)
        assert session.session_id == started.session_id
        # Delegated prompts carry the session object itself
        assert '"questions": []' in transport.prompts_to(INTERVIEWER)[0]

    async def test_evaluation_merge_moves_difficulty(self, make_orchestrator):
        replies = {
            INTERVIEWER: [
                {"questions": [self._question("First?")]},
                {"questions": [self._question("First?"), self._question("Second?", qid=5)]},
            ],
            EVALUATOR: [
                {"questions": [
                    self._question("First?", evaluation=evaluation(88, "hard")),
                    self._question("Smuggled extra question"),
                ]},
            ],
        }
        orchestrator, transport = make_orchestrator(
            replies, ORCHESTRATION_MODE="session_delegation",
        )
        started = await orchestrator.start()

        result = await orchestrator.submit_answer(started.session_id, 1, "answer")

        assert result.evaluation.score == 88
        assert result.next_question.id == 2
        assert result.next_question.text == "Second?"
        session = orchestrator.get_session(started.session_id)
        assert session.current_difficulty == Difficulty.HARD
        assert [q.text for q in session.questions] == ["First?", "Second?"]
        assert '"answer": "answer"' in transport.prompts_to(EVALUATOR)[0]

    async def test_wrong_question_type_uses_fallback(self, make_orchestrator):
        replies = {
            INTERVIEWER: [
                {"questions": [self._question("First?")]},
                {"questions": [
                    self._question("First?"),
                    {"type": "code", "text": "Write code", "starterCode": "//"},
                ]},
            ],
            EVALUATOR: [{"questions": [self._question("First?", evaluation=evaluation(90, "hard"))]}],
        }
        orchestrator, _ = make_orchestrator(replies, ORCHESTRATION_MODE="session_delegation")
        started = await orchestrator.start()

        result = await orchestrator.submit_answer(started.session_id, 1, "answer")

        assert result.next_question.type == QuestionType.VIDEO
        assert result.next_question.title == "Reconciliation"

    async def test_malformed_session_uses_fallback(self, make_orchestrator):
        replies = {INTERVIEWER: [{"questions": "none"}]}
        orchestrator, _ = make_orchestrator(replies, ORCHESTRATION_MODE="session_delegation")

        started = await orchestrator.start()

        assert started.question.title == "React State Management"

    async def test_reanswer_takes_fresh_evaluation(self, make_orchestrator):
        """Answering an evaluated question again records the new evaluation."""
        replies = {
            INTERVIEWER: [
                {"questions": [self._question("First?")]},
                {"questions": [self._question("First?"), self._question("Second?")]},
            ],
            EVALUATOR: [
                {"questions": [self._question("First?", evaluation=evaluation(40, "easy"))]},
                {"questions": [self._question("First?", evaluation=evaluation(92, "hard"))]},
            ],
        }
        orchestrator, _ = make_orchestrator(replies, ORCHESTRATION_MODE="session_delegation")
        started = await orchestrator.start()
        await orchestrator.submit_answer(started.session_id, 1, "weak answer")

        result = await orchestrator.submit_answer(started.session_id, 1, "better answer")

        assert result.evaluation.score == 92
        assert result.next_question.id == 2
        session = orchestrator.get_session(started.session_id)
        assert session.get_question(1).evaluation.score == 92
        assert session.current_difficulty == Difficulty.HARD

    async def test_code_review_payload_only_scores_code_question(
        self, make_orchestrator, solution_code,
    ):
        """Scoring the reviewer attaches to other questions is ignored."""
        code_entry = {
            "type": "code",
            "text": "Write debounce",
            "starterCode": "// Write your solution here\n",
            "language": "javascript",
        }
        review = {"score": 77, "correctness": True}
        replies = {
            INTERVIEWER: [
                {"questions": [self._question("First?")]},
                {"questions": [self._question("First?"), code_entry]},
            ],
            EVALUATOR: [
                {"questions": [self._question("First?", evaluation=evaluation(60, "medium"))]},
            ],
            CODE_REVIEWER: [
                {"questions": [
                    self._question(
                        "First?", codeReview=review, evaluation=evaluation(5, "easy"),
                    ),
                    {**code_entry, "codeReview": review, "evaluation": evaluation(99, "hard")},
                ]},
            ],
        }
        orchestrator, _ = make_orchestrator(
            replies, ORCHESTRATION_MODE="session_delegation", TOTAL_VIDEO_QUESTIONS=1,
        )
        started = await orchestrator.start()
        answered = await orchestrator.submit_answer(started.session_id, 1, "answer")
        assert answered.next_question.type == QuestionType.CODE

        result = await orchestrator.submit_code(started.session_id, 2, solution_code)

        assert result.score == 77
        session = orchestrator.get_session(started.session_id)
        assert session.get_question(1).code_review is None
        assert session.get_question(1).evaluation.score == 60
        assert session.get_question(2).evaluation is None
        assert session.current_difficulty == Difficulty.MEDIUM
