#!/usr/bin/env python3
"""
Interview Swarm - Main Entry Point.

Usage:
    python main.py          # Run the FastAPI server
    python main.py --cli    # Walk through one interview in the terminal
"""

import argparse
import asyncio
import logging
import os


def run_server(host: str = None, port: int = None):
    """Launch the FastAPI server with uvicorn."""
    import uvicorn
    from interview_swarm.core.config import configure_logging

    # Configure logging before starting server
    configure_logging()

    if host is None:
        host = os.getenv("HOST", "127.0.0.1")

    if port is None:
        port = int(os.getenv("PORT", "3001"))

    print("\n" + "=" * 60)
    print("🎙️  Interview Swarm - Adaptive Mock Interviews")
    print("=" * 60)
    print(f"\n🌐 API: http://{host}:{port}/api/interview")
    print(f"📋 Health: http://{host}:{port}/api/health")
    print(f"📚 API Docs: http://{host}:{port}/api/docs")
    print("\nPress Ctrl+C to stop the server\n")

    # Sessions live in process memory, so a single worker only
    uvicorn.run(
        "interview_swarm.api.app:app",
        host=host,
        port=port,
        workers=1,
        log_level="info",
        access_log=False,
    )


async def run_cli_demo():
    """Run one full interview from the terminal."""
    from interview_swarm.core.config import configure_logging
    from interview_swarm.app.orchestrator import create_orchestrator

    configure_logging()
    logger = logging.getLogger(__name__)

    print("\n" + "=" * 60)
    print("🎙️  Interview Swarm - CLI Demo")
    print("=" * 60 + "\n")

    orchestrator = create_orchestrator()

    try:
        started = await orchestrator.start()
        session_id = started.session_id
        question = started.question
        print(f"🚀 Session started: {session_id} ({started.total_questions} questions)\n")

        while question is not None and question.type.value == "video":
            print(f"🎯 Q{question.id} [{question.difficulty.value}] {question.title or ''}")
            print(f"   {question.text}\n")

            answer = input("💬 Your answer (Enter to skip): ").strip()
            result = await orchestrator.submit_answer(
                session_id, question.id, answer, skipped=not answer,
            )

            evaluation = result.evaluation
            print(f"\n⭐ Score: {evaluation.score}/100 - {evaluation.brief}")
            print(f"   Next difficulty: {evaluation.next_difficulty.value}\n")
            question = result.next_question

        if question is not None:
            print(f"💻 Coding challenge: {question.title or ''}")
            print(f"   {question.text}\n")
            print("Paste your solution, finish with an empty line:")

            lines = []
            while True:
                line = input()
                if not line:
                    break
                lines.append(line)

            review = await orchestrator.submit_code(
                session_id, question.id, "\n".join(lines), question.language,
            )
            print(f"\n🧪 Code score: {review.score}/100 - {review.brief}")

        analysis = await orchestrator.complete(session_id)
        print("\n" + "=" * 60)
        print("🏁 Interview Complete!")
        print(f"   Overall: {analysis.get('overallScore')}/100")
        print(f"   Recommendation: {analysis.get('recommendation')}")
        print(f"   Time: {analysis.get('totalTime')}")
        print("=" * 60 + "\n")

    except Exception as e:
        logger.error(f"Demo error: {e}", exc_info=True)
        print(f"\n❌ Error: {e}")
    finally:
        await orchestrator.aclose()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Interview Swarm - Adaptive Mock Interviews"
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in CLI mode instead of web server",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind the server (default: $HOST or 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server (default: $PORT or 3001)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    # Set debug mode
    if args.debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    if args.cli:
        asyncio.run(run_cli_demo())
    else:
        run_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
