"""
Interview Swarm - FastAPI Application.

Main FastAPI app serving the interview API.
Includes an optional background task that evicts stale sessions.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from interview_swarm.api.routes import health_router, limiter, router as api_router
from interview_swarm.app.orchestrator import InterviewOrchestrator, create_orchestrator
from interview_swarm.core.config import Settings, configure_logging, get_settings

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 30 * 60


async def background_cleanup_task(orchestrator: InterviewOrchestrator, max_age_hours: int):
    """
    Evict sessions older than max_age_hours.

    Runs every 30 minutes until cancelled.
    """
    logger.info("🧹 Background cleanup task started")

    while True:
        try:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)

            count = orchestrator.store.evict_stale(max_age_hours)
            if count > 0:
                logger.info(f"🧹 Cleanup complete: {count} sessions removed")

        except asyncio.CancelledError:
            logger.info("🧹 Background cleanup task cancelled")
            break
        except Exception as e:
            logger.error(f"🧹 Cleanup task error: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: start the cleanup task when SESSION_TIMEOUT_HOURS is set
    - Shutdown: cancel it and close the agent gateway
    """
    settings: Settings = app.state.settings
    orchestrator: InterviewOrchestrator = app.state.orchestrator
    cleanup_task: asyncio.Task | None = None

    logger.info("🚀 Interview Swarm API starting...")
    logger.info(
        f"🤖 Agents: backend={settings.AGENT_BACKEND}, "
        f"mode={settings.ORCHESTRATION_MODE}"
    )

    if settings.SESSION_TIMEOUT_HOURS > 0:
        cleanup_task = asyncio.create_task(
            background_cleanup_task(orchestrator, settings.SESSION_TIMEOUT_HOURS)
        )

    yield

    logger.info("👋 Interview Swarm API shutting down...")
    if cleanup_task:
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
    await orchestrator.aclose()


# -----------------------------------------------------------------------------
# Error Handlers
# -----------------------------------------------------------------------------

async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": problems or "Invalid request"})


def create_app(
    orchestrator: InterviewOrchestrator | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Interview Swarm",
        description="Adaptive AI Mock Interview API",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.orchestrator = orchestrator or create_orchestrator(settings)

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Every error leaves as {"error": message}
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        return {"status": "ok", "service": "Interview Backend"}

    return app


# Create app instance
app = create_app()
