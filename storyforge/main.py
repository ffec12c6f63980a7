"""
StoryForge API
FastAPI application for generating narrated Ken Burns short videos

This is the main entry point that wires together all routes and services.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import (
    API_DESCRIPTION,
    API_TITLE,
    API_VERSION,
    CORS_ORIGINS,
    JSON_LOGS,
    LOG_FILE,
    LOG_LEVEL,
    STUCK_TIMEOUT_MINUTES,
    SWEEPER_ENABLED,
    SWEEPER_INTERVAL_MINUTES,
)
from .core import (
    clear_context,
    get_logger,
    is_auth_enabled,
    is_public_path,
    is_request_authenticated,
    missing_runtime_tools,
    set_request_id,
    setup_logging,
)
from .routes import logs_router, projects_router, voices_router

setup_logging(
    level=LOG_LEVEL,
    log_file=Path(LOG_FILE) if LOG_FILE else None,
    use_json=JSON_LOGS,
)

logger = get_logger(__name__, service="api")
logger.info("Starting StoryForge API", extra={
    "log_level": LOG_LEVEL,
    "json_logs": JSON_LOGS,
    "auth_enabled": is_auth_enabled(),
})


async def _run_startup() -> None:
    from .services.infrastructure.logs import ActivityLog, get_log_broadcaster
    from .services.infrastructure.orchestration import StuckProjectSweeper
    from .services.infrastructure.storage import get_project_store
    from .services.pipeline.orchestrator import get_orchestrator

    missing = missing_runtime_tools()
    if missing:
        logger.warning("Render tools missing from PATH", extra={"missing": missing})

    store = get_project_store()
    sweeper = StuckProjectSweeper(
        store,
        ActivityLog(store, get_log_broadcaster()),
        timeout_minutes=STUCK_TIMEOUT_MINUTES,
        interval_minutes=SWEEPER_INTERVAL_MINUTES,
        is_running=get_orchestrator().is_running,
        enabled=SWEEPER_ENABLED,
    )
    app.state.sweeper_task = asyncio.create_task(sweeper.run_periodic())


async def _run_shutdown() -> None:
    """Stop background services gracefully."""
    sweeper_task = getattr(app.state, "sweeper_task", None)
    if sweeper_task:
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await _run_startup()
    try:
        yield
    finally:
        await _run_shutdown()


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_correlation(request: Request, call_next):
    """Add correlation ID and enforce the optional API key."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    set_request_id(request_id)
    path = request.url.path

    logger.info(f"{request.method} {path}", extra={
        "method": request.method,
        "path": path,
    })

    try:
        if request.method != "OPTIONS" and is_auth_enabled() and not is_public_path(path):
            if not is_request_authenticated(request):
                return JSONResponse(status_code=401, content={"detail": "Authentication required"})

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers.setdefault("X-Content-Type-Options", "nosniff")

        logger.info(f"Response: {response.status_code}", extra={
            "status_code": response.status_code,
            "method": request.method,
            "path": path,
        })
        return response
    finally:
        clear_context()


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(projects_router)
app.include_router(logs_router)
app.include_router(voices_router)


@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "message": "StoryForge API - Generate narrated Ken Burns videos",
        "version": API_VERSION,
    }


@app.get("/health")
async def health_check():
    """Returns 200 when ffmpeg and ffprobe are on PATH, 503 otherwise."""
    missing = missing_runtime_tools()
    checks = {
        "status": "healthy" if not missing else "unhealthy",
        "checks": {"render_tools": {"missing": missing}},
    }
    if missing:
        logger.warning("Health check: render tools missing", extra={"missing": missing})
        raise HTTPException(status_code=503, detail=checks)
    return checks


def run() -> None:
    import uvicorn

    uvicorn.run("storyforge.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
