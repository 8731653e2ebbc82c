# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Rotation Service
================
Periodically picks members of configured teams and support groups for
recurring duties, posts the picks to Slack, and remembers who was already
picked so nobody repeats until the whole pool has cycled through.

Slash commands /replace and /show let users override or inspect a pick.

Port: 9090
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rotation_service.controllers import (
    command_controller,
    rotation_controller,
    system_controller,
)
from rotation_service.core.config import settings
from rotation_service.core.dependencies import (
    get_pool_repo,
    get_rotation_store,
    get_scheduler,
)
from rotation_service.core.logging import get_logger
from rotation_service.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(settings.SERVICE_NAME)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Load pool and selection state, start the scheduler, flush on exit."""
    get_pool_repo().load(settings.POOL_DEFINITION_PATH)
    store = get_rotation_store()
    store.load()

    scheduler = get_scheduler()
    if settings.SCHEDULER_ENABLED:
        scheduler.schedule_all()
        scheduler.start()
    else:
        logger.info("Scheduler disabled by configuration")

    logger.info("Rotation service starting on port %d", settings.SERVICE_PORT)
    yield
    scheduler.shutdown()
    store.flush()
    logger.info("Rotation service shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Rotation Service",
    description="Picks team members for recurring duties and notifies them on Slack.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Global exception handler ─────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


app.include_router(system_controller.router)
app.include_router(command_controller.router)
app.include_router(rotation_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
