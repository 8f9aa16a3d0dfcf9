import asyncio
import contextlib
import logging
from typing import Optional
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from supabase import Client
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from filmroom.config import settings
from filmroom.database.supabase_client import check_database, get_supabase
from filmroom.modules.auth import routes as auth_routes
from filmroom.modules.teams import routes as teams_routes
from filmroom.modules.players import routes as players_routes
from filmroom.modules.games import routes as games_routes
from filmroom.modules.videos import routes as videos_routes
from filmroom.modules.plays import routes as plays_routes
from filmroom.modules.drives import routes as drives_routes
from filmroom.modules.analytics import routes as analytics_routes
from filmroom.modules.scouting import routes as scouting_routes
from filmroom.modules.entitlements import routes as entitlements_routes
from filmroom.modules.admin import routes as admin_routes
from filmroom.modules.playbuilder import routes as playbuilder_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module_routes in (
    auth_routes,
    teams_routes,
    players_routes,
    games_routes,
    videos_routes,
    plays_routes,
    drives_routes,
    analytics_routes,
    scouting_routes,
    entitlements_routes,
    admin_routes,
    playbuilder_routes,
):
    app.include_router(module_routes.router, prefix="/api/v1")


_retention_task: Optional[asyncio.Task] = None


def _log_task_exit(task: asyncio.Task):
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Retention scheduler stopped: {exc}")


@app.on_event("startup")
async def startup_event():
    global _retention_task
    logger.info("Application startup")
    if settings.enable_retention_scheduler:
        from filmroom.modules.games.retention_scheduler import retention_scheduler_loop
        _retention_task = asyncio.create_task(retention_scheduler_loop())
        _retention_task.add_done_callback(_log_task_exit)
        logger.info(
            f"Retention scheduler started - checking for expired games every "
            f"{settings.retention_check_interval_seconds}s"
        )


@app.on_event("shutdown")
async def shutdown_event():
    global _retention_task
    logger.info("Application shutdown")
    if _retention_task is not None:
        _retention_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await _retention_task
        _retention_task = None


@app.get("/")
async def root():
    return {"message": "Welcome to filmroom-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready(request: Request, supabase: Client = Depends(get_supabase)):
    """Readiness check: 503 until the database answers with seeded tier config"""
    if not check_database(supabase):
        return JSONResponse(status_code=503, content={"status": "not_ready"})
    return {"status": "ready"}
