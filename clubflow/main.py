import asyncio
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from clubflow.config import settings
from clubflow.modules.auth import routes as auth_routes
from clubflow.modules.users import routes as users_routes
from clubflow.modules.roles import routes as roles_routes
from clubflow.modules.clubs import routes as clubs_routes
from clubflow.modules.invitations import routes as invitations_routes
from clubflow.modules.members import routes as members_routes
from clubflow.modules.teams import routes as teams_routes
from clubflow.modules.facilities import routes as facilities_routes
from clubflow.modules.bookings import routes as bookings_routes
from clubflow.modules.events import routes as events_routes
from clubflow.modules.finances import routes as finances_routes
from clubflow.modules.communication import routes as communication_routes
from clubflow.modules.subscriptions import routes as subscriptions_routes
from clubflow.modules.dashboard import routes as dashboard_routes

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
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
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
                    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
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
    users_routes,
    roles_routes,
    clubs_routes,
    invitations_routes,
    members_routes,
    teams_routes,
    facilities_routes,
    bookings_routes,
    events_routes,
    finances_routes,
    communication_routes,
    subscriptions_routes,
    dashboard_routes,
):
    app.include_router(module_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info(f"Application startup ({settings.environment})")
    if not settings.smtp_configured:
        logger.warning("SMTP is not configured; emails will be skipped")
    if settings.scheduler_enabled:
        from clubflow.core.scheduler import maintenance_loop
        app.state.scheduler_task = asyncio.create_task(maintenance_loop())
        logger.info(f"Maintenance scheduler started, interval {settings.scheduler_interval_seconds}s")


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "scheduler_task", None)
    if task:
        task.cancel()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to clubflow-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe"""
    return {"status": "ready"}
