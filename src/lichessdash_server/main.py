"""HTTP gateway exposing the dashboard API.

This module is the server-side composition root: it is the only place that
wires the concrete :class:`~lichessdash.providers.lichess.LichessClient`
into a :class:`~lichessdash.services.dashboard_service.DashboardService`.
Route handlers depend on the service alone; failures raised by the service
are mapped to HTTP responses by the exception handlers registered in
:func:`create_app`.
"""

from datetime import datetime, timezone
from typing import cast

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from lichessdash.config import Settings, get_settings
from lichessdash.core.exceptions import (
    DashboardError,
    NotFoundError,
    UpstreamError,
    UpstreamUnavailableError,
)
from lichessdash.core.interfaces import RatingProvider
from lichessdash.core.retry import RetryPolicy
from lichessdash.logging_utils import get_logger, set_level
from lichessdash.providers.lichess import LichessClient
from lichessdash.services.dashboard_service import DEFAULT_VARIANT, DashboardService

logger = get_logger("lichessdash_server")

# Lichess serves at most 200 players per top-N request.
MAX_NB = 200

ENDPOINTS = [
    "GET /api/test - Test server connectivity",
    "GET /api/profiles - Get multiple user profiles (top players)",
    "GET /api/profile/:username - Get specific user profile",
    "GET /api/leaderboards/:gameType - Get leaderboards (bullet, blitz, rapid, etc.)",
    "GET /api/leaderboards - Get bullet leaderboard",
    "GET /api/tournaments - Get ongoing/upcoming tournaments",
]

# Route name -> what the generic failure message says could not be fetched.
_FAILURE_SUBJECT: dict[str, str] = {
    "profiles": "profiles",
    "profile": "user profile",
    "leaderboard": "leaderboards",
    "default_leaderboard": "leaderboards",
    "tournaments": "tournaments",
}


def build_service(
    settings: Settings, provider: RatingProvider | None = None
) -> DashboardService:
    """Build the dashboard service from settings.

    Args:
        settings: Resolved gateway settings.
        provider: Optional provider override.  Defaults to a
            :class:`LichessClient` configured from *settings*.

    Returns:
        A :class:`DashboardService` instance.
    """
    if provider is None:
        provider = LichessClient(
            user_agent=settings.user_agent,
            base_url=settings.lichess_base_url,
            timeout=settings.request_timeout_s,
            retry=RetryPolicy(
                retries=settings.retry_attempts,
                delay=settings.retry_delay_s,
            ),
        )
    return DashboardService(
        provider,
        max_profile_lookups=settings.max_profile_lookups,
        tournament_limit=settings.tournament_limit,
    )


def get_service(request: Request) -> DashboardService:
    return request.app.state.service


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _failure_message(request: Request) -> str:
    route = request.scope.get("route")
    subject = _FAILURE_SUBJECT.get(getattr(route, "name", ""), "data")
    return f"Failed to fetch {subject}"


def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.info("Not found: %s (%s)", exc, request.url.path)
    return JSONResponse(status_code=404, content={"error": str(exc)})


def _unavailable(request: Request, exc: UpstreamUnavailableError) -> JSONResponse:
    logger.error("Upstream unavailable (%s): %s", exc.code, exc)
    return JSONResponse(
        status_code=503, content={"error": str(exc), "code": exc.code}
    )


def _upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Upstream error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500, content={"error": _failure_message(request)}
    )


def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = first.get("loc", ["request"])[-1]
        message = f"Invalid {field}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


def _dashboard_error(request: Request, exc: DashboardError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    provider: RatingProvider | None = None,
) -> FastAPI:
    """Create the gateway application.

    Args:
        settings: Gateway settings.  Resolved from the environment when
            ``None``.
        provider: Optional provider override, mainly for tests.

    Returns:
        A configured :class:`fastapi.FastAPI` instance.
    """
    settings = settings or get_settings()
    set_level(settings.log_level)

    app = FastAPI(
        title="Lichess Dashboard API",
        version="0.1.0",
        middleware=[
            Middleware(
                cast("type[object]", CORSMiddleware),
                allow_origins=settings.cors_origins,
                allow_credentials=True,
                allow_methods=["GET"],
                allow_headers=["*"],
            )
        ],
    )
    app.state.settings = settings
    app.state.service = build_service(settings, provider)

    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(UpstreamUnavailableError, _unavailable)
    app.add_exception_handler(UpstreamError, _upstream_error)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(DashboardError, _dashboard_error)

    @app.get("/")
    def index() -> dict[str, object]:
        return {"message": "Lichess API Backend Server", "endpoints": ENDPOINTS}

    @app.get("/api/test")
    def health() -> dict[str, str]:
        return {
            "message": "Server is working",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": "healthy",
        }

    @app.get("/api/profiles", name="profiles")
    def profiles(
        nb: int = Query(20, ge=1, le=MAX_NB),
        game_type: str = Query(DEFAULT_VARIANT, alias="gameType", min_length=1),
        service: DashboardService = Depends(get_service),
    ) -> list[dict]:
        return [p.to_dict() for p in service.get_top_profiles(nb, game_type)]

    @app.get("/api/profile/{username}", name="profile")
    def profile(
        username: str,
        service: DashboardService = Depends(get_service),
    ) -> dict:
        return service.get_profile(username).to_dict()

    @app.get("/api/leaderboards/{game_type}", name="leaderboard")
    def leaderboard(
        game_type: str,
        nb: int = Query(50, ge=1, le=MAX_NB),
        service: DashboardService = Depends(get_service),
    ) -> list[dict]:
        return [e.to_dict() for e in service.get_leaderboard(game_type, nb)]

    @app.get("/api/leaderboards", name="default_leaderboard")
    def default_leaderboard(
        nb: int = Query(50, ge=1, le=MAX_NB),
        service: DashboardService = Depends(get_service),
    ) -> list[dict]:
        return [e.to_dict() for e in service.get_leaderboard(DEFAULT_VARIANT, nb)]

    @app.get("/api/tournaments", name="tournaments")
    def tournaments(
        service: DashboardService = Depends(get_service),
    ) -> list[dict]:
        return [t.to_dict() for t in service.get_tournaments()]

    return app


def run(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
) -> None:
    """Serve the gateway with uvicorn.

    Args:
        host: Bind address.  Defaults to the ``HOST`` setting.
        port: Port.  Defaults to the ``PORT`` setting.
        reload: Enable auto-reload (development only).
    """
    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    logger.info("Server running on %s:%s", host, port)
    uvicorn.run(
        "lichessdash_server.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
