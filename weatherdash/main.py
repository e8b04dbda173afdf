from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from weatherdash.api.v1.deps import limiter
from weatherdash.api.v1.router import api_v1_router
from weatherdash.core.config import get_settings
from weatherdash.core.errors import CityNotFound, ConfigurationError, MalformedResponse, NetworkFailure
from weatherdash.core.http import create_http_client, set_http_client
from weatherdash.core.logging import get_logger, setup_logging


log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Setup HTTP client
    client = create_http_client(settings)
    set_http_client(client)

    # Store settings in app state
    app.state.settings = settings
    log.info("app_started", openweather_configured=bool(settings.openweather_api_key))

    try:
        yield
    finally:
        await client.aclose()
        set_http_client(None)


async def _city_not_found_handler(request: Request, exc: CityNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "City not found"})


async def _upstream_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": f"Weather upstream error: {exc}"})


async def _configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    log.error("configuration_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, settings.json_logs)

    app = FastAPI(
        title="weatherdash api",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(CityNotFound, _city_not_found_handler)
    app.add_exception_handler(NetworkFailure, _upstream_error_handler)
    app.add_exception_handler(MalformedResponse, _upstream_error_handler)
    app.add_exception_handler(ConfigurationError, _configuration_error_handler)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_v1_router, prefix="/api/v1")
    return app


app = create_app()
