"""FastAPI application entry point for the weather cache proxy."""

import asyncio
import contextlib
import logging
import sys

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings
from errors import internal_error_response, register_error_handlers
from services.cache import ResponseCache
from services.cities import CityDirectory, load_city_records
from services.dispatcher import WeatherDispatcher
from services.weather import OpenWeatherClient

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def build_dispatcher(config: Settings) -> WeatherDispatcher:
    """Load the city list and wire directory, cache and upstream client."""
    directory = CityDirectory.build(load_city_records(config.city_list_path))
    cache = ResponseCache(ttl_ms=config.cache_ttl_ms)
    client = OpenWeatherClient(
        api_key=config.openweather_api_key or "",
        base_url=config.openweather_base_url,
        timeout=config.openweather_timeout,
    )
    return WeatherDispatcher(directory, cache, client)


async def sweep_expired(cache: ResponseCache, interval: float) -> None:
    """Periodically drop entries whose keys are never looked up again."""
    while True:
        await asyncio.sleep(interval)
        removed = cache.purge_expired()
        if removed:
            logger.info("Cache sweep removed %d expired entries", removed)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    missing = settings.validate()
    if missing:
        logger.warning("Missing env vars (upstream calls will fail): %s", ", ".join(missing))

    logger.info("Starting server in %s environment...", settings.environment)
    # A city list that fails to load aborts startup.
    app.state.dispatcher = build_dispatcher(settings)

    app.state.sweeper = None
    if settings.cache_sweep_interval > 0:
        app.state.sweeper = asyncio.create_task(
            sweep_expired(app.state.dispatcher.cache, settings.cache_sweep_interval)
        )

    yield

    sweeper = app.state.sweeper
    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


def create_app() -> FastAPI:
    app = FastAPI(title="Weather Cache Proxy", version="1.0.0", lifespan=lifespan)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Access log + security headers, also on unhandled errors
    @app.middleware("http")
    async def log_and_secure(request: Request, call_next):
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            response = internal_error_response(exc)
        logger.info(
            "%s %s -> %d (%s)",
            request.method,
            request.url.path,
            response.status_code,
            request.headers.get("user-agent", "-"),
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.weather import router as weather_router

    app.include_router(health_router)
    app.include_router(weather_router)

    return app


app = create_app()
