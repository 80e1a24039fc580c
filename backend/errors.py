"""Custom exceptions and centralized FastAPI error handlers.

Every failure leaves the API in the same envelope as a success:
``{"success": false, "msg": "..."}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class WeatherProxyError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidTemperatureUnitError(WeatherProxyError):
    def __init__(self, unit: str):
        super().__init__(f"Invalid temperature parameter: {unit!r}", status_code=400)
        self.unit = unit


class CityNotFoundError(WeatherProxyError):
    def __init__(self, query: str):
        super().__init__(f"No valid city_id found for query {query}", status_code=404)
        self.query = query


class UpstreamError(WeatherProxyError):
    """Transport failure or non-success status reported by OpenWeatherMap."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class CityDataError(WeatherProxyError):
    """The city list could not be loaded at startup."""


class CacheError(WeatherProxyError):
    """Refused cache store. Recovered locally, never returned to a caller."""


class InvalidPayloadError(CacheError):
    def __init__(self):
        super().__init__("Weather response doesn't contain valid data")


class AlreadyCachedError(CacheError):
    def __init__(self, key):
        super().__init__(f"Weather response is already cached for {key}")
        self.key = key


def _failure(msg: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "msg": msg}, status_code=status_code)


def internal_error_response(exc: Exception) -> JSONResponse:
    """Log an unexpected error and render the generic 500 envelope."""
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    return _failure("Internal server error", 500)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(WeatherProxyError)
    async def handle_proxy_error(_request: Request, exc: WeatherProxyError):
        return _failure(str(exc), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return _failure(f"Invalid request: {details}", 422)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        return internal_error_response(exc)
