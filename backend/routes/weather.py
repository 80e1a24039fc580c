"""Weather routes: current conditions and hourly forecast, served through the cache.

GET takes query parameters; POST takes the JSON body ``{city_query, units}``.
Failures are rendered by the handlers in errors.py with the same envelope.
"""

from fastapi import APIRouter, Depends, Query, Request

from models import RequestKind, RequestResponse, WeatherRequest
from services.dispatcher import WeatherDispatcher

router = APIRouter()


def get_dispatcher(request: Request) -> WeatherDispatcher:
    return request.app.state.dispatcher


async def _serve(dispatcher: WeatherDispatcher, body: WeatherRequest, kind: RequestKind) -> RequestResponse:
    data = await dispatcher.get_weather(body, kind)
    return RequestResponse.build_success(data)


@router.get("/weather", response_model=RequestResponse, response_model_exclude_none=True)
async def current_weather(
    city_query: str = Query(..., description='City and country code, e.g. "London,GB"'),
    units: str = Query("k"),
    dispatcher: WeatherDispatcher = Depends(get_dispatcher),
) -> RequestResponse:
    """Current conditions for a city."""
    body = WeatherRequest(city_query=city_query, units=units)
    return await _serve(dispatcher, body, RequestKind.CURRENT_WEATHER)


@router.post("/weather", response_model=RequestResponse, response_model_exclude_none=True)
async def current_weather_body(
    body: WeatherRequest,
    dispatcher: WeatherDispatcher = Depends(get_dispatcher),
) -> RequestResponse:
    return await _serve(dispatcher, body, RequestKind.CURRENT_WEATHER)


@router.get("/forecast", response_model=RequestResponse, response_model_exclude_none=True)
async def weather_forecast(
    city_query: str = Query(..., description='City and country code, e.g. "London,GB"'),
    units: str = Query("k"),
    dispatcher: WeatherDispatcher = Depends(get_dispatcher),
) -> RequestResponse:
    """Hourly forecast for a city."""
    body = WeatherRequest(city_query=city_query, units=units)
    return await _serve(dispatcher, body, RequestKind.WEATHER_FORECAST)


@router.post("/forecast", response_model=RequestResponse, response_model_exclude_none=True)
async def weather_forecast_body(
    body: WeatherRequest,
    dispatcher: WeatherDispatcher = Depends(get_dispatcher),
) -> RequestResponse:
    return await _serve(dispatcher, body, RequestKind.WEATHER_FORECAST)
