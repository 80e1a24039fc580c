"""
Tests for OpenWeatherClient against httpx.MockTransport, no network.

Coverage targets:
  - query parameters per request kind and unit
  - success decoding (current + hourly)
  - upstream error bodies surfaced via cod/message
  - transport failures and undecodable bodies -> UpstreamError
"""

import httpx
import pytest

from errors import UpstreamError
from models import RequestKind, TemperatureUnit
from payloads import make_current_payload, make_forecast_payload
from services.weather import OpenWeatherClient

BASE_URL = "https://api.openweathermap.org/data/2.5/onecall"


def _client(handler) -> OpenWeatherClient:
    return OpenWeatherClient(api_key="test-key-123", base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestQueryParameters:
    @pytest.mark.asyncio
    async def test_current_weather_request(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = request.url
            return httpx.Response(200, json=make_current_payload())

        await _client(handler).fetch(34.94, 36.32, TemperatureUnit.METRIC, RequestKind.CURRENT_WEATHER)

        url = captured["url"]
        assert str(url).startswith(BASE_URL)
        assert url.params["appid"] == "test-key-123"
        assert url.params["lat"] == "34.94"
        assert url.params["lon"] == "36.32"
        assert url.params["units"] == "metric"
        assert url.params["exclude"] == "minutely,hourly,daily,alerts"

    @pytest.mark.asyncio
    async def test_forecast_request(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["params"] = request.url.params
            return httpx.Response(200, json=make_forecast_payload())

        await _client(handler).fetch(1.0, 2.0, TemperatureUnit.IMPERIAL, RequestKind.WEATHER_FORECAST)

        assert captured["params"]["units"] == "imperial"
        assert captured["params"]["exclude"] == "current,minutely,daily,alerts"


class TestDecoding:
    @pytest.mark.asyncio
    async def test_current_payload(self):
        resp = await _client(lambda _r: httpx.Response(200, json=make_current_payload(temp=12.5))).fetch(
            34.94, 36.32, TemperatureUnit.METRIC, RequestKind.CURRENT_WEATHER
        )

        assert resp.is_success()
        assert resp.is_cacheable()
        assert resp.current.temp == 12.5

    @pytest.mark.asyncio
    async def test_forecast_payload(self):
        resp = await _client(lambda _r: httpx.Response(200, json=make_forecast_payload(hours=5))).fetch(
            34.94, 36.32, TemperatureUnit.STANDARD, RequestKind.WEATHER_FORECAST
        )

        assert resp.current is None
        assert len(resp.hourly) == 5
        assert resp.hourly[0].pop == 0.1

    @pytest.mark.asyncio
    async def test_error_body_keeps_cod_and_message(self):
        body = {"cod": 401, "message": "Invalid API key. Please see https://openweathermap.org/faq#error401"}
        resp = await _client(lambda _r: httpx.Response(401, json=body)).fetch(
            0.0, 0.0, TemperatureUnit.METRIC, RequestKind.CURRENT_WEATHER
        )

        assert not resp.is_success()
        assert resp.message.startswith("Invalid API key")

    @pytest.mark.asyncio
    async def test_error_status_without_cod(self):
        resp = await _client(lambda _r: httpx.Response(503, json={"message": "busy"})).fetch(
            0.0, 0.0, TemperatureUnit.METRIC, RequestKind.CURRENT_WEATHER
        )

        assert resp.cod == 503
        assert not resp.is_success()


class TestFailures:
    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError, match="connection refused"):
            await _client(handler).fetch(0.0, 0.0, TemperatureUnit.METRIC, RequestKind.CURRENT_WEATHER)

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        handler = lambda _r: httpx.Response(502, text="<html>Bad Gateway</html>")  # noqa: E731

        with pytest.raises(UpstreamError, match="HTTP 502"):
            await _client(handler).fetch(0.0, 0.0, TemperatureUnit.METRIC, RequestKind.CURRENT_WEATHER)

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        bad = make_current_payload()
        bad["current"]["temp"] = "warm"

        with pytest.raises(UpstreamError):
            await _client(lambda _r: httpx.Response(200, json=bad)).fetch(
                0.0, 0.0, TemperatureUnit.METRIC, RequestKind.CURRENT_WEATHER
            )
