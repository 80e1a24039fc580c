"""OpenWeatherMap One Call client.

One request per call, no retries. Current weather and forecast hit the same
endpoint and differ only in which blocks are excluded.
"""

import logging

import httpx
from pydantic import ValidationError

from errors import UpstreamError
from models import RequestKind, TemperatureUnit, WeatherResponse

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org/data/2.5/onecall",
        timeout: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    async def fetch(
        self, lat: float, lon: float, unit: TemperatureUnit, kind: RequestKind
    ) -> WeatherResponse:
        """Fetch one payload for the coordinates.

        HTTP error statuses are not raised here: OpenWeatherMap reports them
        in a JSON body (``cod``/``message``) that the caller inspects.

        Raises:
            UpstreamError: transport failure or an undecodable body.
        """
        params = {
            "appid": self._api_key,
            "lat": lat,
            "lon": lon,
            "exclude": kind.exclude,
            "units": unit.value,
        }
        logger.debug("Querying OpenWeatherMap for coords (%s,%s) kind=%s", lat, lon, kind.value)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(self._base_url, params=params)
        except httpx.HTTPError as e:
            logger.warning("Weather fetch failed for (%s,%s): %s", lat, lon, e)
            raise UpstreamError(f"Weather API request failed: {e}") from e

        try:
            payload = WeatherResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Undecodable weather response (HTTP %d): %s", resp.status_code, e)
            raise UpstreamError(f"Weather API returned an invalid response (HTTP {resp.status_code})") from e

        if resp.is_error and payload.cod is None:
            payload.cod = resp.status_code
        return payload
