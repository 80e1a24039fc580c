"""Cache-aware request flow: resolve city -> check cache -> fetch -> store.

The cache lock is taken twice per miss (check, store) and never across the
upstream call, so a slow OpenWeatherMap round-trip does not block other
requests. Two concurrent misses for the same key may both fetch; the loser's
store is refused with AlreadyCachedError and only logged.
"""

import logging

from errors import CacheError, CityNotFoundError, UpstreamError
from models import CacheKey, RequestKind, TemperatureUnit, WeatherRequest, WeatherResponse
from services.cache import ResponseCache
from services.cities import CityDirectory
from services.weather import OpenWeatherClient

logger = logging.getLogger(__name__)


class WeatherDispatcher:
    def __init__(self, directory: CityDirectory, cache: ResponseCache, client: OpenWeatherClient):
        self.directory = directory
        self.cache = cache
        self.client = client

    async def get_weather(self, request: WeatherRequest, kind: RequestKind) -> WeatherResponse:
        """Serve one request from cache or upstream.

        Raises:
            InvalidTemperatureUnitError: unknown ``units`` alias.
            CityNotFoundError: ``city_query`` is not in the directory.
            UpstreamError: fetch failed or upstream reported an error status.
        """
        unit = TemperatureUnit.parse(request.units)

        city = self.directory.resolve(request.city_query)
        if city is None:
            raise CityNotFoundError(request.city_query)

        key = CacheKey(city.city_id, unit, kind)

        if self.cache.has_valid_cache_for(key):
            cached = self.cache.get_cache_for(key)
            # May have expired between the two calls; treat that as a miss.
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached

        logger.debug("Cache miss for %s, fetching from upstream", key)
        response = await self.client.fetch(city.lat, city.lon, unit, kind)

        if not response.is_success():
            message = response.message or f"Weather API returned status {response.cod}"
            logger.warning("Upstream error for %s: %s (cod=%s)", key, message, response.cod)
            raise UpstreamError(message)

        try:
            self.cache.cache_response(key, response)
        except CacheError as e:
            logger.warning("Failed to create cache for (%s) - %s", key, e)

        return response
