"""Request/response models, temperature units and the composite cache key.

The upstream payload mirrors the OpenWeatherMap One Call response:
  {
    "lat": 34.94, "lon": 36.32, "timezone": "Asia/Damascus",
    "current": {"dt": ..., "temp": 21.3, "weather": [{"main": "Clear", ...}], ...},
    "hourly":  [{"dt": ..., "temp": 20.1, "pop": 0.1, ...}, ...]
  }
Error payloads carry only ``cod`` and ``message``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field

from errors import InvalidTemperatureUnitError

logger = logging.getLogger(__name__)


class TemperatureUnit(str, Enum):
    """Temperature units; the value is what the upstream ``units`` param takes."""

    METRIC = "metric"
    IMPERIAL = "imperial"
    STANDARD = "standard"

    @classmethod
    def parse(cls, alias: str) -> "TemperatureUnit":
        """Map a case-insensitive alias ("c", "Fahrenheit", ...) to a unit."""
        unit = _UNIT_ALIASES.get(alias.lower())
        if unit is None:
            logger.warning("Invalid temperature parameter supplied - %s", alias)
            raise InvalidTemperatureUnitError(alias)
        return unit

    def __str__(self) -> str:
        return self.value


_UNIT_ALIASES = {
    "f": TemperatureUnit.IMPERIAL,
    "fahrenheit": TemperatureUnit.IMPERIAL,
    "c": TemperatureUnit.METRIC,
    "celsius": TemperatureUnit.METRIC,
    "k": TemperatureUnit.STANDARD,
    "kelvin": TemperatureUnit.STANDARD,
}


class RequestKind(str, Enum):
    CURRENT_WEATHER = "current"
    WEATHER_FORECAST = "forecast"

    @property
    def exclude(self) -> str:
        """One Call blocks to leave out of the upstream response."""
        if self is RequestKind.CURRENT_WEATHER:
            return "minutely,hourly,daily,alerts"
        return "current,minutely,daily,alerts"


@dataclass(frozen=True)
class CacheKey:
    city_id: int
    unit: TemperatureUnit
    kind: RequestKind

    def __str__(self) -> str:
        return f"{self.city_id}|{self.unit}|{self.kind.value}"


# ---------------------------------------------------------------------------
# Upstream payload
# ---------------------------------------------------------------------------

class WeatherCondition(BaseModel):
    condition: str = Field(validation_alias=AliasChoices("main", "condition"))
    description: str


class WeatherCurrent(BaseModel):
    dt: int
    sunrise: int | None = None
    sunset: int | None = None
    temp: float
    feels_like: float
    pressure: int
    humidity: int
    dew_point: float
    uvi: float | None = None
    clouds: int
    visibility: int | None = None
    wind_speed: float
    wind_deg: int
    conditions: list[WeatherCondition] | None = Field(
        default=None, validation_alias=AliasChoices("weather", "conditions")
    )


class WeatherHourly(BaseModel):
    dt: int
    temp: float
    feels_like: float
    pressure: int
    humidity: int
    dew_point: float
    clouds: int
    visibility: int | None = None
    wind_speed: float
    wind_deg: int
    conditions: list[WeatherCondition] | None = Field(
        default=None, validation_alias=AliasChoices("weather", "conditions")
    )
    pop: float = 0.0


class WeatherResponse(BaseModel):
    lat: float | None = None
    lon: float | None = None
    timezone: str | None = None
    cod: int | str | None = None
    message: str | None = None
    current: WeatherCurrent | None = None
    hourly: list[WeatherHourly] | None = None

    def is_cacheable(self) -> bool:
        """Only payloads carrying weather data may be cached."""
        return self.current is not None or self.hourly is not None

    def is_success(self) -> bool:
        # One Call omits ``cod`` on success; error bodies send it as int or str.
        return self.cod is None or str(self.cod) == "200"


# ---------------------------------------------------------------------------
# API envelope
# ---------------------------------------------------------------------------

class WeatherRequest(BaseModel):
    city_query: str
    units: str


class RequestResponse(BaseModel):
    success: bool
    data: WeatherResponse | None = None
    msg: str | None = None

    @classmethod
    def build_success(cls, data: WeatherResponse) -> "RequestResponse":
        return cls(success=True, data=data)

    @classmethod
    def build_failure(cls, msg: str) -> "RequestResponse":
        return cls(success=False, msg=msg)
