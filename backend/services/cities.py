"""City directory: "Name,CC" lookups to OpenWeatherMap city ids and coordinates.

Loaded once at startup from the OpenWeatherMap city list dump, a JSON array of
  {"id": 2960, "lat": 34.940079, "lon": 36.321911, "name": "Foo", "ctry": "BR"}
and read-only afterwards, so lookups need no locking.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, NonNegativeInt, ValidationError

from errors import CityDataError

logger = logging.getLogger(__name__)


class CityRecord(BaseModel):
    id: NonNegativeInt
    lat: float
    lon: float
    name: str
    country: str = Field(validation_alias=AliasChoices("ctry", "country"))


@dataclass(frozen=True)
class CityEntry:
    city_id: int
    lat: float
    lon: float


class CityDirectory:
    def __init__(self, table: dict[tuple[str, str], CityEntry]):
        self._table = table

    @classmethod
    def build(cls, records) -> "CityDirectory":
        """Index records by (name, country).

        Duplicate pairs are not an error: the later record replaces the
        earlier one.
        """
        table = {
            (record.name, record.country): CityEntry(record.id, record.lat, record.lon)
            for record in records
        }
        return cls(table)

    def resolve(self, query: str) -> CityEntry | None:
        """Exact, case-sensitive lookup of a "Name,CC" query. No trimming."""
        parts = query.split(",")
        if len(parts) != 2:
            return None
        return self._table.get((parts[0], parts[1]))

    def __len__(self) -> int:
        return len(self._table)


def load_city_records(path: str | Path) -> list[CityRecord]:
    """Read the city list JSON file into validated records."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise CityDataError(f"City list unavailable at {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CityDataError(f"City list at {path} is not valid JSON: {e}") from e

    if not isinstance(raw, list):
        raise CityDataError(f"City list at {path} must be a JSON array")

    try:
        records = [CityRecord.model_validate(item) for item in raw]
    except ValidationError as e:
        raise CityDataError(f"Malformed city record in {path}: {e}") from e

    logger.info("Loaded %d city records from %s", len(records), path)
    return records
