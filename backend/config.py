"""Centralized configuration — all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # OpenWeatherMap One Call
        self.openweather_api_key: str | None = os.getenv("OPENWEATHER_API_KEY")
        self.openweather_base_url: str = os.getenv(
            "OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5/onecall"
        )
        self.openweather_timeout: float = float(os.getenv("OPENWEATHER_TIMEOUT_SECONDS", "10"))

        # City directory + response cache
        self.city_list_path: str = os.getenv("CITY_LIST_PATH", "city_list.json")
        self.cache_ttl_ms: int = int(os.getenv("CACHE_TTL_MS", "600000"))
        self.cache_sweep_interval: float = float(os.getenv("CACHE_SWEEP_INTERVAL_SECONDS", "0"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing required env vars for upstream calls."""
        required = ["OPENWEATHER_API_KEY"]
        return [var for var in required if not getattr(self, var.lower())]


settings = Settings()
