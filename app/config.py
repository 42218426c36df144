from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.errors import ConfigurationError

DEFAULT_RECIPE_API_BASE_URL = "https://api.edamam.com/api/recipes/v2"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    MONGODB_URI: str = Field(min_length=1)
    MONGODB_DB_NAME: str = "mealplanner"
    RECIPE_API_ID: str = Field(min_length=1)
    RECIPE_API_KEY: str = Field(min_length=1)
    RECIPE_API_BASE_URL: str = DEFAULT_RECIPE_API_BASE_URL
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:4173",
            "https://your-project.vercel.app",
        ],
    )

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Load settings once. Raises ConfigurationError naming missing variables."""
    try:
        return Settings()
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ConfigurationError(missing) from e
