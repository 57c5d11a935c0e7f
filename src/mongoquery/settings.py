"""Settings for mongoquery."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_LIMIT, DEFAULT_SKIP


class MongoQuerySettings(BaseSettings):
    """mongoquery configuration settings."""

    LOG_LEVEL: str = "INFO"

    # Pagination
    MONGOQUERY_DEFAULT_LIMIT: int = DEFAULT_LIMIT
    MONGOQUERY_DEFAULT_SKIP: int = DEFAULT_SKIP

    # Filter compilation
    MONGOQUERY_MAX_DEPTH: int = 16
    MONGOQUERY_STRICT: bool = False
    # Keep the historical "A-z" key range, which also lets [ \ ] ^ _ ` through
    MONGOQUERY_LENIENT_KEYS: bool = False
    MONGOQUERY_ENABLE_POPULATE: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("MONGOQUERY_DEFAULT_LIMIT", "MONGOQUERY_MAX_DEPTH")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("MONGOQUERY_DEFAULT_SKIP")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


settings = MongoQuerySettings()
