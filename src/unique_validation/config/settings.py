from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache


DEFAULT_UNIQUE_MESSAGE = "Path `{PATH}` ({VALUE}) is not unique."


class Settings(BaseSettings):
    """
    Package settings loaded from the environment (and an optional .env file).
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # MongoDB connection (only used by db.session helpers)
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "app"

    # Message used for duplicate fields that declare no custom message.
    # Supports the {PATH} and {VALUE} placeholders.
    DEFAULT_MESSAGE: str = DEFAULT_UNIQUE_MESSAGE

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/unique-validation")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_DRIVER_LOGGING: bool = False

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Upper-case LOG_LEVEL before the Literal check, so `LOG_LEVEL=debug` is accepted.
        """
        return v.upper() if isinstance(v, str) else v

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return v.lower() if isinstance(v, str) else v

    @field_validator("DEFAULT_MESSAGE")
    def reject_blank_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("DEFAULT_MESSAGE must not be blank")
        return v

    model_config = SettingsConfigDict(
        # .env next to the package root (src/.env), unrelated keys are ignored
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# get_settings() takes no arguments and always returns the same settings,
# so it is cached; call get_settings.cache_clear() after changing the environment.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
