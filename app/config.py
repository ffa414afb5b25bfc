from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="ExecutionContextLoggingApi", alias="APP_NAME")
    environment: str = Field(default="Development", alias="APP_ENV")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="DEBUG", alias="LOG_LEVEL")
    log_format: Literal["console", "json"] = Field(default="console", alias="LOG_FORMAT")
    log_include_full_context: bool = Field(default=True, alias="LOG_INCLUDE_FULL_CONTEXT")
    log_caller_skip_frames: int = Field(default=0, ge=0, alias="LOG_CALLER_SKIP_FRAMES")

    forecast_days: int = Field(default=5, ge=1, le=14, alias="FORECAST_DAYS")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
