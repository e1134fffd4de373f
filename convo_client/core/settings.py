from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from env vars and local env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    backend_base_url: str = Field(..., alias="CONVO_BACKEND_BASE_URL", min_length=1)
    request_timeout_seconds: float = Field(default=30.0, alias="CONVO_REQUEST_TIMEOUT_SECONDS", gt=0)
    stream_idle_timeout_seconds: float = Field(default=120.0, alias="CONVO_STREAM_IDLE_TIMEOUT_SECONDS", gt=0)
    default_agent_name: str = Field(default="inscope-all-docs-agent", alias="CONVO_DEFAULT_AGENT_NAME")

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.app_env.lower() == "local" else "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
