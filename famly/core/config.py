from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "famly assistant"
    app_env: str = "dev"
    debug: bool = False
    log_level: str = "INFO"

    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    llm_base_url: str = Field(default="http://localhost:8000", alias="LLM_BASE_URL")
    llm_api_key: str = Field(default="", alias="LLM_API_KEY")
    llm_deployment: str | None = Field(default=None, alias="LLM_DEPLOYMENT")
    llm_temperature: float = Field(default=0.2, alias="LLM_TEMPERATURE")
    llm_timeout_seconds: float = Field(default=60.0, alias="LLM_TIMEOUT_SECONDS")

    entity_api_base_url: str = Field(default="http://localhost:8000", alias="ENTITY_API_BASE_URL")
    entity_api_token: str = Field(default="", alias="ENTITY_API_TOKEN")
    entity_timeout_seconds: float = Field(default=15.0, alias="ENTITY_TIMEOUT_SECONDS")

    assistant_history_window: int = Field(default=6, alias="ASSISTANT_HISTORY_WINDOW")
    pending_action_ttl_seconds: int = Field(default=3600, alias="PENDING_ACTION_TTL_SECONDS")
    transcript_ttl_seconds: int = Field(default=7 * 86400, alias="TRANSCRIPT_TTL_SECONDS")
    transcript_max_turns: int = Field(default=200, alias="TRANSCRIPT_MAX_TURNS")
    processing_guard_ttl_seconds: int = Field(default=120, alias="PROCESSING_GUARD_TTL_SECONDS")
    upcoming_events_limit: int = Field(default=5, alias="UPCOMING_EVENTS_LIMIT")

    @property
    def invoke_llm_url(self) -> str:
        return f"{self.llm_base_url.rstrip('/')}/api/integrations/invoke_llm"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
