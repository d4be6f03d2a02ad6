from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_DEFAULT_CHAT_SYSTEM_PROMPT = (
    "You are Serenity, a calm and compassionate listener inside a mental wellness app. "
    "Respond warmly and without judgment, reflect the user's feelings back to them, and ask "
    "one gentle follow-up question at a time. Offer simple grounding or breathing suggestions "
    "when the user sounds anxious or overwhelmed. You are not a therapist: never diagnose, and "
    "if the user mentions self-harm or being in danger, encourage them to contact local "
    "emergency services or a crisis line right away. Keep replies short and kind."
)


class Settings(BaseSettings):
    """Runtime configuration loaded from env vars and local env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    ai_gateway_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1/chat/completions",
        alias="AI_GATEWAY_URL",
    )
    ai_gateway_api_key: str | None = Field(default=None, alias="AI_GATEWAY_API_KEY")
    ai_gateway_timeout_seconds: float = Field(default=60.0, alias="AI_GATEWAY_TIMEOUT_SECONDS")

    chat_model: str = Field(default="google/gemini-3-flash-preview", alias="CHAT_MODEL")
    chat_system_prompt: str = Field(default=_DEFAULT_CHAT_SYSTEM_PROMPT, alias="CHAT_SYSTEM_PROMPT")
    chat_use_canned_responder: bool = Field(default=False, alias="CHAT_USE_CANNED_RESPONDER")
    canned_response_delay_seconds: float = Field(default=0.0, alias="CANNED_RESPONSE_DELAY_SECONDS")
    drift_model: str = Field(default="google/gemini-3-flash-preview", alias="DRIFT_MODEL")

    chat_endpoint_url: str = Field(default="http://localhost:8000/api/chat", alias="CHAT_ENDPOINT_URL")
    analyze_journal_url: str = Field(
        default="http://localhost:8000/api/analyze-journal",
        alias="ANALYZE_JOURNAL_URL",
    )
    client_api_key: str | None = Field(default=None, alias="CLIENT_API_KEY")
    stream_max_buffer_chars: int = Field(default=1_000_000, alias="STREAM_MAX_BUFFER_CHARS")

    @property
    def enable_swagger(self) -> bool:
        return self.app_env.lower() == "local"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.app_env.lower() == "local" else "INFO"

    @property
    def use_canned_responder(self) -> bool:
        return self.chat_use_canned_responder or not self.ai_gateway_api_key


@lru_cache
def get_settings() -> Settings:
    return Settings()
