"""
Configuration schema using Pydantic v2.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# OpenAI rejects uploads above 25 MB
DEFAULT_MAX_FILE_SIZE = 25 * 1024 * 1024


class TelegramConfig(BaseModel):
    """Telegram Bot API configuration."""

    token: str = ""
    api_base: str = "https://api.telegram.org"

    @property
    def base_url(self) -> str:
        """Bot API method prefix (token is appended by the client)."""
        return f"{self.api_base}/bot"

    @property
    def base_file_url(self) -> str:
        """File download prefix (token is appended by the client)."""
        return f"{self.api_base}/file/bot"


class TranscriptionConfig(BaseModel):
    """
    Speech-to-text provider configuration.

    Any OpenAI-compatible ``/audio/transcriptions`` endpoint works
    (e.g., a self-hosted Whisper server).
    """

    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    model: str = "whisper-1"
    language: str | None = None  # ISO-639-1, None = auto-detect

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/audio/transcriptions"


class ServerConfig(BaseModel):
    """Webhook HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    webhook_path: str = "/webhook"

    @field_validator("webhook_path")
    @classmethod
    def ensure_leading_slash(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"


class Config(BaseSettings):
    """
    Root configuration.

    Loads from ~/.tgscribe/config.json and environment variables
    with TGSCRIBE_ prefix. Built once at startup and handed to every
    component that needs it.
    """

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    http_timeout: float | None = 60.0
    greeting_commands: list[str] = Field(default_factory=lambda: ["/start"])
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TGSCRIBE_",
        env_nested_delimiter="__",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()
