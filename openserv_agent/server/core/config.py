"""
Configuration Settings.

This module defines the agent configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and a .env file
without explicit dotenv loading.
"""

from typing import Any, Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from openserv_agent.agent_core.errors import ConfigurationError

DEFAULT_PORT = 7378

OpenAIModel = Literal[
    "gpt-4o",
    "gpt-4o-2024-08-06",
    "gpt-4o-2024-05-13",
    "gpt-4o-mini",
    "gpt-4o-mini-2024-07-18",
    "gpt-4-turbo",
    "gpt-4-turbo-2024-04-09",
    "gpt-4-turbo-preview",
    "gpt-4-0125-preview",
    "gpt-4-1106-preview",
    "gpt-3.5-turbo",
    "gpt-3.5-turbo-0125",
    "gpt-3.5-turbo-1106",
]

LogLevel = Literal["fatal", "error", "warn", "info", "debug", "trace"]


class Settings(BaseSettings):
    """
    Agent settings model.

    All properties are bound from environment variables and the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # OpenServ Platform
    # =====================================================================
    openserv_api_key: Optional[str] = Field(default=None, alias="OPENSERV_API_KEY")
    openserv_api_url: str = Field(default="https://api.openserv.ai", alias="OPENSERV_API_URL")
    openserv_runtime_url: str = Field(default="https://agents.openserv.ai", alias="OPENSERV_RUNTIME_URL")

    # =====================================================================
    # OpenAI
    # =====================================================================
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_organization: Optional[str] = Field(default=None, alias="OPENAI_ORGANIZATION")
    openai_model: OpenAIModel = Field(default="gpt-4o", alias="OPENAI_MODEL")

    # =====================================================================
    # Agent HTTP Server
    # =====================================================================
    host: str = Field(default="0.0.0.0", alias="HOST", description="Address the agent server binds to")
    port: int = Field(default=DEFAULT_PORT, alias="PORT", description="Port the agent server listens on")
    log_level: LogLevel = Field(default="info", alias="LOG_LEVEL")

    @field_validator("port", mode="before")
    @classmethod
    def _parse_port(cls, value: Any) -> int:
        # Blank or non-numeric values fall back to the default port
        try:
            return int(value) or DEFAULT_PORT
        except (TypeError, ValueError):
            return DEFAULT_PORT

    @field_validator("openserv_api_key")
    @classmethod
    def _reject_empty_api_key(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("OpenServ API key cannot be empty")
        return value


def load_settings(**overrides: Any) -> Settings:
    """
    Build a ``Settings`` instance, reporting every invalid field at once.

    Args:
        **overrides: Values keyed by field name or env alias that take precedence
            over the environment.

    Raises:
        ConfigurationError: If any configuration value is invalid.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        lines = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ConfigurationError("Environment validation failed:\n" + "\n".join(lines)) from e
