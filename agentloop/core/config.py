"""
Configuration Settings.

This module defines the runtime configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="agentloop logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="AGENTLOOP_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="AGENTLOOP_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="AGENTLOOP_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write DEBUG-level logs to <log_file_dir>/agentloop.log",
        alias="AGENTLOOP_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Agent Defaults
    # =====================================================================
    default_strategy: str = Field(
        default="react",
        description="Reasoning strategy used when an agent does not name one",
        alias="AGENTLOOP_DEFAULT_STRATEGY",
    )
    default_max_steps: Optional[int] = Field(
        default=None,
        ge=1,
        description="Default policy loop bound for ReAct/Autonomous engines",
        alias="AGENTLOOP_DEFAULT_MAX_STEPS",
    )
    default_token_budget: Optional[int] = Field(
        default=None,
        ge=1,
        description="Default per-run token budget (abort threshold)",
        alias="AGENTLOOP_DEFAULT_TOKEN_BUDGET",
    )
    default_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Default per-run timeout in seconds",
        alias="AGENTLOOP_DEFAULT_TIMEOUT",
    )


settings = Settings()
