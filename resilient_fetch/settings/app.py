"""Application settings powered by Pydantic BaseSettings."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from resilient_fetch.features.fetch.config import FetchConfig
from resilient_fetch.features.fetch.constants import (
    DEFAULT_FETCH_ATTEMPTS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from resilient_fetch.features.fetch.options import RequestOptions


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, validation_alias="FETCH_TIMEOUT_SECONDS"
    )
    max_attempts: int = Field(
        default=DEFAULT_FETCH_ATTEMPTS, validation_alias="FETCH_MAX_ATTEMPTS"
    )
    max_redirects: int | None = Field(
        default=DEFAULT_MAX_REDIRECTS, validation_alias="FETCH_MAX_REDIRECTS"
    )
    ca_file: str | None = Field(default=None, validation_alias="FETCH_CA_FILE")
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT, validation_alias="FETCH_USER_AGENT"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")

    def to_fetch_config(self) -> FetchConfig:
        """Build a FetchConfig from the environment values."""
        return FetchConfig(
            user_agent=self.user_agent,
            timeout_seconds=self.timeout_seconds,
            max_fetch_attempts=self.max_attempts,
            max_redirects=self.max_redirects,
        )

    def to_request_options(self) -> RequestOptions:
        """Build base RequestOptions carrying the configured CA bundle."""
        options = RequestOptions()
        if self.ca_file:
            options = options.with_certificate_authority_file_path(self.ca_file)
        return options

    def logging_level(self) -> int:
        """Resolve the configured log level name."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
