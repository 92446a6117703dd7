"""Configuration models for the HTTP fetch layer."""

from pathlib import Path
from typing import Annotated

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from resilient_fetch.features.fetch.constants import (
    DEFAULT_FETCH_ATTEMPTS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from resilient_fetch.features.retry.backoff import BackoffSettings


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when a fetch configuration file fails validation."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class FetchConfig(BaseModel):
    """Configuration for an HttpConnector.

    Controls the per-exchange timeout, the retry budget, redirect
    following and the backoff between attempts.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = DEFAULT_TIMEOUT_SECONDS
    max_fetch_attempts: Annotated[int, Field(ge=1, le=100)] = DEFAULT_FETCH_ATTEMPTS
    max_redirects: Annotated[int, Field(ge=0, le=1000)] | None = Field(
        default=DEFAULT_MAX_REDIRECTS,
        description="Redirect hops followed per attempt; None disables the cap",
    )
    backoff: BackoffSettings = Field(default_factory=BackoffSettings)


def load_fetch_config(path: Path) -> FetchConfig:
    """Load and validate a fetch configuration YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated FetchConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If YAML parsing fails.
        ConfigValidationError: If the content does not validate.
    """
    log = logger.bind(component="config", file_path=str(path))
    log.info("loading_config_file")

    parsed: dict[str, object] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    try:
        config = FetchConfig.model_validate(parsed)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(part) for part in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        log.warning("config_validation_failed", validation_error_count=len(errors))
        raise ConfigValidationError(errors, str(path)) from e

    log.info(
        "config_file_loaded",
        max_fetch_attempts=config.max_fetch_attempts,
        timeout_seconds=config.timeout_seconds,
    )
    return config
