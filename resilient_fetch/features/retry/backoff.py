"""Exponential backoff between retry attempts."""

import random
import time
from collections.abc import Callable
from typing import Annotated

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator


logger = structlog.get_logger()


class BackoffSettings(BaseModel):
    """Configuration for exponential backoff.

    Uses exponential backoff: delay = base_delay_ms * (exponential_base ^ (n - 1))
    for the n-th delay of a retry sequence, capped at max_delay_ms.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = 100
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = 30000
    exponential_base: Annotated[float, Field(ge=1.0, le=5.0)] = 2.0
    jitter_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.0

    @model_validator(mode="after")
    def validate_delay_bounds(self) -> "BackoffSettings":
        """Ensure the cap is not below the base delay."""
        if self.max_delay_ms < self.base_delay_ms:
            msg = "max_delay_ms must be greater than or equal to base_delay_ms"
            raise ValueError(msg)
        return self

    def create_policy(
        self,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "ExponentialBackoff":
        """Create a fresh backoff policy for one retry sequence.

        Args:
            sleep: Function blocking for a number of seconds.

        Returns:
            New ExponentialBackoff with its own attempt counter.
        """
        return ExponentialBackoff(settings=self, sleep=sleep)


class ExponentialBackoff:
    """Stateful backoff policy.

    Each call computes the next delay and blocks for it. The attempt
    counter is private to the instance; use one instance per retry
    sequence.
    """

    def __init__(
        self,
        settings: BackoffSettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the policy.

        Args:
            settings: Backoff configuration (defaults if omitted).
            sleep: Function blocking for a number of seconds.
        """
        self._settings = settings or BackoffSettings()
        self._sleep = sleep
        self._attempt = 0
        self._delay_ms = 0.0
        self._delays_ms: list[int] = []

    @property
    def attempt(self) -> int:
        """Number of delays computed so far."""
        return self._attempt

    @property
    def delays_ms(self) -> list[int]:
        """Delays applied so far, in order."""
        return list(self._delays_ms)

    def next_delay_ms(self) -> int:
        """Advance the counter and compute the next delay.

        Returns:
            Delay in milliseconds, never above max_delay_ms.
        """
        self._attempt += 1
        settings = self._settings
        if self._attempt == 1:
            self._delay_ms = float(settings.base_delay_ms)
        elif self._delay_ms < settings.max_delay_ms:
            # Growth stops once the cap is reached
            self._delay_ms *= settings.exponential_base
        delay = min(self._delay_ms, settings.max_delay_ms)

        # Jitter spreads concurrent retry loops apart
        jitter = delay * settings.jitter_factor * random.random()  # noqa: S311
        return int(min(delay + jitter, settings.max_delay_ms))

    def __call__(self) -> bool:
        """Wait for the next delay.

        Returns:
            Always True, meaning the caller may go on with the next attempt.
        """
        delay_ms = self.next_delay_ms()
        self._delays_ms.append(delay_ms)
        logger.debug("backoff_sleep", attempt=self._attempt, delay_ms=delay_ms)
        self._sleep(delay_ms / 1000.0)
        return True
