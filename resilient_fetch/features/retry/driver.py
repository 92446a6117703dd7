"""Bounded retry executor."""

from collections.abc import Callable
from typing import TypeVar

import structlog

from resilient_fetch.errors import FetchFailure, RetryExhausted
from resilient_fetch.features.retry.backoff import ExponentialBackoff


logger = structlog.get_logger()

T = TypeVar("T")

ShouldRetry = Callable[[FetchFailure], bool]


class RetryDriver:
    """Runs a unit of work until it succeeds or the budget is spent.

    Only ``FetchFailure`` is treated as an attempt failure. Any other
    exception escapes immediately, so ``RetryExhausted`` always wraps a
    classified failure.
    """

    def __init__(self, backoff: Callable[[], object] | None = None) -> None:
        """Initialize the driver.

        Args:
            backoff: Callable blocking for the delay before the next
                attempt. A fresh ExponentialBackoff is used if omitted.
        """
        self._backoff = backoff if backoff is not None else ExponentialBackoff()

    def execute(
        self,
        max_attempts: int,
        unit_of_work: Callable[[], T],
        should_retry: ShouldRetry,
    ) -> T:
        """Invoke ``unit_of_work`` up to ``max_attempts`` times.

        Args:
            max_attempts: Attempt ceiling (at least 1).
            unit_of_work: Callable performing one attempt.
            should_retry: Predicate deciding whether a failure is retried.

        Returns:
            The first successful result.

        Raises:
            RetryExhausted: If the failure is not retryable or the budget
                is spent.
            ValueError: If max_attempts is less than 1.
        """
        if max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {max_attempts}"
            raise ValueError(msg)

        attempt = 0
        while True:
            attempt += 1
            try:
                return unit_of_work()
            except FetchFailure as failure:
                if attempt >= max_attempts or not should_retry(failure):
                    logger.info(
                        "retry_exhausted",
                        attempts=attempt,
                        max_attempts=max_attempts,
                        failure_kind=failure.kind.value,
                    )
                    raise RetryExhausted(failure, attempt) from failure

                logger.debug(
                    "retry_scheduled",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    failure_kind=failure.kind.value,
                )
                self._backoff()


def retry(
    max_attempts: int,
    unit_of_work: Callable[[], T],
    should_retry: ShouldRetry,
    backoff: Callable[[], object] | None = None,
) -> T:
    """Run ``unit_of_work`` with a one-off RetryDriver.

    Args:
        max_attempts: Attempt ceiling (at least 1).
        unit_of_work: Callable performing one attempt.
        should_retry: Predicate deciding whether a failure is retried.
        backoff: Optional delay callable; fresh exponential backoff otherwise.

    Returns:
        The first successful result.
    """
    return RetryDriver(backoff).execute(max_attempts, unit_of_work, should_retry)
