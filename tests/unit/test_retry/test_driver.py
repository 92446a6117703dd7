"""Unit tests for the retry driver."""

import pytest

from resilient_fetch.errors import (
    ConnectionErrorClass,
    ConnectionFailure,
    FailureKind,
    FetchFailure,
    RetryExhausted,
    ServerFailure,
)
from resilient_fetch.features.fetch.models import HttpResponse
from resilient_fetch.features.retry.backoff import BackoffSettings
from resilient_fetch.features.retry.driver import RetryDriver, retry


def _connection_failure() -> ConnectionFailure:
    return ConnectionFailure(
        url="http://127.0.0.1:1/",
        reason=ConnectionErrorClass.CONNECTION_ERROR,
        cause=OSError("Connection refused"),
    )


def _server_failure() -> ServerFailure:
    return ServerFailure(
        HttpResponse(status_code=500, body="boom", url="http://example.com/")
    )


class FailingWork:
    """Unit of work failing a fixed number of times before succeeding."""

    def __init__(self, failures: list[FetchFailure], result: str = "ok") -> None:
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


def _always(_: FetchFailure) -> bool:
    return True


class TestRetryDriver:
    """Tests for RetryDriver.execute."""

    @pytest.fixture
    def driver(self, fake_sleep) -> RetryDriver:
        """Create a driver whose backoff does not block."""
        return RetryDriver(BackoffSettings(base_delay_ms=10).create_policy(fake_sleep))

    def test_returns_first_success(self, driver: RetryDriver) -> None:
        """Test that a successful first attempt is returned directly."""
        work = FailingWork([])

        assert driver.execute(3, work, _always) == "ok"
        assert work.calls == 1

    def test_retries_until_success(
        self, driver: RetryDriver, sleeps: list[float]
    ) -> None:
        """Test that retryable failures are retried until success."""
        work = FailingWork([_connection_failure(), _connection_failure()])

        assert driver.execute(5, work, _always) == "ok"
        assert work.calls == 3
        assert sleeps == [0.01, 0.02]

    def test_exhausts_after_max_attempts(
        self, driver: RetryDriver, sleeps: list[float]
    ) -> None:
        """Test that the unit of work runs exactly max_attempts times."""
        work = FailingWork([_connection_failure() for _ in range(10)])

        with pytest.raises(RetryExhausted) as exc_info:
            driver.execute(4, work, _always)

        assert work.calls == 4
        assert exc_info.value.attempts == 4
        assert exc_info.value.kind == FailureKind.CONNECTION
        # No delay after the final attempt
        assert len(sleeps) == 3

    def test_not_retried_when_predicate_declines(
        self, driver: RetryDriver, sleeps: list[float]
    ) -> None:
        """Test that a declined failure surfaces on its first occurrence."""
        failure = _server_failure()
        work = FailingWork([failure])

        with pytest.raises(RetryExhausted) as exc_info:
            driver.execute(5, work, lambda _: False)

        assert work.calls == 1
        assert exc_info.value.failure is failure
        assert exc_info.value.__cause__ is failure
        assert sleeps == []

    def test_predicate_receives_failure(self, driver: RetryDriver) -> None:
        """Test that the predicate sees each failure."""
        seen: list[FetchFailure] = []
        first, second = _connection_failure(), _server_failure()
        work = FailingWork([first, second])

        def should_retry(failure: FetchFailure) -> bool:
            seen.append(failure)
            return failure.kind is FailureKind.CONNECTION

        with pytest.raises(RetryExhausted) as exc_info:
            driver.execute(5, work, should_retry)

        assert seen == [first, second]
        assert exc_info.value.failure is second

    def test_unclassified_errors_propagate(self, driver: RetryDriver) -> None:
        """Test that non-FetchFailure exceptions are not wrapped."""

        def work() -> str:
            msg = "bug"
            raise KeyError(msg)

        with pytest.raises(KeyError):
            driver.execute(3, work, _always)

    def test_single_attempt_budget(self, driver: RetryDriver) -> None:
        """Test that a budget of one never retries."""
        work = FailingWork([_connection_failure()])

        with pytest.raises(RetryExhausted):
            driver.execute(1, work, _always)

        assert work.calls == 1

    def test_invalid_max_attempts(self, driver: RetryDriver) -> None:
        """Test that max_attempts below one is rejected."""
        with pytest.raises(ValueError, match="at least 1"):
            driver.execute(0, FailingWork([]), _always)


class TestRetryFunction:
    """Tests for the retry convenience function."""

    def test_caller_supplied_backoff_predicate(self) -> None:
        """Test waiting for a server with a caller-chosen policy."""
        waits: list[int] = []
        work = FailingWork([_connection_failure(), _connection_failure()], "up")

        result = retry(
            5,
            work,
            lambda failure: isinstance(failure, ConnectionFailure),
            backoff=lambda: waits.append(1),
        )

        assert result == "up"
        assert waits == [1, 1]
