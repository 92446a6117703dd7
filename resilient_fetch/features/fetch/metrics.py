"""Metrics collection for the HTTP fetch layer."""

import threading
from dataclasses import dataclass, field

from resilient_fetch.errors import FailureKind


@dataclass
class FetchMetrics:
    """Metrics for HTTP fetch operations.

    Tracks fetch-related metrics including responses, redirects,
    retries, and failures. Each connector owns an instance unless one
    is passed in; updates are serialized so an instance can be shared
    between threads.
    """

    http_responses_total: dict[int, int] = field(default_factory=dict)
    http_redirects_total: int = 0
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_exhausted_total: int = 0
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    fetch_count: int = 0

    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def record_response(self, status_code: int, bytes_received: int) -> None:
        """Record a completed HTTP exchange.

        Args:
            status_code: HTTP status code.
            bytes_received: Size of the decoded body in bytes.
        """
        with self._lock:
            self.http_responses_total[status_code] = (
                self.http_responses_total.get(status_code, 0) + 1
            )
            self.http_bytes_total += bytes_received

    def record_redirect(self) -> None:
        """Record a followed redirect."""
        with self._lock:
            self.http_redirects_total += 1

    def record_retry(self) -> None:
        """Record a retry attempt."""
        with self._lock:
            self.http_retry_total += 1

    def record_failure(self, kind: FailureKind) -> None:
        """Record a failed attempt.

        Args:
            kind: Classification of the failure.
        """
        key = kind.value
        with self._lock:
            self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_exhausted(self) -> None:
        """Record a fetch that gave up."""
        with self._lock:
            self.http_exhausted_total += 1

    def record_duration(self, duration_ms: float) -> None:
        """Record the duration of a whole fetch.

        Args:
            duration_ms: Duration in milliseconds.
        """
        with self._lock:
            self.http_duration_ms_total += duration_ms
            self.fetch_count += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "http_responses_total": dict(self.http_responses_total),
                "http_redirects_total": self.http_redirects_total,
                "http_retry_total": self.http_retry_total,
                "http_failures_total": dict(self.http_failures_total),
                "http_exhausted_total": self.http_exhausted_total,
                "http_bytes_total": self.http_bytes_total,
                "http_duration_ms_total": self.http_duration_ms_total,
                "fetch_count": self.fetch_count,
            }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average fetch duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.fetch_count == 0:
            return 0.0
        return self.http_duration_ms_total / self.fetch_count
