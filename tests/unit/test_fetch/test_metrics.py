"""Unit tests for fetch metrics."""

import threading

from resilient_fetch.errors import FailureKind
from resilient_fetch.features.fetch.metrics import FetchMetrics


class TestFetchMetrics:
    """Tests for FetchMetrics."""

    def test_instances_are_independent(self) -> None:
        """Test that two instances never share counters."""
        first = FetchMetrics()
        second = FetchMetrics()

        first.record_response(200, 1)

        assert second.http_responses_total == {}

    def test_records_counters(self) -> None:
        """Test the recording methods."""
        metrics = FetchMetrics()

        metrics.record_response(200, 10)
        metrics.record_response(200, 5)
        metrics.record_response(404, 3)
        metrics.record_redirect()
        metrics.record_retry()
        metrics.record_failure(FailureKind.CONNECTION)
        metrics.record_failure(FailureKind.CONNECTION)
        metrics.record_failure(FailureKind.REDIRECT_LIMIT)
        metrics.record_exhausted()

        data = metrics.to_dict()
        assert data["http_responses_total"] == {200: 2, 404: 1}
        assert data["http_bytes_total"] == 18
        assert data["http_redirects_total"] == 1
        assert data["http_retry_total"] == 1
        assert data["http_failures_total"] == {"CONNECTION": 2, "REDIRECT_LIMIT": 1}
        assert data["http_exhausted_total"] == 1

    def test_average_duration(self) -> None:
        """Test average duration across fetches."""
        metrics = FetchMetrics()

        assert metrics.avg_duration_ms == 0.0

        metrics.record_duration(10.0)
        metrics.record_duration(30.0)

        assert metrics.avg_duration_ms == 20.0

    def test_concurrent_updates_not_lost(self) -> None:
        """Test that counters stay exact under concurrent recording."""
        metrics = FetchMetrics()

        def record() -> None:
            for _ in range(20000):
                metrics.record_response(200, 1)
                metrics.record_retry()

        threads = [threading.Thread(target=record) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert metrics.http_responses_total == {200: 160000}
        assert metrics.http_bytes_total == 160000
        assert metrics.http_retry_total == 160000
