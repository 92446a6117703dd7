"""Unit tests for fetch data models."""

import pytest
from pydantic import ValidationError

from resilient_fetch.features.fetch.models import (
    FetchContext,
    HttpResponse,
    TransportResponse,
)


def _hop(status_code: int, previous: HttpResponse | None = None) -> HttpResponse:
    return HttpResponse(
        status_code=status_code,
        url=f"http://example.com/{status_code}",
        previous=previous,
    )


class TestHttpResponse:
    """Tests for HttpResponse."""

    def test_from_transport(self) -> None:
        """Test building a hop from a raw response."""
        raw = TransportResponse(
            status_code=200,
            url="http://example.com/",
            headers=(("content-type", "text/plain"),),
            body="hello",
            reason_phrase="OK",
            http_version="HTTP/1.0",
        )

        response = HttpResponse.from_transport(raw)

        assert response.status_code == 200
        assert response.body == "hello"
        assert response.previous is None
        assert response.status_line == "HTTP/1.0 200 OK"

    def test_status_line_without_reason(self) -> None:
        """Test status line when no reason phrase was received."""
        assert _hop(204).status_line == "HTTP/1.1 204"

    def test_get_header_case_insensitive(self) -> None:
        """Test header lookup ignores case and returns the first match."""
        response = HttpResponse(
            status_code=302,
            url="http://example.com/",
            headers=(("Location", "/a"), ("location", "/b")),
        )

        assert response.get_header("LOCATION") == "/a"
        assert response.has_header("location")
        assert response.get_header("etag") is None

    def test_chain_iteration_newest_first(self) -> None:
        """Test iterating back through redirect hops."""
        first = _hop(301)
        second = _hop(302, previous=first)
        final = _hop(200, previous=second)

        statuses = [hop.status_code for hop in final.iter_chain()]

        assert statuses == [200, 302, 301]
        assert final.redirect_count == 2
        assert first.redirect_count == 0

    def test_is_redirect(self) -> None:
        """Test redirect range detection."""
        assert _hop(302).is_redirect
        assert not _hop(200).is_redirect
        assert not _hop(404).is_redirect

    def test_status_code_below_100_rejected(self) -> None:
        """Test that status codes below the informational range are rejected."""
        with pytest.raises(ValidationError):
            HttpResponse(status_code=99, url="http://example.com/")

    def test_nonstandard_high_status_accepted(self) -> None:
        """Test that status codes above 599 are kept as received."""
        response = HttpResponse(status_code=600, url="http://example.com/")

        assert response.status_code == 600

    def test_response_immutable(self) -> None:
        """Test that responses are frozen."""
        response = _hop(200)

        with pytest.raises(ValidationError):
            response.body = "changed"  # type: ignore[misc]


class TestFetchContext:
    """Tests for FetchContext."""

    def test_generates_correlation_id(self) -> None:
        """Test that each context gets its own id."""
        assert FetchContext().correlation_id != FetchContext().correlation_id

    def test_explicit_correlation_id(self) -> None:
        """Test supplying a correlation id."""
        assert FetchContext(correlation_id="abc").correlation_id == "abc"
