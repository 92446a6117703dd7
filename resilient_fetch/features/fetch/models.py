"""Data models for the HTTP fetch layer."""

import uuid
from collections.abc import Iterator
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from resilient_fetch.features.fetch.constants import (
    HTTP_STATUS_REDIRECT_MAX,
    HTTP_STATUS_REDIRECT_MIN,
)


class FetchContext(BaseModel):
    """Per-call correlation token.

    The connector threads the context through to its log records and
    never makes decisions based on it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    correlation_id: Annotated[str, Field(min_length=1)] = Field(
        default_factory=lambda: uuid.uuid4().hex
    )


class TransportResponse(BaseModel):
    """Raw result of one HTTP exchange as returned by a transport."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, description="HTTP status code")
    url: Annotated[str, Field(min_length=1, description="URL that was requested")]
    headers: tuple[tuple[str, str], ...] = Field(
        default=(), description="Response headers in received order"
    )
    body: str = Field(default="", description="Decoded response body")
    reason_phrase: str = ""
    http_version: str = "HTTP/1.1"


class HttpResponse(BaseModel):
    """A completed HTTP exchange within a fetch.

    Responses form a backward-linked chain: ``previous`` points at the
    redirect hop that led to this response, and so on back to the first
    request. Only fully-formed hops that resulted in a redirect appear
    in the chain.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, description="HTTP status code")
    body: str = Field(default="", description="Decoded response body")
    url: Annotated[str, Field(min_length=1, description="URL of this hop")]
    headers: tuple[tuple[str, str], ...] = Field(default=())
    reason_phrase: str = ""
    http_version: str = "HTTP/1.1"
    previous: "HttpResponse | None" = Field(
        default=None, description="Response of the preceding redirect hop"
    )

    @classmethod
    def from_transport(
        cls,
        response: TransportResponse,
        previous: "HttpResponse | None" = None,
    ) -> "HttpResponse":
        """Build a hop from a raw transport response.

        Args:
            response: Raw exchange result.
            previous: Preceding redirect hop, if any.

        Returns:
            HttpResponse linked to ``previous``.
        """
        return cls(
            status_code=response.status_code,
            body=response.body,
            url=response.url,
            headers=response.headers,
            reason_phrase=response.reason_phrase,
            http_version=response.http_version,
            previous=previous,
        )

    @property
    def status_line(self) -> str:
        """Status line such as ``HTTP/1.1 404 Not Found``."""
        line = f"{self.http_version} {self.status_code}"
        if self.reason_phrase:
            line = f"{line} {self.reason_phrase}"
        return line

    @property
    def is_redirect(self) -> bool:
        """Check if the status code is in the redirect range."""
        return HTTP_STATUS_REDIRECT_MIN <= self.status_code < HTTP_STATUS_REDIRECT_MAX

    @property
    def redirect_count(self) -> int:
        """Number of redirect hops preceding this response."""
        return sum(1 for _ in self.iter_chain()) - 1

    def get_header(self, name: str) -> str | None:
        """Get the first header value matching ``name`` (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    def has_header(self, name: str) -> bool:
        """Check whether a header named ``name`` is present."""
        return self.get_header(name) is not None

    def iter_chain(self) -> Iterator["HttpResponse"]:
        """Iterate from this response back through earlier hops.

        Yields:
            This response, then each preceding hop, newest first.
        """
        node: HttpResponse | None = self
        while node is not None:
            yield node
            node = node.previous
