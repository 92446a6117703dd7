"""Request options applied to every fetch made by a connector."""

import re
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


# RFC 7230 token followed by a colon and a value without line breaks
HEADER_LINE_PATTERN = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+:[^\r\n]*\Z")


def split_header_line(line: str) -> tuple[str, str]:
    """Split a ``name: value`` header line into its parts.

    Args:
        line: Header line.

    Returns:
        Tuple of (name, value) with surrounding whitespace stripped from the value.

    Raises:
        ValueError: If the line is not a well-formed header.
    """
    if not HEADER_LINE_PATTERN.match(line):
        msg = f"Malformed header line: {line!r}"
        raise ValueError(msg)
    name, _, value = line.partition(":")
    return name, value.strip()


class SslOptions(BaseModel):
    """TLS trust configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    certificate_authority_file_path: str | None = Field(
        default=None, description="Path to a PEM bundle of trusted CAs"
    )

    def with_certificate_authority_file_path(self, path: str) -> "SslOptions":
        """Return a copy trusting the CA bundle at ``path``."""
        return SslOptions(certificate_authority_file_path=path)


class RequestOptions(BaseModel):
    """Headers, query parameters and TLS trust settings for a connector.

    Options are immutable. The builder-style methods return a new
    instance, so one options value can be shared between connectors
    without any of them observing another's changes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    headers: tuple[str, ...] = Field(
        default=(), description="Header lines in 'name: value' form"
    )
    query_parameters: tuple[tuple[str, str], ...] = Field(
        default=(), description="Query parameter pairs merged into the URL"
    )
    ssl_options: SslOptions = Field(default_factory=SslOptions)

    @field_validator("headers")
    @classmethod
    def validate_header_lines(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure every header line is well formed."""
        for line in v:
            split_header_line(line)
        return v

    @field_validator("query_parameters", mode="before")
    @classmethod
    def freeze_query_parameters(cls, v: object) -> object:
        """Accept a mapping and store it as (name, value) pairs."""
        if isinstance(v, Mapping):
            return tuple(v.items())
        return v

    def add_header(self, line: str) -> "RequestOptions":
        """Return a copy with ``line`` appended to the header list.

        Args:
            line: Header line such as ``"Accept: text/plain"``.

        Returns:
            New RequestOptions.
        """
        return RequestOptions(
            headers=(*self.headers, line),
            query_parameters=self.query_parameters,
            ssl_options=self.ssl_options,
        )

    def with_query_parameters(self, parameters: Mapping[str, str]) -> "RequestOptions":
        """Return a copy whose query parameters are replaced by ``parameters``."""
        return RequestOptions(
            headers=self.headers,
            query_parameters=parameters,
            ssl_options=self.ssl_options,
        )

    def with_ssl_options(self, ssl_options: SslOptions) -> "RequestOptions":
        """Return a copy using ``ssl_options``."""
        return RequestOptions(
            headers=self.headers,
            query_parameters=self.query_parameters,
            ssl_options=ssl_options,
        )

    def with_certificate_authority_file_path(self, path: str) -> "RequestOptions":
        """Return a copy trusting the CA bundle at ``path``."""
        return self.with_ssl_options(
            self.ssl_options.with_certificate_authority_file_path(path)
        )

    def header_pairs(self) -> list[tuple[str, str]]:
        """Get headers as ordered (name, value) pairs.

        Returns:
            List of header tuples, duplicates preserved.
        """
        return [split_header_line(line) for line in self.headers]

    def has_header(self, name: str) -> bool:
        """Check whether a header with ``name`` is configured (case-insensitive)."""
        lowered = name.lower()
        return any(key.lower() == lowered for key, _ in self.header_pairs())
