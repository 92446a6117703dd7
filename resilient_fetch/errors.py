"""Failure types raised by the fetch layer.

Every failure of a single attempt is a ``FetchFailure`` tagged with a
``FailureKind``. Callers of ``HttpConnector.fetch`` only ever see
``RetryExhausted``, which wraps the last attempt's failure.
"""

from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from resilient_fetch.features.fetch.models import HttpResponse


class FailureKind(str, Enum):
    """Top-level classification of an attempt failure.

    - CONNECTION: The exchange could not be completed (no response)
    - SERVER: A well-formed response arrived with an error status
    - REDIRECT_LIMIT: The redirect chain grew past the configured cap
    """

    CONNECTION = "CONNECTION"
    SERVER = "SERVER"
    REDIRECT_LIMIT = "REDIRECT_LIMIT"


class ConnectionErrorClass(str, Enum):
    """Reason a connection failure happened.

    - NETWORK_TIMEOUT: Connect, read or write timed out
    - CONNECTION_ERROR: Refused, reset or DNS resolution failed
    - SSL_ERROR: TLS handshake or certificate verification failed
    - PROTOCOL_ERROR: Peer violated HTTP, sent an undecodable body or an
      unusable redirect target, or the URL scheme is unsupported
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SSL_ERROR = "SSL_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"


class FetchFailure(Exception):
    """Base class for the failure of one fetch attempt.

    Attributes:
        kind: Failure classification.
        url: URL of the hop that failed.
    """

    kind: FailureKind

    def __init__(self, message: str, url: str) -> None:
        """Initialize the failure.

        Args:
            message: Human-readable message.
            url: URL of the hop that failed.
        """
        super().__init__(message)
        self.url = url


class ConnectionFailure(FetchFailure):
    """Raised when the HTTP exchange could not be completed."""

    kind = FailureKind.CONNECTION

    def __init__(
        self,
        url: str,
        reason: ConnectionErrorClass,
        cause: BaseException,
    ) -> None:
        """Initialize the failure.

        Args:
            url: Target URL.
            reason: Classified reason.
            cause: Underlying transport exception.
        """
        super().__init__(f"Connection to {url} failed ({reason.value}): {cause}", url)
        self.reason = reason
        self.cause = cause


class ServerFailure(FetchFailure):
    """Raised when the server answered with an error status.

    The message is the status line, a blank line, then the raw body.
    """

    kind = FailureKind.SERVER

    def __init__(self, response: "HttpResponse") -> None:
        """Initialize the failure.

        Args:
            response: The error response.
        """
        super().__init__(f"{response.status_line}\n\n{response.body}", response.url)
        self.response = response


class TooManyRedirectsError(FetchFailure):
    """Raised when a redirect chain exceeds the configured cap.

    The carried response is the last redirect hop received, so its
    status is in the 3xx range rather than the error range.
    """

    kind = FailureKind.REDIRECT_LIMIT

    def __init__(self, response: "HttpResponse", max_redirects: int) -> None:
        """Initialize the failure.

        Args:
            response: Last redirect hop received.
            max_redirects: Configured cap.
        """
        super().__init__(
            f"Exceeded {max_redirects} redirects at {response.url} "
            f"({response.status_line})",
            response.url,
        )
        self.response = response
        self.max_redirects = max_redirects


class RetryExhausted(Exception):
    """Raised once a retry budget is spent or a failure is not retryable.

    Attributes:
        failure: The last attempt's failure.
        attempts: Number of attempts made.
    """

    def __init__(self, failure: FetchFailure, attempts: int) -> None:
        """Initialize the error.

        Args:
            failure: The last attempt's failure.
            attempts: Number of attempts made.
        """
        self.failure = failure
        self.attempts = attempts
        noun = "attempt" if attempts == 1 else "attempts"
        super().__init__(f"Gave up after {attempts} {noun}: {failure}")

    @property
    def kind(self) -> FailureKind:
        """Kind of the wrapped failure."""
        return self.failure.kind
