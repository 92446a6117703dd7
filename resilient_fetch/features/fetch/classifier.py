"""Classification of exchange outcomes into success, redirect or failure."""

import ssl
from enum import Enum

import httpx

from resilient_fetch.errors import (
    ConnectionErrorClass,
    ConnectionFailure,
    FailureKind,
    FetchFailure,
)
from resilient_fetch.features.fetch.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_REDIRECT_MAX,
    HTTP_STATUS_REDIRECT_MIN,
)
from resilient_fetch.features.fetch.transport import CertificateBundleError


class ResponseOutcome(str, Enum):
    """What the connector does with a received response.

    - TERMINAL: Return it as the fetch result
    - REDIRECT: Follow the Location header
    - SERVER_FAILURE: Fail the attempt with a ServerFailure
    """

    TERMINAL = "TERMINAL"
    REDIRECT = "REDIRECT"
    SERVER_FAILURE = "SERVER_FAILURE"


def classify_status(status_code: int, has_location: bool) -> ResponseOutcome:
    """Classify a received status code.

    A redirect status without a Location header cannot be followed and
    is returned as-is.

    Args:
        status_code: HTTP status code.
        has_location: Whether the response carries a Location header.

    Returns:
        ResponseOutcome for the response.
    """
    if status_code >= HTTP_STATUS_BAD_REQUEST:
        return ResponseOutcome.SERVER_FAILURE
    is_redirect = HTTP_STATUS_REDIRECT_MIN <= status_code < HTTP_STATUS_REDIRECT_MAX
    if is_redirect and has_location:
        return ResponseOutcome.REDIRECT
    return ResponseOutcome.TERMINAL


def _is_ssl_error(exc: BaseException) -> bool:
    """Check whether an exception was caused by TLS."""
    seen: set[int] = set()
    node: BaseException | None = exc
    while node is not None and id(node) not in seen:
        if isinstance(node, ssl.SSLError):
            return True
        seen.add(id(node))
        node = node.__cause__ or node.__context__
    return "CERTIFICATE_VERIFY_FAILED" in str(exc)


def classify_transport_error(
    url: str,
    exc: httpx.RequestError | httpx.InvalidURL,
) -> ConnectionFailure:
    """Map a transport exception to a ConnectionFailure.

    Args:
        url: URL of the hop that failed.
        exc: Exception raised by the transport, or raised while
            resolving the hop URL.

    Returns:
        ConnectionFailure carrying the classified reason and the cause.
    """
    match exc:
        case httpx.TimeoutException():
            reason = ConnectionErrorClass.NETWORK_TIMEOUT
        case (
            httpx.ProtocolError()
            | httpx.UnsupportedProtocol()
            | httpx.DecodingError()
            | httpx.InvalidURL()
        ):
            reason = ConnectionErrorClass.PROTOCOL_ERROR
        case CertificateBundleError():
            reason = ConnectionErrorClass.SSL_ERROR
        case _ if _is_ssl_error(exc):
            reason = ConnectionErrorClass.SSL_ERROR
        case _:
            reason = ConnectionErrorClass.CONNECTION_ERROR
    return ConnectionFailure(url=url, reason=reason, cause=exc)


def is_connection_failure(failure: FetchFailure) -> bool:
    """Retry predicate used by the connector by default.

    Only transport-level failures are retried; server failures and an
    exceeded redirect cap surface on their first occurrence.

    Args:
        failure: Failure of the last attempt.

    Returns:
        True if the attempt should be retried.
    """
    match failure.kind:
        case FailureKind.CONNECTION:
            return True
        case FailureKind.SERVER | FailureKind.REDIRECT_LIMIT:
            return False
    return False
