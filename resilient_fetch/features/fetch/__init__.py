"""HTTP fetch layer with redirect chains, retries, and failure classification.

This module provides robust HTTP fetch operations with:
- Immutable request options (headers, query parameters, TLS trust)
- Redirect following that keeps every hop as a linked response chain
- Classification of failures into connection and server failures
- Bounded retries with exponential backoff
- Header redaction for logging
- Metrics collection for observability
"""

from resilient_fetch.errors import (
    ConnectionErrorClass,
    ConnectionFailure,
    FailureKind,
    FetchFailure,
    RetryExhausted,
    ServerFailure,
    TooManyRedirectsError,
)
from resilient_fetch.features.fetch.classifier import (
    ResponseOutcome,
    classify_status,
    classify_transport_error,
    is_connection_failure,
)
from resilient_fetch.features.fetch.config import (
    ConfigValidationError,
    FetchConfig,
    load_fetch_config,
)
from resilient_fetch.features.fetch.connector import HttpConnector
from resilient_fetch.features.fetch.constants import (
    DEFAULT_FETCH_ATTEMPTS,
    DEFAULT_MAX_REDIRECTS,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_REDIRECT_MAX,
    HTTP_STATUS_REDIRECT_MIN,
)
from resilient_fetch.features.fetch.metrics import FetchMetrics
from resilient_fetch.features.fetch.models import (
    FetchContext,
    HttpResponse,
    TransportResponse,
)
from resilient_fetch.features.fetch.options import RequestOptions, SslOptions
from resilient_fetch.features.fetch.redact import (
    redact_header_lines,
    redact_url_credentials,
)
from resilient_fetch.features.fetch.transport import (
    CertificateBundleError,
    HttpxTransport,
    Transport,
)
from resilient_fetch.features.fetch.url import build_request_url, resolve_location


__all__ = [
    # Connector
    "HttpConnector",
    # Transport
    "Transport",
    "HttpxTransport",
    "CertificateBundleError",
    # Config
    "FetchConfig",
    "ConfigValidationError",
    "load_fetch_config",
    # Options
    "RequestOptions",
    "SslOptions",
    # Models
    "FetchContext",
    "HttpResponse",
    "TransportResponse",
    # Errors
    "FailureKind",
    "ConnectionErrorClass",
    "FetchFailure",
    "ConnectionFailure",
    "ServerFailure",
    "TooManyRedirectsError",
    "RetryExhausted",
    # Classification
    "ResponseOutcome",
    "classify_status",
    "classify_transport_error",
    "is_connection_failure",
    # URLs
    "build_request_url",
    "resolve_location",
    # Constants
    "DEFAULT_FETCH_ATTEMPTS",
    "DEFAULT_MAX_REDIRECTS",
    "HTTP_STATUS_REDIRECT_MIN",
    "HTTP_STATUS_REDIRECT_MAX",
    "HTTP_STATUS_BAD_REQUEST",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_header_lines",
    "redact_url_credentials",
]
