"""HTTP connector following redirects and retrying transient failures."""

import time
from collections.abc import Callable

import httpx
import structlog

from resilient_fetch.errors import (
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
from resilient_fetch.features.fetch.config import FetchConfig
from resilient_fetch.features.fetch.constants import LOCATION_HEADER
from resilient_fetch.features.fetch.metrics import FetchMetrics
from resilient_fetch.features.fetch.models import (
    FetchContext,
    HttpResponse,
    TransportResponse,
)
from resilient_fetch.features.fetch.options import RequestOptions
from resilient_fetch.features.fetch.redact import (
    redact_header_lines,
    redact_url_credentials,
)
from resilient_fetch.features.fetch.transport import HttpxTransport, Transport
from resilient_fetch.features.fetch.url import build_request_url, resolve_location
from resilient_fetch.features.retry.driver import RetryDriver, ShouldRetry


logger = structlog.get_logger()

HTTP_METHOD_GET = "GET"


class HttpConnector:
    """Fetches URLs over HTTP with redirect chains and retries.

    Each ``fetch`` call runs a RetryDriver with a fresh backoff policy.
    One attempt follows the whole redirect chain; a failure on any hop
    fails the attempt, and a retried attempt starts again from the
    original URL. Apart from its own metrics counters, the connector
    holds no mutable state between calls.
    """

    def __init__(
        self,
        options: RequestOptions | None = None,
        config: FetchConfig | None = None,
        transport: Transport | None = None,
        should_retry: ShouldRetry = is_connection_failure,
        sleep: Callable[[float], None] = time.sleep,
        metrics: FetchMetrics | None = None,
    ) -> None:
        """Initialize the connector.

        Args:
            options: Headers, query parameters and TLS trust settings.
            config: Timeout, retry and redirect configuration.
            transport: Transport performing single exchanges.
            should_retry: Predicate deciding whether a failure is retried.
            sleep: Function used by the backoff policy to block.
            metrics: Counters to record into; each connector gets its own
                when omitted.
        """
        self._options = options or RequestOptions()
        self._config = config or FetchConfig()
        self._transport = transport or HttpxTransport()
        self._should_retry = should_retry
        self._sleep = sleep
        self._metrics = metrics or FetchMetrics()
        self._log = logger.bind(component="fetch")

    @property
    def options(self) -> RequestOptions:
        """Get the request options."""
        return self._options

    @property
    def config(self) -> FetchConfig:
        """Get the connector configuration."""
        return self._config

    @property
    def metrics(self) -> FetchMetrics:
        """Get the counters this connector records into."""
        return self._metrics

    def fetch(self, context: FetchContext, url: str) -> HttpResponse:
        """Fetch a URL.

        Args:
            context: Correlation token bound into log records.
            url: URL to fetch; configured query parameters are merged in.

        Returns:
            The terminal response, linked to any redirect hops before it.

        Raises:
            RetryExhausted: If an attempt failed and was not retried, or
                the retry budget is spent.
        """
        start_time_ns = time.perf_counter_ns()
        request_url = build_request_url(url, self._options.query_parameters)
        log = self._log.bind(
            correlation_id=context.correlation_id,
            url=redact_url_credentials(request_url),
        )
        headers = self._build_headers()
        log.debug("fetch_started", headers=redact_header_lines(self._options.headers))

        attempts = 0

        def attempt() -> HttpResponse:
            nonlocal attempts
            attempts += 1
            log.debug("fetch_attempt", attempt=attempts)
            try:
                return self._follow_chain(request_url, headers, log)
            except FetchFailure as failure:
                self._metrics.record_failure(failure.kind)
                log.info(
                    "fetch_failed",
                    attempt=attempts,
                    failure_kind=failure.kind.value,
                    failed_url=redact_url_credentials(failure.url),
                )
                raise

        def should_retry(failure: FetchFailure) -> bool:
            retrying = self._should_retry(failure)
            if retrying:
                self._metrics.record_retry()
            return retrying

        driver = RetryDriver(backoff=self._config.backoff.create_policy(self._sleep))
        try:
            response = driver.execute(
                self._config.max_fetch_attempts,
                attempt,
                should_retry,
            )
        except RetryExhausted:
            self._metrics.record_exhausted()
            raise
        finally:
            duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            self._metrics.record_duration(duration_ms)

        log.info(
            "fetch_complete",
            status_code=response.status_code,
            redirects=response.redirect_count,
            attempts=attempts,
            bytes=len(response.body.encode("utf-8")),
            duration_ms=round(duration_ms, 2),
        )
        return response

    def _build_headers(self) -> list[tuple[str, str]]:
        """Build request headers.

        Configured header lines are sent verbatim and in order; a
        User-Agent is added only when none is configured.

        Returns:
            Header pairs for the transport.
        """
        headers = self._options.header_pairs()
        if not self._options.has_header("User-Agent"):
            headers.append(("User-Agent", self._config.user_agent))
        return headers

    def _follow_chain(
        self,
        url: str,
        headers: list[tuple[str, str]],
        log: structlog.stdlib.BoundLogger,
    ) -> HttpResponse:
        """Perform one attempt, following redirects until a terminal hop.

        Args:
            url: Assembled request URL.
            headers: Request headers, sent on every hop.
            log: Bound logger.

        Returns:
            Terminal response with the redirect chain attached.

        Raises:
            ConnectionFailure: If any hop's exchange failed or its Location
                cannot be resolved.
            ServerFailure: If any hop returned an error status.
            TooManyRedirectsError: If the chain exceeds ``max_redirects``.
        """
        previous: HttpResponse | None = None
        hop_url = url
        redirects = 0

        while True:
            raw = self._exchange(hop_url, headers)
            self._metrics.record_response(
                raw.status_code, len(raw.body.encode("utf-8"))
            )
            response = HttpResponse.from_transport(raw, previous=previous)
            location = response.get_header(LOCATION_HEADER)

            outcome = classify_status(response.status_code, location is not None)
            if outcome is ResponseOutcome.SERVER_FAILURE:
                raise ServerFailure(response)
            if outcome is ResponseOutcome.TERMINAL or location is None:
                return response

            max_redirects = self._config.max_redirects
            if max_redirects is not None and redirects >= max_redirects:
                raise TooManyRedirectsError(response, max_redirects)

            redirects += 1
            hop_url = self._resolve_redirect(response.url, location)
            self._metrics.record_redirect()
            log.debug(
                "redirect_followed",
                status_code=response.status_code,
                location=redact_url_credentials(hop_url),
                hop=redirects,
            )
            previous = response

    def _exchange(self, url: str, headers: list[tuple[str, str]]) -> TransportResponse:
        """Run one transport exchange, classifying transport errors.

        Args:
            url: URL of this hop.
            headers: Request headers.

        Returns:
            Raw response.

        Raises:
            ConnectionFailure: If the exchange could not be completed.
        """
        try:
            return self._transport.execute(
                HTTP_METHOD_GET,
                url,
                headers,
                self._options.ssl_options,
                self._config.timeout_seconds,
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise classify_transport_error(url, e) from e

    def _resolve_redirect(self, url: str, location: str) -> str:
        """Resolve a redirect target against the hop that returned it.

        Args:
            url: URL of the redirect hop.
            location: Raw Location header value.

        Returns:
            Absolute URL of the next hop.

        Raises:
            ConnectionFailure: If the Location is not a usable URL.
        """
        try:
            return resolve_location(url, location)
        except httpx.InvalidURL as e:
            raise classify_transport_error(url, e) from e
