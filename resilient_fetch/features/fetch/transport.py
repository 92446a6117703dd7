"""Transport boundary performing one blocking HTTP exchange."""

import ssl
from typing import Protocol, runtime_checkable

import httpx

from resilient_fetch.features.fetch.models import TransportResponse
from resilient_fetch.features.fetch.options import SslOptions


@runtime_checkable
class Transport(Protocol):
    """Protocol for HTTP transports.

    Implementations perform exactly one request/response exchange and
    never follow redirects themselves. Inability to complete the
    exchange is reported by raising ``httpx.RequestError``.
    """

    def execute(
        self,
        method: str,
        url: str,
        headers: list[tuple[str, str]],
        tls: SslOptions,
        timeout: float,
    ) -> TransportResponse:
        """Perform one HTTP exchange.

        Args:
            method: HTTP method.
            url: Fully assembled URL.
            headers: Request headers in send order.
            tls: TLS trust configuration.
            timeout: Timeout in seconds for connect, read and write.

        Returns:
            The raw response.

        Raises:
            httpx.RequestError: If the exchange could not be completed.
        """
        ...


class CertificateBundleError(httpx.ConnectError):
    """Raised when the configured CA bundle cannot be loaded."""


def build_ssl_context(tls: SslOptions) -> ssl.SSLContext | bool:
    """Build the ``verify`` argument for httpx.

    Args:
        tls: TLS trust configuration.

    Returns:
        SSLContext trusting the configured CA bundle, or True for the
        system defaults.
    """
    if tls.certificate_authority_file_path is None:
        return True
    return ssl.create_default_context(cafile=tls.certificate_authority_file_path)


class HttpxTransport:
    """Transport backed by ``httpx.Client``.

    A new client is opened for every exchange, so instances hold no
    connection state and can be shared across threads.
    """

    def execute(
        self,
        method: str,
        url: str,
        headers: list[tuple[str, str]],
        tls: SslOptions,
        timeout: float,
    ) -> TransportResponse:
        """Perform one HTTP exchange with httpx.

        Args:
            method: HTTP method.
            url: Fully assembled URL.
            headers: Request headers in send order.
            tls: TLS trust configuration.
            timeout: Timeout in seconds.

        Returns:
            The raw response.

        Raises:
            CertificateBundleError: If the CA bundle cannot be loaded.
            httpx.RequestError: If the exchange could not be completed.
        """
        try:
            verify = build_ssl_context(tls)
        except OSError as e:
            msg = (
                f"Cannot load CA bundle {tls.certificate_authority_file_path}: {e}"
            )
            raise CertificateBundleError(msg) from e

        with httpx.Client(
            timeout=timeout,
            follow_redirects=False,
            verify=verify,
        ) as client:
            response = client.request(method, url, headers=headers)
            return TransportResponse(
                status_code=response.status_code,
                url=str(response.url),
                headers=tuple(response.headers.multi_items()),
                body=response.text,
                reason_phrase=response.reason_phrase,
                http_version=response.http_version,
            )
