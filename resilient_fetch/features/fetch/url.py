"""URL assembly for requests and redirect targets."""

from collections.abc import Iterable, Mapping

import httpx


def build_request_url(
    url: str,
    query_parameters: Mapping[str, str] | Iterable[tuple[str, str]],
) -> str:
    """Merge configured query parameters into ``url``.

    Parameters already present in ``url`` are kept in place; a
    configured parameter with the same name replaces them. Values are
    percent-encoded.

    Args:
        url: Base URL, possibly with a query string.
        query_parameters: Parameters to merge, as a mapping or pairs.

    Returns:
        The assembled URL.
    """
    if not query_parameters:
        return url
    return str(httpx.URL(url).copy_merge_params(dict(query_parameters)))


def resolve_location(base_url: str, location: str) -> str:
    """Resolve a Location header value against the URL that returned it."""
    return str(httpx.URL(base_url).join(location))
