"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_REDIRECT_MIN = 300
HTTP_STATUS_REDIRECT_MAX = 400
HTTP_STATUS_BAD_REQUEST = 400

# Retry budget used when no configuration overrides it
DEFAULT_FETCH_ATTEMPTS = 5

# Redirect hops followed within a single attempt
DEFAULT_MAX_REDIRECTS = 20

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "resilient-fetch/0.1.0"

LOCATION_HEADER = "location"
