"""Syntactic URL validation for PhishTank lookups."""

from urllib.parse import urlparse

MAX_URL_LENGTH = 2083


def is_valid_url(url: str) -> bool:
    """
    Check that a string is a complete URL with a scheme and a host.

    The URL is not normalized: PhishTank lookups and cache keys use the
    string exactly as given, so "https://A.com" and "https://a.com" stay
    distinct.

    Args:
        url: URL to check

    Returns:
        True if the URL parses with a scheme and network location
    """
    if not url or not isinstance(url, str):
        return False

    if len(url) > MAX_URL_LENGTH or any(c.isspace() for c in url):
        return False

    try:
        parsed = urlparse(url)
        # Accessing port raises ValueError on malformed ports
        parsed.port
    except ValueError:
        return False

    return bool(parsed.scheme) and bool(parsed.netloc)
