"""Source URL to domain key normalization."""

from urllib.parse import urlparse

from feedrank.ranker.constants import UNKNOWN_DOMAIN


def extract_domain(url: str | None) -> str:
    """Normalize a source URL to a comparable domain key.

    Lowercases the host and strips a leading ``www.``. Anything without a
    parsable host degrades to ``"unknown"``.

    Args:
        url: Source URL, may be None or malformed.

    Returns:
        Domain key.
    """
    if not url or not isinstance(url, str):
        return UNKNOWN_DOMAIN

    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return UNKNOWN_DOMAIN

    if not host:
        return UNKNOWN_DOMAIN

    host = host.lower()
    if host.startswith("www."):
        host = host[len("www.") :]
    return host or UNKNOWN_DOMAIN
