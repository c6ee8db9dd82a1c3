"""URL sanitization and the image URL rule."""

import re
from urllib.parse import urlparse

__all__ = [
    "IMAGE_URL_PATTERN",
    "DANGEROUS_SCHEMES",
    "URLValidationError",
    "sanitize_url",
    "is_http_url",
    "validate_image_url",
]


class URLValidationError(Exception):
    """Raised when URL validation fails."""
    pass


# Catalog rows accept any http(s) URL with something after the scheme
IMAGE_URL_PATTERN = re.compile(r"^https?://.+")

DANGEROUS_SCHEMES = {"javascript", "data", "vbscript", "file"}


def sanitize_url(url: str) -> str:
    """Strip whitespace and control characters from a URL."""
    if not url:
        return ""
    url = url.strip()
    url = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", url)
    return url.replace("%00", "")


def is_http_url(url: str) -> bool:
    """Whether ``url`` satisfies the catalog's image URL rule."""
    return bool(url) and IMAGE_URL_PATTERN.match(url) is not None


def validate_image_url(url: str) -> str:
    """Sanitize and check an image URL before it is written to the sheet.

    Raises:
        URLValidationError: If the URL is empty, uses a dangerous scheme or
            is not http(s)
    """
    url = sanitize_url(url)
    if not url:
        raise URLValidationError("URL is empty")

    scheme = urlparse(url).scheme.lower()
    if scheme in DANGEROUS_SCHEMES:
        raise URLValidationError(f"Dangerous URL scheme in image: {scheme}")
    if not is_http_url(url):
        raise URLValidationError(f"Invalid image URL scheme: {scheme or '(none)'}")
    return url
