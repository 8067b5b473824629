"""Helpers for server URLs and API endpoint paths."""

from typing import Optional
from urllib.parse import urlsplit


def normalize_server_url(value: str) -> str:
    """Trim whitespace, drop trailing slashes and default the scheme to https.

    Normalizing an already normalized URL returns it unchanged. Blank input
    and a bare scheme such as ``"https:"`` are returned as-is so validation
    can reject them.
    """
    result = value.strip().rstrip("/")
    if not result:
        return ""
    if "://" in result or result.lower().startswith(("http:", "https:")):
        return result
    return f"https://{result}"


def is_valid_url(value: Optional[str]) -> bool:
    """True when the string parses as an absolute URL with a scheme and host."""
    if not value:
        return False
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.hostname)


def is_valid_http_url(value: Optional[str]) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not is_valid_url(value):
        return False
    return urlsplit(value.strip()).scheme.lower() in ("http", "https")


def join_api_path(base_url: str, path: str) -> str:
    """Append an API path to a base URL without doubling slashes."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
