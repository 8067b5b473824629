"""HTTP transport construction and request tracing."""

import logging
from typing import Mapping, Optional
from urllib.parse import urlsplit

import httpx

from shiori_share.constants import NETWORK_TIMEOUT, SESSION_HEADER

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
SECRET_HEADERS = {"authorization", "cookie", SESSION_HEADER.lower()}


def redact_headers(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Copy of ``headers`` with credential-bearing values masked."""
    if not headers:
        return {}
    return {
        key: REDACTED if key.lower() in SECRET_HEADERS else value
        for key, value in headers.items()
    }


def self_signed_mounts(base_url: str) -> dict[str, httpx.AsyncBaseTransport]:
    """Transport mounts that skip certificate checks for the server host only.

    Plain http has nothing to verify, so only an https base URL gets a mount.
    Every other host keeps the client's default, verifying transport.
    """
    parts = urlsplit(base_url)
    if parts.scheme.lower() != "https" or not parts.hostname:
        return {}
    pattern = f"https://{parts.hostname}"
    if parts.port is not None:
        pattern = f"{pattern}:{parts.port}"
    return {pattern: httpx.AsyncHTTPTransport(verify=False)}


def build_http_client(
    base_url: str,
    *,
    trust_self_signed_certs: bool = False,
    timeout: float = NETWORK_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create a short-lived async client for a single request/response exchange.

    Args:
        base_url: Normalized server URL; used to scope self-signed trust.
        trust_self_signed_certs: Accept any certificate from the server host.
        timeout: Per-request timeout in seconds.
        transport: Replacement transport, mainly for tests.
    """
    mounts = None
    if transport is None and trust_self_signed_certs:
        mounts = self_signed_mounts(base_url)
    return httpx.AsyncClient(timeout=timeout, transport=transport, mounts=mounts)


def log_request(method: str, url: str, headers: Optional[Mapping[str, str]] = None) -> None:
    safe = redact_headers(headers)
    if safe:
        logger.debug("%s %s headers=%s", method, url, safe)
    else:
        logger.debug("%s %s", method, url)


def log_response(method: str, url: str, status_code: int, duration: float) -> None:
    logger.debug("%s %s -> %d (%dms)", method, url, status_code, int(duration * 1000))
