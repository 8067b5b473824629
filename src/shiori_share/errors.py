"""Error taxonomy for the Shiori client and the transport error classifier.

Every failure that reaches a caller of ``ShioriClient`` is an ``APIError``
subclass. ``retryable`` tells the caller whether offering a plain "Retry"
makes sense or whether the user has to fix configuration first.
"""

import errno
import socket
import ssl
from typing import Iterator, Optional

import httpx


class APIError(Exception):
    """Base class for all errors surfaced by the Shiori client."""

    retryable = False
    default_message = "Unknown error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotConfiguredError(APIError):
    default_message = (
        "Server not configured. Set SHIORI_SERVER_URL, SHIORI_USERNAME and "
        "SHIORI_PASSWORD to configure your server."
    )


class InvalidURLError(APIError):
    default_message = "Invalid server URL"


class InvalidCredentialsError(APIError):
    default_message = "Invalid username or password"


class ConnectionFailedError(APIError):
    """The server could not be reached."""

    retryable = True

    def __init__(self, original: BaseException):
        self.original = original
        super().__init__(f"Connection failed: {_describe(original)}")


class ServerError(APIError):
    """The server answered with an unexpected HTTP status."""

    retryable = True

    def __init__(self, code: int):
        self.code = code
        super().__init__(f"Server error ({code})")


class UnauthorizedError(APIError):
    retryable = True
    default_message = "Session expired. Please try again."


class NotFoundError(APIError):
    default_message = "Shiori API not found. Check server URL."


class CertificateError(APIError):
    default_message = (
        "Certificate error. Enable SHIORI_TRUST_SELF_SIGNED_CERTS if the server "
        "uses a self-signed certificate."
    )


class DecodingError(APIError):
    """The server response could not be decoded."""

    def __init__(self, original: BaseException):
        self.original = original
        super().__init__("Invalid server response")


class UnknownError(APIError):
    """Any failure that fits no other category."""

    def __init__(self, original: BaseException):
        self.original = original
        super().__init__(_describe(original))


# TLS errors that mean the peer went away, not that trust failed
_CONNECTION_LOST_SSL_ERRORS = (ssl.SSLEOFError, ssl.SSLZeroReturnError)

_CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    *_CONNECTION_LOST_SSL_ERRORS,
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    socket.gaierror,
    ConnectionError,
    TimeoutError,
)

_OFFLINE_ERRNOS = {errno.ENETUNREACH, errno.EHOSTUNREACH, errno.ENETDOWN}


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _chain(error: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _is_certificate_failure(error: BaseException) -> bool:
    for exc in _chain(error):
        if isinstance(exc, _CONNECTION_LOST_SSL_ERRORS):
            return False
        if isinstance(exc, ssl.SSLError):
            return True
        if "CERTIFICATE_VERIFY_FAILED" in str(exc):
            return True
    return False


def _is_connection_failure(error: BaseException) -> bool:
    if isinstance(error, _CONNECTION_ERRORS):
        return True
    return isinstance(error, OSError) and error.errno in _OFFLINE_ERRNOS


def classify(error: BaseException) -> APIError:
    """Map a transport-level exception onto the client error taxonomy.

    TLS trust failures become ``CertificateError``; unreachable hosts, DNS
    failures, dropped connections and timeouts become ``ConnectionFailedError``
    wrapping the original; everything else, cancellation included, becomes
    ``UnknownError``. Performs no I/O.
    """
    if isinstance(error, APIError):
        return error
    if _is_certificate_failure(error):
        return CertificateError()
    if _is_connection_failure(error):
        return ConnectionFailedError(error)
    return UnknownError(error)
