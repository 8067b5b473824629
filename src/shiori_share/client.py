"""Shiori API client with session caching and error classification."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, NoReturn, Optional, TypeVar

import httpx
from pydantic import TypeAdapter

from shiori_share.config import Settings
from shiori_share.constants import (
    BOOKMARKS_PATH,
    DEFAULT_CREATE_ARCHIVE,
    DEFAULT_MAKE_PUBLIC,
    LOGIN_PATH,
    NETWORK_TIMEOUT,
    SESSION_HEADER,
    TAGS_PATH,
)
from shiori_share.errors import (
    DecodingError,
    InvalidCredentialsError,
    InvalidURLError,
    NotConfiguredError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    classify,
)
from shiori_share.models import (
    BookmarkResult,
    BookmarkSubmission,
    Credentials,
    LoginRequest,
    LoginResponse,
    Tag,
)
from shiori_share.stores import (
    CredentialStore,
    EnvCredentialStore,
    RecentTagsCache,
    SessionCache,
)
from shiori_share.tags import parse_keywords, popular_tag_names
from shiori_share.transport import build_http_client, log_request, log_response
from shiori_share.urls import is_valid_http_url, join_api_path

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TAG_LIST = TypeAdapter(list[Tag])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShioriClient:
    """Session-aware Shiori API client.

    Every public coroutine either returns a result or raises an ``APIError``
    subclass; raw transport exceptions never escape. Each request uses its own
    short-lived ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        session_cache: SessionCache,
        recent_tags: RecentTagsCache,
        *,
        trust_self_signed_certs: bool = False,
        timeout: float = NETWORK_TIMEOUT,
        clock: Callable[[], datetime] = _utcnow,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client with its stores.

        Args:
            credentials: Source of server URL, username and password.
            session_cache: Where the session token is cached between calls.
            recent_tags: Tag suggestion cache updated after saves.
            trust_self_signed_certs: Accept a self-signed certificate from the
                configured server host.
            timeout: Per-request timeout in seconds.
            clock: Returns the current time (timezone-aware).
            transport: Replacement httpx transport, mainly for tests.
        """
        self._credentials = credentials
        self._sessions = session_cache
        self._recent_tags = recent_tags
        self.trust_self_signed_certs = trust_self_signed_certs
        self.timeout = timeout
        self._clock = clock
        self._transport = transport
        self._background_tasks: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls, settings: Settings, credentials: Optional[CredentialStore] = None
    ) -> "ShioriClient":
        """Build a client whose caches persist under ``settings.state_dir``."""
        return cls(
            credentials or EnvCredentialStore(),
            SessionCache(settings.session_file),
            RecentTagsCache(settings.recent_tags_file),
            trust_self_signed_certs=settings.trust_self_signed_certs,
        )

    def is_configured(self) -> bool:
        return self._credentials.has_credentials()

    def suggested_tags(self) -> list[str]:
        return self._recent_tags.get()

    def clear_session(self) -> None:
        """Forget the cached session so the next call logs in again."""
        self._sessions.clear()
        logger.info("Session cleared")

    def _require_credentials(self) -> Credentials:
        credentials = self._credentials.get_credentials()
        if credentials is None:
            raise NotConfiguredError()
        return credentials

    def _base_url(self, credentials: Credentials) -> str:
        if not is_valid_http_url(credentials.server_url):
            raise InvalidURLError()
        return credentials.server_url

    async def _send(
        self,
        method: str,
        base_url: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> httpx.Response:
        """Send one request; transport failures are raised as classified errors."""
        url = join_api_path(base_url, path)
        headers = {}
        if json is not None:
            headers["Content-Type"] = "application/json"
        if session_id is not None:
            headers[SESSION_HEADER] = session_id

        log_request(method, url, headers)
        started = time.monotonic()
        try:
            async with build_http_client(
                base_url,
                trust_self_signed_certs=self.trust_self_signed_certs,
                timeout=self.timeout,
                transport=self._transport,
            ) as http:
                response = await http.request(method, url, json=json, headers=headers)
        except Exception as e:
            error = classify(e)
            logger.warning("%s %s failed: %s", method, url, error)
            raise error from e

        log_response(method, url, response.status_code, time.monotonic() - started)
        return response

    @staticmethod
    def _decode(response: httpx.Response, parse: Callable[[Any], T]) -> T:
        try:
            return parse(response.json())
        except ValueError as e:
            # Covers both malformed JSON and pydantic validation failures
            logger.error("Could not decode response from %s: %s", response.url, e)
            raise DecodingError(e) from e

    def _raise_for_status(self, response: httpx.Response) -> NoReturn:
        status = response.status_code
        if status == 401:
            self._sessions.clear()
            raise UnauthorizedError()
        if status == 403:
            raise InvalidCredentialsError()
        if status == 404:
            raise NotFoundError()
        raise ServerError(status)

    async def login(
        self, credentials: Optional[Credentials] = None, *, cache: bool = True
    ) -> str:
        """Log in and cache the new session.

        Args:
            credentials: Explicit credentials to try instead of the stored ones.
            cache: Store the new session. Off for credentials that have not
                been saved.

        Returns:
            The session token to send as ``X-Session-Id``.
        """
        if credentials is None:
            credentials = self._require_credentials()
        base_url = self._base_url(credentials)

        body = LoginRequest(
            username=credentials.username,
            password=credentials.password.get_secret_value(),
        ).model_dump()
        response = await self._send("POST", base_url, LOGIN_PATH, json=body)

        status = response.status_code
        if status == 200:
            message = self._decode(response, LoginResponse.model_validate).session_message
            if message is None:
                raise InvalidCredentialsError()
            if cache:
                self._sessions.set_token(message.session, self._clock())
            logger.info("Login successful for user: %s", credentials.username)
            return message.session
        if status in (401, 403):
            raise InvalidCredentialsError()
        if status == 404:
            raise NotFoundError()
        raise ServerError(status)

    async def check_connection(self, server_url: str, username: str, password: str) -> str:
        """Log in with credentials that have not been stored yet.

        The cached session is left alone.
        """
        credentials = Credentials(server_url=server_url, username=username, password=password)
        return await self.login(credentials, cache=False)

    async def _ensure_session(self, credentials: Credentials) -> str:
        """Reuse the cached session while it is fresh, otherwise log in."""
        if self._sessions.is_valid(self._clock()):
            token = self._sessions.get_token()
            if token:
                return token
        return await self.login(credentials)

    async def add_bookmark(
        self,
        url: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        keywords: Optional[str] = None,
        create_archive: bool = DEFAULT_CREATE_ARCHIVE,
        make_public: bool = DEFAULT_MAKE_PUBLIC,
    ) -> BookmarkResult:
        """Create a bookmark on the server.

        Args:
            url: The URL to save. Must be non-empty.
            title: Optional title; left out of the request when blank.
            description: Optional excerpt; left out of the request when blank.
            keywords: Comma-separated tags; left out when nothing remains after parsing.
            create_archive: Ask the server to archive the page.
            make_public: Make the bookmark publicly visible.
        """
        if not url or not url.strip():
            raise InvalidURLError("Bookmark URL must not be empty")

        credentials = self._require_credentials()
        base_url = self._base_url(credentials)
        session_id = await self._ensure_session(credentials)

        tags = parse_keywords(keywords)
        submission = BookmarkSubmission(
            url=url.strip(),
            title=title,
            excerpt=description,
            tags=tags,
            create_archive=create_archive,
            public=1 if make_public else 0,
        )
        response = await self._send(
            "POST",
            base_url,
            BOOKMARKS_PATH,
            json=submission.to_payload(),
            session_id=session_id,
        )
        if response.status_code not in (200, 201):
            self._raise_for_status(response)

        bookmark = self._decode(response, BookmarkResult.model_validate)
        if tags:
            self._recent_tags.add_tags(tag.name for tag in tags)
        logger.info("Bookmark saved: id=%d", bookmark.id)
        return bookmark

    async def fetch_tags(self) -> list[Tag]:
        """List all tags on the server with their bookmark counts."""
        credentials = self._require_credentials()
        base_url = self._base_url(credentials)
        session_id = await self._ensure_session(credentials)

        response = await self._send("GET", base_url, TAGS_PATH, session_id=session_id)
        if response.status_code != 200:
            self._raise_for_status(response)

        tags = self._decode(response, _TAG_LIST.validate_python)
        logger.info("Fetched %d tags from server", len(tags))
        return tags

    async def refresh_popular_tags(self) -> None:
        """Replace the tag suggestions with the server's most used tags.

        Failures are logged and dropped; suggestions are a convenience and
        must never get in the way of saving a bookmark.
        """
        try:
            tags = await self.fetch_tags()
            names = popular_tag_names(tags, limit=self._recent_tags.max_size)
            self._recent_tags.set(names)
        except Exception as e:
            logger.warning("Failed to refresh popular tags: %s", e)
            return
        logger.info("Updated popular tags cache: %s", names)

    def schedule_popular_tags_refresh(self) -> asyncio.Task:
        """Start ``refresh_popular_tags`` in the background and return its task."""
        task = asyncio.create_task(self.refresh_popular_tags())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def close(self) -> None:
        """Cancel any background refresh still running."""
        tasks = list(self._background_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
