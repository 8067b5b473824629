"""MCP tools for sharing URLs to a Shiori server."""

import logging
from typing import Callable, Optional

from pydantic import BaseModel, Field, SecretStr

from shiori_share.client import ShioriClient
from shiori_share.config import Settings
from shiori_share.errors import APIError
from shiori_share.models import BookmarkResult
from shiori_share.urls import is_valid_url

logger = logging.getLogger(__name__)

NO_URL_MESSAGE = (
    "The shared content doesn't contain a URL. Try sharing from a browser or "
    "app that shares links."
)


class SaveBookmarkParams(BaseModel):
    """Parameters for saving a bookmark."""

    url: str = Field(description="The URL to bookmark")
    title: Optional[str] = Field(None, description="Bookmark title")
    description: Optional[str] = Field(None, description="Short description")
    keywords: Optional[str] = Field(None, description="Comma-separated tags")
    create_archive: Optional[bool] = Field(
        None, description="Archive the page; falls back to the configured default"
    )
    make_public: Optional[bool] = Field(
        None, description="Make the bookmark public; falls back to the configured default"
    )


class CheckConnectionParams(BaseModel):
    """Parameters for testing server credentials."""

    server_url: str = Field(description="Shiori server URL")
    username: str = Field(description="Shiori username")
    password: SecretStr = Field(description="Shiori password")


class ToolError(BaseModel):
    """A failure reported back to the caller."""

    message: str = Field(description="User-facing error message")
    error_type: str = Field(description="Error class name")
    retryable: bool = Field(default=False, description="Whether retrying may help")

    @classmethod
    def from_api_error(cls, error: APIError) -> "ToolError":
        return cls(
            message=error.message,
            error_type=type(error).__name__,
            retryable=error.retryable,
        )


class SaveBookmarkResult(BaseModel):
    """Outcome of a save."""

    saved: bool = Field(description="True when the server stored the bookmark")
    bookmark: Optional[BookmarkResult] = Field(None, description="The saved bookmark")
    error: Optional[ToolError] = Field(None, description="Why the save failed")


class ShareDefaults(BaseModel):
    """Initial values for a share form."""

    configured: bool = Field(description="Whether server credentials are set")
    create_archive: bool = Field(description="Default for archiving")
    make_public: bool = Field(description="Default for public visibility")
    suggested_tags: list[str] = Field(
        default_factory=list, description="Recent and popular tags"
    )


class ConnectionStatus(BaseModel):
    """Result of a connection check."""

    ok: bool = Field(description="True if login succeeded")
    message: str = Field(description="Status text")
    error: Optional[ToolError] = Field(None, description="Failure details")


def prepare_share(client: ShioriClient, settings: Settings) -> Callable:
    """Create the prepareShare MCP tool."""

    async def _prepare_share() -> ShareDefaults:
        """Return form defaults and start refreshing tag suggestions."""
        configured = client.is_configured()
        if configured:
            client.schedule_popular_tags_refresh()
        return ShareDefaults(
            configured=configured,
            create_archive=settings.default_create_archive,
            make_public=settings.default_make_public,
            suggested_tags=client.suggested_tags(),
        )

    return _prepare_share


def save_bookmark(client: ShioriClient, settings: Settings) -> Callable:
    """Create the saveBookmark MCP tool."""

    async def _save_bookmark(params: SaveBookmarkParams) -> SaveBookmarkResult:
        """Save a URL as a bookmark on the Shiori server."""
        if not is_valid_url(params.url):
            return SaveBookmarkResult(
                saved=False,
                error=ToolError(message=NO_URL_MESSAGE, error_type="NoURLFound"),
            )

        create_archive = params.create_archive
        if create_archive is None:
            create_archive = settings.default_create_archive
        make_public = params.make_public
        if make_public is None:
            make_public = settings.default_make_public

        try:
            bookmark = await client.add_bookmark(
                url=params.url,
                title=params.title,
                description=params.description,
                keywords=params.keywords,
                create_archive=create_archive,
                make_public=make_public,
            )
        except APIError as e:
            logger.error("Error saving bookmark: %s", e)
            return SaveBookmarkResult(saved=False, error=ToolError.from_api_error(e))

        return SaveBookmarkResult(saved=True, bookmark=bookmark)

    return _save_bookmark


def list_suggested_tags(client: ShioriClient) -> Callable:
    """Create the listSuggestedTags MCP tool."""

    async def _list_suggested_tags() -> list[str]:
        """List cached tag suggestions, most relevant first."""
        return client.suggested_tags()

    return _list_suggested_tags


def check_connection(client: ShioriClient) -> Callable:
    """Create the checkConnection MCP tool."""

    async def _check_connection(params: CheckConnectionParams) -> ConnectionStatus:
        """Try logging in with the given credentials."""
        try:
            await client.check_connection(
                server_url=params.server_url,
                username=params.username,
                password=params.password.get_secret_value(),
            )
        except APIError as e:
            logger.error("Connection check failed: %s", e)
            return ConnectionStatus(
                ok=False, message=e.message, error=ToolError.from_api_error(e)
            )
        return ConnectionStatus(ok=True, message="Connection successful!")

    return _check_connection
