"""Data models for the Shiori Share client."""

from datetime import datetime, timedelta
from typing import Any, Optional, Union

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
)

from shiori_share.constants import SESSION_EXPIRY
from shiori_share.urls import normalize_server_url


class Credentials(BaseModel):
    """Server location and login for a single Shiori account."""

    model_config = ConfigDict(frozen=True)

    server_url: str = Field(description="Base URL of the Shiori server")
    username: str = Field(description="Shiori username")
    password: SecretStr = Field(description="Shiori password")

    @field_validator("server_url")
    @classmethod
    def _normalize_server_url(cls, value: str) -> str:
        return normalize_server_url(value)


class Session(BaseModel):
    """A session credential issued by the server on login."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(description="Value sent in the X-Session-Id header")
    issued_at: AwareDatetime = Field(description="When the session was obtained")

    def expires_at(self, window: float = SESSION_EXPIRY) -> datetime:
        return self.issued_at + timedelta(seconds=window)

    def is_valid(self, now: datetime, window: float = SESSION_EXPIRY) -> bool:
        """A session is usable while strictly less than ``window`` seconds old."""
        return (now - self.issued_at).total_seconds() < window


class TagRef(BaseModel):
    """A tag reference as sent inside a bookmark payload."""

    name: str = Field(description="Normalized (trimmed, lowercase) tag name")


class BookmarkSubmission(BaseModel):
    """Request body for creating a bookmark.

    Shiori treats null or empty optional fields differently from missing
    ones, so blank ``title``/``excerpt`` and an empty tag list are stored as
    ``None`` and left out of the payload entirely.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(description="The URL to bookmark")
    title: Optional[str] = Field(None, description="Bookmark title")
    excerpt: Optional[str] = Field(None, description="Bookmark description")
    tags: Optional[list[TagRef]] = Field(None, description="Tags to attach")
    create_archive: bool = Field(
        default=True, alias="createArchive", description="Ask the server to archive"
    )
    public: int = Field(default=0, ge=0, le=1, description="1 if publicly visible")

    @field_validator("title", "excerpt")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("tags")
    @classmethod
    def _empty_tags_to_none(cls, value: Optional[list[TagRef]]) -> Optional[list[TagRef]]:
        return value or None

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire, omitting every absent optional field."""
        return self.model_dump(by_alias=True, exclude_none=True)


class BookmarkResult(BaseModel):
    """A bookmark as returned by the server after creation."""

    id: int = Field(description="Durable identifier of the created bookmark")
    url: str = Field(description="The bookmarked URL")
    title: Optional[str] = Field(None, description="Bookmark title")
    excerpt: Optional[str] = Field(None, description="Bookmark description")


class Tag(BaseModel):
    """A tag with its usage count, as listed by the server."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Server tag identifier")
    name: str = Field(description="Tag name")
    bookmark_count: int = Field(
        default=0, alias="nBookmarks", description="Number of bookmarks with this tag"
    )


class LoginRequest(BaseModel):
    """Login request body."""

    username: str
    password: str
    remember: bool = True


class LoginMessage(BaseModel):
    """Session details carried in a successful login response."""

    token: str = Field(description="JWT for the v1 API")
    session: str = Field(description="Session id for the legacy API")
    expires: Optional[int] = Field(None, description="Expiry as a Unix timestamp")


class LoginResponse(BaseModel):
    """Login response envelope."""

    ok: bool = Field(description="Whether the login succeeded")
    message: Optional[Union[LoginMessage, str]] = Field(
        None, description="Session details, or an error text when ok is false"
    )

    @property
    def session_message(self) -> Optional[LoginMessage]:
        if self.ok and isinstance(self.message, LoginMessage):
            return self.message
        return None
