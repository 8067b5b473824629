"""Runtime settings loaded from SHIORI_* environment variables."""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from shiori_share.constants import (
    DEFAULT_CREATE_ARCHIVE,
    DEFAULT_MAKE_PUBLIC,
    DEFAULT_STATE_DIR,
    ENV_PREFIX,
)


class Settings(BaseModel):
    """Non-secret preferences. Credentials live in the credential store."""

    trust_self_signed_certs: bool = Field(
        default=False,
        description="Accept a self-signed certificate from the configured server only",
    )
    default_create_archive: bool = Field(
        default=DEFAULT_CREATE_ARCHIVE, description="Archive new bookmarks by default"
    )
    default_make_public: bool = Field(
        default=DEFAULT_MAKE_PUBLIC, description="Make new bookmarks public by default"
    )
    debug_logging: bool = Field(default=False, description="Trace HTTP requests")
    state_dir: Path = Field(
        default=Path(DEFAULT_STATE_DIR),
        validate_default=True,
        description="Directory holding the cached session and recent tags",
    )

    @field_validator("state_dir")
    @classmethod
    def _expand_state_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def session_file(self) -> Path:
        return self.state_dir / "session.json"

    @property
    def recent_tags_file(self) -> Path:
        return self.state_dir / "recent_tags.json"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``SHIORI_<FIELD>`` variables; blank values are ignored."""
        env = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        return cls(**values)
