"""Credential, session and recent-tag stores used by the client.

The session and recent-tag caches keep their state in memory and, when given
a path, mirror it to a small JSON file. Files are always rewritten through a
temporary file and ``os.replace`` so a reader never sees a half-written state.
A file that cannot be written is logged and skipped; the in-memory state
still applies.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from shiori_share.constants import ENV_PREFIX, MAX_RECENT_TAGS, SESSION_EXPIRY
from shiori_share.models import Credentials, Session
from shiori_share.tags import merge_recent_tags

logger = logging.getLogger(__name__)


def atomic_write(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(data, encoding="utf-8")
    os.replace(tmp, path)


def _read_json(path: Optional[Path]) -> Any:
    if path is None or not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable state file %s: %s", path, e)
        return None


class CredentialStore(ABC):
    """Source of the server URL, username and password."""

    @abstractmethod
    def get_server_url(self) -> Optional[str]: ...

    @abstractmethod
    def get_username(self) -> Optional[str]: ...

    @abstractmethod
    def get_password(self) -> Optional[str]: ...

    def has_credentials(self) -> bool:
        return all((self.get_server_url(), self.get_username(), self.get_password()))

    def get_credentials(self) -> Optional[Credentials]:
        """Return complete credentials, or None if any part is missing."""
        server_url = self.get_server_url()
        username = self.get_username()
        password = self.get_password()
        if not (server_url and username and password):
            return None
        return Credentials(server_url=server_url, username=username, password=password)


class EnvCredentialStore(CredentialStore):
    """Reads SHIORI_SERVER_URL, SHIORI_USERNAME and SHIORI_PASSWORD on every call."""

    SERVER_URL = f"{ENV_PREFIX}SERVER_URL"
    USERNAME = f"{ENV_PREFIX}USERNAME"
    PASSWORD = f"{ENV_PREFIX}PASSWORD"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ

    def _get(self, key: str) -> Optional[str]:
        env = os.environ if self._environ is None else self._environ
        value = env.get(key, "").strip()
        return value or None

    def get_server_url(self) -> Optional[str]:
        return self._get(self.SERVER_URL)

    def get_username(self) -> Optional[str]:
        return self._get(self.USERNAME)

    def get_password(self) -> Optional[str]:
        return self._get(self.PASSWORD)


class MemoryCredentialStore(CredentialStore):
    """Holds credentials in memory; used for embedding and tests."""

    def __init__(self, credentials: Optional[Credentials] = None):
        self._credentials = credentials

    def set(self, credentials: Optional[Credentials]) -> None:
        self._credentials = credentials

    def get_server_url(self) -> Optional[str]:
        return self._credentials.server_url if self._credentials else None

    def get_username(self) -> Optional[str]:
        return self._credentials.username if self._credentials else None

    def get_password(self) -> Optional[str]:
        if self._credentials is None:
            return None
        return self._credentials.password.get_secret_value()


class SessionCache:
    """Holds the current session; replaced as a whole, never field by field."""

    def __init__(self, path: Optional[Path] = None, expiry: float = SESSION_EXPIRY):
        self._path = path
        self._expiry = expiry
        self._session: Optional[Session] = self._load()

    def _load(self) -> Optional[Session]:
        data = _read_json(self._path)
        if data is None:
            return None
        try:
            return Session.model_validate(data)
        except ValidationError as e:
            logger.warning("Discarding invalid cached session: %s", e)
            return None

    def _persist(self) -> None:
        if self._path is None:
            return
        session = self._session
        try:
            if session is None:
                self._path.unlink(missing_ok=True)
            else:
                atomic_write(self._path, session.model_dump_json())
        except OSError as e:
            logger.warning("Could not save session to %s: %s", self._path, e)

    def get(self) -> Optional[Session]:
        return self._session

    def get_token(self) -> Optional[str]:
        session = self._session
        return session.token if session else None

    def set_token(self, token: str, timestamp: datetime) -> Session:
        session = Session(token=token, issued_at=timestamp)
        self._session = session
        self._persist()
        return session

    def clear(self) -> None:
        self._session = None
        self._persist()

    def is_valid(self, now: datetime) -> bool:
        session = self._session
        return session is not None and session.is_valid(now, self._expiry)


class RecentTagsCache:
    """Most-recently-used tag suggestions, capped at ``max_size`` entries."""

    def __init__(self, path: Optional[Path] = None, max_size: int = MAX_RECENT_TAGS):
        self._path = path
        self.max_size = max_size
        self._tags: list[str] = self._load()

    def _load(self) -> list[str]:
        data = _read_json(self._path)
        if not isinstance(data, list):
            return []
        return [str(tag) for tag in data][: self.max_size]

    def get(self) -> list[str]:
        return list(self._tags)

    def set(self, tags: Iterable[str]) -> None:
        self._tags = list(tags)[: self.max_size]
        if self._path is None:
            return
        try:
            atomic_write(self._path, json.dumps(self._tags))
        except OSError as e:
            logger.warning("Could not save recent tags to %s: %s", self._path, e)

    def add_tags(self, tags: Iterable[str]) -> None:
        self.set(merge_recent_tags(self._tags, tags, limit=self.max_size))

    def clear(self) -> None:
        self.set([])
