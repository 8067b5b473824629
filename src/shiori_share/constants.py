"""Endpoint paths, timings and defaults shared across the client."""

LOGIN_PATH = "/api/v1/auth/login"
BOOKMARKS_PATH = "/api/bookmarks"
TAGS_PATH = "/api/tags"

SESSION_HEADER = "X-Session-Id"

NETWORK_TIMEOUT = 30.0  # seconds, per request
SESSION_EXPIRY = 3600.0  # seconds a cached session stays usable

MAX_RECENT_TAGS = 50

DEFAULT_CREATE_ARCHIVE = True
DEFAULT_MAKE_PUBLIC = False
DEFAULT_STATE_DIR = "~/.shiori-share"

ENV_PREFIX = "SHIORI_"
