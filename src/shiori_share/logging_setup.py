"""Logging configuration for shiori_share."""

import logging
import sys

from shiori_share.config import Settings

# Track whether logging has been initialized to prevent double-init
_initialized = False


def setup_logging(settings: Settings, verbose: bool = False) -> None:
    """
    Configure the ``shiori_share`` logger.

    Output goes to stderr; stdout carries the MCP stdio protocol.

    Args:
        settings: Application settings; ``debug_logging`` enables request tracing
        verbose: If True, log at DEBUG regardless of settings
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    level = logging.DEBUG if verbose or settings.debug_logging else logging.INFO

    logger = logging.getLogger("shiori_share")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)-22s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)

    # Suppress noisy third-party loggers
    for noisy_logger in ("httpx", "httpcore"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
