#!/usr/bin/env python3
"""Debug script to check login, session caching and tags against a real server."""

import asyncio
import os
import sys

from shiori_share.client import ShioriClient
from shiori_share.config import Settings
from shiori_share.errors import APIError
from shiori_share.logging_setup import setup_logging


async def debug_session():
    """Debug what the server returns for login and tags."""
    settings = Settings.from_env()
    setup_logging(settings, verbose=True)
    client = ShioriClient.from_settings(settings)

    if not client.is_configured():
        print("Error: SHIORI_SERVER_URL, SHIORI_USERNAME and SHIORI_PASSWORD are required")
        return

    try:
        print("=== DEBUG: Checking session ===")
        print(f"State directory: {settings.state_dir}")
        print(f"Trust self-signed certificates: {settings.trust_self_signed_certs}")

        token = await client.login()
        print(f"Logged in, session starts with: {token[:6]}...")

        tags = await client.fetch_tags()
        print(f"\nTags on server: {len(tags)}")
        for tag in sorted(tags, key=lambda t: t.bookmark_count, reverse=True)[:10]:
            print(f"  - {tag.name} ({tag.bookmark_count})")

        await client.refresh_popular_tags()
        print(f"\nSuggested tags after refresh: {client.suggested_tags()[:10]}")

    except APIError as e:
        print(f"\n{type(e).__name__}: {e} (retryable: {e.retryable})")

    finally:
        await client.close()


if __name__ == "__main__":
    if not os.getenv("SHIORI_SERVER_URL"):
        print("Please set SHIORI_SERVER_URL, SHIORI_USERNAME and SHIORI_PASSWORD")
        print("Example: export SHIORI_SERVER_URL='https://shiori.example.com'")
        sys.exit(1)

    asyncio.run(debug_session())
