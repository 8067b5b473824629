"""Main entry point for the Shiori Share MCP server."""

import sys
from typing import Any

from fastmcp import FastMCP  # type: ignore

from shiori_share import tools
from shiori_share.client import ShioriClient
from shiori_share.config import Settings
from shiori_share.logging_setup import setup_logging

# Initialize FastMCP server
mcp = FastMCP("Shiori Share")

# Global client and settings - initialized in main()
client: ShioriClient
settings: Settings


@mcp.tool
async def prepare_share() -> dict[str, Any]:
    """Get defaults for a new bookmark and refresh tag suggestions in the background."""
    result = await tools.prepare_share(client, settings)()
    return result.model_dump()


@mcp.tool
async def save_bookmark(
    url: str,
    title: str | None = None,
    description: str | None = None,
    keywords: str | None = None,
    create_archive: bool | None = None,
    make_public: bool | None = None,
) -> dict[str, Any]:
    """Save a URL as a bookmark on the Shiori server.

    Args:
        url: The URL to bookmark
        title: Optional bookmark title
        description: Optional short description
        keywords: Optional comma-separated tags, e.g. "python, web development"
        create_archive: Archive the page (defaults to SHIORI_DEFAULT_CREATE_ARCHIVE)
        make_public: Make the bookmark public (defaults to SHIORI_DEFAULT_MAKE_PUBLIC)
    """
    params = tools.SaveBookmarkParams(
        url=url,
        title=title,
        description=description,
        keywords=keywords,
        create_archive=create_archive,
        make_public=make_public,
    )
    result = await tools.save_bookmark(client, settings)(params)
    return result.model_dump()


@mcp.tool
async def list_suggested_tags() -> list[str]:
    """List recently used and popular tags, most relevant first."""
    return await tools.list_suggested_tags(client)()


@mcp.tool
async def check_connection(server_url: str, username: str, password: str) -> dict[str, Any]:
    """Test a server URL and login before storing them.

    Args:
        server_url: Shiori server URL, e.g. https://shiori.example.com
        username: Shiori username
        password: Shiori password
    """
    params = tools.CheckConnectionParams(
        server_url=server_url, username=username, password=password
    )
    result = await tools.check_connection(client)(params)
    return result.model_dump()


@mcp.tool
async def clear_session() -> dict[str, Any]:
    """Forget the cached server session; the next save logs in again."""
    client.clear_session()
    return {"cleared": True}


def main() -> None:
    """Main entry point."""
    global client, settings

    try:
        settings = Settings.from_env()
        setup_logging(settings)

        client = ShioriClient.from_settings(settings)
        if not client.is_configured():
            print(
                "Warning: SHIORI_SERVER_URL, SHIORI_USERNAME and SHIORI_PASSWORD "
                "are not all set; saves will fail until they are",
                file=sys.stderr,
            )

        # Run the server
        mcp.run()
    except KeyboardInterrupt:
        print("\nServer stopped", file=sys.stderr)
    except Exception as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
