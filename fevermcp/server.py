"""FastMCP server exposing a Fever-compatible feed reader as MCP tools.

Available tools:
* ``list_feeds`` / ``get_feed_groups`` – subscriptions and groups, verbatim.
* ``get_unread`` – unread items as summaries (id, title, url, timestamp).
* ``get_feed_items`` / ``get_feed_item_summaries`` – items of one feed, full
  or summarised.
* ``get_items`` – specific items by id.
* ``mark_item_read`` / ``mark_item_unread`` / ``mark_feed_read`` – state
  changes; these return a short confirmation instead of JSON.

Listing tools return the upstream payload as indented JSON text.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager, contextmanager
from typing import Annotated, Any, AsyncIterator, Iterator, List

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from fevermcp.main.config import ConfigError, load_config
from fevermcp.main.tools.errors import FeverAPIError, InvalidIdentifierError
from fevermcp.main.tools.fever_client import FeverClient
from fevermcp.main.tools.utils import to_json

logger = logging.getLogger(__name__)

SERVER_NAME = "freshrss-server"

FeedId = Annotated[str, Field(description="Feed ID")]
ItemId = Annotated[str, Field(description="Item ID")]


@contextmanager
def _reported_as_tool_error(tool_name: str, **arguments: Any) -> Iterator[None]:
    """Log the call and turn known client failures into ``ToolError``.

    Anything else is left for FastMCP to report as an internal error.
    """
    logger.info("%s called with %s", tool_name, arguments)
    try:
        yield
    except (FeverAPIError, InvalidIdentifierError) as exc:
        logger.error("%s failed: %s", tool_name, exc)
        raise ToolError(str(exc)) from exc


def create_server(client: FeverClient) -> FastMCP:
    """Build the MCP server with every tool bound to *client*.

    The client's HTTP connections are closed when the server shuts down.
    """

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await client.aclose()

    mcp = FastMCP(SERVER_NAME, lifespan=lifespan)

    @mcp.tool
    async def list_feeds() -> str:
        """List all feed subscriptions"""
        with _reported_as_tool_error("list_feeds"):
            response = await client.list_subscriptions()
        return to_json(response)

    @mcp.tool
    async def get_feed_groups() -> str:
        """Get feed groups"""
        with _reported_as_tool_error("get_feed_groups"):
            response = await client.list_groups()
        return to_json(response)

    @mcp.tool
    async def get_unread() -> str:
        """Get unread items summaries (ID, title, URL, timestamp). Avoids full HTML."""
        with _reported_as_tool_error("get_unread"):
            response = await client.list_unread_summaries()
        return to_json(response)

    @mcp.tool
    async def get_feed_items(feed_id: FeedId) -> str:
        """Get full feed items (includes HTML). Use ONLY when necessary."""
        with _reported_as_tool_error("get_feed_items", feed_id=feed_id):
            response = await client.list_feed_items(feed_id)
        return to_json(response)

    @mcp.tool
    async def get_feed_item_summaries(feed_id: FeedId) -> str:
        """Get feed item summaries (ID, title, URL, timestamp). Use before requesting full content."""
        with _reported_as_tool_error("get_feed_item_summaries", feed_id=feed_id):
            response = await client.list_feed_item_summaries(feed_id)
        return to_json(response)

    @mcp.tool
    async def mark_item_read(item_id: ItemId) -> str:
        """Mark an item as read"""
        with _reported_as_tool_error("mark_item_read", item_id=item_id):
            await client.mark_item_read(item_id)
        return f"Successfully marked item {item_id} as read"

    @mcp.tool
    async def mark_item_unread(item_id: ItemId) -> str:
        """Mark an item as unread"""
        with _reported_as_tool_error("mark_item_unread", item_id=item_id):
            await client.mark_item_unread(item_id)
        return f"Successfully marked item {item_id} as unread"

    @mcp.tool
    async def mark_feed_read(
        feed_id: Annotated[str, Field(description="Feed ID to mark as read")],
    ) -> str:
        """Mark all items in a feed as read"""
        with _reported_as_tool_error("mark_feed_read", feed_id=feed_id):
            await client.mark_feed_read(feed_id)
        return f"Successfully marked all items in feed {feed_id} as read"

    @mcp.tool
    async def get_items(
        item_ids: Annotated[List[str], Field(description="Array of item IDs to get")],
    ) -> str:
        """Get specific items by their IDs"""
        with _reported_as_tool_error("get_items", item_ids=item_ids):
            response = await client.get_items_by_id(item_ids)
        return to_json(response)

    return mcp


def main() -> None:
    """Entry point – load configuration and serve MCP on stdio."""
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    try:
        config = load_config()
    except ConfigError as exc:
        logger.error("Server error: %s", exc)
        sys.exit(1)

    mcp = create_server(FeverClient(config))
    logger.info("FreshRSS MCP server running on stdio")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
