"""
better-playwright-mcp MCP Server

Token-efficient browser automation over MCP. Each tool forwards to one
endpoint of a running better-playwright HTTP server; get_outline and
search_snapshot read pages without sending full snapshots.
"""

import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Optional, TypeVar

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import ImageContent

from . import client as client_module
from .client import DEFAULT_LINE_LIMIT
from .tools import input, inspection, navigation, pages

logger = logging.getLogger(__name__)

T = TypeVar("T")


@asynccontextmanager
async def lifespan(server):
    """Close the shared HTTP client on shutdown."""
    try:
        yield
    finally:
        if client_module.playwright_client is not None:
            await client_module.playwright_client.close()


# Create MCP server
mcp = FastMCP(
    "better-playwright",
    instructions=(
        "Token-efficient browser automation. Create a page with create_page, "
        "read it with get_outline or search_snapshot to find element refs, "
        "then act on refs with click, type_text, hover and press_key."
    ),
    lifespan=lifespan,
)


async def _dispatch(tool_name: str, call: Awaitable[T]) -> T:
    """Await one tool call, reporting any failure as an MCP error result."""
    try:
        return await call
    except Exception as e:
        logger.debug(f"Tool {tool_name} failed: {e}")
        raise ToolError(f"Error: {e}") from e


# =============================================================================
# Page Tools
# =============================================================================

@mcp.tool()
async def create_page(name: str, url: str, description: Optional[str] = None) -> str:
    """
    Create a new browser page and navigate to URL. Returns pageId for use with other tools.

    Args:
        name: Page identifier name
        url: URL to navigate to
        description: Page description
    """
    return await _dispatch("create_page", pages.create_page(name, url, description))


@mcp.tool()
async def close_page(page_id: str) -> str:
    """
    Close browser page.

    Args:
        page_id: Page ID
    """
    return await _dispatch("close_page", pages.close_page(page_id))


@mcp.tool()
async def list_pages() -> str:
    """List all open browser pages."""
    return await _dispatch("list_pages", pages.list_pages())


# =============================================================================
# Inspection Tools
# =============================================================================

@mcp.tool()
async def get_outline(page_id: str) -> str:
    """
    Get compressed page structure (max ~200 lines). Saves ~95% tokens vs full snapshot.
    Use this to understand page structure and find element refs.

    Args:
        page_id: Page ID from create_page
    """
    return await _dispatch("get_outline", inspection.get_outline(page_id))


@mcp.tool()
async def search_snapshot(
    page_id: str,
    pattern: str,
    ignore_case: bool = False,
    line_limit: int = DEFAULT_LINE_LIMIT,
) -> str:
    """
    Search page content with regex pattern. Returns only matching lines (max 100).
    Much more efficient than full snapshot for finding specific content.

    Args:
        page_id: Page ID
        pattern: Regex pattern to search
        ignore_case: Case insensitive search
        line_limit: Max lines to return
    """
    return await _dispatch(
        "search_snapshot",
        inspection.search_snapshot(page_id, pattern, ignore_case, line_limit),
    )


@mcp.tool()
async def screenshot(page_id: str, full_page: bool = True) -> ImageContent:
    """
    Take screenshot of page.

    Args:
        page_id: Page ID
        full_page: Capture full page
    """
    return await _dispatch("screenshot", inspection.screenshot(page_id, full_page))


# =============================================================================
# Input Tools
# =============================================================================

@mcp.tool()
async def click(page_id: str, ref: str) -> str:
    """
    Click element by ref ID (e.g., "e5", "e12"). Get refs from get_outline or search_snapshot.

    Args:
        page_id: Page ID
        ref: Element ref like e3, e4
    """
    return await _dispatch("click", input.click(page_id, ref))


@mcp.tool()
async def type_text(page_id: str, ref: str, text: str) -> str:
    """
    Type text into element by ref ID.

    Args:
        page_id: Page ID
        ref: Element ref
        text: Text to type
    """
    return await _dispatch("type_text", input.type_text(page_id, ref, text))


@mcp.tool()
async def hover(page_id: str, ref: str) -> str:
    """
    Hover over element by ref ID.

    Args:
        page_id: Page ID
        ref: Element ref
    """
    return await _dispatch("hover", input.hover(page_id, ref))


@mcp.tool()
async def press_key(page_id: str, key: str) -> str:
    """
    Press keyboard key (Enter, Tab, Escape, etc.).

    Args:
        page_id: Page ID
        key: Key to press
    """
    return await _dispatch("press_key", input.press_key(page_id, key))


# =============================================================================
# Navigation Tools
# =============================================================================

@mcp.tool()
async def navigate(page_id: str, url: str) -> str:
    """
    Navigate to URL.

    Args:
        page_id: Page ID
        url: URL to navigate to
    """
    return await _dispatch("navigate", navigation.navigate(page_id, url))


@mcp.tool()
async def scroll_to_bottom(page_id: str) -> str:
    """
    Scroll to bottom of page.

    Args:
        page_id: Page ID
    """
    return await _dispatch("scroll_to_bottom", navigation.scroll_to_bottom(page_id))


@mcp.tool()
async def scroll_to_top(page_id: str) -> str:
    """
    Scroll to top of page.

    Args:
        page_id: Page ID
    """
    return await _dispatch("scroll_to_top", navigation.scroll_to_top(page_id))


# =============================================================================
# Entry Point
# =============================================================================

def main():
    """Entry point for the MCP server."""
    # stderr only; stdout carries the stdio transport
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger.info(f"Starting better-playwright MCP server (backend: {client_module.get_base_url()})")
    mcp.run()


if __name__ == "__main__":
    main()
