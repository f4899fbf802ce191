"""
Page management tools for better-playwright-mcp.

Provides tools for:
- Creating pages
- Listing open pages
- Closing pages
"""

import json
from typing import Optional

from ..client import get_client


async def create_page(name: str, url: str, description: Optional[str] = None) -> str:
    """
    Create a new page and navigate it to url.

    Args:
        name: Page identifier name
        url: URL to open
        description: Page description (defaults to name)

    Returns:
        Confirmation text carrying the new pageId
    """
    result = await get_client().create_page(name, description or name, url)
    return f"Page created. pageId: {result['pageId']}"


async def list_pages() -> str:
    """
    List open pages.

    Returns:
        "No open pages" when the server reports none, otherwise the
        server's response as indented JSON
    """
    result = await get_client().list_pages()
    pages = result.get("pages") if isinstance(result, dict) else None
    if isinstance(pages, list) and not pages:
        return "No open pages"
    return json.dumps(result, indent=2)


async def close_page(page_id: str) -> str:
    """Close a page."""
    await get_client().close_page(page_id)
    return f"Closed page {page_id}"
