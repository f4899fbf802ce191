"""
Navigation tools for better-playwright-mcp.

Provides tools for:
- URL navigation
- Scrolling to the top or bottom of a page
"""

from ..client import get_client


async def navigate(page_id: str, url: str) -> str:
    """
    Navigate a page to a URL.

    Args:
        page_id: Page ID from create_page
        url: The URL to navigate to
    """
    await get_client().navigate(page_id, url)
    return f"Navigated to {url}"


async def scroll_to_bottom(page_id: str) -> str:
    await get_client().scroll_to_bottom(page_id)
    return "Scrolled to bottom"


async def scroll_to_top(page_id: str) -> str:
    await get_client().scroll_to_top(page_id)
    return "Scrolled to top"
