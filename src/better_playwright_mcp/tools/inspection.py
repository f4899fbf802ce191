"""
Inspection tools for better-playwright-mcp.

Provides tools for:
- Compressed page outlines
- Regex search over the page snapshot
- Screenshots

The outline and search tools are the token-efficient way to read a page:
both return element refs without sending the full snapshot.
"""

from mcp.types import ImageContent

from ..client import DEFAULT_LINE_LIMIT, get_client


async def get_outline(page_id: str) -> str:
    """
    Get the compressed page outline.

    Args:
        page_id: Page ID from create_page

    Returns:
        Outline text as produced by the server
    """
    return await get_client().get_outline(page_id)


async def search_snapshot(
    page_id: str,
    pattern: str,
    ignore_case: bool = False,
    line_limit: int = DEFAULT_LINE_LIMIT,
) -> str:
    """
    Search the page snapshot with a regex.

    Args:
        page_id: Page ID
        pattern: Regex pattern
        ignore_case: Case insensitive search
        line_limit: Max lines to return

    Returns:
        Match count header followed by the matching lines
    """
    result = await get_client().search_snapshot(page_id, pattern, ignore_case, line_limit)
    truncated_note = " (truncated)" if result.get("truncated") else ""
    return f"Found {result.get('matchCount')} matches{truncated_note}:\n{result.get('result')}"


async def screenshot(page_id: str, full_page: bool = True) -> ImageContent:
    """
    Take a PNG screenshot.

    Args:
        page_id: Page ID
        full_page: Capture the full scrollable page

    Returns:
        MCP image content with the base64 PNG
    """
    data = await get_client().screenshot(page_id, full_page)
    return ImageContent(type="image", data=data, mimeType="image/png")
