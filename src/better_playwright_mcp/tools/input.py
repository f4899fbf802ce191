"""
Input tools for better-playwright-mcp.

Provides tools for:
- Clicking and hovering elements by ref
- Typing into elements
- Keyboard presses

Refs (e.g. "e5") come from get_outline or search_snapshot output.
"""

from ..client import get_client


def _element(ref: str) -> str:
    return f"Element ref={ref}"


async def click(page_id: str, ref: str) -> str:
    """
    Click the element at ref.

    Args:
        page_id: Page ID
        ref: Element ref like "e3"
    """
    await get_client().click(page_id, ref, _element(ref))
    return f"Clicked {ref}"


async def type_text(page_id: str, ref: str, text: str) -> str:
    """
    Type text into the element at ref.

    Args:
        page_id: Page ID
        ref: Element ref
        text: Text to type
    """
    await get_client().type(page_id, ref, text, _element(ref))
    return f'Typed "{text}" into {ref}'


async def hover(page_id: str, ref: str) -> str:
    await get_client().hover(page_id, ref, _element(ref))
    return f"Hovered over {ref}"


async def press_key(page_id: str, key: str) -> str:
    """
    Press a keyboard key.

    Args:
        page_id: Page ID
        key: Key name (e.g., "Enter", "Tab", "Escape")
    """
    await get_client().press_key(page_id, key)
    return f"Pressed {key}"
