"""
Utility modules for better-playwright-mcp.
"""

from .platform import (
    find_npx_executable,
    get_server_command,
)

__all__ = [
    "find_npx_executable",
    "get_server_command",
]
