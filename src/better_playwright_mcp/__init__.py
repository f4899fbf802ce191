"""
better-playwright-mcp: token-efficient browser automation over MCP.

Forwards MCP tool calls to a better-playwright HTTP server.
"""

from .server import mcp, main
from .client import PlaywrightClient, PlaywrightServerError, get_client
from .launcher import PlaywrightServer, ServerLaunchError

__version__ = "1.0.0"
__all__ = [
    "mcp",
    "main",
    "PlaywrightClient",
    "PlaywrightServerError",
    "get_client",
    "PlaywrightServer",
    "ServerLaunchError",
]
