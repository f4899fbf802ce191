"""
Browser automation tools for better-playwright-mcp.
"""

from . import pages
from . import navigation
from . import input
from . import inspection

__all__ = ["pages", "navigation", "input", "inspection"]
