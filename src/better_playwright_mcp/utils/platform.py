"""
Platform utilities for launching the better-playwright HTTP server.

Handles cross-platform detection of:
- The npx executable
- The server command line, with BETTER_PLAYWRIGHT_SERVER_COMMAND override
"""

import os
import shlex
import shutil
import sys
from typing import Optional

DEFAULT_SERVER_COMMAND = "npx better-playwright-server"


def get_platform() -> str:
    """Return the current operating system: 'mac', 'linux', or 'windows'."""
    if sys.platform.startswith("darwin"):
        return "mac"
    elif sys.platform.startswith("win"):
        return "windows"
    return "linux"


def find_npx_executable() -> Optional[str]:
    """
    Find npx on PATH.

    On Windows npx ships as npx.cmd, which is tried first.
    """
    names = ["npx.cmd", "npx"] if get_platform() == "windows" else ["npx"]
    for name in names:
        path = shutil.which(name)
        if path:
            return path
    return None


def get_server_command(headless: bool = False) -> list[str]:
    """
    Build the argv that starts the better-playwright HTTP server.

    Uses BETTER_PLAYWRIGHT_SERVER_COMMAND when set, otherwise
    "npx better-playwright-server". A bare "npx" is resolved to its
    full path so Windows can spawn npx.cmd.

    Args:
        headless: Append --headless
    """
    raw = os.environ.get("BETTER_PLAYWRIGHT_SERVER_COMMAND") or DEFAULT_SERVER_COMMAND
    command = shlex.split(raw, posix=get_platform() != "windows")

    if command and command[0] == "npx":
        npx_path = find_npx_executable()
        if npx_path:
            command[0] = npx_path

    if headless:
        command.append("--headless")
    return command
