"""
Launcher for the better-playwright HTTP server.

Starts the Node.js server that does the actual browser automation, waits
for it to accept requests and stops it on SIGINT/SIGTERM.

Usage:
    better-playwright-server
    better-playwright-server --headless
    PORT=3103 better-playwright-server
"""

import argparse
import asyncio
import logging
import os
import signal
import subprocess
import sys
from typing import Optional

import httpx

from .utils.platform import get_server_command

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3102


class ServerLaunchError(Exception):
    """The HTTP server could not be started."""
    pass


class PlaywrightServer:
    """
    Manages the better-playwright HTTP server process.

    Handles:
    - Spawning the server with PORT set
    - Waiting until it answers HTTP requests
    - Graceful shutdown
    """

    def __init__(
        self,
        port: Optional[int] = None,
        headless: bool = False,
        startup_timeout: float = 30.0,
    ):
        self.port = port or int(os.environ.get("PORT") or DEFAULT_PORT)
        self.headless = headless
        self.startup_timeout = startup_timeout
        self.process: Optional[subprocess.Popen] = None

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"

    def is_running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    async def _is_ready(self) -> bool:
        """Any HTTP answer on the pages endpoint means the server is listening."""
        try:
            async with httpx.AsyncClient(timeout=2.0) as client:
                await client.get(f"http://127.0.0.1:{self.port}/api/pages")
            return True
        except httpx.HTTPError as e:
            logger.debug(f"Server not ready yet: {e}")
            return False

    async def start(self) -> None:
        """
        Launch the server and wait for it to come up.

        Raises:
            ServerLaunchError: If the command cannot be run, exits early,
                or does not answer within startup_timeout
        """
        if self.is_running():
            logger.debug("Server already running")
            return

        command = get_server_command(headless=self.headless)
        env = os.environ.copy()
        env["PORT"] = str(self.port)

        logger.info(f"Launching better-playwright server: {' '.join(command)}")

        try:
            self.process = subprocess.Popen(command, env=env)
        except Exception as e:
            raise ServerLaunchError(f"Failed to launch server: {e}") from e

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        while (loop.time() - start_time) < self.startup_timeout:
            if self.process.poll() is not None:
                code = self.process.returncode
                self.process = None
                raise ServerLaunchError(f"Server exited during startup (exit code {code})")
            if await self._is_ready():
                logger.info(f"Server ready on port {self.port} (PID: {self.process.pid})")
                return
            await asyncio.sleep(0.5)

        await self.stop()
        raise ServerLaunchError(
            f"Server did not answer on port {self.port} after {self.startup_timeout}s"
        )

    async def stop(self) -> None:
        """Terminate the server, killing it if it does not exit within 5s."""
        if self.process is None:
            return

        if self.process.poll() is None:
            self.process.terminate()
            try:
                await asyncio.to_thread(self.process.wait, 5)
            except subprocess.TimeoutExpired:
                logger.warning("Server did not exit after SIGTERM, killing it")
                self.process.kill()
                await asyncio.to_thread(self.process.wait)
        self.process = None

        logger.info("Server stopped")


async def serve(server: PlaywrightServer) -> int:
    """Run the server until a signal arrives or the process exits on its own."""
    loop = asyncio.get_running_loop()
    stopped = asyncio.Event()

    def on_signal(sig: int) -> None:
        if sig == signal.SIGINT:
            print("\nShutting down...", flush=True)
        stopped.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal, sig)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            signal.signal(sig, lambda s, _frame: loop.call_soon_threadsafe(on_signal, s))

    await server.start()
    print(f"Better Playwright HTTP server started on {server.url}", flush=True)

    exit_code = 0
    try:
        while not stopped.is_set():
            if not server.is_running():
                exit_code = server.process.returncode if server.process else 1
                logger.error(f"Server exited unexpectedly (exit code {exit_code})")
                break
            try:
                await asyncio.wait_for(stopped.wait(), timeout=1.0)
            except asyncio.TimeoutError:
                pass
    finally:
        await server.stop()
    return exit_code


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the better-playwright-server command."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(
        prog="better-playwright-server",
        description="Start the better-playwright HTTP server.",
    )
    parser.add_argument("--headless", action="store_true", help="Run the browser headless")
    parser.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 3102)")
    args = parser.parse_args(argv)

    server = PlaywrightServer(port=args.port, headless=args.headless)
    try:
        return asyncio.run(serve(server))
    except ServerLaunchError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
