"""Tests for the HTTP server launcher.

A small Python HTTP server stands in for the Node.js better-playwright
server, so these run without Node.js installed.
"""

import os
import shlex
import signal
import socket
import subprocess
import sys

import pytest

from better_playwright_mcp import launcher
from better_playwright_mcp.launcher import PlaywrightServer, ServerLaunchError, serve

pytestmark = pytest.mark.skipif(os.name == "nt", reason="POSIX process handling")


FAKE_SERVER = """
import os
import threading
import time
from http.server import BaseHTTPRequestHandler, HTTPServer


class Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        body = b'{"pages": []}'
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


server = HTTPServer(("127.0.0.1", int(os.environ["PORT"])), Handler)
threading.Thread(target=server.serve_forever, daemon=True).start()
time.sleep(float(os.environ.get("FAKE_LIFETIME", "3600")))
raise SystemExit(int(os.environ.get("FAKE_EXIT_CODE", "0")))
"""


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def fake_command(tmp_path, monkeypatch):
    script = tmp_path / "fake_server.py"
    script.write_text(FAKE_SERVER)
    monkeypatch.setenv(
        "BETTER_PLAYWRIGHT_SERVER_COMMAND", shlex.join([sys.executable, str(script)])
    )
    return script


class TestPlaywrightServer:
    """Test server process lifecycle."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        server = PlaywrightServer()
        assert server.port == 3102
        assert server.url == "http://localhost:3102"
        assert not server.is_running()

    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("PORT", "3103")
        assert PlaywrightServer().port == 3103

    def test_explicit_port_wins(self, monkeypatch):
        monkeypatch.setenv("PORT", "3103")
        assert PlaywrightServer(port=4000).port == 4000

    @pytest.mark.asyncio
    async def test_start_and_stop(self, fake_command):
        server = PlaywrightServer(port=free_port(), startup_timeout=15.0)
        try:
            await server.start()
            assert server.is_running()
            assert await server._is_ready()
        finally:
            await server.stop()

        assert server.process is None
        assert not server.is_running()

    @pytest.mark.asyncio
    async def test_stop_twice_is_harmless(self, fake_command):
        server = PlaywrightServer(port=free_port(), startup_timeout=15.0)
        await server.start()
        await server.stop()
        await server.stop()
        assert server.process is None

    @pytest.mark.asyncio
    async def test_early_exit_raises(self, monkeypatch):
        monkeypatch.setenv(
            "BETTER_PLAYWRIGHT_SERVER_COMMAND",
            shlex.join([sys.executable, "-c", "raise SystemExit(3)"]),
        )
        server = PlaywrightServer(port=free_port(), startup_timeout=15.0)

        with pytest.raises(ServerLaunchError, match="exit code 3"):
            await server.start()
        assert server.process is None

    @pytest.mark.asyncio
    async def test_missing_command_raises(self, monkeypatch):
        monkeypatch.setenv("BETTER_PLAYWRIGHT_SERVER_COMMAND", "/nonexistent/better-playwright")
        server = PlaywrightServer(port=free_port())

        with pytest.raises(ServerLaunchError, match="Failed to launch server"):
            await server.start()

    @pytest.mark.asyncio
    async def test_startup_timeout(self, monkeypatch):
        monkeypatch.setenv(
            "BETTER_PLAYWRIGHT_SERVER_COMMAND",
            shlex.join([sys.executable, "-c", "import time; time.sleep(60)"]),
        )
        server = PlaywrightServer(port=free_port(), startup_timeout=1.0)

        with pytest.raises(ServerLaunchError, match="did not answer"):
            await server.start()
        assert server.process is None


class TestServe:
    """Test the run loop used by the console script."""

    @pytest.mark.asyncio
    async def test_prints_url_and_returns_exit_code(self, fake_command, monkeypatch, capsys):
        monkeypatch.setenv("FAKE_LIFETIME", "4")
        monkeypatch.setenv("FAKE_EXIT_CODE", "7")
        server = PlaywrightServer(port=free_port(), startup_timeout=15.0)

        exit_code = await serve(server)

        assert exit_code == 7
        assert (
            f"Better Playwright HTTP server started on http://localhost:{server.port}"
            in capsys.readouterr().out
        )
        assert server.process is None


class TestMain:
    def test_launch_failure_returns_1(self, monkeypatch):
        monkeypatch.setenv("BETTER_PLAYWRIGHT_SERVER_COMMAND", "/nonexistent/better-playwright")
        assert launcher.main(["--port", str(free_port())]) == 1

    @pytest.mark.parametrize("sig", [signal.SIGINT, signal.SIGTERM])
    def test_signal_stops_server_and_exits_cleanly(self, fake_command, sig):
        """The console script shuts the child server down on SIGINT/SIGTERM and exits 0."""
        port = free_port()
        proc = subprocess.Popen(
            [sys.executable, "-m", "better_playwright_mcp.launcher", "--port", str(port)],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
        try:
            # Arrives before exit only if the startup message is flushed
            first_line = proc.stdout.readline()
            assert first_line.strip() == (
                f"Better Playwright HTTP server started on http://localhost:{port}"
            )

            proc.send_signal(sig)
            out, _ = proc.communicate(timeout=20)
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()

        assert proc.returncode == 0
        assert ("Shutting down..." in out) == (sig == signal.SIGINT)
        with pytest.raises(ConnectionRefusedError):
            socket.create_connection(("127.0.0.1", port), timeout=2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
