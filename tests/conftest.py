"""Pytest configuration and fixtures for better-playwright-mcp tests."""

import json

import httpx
import pytest

from better_playwright_mcp import client as client_module
from better_playwright_mcp.client import DEFAULT_BASE_URL, PlaywrightClient


class FakeServer:
    """
    In-process stand-in for the better-playwright HTTP server.

    Routes map (method, path) to (status, payload). A dict or list payload is
    sent as JSON, a str as plain text. Unrouted requests get 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], tuple[int, object]] = {}
        self.requests: list[dict] = []

    def route(self, method: str, path: str, payload: object = None, status: int = 200):
        self.routes[(method, path)] = (status, {} if payload is None else payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append({
            "method": request.method,
            "path": request.url.path,
            "body": body,
            "headers": request.headers,
        })

        status, payload = self.routes.get(
            (request.method, request.url.path), (404, "Not found")
        )
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    def client(self, base_url: str = DEFAULT_BASE_URL) -> PlaywrightClient:
        return PlaywrightClient(base_url, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_server():
    return FakeServer()


@pytest.fixture
def shared_client(fake_server, monkeypatch):
    """Install a fake-backed client as the process-wide client."""
    monkeypatch.delenv("BETTER_PLAYWRIGHT_URL", raising=False)
    client = fake_server.client()
    monkeypatch.setattr(client_module, "playwright_client", client)
    return client
