"""
HTTP client for the better-playwright server.

Every method maps to exactly one REST call on the server. Responses are
returned as parsed JSON; non-2xx responses raise PlaywrightServerError.
"""

import asyncio
import logging
import os
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3102"
DEFAULT_LINE_LIMIT = 100


class PlaywrightServerError(Exception):
    """The server answered with a non-success status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


def _element_label(ref: str, element: Optional[str]) -> str:
    return element or f"Element with ref={ref}"


class PlaywrightClient:
    """Async client for the better-playwright HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def request(self, method: str, path: str, body: Optional[dict] = None) -> Any:
        """
        Send one request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the base URL, e.g. "/api/pages"
            body: JSON body; omitted from the request when None

        Raises:
            PlaywrightServerError: If the response status is not 2xx
        """
        client = await self._get_client()
        logger.debug(f"{method} {path}")
        resp = await client.request(method, f"{self.base_url}{path}", json=body)
        if not resp.is_success:
            raise PlaywrightServerError(resp.status_code, resp.text)
        return resp.json()

    @staticmethod
    def _page_path(page_id: str, action: Optional[str] = None) -> str:
        path = f"/api/pages/{page_id}"
        return f"{path}/{action}" if action else path

    # -------------------------------------------------------------------------
    # Page management
    # -------------------------------------------------------------------------

    async def create_page(self, name: str, description: str, url: str) -> dict:
        """Create a page and navigate it to url. The result carries the pageId."""
        return await self.request(
            "POST", "/api/pages", {"name": name, "description": description, "url": url}
        )

    async def list_pages(self) -> dict:
        """List open pages."""
        return await self.request("GET", "/api/pages")

    async def close_page(self, page_id: str) -> None:
        """Close a page."""
        await self.request("DELETE", self._page_path(page_id))

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def navigate(self, page_id: str, url: str) -> dict:
        return await self.request("POST", self._page_path(page_id, "navigate"), {"url": url})

    async def navigate_back(self, page_id: str) -> dict:
        return await self.request("POST", self._page_path(page_id, "back"))

    async def navigate_forward(self, page_id: str) -> dict:
        return await self.request("POST", self._page_path(page_id, "forward"))

    async def scroll_to_bottom(self, page_id: str, ref: Optional[str] = None) -> dict:
        """Scroll the page, or the element at ref, to the bottom."""
        return await self.request(
            "POST", self._page_path(page_id, "scroll-bottom"), _compact({"ref": ref})
        )

    async def scroll_to_top(self, page_id: str, ref: Optional[str] = None) -> dict:
        """Scroll the page, or the element at ref, to the top."""
        return await self.request(
            "POST", self._page_path(page_id, "scroll-top"), _compact({"ref": ref})
        )

    # -------------------------------------------------------------------------
    # Ref-based actions
    # -------------------------------------------------------------------------

    async def click(self, page_id: str, ref: str, element: Optional[str] = None) -> dict:
        return await self.request(
            "POST",
            self._page_path(page_id, "click"),
            {"ref": ref, "element": _element_label(ref, element)},
        )

    async def type(
        self, page_id: str, ref: str, text: str, element: Optional[str] = None
    ) -> dict:
        """Type text into the element at ref, key by key."""
        return await self.request(
            "POST",
            self._page_path(page_id, "type"),
            {"ref": ref, "text": text, "element": _element_label(ref, element)},
        )

    async def fill(
        self, page_id: str, ref: str, value: str, element: Optional[str] = None
    ) -> dict:
        """Replace the value of the input at ref."""
        return await self.request(
            "POST",
            self._page_path(page_id, "fill"),
            {"ref": ref, "value": value, "element": _element_label(ref, element)},
        )

    async def select(
        self, page_id: str, ref: str, value: str, element: Optional[str] = None
    ) -> dict:
        """Select an option of the <select> at ref."""
        return await self.request(
            "POST",
            self._page_path(page_id, "select"),
            {"ref": ref, "value": value, "element": _element_label(ref, element)},
        )

    async def hover(self, page_id: str, ref: str, element: Optional[str] = None) -> dict:
        return await self.request(
            "POST",
            self._page_path(page_id, "hover"),
            {"ref": ref, "element": _element_label(ref, element)},
        )

    async def press_key(self, page_id: str, key: str) -> dict:
        """Press a keyboard key, e.g. "Enter" or "Escape"."""
        return await self.request("POST", self._page_path(page_id, "press"), {"key": key})

    async def file_upload(self, page_id: str, ref: str, files: list[str]) -> dict:
        """Set files on the file input at ref."""
        return await self.request(
            "POST", self._page_path(page_id, "upload"), {"ref": ref, "files": files}
        )

    async def handle_dialog(
        self, page_id: str, accept: bool, text: Optional[str] = None
    ) -> dict:
        """Accept or dismiss the pending dialog; text answers a prompt()."""
        return await self.request(
            "POST",
            self._page_path(page_id, "dialog"),
            _compact({"accept": accept, "text": text}),
        )

    # -------------------------------------------------------------------------
    # Waiting
    # -------------------------------------------------------------------------

    async def wait_for_timeout(self, page_id: str, timeout: int) -> dict:
        """Let the page idle for timeout milliseconds."""
        return await self.request(
            "POST", self._page_path(page_id, "wait-timeout"), {"timeout": timeout}
        )

    async def wait_for_selector(
        self, page_id: str, selector: str, options: Optional[dict] = None
    ) -> dict:
        return await self.request(
            "POST",
            self._page_path(page_id, "wait-selector"),
            _compact({"selector": selector, "options": options}),
        )

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    async def screenshot(self, page_id: str, full_page: bool = True) -> str:
        """Take a PNG screenshot. Returns the base64-encoded image."""
        result = await self.request(
            "POST", self._page_path(page_id, "screenshot"), {"fullPage": full_page}
        )
        return result["screenshot"]

    async def get_outline(self, page_id: str) -> str:
        """
        Get the compressed page outline.

        The outline is a folded summary of the page structure (around 200
        lines) with element refs, much smaller than a full snapshot.
        """
        result = await self.request("POST", self._page_path(page_id, "outline"))
        return result["outline"]

    async def search_snapshot(
        self,
        page_id: str,
        pattern: str,
        ignore_case: bool = False,
        line_limit: int = DEFAULT_LINE_LIMIT,
    ) -> dict:
        """
        Search the page snapshot with a regular expression.

        Returns:
            Dict with result (matching lines), matchCount and truncated
        """
        return await self.request(
            "POST",
            self._page_path(page_id, "search"),
            {
                "pattern": pattern,
                "ignoreCase": bool(ignore_case),
                "lineLimit": line_limit or DEFAULT_LINE_LIMIT,
            },
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            client, self._client = self._client, None
            await client.aclose()

    async def __aenter__(self) -> "PlaywrightClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def _compact(body: dict) -> dict:
    """Drop keys whose value is None."""
    return {k: v for k, v in body.items() if v is not None}


def get_base_url() -> str:
    """Base URL of the better-playwright server, from BETTER_PLAYWRIGHT_URL."""
    return os.environ.get("BETTER_PLAYWRIGHT_URL") or DEFAULT_BASE_URL


def get_timeout() -> Optional[float]:
    """Request timeout in seconds from BETTER_PLAYWRIGHT_TIMEOUT; None means no timeout."""
    value = os.environ.get("BETTER_PLAYWRIGHT_TIMEOUT")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid BETTER_PLAYWRIGHT_TIMEOUT: {value!r}")
        return None


# Global client, rebuilt when BETTER_PLAYWRIGHT_URL changes
playwright_client: Optional[PlaywrightClient] = None

_pending_closes: set[asyncio.Task] = set()


def _close_later(stale: PlaywrightClient) -> None:
    """
    Release a replaced client's connections.

    An httpx.AsyncClient only exists once a request ran inside an event loop,
    so closing is scheduled on the running loop. Without one there is
    nothing open to release.
    """
    if stale._client is None or stale._client.is_closed:
        return
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.debug("No running event loop, dropping stale client without closing")
        return
    task = loop.create_task(stale.close())
    _pending_closes.add(task)
    task.add_done_callback(_pending_closes.discard)


def get_client() -> PlaywrightClient:
    """Get or create the shared client for the configured server."""
    global playwright_client
    base_url = get_base_url()

    if playwright_client is None or playwright_client.base_url != base_url.rstrip("/"):
        if playwright_client is not None:
            _close_later(playwright_client)
        playwright_client = PlaywrightClient(base_url, timeout=get_timeout())
        logger.info(f"Using better-playwright server at {base_url}")
    return playwright_client
