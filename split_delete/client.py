import asyncio
import json
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple
from urllib.parse import quote, urlencode

import aiohttp

from split_delete.console import echo, echo_error
from split_delete.models import DEFAULT_BASE_URL, PAGE_SIZE, LogLevel

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)
REDACTED_AUTHORIZATION = "Bearer [REDACTED]"


def decode_body(raw: bytes) -> Any:
    # Undecodable bytes must not abort a listing
    text = raw.decode("utf-8", errors="replace") if raw else ""
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def error_message(body: Any) -> Any:
    """Best-effort message from an API error body."""
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return body


class SplitAdminClient:
    """Thin async wrapper over the Admin API for one workspace.

    Non-2xx statuses are returned to the caller, never raised. Transport
    failures (connection errors, timeouts) propagate as aiohttp or asyncio
    exceptions so each call site can decide how to report them.
    """

    def __init__(
        self,
        api_key: str,
        workspace_id: str,
        base_url: str = DEFAULT_BASE_URL,
        log_level: LogLevel = LogLevel.DEFAULT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.api_key = api_key
        self.workspace_id = workspace_id
        self.base_url = base_url.rstrip("/")
        self.log_level = log_level
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "SplitAdminClient":
        if self.session is None:
            # Requests are strictly sequential, a small pool is plenty
            connector = aiohttp.TCPConnector(
                limit=4, ttl_dns_cache=300, use_dns_cache=True
            )
            timeout = aiohttp.ClientTimeout(total=60, connect=10)
            self.session = aiohttp.ClientSession(connector=connector, timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session and self._owns_session:
            await self.session.close()

    def workspace_path(self, family: str, name: Optional[str] = None) -> str:
        path = f"/{family}/ws/{quote(self.workspace_id, safe='')}"
        if name is not None:
            path = f"{path}/{quote(name, safe='')}"
        return path

    def _url(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url}{normalized}"

    def _headers(self, method: str) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        if method == "DELETE":
            headers["Content-Type"] = "application/json"
        return headers

    def _log_request(self, label: str, url: str, headers: Dict[str, str]) -> None:
        if self.log_level >= LogLevel.DEBUG:
            echo(f"[DEBUG] {label.upper()} URL: {url}")
        if self.log_level >= LogLevel.TRACE:
            safe_headers = {**headers, "Authorization": REDACTED_AUTHORIZATION}
            echo(f"[TRACE] Headers: {safe_headers}")

    async def request(self, method: str, path: str, label: str = "") -> Tuple[int, Any]:
        if not self.session:
            raise RuntimeError("HTTP session not initialized")

        url = self._url(path)
        headers = self._headers(method)
        self._log_request(label or method, url, headers)

        async with self.session.request(method, url, headers=headers) as response:
            status = response.status
            body = decode_body(await response.read())

        if self.log_level >= LogLevel.DEBUG:
            echo(f"[DEBUG] Response status: {status}")
            echo(f"[DEBUG] Response data: {body}")
        return status, body

    async def stream_pages(
        self, path: str, label: str
    ) -> AsyncIterator[Tuple[int, List[Dict[str, Any]]]]:
        """
        Generator yielding pages of objects using limit/offset paging.
        Always starts from offset 0 and stops after the first short page.
        A failed request ends the stream after reporting it; the pages
        already yielded stand.
        """
        offset = 0
        page_number = 0

        while True:
            query = urlencode({"limit": PAGE_SIZE, "offset": offset})
            try:
                status, body = await self.request(
                    "GET", f"{path}?{query}", label=f"list {label}"
                )
            except TRANSPORT_ERRORS as error:
                echo_error(f"Error listing {label}: {error}")
                return

            objects = body.get("objects") if isinstance(body, dict) else None
            if status != 200 or not isinstance(objects, list):
                echo_error(f"Failed to list {label}: {status} - {error_message(body)}")
                return

            page_number += 1
            yield page_number, objects

            if len(objects) < PAGE_SIZE:
                return
            offset += PAGE_SIZE

    async def list_names(self, path: str, label: str) -> List[str]:
        names: List[str] = []
        async for _, objects in self.stream_pages(path, label):
            for item in objects:
                name = item.get("name") if isinstance(item, dict) else None
                if name:
                    names.append(name)
        return names
