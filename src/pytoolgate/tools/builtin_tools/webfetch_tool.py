from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..args import optional_int, require_http_url, require_str
from ..base import ToolRequest, ToolResponse, ToolSpec
from ..errors import BadParameter, BadStatus, Io, NotUtf8, Timeout, TooLarge
from ..safety import require_network
from ...util.html import extract_body, html_to_markdown, html_to_text

USER_AGENT = "pytoolgate/0.1"

MAX_RESPONSE_BYTES = 5 * 1024 * 1024
MAX_DISPLAY_BYTES = 100 * 1024
DEFAULT_TIMEOUT = 30
MAX_TIMEOUT = 120
FORMATS = ("text", "markdown", "html")


def new_http_client() -> httpx.Client:
    return httpx.Client(
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        timeout=DEFAULT_TIMEOUT,
    )


def declared_length(resp: httpx.Response) -> int | None:
    raw = resp.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def truncate_for_display(text: str, limit: int = MAX_DISPLAY_BYTES) -> tuple[str, bool]:
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text, False
    # cut on a byte budget without splitting a code point
    head = encoded[:limit].decode("utf-8", errors="ignore")
    return f"{head}\n\n[Content truncated to {limit} bytes]", True


def format_body(body: str, content_type: str, fmt: str) -> str:
    is_html = "text/html" in content_type.lower()
    if fmt == "text":
        return html_to_text(body) if is_html else body
    if fmt == "markdown":
        return f"```\n{html_to_markdown(body) if is_html else body}\n```"
    if fmt == "html":
        return extract_body(body) if is_html else body
    return body


class FetchTool:
    """GET a URL and return its body as text, markdown or html.

    The httpx client is owned by the tool and reused across calls; pass one
    in to share it (tests hand in a client on a MockTransport).
    """

    spec = ToolSpec(
        name="fetch",
        description=(
            "Fetch content from an http(s) URL and return it as text, markdown or html. "
            "Redirects are followed. Responses over 5MB are refused and the returned content is "
            "truncated to 100KB."
        ),
        parameters={
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "The URL to fetch content from."},
                "format": {
                    "type": "string",
                    "enum": list(FORMATS),
                    "description": "The format to return the content in (text, markdown, or html).",
                },
                "timeout": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": MAX_TIMEOUT,
                    "description": f"Optional timeout in seconds (default {DEFAULT_TIMEOUT}, max {MAX_TIMEOUT}).",
                },
            },
            "required": ["url", "format"],
        },
    )

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._owns_client = client is None
        self.client = client or new_http_client()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def validate(self, request: ToolRequest) -> None:
        args = request.parameters
        require_http_url(args)
        fmt = require_str(args, "format").lower()
        if fmt not in FORMATS:
            raise BadParameter("format", "Format must be one of: text, markdown, html")
        optional_int(args, "timeout", DEFAULT_TIMEOUT, minimum=1, maximum=MAX_TIMEOUT)
        require_network(request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        args: dict[str, Any] = request.parameters
        url = args["url"]
        fmt = args["format"].lower()
        timeout = optional_int(args, "timeout", DEFAULT_TIMEOUT, minimum=1, maximum=MAX_TIMEOUT)
        assert timeout is not None

        raw, content_type = self._get(url, timeout)
        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise NotUtf8() from e

        content, truncated = truncate_for_display(format_body(body, content_type, fmt))
        return ToolResponse.ok(
            content,
            metadata={
                "url": url,
                "format": fmt,
                "content_type": content_type,
                "content_length": len(raw),
                "truncated": truncated,
            },
        )

    def _get(self, url: str, timeout: int) -> tuple[bytes, str]:
        deadline = time.monotonic() + timeout
        try:
            with self.client.stream("GET", url, timeout=timeout) as resp:
                if not resp.is_success:
                    raise BadStatus(resp.status_code)
                size = declared_length(resp)
                if size is not None and size > MAX_RESPONSE_BYTES:
                    raise TooLarge(size, MAX_RESPONSE_BYTES)
                content_type = resp.headers.get("content-type", "unknown")
                buf = bytearray()
                for chunk in resp.iter_bytes():
                    buf.extend(chunk)
                    if len(buf) > MAX_RESPONSE_BYTES:
                        raise TooLarge(len(buf), MAX_RESPONSE_BYTES)
                    if time.monotonic() > deadline:
                        raise Timeout("Fetch", timeout)
        except httpx.TimeoutException as e:
            raise Timeout("Fetch", timeout) from e
        except httpx.HTTPError as e:
            raise Io(f"Fetch failed: {e}") from e
        return bytes(buf), content_type
