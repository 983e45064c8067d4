from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path
from typing import Any

import httpx

from ..args import optional_int, require_http_url, require_str
from ..base import ToolRequest, ToolResponse, ToolSpec
from ..errors import BadStatus, Io, IsDirectory, Timeout, TooLarge
from ..safety import require_network, require_write, validate_path
from ...util.fs import remove_quietly
from .webfetch_tool import declared_length, new_http_client

MAX_DOWNLOAD_BYTES = 100 * 1024 * 1024
DEFAULT_TIMEOUT = 300
MAX_TIMEOUT = 600


class DownloadTool:
    """Stream a URL to disk.

    Bytes land in a temporary sibling of ``file_path`` that is renamed into
    place only once the body is complete, so a failed or oversized download
    never leaves a file at the target.
    """

    spec = ToolSpec(
        name="download",
        description=(
            "Download binary content from an http(s) URL and save it to a local file. "
            "Parent directories are created as needed. Downloads over 100MB are refused."
        ),
        parameters={
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "The URL to download from."},
                "file_path": {"type": "string", "description": "The absolute path where the file should be saved."},
                "timeout": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": MAX_TIMEOUT,
                    "description": f"Optional timeout in seconds (default {DEFAULT_TIMEOUT}, max {MAX_TIMEOUT}).",
                },
            },
            "required": ["url", "file_path"],
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
        file_path = require_str(args, "file_path", allow_empty=False)
        optional_int(args, "timeout", DEFAULT_TIMEOUT, minimum=1, maximum=MAX_TIMEOUT)
        require_network(request.permissions)
        require_write(request.permissions)
        validate_path(file_path, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        args: dict[str, Any] = request.parameters
        url = args["url"]
        file_path = args["file_path"]
        timeout = optional_int(args, "timeout", DEFAULT_TIMEOUT, minimum=1, maximum=MAX_TIMEOUT)
        assert timeout is not None

        target = Path(file_path)
        if target.is_dir():
            raise IsDirectory(file_path)

        deadline = time.monotonic() + timeout
        try:
            with self.client.stream("GET", url, timeout=timeout) as resp:
                if not resp.is_success:
                    raise BadStatus(resp.status_code)
                size = declared_length(resp)
                if size is not None and size > MAX_DOWNLOAD_BYTES:
                    raise TooLarge(size, MAX_DOWNLOAD_BYTES)
                content_type = resp.headers.get("content-type", "unknown")
                written = self._stream_to(target, resp, deadline, timeout)
        except httpx.TimeoutException as e:
            raise Timeout("Download", timeout) from e
        except httpx.HTTPError as e:
            raise Io(f"Download failed: {e}") from e

        return ToolResponse.ok(
            f"Successfully downloaded {written} bytes to {file_path} (Content-Type: {content_type})",
            metadata={
                "url": url,
                "file_path": file_path,
                "bytes_downloaded": written,
                "content_type": content_type,
            },
        )

    def _stream_to(self, target: Path, resp: httpx.Response, deadline: float, timeout: int) -> int:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=str(target.parent))
        except OSError as e:
            raise Io(f"Failed to create file '{target}': {e.strerror or e}") from e

        tmp = Path(tmp_name)
        written = 0
        try:
            with os.fdopen(fd, "wb") as f:
                for chunk in resp.iter_bytes():
                    written += len(chunk)
                    if written > MAX_DOWNLOAD_BYTES:
                        raise TooLarge(written, MAX_DOWNLOAD_BYTES)
                    if time.monotonic() > deadline:
                        raise Timeout("Download", timeout)
                    f.write(chunk)
            os.replace(tmp, target)
        except OSError as e:
            remove_quietly(tmp)
            raise Io(f"Failed to write file '{target}': {e.strerror or e}") from e
        except BaseException:
            remove_quietly(tmp)
            raise
        return written
