from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from ..args import optional_int, require_str
from ..base import ToolSpec, ToolRequest, ToolResponse
from ..errors import BadParameter, Io, IsDirectory, TooLarge
from ..safety import require_read, validate_path
from ...util.fs import decode_utf8, read_bytes, similar_files, split_lines

MAX_LINE_CHARS = 2000
DEFAULT_LIMIT = 2000
MAX_FILE_BYTES = 250 * 1024

IMAGE_TYPES = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
    ".bmp": "BMP",
    ".svg": "SVG",
    ".webp": "WebP",
}

@dataclass
class ReadFileTool:
    spec: ToolSpec = ToolSpec(
        name="read",
        description=(
            "Read a UTF-8 text file and return its lines prefixed with 1-based line numbers. "
            "Use offset (0-based first line) and limit (line count) to page through large files. "
            "Files over 250KB and image files are refused. "
            "Do not use this for directories; use the list tool instead."
        ),
        requires_permission=False,
        parameters={
            "type": "object",
            "properties": {
                "file_path": {"type": "string", "description": "The absolute path to the file to read."},
                "limit": {"type": "integer", "minimum": 0, "description": "The number of lines to read (defaults to 2000)."},
                "offset": {
                    "type": "integer",
                    "minimum": 0,
                    "default": 0,
                    "description": "Zero-based line number to start reading from (optional, defaults to 0).",
                },
            },
            "required": ["file_path"],
        },
    )

    def validate(self, request: ToolRequest) -> None:
        args = request.parameters
        file_path = require_str(args, "file_path", allow_empty=False)
        optional_int(args, "limit")
        optional_int(args, "offset")
        require_read(request.permissions)
        validate_path(file_path, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        args = request.parameters
        file_path = args["file_path"]
        limit = optional_int(args, "limit", DEFAULT_LIMIT)
        assert limit is not None
        offset = optional_int(args, "offset", 0) or 0

        p = Path(file_path)
        if not p.exists():
            msg = f"File not found: {file_path}"
            suggestions = similar_files(p)
            if suggestions:
                msg += "\n\nDid you mean one of these?\n" + "\n".join(suggestions)
            raise Io(msg)

        if p.is_dir():
            raise IsDirectory(file_path)
        try:
            size = p.stat().st_size
        except OSError as e:
            raise Io(f"Failed to stat file '{file_path}': {e.strerror or e}") from e
        if size > MAX_FILE_BYTES:
            raise TooLarge(size, MAX_FILE_BYTES)
        image_type = IMAGE_TYPES.get(p.suffix.lower())
        if image_type is not None:
            raise BadParameter("file_path", f"Cannot display image file of type: {image_type}")

        raw = read_bytes(p)
        lines = split_lines(decode_utf8(raw, p))
        total = len(lines)

        start = min(offset, total)
        end = min(start + limit, total)

        out = []
        for i, line in enumerate(lines[start:end], start=start + 1):
            if len(line) > MAX_LINE_CHARS:
                line = line[:MAX_LINE_CHARS] + "..."
            out.append(f"{i:4}→{line}")

        content = "\n".join(out)
        if end < total:
            content += f"\n\n(File has more lines. Use 'offset' parameter to read beyond line {end})"
        return ToolResponse.ok(
            content,
            metadata={
                "file_path": file_path,
                "total_lines": total,
                "displayed_lines": end - start,
                "start_line": start + 1,
                "end_line": end,
                "file_size": len(raw),
            },
        )
