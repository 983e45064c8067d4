from __future__ import annotations
from dataclasses import dataclass
from difflib import SequenceMatcher
from pathlib import Path

from ..args import require_str
from ..base import ToolSpec, ToolRequest, ToolResponse
from ..errors import Io, IsDirectory
from ..safety import require_write, validate_path
from ...util.fs import atomic_write_bytes, split_lines

def diff_stats(old: str, new: str) -> tuple[int, int]:
    """Line additions and removals between two texts."""
    old_lines = split_lines(old)
    new_lines = split_lines(new)
    additions = removals = 0
    for tag, i1, i2, j1, j2 in SequenceMatcher(None, old_lines, new_lines, autojunk=False).get_opcodes():
        if tag in ("replace", "delete"):
            removals += i2 - i1
        if tag in ("replace", "insert"):
            additions += j2 - j1
    return additions, removals

@dataclass
class WriteFileTool:
    spec: ToolSpec = ToolSpec(
        name="write",
        description=(
            "Create or overwrite a file with the given content. Parent directories are created as needed "
            "and the file is replaced atomically. Writing identical content is a no-op. "
            "Read a file before overwriting it."
        ),
        parameters={
            "type": "object",
            "properties": {
                "file_path": {"type": "string", "description": "The absolute path to the file to write."},
                "content": {"type": "string", "description": "The full content to write to the file."},
            },
            "required": ["file_path", "content"],
        },
    )

    def validate(self, request: ToolRequest) -> None:
        args = request.parameters
        file_path = require_str(args, "file_path", allow_empty=False)
        require_str(args, "content")
        require_write(request.permissions)
        validate_path(file_path, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        file_path = request.parameters["file_path"]
        content = request.parameters["content"]
        p = Path(file_path)
        if p.is_dir():
            raise IsDirectory(file_path)

        data = content.encode("utf-8")
        was_new = not p.exists()
        old_raw = b""
        if not was_new:
            try:
                old_raw = p.read_bytes()
            except OSError as e:
                raise Io(f"Error reading existing file: {e.strerror or e}") from e

        if not was_new and old_raw == data:
            return ToolResponse.ok(
                f"File {file_path} already contains the exact content. No changes made.",
                metadata={
                    "file_path": file_path,
                    "content_changed": False,
                    "was_new_file": False,
                    "file_size": len(data),
                    "additions": 0,
                    "removals": 0,
                },
            )

        if was_new:
            additions, removals = len(split_lines(content)), 0
        else:
            additions, removals = diff_stats(old_raw.decode("utf-8", errors="replace"), content)

        try:
            atomic_write_bytes(p, data)
        except OSError as e:
            raise Io(f"Error writing file '{file_path}': {e.strerror or e}") from e

        if was_new:
            info = f" (new file, {additions} lines)"
        else:
            info = f" (+{additions} -{removals} lines)"
        return ToolResponse.ok(
            f"File successfully written: {file_path}{info}",
            metadata={
                "file_path": file_path,
                "content_changed": True,
                "was_new_file": was_new,
                "file_size": len(data),
                "additions": additions,
                "removals": removals,
            },
        )
