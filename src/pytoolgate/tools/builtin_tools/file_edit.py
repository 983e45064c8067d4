from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from ..args import optional_bool, require_str
from ..base import ToolSpec, ToolRequest, ToolResponse
from ..errors import BadParameter, Io, NonUniqueMatch, NotFound
from ..safety import require_write, validate_path
from ...util.fs import atomic_write_bytes, read_text

def replace_text(content: str, old: str, new: str, replace_all: bool) -> tuple[str, int]:
    count = content.count(old)
    if count == 0:
        raise NotFound()
    if not replace_all:
        if count != 1:
            raise NonUniqueMatch(count)
        return content.replace(old, new, 1), 1
    return content.replace(old, new), count

@dataclass
class EditFileTool:
    spec: ToolSpec = ToolSpec(
        name="edit",
        description=(
            "Perform an exact string replacement in a file. The edit FAILS if old_string is not found, "
            "or if it occurs more than once and replace_all is false; enlarge old_string with surrounding "
            "context to make it unique."
        ),
        parameters={
            "type": "object",
            "properties": {
                "file_path": {"type": "string", "description": "The absolute path to the file to modify."},
                "old_string": {"type": "string", "description": "The exact text to replace (non-empty)."},
                "new_string": {
                    "type": "string",
                    "description": "The text to replace it with (must be different from old_string).",
                },
                "replace_all": {
                    "type": "boolean",
                    "default": False,
                    "description": "Replace all occurrences of old_string (default false).",
                },
            },
            "required": ["file_path", "old_string", "new_string"],
        },
    )

    def validate(self, request: ToolRequest) -> None:
        args = request.parameters
        file_path = require_str(args, "file_path", allow_empty=False)
        old = require_str(args, "old_string")
        new = require_str(args, "new_string")
        optional_bool(args, "replace_all", False)
        if not old:
            raise BadParameter("old_string", "old_string cannot be empty")
        if old == new:
            raise BadParameter("new_string", "old_string and new_string cannot be the same")
        require_write(request.permissions)
        validate_path(file_path, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        args = request.parameters
        file_path = args["file_path"]
        old = args["old_string"]
        new = args["new_string"]
        replace_all = optional_bool(args, "replace_all", False)

        p = Path(file_path)
        if not p.exists():
            raise Io(f"File not found: {file_path}")
        current = read_text(p)

        updated, count = replace_text(current, old, new, replace_all)
        try:
            atomic_write_bytes(p, updated.encode("utf-8"))
        except OSError as e:
            raise Io(f"Failed to write file '{file_path}': {e.strerror or e}") from e

        return ToolResponse.ok(
            f"Successfully edited file '{file_path}'. Made {count} replacement(s).",
            metadata={
                "file_path": file_path,
                "replace_all": replace_all,
                "replacements_made": count,
                "original_size": len(current.encode("utf-8")),
                "new_size": len(updated.encode("utf-8")),
            },
        )
