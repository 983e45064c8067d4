from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from ..args import optional_str_list, require_str
from ..base import ToolSpec, ToolRequest, ToolResponse
from ..errors import Io
from ..safety import require_read, validate_path

def should_ignore(name: str, patterns: list[str]) -> bool:
    for pat in patterns:
        if pat.endswith("*"):
            if name.startswith(pat[:-1]):
                return True
        elif pat.startswith("*"):
            if name.endswith(pat[1:]):
                return True
        elif name == pat:
            return True
    return False

@dataclass
class ListDirTool:
    spec: ToolSpec = ToolSpec(
        name="list",
        description=(
            "List the direct children of a directory: subdirectories first (suffixed '/'), then files, "
            "each group sorted. Entries matching an ignore pattern are skipped; a pattern ending in '*' "
            "matches a prefix, one starting with '*' matches a suffix, anything else matches exactly."
        ),
        requires_permission=False,
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "The absolute path to the directory to list."},
                "ignore": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of simple glob patterns to ignore.",
                },
            },
            "required": ["path"],
        },
    )

    def validate(self, request: ToolRequest) -> None:
        args = request.parameters
        path = require_str(args, "path", allow_empty=False)
        optional_str_list(args, "ignore")
        require_read(request.permissions)
        validate_path(path, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        path = request.parameters["path"]
        ignore = optional_str_list(request.parameters, "ignore")
        p = Path(path)
        if not p.exists():
            raise Io(f"Path not found: {path}")
        if not p.is_dir():
            raise Io(f"Not a directory: {path}")

        dirs: list[str] = []
        files: list[str] = []
        try:
            for child in p.iterdir():
                if should_ignore(child.name, ignore):
                    continue
                if child.is_dir():
                    dirs.append(child.name)
                else:
                    files.append(child.name)
        except OSError as e:
            raise Io(f"Failed to read directory '{path}': {e.strerror or e}") from e

        header = f"- {p.name or p.anchor or '/'}/"
        lines = [header]
        lines += [f"    {d}/" for d in sorted(dirs)]
        lines += [f"      {f}" for f in sorted(files)]
        return ToolResponse.ok(
            "\n".join(lines),
            metadata={
                "path": path,
                "total_items": len(dirs) + len(files),
                "ignore_patterns": ignore,
            },
        )
