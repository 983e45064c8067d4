from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any
import re

from ..args import optional_bool, optional_int, optional_str, require_str
from ..base import ToolSpec, ToolRequest, ToolResponse
from ..errors import BadParameter, InvalidRegex, Io
from ..safety import require_read, validate_path
from ...util.fs import read_text, split_lines

def compile_pattern(pattern: str, case_insensitive: bool) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE if case_insensitive else 0)
    except re.error as e:
        raise InvalidRegex(pattern, str(e)) from e

def search_lines(
    lines: list[str],
    rx: re.Pattern[str],
    *,
    line_numbers: bool = True,
    before: int = 0,
    after: int = 0,
) -> tuple[list[str], int]:
    """Return (formatted output lines, matched line count).

    Overlapping context windows are merged; every line appears once and
    in file order.
    """
    matched = [i for i, line in enumerate(lines) if rx.search(line)]
    hits = set(matched)
    shown: set[int] = set()
    for m in matched:
        shown.update(range(max(0, m - before), min(len(lines), m + after + 1)))

    out = []
    for i in sorted(shown):
        if not line_numbers:
            out.append(lines[i])
        elif i in hits:
            out.append(f"{i + 1:4}:{lines[i]}")
        else:
            out.append(f"{i + 1:4}-{lines[i]}")
    return out, len(matched)

@dataclass
class GrepTool:
    spec: ToolSpec = ToolSpec(
        name="grep",
        description=(
            "Search a file (path) or inline text (content) for a regular expression. "
            "Exactly one of path or content must be given. Matching lines are prefixed 'NNNN:' and "
            "context lines 'NNNN-'."
        ),
        requires_permission=False,
        parameters={
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "The regular expression pattern to search for."},
                "path": {
                    "type": "string",
                    "description": "The absolute path to the file to search (omit when content is given).",
                },
                "content": {"type": "string", "description": "Text content to search (omit when path is given)."},
                "case_insensitive": {"type": "boolean", "default": False, "description": "Case-insensitive search."},
                "line_numbers": {"type": "boolean", "default": True, "description": "Show line numbers in output."},
                "context_before": {
                    "type": "integer",
                    "minimum": 0,
                    "default": 0,
                    "description": "Number of lines to show before each match.",
                },
                "context_after": {
                    "type": "integer",
                    "minimum": 0,
                    "default": 0,
                    "description": "Number of lines to show after each match.",
                },
            },
            "required": ["pattern"],
        },
    )

    def validate(self, request: ToolRequest) -> None:
        args = request.parameters
        pattern = require_str(args, "pattern")
        path = optional_str(args, "path")
        content = optional_str(args, "content")
        if (path is None) == (content is None):
            raise BadParameter("path", "exactly one of 'path' or 'content' must be provided")
        case_insensitive = optional_bool(args, "case_insensitive", False)
        optional_bool(args, "line_numbers", True)
        optional_int(args, "context_before", 0)
        optional_int(args, "context_after", 0)
        compile_pattern(pattern, case_insensitive)
        if path is not None:
            require_read(request.permissions)
            validate_path(path, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        args: dict[str, Any] = request.parameters
        pattern = args["pattern"]
        path = optional_str(args, "path")
        case_insensitive = optional_bool(args, "case_insensitive", False)
        line_numbers = optional_bool(args, "line_numbers", True)
        before = optional_int(args, "context_before", 0) or 0
        after = optional_int(args, "context_after", 0) or 0

        if path is not None:
            p = Path(path)
            if not p.exists():
                raise Io(f"Failed to read file '{path}': file not found")
            text = read_text(p)
        else:
            text = args["content"]

        rx = compile_pattern(pattern, case_insensitive)
        out, matches = search_lines(split_lines(text), rx, line_numbers=line_numbers, before=before, after=after)

        return ToolResponse.ok(
            "\n".join(out) if out else "No matches found.",
            metadata={
                "pattern": pattern,
                "file_path": path,
                "case_insensitive": case_insensitive,
                "line_numbers": line_numbers,
                "context_before": before,
                "context_after": after,
                "matches_found": matches,
            },
        )
