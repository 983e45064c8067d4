from __future__ import annotations

import os
import time

from ..args import optional_str
from ..base import ToolRequest, ToolResponse, ToolSpec
from ..errors import Io
from ..safety import require_read, validate_path
from ...lsp.protocol import Diagnostic, DiagnosticTag, LspClient, LspHandle

WAIT_SECONDS = 5.0
POLL_INTERVAL = 0.1
MAX_PER_BLOCK = 10


def format_diagnostic(path: str, d: Diagnostic) -> str:
    location = f"{path}:{d.line + 1}:{d.character + 1}"
    code = f"[{d.code}]" if d.code else ""
    tags = ""
    if d.tags:
        names = [DiagnosticTag(t).name.lower() for t in d.tags]
        tags = f" ({', '.join(names)})"
    return f"{d.severity.label}: {location} [{d.source or 'unknown'}]{code}{tags} {d.message}"


def _block(tag: str, entries: list[tuple[int, str]]) -> str:
    lines = [line for _, line in entries[:MAX_PER_BLOCK]]
    if len(entries) > MAX_PER_BLOCK:
        lines.append(f"... and {len(entries) - MAX_PER_BLOCK} more diagnostics")
    body = "\n".join(lines)
    return f"\n<{tag}>\n{body}\n</{tag}>\n"


def _count(entries: list[tuple[int, str]], severity: int) -> int:
    return sum(1 for sev, _ in entries if sev == severity)


class DiagnosticsTool:
    """Report language-server diagnostics for one file and the rest of the project."""

    spec = ToolSpec(
        name="diagnostics",
        description=(
            "Get diagnostics (errors, warnings, hints) for a file and/or the project from the attached "
            "language servers. Give file_path to open that file first; omit it for project diagnostics."
        ),
        requires_permission=False,
        parameters={
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "The absolute path to the file to get diagnostics for (omit for project diagnostics).",
                },
            },
            "required": [],
        },
    )

    def __init__(self, lsp: LspHandle | None = None, wait_seconds: float = WAIT_SECONDS) -> None:
        self.lsp = lsp
        self.wait_seconds = wait_seconds

    def validate(self, request: ToolRequest) -> None:
        file_path = optional_str(request.parameters, "file_path")
        if file_path:
            require_read(request.permissions)
            validate_path(file_path, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        if self.lsp is None:
            return ToolResponse.ok("No LSP clients available", metadata={"lsp_available": False})

        file_path = optional_str(request.parameters, "file_path") or None
        target = os.path.normpath(file_path) if file_path else None
        clients: list[LspClient] = []
        if target is not None:
            clients = list(self.lsp.clients_for_file(target))
            before = [c.diagnostics.get(target) for c in clients]
            try:
                for client in clients:
                    if client.is_file_open(target):
                        client.notify_change(target)
                    else:
                        client.open_file(target)
            except Exception as e:
                raise Io(f"Failed to open file in LSP: {e}") from e
            self._wait_for(clients, target, before)

        file_entries, project_entries = self._collect(target, clients)
        content = self._render(file_entries, project_entries)
        return ToolResponse.ok(
            content,
            metadata={
                "lsp_available": True,
                "file_path": file_path,
                "file_diagnostics": len(file_entries),
                "project_diagnostics": len(project_entries),
                "file_errors": _count(file_entries, 1),
                "file_warnings": _count(file_entries, 2),
                "project_errors": _count(project_entries, 1),
                "project_warnings": _count(project_entries, 2),
            },
        )

    def _wait_for(self, clients: list[LspClient], target: str, before: list[object]) -> None:
        """Poll until every client has republished ``target`` or the wait runs out.

        A republish is a new list object under ``target``; the entry seen
        before open/notify does not count.
        """
        deadline = time.monotonic() + self.wait_seconds
        while clients and time.monotonic() < deadline:
            current = [c.diagnostics.get(target) for c in clients]
            if all(now is not None and now is not old for now, old in zip(current, before)):
                return
            time.sleep(POLL_INTERVAL)

    def _all_clients(self, extra: list[LspClient]) -> list[LspClient]:
        assert self.lsp is not None
        seen: set[int] = set()
        out: list[LspClient] = []
        for c in [*self.lsp.clients(), *extra]:
            if id(c) not in seen:
                seen.add(id(c))
                out.append(c)
        return out

    def _collect(self, target: str | None, extra: list[LspClient]) -> tuple[list[tuple[int, str]], list[tuple[int, str]]]:
        file_entries: list[tuple[int, str]] = []
        project_entries: list[tuple[int, str]] = []
        for client in self._all_clients(extra):
            for path, diags in client.diagnostics.items():
                bucket = file_entries if target is not None and os.path.normpath(path) == target else project_entries
                for d in diags:
                    bucket.append((int(d.severity), format_diagnostic(path, d)))
        file_entries.sort()
        project_entries.sort()
        return file_entries, project_entries

    def _render(self, file_entries: list[tuple[int, str]], project_entries: list[tuple[int, str]]) -> str:
        if not file_entries and not project_entries:
            return "No diagnostics found."
        out = ""
        if file_entries:
            out += _block("file_diagnostics", file_entries)
        if project_entries:
            out += _block("project_diagnostics", project_entries)
        out += "\n<diagnostic_summary>\n"
        out += f"Current file: {_count(file_entries, 1)} errors, {_count(file_entries, 2)} warnings\n"
        out += f"Project: {_count(project_entries, 1)} errors, {_count(project_entries, 2)} warnings\n"
        out += "</diagnostic_summary>\n"
        return out
