from __future__ import annotations

import httpx

from .registry import ToolRegistry
from .permissions import PermissionSet
from ..events.store import EventStore
from ..lsp.protocol import LspHandle

from .builtin_tools.file_read import ReadFileTool
from .builtin_tools.file_write import WriteFileTool
from .builtin_tools.file_edit import EditFileTool
from .builtin_tools.listdir import ListDirTool
from .builtin_tools.grep_tool import GrepTool
from .builtin_tools.bash_tool import BashTool
from .builtin_tools.webfetch_tool import FetchTool
from .builtin_tools.download_tool import DownloadTool
from .builtin_tools.diagnostics_tool import DiagnosticsTool

BUILTIN_TOOL_NAMES = ("read", "write", "edit", "list", "grep", "bash", "fetch", "download", "diagnostics")

def register_builtin_tools(
    registry: ToolRegistry,
    http_client: httpx.Client | None = None,
    lsp: LspHandle | None = None,
) -> None:
    registry.register(ReadFileTool())
    registry.register(WriteFileTool())
    registry.register(EditFileTool())
    registry.register(ListDirTool())
    registry.register(GrepTool())
    registry.register(BashTool())
    registry.register(FetchTool(client=http_client))
    registry.register(DownloadTool(client=http_client))
    registry.register(DiagnosticsTool(lsp=lsp))

def create_registry(
    permissions: PermissionSet | None = None,
    *,
    working_directory: str | None = None,
    events: EventStore | None = None,
    trace: bool = False,
    http_client: httpx.Client | None = None,
    lsp: LspHandle | None = None,
) -> ToolRegistry:
    """A registry holding the nine built-in tools."""
    registry = ToolRegistry(
        permissions=permissions or PermissionSet(),
        working_directory=working_directory,
        events=events,
        trace=trace,
    )
    register_builtin_tools(registry, http_client=http_client, lsp=lsp)
    return registry
