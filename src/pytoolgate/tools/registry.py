from __future__ import annotations
import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from .base import Tool, ToolRequest, ToolResponse, ToolSpec
from .errors import Internal, ToolError, UnknownTool
from .permissions import PermissionSet
from .safety import validate_request
from ..events.store import EventStore

console = Console(stderr=True)

@dataclass
class ToolRegistry:
    """Name-keyed tool table plus the single dispatch path.

    Tools are registered during setup only; ``dispatch`` never mutates the
    table. Every request carries a snapshot of the registry's permissions.
    """

    permissions: PermissionSet = field(default_factory=PermissionSet)
    working_directory: Optional[str] = None
    events: Optional[EventStore] = None
    trace: bool = False
    _tools: Dict[str, Tool] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if self.working_directory is None:
            self.working_directory = os.getcwd()

    def register(self, tool: Tool) -> None:
        name = tool.spec.name
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = tool

    def get(self, name: str) -> Tool:
        if name not in self._tools:
            raise UnknownTool(name)
        return self._tools[name]

    def get_optional(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def list_specs(self) -> list[ToolSpec]:
        return [t.spec for t in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def catalog(self) -> list[dict[str, Any]]:
        return [spec.descriptor() for spec in self.list_specs()]

    def openai_tools(self) -> list[dict[str, Any]]:
        """The catalog in the function-calling envelope chat-completions APIs expect."""
        return [
            {
                "type": "function",
                "function": {
                    "name": spec.name,
                    "description": spec.description,
                    "parameters": spec.parameters,
                },
            }
            for spec in self.list_specs()
        ]

    def update_permissions(self, permissions: PermissionSet) -> None:
        if permissions.yolo_mode and not self.permissions.yolo_mode:
            self._record("permission.update", {"yolo_mode": True, "permissions": permissions.to_dict()})
        self.permissions = permissions

    def dispatch(self, tool_name: str, parameters: dict[str, Any] | None = None) -> ToolResponse:
        """Look up, validate and run one tool call.

        Never raises for a tool failure: every error comes back as a
        ``success=False`` response carrying its kind.
        """
        params = dict(parameters or {})
        perms = self.permissions
        if perms.yolo_mode:
            self._record("permission.yolo", {"tool": tool_name})
            console.print(f"[yellow]yolo mode: safety checks bypassed for tool '{escape(tool_name)}'[/yellow]")
        self._record("tool.dispatch", {"tool": tool_name, "parameters": sorted(params)})

        t0 = time.perf_counter()
        try:
            tool = self.get(tool_name)
            request = ToolRequest(
                tool_name=tool_name,
                parameters=params,
                permissions=perms,
                working_directory=self.working_directory,
            )
            tool.validate(request)
            validate_request(request)
            response = tool.execute(request)
        except ToolError as e:
            response = ToolResponse.failure(e)
        except Exception as e:
            response = ToolResponse.failure(Internal(f"{type(e).__name__}: {e}"))
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        self._record(
            "tool.result",
            {
                "tool": tool_name,
                "success": response.success,
                "error_kind": response.error_kind,
                "duration_ms": elapsed_ms,
            },
        )
        if self.trace:
            body = response.content if response.success else (response.error or response.content)
            console.print(
                Panel.fit(
                    Text(body[:1200] + ("..." if len(body) > 1200 else "")),
                    title=f"tool:{escape(tool_name)} ({'ok' if response.success else 'error'}, {elapsed_ms}ms)",
                    border_style="green" if response.success else "red",
                )
            )
        return response

    def close(self) -> None:
        for tool in self._tools.values():
            closer = getattr(tool, "close", None)
            if callable(closer):
                closer()

    def __enter__(self) -> "ToolRegistry":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _record(self, event_type: str, data: dict[str, Any]) -> None:
        if self.events is not None:
            self.events.append(event_type, data)
