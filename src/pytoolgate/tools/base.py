from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Protocol

from .errors import ToolError
from .permissions import PermissionSet

@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict[str, Any]   # JSONSchema
    requires_permission: bool = True

    def descriptor(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }

@dataclass(frozen=True)
class ToolRequest:
    tool_name: str
    parameters: dict[str, Any]
    permissions: PermissionSet = field(default_factory=PermissionSet)
    # Base for relative resolution inside a tool (bash cwd); never used to
    # relax the absolute-path requirement on path parameters.
    working_directory: str | None = None

@dataclass
class ToolResponse:
    content: str
    success: bool
    metadata: dict[str, Any] | None = None
    error: str | None = None
    error_kind: str | None = None

    @staticmethod
    def ok(content: str, metadata: dict[str, Any] | None = None) -> "ToolResponse":
        return ToolResponse(content=content, success=True, metadata=metadata)

    @staticmethod
    def failure(err: ToolError, metadata: dict[str, Any] | None = None) -> "ToolResponse":
        return ToolResponse(
            content="",
            success=False,
            # structured fields of the error (count, size, code...) ride along
            metadata=metadata if metadata is not None else (err.fields() or None),
            error=err.render(),
            error_kind=err.kind,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "success": self.success,
            "metadata": self.metadata,
            "error": self.error,
            "error_kind": self.error_kind,
        }

class Tool(Protocol):
    spec: ToolSpec
    def validate(self, request: ToolRequest) -> None: ...
    def execute(self, request: ToolRequest) -> ToolResponse: ...
