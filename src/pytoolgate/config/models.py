from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..tools.permissions import PermissionSet


@dataclass
class ToolConfig:
    """Dispatcher settings loaded from JSON/YAML.

    Keys: ``permissions`` (mapping of PermissionSet fields),
    ``working_directory``, ``trace``, ``lsp`` (attach the jedi diagnostics
    client).
    """

    permissions: PermissionSet = field(default_factory=PermissionSet)
    working_directory: Path | None = None
    trace: bool = False
    lsp: bool = True

    loaded_from: Path | None = None
