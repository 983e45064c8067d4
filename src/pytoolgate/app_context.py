from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config.loader import load_tool_config
from .events.store import EventStore
from .lsp.jedi_client import JediLspHandle
from .tools.builtin import create_registry
from .tools.permissions import PermissionSet
from .tools.registry import ToolRegistry

@dataclass
class AppContext:
    cwd: Path
    tools: ToolRegistry
    permissions: PermissionSet
    events: EventStore | None = None
    trace: bool = False
    config_path: Optional[Path] = None

    def close(self) -> None:
        self.tools.close()

    @staticmethod
    def from_options(
        cwd: Path,
        session_id: str | None = None,
        config_path: Optional[Path] = None,
        allow_write: bool = False,
        allow_execute: bool = False,
        allow_network: bool = False,
        no_read: bool = False,
        yolo: bool = False,
        trace: bool = False,
    ) -> "AppContext":
        cfg = load_tool_config(cwd=cwd, explicit_path=config_path)

        # Start from config, then CLI flags. Flags only ever add rights,
        # except --no-read.
        perms = cfg.permissions
        changes: dict[str, bool] = {}
        if allow_write:
            changes["allow_write"] = True
        if allow_execute:
            changes["allow_execute"] = True
        if allow_network:
            changes["allow_network"] = True
        if no_read:
            changes["allow_read"] = False
        if yolo:
            changes["yolo_mode"] = True
        if changes:
            perms = perms.replace(**changes)

        events = EventStore.open(session_id) if session_id else None
        working_directory = cfg.working_directory or cwd
        tools = create_registry(
            perms,
            working_directory=str(working_directory),
            events=events,
            trace=trace or cfg.trace,
            lsp=JediLspHandle() if cfg.lsp else None,
        )

        return AppContext(
            cwd=cwd,
            tools=tools,
            permissions=perms,
            events=events,
            trace=trace or cfg.trace,
            config_path=cfg.loaded_from,
        )
