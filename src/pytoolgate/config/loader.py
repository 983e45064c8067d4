from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

import yaml
from platformdirs import user_config_dir

from .models import ToolConfig
from ..tools.permissions import PermissionSet

APP_NAME = "pytoolgate"
CONFIG_NAMES = (".pytoolgate.json", "pytoolgate.json")


def _candidate_paths(cwd: Path) -> list[Path]:
    return [cwd / name for name in CONFIG_NAMES]


def _global_candidate_paths() -> list[Path]:
    return [Path(user_config_dir(APP_NAME)) / "pytoolgate.json"]


def _read_mapping(p: Path) -> dict[str, Any] | None:
    """Parse ``p`` as YAML (by suffix) or JSON; None unless it is a mapping."""
    try:
        text = p.read_text(encoding="utf-8")
        if p.suffix.lower() in (".yaml", ".yml"):
            obj = yaml.safe_load(text)
        else:
            obj = json.loads(text)
    except (OSError, ValueError, yaml.YAMLError):
        return None
    return obj if isinstance(obj, dict) else None


def _deep_merge(base: dict[str, Any], top: dict[str, Any]) -> dict[str, Any]:
    merged = {**base}
    for key, value in top.items():
        below = merged.get(key)
        merged[key] = _deep_merge(below, value) if isinstance(below, dict) and isinstance(value, dict) else value
    return merged


def _layers(cwd: Path, explicit_path: Path | None) -> Iterator[tuple[Path, dict[str, Any]]]:
    """Config sources from lowest to highest priority."""
    for p in _global_candidate_paths():
        obj = _read_mapping(p) if p.is_file() else None
        if obj is not None:
            yield p, obj

    # only the first readable project file counts
    for p in _candidate_paths(cwd):
        obj = _read_mapping(p) if p.is_file() else None
        if obj is not None:
            yield p, obj
            break

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        obj = _read_mapping(p) if p.is_file() else None
        if obj is not None:
            yield p, obj


def load_tool_config(*, cwd: Path, explicit_path: Path | None = None) -> ToolConfig:
    """Load dispatcher config.

    Merge order: global < project < explicit_path. Files that are missing
    or do not parse to a mapping are skipped.
    """
    cfg = ToolConfig()
    merged: dict[str, Any] = {}
    for source, obj in _layers(cwd, explicit_path):
        merged = _deep_merge(merged, obj)
        cfg.loaded_from = source

    cfg.permissions = PermissionSet.from_obj(merged.get("permissions"))

    wd = merged.get("working_directory")
    if isinstance(wd, str) and wd.strip():
        p = Path(wd).expanduser()
        cfg.working_directory = p if p.is_absolute() else cwd / p

    if isinstance(merged.get("trace"), bool):
        cfg.trace = merged["trace"]
    if isinstance(merged.get("lsp"), bool):
        cfg.lsp = merged["lsp"]
    return cfg
