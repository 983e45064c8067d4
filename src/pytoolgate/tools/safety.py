"""Pure decision functions shared by the dispatcher and the tools.

These checks stop accidental destructive actions suggested by a model.
They are not a sandbox: the operating system remains the real boundary.
"""
from __future__ import annotations

import os
import re
from typing import Any

from .base import ToolRequest
from .errors import (
    BadParameter,
    ExecuteDenied,
    Hazardous,
    NetworkDenied,
    PathTraversal,
    ReadDenied,
    RelativePath,
    Restricted,
    WriteDenied,
)
from .permissions import PermissionSet

# Matched as plain substrings against the command padded with one space on
# each side, so entries with a leading space only hit whole words.
HAZARDOUS_PATTERNS: tuple[str, ...] = (
    # destructive file operations
    "rm -rf",
    "rm -fr",
    "rm -r /",
    # disk formatting / raw device writes
    "mkfs",
    "fdisk",
    "dd if=",
    "> /dev/sd",
    # fork bombs
    ":(){ :|:& };:",
    ":(){:|:&};:",
    # power state
    "shutdown",
    "reboot",
    "halt",
    "poweroff",
    # broad permission changes
    "chmod 777",
    "chmod -R",
    "chown root",
    "chown -R",
    # inline script interpreters
    "python -c",
    "python3 -c",
    "perl -e",
    "ruby -e",
    "node -e",
    # raw network binaries
    " curl ",
    " wget ",
    " nc ",
    " ncat ",
    " netcat ",
    " telnet ",
    " socat ",
)

_SEGMENT_SPLIT = re.compile(r"[\\/]+")


def find_hazard(command: str) -> str | None:
    padded = f" {command} "
    for pattern in HAZARDOUS_PATTERNS:
        if pattern in padded:
            return pattern.strip()
    return None


def _normalize_prefix(prefix: str) -> str:
    p = os.path.normpath(prefix)
    return p if p != "." else prefix


def _restricted_prefix(candidate: str, permissions: PermissionSet) -> str | None:
    for prefix in permissions.restricted_paths:
        if candidate.startswith(_normalize_prefix(prefix)):
            return prefix
    return None


def validate_path(path: str, permissions: PermissionSet) -> str:
    """Check that ``path`` may be touched under ``permissions``.

    Returns the normalized path. Raises RelativePath, PathTraversal or
    Restricted. ``yolo_mode`` skips everything but the absolute-path rule.
    """
    if not os.path.isabs(path):
        raise RelativePath(path)
    if permissions.yolo_mode:
        return os.path.normpath(path)

    hit = _restricted_prefix(path, permissions)
    if hit is not None:
        raise Restricted(path, hit)

    if ".." in _SEGMENT_SPLIT.split(path):
        raise PathTraversal(path)

    normalized = os.path.normpath(path)
    # realpath also resolves the existing prefix of a path that is not
    # there yet, so a new file under a linked directory is caught too
    for c in (normalized, os.path.realpath(normalized)):
        hit = _restricted_prefix(c, permissions)
        if hit is not None:
            raise Restricted(path, hit)
    return normalized


def validate_command(command: str, permissions: PermissionSet) -> None:
    if not permissions.allow_execute and not permissions.yolo_mode:
        raise ExecuteDenied()
    if permissions.yolo_mode:
        return
    matched = find_hazard(command)
    if matched is not None:
        raise Hazardous(matched)


def require_read(permissions: PermissionSet) -> None:
    if not permissions.allow_read and not permissions.yolo_mode:
        raise ReadDenied()


def require_write(permissions: PermissionSet) -> None:
    if not permissions.allow_write and not permissions.yolo_mode:
        raise WriteDenied()


def require_network(permissions: PermissionSet) -> None:
    if not permissions.allow_network and not permissions.yolo_mode:
        raise NetworkDenied()


def validate_request(request: ToolRequest) -> None:
    """Checks the dispatcher applies to every call after the tool's own validate."""
    if not request.tool_name:
        raise BadParameter("tool_name", "Tool name cannot be empty")

    params: dict[str, Any] = request.parameters
    for key in ("file_path", "path"):
        v = params.get(key)
        # an empty string means the optional path was left out
        if isinstance(v, str) and v:
            validate_path(v, request.permissions)

    command = params.get("command")
    if isinstance(command, str):
        validate_command(command, request.permissions)
