from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

DEFAULT_RESTRICTED_PATHS: tuple[str, ...] = ("/etc", "/sys", "/proc", "/dev")

_FLAGS = ("allow_read", "allow_write", "allow_execute", "allow_network", "yolo_mode")


@dataclass(frozen=True)
class PermissionSet:
    """Capability bundle attached to every tool request.

    Instances are immutable; callers that want to grant or drop a right
    build a new one with ``replace``.
    """

    allow_read: bool = True
    allow_write: bool = False
    allow_execute: bool = False
    allow_network: bool = False
    restricted_paths: tuple[str, ...] = field(default=DEFAULT_RESTRICTED_PATHS)
    yolo_mode: bool = False

    def __post_init__(self) -> None:
        # accept any iterable (lists from JSON/YAML) but store a tuple
        if not isinstance(self.restricted_paths, tuple):
            object.__setattr__(self, "restricted_paths", tuple(self.restricted_paths))

    def replace(self, **changes: Any) -> "PermissionSet":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allow_read": self.allow_read,
            "allow_write": self.allow_write,
            "allow_execute": self.allow_execute,
            "allow_network": self.allow_network,
            "restricted_paths": list(self.restricted_paths),
            "yolo_mode": self.yolo_mode,
        }

    @staticmethod
    def from_obj(obj: Any, base: "PermissionSet | None" = None) -> "PermissionSet":
        """Build a set from a config mapping, layered over ``base``.

        Unknown keys are ignored and values of the wrong type keep the
        value from ``base``.
        """
        base = base or PermissionSet()
        if not isinstance(obj, dict):
            return base
        changes: dict[str, Any] = {}
        for key in _FLAGS:
            v = obj.get(key)
            if isinstance(v, bool):
                changes[key] = v
        rp = obj.get("restricted_paths")
        if isinstance(rp, list) and all(isinstance(x, str) for x in rp):
            changes["restricted_paths"] = tuple(rp)
        return base.replace(**changes) if changes else base

    @staticmethod
    def permissive() -> "PermissionSet":
        return PermissionSet(allow_read=True, allow_write=True, allow_execute=True, allow_network=True)
