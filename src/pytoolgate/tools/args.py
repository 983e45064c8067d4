from __future__ import annotations

from typing import Any

from .errors import BadParameter, MissingParameter


def require_str(args: dict[str, Any], name: str, *, allow_empty: bool = True) -> str:
    if name not in args or args[name] is None:
        raise MissingParameter(name)
    v = args[name]
    if not isinstance(v, str):
        raise BadParameter(name, "must be a string")
    if not allow_empty and not v:
        raise BadParameter(name, "must not be empty")
    return v


def optional_str(args: dict[str, Any], name: str) -> str | None:
    v = args.get(name)
    if v is None:
        return None
    if not isinstance(v, str):
        raise BadParameter(name, "must be a string")
    return v


def optional_int(
    args: dict[str, Any],
    name: str,
    default: int | None = None,
    *,
    minimum: int = 0,
    maximum: int | None = None,
) -> int | None:
    v = args.get(name)
    if v is None:
        return default
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(v, bool):
        raise BadParameter(name, "must be an integer")
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    if not isinstance(v, int):
        raise BadParameter(name, "must be an integer")
    if v < minimum:
        raise BadParameter(name, f"must be >= {minimum}")
    if maximum is not None and v > maximum:
        raise BadParameter(name, f"cannot exceed {maximum}")
    return v


def optional_bool(args: dict[str, Any], name: str, default: bool) -> bool:
    v = args.get(name)
    if v is None:
        return default
    if not isinstance(v, bool):
        raise BadParameter(name, "must be a boolean")
    return v


def optional_str_list(args: dict[str, Any], name: str) -> list[str]:
    v = args.get(name)
    if v is None:
        return []
    if not isinstance(v, list) or not all(isinstance(x, str) for x in v):
        raise BadParameter(name, "must be an array of strings")
    return list(v)


def require_http_url(args: dict[str, Any], name: str = "url") -> str:
    url = require_str(args, name, allow_empty=False)
    if not (url.startswith("http://") or url.startswith("https://")):
        raise BadParameter(name, "URL must start with http:// or https://")
    return url
