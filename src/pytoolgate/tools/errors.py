from __future__ import annotations

from typing import Any


class ToolError(Exception):
    """Base class for every failure a tool call can surface.

    The set of subclasses is closed: the dispatcher turns any other
    exception into ``Internal``.
    """

    kind: str = "Internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def fields(self) -> dict[str, Any]:
        return {}

    def render(self) -> str:
        return f"{self.kind}: {self.message}"


class UnknownTool(ToolError):
    kind = "UnknownTool"

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' not found")
        self.name = name

    def fields(self) -> dict[str, Any]:
        return {"name": self.name}


class MissingParameter(ToolError):
    kind = "MissingParameter"

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required parameter: {name}")
        self.name = name

    def fields(self) -> dict[str, Any]:
        return {"name": self.name}


class BadParameter(ToolError):
    kind = "BadParameter"

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid parameter '{name}': {reason}")
        self.name = name
        self.reason = reason

    def fields(self) -> dict[str, Any]:
        return {"name": self.name, "reason": self.reason}


class RelativePath(ToolError):
    kind = "RelativePath"

    def __init__(self, path: str) -> None:
        super().__init__(f"Path must be absolute: {path}")
        self.path = path


class PathTraversal(ToolError):
    kind = "PathTraversal"

    def __init__(self, path: str) -> None:
        super().__init__(f"Path traversal detected in: {path}")
        self.path = path


class Restricted(ToolError):
    kind = "Restricted"

    def __init__(self, path: str, prefix: str) -> None:
        super().__init__(f"Access to path '{path}' is restricted (under '{prefix}')")
        self.path = path
        self.prefix = prefix


class ReadDenied(ToolError):
    kind = "ReadDenied"

    def __init__(self, message: str = "Read access not permitted") -> None:
        super().__init__(message)


class WriteDenied(ToolError):
    kind = "WriteDenied"

    def __init__(self, message: str = "Write access not permitted") -> None:
        super().__init__(message)


class ExecuteDenied(ToolError):
    kind = "ExecuteDenied"

    def __init__(self, message: str = "Command execution not permitted. Use yolo mode or grant execute permission.") -> None:
        super().__init__(message)


class NetworkDenied(ToolError):
    kind = "NetworkDenied"

    def __init__(self, message: str = "Network access not permitted") -> None:
        super().__init__(message)


class Hazardous(ToolError):
    kind = "Hazardous"

    def __init__(self, matched: str) -> None:
        super().__init__(f"Potentially dangerous command detected: '{matched}'. Use yolo mode to override.")
        self.matched = matched

    def fields(self) -> dict[str, Any]:
        return {"matched": self.matched}


class Io(ToolError):
    kind = "Io"


class NotFound(ToolError):
    kind = "NotFound"

    def __init__(self, message: str = "old_string not found in file") -> None:
        super().__init__(message)


class NonUniqueMatch(ToolError):
    kind = "NonUniqueMatch"

    def __init__(self, count: int) -> None:
        super().__init__(
            f"old_string must appear exactly once in the file. Found {count} occurrences. "
            "Use replace_all=true to replace all instances."
        )
        self.count = count

    def fields(self) -> dict[str, Any]:
        return {"count": self.count}


class IsDirectory(ToolError):
    kind = "IsDirectory"

    def __init__(self, path: str) -> None:
        super().__init__(f"Path is a directory, not a file: {path}")
        self.path = path


class TooLarge(ToolError):
    kind = "TooLarge"

    def __init__(self, size: int, cap: int) -> None:
        super().__init__(f"Response too large: {size} bytes (max {cap} bytes)")
        self.size = size
        self.cap = cap

    def fields(self) -> dict[str, Any]:
        return {"size": self.size, "cap": self.cap}


class BadStatus(ToolError):
    kind = "BadStatus"

    def __init__(self, code: int) -> None:
        super().__init__(f"Request failed with status code: {code}")
        self.code = code

    def fields(self) -> dict[str, Any]:
        return {"code": self.code}


class NotUtf8(ToolError):
    kind = "NotUtf8"

    def __init__(self, message: str = "Response content is not valid UTF-8") -> None:
        super().__init__(message)


class InvalidRegex(ToolError):
    kind = "InvalidRegex"

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid regex pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class Timeout(ToolError):
    kind = "Timeout"

    def __init__(self, what: str, after: float) -> None:
        super().__init__(f"{what} timed out after {after:g}s")
        self.after = after

    def fields(self) -> dict[str, Any]:
        return {"after": self.after}


class Internal(ToolError):
    kind = "Internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)


ERROR_KINDS: tuple[str, ...] = (
    "UnknownTool",
    "MissingParameter",
    "BadParameter",
    "RelativePath",
    "PathTraversal",
    "Restricted",
    "ReadDenied",
    "WriteDenied",
    "ExecuteDenied",
    "NetworkDenied",
    "Hazardous",
    "Io",
    "NotFound",
    "NonUniqueMatch",
    "IsDirectory",
    "TooLarge",
    "BadStatus",
    "NotUtf8",
    "InvalidRegex",
    "Timeout",
    "Internal",
)
