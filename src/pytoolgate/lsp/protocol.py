from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol, Sequence


class Severity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4

    @property
    def label(self) -> str:
        return {1: "Error", 2: "Warn", 3: "Info", 4: "Hint"}[int(self)]


class DiagnosticTag(IntEnum):
    UNNECESSARY = 1
    DEPRECATED = 2


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    line: int        # 0-based
    character: int   # 0-based
    message: str
    source: str | None = None
    code: str | None = None
    tags: tuple[DiagnosticTag, ...] = ()


class LspClient(Protocol):
    """One language server as the diagnostics tool sees it.

    ``diagnostics`` maps absolute file paths to the latest published list.
    """

    diagnostics: dict[str, list[Diagnostic]]

    def is_file_open(self, path: str) -> bool: ...
    def open_file(self, path: str) -> None: ...
    def notify_change(self, path: str) -> None: ...


class LspHandle(Protocol):
    def clients_for_file(self, path: str) -> Sequence[LspClient]: ...
    def clients(self) -> Sequence[LspClient]: ...
