from __future__ import annotations

from pathlib import Path
from typing import Sequence

import jedi

from .protocol import Diagnostic, LspClient, Severity
from ..util.fs import read_text


class JediClient:
    """In-process stand-in for a Python language server.

    Publishes jedi's syntax errors for every opened ``.py`` file. Results are
    computed synchronously, so they are ready as soon as open/notify returns.
    """

    def __init__(self) -> None:
        self.diagnostics: dict[str, list[Diagnostic]] = {}
        self._open: set[str] = set()

    def is_file_open(self, path: str) -> bool:
        return path in self._open

    def open_file(self, path: str) -> None:
        self._open.add(path)
        self._publish(path)

    def notify_change(self, path: str) -> None:
        self._publish(path)

    def _publish(self, path: str) -> None:
        code = read_text(Path(path))
        script = jedi.Script(code=code, path=path)
        out: list[Diagnostic] = []
        for err in script.get_syntax_errors():
            out.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    line=max(err.line - 1, 0),
                    character=max(err.column, 0),
                    message=err.get_message(),
                    source="jedi",
                    code="syntax-error",
                )
            )
        self.diagnostics[path] = out


class JediLspHandle:
    def __init__(self) -> None:
        self._client = JediClient()

    def clients_for_file(self, path: str) -> Sequence[LspClient]:
        if Path(path).suffix.lower() in (".py", ".pyi"):
            return [self._client]
        return []

    def clients(self) -> Sequence[LspClient]:
        return [self._client]
