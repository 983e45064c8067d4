from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from pytoolgate.config import loader as config_loader
from pytoolgate.events import store as event_store
from pytoolgate.tools.base import ToolRequest
from pytoolgate.tools.builtin import create_registry
from pytoolgate.tools.permissions import PermissionSet


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path_factory, monkeypatch):
    """Keep config and event files out of the real user directories."""
    data = tmp_path_factory.mktemp("userdata")
    monkeypatch.setattr(config_loader, "_global_candidate_paths", lambda: [])
    monkeypatch.setattr(event_store, "user_data_dir", lambda app: str(data))
    return data


@pytest.fixture
def ws(tmp_path) -> Path:
    d = tmp_path / "ws"
    d.mkdir()
    return d


@pytest.fixture
def rw() -> PermissionSet:
    return PermissionSet(allow_write=True)


@pytest.fixture
def full() -> PermissionSet:
    return PermissionSet.permissive()


def make_request(tool: str, params: dict, permissions: PermissionSet | None = None, cwd: str | None = None) -> ToolRequest:
    return ToolRequest(
        tool_name=tool,
        parameters=params,
        permissions=permissions or PermissionSet(),
        working_directory=cwd,
    )


class FakeServer:
    """Route table for an httpx.MockTransport; records every request path."""

    def __init__(self) -> None:
        self.routes: dict[str, object] = {}
        self.seen: list[str] = []

    def route(self, path: str, handler) -> None:
        self.routes[path] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.seen.append(request.url.path)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)  # type: ignore[operator]


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def http_client(server):
    client = httpx.Client(transport=httpx.MockTransport(server), follow_redirects=True)
    yield client
    client.close()


@pytest.fixture
def registry(ws, full, http_client):
    reg = create_registry(full, working_directory=str(ws), http_client=http_client)
    yield reg
    reg.close()
