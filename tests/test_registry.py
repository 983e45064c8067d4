from __future__ import annotations

import json
import os

import httpx
import pytest

from pytoolgate.events.store import EventStore
from pytoolgate.tools import errors
from pytoolgate.tools.base import ToolResponse, ToolSpec
from pytoolgate.tools.builtin import BUILTIN_TOOL_NAMES, create_registry
from pytoolgate.tools.errors import UnknownTool
from pytoolgate.tools.permissions import PermissionSet
from pytoolgate.tools.registry import ToolRegistry


class Exploding:
    spec = ToolSpec(name="explode", description="always fails", parameters={"type": "object", "properties": {}})

    def validate(self, request):
        pass

    def execute(self, request):
        raise KeyError("boom")


class Echo:
    spec = ToolSpec(
        name="echo",
        description="echo a path",
        parameters={"type": "object", "properties": {"path": {"type": "string"}}},
        requires_permission=False,
    )

    def __init__(self):
        self.calls = 0
        self.closed = False

    def validate(self, request):
        pass

    def execute(self, request):
        self.calls += 1
        return ToolResponse.ok(str(request.parameters.get("path")))

    def close(self):
        self.closed = True


def test_catalog_lists_builtins_in_order(registry):
    assert registry.names() == list(BUILTIN_TOOL_NAMES)
    catalog = registry.catalog()
    assert [d["name"] for d in catalog] == list(BUILTIN_TOOL_NAMES)
    for d in catalog:
        assert set(d) == {"name", "description", "input_schema"}
        assert d["input_schema"]["type"] == "object"
    json.dumps(catalog)


def test_openai_envelope(registry):
    tools = registry.openai_tools()
    assert len(tools) == 9
    assert tools[0] == {
        "type": "function",
        "function": {
            "name": "read",
            "description": registry.get("read").spec.description,
            "parameters": registry.get("read").spec.parameters,
        },
    }


def test_lookup():
    reg = ToolRegistry()
    reg.register(Echo())
    assert "echo" in reg
    assert "nope" not in reg
    assert len(reg) == 1
    assert reg.get_optional("nope") is None
    with pytest.raises(UnknownTool):
        reg.get("nope")
    with pytest.raises(ValueError):
        reg.register(Echo())


def test_default_working_directory():
    assert ToolRegistry().working_directory == os.getcwd()


def test_unknown_tool_is_a_failed_response(registry):
    res = registry.dispatch("teleport", {})
    assert res.success is False
    assert res.error_kind == "UnknownTool"
    assert res.error == "UnknownTool: Tool 'teleport' not found"


def test_unexpected_exception_becomes_internal():
    reg = ToolRegistry()
    reg.register(Exploding())
    res = reg.dispatch("explode", {})
    assert res.success is False
    assert res.error_kind == "Internal"
    assert "KeyError" in res.error


def test_common_checks_run_after_tool_validate():
    reg = ToolRegistry()
    echo = Echo()
    reg.register(echo)
    res = reg.dispatch("echo", {"path": "/tmp/../etc/shadow"})
    assert res.error_kind == "PathTraversal"
    assert echo.calls == 0


def test_missing_parameter(registry):
    res = registry.dispatch("read", {})
    assert res.error_kind == "MissingParameter"


def test_write_denied_leaves_no_file(ws):
    target = ws / "nope.txt"
    with create_registry(PermissionSet(), working_directory=str(ws)) as reg:
        res = reg.dispatch("write", {"file_path": str(target), "content": "x"})
    assert res.error_kind == "WriteDenied"
    assert not target.exists()


def test_write_then_read(registry, ws):
    path = str(ws / "tA.txt")
    res = registry.dispatch("write", {"file_path": path, "content": "hello\nworld\n"})
    assert res.success
    assert res.metadata["was_new_file"] is True
    assert res.metadata["additions"] == 2

    res = registry.dispatch("read", {"file_path": path})
    assert res.success
    assert "   1→hello" in res.content.splitlines()
    assert "   2→world" in res.content.splitlines()
    assert res.metadata["total_lines"] == 2


def test_edit_requires_unique_match(registry, ws):
    f = ws / "tB.txt"
    f.write_text("foo\nfoo\n", encoding="utf-8")
    res = registry.dispatch("edit", {"file_path": str(f), "old_string": "foo", "new_string": "bar"})
    assert res.success is False
    assert res.error_kind == "NonUniqueMatch"
    assert "exactly once" in res.error
    assert f.read_text(encoding="utf-8") == "foo\nfoo\n"


@pytest.mark.skipif(os.name == "nt", reason="uses POSIX sh")
def test_hazardous_command_gated_unless_yolo(ws):
    exec_only = PermissionSet(allow_execute=True)
    with create_registry(exec_only, working_directory=str(ws)) as reg:
        res = reg.dispatch("bash", {"command": "echo reboot"})
        assert res.error_kind == "Hazardous"

        reg.update_permissions(exec_only.replace(yolo_mode=True))
        res = reg.dispatch("bash", {"command": "echo reboot"})
        assert res.success
        assert res.content == "reboot\n"


def test_path_traversal(registry):
    res = registry.dispatch("read", {"file_path": "/tmp/../etc/passwd"})
    assert res.error_kind == "PathTraversal"


def test_fetch_size_cap(registry, server):
    server.route(
        "/large",
        lambda r: httpx.Response(200, headers={"Content-Length": "6291456"}, content=b"x"),
    )
    res = registry.dispatch("fetch", {"url": "http://test/large", "format": "text"})
    assert res.error_kind == "TooLarge"
    assert res.content == ""


def test_grep_context(registry):
    res = registry.dispatch(
        "grep",
        {"pattern": "M", "content": "a\nb\nM\nc\nM\nd\n", "context_before": 1, "context_after": 1},
    )
    assert [line[5:] for line in res.content.splitlines()] == ["b", "M", "c", "M", "d"]
    assert res.metadata["matches_found"] == 2


def test_events_recorded(ws, tmp_path):
    store = EventStore.open("sess01", root=tmp_path)
    perms = PermissionSet()
    with create_registry(perms, working_directory=str(ws), events=store) as reg:
        reg.dispatch("list", {"path": str(ws)})
        reg.dispatch("read", {"file_path": "relative.txt"})
        reg.update_permissions(perms.replace(yolo_mode=True))
        reg.dispatch("list", {"path": str(ws)})

    evs = store.iter_events()
    assert [e.type for e in evs] == [
        "tool.dispatch",
        "tool.result",
        "tool.dispatch",
        "tool.result",
        "permission.update",
        "permission.yolo",
        "tool.dispatch",
        "tool.result",
    ]
    assert evs[0].data == {"tool": "list", "parameters": ["path"]}
    assert evs[1].data["success"] is True
    assert evs[3].data["error_kind"] == "RelativePath"
    assert isinstance(evs[3].data["duration_ms"], int)
    assert evs[5].data == {"tool": "list"}


def test_close_closes_owned_clients(ws):
    reg = create_registry(working_directory=str(ws))
    fetch = reg.get("fetch")
    download = reg.get("download")
    reg.close()
    assert fetch.client.is_closed
    assert download.client.is_closed


def test_close_calls_tool_close():
    reg = ToolRegistry()
    echo = Echo()
    reg.register(echo)
    with reg:
        pass
    assert echo.closed


def test_error_fields_in_metadata(registry, ws):
    f = ws / "dup.txt"
    f.write_text("x x x", encoding="utf-8")
    res = registry.dispatch("edit", {"file_path": str(f), "old_string": "x", "new_string": "y"})
    assert res.metadata == {"count": 3}
    res = registry.dispatch("read", {"file_path": str(ws / "missing.txt")})
    assert res.error_kind == "Io"
    assert res.metadata is None


def test_error_kinds_are_closed():
    def subclasses(cls):
        for sub in cls.__subclasses__():
            yield sub
            yield from subclasses(sub)

    kinds = {cls.kind for cls in subclasses(errors.ToolError)}
    assert kinds == set(errors.ERROR_KINDS)
