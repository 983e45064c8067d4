from __future__ import annotations

import json

from typer.testing import CliRunner

from pytoolgate.main import app
from pytoolgate.tools.builtin import BUILTIN_TOOL_NAMES

runner = CliRunner()


def test_catalog_json():
    result = runner.invoke(app, ["catalog"])
    assert result.exit_code == 0, result.output
    names = [d["name"] for d in json.loads(result.stdout)]
    assert names == list(BUILTIN_TOOL_NAMES)


def test_catalog_openai():
    result = runner.invoke(app, ["catalog", "--format", "openai"])
    assert result.exit_code == 0
    tools = json.loads(result.stdout)
    assert {t["type"] for t in tools} == {"function"}


def test_call_write_then_read(ws):
    target = ws / "out.txt"
    args = json.dumps({"file_path": str(target), "content": "one\ntwo\n"})
    result = runner.invoke(app, ["call", "write", "--args", args, "--cwd", str(ws), "--allow-write", "--json"])
    assert result.exit_code == 0, result.output
    body = json.loads(result.stdout)
    assert body["success"] is True
    assert body["metadata"]["was_new_file"] is True
    assert target.read_text(encoding="utf-8") == "one\ntwo\n"

    args_file = ws / "args.json"
    args_file.write_text(json.dumps({"file_path": str(target)}), encoding="utf-8")
    result = runner.invoke(app, ["call", "read", "--args-file", str(args_file), "--cwd", str(ws), "--json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["metadata"]["total_lines"] == 2


def test_write_without_flag_is_denied(ws):
    args = json.dumps({"file_path": str(ws / "x.txt"), "content": "x"})
    result = runner.invoke(app, ["call", "write", "--args", args, "--cwd", str(ws), "--json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["error_kind"] == "WriteDenied"
    assert not (ws / "x.txt").exists()


def test_failed_call_exits_1(ws):
    args = json.dumps({"file_path": str(ws / "missing.txt")})
    result = runner.invoke(app, ["call", "read", "--args", args, "--cwd", str(ws), "--json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["success"] is False

    result = runner.invoke(app, ["call", "teleport", "--cwd", str(ws), "--json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["error_kind"] == "UnknownTool"


def test_bad_arguments_are_usage_errors(ws):
    result = runner.invoke(app, ["call", "read", "--args", "{nope", "--cwd", str(ws)])
    assert result.exit_code == 2
    result = runner.invoke(app, ["call", "read", "--args", "[1]", "--cwd", str(ws)])
    assert result.exit_code == 2
    result = runner.invoke(app, ["call", "read", "--cwd", str(ws / "missing")])
    assert result.exit_code == 2


def test_session_events_and_stats(ws):
    args = json.dumps({"path": str(ws)})
    for _ in range(2):
        result = runner.invoke(app, ["call", "list", "--args", args, "--cwd", str(ws), "--session", "clitest", "--json"])
        assert result.exit_code == 0
    runner.invoke(app, ["call", "read", "--args", "{}", "--cwd", str(ws), "--session", "clitest", "--json"])

    result = runner.invoke(app, ["events", "--session", "clitest"])
    assert result.exit_code == 0
    assert "events: 6" in result.stdout
    assert "tool.result" in result.stdout

    result = runner.invoke(app, ["stats", "--session", "clitest"])
    assert result.exit_code == 0
    assert "tool_results: 3" in result.stdout
    assert "MissingParameter: 1" in result.stdout
