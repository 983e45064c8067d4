from __future__ import annotations

from pathlib import Path
import json
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from datetime import datetime

from .app_context import AppContext
from .events.store import EventStore
from .tools.builtin import create_registry


app = typer.Typer(add_completion=False, help="pytoolgate: permission-gated tool dispatcher for LLM agents.")
console = Console()


def _default_cwd() -> Path:
    return Path.cwd()


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = cwd or _default_cwd()
    cwd = Path(str(cwd)).expanduser()
    if not cwd.is_absolute():
        cwd = (Path.cwd() / cwd).resolve()
    else:
        cwd = cwd.resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory, got: {cwd}")
    return cwd


def _parse_args(args: str | None, args_file: Path | None) -> dict:
    if args is not None and args_file is not None:
        raise typer.BadParameter("Use either --args or --args-file, not both.")
    raw = "{}"
    if args_file is not None:
        try:
            raw = args_file.read_text(encoding="utf-8")
        except OSError as e:
            raise typer.BadParameter(f"Cannot read --args-file: {e}")
    elif args is not None:
        raw = args
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Tool arguments are not valid JSON: {e}")
    if not isinstance(obj, dict):
        raise typer.BadParameter("Tool arguments must be a JSON object.")
    return obj


@app.command()
def catalog(
    fmt: str = typer.Option("json", "--format", help="json (tool descriptors) or openai (function-calling envelope)."),
):
    """Print the tool catalog handed to an upstream planner."""
    with create_registry() as reg:
        if fmt == "json":
            out = reg.catalog()
        elif fmt == "openai":
            out = reg.openai_tools()
        else:
            raise typer.BadParameter("--format must be 'json' or 'openai'")
    typer.echo(json.dumps(out, ensure_ascii=False, indent=2))


@app.command()
def call(
    tool: str = typer.Argument(..., help="Tool name (see `pytoolgate catalog`)."),
    args: str = typer.Option(None, "--args", help="Tool parameters as a JSON object."),
    args_file: Path = typer.Option(None, "--args-file", help="Read tool parameters from a JSON file."),
    cwd: Path = typer.Option(None, "--cwd", help="Working directory. Defaults to current directory."),
    config: Path = typer.Option(None, "--config", help="Optional config (pytoolgate.json or .yaml) path."),
    allow_write: bool = typer.Option(False, "--allow-write", help="Grant write permission."),
    allow_execute: bool = typer.Option(False, "--allow-execute", help="Grant execute permission."),
    allow_network: bool = typer.Option(False, "--allow-network", help="Grant network permission."),
    no_read: bool = typer.Option(False, "--no-read", help="Revoke read permission."),
    yolo: bool = typer.Option(False, "--yolo", help="Bypass every safety check (recorded and warned)."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response as JSON."),
    session: str = typer.Option(None, "--session", help="Session id to record dispatch events under."),
    trace: bool = typer.Option(False, "--trace", help="Print a trace panel for the dispatch."),
):
    """Dispatch one tool call. Exit code 0 on success, 1 when the tool fails."""
    cwd = _resolve_cwd(cwd)
    params = _parse_args(args, args_file)

    ctx = AppContext.from_options(
        cwd=cwd,
        session_id=session,
        config_path=config,
        allow_write=allow_write,
        allow_execute=allow_execute,
        allow_network=allow_network,
        no_read=no_read,
        yolo=yolo,
        trace=trace,
    )
    try:
        res = ctx.tools.dispatch(tool, params)
    finally:
        ctx.close()

    if as_json:
        typer.echo(json.dumps(res.to_dict(), ensure_ascii=False, indent=2))
    else:
        title = f"{tool} ({'ok' if res.success else 'error'})"
        console.print(
            Panel(
                Text(res.content or "(empty)"),
                title=title,
                border_style="green" if res.success else "red",
            )
        )
        if res.error:
            console.print(Text(f"error: {res.error}", style="red"))
        if res.metadata:
            console.print(Text(json.dumps(res.metadata, ensure_ascii=False, indent=2), style="dim"))
    if not res.success:
        raise typer.Exit(code=1)


@app.command()
def events(
    session: str = typer.Option(..., "--session", help="Session id to inspect events."),
    tail: int = typer.Option(200, "--tail", help="Show last N events."),
):
    """Show recent dispatch events recorded for a session."""
    es = EventStore.open(session)
    evs = list(es.iter_events())
    evs = evs[-tail:] if tail and tail > 0 else evs
    console.print(Panel.fit(f"session: {session}\nfile: {es.path}\nevents: {len(evs)}", title="Events"))
    for e in evs:
        ts = datetime.fromtimestamp(e.ts).strftime("%Y-%m-%d %H:%M:%S")
        console.print(Panel.fit(Text(json.dumps(e.data, ensure_ascii=False, indent=2)[:4000]), title=f"{ts}  {e.type}"))


@app.command()
def stats(
    session: str = typer.Option(..., "--session", help="Session id to summarize."),
):
    """Summarize a session: calls per tool, failures by kind, latency, yolo use."""
    es = EventStore.open(session)
    evs = list(es.iter_events())
    results = [e for e in evs if e.type == "tool.result"]
    yolo = [e for e in evs if e.type == "permission.yolo"]

    per_tool: dict[str, list[int]] = {}
    failures: dict[str, int] = {}
    for e in results:
        name = str(e.data.get("tool"))
        ms = e.data.get("duration_ms")
        per_tool.setdefault(name, []).append(ms if isinstance(ms, int) else 0)
        if not e.data.get("success"):
            kind = e.data.get("error_kind") or "exit"
            failures[kind] = failures.get(kind, 0) + 1

    table = Table(title=f"session {session}")
    table.add_column("tool")
    table.add_column("calls", justify="right")
    table.add_column("avg ms", justify="right")
    for name, vals in sorted(per_tool.items(), key=lambda x: len(x[1]), reverse=True):
        table.add_row(name, str(len(vals)), f"{sum(vals) / len(vals):.1f}")
    console.print(table)

    lines = [f"tool_results: {len(results)}  yolo_dispatches: {len(yolo)}"]
    if failures:
        lines.append("failures:")
        for kind, c in sorted(failures.items()):
            lines.append(f"  - {kind}: {c}")
    console.print(Panel.fit("\n".join(lines), title="Stats"))


if __name__ == "__main__":
    app()
