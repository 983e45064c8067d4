from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

APP_NAME = "pytoolgate"


def events_dir(root: Path | None = None) -> Path:
    d = (root or Path(user_data_dir(APP_NAME))) / "events"
    d.mkdir(parents=True, exist_ok=True)
    return d


def new_session_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Event:
    ts: float
    type: str
    data: dict[str, Any]


@dataclass
class EventStore:
    """Append-only JSON-lines log of dispatch events, one file per session.

    Reading skips lines that do not parse, so a crash mid-write loses at
    most the last event.
    """

    session_id: str
    path: Path

    @staticmethod
    def open(session_id: str | None = None, root: Path | None = None) -> "EventStore":
        sid = session_id or new_session_id()
        return EventStore(session_id=sid, path=events_dir(root) / f"{sid}.jsonl")

    def append(self, event_type: str, data: dict[str, Any]) -> None:
        ev = Event(ts=time.time(), type=event_type, data=data)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(ev.__dict__, ensure_ascii=False, default=str) + "\n")

    def iter_events(self) -> list[Event]:
        if not self.path.exists():
            return []
        out: list[Event] = []
        for line in self.path.read_text(encoding="utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(obj, dict):
                continue
            data = obj.get("data")
            out.append(
                Event(
                    ts=float(obj.get("ts") or 0.0),
                    type=str(obj.get("type")),
                    data=data if isinstance(data, dict) else {},
                )
            )
        return out
