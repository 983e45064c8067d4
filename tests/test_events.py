from __future__ import annotations

from pytoolgate.events.store import EventStore, events_dir


def test_append_and_read_back(tmp_path):
    store = EventStore.open("abc", root=tmp_path)
    assert store.path == tmp_path / "events" / "abc.jsonl"
    store.append("tool.dispatch", {"tool": "read", "parameters": ["file_path"]})
    store.append("tool.result", {"tool": "read", "success": True, "path": tmp_path})

    evs = store.iter_events()
    assert [e.type for e in evs] == ["tool.dispatch", "tool.result"]
    assert evs[0].data["parameters"] == ["file_path"]
    # non-JSON values are stored as strings
    assert evs[1].data["path"] == str(tmp_path)
    assert evs[0].ts <= evs[1].ts


def test_corrupt_lines_are_skipped(tmp_path):
    store = EventStore.open("abc", root=tmp_path)
    store.append("a", {})
    with store.path.open("a", encoding="utf-8") as f:
        f.write('{"ts": 1, "type": "trunc\n')
        f.write("\n")
        f.write("[1, 2]\n")
    store.append("b", {"k": 1})
    assert [e.type for e in store.iter_events()] == ["a", "b"]


def test_missing_file_is_empty(tmp_path):
    assert EventStore.open("never", root=tmp_path).iter_events() == []


def test_generated_session_id(tmp_path):
    a = EventStore.open(root=tmp_path)
    b = EventStore.open(root=tmp_path)
    assert len(a.session_id) == 12
    assert a.session_id != b.session_id


def test_default_dir_uses_user_data(isolated_dirs):
    assert events_dir() == isolated_dirs / "events"
