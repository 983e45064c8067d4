from __future__ import annotations

import dataclasses

import pytest

from pytoolgate.tools.permissions import DEFAULT_RESTRICTED_PATHS, PermissionSet


def test_defaults_read_only():
    p = PermissionSet()
    assert p.allow_read is True
    assert (p.allow_write, p.allow_execute, p.allow_network, p.yolo_mode) == (False, False, False, False)
    for prefix in ("/etc", "/sys", "/proc", "/dev"):
        assert prefix in p.restricted_paths


def test_is_immutable():
    p = PermissionSet()
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.allow_write = True  # type: ignore[misc]


def test_replace_builds_new_set():
    p = PermissionSet()
    q = p.replace(allow_write=True)
    assert q.allow_write is True
    assert p.allow_write is False
    assert q.restricted_paths == p.restricted_paths


def test_restricted_paths_stored_as_tuple():
    p = PermissionSet(restricted_paths=["/srv", "/opt"])  # type: ignore[arg-type]
    assert p.restricted_paths == ("/srv", "/opt")


def test_from_obj_ignores_bad_values():
    p = PermissionSet.from_obj(
        {
            "allow_write": True,
            "allow_execute": "yes",
            "restricted_paths": ["/data"],
            "bogus": 1,
        }
    )
    assert p.allow_write is True
    assert p.allow_execute is False
    assert p.restricted_paths == ("/data",)


def test_from_obj_layers_over_base():
    base = PermissionSet(allow_network=True)
    p = PermissionSet.from_obj({"allow_write": True}, base=base)
    assert p.allow_network is True and p.allow_write is True
    assert PermissionSet.from_obj(None, base=base) is base


def test_to_dict():
    d = PermissionSet.permissive().to_dict()
    assert d["allow_execute"] is True
    assert d["restricted_paths"] == list(DEFAULT_RESTRICTED_PATHS)
    assert d["yolo_mode"] is False
