from __future__ import annotations
import os
import shutil
import tempfile
from pathlib import Path

from ..tools.errors import Io, IsDirectory


def read_bytes(path: Path) -> bytes:
    if path.is_dir():
        raise IsDirectory(str(path))
    try:
        return path.read_bytes()
    except OSError as e:
        raise Io(f"Failed to read file '{path}': {e.strerror or e}") from e


def decode_utf8(raw: bytes, path: Path) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise Io(f"File '{path}' is not valid UTF-8 text") from e


def read_text(path: Path) -> str:
    return decode_utf8(read_bytes(path), path)


def split_lines(text: str) -> list[str]:
    """Split on newlines without producing a phantom last line.

    "a\\nb\\n" and "a\\nb" both give ["a", "b"]; a trailing "\\r" is dropped
    from each line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` in one rename.

    The temp file lives beside the target so the rename never crosses a
    filesystem. The mode of an existing file is kept.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def similar_files(path: Path, limit: int = 3) -> list[str]:
    parent = path.parent
    name = path.name.lower()
    out: list[str] = []
    if not name or not parent.is_dir():
        return out
    try:
        entries = sorted(parent.iterdir(), key=lambda p: p.name)
    except OSError:
        return out
    for entry in entries:
        if not entry.is_file():
            continue
        other = entry.name.lower()
        if name in other or other in name:
            out.append(str(entry))
            if len(out) >= limit:
                break
    return out
