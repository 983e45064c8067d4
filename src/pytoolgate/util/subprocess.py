from __future__ import annotations
import os
import signal
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

_REAP_GRACE = 2.0

@dataclass
class CmdResult:
    returncode: int
    stdout: bytes
    stderr: bytes
    timed_out: bool = False

def shell_argv(command: str) -> list[str]:
    if os.name == "nt":
        return ["cmd", "/C", command]
    return ["sh", "-c", command]

def _kill_tree(proc: subprocess.Popen) -> None:
    if os.name != "nt":
        try:
            # the child leads its own session; take the whole group down
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except (ProcessLookupError, PermissionError):
            pass
    try:
        proc.kill()
    except ProcessLookupError:
        pass

def run_cmd(cmd: Sequence[str], cwd: Optional[str], timeout: float) -> CmdResult:
    """Run ``cmd`` with stdin closed and both streams captured.

    On timeout the child (and, on POSIX, its process group) is killed and
    reaped before returning. Raises OSError when the spawn itself fails.
    """
    kwargs = {}
    if os.name != "nt":
        kwargs["start_new_session"] = True
    with subprocess.Popen(
        list(cmd),
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        shell=False,
        **kwargs,
    ) as proc:
        try:
            out, err = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_tree(proc)
            try:
                out, err = proc.communicate(timeout=_REAP_GRACE)
            except subprocess.TimeoutExpired:
                # a detached grandchild still holds the pipes; drop its output
                out, err = b"", b""
                proc.wait()
            return CmdResult(proc.returncode, out or b"", err or b"", timed_out=True)
        except BaseException:
            _kill_tree(proc)
            proc.wait()
            raise
        return CmdResult(proc.returncode, out or b"", err or b"")
