from __future__ import annotations
import tempfile
from pathlib import Path

from pytoolgate.tools.builtin import create_registry
from pytoolgate.tools.permissions import PermissionSet

def main():
    with tempfile.TemporaryDirectory() as td:
        root = Path(td)
        a = str(root / "a.txt")
        perms = PermissionSet(allow_write=True, allow_execute=True)

        with create_registry(perms, working_directory=td) as reg:
            # write
            print(reg.dispatch("write", {"file_path": a, "content": "hello\nworld\n"}).content)

            # read
            print("READ:", reg.dispatch("read", {"file_path": a}).content)

            # grep
            print("GREP:", reg.dispatch("grep", {"pattern": "world", "path": a}).content)

            # list
            print("LIST:", reg.dispatch("list", {"path": td}).content)

            # edit
            print(reg.dispatch("edit", {"file_path": a, "old_string": "world", "new_string": "WORLD"}).content)
            print("READ2:", reg.dispatch("read", {"file_path": a}).content)

            # bash
            print(reg.dispatch("bash", {"command": "echo 1+1=2"}).content)

            # refused: hazardous command, traversal
            print("HAZARD:", reg.dispatch("bash", {"command": "rm -rf /"}).error)
            print("TRAVERSAL:", reg.dispatch("read", {"file_path": "/tmp/../etc/passwd"}).error)

if __name__ == "__main__":
    main()
