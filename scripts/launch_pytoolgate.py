"""Run the CLI from an IDE debugger.

Debugger launchers put their own flags first and the real arguments after
``--``; strip them so typer only sees the pytoolgate command line.
"""
import sys

from pytoolgate.main import app

if __name__ == "__main__":
    argv = sys.argv[sys.argv.index("--") + 1 :] if "--" in sys.argv else sys.argv[1:]
    app(args=argv, prog_name="pytoolgate")
