from __future__ import annotations
from dataclasses import dataclass

from ..args import optional_int, optional_str, require_str
from ..base import ToolSpec, ToolRequest, ToolResponse
from ..errors import BadParameter, Io, Timeout
from ..safety import validate_command
from ...util.subprocess import run_cmd, shell_argv

DEFAULT_TIMEOUT_MS = 120_000
MAX_TIMEOUT_MS = 600_000

STDERR_SEPARATOR = "\n--- STDERR ---\n"

@dataclass
class BashTool:
    spec: ToolSpec = ToolSpec(
        name="bash",
        description=(
            "Run a shell command (sh -c on POSIX, cmd /C on Windows) in the working directory with stdin "
            "closed. Returns stdout, then stderr after a '--- STDERR ---' separator. Known destructive "
            "commands are refused unless yolo mode is on."
        ),
        parameters={
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "The command to execute."},
                "description": {
                    "type": "string",
                    "description": "Clear, concise description of what this command does in 5-10 words.",
                },
                "timeout": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": MAX_TIMEOUT_MS,
                    "description": f"Optional timeout in milliseconds (max {MAX_TIMEOUT_MS}, default {DEFAULT_TIMEOUT_MS}).",
                },
            },
            "required": ["command"],
        },
    )

    def validate(self, request: ToolRequest) -> None:
        args = request.parameters
        command = require_str(args, "command")
        if not command.strip():
            raise BadParameter("command", "Command cannot be empty")
        optional_str(args, "description")
        optional_int(args, "timeout", DEFAULT_TIMEOUT_MS, minimum=1, maximum=MAX_TIMEOUT_MS)
        validate_command(command, request.permissions)

    def execute(self, request: ToolRequest) -> ToolResponse:
        args = request.parameters
        command = args["command"]
        description = optional_str(args, "description")
        timeout_ms = optional_int(args, "timeout", DEFAULT_TIMEOUT_MS, minimum=1, maximum=MAX_TIMEOUT_MS)
        assert timeout_ms is not None

        try:
            res = run_cmd(shell_argv(command), cwd=request.working_directory, timeout=timeout_ms / 1000)
        except OSError as e:
            raise Io(f"Failed to spawn command: {e.strerror or e}") from e
        if res.timed_out:
            raise Timeout("Command", timeout_ms / 1000)

        stdout = res.stdout.decode("utf-8", errors="replace")
        stderr = res.stderr.decode("utf-8", errors="replace")
        output = stdout
        if stderr:
            if output:
                output += STDERR_SEPARATOR
            output += stderr
        if not output:
            output = "(No output)"

        metadata = {
            "command": command,
            "description": description,
            "exit_code": res.returncode,
            "timeout_ms": timeout_ms,
            "stdout_length": len(res.stdout),
            "stderr_length": len(res.stderr),
        }
        if res.returncode != 0:
            # non-zero exit still hands back what the command printed
            return ToolResponse(
                content=output,
                success=False,
                metadata=metadata,
                error=f"exit {res.returncode}",
            )
        return ToolResponse.ok(output, metadata=metadata)
