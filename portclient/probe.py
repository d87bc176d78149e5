"""
Runs the OS socket listing and termination commands.

This is the only place portclient talks to the operating system. Windows is
probed with 'netstat -nao'; Unix-like systems with 'lsof'.
"""
from __future__ import annotations
import logging
import platform
import subprocess
from typing import Callable, Optional

from .errors import ExecutionFailure, ProbeUnavailable
from .models import CommandOutput, Protocol

CommandRunner = Callable[[str], CommandOutput]

# Exit statuses a shell uses when it cannot find or execute the command.
SHELL_REJECTED_CODES = (126, 127, 9009)


def run_command(command: str) -> CommandOutput:
    """Runs a shell command to completion and captures its output."""
    result = subprocess.run(command, shell=True, capture_output=True, text=True)
    return CommandOutput(
        command=command,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
        returncode=result.returncode,
    )


class SystemProbe:
    """Issues listing, probing and termination commands for one platform."""

    def __init__(self, runner: Optional[CommandRunner] = None, system: Optional[str] = None):
        self.runner = runner or run_command
        self.system = system or platform.system()

    @property
    def is_windows(self) -> bool:
        return self.system == "Windows"

    def list_command(self, protocol: Protocol) -> str:
        if self.is_windows:
            return "netstat -nao"
        return f"lsof -i {protocol.value} -P -n"

    def probe_command(self, port: int, protocol: Protocol) -> str:
        if self.is_windows:
            return "netstat -nao"
        return f"lsof -i {protocol.value}:{port} -P -n"

    def _spawn(self, command: str) -> CommandOutput:
        logging.debug(f"Running: {command}")
        try:
            return self.runner(command)
        except OSError as e:
            raise ProbeUnavailable(f"Could not run '{command}': {e}") from e

    def _capture(self, command: str) -> str:
        output = self._spawn(command)
        if output.returncode in SHELL_REJECTED_CODES:
            detail = output.stderr.strip() or f"exit status {output.returncode}"
            raise ProbeUnavailable(f"'{command}' is not available: {detail}")
        # lsof exits 1 when nothing matches; that is an empty answer, not a failure.
        return output.stdout

    def list_all(self, protocol: Protocol) -> str:
        """Returns the raw listing of every socket for the protocol."""
        return self._capture(self.list_command(protocol))

    def probe_one(self, port: int, protocol: Protocol) -> str:
        """Returns the raw listing scoped to one port (the full table on Windows)."""
        return self._capture(self.probe_command(port, protocol))

    def run(self, command: str) -> CommandOutput:
        """Executes a termination command. Any non-zero exit is an ExecutionFailure."""
        try:
            output = self._spawn(command)
        except ProbeUnavailable as e:
            raise ExecutionFailure(str(e)) from e
        if output.returncode != 0:
            detail = output.stderr.strip() or output.stdout.strip() or f"exit status {output.returncode}"
            raise ExecutionFailure(detail)
        return output
