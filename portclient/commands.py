"""
Builds the shell command that terminates whatever owns a port.
"""
from __future__ import annotations
import logging

from .errors import NoProcessOnPort
from .listing import windows_pids
from .models import KillCommand, OperationConfig, ParseStrategy, Protocol
from .oracle import ExistenceOracle
from .probe import SystemProbe


class CommandBuilder:
    """Creates one KillCommand per port, after confirming something owns the port."""

    def __init__(self, probe: SystemProbe, oracle: ExistenceOracle, config: OperationConfig):
        self.probe = probe
        self.oracle = oracle
        self.config = config

    def build(self, port: int) -> KillCommand:
        """
        Returns the termination command for port.

        Raises NoProcessOnPort when the port is not active; in that case no
        termination command is ever constructed.
        """
        if not self.oracle.is_active(port, ParseStrategy.PROTOCOL_SCOPED_LISTING):
            raise NoProcessOnPort(f"No process running on port {port}")
        if self.probe.is_windows:
            return self._windows_command(port)
        return self._unix_command(port)

    def _windows_command(self, port: int) -> KillCommand:
        # No graceful variant on Windows.
        protocol = self.config.protocol
        raw = self.probe.list_all(protocol)
        pids = windows_pids(raw, protocol, port)
        if not pids:
            raise NoProcessOnPort(f"No process id found for {protocol.value.upper()} port {port}")
        command = "TaskKill /F " + " ".join(f"/PID {pid}" for pid in pids)
        logging.debug(f"Port {port} is owned by PIDs {pids}")
        return KillCommand(
            port=port,
            protocol=protocol,
            system=self.probe.system,
            graceful=False,
            command=command,
            pids=tuple(pids),
        )

    def _unix_command(self, port: int) -> KillCommand:
        protocol = self.config.protocol
        signal = "kill" if self.config.graceful else "kill -9"
        command = f"{pid_lookup_command(protocol, port)} | xargs {signal}"
        return KillCommand(
            port=port,
            protocol=protocol,
            system=self.probe.system,
            graceful=self.config.graceful,
            command=command,
        )


def pid_lookup_command(protocol: Protocol, port: int) -> str:
    """lsof invocation printing only the PIDs bound to protocol:port."""
    if protocol is Protocol.TCP:
        # Without the state filter lsof also matches clients whose remote port is port.
        return f"lsof -t -i tcp:{port} -sTCP:LISTEN"
    return f"lsof -t -i {protocol.value}:{port}"
