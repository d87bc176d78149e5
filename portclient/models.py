from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import InvalidOption, UnknownAction


class Protocol(Enum):
    """Transport protocol a port is looked up under."""
    TCP = "tcp"
    UDP = "udp"

    @classmethod
    def parse(cls, value: Any) -> "Protocol":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidOption(f"Unknown method '{value}'. Use tcp or udp.")


class SpeedMode(Enum):
    """Existence check strategy: one full listing per run, or one probe per port."""
    SAFE = "safe"
    FAST = "fast"

    @classmethod
    def parse(cls, value: Any) -> "SpeedMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidOption(f"Unknown speed '{value}'. Use safe or fast.")


class Action(Enum):
    CHECK = auto()
    EXISTS = auto()
    KILL = auto()

    @classmethod
    def parse(cls, name: Any) -> "Action":
        """Maps an action name (as accepted on the command line or in options) to an Action."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace('_', '').replace('-', '')
        aliases = {
            'check': cls.CHECK,
            'exists': cls.EXISTS,
            'isexist': cls.EXISTS,
            'exist': cls.EXISTS,
            'kill': cls.KILL,
        }
        if key not in aliases:
            raise UnknownAction(f"Unknown action: {name}")
        return aliases[key]


class ParseStrategy(Enum):
    """The two Unix listing dialects. Chosen by the caller, never sniffed from the text."""
    GENERAL_LISTING = auto()
    PROTOCOL_SCOPED_LISTING = auto()


# Keys accepted by OperationConfig.from_options, mapped to field names.
_OPTION_ALIASES = {
    'method': 'protocol',
    'protocol': 'protocol',
    'action': 'action',
    'interactive': 'interactive',
    'dryRun': 'dry_run',
    'dry_run': 'dry_run',
    'verbose': 'verbose',
    'graceful': 'graceful',
    'filter': 'filter',
    'range': 'range',
    'speed': 'speed',
}


@dataclass(frozen=True)
class OperationConfig:
    """Immutable snapshot of the options for one run."""
    protocol: Protocol = Protocol.TCP
    action: str = 'check'
    interactive: bool = False
    dry_run: bool = False
    verbose: bool = False
    graceful: bool = False
    speed: SpeedMode = SpeedMode.SAFE
    filter: Optional[str] = None  # reserved, not applied
    range: Optional[str] = None

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None, **overrides: Any) -> "OperationConfig":
        """
        Builds a config from an options mapping. Both the camelCase names
        (dryRun) and the snake_case field names are accepted; unknown keys
        are ignored. Action names are validated later, at dispatch.
        """
        values: Dict[str, Any] = {}
        merged = dict(options or {})
        merged.update(overrides)
        for key, value in merged.items():
            name = _OPTION_ALIASES.get(key)
            if name is None or value is None:
                continue
            values[name] = value

        if 'protocol' in values:
            values['protocol'] = Protocol.parse(values['protocol'])
        if 'speed' in values:
            values['speed'] = SpeedMode.parse(values['speed'])
        for flag in ('interactive', 'dry_run', 'verbose', 'graceful'):
            if flag in values:
                values[flag] = bool(values[flag])
        if 'action' in values:
            values['action'] = str(values['action'])
        if values.get('filter') == '':
            values['filter'] = None
        return cls(**values)


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of one shell command."""
    command: str
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass(frozen=True)
class ActivePortRecord:
    """One port found in a socket listing."""
    port: str
    protocol: Protocol
    state: Optional[str] = None
    pid: Optional[int] = None


@dataclass(frozen=True)
class KillCommand:
    """A complete termination command for exactly one port."""
    port: int
    protocol: Protocol
    system: str
    graceful: bool
    command: str
    pids: Tuple[int, ...] = ()


@dataclass
class OperationResult:
    """Outcome of one port's check or kill."""
    port: int
    success: bool
    message: str
    error: Optional[str] = None
    active: Optional[bool] = None
    command: Optional[str] = None


@dataclass
class BatchReport:
    """All per-port results of one run, in port order."""
    ports: Tuple[int, ...] = ()
    results: List[OperationResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return all(result.success for result in self.results)

    @property
    def failures(self) -> List[OperationResult]:
        return [result for result in self.results if not result.success]

    def by_port(self) -> Dict[int, OperationResult]:
        return {result.port: result for result in self.results}
