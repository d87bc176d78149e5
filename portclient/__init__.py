"""
Finds the process bound to a local TCP/UDP port and optionally terminates it.
"""
from .errors import (
    ConfigurationError,
    ExecutionFailure,
    InvalidOption,
    InvalidPortSpec,
    NoProcessOnPort,
    PortClientError,
    ProbeUnavailable,
    UnknownAction,
)
from .models import Action, BatchReport, OperationConfig, OperationResult, ParseStrategy, Protocol, SpeedMode
from .orchestrator import PortClient, RunOutcome, operate, operate_many

__all__ = [
    "operate",
    "operate_many",
    "PortClient",
    "RunOutcome",
    "OperationConfig",
    "OperationResult",
    "BatchReport",
    "Action",
    "Protocol",
    "SpeedMode",
    "ParseStrategy",
    "PortClientError",
    "InvalidPortSpec",
    "UnknownAction",
    "InvalidOption",
    "ProbeUnavailable",
    "NoProcessOnPort",
    "ExecutionFailure",
    "ConfigurationError",
]
