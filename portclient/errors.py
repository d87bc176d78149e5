"""
Exception hierarchy for portclient.

Run-level errors (InvalidPortSpec, UnknownAction, InvalidOption) abort a whole
run. Per-port errors (NoProcessOnPort, ExecutionFailure) are recorded against
the port and never stop the rest of the batch.
"""


class PortClientError(Exception):
    """Base class for all portclient errors."""


class InvalidPortSpec(PortClientError, ValueError):
    """No usable port could be resolved from the given input."""


class UnknownAction(PortClientError, ValueError):
    """The requested action is not one of check, exists or kill."""


class InvalidOption(PortClientError, ValueError):
    """An option value (protocol, speed) is not recognised."""


class ProbeUnavailable(PortClientError):
    """The socket listing command could not be run."""


class NoProcessOnPort(PortClientError):
    """Termination was requested for a port nothing is bound to."""


class ExecutionFailure(PortClientError):
    """The termination command ran but failed."""


class ConfigurationError(PortClientError):
    """The configuration file could not be read or parsed."""
