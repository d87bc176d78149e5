"""
Runs check and kill operations over a batch of ports.

One PortClient.execute() call is one run: the spec is resolved once, a fresh
ExistenceOracle is created for the run, and every port is handled in input
order. A failure on one port is recorded and the batch carries on.
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .commands import CommandBuilder
from .errors import ExecutionFailure, InvalidPortSpec, PortClientError
from .models import Action, BatchReport, OperationConfig, OperationResult
from .oracle import ExistenceOracle
from .parsing import PortSpecParser, parse_selection
from .privileges import elevation_hint
from .probe import CommandRunner, SystemProbe
from .processes import describe_pids
from .reporting import ERROR, INFO, SUCCESS, ConsoleReporter, Reporter

Prompt = Callable[[str], str]

SELECTION_PROMPT = "Select ports to operate on (comma-separated indices): "


class TerminationOrchestrator:
    """Handles each port of a batch independently, collecting one result per port."""

    def __init__(
        self,
        probe: SystemProbe,
        oracle: ExistenceOracle,
        config: OperationConfig,
        reporter: Reporter,
    ):
        self.probe = probe
        self.oracle = oracle
        self.config = config
        self.reporter = reporter
        self.builder = CommandBuilder(probe, oracle, config)

    def check(self, ports: Sequence[int]) -> List[OperationResult]:
        """Reports whether each port is active."""
        results = []
        for port in ports:
            try:
                owners = self.oracle.owners(port)
                active = bool(owners)
                message = f"Port {port} is active." if active else f"Port {port} is not active."
                self.reporter.report(SUCCESS, message)
                pids = [record.pid for record in owners if record.pid]
                if pids:
                    self.reporter.report(INFO, f"Port {port} is used by {', '.join(describe_pids(pids))}")
                results.append(OperationResult(port=port, success=True, message=message, active=active))
            except PortClientError as e:
                message = f"Error checking port {port}: {e}"
                self.reporter.report(ERROR, message)
                results.append(OperationResult(port=port, success=False, message=message, error=type(e).__name__))
        return results

    def run(self, ports: Sequence[int]) -> List[OperationResult]:
        """Builds and executes a termination command for each port."""
        results = []
        for port in ports:
            command = None
            try:
                kill = self.builder.build(port)
                command = kill.command
                self.reporter.report(INFO, f"Executing: {command}")
                if kill.pids:
                    self.reporter.report(INFO, f"Terminating {', '.join(describe_pids(kill.pids))}")
                output = self.probe.run(command)
                message = f"Successfully killed port {port} {output.stdout.strip()}".rstrip()
                self.reporter.report(SUCCESS, message)
                results.append(OperationResult(port=port, success=True, message=message, command=command))
            except PortClientError as e:
                detail = str(e)
                if isinstance(e, ExecutionFailure):
                    hint = elevation_hint()
                    if hint:
                        detail = f"{detail} {hint}"
                message = f"Failed to kill port {port}: {detail}"
                self.reporter.report(ERROR, message)
                results.append(OperationResult(
                    port=port,
                    success=False,
                    message=message,
                    error=type(e).__name__,
                    command=command,
                ))
        return results


class PortClient:
    """Resolves a port spec and performs the configured action on it."""

    def __init__(
        self,
        ports: Any,
        config: Optional[OperationConfig] = None,
        probe: Optional[SystemProbe] = None,
        reporter: Optional[Reporter] = None,
        prompt: Optional[Prompt] = None,
    ):
        self.ports = ports
        self.config = config or OperationConfig()
        self.probe = probe or SystemProbe()
        self.reporter = reporter or ConsoleReporter(verbose=self.config.verbose)
        self.prompt = prompt or input
        self.parser = PortSpecParser()

    def execute(self) -> BatchReport:
        """
        Runs the whole operation.

        Raises InvalidPortSpec when no port resolves and UnknownAction for an
        unsupported action. Per-port failures are in the returned report.
        """
        ports = self.parser.resolve(self.ports, self.config.range)
        if not ports:
            raise InvalidPortSpec("Invalid or no port(s) provided.")

        if self.config.dry_run:
            self.reporter.report(SUCCESS, f"Dry run: Ports to operate on - {', '.join(map(str, ports))}")
            return BatchReport(ports=ports, dry_run=True)

        oracle = ExistenceOracle(self.probe, self.config)

        if self.config.interactive:
            ports = tuple(self.select_ports(oracle.active_ports(ports)))

        action = Action.parse(self.config.action)
        orchestrator = TerminationOrchestrator(self.probe, oracle, self.config, self.reporter)
        logging.debug(f"Running {action.name.lower()} on ports {list(ports)} ({self.config.speed.value} mode)")
        if action is Action.KILL:
            results = orchestrator.run(ports)
        else:
            results = orchestrator.check(ports)
        return BatchReport(ports=ports, results=results)

    def select_ports(self, active_ports: List[str]) -> List[int]:
        """Lists the active ports and asks the operator to pick some by 1-based index."""
        if not active_ports:
            self.reporter.report(INFO, "No active ports found.")
            return []
        for index, port in enumerate(active_ports, start=1):
            self.reporter.report(SUCCESS, f"{index}. {port}")
        answer = self.prompt(SELECTION_PROMPT)
        selected = parse_selection(answer, active_ports)
        logging.debug(f"Operator selected ports {selected}")
        return selected


def operate(
    ports: Any = None,
    options: Optional[Mapping[str, Any]] = None,
    *,
    runner: Optional[CommandRunner] = None,
    system: Optional[str] = None,
    reporter: Optional[Reporter] = None,
    prompt: Optional[Prompt] = None,
    **kwargs: Any,
) -> BatchReport:
    """
    Checks or kills the processes on the given ports.

    ports may be a single value, a list, or None when options['range'] is set.
    Options: method, action, interactive, dryRun, verbose, graceful, filter,
    range, speed. Keyword arguments override options.
    """
    config = OperationConfig.from_options(options, **kwargs)
    probe = SystemProbe(runner=runner, system=system)
    return PortClient(ports, config, probe=probe, reporter=reporter, prompt=prompt).execute()


@dataclass
class RunOutcome:
    """The report of one independent run, or the error that aborted it."""
    spec: Any
    report: Optional[BatchReport] = None
    error: Optional[PortClientError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None and self.report.ok


def operate_many(
    specs: Sequence[Any],
    options: Optional[Mapping[str, Any]] = None,
    max_workers: Optional[int] = None,
    **kwargs: Any,
) -> List[RunOutcome]:
    """
    Runs operate() once per spec, concurrently. Runs share nothing; outcomes
    come back in the order of specs.
    """
    if not specs:
        return []

    def _run(spec: Any) -> RunOutcome:
        try:
            return RunOutcome(spec=spec, report=operate(spec, options, **kwargs))
        except PortClientError as e:
            logging.debug(f"Run for {spec!r} stopped: {e}")
            return RunOutcome(spec=spec, error=e)

    workers = max_workers or len(specs)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_run, specs))
