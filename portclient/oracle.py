"""
Decides whether a port is active, using either one shared listing per run
(safe) or one targeted probe per port (fast).
"""
from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional, Sequence

from .errors import ProbeUnavailable
from .listing import (
    distinct_ports,
    parse_listing,
    parse_unix_general,
    parse_unix_protocol_scoped,
    windows_rows,
)
from .models import ActivePortRecord, OperationConfig, ParseStrategy, Protocol, SpeedMode
from .probe import SystemProbe

LISTEN_STATES = ("LISTEN", "LISTENING")


class ExistenceOracle:
    """
    Answers "is port P active?" for one run.

    The speed mode is resolved once here. In safe mode the full listing is
    fetched on first use and shared by every later query of the same oracle;
    a failed fetch is remembered rather than retried per port.
    """

    def __init__(self, probe: SystemProbe, config: OperationConfig):
        self.probe = probe
        self.config = config
        self._owners: Callable[[int, ParseStrategy], List[ActivePortRecord]]
        if config.speed is SpeedMode.FAST:
            self._owners = self._owners_fast
        else:
            self._owners = self._owners_safe
        self._listing: Optional[str] = None
        self._listing_error: Optional[ProbeUnavailable] = None
        self._parsed: Dict[ParseStrategy, List[ActivePortRecord]] = {}

    @property
    def check_strategy(self) -> ParseStrategy:
        """Strategy for check flows. UDP sockets carry no state marker, so they need the scoped dialect."""
        if self.config.protocol is Protocol.UDP:
            return ParseStrategy.PROTOCOL_SCOPED_LISTING
        return ParseStrategy.GENERAL_LISTING

    def owners(self, port: int, strategy: Optional[ParseStrategy] = None) -> List[ActivePortRecord]:
        """Returns the records showing port as active. Probe failures count as inactive."""
        try:
            return self._owners(port, strategy or self.check_strategy)
        except ProbeUnavailable as e:
            logging.warning(f"Could not probe port {port}: {e}")
            return []

    def is_active(self, port: int, strategy: Optional[ParseStrategy] = None) -> bool:
        return bool(self.owners(port, strategy))

    def active_ports(self, ports: Optional[Sequence[int]] = None) -> List[str]:
        """
        Lists the distinct active ports for interactive selection. Safe mode
        reads the full listing; fast mode probes only the given ports. Unlike
        is_active, a failed probe raises ProbeUnavailable.
        """
        if ports and self.config.speed is SpeedMode.FAST:
            return [str(port) for port in ports if self._owners_fast(port, self.check_strategy)]
        return distinct_ports(self._records(self.check_strategy))

    def _listing_text(self) -> str:
        if self._listing_error is not None:
            raise self._listing_error
        if self._listing is None:
            try:
                self._listing = self.probe.list_all(self.config.protocol)
            except ProbeUnavailable as e:
                self._listing_error = e
                raise
            logging.debug(f"Fetched port listing ({len(self._listing.splitlines())} lines).")
        return self._listing

    def _records(self, strategy: ParseStrategy) -> List[ActivePortRecord]:
        if strategy not in self._parsed:
            self._parsed[strategy] = parse_listing(
                self._listing_text(), self.probe.system, self.config.protocol, strategy
            )
        return self._parsed[strategy]

    def _owners_safe(self, port: int, strategy: ParseStrategy) -> List[ActivePortRecord]:
        target = str(port)
        return [record for record in self._records(strategy) if record.port == target]

    def _owners_fast(self, port: int, strategy: ParseStrategy) -> List[ActivePortRecord]:
        raw = self.probe.probe_one(port, self.config.protocol)
        protocol = self.config.protocol
        target = str(port)
        if self.probe.is_windows:
            rows = windows_rows(raw, protocol)
        elif protocol is Protocol.UDP:
            rows = parse_unix_protocol_scoped(raw, protocol)
        else:
            rows = parse_unix_general(raw, protocol)
        rows = [record for record in rows if record.port == target]
        if protocol is Protocol.UDP:
            return rows
        # Output alone is not enough: TIME_WAIT and CLOSE_WAIT residue also shows up.
        return [record for record in rows if (record.state or '').upper() in LISTEN_STATES]
