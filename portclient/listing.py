"""
Turns raw 'lsof' / 'netstat' output into ActivePortRecord lists.

Every function here is total: lines that do not fit the expected layout are
skipped, never reported as errors.
"""
from __future__ import annotations
import re
from typing import List, Optional, Pattern

from .models import ActivePortRecord, ParseStrategy, Protocol

# netstat -nao: "  TCP    0.0.0.0:8080    0.0.0.0:0    LISTENING    1234"
# UDP rows have no state column.
_WINDOWS_RE = re.compile(
    r'^\s*(?P<proto>TCP|UDP)\s+(?P<local>\S+):(?P<port>\d{1,5})\s+(?P<foreign>\S+)'
    r'\s+(?:(?P<state>\D\S*)\s+)?(?P<pid>\d+)\s*$',
    re.IGNORECASE,
)

# A local port followed by a port-translation arrow or a socket state, possibly
# after one foreign-address column (netstat layout) or in parentheses (lsof).
_GENERAL_RE = re.compile(
    r':(?P<port>\d{1,5})'
    r'(?:(?P<arrow>->)'
    r'|(?=(?:\s+\S+)?\s+\(?(?P<state>LISTEN|ESTABLISHED|CLOSED)\)?(?=\s|$)))'
)

_LINE_STATE_RE = re.compile(r'\((?P<state>[A-Z_]+)\)')
_PROTO_TOKEN_RE = re.compile(r'^(?:tcp|udp)[46]?$', re.IGNORECASE)


def _scoped_pattern(protocol: Protocol) -> Pattern[str]:
    return re.compile(
        rf'\b{protocol.value}[46]?\b.*?:(?P<port>\d{{1,5}})(?=->|\s|$)',
        re.IGNORECASE,
    )


def _lsof_pid(line: str) -> Optional[int]:
    """Returns the PID column of an lsof row, or None for other layouts."""
    parts = line.split()
    if len(parts) < 3 or _PROTO_TOKEN_RE.match(parts[0]) or not parts[1].isdigit():
        return None
    return int(parts[1]) or None


def windows_rows(raw: str, protocol: Protocol) -> List[ActivePortRecord]:
    """Every row of the protocol, duplicates included."""
    records: List[ActivePortRecord] = []
    for line in raw.splitlines():
        match = _WINDOWS_RE.match(line)
        if not match or match.group('proto').lower() != protocol.value:
            continue
        records.append(ActivePortRecord(
            port=str(int(match.group('port'))),
            protocol=protocol,
            state=match.group('state'),
            pid=int(match.group('pid')) or None,
        ))
    return records


def parse_windows(raw: str, protocol: Protocol) -> List[ActivePortRecord]:
    """One record per distinct local port for the protocol, in listing order."""
    records: List[ActivePortRecord] = []
    seen = set()
    for record in windows_rows(raw, protocol):
        if record.port not in seen:
            seen.add(record.port)
            records.append(record)
    return records


def windows_pids(raw: str, protocol: Protocol, port: int) -> List[int]:
    """Returns the owning PIDs of every row bound locally to port, without duplicates."""
    pids: List[int] = []
    for record in windows_rows(raw, protocol):
        # PID 0 owns TIME_WAIT residue and cannot be killed.
        if record.port == str(port) and record.pid and record.pid not in pids:
            pids.append(record.pid)
    return pids


def parse_unix_general(raw: str, protocol: Protocol) -> List[ActivePortRecord]:
    """
    Collects every port that carries a socket state or a '->' arrow. Remote
    ports of established connections and duplicates are kept; callers only
    test membership.
    """
    records: List[ActivePortRecord] = []
    for line in raw.splitlines():
        line_state = _LINE_STATE_RE.search(line)
        pid = _lsof_pid(line)
        for match in _GENERAL_RE.finditer(line):
            state = match.group('state') or (line_state.group('state') if line_state else None)
            records.append(ActivePortRecord(
                port=str(int(match.group('port'))),
                protocol=protocol,
                state=state,
                pid=pid,
            ))
    return records


def parse_unix_protocol_scoped(raw: str, protocol: Protocol) -> List[ActivePortRecord]:
    """Takes the local port of each row whose protocol column matches; one record per port."""
    pattern = _scoped_pattern(protocol)
    records: List[ActivePortRecord] = []
    seen = set()
    for line in raw.splitlines():
        match = pattern.search(line)
        if not match:
            continue
        port = str(int(match.group('port')))
        if port in seen:
            continue
        seen.add(port)
        line_state = _LINE_STATE_RE.search(line)
        records.append(ActivePortRecord(
            port=port,
            protocol=protocol,
            state=line_state.group('state') if line_state else None,
            pid=_lsof_pid(line),
        ))
    return records


def parse_listing(
    raw: str,
    system: str,
    protocol: Protocol,
    strategy: ParseStrategy = ParseStrategy.GENERAL_LISTING,
) -> List[ActivePortRecord]:
    """Parses raw listing output with the parser for the platform and strategy."""
    if system == "Windows":
        return parse_windows(raw, protocol)
    if strategy is ParseStrategy.PROTOCOL_SCOPED_LISTING:
        return parse_unix_protocol_scoped(raw, protocol)
    return parse_unix_general(raw, protocol)


def distinct_ports(records: List[ActivePortRecord]) -> List[str]:
    """Port numbers of the records, first occurrence order."""
    return list(dict.fromkeys(record.port for record in records))
