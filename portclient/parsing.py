"""
Handles parsing and validation of port specifications.
"""
from __future__ import annotations
import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidPortSpec

MAX_PORT = 65535

_RANGE_RE = re.compile(r'^\s*(\S+?)\s*-\s*(\S+)\s*$')


def _coerce_port(value: Any) -> int:
    """
    Converts one port value to an int. Returns 0 for anything that is not a
    whole number in 1..65535, so callers can drop it.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, float):
        if not value.is_integer():
            return 0
        value = int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
        if not number.is_integer():
            return 0
        value = int(number)
    if not isinstance(value, int):
        return 0
    if not 0 < value <= MAX_PORT:
        return 0
    return value


def _dedupe(ports: Iterable[int]) -> Tuple[int, ...]:
    return tuple(dict.fromkeys(ports))


def parse_range(range_spec: str) -> Tuple[int, ...]:
    """Expands an inclusive 'A-B' range into ascending ports."""
    match = _RANGE_RE.match(str(range_spec))
    if not match:
        raise InvalidPortSpec(f"Invalid port range '{range_spec}'. Use START-END, e.g. 8080-8090.")
    start, end = _coerce_port(match.group(1)), _coerce_port(match.group(2))
    if not start or not end:
        raise InvalidPortSpec(f"Invalid port range '{range_spec}'. Bounds must be numbers between 1 and {MAX_PORT}.")
    if start > end:
        raise InvalidPortSpec(f"Invalid port range '{range_spec}'. Start must not exceed end.")
    return tuple(range(start, end + 1))


class PortSpecParser:
    """Resolves a port spec (single value, list, or range) into concrete ports."""

    def resolve(self, spec: Any, range_spec: Optional[str] = None) -> Tuple[int, ...]:
        """
        Returns the distinct ports described by spec, in input order.

        Lists keep only the entries that are valid ports. Without a list, a
        range takes precedence over a single value. A single value may also be
        a comma-separated string or an 'A-B' string. Returns an empty tuple
        when nothing usable is given; a malformed range raises InvalidPortSpec.
        """
        if isinstance(spec, (list, tuple)):
            return self._from_list(spec)
        if range_spec:
            return parse_range(range_spec)
        return self._from_single(spec)

    def _from_list(self, values: Sequence[Any]) -> Tuple[int, ...]:
        return _dedupe(port for port in map(_coerce_port, values) if port)

    def _from_single(self, spec: Any) -> Tuple[int, ...]:
        if isinstance(spec, str):
            text = spec.strip()
            if ',' in text:
                return self._from_list(text.split(','))
            if _RANGE_RE.match(text) and not text.startswith('-'):
                return parse_range(text)
        port = _coerce_port(spec)
        return (port,) if port else ()


def parse_selection(answer: str, active_ports: Sequence[str]) -> List[int]:
    """
    Maps an operator's comma-separated, 1-based index selection onto the
    listed ports. Indices that are not numbers or fall outside the list are
    dropped.
    """
    selected: List[int] = []
    for token in (answer or '').split(','):
        token = token.strip()
        if not token.isdecimal():
            continue
        index = int(token)
        if not 1 <= index <= len(active_ports):
            continue
        port = _coerce_port(active_ports[index - 1])
        if port:
            selected.append(port)
    return list(dict.fromkeys(selected))
