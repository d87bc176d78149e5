"""
Reporting sinks for user-facing messages.

The engine only calls report(level, message); where the text ends up is up
to the sink.
"""
from __future__ import annotations
import sys
from typing import List, Optional, Protocol, TextIO, Tuple

SUCCESS = "success"
ERROR = "error"
INFO = "info"

_COLORS = {
    SUCCESS: "\x1b[32m",
    ERROR: "\x1b[31m",
}
_RESET = "\x1b[0m"


class Reporter(Protocol):
    """Anything that accepts leveled messages."""

    def report(self, level: str, message: str) -> None:
        ...


class ConsoleReporter:
    """
    Prints success in green and errors in red. Info lines only appear when
    verbose. Colour defaults to on only when the stream is a terminal.
    """

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        self.verbose = verbose
        self.stream = stream
        self.color = color

    def report(self, level: str, message: str) -> None:
        if level == INFO and not self.verbose:
            return
        stream = self.stream or sys.stdout
        use_color = self.color if self.color is not None else stream.isatty()
        color = _COLORS.get(level) if use_color else None
        text = f"{color}{message}{_RESET}" if color else message
        print(text, file=stream)


class CollectingReporter:
    """Keeps every message in memory."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def report(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    def lines(self, level: Optional[str] = None) -> List[str]:
        return [message for lvl, message in self.messages if level is None or lvl == level]
