"""Terminal output for termstat frames."""

from .sink import CLEAR_HOME, SinkStats, TerminalSink

__all__ = [
    "CLEAR_HOME",
    "SinkStats",
    "TerminalSink",
]
