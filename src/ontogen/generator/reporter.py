"""Sinks for the summary of a failing generated graph.

When a test fails on a generated graph, the test framework asks the
generator to report how that graph was built. The generator hands the
trace text to a CounterexampleReporter; where the text ends up is the
reporter's business.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from hypothesis import note
from rich.console import Console

from ontogen.observability.logging import get_logger

log = get_logger(__name__)

HEADER = "Graph generated:"


@runtime_checkable
class CounterexampleReporter(Protocol):
    """Receives the summary text of the last generated graph."""

    def report(self, trace_text: str) -> None: ...


class StderrReporter:
    """Print the summary to standard error."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def report(self, trace_text: str) -> None:
        text = f"{HEADER}\n{trace_text.rstrip()}"
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)


class LoggingReporter:
    """Emit the summary as a structured log event."""

    def report(self, trace_text: str) -> None:
        log.warning("graph_generated", summary=trace_text)


class HypothesisReporter:
    """Attach the summary to the current Hypothesis test case.

    Hypothesis prints notes only for the final, minimal failing example,
    which is exactly when the summary is worth reading.
    """

    def report(self, trace_text: str) -> None:
        note(f"{HEADER}\n{trace_text}")
