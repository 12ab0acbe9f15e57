"""Replayable summaries of generated graphs.

Every successful mutation appends one statement to the summary, written in
the call syntax of the graph API so that a failing example can be rebuilt by
hand:

    size: 2
    foo = graph.put_entity_type("foo").sup(entity);
    fooV9 = foo.add_entity();

Values render through the SummaryRenderable capability when they have it
(concepts, labels) and through ``str()`` otherwise.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SummaryRenderable(Protocol):
    """Something that knows its own summary token."""

    def render_summary(self) -> str: ...


def summary_format(value: Any) -> str:
    """Render one value as a summary token."""
    if isinstance(value, SummaryRenderable):
        return value.render_summary()
    return str(value)


def value_to_string(value: Any) -> str:
    """Render a resource value as a literal: strings quoted, others as-is."""
    if isinstance(value, str):
        return json.dumps(value)
    return str(value)


@dataclass(frozen=True)
class SummaryTrace:
    """The summary of one generation. Immutable once built.

    Attributes:
        size: The requested number of successful mutations.
        lines: One rendered statement per successful mutation, in order.
    """

    size: int
    lines: tuple[str, ...] = ()

    @property
    def header(self) -> str:
        return f"size: {self.size}"

    def __len__(self) -> int:
        return len(self.lines)

    def __str__(self) -> str:
        return "".join(f"{line}\n" for line in (self.header, *self.lines))


class SummaryRecorder:
    """Accumulates statements for the generation in progress."""

    def __init__(self) -> None:
        self._size = 0
        self._lines: list[str] = []

    def begin(self, size: int) -> None:
        """Start a fresh summary for a generation of *size* mutations."""
        self._size = size
        self._lines = []

    def record(self, target: Any, method: str, *args: Any) -> None:
        """Record ``target.method(args...);``."""
        rendered_args = ", ".join(summary_format(arg) for arg in args)
        self._lines.append(f"{summary_format(target)}.{method}({rendered_args});")

    def record_assign(self, assigned: Any, target: Any, method: str, *args: Any) -> None:
        """Record ``assigned = target.method(args...);``."""
        self.record(f"{summary_format(assigned)} = {summary_format(target)}", method, *args)

    @property
    def trace(self) -> SummaryTrace:
        return SummaryTrace(self._size, tuple(self._lines))

    def __len__(self) -> int:
        return len(self._lines)
