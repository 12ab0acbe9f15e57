"""Holder for the most recently generated graph and its trace."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ontogen.generator.summary import SummaryTrace
    from ontogen.graph import ConceptGraph


@dataclass(frozen=True)
class GeneratedGraph:
    """One published generation result."""

    graph: ConceptGraph
    trace: SummaryTrace


class GenerationCache:
    """Keeps at most one generation result, replaced wholesale.

    A test harness owns one of these and hands it to every generator whose
    counterexamples it wants reported. Generators without an explicit cache
    share ``default_cache``.
    """

    def __init__(self) -> None:
        self._entry: GeneratedGraph | None = None

    @property
    def graph(self) -> ConceptGraph | None:
        return self._entry.graph if self._entry else None

    @property
    def trace(self) -> SummaryTrace | None:
        return self._entry.trace if self._entry else None

    def replace(self, graph: ConceptGraph, trace: SummaryTrace) -> None:
        self._entry = GeneratedGraph(graph, trace)

    def clear(self) -> None:
        self._entry = None

    def __bool__(self) -> bool:
        return self._entry is not None


default_cache = GenerationCache()
