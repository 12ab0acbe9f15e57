"""Machine-readable report of one generation.

Built by the CLI for ``--json`` output. The report reads the graph's raw
store contents, so it works on closed graphs as well as open ones.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from ontogen.generator.executor import ExecutorStats
    from ontogen.generator.summary import SummaryTrace
    from ontogen.graph import ConceptGraph


class GenerationReport(BaseModel):
    """Outcome of one ``GraphGenerator.generate`` call.

    Attributes:
        keyspace: Keyspace the graph was built in.
        size: Requested number of successful mutations.
        open: Whether the graph was left open.
        attempts: Mutation attempts, successful or not.
        applied: Successful mutations per mutation kind.
        rejections: Retryable rejections per error class.
        concept_counts: Stored concepts per concept kind, built-ins included.
        summary: The trace, one statement per line, header first.
    """

    keyspace: str = Field(min_length=1)
    size: int = Field(ge=0)
    open: bool
    attempts: int = Field(default=0, ge=0)
    applied: dict[str, int] = Field(default_factory=dict)
    rejections: dict[str, int] = Field(default_factory=dict)
    concept_counts: dict[str, int] = Field(default_factory=dict)
    summary: list[str] = Field(default_factory=list)

    @classmethod
    def from_generation(
        cls,
        graph: ConceptGraph,
        trace: SummaryTrace,
        stats: ExecutorStats | None = None,
    ) -> GenerationReport:
        nodes = graph.to_dict()["nodes"].values()
        counts = Counter(node["kind"] for node in nodes)
        return cls(
            keyspace=graph.keyspace,
            size=trace.size,
            open=not graph.is_closed,
            attempts=stats.attempts if stats else 0,
            applied=dict(stats.applied) if stats else {},
            rejections=dict(stats.rejections) if stats else {},
            concept_counts=dict(sorted(counts.items())),
            summary=[trace.header, *trace.lines],
        )
