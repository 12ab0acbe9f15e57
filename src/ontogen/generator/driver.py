"""Generation driver: builds one random graph per call.

A generation provisions a fresh, empty keyspace, applies exactly ``size``
successful random mutations, leaves the graph open or closed, and publishes
the graph together with its summary trace to a GenerationCache. The previous
cached graph is closed before the next generation starts.

Usage::

    generator = GraphGenerator(GeneratorConfig(seed=7))
    graph = generator.generate(20)
    print(generator.last_trace())
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from ontogen.config import GeneratorConfig
from ontogen.generator.cache import GenerationCache, default_cache
from ontogen.generator.catalog import MutationCatalog, MutationCtx
from ontogen.generator.errors import GeneratorError
from ontogen.generator.executor import ExecutorStats, MutationExecutor
from ontogen.generator.reporter import CounterexampleReporter, StderrReporter
from ontogen.generator.selector import Selector
from ontogen.generator.summary import SummaryRecorder
from ontogen.generator.values import ValueSources
from ontogen.graph import TxType, implicit_concepts_shown, open_session
from ontogen.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from ontogen.generator.summary import SummaryTrace
    from ontogen.graph import ConceptGraph, GraphSession, OntologyConcept, Thing

log = get_logger(__name__)


class GraphGenerator:
    """Generates random concept graphs for property-based tests.

    Args:
        config: Generation settings. Defaults to ``GeneratorConfig()``.
        rng: Random source. Defaults to one seeded from ``config.seed``.
        cache: Where finished generations are published. Defaults to the
            process-wide ``default_cache``.
        reporter: Where ``handle`` sends the summary of a failing graph.
        session_factory: Opens a session on a keyspace name.
        values: Label, keyspace and value generators.
        catalog: Mutations to draw from.

    Raises:
        GeneratorError: If the catalog has kinds without handlers.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        rng: random.Random | None = None,
        cache: GenerationCache | None = None,
        reporter: CounterexampleReporter | None = None,
        session_factory: Callable[[str], GraphSession] = open_session,
        values: ValueSources | None = None,
        catalog: MutationCatalog | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.cache = cache if cache is not None else default_cache
        self.reporter = reporter or StderrReporter()
        self.session_factory = session_factory
        self.values = values or ValueSources()
        self.catalog = catalog or MutationCatalog()
        self.recorder = SummaryRecorder()
        self.last_stats: ExecutorStats | None = None

        errors = self.catalog.validate()
        if errors:
            raise GeneratorError("; ".join(errors))

    def set_open(self, open_on_completion: bool | None) -> GraphGenerator:
        """Force generated graphs open (True) or closed (False), or None for random."""
        self.config = replace(self.config, open_on_completion=open_on_completion)
        return self

    def generate(self, size: int) -> ConceptGraph:
        """Build a new graph with exactly *size* successful mutations.

        Args:
            size: Number of mutations that must succeed. Must be >= 0.

        Returns:
            The generated graph, also published to the cache.

        Raises:
            ValueError: If size is negative.
            RetryBudgetExceededError: If a step ran out of attempts.
            Exception: Any fatal mutation error, unchanged. The partly built
                graph is closed first.
        """
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")

        keyspace = self.config.keyspace or self.values.keyspace(self.rng)
        session = self.session_factory(keyspace)

        previous = self.cache.graph
        if previous is not None and not previous.is_closed:
            previous.close()

        graph = session.open(TxType.WRITE)
        graph.delete()
        graph = session.open(TxType.WRITE)

        self.recorder.begin(size)
        ctx = MutationCtx(
            graph=graph,
            rng=self.rng,
            selector=Selector(graph, self.rng),
            recorder=self.recorder,
            values=self.values,
        )
        executor = MutationExecutor(
            self.catalog, ctx, max_attempts_per_step=self.config.max_attempts_per_step
        )

        log.debug("generation_started", keyspace=keyspace, size=size)
        try:
            self.last_stats = executor.run(size)
        except Exception:
            self.last_stats = executor.stats
            graph.close()
            log.error(
                "generation_aborted",
                keyspace=keyspace,
                completed=executor.stats.steps,
                size=size,
            )
            raise

        open_on_completion = self.config.open_on_completion
        if open_on_completion is None:
            open_on_completion = self.rng.random() < 0.5
        if not open_on_completion:
            graph.close()

        self.cache.replace(graph, self.recorder.trace)
        log.info(
            "generation_complete",
            keyspace=keyspace,
            size=size,
            attempts=self.last_stats.attempts,
            open=open_on_completion,
        )
        return graph

    def last_generated_graph(self) -> ConceptGraph | None:
        return self.cache.graph

    def last_trace(self) -> SummaryTrace | None:
        return self.cache.trace

    def handle(self, counterexample: Any = None, action: Any = None) -> None:
        """Report the summary of the last generated graph.

        Called by the test framework once it has minimized a failing input.
        Both arguments are accepted for the framework's benefit and ignored.
        Never raises: reporter failures are logged.
        """
        trace = self.cache.trace
        if trace is None:
            log.debug("counterexample_without_graph")
            return
        try:
            self.reporter.report(str(trace))
        except Exception:
            log.exception("counterexample_report_failed", reporter=type(self.reporter).__name__)


def all_ontology_elements_from(graph: ConceptGraph) -> list[OntologyConcept]:
    """Return every schema concept in *graph*, implicit ones included."""
    with implicit_concepts_shown(graph):
        return graph.meta_concept().subs()


def all_instances_from(graph: ConceptGraph) -> list[Thing]:
    """Return every instance of a non-role type in *graph*, implicit ones included."""
    with implicit_concepts_shown(graph):
        return graph.meta_concept().instances()


def all_concepts_from(graph: ConceptGraph) -> list[Any]:
    """Return all schema concepts followed by all instances."""
    with implicit_concepts_shown(graph):
        return [*graph.meta_concept().subs(), *graph.meta_concept().instances()]
