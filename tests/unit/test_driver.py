"""Tests for GraphGenerator and the graph inspection helpers."""

from __future__ import annotations

import random

import pytest

from ontogen.config import GeneratorConfig
from ontogen.generator import (
    GenerationCache,
    GeneratorError,
    GraphGenerator,
    MutationCatalog,
    MutationCtx,
    MutationKind,
    RetryBudgetExceededError,
    all_concepts_from,
    all_instances_from,
    all_ontology_elements_from,
    default_cache,
)
from ontogen.generator.errors import ExhaustionError
from ontogen.graph import (
    ConceptGraph,
    ConceptKindMismatchError,
    DataType,
    GraphSession,
    MetaLabel,
    open_session,
)


class RecordingReporter:
    """Collects reported summaries."""

    def __init__(self) -> None:
        self.reports: list[str] = []

    def report(self, trace_text: str) -> None:
        self.reports.append(trace_text)


class BrokenReporter:
    def report(self, trace_text: str) -> None:
        raise OSError("sink unavailable")


def make_generator(
    cache: GenerationCache,
    seed: int = 0,
    open_on_completion: bool | None = True,
    **kwargs: object,
) -> GraphGenerator:
    config = GeneratorConfig(open_on_completion=open_on_completion, seed=seed)
    return GraphGenerator(config, cache=cache, reporter=RecordingReporter(), **kwargs)  # type: ignore[arg-type]


def _cross_kind_reparent(ctx: MutationCtx) -> None:
    role = ctx.graph.put_role("parent")
    role.sup(ctx.graph.meta_relation_type())


class TestGenerate:
    """Shape of generated graphs and traces."""

    @pytest.mark.parametrize("size", [0, 1, 5, 25])
    def test_trace_has_one_line_per_mutation(self, cache: GenerationCache, size: int) -> None:
        generator = make_generator(cache)
        generator.generate(size)

        trace = generator.last_trace()
        assert trace is not None
        assert len(trace) == size
        assert str(trace).startswith(f"size: {size}\n")
        assert str(trace).count("\n") == size + 1

    def test_size_zero_yields_builtins_only(self, cache: GenerationCache) -> None:
        generator = make_generator(cache)
        graph = generator.generate(0)

        labels = {c.label.value for c in all_ontology_elements_from(graph)}
        assert labels == set(MetaLabel.ALL)
        assert all_instances_from(graph) == []
        assert str(generator.last_trace()) == "size: 0\n"

    def test_negative_size_rejected(self, cache: GenerationCache) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            make_generator(cache).generate(-1)

    def test_same_seed_same_trace(self, cache: GenerationCache) -> None:
        first = make_generator(cache, seed=42)
        first.generate(30)
        second = make_generator(GenerationCache(), seed=42)
        second.generate(30)
        assert str(first.last_trace()) == str(second.last_trace())

    def test_fixed_keyspace(self, cache: GenerationCache) -> None:
        config = GeneratorConfig(open_on_completion=True, keyspace="fixed")
        graph = GraphGenerator(config, cache=cache).generate(3)
        assert graph.keyspace == "fixed"

    def test_session_factory_is_used(self, cache: GenerationCache) -> None:
        requested: list[str] = []

        def factory(keyspace: str) -> GraphSession:
            requested.append(keyspace)
            return open_session(keyspace)

        graph = make_generator(cache, session_factory=factory).generate(2)
        assert requested == [graph.keyspace]

    def test_stats_recorded(self, cache: GenerationCache) -> None:
        generator = make_generator(cache)
        generator.generate(10)
        assert generator.last_stats is not None
        assert generator.last_stats.steps == 10
        assert generator.last_stats.attempts >= 10


class TestOpenOnCompletion:
    """Final open or closed state."""

    def test_forced_open(self, cache: GenerationCache) -> None:
        graph = make_generator(cache, open_on_completion=True).generate(5)
        assert not graph.is_closed

    def test_forced_closed(self, cache: GenerationCache) -> None:
        graph = make_generator(cache, open_on_completion=False).generate(5)
        assert graph.is_closed

    def test_set_open_overrides_config(self, cache: GenerationCache) -> None:
        generator = make_generator(cache, open_on_completion=True).set_open(False)
        assert generator.generate(2).is_closed

    def test_unset_tosses_a_coin(self, cache: GenerationCache) -> None:
        """Both outcomes occur, and each graph is fully in one of them."""
        outcomes = set()
        for seed in range(40):
            graph = make_generator(cache, seed=seed, open_on_completion=None).generate(2)
            outcomes.add(graph.is_closed)
        assert outcomes == {True, False}


class TestPublishing:
    """The cache holds only the latest generation."""

    def test_second_generation_closes_first(self, cache: GenerationCache) -> None:
        generator = make_generator(cache)
        first = generator.generate(5)
        assert not first.is_closed

        second = generator.generate(5)
        assert first.is_closed
        assert generator.last_generated_graph() is second

    def test_shared_cache_closes_other_generators_graph(self, cache: GenerationCache) -> None:
        first = make_generator(cache, seed=1).generate(3)
        make_generator(cache, seed=2).generate(3)
        assert first.is_closed

    def test_default_cache_when_none_given(self) -> None:
        generator = GraphGenerator(GeneratorConfig(seed=3))
        graph = generator.generate(1)
        assert default_cache.graph is graph

    def test_fatal_error_aborts_and_keeps_previous(self, cache: GenerationCache) -> None:
        catalog = MutationCatalog(handlers=dict.fromkeys(MutationKind, _cross_kind_reparent))
        generator = make_generator(cache, catalog=catalog)

        with pytest.raises(ConceptKindMismatchError):
            generator.generate(1)
        assert generator.last_generated_graph() is None

    def test_aborted_graph_is_closed(self, cache: GenerationCache) -> None:
        seen: list[ConceptGraph] = []

        def fatal(ctx: MutationCtx) -> None:
            seen.append(ctx.graph)
            _cross_kind_reparent(ctx)

        catalog = MutationCatalog(handlers=dict.fromkeys(MutationKind, fatal))
        generator = make_generator(cache, catalog=catalog)
        with pytest.raises(ConceptKindMismatchError):
            generator.generate(1)
        assert seen
        assert seen[0].is_closed

    def test_budget_from_config(self, cache: GenerationCache) -> None:
        def never(ctx: MutationCtx) -> None:
            raise ExhaustionError("anything")

        config = GeneratorConfig(open_on_completion=True, max_attempts_per_step=3)
        generator = GraphGenerator(
            config,
            cache=cache,
            catalog=MutationCatalog(handlers=dict.fromkeys(MutationKind, never)),
        )
        with pytest.raises(RetryBudgetExceededError):
            generator.generate(1)
        assert generator.last_stats is not None
        assert generator.last_stats.attempts == 3

    def test_incomplete_catalog_rejected(self, cache: GenerationCache) -> None:
        with pytest.raises(GeneratorError, match="No handler registered"):
            GraphGenerator(cache=cache, catalog=MutationCatalog(handlers={}))


class TestHandle:
    """Reporting the last trace for a failing example."""

    def test_reports_last_trace(self, cache: GenerationCache) -> None:
        reporter = RecordingReporter()
        generator = GraphGenerator(
            GeneratorConfig(seed=9), cache=cache, reporter=reporter, rng=random.Random(9)
        )
        generator.generate(4)
        generator.handle(["counterexample"], lambda: None)

        assert reporter.reports == [str(generator.last_trace())]

    def test_nothing_to_report_before_generation(self, cache: GenerationCache) -> None:
        reporter = RecordingReporter()
        GraphGenerator(cache=cache, reporter=reporter).handle()
        assert reporter.reports == []

    def test_reporter_failure_is_suppressed(self, cache: GenerationCache) -> None:
        generator = GraphGenerator(cache=cache, reporter=BrokenReporter())
        generator.generate(2)
        generator.handle()

    def test_handle_does_not_touch_graph(self, cache: GenerationCache) -> None:
        generator = make_generator(cache)
        graph = generator.generate(6)
        before = graph.to_dict()
        generator.handle()
        assert graph.to_dict() == before
        assert not graph.is_closed


class TestInspectionHelpers:
    """all_*_from helpers see implicit concepts and restore visibility."""

    def test_helpers_include_implicit_concepts(self, cache: GenerationCache) -> None:
        graph = make_generator(cache).generate(0)
        person = graph.put_entity_type("person")
        name = graph.put_resource_type("name", DataType.STRING)
        person.resource(name)
        alice = person.add_entity()
        alice.resource(name.put_resource("Alice"))

        labels = {c.label.value for c in all_ontology_elements_from(graph)}
        assert "has-name" in labels
        assert len(all_instances_from(graph)) == 3  # alice, "Alice", the has-name relation

    @pytest.mark.parametrize("initial", [True, False])
    def test_visibility_restored(self, cache: GenerationCache, initial: bool) -> None:
        graph = make_generator(cache).generate(10)
        graph.show_implicit_concepts(initial)

        all_ontology_elements_from(graph)
        assert graph.implicit_concepts_visible is initial
        all_instances_from(graph)
        assert graph.implicit_concepts_visible is initial

    def test_all_concepts_is_elements_then_instances(self, cache: GenerationCache) -> None:
        graph = make_generator(cache).generate(15)
        expected = all_ontology_elements_from(graph) + all_instances_from(graph)
        assert all_concepts_from(graph) == expected
