"""Hypothesis strategies for generated concept graphs.

Usage::

    from hypothesis import given

    from ontogen.strategies import graphs

    @given(graphs(open=True))
    def test_something(graph):
        ...

The size and the seed are drawn from Hypothesis, so failing examples shrink
towards small graphs. The summary of the drawn graph is attached as a note
and printed alongside the minimal failing example.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from hypothesis import strategies as st

from ontogen.config import GeneratorConfig
from ontogen.generator import GraphGenerator, HypothesisReporter

if TYPE_CHECKING:
    from ontogen.generator import GenerationCache
    from ontogen.graph import ConceptGraph

DEFAULT_MAX_SIZE = 50
MAX_SEED = 2**32 - 1


@st.composite
def graphs(
    draw: st.DrawFn,
    open: bool | None = None,  # noqa: A002 - mirrors GeneratorConfig.open_on_completion
    max_size: int = DEFAULT_MAX_SIZE,
    cache: GenerationCache | None = None,
) -> ConceptGraph:
    """Draw a randomly generated concept graph.

    Args:
        draw: Supplied by Hypothesis.
        open: Leave the graph open (True) or closed (False). None draws it.
        max_size: Largest number of mutations to apply.
        cache: Cache to publish to. Defaults to the shared one.
    """
    size = draw(st.integers(min_value=0, max_value=max_size))
    seed = draw(st.integers(min_value=0, max_value=MAX_SEED))
    generator = GraphGenerator(
        GeneratorConfig(open_on_completion=open, seed=seed),
        rng=random.Random(seed),
        cache=cache,
        reporter=HypothesisReporter(),
    )
    graph = generator.generate(size)
    generator.handle()
    return graph
