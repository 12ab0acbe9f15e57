"""Random graph generation.

Builds concept graphs by applying random mutations through the graph API,
recording a replayable summary of every successful mutation.
"""

from ontogen.generator.cache import GeneratedGraph, GenerationCache, default_cache
from ontogen.generator.catalog import MutationCatalog, MutationCtx, MutationKind, mutation
from ontogen.generator.driver import (
    GraphGenerator,
    all_concepts_from,
    all_instances_from,
    all_ontology_elements_from,
)
from ontogen.generator.errors import (
    ErrorCategory,
    ExhaustionError,
    GeneratorError,
    RetryBudgetExceededError,
    classify_error,
)
from ontogen.generator.executor import ExecutorStats, MutationExecutor
from ontogen.generator.reporter import (
    CounterexampleReporter,
    HypothesisReporter,
    LoggingReporter,
    StderrReporter,
)
from ontogen.generator.selector import MetaKind, Selector
from ontogen.generator.summary import SummaryRecorder, SummaryTrace, summary_format
from ontogen.generator.values import ValueSources

__all__ = [
    "CounterexampleReporter",
    "ErrorCategory",
    "ExecutorStats",
    "ExhaustionError",
    "GeneratedGraph",
    "GenerationCache",
    "GeneratorError",
    "GraphGenerator",
    "HypothesisReporter",
    "LoggingReporter",
    "MetaKind",
    "MutationCatalog",
    "MutationCtx",
    "MutationExecutor",
    "MutationKind",
    "RetryBudgetExceededError",
    "Selector",
    "StderrReporter",
    "SummaryRecorder",
    "SummaryTrace",
    "ValueSources",
    "all_concepts_from",
    "all_instances_from",
    "all_ontology_elements_from",
    "classify_error",
    "default_cache",
    "mutation",
    "summary_format",
]
