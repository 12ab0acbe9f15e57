"""Retry loop that turns random attempts into successful mutations.

One step of a generation draws a mutation kind uniformly at random and
applies it. A retryable rejection discards the attempt and draws again
without using up the step; any other error propagates and aborts the
generation. A step therefore costs exactly one successful mutation, however
many attempts it took.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ontogen.config import DEFAULT_MAX_ATTEMPTS_PER_STEP
from ontogen.generator.errors import ErrorCategory, RetryBudgetExceededError, classify_error
from ontogen.graph.errors import GraphOperationError
from ontogen.observability.logging import get_logger

if TYPE_CHECKING:
    from ontogen.generator.catalog import MutationCatalog, MutationCtx, MutationKind

log = get_logger(__name__)


@dataclass
class ExecutorStats:
    """Counters for one generation.

    Attributes:
        steps: Successful mutations.
        attempts: All attempts, successful or not.
        applied: Successful mutations per kind name.
        rejections: Retryable rejections per error class name.
    """

    steps: int = 0
    attempts: int = 0
    applied: Counter[str] = field(default_factory=Counter)
    rejections: Counter[str] = field(default_factory=Counter)

    @property
    def retries(self) -> int:
        return self.attempts - self.steps


class MutationExecutor:
    """Applies mutations from a catalog until each step succeeds.

    Args:
        catalog: Mutations to draw from.
        ctx: Graph, random source, selector and recorder for this generation.
        max_attempts_per_step: Attempts allowed per step before the step
            fails with RetryBudgetExceededError. None retries without bound.
    """

    def __init__(
        self,
        catalog: MutationCatalog,
        ctx: MutationCtx,
        *,
        max_attempts_per_step: int | None = DEFAULT_MAX_ATTEMPTS_PER_STEP,
    ) -> None:
        self.catalog = catalog
        self.ctx = ctx
        self.max_attempts_per_step = max_attempts_per_step
        self.stats = ExecutorStats()

    def mutate_once(self) -> MutationKind:
        """Apply exactly one successful mutation.

        Returns:
            The kind of the mutation that succeeded.

        Raises:
            RetryBudgetExceededError: If the step ran out of attempts.
            Exception: Any error classified as fatal, unchanged.
        """
        attempts = 0
        last_error = ""
        while True:
            if self.max_attempts_per_step is not None and attempts >= self.max_attempts_per_step:
                log.warning(
                    "retry_budget_exceeded",
                    step=self.stats.steps,
                    attempts=attempts,
                    last_error=last_error,
                )
                raise RetryBudgetExceededError(self.stats.steps, attempts, last_error)

            kind = self.catalog.choose(self.ctx.rng)
            attempts += 1
            self.stats.attempts += 1
            try:
                self.catalog.apply(kind, self.ctx)
            except Exception as e:
                if classify_error(e) is ErrorCategory.FATAL:
                    raise
                last_error = e.to_feedback() if isinstance(e, GraphOperationError) else str(e)
                self.stats.rejections[type(e).__name__] += 1
                log.debug("mutation_rejected", kind=kind.value, error=last_error)
                continue

            self.stats.steps += 1
            self.stats.applied[kind.value] += 1
            return kind

    def run(self, size: int) -> ExecutorStats:
        """Apply *size* successful mutations and return the counters."""
        for _ in range(size):
            self.mutate_once()
        return self.stats
