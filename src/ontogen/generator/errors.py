"""Generator error types and retry classification.

The executor is the only place that swallows errors. It asks
``classify_error`` whether an exception is an expected consequence of random
exploration (RETRYABLE) or a bug that must abort the generation (FATAL).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from ontogen.graph.errors import GraphOperationError


class ErrorCategory(Enum):
    """How the executor treats a failed mutation attempt.

    - RETRYABLE: discard the attempt and draw another mutation
    - FATAL: propagate and abort the generation
    """

    RETRYABLE = auto()
    FATAL = auto()


class GeneratorError(Exception):
    """Base class for errors raised by the generator itself."""

    retryable: bool = False


@dataclass
class ExhaustionError(GeneratorError):
    """Raised when a selector finds no candidate of the requested kind.

    Early in a generation there are few or no instances, so this is the most
    common rejection and is always retryable.

    Attributes:
        requested: Description of what was being selected.
    """

    requested: str = "candidate"

    retryable = True

    def __post_init__(self) -> None:
        super().__init__(f"No {self.requested} available to select")


@dataclass
class RetryBudgetExceededError(GeneratorError):
    """Raised when one step fails retryably more often than its budget allows.

    Attributes:
        step: Zero-based index of the step that could not complete.
        attempts: Number of attempts made.
        last_error: Text of the last retryable rejection.
    """

    step: int
    attempts: int
    last_error: str = ""

    def __post_init__(self) -> None:
        msg = f"Step {self.step} made no progress after {self.attempts} attempts"
        if self.last_error:
            msg += f" (last rejection: {self.last_error})"
        super().__init__(msg)


def classify_error(error: BaseException) -> ErrorCategory:
    """Categorize a failed mutation attempt.

    Args:
        error: The exception raised while applying a mutation.

    Returns:
        RETRYABLE for selector exhaustion and for graph rejections whose
        error kind is flagged retryable, FATAL for everything else.
    """
    if isinstance(error, GeneratorError | GraphOperationError) and error.retryable:
        return ErrorCategory.RETRYABLE
    return ErrorCategory.FATAL
