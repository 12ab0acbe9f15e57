"""Graph operation error types.

These errors are raised when a call on the concept graph is rejected. Every
error carries an ``ErrorKind`` from one explicit enumeration, and the kind
alone decides whether a random generator may treat the rejection as an
expected consequence of exploration (retryable) or as a bug (fatal).

The engine rolls back the rejected call before raising, so a caller that
catches one of these errors sees the graph exactly as it was before the call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Why the graph rejected an operation.

    The second element of each value is the retryable flag.
    """

    LABEL_TAKEN = ("label_taken", True)
    HIERARCHY = ("hierarchy", True)
    DATA_TYPE_MISMATCH = ("data_type_mismatch", True)
    ABSTRACT_TYPE = ("abstract_type", True)
    CAPABILITY_CONFLICT = ("capability_conflict", True)
    ROLE_PLAYER = ("role_player", True)
    UNSUPPORTED = ("unsupported", True)
    KIND_MISMATCH = ("kind_mismatch", False)
    CLOSED = ("closed", False)

    def __init__(self, code: str, retryable: bool) -> None:
        self.code = code
        self.retryable = retryable


class GraphOperationError(Exception):
    """Base class for rejected graph operations.

    Subclasses set ``kind`` and build their message in ``__post_init__``.
    """

    kind: ErrorKind = ErrorKind.UNSUPPORTED

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def to_feedback(self) -> str:
        """Format the rejection as a one-line diagnostic."""
        return f"[{self.kind.code}] {self}"


@dataclass
class LabelTakenError(GraphOperationError):
    """Raised when a label is already used by a concept of another kind.

    Attributes:
        label: The label that was requested.
        existing_kind: Kind of the concept that already owns the label.
        requested_kind: Kind the caller tried to create.
    """

    label: str
    existing_kind: str
    requested_kind: str

    kind = ErrorKind.LABEL_TAKEN

    def __post_init__(self) -> None:
        super().__init__(
            f"Label '{self.label}' is already a {self.existing_kind}, "
            f"cannot put it as a {self.requested_kind}"
        )


@dataclass
class HierarchyError(GraphOperationError):
    """Raised when setting a supertype would create a loop."""

    label: str
    super_label: str

    kind = ErrorKind.HIERARCHY

    def __post_init__(self) -> None:
        super().__init__(
            f"Setting '{self.super_label}' as supertype of '{self.label}' creates a cycle"
        )


@dataclass
class DataTypeMismatchError(GraphOperationError):
    """Raised when a resource type or value disagrees with a data type."""

    label: str
    expected: str
    provided: str

    kind = ErrorKind.DATA_TYPE_MISMATCH

    def __post_init__(self) -> None:
        super().__init__(
            f"'{self.label}' expects data type {self.expected}, got {self.provided}"
        )


@dataclass
class AbstractTypeError(GraphOperationError):
    """Raised on instantiating an abstract type, or abstracting a type with instances."""

    label: str
    reason: str

    kind = ErrorKind.ABSTRACT_TYPE

    def __post_init__(self) -> None:
        super().__init__(f"Type '{self.label}' {self.reason}")


@dataclass
class CapabilityConflictError(GraphOperationError):
    """Raised when a capability contradicts one that is already granted."""

    label: str
    detail: str

    kind = ErrorKind.CAPABILITY_CONFLICT

    def __post_init__(self) -> None:
        super().__init__(f"Type '{self.label}': {self.detail}")


@dataclass
class RolePlayerError(GraphOperationError):
    """Raised when a role player does not fit the relation or role."""

    relation_id: str
    role_label: str
    detail: str

    kind = ErrorKind.ROLE_PLAYER

    def __post_init__(self) -> None:
        super().__init__(
            f"Cannot add role player for '{self.role_label}' on relation "
            f"'{self.relation_id}': {self.detail}"
        )


@dataclass
class UnsupportedOperationError(GraphOperationError):
    """Raised when an operation is not allowed on a concept, e.g. a meta type."""

    operation: str
    target: str

    kind = ErrorKind.UNSUPPORTED

    def __post_init__(self) -> None:
        super().__init__(f"Operation '{self.operation}' is not supported on '{self.target}'")


@dataclass
class ConceptKindMismatchError(GraphOperationError):
    """Raised when two concepts of different families are combined.

    Unlike the other rejections this signals a caller bug: a well-formed
    caller never reparents a role under a relation type.
    """

    operation: str
    expected: str
    provided: str

    kind = ErrorKind.KIND_MISMATCH

    def __post_init__(self) -> None:
        super().__init__(
            f"'{self.operation}' expects a {self.expected}, got a {self.provided}"
        )


@dataclass
class GraphClosedError(GraphOperationError):
    """Raised when using a graph handle after it was closed."""

    keyspace: str

    kind = ErrorKind.CLOSED

    def __post_init__(self) -> None:
        super().__init__(f"Graph for keyspace '{self.keyspace}' is closed")
