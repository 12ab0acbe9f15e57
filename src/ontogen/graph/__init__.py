"""Graph package - in-memory concept graph.

This package provides the typed concept graph that generated states live
in: schema concepts (entity, relation, resource and rule types, roles),
their instances, and keyspace sessions that hand out graph handles.
"""

from ontogen.graph.concepts import (
    Concept,
    ConceptKind,
    DataType,
    Entity,
    EntityType,
    Label,
    MetaLabel,
    OntologyConcept,
    Relation,
    RelationType,
    Resource,
    ResourceType,
    Role,
    Rule,
    RuleType,
    Thing,
    Type,
)
from ontogen.graph.errors import (
    AbstractTypeError,
    CapabilityConflictError,
    ConceptKindMismatchError,
    DataTypeMismatchError,
    ErrorKind,
    GraphClosedError,
    GraphOperationError,
    HierarchyError,
    LabelTakenError,
    RolePlayerError,
    UnsupportedOperationError,
)
from ontogen.graph.graph import ConceptGraph, TxType, implicit_concepts_shown
from ontogen.graph.session import GraphSession, drop_keyspace, open_session
from ontogen.graph.store import DictGraphStore, GraphStore

__all__ = [
    "AbstractTypeError",
    "CapabilityConflictError",
    "Concept",
    "ConceptGraph",
    "ConceptKind",
    "ConceptKindMismatchError",
    "DataType",
    "DataTypeMismatchError",
    "DictGraphStore",
    "Entity",
    "EntityType",
    "ErrorKind",
    "GraphClosedError",
    "GraphOperationError",
    "GraphSession",
    "GraphStore",
    "HierarchyError",
    "Label",
    "LabelTakenError",
    "MetaLabel",
    "OntologyConcept",
    "Relation",
    "RelationType",
    "Resource",
    "ResourceType",
    "Role",
    "RolePlayerError",
    "Rule",
    "RuleType",
    "Thing",
    "TxType",
    "Type",
    "UnsupportedOperationError",
    "drop_keyspace",
    "implicit_concepts_shown",
    "open_session",
]
