"""Concept handles for the in-memory concept graph.

A handle is a thin view of one node: it knows its graph and its ID, and
every read or effect is delegated to the owning ConceptGraph. Handles are
cheap to create, compare equal when they point at the same node of the same
keyspace, and render themselves for generation summaries.

Schema-level handles (OntologyConcept and subclasses) describe types and
roles. Data-level handles (Thing and subclasses) describe instances.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ontogen.graph.graph import ConceptGraph


class ConceptKind(Enum):
    """Kind of a node in the concept graph."""

    CONCEPT = "concept"
    ENTITY_TYPE = "entity_type"
    RELATION_TYPE = "relation_type"
    RESOURCE_TYPE = "resource_type"
    ROLE = "role"
    RULE_TYPE = "rule_type"
    ENTITY = "entity"
    RELATION = "relation"
    RESOURCE = "resource"
    RULE = "rule"

    @property
    def is_schema(self) -> bool:
        return self in _SCHEMA_KINDS


_SCHEMA_KINDS = frozenset(
    {
        ConceptKind.CONCEPT,
        ConceptKind.ENTITY_TYPE,
        ConceptKind.RELATION_TYPE,
        ConceptKind.RESOURCE_TYPE,
        ConceptKind.ROLE,
        ConceptKind.RULE_TYPE,
    }
)


class MetaLabel:
    """Labels of the built-in concepts present in every graph."""

    CONCEPT = "concept"
    ENTITY = "entity"
    RELATION = "relation"
    RESOURCE = "resource"
    ROLE = "role"
    RULE = "rule"
    INFERENCE_RULE = "inference-rule"
    CONSTRAINT_RULE = "constraint-rule"

    ALL = frozenset(
        {CONCEPT, ENTITY, RELATION, RESOURCE, ROLE, RULE, INFERENCE_RULE, CONSTRAINT_RULE}
    )


class DataType(Enum):
    """Data type of a resource type's values."""

    STRING = "string"
    LONG = "long"
    DOUBLE = "double"
    BOOLEAN = "boolean"

    def accepts(self, value: Any) -> bool:
        """Check whether *value* can be stored under this data type."""
        if self is DataType.BOOLEAN:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if self is DataType.STRING:
            return isinstance(value, str)
        if self is DataType.LONG:
            return isinstance(value, int)
        return isinstance(value, float)


@dataclass(frozen=True)
class Label:
    """Label of a schema concept. Unique within a graph."""

    value: str

    def __str__(self) -> str:
        return self.value

    def render_summary(self) -> str:
        return json.dumps(self.value)


class Concept:
    """Handle to one node of a ConceptGraph."""

    __slots__ = ("_graph", "id")

    def __init__(self, graph: ConceptGraph, concept_id: str) -> None:
        self._graph = graph
        self.id = concept_id

    @property
    def graph(self) -> ConceptGraph:
        return self._graph

    @property
    def kind(self) -> ConceptKind:
        return self._graph.kind_of(self)

    @property
    def is_role(self) -> bool:
        return self.kind is ConceptKind.ROLE

    @property
    def is_type(self) -> bool:
        return self.kind.is_schema and not self.is_role

    @property
    def is_thing(self) -> bool:
        return not self.kind.is_schema

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Concept):
            return NotImplemented
        return self.id == other.id and self._graph.keyspace == other._graph.keyspace

    def __hash__(self) -> int:
        return hash((self._graph.keyspace, self.id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"

    def render_summary(self) -> str:
        raise NotImplementedError


class OntologyConcept(Concept):
    """A schema-level concept: a type or a role."""

    __slots__ = ()

    @property
    def label(self) -> Label:
        return Label(self._graph.node_field(self, "label"))

    @property
    def is_meta(self) -> bool:
        return bool(self._graph.node_field(self, "meta"))

    @property
    def is_implicit(self) -> bool:
        return bool(self._graph.node_field(self, "implicit"))

    def sup(self, super_concept: OntologyConcept | None = None) -> Any:
        """Get the direct supertype, or set it and return self."""
        if super_concept is None:
            return self._graph.supertype_of(self)
        self._graph.set_supertype(self, super_concept)
        return self

    def subs(self) -> list[OntologyConcept]:
        """All direct and transitive subtypes, self included."""
        return self._graph.subs_of(self)

    def scope(self, thing: Thing) -> OntologyConcept:
        self._graph.scope(self, thing)
        return self

    def scopes(self) -> list[Thing]:
        return self._graph.scopes_of(self)

    def render_summary(self) -> str:
        return self.label.value.replace("-", "_")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label.value})"


class Role(OntologyConcept):
    __slots__ = ()


class Type(OntologyConcept):
    """A schema type that can have instances and capabilities."""

    __slots__ = ()

    @property
    def is_abstract(self) -> bool:
        return bool(self._graph.node_field(self, "abstract"))

    def set_abstract(self, is_abstract: bool) -> Type:
        self._graph.set_abstract(self, is_abstract)
        return self

    def plays(self, role: Role) -> Type:
        self._graph.grant_plays(self, role)
        return self

    def resource(self, resource_type: ResourceType) -> Type:
        self._graph.grant_resource(self, resource_type, required=False)
        return self

    def key(self, resource_type: ResourceType) -> Type:
        self._graph.grant_resource(self, resource_type, required=True)
        return self

    def played_roles(self) -> list[Role]:
        return self._graph.played_roles_of(self)

    def instances(self) -> list[Thing]:
        """All instances of this type and of its subtypes."""
        return self._graph.instances_of(self)


class EntityType(Type):
    __slots__ = ()

    def add_entity(self) -> Entity:
        return self._graph.add_instance(self)  # type: ignore[return-value]


class RelationType(Type):
    __slots__ = ()

    def add_relation(self) -> Relation:
        return self._graph.add_instance(self)  # type: ignore[return-value]

    def relates(self, role: Role) -> RelationType:
        self._graph.relate(self, role)
        return self

    def related_roles(self) -> list[Role]:
        return self._graph.related_roles_of(self)


class ResourceType(Type):
    __slots__ = ()

    @property
    def data_type(self) -> DataType | None:
        raw = self._graph.node_field(self, "data_type")
        return DataType(raw) if raw is not None else None

    def put_resource(self, value: Any) -> Resource:
        return self._graph.put_resource(self, value)


class RuleType(Type):
    __slots__ = ()


class Thing(Concept):
    """A data-level instance, typed by exactly one Type."""

    __slots__ = ()

    def type(self) -> Type:
        return self._graph.type_of(self)

    def resource(self, resource: Resource) -> Thing:
        self._graph.attach_resource(self, resource)
        return self

    def resources(self) -> list[Resource]:
        return self._graph.resources_of(self)

    def render_summary(self) -> str:
        return self.type().render_summary() + self.id


class Entity(Thing):
    __slots__ = ()


class Relation(Thing):
    __slots__ = ()

    def add_role_player(self, role: Role, thing: Thing) -> Relation:
        self._graph.add_role_player(self, role, thing)
        return self

    def role_players(self) -> list[tuple[Role, Thing]]:
        return self._graph.role_players_of(self)


class Resource(Thing):
    __slots__ = ()

    @property
    def value(self) -> Any:
        return self._graph.node_field(self, "value")


class Rule(Thing):
    __slots__ = ()


HANDLE_CLASSES: dict[ConceptKind, type[Concept]] = {
    ConceptKind.CONCEPT: Type,
    ConceptKind.ENTITY_TYPE: EntityType,
    ConceptKind.RELATION_TYPE: RelationType,
    ConceptKind.RESOURCE_TYPE: ResourceType,
    ConceptKind.ROLE: Role,
    ConceptKind.RULE_TYPE: RuleType,
    ConceptKind.ENTITY: Entity,
    ConceptKind.RELATION: Relation,
    ConceptKind.RESOURCE: Resource,
    ConceptKind.RULE: Rule,
}

INSTANCE_KINDS: dict[ConceptKind, ConceptKind] = {
    ConceptKind.ENTITY_TYPE: ConceptKind.ENTITY,
    ConceptKind.RELATION_TYPE: ConceptKind.RELATION,
    ConceptKind.RESOURCE_TYPE: ConceptKind.RESOURCE,
    ConceptKind.RULE_TYPE: ConceptKind.RULE,
}
