"""In-memory concept graph.

ConceptGraph is the handle a generation works on. It owns no storage of its
own: a GraphStore holds the nodes and edges of one keyspace, and the graph
adds the typed concept API on top of it.

The graph enforces the rules of the concept model:
- Labels are unique across all schema concepts
- Supertypes stay within one family and never form a cycle
- Built-in (meta) and implicit concepts cannot be modified by callers
- Abstract types cannot be instantiated

Every mutating call is atomic. It runs inside a store savepoint and is
rolled back before a GraphOperationError propagates, so a rejected call
leaves the graph as it was.
"""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

from ontogen.graph.concepts import (
    HANDLE_CLASSES,
    INSTANCE_KINDS,
    Concept,
    ConceptKind,
    DataType,
    EntityType,
    Label,
    MetaLabel,
    OntologyConcept,
    RelationType,
    Resource,
    ResourceType,
    Role,
    RuleType,
    Thing,
    Type,
)
from ontogen.graph.errors import (
    AbstractTypeError,
    CapabilityConflictError,
    ConceptKindMismatchError,
    DataTypeMismatchError,
    GraphClosedError,
    HierarchyError,
    LabelTakenError,
    RolePlayerError,
    UnsupportedOperationError,
)
from ontogen.graph.store import DictGraphStore, GraphStore

if TYPE_CHECKING:
    from collections.abc import Iterator

# Built-in concepts created in every empty graph: (label, kind, super label)
_META_CONCEPTS: list[tuple[str, ConceptKind, str | None]] = [
    (MetaLabel.CONCEPT, ConceptKind.CONCEPT, None),
    (MetaLabel.ENTITY, ConceptKind.ENTITY_TYPE, MetaLabel.CONCEPT),
    (MetaLabel.RELATION, ConceptKind.RELATION_TYPE, MetaLabel.CONCEPT),
    (MetaLabel.RESOURCE, ConceptKind.RESOURCE_TYPE, MetaLabel.CONCEPT),
    (MetaLabel.ROLE, ConceptKind.ROLE, MetaLabel.CONCEPT),
    (MetaLabel.RULE, ConceptKind.RULE_TYPE, MetaLabel.CONCEPT),
    (MetaLabel.INFERENCE_RULE, ConceptKind.RULE_TYPE, MetaLabel.RULE),
    (MetaLabel.CONSTRAINT_RULE, ConceptKind.RULE_TYPE, MetaLabel.RULE),
]


class TxType(Enum):
    """Transaction type of a graph handle."""

    READ = "read"
    WRITE = "write"


# Edge types
PLAYS = "plays"
HAS = "has"
KEY = "key"
RELATES = "relates"
SCOPE = "scope"
ROLE_PLAYER = "role_player"
HAS_RESOURCE = "has_resource"


class ConceptGraph:
    """A transaction over one keyspace of concept data.

    Attributes:
        keyspace: Name of the keyspace this graph reads and writes.
        tx_type: Transaction type the handle was opened with.
    """

    def __init__(
        self,
        keyspace: str,
        store: GraphStore | None = None,
        tx_type: TxType = TxType.WRITE,
    ) -> None:
        self.keyspace = keyspace
        self.tx_type = tx_type
        self._store: GraphStore = store if store is not None else DictGraphStore()
        self._closed = False
        self._show_implicit = False
        self._savepoints = itertools.count()
        if self._store.node_count() == 0:
            self._bootstrap()

    def _bootstrap(self) -> None:
        ids: dict[str, str] = {}
        for label, kind, super_label in _META_CONCEPTS:
            node_id = self._store.next_id("V")
            ids[label] = node_id
            self._store.set_node(
                node_id,
                {
                    "kind": kind.value,
                    "label": label,
                    "sup": ids[super_label] if super_label else None,
                    "abstract": True,
                    "meta": True,
                    "implicit": False,
                    "data_type": None,
                },
            )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close this handle. Further calls raise GraphClosedError."""
        self._closed = True

    def delete(self) -> None:
        """Delete all contents of the keyspace and close this handle."""
        self._check_open()
        self._store.clear()
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise GraphClosedError(self.keyspace)

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        """Run a mutation so that any failure leaves the store untouched."""
        self._check_open()
        name = f"{operation}-{next(self._savepoints)}"
        self._store.savepoint(name)
        try:
            yield
        except Exception:
            self._store.rollback_to(name)
            raise
        finally:
            self._store.release(name)

    # -------------------------------------------------------------------------
    # Implicit concept visibility
    # -------------------------------------------------------------------------

    @property
    def implicit_concepts_visible(self) -> bool:
        return self._show_implicit

    def show_implicit_concepts(self, flag: bool) -> None:
        """Toggle whether implicit concepts appear in subs and instances."""
        self._check_open()
        self._show_implicit = flag

    # -------------------------------------------------------------------------
    # Node access
    # -------------------------------------------------------------------------

    def _node(self, concept: Concept) -> dict[str, Any]:
        self._check_open()
        node = self._store.get_node(concept.id)
        if node is None:
            raise UnsupportedOperationError("read", concept.id)
        return node

    def _wrap(self, node_id: str) -> Any:
        node = self._store.get_node(node_id)
        assert node is not None, node_id
        return HANDLE_CLASSES[ConceptKind(node["kind"])](self, node_id)

    def kind_of(self, concept: Concept) -> ConceptKind:
        return ConceptKind(self._node(concept)["kind"])

    def node_field(self, concept: Concept, field: str) -> Any:
        return self._node(concept).get(field)

    def get_concept(self, concept_id: str) -> Concept | None:
        self._check_open()
        if not self._store.has_node(concept_id):
            return None
        return self._wrap(concept_id)  # type: ignore[no-any-return]

    def get_by_label(self, label: Label | str) -> OntologyConcept | None:
        self._check_open()
        node_id = self._store.find_node(label=str(label))
        return self._wrap(node_id) if node_id else None

    def _meta(self, label: str) -> Any:
        node_id = self._store.find_node(label=label, meta=True)
        assert node_id is not None, label
        return self._wrap(node_id)

    # -------------------------------------------------------------------------
    # Meta concepts
    # -------------------------------------------------------------------------

    def meta_concept(self) -> Type:
        self._check_open()
        return self._meta(MetaLabel.CONCEPT)  # type: ignore[no-any-return]

    def meta_entity_type(self) -> EntityType:
        self._check_open()
        return self._meta(MetaLabel.ENTITY)  # type: ignore[no-any-return]

    def meta_relation_type(self) -> RelationType:
        self._check_open()
        return self._meta(MetaLabel.RELATION)  # type: ignore[no-any-return]

    def meta_resource_type(self) -> ResourceType:
        self._check_open()
        return self._meta(MetaLabel.RESOURCE)  # type: ignore[no-any-return]

    def meta_role(self) -> Role:
        self._check_open()
        return self._meta(MetaLabel.ROLE)  # type: ignore[no-any-return]

    def meta_rule_type(self) -> RuleType:
        self._check_open()
        return self._meta(MetaLabel.RULE)  # type: ignore[no-any-return]

    # -------------------------------------------------------------------------
    # Schema creation
    # -------------------------------------------------------------------------

    # Each put_* creates the concept, or returns the existing one with that
    # label. Passing ``sup`` sets the supertype in the same atomic call.

    def put_entity_type(self, label: Label | str, sup: EntityType | None = None) -> EntityType:
        return self._put_with_sup(label, ConceptKind.ENTITY_TYPE, MetaLabel.ENTITY, sup)  # type: ignore[return-value]

    def put_relation_type(
        self, label: Label | str, sup: RelationType | None = None
    ) -> RelationType:
        return self._put_with_sup(label, ConceptKind.RELATION_TYPE, MetaLabel.RELATION, sup)  # type: ignore[return-value]

    def put_role(self, label: Label | str, sup: Role | None = None) -> Role:
        return self._put_with_sup(label, ConceptKind.ROLE, MetaLabel.ROLE, sup)  # type: ignore[return-value]

    def put_rule_type(self, label: Label | str, sup: RuleType | None = None) -> RuleType:
        return self._put_with_sup(label, ConceptKind.RULE_TYPE, MetaLabel.RULE, sup)  # type: ignore[return-value]

    def put_resource_type(
        self,
        label: Label | str,
        data_type: DataType,
        sup: ResourceType | None = None,
    ) -> ResourceType:
        return self._put_with_sup(  # type: ignore[return-value]
            label, ConceptKind.RESOURCE_TYPE, MetaLabel.RESOURCE, sup, data_type=data_type
        )

    def _put_with_sup(
        self,
        label: Label | str,
        kind: ConceptKind,
        meta_label: str,
        sup: OntologyConcept | None,
        *,
        data_type: DataType | None = None,
    ) -> OntologyConcept:
        with self._atomic(f"put-{kind.value}"):
            concept = self._put_schema(label, kind, meta_label, data_type=data_type)
            if sup is not None:
                self.set_supertype(concept, sup)
            return concept

    def _put_schema(
        self,
        label: Label | str,
        kind: ConceptKind,
        meta_label: str,
        *,
        data_type: DataType | None = None,
        implicit: bool = False,
    ) -> OntologyConcept:
        name = str(label)
        with self._atomic(f"put-{kind.value}"):
            existing = self._store.find_node(label=name)
            if existing is not None:
                node = self._store.get_node(existing)
                assert node is not None
                if node["kind"] != kind.value:
                    raise LabelTakenError(name, node["kind"], kind.value)
                if data_type is not None and node["data_type"] != data_type.value:
                    raise DataTypeMismatchError(name, str(node["data_type"]), data_type.value)
                return self._wrap(existing)  # type: ignore[no-any-return]

            node_id = self._store.next_id("V")
            self._store.set_node(
                node_id,
                {
                    "kind": kind.value,
                    "label": name,
                    "sup": self._meta(meta_label).id,
                    "abstract": False,
                    "meta": False,
                    "implicit": implicit,
                    "data_type": data_type.value if data_type else None,
                },
            )
            return self._wrap(node_id)  # type: ignore[no-any-return]

    # -------------------------------------------------------------------------
    # Hierarchy
    # -------------------------------------------------------------------------

    def supertype_of(self, concept: OntologyConcept) -> OntologyConcept | None:
        sup = self._node(concept)["sup"]
        return self._wrap(sup) if sup else None

    def _ancestor_ids(self, node_id: str) -> list[str]:
        chain = []
        current: str | None = node_id
        while current is not None:
            chain.append(current)
            node = self._store.get_node(current)
            current = node["sup"] if node else None
        return chain

    def _visible(self, node: dict[str, Any]) -> bool:
        return self._show_implicit or not node.get("implicit")

    def subs_of(self, concept: OntologyConcept) -> list[OntologyConcept]:
        """All visible subtypes of *concept*, itself included, in creation order."""
        self._node(concept)
        result = []
        for node_id in self._store.all_node_ids():
            node = self._store.get_node(node_id)
            assert node is not None
            if not ConceptKind(node["kind"]).is_schema or not self._visible(node):
                continue
            if concept.id in self._ancestor_ids(node_id):
                result.append(self._wrap(node_id))
        return result

    def set_supertype(self, concept: OntologyConcept, super_concept: OntologyConcept) -> None:
        with self._atomic("sup"):
            node = self._node(concept)
            super_node = self._node(super_concept)
            if node["kind"] != super_node["kind"]:
                raise ConceptKindMismatchError("sup", node["kind"], super_node["kind"])
            self._require_modifiable("sup", concept)
            if concept.id in self._ancestor_ids(super_concept.id):
                raise HierarchyError(node["label"], super_node["label"])
            if (
                node["kind"] == ConceptKind.RESOURCE_TYPE.value
                and not super_node["meta"]
                and super_node["data_type"] != node["data_type"]
            ):
                raise DataTypeMismatchError(
                    node["label"], str(super_node["data_type"]), str(node["data_type"])
                )
            self._store.update_node_fields(concept.id, sup=super_concept.id)

    def _require_modifiable(self, operation: str, concept: OntologyConcept) -> None:
        node = self._node(concept)
        if node["meta"] or node["implicit"]:
            raise UnsupportedOperationError(operation, node["label"])

    def _require_kind(self, operation: str, concept: Concept, *kinds: ConceptKind) -> None:
        actual = self.kind_of(concept)
        if actual not in kinds:
            expected = " or ".join(k.value for k in kinds)
            raise ConceptKindMismatchError(operation, expected, actual.value)

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    def set_abstract(self, concept: Type, is_abstract: bool) -> None:
        with self._atomic("set-abstract"):
            self._require_modifiable("setAbstract", concept)
            if is_abstract and self._direct_instance_ids(concept.id):
                raise AbstractTypeError(concept.label.value, "has instances and cannot be abstract")
            self._store.update_node_fields(concept.id, abstract=is_abstract)

    def grant_plays(self, concept: Type, role: Role) -> None:
        with self._atomic("plays"):
            self._require_kind("plays", role, ConceptKind.ROLE)
            self._require_modifiable("plays", concept)
            if self._node(role)["meta"]:
                raise UnsupportedOperationError("plays", MetaLabel.ROLE)
            for ancestor in self._ancestor_ids(concept.id)[1:]:
                if self._store.has_edge(PLAYS, ancestor, role.id):
                    raise CapabilityConflictError(
                        concept.label.value,
                        f"role '{role.label.value}' is already played through a supertype",
                    )
            self._add_edge_once(PLAYS, concept.id, role.id)

    def played_roles_of(self, concept: Type) -> list[Role]:
        self._node(concept)
        return [self._wrap(e["to"]) for e in self._store.get_edges(concept.id, None, PLAYS)]

    def grant_resource(self, concept: Type, resource_type: ResourceType, *, required: bool) -> None:
        """Let *concept* own *resource_type*, as a key when *required*."""
        operation = KEY if required else HAS
        with self._atomic(operation):
            self._require_kind(operation, resource_type, ConceptKind.RESOURCE_TYPE)
            self._require_modifiable(operation, concept)
            if self._node(resource_type)["meta"]:
                raise UnsupportedOperationError(operation, MetaLabel.RESOURCE)
            other = HAS if required else KEY
            if self._store.has_edge(other, concept.id, resource_type.id):
                raise CapabilityConflictError(
                    concept.label.value,
                    f"already owns '{resource_type.label.value}' as {other}",
                )
            owner, _ = self._implicit_structure(resource_type, operation)
            self._add_edge_once(PLAYS, concept.id, owner)
            self._add_edge_once(operation, concept.id, resource_type.id)

    def _implicit_structure(self, resource_type: ResourceType, prefix: str) -> tuple[str, str]:
        """Ensure the implicit relation type and roles for owning a resource.

        Returns:
            IDs of the owner role and the value role.
        """
        base = f"{prefix}-{resource_type.label.value}"
        relation = self._put_implicit(base, ConceptKind.RELATION_TYPE, MetaLabel.RELATION)
        owner = self._put_implicit(f"{base}-owner", ConceptKind.ROLE, MetaLabel.ROLE)
        value = self._put_implicit(f"{base}-value", ConceptKind.ROLE, MetaLabel.ROLE)
        self._add_edge_once(RELATES, relation, owner)
        self._add_edge_once(RELATES, relation, value)
        self._add_edge_once(PLAYS, resource_type.id, value)
        return owner, value

    def _put_implicit(self, label: str, kind: ConceptKind, meta_label: str) -> str:
        existing = self._store.find_node(label=label)
        if existing is not None:
            node = self._store.get_node(existing)
            assert node is not None
            if node["kind"] != kind.value or not node["implicit"]:
                raise LabelTakenError(label, node["kind"], kind.value)
            return existing
        return self._put_schema(label, kind, meta_label, implicit=True).id

    def relate(self, relation_type: RelationType, role: Role) -> None:
        with self._atomic("relates"):
            self._require_kind("relates", role, ConceptKind.ROLE)
            self._require_modifiable("relates", relation_type)
            if self._node(role)["meta"]:
                raise UnsupportedOperationError("relates", MetaLabel.ROLE)
            self._add_edge_once(RELATES, relation_type.id, role.id)

    def related_roles_of(self, relation_type: RelationType) -> list[Role]:
        self._node(relation_type)
        edges = self._store.get_edges(relation_type.id, None, RELATES)
        return [self._wrap(e["to"]) for e in edges]

    def scope(self, concept: OntologyConcept, thing: Thing) -> None:
        with self._atomic("scope"):
            if self.kind_of(thing).is_schema:
                raise ConceptKindMismatchError("scope", "thing", self.kind_of(thing).value)
            self._require_modifiable("scope", concept)
            self._add_edge_once(SCOPE, concept.id, thing.id)

    def scopes_of(self, concept: OntologyConcept) -> list[Thing]:
        self._node(concept)
        return [self._wrap(e["to"]) for e in self._store.get_edges(concept.id, None, SCOPE)]

    def _add_edge_once(self, edge_type: str, from_id: str, to_id: str, **data: Any) -> None:
        if not self._store.has_edge(edge_type, from_id, to_id):
            self._store.add_edge({"type": edge_type, "from": from_id, "to": to_id, **data})

    # -------------------------------------------------------------------------
    # Instances
    # -------------------------------------------------------------------------

    def _direct_instance_ids(self, type_id: str) -> list[str]:
        return [
            nid
            for nid in self._store.all_node_ids()
            if (self._store.get_node(nid) or {}).get("type") == type_id
        ]

    def instances_of(self, concept: Type) -> list[Thing]:
        """Visible instances of *concept* and of all its subtypes."""
        result = []
        for sub in self.subs_of(concept):
            if sub.is_role:
                continue
            result.extend(self._wrap(nid) for nid in self._direct_instance_ids(sub.id))
        return result

    def type_of(self, thing: Thing) -> Type:
        return self._wrap(self._node(thing)["type"])  # type: ignore[no-any-return]

    def _new_instance(self, concept: Type, **data: Any) -> Any:
        node = self._node(concept)
        kind = INSTANCE_KINDS.get(ConceptKind(node["kind"]))
        if kind is None or kind is ConceptKind.RULE:
            raise UnsupportedOperationError("addInstance", node["label"])
        if node["implicit"]:
            raise UnsupportedOperationError("addInstance", node["label"])
        if node["abstract"]:
            raise AbstractTypeError(node["label"], "is abstract and cannot have instances")
        node_id = self._store.next_id("V")
        self._store.set_node(node_id, {"kind": kind.value, "type": concept.id, **data})
        return self._wrap(node_id)

    def add_instance(self, concept: EntityType | RelationType) -> Thing:
        with self._atomic("add-instance"):
            self._require_kind(
                "addInstance", concept, ConceptKind.ENTITY_TYPE, ConceptKind.RELATION_TYPE
            )
            return self._new_instance(concept)  # type: ignore[no-any-return]

    def put_resource(self, resource_type: ResourceType, value: Any) -> Resource:
        with self._atomic("put-resource"):
            self._require_kind("putResource", resource_type, ConceptKind.RESOURCE_TYPE)
            node = self._node(resource_type)
            if node["meta"]:
                raise UnsupportedOperationError("putResource", node["label"])
            data_type = DataType(node["data_type"])
            if not data_type.accepts(value):
                raise DataTypeMismatchError(
                    node["label"], data_type.value, type(value).__name__
                )
            for nid in self._direct_instance_ids(resource_type.id):
                if (self._store.get_node(nid) or {}).get("value") == value:
                    return self._wrap(nid)  # type: ignore[no-any-return]
            return self._new_instance(resource_type, value=value)  # type: ignore[no-any-return]

    def attach_resource(self, thing: Thing, resource: Resource) -> None:
        """Link *resource* to *thing* through an implicit ``has-*`` relation."""
        with self._atomic("attach-resource"):
            self._require_kind("resource", resource, ConceptKind.RESOURCE)
            if self.kind_of(thing).is_schema:
                raise ConceptKindMismatchError("resource", "thing", self.kind_of(thing).value)
            if self._store.has_edge(HAS_RESOURCE, thing.id, resource.id):
                return
            owner, value = self._implicit_structure(resource.type(), HAS)  # type: ignore[arg-type]
            relation_type = self._store.find_node(label=f"{HAS}-{resource.type().label.value}")
            assert relation_type is not None
            relation_id = self._store.next_id("V")
            self._store.set_node(
                relation_id, {"kind": ConceptKind.RELATION.value, "type": relation_type}
            )
            self._store.add_edge(
                {"type": ROLE_PLAYER, "from": relation_id, "to": thing.id, "role": owner}
            )
            self._store.add_edge(
                {"type": ROLE_PLAYER, "from": relation_id, "to": resource.id, "role": value}
            )
            self._store.add_edge({"type": HAS_RESOURCE, "from": thing.id, "to": resource.id})

    def resources_of(self, thing: Thing) -> list[Resource]:
        self._node(thing)
        edges = self._store.get_edges(thing.id, None, HAS_RESOURCE)
        return [self._wrap(e["to"]) for e in edges]

    def add_role_player(self, relation: Thing, role: Role, thing: Thing) -> None:
        with self._atomic("add-role-player"):
            self._require_kind("addRolePlayer", relation, ConceptKind.RELATION)
            self._require_kind("addRolePlayer", role, ConceptKind.ROLE)
            if self.kind_of(thing).is_schema:
                raise ConceptKindMismatchError("addRolePlayer", "thing", self.kind_of(thing).value)
            relation_type = self.type_of(relation)
            if relation_type.is_implicit:
                raise UnsupportedOperationError("addRolePlayer", relation_type.label.value)
            declared = any(
                self._store.has_edge(RELATES, ancestor, role.id)
                for ancestor in self._ancestor_ids(relation_type.id)
            )
            if not declared:
                raise RolePlayerError(
                    relation.id,
                    role.label.value,
                    f"role is not related by '{relation_type.label.value}'",
                )
            if not any(
                e.get("role") == role.id
                for e in self._store.get_edges(relation.id, thing.id, ROLE_PLAYER)
            ):
                self._store.add_edge(
                    {"type": ROLE_PLAYER, "from": relation.id, "to": thing.id, "role": role.id}
                )

    def role_players_of(self, relation: Thing) -> list[tuple[Role, Thing]]:
        self._node(relation)
        edges = self._store.get_edges(relation.id, None, ROLE_PLAYER)
        return [(self._wrap(e["role"]), self._wrap(e["to"])) for e in edges]

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the keyspace contents."""
        return self._store.to_dict()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return (
            f"ConceptGraph(keyspace={self.keyspace!r}, {state}, "
            f"nodes={self._store.node_count()}, edges={self._store.edge_count()})"
        )


@contextmanager
def implicit_concepts_shown(graph: ConceptGraph) -> Iterator[ConceptGraph]:
    """Show implicit concepts for the duration of a block.

    The previous visibility setting is restored on exit, whether or not the
    block raised.
    """
    previous = graph.implicit_concepts_visible
    graph.show_implicit_concepts(True)
    try:
        yield graph
    finally:
        graph.show_implicit_concepts(previous)
