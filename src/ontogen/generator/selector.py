"""Random selection of existing concepts.

A Selector reads the current graph and returns one uniformly random concept
of the requested kind. It never modifies the graph. When nothing of the
requested kind exists it raises ExhaustionError, which the executor treats
as a retryable rejection.

Candidates are taken in the graph's creation order, so a seeded random
source reproduces the same choices.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from ontogen.generator.errors import ExhaustionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ontogen.graph import (
        ConceptGraph,
        EntityType,
        OntologyConcept,
        Relation,
        RelationType,
        Resource,
        ResourceType,
        Role,
        RuleType,
        Thing,
        Type,
    )

T = TypeVar("T")


class MetaKind(Enum):
    """Families a selector can pick from, keyed by their meta concept."""

    ENTITY = "entity"
    RELATION = "relation"
    RESOURCE = "resource"
    ROLE = "role"
    RULE = "rule"


class Selector:
    """Picks random concepts from one graph.

    Args:
        graph: Graph to read from.
        rng: Random source shared with the rest of the generation.
    """

    def __init__(self, graph: ConceptGraph, rng: random.Random) -> None:
        self.graph = graph
        self.rng = rng

    def choose_or_throw(self, candidates: Sequence[T], requested: str = "candidate") -> T:
        """Return a uniformly random element of *candidates*.

        Raises:
            ExhaustionError: If *candidates* is empty.
        """
        if not candidates:
            raise ExhaustionError(requested)
        return self.rng.choice(candidates)

    def _meta(self, kind: MetaKind) -> Type | Role:
        meta = {
            MetaKind.ENTITY: self.graph.meta_entity_type,
            MetaKind.RELATION: self.graph.meta_relation_type,
            MetaKind.RESOURCE: self.graph.meta_resource_type,
            MetaKind.ROLE: self.graph.meta_role,
            MetaKind.RULE: self.graph.meta_rule_type,
        }[kind]
        return meta()

    # -- Schema ----------------------------------------------------------------

    def pick_subtype_of(self, kind: MetaKind) -> OntologyConcept:
        """Pick among all subtypes of a family's meta concept, the meta included."""
        return self.choose_or_throw(self._meta(kind).subs(), f"{kind.value} type")

    def pick_any_type(self) -> Type:
        """Pick any non-role schema concept, the universal root included."""
        candidates = [c for c in self.graph.meta_concept().subs() if not c.is_role]
        return self.choose_or_throw(candidates, "type")  # type: ignore[return-value]

    def pick_ontology_concept(self) -> OntologyConcept:
        """Pick any schema concept, roles included."""
        return self.choose_or_throw(self.graph.meta_concept().subs(), "ontology concept")

    def entity_type(self) -> EntityType:
        return self.pick_subtype_of(MetaKind.ENTITY)  # type: ignore[return-value]

    def relation_type(self) -> RelationType:
        return self.pick_subtype_of(MetaKind.RELATION)  # type: ignore[return-value]

    def resource_type(self) -> ResourceType:
        return self.pick_subtype_of(MetaKind.RESOURCE)  # type: ignore[return-value]

    def role(self) -> Role:
        return self.pick_subtype_of(MetaKind.ROLE)  # type: ignore[return-value]

    def rule_type(self) -> RuleType:
        return self.pick_subtype_of(MetaKind.RULE)  # type: ignore[return-value]

    # -- Instances -------------------------------------------------------------

    def pick_instance_of(self, kind: MetaKind) -> Thing:
        """Pick among instances of a family's meta concept and its subtypes."""
        if kind is MetaKind.ROLE:
            raise ValueError("Roles have no instances")
        meta = self._meta(kind)
        return self.choose_or_throw(meta.instances(), f"{kind.value} instance")  # type: ignore[union-attr]

    def pick_instance(self) -> Thing:
        """Pick among instances of every non-role type."""
        return self.choose_or_throw(self.graph.meta_concept().instances(), "instance")

    def relation(self) -> Relation:
        return self.pick_instance_of(MetaKind.RELATION)  # type: ignore[return-value]

    def resource(self) -> Resource:
        return self.pick_instance_of(MetaKind.RESOURCE)  # type: ignore[return-value]
