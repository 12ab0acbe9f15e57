"""Catalog of random graph mutations.

Each MutationKind names one way to change a graph. Its handler selects
operands through the Selector, performs exactly one effect through the graph
API, and records exactly one summary statement. A handler either succeeds
completely or raises before recording anything.

Handlers register with the ``@mutation`` decorator at import time.
``MutationCatalog.validate()`` checks that every kind has exactly one
handler, so adding a kind without a handler fails loudly.

Usage::

    @mutation(MutationKind.ADD_ENTITY)
    def _add_entity(ctx):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ontogen.generator.summary import summary_format, value_to_string

if TYPE_CHECKING:
    import random
    from collections.abc import Callable

    from ontogen.generator.selector import Selector
    from ontogen.generator.summary import SummaryRecorder
    from ontogen.generator.values import ValueSources
    from ontogen.graph import ConceptGraph

GRAPH = "graph"


class MutationKind(Enum):
    """Every mutation the generator can apply."""

    NEW_ENTITY_TYPE = "new_entity_type"
    NEW_RESOURCE_TYPE = "new_resource_type"
    NEW_ROLE = "new_role"
    NEW_RELATION_TYPE = "new_relation_type"
    SHOW_IMPLICIT_CONCEPTS = "show_implicit_concepts"
    PLAYS = "plays"
    RESOURCE = "resource"
    KEY = "key"
    SET_ABSTRACT = "set_abstract"
    REPARENT_ENTITY_TYPE = "reparent_entity_type"
    ADD_ENTITY = "add_entity"
    REPARENT_ROLE = "reparent_role"
    REPARENT_RELATION_TYPE = "reparent_relation_type"
    ADD_RELATION = "add_relation"
    RELATES = "relates"
    REPARENT_RESOURCE_TYPE = "reparent_resource_type"
    PUT_RESOURCE = "put_resource"
    REPARENT_RULE_TYPE = "reparent_rule_type"
    ATTACH_RESOURCE = "attach_resource"
    SCOPE = "scope"
    ADD_ROLE_PLAYER = "add_role_player"


@dataclass
class MutationCtx:
    """Everything a handler needs to apply one mutation."""

    graph: ConceptGraph
    rng: random.Random
    selector: Selector
    recorder: SummaryRecorder
    values: ValueSources


if TYPE_CHECKING:
    MutationHandler = Callable[[MutationCtx], None]

_HANDLERS: dict[MutationKind, MutationHandler] = {}


def mutation(kind: MutationKind) -> Callable[[MutationHandler], MutationHandler]:
    """Register the decorated function as the handler for *kind*.

    Raises:
        ValueError: If *kind* already has a handler.
    """

    def decorator(fn: MutationHandler) -> MutationHandler:
        if kind in _HANDLERS:
            msg = (
                f"Duplicate handler for {kind.name}: "
                f"already registered by {_HANDLERS[kind].__qualname__}"
            )
            raise ValueError(msg)
        _HANDLERS[kind] = fn
        return fn

    return decorator


class MutationCatalog:
    """The fixed set of mutations and their handlers."""

    def __init__(self, handlers: dict[MutationKind, MutationHandler] | None = None) -> None:
        self._handlers = dict(_HANDLERS if handlers is None else handlers)

    @property
    def kinds(self) -> list[MutationKind]:
        return list(MutationKind)

    def validate(self) -> list[str]:
        """Return one error string per kind without a handler. Empty means valid."""
        return [
            f"No handler registered for {kind.name}"
            for kind in MutationKind
            if kind not in self._handlers
        ]

    def choose(self, rng: random.Random) -> MutationKind:
        return rng.choice(self.kinds)

    def apply(self, kind: MutationKind, ctx: MutationCtx) -> None:
        """Apply one mutation of *kind*. Raises whatever the handler raises."""
        self._handlers[kind](ctx)


# -----------------------------------------------------------------------------
# New schema types
# -----------------------------------------------------------------------------


def _put_call(method: str, *args: object) -> str:
    rendered = ", ".join(summary_format(arg) for arg in args)
    return f"{GRAPH}.{method}({rendered})"


@mutation(MutationKind.NEW_ENTITY_TYPE)
def _new_entity_type(ctx: MutationCtx) -> None:
    label = ctx.values.type_label(ctx.rng)
    super_type = ctx.selector.entity_type()
    entity_type = ctx.graph.put_entity_type(label, sup=super_type)
    ctx.recorder.record_assign(
        entity_type, _put_call("put_entity_type", label), "sup", super_type
    )


@mutation(MutationKind.NEW_RESOURCE_TYPE)
def _new_resource_type(ctx: MutationCtx) -> None:
    label = ctx.values.type_label(ctx.rng)
    data_type = ctx.values.data_type(ctx.rng)
    super_type = ctx.selector.resource_type()
    resource_type = ctx.graph.put_resource_type(label, data_type, sup=super_type)
    ctx.recorder.record_assign(
        resource_type, _put_call("put_resource_type", label, data_type), "sup", super_type
    )


@mutation(MutationKind.NEW_ROLE)
def _new_role(ctx: MutationCtx) -> None:
    label = ctx.values.type_label(ctx.rng)
    super_type = ctx.selector.role()
    role = ctx.graph.put_role(label, sup=super_type)
    ctx.recorder.record_assign(role, _put_call("put_role", label), "sup", super_type)


@mutation(MutationKind.NEW_RELATION_TYPE)
def _new_relation_type(ctx: MutationCtx) -> None:
    label = ctx.values.type_label(ctx.rng)
    super_type = ctx.selector.relation_type()
    relation_type = ctx.graph.put_relation_type(label, sup=super_type)
    ctx.recorder.record_assign(
        relation_type, _put_call("put_relation_type", label), "sup", super_type
    )


# -----------------------------------------------------------------------------
# Graph settings and capabilities
# -----------------------------------------------------------------------------


@mutation(MutationKind.SHOW_IMPLICIT_CONCEPTS)
def _show_implicit_concepts(ctx: MutationCtx) -> None:
    flag = ctx.values.boolean(ctx.rng)
    ctx.graph.show_implicit_concepts(flag)
    ctx.recorder.record(GRAPH, "show_implicit_concepts", flag)


@mutation(MutationKind.PLAYS)
def _plays(ctx: MutationCtx) -> None:
    concept = ctx.selector.pick_any_type()
    role = ctx.selector.role()
    concept.plays(role)
    ctx.recorder.record(concept, "plays", role)


@mutation(MutationKind.RESOURCE)
def _resource(ctx: MutationCtx) -> None:
    concept = ctx.selector.pick_any_type()
    resource_type = ctx.selector.resource_type()
    concept.resource(resource_type)
    ctx.recorder.record(concept, "resource", resource_type)


@mutation(MutationKind.KEY)
def _key(ctx: MutationCtx) -> None:
    concept = ctx.selector.pick_any_type()
    resource_type = ctx.selector.resource_type()
    concept.key(resource_type)
    ctx.recorder.record(concept, "key", resource_type)


@mutation(MutationKind.SET_ABSTRACT)
def _set_abstract(ctx: MutationCtx) -> None:
    concept = ctx.selector.pick_any_type()
    is_abstract = ctx.values.boolean(ctx.rng)
    concept.set_abstract(is_abstract)
    ctx.recorder.record(concept, "set_abstract", is_abstract)


@mutation(MutationKind.RELATES)
def _relates(ctx: MutationCtx) -> None:
    relation_type = ctx.selector.relation_type()
    role = ctx.selector.role()
    relation_type.relates(role)
    ctx.recorder.record(relation_type, "relates", role)


# -----------------------------------------------------------------------------
# Reparenting within one family
# -----------------------------------------------------------------------------


@mutation(MutationKind.REPARENT_ENTITY_TYPE)
def _reparent_entity_type(ctx: MutationCtx) -> None:
    entity_type = ctx.selector.entity_type()
    super_type = ctx.selector.entity_type()
    entity_type.sup(super_type)
    ctx.recorder.record(entity_type, "sup", super_type)


@mutation(MutationKind.REPARENT_ROLE)
def _reparent_role(ctx: MutationCtx) -> None:
    role = ctx.selector.role()
    super_role = ctx.selector.role()
    role.sup(super_role)
    ctx.recorder.record(role, "sup", super_role)


@mutation(MutationKind.REPARENT_RELATION_TYPE)
def _reparent_relation_type(ctx: MutationCtx) -> None:
    relation_type = ctx.selector.relation_type()
    super_type = ctx.selector.relation_type()
    relation_type.sup(super_type)
    ctx.recorder.record(relation_type, "sup", super_type)


@mutation(MutationKind.REPARENT_RESOURCE_TYPE)
def _reparent_resource_type(ctx: MutationCtx) -> None:
    resource_type = ctx.selector.resource_type()
    super_type = ctx.selector.resource_type()
    resource_type.sup(super_type)
    ctx.recorder.record(resource_type, "sup", super_type)


@mutation(MutationKind.REPARENT_RULE_TYPE)
def _reparent_rule_type(ctx: MutationCtx) -> None:
    rule_type = ctx.selector.rule_type()
    super_type = ctx.selector.rule_type()
    rule_type.sup(super_type)
    ctx.recorder.record(rule_type, "sup", super_type)


# -----------------------------------------------------------------------------
# Instances
# -----------------------------------------------------------------------------


@mutation(MutationKind.ADD_ENTITY)
def _add_entity(ctx: MutationCtx) -> None:
    entity_type = ctx.selector.entity_type()
    entity = entity_type.add_entity()
    ctx.recorder.record_assign(entity, entity_type, "add_entity")


@mutation(MutationKind.ADD_RELATION)
def _add_relation(ctx: MutationCtx) -> None:
    relation_type = ctx.selector.relation_type()
    relation = relation_type.add_relation()
    ctx.recorder.record_assign(relation, relation_type, "add_relation")


@mutation(MutationKind.PUT_RESOURCE)
def _put_resource(ctx: MutationCtx) -> None:
    resource_type = ctx.selector.resource_type()
    value = ctx.values.resource_value(ctx.rng, resource_type.data_type)
    resource = resource_type.put_resource(value)
    ctx.recorder.record_assign(resource, resource_type, "put_resource", value_to_string(value))


@mutation(MutationKind.ATTACH_RESOURCE)
def _attach_resource(ctx: MutationCtx) -> None:
    thing = ctx.selector.pick_instance()
    resource = ctx.selector.resource()
    thing.resource(resource)
    ctx.recorder.record(thing, "resource", resource)


@mutation(MutationKind.SCOPE)
def _scope(ctx: MutationCtx) -> None:
    concept = ctx.selector.pick_ontology_concept()
    thing = ctx.selector.pick_instance()
    concept.scope(thing)
    ctx.recorder.record(concept, "scope", thing)


@mutation(MutationKind.ADD_ROLE_PLAYER)
def _add_role_player(ctx: MutationCtx) -> None:
    relation = ctx.selector.relation()
    role = ctx.selector.role()
    thing = ctx.selector.pick_instance()
    relation.add_role_player(role, thing)
    ctx.recorder.record(relation, "add_role_player", role, thing)
